# src/core/logging_config.py
"""
Logging for the API, the serverless adapter and the stores.

Session tokens are bearer credentials: the redaction filter masks them
in every record before a handler formats it.
"""

import os
import re
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

LOG_FILE_NAME = "session_gateway.log"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
MAX_LOG_BYTES = 5 * 1024 * 1024
LOG_BACKUPS = 5
QUIET_LOGGERS = ("uvicorn.access", "httpx", "httpcore", "asyncio")

REDACTED = "[REDACTED]"
_SECRET_PATTERNS = (
    re.compile(r'("token"\s*:\s*")[^"]*(")'),
    re.compile(r"(echo_session=)[^;\s]*()"),
    re.compile(r"(Bearer\s+)[^\s,'\"]+()", re.IGNORECASE),
)


def redact(text: str) -> str:
    for pattern in _SECRET_PATTERNS:
        text = pattern.sub(rf"\g<1>{REDACTED}\g<2>", text)
    return text


class TokenRedactingFilter(logging.Filter):
    """Masks token bodies, session cookies and bearer credentials"""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        cleaned = redact(message)
        if cleaned != message:
            record.msg = cleaned
            record.args = None
        return True


def _file_handler(log_dir: Path, formatter: logging.Formatter) -> Optional[RotatingFileHandler]:
    """Rotating file handler, or None where the filesystem is read-only (serverless)"""
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            filename=str(log_dir / LOG_FILE_NAME),
            maxBytes=MAX_LOG_BYTES,
            backupCount=LOG_BACKUPS,
            encoding="utf-8"
        )
    except OSError as e:
        logging.getLogger(__name__).warning(f"⚠️ File logging disabled ({log_dir}): {e}")
        return None
    handler.setFormatter(formatter)
    return handler


def setup_logging(level: Optional[str] = None, log_dir: Optional[str] = None) -> logging.Logger:
    """
    Configure the root logger (idempotent).

    Args:
        level: Log level, default LOG_LEVEL or INFO
        log_dir: Directory for the rotating log file, default LOG_DIR or "logs";
            an empty string logs to the console only
    """
    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    log_dir = os.getenv("LOG_DIR", "logs") if log_dir is None else log_dir

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    if not any(type(h) is logging.StreamHandler for h in root_logger.handlers):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    if log_dir:
        log_file = os.path.abspath(os.path.join(log_dir, LOG_FILE_NAME))
        if not any(isinstance(h, RotatingFileHandler) and h.baseFilename == log_file for h in root_logger.handlers):
            file_handler = _file_handler(Path(log_dir), formatter)
            if file_handler:
                root_logger.addHandler(file_handler)

    # Filters on handlers also catch records from child loggers
    for handler in root_logger.handlers:
        if not any(isinstance(f, TokenRedactingFilter) for f in handler.filters):
            handler.addFilter(TokenRedactingFilter())

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return root_logger
