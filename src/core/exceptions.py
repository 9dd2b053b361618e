# src/core/exceptions.py
"""
Gateway exceptions - standardized error handling for the session gateway.

Three families reach the request boundary:
- InputError: the caller sent something we cannot work with (4xx)
- AuthenticationError: the token did not prove a session (401)
- DependencyError: a collaborator (the session store) failed (5xx)

ConfigurationError marks a deployment problem and is surfaced as a 500.
"""

from typing import Optional, Dict, Any


class GatewayError(Exception):
    """Base exception for all gateway errors"""

    status_code: int = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize gateway base exception.

        Args:
            message: Human-readable error message
            details: Optional additional error details (server-side only)
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class InputError(GatewayError):
    """Malformed body, missing token or wrong HTTP method"""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        status_code: int = 400,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize input error.

        Args:
            message: Safe, client-facing description
            field: Field that failed validation
            status_code: 400 for body problems, 405 for wrong method
            details: Additional validation context
        """
        super().__init__(message, details)
        self.field = field
        self.status_code = status_code

        if field:
            self.details['field'] = field


class AuthenticationError(GatewayError):
    """Token unknown, expired or revoked - deliberately not distinguished"""

    status_code = 401

    def __init__(self, message: str = "Invalid session token", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class DependencyError(GatewayError):
    """Errors in external service interactions"""

    def __init__(
        self,
        message: str,
        service_name: Optional[str] = None,
        operation: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize dependency error.

        Args:
            message: Error description
            service_name: Name of the failing service
            operation: Operation that failed
            details: Additional service context
        """
        super().__init__(message, details)
        self.service_name = service_name
        self.operation = operation

        if service_name:
            self.details['service'] = service_name
        if operation:
            self.details['operation'] = operation


class SessionStoreError(DependencyError):
    """Session store unreachable, timed out or answered with an error"""

    def __init__(
        self,
        message: str,
        backend: Optional[str] = None,
        operation: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, service_name="SessionStore", operation=operation, details=details)
        self.backend = backend

        if backend:
            self.details['backend'] = backend


class ConfigurationError(GatewayError):
    """Errors in system configuration and initialization"""

    def __init__(
        self,
        message: str,
        component: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize configuration error.

        Args:
            message: Error description
            component: Component with configuration issue
            details: Additional configuration context
        """
        super().__init__(message, details)
        self.component = component

        if component:
            self.details['component'] = component


# Convenience functions for creating common errors

def input_error(message: str, field: str = None) -> InputError:
    """Create an input error with field context."""
    return InputError(message, field=field)


def method_not_allowed(method: str) -> InputError:
    """Create a 405 input error for an unsupported HTTP method."""
    return InputError("Method not allowed", status_code=405, details={'method': method})


def store_error(message: str, backend: str = None, operation: str = None) -> SessionStoreError:
    """Create a session store error with backend context."""
    return SessionStoreError(message, backend=backend, operation=operation)


def config_error(message: str, component: str) -> ConfigurationError:
    """Create a configuration error with component context."""
    return ConfigurationError(message, component=component)
