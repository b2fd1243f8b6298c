"""
Error taxonomy for KickOffHub.

AppException and its subclasses carry (message, code, status, metadata) and are rendered
by the host app as {"success": false, "error": {...}}. Registry and startup errors are
contract failures raised while composing the app; provider errors come from the
API-Football client and its circuit breaker.
"""

from __future__ import annotations

from typing import Any


class AppException(Exception):
    """Base application error with a machine code and HTTP status."""

    default_message = "Application error"
    default_code = "APP_ERROR"
    default_status = 500

    def __init__(
        self,
        message: str | None = None,
        code: str | None = None,
        status: int | None = None,
        metadata: Any = None,
    ) -> None:
        self.message = message or self.default_message
        self.code = code or self.default_code
        self.status = status or self.default_status
        self.metadata = metadata
        super().__init__(self.message)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "message": self.message,
            "code": self.code,
            "status": self.status,
        }
        if self.metadata:
            payload["details"] = self.metadata
        return payload


class ValidationException(AppException):
    default_message = "Validation failed"
    default_code = "VALIDATION_ERROR"
    default_status = 400


class AuthException(AppException):
    default_message = "Authentication required"
    default_code = "AUTH_ERROR"
    default_status = 401


class ForbiddenException(AppException):
    default_message = "Forbidden"
    default_code = "FORBIDDEN"
    default_status = 403


class NotFoundException(AppException):
    default_message = "Resource not found"
    default_code = "NOT_FOUND"
    default_status = 404


class ConflictException(AppException):
    default_message = "Resource conflict"
    default_code = "CONFLICT"
    default_status = 409


# Registry


class RegistryError(AppException):
    default_message = "Dependency registry error"
    default_code = "REGISTRY_ERROR"


class InvalidTokenError(RegistryError):
    default_message = "Container token is required"
    default_code = "INVALID_TOKEN"


class UnregisteredDependencyError(RegistryError):
    default_code = "UNREGISTERED_DEPENDENCY"

    def __init__(self, token: str) -> None:
        self.token = token
        super().__init__(
            f"Dependency '{token}' has not been registered in the container."
        )


class MissingFactoryError(RegistryError):
    default_code = "MISSING_FACTORY"

    def __init__(self, token: str) -> None:
        self.token = token
        super().__init__(f"Dependency '{token}' is missing and no factory was provided.")


# Startup


class StartupError(AppException):
    default_message = "Application startup failed"
    default_code = "STARTUP_ERROR"


class InfrastructureError(StartupError):
    default_code = "INFRASTRUCTURE_ERROR"

    def __init__(self, token: str, reason: str) -> None:
        self.token = token
        super().__init__(f"Failed to register infrastructure '{token}': {reason}")


class ModuleLoadError(StartupError):
    default_code = "MODULE_LOAD_ERROR"

    def __init__(self, module_name: str, reason: str) -> None:
        self.module_name = module_name
        super().__init__(f"Failed to load module '{module_name}': {reason}")


# Provider (API-Football)


class ApiFootballError(AppException):
    default_message = "API-Football request failed"
    default_code = "API_FOOTBALL_ERROR"
    default_status = 502

    def __init__(
        self,
        message: str | None = None,
        code: str | None = None,
        status: int | None = None,
        metadata: Any = None,
        provider_status: int | None = None,
    ) -> None:
        self.provider_status = provider_status
        super().__init__(message, code, status, metadata)


class CircuitOpenError(ApiFootballError):
    default_message = "Circuit breaker is OPEN"
    default_code = "CIRCUIT_OPEN"
    default_status = 503


class CircuitTimeoutError(ApiFootballError):
    default_message = "Call timed out"
    default_code = "CIRCUIT_TIMEOUT"
    default_status = 504
