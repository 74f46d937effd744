"""Application-layer errors surfaced to the caller of the pipeline."""

from __future__ import annotations

from typing import Any

from route_authz.kernel.errors.base import BaseError


class ApplicationError(BaseError):
    """Cross-cutting application-layer concern."""

    default_code = "application_error"


class ConfigError(ApplicationError):
    """Raised when configuration is invalid or loading failed."""

    default_code = "config_error"


class LoginRequiredError(ApplicationError):
    """The request needs an authenticated identity."""

    default_code = "login_required"
    outcome = "LOGIN_REQUIRED"

    def __init__(self, message: str = "Login required", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class ForbiddenActionError(ApplicationError):
    """Authenticated identity is not allowed to perform the routed action."""

    default_code = "forbidden"
    outcome = "DENIED"

    def __init__(
        self, message: str = "You are not allowed to perform this action.", **kwargs: Any
    ) -> None:
        super().__init__(message, **kwargs)


__all__ = [
    "ApplicationError",
    "ConfigError",
    "ForbiddenActionError",
    "LoginRequiredError",
]
