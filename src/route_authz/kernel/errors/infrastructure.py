"""Infrastructure errors — decision-service and legacy-store failures."""

from __future__ import annotations

from typing import Any

from route_authz.kernel.errors.base import BaseError


class InfrastructureError(BaseError):
    """Infrastructure / I/O failure that is not an authorization verdict."""

    default_code = "infrastructure_error"


class TransportError(InfrastructureError):
    """Network failure, timeout or non-2xx status talking to the PDP."""

    default_code = "transport_error"

    def __init__(
        self,
        service: str,
        message: str | None = None,
        *,
        status_code: int | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message or f"Request to '{service}' failed", **kwargs)
        self.service = service
        self.status_code = status_code


class MalformedResponseError(InfrastructureError):
    """The PDP answered with a payload of unexpected shape."""

    default_code = "malformed_response"


class SerializationError(InfrastructureError):
    """The check request could not be encoded as JSON."""

    default_code = "serialization_error"


class LegacyStoreError(InfrastructureError):
    """Reading the legacy role / permission tables failed."""

    default_code = "legacy_store_error"

    def __init__(self, table: str, message: str | None = None, **kwargs: Any) -> None:
        super().__init__(message or f"Could not read legacy table '{table}'", **kwargs)
        self.table = table


__all__ = [
    "InfrastructureError",
    "LegacyStoreError",
    "MalformedResponseError",
    "SerializationError",
    "TransportError",
]
