"""Kernel error hierarchy — public re-export surface.

Hierarchy::

    BaseError
    ├── ApplicationError       (application.py)
    │   ├── ConfigError
    │   ├── LoginRequiredError
    │   └── ForbiddenActionError
    └── InfrastructureError    (infrastructure.py)
        ├── TransportError
        ├── MalformedResponseError
        ├── SerializationError
        └── LegacyStoreError
"""

from route_authz.kernel.errors.application import (
    ApplicationError,
    ConfigError,
    ForbiddenActionError,
    LoginRequiredError,
)
from route_authz.kernel.errors.base import BaseError
from route_authz.kernel.errors.infrastructure import (
    InfrastructureError,
    LegacyStoreError,
    MalformedResponseError,
    SerializationError,
    TransportError,
)

__all__ = [
    "ApplicationError",
    "BaseError",
    "ConfigError",
    "ForbiddenActionError",
    "InfrastructureError",
    "LegacyStoreError",
    "LoginRequiredError",
    "MalformedResponseError",
    "SerializationError",
    "TransportError",
]
