"""Kernel security — identity and web-user ports.

The pipeline never reaches for a global "current user".  The host
application wraps whatever its session layer provides in a :class:`WebUser`
and passes it inside each :class:`~route_authz.kernel.security.pipeline.AccessRequest`.
"""

from __future__ import annotations

import dataclasses
from typing import Any, Callable, Protocol, runtime_checkable


@runtime_checkable
class Identity(Protocol):
    """Authenticated account as exposed by the identity subsystem.

    Only ``id`` is required; ``username``, ``role``, ``department`` and
    ``email`` are read with :func:`getattr` when present.
    """

    @property
    def id(self) -> Any: ...


class WebUser(Protocol):
    """Request-scoped view of the current user."""

    @property
    def identity(self) -> Identity | None: ...

    @property
    def is_guest(self) -> bool: ...

    def can(self, permission: str) -> bool:
        """Legacy permission check, e.g. ``can("post/*")``."""
        ...


@dataclasses.dataclass(frozen=True)
class User:
    """Plain :class:`Identity` implementation."""

    id: Any
    username: str | None = None
    role: str | None = None
    department: str | None = None
    email: str | None = None


@dataclasses.dataclass
class SessionUser:
    """:class:`WebUser` backed by an optional identity and a permission callback.

    *checker* receives ``(identity, permission)``; leave it ``None`` when no
    legacy permission store is available.
    """

    identity: Identity | None = None
    checker: Callable[[Identity, str], bool] | None = None

    @property
    def is_guest(self) -> bool:
        return self.identity is None

    def can(self, permission: str) -> bool:
        if self.identity is None or self.checker is None:
            return False
        return bool(self.checker(self.identity, permission))


__all__ = ["Identity", "SessionUser", "User", "WebUser"]
