"""Kernel security — Principal, RoleResolver, PrincipalBuilder."""
from __future__ import annotations

import dataclasses
from typing import Any, Iterable, Protocol

from route_authz.kernel.security.identity import Identity

BASE_ROLE = "user"
GUEST_ROLE = "guest"
PRINCIPAL_ATTRIBUTES = ("department", "email", "username")


@dataclasses.dataclass(frozen=True)
class Principal:
    """Subject of a Cerbos check."""
    id: str
    roles: tuple[str, ...] = (BASE_ROLE,)
    attributes: dict[str, Any] = dataclasses.field(default_factory=dict)

    def has_role(self, role: str) -> bool:
        return role in self.roles

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"id": self.id, "roles": list(self.roles)}
        if self.attributes:
            payload["attr"] = dict(self.attributes)
        return payload


class RoleResolver(Protocol):
    """Port: look up the roles granted to an identity."""

    def roles_for(self, identity: Identity | None) -> list[str]: ...


class NullRoleResolver:
    """Grants nothing beyond the base and identity-declared roles."""

    def roles_for(self, identity: Identity | None) -> list[str]:  # noqa: ARG002
        return []


class AuthManagerRoleResolver:
    """Resolve roles through an authorization manager.

    *manager* must expose ``get_roles_by_user(user_id)`` returning role
    objects with a ``name`` attribute, or plain role names.
    """

    def __init__(self, manager: Any) -> None:
        self._manager = manager

    def roles_for(self, identity: Identity | None) -> list[str]:
        if identity is None:
            return [GUEST_ROLE]
        return [
            getattr(role, "name", role)
            for role in self._manager.get_roles_by_user(identity.id)
        ]


def unique(roles: Iterable[str]) -> tuple[str, ...]:
    """Drop duplicates, keeping first-seen order."""
    return tuple(dict.fromkeys(roles))


class PrincipalBuilder:
    """Build the :class:`Principal` sent to Cerbos from an :class:`Identity`."""

    def __init__(self, role_resolver: RoleResolver | None = None) -> None:
        self._role_resolver: RoleResolver = role_resolver or NullRoleResolver()

    def build(self, identity: Identity | None) -> Principal | None:
        if identity is None:
            return None

        roles = [BASE_ROLE]
        declared = getattr(identity, "role", None)
        if declared:
            roles.append(declared)
        roles.extend(self._role_resolver.roles_for(identity))

        attributes = {
            name: getattr(identity, name)
            for name in PRINCIPAL_ATTRIBUTES
            if getattr(identity, name, None) is not None
        }
        return Principal(id=str(identity.id), roles=unique(roles), attributes=attributes)


__all__ = [
    "AuthManagerRoleResolver",
    "NullRoleResolver",
    "Principal",
    "PrincipalBuilder",
    "RoleResolver",
    "unique",
]
