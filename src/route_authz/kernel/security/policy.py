"""Kernel security – Outcome, Decision, PolicyChecker port."""
from __future__ import annotations

import dataclasses
from enum import Enum
from typing import Any, Mapping, Protocol, Sequence

from route_authz.kernel.security.principal import Principal


class Outcome(str, Enum):
    ALLOW_LISTED = "ALLOW_LISTED"
    LOGIN_REQUIRED = "LOGIN_REQUIRED"
    POLICY_ALLOWED = "POLICY_ALLOWED"
    FALLBACK_ALLOWED = "FALLBACK_ALLOWED"
    DENIED = "DENIED"

    @property
    def allowed(self) -> bool:
        return self in (Outcome.ALLOW_LISTED, Outcome.POLICY_ALLOWED, Outcome.FALLBACK_ALLOWED)


@dataclasses.dataclass(frozen=True)
class Decision:
    """Result of deciding one request."""
    route: str
    outcome: Outcome

    @property
    def allowed(self) -> bool:
        return self.outcome.allowed

    def __bool__(self) -> bool:
        return self.allowed


class PolicyChecker(Protocol):
    """Port: ask the policy decision point about one or many actions."""

    async def check(
        self,
        principal: Principal | None,
        action: str,
        resource_kind: str,
        resource_id: str | None = None,
        attributes: Mapping[str, Any] | None = None,
    ) -> bool: ...

    async def batch_check(
        self,
        principal: Principal | None,
        actions: Sequence[str],
        resource_kind: str,
        resource_id: str | None = None,
        attributes: Mapping[str, Any] | None = None,
    ) -> dict[str, bool]: ...


__all__ = ["Decision", "Outcome", "PolicyChecker"]
