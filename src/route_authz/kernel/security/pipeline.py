"""Kernel security — DecisionPipeline.

Decides one routed request.  The branches are evaluated strictly in order
and the first applicable one wins:

1. allow-listed route → ALLOW, no identity needed;
2. guest → LOGIN_REQUIRED;
3. Cerbos grants the mapped resource/action → ALLOW;
4. legacy fallback (if enabled) grants the route → ALLOW;
5. otherwise DENIED (or LOGIN_REQUIRED if the user became a guest meanwhile).

Every failure on the policy path counts as a denial; the pipeline never
fails open.

Example::

    pipeline = DecisionPipeline(
        CerbosHttpClient("localhost:3592"),
        allow_actions=("site/login", "site/error", "api/public/*"),
        resource_mapper=ResourceMapper.from_config(RESOURCE_MAP),
    )
    decision = await pipeline.enforce(AccessRequest("post/update", user, params={"id": "7"}))
"""
from __future__ import annotations

import dataclasses
from types import MappingProxyType
from typing import Any, Callable, Iterable, Mapping

from route_authz.kernel.errors import ForbiddenActionError, LoginRequiredError
from route_authz.kernel.security.fallback import FallbackAuthorizer
from route_authz.kernel.security.identity import WebUser
from route_authz.kernel.security.patterns import matches_any
from route_authz.kernel.security.policy import Decision, Outcome, PolicyChecker
from route_authz.kernel.security.principal import PrincipalBuilder
from route_authz.kernel.security.resource_map import (
    ResourceDescriptor,
    ResourceMapper,
    evaluate,
    prefixed_kind,
)
from route_authz.observability.logging import get_logger

_log = get_logger(__name__)


@dataclasses.dataclass(frozen=True)
class AccessRequest:
    """Everything the pipeline needs to know about one request.

    *action* is the host framework's handle for the dispatched action; it is
    only looked at by custom extractors.  *params* are the query parameters;
    ``params["id"]`` is the default resource id.
    """
    route: str
    user: WebUser
    action: Any = None
    params: Mapping[str, Any] = dataclasses.field(default_factory=dict)


Extractor = Callable[[AccessRequest], Any]


class DecisionPipeline:
    """Combine allow-list, Cerbos and the legacy fallback into one decision."""

    def __init__(
        self,
        policy: PolicyChecker,
        *,
        allow_actions: Iterable[str] = (),
        resource_mapper: ResourceMapper | None = None,
        principal_builder: PrincipalBuilder | None = None,
        fallback: FallbackAuthorizer | None = None,
        use_fallback: bool = True,
        system_prefix: str | None = None,
        resource_id_extractor: Extractor | None = None,
        resource_attributes_extractor: Extractor | None = None,
    ) -> None:
        self._policy = policy
        self._allow_actions = tuple(allow_actions)
        self._mapper = resource_mapper or ResourceMapper()
        self._principals = principal_builder or PrincipalBuilder()
        self._fallback = fallback or FallbackAuthorizer()
        self._use_fallback = use_fallback
        self._system_prefix = system_prefix
        self._resource_id_extractor = resource_id_extractor
        self._resource_attributes_extractor = resource_attributes_extractor

    @property
    def allow_actions(self) -> tuple[str, ...]:
        return self._allow_actions

    def is_allow_listed(self, route: str) -> bool:
        return matches_any(self._allow_actions, route)

    # ------------------------------------------------------------------
    # Policy path
    # ------------------------------------------------------------------

    def describe(self, request: AccessRequest) -> ResourceDescriptor:
        """Resolve and evaluate the resource descriptor for *request*."""
        template = self._mapper.resolve(request.route)

        if self._resource_id_extractor is not None:
            resource_id = self._resource_id_extractor(request)
        elif template.resource_id is not None:
            resource_id = evaluate(template.resource_id)
        else:
            resource_id = request.params.get("id")

        if self._resource_attributes_extractor is not None:
            attributes = self._resource_attributes_extractor(request)
        else:
            attributes = evaluate(template.attributes)

        return ResourceDescriptor(
            resource_kind=prefixed_kind(template.resource, self._system_prefix),
            action=str(evaluate(template.action)),
            resource_id=None if resource_id in (None, "") else str(resource_id),
            attributes=MappingProxyType(dict(attributes or {})),
        )

    async def check_policy(self, request: AccessRequest) -> bool:
        """Ask Cerbos; any failure along the way is a denial."""
        try:
            descriptor = self.describe(request)
            principal = self._principals.build(request.user.identity)
            _log.info(
                "policy_check",
                route=request.route,
                resource=descriptor.resource_kind,
                action=descriptor.action,
                resource_id=descriptor.resource_id,
            )
            allowed = await self._policy.check(
                principal,
                descriptor.action,
                descriptor.resource_kind,
                descriptor.resource_id,
                descriptor.attributes,
            )
        except Exception as exc:  # noqa: BLE001
            _log.error("policy_check_failed", route=request.route, error=str(exc))
            return False
        _log.info("policy_result", route=request.route, allowed=allowed)
        return bool(allowed)

    def check_fallback(self, request: AccessRequest) -> bool:
        return self._fallback.allowed(request.route, getattr(request.user, "can", None))

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    async def decide(self, request: AccessRequest) -> Decision:
        route = request.route
        if self.is_allow_listed(route):
            return Decision(route, Outcome.ALLOW_LISTED)

        if _is_guest(request.user):
            return Decision(route, Outcome.LOGIN_REQUIRED)

        if await self.check_policy(request):
            return Decision(route, Outcome.POLICY_ALLOWED)

        if self._use_fallback and self.check_fallback(request):
            return Decision(route, Outcome.FALLBACK_ALLOWED)

        if _is_guest(request.user):
            return Decision(route, Outcome.LOGIN_REQUIRED)
        _log.info("access_denied", route=route)
        return Decision(route, Outcome.DENIED)

    async def enforce(self, request: AccessRequest) -> Decision:
        """Like :meth:`decide` but raise for the non-ALLOW outcomes.

        Raises
        ------
        LoginRequiredError
            The request has no authenticated identity.
        ForbiddenActionError
            The identity is authenticated but not allowed.
        """
        decision = await self.decide(request)
        if decision.outcome is Outcome.LOGIN_REQUIRED:
            raise LoginRequiredError(route=request.route)
        if decision.outcome is Outcome.DENIED:
            raise ForbiddenActionError(route=request.route)
        return decision


def _is_guest(user: WebUser) -> bool:
    return user.is_guest or user.identity is None


__all__ = ["AccessRequest", "DecisionPipeline", "Extractor"]
