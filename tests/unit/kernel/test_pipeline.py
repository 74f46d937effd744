"""Unit tests for DecisionPipeline."""

from __future__ import annotations

import asyncio
from typing import Any, Mapping, Sequence

import pytest

from route_authz.kernel.errors import ForbiddenActionError, LoginRequiredError, TransportError
from route_authz.kernel.security import (
    AccessRequest,
    DecisionPipeline,
    Outcome,
    Principal,
    ResourceMapper,
    SessionUser,
    User,
)


class _FakePolicy:
    """PolicyChecker stub recording every call."""

    def __init__(self, allow: bool | Exception = False) -> None:
        self.allow = allow
        self.calls: list[dict[str, Any]] = []

    async def check(
        self,
        principal: Principal | None,
        action: str,
        resource_kind: str,
        resource_id: str | None = None,
        attributes: Mapping[str, Any] | None = None,
    ) -> bool:
        self.calls.append(
            {
                "principal": principal,
                "action": action,
                "resource_kind": resource_kind,
                "resource_id": resource_id,
                "attributes": dict(attributes or {}),
            }
        )
        if isinstance(self.allow, Exception):
            raise self.allow
        return self.allow

    async def batch_check(
        self,
        principal: Principal | None,
        actions: Sequence[str],
        resource_kind: str,
        resource_id: str | None = None,
        attributes: Mapping[str, Any] | None = None,
    ) -> dict[str, bool]:
        return {a: bool(self.allow) for a in actions}


def _user(*granted: str, role: str | None = None) -> SessionUser:
    return SessionUser(
        identity=User(id=7, username="alice", role=role),
        checker=lambda _identity, permission: permission in granted,
    )


def _decide(pipeline: DecisionPipeline, request: AccessRequest):
    return asyncio.run(pipeline.decide(request))


# ---------------------------------------------------------------------------
# Allow-list and guests
# ---------------------------------------------------------------------------


class TestAllowList:
    def test_exact_entry_skips_everything(self) -> None:
        policy = _FakePolicy()
        pipeline = DecisionPipeline(policy, allow_actions=["site/login"])
        decision = _decide(pipeline, AccessRequest("site/login", SessionUser()))
        assert decision.outcome is Outcome.ALLOW_LISTED
        assert decision.allowed
        assert policy.calls == []

    def test_wildcard_entry(self) -> None:
        pipeline = DecisionPipeline(_FakePolicy(), allow_actions=["api/public/*"])
        assert pipeline.is_allow_listed("api/public/status") is True
        assert pipeline.is_allow_listed("api/private/status") is False

    def test_trailing_newline_is_not_allow_listed(self) -> None:
        policy = _FakePolicy(allow=True)
        pipeline = DecisionPipeline(policy, allow_actions=["site/login"])
        decision = _decide(pipeline, AccessRequest("site/login\n", SessionUser()))
        assert decision.outcome is Outcome.LOGIN_REQUIRED
        assert policy.calls == []

    def test_allow_actions_exposed(self) -> None:
        pipeline = DecisionPipeline(_FakePolicy(), allow_actions=["a", "b/*"])
        assert pipeline.allow_actions == ("a", "b/*")


class TestGuests:
    def test_guest_needs_login(self) -> None:
        policy = _FakePolicy(allow=True)
        pipeline = DecisionPipeline(policy)
        decision = _decide(pipeline, AccessRequest("post/view", SessionUser()))
        assert decision.outcome is Outcome.LOGIN_REQUIRED
        assert not decision
        assert policy.calls == []

    def test_flagged_guest_with_identity_needs_login(self) -> None:
        class FlaggedGuest:
            identity = User(id=1)
            is_guest = True

            def can(self, permission: str) -> bool:  # noqa: ARG002
                return True

        decision = _decide(DecisionPipeline(_FakePolicy(True)), AccessRequest("post/view", FlaggedGuest()))
        assert decision.outcome is Outcome.LOGIN_REQUIRED


# ---------------------------------------------------------------------------
# Policy path
# ---------------------------------------------------------------------------


class TestPolicyPath:
    def test_policy_allow(self) -> None:
        policy = _FakePolicy(allow=True)
        pipeline = DecisionPipeline(policy)
        request = AccessRequest("post/update", _user(role="editor"), params={"id": "7"})
        decision = _decide(pipeline, request)
        assert decision.outcome is Outcome.POLICY_ALLOWED
        call = policy.calls[0]
        assert call["resource_kind"] == "post"
        assert call["action"] == "update"
        assert call["resource_id"] == "7"
        assert call["principal"].roles == ("user", "editor")

    def test_view_maps_to_read_without_id(self) -> None:
        policy = _FakePolicy(allow=True)
        _decide(DecisionPipeline(policy), AccessRequest("post/view", _user()))
        assert policy.calls[0]["action"] == "read"
        assert policy.calls[0]["resource_id"] is None

    def test_empty_id_is_absent(self) -> None:
        policy = _FakePolicy(allow=True)
        _decide(DecisionPipeline(policy), AccessRequest("post/view", _user(), params={"id": ""}))
        assert policy.calls[0]["resource_id"] is None

    def test_system_prefix_applied(self) -> None:
        policy = _FakePolicy(allow=True)
        pipeline = DecisionPipeline(policy, system_prefix="crm")
        _decide(pipeline, AccessRequest("post/view", _user()))
        assert policy.calls[0]["resource_kind"] == "crm_post"

    def test_configured_template_with_computed_fields(self) -> None:
        policy = _FakePolicy(allow=True)
        mapper = ResourceMapper.from_config(
            {
                "report/*": {
                    "resource": "report",
                    "action": "read",
                    "resourceId": lambda: 99,
                    "attributes": lambda: {"owner": "alice"},
                }
            }
        )
        pipeline = DecisionPipeline(policy, resource_mapper=mapper)
        _decide(pipeline, AccessRequest("report/export", _user(), params={"id": "1"}))
        call = policy.calls[0]
        assert call["resource_kind"] == "report"
        assert call["resource_id"] == "99"
        assert call["attributes"] == {"owner": "alice"}

    def test_extractors_take_precedence(self) -> None:
        policy = _FakePolicy(allow=True)
        mapper = ResourceMapper.from_config({"post/view": {"resource": "post", "action": "read", "resourceId": "1"}})
        pipeline = DecisionPipeline(
            policy,
            resource_mapper=mapper,
            resource_id_extractor=lambda request: request.params["slug"],
            resource_attributes_extractor=lambda request: {"route": request.route},
        )
        _decide(pipeline, AccessRequest("post/view", _user(), params={"slug": "hello"}))
        call = policy.calls[0]
        assert call["resource_id"] == "hello"
        assert call["attributes"] == {"route": "post/view"}

    def test_policy_error_is_denial(self) -> None:
        pipeline = DecisionPipeline(_FakePolicy(RuntimeError("pdp down")), use_fallback=False)
        decision = _decide(pipeline, AccessRequest("post/view", _user()))
        assert decision.outcome is Outcome.DENIED

    def test_failing_extractor_is_denial(self) -> None:
        def broken(request: AccessRequest) -> Any:
            raise KeyError("id")

        policy = _FakePolicy(allow=True)
        pipeline = DecisionPipeline(policy, use_fallback=False, resource_id_extractor=broken)
        decision = _decide(pipeline, AccessRequest("post/view", _user()))
        assert decision.outcome is Outcome.DENIED
        assert policy.calls == []


# ---------------------------------------------------------------------------
# Fallback path
# ---------------------------------------------------------------------------


class TestFallbackPath:
    def test_fallback_grants_after_policy_denial(self) -> None:
        pipeline = DecisionPipeline(_FakePolicy(False))
        decision = _decide(pipeline, AccessRequest("reports/export/csv", _user("reports/*")))
        assert decision.outcome is Outcome.FALLBACK_ALLOWED

    def test_fallback_grants_after_policy_error(self) -> None:
        pipeline = DecisionPipeline(_FakePolicy(RuntimeError("timeout")))
        decision = _decide(pipeline, AccessRequest("post/view", _user("post/view")))
        assert decision.outcome is Outcome.FALLBACK_ALLOWED

    def test_fallback_disabled(self) -> None:
        pipeline = DecisionPipeline(_FakePolicy(False), use_fallback=False)
        decision = _decide(pipeline, AccessRequest("post/view", _user("/*")))
        assert decision.outcome is Outcome.DENIED

    def test_no_grant_anywhere(self) -> None:
        pipeline = DecisionPipeline(_FakePolicy(False))
        decision = _decide(pipeline, AccessRequest("post/delete", _user("comment/*")))
        assert decision.outcome is Outcome.DENIED

    def test_transport_error_with_legacy_grant_and_fallback_off(self) -> None:
        policy = _FakePolicy(TransportError("http://pdp:3592", status_code=503))
        pipeline = DecisionPipeline(policy, use_fallback=False)
        decision = _decide(pipeline, AccessRequest("post/view", _user("post/view")))
        assert decision.outcome is Outcome.DENIED
        assert len(policy.calls) == 1

    def test_transport_error_with_legacy_grant_and_fallback_on(self) -> None:
        policy = _FakePolicy(TransportError("http://pdp:3592", status_code=503))
        pipeline = DecisionPipeline(policy)
        decision = _decide(pipeline, AccessRequest("post/view", _user("post/view")))
        assert decision.outcome is Outcome.FALLBACK_ALLOWED

    def test_user_without_can(self) -> None:
        class NoLegacy:
            identity = User(id=1)
            is_guest = False

        pipeline = DecisionPipeline(_FakePolicy(False))
        decision = _decide(pipeline, AccessRequest("post/view", NoLegacy()))
        assert decision.outcome is Outcome.DENIED


# ---------------------------------------------------------------------------
# Repeatability and enforce()
# ---------------------------------------------------------------------------


class TestDecisionsAreRepeatable:
    def test_same_inputs_same_outcome(self) -> None:
        pipeline = DecisionPipeline(_FakePolicy(False))
        request = AccessRequest("post/view", _user("post/*"))
        first = _decide(pipeline, request)
        second = _decide(pipeline, request)
        assert first == second


class TestEnforce:
    def test_allowed_returns_decision(self) -> None:
        pipeline = DecisionPipeline(_FakePolicy(True))
        decision = asyncio.run(pipeline.enforce(AccessRequest("post/view", _user())))
        assert decision.outcome is Outcome.POLICY_ALLOWED

    def test_guest_raises_login_required(self) -> None:
        pipeline = DecisionPipeline(_FakePolicy(True))
        with pytest.raises(LoginRequiredError) as info:
            asyncio.run(pipeline.enforce(AccessRequest("post/view", SessionUser())))
        assert info.value.code == "login_required"
        assert info.value.route == "post/view"

    def test_denied_raises_forbidden(self) -> None:
        pipeline = DecisionPipeline(_FakePolicy(False), use_fallback=False)
        with pytest.raises(ForbiddenActionError) as info:
            asyncio.run(pipeline.enforce(AccessRequest("post/delete", _user())))
        assert info.value.route == "post/delete"
        assert info.value.message == "You are not allowed to perform this action."


# ---------------------------------------------------------------------------
# Session ending while the request is decided
# ---------------------------------------------------------------------------


class _ExpiringUser:
    """Authenticated until :meth:`expire` is called."""

    def __init__(self) -> None:
        self._identity: User | None = User(id=3, username="carol")

    @property
    def identity(self) -> User | None:
        return self._identity

    @property
    def is_guest(self) -> bool:
        return self._identity is None

    def expire(self) -> None:
        self._identity = None

    def can(self, permission: str) -> bool:  # noqa: ARG002
        return False


class _ExpiringPolicy(_FakePolicy):
    def __init__(self, user: _ExpiringUser) -> None:
        super().__init__(allow=False)
        self._user = user

    async def check(self, principal, action, resource_kind, resource_id=None, attributes=None) -> bool:
        self._user.expire()
        return await super().check(principal, action, resource_kind, resource_id, attributes)


class TestSessionEndsMidDecision:
    def test_login_required_instead_of_denied(self) -> None:
        user = _ExpiringUser()
        policy = _ExpiringPolicy(user)
        decision = _decide(DecisionPipeline(policy), AccessRequest("post/delete", user))
        assert len(policy.calls) == 1
        assert policy.calls[0]["principal"].id == "3"
        assert decision.outcome is Outcome.LOGIN_REQUIRED

    def test_enforce_raises_login_required(self) -> None:
        user = _ExpiringUser()
        pipeline = DecisionPipeline(_ExpiringPolicy(user), use_fallback=False)
        with pytest.raises(LoginRequiredError):
            asyncio.run(pipeline.enforce(AccessRequest("post/delete", user)))
