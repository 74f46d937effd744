"""Cerbos adapter – CerbosHttpClient.

Talks to the PDP's ``POST /api/check/resources`` endpoint.  Every failure
(transport error, timeout, non-2xx status, unencodable request, unexpected
payload) is logged and answered with DENY; nothing is raised to the caller.
"""
from __future__ import annotations

import uuid
from typing import Any, Iterable, Mapping

import httpx

from route_authz.kernel.errors import (
    InfrastructureError,
    MalformedResponseError,
    SerializationError,
    TransportError,
)
from route_authz.kernel.security.principal import Principal
from route_authz.observability.logging import get_logger

_log = get_logger(__name__)

CHECK_RESOURCES_PATH = "/api/check/resources"
EFFECT_ALLOW = "EFFECT_ALLOW"
DEFAULT_HOST = "localhost:3592"
DEFAULT_TIMEOUT = 5.0
DEFAULT_RESOURCE_ID = "default"
GRPC_PORT = ":3593"
HTTP_PORT = ":3592"
REQUEST_ID_PREFIX = "route-authz"


def resolve_base_url(host: str = DEFAULT_HOST, http_host: str | None = None) -> str:
    """Return the PDP's HTTP base URL.

    ``http_host`` wins when given; otherwise the gRPC port in *host* is
    swapped for the HTTP one.  ``http://`` is prefixed if no scheme is set.
    """
    base = http_host or host.replace(GRPC_PORT, HTTP_PORT)
    if not base.startswith("http"):
        base = f"http://{base}"
    return base


class CerbosHttpClient:
    """Async Cerbos PDP client with fail-closed semantics.

    Parameters
    ----------
    host:
        ``host:port`` of the PDP; a gRPC port (3593) is rewritten to 3592.
    http_host:
        Explicit HTTP address, used verbatim instead of *host*.
    timeout:
        Per-request timeout in seconds.
    send_resource_attributes:
        Include resource attributes as ``resource.attr`` in single checks.
    """

    def __init__(
        self,
        host: str = DEFAULT_HOST,
        *,
        http_host: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        send_resource_attributes: bool = False,
        **kwargs: Any,
    ) -> None:
        self._base_url = resolve_base_url(host, http_host)
        self._send_attributes = send_resource_attributes
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=timeout,
            headers={"Content-Type": "application/json"},
            **kwargs,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    async def __aenter__(self) -> "CerbosHttpClient":
        await self._client.__aenter__()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self._client.__aexit__(*args)

    async def aclose(self) -> None:
        await self._client.aclose()

    # ------------------------------------------------------------------
    # Checks
    # ------------------------------------------------------------------

    async def check(
        self,
        principal: Principal | None,
        action: str,
        resource_kind: str,
        resource_id: str | None = None,
        attributes: Mapping[str, Any] | None = None,
    ) -> bool:
        """Return ``True`` only if Cerbos answers ``EFFECT_ALLOW`` for *action*."""
        if principal is None:
            _log.info("cerbos_no_principal", action=action, resource=resource_kind)
            return False

        resource: dict[str, Any] = {
            "kind": resource_kind,
            "id": resource_id or DEFAULT_RESOURCE_ID,
        }
        if self._send_attributes and attributes:
            resource["attr"] = dict(attributes)
        payload = self._payload(principal, resource, [action], batch=False)

        try:
            results = await self._post(payload)
        except InfrastructureError as exc:
            _log.error("cerbos_check_failed", action=action, resource=resource_kind, error=str(exc))
            return False

        for item in results:
            effects = item["actions"]
            if action in effects:
                allowed = effects[action] == EFFECT_ALLOW
                _log.info("cerbos_check", action=action, resource=resource_kind, allowed=allowed)
                return allowed

        _log.info("cerbos_action_missing", action=action, resource=resource_kind)
        return False

    async def batch_check(
        self,
        principal: Principal | None,
        actions: Iterable[str],
        resource_kind: str,
        resource_id: str | None = None,
        attributes: Mapping[str, Any] | None = None,  # noqa: ARG002
    ) -> dict[str, bool]:
        """Check several actions on one resource; unresolved actions are denied.

        *attributes* is accepted for signature parity with :meth:`check` and
        is not sent.
        """
        actions = list(actions)
        permissions = dict.fromkeys(actions, False)
        if principal is None:
            return permissions

        resource = {"kind": resource_kind, "id": resource_id or DEFAULT_RESOURCE_ID}
        payload = self._payload(principal, resource, actions, batch=True)

        try:
            results = await self._post(payload)
        except InfrastructureError as exc:
            _log.error("cerbos_batch_check_failed", resource=resource_kind, error=str(exc))
            return dict.fromkeys(actions, False)

        for item in results:
            for action, effect in item["actions"].items():
                if action in permissions:
                    permissions[action] = effect == EFFECT_ALLOW
        return permissions

    # ------------------------------------------------------------------
    # Wire helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _payload(
        principal: Principal,
        resource: dict[str, Any],
        actions: list[str],
        *,
        batch: bool,
    ) -> dict[str, Any]:
        prefix = f"{REQUEST_ID_PREFIX}-batch" if batch else REQUEST_ID_PREFIX
        return {
            "requestId": f"{prefix}-{uuid.uuid4().hex}",
            "principal": principal.to_payload(),
            "resources": [{"resource": resource, "actions": actions}],
        }

    async def _post(self, payload: dict[str, Any]) -> list[dict[str, Any]]:
        """POST *payload* and return the well-formed result items."""
        try:
            response = await self._client.post(CHECK_RESOURCES_PATH, json=payload)
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise TransportError(self._base_url, "Cerbos request timed out", cause=exc) from exc
        except httpx.HTTPStatusError as exc:
            raise TransportError(
                self._base_url,
                f"HTTP {exc.response.status_code} from Cerbos",
                status_code=exc.response.status_code,
                cause=exc,
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportError(self._base_url, str(exc), cause=exc) from exc
        except (TypeError, ValueError) as exc:
            raise SerializationError("Cerbos request could not be encoded", cause=exc) from exc

        try:
            body = response.json()
        except ValueError as exc:
            raise MalformedResponseError("Cerbos response is not JSON", cause=exc) from exc
        _log.debug("cerbos_response", body=body)
        return _result_items(body)


def _result_items(body: Any) -> list[dict[str, Any]]:
    if not isinstance(body, dict):
        raise MalformedResponseError("Cerbos response is not a JSON object")
    results = body.get("results")
    if results is None:
        return []
    if not isinstance(results, list):
        raise MalformedResponseError("Cerbos 'results' is not a list")
    return [
        item
        for item in results
        if isinstance(item, dict) and "resource" in item and isinstance(item.get("actions"), dict)
    ]


__all__ = [
    "CHECK_RESOURCES_PATH",
    "CerbosHttpClient",
    "EFFECT_ALLOW",
    "resolve_base_url",
]
