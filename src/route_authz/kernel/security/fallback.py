"""Kernel security — legacy role-based fallback.

Legacy permissions are named after routes.  A grant on ``reports/*`` covers
every route below ``reports``, and ``/*`` covers everything::

    authorizer = FallbackAuthorizer()
    authorizer.allowed("reports/export/csv", user.can)
    # tries reports/export/csv, reports/export/*, reports/*, /*
"""
from __future__ import annotations

from typing import Callable, Iterator

from route_authz.observability.logging import get_logger

_log = get_logger(__name__)


def candidate_permissions(route: str) -> Iterator[str]:
    """Yield *route* followed by its wildcard parents, nearest first."""
    yield route
    parts = route.split("/")
    while parts:
        parts.pop()
        yield "/".join(parts) + "/*"


class FallbackAuthorizer:
    """Walk up the route hierarchy until a legacy permission grants access."""

    def allowed(self, route: str, user_can: Callable[[str], bool] | None) -> bool:
        if user_can is None:
            _log.info("fallback_unavailable", route=route)
            return False

        for permission in candidate_permissions(route):
            try:
                if user_can(permission):
                    _log.info("fallback_granted", route=route, permission=permission)
                    return True
            except Exception as exc:  # noqa: BLE001
                _log.warning("fallback_check_failed", route=route, permission=permission, error=str(exc))
        return False


__all__ = ["FallbackAuthorizer", "candidate_permissions"]
