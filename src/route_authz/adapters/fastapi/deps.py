"""FastAPI adapter – per-route access dependency.

For applications that prefer enforcing on selected endpoints instead of
wrapping the whole app in :class:`AccessControlMiddleware`::

    guard = access_dependency(pipeline, load_session_user)

    @app.get("/post/view", dependencies=[Depends(guard)])
    async def view_post(id: int): ...

Denials surface as :class:`LoginRequiredError` / :class:`ForbiddenActionError`;
register :class:`FastAPIExceptionMapper` to turn them into responses.
"""
from __future__ import annotations

import inspect
from typing import Awaitable, Callable

from fastapi import Request

from route_authz.adapters.fastapi.middleware import UserLoader, default_route
from route_authz.kernel.security import AccessRequest, Decision, DecisionPipeline


def access_dependency(
    pipeline: DecisionPipeline,
    user_loader: UserLoader,
    route_resolver: Callable[[Request], str] | None = None,
) -> Callable[[Request], Awaitable[Decision]]:
    resolve_route = route_resolver or default_route

    async def enforce_access(request: Request) -> Decision:
        user = user_loader(request)
        if inspect.isawaitable(user):
            user = await user
        return await pipeline.enforce(
            AccessRequest(
                route=resolve_route(request),
                user=user,
                action=request.scope.get("endpoint"),
                params=dict(request.query_params),
            )
        )

    return enforce_access


__all__ = ["access_dependency"]
