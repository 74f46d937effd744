"""FastAPI adapter – AccessControlMiddleware.

Pure ASGI middleware that decides every HTTP request before it reaches the
application::

    app.add_middleware(
        AccessControlMiddleware,
        pipeline=build_pipeline(settings, resource_map=RESOURCE_MAP),
        user_loader=load_session_user,
        login_url=settings.login_url,
    )

The route is the request path without surrounding slashes
(``/post/view`` → ``post/view``) unless *route_resolver* says otherwise.
"""
from __future__ import annotations

import inspect
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Union

from starlette.requests import Request
from starlette.responses import JSONResponse, RedirectResponse

from route_authz.kernel.errors import ForbiddenActionError, LoginRequiredError
from route_authz.kernel.security import AccessRequest, DecisionPipeline, Outcome, WebUser
from route_authz.observability.logging import get_logger

if TYPE_CHECKING:
    from starlette.types import ASGIApp, Receive, Scope, Send

_log = get_logger(__name__)

UserLoader = Callable[[Request], Union[WebUser, Awaitable[WebUser]]]


def default_route(request: Request) -> str:
    return request.url.path.strip("/")


class AccessControlMiddleware:
    """Run the :class:`DecisionPipeline` for each HTTP request.

    Parameters
    ----------
    app:
        The inner ASGI application.
    pipeline:
        Configured decision pipeline.
    user_loader:
        ``(request) -> WebUser`` (sync or async) for the current session.
    login_url:
        Where to redirect (302) on LOGIN_REQUIRED; without it a 401 JSON body
        is returned.
    route_resolver:
        ``(request) -> str`` overriding :func:`default_route`.
    """

    def __init__(
        self,
        app: "ASGIApp",
        pipeline: DecisionPipeline,
        user_loader: UserLoader,
        login_url: str | None = None,
        route_resolver: Callable[[Request], str] | None = None,
    ) -> None:
        self.app = app
        self._pipeline = pipeline
        self._user_loader = user_loader
        self._login_url = login_url
        self._route_resolver = route_resolver or default_route

    async def __call__(self, scope: "Scope", receive: "Receive", send: "Send") -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope, receive)
        user = self._user_loader(request)
        if inspect.isawaitable(user):
            user = await user

        access = AccessRequest(
            route=self._route_resolver(request),
            user=user,
            action=scope,
            params=dict(request.query_params),
        )
        decision = await self._pipeline.decide(access)

        if decision.allowed:
            scope.setdefault("state", {})["access_decision"] = decision
            await self.app(scope, receive, send)
            return

        response: Any
        if decision.outcome is Outcome.LOGIN_REQUIRED:
            if self._login_url:
                response = RedirectResponse(self._login_url, status_code=302)
            else:
                response = JSONResponse(
                    status_code=401,
                    content=LoginRequiredError(route=access.route).to_dict(),
                )
        else:
            response = JSONResponse(
                status_code=403,
                content=ForbiddenActionError(route=access.route).to_dict(),
            )
        _log.info("request_rejected", route=access.route, outcome=decision.outcome.value)
        await response(scope, receive, send)


__all__ = ["AccessControlMiddleware", "UserLoader", "default_route"]
