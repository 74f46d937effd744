"""FastAPI adapter – FastAPIExceptionMapper."""
from __future__ import annotations

from typing import Any, Callable

from fastapi.responses import JSONResponse, RedirectResponse

from route_authz.kernel.errors import BaseError, ForbiddenActionError, LoginRequiredError


class FastAPIExceptionMapper:
    """Register route-authz error → HTTP response mappings on a FastAPI app.

    Error body schema::

        {"code": "forbidden", "message": "...", "route": "post/delete",
         "outcome": "DENIED", "detail": {}}

    Mappings
    --------
    ``LoginRequiredError``   → 401, or 302 to *login_url* when given
    ``ForbiddenActionError`` → 403
    """

    def __init__(self, login_url: str | None = None) -> None:
        self._login_url = login_url
        self._map: list[tuple[type[BaseError], int]] = [
            (LoginRequiredError, 401),
            (ForbiddenActionError, 403),
        ]

    def register(self, app: Any) -> None:
        """Register all error handlers on a ``FastAPI`` or ``Starlette`` app."""
        for exc_type, status in self._map:
            app.add_exception_handler(exc_type, self._handler(status))

    def _handler(self, status: int) -> Callable[[Any, Any], Any]:
        def handler(request: Any, exc: Any) -> Any:  # noqa: ARG001
            if status == 401 and self._login_url:
                return RedirectResponse(self._login_url, status_code=302)
            return JSONResponse(status_code=status, content=exc.to_dict())

        return handler


__all__ = ["FastAPIExceptionMapper"]
