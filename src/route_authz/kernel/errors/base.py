"""Root error class for the route-authz error hierarchy."""

from __future__ import annotations

from typing import Any, ClassVar


class BaseError(Exception):
    """Root of the error hierarchy.

    Args:
        message: Human-readable description.
        code: Machine-readable slug (defaults to ``default_code``).
        route: Route being decided when the error was raised, if any.
        detail: Arbitrary extra context (serialisable dict).
        cause: Original exception that triggered this error.

    Errors that stand for a decision carry the matching ``outcome`` name
    (``LOGIN_REQUIRED``, ``DENIED``); it is part of :meth:`to_dict`.
    """

    default_code: ClassVar[str] = "base_error"
    outcome: ClassVar[str | None] = None

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        route: str | None = None,
        detail: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.route = route
        self.detail: dict[str, Any] = dict(detail or {})
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        where = f" (route {self.route!r})" if self.route is not None else ""
        return f"[{self.code}] {self.message}{where}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, route={self.route!r})"

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the JSON body used for HTTP responses and log context.

        ``route`` and ``outcome`` appear only when known; ``detail`` is always
        present.
        """
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.route is not None:
            payload["route"] = self.route
        if self.outcome is not None:
            payload["outcome"] = self.outcome
        payload["detail"] = self.detail
        if self.cause is not None:
            payload["cause"] = repr(self.cause)
        return payload


__all__ = ["BaseError"]
