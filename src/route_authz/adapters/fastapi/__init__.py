"""FastAPI adapter – access-control middleware, dependency, exception mapper."""
from route_authz.adapters.fastapi.deps import access_dependency
from route_authz.adapters.fastapi.exception_mapper import FastAPIExceptionMapper
from route_authz.adapters.fastapi.middleware import AccessControlMiddleware, default_route

__all__ = [
    "AccessControlMiddleware",
    "FastAPIExceptionMapper",
    "access_dependency",
    "default_route",
]
