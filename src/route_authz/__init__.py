"""
route_authz – route-level authorization backed by a Cerbos PDP.

Import path convention::

    from route_authz.kernel.security import DecisionPipeline, AccessRequest
    from route_authz.adapters.cerbos import CerbosHttpClient
    from route_authz.adapters.fastapi import AccessControlMiddleware
    from route_authz.config import AccessControlSettings, build_pipeline
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
