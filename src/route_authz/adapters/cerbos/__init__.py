"""Cerbos adapter – HTTP policy decision point client."""
from route_authz.adapters.cerbos.client import (
    CHECK_RESOURCES_PATH,
    EFFECT_ALLOW,
    CerbosHttpClient,
    resolve_base_url,
)

__all__ = ["CHECK_RESOURCES_PATH", "CerbosHttpClient", "EFFECT_ALLOW", "resolve_base_url"]
