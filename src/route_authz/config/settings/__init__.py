"""Config settings – env-based configuration and pipeline wiring."""
from route_authz.config.settings.base import AccessControlSettings, Settings
from route_authz.config.settings.factory import (
    build_access_checker,
    build_pipeline,
    build_role_resolver,
    legacy_engine,
)
from route_authz.config.settings.loaders import EnvSettingsLoader, SettingsLoader

__all__ = [
    "AccessControlSettings",
    "EnvSettingsLoader",
    "Settings",
    "SettingsLoader",
    "build_access_checker",
    "build_pipeline",
    "build_role_resolver",
    "legacy_engine",
]
