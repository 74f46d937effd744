"""Config – settings, loaders, validation and pipeline factory."""

from route_authz.config.settings import (
    AccessControlSettings,
    EnvSettingsLoader,
    Settings,
    SettingsLoader,
    build_pipeline,
)
from route_authz.config.validation import (
    ConfigError,
    InvalidSettingValueError,
    MissingRequiredSettingError,
)

__all__ = [
    "AccessControlSettings",
    "ConfigError",
    "EnvSettingsLoader",
    "InvalidSettingValueError",
    "MissingRequiredSettingError",
    "Settings",
    "SettingsLoader",
    "build_pipeline",
]
