"""Config settings – Settings base class and AccessControlSettings."""
import dataclasses
from typing import ClassVar

from route_authz.config.validation import InvalidSettingValueError


@dataclasses.dataclass
class Settings:
    """Base class for 12-factor settings."""

    _prefix: ClassVar[str] = ""

    def __post_init__(self) -> None:
        self._validate()

    def _validate(self) -> None:
        """Override to add cross-field validation."""


@dataclasses.dataclass
class AccessControlSettings(Settings):
    """Everything the decision pipeline reads at startup.

    Loaded from ``AUTHZ_*`` environment variables by
    :class:`~route_authz.config.settings.loaders.EnvSettingsLoader`; the
    resource map and extractors are code and go to
    :func:`~route_authz.config.settings.factory.build_pipeline` instead.
    """

    _prefix: ClassVar[str] = "AUTHZ"

    allow_actions: list[str] = dataclasses.field(default_factory=list)
    use_fallback: bool = True
    system_prefix: str | None = None

    cerbos_host: str = "localhost:3592"
    cerbos_http_host: str | None = None
    cerbos_timeout: float = 5.0
    send_resource_attributes: bool = False

    database_url: str | None = None
    assignment_table: str = "auth_assignment"
    item_child_table: str = "auth_item_child"
    user_column: str = "username"
    tenant_column: str = "project_code"
    project_code: str | None = None

    login_url: str | None = None

    def _validate(self) -> None:
        if self.cerbos_timeout <= 0:
            raise InvalidSettingValueError("cerbos_timeout", self.cerbos_timeout, "must be positive")


__all__ = ["AccessControlSettings", "Settings"]
