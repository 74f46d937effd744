"""Config settings – wire a DecisionPipeline from AccessControlSettings."""
from __future__ import annotations

from typing import Any, Mapping

from sqlalchemy import create_engine

from route_authz.adapters.cerbos import CerbosHttpClient
from route_authz.adapters.sqlalchemy import SqlAlchemyAccessChecker, SqlAlchemyRoleResolver
from route_authz.config.settings.base import AccessControlSettings
from route_authz.kernel.security import (
    DecisionPipeline,
    Extractor,
    PolicyChecker,
    PrincipalBuilder,
    ResourceMapper,
    ResourceTemplate,
    RoleResolver,
)


def legacy_engine(settings: AccessControlSettings) -> Any | None:
    """Engine for the legacy RBAC tables, or ``None`` when not configured."""
    if not settings.database_url:
        return None
    return create_engine(settings.database_url)


def build_role_resolver(settings: AccessControlSettings, engine: Any) -> SqlAlchemyRoleResolver:
    return SqlAlchemyRoleResolver(
        engine,
        table_name=settings.assignment_table,
        user_column=settings.user_column,
        tenant_column=settings.tenant_column,
        tenant_code=settings.project_code,
    )


def build_access_checker(settings: AccessControlSettings, engine: Any) -> SqlAlchemyAccessChecker:
    return SqlAlchemyAccessChecker(
        engine,
        assignment_table=settings.assignment_table,
        item_child_table=settings.item_child_table,
        user_column=settings.user_column,
        tenant_column=settings.tenant_column,
        tenant_code=settings.project_code,
    )


def build_pipeline(
    settings: AccessControlSettings,
    *,
    resource_map: Mapping[str, ResourceTemplate | Mapping[str, Any]] | None = None,
    role_resolver: RoleResolver | None = None,
    resource_id_extractor: Extractor | None = None,
    resource_attributes_extractor: Extractor | None = None,
    policy: PolicyChecker | None = None,
    engine: Any | None = None,
) -> DecisionPipeline:
    """Assemble a :class:`DecisionPipeline`.

    Without an explicit *role_resolver*, roles come from the assignment table
    whenever an *engine* is given or ``database_url`` is configured.
    """
    if role_resolver is None:
        engine = engine if engine is not None else legacy_engine(settings)
        if engine is not None:
            role_resolver = build_role_resolver(settings, engine)

    if policy is None:
        policy = CerbosHttpClient(
            settings.cerbos_host,
            http_host=settings.cerbos_http_host,
            timeout=settings.cerbos_timeout,
            send_resource_attributes=settings.send_resource_attributes,
        )

    return DecisionPipeline(
        policy,
        allow_actions=settings.allow_actions,
        resource_mapper=ResourceMapper.from_config(resource_map),
        principal_builder=PrincipalBuilder(role_resolver),
        use_fallback=settings.use_fallback,
        system_prefix=settings.system_prefix,
        resource_id_extractor=resource_id_extractor,
        resource_attributes_extractor=resource_attributes_extractor,
    )


__all__ = [
    "build_access_checker",
    "build_pipeline",
    "build_role_resolver",
    "legacy_engine",
]
