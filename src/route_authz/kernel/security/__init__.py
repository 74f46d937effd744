"""Kernel security – patterns, resource map, principal, fallback, pipeline."""
from route_authz.kernel.security.fallback import FallbackAuthorizer, candidate_permissions
from route_authz.kernel.security.identity import Identity, SessionUser, User, WebUser
from route_authz.kernel.security.patterns import matches, matches_any
from route_authz.kernel.security.pipeline import AccessRequest, DecisionPipeline, Extractor
from route_authz.kernel.security.policy import Decision, Outcome, PolicyChecker
from route_authz.kernel.security.principal import (
    AuthManagerRoleResolver,
    NullRoleResolver,
    Principal,
    PrincipalBuilder,
    RoleResolver,
)
from route_authz.kernel.security.resource_map import (
    CRUD_ACTIONS,
    Computed,
    Constant,
    ResourceDescriptor,
    ResourceMapper,
    ResourceTemplate,
    evaluate,
    prefixed_kind,
)

__all__ = [
    "AccessRequest",
    "AuthManagerRoleResolver",
    "CRUD_ACTIONS",
    "Computed",
    "Constant",
    "Decision",
    "DecisionPipeline",
    "Extractor",
    "FallbackAuthorizer",
    "Identity",
    "NullRoleResolver",
    "Outcome",
    "PolicyChecker",
    "Principal",
    "PrincipalBuilder",
    "ResourceDescriptor",
    "ResourceMapper",
    "ResourceTemplate",
    "RoleResolver",
    "SessionUser",
    "User",
    "WebUser",
    "candidate_permissions",
    "evaluate",
    "matches",
    "matches_any",
    "prefixed_kind",
]
