"""SQLAlchemy adapter – legacy RBAC role resolver and permission checker."""
from route_authz.adapters.sqlalchemy.access import SqlAlchemyAccessChecker
from route_authz.adapters.sqlalchemy.roles import SqlAlchemyRoleResolver

__all__ = ["SqlAlchemyAccessChecker", "SqlAlchemyRoleResolver"]
