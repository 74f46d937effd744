"""SQLAlchemy adapter — SqlAlchemyRoleResolver.

Reads role assignments from a legacy RBAC table such as::

    auth_assignment(item_name, username, project_code, ...)

The table is addressed with lightweight Core ``table()``/``column()``
constructs, so no ORM model or reflection is needed.  Only a synchronous
:class:`~sqlalchemy.engine.Engine` is required; the queries are plain reads.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import column, select, table
from sqlalchemy.exc import SQLAlchemyError

from route_authz.kernel.errors import LegacyStoreError
from route_authz.kernel.security.identity import Identity
from route_authz.kernel.security.principal import BASE_ROLE, GUEST_ROLE, unique


class SqlAlchemyRoleResolver:
    """:class:`~route_authz.kernel.security.principal.RoleResolver` over an
    assignment table, optionally scoped to one tenant/project code.

    Returns ``["guest"]`` without an identity and ``["user"]`` when the
    identity has no assignment rows.
    """

    def __init__(
        self,
        engine: Any,
        *,
        table_name: str = "auth_assignment",
        user_column: str = "username",
        role_column: str = "item_name",
        tenant_column: str = "project_code",
        tenant_code: str | None = None,
    ) -> None:
        self._engine = engine
        self._table_name = table_name
        self._user_column = user_column
        self._role_column = role_column
        self._tenant_column = tenant_column
        self._tenant_code = tenant_code

    def roles_for(self, identity: Identity | None) -> list[str]:
        if identity is None:
            return [GUEST_ROLE]
        username = getattr(identity, "username", None)
        roles = self.fetch_roles(username) if username else []
        return roles or [BASE_ROLE]

    def fetch_roles(self, username: str) -> list[str]:
        """Distinct role names assigned to *username*."""
        t = table(
            self._table_name,
            column(self._user_column),
            column(self._role_column),
            column(self._tenant_column),
        )
        role = t.c[self._role_column]
        stmt = select(role).distinct().where(t.c[self._user_column] == username)
        if self._tenant_code is not None:
            stmt = stmt.where(t.c[self._tenant_column] == self._tenant_code)
        stmt = stmt.order_by(role)

        try:
            with self._engine.connect() as conn:
                rows = conn.execute(stmt).scalars().all()
        except SQLAlchemyError as exc:
            raise LegacyStoreError(self._table_name, cause=exc) from exc
        return list(unique(str(r) for r in rows if r))


__all__ = ["SqlAlchemyRoleResolver"]
