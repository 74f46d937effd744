"""SQLAlchemy adapter — SqlAlchemyAccessChecker.

Answers legacy ``user_can(permission)`` questions from two tables:

* the assignment table (``item_name`` granted to ``username``);
* the item-child table (``parent`` item includes ``child`` item).

A user holds a permission when an assigned item is the permission itself or
reaches it through the parent → child hierarchy.
"""

from __future__ import annotations

from typing import Any, Iterable

from sqlalchemy import column, select, table
from sqlalchemy.exc import SQLAlchemyError

from route_authz.kernel.errors import LegacyStoreError
from route_authz.kernel.security.identity import Identity


class SqlAlchemyAccessChecker:
    """Legacy permission check usable as a ``SessionUser`` checker.

    Example::

        checker = SqlAlchemyAccessChecker(engine, tenant_code="CRM")
        user = SessionUser(identity=current_identity, checker=checker)
        user.can("reports/*")
    """

    def __init__(
        self,
        engine: Any,
        *,
        assignment_table: str = "auth_assignment",
        item_child_table: str = "auth_item_child",
        user_column: str = "username",
        role_column: str = "item_name",
        tenant_column: str = "project_code",
        tenant_code: str | None = None,
    ) -> None:
        self._engine = engine
        self._assignments = table(
            assignment_table,
            column(user_column),
            column(role_column),
            column(tenant_column),
        )
        self._children = table(item_child_table, column("parent"), column("child"))
        self._user_column = user_column
        self._role_column = role_column
        self._tenant_column = tenant_column
        self._tenant_code = tenant_code

    def __call__(self, identity: Identity, permission: str) -> bool:
        username = getattr(identity, "username", None)
        if not username:
            return False
        return self.user_can(username, permission)

    def user_can(self, username: str, permission: str) -> bool:
        try:
            with self._engine.connect() as conn:
                frontier = self._assigned_items(conn, username)
                seen = set(frontier)
                while frontier:
                    if permission in frontier:
                        return True
                    frontier = self._child_items(conn, frontier) - seen
                    seen |= frontier
        except SQLAlchemyError as exc:
            raise LegacyStoreError(self._assignments.name, cause=exc) from exc
        return False

    def _assigned_items(self, conn: Any, username: str) -> set[str]:
        t = self._assignments
        stmt = select(t.c[self._role_column]).where(t.c[self._user_column] == username)
        if self._tenant_code is not None:
            stmt = stmt.where(t.c[self._tenant_column] == self._tenant_code)
        return set(conn.execute(stmt).scalars().all())

    def _child_items(self, conn: Any, parents: Iterable[str]) -> set[str]:
        t = self._children
        stmt = select(t.c.child).where(t.c.parent.in_(list(parents)))
        return set(conn.execute(stmt).scalars().all())


__all__ = ["SqlAlchemyAccessChecker"]
