"""Kernel security — route → resource mapping.

A resource map associates route patterns with :class:`ResourceTemplate`\\ s
describing what the Cerbos check is about::

    mapper = ResourceMapper.from_config({
        "post/publish": {"resource": "post", "action": "publish"},
        "report/*": {
            "resource": "report",
            "action": "read",
            "resourceId": lambda: current_report_id(),
        },
    })
    template = mapper.resolve("report/export")

Template fields other than ``resource`` may be deferred: a callable is
wrapped in :class:`Computed` and only invoked when the request is decided.
Routes without an entry fall back to a CRUD naming convention
(``post/view`` → resource ``post``, action ``read``).
"""

from __future__ import annotations

import dataclasses
from types import MappingProxyType
from typing import Any, Callable, Generic, Mapping, TypeVar, Union

from route_authz.kernel.errors import ConfigError
from route_authz.kernel.security.patterns import matches

T = TypeVar("T")

DEFAULT_RESOURCE = "default"
DEFAULT_ACTION = "index"

CRUD_ACTIONS: Mapping[str, str] = MappingProxyType(
    {
        "index": "index",
        "view": "read",
        "create": "create",
        "update": "update",
        "delete": "delete",
    }
)


@dataclasses.dataclass(frozen=True)
class Constant(Generic[T]):
    """A template field known at configuration time."""

    value: T


@dataclasses.dataclass(frozen=True)
class Computed(Generic[T]):
    """A template field produced by calling *fn* when a request is decided."""

    fn: Callable[[], T]


FieldValue = Union[Constant[T], Computed[T]]


def as_field(raw: Any) -> FieldValue[Any] | None:
    """Wrap a raw configuration value; ``None`` means the field is absent."""
    if raw is None or isinstance(raw, (Constant, Computed)):
        return raw
    if callable(raw):
        return Computed(raw)
    return Constant(raw)


def evaluate(field: FieldValue[T] | None) -> T | None:
    """Return the concrete value of *field*, invoking it when computed."""
    if field is None:
        return None
    if isinstance(field, Computed):
        return field.fn()
    return field.value


@dataclasses.dataclass(frozen=True)
class ResourceTemplate:
    """One resource-map entry."""

    resource: str
    action: FieldValue[str]
    resource_id: FieldValue[Any] | None = None
    attributes: FieldValue[Mapping[str, Any]] | None = None

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any], *, key: str = "") -> "ResourceTemplate":
        resource = raw.get("resource")
        action = as_field(raw.get("action"))
        if not resource or action is None:
            raise ConfigError(
                f"Resource map entry {key!r} needs both 'resource' and 'action'",
                detail={"entry": key},
            )
        resource_id = raw.get("resourceId", raw.get("resource_id"))
        return cls(
            resource=str(resource),
            action=action,
            resource_id=as_field(resource_id),
            attributes=as_field(raw.get("attributes")),
        )


@dataclasses.dataclass(frozen=True)
class ResourceDescriptor:
    """Fully evaluated subject of a single policy check."""

    resource_kind: str
    action: str
    resource_id: str | None = None
    attributes: Mapping[str, Any] = dataclasses.field(default_factory=dict)


def prefixed_kind(resource_kind: str, prefix: str | None) -> str:
    """Apply the configured system prefix to *resource_kind*."""
    if prefix:
        return f"{prefix}_{resource_kind}"
    return resource_kind


class ResourceMapper:
    """Resolve routes to resource templates.

    Resolution order: exact key, then the first wildcard key (insertion
    order, no specificity ranking), then :meth:`default_template`.
    """

    def __init__(self, mapping: Mapping[str, ResourceTemplate] | None = None) -> None:
        self._mapping: Mapping[str, ResourceTemplate] = MappingProxyType(dict(mapping or {}))

    @classmethod
    def from_config(
        cls, raw: Mapping[str, ResourceTemplate | Mapping[str, Any]] | None
    ) -> "ResourceMapper":
        mapping: dict[str, ResourceTemplate] = {}
        for key, entry in (raw or {}).items():
            if isinstance(entry, ResourceTemplate):
                mapping[key] = entry
            else:
                mapping[key] = ResourceTemplate.from_dict(entry, key=key)
        return cls(mapping)

    def __len__(self) -> int:
        return len(self._mapping)

    def lookup(self, route: str) -> ResourceTemplate | None:
        """Return the configured template for *route*, or ``None``."""
        template = self._mapping.get(route)
        if template is not None:
            return template
        for pattern, candidate in self._mapping.items():
            if matches(pattern, route):
                return candidate
        return None

    def resolve(self, route: str) -> ResourceTemplate:
        return self.lookup(route) or self.default_template(route)

    @staticmethod
    def default_template(route: str) -> ResourceTemplate:
        """Derive ``controller/action`` → ``resource/crud-action``."""
        parts = route.split("/")
        resource = parts[0] or DEFAULT_RESOURCE
        token = parts[1] if len(parts) > 1 and parts[1] else DEFAULT_ACTION
        return ResourceTemplate(
            resource=resource,
            action=Constant(CRUD_ACTIONS.get(token, token)),
        )


__all__ = [
    "CRUD_ACTIONS",
    "Computed",
    "Constant",
    "FieldValue",
    "ResourceDescriptor",
    "ResourceMapper",
    "ResourceTemplate",
    "as_field",
    "evaluate",
    "prefixed_kind",
]
