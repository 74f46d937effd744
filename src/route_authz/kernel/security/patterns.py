"""Kernel security — wildcard route patterns.

A pattern is a route string in which ``*`` stands for any run of
characters, ``/`` included.  Everything else is matched literally and the
pattern must cover the whole route::

    matches("users/*", "users/view")      # True
    matches("a/*/c", "a/x/y/c")           # True, ``*`` crosses segments
    matches("users/*", "admin/users/x")   # False, anchored at the start
"""

from __future__ import annotations

import functools
import re
from typing import Iterable


@functools.lru_cache(maxsize=512)
def _compile(pattern: str) -> re.Pattern[str]:
    body = ".*".join(re.escape(part) for part in pattern.split("*"))
    return re.compile(body, re.DOTALL)


def matches(pattern: str, route: str) -> bool:
    """Return ``True`` if *route* is covered by *pattern*."""
    if pattern == route:
        return True
    return _compile(pattern).fullmatch(route) is not None


def matches_any(patterns: Iterable[str], route: str) -> bool:
    """Return ``True`` if any of *patterns* covers *route*."""
    return any(matches(pattern, route) for pattern in patterns)


__all__ = ["matches", "matches_any"]
