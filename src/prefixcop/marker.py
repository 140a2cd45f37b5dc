"""The ``require_prefix`` marker applied to interfaces in checked projects.

The checker reads the marker statically from source, so the decorator
itself does almost nothing at runtime: it records the prefix on the
class and hands the class back unchanged.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeVar, overload

_T = TypeVar("_T", bound=type)

PREFIX_ATTRIBUTE = "__required_prefix__"


@overload
def require_prefix(prefix: _T) -> _T: ...


@overload
def require_prefix(prefix: str | None = None) -> Callable[[_T], _T]: ...


def require_prefix(prefix: str | type | None = None) -> object:
    """Mark an interface whose concrete implementors must start with *prefix*.

    Usage::

        @require_prefix("Log")
        class Loggable(Protocol): ...

    A bare ``@require_prefix`` (or one without a prefix) is accepted at
    runtime but reported by ``prefixcop check`` as a malformed marker.
    """
    if isinstance(prefix, type):
        setattr(prefix, PREFIX_ATTRIBUTE, None)
        return prefix

    def decorate(cls: _T) -> _T:
        setattr(cls, PREFIX_ATTRIBUTE, prefix)
        return cls

    return decorate
