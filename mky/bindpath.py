"""
Dotted bind path resolution ("user.profile.age") against data items.

Each path segment is looked up by an accessor chosen from the shape of
the current value:
- keyed collections (mappings, lists, tuples) go through KeyedAccess;
- structured objects go through ObjectAccess
  (field → getX() accessor → dynamic attribute read);
- scalars stop the traversal and are returned as-is.
"""

from __future__ import annotations

import inspect
import re
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from typing import Any, Optional

from .errors import VariableNotFound

_SCALARS = (str, bytes, bytearray, int, float, complex, bool, type(None))

# ASCII integer segments only: "1_0", " 1" or "²" are plain keys
_INDEX_RE = re.compile(r"-?[0-9]+")

_MISSING = object()


class Access(ABC):
    """Lookup of one path segment on a value of a given shape."""

    kind: str = ""

    @abstractmethod
    def lookup(self, value: Any, segment: str) -> Any:
        """Returns the segment's value or _MISSING."""
        ...


class KeyedAccess(Access):
    kind = "array"

    def lookup(self, value: Any, segment: str) -> Any:
        index = int(segment) if _INDEX_RE.fullmatch(segment) else None
        if isinstance(value, Mapping):
            if segment in value:
                return value[segment]
            # numeric keys written as path text
            if index is not None and index in value:
                return value[index]
            return _MISSING
        if index is not None and 0 <= index < len(value):
            return value[index]
        return _MISSING


class ObjectAccess(Access):
    kind = "object"

    def lookup(self, value: Any, segment: str) -> Any:
        # (a) directly exposed field
        fields = _plain_attr(value, "__dict__")
        if isinstance(fields, dict) and segment in fields:
            return fields[segment]
        if segment in _slot_names(type(value)):
            found = _plain_attr(value, segment)
            if found is not _MISSING:
                return found

        # (b) getX() accessor, declared on the object itself (never via __getattr__)
        if segment:
            name = "get" + segment[0].upper() + segment[1:]
            if inspect.getattr_static(value, name, _MISSING) is not _MISSING:
                getter = getattr(value, name)
                if callable(getter):
                    return getter()

        # (c) dynamic read: properties, __getattr__
        try:
            return getattr(value, segment)
        except (AttributeError, LookupError):
            return _MISSING


def _plain_attr(value: Any, name: str) -> Any:
    # bypasses __getattr__
    try:
        return object.__getattribute__(value, name)
    except AttributeError:
        return _MISSING


def _slot_names(cls: type) -> set:
    names = set()
    for klass in cls.__mro__:
        slots = klass.__dict__.get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        names.update(slots)
    return names


KEYED = KeyedAccess()
OBJECT = ObjectAccess()


def access_for(value: Any) -> Optional[Access]:
    """Accessor matching the shape of value, None for scalars."""
    if isinstance(value, _SCALARS):
        return None
    if isinstance(value, (Mapping, Sequence)):
        return KEYED
    return OBJECT


def resolve(root: Any, path: str, template: str = "") -> Any:
    """
    Resolves a dotted path against root.

    Args:
        root: Current data item
        path: Dotted path, e.g. "user.profile.age"
        template: Template identifier reported in errors

    Returns:
        The resolved value; traversal stops early at a scalar

    Raises:
        VariableNotFound: A segment is missing from a collection or object
    """
    value = root
    for segment in path.split("."):
        access = access_for(value)
        if access is None:
            break
        found = access.lookup(value, segment)
        if found is _MISSING:
            raise VariableNotFound(access.kind, segment, template)
        value = found
    return value


__all__ = ["Access", "KeyedAccess", "ObjectAccess", "access_for", "resolve"]
