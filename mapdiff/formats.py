"""
mapdiff.formats — Convert patches to and from plain data.

Patches are in-memory objects.  Embedding applications that log, store or
send them need a plain form; this module provides one:

    Equal / Added / Removed   {"changed": "equal", "value": ...}
    PrimitiveChange           {"changed": "primitive_change",
                               "removed": ..., "added": ...}
    MapChange                 {"changed": "map_change",
                               "value": {key: <child>, ...},
                               "added": {...}, "removed": {...},
                               "type_tag": "Foo"}          (records only)

Records inside payloads become {"__tag__": "Foo", "__value__": {fields}}.
Rebuilding a patch from plain data keeps those payloads as plain dicts and
record tags as strings: the original classes are not recovered.
"""

import json
from collections.abc import Mapping
from typing import Any

from .core import (
    Added, Change, Equal, MapChange, Patch, PrimitiveChange, Removed,
    record_fields, record_tag, tag_name,
)
from .errors import PatchFormatError

TAG_KEY = "__tag__"
VALUE_KEY = "__value__"


# ═══════════════════════════════════════════════════════════════════
#  PATCH → PLAIN DATA
# ═══════════════════════════════════════════════════════════════════

def value_to_python(value: Any) -> Any:
    """
    Convert a compared value to plain data.

    Mapping:
        record      → {"__tag__": name, "__value__": {field: value}}
        mapping     → dict
        list/tuple  → list
        other       → unchanged

    Nested structures are converted recursively.
    """
    tag = record_tag(value)
    if tag is not None:
        return {
            TAG_KEY: tag_name(tag),
            VALUE_KEY: {k: value_to_python(v) for k, v in record_fields(value).items()},
        }
    if isinstance(value, Mapping):
        return {k: value_to_python(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [value_to_python(item) for item in value]
    return value


def to_python(patch: Patch) -> dict:
    """Convert a patch to its plain, JSON-compatible form."""
    if isinstance(patch, (Equal, Added, Removed)):
        return {"changed": patch.changed.value, "value": value_to_python(patch.value)}

    if isinstance(patch, PrimitiveChange):
        return {
            "changed": patch.changed.value,
            "removed": value_to_python(patch.removed),
            "added": value_to_python(patch.added),
        }

    if isinstance(patch, MapChange):
        out = {
            "changed": patch.changed.value,
            "value": {k: to_python(child) for k, child in patch.value.items()},
            "added": value_to_python(patch.added),
            "removed": value_to_python(patch.removed),
        }
        if patch.type_tag is not None:
            out["type_tag"] = tag_name(patch.type_tag)
        return out

    raise TypeError(f"Unknown Patch type: {type(patch)}")


def to_json(patch: Patch, **kwargs) -> str:
    """Convert a patch to a JSON string.  Keyword arguments go to json.dumps."""
    try:
        return json.dumps(to_python(patch), **kwargs)
    except (TypeError, ValueError) as exc:
        raise PatchFormatError(f"Patch is not JSON serializable: {exc}") from exc


# ═══════════════════════════════════════════════════════════════════
#  PLAIN DATA → PATCH
# ═══════════════════════════════════════════════════════════════════

def _field(data: Mapping, name: str, path: tuple) -> Any:
    try:
        return data[name]
    except KeyError:
        raise PatchFormatError(f"Missing {name!r} field", path) from None


def from_python(data: Any, path: tuple = ()) -> Patch:
    """
    Rebuild a patch from its plain form.

    Raises PatchFormatError when `data` is not a valid plain patch; the
    error's `path` locates the offending node.
    """
    if not isinstance(data, Mapping):
        raise PatchFormatError(f"Expected a mapping, got {type(data).__name__}", path)

    raw = _field(data, "changed", path)
    try:
        change = Change(raw)
    except (ValueError, TypeError):
        raise PatchFormatError(f"Unknown change kind {raw!r}", path) from None

    if change is Change.EQUAL:
        return Equal(_field(data, "value", path))
    if change is Change.ADDED:
        return Added(_field(data, "value", path))
    if change is Change.REMOVED:
        return Removed(_field(data, "value", path))
    if change is Change.PRIMITIVE_CHANGE:
        return PrimitiveChange(
            removed=_field(data, "removed", path),
            added=_field(data, "added", path),
        )

    children = _field(data, "value", path)
    if not isinstance(children, Mapping):
        raise PatchFormatError(
            f"Map change value must be a mapping, got {type(children).__name__}", path
        )
    return MapChange(
        value={k: from_python(child, path + (k,)) for k, child in children.items()},
        added=_field(data, "added", path),
        removed=_field(data, "removed", path),
        type_tag=data.get("type_tag"),
    )


def from_json(text: str) -> Patch:
    """Parse a JSON string into a patch."""
    try:
        data = json.loads(text)
    except ValueError as exc:
        raise PatchFormatError(f"Invalid JSON: {exc}") from exc
    return from_python(data)
