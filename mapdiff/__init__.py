"""
mapdiff
=======

Calculates the difference between two (nested) maps, and returns a patch
describing what happened to every key.

    compare({"my": 1}, {"my": 1})      → Equal({"my": 1})
    compare({"a": 1}, {})              → MapChange({"a": Removed(1)})
    compare({}, {"b": 2})              → MapChange({"b": Added(2)})
    compare({"b": 3}, {"b": 2})        → MapChange({"b": PrimitiveChange(3 → 2)})

Nested maps are compared recursively; dataclasses and namedtuples are
compared field by field when they are of the same type.  The comparison
is pure, deterministic and uses strict equality (1 and 1.0 differ).
"""

from mapdiff.core import (
    # Patch types
    Change,
    Patch,
    Equal,
    Added,
    Removed,
    PrimitiveChange,
    MapChange,
    # Comparison
    Differ,
    compare,
    strictly_equal,
    is_keyed,
    is_mapping,
    record_tag,
    record_fields,
)
from mapdiff.errors import MapDiffError, PatchFormatError
from mapdiff.formats import from_json, to_json, from_python, to_python
from mapdiff.report import ChangeEntry, changes, summary, has_changes

__version__ = "0.1.0"
__all__ = [
    "Change", "Patch", "Equal", "Added", "Removed", "PrimitiveChange", "MapChange",
    "Differ", "compare", "strictly_equal", "is_keyed", "is_mapping",
    "record_tag", "record_fields",
    "MapDiffError", "PatchFormatError",
    "from_json", "to_json", "from_python", "to_python",
    "ChangeEntry", "changes", "summary", "has_changes",
]
