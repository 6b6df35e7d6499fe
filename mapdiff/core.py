"""
mapdiff.core — Recursive Map Difference
=======================================

DESIGN
══════

§1  THE PROBLEM
───────────────

Configuration diffing, state reconciliation and audit trails all ask the
same question of two nested mappings: WHAT happened to each key?

One of four things can happen to a key:

    • It remains the same                         → EQUAL
    • It was not in the old map, but is in the new → ADDED
    • It was in the old map, but is no longer      → REMOVED
    • It is in both maps, but its value changed    → PRIMITIVE_CHANGE
                                                     or MAP_CHANGE

A change is a MAP_CHANGE when both the old and the new value are
themselves keyed values, in which case the comparison recurses into
them.  Every other change is a PRIMITIVE_CHANGE: the two values are
reported side by side, with no attempt to look inside them.


§2  VALUES
──────────

A value is one of two kinds:

    (1)  Keyed       a Mapping (dict, OrderedDict, MappingProxyType, ...)
                     or a Record
    (2)  Primitive   anything else: numbers, strings, bytes, lists,
                     tuples, sets, opaque objects

A Record is a keyed value that also carries a type tag identifying its
shape.  Out of the box, dataclass instances and namedtuples are Records
whose tag is their class.  Two Records are compared field by field only
when their tags are equal.

Sequences are deliberately primitive: [1, 2, 3] vs [1, 3] is reported as
a single PRIMITIVE_CHANGE.


§3  THE DECISION PROCEDURE
──────────────────────────

compare(old, new) checks, IN THIS ORDER:

    1.  old == new (strict deep equality)        → Equal(old)
    2.  either side is not keyed                 → PrimitiveChange(old, new)
    3.  Record vs Record, tags differ            → PrimitiveChange(old, new)
        Record vs plain mapping                  → PrimitiveChange(old, new)
    4.  Record vs Record, same tag               → compare the fields as
                                                   mappings, then attach the
                                                   tag; added/removed hold
                                                   the WHOLE new/old records
    5.  mapping vs mapping                       → per-key children over
                                                   the union of keys

The order is load-bearing: equality must be decided before any
structural branching, so that equal nested values never produce a
MapChange wrapper.

In step 5, a result whose children are all Equal collapses to
Equal(old).  Otherwise the MapChange carries:

    value     every key of both inputs → its child patch
    added     new-side values of keys that are new-only or differ
    removed   old-side values of keys that are old-only or differ

Keys with Equal children appear in neither added nor removed.


§4  EQUALITY
────────────

Equality is STRICT: no semantic coercion between types.

    1 vs 1.0         → different  (Python says 1 == 1.0)
    True vs 1        → different  (Python says True == 1)
    [1] vs (1,)      → different

Identical objects are always equal, which keeps compare(v, v) an Equal
patch even for values like float("nan") that are not == to themselves.

Cyclic inputs recurse without bound; callers that may hold
self-referential structures must check for cycles first.
"""

import dataclasses
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
#  PATCH TYPES
# ═══════════════════════════════════════════════════════════════════

class Change(Enum):
    """What happened to a value.  The values are the wire names."""
    EQUAL = "equal"
    ADDED = "added"
    REMOVED = "removed"
    PRIMITIVE_CHANGE = "primitive_change"
    MAP_CHANGE = "map_change"


class Patch:
    """Base class for comparison results.  Not instantiated directly."""
    __slots__ = ()

    changed: Change

    @property
    def is_equal(self) -> bool:
        return self.changed is Change.EQUAL


@dataclass(frozen=True, slots=True)
class Equal(Patch):
    """Both sides were equal."""
    value: Any

    changed = Change.EQUAL


@dataclass(frozen=True, slots=True)
class Added(Patch):
    """The key only exists on the new side.  Only found inside MapChange.value."""
    value: Any

    changed = Change.ADDED


@dataclass(frozen=True, slots=True)
class Removed(Patch):
    """The key only exists on the old side.  Only found inside MapChange.value."""
    value: Any

    changed = Change.REMOVED


@dataclass(frozen=True, slots=True)
class PrimitiveChange(Patch):
    """
    The value was replaced as a whole.

    Produced when at least one side is not keyed, or when two keyed
    values are of different kinds (different record tags, or a record
    against a plain mapping).
    """
    removed: Any
    added: Any

    changed = Change.PRIMITIVE_CHANGE


@dataclass(frozen=True, slots=True)
class MapChange(Patch):
    """
    Two keyed values differ in at least one key.

    `value` maps every key of either side to its child patch.  For plain
    mappings `added`/`removed` hold only the differing keys; for records
    they hold the complete new/old records and `type_tag` is the shared
    record type.
    """
    value: dict
    added: Any
    removed: Any
    type_tag: Optional[Any] = None

    changed = Change.MAP_CHANGE

    def __repr__(self) -> str:
        tag = f", type_tag={tag_name(self.type_tag)}" if self.type_tag is not None else ""
        if len(self.value) <= 3:
            return f"MapChange({self.value!r}{tag})"
        return f"MapChange({{...}} len={len(self.value)}{tag})"


# ═══════════════════════════════════════════════════════════════════
#  VALUE PREDICATES (defaults)
# ═══════════════════════════════════════════════════════════════════

def _is_dataclass_instance(value: Any) -> bool:
    return dataclasses.is_dataclass(value) and not isinstance(value, type)


def _is_namedtuple(value: Any) -> bool:
    return isinstance(value, tuple) and hasattr(type(value), "_fields")


def is_mapping(value: Any) -> bool:
    """True for any collections.abc.Mapping."""
    return isinstance(value, Mapping)


def record_tag(value: Any) -> Optional[type]:
    """
    The type tag of a record, or None if `value` is not a record.

    Dataclass instances and namedtuples are records tagged by their class.
    """
    if _is_dataclass_instance(value) or _is_namedtuple(value):
        return type(value)
    return None


def is_keyed(value: Any) -> bool:
    """True for mappings and records: the values compare() looks inside."""
    return record_tag(value) is not None or is_mapping(value)


def record_fields(value: Any) -> dict[str, Any]:
    """
    The fields of a record as a flat mapping.

    Field values are taken as-is (not deep-converted the way
    dataclasses.asdict would), so nested records keep their tags.
    """
    if _is_namedtuple(value):
        return dict(zip(type(value)._fields, value))
    return {f.name: getattr(value, f.name) for f in dataclasses.fields(value)}


def strictly_equal(a: Any, b: Any) -> bool:
    """
    Deep equality without type coercion.

    Values of different concrete types are never equal, at any depth.
    Mappings, lists, tuples, sets and dataclass instances are compared
    element by element; everything else falls back to ==.

    Set members are paired up by hash lookup and the pairs must then be
    strictly equal, so frozenset({1}) and frozenset({1.0}) differ.
    Mapping keys are matched by lookup the way the mapping itself matches
    them: 1 and True are the same key.  Only the values are compared
    strictly.
    """
    if a is b:
        return True
    if type(a) is not type(b):
        return False

    if isinstance(a, Mapping):
        if len(a) != len(b):
            return False
        for key, value in a.items():
            if key not in b or not strictly_equal(value, b[key]):
                return False
        return True

    if isinstance(a, (list, tuple)):
        return len(a) == len(b) and all(strictly_equal(x, y) for x, y in zip(a, b))

    if isinstance(a, (set, frozenset)):
        if len(a) != len(b):
            return False
        # A set holds at most one member == x, so this finds b's counterpart
        members = {item: item for item in b}
        return all(item in members and strictly_equal(item, members[item]) for item in a)

    if _is_dataclass_instance(a):
        # Same fields the dataclass's own __eq__ looks at
        return all(
            strictly_equal(getattr(a, f.name), getattr(b, f.name))
            for f in dataclasses.fields(a)
            if f.compare
        )

    return a == b


def tag_name(tag: Any) -> str:
    """Readable name of a record tag: the class qualname, or str() of anything else."""
    return getattr(tag, "__qualname__", None) or str(tag)


# Used by Differ for hooks passed as None
_DEFAULT_HOOKS = {
    "equal": strictly_equal,
    "record_tag": record_tag,
    "record_fields": record_fields,
}


# ═══════════════════════════════════════════════════════════════════
#  DIFFER
# ═══════════════════════════════════════════════════════════════════

class Differ:
    """
    Compares two values and produces a Patch.

    The predicates that decide what counts as equal, as keyed and as a
    record can be swapped out for host types that the defaults don't know
    about.  Passing None (or nothing) keeps the default:

        equal(a, b)            deep equality           (strictly_equal)
        is_keyed(v)            look inside v?          (mapping or tagged)
        record_tag(v)          record tag or None      (record_tag)
        record_fields(v)       record → field mapping  (record_fields)

    The default is_keyed accepts any mapping plus whatever this differ's
    record_tag tags.  A keyed value without a tag is walked as a Mapping.
    Differ instances hold no mutable state and may be shared freely.
    """
    __slots__ = ("_equal", "_is_keyed", "_record_tag", "_record_fields")

    def __init__(
        self,
        equal: Optional[Callable[[Any, Any], bool]] = None,
        is_keyed: Optional[Callable[[Any], bool]] = None,
        record_tag: Optional[Callable[[Any], Any]] = None,
        record_fields: Optional[Callable[[Any], Mapping]] = None,
    ):
        self._equal = equal if equal is not None else _DEFAULT_HOOKS["equal"]
        self._record_tag = record_tag if record_tag is not None else _DEFAULT_HOOKS["record_tag"]
        self._record_fields = (
            record_fields if record_fields is not None else _DEFAULT_HOOKS["record_fields"]
        )
        self._is_keyed = is_keyed if is_keyed is not None else self._mapping_or_tagged

    def _mapping_or_tagged(self, value: Any) -> bool:
        return self._record_tag(value) is not None or is_mapping(value)

    def is_keyed(self, value: Any) -> bool:
        return self._is_keyed(value)

    def compare(self, old: Any, new: Any) -> Patch:
        """Compare `old` against `new`.  See the module docstring, §3."""
        if self._equal(old, new):
            return Equal(old)

        if not (self.is_keyed(old) and self.is_keyed(new)):
            return PrimitiveChange(removed=old, added=new)

        old_tag = self._record_tag(old)
        new_tag = self._record_tag(new)

        if old_tag is None and new_tag is None:
            return self._compare_mappings(old, new)

        if old_tag is None or new_tag is None:
            logger.debug(
                "Record %s compared against a plain mapping; reporting a primitive change",
                tag_name(old_tag if old_tag is not None else new_tag),
            )
            return PrimitiveChange(removed=old, added=new)

        if old_tag != new_tag:
            logger.debug(
                "Record tags differ (%s vs %s); reporting a primitive change",
                tag_name(old_tag), tag_name(new_tag),
            )
            return PrimitiveChange(removed=old, added=new)

        return self._compare_records(old, new, old_tag)

    def _compare_records(self, old: Any, new: Any, tag: Any) -> Patch:
        fields_patch = self._compare_mappings(self._record_fields(old), self._record_fields(new))
        if fields_patch.is_equal:
            return Equal(old)
        return MapChange(value=fields_patch.value, added=new, removed=old, type_tag=tag)

    def _compare_mappings(self, old: Mapping, new: Mapping) -> Patch:
        children: dict = {}
        added: dict = {}
        removed: dict = {}
        all_equal = True

        for key, old_value in old.items():
            if key not in new:
                children[key] = Removed(old_value)
                removed[key] = old_value
                all_equal = False
                continue

            new_value = new[key]
            # compare() already collapses equal nested maps to Equal(old_value)
            child = self.compare(old_value, new_value)
            children[key] = child
            if not child.is_equal:
                added[key] = new_value
                removed[key] = old_value
                all_equal = False

        for key, new_value in new.items():
            if key not in old:
                children[key] = Added(new_value)
                added[key] = new_value
                all_equal = False

        if all_equal:
            return Equal(old)
        return MapChange(value=children, added=added, removed=removed)


_default_differ = Differ()


def compare(old: Any, new: Any) -> Patch:
    """
    Compare two (nested) values and return the patch describing their
    difference.

        compare({"my": 1}, {"my": 1})
            → Equal({"my": 1})

        compare({"a": 1}, {})
            → MapChange({"a": Removed(1)}, added={}, removed={"a": 1})

        compare({"b": 3}, {"b": 2})
            → MapChange({"b": PrimitiveChange(removed=3, added=2)},
                        added={"b": 2}, removed={"b": 3})

        compare({"a": {}}, {"a": {"b": 1}})
            → MapChange({"a": MapChange({"b": Added(1)},
                                        added={"b": 1}, removed={})},
                        added={"a": {"b": 1}}, removed={"a": {}})

    Uses the default predicates; build a Differ to customise them.
    """
    return _default_differ.compare(old, new)
