"""
mapdiff.report — Flatten a patch into path-addressed changes.

A patch is a tree mirroring the compared values.  Audit logs and review
UIs usually want the opposite view: a flat list of "what changed where".

    changes(compare({"db": {"port": 1}}, {"db": {"port": 2}, "x": 1}))
        → [PRIMITIVE_CHANGE at db/port, ADDED at x]

Only leaves are reported: Added, Removed and PrimitiveChange.  MapChange
nodes are descended into, Equal nodes are skipped.
"""

from dataclasses import dataclass
from typing import Iterator

from .core import Change, MapChange, Patch

# Leaf kinds counted by summary(), in report order
LEAF_CHANGES = (Change.ADDED, Change.REMOVED, Change.PRIMITIVE_CHANGE)


@dataclass(frozen=True, slots=True)
class ChangeEntry:
    """A single leaf change, located by the keys leading to it from the root."""
    path: tuple
    patch: Patch

    @property
    def changed(self) -> Change:
        return self.patch.changed

    def __repr__(self) -> str:
        path_str = "/".join(str(p) for p in self.path) or "(root)"
        return f"{self.changed.name} at {path_str}"


def changes(patch: Patch, path: tuple = ()) -> Iterator[ChangeEntry]:
    """
    Yield every leaf change of `patch`, depth-first, in key order.

    A PrimitiveChange at the root yields a single entry with an empty path.
    """
    if isinstance(patch, MapChange):
        for key, child in patch.value.items():
            yield from changes(child, path + (key,))
    elif not patch.is_equal:
        yield ChangeEntry(path, patch)


def summary(patch: Patch) -> dict[str, int]:
    """Count leaf changes by wire name.  Every leaf kind is present, possibly 0."""
    counts = {change.value: 0 for change in LEAF_CHANGES}
    for entry in changes(patch):
        counts[entry.changed.value] += 1
    return counts


def has_changes(patch: Patch) -> bool:
    """True unless the two compared values were equal."""
    return not patch.is_equal
