"""
Stress tests / adversarial evaluation of mapdiff.

This script attempts to BREAK the claimed properties on random nested
structures:
  1. Reflexivity (compare(v, v) is Equal)
  2. Symmetry of classification
  3. Key-set completeness of every MapChange
  4. Added/removed exclusivity
  5. Collapse law (no MapChange with only Equal children)
  6. Record-tag guard
  7. Deep nesting

Run with:  python stress_test.py
"""

import copy
import random
import sys
import os
import time
from collections import namedtuple
from dataclasses import dataclass

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from mapdiff.core import (
    Change, MapChange, PrimitiveChange,
    compare, record_fields,
)
from mapdiff.report import changes


@dataclass(frozen=True)
class Node:
    name: object = None
    payload: object = None


@dataclass(frozen=True)
class Leaf:
    name: object = None
    payload: object = None


Pair = namedtuple("Pair", "left right")

KEYS = ["a", "b", "c", "d", "e", "x", "y"]
ATOMS = [0, 1, 1.0, 2, True, False, None, "a", "b", "", (1, 2), [1, 2], [1, 2.0]]


def check(name, condition, detail=""):
    status = "PASS" if condition else "FAIL"
    print(f"  [{status}] {name}" + (f"  ({detail})" if detail else ""))
    return condition


def random_value(depth=0, max_depth=3):
    """Generate a random value: atom, map or record."""
    if depth >= max_depth:
        return random.choice(ATOMS)

    kind = random.choice(["atom", "map", "map", "record"])
    if kind == "atom":
        return random.choice(ATOMS)
    if kind == "map":
        n = random.randint(0, 4)
        keys = random.sample(KEYS, n)
        return {k: random_value(depth + 1, max_depth) for k in keys}
    record_type = random.choice([Node, Leaf, Pair])
    return record_type(random_value(depth + 1, max_depth), random_value(depth + 1, max_depth))


def mutate(value, rate=0.3):
    """A variant of `value` sharing most of its structure."""
    if isinstance(value, dict):
        out = {}
        for k, v in value.items():
            roll = random.random()
            if roll < rate / 3:
                continue  # drop key
            out[k] = mutate(v, rate) if roll < rate else v
        if random.random() < rate:
            out[random.choice(KEYS)] = random_value(max_depth=2)
        return out
    if random.random() < rate:
        return random_value(max_depth=2)
    return value


def map_changes(patch, old, new):
    """Yield (map_change, old_fields, new_fields) for every MapChange in the tree."""
    if not isinstance(patch, MapChange):
        return
    if patch.type_tag is not None:
        old, new = record_fields(old), record_fields(new)
    yield patch, old, new
    for key, child in patch.value.items():
        if key in old and key in new:
            yield from map_changes(child, old[key], new[key])


def mirrored(p, q):
    swap = {Change.ADDED: Change.REMOVED, Change.REMOVED: Change.ADDED}
    if q.changed is not swap.get(p.changed, p.changed):
        return False
    if isinstance(p, MapChange):
        return p.value.keys() == q.value.keys() and all(
            mirrored(p.value[k], q.value[k]) for k in p.value
        )
    return True


def is_exclusive(node):
    """Equal keys are in neither summary, added-only/removed-only in one, changes in both."""
    if node.type_tag is not None:
        return True  # records carry the whole before/after values
    for key, child in node.value.items():
        in_added, in_removed = key in node.added, key in node.removed
        if child.changed is Change.EQUAL:
            ok = not in_added and not in_removed
        elif child.changed is Change.ADDED:
            ok = in_added and not in_removed
        elif child.changed is Change.REMOVED:
            ok = in_removed and not in_added
        else:
            ok = in_added and in_removed
        if not ok:
            return False
    return True


def check_properties(pairs):
    reflexive = symmetric = complete = exclusive = collapsed = 0

    for old, new in pairs:
        patch = compare(old, new)

        if compare(old, old).is_equal and compare(old, copy.deepcopy(old)).is_equal:
            reflexive += 1
        if mirrored(patch, compare(new, old)):
            symmetric += 1

        nodes = list(map_changes(patch, old, new))
        if all(set(node.value) == set(o) | set(n) for node, o, n in nodes):
            complete += 1
        if all(is_exclusive(node) for node, _, _ in nodes):
            exclusive += 1
        if all(not all(c.is_equal for c in node.value.values()) for node, _, _ in nodes):
            collapsed += 1

    n = len(pairs)
    check(f"Reflexivity ({n} values)", reflexive == n, f"{n - reflexive} failures")
    check(f"Symmetry of classification ({n} pairs)", symmetric == n, f"{n - symmetric} failures")
    check(f"Key-set completeness ({n} pairs)", complete == n, f"{n - complete} failures")
    check(f"Added/removed exclusivity ({n} pairs)", exclusive == n, f"{n - exclusive} failures")
    check(f"Collapse law ({n} pairs)", collapsed == n, f"{n - collapsed} failures")


def main():
    print("=" * 70)
    print("  §1  PROPERTIES — random pairs")
    print("=" * 70)

    random.seed(123)
    pairs = [(random_value(), random_value()) for _ in range(500)]
    check_properties(pairs)

    print()
    print("=" * 70)
    print("  §2  PROPERTIES — mutated pairs (mostly shared structure)")
    print("=" * 70)

    random.seed(456)
    mutated = []
    for _ in range(500):
        old = {k: random_value(1, 4) for k in random.sample(KEYS, 4)}
        mutated.append((old, mutate(old)))
    check_properties(mutated)

    leaves = sum(len(list(changes(compare(o, n)))) for o, n in mutated)
    print(f"  {leaves} leaf changes across {len(mutated)} mutated pairs")

    print()
    print("=" * 70)
    print("  §3  RECORD-TAG GUARD")
    print("=" * 70)

    random.seed(789)
    guard_failures = 0
    for _ in range(300):
        name, payload = random_value(2), random_value(2)
        for a, b in [(Node(name, payload), Leaf(name, payload)),
                     (Node(name, payload), Pair(name, payload)),
                     (Node(name, payload), {"name": name, "payload": payload})]:
            if not isinstance(compare(a, b), PrimitiveChange):
                guard_failures += 1
    check("Different record kinds never compared field by field",
          guard_failures == 0, f"{guard_failures} failures")

    print()
    print("=" * 70)
    print("  §4  STRICT EQUALITY TRAPS")
    print("=" * 70)

    check("1 vs 1.0 is a change", not compare({"a": 1}, {"a": 1.0}).is_equal)
    check("True vs 1 is a change", not compare(True, 1).is_equal)
    check("[1] vs (1,) is a change", not compare([1], (1,)).is_equal)
    nan = float("nan")
    check("nan vs itself is equal", compare({"v": nan}, {"v": nan}).is_equal)

    print()
    print("=" * 70)
    print("  §5  PERFORMANCE (wall-clock)")
    print("=" * 70)

    def make_deep(depth, leaf):
        v = {"leaf": leaf}
        for i in range(depth):
            v = {"child": v, "level": i}
        return v

    for depth in [10, 50, 100, 250]:
        a = make_deep(depth, "old")
        b = make_deep(depth, "new")
        t0 = time.perf_counter()
        compare(a, b)
        dt = time.perf_counter() - t0
        print(f"  Depth {depth}: {dt*1000:.3f}ms")

    for n in [100, 1000, 10000]:
        a = {f"key_{i}": {"v": i} for i in range(n)}
        b = {f"key_{i}": {"v": i + (i % 10 == 0)} for i in range(n)}
        t0 = time.perf_counter()
        compare(a, b)
        dt = time.perf_counter() - t0
        print(f"  Map size {n:>6}: {dt*1000:.2f}ms")

    print()
    print("=" * 70)
    print("  STRESS TEST SUMMARY")
    print("=" * 70)
    print("  If you see FAIL above, there's a bug.")
    print("  If everything is PASS, the implementation is correct")
    print("  for the tested cases (not a proof, but high confidence).")


if __name__ == "__main__":
    main()
