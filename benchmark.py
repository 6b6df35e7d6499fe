"""
Benchmark: mapdiff vs existing structured diff tools.

This benchmark compares mapdiff against:
    1. deepdiff — popular Python structural diff library
    2. dictdiffer — lightweight dict comparison

The point is NOT "we're faster" — the point is:
    mapdiff returns a patch TREE mirroring the inputs, where every key is
    classified, alongside flat added/removed summaries at every level.

Install the comparison tools with:  pip install -e .[bench]
"""

import sys
import os
import time
from dataclasses import dataclass

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from mapdiff import compare, changes, summary, to_json


# ═══════════════════════════════════════════════════════════════════
#  TEST DATA
# ═══════════════════════════════════════════════════════════════════

DEPLOY_A = {
    "metadata": {"name": "api", "namespace": "prod", "labels": {"tier": "backend"}},
    "spec": {
        "replicas": 3,
        "strategy": {"type": "RollingUpdate", "max_surge": 1},
        "container": {
            "image": "registry.local/api:1.4.2",
            "env": {"LOG_LEVEL": "warn", "DB_POOL": "10", "FEATURE_X": "off"},
            "ports": [8080, 9090],
            "resources": {"cpu": "500m", "memory": "512Mi"},
        },
    },
}

DEPLOY_B = {
    "metadata": {"name": "api", "namespace": "prod", "labels": {"tier": "backend", "team": "core"}},
    "spec": {
        "replicas": 5,                                         # Changed
        "strategy": {"type": "RollingUpdate", "max_surge": 1},
        "container": {
            "image": "registry.local/api:1.5.0",               # Changed
            "env": {"LOG_LEVEL": "debug", "DB_POOL": "10"},    # Changed, removed
            "ports": [8080],                                   # Changed (opaque list)
            "resources": {"cpu": "1", "memory": "512Mi"},      # Changed
        },
        "probe": {"path": "/health", "period": 10},            # New key
    },
}


@dataclass(frozen=True)
class Account:
    id: int
    email: str
    plan: str
    limits: dict


ACCOUNTS_A = {i: Account(i, f"user{i}@example.com", "free", {"seats": 1}) for i in range(200)}
ACCOUNTS_B = {
    i: Account(i, f"user{i}@example.com", "pro" if i % 7 == 0 else "free",
               {"seats": 5 if i % 7 == 0 else 1})
    for i in range(10, 210)
}


def _try_import(name):
    """Safely attempt to import an optional dependency by name."""
    import importlib
    try:
        return importlib.import_module(name)
    except ImportError:
        return None


def _timed(fn, *args):
    t0 = time.perf_counter()
    result = fn(*args)
    return result, time.perf_counter() - t0


# ═══════════════════════════════════════════════════════════════════
#  BENCHMARKS
# ═══════════════════════════════════════════════════════════════════

def benchmark_deployment_diff():
    """Patch shape and timing on a realistic nested config."""
    print("=" * 70)
    print("  §1  DEPLOYMENT CONFIG DIFF")
    print("=" * 70)
    print()

    patch, dt = _timed(compare, DEPLOY_A, DEPLOY_B)
    counts = summary(patch)

    print(f"  Top-level verdict: {patch.changed.value}")
    print(f"  Leaf changes:      {counts}")
    for entry in changes(patch):
        print(f"    {entry!r}")
    print(f"  Time:              {dt*1000:.3f}ms")
    print(f"  JSON size:         {len(to_json(patch))} bytes")
    print()


def benchmark_records():
    """Maps of dataclass records: field-level detail per changed record."""
    print("=" * 70)
    print("  §2  RECORD COLLECTION DIFF")
    print("=" * 70)
    print()

    patch, dt = _timed(compare, ACCOUNTS_A, ACCOUNTS_B)
    counts = summary(patch)

    print(f"  Accounts added:    {sum(1 for e in changes(patch) if len(e.path) == 1 and e.changed.value == 'added')}")
    print(f"  Accounts removed:  {sum(1 for e in changes(patch) if len(e.path) == 1 and e.changed.value == 'removed')}")
    print(f"  Field changes:     {sum(1 for e in changes(patch) if len(e.path) > 1)}")
    print(f"  Leaf changes:      {counts}")
    print(f"  Time:              {dt*1000:.3f}ms")
    print()


def benchmark_vs_others():
    """Compare with deepdiff and dictdiffer (if available)."""
    print("=" * 70)
    print("  §3  COMPARISON WITH EXISTING TOOLS")
    print("=" * 70)
    print()

    deepdiff = _try_import("deepdiff")
    dictdiffer = _try_import("dictdiffer")

    patch, dt = _timed(compare, DEPLOY_A, DEPLOY_B)
    print(f"  mapdiff:")
    print(f"    Leaf changes:   {sum(summary(patch).values())}")
    print(f"    Shape:          patch tree + per-level added/removed")
    print(f"    Time:           {dt*1000:.3f}ms")
    print()

    if deepdiff:
        dd_result, dd_time = _timed(deepdiff.DeepDiff, DEPLOY_A, DEPLOY_B)
        dd_changes = sum(len(v) if hasattr(v, "__len__") else 1 for v in dd_result.values())
        print(f"  deepdiff:")
        print(f"    Changes found:  {dd_changes}")
        print(f"    Shape:          flat report keyed by change kind")
        print(f"    Time:           {dd_time*1000:.3f}ms")
    else:
        print(f"  deepdiff:         NOT INSTALLED (pip install deepdiff)")
    print()

    if dictdiffer:
        dd_diffs, dd_time = _timed(lambda a, b: list(dictdiffer.diff(a, b)), DEPLOY_A, DEPLOY_B)
        print(f"  dictdiffer:")
        print(f"    Diffs found:    {len(dd_diffs)}")
        print(f"    Shape:          flat list of (op, path, values)")
        print(f"    Time:           {dd_time*1000:.3f}ms")
    else:
        print(f"  dictdiffer:       NOT INSTALLED (pip install dictdiffer)")
    print()


def benchmark_scaling():
    """Test how compare scales with map size and nesting depth."""
    print("=" * 70)
    print("  §4  SCALING")
    print("=" * 70)
    print()

    for n in [10, 100, 1000, 10000]:
        a = {f"key_{i}": i for i in range(n)}
        b = {f"key_{i}": i + (i % 10 == 0) for i in range(n)}
        _, dt = _timed(compare, a, b)
        print(f"  Map size {n:>6}: time={dt*1000:>8.2f}ms")

    print()

    for depth in [10, 50, 100, 200]:
        a = b = "leaf"
        for i in range(depth):
            a = {"child": a, "level": i}
            b = {"child": b, "level": i}
        b = {**b, "level": -1}
        _, dt = _timed(compare, a, b)
        print(f"  Depth    {depth:>6}: time={dt*1000:>8.2f}ms")

    print()


def main():
    print()
    print("╔══════════════════════════════════════════════════════════════════════╗")
    print("║          MAPDIFF — BENCHMARK SUITE                                  ║")
    print("║          mapdiff v0.1.0                                             ║")
    print("╚══════════════════════════════════════════════════════════════════════╝")
    print()

    benchmark_deployment_diff()
    benchmark_records()
    benchmark_vs_others()
    benchmark_scaling()


if __name__ == "__main__":
    main()
