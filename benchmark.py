"""
Benchmark: structdiff array strategies and best_diff.

Compares, on configuration-like documents:
    1. diff with the LCS strategy (default)
    2. diff with the linear strategy (use_lcs=False)
    3. best_diff (three LCS runs at similarity 0.3 / 0.5 / 0.8)

Reports change counts and wall time, then how each strategy scales
with array length.  The point is the trade-off: LCS finds the
smallest, most readable diff for reordered or edited records at
O(n·m); linear is O(n) but reports shifted arrays position by position.
"""

import random
import sys
import os
import time

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from structdiff import best_diff, diff


# ═══════════════════════════════════════════════════════════════════
#  TEST DATA
# ═══════════════════════════════════════════════════════════════════

DEPLOYED = {
    "service": {"name": "checkout", "replicas": 3, "port": 8443},
    "env": [
        {"name": "LOG_LEVEL", "value": "warn"},
        {"name": "DB_HOST", "value": "db.internal"},
        {"name": "CACHE_TTL", "value": "300"},
    ],
    "ports": [8443, 9090],
    "labels": {"team": "payments", "tier": "backend"},
}

INTENDED = {
    "service": {"name": "checkout", "replicas": 5, "port": 8443},
    "env": [
        {"name": "FEATURE_FLAGS", "value": "on"},  # inserted at head
        {"name": "LOG_LEVEL", "value": "info"},
        {"name": "DB_HOST", "value": "db.internal"},
        {"name": "CACHE_TTL", "value": "300"},
    ],
    "ports": [8443, 9090, 9100],
    "labels": {"team": "payments", "tier": "backend", "canary": "true"},
}


def make_records(n: int, seed: int) -> list:
    rng = random.Random(seed)
    return [
        {"id": i, "name": f"user{i}", "score": rng.randint(0, 100), "active": rng.random() > 0.2}
        for i in range(n)
    ]


def mutate(records: list, seed: int) -> list:
    """Edit ~10% of records, drop a few, insert a few at the head."""
    rng = random.Random(seed)
    out = [dict(r) for r in records]
    for r in rng.sample(out, max(1, len(out) // 10)):
        r["score"] = r["score"] + 1
    for _ in range(max(1, len(out) // 50)):
        out.pop(rng.randrange(len(out)))
    for k in range(max(1, len(out) // 50)):
        out.insert(0, {"id": -k - 1, "name": "new", "score": 0, "active": True})
    return out


def _timed(fn, *args, **kwargs):
    start = time.perf_counter()
    result = fn(*args, **kwargs)
    return result, time.perf_counter() - start


# ═══════════════════════════════════════════════════════════════════
#  BENCHMARKS
# ═══════════════════════════════════════════════════════════════════

def benchmark_config_drift():
    """Deployed vs intended service configuration."""
    print("=" * 70)
    print("  §1  CONFIG DRIFT")
    print("=" * 70)
    print()

    runs = [
        ("diff (lcs)", diff, {}),
        ("diff (linear)", diff, {"use_lcs": False}),
        ("best_diff", best_diff, {}),
    ]
    for label, fn, kwargs in runs:
        changes, elapsed = _timed(fn, DEPLOYED, INTENDED, **kwargs)
        print(f"  {label:<15} {len(changes):>3} change(s)  {elapsed * 1000:.3f}ms")
        for entry in changes:
            print(f"      {list(entry)}")
        print()


def benchmark_scaling():
    """Cost of each strategy as record arrays grow."""
    print("=" * 70)
    print("  §2  SCALING")
    print("=" * 70)
    print()
    print(f"  {'n':>6}  {'lcs changes':>12} {'lcs ms':>9}  "
          f"{'linear changes':>15} {'linear ms':>10}  {'best ms':>9}")

    for n in (10, 50, 100, 200, 400):
        a = {"records": make_records(n, seed=n)}
        b = {"records": mutate(a["records"], seed=n + 1)}

        lcs_changes, lcs_time = _timed(diff, a, b)
        lin_changes, lin_time = _timed(diff, a, b, use_lcs=False)
        _, best_time = _timed(best_diff, a, b)

        print(f"  {n:>6}  {len(lcs_changes):>12} {lcs_time * 1000:>9.1f}  "
              f"{len(lin_changes):>15} {lin_time * 1000:>10.1f}  {best_time * 1000:>9.1f}")
    print()


if __name__ == "__main__":
    benchmark_config_drift()
    benchmark_scaling()
