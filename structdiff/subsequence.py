"""
structdiff.subsequence — Similarity-driven longest common subsequence.

The array differ needs to know which elements of two sequences are
"the same element", possibly modified, and which were simply inserted
or removed.  Strict equality is too coarse for sequences of records:
{"id": 1, "name": "a"} edited to {"id": 1, "name": "b"} should be a
modification of one element, not a removal plus an addition.

SIMILARITY
──────────
    similar(x, y) holds when
        • x and y are deeply equal, or
        • both are maps and
              |{k ∈ keys(x) ∪ keys(y) : x[k] ≡ y[k]}|
              ─────────────────────────────────────  ≥  threshold
                      |keys(x) ∪ keys(y)|
        • both are sequences and the same ratio, taken over positions
          of the longer sequence, reaches the threshold.

    Unequal scalars, and values of different shapes, are never similar.

MATCHING
────────
Classic O(n·m) LCS table where "equal" is replaced by similar():

        L[i][j] = L[i-1][j-1] + 1                 if similar(a[i-1], b[j-1])
                = max(L[i-1][j], L[i][j-1])       otherwise

Trace-back from L[n][m] yields pairs (i, j), strictly increasing in
both coordinates.  When skipping an element is ambiguous, the element
of `a` is skipped first, which keeps the result deterministic.
"""

import logging
from typing import Any

from .options import ComparisonOptions, VerdictKind
from .paths import WILDCARD, Path, append_index, append_key, root_path
from .values import Shape, compare_values, comparable, shape_of

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
#  DEEP EQUALITY
# ═══════════════════════════════════════════════════════════════════

def deep_equal(obj1: Any, obj2: Any, options: ComparisonOptions, path: Path = None) -> bool:
    """
    Structural equality under the comparison options.

    The custom comparator, when configured, is consulted at every node
    exactly as the differ would consult it.  A REPLACE verdict counts
    as equal only when its change list is empty.  Traversal uses an
    explicit stack, so nesting depth is not limited by recursion.
    """
    if path is None:
        path = root_path(options)
    # paths only matter to a comparator
    tracked = options.comparison is not None
    stack = [(path, obj1, obj2)]
    while stack:
        path, x, y = stack.pop()

        verdict = options.consult(path, x, y)
        if verdict.kind is VerdictKind.EQUAL:
            continue
        if verdict.kind is VerdictKind.NOT_EQUAL:
            return False
        if verdict.kind is VerdictKind.REPLACE:
            if verdict.changes:
                return False
            continue

        if not tracked and x is y:
            continue
        if x is None or y is None:
            if x is y:
                continue
            return False
        if not comparable(x, y, options):
            return False

        shape = shape_of(x)
        if shape is Shape.MAP:
            if len(x) != len(y) or any(k not in y for k in x):
                return False
            for k in x:
                stack.append((append_key(path, k, options) if tracked else None, x[k], y[k]))
        elif shape is Shape.SEQUENCE:
            if len(x) != len(y):
                return False
            for i, (xi, yi) in enumerate(zip(x, y)):
                stack.append((append_index(path, i, options) if tracked else None, xi, yi))
        elif not compare_values(x, y, options):
            return False
    return True


# ═══════════════════════════════════════════════════════════════════
#  SIMILARITY
# ═══════════════════════════════════════════════════════════════════

def _ratio(matches: int, total: int) -> float:
    if total == 0:
        return 1.0
    return matches / total


def similar(a: Any, b: Any, options: ComparisonOptions, path: Path = None) -> bool:
    """Whether two sequence elements should be aligned with each other."""
    if path is None:
        path = root_path(options)
    if deep_equal(a, b, options, path):
        return True

    sa, sb = shape_of(a), shape_of(b)
    if sa is not sb:
        return False

    if sa is Shape.MAP:
        keys = list(a)
        keys.extend(k for k in b if k not in a)
        matches = sum(
            1 for k in keys
            if k in a and k in b
            and deep_equal(a[k], b[k], options, append_key(path, k, options))
        )
        return _ratio(matches, len(keys)) >= options.similarity

    if sa is Shape.SEQUENCE:
        matches = sum(
            1 for i, (x, y) in enumerate(zip(a, b))
            if deep_equal(x, y, options, append_index(path, i, options))
        )
        return _ratio(matches, max(len(a), len(b))) >= options.similarity

    return False


# ═══════════════════════════════════════════════════════════════════
#  LONGEST COMMON SUBSEQUENCE
# ═══════════════════════════════════════════════════════════════════

def lcs(a, b, options: ComparisonOptions, prefix: Path = None) -> list[tuple[int, int]]:
    """
    Maximal monotonic matching of similar elements.

    Returns [(i, j), ...] in increasing order of both i and j.
    The comparator sees element comparisons at the wildcard path
    `prefix[*]`, e.g. "items[*].name".
    """
    n, m = len(a), len(b)
    if n == 0 or m == 0:
        return []

    if prefix is None:
        prefix = root_path(options)
    path = append_index(prefix, WILDCARD, options)

    match = [[similar(a[i], b[j], options, path) for j in range(m)] for i in range(n)]

    table = [[0] * (m + 1) for _ in range(n + 1)]
    for i in range(1, n + 1):
        row, above = table[i], table[i - 1]
        for j in range(1, m + 1):
            if match[i - 1][j - 1]:
                row[j] = above[j - 1] + 1
            else:
                row[j] = max(above[j], row[j - 1])

    pairs: list[tuple[int, int]] = []
    i, j = n, m
    while i > 0 and j > 0:
        if match[i - 1][j - 1]:
            pairs.append((i - 1, j - 1))
            i -= 1
            j -= 1
        elif table[i][j - 1] > table[i - 1][j]:
            j -= 1
        else:
            i -= 1
    pairs.reverse()

    logger.debug("lcs over %dx%d table matched %d pair(s)", n, m, len(pairs))
    return pairs
