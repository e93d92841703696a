"""
structdiff.core — Structural diff of nested maps, sequences and scalars
========================================================================

§1  THE PROBLEM
───────────────

Given two nested values (configuration documents, API payloads,
records) produce an ordered list of change entries that turns the
first into the second:

    diff({"a": 1, "b": {"b1": 1, "b2": 2}},
         {"a": 1, "b": {}})
        → [["-", "b.b1", 1], ["-", "b.b2", 2]]

Each entry is one of

    ["+", path, value]          Add      (value only exists in target)
    ["-", path, value]          Remove   (value only exists in source)
    ["~", path, old, new]       Modify   (value replaced in place)

The result must be deterministic (map key order never matters), small
(similar records in arrays are recursed into, not replaced), and
applicable in order as a patch.


§2  DISPATCH ON SHAPE
─────────────────────

    diff(x, y) at path p:
        0. custom comparator verdict, if one is configured
        1. both None            → []
        2. exactly one None     → [~ p x y]
        3. not comparable       → [~ p x y]
        4. both sequences       → array strategy (§3)
        5. both maps            → removed keys, common keys, added keys,
                                  each partition sorted by str(key)
        6. both scalars         → [] if equal else [~ p x y]

The ordering in step 5 (removals, then recursion into common keys,
then additions) is part of the output contract.


§3  ARRAY STRATEGIES
────────────────────

LCS (default).  Align the arrays with a similarity-driven LCS (see
structdiff.subsequence).  Matched pairs are diffed recursively at the
source index; unmatched runs between matches become removals (tail first)
and additions (head first), indexed by position in the array as it is
being rewritten.  O(n·m) per array level.

Linear (use_lcs=False).  Compare position by position.  For arrays of
different length, two candidates are built: aligned from the front
(extra tail added or removed) and aligned from the back (extra head
added or removed).  The candidate with fewer entries wins, front on
ties.  O(n) per array level.


§4  BEST DIFF
─────────────

best_diff runs diff at similarity 0.3, 0.5 and 0.8 and keeps the
result with the fewest entries, preferring the lower threshold on
ties.  Useful when arrays contain records that were edited heavily.


§5  TRAVERSAL
─────────────

The differ never recurses in Python.  It runs a LIFO work stack whose
frames are pending comparisons, ready entries, and buffer markers used
by the linear strategy to build its two candidates side by side.  A
frame expands into its children in emission order and they are pushed
reversed, so entries come out exactly as a recursive walk would
produce them.  Nesting depth is bounded only by memory.
"""

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Optional

from .errors import UnsupportedValueShapeError
from .subsequence import lcs
from .options import Comparator, ComparisonOptions, VerdictKind
from .paths import append_index, append_key, root_path
from .values import Shape, comparable, compare_values, shape_of

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
#  CHANGE ENTRIES
# ═══════════════════════════════════════════════════════════════════

class ChangeOp(str, Enum):
    """Kinds of change, valued by their record opcode."""
    ADD = "+"
    REMOVE = "-"
    MODIFY = "~"


@dataclass(frozen=True, eq=False)
class ChangeEntry:
    """
    One atomic change.

    Behaves like its record form: it iterates, indexes and compares
    equal to ["+", path, value], ["-", path, value] or
    ["~", path, old, new], so callers and patch tooling can treat
    results as plain lists.
    """
    op: ChangeOp
    path: Any
    old: Any = None
    new: Any = None

    @classmethod
    def added(cls, path: Any, value: Any) -> "ChangeEntry":
        return cls(ChangeOp.ADD, path, new=value)

    @classmethod
    def removed(cls, path: Any, value: Any) -> "ChangeEntry":
        return cls(ChangeOp.REMOVE, path, old=value)

    @classmethod
    def modified(cls, path: Any, old: Any, new: Any) -> "ChangeEntry":
        return cls(ChangeOp.MODIFY, path, old=old, new=new)

    @classmethod
    def coerce(cls, item: Any) -> "ChangeEntry":
        """Build an entry from a ChangeEntry or a 3-/4-element record."""
        if isinstance(item, cls):
            return item
        if not isinstance(item, (list, tuple)) or not item:
            raise ValueError(f"not a change record: {item!r}")
        try:
            op = ChangeOp(item[0])
        except ValueError:
            raise ValueError(f"unknown change opcode {item[0]!r}") from None
        expected = 4 if op is ChangeOp.MODIFY else 3
        if len(item) != expected:
            raise ValueError(
                f"{op.value!r} record needs {expected} elements, got {len(item)}: {item!r}"
            )
        if op is ChangeOp.MODIFY:
            return cls.modified(item[1], item[2], item[3])
        if op is ChangeOp.ADD:
            return cls.added(item[1], item[2])
        return cls.removed(item[1], item[2])

    @property
    def value(self) -> Any:
        """The carried value: new for Add and Modify, old for Remove."""
        return self.old if self.op is ChangeOp.REMOVE else self.new

    def to_record(self) -> tuple:
        if self.op is ChangeOp.MODIFY:
            return (self.op.value, self.path, self.old, self.new)
        return (self.op.value, self.path, self.value)

    def __iter__(self):
        return iter(self.to_record())

    def __len__(self) -> int:
        return 4 if self.op is ChangeOp.MODIFY else 3

    def __getitem__(self, index):
        return self.to_record()[index]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ChangeEntry):
            return self.to_record() == other.to_record()
        if isinstance(other, (list, tuple)):
            return self.to_record() == tuple(other)
        return NotImplemented

    def __repr__(self) -> str:
        if self.op is ChangeOp.MODIFY:
            return f"[~ {self.path!r}: {self.old!r} → {self.new!r}]"
        return f"[{self.op.value} {self.path!r}: {self.value!r}]"


def count_changes(changes: list) -> int:
    """Score of a change list for best_diff: the number of entries."""
    return len(changes)


# ═══════════════════════════════════════════════════════════════════
#  WORK-STACK FRAMES
# ═══════════════════════════════════════════════════════════════════

@dataclass(frozen=True, slots=True)
class _Compare:
    """Pending comparison of old against new at path."""
    path: Any
    old: Any
    new: Any


@dataclass(frozen=True, slots=True)
class _PickShortest:
    """Pop `count` captured candidates, keep the shortest (first on ties)."""
    count: int


class _Marker(Enum):
    CAPTURE = auto()    # open a fresh output buffer
    RELEASE = auto()    # close it and set it aside as a candidate


def _sorted_keys(keys) -> list:
    # the type name breaks ties between e.g. 1 and "1"
    return sorted(keys, key=lambda k: (str(k), type(k).__name__))


# ═══════════════════════════════════════════════════════════════════
#  STRUCTURAL DIFFER
# ═══════════════════════════════════════════════════════════════════

class _Differ:
    """One diff run under a fixed set of options."""

    def __init__(self, options: ComparisonOptions):
        self.options = options

    def run(self, obj1: Any, obj2: Any) -> list[ChangeEntry]:
        buffers: list[list[ChangeEntry]] = [[]]
        captured: list[list[ChangeEntry]] = []
        stack: list = [_Compare(root_path(self.options), obj1, obj2)]

        while stack:
            task = stack.pop()
            if isinstance(task, ChangeEntry):
                buffers[-1].append(task)
            elif isinstance(task, _Compare):
                stack.extend(reversed(self._expand(task)))
            elif task is _Marker.CAPTURE:
                buffers.append([])
            elif task is _Marker.RELEASE:
                captured.append(buffers.pop())
            else:
                candidates = captured[-task.count:]
                del captured[-task.count:]
                buffers[-1].extend(min(candidates, key=len))

        return buffers[0]

    # ── dispatch ──────────────────────────────────────────────────

    def _expand(self, task: _Compare) -> list:
        opts = self.options
        path, obj1, obj2 = task.path, task.old, task.new

        verdict = opts.consult(path, obj1, obj2)
        if verdict.kind is VerdictKind.EQUAL:
            return []
        if verdict.kind is VerdictKind.NOT_EQUAL:
            return [ChangeEntry.modified(path, obj1, obj2)]
        if verdict.kind is VerdictKind.REPLACE:
            return [ChangeEntry.coerce(item) for item in verdict.changes]

        if opts.comparison is None and obj1 is obj2:
            return []
        if obj1 is None and obj2 is None:
            return []
        if obj1 is None or obj2 is None:
            return [ChangeEntry.modified(path, obj1, obj2)]

        shape1, shape2 = shape_of(obj1), shape_of(obj2)
        for shape, value in ((shape1, obj1), (shape2, obj2)):
            if shape is Shape.UNSUPPORTED:
                self._unsupported(path, value)

        if not comparable(obj1, obj2, opts):
            return [ChangeEntry.modified(path, obj1, obj2)]

        if shape1 is Shape.SEQUENCE:
            if opts.use_lcs:
                return self._expand_lcs(path, obj1, obj2)
            return self._expand_linear(path, obj1, obj2)

        if shape1 is Shape.MAP:
            return self._expand_map(path, obj1, obj2)

        # scalars, and unsupported values compared as opaque leaves
        if compare_values(obj1, obj2, opts):
            return []
        return [ChangeEntry.modified(path, obj1, obj2)]

    def _unsupported(self, path: Any, value: Any) -> None:
        if self.options.reject_unsupported:
            raise UnsupportedValueShapeError(path, value)
        logger.warning(
            "comparing unsupported %s at %r by equality", type(value).__name__, path
        )

    def _one_sided(self, path: Any, obj1: Any, obj2: Any, default: ChangeEntry) -> list:
        """A key present on one side only; the comparator may override."""
        verdict = self.options.consult(path, obj1, obj2)
        if verdict.kind is VerdictKind.REPLACE:
            return [ChangeEntry.coerce(item) for item in verdict.changes]
        if verdict.kind is VerdictKind.EQUAL:
            return []
        return [default]

    # ── maps ──────────────────────────────────────────────────────

    def _expand_map(self, path: Any, obj1, obj2) -> list:
        opts = self.options
        tasks: list = []

        for key in _sorted_keys(k for k in obj1 if k not in obj2):
            key_path = append_key(path, key, opts)
            tasks.extend(self._one_sided(
                key_path, obj1[key], None, ChangeEntry.removed(key_path, obj1[key])
            ))

        for key in _sorted_keys(k for k in obj1 if k in obj2):
            tasks.append(_Compare(append_key(path, key, opts), obj1[key], obj2[key]))

        for key in _sorted_keys(k for k in obj2 if k not in obj1):
            key_path = append_key(path, key, opts)
            tasks.extend(self._one_sided(
                key_path, None, obj2[key], ChangeEntry.added(key_path, obj2[key])
            ))

        return tasks

    # ── sequences ─────────────────────────────────────────────────

    def _one_side_empty(self, path: Any, a, b) -> Optional[list]:
        opts = self.options
        if not a:
            return [ChangeEntry.added(append_index(path, j, opts), b[j]) for j in range(len(b))]
        if not b:
            # descending, so each index is still valid when applied in order
            return [ChangeEntry.removed(append_index(path, i, opts), a[i])
                    for i in reversed(range(len(a)))]
        return None

    def _expand_lcs(self, path: Any, a, b) -> list:
        opts = self.options
        degenerate = self._one_side_empty(path, a, b)
        if degenerate is not None:
            return degenerate

        links = lcs(a, b, opts, path)

        # matched elements first, at their source index
        tasks: list = [_Compare(append_index(path, i, opts), a[i], b[j]) for i, j in links]

        last_x = last_y = -1
        for x, y in [*links, (len(a), len(b))]:
            removed = a[last_x + 1:x]
            added = b[last_y + 1:y]
            start = last_y + 1

            # Leading scalar pairs of a gap were replaced in place and are
            # reported as "~", not as "-" then "+".  This deliberately differs
            # from a plain LCS walk so that [1, 2, 3] -> [1, 5, 3] yields the
            # same single modify under both array strategies.
            paired = 0
            for old, new in zip(removed, added):
                if shape_of(old) is not Shape.SCALAR or shape_of(new) is not Shape.SCALAR:
                    break
                paired += 1

            for k in range(paired):
                tasks.append(ChangeEntry.modified(
                    append_index(path, start + k, opts), removed[k], added[k]
                ))
            for k in reversed(range(paired, len(removed))):
                tasks.append(ChangeEntry.removed(append_index(path, start + k, opts), removed[k]))
            for k in range(paired, len(added)):
                tasks.append(ChangeEntry.added(append_index(path, start + k, opts), added[k]))

            last_x, last_y = x, y

        return tasks

    def _expand_linear(self, path: Any, a, b) -> list:
        degenerate = self._one_side_empty(path, a, b)
        if degenerate is not None:
            return degenerate

        if len(a) == len(b):
            return self._linear_forwards(path, a, b)

        # catches elements inserted or dropped at the head of the array
        return [
            _Marker.CAPTURE, *self._linear_forwards(path, a, b), _Marker.RELEASE,
            _Marker.CAPTURE, *self._linear_backwards(path, a, b), _Marker.RELEASE,
            _PickShortest(2),
        ]

    def _linear_forwards(self, path: Any, a, b) -> list:
        opts = self.options
        shared = min(len(a), len(b))
        tasks: list = [_Compare(append_index(path, i, opts), a[i], b[i]) for i in range(shared)]
        if len(a) > len(b):
            tasks.extend(ChangeEntry.removed(append_index(path, i, opts), a[i])
                         for i in reversed(range(shared, len(a))))
        else:
            tasks.extend(ChangeEntry.added(append_index(path, i, opts), b[i])
                         for i in range(shared, len(b)))
        return tasks

    def _linear_backwards(self, path: Any, a, b) -> list:
        opts = self.options
        lead_added = max(len(b) - len(a), 0)
        lead_removed = max(len(a) - len(b), 0)

        tasks: list = []
        for i in range(max(lead_added, lead_removed), max(len(a), len(b))):
            ai, bi = i - lead_added, i - lead_removed
            tasks.append(_Compare(append_index(path, ai, opts), a[ai], b[bi]))
        tasks.extend(ChangeEntry.added(append_index(path, i, opts), b[i])
                     for i in range(lead_added))
        tasks.extend(ChangeEntry.removed(append_index(path, i, opts), a[i])
                     for i in reversed(range(lead_removed)))
        return tasks


# ═══════════════════════════════════════════════════════════════════
#  PUBLIC ENTRY POINTS
# ═══════════════════════════════════════════════════════════════════

SIMILARITY_THRESHOLDS = (0.3, 0.5, 0.8)


def diff(obj1: Any, obj2: Any, options=None,
         comparison: Optional[Comparator] = None, **overrides) -> list[ChangeEntry]:
    """
    Compute the change list that turns obj1 into obj2.

    `options` is a ComparisonOptions, a mapping of option names, or
    None; keyword overrides such as array_path=True apply on top.

    `comparison(path, v1, v2)` is consulted before the default rules at
    every comparison point:
        True        → equal, nothing emitted
        False       → changed, default entry emitted
        list        → spliced into the result as-is
        other/None  → default comparison
    """
    opts = ComparisonOptions.resolve(options, comparison, **overrides)
    return _Differ(opts).run(obj1, obj2)


def best_diff(obj1: Any, obj2: Any, options=None,
              comparison: Optional[Comparator] = None, **overrides) -> list[ChangeEntry]:
    """
    Smallest diff over the similarity thresholds 0.3, 0.5 and 0.8.

    All other options are held fixed.  Ties keep the lower threshold.

        a = {"x": [{"a": 1, "c": 3, "e": 5}, {"y": 3}]}
        b = {"x": [{"a": 1, "b": 2, "e": 5}]}
        best_diff(a, b)
            → [["-", "x[0].c", 3], ["+", "x[0].b", 2], ["-", "x[1]", {"y": 3}]]
    """
    opts = ComparisonOptions.resolve(options, comparison, **overrides)

    best: Optional[list[ChangeEntry]] = None
    chosen = None
    for threshold in SIMILARITY_THRESHOLDS:
        changes = _Differ(opts.with_similarity(threshold)).run(obj1, obj2)
        logger.debug("similarity %.1f produced %d change(s)", threshold, count_changes(changes))
        if best is None or count_changes(changes) < count_changes(best):
            best, chosen = changes, threshold

    logger.debug("best_diff kept similarity %.1f", chosen)
    return best
