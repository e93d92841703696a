"""
structdiff — Structural diff for nested data
============================================

Compare two nested values built from maps, sequences and scalars and
get back an ordered, deterministic change list:

    diff({"a": 1, "b": {"b1": 1, "b2": 2}}, {"a": 1, "b": {}})
        → [["-", "b.b1", 1], ["-", "b.b2", 2]]

    diff([1, 2, 3], [1, 2, 3, 4])
        → [["+", "[3]", 4]]

    diff({"a": [1, 2]}, {"a": [1, 3]}, array_path=True)
        → [["~", ["a", 1], 2, 3]]

Arrays are aligned with a similarity-driven longest common subsequence,
so records that were edited inside a list are reported as nested
modifications instead of remove + add.  best_diff tries several
similarity thresholds and keeps the smallest result.
"""

from structdiff.core import (
    # Change entries
    ChangeOp,
    ChangeEntry,
    count_changes,
    # Diff
    diff,
    best_diff,
    SIMILARITY_THRESHOLDS,
)
from structdiff.errors import (
    StructDiffError, InvalidConfigurationError, UnsupportedValueShapeError,
)
from structdiff.formats import to_records, from_records
from structdiff.subsequence import lcs, similar
from structdiff.options import ComparisonOptions, Verdict, VerdictKind
from structdiff.paths import path_to_tokens, tokens_to_path

__version__ = "0.1.0"
__all__ = [
    "ChangeOp", "ChangeEntry", "count_changes",
    "diff", "best_diff", "SIMILARITY_THRESHOLDS",
    "StructDiffError", "InvalidConfigurationError", "UnsupportedValueShapeError",
    "to_records", "from_records",
    "lcs", "similar",
    "ComparisonOptions", "Verdict", "VerdictKind",
    "path_to_tokens", "tokens_to_path",
]
