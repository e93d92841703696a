"""
Tests for the building blocks beneath diff:
    §1  Value shapes and scalar comparison
    §2  Paths
    §3  Similarity and LCS matching
    §4  Options and verdicts
    §5  Change entries and records
"""

import dataclasses
import sys
import os
from collections import OrderedDict
from decimal import Decimal
from fractions import Fraction

import pytest

# Add parent to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from structdiff import (
    ChangeEntry, ChangeOp, ComparisonOptions, InvalidConfigurationError,
    Verdict, VerdictKind, count_changes, diff, from_records, to_records,
)
from structdiff.paths import (
    append_index, append_key, path_to_tokens, root_path, tokens_to_path,
)
from structdiff.subsequence import deep_equal, lcs, similar
from structdiff.values import Shape, comparable, compare_values, is_numeric, shape_of


DEFAULT = ComparisonOptions()
TOKENS = ComparisonOptions(array_path=True)


# ═══════════════════════════════════════════════════════════════════
#  §1  VALUE SHAPES AND SCALAR COMPARISON
# ═══════════════════════════════════════════════════════════════════

class TestShapes:

    @pytest.mark.parametrize("value,shape", [
        (None, Shape.SCALAR),
        (True, Shape.SCALAR),
        (1, Shape.SCALAR),
        (1.5, Shape.SCALAR),
        (Decimal("1.1"), Shape.SCALAR),
        (Fraction(1, 2), Shape.SCALAR),
        ("text", Shape.SCALAR),
        (b"bytes", Shape.SCALAR),
        ({}, Shape.MAP),
        (OrderedDict(a=1), Shape.MAP),
        ([], Shape.SEQUENCE),
        ((1, 2), Shape.SEQUENCE),
        ({1, 2}, Shape.UNSUPPORTED),
        (1j, Shape.UNSUPPORTED),
        (object(), Shape.UNSUPPORTED),
    ])
    def test_shape_of(self, value, shape):
        assert shape_of(value) is shape

    def test_comparable(self):
        assert not comparable(1, 1.0, DEFAULT)
        assert comparable(1, 1.0, ComparisonOptions(strict=False))
        assert comparable(1, 1.0, ComparisonOptions(numeric_tolerance=0.5))
        assert not comparable("a", 1, ComparisonOptions(strict=False))
        assert comparable([1], (1,), DEFAULT)
        assert comparable(True, False, DEFAULT)
        assert not comparable({}, [], DEFAULT)

    def test_compare_values(self):
        assert compare_values(1, 1, DEFAULT)
        assert not compare_values(1, 2, DEFAULT)
        assert not compare_values(True, 1, ComparisonOptions(strict=False))
        assert compare_values(Decimal("1.5"), 1.5, ComparisonOptions(strict=False))
        assert not compare_values(Decimal("1.5"), 1.5, DEFAULT)
        assert compare_values(" a", "a ", ComparisonOptions(strip=True))

    def test_tolerance_mixes_decimal_and_float(self):
        opts = ComparisonOptions(numeric_tolerance=0.1)
        assert compare_values(Decimal("1.0"), 1.05, opts)
        assert not compare_values(Decimal("1.0"), 1.2, opts)

    @pytest.mark.parametrize("value,numeric", [
        (Decimal("2.5"), True),
        (Fraction(1, 3), True),
        (3, True),
        (True, False),
        ("3", False),
    ])
    def test_is_numeric(self, value, numeric):
        assert is_numeric(value) is numeric

    def test_decimal_comparable_across_types_when_lenient(self):
        assert not comparable(Decimal("1"), 1, DEFAULT)
        assert comparable(Decimal("1"), 1, ComparisonOptions(strict=False))
        assert comparable(Decimal("1"), Decimal("2"), DEFAULT)

    def test_tolerance_slack_does_not_grow_with_magnitude(self):
        opts = ComparisonOptions(numeric_tolerance=1e6)
        assert compare_values(0.0, 1e6, opts)
        assert not compare_values(0.0, 1000000.0005, opts)


# ═══════════════════════════════════════════════════════════════════
#  §2  PATHS
# ═══════════════════════════════════════════════════════════════════

class TestPaths:

    def test_string_mode(self):
        assert root_path(DEFAULT) == ""
        assert append_key("", "a", DEFAULT) == "a"
        assert append_key("a", "b", DEFAULT) == "a.b"
        assert append_index("a", 2, DEFAULT) == "a[2]"
        assert append_index("", 0, DEFAULT) == "[0]"
        assert append_key("[0]", "x", DEFAULT) == "[0].x"

    def test_token_mode_does_not_mutate_prefix(self):
        prefix = root_path(TOKENS)
        child = append_key(prefix, 1, TOKENS)
        grandchild = append_index(child, 0, TOKENS)
        assert prefix == []
        assert child == [1]
        assert grandchild == [1, 0]

    @pytest.mark.parametrize("tokens,path", [
        (["a", 0, "b"], "a[0].b"),
        ([0, "a"], "[0].a"),
        (["a", 1, 2], "a[1][2]"),
        ([], ""),
    ])
    def test_tokens_round_trip(self, tokens, path):
        assert tokens_to_path(tokens) == path
        assert path_to_tokens(path) == tokens

    def test_custom_delimiter(self):
        assert tokens_to_path(["a", "b"], delimiter="/") == "a/b"
        assert path_to_tokens("a/b[3]", delimiter="/") == ["a", "b", 3]

    def test_malformed_index(self):
        with pytest.raises(ValueError):
            path_to_tokens("a[x]")


# ═══════════════════════════════════════════════════════════════════
#  §3  SIMILARITY AND LCS MATCHING
# ═══════════════════════════════════════════════════════════════════

class TestSimilarity:

    def test_scalars(self):
        assert similar(1, 1, DEFAULT)
        assert not similar(1, 2, DEFAULT)
        assert not similar(1, {"a": 1}, DEFAULT)

    def test_maps_by_key_union(self):
        a = {"a": 1, "b": 2}
        b = {"a": 1, "b": 3}
        assert similar(a, b, ComparisonOptions(similarity=0.5))
        assert not similar(a, b, ComparisonOptions(similarity=0.8))
        # union is {a, b, c}: one of three keys equal
        assert not similar({"a": 1, "b": 2}, {"a": 1, "c": 2}, ComparisonOptions(similarity=0.5))
        assert similar({"a": 1, "b": 2}, {"a": 1, "c": 2}, ComparisonOptions(similarity=0.3))

    def test_empty_maps(self):
        assert similar({}, {}, DEFAULT)

    def test_sequences_by_position(self):
        a = [1, 2, 3, 4]
        b = [1, 2, 3, 5]
        assert not similar(a, b, DEFAULT)
        assert similar(a, b, ComparisonOptions(similarity=0.75))

    def test_deep_equal_uses_options(self):
        opts = ComparisonOptions(numeric_tolerance=0.1)
        assert deep_equal({"a": [1.0]}, {"a": [1.05]}, opts)
        assert not deep_equal({"a": [1.0]}, {"a": [1.05]}, DEFAULT)
        assert deep_equal((1, 2), [1, 2], DEFAULT)
        assert not deep_equal({"a": 1}, {"b": 1}, DEFAULT)

    def test_deep_equal_empty_replace_is_equal(self):
        opts = ComparisonOptions(comparison=lambda p, x, y: [])
        assert deep_equal({"a": 1}, {"a": 2}, opts)


class TestLCS:

    def test_increasing_pairs(self):
        assert lcs([1, 2, 3, 4], [1, 3, 4], DEFAULT) == [(0, 0), (2, 1), (3, 2)]

    def test_ambiguous_skip_drops_source_element(self):
        assert lcs([1, 2], [2, 1], DEFAULT) == [(0, 1)]

    def test_empty(self):
        assert lcs([], [1], DEFAULT) == []
        assert lcs([1], [], DEFAULT) == []

    def test_duplicates(self):
        assert lcs([1, 1, 2], [1, 2, 2], DEFAULT) == [(0, 0), (2, 2)]

    def test_similar_records_match(self):
        a = [{"id": 1, "v": "x"}, {"id": 2, "v": "y"}]
        b = [{"id": 2, "v": "z"}]
        assert lcs(a, b, ComparisonOptions(similarity=0.5)) == [(1, 0)]
        assert lcs(a, b, DEFAULT) == []


# ═══════════════════════════════════════════════════════════════════
#  §4  OPTIONS AND VERDICTS
# ═══════════════════════════════════════════════════════════════════

class TestOptions:

    def test_defaults(self):
        opts = ComparisonOptions()
        assert opts.strict is True
        assert opts.similarity == 0.8
        assert opts.delimiter == "."
        assert opts.numeric_tolerance == 0
        assert opts.strip is False
        assert opts.array_path is False
        assert opts.use_lcs is True
        assert opts.comparison is None

    def test_immutable(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            DEFAULT.similarity = 0.5

    def test_with_similarity_copies(self):
        copy = DEFAULT.with_similarity(0.3)
        assert copy.similarity == 0.3
        assert DEFAULT.similarity == 0.8

    @pytest.mark.parametrize("kwargs", [
        {"similarity": True},
        {"similarity": "high"},
        {"numeric_tolerance": None},
        {"delimiter": 1},
        {"comparison": "not callable"},
    ])
    def test_rejects_bad_fields(self, kwargs):
        with pytest.raises(InvalidConfigurationError):
            ComparisonOptions(**kwargs)

    def test_similarity_upper_bound_inclusive(self):
        assert ComparisonOptions(similarity=1).similarity == 1

    def test_resolve(self):
        assert ComparisonOptions.resolve(None) == DEFAULT
        assert ComparisonOptions.resolve({"strip": True}).strip is True
        assert ComparisonOptions.resolve(DEFAULT) is DEFAULT
        with pytest.raises(InvalidConfigurationError):
            ComparisonOptions.resolve(42)
        with pytest.raises(InvalidConfigurationError):
            ComparisonOptions.resolve(DEFAULT, unknown=1)


class TestVerdict:

    @pytest.mark.parametrize("result,kind", [
        (True, VerdictKind.EQUAL),
        (False, VerdictKind.NOT_EQUAL),
        ([], VerdictKind.REPLACE),
        ([["+", "a", 1]], VerdictKind.REPLACE),
        (None, VerdictKind.DEFER),
        (1, VerdictKind.DEFER),
        ("yes", VerdictKind.DEFER),
    ])
    def test_interpret(self, result, kind):
        assert Verdict.interpret(result).kind is kind

    def test_passthrough(self):
        verdict = Verdict.replace([["-", "a", 1]])
        assert Verdict.interpret(verdict) is verdict
        assert verdict.changes == (["-", "a", 1],)


# ═══════════════════════════════════════════════════════════════════
#  §5  CHANGE ENTRIES AND RECORDS
# ═══════════════════════════════════════════════════════════════════

class TestChangeEntry:

    def test_behaves_like_record(self):
        op, path, value = ChangeEntry.added("a", 1)
        assert (op, path, value) == ("+", "a", 1)
        entry = ChangeEntry.modified("b", 1, 2)
        assert len(entry) == 4
        assert entry[0] == "~"
        assert entry[-1] == 2
        assert entry == ("~", "b", 1, 2)
        assert entry != ["~", "b", 1, 3]

    def test_value_property(self):
        assert ChangeEntry.removed("a", 5).value == 5
        assert ChangeEntry.added("a", 6).value == 6
        assert ChangeEntry.modified("a", 5, 6).value == 6

    def test_op_is_string_valued(self):
        assert ChangeOp.ADD == "+"
        assert ChangeOp("-") is ChangeOp.REMOVE

    def test_count_changes(self):
        assert count_changes(diff({"a": 1, "b": 2}, {"a": 2})) == 2


class TestRecords:

    def test_to_records(self):
        records = to_records(diff({"a": 1, "b": 1}, {"a": 2, "c": 3}))
        assert records == [["-", "b", 1], ["~", "a", 1, 2], ["+", "c", 3]]
        assert all(type(r) is list for r in records)

    def test_token_paths_are_copied(self):
        entries = diff({"a": [1]}, {"a": [1, 2]}, array_path=True)
        records = to_records(entries)
        records[0][1].append("x")
        assert entries[0].path == ["a", 1]

    def test_from_records(self):
        entries = from_records([["+", "a", 1], ("~", "b", 1, 2), ["-", ["c", 0], None]])
        assert [e.op for e in entries] == [ChangeOp.ADD, ChangeOp.MODIFY, ChangeOp.REMOVE]
        assert to_records(entries) == [["+", "a", 1], ["~", "b", 1, 2], ["-", ["c", 0], None]]

    @pytest.mark.parametrize("record", [
        ["?", "a", 1],
        ["~", "a", 1],
        ["+", "a", 1, 2],
        "nope",
        [],
    ])
    def test_malformed_records(self, record):
        with pytest.raises(ValueError):
            from_records([record])
