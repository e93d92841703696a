"""
structdiff.options — Immutable comparison configuration.

A ComparisonOptions instance is built once per diff call and threaded
through every comparison point.  Only the path prefix changes while
walking the structure, and that travels beside the options, not in them.

    ┌────────────────────┬─────────┬──────────────────────────────────────┐
    │ field              │ default │ effect                               │
    ├────────────────────┼─────────┼──────────────────────────────────────┤
    │ strict             │ True    │ exact type match for scalars         │
    │ similarity         │ 0.8     │ map-element matchability threshold   │
    │ delimiter          │ "."     │ separator in string paths            │
    │ numeric_tolerance  │ 0       │ max numeric delta treated as equal   │
    │ strip              │ False   │ trim strings before comparing        │
    │ array_path         │ False   │ token-list paths instead of strings  │
    │ use_lcs            │ True    │ LCS array strategy (else linear)     │
    │ comparison         │ None    │ custom comparator (path, v1, v2)     │
    │ reject_unsupported │ False   │ raise on unknown value shapes        │
    └────────────────────┴─────────┴──────────────────────────────────────┘
"""

import dataclasses
import numbers
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Callable, Optional

from .errors import InvalidConfigurationError


# ═══════════════════════════════════════════════════════════════════
#  CUSTOM COMPARATOR VERDICTS
# ═══════════════════════════════════════════════════════════════════

class VerdictKind(Enum):
    """What a custom comparator decided about one comparison point."""
    EQUAL = auto()      # No change at this point
    NOT_EQUAL = auto()  # Changed; report with the default entry shape
    REPLACE = auto()    # Use the comparator's own change list verbatim
    DEFER = auto()      # No opinion; fall through to default comparison


@dataclass(frozen=True, slots=True)
class Verdict:
    """
    Result of consulting a custom comparator.

    Comparators may return a Verdict directly, or any of the loose
    forms accepted by interpret():
        True        → EQUAL
        False       → NOT_EQUAL
        list/tuple  → REPLACE with that change list
        other/None  → DEFER
    """
    kind: VerdictKind
    changes: tuple = ()

    @classmethod
    def interpret(cls, result: Any) -> "Verdict":
        if isinstance(result, Verdict):
            return result
        # bool is checked by identity: 1 and 0 are not verdicts
        if result is True:
            return EQUAL
        if result is False:
            return NOT_EQUAL
        if isinstance(result, (list, tuple)):
            return cls(VerdictKind.REPLACE, tuple(result))
        return DEFER

    @classmethod
    def replace(cls, changes) -> "Verdict":
        return cls(VerdictKind.REPLACE, tuple(changes))


EQUAL = Verdict(VerdictKind.EQUAL)
NOT_EQUAL = Verdict(VerdictKind.NOT_EQUAL)
DEFER = Verdict(VerdictKind.DEFER)


Comparator = Callable[[Any, Any, Any], Any]


# ═══════════════════════════════════════════════════════════════════
#  OPTIONS
# ═══════════════════════════════════════════════════════════════════

@dataclass(frozen=True, slots=True)
class ComparisonOptions:
    """
    Immutable configuration for a diff run.

    Validation happens here, in __post_init__, so a bad threshold or a
    negative tolerance is reported before any traversal starts.
    """
    strict: bool = True
    similarity: float = 0.8
    delimiter: str = "."
    numeric_tolerance: float = 0
    strip: bool = False
    array_path: bool = False
    use_lcs: bool = True
    comparison: Optional[Comparator] = None
    reject_unsupported: bool = False

    def __post_init__(self) -> None:
        sim = self.similarity
        if isinstance(sim, bool) or not isinstance(sim, numbers.Real):
            raise InvalidConfigurationError(
                f"similarity must be a number in (0, 1], got {sim!r}"
            )
        if not 0 < sim <= 1:
            raise InvalidConfigurationError(
                f"similarity must be in (0, 1], got {sim}"
            )
        tol = self.numeric_tolerance
        if isinstance(tol, bool) or not isinstance(tol, numbers.Real):
            raise InvalidConfigurationError(
                f"numeric_tolerance must be a number, got {tol!r}"
            )
        if tol < 0:
            raise InvalidConfigurationError(
                f"numeric_tolerance must be >= 0, got {tol}"
            )
        if not isinstance(self.delimiter, str):
            raise InvalidConfigurationError(
                f"delimiter must be a string, got {self.delimiter!r}"
            )
        if self.comparison is not None and not callable(self.comparison):
            raise InvalidConfigurationError("comparison must be callable")

    @classmethod
    def from_mapping(cls, mapping: Optional[Mapping] = None, **overrides) -> "ComparisonOptions":
        """Build options from a plain mapping of option names."""
        merged = dict(mapping or {})
        merged.update(overrides)
        unknown = sorted(set(merged) - {f.name for f in dataclasses.fields(cls)})
        if unknown:
            raise InvalidConfigurationError(f"unknown option(s): {', '.join(unknown)}")
        return cls(**merged)

    @classmethod
    def resolve(cls, options=None, comparison: Optional[Comparator] = None, **overrides) -> "ComparisonOptions":
        """
        Normalise whatever a caller passed as options.

        Accepts a ComparisonOptions, a mapping, or None, then applies
        keyword overrides and an explicit comparator on top.
        """
        if comparison is not None:
            overrides["comparison"] = comparison
        if options is None or isinstance(options, Mapping):
            return cls.from_mapping(options, **overrides)
        if not isinstance(options, cls):
            raise InvalidConfigurationError(
                f"options must be ComparisonOptions or a mapping, got {type(options).__name__}"
            )
        if not overrides:
            return options
        unknown = sorted(set(overrides) - {f.name for f in dataclasses.fields(cls)})
        if unknown:
            raise InvalidConfigurationError(f"unknown option(s): {', '.join(unknown)}")
        return dataclasses.replace(options, **overrides)

    def with_similarity(self, similarity: float) -> "ComparisonOptions":
        return dataclasses.replace(self, similarity=similarity)

    def consult(self, path: Any, obj1: Any, obj2: Any) -> Verdict:
        """Ask the custom comparator about (obj1, obj2) at path."""
        if self.comparison is None:
            return DEFER
        return Verdict.interpret(self.comparison(path, obj1, obj2))
