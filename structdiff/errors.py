"""
structdiff.errors — Exception taxonomy.

Only two things can go wrong under a diff:
    • The options are invalid (raised when the options are built,
      never from inside the traversal).
    • A node has a shape the differ does not understand (raised only
      when the caller opts into rejecting such nodes).

Exceptions raised by a custom comparator are not wrapped; they reach
the caller unchanged.
"""

from typing import Any


class StructDiffError(Exception):
    """Base class for all structdiff errors."""


class InvalidConfigurationError(StructDiffError, ValueError):
    """A ComparisonOptions field is out of range or unknown."""


class UnsupportedValueShapeError(StructDiffError, TypeError):
    """A node is neither a map, a sequence, nor a recognised scalar."""

    def __init__(self, path: Any, value: Any):
        self.path = path
        self.value = value
        super().__init__(
            f"unsupported value of type {type(value).__name__} at {path!r}"
        )
