"""
structdiff.paths — Locations inside a nested structure.

Two interchangeable forms, chosen by ComparisonOptions.array_path and
never mixed within one run:

    string mode:  "a.b[2].c"            (keys joined by the delimiter,
                                         indices in brackets)
    token mode:   ["a", "b", 2, "c"]    (raw keys, keys keep their
                                         native type)

Token paths can index straight back into the original structure,
which string paths cannot do once keys are non-strings or contain the
delimiter.
"""

import re
from typing import Any, Union

from .options import ComparisonOptions

Path = Union[str, list]

WILDCARD = "*"


def root_path(options: ComparisonOptions) -> Path:
    """The empty path for the configured mode."""
    return [] if options.array_path else ""


def append_key(prefix: Path, key: Any, options: ComparisonOptions) -> Path:
    """Path of map entry `key` below `prefix`."""
    if options.array_path:
        return [*prefix, key]
    if not prefix:
        return f"{key}"
    return f"{prefix}{options.delimiter}{key}"


def append_index(prefix: Path, index: Any, options: ComparisonOptions) -> Path:
    """Path of sequence element `index` below `prefix` (no delimiter before '[')."""
    if options.array_path:
        return [*prefix, index]
    return f"{prefix}[{index}]"


# ═══════════════════════════════════════════════════════════════════
#  CONVERSION BETWEEN FORMS
# ═══════════════════════════════════════════════════════════════════

def tokens_to_path(tokens, delimiter: str = ".") -> str:
    """
    Render a token path as a delimited string.

    Integer tokens become bracketed indices; everything else is a key.

        tokens_to_path(["a", 0, "b"]) → "a[0].b"
    """
    path = ""
    for token in tokens:
        if isinstance(token, int) and not isinstance(token, bool):
            path = f"{path}[{token}]"
        elif path:
            path = f"{path}{delimiter}{token}"
        else:
            path = f"{token}"
    return path


def path_to_tokens(path: str, delimiter: str = ".") -> list:
    """
    Parse a delimited string path into tokens.

    Inverse of tokens_to_path for keys that contain neither the
    delimiter nor brackets:

        path_to_tokens("a[0].b") → ["a", 0, "b"]
        path_to_tokens("[3]")    → [3]
    """
    if not delimiter:
        raise ValueError("delimiter must be non-empty")
    tokens: list = []
    index_re = re.compile(r"\[(-?\d+)\]")
    for part in path.split(delimiter) if path else []:
        key, _, rest = part.partition("[")
        if key:
            tokens.append(key)
        rest = "[" + rest if rest else ""
        while rest:
            match = index_re.match(rest)
            if match is None:
                raise ValueError(f"malformed index in path {path!r}")
            tokens.append(int(match.group(1)))
            rest = rest[match.end():]
    return tokens
