"""
structdiff.formats — Convert between change entries and plain records.

The record form is what external callers and patch tooling consume:

    ["+", path, value]
    ["-", path, value]
    ["~", path, old, new]

Paths are kept as they are: strings in string mode, token lists in
array_path mode.
"""

from typing import Any, Iterable

from .core import ChangeEntry


def to_records(changes: Iterable[ChangeEntry]) -> list[list]:
    """
    Convert change entries into plain lists.

    Token paths are copied so that records can be edited without
    touching the entries they came from.
    """
    records = []
    for entry in changes:
        record = list(ChangeEntry.coerce(entry).to_record())
        if isinstance(record[1], list):
            record[1] = list(record[1])
        records.append(record)
    return records


def from_records(records: Iterable[Any]) -> list[ChangeEntry]:
    """
    Build change entries from plain 3-/4-element records.

    Raises ValueError for an unknown opcode or a record of the wrong
    length for its opcode.
    """
    return [ChangeEntry.coerce(record) for record in records]
