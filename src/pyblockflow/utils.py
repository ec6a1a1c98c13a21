"""Small data helpers shared by block handlers."""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

__all__ = [
    "is_whitespace",
    "parse_json",
    "convert_2d_array_to_objects",
    "convert_objects_to_2d_array",
]

_MISSING = object()


def is_whitespace(value: Any) -> bool:
    """True for None and for strings that are empty or only whitespace.

    >>> is_whitespace("  ")
    True
    >>> is_whitespace(" id ")
    False
    """
    if value is None:
        return True
    return not str(value).strip()


def parse_json(text: Any, default: Any = _MISSING) -> Any:
    """Parse ``text`` as JSON, returning ``default`` (or ``text`` itself) on failure."""
    fallback = text if default is _MISSING else default
    if not isinstance(text, str | bytes | bytearray):
        return fallback
    try:
        return json.loads(text)
    except (ValueError, TypeError):
        return fallback


def convert_2d_array_to_objects(values: Sequence[Sequence[Any]]) -> list[dict[str, Any]]:
    """
    Turn a header row plus data rows into one mapping per data row.

    Columns whose header cell is blank or missing are keyed ``_row{index}``
    with the zero-based column index. Rows shorter than the header yield
    partial mappings. The input is not modified.

    >>> convert_2d_array_to_objects([["name", "price"], ["apple", 3], ["pear"]])
    [{'name': 'apple', 'price': 3}, {'name': 'pear'}]
    """
    if not values:
        return []

    header = list(values[0])
    rows: list[dict[str, Any]] = []
    for row in values[1:]:
        item: dict[str, Any] = {}
        for index, cell in enumerate(row):
            key = header[index] if index < len(header) else None
            if is_whitespace(key):
                key = f"_row{index}"
            item[str(key)] = cell
        rows.append(item)
    return rows


def convert_objects_to_2d_array(rows: Iterable[Mapping[str, Any]]) -> list[list[Any]]:
    """
    Turn a list of mappings into a header row plus one row per mapping.

    The header is the union of keys in first-seen order. Cells for keys a
    row lacks are None. Nested mappings and lists are JSON-encoded so every
    cell is a scalar.

    >>> convert_objects_to_2d_array([{"a": 1}, {"a": 2, "b": [1]}])
    [['a', 'b'], [1, None], [2, '[1]']]
    """
    rows = list(rows)
    header: list[str] = []
    seen: set[str] = set()
    for row in rows:
        for key in row:
            if key not in seen:
                seen.add(key)
                header.append(key)

    result: list[list[Any]] = [header]
    for row in rows:
        cells = []
        for key in header:
            cell = row.get(key)
            if isinstance(cell, Mapping | list | tuple):
                cell = json.dumps(cell)
            cells.append(cell)
        result.append(cells)
    return result
