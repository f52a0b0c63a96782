"""Tabular input loading.

Reads CSV/TSV files into row dictionaries and reshapes wide rows (one column
per measure) into the long ``{name, field, value}`` records the grouped bar
layout consumes.
"""

from __future__ import annotations

import csv
import math
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from typing import Any

from loguru import logger

from ..config.defaults import DELIMITERS_BY_SUFFIX
from ..core.exceptions import DataError


def read_delimited(path: Path, delimiter: str | None = None) -> list[dict[str, str]]:
    """Read a delimited text file with a header row.

    Args:
        path: File to read
        delimiter: Field separator; inferred from the suffix when None
            (``.tsv`` -> tab, otherwise comma)

    Returns:
        One dict per data row, keyed by header
    """
    if delimiter is None:
        delimiter = DELIMITERS_BY_SUFFIX.get(path.suffix.lower(), ",")

    with open(path, newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f, delimiter=delimiter))

    logger.debug(f"Read {len(rows)} rows from {path.name} (delimiter={delimiter!r})")
    return rows


def parse_number(value: Any) -> float:
    """Parse a numeric cell, ignoring thousands separators.

    Returns NaN for empty or non-numeric text; ``GroupedLayout`` rejects
    NaN values of kept records with a ``DataError``.

    Example:
        >>> parse_number("1,234,567")
        1234567.0
    """
    if isinstance(value, int | float) and not isinstance(value, bool):
        return float(value)
    if value is None:
        return math.nan

    cleaned = str(value).replace(",", "").strip()
    if not cleaned:
        return math.nan
    try:
        return float(cleaned)
    except ValueError:
        return math.nan


def flatten_wide_rows(
    rows: Iterable[Mapping[str, Any]],
    name_field: str,
    value_fields: Sequence[str] | Mapping[str, str],
    scale: float = 1.0,
) -> list[dict[str, Any]]:
    """Turn each wide row into one ``{name, field, value}`` record per measure.

    Args:
        rows: Row dicts (e.g. from ``read_delimited``)
        name_field: Column holding the category name
        value_fields: Columns to emit, or a mapping column -> field label
        scale: Divisor applied to every value (e.g. 1e6 for millions)

    Returns:
        Long-format records, grouped by row in input order

    Raises:
        DataError: If a row lacks ``name_field`` or one of ``value_fields``
    """
    if scale == 0:
        raise DataError("scale must be non-zero")

    labels = dict(value_fields) if isinstance(value_fields, Mapping) else {f: f for f in value_fields}
    records: list[dict[str, Any]] = []

    for i, row in enumerate(rows):
        missing = [col for col in (name_field, *labels) if col not in row]
        if missing:
            raise DataError(
                f"Row {i} is missing column(s): {', '.join(missing)}",
                {"index": i, "missing": missing},
            )
        for column, label in labels.items():
            records.append(
                {
                    "name": row[name_field],
                    "field": label,
                    "value": parse_number(row[column]) / scale,
                }
            )

    return records
