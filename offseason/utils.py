import re
from datetime import datetime
from typing import Any, Mapping, Sequence

# Leading numeric prefix, the way lenient float parsing reads "12.5%" as 12.5.
_NUMBER_PREFIX = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_WHITESPACE = re.compile(r"\s+")


def parse_number(value: Any) -> float:
    """
    Safely parses a raw CSV cell into a float.
    Commas and ALL whitespace are removed first, so "1,234.5" -> 1234.5 and
    "  12 34 " -> 1234.0. Empty, missing or non-numeric input yields 0.0.
    """
    if value is None:
        return 0.0
    text = str(value)
    if not text:
        return 0.0

    cleaned = _WHITESPACE.sub("", text.replace(",", ""))
    match = _NUMBER_PREFIX.match(cleaned)
    if match is None:
        return 0.0
    return float(match.group())


def parse_string(value: Any) -> str:
    """Returns the trimmed cell text, or an empty string for missing values."""
    if value is None:
        return ""
    return str(value).strip()


def first_present(row: Mapping[str, str], columns: str | Sequence[str]) -> str | None:
    """
    Returns the first non-empty value among alternative spellings of a column.
    Legacy extracts name some columns with an embedded line break.
    """
    if isinstance(columns, str):
        columns = [columns]
    for column in columns:
        value = row.get(column)
        if value:
            return value
    return None


def normalize_period_label(label: str) -> str:
    """
    Converts a month label such as 'Dec-25' into 'YYYY-MM' ('2025-12').
    Labels in any other format are returned unchanged.
    """
    try:
        return datetime.strptime(label, "%b-%y").strftime("%Y-%m")
    except ValueError:
        return label
