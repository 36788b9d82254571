"""
Tolerant CSV tokenizer for the merged inventory extracts.

The extracts are produced by a spreadsheet export that wraps some header cells
across several physical lines (e.g. "AC Sales\\n(Cost)") and omits the trailing
delimiter when the last column is empty. This is not a general CSV reader: it
handles exactly those two malformations plus ordinary quoting.
"""

import logging
import re

from . import settings

logger = logging.getLogger(__name__)

CsvRow = dict[str, str]

_LINE_BREAK = re.compile(r"\r?\n")


def split_csv_line(line: str) -> list[str]:
    """
    Splits one physical line into trimmed field values.
    A doubled quote inside a quoted span is a literal quote; commas inside
    quotes are not separators.
    """
    values = []
    current = []
    in_quotes = False
    i = 0

    while i < len(line):
        char = line[i]
        if char == '"':
            if in_quotes and i + 1 < len(line) and line[i + 1] == '"':
                current.append('"')
                i += 1
            else:
                in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            values.append("".join(current).strip())
            current = []
        else:
            current.append(char)
        i += 1

    values.append("".join(current).strip())
    return values


def has_open_quote(line: str, open_quote: bool = False) -> bool:
    """
    Returns whether a quoted field is still open at the end of `line`, given the
    state carried over from the previous line. A quote directly preceded by
    another quote does not toggle the state.
    """
    for i, char in enumerate(line):
        if char == '"' and (i == 0 or line[i - 1] != '"'):
            open_quote = not open_quote
    return open_quote


def clean_header(field: str) -> str:
    """Strips one layer of surrounding quotes and flattens embedded line breaks."""
    cleaned = field.strip()
    if (cleaned.startswith('"') and cleaned.endswith('"')) or (
        cleaned.startswith("'") and cleaned.endswith("'")
    ):
        cleaned = cleaned[1:-1]
    return _LINE_BREAK.sub(" ", cleaned).strip()


def _assemble_header(lines: list[str]) -> tuple[str, int]:
    """
    Joins the physical lines of a header whose quoted cells wrap onto following
    lines. Returns the combined header and the index of the first data line.
    """
    header_lines = [lines[0]]
    open_quote = has_open_quote(lines[0])
    next_index = 1

    while (
        open_quote
        and next_index < len(lines)
        and next_index <= settings.MAX_HEADER_CONTINUATION_LINES
    ):
        header_lines.append(lines[next_index])
        open_quote = has_open_quote(lines[next_index], open_quote)
        next_index += 1

    return " ".join(header_lines), next_index


def parse_csv(text: str) -> list[CsvRow]:
    """
    Converts raw CSV text into header-keyed rows, in source order.

    - Blank lines are ignored; fewer than two non-blank lines yields [].
    - A row may be missing at most one trailing field (it maps to "");
      rows missing more are dropped. Extra trailing fields are ignored.
    """
    lines = [line for line in _LINE_BREAK.split(text) if line.strip()]
    if len(lines) < 2:
        return []

    combined_header, first_data_index = _assemble_header(lines)
    headers = [clean_header(h) for h in split_csv_line(combined_header)]

    rows: list[CsvRow] = []
    dropped = 0
    for line in lines[first_data_index:]:
        values = split_csv_line(line.strip())
        if len(values) < len(headers) - 1:
            dropped += 1
            continue
        rows.append(
            {
                header: values[index] if index < len(values) else ""
                for index, header in enumerate(headers)
            }
        )

    if dropped:
        logger.debug(f"Dropped {dropped} short row(s) while tokenizing CSV.")
    return rows
