from __future__ import annotations

from typing import List

BOM = "\ufeff"
PLACEHOLDER_ROW = "..."


def _keep_row(row: List[str]) -> bool:
    if len(row) <= 1:
        return False
    joined = "".join(row).strip()
    return joined != "" and joined != PLACEHOLDER_ROW


def split_rows(text: str) -> List[List[str]]:
    """Split loosely structured comma-separated text into trimmed rows.

    Not strict CSV: a double quote toggles quoting wherever it appears and is never copied into
    the field, except for a doubled quote inside a quoted field, which is a literal quote. An
    unterminated quote runs to the end of the input. ``\\n``, ``\\r\\n`` and a bare ``\\r`` each end
    a row. Single-field rows and rows that are blank or just ``...`` are dropped.
    """
    if text.startswith(BOM):
        text = text[1:]

    rows: List[List[str]] = []
    row: List[str] = []
    field: List[str] = []
    in_quotes = False
    i = 0
    n = len(text)

    while i < n:
        c = text[i]

        if c == '"':
            if in_quotes and i + 1 < n and text[i + 1] == '"':
                field.append('"')
                i += 2
                continue
            in_quotes = not in_quotes
            i += 1
            continue

        if c == "," and not in_quotes:
            row.append("".join(field).strip())
            field = []
            i += 1
            continue

        if c in "\r\n" and not in_quotes:
            if c == "\r" and i + 1 < n and text[i + 1] == "\n":
                i += 1
            row.append("".join(field).strip())
            field = []
            if _keep_row(row):
                rows.append(row)
            row = []
            i += 1
            continue

        field.append(c)
        i += 1

    # last row (no trailing line break)
    if field or row:
        row.append("".join(field).strip())
        if _keep_row(row):
            rows.append(row)

    return rows
