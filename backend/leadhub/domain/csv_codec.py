# leadhub/domain/csv_codec.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Sequence


@dataclass(frozen=True)
class CsvTable:
    headers: list[str] = field(default_factory=list)
    records: list[dict[str, str]] = field(default_factory=list)


def _is_blank(row: list[str]) -> bool:
    return all(not cell.strip() for cell in row)


def _split_rows(text: str) -> list[list[str]]:
    """
    Tokenize delimited text into raw rows (untrimmed, blank rows dropped).

    Quotes toggle a quoted span; "" inside a span is a literal quote.
    \\r\\n, \\n and a lone \\r end a row outside a span and are data inside one.
    """
    rows: list[list[str]] = []
    row: list[str] = []
    buf: list[str] = []
    in_quotes = False
    i = 0
    n = len(text)

    while i < n:
        ch = text[i]

        if ch == '"':
            if in_quotes and i + 1 < n and text[i + 1] == '"':
                buf.append('"')
                i += 2
                continue
            in_quotes = not in_quotes
            i += 1
            continue

        if in_quotes:
            buf.append(ch)
            i += 1
            continue

        if ch == ",":
            row.append("".join(buf))
            buf = []
            i += 1
            continue

        if ch in ("\r", "\n"):
            if ch == "\r" and i + 1 < n and text[i + 1] == "\n":
                i += 1
            row.append("".join(buf))
            if not _is_blank(row):
                rows.append(row)
            row = []
            buf = []
            i += 1
            continue

        buf.append(ch)
        i += 1

    if buf or row:
        row.append("".join(buf))
        if not _is_blank(row):
            rows.append(row)

    return rows


def parse_csv(text: str) -> CsvTable:
    """
    Parse CSV text into header-keyed records.

    The first non-blank row is the header. Short rows are padded with "" and
    every value is trimmed. Fewer than two non-blank rows => empty table.
    """
    rows = _split_rows(text or "")
    if len(rows) < 2:
        return CsvTable()

    headers = [h.strip() for h in rows[0]]
    records: list[dict[str, str]] = []
    for line in rows[1:]:
        rec: dict[str, str] = {}
        for idx, header in enumerate(headers):
            rec[header] = line[idx].strip() if idx < len(line) else ""
        records.append(rec)

    return CsvTable(headers=headers, records=records)


def escape_csv_value(value: Any) -> str:
    text = "" if value is None else str(value)
    if any(c in text for c in (",", '"', "\n", "\r")):
        return '"' + text.replace('"', '""') + '"'
    return text


def to_csv(headers: Sequence[Any], rows: Iterable[Sequence[Any]]) -> str:
    lines = [",".join(escape_csv_value(v) for v in headers)]
    lines.extend(",".join(escape_csv_value(v) for v in row) for row in rows)
    return "\n".join(lines)
