"""
Tab-separated text parsing for the published sheets.
"""
from __future__ import annotations

import csv
import io
from dataclasses import dataclass, field

import pandas as pd


@dataclass
class ParsedTable:
    headers: list[str] = field(default_factory=list)
    rows: list[dict[str, str]] = field(default_factory=list)


def split_lines(text: str | None) -> list[str]:
    """Split on newlines, dropping carriage returns and whitespace-only lines."""
    if not text:
        return []
    return [line for line in str(text).replace("\r", "").split("\n") if line.strip()]


def read_frame(lines: list[str]) -> pd.DataFrame:
    """All cells as trimmed strings, one column per field of the widest line.

    Quotes are literal (QUOTE_NONE); short lines are padded with "".
    """
    width = max(line.count("\t") + 1 for line in lines)
    frame = pd.read_csv(
        io.StringIO("\n".join(lines)),
        sep="\t",
        header=None,
        names=list(range(width)),
        dtype=str,
        keep_default_na=False,
        quoting=csv.QUOTE_NONE,
        skip_blank_lines=False,
    )
    return frame.fillna("").apply(lambda col: col.str.strip())


def parse_tsv(text: str | None) -> ParsedTable:
    """Parse header + rows, zipping each row positionally against the headers.

    Missing trailing cells become "", cells beyond the header count are
    dropped, every value is trimmed. Never raises.
    """
    lines = split_lines(text)
    if not lines:
        return ParsedTable()

    frame = read_frame(lines)
    headers = list(frame.iloc[0, : lines[0].count("\t") + 1])
    body = frame.iloc[1:, : len(headers)]
    rows = [dict(zip(headers, values)) for values in body.itertuples(index=False, name=None)]
    return ParsedTable(headers=headers, rows=rows)


def parse_positional(text: str | None, skip_header: bool = True) -> list[list[str]]:
    """Raw cell lists for sheets that are read by column index, not by name."""
    lines = split_lines(text)
    if skip_header:
        lines = lines[1:]
    return [line.split("\t") for line in lines]


def cell(parts: list[str], index: int) -> str:
    """Trimmed cell at `index`, "" when the row is too short."""
    return parts[index].strip() if index < len(parts) else ""
