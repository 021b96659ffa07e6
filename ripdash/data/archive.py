"""
Prior-year registration lookup (read-only, on demand).

The archive sheet is read by position: columns C..L are shown, the student is
in D and the date in E. Results are memoised per student for the life of
the process; no amounts are computed.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Optional

from ripdash.config import ARCHIVE_DATE_COL, ARCHIVE_SLICE, ARCHIVE_STUDENT_COL, ARCHIVE_URL, FETCH_TIMEOUT
from ripdash.data.loader import fetch_text
from ripdash.data.normalize import norm, parse_timestamp
from ripdash.data.tsv import split_lines

logger = logging.getLogger(__name__)


@dataclass
class ArchiveSlice:
    headers: list[str] = field(default_factory=list)
    rows: list[list[str]] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"headers": self.headers, "rows": self.rows}


def slice_student_rows(text: str, student_key: str) -> ArchiveSlice:
    lines = [line.split("\t") for line in split_lines(text)]
    if not lines:
        return ArchiveSlice()

    start, end = ARCHIVE_SLICE
    headers = lines[0][start:end]

    matched = []
    for parts in lines[1:]:
        name = parts[ARCHIVE_STUDENT_COL] if len(parts) > ARCHIVE_STUDENT_COL else ""
        if norm(name) != student_key:
            continue
        date = parts[ARCHIVE_DATE_COL] if len(parts) > ARCHIVE_DATE_COL else ""
        matched.append((parse_timestamp(date), parts[start:end]))

    matched.sort(key=lambda m: (m[0] is not None, m[0] or 0.0), reverse=True)
    return ArchiveSlice(headers=headers, rows=[row for _, row in matched])


class ArchiveLookup:
    def __init__(self, url: str = ARCHIVE_URL, session=None, timeout: float = FETCH_TIMEOUT) -> None:
        self.url = url
        self.session = session
        self.timeout = timeout
        self._memo: dict[str, ArchiveSlice] = {}
        self._lock = threading.Lock()

    def for_student(self, student_name: str) -> ArchiveSlice:
        key = norm(student_name)
        if not key:
            return ArchiveSlice()
        with self._lock:
            cached: Optional[ArchiveSlice] = self._memo.get(key)
            if cached is not None:
                return cached
            text = fetch_text(self.url, session=self.session, timeout=self.timeout)
            result = slice_student_rows(text, key)
            self._memo[key] = result
            logger.info("Archive lookup for %s: %d rows", key, len(result.rows))
            return result
