"""
Field normalization: text keys, Latin-convention numbers, multi-format dates.

None of these raise. Bad input degrades to "", 0.0 or None (no date) because
the upstream sheet is hand-edited.
"""
from __future__ import annotations

import datetime as dt
import math
import re
import unicodedata

# ---------------------------------------------------------------------------
# Text keys
# ---------------------------------------------------------------------------

_COMBINING_MARKS_RE = re.compile(r"[\u0300-\u036f]")


def norm(value) -> str:
    """Matching key: trim, strip diacritics, lowercase.

    "  José Pérez " -> "jose perez". Idempotent.
    """
    if value is None:
        return ""
    s = unicodedata.normalize("NFD", str(value).strip())
    return _COMBINING_MARKS_RE.sub("", s).lower()


def collation_key(name: str) -> tuple[str, str]:
    """Sort key for display names: accent/case-insensitive, raw name breaks ties."""
    return norm(name), name or ""


# ---------------------------------------------------------------------------
# Numbers ("1.234,56" style)
# ---------------------------------------------------------------------------

_WHITESPACE_RE = re.compile(r"\s")
_NON_NUMERIC_RE = re.compile(r"[^\d.\-]")


def parse_amount(value) -> float | None:
    """Parse a Latin-convention number, or None when there is nothing usable.

    Dots are thousands separators and the comma is the decimal mark, so
    "12.50" reads as 1250.
    """
    if value is None:
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value) if math.isfinite(value) else None
    s = str(value).strip()
    if not s:
        return None
    cleaned = _WHITESPACE_RE.sub("", s).replace(".", "").replace(",", ".")
    cleaned = _NON_NUMERIC_RE.sub("", cleaned)
    try:
        n = float(cleaned)
    except ValueError:
        return None
    return n if math.isfinite(n) else None


def safe_num(value) -> float:
    """parse_amount() with 0.0 for missing or unparseable values."""
    n = parse_amount(value)
    return 0.0 if n is None else n


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------

_DMY_RE = re.compile(r"^(\d{1,2})[/-](\d{1,2})[/-](\d{2,4})$")


def _as_utc(value: dt.datetime) -> dt.datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=dt.timezone.utc)
    return value


def parse_date(value) -> dt.datetime | None:
    """Parse ISO-8601 first, then DD/MM/YYYY or DD-MM-YYYY.

    Two-digit years are 20xx. Naive values are taken as UTC. Returns None
    for anything unparseable, including impossible dates like 2026-13-40.
    """
    if value is None:
        return None
    if isinstance(value, dt.datetime):
        return _as_utc(value)
    if isinstance(value, dt.date):
        return dt.datetime(value.year, value.month, value.day, tzinfo=dt.timezone.utc)

    raw = str(value).strip()
    if not raw:
        return None

    iso = raw[:-1] + "+00:00" if raw.endswith(("Z", "z")) else raw
    try:
        return _as_utc(dt.datetime.fromisoformat(iso))
    except ValueError:
        pass

    m = _DMY_RE.match(raw)
    if m:
        day, month, year = int(m.group(1)), int(m.group(2)), m.group(3)
        year_num = int("20" + year) if len(year) == 2 else int(year)
        try:
            return dt.datetime(year_num, month, day, tzinfo=dt.timezone.utc)
        except ValueError:
            return None
    return None


def parse_timestamp(value) -> float | None:
    """POSIX timestamp (seconds) for a date cell, None when there is no date."""
    d = parse_date(value)
    return d.timestamp() if d is not None else None


def day_bounds(value) -> tuple[float | None, float | None]:
    """Inclusive (start, end) timestamps covering the calendar day of `value`."""
    d = parse_date(value)
    if d is None:
        return None, None
    start = d.replace(hour=0, minute=0, second=0, microsecond=0)
    end = start + dt.timedelta(days=1) - dt.timedelta(milliseconds=1)
    return start.timestamp(), end.timestamp()


# ---------------------------------------------------------------------------
# Display
# ---------------------------------------------------------------------------

def fmt_money(value, signed: bool = False) -> str:
    """Format as es-CO currency text without decimals: 1234567 -> "1.234.567"."""
    try:
        n = float(value or 0)
    except (TypeError, ValueError):
        n = 0.0
    if not math.isfinite(n):
        n = 0.0
    text = f"{abs(round(n)):,.0f}".replace(",", ".")
    if n < 0 and round(n) != 0:
        return "-" + text
    if signed and round(n) > 0:
        return "+" + text
    return text
