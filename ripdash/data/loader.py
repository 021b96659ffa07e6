"""
Sheet fetching, header validation, and Record/Student assembly.

Two strategies:
  fast — registration only, no dates/amounts, no classification lookup
  full — registration + params, parsed amounts and timestamps
Both go through the TTL cache and only write it after a complete parse.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

import requests

from ripdash.config import (
    ACTIVE_KEYWORD,
    FETCH_TIMEOUT,
    HEADER_BY_FIELD,
    PARAMS_CLASSIFICATION_COL,
    PARAMS_STUDENT_COL,
    PARAMS_URL,
    REGISTRO_URL,
    REQUIRED_HEADERS,
    REVIEW_KEYWORDS,
    SLOT_PARAMS,
    SLOT_REGISTRO,
    SLOT_REGISTRO_FAST,
)
from ripdash.data.cache import LocalCache
from ripdash.data.normalize import collation_key, norm, parse_amount, parse_timestamp
from ripdash.data.schemas import ParamsIndex, ParamsRow, Record, Student
from ripdash.data.tsv import cell, parse_positional, parse_tsv
from ripdash.errors import FetchError, SchemaError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Fetch
# ---------------------------------------------------------------------------

def fetch_text(url: str, session=None, timeout: float = FETCH_TIMEOUT) -> str:
    """GET a published TSV, bypassing intermediary caches."""
    if not url:
        raise FetchError(url or "", reason="missing TSV URL")
    http = session if session is not None else requests
    try:
        response = http.get(
            url,
            headers={"Cache-Control": "no-cache"},
            timeout=timeout,
        )
    except requests.exceptions.RequestException as exc:
        raise FetchError(url, reason=str(exc)) from exc

    if not 200 <= response.status_code < 300:
        raise FetchError(url, status=response.status_code)
    response.encoding = "utf-8"
    return response.text


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def missing_headers(headers: list[str]) -> list[str]:
    present = set(headers)
    return [h for h in REQUIRED_HEADERS if h not in present]


def validate_headers(headers: list[str]) -> None:
    """Raise SchemaError naming every required header that is absent."""
    missing = missing_headers(headers)
    if missing:
        raise SchemaError(missing)


# ---------------------------------------------------------------------------
# Record assembly
# ---------------------------------------------------------------------------

def _field(row: dict[str, str], name: str) -> str:
    return row.get(HEADER_BY_FIELD[name], "") or ""


def shape_fast(row: dict[str, str], has_id: bool) -> Record:
    """Minimal shaping: raw text only, no date parsing, amount fixed at 0."""
    return Record.build(
        id=_field(row, "id") if has_id else "",
        student_name=_field(row, "student_name"),
        date_raw=_field(row, "date_raw"),
        service=_field(row, "service"),
        time=_field(row, "time"),
        teacher=_field(row, "teacher"),
        entry_type=_field(row, "entry_type"),
        payment_note=_field(row, "payment_note"),
        comment=_field(row, "comment"),
        classification=_field(row, "classification"),
    )


def shape_full(row: dict[str, str], headers: set[str]) -> Record:
    """Full shaping: timestamp, amount and optional columns."""
    rec = shape_fast(row, has_id=HEADER_BY_FIELD["id"] in headers)
    rec.date_ts = parse_timestamp(rec.date_raw)
    if HEADER_BY_FIELD["amount"] in headers:
        amount = parse_amount(_field(row, "amount"))
        rec.amount = 0.0 if amount is None else amount
        rec.amount_present = amount is not None
    if HEADER_BY_FIELD["secondary_classification"] in headers:
        rec.secondary_classification = _field(row, "secondary_classification")
    return rec


def build_student_index(records: list[Record], params: Optional[ParamsIndex] = None) -> list[Student]:
    """Unique students by normalized key, first-seen casing, sorted by name."""
    names: dict[str, str] = {}
    for rec in records:
        if rec.student_key and rec.student_key not in names:
            names[rec.student_key] = rec.student_name
    students = [
        Student(key=key, name=name, classification=params.label_for(key) if params else "")
        for key, name in names.items()
    ]
    students.sort(key=lambda s: collation_key(s.name))
    return students


def parse_registro(text: str, fast: bool = False) -> list[Record]:
    parsed = parse_tsv(text)
    validate_headers(parsed.headers)
    headers = set(parsed.headers)
    if fast:
        has_id = HEADER_BY_FIELD["id"] in headers
        return [shape_fast(row, has_id) for row in parsed.rows]
    return [shape_full(row, headers) for row in parsed.rows]


def parse_params(text: str) -> list[ParamsRow]:
    """Column A = student, column F = classification; nameless rows dropped."""
    rows = []
    for parts in parse_positional(text, skip_header=True):
        student = cell(parts, PARAMS_STUDENT_COL)
        if not student:
            continue
        rows.append(ParamsRow(student=student, classification=cell(parts, PARAMS_CLASSIFICATION_COL)))

    labels = [norm(r.classification) for r in rows if r.classification]
    keywords = (ACTIVE_KEYWORD,) + REVIEW_KEYWORDS
    if rows and not any(k in label for label in labels for k in keywords):
        logger.warning(
            "Params column %d holds no classification-like values; has the sheet been reordered?",
            PARAMS_CLASSIFICATION_COL + 1,
        )
    return rows


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

def _decode_records(pack) -> Optional[list[Record]]:
    """Records from a cached pack, None when absent or malformed."""
    if pack is None or not isinstance(pack.payload.get("records"), list):
        return None
    try:
        return [Record.from_dict(r) for r in pack.payload["records"]]
    except (TypeError, AttributeError) as exc:
        logger.warning("Discarding malformed cached records: %s", exc)
        return None


def _decode_students(pack) -> Optional[list[Student]]:
    if pack is None or not isinstance(pack.payload.get("students"), list):
        return None
    try:
        return [Student(**s) for s in pack.payload["students"]]
    except TypeError as exc:
        logger.warning("Discarding malformed cached students: %s", exc)
        return None


@dataclass
class LoadResult:
    records: list[Record] = field(default_factory=list)
    students: list[Student] = field(default_factory=list)
    params: ParamsIndex = field(default_factory=ParamsIndex)
    from_cache: bool = False
    meta: dict[str, float] = field(default_factory=dict)


class DataLoader:
    """Fetch + parse + cache for the registration and params sheets."""

    def __init__(
        self,
        cache: Optional[LocalCache] = None,
        session=None,
        registro_url: str = REGISTRO_URL,
        params_url: str = PARAMS_URL,
        timeout: float = FETCH_TIMEOUT,
    ) -> None:
        self.cache = cache if cache is not None else LocalCache()
        self.session = session
        self.registro_url = registro_url
        self.params_url = params_url
        self.timeout = timeout

    def _fetch(self, url: str) -> str:
        return fetch_text(url, session=self.session, timeout=self.timeout)

    def load_fast(self, force: bool = False) -> LoadResult:
        """Registration table only, shaped for first paint."""
        if not force:
            pack = self.cache.read_fresh(SLOT_REGISTRO_FAST)
            records = _decode_records(pack)
            students = _decode_students(pack)
            if records is not None and students is not None:
                return LoadResult(records, students, from_cache=True, meta=self.cache.read_meta())

        records = parse_registro(self._fetch(self.registro_url), fast=True)
        students = build_student_index(records)
        self.cache.store(SLOT_REGISTRO_FAST, {
            "records": [r.to_dict() for r in records],
            "students": [s.to_dict() for s in students],
        })
        logger.info("Fast load: %d records, %d students", len(records), len(students))
        return LoadResult(records, students, meta=self.cache.read_meta())

    def _load_registro(self, force: bool) -> tuple[list[Record], bool]:
        if not force:
            records = _decode_records(self.cache.read_fresh(SLOT_REGISTRO))
            if records is not None:
                return records, True

        records = parse_registro(self._fetch(self.registro_url), fast=False)
        self.cache.store(SLOT_REGISTRO, {"records": [r.to_dict() for r in records]})
        return records, False

    def _load_params(self, force: bool) -> tuple[list[ParamsRow], bool]:
        if not force:
            pack = self.cache.read_fresh(SLOT_PARAMS)
            if pack is not None and isinstance(pack.payload.get("rows"), list):
                rows = [
                    ParamsRow(student=r.get("student", ""), classification=r.get("classification", ""))
                    for r in pack.payload["rows"]
                    if isinstance(r, dict)
                ]
                return rows, True

        rows = parse_params(self._fetch(self.params_url))
        self.cache.store(SLOT_PARAMS, {
            "rows": [{"student": r.student, "classification": r.classification} for r in rows],
        })
        return rows, False

    def load_full(self, force: bool = False) -> LoadResult:
        """Registration + params with amounts, timestamps and classifications."""
        records, registro_cached = self._load_registro(force)
        params_rows, params_cached = self._load_params(force)

        params = ParamsIndex.from_rows(params_rows)
        students = build_student_index(records, params)
        logger.info(
            "Full load: %d records, %d students, %d params rows (cache: registro=%s params=%s)",
            len(records), len(students), len(params_rows), registro_cached, params_cached,
        )
        return LoadResult(
            records=records,
            students=students,
            params=params,
            from_cache=registro_cached and params_cached,
            meta=self.cache.read_meta(),
        )
