"""
Typed record schema, student index, filter spec and cache pack.
"""
from __future__ import annotations

import datetime as dt
from dataclasses import asdict, dataclass, field, fields
from enum import Enum
from typing import Optional

from ripdash.data.normalize import day_bounds, norm, parse_timestamp


class EntryType(str, Enum):
    CLASS = "class"
    PAYMENT = "payment"
    OTHER = "other"


class TypeSelector(str, Enum):
    ALL = "all"
    CLASS = "class"
    PAYMENT = "payment"


@dataclass
class Record:
    """One row of the registration sheet: a class session or a payment."""
    student_name: str = ""
    student_key: str = ""
    date_raw: str = ""
    date_ts: Optional[float] = None      # None = no date (or not computed on the fast path)
    service: str = ""
    service_key: str = ""
    time: str = ""
    teacher: str = ""
    teacher_key: str = ""
    entry_type: str = ""                 # raw "Clase" column; may be blank
    payment_note: str = ""
    comment: str = ""
    classification: str = ""
    secondary_classification: str = ""
    amount: float = 0.0
    amount_present: bool = False
    id: str = ""

    @classmethod
    def build(cls, **values) -> "Record":
        """Create a Record deriving the normalized keys from the raw values."""
        rec = cls(**values)
        rec.student_key = norm(rec.student_name)
        rec.service_key = norm(rec.service)
        rec.teacher_key = norm(rec.teacher)
        return rec

    @property
    def timestamp(self) -> Optional[float]:
        """Date timestamp, parsed on demand when the loader skipped it."""
        if self.date_ts is not None:
            return self.date_ts
        return parse_timestamp(self.date_raw)

    @property
    def kind(self) -> EntryType:
        return infer_entry_type(self)

    def to_dict(self) -> dict:
        d = asdict(self)
        d["kind"] = self.kind.value
        return d

    @classmethod
    def from_dict(cls, data: dict) -> "Record":
        names = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in names})


def infer_entry_type(record: Record) -> EntryType:
    """Single entry type for display and last-class/payment: class wins on mixed labels."""
    explicit = norm(record.entry_type)
    if explicit:
        if "clase" in explicit or "class" in explicit:
            return EntryType.CLASS
        if "pago" in explicit or "payment" in explicit:
            return EntryType.PAYMENT
        return EntryType.OTHER
    return EntryType.PAYMENT if (record.payment_note or "").strip() else EntryType.CLASS


def is_class_entry(record: Record) -> bool:
    """Class selector test: explicit type mentions a class, else no payment note.

    Checked independently of is_payment_entry, so a mixed label such as
    "Pago clase" matches both selectors.
    """
    explicit = norm(record.entry_type)
    if explicit:
        return "clase" in explicit or "class" in explicit
    return not (record.payment_note or "").strip()


def is_payment_entry(record: Record) -> bool:
    explicit = norm(record.entry_type)
    if explicit:
        return "pago" in explicit or "payment" in explicit
    return bool((record.payment_note or "").strip())


def entry_type_label(record: Record) -> str:
    """Display label: the explicit type text, else "Pago"/"Clase"."""
    explicit = (record.entry_type or "").strip()
    if explicit:
        return explicit
    return "Pago" if (record.payment_note or "").strip() else "Clase"


@dataclass
class Student:
    key: str
    name: str
    classification: str = ""

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ParamsRow:
    student: str
    classification: str = ""


class ParamsIndex(dict):
    """Normalized student name -> classification label."""

    @classmethod
    def from_rows(cls, rows: list[ParamsRow]) -> "ParamsIndex":
        index = cls()
        for row in rows:
            index[norm(row.student)] = row.classification or ""
        return index

    def label_for(self, key: str) -> str:
        return self.get(key, "") or ""


@dataclass
class FilterSpec:
    """Record filter; every populated field is ANDed.

    Date bounds are inclusive POSIX timestamps, None = unbounded.
    """
    student_key: str = ""
    teacher: str = ""
    entry_type: TypeSelector = TypeSelector.ALL
    services: frozenset[str] = field(default_factory=frozenset)
    date_from: Optional[float] = None
    date_to: Optional[float] = None

    @property
    def has_date_bounds(self) -> bool:
        return self.date_from is not None or self.date_to is not None

    @classmethod
    def from_values(
        cls,
        student_key: str = "",
        teacher: str = "",
        entry_type: str | None = None,
        services: list[str] | None = None,
        date_from: str | dt.date | None = None,
        date_to: str | dt.date | None = None,
    ) -> "FilterSpec":
        """Build a spec from loosely typed inputs (query params, CLI args).

        Dates are widened to whole days: from = 00:00, to = 23:59:59.999.
        """
        selector = TypeSelector.ALL
        t = norm(entry_type)
        if t in ("clase", "class"):
            selector = TypeSelector.CLASS
        elif t in ("pago", "payment"):
            selector = TypeSelector.PAYMENT

        start, _ = day_bounds(date_from) if date_from else (None, None)
        _, end = day_bounds(date_to) if date_to else (None, None)

        return cls(
            student_key=student_key or "",
            teacher=teacher or "",
            entry_type=selector,
            services=frozenset(norm(s) for s in (services or []) if norm(s)),
            date_from=start,
            date_to=end,
        )


@dataclass
class CachePack:
    """A parsed result plus the time it was produced."""
    payload: dict
    produced_at: float

    def to_dict(self) -> dict:
        return {"payload": self.payload, "produced_at": self.produced_at}

    @classmethod
    def from_dict(cls, data) -> Optional["CachePack"]:
        if not isinstance(data, dict):
            return None
        payload = data.get("payload")
        stamp = data.get("produced_at")
        if not isinstance(payload, dict) or not isinstance(stamp, (int, float)):
            return None
        return cls(payload=payload, produced_at=float(stamp))
