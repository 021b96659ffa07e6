"""
Per-student statement: dated rows, balance, pivot by classification pair and
the most recent class/payment.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ripdash.analytics.common import records_frame
from ripdash.config import BALANCE_LABELS, UNCLASSIFIED_LABEL, UNCLASSIFIED_PAYMENT_LABEL
from ripdash.data.schemas import EntryType, Record, infer_entry_type


@dataclass
class PivotItem:
    classification: str
    payment_classification: str
    total: float

    def to_dict(self) -> dict:
        return {
            "classification": self.classification,
            "payment_classification": self.payment_classification,
            "total": self.total,
        }


@dataclass
class StudentStatement:
    student_key: str
    rows: list[Record] = field(default_factory=list)
    balance: float = 0.0
    pivot: list[PivotItem] = field(default_factory=list)
    balance_labels: tuple[str, ...] = ()
    last_class: Optional[Record] = None
    last_payment: Optional[Record] = None

    @property
    def last_record(self) -> Optional[Record]:
        return self.rows[0] if self.rows else None

    def to_dict(self) -> dict:
        def _rec(r: Optional[Record]):
            return r.to_dict() if r is not None else None

        return {
            "student_key": self.student_key,
            "balance": self.balance,
            "balance_labels": list(self.balance_labels),
            "pivot": [p.to_dict() for p in self.pivot],
            "last_record": _rec(self.last_record),
            "last_class": _rec(self.last_class),
            "last_payment": _rec(self.last_payment),
            "rows": [r.to_dict() for r in self.rows],
        }


def sort_by_date_desc(records: list[Record]) -> list[Record]:
    """Newest first; undated rows last; ties keep their original order."""
    def _key(r: Record):
        ts = r.timestamp
        return (ts is not None, ts if ts is not None else 0.0)

    return sorted(records, key=_key, reverse=True)


def balance_rows(rows: list[Record]) -> tuple[list[Record], tuple[str, ...]]:
    """Rows that count toward the balance, plus the restricting labels found.

    When any row carries one of BALANCE_LABELS (exact match), only rows with
    a label actually present count; otherwise every row does.
    """
    present = tuple(label for label in BALANCE_LABELS if any(r.classification == label for r in rows))
    if not present:
        return rows, ()
    return [r for r in rows if r.classification in present], present


def pivot_by_classification(rows: list[Record]) -> list[PivotItem]:
    """Sum of amount per (classification, payment classification), largest |sum| first."""
    if not rows:
        return []
    frame = records_frame(rows)
    frame["pivot_a"] = frame["classification"].str.strip().replace("", UNCLASSIFIED_LABEL)
    frame["pivot_b"] = frame["secondary_classification"].str.strip().replace("", UNCLASSIFIED_PAYMENT_LABEL)
    sums = frame.groupby(["pivot_a", "pivot_b"], sort=False)["amount"].sum()

    items = [PivotItem(str(a), str(b), float(total)) for (a, b), total in sums.items()]
    items.sort(key=lambda p: abs(p.total), reverse=True)
    return items


def last_by_type(rows: list[Record]) -> tuple[Optional[Record], Optional[Record]]:
    """First class and first payment in already date-sorted rows."""
    last_class = next((r for r in rows if infer_entry_type(r) == EntryType.CLASS), None)
    last_payment = next((r for r in rows if infer_entry_type(r) == EntryType.PAYMENT), None)
    return last_class, last_payment


def student_statement(records: list[Record], student_key: str) -> StudentStatement:
    rows = sort_by_date_desc([r for r in records if r.student_key == student_key])
    relevant, labels = balance_rows(rows)
    last_class, last_payment = last_by_type(rows)
    return StudentStatement(
        student_key=student_key,
        rows=rows,
        balance=float(sum(r.amount for r in relevant)),
        pivot=pivot_by_classification(relevant),
        balance_labels=labels,
        last_class=last_class,
        last_payment=last_payment,
    )
