"""
Balance buckets and global KPIs from the signed `amount` column.

Positive balance = the business owes the student classes; negative = the
student owes the business.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass

from ripdash.analytics.common import records_frame
from ripdash.data.normalize import collation_key
from ripdash.data.schemas import Record, Student

OWES = "owes"
SETTLED = "settled"
OWED_TO_THEM = "owed_to_them"
BUCKET_ORDER = (OWES, SETTLED, OWED_TO_THEM)


@dataclass
class StudentBalance:
    key: str
    name: str
    classification: str
    balance: float

    def to_dict(self) -> dict:
        return asdict(self)


def sum_amount_by_student(records: list[Record]) -> dict[str, float]:
    """Signed amount total per student key (records without a key are skipped)."""
    frame = records_frame(records)
    frame = frame[frame["student_key"] != ""]
    if frame.empty:
        return {}
    sums = frame.groupby("student_key", sort=False)["amount"].sum()
    return {str(k): float(v) for k, v in sums.items()}


def balance_buckets(students: list[Student], records: list[Record]) -> dict[str, list[StudentBalance]]:
    """Split students into owes / settled / owed_to_them.

    owes is sorted most negative first, owed_to_them largest first,
    settled alphabetically.
    """
    sums = sum_amount_by_student(records)
    groups: dict[str, list[StudentBalance]] = {name: [] for name in BUCKET_ORDER}

    for s in students:
        total = sums.get(s.key, 0.0)
        item = StudentBalance(key=s.key, name=s.name, classification=s.classification, balance=total)
        if total < 0:
            groups[OWES].append(item)
        elif total == 0:
            groups[SETTLED].append(item)
        else:
            groups[OWED_TO_THEM].append(item)

    groups[OWES].sort(key=lambda x: x.balance)
    groups[OWED_TO_THEM].sort(key=lambda x: x.balance, reverse=True)
    groups[SETTLED].sort(key=lambda x: collation_key(x.name))
    return groups


def global_kpis(records: list[Record]) -> dict[str, float | int]:
    """Total of all per-student balances and how many are non-zero."""
    sums = sum_amount_by_student(records)
    return {
        "global_balance": float(sum(sums.values())),
        "students_with_balance": sum(1 for v in sums.values() if v != 0),
    }
