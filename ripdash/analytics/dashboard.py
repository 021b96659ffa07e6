"""
Dashboard payloads — JSON-ready dicts for the classification and balance
pages and the student statement view.
"""
from __future__ import annotations

from typing import Optional

from ripdash.analytics.balances import balance_buckets, global_kpis
from ripdash.analytics.classification import classification_buckets
from ripdash.analytics.common import sanitize_for_json
from ripdash.analytics.context import ViewContext
from ripdash.data.schemas import Record, Student, entry_type_label

CLASSIFICATION_TITLES = {
    "active": "Activos netos",
    "to_review": "Por revisar",
    "inactive": "Inactivos",
}

BALANCE_TITLES = {
    "owes": "Deben",
    "settled": "Se acabó",
    "owed_to_them": "Les debemos / Clases activas",
}


def classification_summary(students: list[Student]) -> dict:
    groups = classification_buckets(students)
    return sanitize_for_json({
        "total": len(students),
        "buckets": {
            name: {
                "title": CLASSIFICATION_TITLES[name],
                "count": len(members),
                "students": members,
            }
            for name, members in groups.items()
        },
    })


def balance_summary(students: list[Student], records: list[Record]) -> dict:
    groups = balance_buckets(students, records)
    return sanitize_for_json({
        "kpis": global_kpis(records),
        "buckets": {
            name: {
                "title": BALANCE_TITLES[name],
                "count": len(members),
                "students": members,
            }
            for name, members in groups.items()
        },
    })


def record_row(record: Record) -> dict:
    """Table row with the display type label the registration table shows."""
    row = record.to_dict()
    row["type_label"] = entry_type_label(record)
    return row


def statement_summary(ctx: ViewContext) -> Optional[dict]:
    """Statement payload for the context's selected student, None if unknown."""
    student = ctx.student
    statement = ctx.statement()
    if student is None or statement is None:
        return None

    data = statement.to_dict()
    data["rows"] = [record_row(r) for r in statement.rows]
    last = statement.last_record
    data["student"] = student.to_dict()
    data["last_date"] = last.date_raw if last else ""
    data["last_payment_note"] = statement.last_payment.payment_note if statement.last_payment else ""
    return sanitize_for_json(data)
