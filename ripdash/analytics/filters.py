"""
Record filter for the registration table view.
"""
from __future__ import annotations

from ripdash.data.normalize import norm
from ripdash.data.schemas import FilterSpec, Record, TypeSelector, is_class_entry, is_payment_entry


def matches(record: Record, spec: FilterSpec) -> bool:
    if spec.student_key and record.student_key != spec.student_key:
        return False

    if spec.teacher and record.teacher_key != norm(spec.teacher):
        return False

    if spec.entry_type == TypeSelector.CLASS and not is_class_entry(record):
        return False
    if spec.entry_type == TypeSelector.PAYMENT and not is_payment_entry(record):
        return False

    if spec.services and record.service_key not in spec.services:
        return False

    if spec.has_date_bounds:
        # Undated rows fail any active bound
        ts = record.timestamp
        if ts is None:
            return False
        if spec.date_from is not None and ts < spec.date_from:
            return False
        if spec.date_to is not None and ts > spec.date_to:
            return False

    return True


def apply_filters(records: list[Record], spec: FilterSpec | None = None) -> list[Record]:
    """Records satisfying every active constraint, in their original order."""
    if spec is None:
        return list(records)
    return [r for r in records if matches(r, spec)]
