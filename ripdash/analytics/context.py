"""
ViewContext — the current filters and selected student, passed explicitly to
the engines instead of living in module-level state.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Optional

from ripdash.analytics.filters import apply_filters
from ripdash.analytics.statement import StudentStatement, student_statement
from ripdash.data.schemas import FilterSpec, Record, Student


@dataclass(frozen=True)
class ViewContext:
    records: list[Record] = field(default_factory=list)
    students: list[Student] = field(default_factory=list)
    filters: FilterSpec = field(default_factory=FilterSpec)
    student_key: str = ""

    def with_filters(self, filters: FilterSpec) -> "ViewContext":
        return replace(self, filters=filters)

    def with_student(self, student_key: str) -> "ViewContext":
        return replace(self, student_key=student_key)

    @property
    def student(self) -> Optional[Student]:
        return next((s for s in self.students if s.key == self.student_key), None)

    def filtered(self) -> list[Record]:
        return apply_filters(self.records, self.filters)

    def statement(self) -> Optional[StudentStatement]:
        if not self.student_key:
            return None
        return student_statement(self.records, self.student_key)
