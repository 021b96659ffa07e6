"""
Classification buckets from the params-sheet label of each student.
"""
from __future__ import annotations

from ripdash.config import ACTIVE_KEYWORD, INACTIVE_KEYWORD, REVIEW_KEYWORDS
from ripdash.data.normalize import norm
from ripdash.data.schemas import Student

ACTIVE = "active"
TO_REVIEW = "to_review"
INACTIVE = "inactive"
BUCKET_ORDER = (ACTIVE, TO_REVIEW, INACTIVE)


def classify_label(label: str) -> str:
    """Bucket for a label; first match wins.

    active     "activo" but not "inactivo"
    to_review  "pausa" or "no registro"
    inactive   everything else, blank labels included
    """
    c = norm(label)
    if ACTIVE_KEYWORD in c and INACTIVE_KEYWORD not in c:
        return ACTIVE
    if any(k in c for k in REVIEW_KEYWORDS):
        return TO_REVIEW
    return INACTIVE


def classification_buckets(students: list[Student]) -> dict[str, list[Student]]:
    groups: dict[str, list[Student]] = {name: [] for name in BUCKET_ORDER}
    for s in students:
        groups[classify_label(s.classification)].append(s)
    return groups
