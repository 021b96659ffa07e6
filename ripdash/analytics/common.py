"""
Shared helpers for the analytics modules: DataFrame view of records, JSON safety.
"""
from __future__ import annotations

import math
from dataclasses import fields

import numpy as np
import pandas as pd

from ripdash.data.schemas import Record

RECORD_COLUMNS = [f.name for f in fields(Record)] + ["kind"]


def records_frame(records: list[Record]) -> pd.DataFrame:
    """One row per record, original order preserved in the index."""
    frame = pd.DataFrame([r.to_dict() for r in records], columns=RECORD_COLUMNS)
    frame["amount"] = pd.to_numeric(frame["amount"], errors="coerce").fillna(0.0).astype(float)
    return frame


def sanitize_for_json(obj):
    """Recursively convert numpy/pandas/dataclass values to JSON-native Python."""
    if hasattr(obj, "to_dict") and not isinstance(obj, (pd.DataFrame, pd.Series)):
        return sanitize_for_json(obj.to_dict())
    if isinstance(obj, dict):
        clean = {}
        for k, v in obj.items():
            if k is None:
                continue
            if isinstance(k, float) and (math.isnan(k) or math.isinf(k)):
                continue
            clean[k if isinstance(k, str) else str(k)] = sanitize_for_json(v)
        return clean
    if isinstance(obj, (list, tuple, set, frozenset)):
        return [sanitize_for_json(v) for v in obj]
    if isinstance(obj, pd.DataFrame):
        return sanitize_for_json(obj.to_dict("records"))
    if isinstance(obj, (np.integer,)):
        return int(obj)
    if isinstance(obj, (np.floating,)):
        v = float(obj)
        return 0.0 if (math.isnan(v) or math.isinf(v)) else v
    if isinstance(obj, np.bool_):
        return bool(obj)
    if isinstance(obj, np.ndarray):
        return sanitize_for_json(obj.tolist())
    if isinstance(obj, float):
        return 0.0 if (math.isnan(obj) or math.isinf(obj)) else obj
    if hasattr(obj, "value") and isinstance(getattr(obj, "value"), str):
        return obj.value  # str enums
    return obj
