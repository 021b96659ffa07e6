"""
DataStore — the in-memory snapshot served to the dashboards.

Loading is staged: a fast registration-only snapshot for first paint, then a
full snapshot that supersedes it. The state machine is

    EMPTY --fast--> FAST --full--> FULL
    EMPTY --full--> FULL           FULL --full--> FULL

A fast result never replaces a full one, and a failed load leaves the current
snapshot untouched. Loads of the same kind are serialized by a lock.
"""
from __future__ import annotations

import datetime as dt
import logging
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ripdash.data.loader import DataLoader, LoadResult
from ripdash.data.normalize import collation_key, norm
from ripdash.data.schemas import ParamsIndex, Record, Student

logger = logging.getLogger(__name__)


class LoadState(str, Enum):
    EMPTY = "empty"
    FAST = "fast"
    FULL = "full"


@dataclass(frozen=True)
class Snapshot:
    state: LoadState = LoadState.EMPTY
    records: list[Record] = field(default_factory=list)
    students: list[Student] = field(default_factory=list)
    params: ParamsIndex = field(default_factory=ParamsIndex)
    loaded_at: Optional[float] = None


class DataStore:
    """Holds the current snapshot and applies load results to it."""

    def __init__(self, loader: Optional[DataLoader] = None) -> None:
        self.loader = loader if loader is not None else DataLoader()
        self.snapshot = Snapshot()
        self.last_error: Optional[Exception] = None
        self._locks = {LoadState.FAST: threading.Lock(), LoadState.FULL: threading.Lock()}
        self._swap_lock = threading.Lock()
        self._background = threading.Lock()

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _apply(self, kind: LoadState, result: LoadResult) -> bool:
        with self._swap_lock:
            if kind == LoadState.FAST and self.snapshot.state == LoadState.FULL:
                logger.info("Ignoring fast result: full snapshot already loaded")
                return False
            self.snapshot = Snapshot(
                state=kind,
                records=result.records,
                students=result.students,
                params=result.params,
                loaded_at=time.time(),
            )
            return True

    def _run(self, kind: LoadState, force: bool) -> "DataStore":
        with self._locks[kind]:
            try:
                if kind == LoadState.FAST:
                    result = self.loader.load_fast(force=force)
                else:
                    result = self.loader.load_full(force=force)
            except Exception as exc:
                self.last_error = exc
                logger.error("%s load failed: %s", kind.value, exc)
                raise
            self.last_error = None
            self._apply(kind, result)
        return self

    def load_fast(self, force: bool = False) -> "DataStore":
        return self._run(LoadState.FAST, force)

    def load_full(self, force: bool = False) -> "DataStore":
        return self._run(LoadState.FULL, force)

    def load(self, force: bool = False) -> "DataStore":
        """Fast then full, in the foreground."""
        self.load_fast(force=force)
        return self.load_full(force=force)

    def load_full_in_background(self, force: bool = False) -> Optional[threading.Thread]:
        """Run the full load on a daemon thread; errors are logged, not raised.

        Returns None without starting anything while a background load is
        already running.
        """
        if not self._background.acquire(blocking=False):
            logger.info("Background full load already running")
            return None

        def _work():
            try:
                self.load_full(force=force)
            except Exception:
                logger.exception("Background full load failed; keeping %s snapshot", self.state.value)
            finally:
                self._background.release()

        thread = threading.Thread(target=_work, name="ripdash-full-load", daemon=True)
        thread.start()
        return thread

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def state(self) -> LoadState:
        return self.snapshot.state

    @property
    def is_loaded(self) -> bool:
        return self.snapshot.state != LoadState.EMPTY

    @property
    def records(self) -> list[Record]:
        return self.snapshot.records

    @property
    def students(self) -> list[Student]:
        return self.snapshot.students

    def row_count(self) -> int:
        return len(self.snapshot.records)

    def student(self, key: str) -> Optional[Student]:
        return next((s for s in self.snapshot.students if s.key == key), None)

    def find_student_key(self, name: str) -> str:
        """Key of the student whose name matches `name` exactly after normalization."""
        target = norm(name)
        if not target:
            return ""
        hit = next((s for s in self.snapshot.students if norm(s.name) == target), None)
        return hit.key if hit else ""

    def suggest_students(self, query: str = "", limit: Optional[int] = None) -> list[Student]:
        """Name search for the student picker."""
        from ripdash.config import SUGGEST_LIMIT_DEFAULT, SUGGEST_LIMIT_QUERY

        q = norm(query)
        if q:
            matches = [s for s in self.snapshot.students if q in norm(s.name)]
            return matches[: limit or SUGGEST_LIMIT_QUERY]
        return self.snapshot.students[: limit or SUGGEST_LIMIT_DEFAULT]

    def _unique(self, key_attr: str, name_attr: str) -> list[dict]:
        seen: dict[str, str] = {}
        for rec in self.snapshot.records:
            k = getattr(rec, key_attr)
            if k and k not in seen:
                seen[k] = getattr(rec, name_attr) or ""
        items = [{"key": k, "name": name} for k, name in seen.items()]
        items.sort(key=lambda x: collation_key(x["name"]))
        return items

    def services(self) -> list[dict]:
        """Unique services (normalized key, first-seen name) sorted by name."""
        return self._unique("service_key", "service")

    def teachers(self) -> list[dict]:
        """Unique teachers (normalized key, first-seen name) sorted by name."""
        return self._unique("teacher_key", "teacher")

    def loaded_at_label(self) -> str:
        if self.snapshot.loaded_at is None:
            return "never"
        return dt.datetime.fromtimestamp(self.snapshot.loaded_at).strftime("%Y-%m-%d %H:%M:%S")
