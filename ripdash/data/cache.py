"""
LocalCache — TTL-gated key/value store for parsed sheet packs.

One slot per dataset plus a meta slot holding the last-write time of each
data slot. Reads of missing or corrupt entries count as a miss; write
failures are logged and swallowed.
"""
from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Callable, Optional

from ripdash.config import CACHE_DIR, CACHE_TTL_SECONDS, SLOT_META
from ripdash.data.schemas import CachePack

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Storage backends
# ---------------------------------------------------------------------------

class MemoryStorage:
    """Dict-backed storage holding serialized strings, like a browser store."""

    def __init__(self) -> None:
        self.items: dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self.items.get(key)

    def set(self, key: str, value: str) -> None:
        self.items[key] = value


class JsonFileStorage:
    """One JSON file per key inside a directory."""

    def __init__(self, directory: Path = CACHE_DIR) -> None:
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        tmp = self._path(key).with_suffix(".tmp")
        tmp.write_text(value, encoding="utf-8")
        tmp.replace(self._path(key))


# ---------------------------------------------------------------------------
# Cache
# ---------------------------------------------------------------------------

class LocalCache:
    def __init__(
        self,
        storage=None,
        ttl: float = CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.storage = storage if storage is not None else JsonFileStorage()
        self.ttl = ttl
        self.clock = clock

    def now(self) -> float:
        return self.clock()

    def is_fresh(self, stamp: Optional[float], ttl: Optional[float] = None) -> bool:
        if not stamp:
            return False
        return self.now() - stamp < (self.ttl if ttl is None else ttl)

    # -- raw JSON access ------------------------------------------------

    def _read_json(self, key: str):
        try:
            raw = self.storage.get(key)
            return json.loads(raw) if raw else None
        except (OSError, ValueError) as exc:
            logger.warning("Cache slot %s unreadable, treating as miss: %s", key, exc)
            return None

    def _write_json(self, key: str, value) -> bool:
        try:
            self.storage.set(key, json.dumps(value, ensure_ascii=False))
            return True
        except (OSError, TypeError, ValueError) as exc:
            logger.warning("Cache write to %s failed: %s", key, exc)
            return False

    # -- meta -----------------------------------------------------------

    def read_meta(self) -> dict[str, float]:
        meta = self._read_json(SLOT_META)
        if not isinstance(meta, dict):
            return {}
        return {k: float(v) for k, v in meta.items() if isinstance(v, (int, float))}

    def stamp(self, key: str) -> Optional[float]:
        return self.read_meta().get(key)

    # -- packs ----------------------------------------------------------

    def read(self, key: str) -> Optional[CachePack]:
        return CachePack.from_dict(self._read_json(key))

    def write(self, key: str, pack: CachePack) -> None:
        if not self._write_json(key, pack.to_dict()):
            return
        meta = self.read_meta()
        meta[key] = pack.produced_at
        self._write_json(SLOT_META, meta)

    def read_fresh(self, key: str) -> Optional[CachePack]:
        """Pack for `key` only if the meta stamp is within TTL."""
        if not self.is_fresh(self.stamp(key)):
            return None
        return self.read(key)

    def store(self, key: str, payload: dict) -> CachePack:
        """Wrap `payload` with the current time and write it through."""
        pack = CachePack(payload=payload, produced_at=self.now())
        self.write(key, pack)
        return pack
