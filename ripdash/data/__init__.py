"""Sheet parsing, normalization, caching, loading and the in-memory store."""
from .tsv import parse_tsv, parse_positional
from .normalize import norm, safe_num, parse_amount, parse_date, parse_timestamp, day_bounds, fmt_money
from .schemas import Record, Student, ParamsIndex, FilterSpec, CachePack, EntryType, TypeSelector
from .cache import LocalCache, MemoryStorage, JsonFileStorage
from .loader import DataLoader, LoadResult
from .store import DataStore, LoadState, Snapshot
