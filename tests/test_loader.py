import pytest

from ripdash.config import SLOT_PARAMS, SLOT_REGISTRO, SLOT_REGISTRO_FAST
from ripdash.data.loader import (
    DataLoader, build_student_index, fetch_text, missing_headers, parse_params, parse_registro,
)
from ripdash.data.schemas import EntryType
from ripdash.errors import FetchError, SchemaError
from tests.conftest import (
    PARAMS_TSV, PARAMS_URL, REGISTRO_HEADERS, REGISTRO_TSV, REGISTRO_URL, FakeSession, tsv,
)


def test_fetch_text_sends_no_cache_header(session):
    text = fetch_text(REGISTRO_URL, session=session, timeout=5)
    assert text == REGISTRO_TSV
    assert session.calls[0]["headers"] == {"Cache-Control": "no-cache"}
    assert session.calls[0]["timeout"] == 5


def test_fetch_text_http_error():
    with pytest.raises(FetchError) as exc:
        fetch_text(REGISTRO_URL, session=FakeSession({REGISTRO_URL: 500}))
    assert exc.value.status == 500
    assert "500" in str(exc.value)


def test_fetch_text_network_error(connection_error):
    with pytest.raises(FetchError) as exc:
        fetch_text(REGISTRO_URL, session=FakeSession({REGISTRO_URL: connection_error}))
    assert exc.value.status is None
    assert "connection refused" in str(exc.value)


def test_missing_headers_lists_all_absent():
    headers = [h for h in REGISTRO_HEADERS if h not in ("Fecha", "Profesor")]
    assert missing_headers(headers) == ["Fecha", "Profesor"]


def test_parse_registro_rejects_bad_schema():
    text = tsv(["Clase", "Estudiantes"], ["Clase", "Ana"])
    with pytest.raises(SchemaError) as exc:
        parse_registro(text)
    assert "Fecha" in exc.value.missing
    assert "Missing columns" in str(exc.value)
    with pytest.raises(SchemaError):
        parse_registro(text, fast=True)


def test_parse_registro_full():
    records = parse_registro(REGISTRO_TSV)
    assert len(records) == 6

    first = records[0]
    assert first.student_key == "ana perez"
    assert first.amount == -100000.0
    assert first.amount_present
    assert first.date_ts is not None
    assert first.secondary_classification == "Paquete"
    assert first.id == "1"

    assert records[2].kind == EntryType.CLASS
    assert records[1].kind == EntryType.PAYMENT
    assert records[4].date_ts is None


def test_parse_registro_without_optional_columns():
    required = REGISTRO_HEADERS[:9]
    text = tsv(required, ["Clase", "Ana", "05/01/2026", "Piano", "", "Laura", "", "", "MS P"])
    rec = parse_registro(text)[0]
    assert rec.amount == 0.0
    assert not rec.amount_present
    assert rec.id == ""
    assert rec.secondary_classification == ""


def test_parse_registro_fast_skips_dates_and_amounts():
    records = parse_registro(REGISTRO_TSV, fast=True)
    assert len(records) == 6
    assert all(r.date_ts is None and r.amount == 0.0 for r in records)
    assert records[0].id == "1"
    # timestamps are still available lazily
    assert records[0].timestamp is not None


def test_parse_params_positional():
    rows = parse_params(PARAMS_TSV)
    assert [(r.student, r.classification) for r in rows] == [
        ("Ana Pérez", "Activo"),
        ("José Núñez", "Inactivo"),
        ("Carla Ruiz", "En pausa"),
    ]


def test_parse_params_warns_when_column_looks_wrong(caplog):
    text = tsv(["A", "B", "C", "D", "E", "F"], ["Ana", "", "", "", "", "2026"])
    rows = parse_params(text)
    assert rows[0].classification == "2026"
    assert "classification-like" in caplog.text


def test_build_student_index_first_seen_name_and_order():
    records = parse_registro(REGISTRO_TSV)
    students = build_student_index(records)
    assert [s.name for s in students] == ["Ana Pérez", "Carla Ruiz", "José Núñez"]
    assert [s.key for s in students] == ["ana perez", "carla ruiz", "jose nunez"]
    assert all(s.classification == "" for s in students)


def test_load_full_joins_params(loader):
    result = loader.load_full()
    assert not result.from_cache
    by_key = {s.key: s.classification for s in result.students}
    assert by_key == {"ana perez": "Activo", "jose nunez": "Inactivo", "carla ruiz": "En pausa"}


def test_load_full_uses_cache_within_ttl(loader, session, clock):
    loader.load_full()
    clock.advance(60)
    result = loader.load_full()
    assert result.from_cache
    assert session.count(REGISTRO_URL) == 1
    assert session.count(PARAMS_URL) == 1
    assert len(result.records) == 6
    assert result.records[0].amount == -100000.0


def test_load_full_refetches_after_ttl_or_force(loader, session, clock):
    loader.load_full()
    clock.advance(481)
    loader.load_full()
    assert session.count(REGISTRO_URL) == 2
    loader.load_full(force=True)
    assert session.count(REGISTRO_URL) == 3


def test_load_fast_writes_its_own_slot(loader, cache, session):
    result = loader.load_fast()
    assert len(result.records) == 6
    assert [s.name for s in result.students] == ["Ana Pérez", "Carla Ruiz", "José Núñez"]
    assert session.count(PARAMS_URL) == 0
    assert cache.read_fresh(SLOT_REGISTRO_FAST) is not None
    assert cache.read_fresh(SLOT_REGISTRO) is None

    again = loader.load_fast()
    assert again.from_cache
    assert session.count(REGISTRO_URL) == 1


def test_failed_params_fetch_keeps_registro_cached(cache, clock):
    session = FakeSession({REGISTRO_URL: REGISTRO_TSV, PARAMS_URL: 503})
    loader = DataLoader(cache=cache, session=session, registro_url=REGISTRO_URL, params_url=PARAMS_URL)
    with pytest.raises(FetchError):
        loader.load_full()
    assert cache.read_fresh(SLOT_REGISTRO) is not None
    assert cache.read_fresh(SLOT_PARAMS) is None


def test_schema_error_does_not_touch_cache(cache):
    session = FakeSession({REGISTRO_URL: tsv(["Clase"], ["x"]), PARAMS_URL: PARAMS_TSV})
    loader = DataLoader(cache=cache, session=session, registro_url=REGISTRO_URL, params_url=PARAMS_URL)
    with pytest.raises(SchemaError):
        loader.load_full()
    assert cache.read(SLOT_REGISTRO) is None


def test_malformed_cached_records_trigger_refetch(loader, storage, session):
    storage.set(SLOT_REGISTRO, '{"payload": {"records": [1, 2]}, "produced_at": 1767225600}')
    storage.set("meta_v2", '{"registro_v2": 1767225600}')
    records, cached = loader._load_registro(force=False)
    assert not cached
    assert len(records) == 6
    assert session.count(REGISTRO_URL) == 1
