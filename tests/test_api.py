import threading

import pytest
from fastapi.testclient import TestClient

from ripdash.api.dependencies import set_archive, set_store
from ripdash.api.router_students import content_disposition
from ripdash.data.archive import ArchiveLookup
from ripdash.data.loader import DataLoader
from ripdash.data.store import DataStore
from ripdash.main import create_app
from tests.conftest import (
    ARCHIVE_URL, PARAMS_TSV, PARAMS_URL, REGISTRO_TSV, REGISTRO_URL, FakeSession, GatedSession, tsv,
)


@pytest.fixture
def client(loaded_store, session):
    app = create_app(store=loaded_store, load_on_startup=False)
    set_archive(ArchiveLookup(url=ARCHIVE_URL, session=session))
    return TestClient(app)


def test_health(client):
    body = client.get("/api/health").json()
    assert body["status"] == "ok"
    assert body["state"] == "full"
    assert body["rows"] == 6
    assert body["students"] == 3
    assert body["last_error"] is None


def test_not_loaded_returns_503(store):
    client = TestClient(create_app(store=store, load_on_startup=False))
    assert client.get("/api/dashboard/classification").status_code == 503
    assert client.get("/api/health").json()["status"] == "loading"


def test_students_search(client):
    body = client.get("/api/students", params={"q": "nun"}).json()
    assert body["count"] == 1
    assert body["students"][0] == {"key": "jose nunez", "name": "José Núñez", "classification": "Inactivo"}


def test_student_lookup(client):
    assert client.get("/api/students/lookup", params={"name": "ANA perez"}).json()["key"] == "ana perez"
    assert client.get("/api/students/lookup", params={"name": "Ana"}).json()["key"] == ""


def test_services_and_teachers(client):
    assert [s["name"] for s in client.get("/api/services").json()["services"]] == ["Canto", "Guitarra", "Piano"]
    assert [t["key"] for t in client.get("/api/teachers").json()["teachers"]] == ["laura", "mario"]


def test_classification_dashboard(client):
    body = client.get("/api/dashboard/classification").json()
    assert body["total"] == 3
    assert body["buckets"]["to_review"]["students"][0]["name"] == "Carla Ruiz"


def test_balance_dashboard(client):
    body = client.get("/api/dashboard/balances").json()
    assert body["kpis"] == {"global_balance": 105000.0, "students_with_balance": 3}
    assert body["buckets"]["owes"]["count"] == 1


def test_statement(client):
    body = client.get("/api/students/ana perez/statement").json()
    assert body["balance"] == 70000.0
    assert [r["id"] for r in body["rows"]] == ["3", "1", "2"]
    assert client.get("/api/students/nadie/statement").status_code == 404


def test_statement_xlsx(client):
    resp = client.get("/api/students/ana perez/statement.xlsx")
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("application/vnd.openxmlformats")
    disposition = resp.headers["content-disposition"]
    assert disposition.isascii()
    assert 'filename="Ficha_Ana_Perez.xlsx"' in disposition
    assert "filename*=UTF-8''Ficha_Ana_P%C3%A9rez.xlsx" in disposition
    assert resp.content[:2] == b"PK"


def test_archive(client):
    body = client.get("/api/students/ana perez/archive").json()
    assert len(body["rows"]) == 3


def test_records_with_filters(client):
    body = client.get("/api/records", params={"type": "pago"}).json()
    assert body["total"] == 2
    assert [r["type_label"] for r in body["rows"]] == ["Pago", "Pago"]

    body = client.get("/api/records", params=[("service", "Piano"), ("service", "Canto"), ("limit", "2")]).json()
    assert body["total"] == 5
    assert len(body["rows"]) == 2

    body = client.get("/api/records", params={"date_from": "2026-01-05", "date_to": "2026-01-10"}).json()
    assert [r["id"] for r in body["rows"]] == ["1", "3", "4"]

    body = client.get("/api/records", params={"student": "Jose Nuñez"}).json()
    assert [r["id"] for r in body["rows"]] == ["4"]


def test_records_bad_params(client):
    assert client.get("/api/records", params={"type": "refund"}).status_code == 400
    assert client.get("/api/records", params={"student": "Nadie"}).status_code == 404
    assert client.get("/api/records", params={"date_from": "not-a-date"}).status_code == 422


def test_reload_wait(client, loaded_store, session):
    resp = client.post("/api/reload", params={"wait": "true"})
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"
    assert session.count(REGISTRO_URL) == 2


def test_reload_schema_error_maps_to_422(cache):
    session = FakeSession({REGISTRO_URL: tsv(["Clase"], ["x"]), PARAMS_URL: PARAMS_TSV})
    store = DataStore(DataLoader(cache=cache, session=session, registro_url=REGISTRO_URL, params_url=PARAMS_URL))
    client = TestClient(create_app(store=store, load_on_startup=False))
    resp = client.post("/api/reload", params={"wait": "true"})
    assert resp.status_code == 422
    assert "Estudiantes" in resp.json()["missing"]


def test_reload_fetch_error_maps_to_502(cache):
    session = FakeSession({REGISTRO_URL: 500, PARAMS_URL: PARAMS_TSV})
    store = DataStore(DataLoader(cache=cache, session=session, registro_url=REGISTRO_URL, params_url=PARAMS_URL))
    client = TestClient(create_app(store=store, load_on_startup=False))
    resp = client.post("/api/reload", params={"wait": "true"})
    assert resp.status_code == 502
    assert resp.json()["status"] == 500
    assert client.get("/api/health").json()["last_error"] == "Could not load TSV (500)"


def test_startup_runs_fast_load(store):
    set_store(store)
    app = create_app()
    app.state.store = store
    with TestClient(app) as client:
        assert client.get("/api/health").json()["state"] in ("fast", "full")


def test_content_disposition_outside_latin1():
    header = content_disposition("Zoë 李")
    header.encode("latin-1")
    assert 'filename="Ficha_Zoe.xlsx"' in header
    assert "filename*=UTF-8''Ficha_Zo%C3%AB_%E6%9D%8E.xlsx" in header


def test_fast_snapshot_holds_back_balances_and_statements(store):
    store.load_fast()
    client = TestClient(create_app(store=store, load_on_startup=False))
    for path in (
        "/api/dashboard/classification",
        "/api/dashboard/balances",
        "/api/students/ana perez/statement",
        "/api/students/ana perez/statement.xlsx",
    ):
        resp = client.get(path)
        assert resp.status_code == 503
        assert "fast" in resp.json()["detail"]

    # the registration table and pickers work from the fast snapshot
    assert client.get("/api/records").json()["total"] == 6
    assert client.get("/api/students").json()["count"] == 3

    store.load_full()
    assert client.get("/api/students/ana perez/statement").json()["balance"] == 70000.0


def test_reload_while_reloading(cache):
    gate = threading.Event()
    session = GatedSession({REGISTRO_URL: REGISTRO_TSV, PARAMS_URL: PARAMS_TSV}, gate)
    store = DataStore(DataLoader(cache=cache, session=session, registro_url=REGISTRO_URL, params_url=PARAMS_URL))
    client = TestClient(create_app(store=store, load_on_startup=False))

    assert client.post("/api/reload").json()["status"] == "reloading"
    assert client.post("/api/reload").json()["status"] == "already_reloading"
    gate.set()
