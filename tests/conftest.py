"""
Shared fixtures: sample sheets, a fake HTTP session and an in-memory cache.
"""
from __future__ import annotations

import pytest
import requests

from ripdash.data.cache import LocalCache, MemoryStorage
from ripdash.data.loader import DataLoader
from ripdash.data.store import DataStore

REGISTRO_URL = "https://sheets.test/registro.tsv"
PARAMS_URL = "https://sheets.test/params.tsv"
ARCHIVE_URL = "https://sheets.test/archive.tsv"

REGISTRO_HEADERS = [
    "Clase", "Estudiantes", "Fecha", "Servicio", "Hora", "Profesor", "Pago",
    "Comentario", "Clasificación", "ID", "Clasificación de pagos", "Movimiento",
]


def tsv(*rows: list[str]) -> str:
    return "\r\n".join("\t".join(r) for r in rows) + "\r\n"


REGISTRO_TSV = tsv(
    REGISTRO_HEADERS,
    ["Clase", "Ana Pérez", "05/01/2026", "Piano", "10:00", "Laura", "", "", "MS P", "1", "Paquete", "-100.000"],
    ["Pago", "ana perez", "2026-01-03", "Piano", "", "", "Transferencia", "", "MS P", "2", "Bancolombia", "170.000"],
    ["", "Ana Pérez", "10/01/2026", "Canto", "11:00", "Laura", "", "", "Otro", "3", "", "5.000"],
    ["Clase", "José Núñez", "07/01/2026", "Guitarra", "", "Mario", "", "", "", "4", "", "-50.000"],
    ["Clase", "Carla Ruiz", "2026-13-40", "Piano", "", "laura", "", "sin fecha", "", "5", "", "0"],
    ["Pago", "Carla Ruiz", "12/01/2026", "Piano", "", "", "Efectivo", "", "", "6", "", "80.000"],
)

PARAMS_TSV = tsv(
    ["Estudiante", "B", "C", "D", "E", "Estado"],
    ["Ana Pérez", "", "", "", "", "Activo"],
    ["José Núñez", "", "", "", "", "Inactivo"],
    ["Carla Ruiz", "", "", "", "", "En pausa"],
    ["", "", "", "", "", "Activo"],
)

ARCHIVE_TSV = tsv(
    ["A", "B", "Clase", "Estudiante", "Fecha", "Servicio", "Hora", "Profesor", "Pago", "Comentario", "Clasif", "Mov", "Extra"],
    ["x", "x", "Clase", "Ana Perez", "02/03/2025", "Piano", "10:00", "Laura", "", "", "MS P", "-40.000", "z"],
    ["x", "x", "Clase", "ANA PÉREZ", "15/06/2025", "Canto", "11:00", "Laura", "", "", "MS P", "-40.000", "z"],
    ["x", "x", "Pago", "Ana Pérez", "", "Piano", "", "", "Nequi", "", "MS P", "80.000", "z"],
    ["x", "x", "Clase", "José Núñez", "01/02/2025", "Guitarra", "", "Mario", "", "", "", "-50.000", "z"],
)


class FakeResponse:
    def __init__(self, text: str = "", status_code: int = 200) -> None:
        self.text = text
        self.status_code = status_code
        self.encoding = None


class FakeSession:
    """Stands in for requests: maps URL -> text, status code or exception."""

    def __init__(self, routes: dict | None = None) -> None:
        self.routes = dict(routes or {})
        self.calls: list[dict] = []

    def get(self, url, headers=None, timeout=None):
        self.calls.append({"url": url, "headers": headers, "timeout": timeout})
        route = self.routes.get(url, 404)
        if isinstance(route, Exception):
            raise route
        if isinstance(route, int):
            return FakeResponse("", status_code=route)
        return FakeResponse(route)

    def count(self, url: str) -> int:
        return sum(1 for c in self.calls if c["url"] == url)


class GatedSession(FakeSession):
    """FakeSession whose requests block until `gate` is set."""

    def __init__(self, routes, gate) -> None:
        super().__init__(routes)
        self.gate = gate

    def get(self, url, headers=None, timeout=None):
        self.gate.wait(timeout=5)
        return super().get(url, headers=headers, timeout=timeout)


class FakeClock:
    def __init__(self, start: float = 1_767_225_600.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def cache(storage, clock):
    return LocalCache(storage=storage, ttl=480, clock=clock)


@pytest.fixture
def session():
    return FakeSession({REGISTRO_URL: REGISTRO_TSV, PARAMS_URL: PARAMS_TSV, ARCHIVE_URL: ARCHIVE_TSV})


@pytest.fixture
def loader(cache, session):
    return DataLoader(cache=cache, session=session, registro_url=REGISTRO_URL, params_url=PARAMS_URL)


@pytest.fixture
def store(loader):
    return DataStore(loader=loader)


@pytest.fixture
def loaded_store(store):
    return store.load_full()


@pytest.fixture
def records(loaded_store):
    return loaded_store.records


@pytest.fixture
def students(loaded_store):
    return loaded_store.students


@pytest.fixture
def connection_error():
    return requests.exceptions.ConnectionError("connection refused")
