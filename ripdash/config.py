"""
RIP Dashboard — Configuration: source URLs, cache settings, column contract.
"""
import os
from pathlib import Path

# ---------------------------------------------------------------------------
# Published sheet URLs, overridable per deployment
# ---------------------------------------------------------------------------
_SHEET_BASE = (
    "https://docs.google.com/spreadsheets/d/e/"
    "2PACX-1vREJFkqvhXwjBNPCQXTg4pHXUplygJU1ZZG6-xgOeAJ2ifnEMHmuoDJKwQIpxVfGfCrmfmNCS_8RHTc/pub"
)
REGISTRO_URL = os.environ.get(
    "RIP_REGISTRO_URL", f"{_SHEET_BASE}?gid=1810443337&single=true&output=tsv"
)
PARAMS_URL = os.environ.get(
    "RIP_PARAMS_URL", f"{_SHEET_BASE}?gid=745458333&single=true&output=tsv"
)
ARCHIVE_URL = os.environ.get(
    "RIP_ARCHIVE_URL",
    "https://docs.google.com/spreadsheets/d/e/"
    "2PACX-1vRv5znuM6DUG7m6DOQBCbjzJiYpZJiuMK23GW__RfMCcOi1kAcMT_7YH7CzBgmtDEJ-HeiJ5bgCKryw/pub"
    "?gid=1810443337&single=true&output=tsv",
)

FETCH_TIMEOUT = float(os.environ.get("RIP_FETCH_TIMEOUT", "20"))

# ---------------------------------------------------------------------------
# Local cache
# ---------------------------------------------------------------------------
CACHE_DIR = Path(os.environ.get("RIP_CACHE_DIR", str(Path.home() / ".cache" / "ripdash")))
CACHE_TTL_SECONDS = float(os.environ.get("RIP_CACHE_TTL_SECONDS", str(8 * 60)))

# Logical slot names; the meta slot holds one timestamp per data slot
SLOT_REGISTRO_FAST = "registro_fast_v1"
SLOT_REGISTRO = "registro_v2"
SLOT_PARAMS = "params_v2"
SLOT_META = "meta_v2"
DATA_SLOTS = (SLOT_REGISTRO_FAST, SLOT_REGISTRO, SLOT_PARAMS)

EXPORTS_DIR = Path(os.environ.get("RIP_EXPORTS_DIR", str(Path.home() / "Desktop" / "RIP Exports")))

# ---------------------------------------------------------------------------
# Registration sheet headers → internal field names
# ---------------------------------------------------------------------------
# "Clase" holds the entry type (class/payment), NOT the student name
COLUMN_MAP = {
    "Clase": "entry_type",
    "Estudiantes": "student_name",
    "Fecha": "date_raw",
    "Servicio": "service",
    "Hora": "time",
    "Profesor": "teacher",
    "Pago": "payment_note",
    "Comentario": "comment",
    "Clasificación": "classification",
    "ID": "id",
    "Clasificación de pagos": "secondary_classification",
    "Movimiento": "amount",
}
HEADER_BY_FIELD = {field: header for header, field in COLUMN_MAP.items()}

REQUIRED_HEADERS = [
    "Clase",
    "Estudiantes",
    "Fecha",
    "Servicio",
    "Hora",
    "Profesor",
    "Pago",
    "Comentario",
    "Clasificación",
]

# Params sheet is positional: A = student, F = classification
PARAMS_STUDENT_COL = 0
PARAMS_CLASSIFICATION_COL = 5

# ---------------------------------------------------------------------------
# Prior-year archive sheet layout (positional)
# ---------------------------------------------------------------------------
ARCHIVE_SLICE = (2, 12)          # columns C..L
ARCHIVE_STUDENT_COL = 3          # D
ARCHIVE_DATE_COL = 4             # E

# ---------------------------------------------------------------------------
# Classification buckets (first match wins)
# ---------------------------------------------------------------------------
ACTIVE_KEYWORD = "activo"
INACTIVE_KEYWORD = "inactivo"
REVIEW_KEYWORDS = ("pausa", "no registro")

# Rows tagged with these exact labels are the only ones that count toward
# a student's balance when present
BALANCE_LABELS = ("MS P", "MS SP")

UNCLASSIFIED_LABEL = "Sin clasificar"
UNCLASSIFIED_PAYMENT_LABEL = "Sin clasif. pago"

# ---------------------------------------------------------------------------
# Student suggestion limits (name search box)
# ---------------------------------------------------------------------------
SUGGEST_LIMIT_QUERY = 80
SUGGEST_LIMIT_DEFAULT = 120

# Max rows returned by the record listing endpoint
RECORDS_LIMIT = 1400
