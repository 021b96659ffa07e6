"""
Pydantic response schemas for the API.
"""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    state: str
    rows: int
    students: int
    loaded_at: str
    last_error: Optional[str] = None


class StudentItem(BaseModel):
    key: str
    name: str
    classification: str = ""


class StudentsResponse(BaseModel):
    students: list[StudentItem]
    count: int


class NamedKey(BaseModel):
    key: str
    name: str


class ServicesResponse(BaseModel):
    services: list[NamedKey]


class TeachersResponse(BaseModel):
    teachers: list[NamedKey]


class ReloadResponse(BaseModel):
    status: str
    message: str
