"""
app/schemas/poeditor.py

Wire envelope returned by the translation management API.

Every endpoint answers with ``{"response": {...}, "result": {...}}``; only the
fields the sync pipeline reads are modelled, anything else is ignored.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _WireModel(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class PoEditorResponseStatus(_WireModel):
    status: str
    code: str = ""
    message: str = ""

    @field_validator("code", mode="before")
    @classmethod
    def _coerce_code(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @property
    def failed(self) -> bool:
        return self.status.strip().lower() == "fail"


class PoEditorProjectItem(_WireModel):
    id: str
    name: str = ""

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> str:
        return str(value)


class PoEditorProjectListResult(_WireModel):
    projects: list[PoEditorProjectItem] = Field(default_factory=list)


class PoEditorExportResult(_WireModel):
    url: str = Field(min_length=1)


class PoEditorProjectListEnvelope(_WireModel):
    response: PoEditorResponseStatus
    result: PoEditorProjectListResult | None = None


class PoEditorExportEnvelope(_WireModel):
    response: PoEditorResponseStatus
    result: PoEditorExportResult | None = None
