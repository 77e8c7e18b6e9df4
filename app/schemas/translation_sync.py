"""
Schemas for translation sync trigger and status endpoints.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field


class RemoteProjectResponse(BaseModel):
    id: str
    name: str


class SyncRunRequest(BaseModel):
    locales: list[str] | None = Field(
        default=None,
        description="Optional subset of catalog locale codes; catalog order is kept.",
    )


class SyncRunAcceptedResponse(BaseModel):
    run_id: UUID
    status: str
    created_at: datetime


class SyncRunStatusResponse(BaseModel):
    run_id: UUID
    status: str
    trigger: str
    created_at: datetime
    updated_at: datetime
    started_at: datetime | None = None
    completed_at: datetime | None = None
    request_payload: dict[str, Any] | None = None
    result_payload: dict[str, Any] | None = None
    error_message: str | None = None


class SyncRunListResponse(BaseModel):
    runs: list[SyncRunStatusResponse] = Field(default_factory=list)
