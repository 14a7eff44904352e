"""Schemas for job operations endpoints."""
from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field


class JobRunRequest(BaseModel):
    job: Literal["ticket_sweep"] = "ticket_sweep"
    ttl_seconds: Optional[int] = Field(default=None, ge=0)


class JobRunResponse(BaseModel):
    job: str
    tickets_checked: int
    tickets_expired: int
    request_id: str
