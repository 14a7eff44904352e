"""Schemas for analysis endpoints."""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from lifepilot.domain.analysis import PersonalizedAnalysis
from lifepilot.domain.enums import GenerationStatus
from lifepilot.domain.schedule import WeeklySchedule


class GenerateAnalysisRequest(BaseModel):
    user_id: str = Field(..., min_length=1, max_length=128)


class GenerateAnalysisResponse(BaseModel):
    analysis: PersonalizedAnalysis
    status: str
    reason: Optional[str] = None
    ticket_id: str
    ticket_status: GenerationStatus
    saved: bool
    request_id: str


class AnalysisResponse(BaseModel):
    analysis: PersonalizedAnalysis
    request_id: str


class RecommendationStatusRequest(BaseModel):
    user_id: str = Field(..., min_length=1, max_length=128)
    accepted: Optional[bool] = Field(default=None, description="true to accept, false to reject, null to reset.")


class RecommendationStatusResponse(BaseModel):
    analysis: PersonalizedAnalysis
    schedule: WeeklySchedule
    request_id: str
