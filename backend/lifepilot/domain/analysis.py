"""Personalized analysis produced from a generation response."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional
from uuid import uuid4

from pydantic import BaseModel, Field

from lifepilot.domain.enums import (
    EvidenceType,
    FocusArea,
    InsightSeverity,
    RecommendationImpact,
    TimeFrame,
)


def new_id() -> str:
    return str(uuid4())


class Insight(BaseModel):
    id: str = Field(default_factory=new_id)
    title: str
    description: str
    focus_area: FocusArea
    severity: InsightSeverity


class Recommendation(BaseModel):
    id: str = Field(default_factory=new_id)
    title: str
    description: str
    focus_area: FocusArea
    impact: RecommendationImpact
    timeframe: TimeFrame
    # None means the user has not decided yet.
    accepted: Optional[bool] = None


class EvidenceLink(BaseModel):
    id: str = Field(default_factory=new_id)
    title: str
    url: str
    type: EvidenceType


class PersonalizedAnalysis(BaseModel):
    id: str = Field(default_factory=new_id)
    user_id: str
    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    insights: List[Insight] = Field(default_factory=list)
    recommendations: List[Recommendation] = Field(default_factory=list)
    evidence_links: Optional[List[EvidenceLink]] = None

    def accepted_recommendations(self) -> List[Recommendation]:
        return [rec for rec in self.recommendations if rec.accepted is True]

    def pending_recommendations(self) -> List[Recommendation]:
        return [rec for rec in self.recommendations if rec.accepted is None]

    def find_recommendation(self, recommendation_id: str) -> Optional[Recommendation]:
        for rec in self.recommendations:
            if rec.id == recommendation_id:
                return rec
        return None
