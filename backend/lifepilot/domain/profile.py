"""User profile captured during onboarding."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from lifepilot.domain.enums import ActivityLevel, Challenge, FocusArea, SleepPreference


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserProfile(BaseModel):
    id: str
    name: str = ""
    email: str = ""
    created_at: datetime = Field(default_factory=_utcnow)
    personality_type: Optional[str] = None
    onboarding_completed: bool = False
    sleep_preference: SleepPreference = SleepPreference.neutral
    activity_level: ActivityLevel = ActivityLevel.moderate
    focus_areas: List[FocusArea] = Field(default_factory=list)
    current_challenges: List[Challenge] = Field(default_factory=list)

    @field_validator("focus_areas", "current_challenges")
    @classmethod
    def _dedupe(cls, values: list) -> list:
        # Sets with insertion order.
        return list(dict.fromkeys(values))
