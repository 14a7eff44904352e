"""Schemas for profile endpoints."""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from lifepilot.domain.enums import ActivityLevel, Challenge, FocusArea, SleepPreference
from lifepilot.domain.profile import UserProfile


class ProfileUpsertRequest(BaseModel):
    name: str = Field(default="", max_length=200)
    email: str = Field(default="", max_length=320)
    personality_type: Optional[str] = Field(default=None, max_length=100)
    onboarding_completed: bool = False
    sleep_preference: SleepPreference = SleepPreference.neutral
    activity_level: ActivityLevel = ActivityLevel.moderate
    focus_areas: List[FocusArea] = Field(default_factory=list)
    current_challenges: List[Challenge] = Field(default_factory=list)


class ProfileResponse(BaseModel):
    profile: UserProfile
    request_id: str
