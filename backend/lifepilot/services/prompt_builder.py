"""Render a user profile into the analysis prompt."""
from __future__ import annotations

from enum import Enum
from typing import Iterable, Type

from lifepilot.domain.enums import (
    Challenge,
    EvidenceType,
    FocusArea,
    InsightSeverity,
    RecommendationImpact,
    TimeFrame,
)
from lifepilot.domain.profile import UserProfile

NOT_SPECIFIED = "None specified"

DEFAULT_FOCUS_AREAS = (FocusArea.health, FocusArea.productivity, FocusArea.mindfulness)
DEFAULT_CHALLENGES = (Challenge.time_management, Challenge.motivation)

PROMPT_TEMPLATE = """You are LifePilot, an AI lifestyle coach. Analyze the following user profile and provide personalized insights and recommendations:

User Profile:
- Sleep Preference: {sleep_preference}
- Activity Level: {activity_level}
- Personality Type: {personality_type}
- Focus Areas: {focus_areas}
- Current Challenges: {challenges}

Based on this information, generate:
1. Three key insights about the user's current habits and how they might impact their goals
2. Four actionable recommendations that are personalized to their profile
3. Evidence or scientific backing for why these recommendations would be effective

IMPORTANT: Return ONLY a valid JSON object with NO additional text before or after. The response must be a properly formatted JSON object with the following structure:
{{
  "insights": [
    {{"title": "Insight Title", "description": "Detailed explanation", "focusArea": "{focus_values}", "severity": "{severity_values}"}}
  ],
  "recommendations": [
    {{"title": "Recommendation Title", "description": "Detailed explanation", "focusArea": "{focus_values}", "impact": "{impact_values}", "timeframe": "{timeframe_values}"}}
  ],
  "evidenceLinks": [
    {{"title": "Evidence Title", "url": "https://validurl.com", "type": "{evidence_values}"}}
  ]
}}

Ensure the JSON is valid and complete. No text should appear before or after the JSON object."""


def _values(enum: Type[Enum]) -> str:
    return "/".join(member.value for member in enum)


def _join(members: Iterable[Enum]) -> str:
    rendered = ", ".join(member.value for member in members)
    return rendered or NOT_SPECIFIED


def build_prompt(profile: UserProfile) -> str:
    return PROMPT_TEMPLATE.format(
        sleep_preference=profile.sleep_preference.value,
        activity_level=profile.activity_level.value,
        personality_type=profile.personality_type or "Unknown",
        focus_areas=_join(profile.focus_areas),
        challenges=_join(profile.current_challenges),
        focus_values=_values(FocusArea),
        severity_values=_values(InsightSeverity),
        impact_values=_values(RecommendationImpact),
        timeframe_values=_values(TimeFrame),
        evidence_values=_values(EvidenceType),
    )


def with_default_focus(profile: UserProfile) -> UserProfile:
    """Fill empty focus areas and challenges so the prompt is never blank."""
    updates = {}
    if not profile.focus_areas:
        updates["focus_areas"] = list(DEFAULT_FOCUS_AREAS)
    if not profile.current_challenges:
        updates["current_challenges"] = list(DEFAULT_CHALLENGES)
    if not updates:
        return profile
    return profile.model_copy(update=updates)
