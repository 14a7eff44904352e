"""Best-effort resolution of free-text labels onto domain enums.

Generated responses rarely use the exact canonical strings, so each enum has
an ordered keyword table. Resolution tries an exact match on the canonical
value (or member name), then the first keyword contained in the lower-cased
label, then the enum's default. It never raises.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Generic, Iterable, Sequence, Tuple, Type, TypeVar

from lifepilot.domain.enums import (
    EvidenceType,
    FocusArea,
    InsightSeverity,
    RecommendationImpact,
    TimeFrame,
)

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)


class EnumMapper(Generic[E]):
    def __init__(self, enum: Type[E], rules: Sequence[Tuple[str, E]], default: E) -> None:
        self.enum = enum
        self.rules = tuple((keyword.lower(), member) for keyword, member in rules)
        self.default = default
        self._exact = {member.value: member for member in enum}
        self._exact.update({member.name: member for member in enum})

    def resolve(self, label: Any) -> E:
        if isinstance(label, self.enum):
            return label
        text = "" if label is None else str(label)

        exact = self._exact.get(text)
        if exact is not None:
            return exact

        simplified = text.strip().lower()
        if simplified:
            for keyword, member in self.rules:
                if keyword in simplified:
                    return member

        logger.warning(
            "Could not match %s label %r; defaulting to %s",
            self.enum.__name__,
            text,
            self.default.value,
        )
        return self.default

    __call__ = resolve


def _rules(*groups: Tuple[Iterable[str], E]) -> list[Tuple[str, E]]:
    return [(keyword, member) for keywords, member in groups for keyword in keywords]


FOCUS_AREA_RULES = _rules(
    (("health", "fitness"), FocusArea.health),
    (("product",), FocusArea.productivity),
    (("career", "work", "job"), FocusArea.career),
    (("relation", "social"), FocusArea.relationships),
    (("learn", "skill", "education"), FocusArea.learning),
    (("mind", "mental", "stress"), FocusArea.mindfulness),
    (("financ", "money", "budget"), FocusArea.finance),
    (("creat", "art"), FocusArea.creativity),
)

SEVERITY_RULES = _rules(
    (("positive", "good"), InsightSeverity.positive),
    (("neutral", "normal"), InsightSeverity.neutral),
    (("attention", "improve", "needs"), InsightSeverity.needs_attention),
    (("critical", "severe", "urgent"), InsightSeverity.critical),
)

IMPACT_RULES = _rules(
    (("low", "minimal"), RecommendationImpact.low),
    (("high", "significant", "major"), RecommendationImpact.high),
    (("medium", "moderate"), RecommendationImpact.medium),
)

TIMEFRAME_RULES = _rules(
    (("immediate", "now", "right away"), TimeFrame.immediate),
    (("short", "day"), TimeFrame.short_term),
    (("medium", "week"), TimeFrame.medium_term),
    (("long", "month"), TimeFrame.long_term),
)

EVIDENCE_TYPE_RULES = _rules(
    (("article", "blog"), EvidenceType.article),
    (("stud", "research", "science", "journal"), EvidenceType.study),
    (("book",), EvidenceType.book),
    (("video", "youtube"), EvidenceType.video),
    (("podcast", "audio"), EvidenceType.podcast),
)

focus_area_mapper: EnumMapper[FocusArea] = EnumMapper(FocusArea, FOCUS_AREA_RULES, FocusArea.health)
severity_mapper: EnumMapper[InsightSeverity] = EnumMapper(InsightSeverity, SEVERITY_RULES, InsightSeverity.neutral)
impact_mapper: EnumMapper[RecommendationImpact] = EnumMapper(
    RecommendationImpact, IMPACT_RULES, RecommendationImpact.medium
)
timeframe_mapper: EnumMapper[TimeFrame] = EnumMapper(TimeFrame, TIMEFRAME_RULES, TimeFrame.short_term)
evidence_type_mapper: EnumMapper[EvidenceType] = EnumMapper(EvidenceType, EVIDENCE_TYPE_RULES, EvidenceType.article)
