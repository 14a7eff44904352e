"""Turn raw generation text into a PersonalizedAnalysis.

The parser never raises. It returns a ``ParseResult`` tagged ``parsed`` or
``fallback``; the fallback always carries a renderable placeholder analysis
and the name of the stage that failed.
"""
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, List, Optional

from pydantic import AliasChoices, AnyHttpUrl, BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from lifepilot.domain.analysis import (
    EvidenceLink,
    Insight,
    PersonalizedAnalysis,
    Recommendation,
    new_id,
)
from lifepilot.domain.enums import FocusArea, InsightSeverity, RecommendationImpact, TimeFrame
from lifepilot.observability.metrics import log_metric
from lifepilot.observability.tracing import trace
from lifepilot.services.enum_mapper import (
    evidence_type_mapper,
    focus_area_mapper,
    impact_mapper,
    severity_mapper,
    timeframe_mapper,
)

logger = logging.getLogger(__name__)

STATUS_PARSED = "parsed"
STATUS_FALLBACK = "fallback"

REASON_EMPTY_RESPONSE = "empty_response"
REASON_NO_JSON_OBJECT = "no_json_object"
REASON_INVALID_JSON = "invalid_json"
REASON_INVALID_SHAPE = "invalid_shape"
REASON_GENERATION_UNAVAILABLE = "generation_unavailable"
REASON_GENERATION_FAILED = "generation_failed"

FALLBACK_INSIGHT_ID = "fallback-insight"
FALLBACK_RECOMMENDATION_ID = "fallback-recommendation"

_ADJACENT_OBJECTS = re.compile(r"\}\s*\{")
_TRAILING_COMMA = re.compile(r",\s*([\]}])")
_HTTP_URL = TypeAdapter(AnyHttpUrl)


@dataclass
class ParseResult:
    status: str
    analysis: PersonalizedAnalysis
    reason: Optional[str] = None

    @property
    def is_fallback(self) -> bool:
        return self.status == STATUS_FALLBACK


class _LooseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class _LooseInsight(_LooseModel):
    id: Any = None
    title: str
    description: str
    focus_area: Any = Field(default=None, validation_alias=AliasChoices("focusArea", "focus_area"))
    severity: Any = None


class _LooseRecommendation(_LooseModel):
    id: Any = None
    title: str
    description: str
    focus_area: Any = Field(default=None, validation_alias=AliasChoices("focusArea", "focus_area"))
    impact: Any = None
    timeframe: Any = Field(default=None, validation_alias=AliasChoices("timeframe", "timeFrame", "time_frame"))
    accepted: Optional[bool] = None


class _LooseEvidenceLink(_LooseModel):
    id: Any = None
    title: str
    url: str
    type: Any = None


class _LooseAnalysis(_LooseModel):
    insights: List[_LooseInsight]
    recommendations: List[_LooseRecommendation]
    evidence_links: Optional[List[Any]] = Field(
        default=None,
        validation_alias=AliasChoices("evidenceLinks", "evidence_links"),
    )


def extract_json_object(text: str) -> Optional[str]:
    """Return the substring from the first ``{`` to the last ``}``."""
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end < start:
        return None
    return text[start : end + 1]


def repair_json_text(candidate: str) -> str:
    """Patch the textual defects generated JSON commonly has."""
    repaired = _ADJACENT_OBJECTS.sub("},{", candidate)
    return _TRAILING_COMMA.sub(r"\1", repaired)


def parse_analysis_response(
    text: Optional[str],
    *,
    user_id: str,
    now: Optional[datetime] = None,
) -> ParseResult:
    now = now or datetime.now(timezone.utc)
    length = len(text) if isinstance(text, str) else 0
    with trace("analysis.parse", metadata={"response_length": length}, user_id=user_id):
        result = _parse(text, user_id=user_id, now=now)

    log_metric("analysis.parse.fallback", 1 if result.is_fallback else 0, metadata={"reason": result.reason or ""})
    if result.is_fallback:
        logger.warning("Analysis response fell back to placeholder (reason=%s, length=%s)", result.reason, length)
    else:
        logger.info(
            "Parsed analysis: insights=%s recommendations=%s evidence_links=%s",
            len(result.analysis.insights),
            len(result.analysis.recommendations),
            len(result.analysis.evidence_links or []),
        )
    return result


def _parse(text: Optional[str], *, user_id: str, now: datetime) -> ParseResult:
    cleaned = text.strip() if isinstance(text, str) else ""
    if not cleaned:
        return fallback_result(user_id, REASON_EMPTY_RESPONSE, now)

    candidate = extract_json_object(cleaned)
    if candidate is None:
        return fallback_result(user_id, REASON_NO_JSON_OBJECT, now)

    payload = _decode(candidate)
    if payload is None:
        return fallback_result(user_id, REASON_INVALID_JSON, now)
    if not isinstance(payload, dict):
        return fallback_result(user_id, REASON_INVALID_SHAPE, now)

    try:
        loose = _LooseAnalysis.model_validate(payload)
    except ValidationError as exc:
        logger.info("Analysis payload did not match expected shape: %s", exc.error_count())
        return fallback_result(user_id, REASON_INVALID_SHAPE, now)

    analysis = PersonalizedAnalysis(
        user_id=user_id,
        generated_at=now,
        insights=[_build_insight(item) for item in loose.insights],
        recommendations=[_build_recommendation(item) for item in loose.recommendations],
        evidence_links=_build_evidence_links(loose.evidence_links),
    )
    return ParseResult(status=STATUS_PARSED, analysis=analysis)


def _decode(candidate: str) -> Any:
    try:
        return json.loads(candidate)
    except (ValueError, RecursionError):
        pass
    repaired = repair_json_text(candidate)
    try:
        return json.loads(repaired)
    except (ValueError, RecursionError) as exc:
        logger.info("Analysis JSON still invalid after repair: %s", exc)
        return None


def _item_id(raw: Any) -> str:
    if raw is None or raw == "":
        return new_id()
    return str(raw)


def _build_insight(item: _LooseInsight) -> Insight:
    return Insight(
        id=_item_id(item.id),
        title=item.title,
        description=item.description,
        focus_area=focus_area_mapper.resolve(item.focus_area),
        severity=severity_mapper.resolve(item.severity),
    )


def _build_recommendation(item: _LooseRecommendation) -> Recommendation:
    return Recommendation(
        id=_item_id(item.id),
        title=item.title,
        description=item.description,
        focus_area=focus_area_mapper.resolve(item.focus_area),
        impact=impact_mapper.resolve(item.impact),
        timeframe=timeframe_mapper.resolve(item.timeframe),
        accepted=item.accepted,
    )


def _build_evidence_links(raw_links: Optional[List[Any]]) -> Optional[List[EvidenceLink]]:
    if raw_links is None:
        return None
    links: List[EvidenceLink] = []
    for raw in raw_links:
        try:
            loose = _LooseEvidenceLink.model_validate(raw)
            url = loose.url.strip()
            _HTTP_URL.validate_python(url)
        except ValidationError:
            logger.info("Dropping malformed evidence link: %r", raw)
            continue
        links.append(
            EvidenceLink(
                id=_item_id(loose.id),
                title=loose.title,
                url=url,
                type=evidence_type_mapper.resolve(loose.type),
            )
        )
    return links


def fallback_analysis(user_id: str, now: Optional[datetime] = None) -> PersonalizedAnalysis:
    return PersonalizedAnalysis(
        user_id=user_id,
        generated_at=now or datetime.now(timezone.utc),
        insights=[
            Insight(
                id=FALLBACK_INSIGHT_ID,
                title="Default Insight",
                description="We couldn't generate a complete analysis. Please try again later.",
                focus_area=FocusArea.productivity,
                severity=InsightSeverity.neutral,
            )
        ],
        recommendations=[
            Recommendation(
                id=FALLBACK_RECOMMENDATION_ID,
                title="Try Again Later",
                description=(
                    "Our system is experiencing temporary issues. "
                    "Please try generating a new analysis in a few minutes."
                ),
                focus_area=FocusArea.productivity,
                impact=RecommendationImpact.medium,
                timeframe=TimeFrame.immediate,
            )
        ],
        evidence_links=[],
    )


def fallback_result(user_id: str, reason: str, now: Optional[datetime] = None) -> ParseResult:
    return ParseResult(status=STATUS_FALLBACK, analysis=fallback_analysis(user_id, now), reason=reason)
