"""Generate, store and update a user's personalized analysis."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from time import perf_counter
from typing import Callable, List, Optional

from lifepilot.core.config import settings
from lifepilot.domain.analysis import PersonalizedAnalysis, Recommendation
from lifepilot.domain.enums import GenerationStatus
from lifepilot.domain.schedule import WeeklySchedule
from lifepilot.domain.ticket import GenerationTicket
from lifepilot.observability.metrics import log_metric
from lifepilot.observability.tracing import trace
from lifepilot.services.analysis_parser import (
    REASON_GENERATION_FAILED,
    REASON_GENERATION_UNAVAILABLE,
    ParseResult,
    fallback_result,
    parse_analysis_response,
)
from lifepilot.services.document_store import DocumentStore, PersistenceError, SaveError
from lifepilot.services.generation_client import GenerationClient, GenerationError
from lifepilot.services.prompt_builder import build_prompt, with_default_focus
from lifepilot.services.schedule_service import regenerate_for_user

logger = logging.getLogger(__name__)

_FAILED_REASONS = {REASON_GENERATION_FAILED, REASON_GENERATION_UNAVAILABLE}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class GenerationOutcome:
    ticket: GenerationTicket
    result: ParseResult
    saved: bool


@dataclass
class RecommendationUpdate:
    analysis: PersonalizedAnalysis
    schedule: WeeklySchedule


def open_ticket(store: DocumentStore, user_id: str, *, now: Optional[datetime] = None) -> GenerationTicket:
    ticket = GenerationTicket(user_id=user_id, started_at=now or _utcnow())
    store.save_ticket(ticket)
    logger.info("Opened generation ticket %s for user %s", ticket.ticket_id, user_id)
    return ticket


def generate_analysis(
    store: DocumentStore,
    user_id: str,
    client: Optional[GenerationClient],
    *,
    now: Optional[datetime] = None,
    request_id: str | None = None,
) -> GenerationOutcome:
    """Run one generation round for ``user_id`` and store the result.

    Raises ``DocumentNotFound`` when the user has no profile. Generation
    failures never raise; they yield the placeholder analysis.
    """
    now = now or _utcnow()
    profile = store.get_profile(user_id)
    if settings.use_default_focus_areas:
        profile = with_default_focus(profile)

    ticket = open_ticket(store, user_id, now=now)
    prompt = build_prompt(profile)
    start = perf_counter()
    with trace(
        "analysis.generate",
        metadata={"ticket_id": ticket.ticket_id, "prompt_length": len(prompt)},
        user_id=user_id,
        request_id=request_id,
    ):
        result = _run_generation(client, prompt, user_id=user_id, now=now)
    log_metric("analysis.generate.latency_ms", (perf_counter() - start) * 1000)

    return complete_generation(store, ticket, result, now=_utcnow())


def _run_generation(
    client: Optional[GenerationClient],
    prompt: str,
    *,
    user_id: str,
    now: datetime,
) -> ParseResult:
    if client is None:
        return fallback_result(user_id, REASON_GENERATION_UNAVAILABLE, now)
    try:
        text = client.generate(prompt)
    except GenerationError:
        return fallback_result(user_id, REASON_GENERATION_FAILED, now)
    return parse_analysis_response(text, user_id=user_id, now=now)


def complete_generation(
    store: DocumentStore,
    ticket: GenerationTicket,
    result: ParseResult,
    *,
    now: Optional[datetime] = None,
) -> GenerationOutcome:
    """Close ``ticket`` and save its analysis unless a newer ticket exists."""
    now = now or _utcnow()
    stored = store.get_ticket(ticket.ticket_id)
    latest = store.latest_ticket(ticket.user_id)

    if latest is not None and latest.ticket_id != stored.ticket_id:
        logger.info("Discarding result of superseded ticket %s (current %s)", stored.ticket_id, latest.ticket_id)
        if stored.is_open:
            _close(store, stored, GenerationStatus.failed, "superseded", now)
        log_metric("analysis.generate.discarded", 1)
        return GenerationOutcome(ticket=stored, result=result, saved=False)

    late = stored.status == GenerationStatus.timed_out
    result.analysis.user_id = ticket.user_id
    try:
        store.save_analysis(result.analysis)
    except SaveError:
        try:
            _close(store, stored, GenerationStatus.failed, "save_error", now)
        except PersistenceError:
            logger.exception("Could not close ticket %s after save failure", stored.ticket_id)
        raise

    if not result.is_fallback:
        status = GenerationStatus.completed
    elif result.reason in _FAILED_REASONS:
        status = GenerationStatus.failed
    else:
        status = GenerationStatus.fallback
    reason = result.reason
    if late:
        reason = f"late:{reason}" if reason else "late"
    closed = _close(store, stored, status, reason, now)
    log_metric("analysis.generate.status", 1, metadata={"status": status.value, "late": late})
    return GenerationOutcome(ticket=closed, result=result, saved=True)


def _close(
    store: DocumentStore,
    ticket: GenerationTicket,
    status: GenerationStatus,
    reason: Optional[str],
    now: datetime,
) -> GenerationTicket:
    closed = ticket.model_copy(update={"status": status, "reason": reason, "finished_at": now})
    store.save_ticket(closed)
    return closed


def update_recommendation_status(
    store: DocumentStore,
    user_id: str,
    recommendation_id: str,
    accepted: Optional[bool],
    *,
    request_id: str | None = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> Optional[RecommendationUpdate]:
    """Read-modify-write one recommendation's ``accepted`` flag, then rebuild the schedule.

    Returns ``None`` when the recommendation is not part of the stored analysis.
    """
    analysis = store.get_analysis(user_id)
    recommendation = analysis.find_recommendation(recommendation_id)
    if recommendation is None:
        logger.debug("Recommendation %s not in analysis for %s", recommendation_id, user_id)
        return None

    recommendation.accepted = accepted
    store.save_analysis(analysis)
    schedule = regenerate_for_user(
        store,
        user_id,
        analysis.accepted_recommendations(),
        request_id=request_id,
        clock=clock,
    )
    log_metric("recommendations.status", 1, metadata={"accepted": accepted})
    return RecommendationUpdate(analysis=analysis, schedule=schedule)


def get_accepted_recommendations(store: DocumentStore, user_id: str) -> List[Recommendation]:
    return store.get_analysis(user_id).accepted_recommendations()


def get_pending_recommendations(store: DocumentStore, user_id: str) -> List[Recommendation]:
    return store.get_analysis(user_id).pending_recommendations()
