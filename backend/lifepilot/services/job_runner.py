"""Batch jobs run by the scheduler worker and the debug run-now endpoint."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy.orm import Session

from lifepilot.core.config import settings
from lifepilot.domain.enums import GenerationStatus
from lifepilot.observability.metrics import log_metric
from lifepilot.services.document_store import DocumentStore, PersistenceError

logger = logging.getLogger(__name__)

TIMEOUT_REASON = "no result within ticket ttl"


@dataclass
class JobRunResult:
    tickets_checked: int
    tickets_expired: int
    failures: int = 0


def expire_stale_tickets(
    db: Session,
    *,
    now: Optional[datetime] = None,
    ttl_seconds: Optional[int] = None,
) -> JobRunResult:
    """Mark pending generation tickets older than the ttl as timed out."""
    now = now or datetime.now(timezone.utc)
    ttl = settings.generation_ticket_ttl_seconds if ttl_seconds is None else ttl_seconds
    store = DocumentStore(db)
    stale = store.pending_tickets_started_before(now - timedelta(seconds=ttl))

    expired = 0
    failures = 0
    for ticket in stale:
        timed_out = ticket.model_copy(
            update={"status": GenerationStatus.timed_out, "finished_at": now, "reason": TIMEOUT_REASON}
        )
        try:
            store.save_ticket(timed_out)
        except PersistenceError:
            failures += 1
            logger.exception("Could not expire ticket %s", ticket.ticket_id)
            continue
        expired += 1
        logger.info("Generation ticket %s for user %s timed out", ticket.ticket_id, ticket.user_id)

    log_metric("jobs.ticket_sweep.expired", expired)
    return JobRunResult(tickets_checked=len(stale), tickets_expired=expired, failures=failures)
