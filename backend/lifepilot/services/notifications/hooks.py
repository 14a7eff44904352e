"""Reminder sync run after every schedule save."""
from __future__ import annotations

import logging
from datetime import datetime
from time import perf_counter
from typing import Optional

from lifepilot.core.config import settings
from lifepilot.domain.schedule import WeeklySchedule
from lifepilot.observability.metrics import log_metric
from lifepilot.observability.tracing import trace
from lifepilot.services.notifications.base import NotificationResult
from lifepilot.services.notifications.factory import get_reminder_service
from lifepilot.services.reminders import build_reminder_requests

logger = logging.getLogger(__name__)


def sync_schedule_reminders(
    schedule: WeeklySchedule,
    *,
    now: Optional[datetime] = None,
    request_id: str | None = None,
) -> NotificationResult:
    if not settings.notifications_enabled:
        log_metric("reminders.skipped", 1, metadata={"reason": "disabled"})
        return NotificationResult(status="skipped", reason="notifications disabled")

    reminders = build_reminder_requests(schedule, now=now)
    metadata = {
        "provider": settings.notifications_provider,
        "reminder_count": len(reminders),
        "schedule_id": schedule.id,
    }
    start = perf_counter()
    with trace(
        "notifications.reminders",
        metadata=metadata,
        user_id=schedule.user_id,
        request_id=request_id,
    ) as span:
        result = get_reminder_service().replace_reminders(
            user_id=schedule.user_id,
            reminders=reminders,
            request_id=request_id,
        )
        if span:
            span.update(metadata={**metadata, "status": result.status})

    duration_ms = (perf_counter() - start) * 1000
    log_metric("reminders.replaced", len(reminders), metadata={"provider": settings.notifications_provider})
    log_metric("reminders.duration_ms", duration_ms)
    logger.debug("Reminder sync for %s: %s (%s)", schedule.user_id, result.status, result.reason)
    return result
