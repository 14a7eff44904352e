"""Load, edit and regenerate a user's stored schedule."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Iterable, Optional
from zoneinfo import ZoneInfo

from lifepilot.core.config import settings
from lifepilot.domain.analysis import Recommendation
from lifepilot.domain.schedule import WeeklySchedule
from lifepilot.services.document_store import DocumentNotFound, DocumentStore
from lifepilot.services.notifications.hooks import sync_schedule_reminders
from lifepilot.services.schedule_editor import ScheduleEditor
from lifepilot.services.schedule_generator import ScheduleGenerator

logger = logging.getLogger(__name__)


def schedule_timezone() -> ZoneInfo:
    return ZoneInfo(settings.schedule_timezone)


def load_schedule(store: DocumentStore, user_id: str) -> WeeklySchedule:
    try:
        return store.get_schedule(user_id)
    except DocumentNotFound:
        logger.debug("No schedule stored for %s; starting empty", user_id)
        return WeeklySchedule(user_id=user_id)


def load_editor(
    store: DocumentStore,
    user_id: str,
    *,
    request_id: str | None = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> ScheduleEditor:
    def persist(schedule: WeeklySchedule) -> None:
        store.save_schedule(schedule)
        sync_schedule_reminders(schedule, request_id=request_id)

    tz = schedule_timezone()
    return ScheduleEditor(
        load_schedule(store, user_id),
        persist=persist,
        clock=clock,
        tz=tz,
        generator=ScheduleGenerator(tz=tz),
        max_recurrence_instances=settings.recurrence_max_instances,
    )


def accepted_recommendations_for(store: DocumentStore, user_id: str) -> list[Recommendation]:
    try:
        analysis = store.get_analysis(user_id)
    except DocumentNotFound:
        return []
    return analysis.accepted_recommendations()


def regenerate_for_user(
    store: DocumentStore,
    user_id: str,
    recommendations: Optional[Iterable[Recommendation]] = None,
    *,
    request_id: str | None = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> WeeklySchedule:
    if recommendations is None:
        recommendations = accepted_recommendations_for(store, user_id)
    editor = load_editor(store, user_id, request_id=request_id, clock=clock)
    return editor.regenerate_schedule(user_id, recommendations)
