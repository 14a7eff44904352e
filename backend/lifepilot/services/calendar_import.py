"""Import normalized calendar events as custom schedule activities."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import IntEnum
from typing import Iterable, List, Optional

from pydantic import BaseModel, field_validator

from lifepilot.domain.enums import ActivityColor, ActivityType
from lifepilot.domain.schedule import ScheduledActivity, ensure_aware
from lifepilot.services.schedule_editor import ScheduleEditor

logger = logging.getLogger(__name__)


class ImportRange(IntEnum):
    one_week = 7
    two_weeks = 14
    one_month = 30


class ExternalCalendarEvent(BaseModel):
    external_id: str
    title: str
    start: datetime
    end: datetime
    notes: Optional[str] = None
    calendar_id: Optional[str] = None
    is_all_day: bool = False

    @field_validator("start", "end")
    @classmethod
    def _aware(cls, value: datetime) -> datetime:
        return ensure_aware(value)


@dataclass
class ImportResult:
    imported: int = 0
    skipped: int = 0
    errors: int = 0


def _notes_for(event: ExternalCalendarEvent) -> Optional[str]:
    parts = []
    if event.notes:
        parts.append(event.notes.strip())
    if event.calendar_id:
        parts.append(f"Imported from calendar {event.calendar_id}")
    return "\n".join(part for part in parts if part) or None


def import_calendar_events(
    editor: ScheduleEditor,
    events: Iterable[ExternalCalendarEvent],
    *,
    import_range: ImportRange = ImportRange.one_week,
    now: Optional[datetime] = None,
) -> ImportResult:
    now = ensure_aware(now or datetime.now(timezone.utc))
    window_end = now + timedelta(days=int(import_range))
    existing = {(activity.title, activity.start_time) for activity in editor.schedule.iter_activities()}

    result = ImportResult()
    batch: List[ScheduledActivity] = []
    for event in events:
        if event.is_all_day or not (now <= event.start <= window_end):
            result.skipped += 1
            continue
        if event.end <= event.start:
            logger.info("Calendar event %s has no duration; not imported", event.external_id)
            result.errors += 1
            continue
        key = (event.title, event.start)
        if key in existing:
            result.skipped += 1
            continue
        existing.add(key)
        batch.append(
            ScheduledActivity(
                title=event.title,
                start_time=event.start,
                end_time=event.end,
                activity_type=ActivityType.task,
                color=ActivityColor.red,
                is_recommended=False,
                notes=_notes_for(event),
            )
        )

    result.imported = editor.add_activities(batch)
    logger.info(
        "Calendar import: imported=%s skipped=%s errors=%s range=%sd",
        result.imported,
        result.skipped,
        result.errors,
        int(import_range),
    )
    return result
