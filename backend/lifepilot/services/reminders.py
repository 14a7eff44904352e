"""Reminder requests derived from a schedule."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from lifepilot.domain.schedule import WeeklySchedule, ensure_aware


@dataclass(frozen=True)
class ReminderRequest:
    activity_id: str
    user_id: str
    title: str
    fire_at: datetime
    start_time: datetime
    minutes_before: int


def build_reminder_requests(schedule: WeeklySchedule, *, now: Optional[datetime] = None) -> List[ReminderRequest]:
    """Pending reminders, soonest first."""
    now = ensure_aware(now or datetime.now(timezone.utc))
    requests: List[ReminderRequest] = []
    for activity in schedule.iter_activities():
        if not activity.enable_reminders or activity.is_completed:
            continue
        fire_at = activity.start_time - timedelta(minutes=activity.reminder_minutes_before)
        if fire_at <= now:
            continue
        requests.append(
            ReminderRequest(
                activity_id=activity.id,
                user_id=schedule.user_id,
                title=activity.title,
                fire_at=fire_at,
                start_time=activity.start_time,
                minutes_before=activity.reminder_minutes_before,
            )
        )
    requests.sort(key=lambda request: request.fire_at)
    return requests
