"""Place accepted recommendations on the week.

Placement is a fixed lookup per focus area: a set of weekdays, plus a slot
(start hour, duration, activity type, color). Both tables are plain data and
can be swapped per generator instance.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Iterable, Mapping, Optional, Sequence

from lifepilot.domain.analysis import Recommendation
from lifepilot.domain.enums import ActivityColor, ActivityType, DayOfWeek, FocusArea
from lifepilot.domain.schedule import ScheduledActivity, WeeklySchedule, ensure_aware

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActivitySlot:
    start_hour: int
    duration_minutes: int
    activity_type: ActivityType
    color: ActivityColor


_WEEKDAYS = (
    DayOfWeek.monday,
    DayOfWeek.tuesday,
    DayOfWeek.wednesday,
    DayOfWeek.thursday,
    DayOfWeek.friday,
)

DEFAULT_DAY_TABLE: Mapping[FocusArea, Sequence[DayOfWeek]] = {
    FocusArea.health: (DayOfWeek.monday, DayOfWeek.wednesday, DayOfWeek.friday),
    FocusArea.mindfulness: (DayOfWeek.monday, DayOfWeek.wednesday, DayOfWeek.friday),
    FocusArea.productivity: _WEEKDAYS,
    FocusArea.career: _WEEKDAYS,
    FocusArea.learning: (DayOfWeek.tuesday, DayOfWeek.thursday, DayOfWeek.saturday),
    FocusArea.relationships: (DayOfWeek.friday, DayOfWeek.saturday),
    FocusArea.creativity: (DayOfWeek.wednesday, DayOfWeek.sunday),
    FocusArea.finance: (DayOfWeek.sunday,),
}

DEFAULT_SLOT_TABLE: Mapping[FocusArea, ActivitySlot] = {
    FocusArea.health: ActivitySlot(7, 45, ActivityType.exercise, ActivityColor.green),
    FocusArea.mindfulness: ActivitySlot(6, 15, ActivityType.mindfulness, ActivityColor.purple),
    FocusArea.productivity: ActivitySlot(10, 60, ActivityType.work, ActivityColor.blue),
    FocusArea.career: ActivitySlot(10, 60, ActivityType.work, ActivityColor.blue),
    FocusArea.learning: ActivitySlot(18, 45, ActivityType.learning, ActivityColor.orange),
    FocusArea.relationships: ActivitySlot(19, 120, ActivityType.leisure, ActivityColor.pink),
    FocusArea.creativity: ActivitySlot(16, 60, ActivityType.leisure, ActivityColor.yellow),
    FocusArea.finance: ActivitySlot(14, 30, ActivityType.task, ActivityColor.teal),
}

# Used when an injected table has no entry for a focus area.
DEFAULT_SLOT = ActivitySlot(8, 30, ActivityType.task, ActivityColor.blue)


def next_occurrence(now: datetime, day: DayOfWeek, hour: int, tz: Optional[tzinfo] = None) -> datetime:
    """Earliest ``day`` at ``hour``:00 strictly after ``now``."""
    local_now = ensure_aware(now)
    if tz is not None:
        local_now = local_now.astimezone(tz)
    days_ahead = (day.weekday_index - local_now.weekday()) % 7
    candidate = (local_now + timedelta(days=days_ahead)).replace(hour=hour, minute=0, second=0, microsecond=0)
    if candidate <= local_now:
        candidate += timedelta(days=7)
    return candidate


class ScheduleGenerator:
    def __init__(
        self,
        day_table: Mapping[FocusArea, Sequence[DayOfWeek]] = DEFAULT_DAY_TABLE,
        slot_table: Mapping[FocusArea, ActivitySlot] = DEFAULT_SLOT_TABLE,
        tz: Optional[tzinfo] = None,
    ) -> None:
        self.day_table = day_table
        self.slot_table = slot_table
        self.tz = tz

    def generate(
        self,
        user_id: str,
        recommendations: Iterable[Recommendation],
        *,
        now: Optional[datetime] = None,
    ) -> WeeklySchedule:
        now = ensure_aware(now or datetime.now(timezone.utc))
        schedule = WeeklySchedule(user_id=user_id, created_at=now, last_modified=now)

        placed = 0
        for recommendation in recommendations:
            if recommendation.accepted is not True:
                continue
            for day, activity in self.activities_for(recommendation, now=now):
                schedule.day(day).activities.append(activity)
                placed += 1

        for day_schedule in schedule.days:
            day_schedule.sort_activities()

        logger.info("Generated schedule for user %s with %s activities", user_id, placed)
        return schedule

    def activities_for(self, recommendation: Recommendation, *, now: datetime) -> list[tuple[DayOfWeek, ScheduledActivity]]:
        days = self.day_table.get(recommendation.focus_area, ())
        slot = self.slot_table.get(recommendation.focus_area, DEFAULT_SLOT)
        placed = []
        for day in days:
            start = next_occurrence(now, day, slot.start_hour, self.tz)
            activity = ScheduledActivity(
                title=recommendation.title,
                description=recommendation.description,
                start_time=start,
                end_time=start + timedelta(minutes=slot.duration_minutes),
                activity_type=slot.activity_type,
                color=slot.color,
                is_recommended=True,
                related_recommendation_id=recommendation.id,
            )
            placed.append((day, activity))
        return placed
