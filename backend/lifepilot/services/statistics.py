"""Completion and time-spent statistics over a schedule."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone, tzinfo
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from lifepilot.domain.enums import ActivityType
from lifepilot.domain.schedule import ScheduledActivity, WeeklySchedule, ensure_aware

ALL_TIME_YEARS = 10


class TimeRangeOption(str, Enum):
    week = "week"
    month = "month"
    all_time = "all_time"


class ActivityStatistics(BaseModel):
    time_range: TimeRangeOption
    window_start: datetime
    window_end: datetime
    total_count: int = 0
    completed_count: int = 0
    completion_rate: float = 0.0
    count_by_type: Dict[ActivityType, int] = Field(default_factory=dict)
    minutes_by_type: Dict[ActivityType, float] = Field(default_factory=dict)
    total_minutes: float = 0.0
    activities: List[ScheduledActivity] = Field(default_factory=list)


def window_start_for(time_range: TimeRangeOption, now: datetime, tz: Optional[tzinfo] = None) -> datetime:
    local_now = ensure_aware(now)
    if tz is not None:
        local_now = local_now.astimezone(tz)
    midnight = local_now.replace(hour=0, minute=0, second=0, microsecond=0)
    if time_range == TimeRangeOption.week:
        return midnight - timedelta(days=local_now.weekday())
    if time_range == TimeRangeOption.month:
        return midnight.replace(day=1)
    try:
        return local_now.replace(year=local_now.year - ALL_TIME_YEARS)
    except ValueError:
        # Feb 29 in a non-leap target year
        return local_now.replace(year=local_now.year - ALL_TIME_YEARS, day=28)


def get_activity_statistics(
    schedule: WeeklySchedule,
    time_range: TimeRangeOption = TimeRangeOption.week,
    *,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> ActivityStatistics:
    now = ensure_aware(now or datetime.now(timezone.utc))
    start = window_start_for(time_range, now, tz)

    in_window = [
        activity
        for activity in schedule.iter_activities()
        if start <= activity.start_time <= now
    ]
    in_window.sort(key=lambda activity: activity.start_time, reverse=True)

    count_by_type: Dict[ActivityType, int] = {}
    minutes_by_type: Dict[ActivityType, float] = {}
    for activity in in_window:
        count_by_type[activity.activity_type] = count_by_type.get(activity.activity_type, 0) + 1
        minutes_by_type[activity.activity_type] = (
            minutes_by_type.get(activity.activity_type, 0.0) + activity.duration_minutes
        )

    total = len(in_window)
    completed = sum(1 for activity in in_window if activity.is_completed)
    return ActivityStatistics(
        time_range=time_range,
        window_start=start,
        window_end=now,
        total_count=total,
        completed_count=completed,
        completion_rate=completed / total if total else 0.0,
        count_by_type=count_by_type,
        minutes_by_type=minutes_by_type,
        total_minutes=sum(minutes_by_type.values()),
        activities=in_window,
    )
