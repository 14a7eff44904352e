"""Weekly schedule value types.

A ``WeeklySchedule`` always holds exactly one ``DaySchedule`` per weekday,
ordered Monday..Sunday, and each day keeps its activities sorted by start
time. Activities are bucketed by the weekday of their ``start_time`` in the
schedule's timezone (see ``day_of_week_for``).
"""
from __future__ import annotations

from datetime import datetime, timezone, tzinfo
from typing import Iterator, List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator, model_validator

from lifepilot.domain.analysis import new_id
from lifepilot.domain.enums import ActivityColor, ActivityType, DayOfWeek, RecurrenceFrequency


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_aware(value: datetime) -> datetime:
    """Interpret naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def day_of_week_for(moment: datetime, tz: Optional[tzinfo] = None) -> DayOfWeek:
    local = ensure_aware(moment)
    if tz is not None:
        local = local.astimezone(tz)
    return DayOfWeek.from_weekday(local.weekday())


class RecurrenceRule(BaseModel):
    frequency: RecurrenceFrequency
    interval: int = Field(default=1, ge=1)
    # 1=Sunday .. 7=Saturday; only meaningful for weekly rules.
    days_of_week: Optional[List[int]] = None
    end_date: Optional[datetime] = None
    occurrences: Optional[int] = Field(default=None, ge=1)

    @field_validator("days_of_week")
    @classmethod
    def _check_days(cls, value: Optional[List[int]]) -> Optional[List[int]]:
        if value is None:
            return None
        for day in value:
            if day < 1 or day > 7:
                raise ValueError("days_of_week entries must be between 1 (Sunday) and 7 (Saturday)")
        return sorted(set(value))

    @field_validator("end_date")
    @classmethod
    def _aware_end(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_aware(value) if value is not None else None


class ScheduledActivity(BaseModel):
    id: str = Field(default_factory=new_id)
    title: str
    description: Optional[str] = None
    start_time: datetime
    end_time: datetime
    activity_type: ActivityType = ActivityType.task
    is_completed: bool = False
    is_recommended: bool = False
    related_recommendation_id: Optional[str] = None
    color: ActivityColor = ActivityColor.blue
    notes: Optional[str] = None
    enable_reminders: bool = True
    reminder_minutes_before: int = Field(default=15, ge=0)
    recurrence_rule: Optional[RecurrenceRule] = None
    recurring_parent_id: Optional[str] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def _aware(cls, value: datetime) -> datetime:
        return ensure_aware(value)

    @model_validator(mode="after")
    def _check_window(self) -> "ScheduledActivity":
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self

    @property
    def duration_minutes(self) -> float:
        return (self.end_time - self.start_time).total_seconds() / 60


class DaySchedule(BaseModel):
    id: str = Field(default_factory=new_id)
    day_of_week: DayOfWeek
    activities: List[ScheduledActivity] = Field(default_factory=list)

    @model_validator(mode="after")
    def _sorted(self) -> "DaySchedule":
        self.sort_activities()
        return self

    def sort_activities(self) -> None:
        self.activities.sort(key=lambda activity: activity.start_time)


class WeeklySchedule(BaseModel):
    id: str = Field(default_factory=new_id)
    user_id: str
    created_at: datetime = Field(default_factory=_utcnow)
    last_modified: datetime = Field(default_factory=_utcnow)
    days: List[DaySchedule] = Field(default_factory=list)

    @model_validator(mode="after")
    def _fill_days(self) -> "WeeklySchedule":
        by_day: dict[DayOfWeek, DaySchedule] = {}
        for day in self.days:
            if day.day_of_week in by_day:
                raise ValueError(f"duplicate day {day.day_of_week.value}")
            by_day[day.day_of_week] = day
        self.days = [by_day.get(dow) or DaySchedule(day_of_week=dow) for dow in DayOfWeek]
        return self

    def day(self, day_of_week: DayOfWeek) -> DaySchedule:
        return self.days[day_of_week.weekday_index]

    def iter_activities(self) -> Iterator[ScheduledActivity]:
        for day in self.days:
            yield from day.activities

    def find_activity(self, activity_id: str) -> Optional[Tuple[DaySchedule, ScheduledActivity]]:
        for day in self.days:
            for activity in day.activities:
                if activity.id == activity_id:
                    return day, activity
        return None
