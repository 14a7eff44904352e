"""Schemas for schedule endpoints."""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from lifepilot.core.config import settings
from lifepilot.domain.enums import ActivityColor, ActivityType
from lifepilot.domain.schedule import RecurrenceRule, WeeklySchedule
from lifepilot.services.calendar_import import ExternalCalendarEvent, ImportRange
from lifepilot.services.statistics import ActivityStatistics


class ActivityCreateRequest(BaseModel):
    user_id: str = Field(..., min_length=1, max_length=128)
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    start_time: datetime
    end_time: datetime
    activity_type: ActivityType = ActivityType.task
    color: ActivityColor = ActivityColor.blue
    notes: Optional[str] = None
    enable_reminders: bool = True
    reminder_minutes_before: int = Field(default_factory=lambda: settings.default_reminder_minutes, ge=0)
    recurrence_rule: Optional[RecurrenceRule] = None


class ActivityUpdateRequest(BaseModel):
    """Partial update; fields left out keep their stored value."""

    user_id: str = Field(..., min_length=1, max_length=128)
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    activity_type: Optional[ActivityType] = None
    color: Optional[ActivityColor] = None
    notes: Optional[str] = None
    is_completed: Optional[bool] = None
    enable_reminders: Optional[bool] = None
    reminder_minutes_before: Optional[int] = Field(default=None, ge=0)
    recurrence_rule: Optional[RecurrenceRule] = None


class UserScopedRequest(BaseModel):
    user_id: str = Field(..., min_length=1, max_length=128)


class RescheduleRequest(UserScopedRequest):
    new_start_time: datetime


class ConflictCheckRequest(UserScopedRequest):
    start_time: datetime
    end_time: datetime
    excluding_id: Optional[str] = None


class ConflictCheckResponse(BaseModel):
    conflict: bool
    request_id: str


class ScheduleResponse(BaseModel):
    schedule: WeeklySchedule
    request_id: str


class ActivityMutationResponse(BaseModel):
    activity_id: str
    schedule: WeeklySchedule
    request_id: str


class CalendarImportRequest(UserScopedRequest):
    import_range: ImportRange = ImportRange.one_week
    events: List[ExternalCalendarEvent] = Field(default_factory=list, max_length=500)


class CalendarImportResponse(BaseModel):
    imported: int
    skipped: int
    errors: int
    schedule: WeeklySchedule
    request_id: str


class StatisticsResponse(BaseModel):
    statistics: ActivityStatistics
    request_id: str


class ReminderOut(BaseModel):
    activity_id: str
    title: str
    fire_at: datetime
    start_time: datetime
    minutes_before: int


class RemindersResponse(BaseModel):
    reminders: List[ReminderOut]
    request_id: str
