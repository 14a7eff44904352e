from __future__ import annotations

from datetime import datetime, timedelta, timezone

from lifepilot.domain.enums import ActivityType
from lifepilot.domain.schedule import ScheduledActivity, WeeklySchedule
from lifepilot.services.schedule_editor import ScheduleEditor
from lifepilot.services.statistics import TimeRangeOption, get_activity_statistics, window_start_for

# Wednesday
NOW = datetime(2025, 1, 8, 9, 0, tzinfo=timezone.utc)


def _activity(start: datetime, minutes: int, activity_type: ActivityType, completed: bool = False) -> ScheduledActivity:
    return ScheduledActivity(
        title=activity_type.value,
        start_time=start,
        end_time=start + timedelta(minutes=minutes),
        activity_type=activity_type,
        is_completed=completed,
    )


def _schedule(*activities: ScheduledActivity) -> WeeklySchedule:
    editor = ScheduleEditor(WeeklySchedule(user_id="user-1"), tz=timezone.utc)
    editor.add_activities(activities)
    return editor.schedule


def test_empty_schedule_has_zero_rate():
    stats = get_activity_statistics(WeeklySchedule(user_id="user-1"), now=NOW)

    assert stats.total_count == 0
    assert stats.completion_rate == 0.0
    assert stats.total_minutes == 0.0
    assert stats.activities == []


def test_week_window_counts_completion_and_minutes():
    exercise = _activity(datetime(2025, 1, 6, 8, 0, tzinfo=timezone.utc), 45, ActivityType.exercise, completed=True)
    work = _activity(datetime(2025, 1, 7, 10, 0, tzinfo=timezone.utc), 60, ActivityType.work)
    last_week = _activity(datetime(2025, 1, 5, 10, 0, tzinfo=timezone.utc), 30, ActivityType.work, completed=True)
    upcoming = _activity(datetime(2025, 1, 9, 10, 0, tzinfo=timezone.utc), 30, ActivityType.exercise)

    stats = get_activity_statistics(_schedule(exercise, work, last_week, upcoming), TimeRangeOption.week, now=NOW)

    assert stats.window_start == datetime(2025, 1, 6, 0, 0, tzinfo=timezone.utc)
    assert stats.window_end == NOW
    assert stats.total_count == 2
    assert stats.completed_count == 1
    assert stats.completion_rate == 0.5
    assert stats.count_by_type == {ActivityType.exercise: 1, ActivityType.work: 1}
    assert stats.minutes_by_type == {ActivityType.exercise: 45.0, ActivityType.work: 60.0}
    assert stats.total_minutes == 105.0
    assert [a.id for a in stats.activities] == [work.id, exercise.id]


def test_month_and_all_time_windows():
    first_of_month = _activity(datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc), 30, ActivityType.habit, completed=True)
    december = _activity(datetime(2024, 12, 31, 12, 0, tzinfo=timezone.utc), 30, ActivityType.habit)
    schedule = _schedule(first_of_month, december)

    month = get_activity_statistics(schedule, TimeRangeOption.month, now=NOW)
    all_time = get_activity_statistics(schedule, TimeRangeOption.all_time, now=NOW)

    assert [a.id for a in month.activities] == [first_of_month.id]
    assert month.completion_rate == 1.0
    assert all_time.total_count == 2
    assert all_time.completion_rate == 0.5


def test_window_start_for_leap_day():
    leap_day = datetime(2024, 2, 29, 12, 0, tzinfo=timezone.utc)

    assert window_start_for(TimeRangeOption.all_time, leap_day) == datetime(2014, 2, 28, 12, 0, tzinfo=timezone.utc)
    assert window_start_for(TimeRangeOption.month, leap_day) == datetime(2024, 2, 1, tzinfo=timezone.utc)
