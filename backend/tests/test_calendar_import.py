from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from lifepilot.domain.enums import ActivityColor, ActivityType
from lifepilot.domain.schedule import ScheduledActivity, WeeklySchedule
from lifepilot.services.calendar_import import ExternalCalendarEvent, ImportRange, import_calendar_events
from lifepilot.services.schedule_editor import ScheduleEditor

NOW = datetime(2025, 1, 8, 9, 0, tzinfo=timezone.utc)


def _event(external_id: str, start: datetime, minutes: int = 60, **overrides) -> ExternalCalendarEvent:
    data = dict(external_id=external_id, title=f"Event {external_id}", start=start, end=start + timedelta(minutes=minutes))
    data.update(overrides)
    return ExternalCalendarEvent(**data)


@pytest.fixture()
def saved():
    return []


@pytest.fixture()
def editor(saved):
    return ScheduleEditor(WeeklySchedule(user_id="user-1"), persist=saved.append, tz=timezone.utc)


def test_import_ranges():
    assert [int(r) for r in ImportRange] == [7, 14, 30]


def test_in_range_events_become_custom_activities(editor, saved):
    event = _event("a", NOW + timedelta(days=1), notes="Bring slides", calendar_id="work")

    result = import_calendar_events(editor, [event], now=NOW)

    assert (result.imported, result.skipped, result.errors) == (1, 0, 0)
    (activity,) = list(editor.schedule.iter_activities())
    assert activity.title == "Event a"
    assert activity.activity_type is ActivityType.task
    assert activity.color is ActivityColor.red
    assert activity.is_recommended is False
    assert activity.notes == "Bring slides\nImported from calendar work"
    assert len(saved) == 1


def test_skips_all_day_past_and_out_of_range(editor, saved):
    events = [
        _event("all-day", NOW + timedelta(days=1), is_all_day=True),
        _event("past", NOW - timedelta(hours=2)),
        _event("far", NOW + timedelta(days=10)),
    ]

    result = import_calendar_events(editor, events, import_range=ImportRange.one_week, now=NOW)

    assert (result.imported, result.skipped, result.errors) == (0, 3, 0)
    assert saved == []


def test_longer_range_reaches_further(editor):
    result = import_calendar_events(editor, [_event("far", NOW + timedelta(days=10))], import_range=ImportRange.two_weeks, now=NOW)

    assert result.imported == 1


def test_events_without_duration_are_errors(editor):
    event = _event("zero", NOW + timedelta(days=1), minutes=0)

    result = import_calendar_events(editor, [event], now=NOW)

    assert (result.imported, result.skipped, result.errors) == (0, 0, 1)


def test_duplicates_by_title_and_start_are_skipped(editor):
    start = NOW + timedelta(days=2)
    editor.add_activity(ScheduledActivity(title="Event a", start_time=start, end_time=start + timedelta(hours=1)))

    result = import_calendar_events(
        editor,
        [_event("a", start), _event("b", start), _event("b-again", start, title="Event b")],
        now=NOW,
    )

    assert (result.imported, result.skipped, result.errors) == (1, 2, 0)
    assert len(list(editor.schedule.iter_activities())) == 2


def test_naive_event_times_are_utc(editor):
    event = _event("naive", datetime(2025, 1, 9, 15, 0))

    import_calendar_events(editor, [event], now=NOW)

    (activity,) = list(editor.schedule.iter_activities())
    assert activity.start_time == datetime(2025, 1, 9, 15, 0, tzinfo=timezone.utc)
