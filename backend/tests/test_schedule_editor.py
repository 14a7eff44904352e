from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from lifepilot.domain.analysis import Recommendation
from lifepilot.domain.enums import DayOfWeek, FocusArea, RecommendationImpact, RecurrenceFrequency, TimeFrame
from lifepilot.domain.schedule import RecurrenceRule, ScheduledActivity, WeeklySchedule
from lifepilot.services.document_store import SaveError
from lifepilot.services.schedule_editor import ScheduleEditor

NOW = datetime(2025, 1, 8, 9, 0, tzinfo=timezone.utc)
EDITED_AT = datetime(2025, 1, 8, 9, 30, tzinfo=timezone.utc)


def _at(day: int, hour: int, minute: int = 0) -> datetime:
    return datetime(2025, 1, day, hour, minute, tzinfo=timezone.utc)


def _activity(start: datetime, minutes: int = 60, **overrides) -> ScheduledActivity:
    data = dict(title="Focus block", start_time=start, end_time=start + timedelta(minutes=minutes))
    data.update(overrides)
    return ScheduledActivity(**data)


@pytest.fixture()
def saved():
    return []


@pytest.fixture()
def editor(saved):
    schedule = WeeklySchedule(user_id="user-1", created_at=NOW, last_modified=NOW)
    return ScheduleEditor(schedule, persist=saved.append, clock=lambda: EDITED_AT, tz=timezone.utc)


def _assert_sorted(schedule: WeeklySchedule) -> None:
    assert [day.day_of_week for day in schedule.days] == list(DayOfWeek)
    for day in schedule.days:
        starts = [activity.start_time for activity in day.activities]
        assert starts == sorted(starts)


def test_add_activity_buckets_by_weekday_and_persists(editor, saved):
    late = _activity(_at(15, 14))
    early = _activity(_at(15, 8))

    assert editor.add_activity(late) is True
    assert editor.add_activity(early) is True

    assert [a.id for a in editor.activities_for_day(DayOfWeek.wednesday)] == [early.id, late.id]
    assert editor.schedule.last_modified == EDITED_AT
    assert len(saved) == 2


def test_add_duplicate_id_is_a_no_op(editor, saved):
    activity = _activity(_at(13, 9))
    editor.add_activity(activity)

    assert editor.add_activity(activity) is False
    assert len(saved) == 1
    assert len(editor.activities_for_day(DayOfWeek.monday)) == 1


def test_add_activities_persists_once(editor, saved):
    batch = [_activity(_at(13, 9)), _activity(_at(14, 9)), _activity(_at(14, 7))]

    assert editor.add_activities(batch) == 3
    assert len(saved) == 1
    assert editor.add_activities([batch[0]]) == 0
    assert len(saved) == 1


def test_update_moves_activity_to_new_day(editor):
    activity = _activity(_at(13, 9))
    editor.add_activity(activity)

    moved = activity.model_copy(update={"start_time": _at(17, 9), "end_time": _at(17, 10), "title": "Moved"})

    assert editor.update_activity(moved) is True
    assert editor.activities_for_day(DayOfWeek.monday) == []
    (friday,) = editor.activities_for_day(DayOfWeek.friday)
    assert friday.title == "Moved"


def test_unknown_ids_are_no_ops(editor, saved):
    ghost = _activity(_at(13, 9))

    assert editor.update_activity(ghost) is False
    assert editor.delete_activity("missing") is False
    assert editor.toggle_completion("missing") is False
    assert editor.reschedule_activity("missing", _at(14, 9)) is False
    assert saved == []
    assert editor.schedule.last_modified == NOW


def test_toggle_completion_flips_flag(editor):
    activity = _activity(_at(13, 9))
    editor.add_activity(activity)

    editor.toggle_completion(activity.id)
    assert editor.schedule.find_activity(activity.id)[1].is_completed is True
    editor.toggle_completion(activity.id)
    assert editor.schedule.find_activity(activity.id)[1].is_completed is False


def test_reschedule_keeps_duration_and_rebuckets(editor):
    activity = _activity(_at(13, 9), minutes=45)
    editor.add_activity(activity)

    assert editor.reschedule_activity(activity.id, _at(16, 15, 30)) is True

    day, moved = editor.schedule.find_activity(activity.id)
    assert day.day_of_week is DayOfWeek.thursday
    assert moved.start_time == _at(16, 15, 30)
    assert moved.end_time == _at(16, 16, 15)


def test_check_time_conflict_uses_strict_overlap(editor):
    existing = _activity(_at(15, 10))
    editor.add_activity(existing)

    assert editor.check_time_conflict(_at(15, 10, 30), _at(15, 11, 30)) is True
    assert editor.check_time_conflict(_at(15, 9, 30), _at(15, 12)) is True
    assert editor.check_time_conflict(_at(15, 11), _at(15, 12)) is False
    assert editor.check_time_conflict(_at(15, 9), _at(15, 10)) is False
    assert editor.check_time_conflict(_at(15, 10, 30), _at(15, 11, 30), excluding_id=existing.id) is False
    assert editor.check_time_conflict(_at(16, 10, 30), _at(16, 11, 30)) is False


def _accepted(focus_area: FocusArea) -> Recommendation:
    return Recommendation(
        id=f"rec-{focus_area.name}",
        title=focus_area.value,
        description="d",
        focus_area=focus_area,
        impact=RecommendationImpact.medium,
        timeframe=TimeFrame.short_term,
        accepted=True,
    )


def test_regenerate_keeps_custom_activities_and_identity(editor, saved):
    custom = _activity(_at(13, 12), title="Lunch with Ana")
    stale = _activity(_at(14, 7), is_recommended=True, related_recommendation_id="old")
    editor.add_activities([custom, stale])
    schedule_id = editor.schedule.id

    regenerated = editor.regenerate_schedule("user-1", [_accepted(FocusArea.health)])

    assert regenerated.id == schedule_id
    assert regenerated.created_at == NOW
    assert regenerated.last_modified == EDITED_AT
    assert regenerated.find_activity(custom.id) is not None
    assert regenerated.find_activity(stale.id) is None
    recommended = [a for a in regenerated.iter_activities() if a.is_recommended]
    assert len(recommended) == 3
    assert {a.related_recommendation_id for a in recommended} == {"rec-health"}
    assert saved[-1] is regenerated
    _assert_sorted(regenerated)


def test_recurring_activity_expands_and_cascades_on_delete(editor):
    origin = _activity(_at(9, 8), recurrence_rule=RecurrenceRule(frequency=RecurrenceFrequency.weekly))

    editor.add_activity(origin)

    siblings = [a for a in editor.schedule.iter_activities() if a.recurring_parent_id == origin.id]
    assert len(siblings) == 10
    assert all(a.start_time.weekday() == 3 for a in siblings)
    assert len(editor.activities_for_day(DayOfWeek.thursday)) == 11
    _assert_sorted(editor.schedule)

    assert editor.delete_activity(origin.id) is True
    assert list(editor.schedule.iter_activities()) == []


def test_deleting_a_sibling_leaves_the_series(editor):
    origin = _activity(_at(9, 8), recurrence_rule=RecurrenceRule(frequency=RecurrenceFrequency.daily, occurrences=3))
    editor.add_activity(origin)
    sibling = next(a for a in editor.schedule.iter_activities() if a.recurring_parent_id == origin.id)

    editor.delete_activity(sibling.id)

    assert len(list(editor.schedule.iter_activities())) == 2
    assert editor.schedule.find_activity(origin.id) is not None


def test_updating_series_origin_regenerates_siblings(editor):
    rule = RecurrenceRule(frequency=RecurrenceFrequency.daily, occurrences=4)
    origin = _activity(_at(9, 8), recurrence_rule=rule)
    editor.add_activity(origin)
    old_sibling_ids = {a.id for a in editor.schedule.iter_activities() if a.recurring_parent_id == origin.id}

    editor.update_activity(origin.model_copy(update={"start_time": _at(9, 18), "end_time": _at(9, 19)}))

    siblings = [a for a in editor.schedule.iter_activities() if a.recurring_parent_id == origin.id]
    assert len(siblings) == 3
    assert {a.start_time.hour for a in siblings} == {18}
    assert not old_sibling_ids & {a.id for a in siblings}


def test_dropping_the_rule_removes_siblings(editor):
    origin = _activity(_at(9, 8), recurrence_rule=RecurrenceRule(frequency=RecurrenceFrequency.daily, occurrences=4))
    editor.add_activity(origin)

    editor.update_activity(origin.model_copy(update={"recurrence_rule": None}))

    assert [a.id for a in editor.schedule.iter_activities()] == [origin.id]


def test_updating_a_sibling_changes_only_that_instance(editor):
    origin = _activity(_at(9, 8), recurrence_rule=RecurrenceRule(frequency=RecurrenceFrequency.daily, occurrences=3))
    editor.add_activity(origin)
    sibling = next(a for a in editor.schedule.iter_activities() if a.recurring_parent_id == origin.id)

    editor.update_activity(sibling.model_copy(update={"title": "Shorter run"}))

    titles = sorted(a.title for a in editor.schedule.iter_activities())
    assert titles == ["Focus block", "Focus block", "Shorter run"]


def test_persist_errors_propagate():
    def failing_persist(schedule):
        raise SaveError("disk full", document="schedule", user_id="user-1")

    editor = ScheduleEditor(WeeklySchedule(user_id="user-1"), persist=failing_persist, tz=timezone.utc)

    with pytest.raises(SaveError):
        editor.add_activity(_activity(_at(13, 9)))


def test_days_stay_sorted_after_mixed_edits(editor):
    a = _activity(_at(13, 15))
    b = _activity(_at(13, 9))
    c = _activity(_at(14, 11))
    editor.add_activities([a, b, c])
    editor.reschedule_activity(c.id, _at(13, 6))
    editor.update_activity(a.model_copy(update={"start_time": _at(13, 7), "end_time": _at(13, 8)}))

    assert [x.id for x in editor.activities_for_day(DayOfWeek.monday)] == [c.id, a.id, b.id]
    _assert_sorted(editor.schedule)
