from __future__ import annotations

from datetime import datetime, timedelta, timezone

from lifepilot.domain.enums import RecurrenceFrequency
from lifepilot.domain.schedule import RecurrenceRule, ScheduledActivity
from lifepilot.services.recurrence import expand_occurrences, nth_occurrence


def _activity(start: datetime, rule: RecurrenceRule | None, minutes: int = 30) -> ScheduledActivity:
    return ScheduledActivity(
        id="origin",
        title="Run",
        start_time=start,
        end_time=start + timedelta(minutes=minutes),
        recurrence_rule=rule,
        is_completed=True,
    )


def _starts(siblings):
    return [sibling.start_time for sibling in siblings]


def test_daily_rule_with_interval():
    start = datetime(2025, 1, 8, 9, 0, tzinfo=timezone.utc)
    rule = RecurrenceRule(frequency=RecurrenceFrequency.daily, interval=2, occurrences=4)

    siblings = expand_occurrences(_activity(start, rule))

    assert _starts(siblings) == [start + timedelta(days=2), start + timedelta(days=4), start + timedelta(days=6)]


def test_weekly_rule_snaps_to_earliest_configured_day():
    start = datetime(2025, 1, 8, 9, 0, tzinfo=timezone.utc)
    # 2=Monday, 4=Wednesday
    rule = RecurrenceRule(frequency=RecurrenceFrequency.weekly, days_of_week=[4, 2], occurrences=3)

    siblings = expand_occurrences(_activity(start, rule))

    assert _starts(siblings) == [
        datetime(2025, 1, 13, 9, 0, tzinfo=timezone.utc),
        datetime(2025, 1, 20, 9, 0, tzinfo=timezone.utc),
    ]
    assert rule.days_of_week == [2, 4]


def test_monthly_rule_clamps_to_month_end():
    start = datetime(2025, 1, 31, 18, 0, tzinfo=timezone.utc)
    rule = RecurrenceRule(frequency=RecurrenceFrequency.monthly, occurrences=4)

    siblings = expand_occurrences(_activity(start, rule))

    assert [s.date() for s in _starts(siblings)] == [
        datetime(2025, 2, 28).date(),
        datetime(2025, 3, 31).date(),
        datetime(2025, 4, 30).date(),
    ]


def test_yearly_rule_from_leap_day():
    start = datetime(2024, 2, 29, 8, 0, tzinfo=timezone.utc)

    assert nth_occurrence(start, RecurrenceRule(frequency=RecurrenceFrequency.yearly), 1).date() == datetime(2025, 2, 28).date()
    assert nth_occurrence(start, RecurrenceRule(frequency=RecurrenceFrequency.yearly), 4).date() == datetime(2028, 2, 29).date()


def test_end_date_is_inclusive_by_day():
    start = datetime(2025, 1, 8, 9, 0, tzinfo=timezone.utc)
    rule = RecurrenceRule(frequency=RecurrenceFrequency.daily, end_date=datetime(2025, 1, 11, 0, 0))

    siblings = expand_occurrences(_activity(start, rule))

    assert [s.day for s in _starts(siblings)] == [9, 10, 11]


def test_limit_caps_unbounded_rules():
    start = datetime(2025, 1, 8, 9, 0, tzinfo=timezone.utc)
    rule = RecurrenceRule(frequency=RecurrenceFrequency.daily)

    assert len(expand_occurrences(_activity(start, rule))) == 10
    assert len(expand_occurrences(_activity(start, rule), limit=3)) == 3
    assert expand_occurrences(_activity(start, rule), limit=0) == []


def test_siblings_point_at_origin_and_keep_duration():
    start = datetime(2025, 1, 8, 9, 0, tzinfo=timezone.utc)
    rule = RecurrenceRule(frequency=RecurrenceFrequency.weekly, occurrences=3)
    origin = _activity(start, rule, minutes=50)

    siblings = expand_occurrences(origin)

    assert len({s.id for s in siblings} | {origin.id}) == 3
    for sibling in siblings:
        assert sibling.recurring_parent_id == "origin"
        assert sibling.recurrence_rule == rule
        assert sibling.is_completed is False
        assert sibling.duration_minutes == 50
        assert sibling.title == "Run"


def test_activity_without_rule_has_no_siblings():
    start = datetime(2025, 1, 8, 9, 0, tzinfo=timezone.utc)

    assert expand_occurrences(_activity(start, None)) == []
