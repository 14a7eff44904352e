"""Expansion of recurrence rules into sibling activities."""
from __future__ import annotations

import calendar
from datetime import datetime, timedelta, tzinfo
from typing import List, Optional

from lifepilot.domain.analysis import new_id
from lifepilot.domain.enums import RecurrenceFrequency
from lifepilot.domain.schedule import RecurrenceRule, ScheduledActivity, ensure_aware

DEFAULT_MAX_INSTANCES = 10


def _add_months(moment: datetime, months: int) -> datetime:
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def _week_start_sunday(moment: datetime) -> datetime:
    # Python weekday(): Monday=0 .. Sunday=6
    return moment - timedelta(days=(moment.weekday() + 1) % 7)


def _snap_to_weekday(moment: datetime, days_of_week: List[int]) -> datetime:
    """Move ``moment`` to the earliest configured day of its Sunday-start week."""
    earliest = min(days_of_week)
    return _week_start_sunday(moment) + timedelta(days=earliest - 1)


def nth_occurrence(origin: datetime, rule: RecurrenceRule, n: int) -> datetime:
    """Start of the ``n``-th instance after ``origin`` (``n`` >= 1)."""
    step = rule.interval * n
    if rule.frequency == RecurrenceFrequency.daily:
        return origin + timedelta(days=step)
    if rule.frequency == RecurrenceFrequency.weekly:
        moved = origin + timedelta(weeks=step)
        if rule.days_of_week:
            moved = _snap_to_weekday(moved, rule.days_of_week)
        return moved
    if rule.frequency == RecurrenceFrequency.monthly:
        return _add_months(origin, step)
    return _add_months(origin, 12 * step)


def expand_occurrences(
    activity: ScheduledActivity,
    rule: Optional[RecurrenceRule] = None,
    limit: int = DEFAULT_MAX_INSTANCES,
    tz: Optional[tzinfo] = None,
) -> List[ScheduledActivity]:
    """Build the sibling instances of a recurring activity.

    The origin itself is not returned. ``rule.occurrences`` counts the origin,
    ``rule.end_date`` bounds instance start dates (inclusive, by calendar
    day) and ``limit`` caps the number of siblings.
    """
    rule = rule or activity.recurrence_rule
    if rule is None or limit <= 0:
        return []

    origin = ensure_aware(activity.start_time)
    if tz is not None:
        origin = origin.astimezone(tz)
    duration = activity.end_time - activity.start_time

    max_siblings = limit
    if rule.occurrences is not None:
        max_siblings = min(max_siblings, rule.occurrences - 1)

    end_day = None
    if rule.end_date is not None:
        end_day = rule.end_date.astimezone(origin.tzinfo).date()

    siblings: List[ScheduledActivity] = []
    n = 1
    while len(siblings) < max_siblings:
        start = nth_occurrence(origin, rule, n)
        n += 1
        if end_day is not None and start.date() > end_day:
            break
        siblings.append(
            activity.model_copy(
                update={
                    "id": new_id(),
                    "start_time": start,
                    "end_time": start + duration,
                    "is_completed": False,
                    "recurrence_rule": rule,
                    "recurring_parent_id": activity.id,
                }
            )
        )
    return siblings
