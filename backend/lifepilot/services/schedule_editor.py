"""In-memory edits on a user's weekly schedule.

Every applied edit re-sorts the touched days, stamps ``last_modified`` and
hands the schedule to the ``persist`` callable. Edits that cannot apply
(unknown id, duplicate id) return ``False`` and do not persist. Errors raised
by ``persist`` propagate to the caller.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone, tzinfo
from typing import Callable, Iterable, List, Optional, Set

from lifepilot.domain.analysis import Recommendation
from lifepilot.domain.enums import DayOfWeek
from lifepilot.domain.schedule import (
    ScheduledActivity,
    WeeklySchedule,
    day_of_week_for,
    ensure_aware,
)
from lifepilot.services.recurrence import DEFAULT_MAX_INSTANCES, expand_occurrences
from lifepilot.services.schedule_generator import ScheduleGenerator

logger = logging.getLogger(__name__)

PersistFn = Callable[[WeeklySchedule], None]
Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _is_series_origin(activity: ScheduledActivity) -> bool:
    return activity.recurrence_rule is not None and activity.recurring_parent_id is None


class ScheduleEditor:
    def __init__(
        self,
        schedule: WeeklySchedule,
        *,
        persist: Optional[PersistFn] = None,
        clock: Optional[Clock] = None,
        tz: Optional[tzinfo] = None,
        generator: Optional[ScheduleGenerator] = None,
        max_recurrence_instances: int = DEFAULT_MAX_INSTANCES,
    ) -> None:
        self.schedule = schedule
        self.persist = persist
        self.clock = clock or _utcnow
        self.tz = tz
        self.generator = generator or ScheduleGenerator(tz=tz)
        self.max_recurrence_instances = max_recurrence_instances

    def day_for(self, moment: datetime) -> DayOfWeek:
        return day_of_week_for(moment, self.tz)

    def add_activity(self, activity: ScheduledActivity) -> bool:
        if self.schedule.find_activity(activity.id) is not None:
            logger.debug("Activity %s already scheduled; add ignored", activity.id)
            return False
        touched = self._insert_with_series(activity)
        self._commit(touched)
        return True

    def add_activities(self, activities: Iterable[ScheduledActivity]) -> int:
        """Insert a batch with a single persistence call. Returns how many were added."""
        touched: Set[DayOfWeek] = set()
        added = 0
        for activity in activities:
            if self.schedule.find_activity(activity.id) is not None:
                logger.debug("Activity %s already scheduled; skipped in batch", activity.id)
                continue
            touched |= self._insert_with_series(activity)
            added += 1
        if added:
            self._commit(touched)
        return added

    def update_activity(self, activity: ScheduledActivity) -> bool:
        """Replace an activity, moving it to its new weekday if needed.

        Updating a series origin regenerates every sibling from the new definition.
        Updating a sibling edits that one instance and leaves the rest of the series alone.
        """
        found = self.schedule.find_activity(activity.id)
        if found is None:
            logger.debug("Activity %s not found; update ignored", activity.id)
            return False
        old_day, previous = found
        old_day.activities.remove(previous)
        touched = {old_day.day_of_week}

        if _is_series_origin(previous) or _is_series_origin(activity):
            # Origins regenerate their whole series; siblings are edited one at a time.
            touched |= self._remove_siblings(activity.id)
            touched |= self._insert_with_series(activity)
        else:
            touched.add(self._insert(activity))

        self._commit(touched)
        return True

    def delete_activity(self, activity_id: str) -> bool:
        found = self.schedule.find_activity(activity_id)
        if found is None:
            logger.debug("Activity %s not found; delete ignored", activity_id)
            return False
        day, activity = found
        day.activities.remove(activity)
        touched = {day.day_of_week} | self._remove_siblings(activity_id)
        self._commit(touched)
        return True

    def toggle_completion(self, activity_id: str) -> bool:
        found = self.schedule.find_activity(activity_id)
        if found is None:
            logger.debug("Activity %s not found; toggle ignored", activity_id)
            return False
        day, activity = found
        activity.is_completed = not activity.is_completed
        self._commit({day.day_of_week})
        return True

    def reschedule_activity(self, activity_id: str, new_start: datetime) -> bool:
        found = self.schedule.find_activity(activity_id)
        if found is None:
            logger.debug("Activity %s not found; reschedule ignored", activity_id)
            return False
        day, activity = found
        new_start = ensure_aware(new_start)
        duration = activity.end_time - activity.start_time
        moved = activity.model_copy(update={"start_time": new_start, "end_time": new_start + duration})
        day.activities.remove(activity)
        touched = {day.day_of_week, self._insert(moved)}
        self._commit(touched)
        return True

    def check_time_conflict(
        self,
        start: datetime,
        end: datetime,
        excluding_id: Optional[str] = None,
    ) -> bool:
        """True when another activity on the same weekday overlaps ``[start, end)``."""
        start = ensure_aware(start)
        end = ensure_aware(end)
        for other in self.schedule.day(self.day_for(start)).activities:
            if excluding_id is not None and other.id == excluding_id:
                continue
            if start < other.end_time and end > other.start_time:
                return True
        return False

    def regenerate_schedule(
        self,
        user_id: str,
        accepted_recommendations: Iterable[Recommendation],
    ) -> WeeklySchedule:
        """Rebuild generated activities and carry over the user's own ones."""
        custom = [activity for activity in self.schedule.iter_activities() if not activity.is_recommended]
        fresh = self.generator.generate(user_id, accepted_recommendations, now=self.clock())
        fresh.id = self.schedule.id
        fresh.created_at = self.schedule.created_at

        for activity in custom:
            fresh.day(self.day_for(activity.start_time)).activities.append(activity)

        self.schedule = fresh
        logger.info("Regenerated schedule for user %s, kept %s custom activities", user_id, len(custom))
        self._commit(set(DayOfWeek))
        return self.schedule

    def activities_for_day(self, day: DayOfWeek) -> List[ScheduledActivity]:
        return list(self.schedule.day(day).activities)

    def _insert(self, activity: ScheduledActivity) -> DayOfWeek:
        day = self.day_for(activity.start_time)
        self.schedule.day(day).activities.append(activity)
        return day

    def _insert_with_series(self, activity: ScheduledActivity) -> Set[DayOfWeek]:
        touched = {self._insert(activity)}
        if _is_series_origin(activity):
            siblings = expand_occurrences(
                activity,
                activity.recurrence_rule,
                self.max_recurrence_instances,
                tz=self.tz,
            )
            for sibling in siblings:
                touched.add(self._insert(sibling))
            logger.debug("Expanded %s recurring instances for %s", len(siblings), activity.id)
        return touched

    def _remove_siblings(self, parent_id: str) -> Set[DayOfWeek]:
        touched: Set[DayOfWeek] = set()
        for day in self.schedule.days:
            kept = [activity for activity in day.activities if activity.recurring_parent_id != parent_id]
            if len(kept) != len(day.activities):
                day.activities = kept
                touched.add(day.day_of_week)
        return touched

    def _commit(self, touched: Iterable[DayOfWeek]) -> None:
        for day_of_week in touched:
            self.schedule.day(day_of_week).sort_activities()
        self.schedule.last_modified = self.clock()
        if self.persist is not None:
            self.persist(self.schedule)
