"""Enumerations shared by profiles, analyses and schedules.

Values are the canonical display strings used by the mobile client and by the
generation prompt; the resilient mapper in ``lifepilot.services.enum_mapper``
resolves free-text labels onto these members.
"""
from __future__ import annotations

from enum import Enum


class SleepPreference(str, Enum):
    early_riser = "Early Riser"
    neutral = "Neutral"
    night_owl = "Night Owl"


class ActivityLevel(str, Enum):
    sedentary = "Sedentary"
    light = "Light"
    moderate = "Moderate"
    active = "Active"
    very_active = "Very Active"


class FocusArea(str, Enum):
    health = "Health & Fitness"
    productivity = "Productivity"
    career = "Career Growth"
    relationships = "Relationships"
    learning = "Learning & Skills"
    mindfulness = "Mindfulness & Mental Health"
    finance = "Finance"
    creativity = "Creativity"


class Challenge(str, Enum):
    time_management = "Time Management"
    consistency = "Consistency"
    motivation = "Motivation"
    energy = "Energy Levels"
    stress = "Stress"
    focus = "Focus & Concentration"
    sleep_quality = "Sleep Quality"
    work_life_balance = "Work-Life Balance"


class InsightSeverity(str, Enum):
    positive = "Positive"
    neutral = "Neutral"
    needs_attention = "Needs Attention"
    critical = "Critical"


class RecommendationImpact(str, Enum):
    low = "Low"
    medium = "Medium"
    high = "High"


class TimeFrame(str, Enum):
    immediate = "Immediate"
    short_term = "Short Term (Days)"
    medium_term = "Medium Term (Weeks)"
    long_term = "Long Term (Months)"


class EvidenceType(str, Enum):
    article = "Article"
    study = "Scientific Study"
    book = "Book"
    video = "Video"
    podcast = "Podcast"


class DayOfWeek(str, Enum):
    monday = "Monday"
    tuesday = "Tuesday"
    wednesday = "Wednesday"
    thursday = "Thursday"
    friday = "Friday"
    saturday = "Saturday"
    sunday = "Sunday"

    @property
    def short_name(self) -> str:
        return self.value[:3]

    @property
    def weekday_index(self) -> int:
        """Python weekday number (Monday=0)."""
        return _DAY_ORDER.index(self)

    @classmethod
    def from_weekday(cls, index: int) -> "DayOfWeek":
        return _DAY_ORDER[index % 7]


_DAY_ORDER = list(DayOfWeek)


class ActivityType(str, Enum):
    task = "Task"
    habit = "Habit"
    exercise = "Exercise"
    meal = "Meal"
    work = "Work"
    leisure = "Leisure"
    learning = "Learning"
    mindfulness = "Mindfulness"
    sleep = "Sleep"


class ActivityColor(str, Enum):
    blue = "Blue"
    green = "Green"
    orange = "Orange"
    purple = "Purple"
    red = "Red"
    yellow = "Yellow"
    teal = "Teal"
    pink = "Pink"

    @property
    def hex_value(self) -> str:
        return _COLOR_HEX[self]


_COLOR_HEX = {
    ActivityColor.blue: "#007AFF",
    ActivityColor.green: "#34C759",
    ActivityColor.orange: "#FF9500",
    ActivityColor.purple: "#AF52DE",
    ActivityColor.red: "#FF3B30",
    ActivityColor.yellow: "#FFCC00",
    ActivityColor.teal: "#5AC8FA",
    ActivityColor.pink: "#FF2D55",
}


class RecurrenceFrequency(str, Enum):
    daily = "daily"
    weekly = "weekly"
    monthly = "monthly"
    yearly = "yearly"


class GenerationStatus(str, Enum):
    pending = "pending"
    completed = "completed"
    fallback = "fallback"
    failed = "failed"
    timed_out = "timed_out"
