from lifepilot.db.base import Base
from lifepilot.db import models  # noqa: F401  ensure models are loaded


def test_metadata_contains_core_tables() -> None:
    table_names = set(Base.metadata.tables.keys())
    expected = {
        "user_profiles",
        "personalized_analyses",
        "weekly_schedules",
        "generation_tickets",
    }

    assert expected.issubset(table_names)
