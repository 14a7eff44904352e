"""Regression tests for application route registration."""
import pytest

from lifepilot.main import app


@pytest.mark.parametrize(
    "path,method",
    [
        ("/profiles/{user_id}", "PUT"),
        ("/analysis/generate", "POST"),
        ("/analysis/recommendations/{recommendation_id}", "PATCH"),
        ("/schedule", "GET"),
        ("/schedule/activities", "POST"),
        ("/schedule/activities/{activity_id}", "DELETE"),
        ("/schedule/statistics", "GET"),
        ("/jobs/run-now", "POST"),
    ],
)
def test_route_registered_once(path, method) -> None:
    """Ensure each endpoint is mounted exactly once."""
    matches = [
        route
        for route in app.routes
        if getattr(route, "path", None) == path and method in (getattr(route, "methods", None) or ())
    ]
    assert len(matches) == 1
