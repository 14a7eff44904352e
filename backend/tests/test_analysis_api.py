from __future__ import annotations

import json

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from lifepilot.api.deps import get_client
from lifepilot.db.base import Base
from lifepilot.db.deps import get_db
from lifepilot.main import app
from lifepilot.services.generation_client import GenerationClient

RESPONSE = json.dumps(
    {
        "insights": [
            {"title": "Late nights", "description": "d", "focusArea": "sleep", "severity": "needs attention"}
        ],
        "recommendations": [
            {
                "id": "rec-health",
                "title": "Morning run",
                "description": "Run before work",
                "focusArea": "Health & Fitness",
                "impact": "High",
                "timeframe": "Immediate",
            }
        ],
        "evidenceLinks": [{"title": "Exercise and mood", "url": "https://example.org/study", "type": "study"}],
    }
)


class FakeClient(GenerationClient):
    def __init__(self, text: str) -> None:
        self.text = text

    def generate(self, prompt: str) -> str:
        return self.text


def _client_fixture(generation_client):
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, future=True)
    Base.metadata.create_all(bind=engine)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_client] = lambda: generation_client
    return TestClient(app)


@pytest.fixture()
def client():
    with _client_fixture(FakeClient(RESPONSE)) as test_client:
        test_client.put("/profiles/user-1", json={"name": "Sam", "focus_areas": ["Health & Fitness"]})
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture()
def unconfigured_client():
    with _client_fixture(None) as test_client:
        test_client.put("/profiles/user-1", json={"name": "Sam"})
        yield test_client
    app.dependency_overrides.clear()


def test_generate_returns_parsed_analysis(client):
    response = client.post("/analysis/generate", json={"user_id": "user-1"}, headers={"X-Request-Id": "req-gen"})

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "parsed"
    assert body["ticket_status"] == "completed"
    assert body["saved"] is True
    assert body["request_id"] == "req-gen"
    assert body["analysis"]["insights"][0]["focus_area"] == "Health & Fitness"
    assert body["analysis"]["insights"][0]["severity"] == "Needs Attention"
    assert body["analysis"]["evidence_links"][0]["type"] == "Scientific Study"

    stored = client.get("/analysis", params={"user_id": "user-1"}).json()["analysis"]
    assert stored["id"] == body["analysis"]["id"]


def test_generate_without_profile_is_404(client):
    response = client.post("/analysis/generate", json={"user_id": "stranger"})

    assert response.status_code == 404


def test_generate_without_client_returns_placeholder(unconfigured_client):
    response = unconfigured_client.post("/analysis/generate", json={"user_id": "user-1"})

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "fallback"
    assert body["reason"] == "generation_unavailable"
    assert body["ticket_status"] == "failed"
    assert body["analysis"]["recommendations"][0]["title"] == "Try Again Later"


def test_accepting_recommendation_builds_schedule(client):
    client.post("/analysis/generate", json={"user_id": "user-1"})

    response = client.patch("/analysis/recommendations/rec-health", json={"user_id": "user-1", "accepted": True})

    assert response.status_code == 200
    body = response.json()
    assert body["analysis"]["recommendations"][0]["accepted"] is True
    activities = [a for day in body["schedule"]["days"] for a in day["activities"]]
    assert len(activities) == 3
    assert {a["activity_type"] for a in activities} == {"Exercise"}
    assert [day["day_of_week"] for day in body["schedule"]["days"] if day["activities"]] == [
        "Monday",
        "Wednesday",
        "Friday",
    ]

    schedule = client.get("/schedule", params={"user_id": "user-1"}).json()["schedule"]
    assert schedule["id"] == body["schedule"]["id"]


def test_resetting_recommendation_clears_generated_activities(client):
    client.post("/analysis/generate", json={"user_id": "user-1"})
    client.patch("/analysis/recommendations/rec-health", json={"user_id": "user-1", "accepted": True})

    body = client.patch("/analysis/recommendations/rec-health", json={"user_id": "user-1", "accepted": None}).json()

    assert body["analysis"]["recommendations"][0]["accepted"] is None
    assert all(not day["activities"] for day in body["schedule"]["days"])


def test_unknown_recommendation_is_404(client):
    client.post("/analysis/generate", json={"user_id": "user-1"})

    response = client.patch("/analysis/recommendations/missing", json={"user_id": "user-1", "accepted": True})

    assert response.status_code == 404


def test_get_analysis_before_generation_is_404(client):
    assert client.get("/analysis", params={"user_id": "user-1"}).status_code == 404
