from __future__ import annotations

from datetime import datetime, timedelta, timezone

from apscheduler.schedulers.background import BackgroundScheduler
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from lifepilot.core.config import settings
from lifepilot.db.models.generation_ticket import GenerationTicketRecord
from lifepilot.worker import scheduler_main


def test_register_jobs_adds_ticket_sweep(monkeypatch):
    monkeypatch.setattr(settings, "ticket_sweep_interval_minutes", 7)
    scheduler = BackgroundScheduler(timezone="UTC")

    scheduler_main.register_jobs(scheduler)

    job = scheduler.get_job(scheduler_main.TICKET_SWEEP_JOB_ID)
    assert job is not None
    assert job.trigger.interval == timedelta(minutes=7)


def test_ticket_sweep_job_uses_fresh_session(monkeypatch):
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    TestingSession = sessionmaker(bind=engine, autoflush=False, future=True)
    GenerationTicketRecord.__table__.create(bind=engine)
    session = TestingSession()
    session.add(
        GenerationTicketRecord(
            ticket_id="stale",
            user_id="user-1",
            status="pending",
            started_at=datetime.now(timezone.utc) - timedelta(hours=2),
        )
    )
    session.commit()
    session.close()
    monkeypatch.setattr(scheduler_main, "new_session", TestingSession)

    scheduler_main.run_ticket_sweep_job()

    check = TestingSession()
    try:
        assert check.get(GenerationTicketRecord, "stale").status == "timed_out"
    finally:
        check.close()
