"""
Shared fixtures for the reservation service tests.

- engine / session: in-memory SQLite shared across threads (StaticPool)
- notifier: records every message instead of sending it
- client: FastAPI TestClient over an app built with the fixtures above
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

import models  # noqa: F401
from admins import AdminDirectory
from app import create_app
from errors import NotificationError
from notifier import Notification, Notifier
from settings import Settings
from workflow import ReservationWorkflow, TransitionLocks

BOSS = "boss@club.com"
SECOND = "second@club.com"


class RecordingNotifier(Notifier):
    """Notifier that keeps sent messages and fails for chosen recipients."""

    def __init__(self, failing: set[str] | None = None):
        self.sent: list[Notification] = []
        self.failing = failing or set()

    def deliver(self, n: Notification) -> None:
        if n.to in self.failing:
            raise NotificationError("smtp unavailable")
        self.sent.append(n)

    def sent_to(self, address: str) -> list[Notification]:
        return [n for n in self.sent if n.to == address]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        admin_emails=[BOSS, SECOND],
        admin_email_mapping={BOSS: "The Boss"},
        base_url="http://test.local",
        notifier_backend="log",
        environment="production",
    )


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as s:
        yield s


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def locks() -> TransitionLocks:
    return TransitionLocks()


@pytest.fixture
def workflow(session, settings, notifier, locks) -> ReservationWorkflow:
    return ReservationWorkflow(session, AdminDirectory.from_settings(settings), notifier, locks, settings)


@pytest.fixture
def client(settings, engine, notifier):
    app = create_app(settings=settings, engine=engine, notifier=notifier)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def valid_request() -> dict:
    return {
        "name": "A",
        "email": "a@x.com",
        "date": "2024-01-01",
        "time": "10:00",
        "duration": "60",
    }
