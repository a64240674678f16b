import os

# In-memory database and no Redis before app modules read settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.pop("REDIS_URL", None)

import pytest
from fastapi import Depends
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import get_db
from app.main import app
from app.models.generated import Base
from app.routers.bookings import get_availability_service
from app.services.scheduling import AvailabilityService

from helpers import fixed_clock


@pytest.fixture
def db():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def service(db) -> AvailabilityService:
    return AvailabilityService(db, clock=fixed_clock)


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    def override_service(session: Session = Depends(get_db)) -> AvailabilityService:
        return AvailabilityService(session, clock=fixed_clock)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_availability_service] = override_service
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def events(monkeypatch):
    """Capture emitted events instead of pushing them to Redis."""
    emitted = []

    def fake_emit(event_type: str, payload: dict) -> None:
        emitted.append((event_type, payload))

    monkeypatch.setattr("app.services.scheduling.availability.emit_event", fake_emit)
    return emitted
