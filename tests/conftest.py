"""Shared test fixtures and helpers."""

from datetime import date, datetime, time
from typing import Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from chairbook import models  # noqa: F401  registers tables
from chairbook.availability import (
    AppointmentStatus,
    ExistingAppointment,
    Weekday,
    WeeklyAvailabilityBlock,
)
from chairbook.db import get_session
from chairbook.main import app
from chairbook.routers import appointments_routes, barbers_routes

# Monday 19 Oct 2026, a little after ten in the morning
NOW = datetime(2026, 10, 19, 10, 7)
NEXT_MONDAY = datetime(2026, 10, 26).date()


def block(day: str, start: str, end: str) -> WeeklyAvailabilityBlock:
    sh, sm = map(int, start.split(":"))
    eh, em = map(int, end.split(":"))
    return WeeklyAvailabilityBlock(Weekday(day), time(sh, sm), time(eh, em))


def appt(
    start: datetime,
    minutes: int = 30,
    status: AppointmentStatus = AppointmentStatus.confirmed,
) -> ExistingAppointment:
    return ExistingAppointment(start_time=start, duration_minutes=minutes, status=status)


def at(hour: int, minute: int = 0, day: Optional[date] = None) -> datetime:
    day = day or NEXT_MONDAY
    return datetime.combine(day, time(hour, minute))


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(engine, monkeypatch):
    def _session_override():
        with Session(engine) as session:
            yield session

    monkeypatch.setattr(barbers_routes, "shop_now", lambda: NOW)
    monkeypatch.setattr(appointments_routes, "shop_now", lambda: NOW)
    app.dependency_overrides[get_session] = _session_override
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def haircut(client):
    resp = client.post("/services", json={"name": "Haircut", "duration_minutes": 30, "price": 35})
    assert resp.status_code == 201
    return resp.json()


@pytest.fixture
def barber(client):
    resp = client.post(
        "/barbers",
        json={
            "name": "Marcus Hill",
            "email": "marcus@example.com",
            "daily_availability": [
                {"day_of_week": "monday", "start_time": "09:00", "end_time": "12:00"},
                {"day_of_week": "monday", "start_time": "13:00", "end_time": "17:00"},
            ],
        },
    )
    assert resp.status_code == 201
    return resp.json()


def booking_payload(barber_id: int, service_id: int, when: str, email: str = "sam@example.com") -> dict:
    return {
        "customer_name": "Sam Reed",
        "customer_email": email,
        "customer_phone": "555-0100",
        "barber_id": barber_id,
        "service_id": service_id,
        "date_time": when,
    }
