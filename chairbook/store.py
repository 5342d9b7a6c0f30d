# chairbook/store.py
"""Reads barber schedules and appointments out of the database as engine inputs."""

from datetime import date, datetime, timedelta
from typing import List, Optional

from sqlmodel import Session, select

from chairbook.availability import (
    AppointmentStatus,
    ExistingAppointment,
    Weekday,
    WeeklyAvailabilityBlock,
)
from chairbook.models import Appointment, AvailabilityBlock


def day_bounds(day: date):
    day_start_dt = datetime.combine(day, datetime.min.time())
    return day_start_dt, day_start_dt + timedelta(days=1)


def get_weekly_blocks(session: Session, barber_id: int) -> List[WeeklyAvailabilityBlock]:
    rows = session.exec(
        select(AvailabilityBlock)
        .where(AvailabilityBlock.barber_id == barber_id)
        .order_by(AvailabilityBlock.id)
    ).all()
    return [
        WeeklyAvailabilityBlock(
            day_of_week=Weekday(row.day_of_week),
            start_time=row.start_time,
            end_time=row.end_time,
        )
        for row in rows
    ]


def get_day_appointments(
    session: Session,
    barber_id: int,
    day: date,
    exclude_id: Optional[int] = None,
) -> List[ExistingAppointment]:
    """Every appointment starting on ``day``, whatever its status."""
    day_start_dt, day_end_dt = day_bounds(day)
    stmt = (
        select(Appointment)
        .where(Appointment.barber_id == barber_id)
        .where(Appointment.starts_at >= day_start_dt)
        .where(Appointment.starts_at < day_end_dt)
    )
    if exclude_id is not None:
        stmt = stmt.where(Appointment.id != exclude_id)

    return [
        ExistingAppointment(
            start_time=row.starts_at,
            duration_minutes=row.duration_minutes,
            status=AppointmentStatus(row.status),
        )
        for row in session.exec(stmt).all()
    ]
