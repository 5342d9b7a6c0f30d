# chairbook/routers/barbers_routes.py

import logging
from datetime import date
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from chairbook.availability import enumerate_slots
from chairbook.core import format_hhmm, parse_hhmm, shop_now
from chairbook.db import get_session
from chairbook.models import AvailabilityBlock, Barber, Service
from chairbook.schemas import (
    AvailabilityBlockIn,
    AvailabilityResponse,
    BarberCreate,
    BarberPublic,
)
from chairbook.store import get_day_appointments, get_weekly_blocks

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/barbers",
    tags=["barbers"],
)

def _barber_public(session: Session, barber: Barber) -> dict:
    blocks = get_weekly_blocks(session, barber.id)
    return {
        "id": barber.id,
        "name": barber.name,
        "email": barber.email,
        "bio": barber.bio,
        "daily_availability": [
            {
                "day_of_week": b.day_of_week,
                "start_time": format_hhmm(b.start_time),
                "end_time": format_hhmm(b.end_time),
            }
            for b in blocks
        ],
    }

def _replace_blocks(session: Session, barber_id: int, blocks: List[AvailabilityBlockIn]) -> None:
    existing = session.exec(
        select(AvailabilityBlock).where(AvailabilityBlock.barber_id == barber_id)
    ).all()
    for row in existing:
        session.delete(row)

    for block in blocks:
        session.add(
            AvailabilityBlock(
                barber_id=barber_id,
                day_of_week=block.day_of_week.value,
                start_time=parse_hhmm(block.start_time),
                end_time=parse_hhmm(block.end_time),
            )
        )

def _get_barber_or_404(session: Session, barber_id: int) -> Barber:
    barber = session.get(Barber, barber_id)
    if barber is None:
        raise HTTPException(status_code=404, detail="Barber not found")
    return barber

@router.get("", response_model=List[BarberPublic])
def list_barbers(session: Session = Depends(get_session)):
    barbers = session.exec(select(Barber).order_by(Barber.name)).all()
    return [_barber_public(session, b) for b in barbers]

@router.post("", response_model=BarberPublic, status_code=201)
def create_barber(
    barber: BarberCreate,
    session: Session = Depends(get_session),
):
    # 1) Email must be unique
    existing = session.exec(select(Barber).where(Barber.email == barber.email)).first()
    if existing is not None:
        raise HTTPException(status_code=409, detail="Barber email already registered")

    # 2) Create barber, then their weekly blocks
    db_barber = Barber(name=barber.name, email=barber.email, bio=barber.bio)
    session.add(db_barber)
    try:
        session.flush()  # fills db_barber.id
    except IntegrityError:
        session.rollback()
        raise HTTPException(status_code=409, detail="Barber email already registered")

    _replace_blocks(session, db_barber.id, barber.daily_availability)
    session.commit()
    session.refresh(db_barber)

    logger.info("Created barber %s (%s)", db_barber.id, db_barber.email)
    return _barber_public(session, db_barber)

@router.get("/{barber_id}", response_model=BarberPublic)
def get_barber(barber_id: int, session: Session = Depends(get_session)):
    barber = _get_barber_or_404(session, barber_id)
    return _barber_public(session, barber)

@router.put("/{barber_id}/availability", response_model=BarberPublic)
def set_weekly_availability(
    barber_id: int,
    blocks: List[AvailabilityBlockIn],
    session: Session = Depends(get_session),
):
    barber = _get_barber_or_404(session, barber_id)

    _replace_blocks(session, barber.id, blocks)
    session.commit()

    logger.info("Replaced weekly availability for barber %s with %d block(s)", barber.id, len(blocks))
    return _barber_public(session, barber)

@router.get("/{barber_id}/availability", response_model=AvailabilityResponse)
def barber_availability(
    barber_id: int,
    date: date,
    service_id: int,
    session: Session = Depends(get_session),
):
    # 1) Lookup barber and service
    barber = _get_barber_or_404(session, barber_id)
    service = session.get(Service, service_id)
    if service is None:
        raise HTTPException(status_code=404, detail="Service not found")

    # 2) Past days have nothing to offer
    now = shop_now()
    available = []
    if date >= now.date():
        # 3) Weekly blocks + that day's appointments
        blocks = get_weekly_blocks(session, barber.id)
        appointments = get_day_appointments(session, barber.id, date)

        # 4) Let the engine pick the slots
        slots = enumerate_slots(blocks, date, service.duration_minutes, appointments, now)

        # overlapping blocks can produce the same start twice
        available = list(dict.fromkeys(format_hhmm(s) for s in slots))

    return {
        "barber_id": barber.id,
        "date": date,
        "service_id": service.id,
        "duration_minutes": service.duration_minutes,
        "available_starts": available,
    }
