# chairbook/routers/appointments_routes.py

import logging
from datetime import date
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from chairbook.availability import (
    ACTIVE_STATUSES,
    AppointmentStatus,
    BookingRequest,
    SlotCheck,
    validate_slot,
)
from chairbook.core import shop_now, to_shop_time
from chairbook.db import get_session
from chairbook.models import Appointment, Barber, Customer, Service
from chairbook.schemas import (
    AppointmentPublic,
    BookingCreate,
    BookingResult,
    StatusUpdate,
)
from chairbook.store import day_bounds, get_day_appointments, get_weekly_blocks

logger = logging.getLogger(__name__)

OUTSIDE_HOURS_DETAIL = "Selected barber is not available at this time."
SLOT_TAKEN_DETAIL = "This time slot is no longer available. Please choose another."

router = APIRouter(
    tags=["appointments"],
)

def _raise_for_rejection(check: SlotCheck) -> None:
    if check is SlotCheck.outside_working_hours:
        raise HTTPException(status_code=422, detail=OUTSIDE_HOURS_DETAIL)
    if check is SlotCheck.slot_taken:
        raise HTTPException(status_code=409, detail=SLOT_TAKEN_DETAIL)

def _customer_by_email(session: Session, email: str):
    return session.exec(select(Customer).where(Customer.email == email)).first()

def _find_or_create_customer(session: Session, booking: BookingCreate) -> Customer:
    customer = _customer_by_email(session, booking.customer_email)

    if customer is None:
        customer = Customer(
            name=booking.customer_name,
            email=booking.customer_email,
            phone=booking.customer_phone,
        )
        session.add(customer)
        try:
            session.flush()  # fills customer.id
        except IntegrityError:
            # a concurrent booking registered the same email first
            session.rollback()
            customer = _customer_by_email(session, booking.customer_email)
            if customer is None:
                raise HTTPException(status_code=409, detail="Customer could not be registered, please retry")
            return customer
        logger.info("New customer %s (%s)", customer.id, customer.email)
    elif customer.phone != booking.customer_phone:
        customer.phone = booking.customer_phone
        session.add(customer)
        logger.info("Updated phone for customer %s", customer.id)

    return customer

@router.get("/appointments", response_model=List[AppointmentPublic])
def list_appointments(
    barber_id: int,
    date: date,
    session: Session = Depends(get_session),
):
    day_start_dt, day_end_dt = day_bounds(date)
    stmt = (
        select(Appointment)
        .where(Appointment.barber_id == barber_id)
        .where(Appointment.starts_at >= day_start_dt)
        .where(Appointment.starts_at < day_end_dt)
        .order_by(Appointment.starts_at)
    )
    return session.exec(stmt).all()

@router.post("/book-appointment", response_model=BookingResult, status_code=201)
def book_appointment(
    booking: BookingCreate,
    session: Session = Depends(get_session),
):
    # 1) Resolve service and barber
    service = session.get(Service, booking.service_id)
    if service is None:
        raise HTTPException(status_code=404, detail="Service not found")
    barber = session.get(Barber, booking.barber_id)
    if barber is None:
        raise HTTPException(status_code=404, detail="Barber not found")

    # 2) Prevent booking in the past (shop local time)
    appt_start = to_shop_time(booking.date_time)
    if appt_start < shop_now():
        raise HTTPException(status_code=422, detail="Cannot book an appointment in the past")

    # 3) Re-validate against fresh data, never the client's slot list
    request = BookingRequest(
        blocks=get_weekly_blocks(session, barber.id),
        proposed_start=appt_start,
        service_duration=service.duration_minutes,
        existing_appointments=get_day_appointments(session, barber.id, appt_start.date()),
    )
    check = request.validate()
    if not check.accepted:
        logger.warning(
            "Rejected booking for barber %s at %s (%s): %s",
            barber.id, appt_start, service.name, check.value,
        )
    _raise_for_rejection(check)

    # 4) Customer, then the appointment itself
    customer = _find_or_create_customer(session, booking)

    db_appt = Appointment(
        barber_id=barber.id,
        service_id=service.id,
        customer_id=customer.id,
        starts_at=appt_start,
        duration_minutes=service.duration_minutes,
        status=AppointmentStatus.pending.value,
        notes=booking.notes,
    )

    session.add(db_appt)
    try:
        session.commit()
    except IntegrityError:
        # another request took the same start time after our check
        session.rollback()
        raise HTTPException(status_code=409, detail=SLOT_TAKEN_DETAIL)

    session.refresh(db_appt)  # fills db_appt.id
    logger.info(
        "Booked appointment %s: %s with %s at %s",
        db_appt.id, service.name, barber.name, appt_start,
    )
    return {"message": "Appointment booked successfully!", "appointment_id": db_appt.id}

@router.patch("/appointments/{appt_id}/status", response_model=AppointmentPublic)
def update_appointment_status(
    appt_id: int,
    update: StatusUpdate,
    session: Session = Depends(get_session),
):
    # 1) Find the appointment in DB
    target = session.get(Appointment, appt_id)
    if target is None:
        raise HTTPException(status_code=404, detail="Appointment not found")

    old_status = AppointmentStatus(target.status)
    if old_status == update.status:
        raise HTTPException(status_code=409, detail=f"Appointment already {old_status.value}")

    # 2) Putting a freed slot back on the calendar needs the slot to be free
    if old_status not in ACTIVE_STATUSES and update.status in ACTIVE_STATUSES:
        others = get_day_appointments(
            session, target.barber_id, target.starts_at.date(), exclude_id=target.id
        )
        check = validate_slot(
            get_weekly_blocks(session, target.barber_id),
            target.starts_at,
            target.duration_minutes,
            others,
        )
        # hours may have changed since booking; only a clash blocks reactivation
        if check is SlotCheck.slot_taken:
            _raise_for_rejection(check)

    # 3) Persist
    target.status = update.status.value
    session.add(target)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise HTTPException(status_code=409, detail=SLOT_TAKEN_DETAIL)
    session.refresh(target)

    logger.info("Appointment %s status %s -> %s", target.id, old_status.value, target.status)
    return target
