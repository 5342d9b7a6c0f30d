# chairbook/data.py

import logging

from sqlmodel import Session, select

from chairbook.core import parse_hhmm
from chairbook.models import AvailabilityBlock, Barber, Service

logger = logging.getLogger(__name__)

SERVICES = {
    "Shape Up": (15, 20.0),
    "Beard Trim": (15, 15.0),
    "Haircut": (30, 35.0),
    "Fade": (30, 40.0),
    "Scissors Cut": (30, 40.0),
    "Cut and Beard": (45, 50.0),
    "Hot Towel Shave": (60, 45.0),
}

WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday"]

BARBERS = [
    {
        "name": "Marcus Hill",
        "email": "marcus@chairbook.local",
        # split shift around lunch
        "hours": {day: [("09:00", "12:00"), ("13:00", "18:00")] for day in WEEKDAYS},
    },
    {
        "name": "Dana Ortiz",
        "email": "dana@chairbook.local",
        "hours": {
            **{day: [("10:00", "19:00")] for day in WEEKDAYS[1:]},
            "saturday": [("09:00", "14:00")],
        },
    },
]


def seed_catalog(session: Session) -> bool:
    """Insert the demo services and barbers into an empty database.

    Returns False, touching nothing, when any service already exists.
    """
    if session.exec(select(Service)).first() is not None:
        return False

    for name, (duration, price) in SERVICES.items():
        session.add(Service(name=name, duration_minutes=duration, price=price))

    for entry in BARBERS:
        barber = Barber(name=entry["name"], email=entry["email"])
        session.add(barber)
        session.flush()  # fills barber.id
        for day, windows in entry["hours"].items():
            for start, end in windows:
                session.add(
                    AvailabilityBlock(
                        barber_id=barber.id,
                        day_of_week=day,
                        start_time=parse_hhmm(start),
                        end_time=parse_hhmm(end),
                    )
                )

    session.commit()
    logger.info("Seeded %d services and %d barbers", len(SERVICES), len(BARBERS))
    return True
