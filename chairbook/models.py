# chairbook/models.py

from typing import Optional
from datetime import datetime, time

from sqlalchemy import Index, text
from sqlmodel import SQLModel, Field

from chairbook.core import shop_now

class Barber(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    email: str = Field(index=True, unique=True)
    bio: Optional[str] = None

class AvailabilityBlock(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)

    barber_id: int = Field(foreign_key="barber.id", index=True)
    day_of_week: str  # lowercase weekday name
    start_time: time
    end_time: time

class Service(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True, unique=True)
    duration_minutes: int
    price: float = 0.0

class Customer(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    email: str = Field(index=True, unique=True)
    phone: str

class Appointment(SQLModel, table=True):
    # one live booking per barber and start time; cancelled rows do not count
    __table_args__ = (
        Index(
            "uq_barber_active_start",
            "barber_id",
            "starts_at",
            unique=True,
            sqlite_where=text("status IN ('pending', 'confirmed')"),
            postgresql_where=text("status IN ('pending', 'confirmed')"),
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)

    barber_id: int = Field(foreign_key="barber.id", index=True)
    service_id: int = Field(foreign_key="service.id")
    customer_id: int = Field(foreign_key="customer.id")
    starts_at: datetime = Field(index=True)  # naive, shop-local
    duration_minutes: int  # copied from the service when booked
    status: str = "pending"
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=shop_now)
