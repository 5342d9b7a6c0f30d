# chairbook/schemas.py

from datetime import datetime, date
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from chairbook.availability import AppointmentStatus, Weekday
from chairbook.core import format_hhmm, parse_hhmm

class AvailabilityBlockIn(BaseModel):
    day_of_week: Weekday
    start_time: str     # "HH:MM"
    end_time: str

    @field_validator("start_time", "end_time")
    @classmethod
    def hhmm(cls, value: str) -> str:
        return format_hhmm(parse_hhmm(value))

    @model_validator(mode="after")
    def starts_before_end(self):
        if parse_hhmm(self.start_time) >= parse_hhmm(self.end_time):
            raise ValueError("start_time must be earlier than end_time")
        return self

class AvailabilityBlockPublic(BaseModel):
    day_of_week: Weekday
    start_time: str
    end_time: str

class BarberCreate(BaseModel):
    name: str = Field(min_length=1)
    email: str
    bio: Optional[str] = None
    daily_availability: List[AvailabilityBlockIn] = []

class BarberPublic(BaseModel):
    id: int
    name: str
    email: str
    bio: Optional[str] = None
    daily_availability: List[AvailabilityBlockPublic] = []

class ServiceCreate(BaseModel):
    name: str = Field(min_length=1)
    duration_minutes: int = Field(gt=0)
    price: float = Field(default=0.0, ge=0)

class ServicePublic(BaseModel):
    id: int
    name: str
    duration_minutes: int
    price: float

class BookingCreate(BaseModel):
    customer_name: str = Field(min_length=1)
    customer_email: str = Field(min_length=3)
    customer_phone: str = Field(min_length=1)
    barber_id: int
    service_id: int
    date_time: datetime
    notes: Optional[str] = None

class BookingResult(BaseModel):
    message: str
    appointment_id: int

class AppointmentPublic(BaseModel):
    id: int
    barber_id: int
    service_id: int
    customer_id: int
    starts_at: datetime
    duration_minutes: int
    status: AppointmentStatus
    notes: Optional[str] = None

class StatusUpdate(BaseModel):
    status: AppointmentStatus

class AvailabilityResponse(BaseModel):
    barber_id: int
    date: date
    service_id: int
    duration_minutes: int
    available_starts: List[str]
