# chairbook/availability.py
# Slot computation and collision checks shared by the slot listing and booking routes.

import heapq
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Iterable, Iterator, List, Sequence, Tuple

from chairbook.core import ceil_to_step, overlaps

logger = logging.getLogger(__name__)

SLOT_STEP_MINUTES = 30


class AvailabilityError(ValueError):
    pass


class InvalidDuration(AvailabilityError):
    pass


class MalformedBlock(AvailabilityError):
    pass


class Weekday(str, Enum):
    monday = "monday"
    tuesday = "tuesday"
    wednesday = "wednesday"
    thursday = "thursday"
    friday = "friday"
    saturday = "saturday"
    sunday = "sunday"

    @classmethod
    def of(cls, day: date) -> "Weekday":
        return list(cls)[day.weekday()]  # 0=Mon


class AppointmentStatus(str, Enum):
    pending = "pending"
    confirmed = "confirmed"
    cancelled = "cancelled"
    completed = "completed"


# Only these statuses occupy the barber's chair
ACTIVE_STATUSES = frozenset({AppointmentStatus.pending, AppointmentStatus.confirmed})


class SlotCheck(str, Enum):
    ok = "ok"
    outside_working_hours = "outside_working_hours"
    slot_taken = "slot_taken"

    @property
    def accepted(self) -> bool:
        return self is SlotCheck.ok


@dataclass(frozen=True)
class WeeklyAvailabilityBlock:
    day_of_week: Weekday
    start_time: time
    end_time: time

    def window_on(self, day: date) -> Tuple[datetime, datetime]:
        return datetime.combine(day, self.start_time), datetime.combine(day, self.end_time)


@dataclass(frozen=True)
class ExistingAppointment:
    start_time: datetime
    duration_minutes: int
    status: AppointmentStatus

    @property
    def end_time(self) -> datetime:
        return self.start_time + timedelta(minutes=self.duration_minutes)

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES


def _check_duration(service_duration: int) -> timedelta:
    if service_duration <= 0:
        raise InvalidDuration(f"Service duration must be positive, got {service_duration}")
    return timedelta(minutes=service_duration)


def _check_blocks(blocks: Iterable[WeeklyAvailabilityBlock]) -> None:
    for block in blocks:
        if block.start_time >= block.end_time:
            raise MalformedBlock(
                f"Block on {block.day_of_week.value} starts at {block.start_time:%H:%M} "
                f"but ends at {block.end_time:%H:%M}"
            )


def _active(appointments: Iterable[ExistingAppointment]) -> List[ExistingAppointment]:
    return [a for a in appointments if a.is_active]


def _collides(start: datetime, end: datetime, appointments: Iterable[ExistingAppointment]) -> bool:
    return any(overlaps(start, end, a.start_time, a.end_time) for a in appointments)


def blocks_for_day(blocks: Iterable[WeeklyAvailabilityBlock], day: date) -> List[WeeklyAvailabilityBlock]:
    weekday = Weekday.of(day)
    return [b for b in blocks if b.day_of_week == weekday]


@dataclass(frozen=True)
class SlotSequence:
    # re-walks the blocks on every iteration

    blocks: Tuple[WeeklyAvailabilityBlock, ...]
    target_date: date
    duration: timedelta
    appointments: Tuple[ExistingAppointment, ...]
    now: datetime
    step: timedelta = field(default=timedelta(minutes=SLOT_STEP_MINUTES))

    def _first_cursor(self, block_start: datetime) -> datetime:
        cursor = block_start
        if self.target_date == self.now.date() and cursor < self.now:
            cursor = ceil_to_step(self.now, int(self.step.total_seconds() // 60))
            if cursor < block_start:
                cursor = block_start
        return cursor

    def _block_slots(self, block: WeeklyAvailabilityBlock) -> Iterator[datetime]:
        block_start, block_end = block.window_on(self.target_date)
        cursor = self._first_cursor(block_start)
        while cursor + self.duration <= block_end:
            if not _collides(cursor, cursor + self.duration, self.appointments):
                yield cursor
            cursor += self.step

    def __iter__(self) -> Iterator[datetime]:
        # each block yields ascending starts, so a lazy merge keeps the order
        return heapq.merge(*(self._block_slots(b) for b in self.blocks))

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def __bool__(self) -> bool:
        return next(iter(self), None) is not None


def enumerate_slots(
    daily_blocks: Iterable[WeeklyAvailabilityBlock],
    target_date: date,
    service_duration: int,
    existing_appointments: Iterable[ExistingAppointment],
    now: datetime,
) -> SlotSequence:
    """Bookable starts on a 30-minute grid; raises on bad duration or blocks."""
    duration = _check_duration(service_duration)
    blocks = tuple(blocks_for_day(daily_blocks, target_date))
    _check_blocks(blocks)

    slots = SlotSequence(
        blocks=blocks,
        target_date=target_date,
        duration=duration,
        appointments=tuple(_active(existing_appointments)),
        now=now,
    )
    logger.debug(
        "Enumerating slots for %s: %d block(s), %d active appointment(s), %d min service",
        target_date, len(blocks), len(slots.appointments), service_duration,
    )
    return slots


def validate_slot(
    blocks: Iterable[WeeklyAvailabilityBlock],
    proposed_start: datetime,
    service_duration: int,
    existing_appointments: Iterable[ExistingAppointment],
) -> SlotCheck:
    # never consults the clock or a previously enumerated slot list
    duration = _check_duration(service_duration)
    day_blocks = blocks_for_day(blocks, proposed_start.date())
    _check_blocks(day_blocks)
    proposed_end = proposed_start + duration

    # 1) Must sit entirely inside a single block
    within_hours = False
    for block in day_blocks:
        block_start, block_end = block.window_on(proposed_start.date())
        if block_start <= proposed_start and proposed_end <= block_end:
            within_hours = True
            break
    if not within_hours:
        return SlotCheck.outside_working_hours

    # 2) Must not collide with a pending/confirmed appointment
    if _collides(proposed_start, proposed_end, _active(existing_appointments)):
        return SlotCheck.slot_taken

    return SlotCheck.ok


@dataclass(frozen=True)
class BookingRequest:
    blocks: Sequence[WeeklyAvailabilityBlock]
    proposed_start: datetime
    service_duration: int
    existing_appointments: Sequence[ExistingAppointment] = ()

    def validate(self) -> SlotCheck:
        return validate_slot(
            self.blocks, self.proposed_start, self.service_duration, self.existing_appointments
        )
