# chairbook/core.py

from datetime import datetime, time, timedelta
from typing import Union

import pytz

from chairbook.config import settings


def overlaps(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """True if [a_start, a_end) and [b_start, b_end) share any instant."""
    return a_start < b_end and b_start < a_end


def parse_hhmm(value: str) -> time:
    """"HH:MM" -> time. Raises ValueError on anything else."""
    try:
        hours, minutes = value.split(":")
        return time(int(hours), int(minutes))
    except (AttributeError, TypeError, ValueError):
        raise ValueError(f"Invalid time of day: {value!r}, expected HH:MM") from None


def format_hhmm(value: Union[time, datetime]) -> str:
    return value.strftime("%H:%M")


def ceil_to_step(moment: datetime, step_minutes: int) -> datetime:
    # 10:30:00 stays put, 10:30:01 becomes 11:00
    hour = moment.replace(minute=0, second=0, microsecond=0)
    elapsed = moment - hour
    step = timedelta(minutes=step_minutes)
    steps = -(-elapsed // step)  # ceil division on timedeltas
    return hour + steps * step


def shop_now() -> datetime:
    tz = pytz.timezone(settings.TIMEZONE)
    return datetime.now(tz).replace(tzinfo=None)


def to_shop_time(moment: datetime) -> datetime:
    # naive values are already shop-local
    if moment.tzinfo is None:
        return moment
    tz = pytz.timezone(settings.TIMEZONE)
    return moment.astimezone(tz).replace(tzinfo=None)
