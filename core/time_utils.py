from datetime import date, datetime, time, timedelta
from typing import List, Union
from zoneinfo import ZoneInfo

from core.config import settings

LOCAL_TZ = ZoneInfo(settings.TIMEZONE)
UTC = ZoneInfo("UTC")

def get_current_time():
    """Returns the current time in the configured local timezone."""
    return datetime.now(LOCAL_TZ)

def to_local(dt: datetime):
    """Converts a datetime object to the local timezone."""
    if dt.tzinfo is None:
        # Assume naive datetimes from storage are UTC
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(LOCAL_TZ)

def day_key(value: Union[date, datetime]) -> date:
    """
    Truncates a timestamp to its local calendar day.

    Plain dates are already day keys and are returned unchanged.
    """
    if isinstance(value, datetime):
        return to_local(value).date()
    return value

def start_of_day(value: Union[date, datetime]) -> datetime:
    """Local midnight of the day the value falls on."""
    return datetime.combine(day_key(value), time.min, tzinfo=LOCAL_TZ)

def weekday_index(value: Union[date, datetime]) -> int:
    """Weekday with 0 = Sunday ... 6 = Saturday."""
    return day_key(value).isoweekday() % 7

def last_days(today: date, count: int) -> List[date]:
    """The last `count` calendar days, today first."""
    return [today - timedelta(days=i) for i in range(count)]
