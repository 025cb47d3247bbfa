from datetime import date, datetime

from core.time_utils import LOCAL_TZ, UTC, day_key, last_days, start_of_day, to_local, weekday_index

def test_day_key_drops_time_of_day():
    morning = datetime(2024, 1, 31, 0, 5, tzinfo=LOCAL_TZ)
    night = datetime(2024, 1, 31, 23, 55, tzinfo=LOCAL_TZ)
    assert day_key(morning) == day_key(night) == date(2024, 1, 31)

def test_day_key_passes_dates_through():
    assert day_key(date(2024, 2, 29)) == date(2024, 2, 29)

def test_naive_datetimes_are_treated_as_utc():
    naive = datetime(2024, 1, 31, 12, 0)
    assert to_local(naive) == naive.replace(tzinfo=UTC).astimezone(LOCAL_TZ)

def test_start_of_day_is_local_midnight():
    midnight = start_of_day(datetime(2024, 1, 31, 15, 30, tzinfo=LOCAL_TZ))
    assert (midnight.hour, midnight.minute) == (0, 0)
    assert day_key(midnight) == date(2024, 1, 31)

def test_weekday_index_starts_on_sunday():
    assert weekday_index(date(2024, 1, 28)) == 0  # Sunday
    assert weekday_index(date(2024, 1, 29)) == 1  # Monday
    assert weekday_index(date(2024, 1, 27)) == 6  # Saturday

def test_last_days_includes_today_first():
    days = last_days(date(2024, 3, 1), 3)
    assert days == [date(2024, 3, 1), date(2024, 2, 29), date(2024, 2, 28)]
