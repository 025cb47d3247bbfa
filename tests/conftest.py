from datetime import date, datetime, timedelta

import pytest

from core.habit_manager import HabitManager
from core.time_utils import LOCAL_TZ, start_of_day
from models.habit import CompletionRecord, Habit

# Wednesday
TODAY = date(2024, 1, 31)

class InMemoryRepository:
    def __init__(self, habits=None, points=0):
        self.habits = habits
        self.points = points
        self.saved_habits = None
        self.saved_points = None
        self.save_calls = 0
        self.error = None

    async def load_habits(self):
        return self.habits

    async def save_habits(self, habits):
        if self.error:
            raise self.error
        self.save_calls += 1
        self.saved_habits = habits

    async def load_points(self):
        return self.points

    async def save_points(self, total_points):
        self.saved_points = total_points

class RecordingNotifier:
    def __init__(self, fail=False):
        self.calls = []
        self.fail = fail

    def _record(self, *call):
        self.calls.append(call)
        if self.fail:
            raise RuntimeError("notification backend down")

    def schedule_reminder(self, habit_id, name, at):
        self._record("schedule", habit_id, name, at)

    def cancel_reminder(self, habit_id):
        self._record("cancel", habit_id)

    def send_milestone_notification(self, habit_name, streak_count):
        self._record("milestone", habit_name, streak_count)

class FakeSync:
    def __init__(self, remote=None):
        self.remote = remote or []
        self.pushed = None
        self.last_sync_date = None
        self.last_sync_error = None

    def push(self, habits):
        self.pushed = habits

    def pull(self):
        return self.remote

class FakeClock:
    def __init__(self, day=TODAY):
        self.now = datetime(day.year, day.month, day.day, 12, 0, tzinfo=LOCAL_TZ)

    def __call__(self):
        return self.now

    def advance(self, days=1):
        self.now += timedelta(days=days)

class FakeMonotonic:
    def __init__(self):
        self.value = 1000.0

    def __call__(self):
        return self.value

def make_habit(**kwargs) -> Habit:
    kwargs.setdefault("name", "Walk")
    return Habit(**kwargs)

def complete_on(habit: Habit, *days: date) -> Habit:
    for day in days:
        habit.completion_records.append(CompletionRecord(date=start_of_day(day)))
        habit.total_completions += 1
    return habit

def days_back(count: int, today: date = TODAY):
    return [today - timedelta(days=i) for i in range(count)]

@pytest.fixture
def clock():
    return FakeClock()

@pytest.fixture
def monotonic():
    return FakeMonotonic()

@pytest.fixture
def repository():
    return InMemoryRepository()

@pytest.fixture
def notifier():
    return RecordingNotifier()

@pytest.fixture
def sync():
    return FakeSync()

@pytest.fixture
def manager(repository, notifier, sync, clock, monotonic):
    return HabitManager(repository, notifier=notifier, sync=sync, clock=clock, monotonic=monotonic)
