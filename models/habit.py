from enum import Enum
from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Set, Union
from datetime import date, datetime, time
from uuid import UUID, uuid4

from core.config import settings
from core.time_utils import get_current_time, day_key, weekday_index

class HabitType(str, Enum):
    POSITIVE = "positive"   # Building a good habit
    NEGATIVE = "negative"   # Breaking a bad one
    TIMED = "timed"         # Performed for a target duration

class HabitFrequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    CUSTOM = "custom"

class HabitDifficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @property
    def points(self) -> int:
        return settings.DIFFICULTY_POINTS[self.value]

class CompletionRecord(BaseModel):
    """One performance of a habit, attributed to a calendar day."""
    id: UUID = Field(default_factory=uuid4)
    date: datetime = Field(default_factory=get_current_time)
    duration: Optional[float] = None # Seconds actually spent (timed habits)
    note: Optional[str] = None
    mood: Optional[str] = None

    model_config = {"frozen": True}

class HabitBase(BaseModel):
    """User-editable habit settings."""
    name: str = Field(..., max_length=100)
    icon: str = "star.fill"   # Opaque presentation tokens
    color: str = "blue"
    type: HabitType = HabitType.POSITIVE
    difficulty: HabitDifficulty = HabitDifficulty.MEDIUM
    frequency: HabitFrequency = HabitFrequency.DAILY
    target_days: Set[int] = Field(default_factory=lambda: set(range(7)))
    target_count: int = 7
    timer_duration: float = Field(0, ge=0)
    reminder_time: Optional[time] = None
    is_reminder_enabled: bool = False
    notes: str = ""
    page_index: int = Field(0, ge=0)

    @field_validator("target_days")
    @classmethod
    def check_weekdays(cls, value: Set[int]):
        if any(day < 0 or day > 6 for day in value):
            raise ValueError("target_days must be weekday indices 0-6")
        return value

    @field_validator("page_index")
    @classmethod
    def check_page(cls, value: int):
        if value >= settings.MAX_PAGES:
            raise ValueError(f"page_index must be below {settings.MAX_PAGES}")
        return value

class Habit(HabitBase):
    """
    Represents a Habit in the system.

    Types:
    - 'positive' (Building): Completed by doing it.
    - 'negative' (Breaking): Completed by avoiding it.
    - 'timed': Completed by running a timer for `timer_duration` seconds.

    Attributes:
    - target_days: Weekday indices the habit is scheduled on (0 = Sunday).
    - page_index / position: Grid placement, 0-3 pages of 0-5 slots.
    - current_streak: Consecutive completed days ending today.
    - best_streak: All-time high streak. Never decreases.
    """
    id: UUID = Field(default_factory=uuid4)
    position: int = Field(0, ge=0)

    completion_records: List[CompletionRecord] = []

    # Statistics
    current_streak: int = Field(0, ge=0)
    best_streak: int = Field(0, ge=0)
    total_completions: int = Field(0, ge=0)
    total_points: int = Field(0, ge=0)
    created_date: datetime = Field(default_factory=get_current_time)

    def completed_days(self) -> Set[date]:
        return {day_key(record.date) for record in self.completion_records}

    def is_completed_on(self, day: Union[date, datetime]) -> bool:
        target = day_key(day)
        return any(day_key(record.date) == target for record in self.completion_records)

    def is_completed_today(self) -> bool:
        return self.is_completed_on(get_current_time())

    def is_target_day(self, day: Union[date, datetime, None] = None) -> bool:
        if day is None:
            day = get_current_time()
        return weekday_index(day) in self.target_days

    @property
    def has_reminder(self) -> bool:
        return self.is_reminder_enabled and self.reminder_time is not None

class HabitCreate(HabitBase):
    def to_habit(self) -> Habit:
        return Habit(**self.model_dump())
