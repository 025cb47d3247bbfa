from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from uuid import UUID

from models.progress import UserProgress

class HabitStatistics(BaseModel):
    habit_id: UUID
    current_streak: int
    best_streak: int
    total_completions: int
    last_7_days_completion: float  # 0.0 - 1.0
    last_30_days_completion: float

class CompatibilityScore(BaseModel):
    habit_a: UUID
    habit_b: UUID
    score: float
    tier: str  # 'excellent', 'good', 'fair', 'related'

class MoodCount(BaseModel):
    mood: str
    count: int
    percent: int

class Overview(BaseModel):
    total_habits: int
    completed_today: int
    overall_completion_rate: float
    progress: UserProgress

class MotivationMessage(BaseModel):
    streak: int
    message: Optional[str] = None

class SyncStatus(BaseModel):
    last_sync_date: Optional[datetime] = None
    last_sync_error: Optional[str] = None
    notification_error: Optional[str] = None
    pending_writes: int = 0
