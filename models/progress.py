from pydantic import BaseModel
from typing import Optional

from models.habit import Habit

class UserLevel(BaseModel):
    level: int
    title: str
    required_points: int
    icon: str   # Presentation tokens
    color: str

    model_config = {"frozen": True}

class UserProgress(BaseModel):
    total_points: int = 0
    level: UserLevel
    next_level: Optional[UserLevel] = None
    progress_to_next_level: float = 1.0

class CompletionResult(BaseModel):
    """
    Outcome of a toggle or timed completion.

    - points_change: Signed delta applied to the habit and the global total.
    - milestone_message: Set when the new streak hit a celebrated milestone.
    """
    habit: Habit
    completed: bool
    points_change: int = 0
    total_points: int = 0
    level: UserLevel
    level_changed: bool = False
    milestone_message: Optional[str] = None
