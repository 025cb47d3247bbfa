from fastapi import APIRouter, HTTPException, Depends
from typing import List
from uuid import UUID
from routes.habits import get_manager
from core.habit_manager import HabitManager
from core.leveling import LEVELS
from models.analytics import HabitStatistics, CompatibilityScore, MoodCount, Overview, MotivationMessage
from models.progress import UserLevel, UserProgress

router = APIRouter(prefix="/analytics", tags=["Analytics"])

@router.get("/habits/{habit_id}/statistics", response_model=HabitStatistics)
async def get_habit_statistics(habit_id: UUID, manager: HabitManager = Depends(get_manager)):
    """Streaks, total completions and 7/30-day completion rates."""
    stats = manager.get_statistics(habit_id)
    if stats is None:
        raise HTTPException(status_code=404, detail="Habit not found")
    return stats

@router.get("/compatibility", response_model=CompatibilityScore)
async def get_compatibility(habit_a: UUID, habit_b: UUID, manager: HabitManager = Depends(get_manager)):
    """How often two habits get done together over the last 30 days."""
    score = manager.get_compatibility(habit_a, habit_b)
    if score is None:
        raise HTTPException(status_code=404, detail="Habit not found")
    return score

@router.get("/compatibility/top", response_model=List[CompatibilityScore])
async def get_top_compatibility(limit: int = 5, manager: HabitManager = Depends(get_manager)):
    return manager.top_compatibility(limit)

@router.get("/overview", response_model=Overview)
async def get_overview(manager: HabitManager = Depends(get_manager)):
    return manager.get_overview()

@router.get("/moods", response_model=List[MoodCount])
async def get_moods(manager: HabitManager = Depends(get_manager)):
    """Mood tokens recorded with completions, most frequent first."""
    return manager.get_mood_distribution()

@router.get("/motivation/{streak}", response_model=MotivationMessage)
async def get_motivation(streak: int, manager: HabitManager = Depends(get_manager)):
    return MotivationMessage(streak=streak, message=manager.get_motivation_message(streak))

@router.get("/level", response_model=UserProgress)
async def get_level(manager: HabitManager = Depends(get_manager)):
    return manager.progress()

@router.get("/levels", response_model=List[UserLevel])
async def get_levels():
    return LEVELS
