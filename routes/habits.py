from fastapi import APIRouter, HTTPException, status, Depends, Request
from typing import List, Optional
from datetime import date
from uuid import UUID
from pydantic import BaseModel, Field
from models.habit import Habit, HabitCreate
from models.progress import CompletionResult
from core.habit_manager import HabitManager

router = APIRouter(prefix="/habits", tags=["Habits"])

def get_manager(request: Request) -> HabitManager:
    return request.app.state.manager

class ToggleRequest(BaseModel):
    day: Optional[date] = None # Defaults to today
    mood: Optional[str] = None

class TimedCompletion(BaseModel):
    duration: float = Field(..., ge=0) # Seconds actually spent
    mood: Optional[str] = None
    note: Optional[str] = None

class HabitStatus(BaseModel):
    habit_id: UUID
    day: date
    completed_today: bool
    completed_on_day: bool
    is_target_day: bool

@router.post("/", response_model=Habit, status_code=status.HTTP_201_CREATED)
async def create_habit(habit_in: HabitCreate, manager: HabitManager = Depends(get_manager)):
    """Create a habit in the first free slot of its page."""
    created = await manager.add_habit(habit_in.to_habit())
    if created is None:
        raise HTTPException(status_code=409, detail="Page is full")
    return created

@router.get("/", response_model=List[Habit])
async def get_habits(page: Optional[int] = None, manager: HabitManager = Depends(get_manager)):
    return manager.list_habits(page)

@router.get("/{habit_id}", response_model=Habit)
async def get_habit(habit_id: UUID, manager: HabitManager = Depends(get_manager)):
    habit = manager.get_habit(habit_id)
    if not habit:
        raise HTTPException(status_code=404, detail="Habit not found")
    return habit

@router.put("/{habit_id}", response_model=Habit)
async def update_habit(habit_id: UUID, habit_in: Habit, manager: HabitManager = Depends(get_manager)):
    habit_in.id = habit_id
    updated = await manager.update_habit(habit_in)
    if not updated:
        raise HTTPException(status_code=404, detail="Habit not found")
    return updated

@router.delete("/{habit_id}")
async def delete_habit(habit_id: UUID, manager: HabitManager = Depends(get_manager)):
    if not await manager.delete_habit(habit_id):
        raise HTTPException(status_code=404, detail="Habit not found")
    return {"message": "Habit deleted"}

@router.post("/{habit_id}/toggle", response_model=CompletionResult)
async def toggle_habit(habit_id: UUID, toggle: Optional[ToggleRequest] = None, manager: HabitManager = Depends(get_manager)):
    """
    Toggle a Habit's completion for one day (The Core Gamification Logic).

    1. Day not completed yet:
       - Adds a completion record for that day.
       - Result: +Points (base x streak bonus), streak recomputed.
         Returns a milestone message when the new streak earns one.

    2. Day already completed:
       - Removes the day's completion.
       - Result: -Base points (never below 0), streak recomputed.
    """
    toggle = toggle or ToggleRequest()
    result = await manager.toggle_completion(habit_id, toggle.day, toggle.mood)
    if result is None:
        raise HTTPException(status_code=404, detail="Habit not found")
    return result

@router.post("/{habit_id}/timed", response_model=CompletionResult)
async def complete_timed_habit(habit_id: UUID, session: TimedCompletion, manager: HabitManager = Depends(get_manager)):
    """Record a finished timer session. +50% when the target duration was reached."""
    result = await manager.complete_timed_habit(habit_id, session.duration, session.mood, session.note)
    if result is None:
        raise HTTPException(status_code=404, detail="Habit not found")
    return result

@router.get("/{habit_id}/status", response_model=HabitStatus)
async def get_habit_status(habit_id: UUID, day: Optional[date] = None, manager: HabitManager = Depends(get_manager)):
    habit = manager.get_habit(habit_id)
    if not habit:
        raise HTTPException(status_code=404, detail="Habit not found")
    day = day or manager.today()
    return HabitStatus(
        habit_id=habit.id,
        day=day,
        completed_today=habit.is_completed_on(manager.today()),
        completed_on_day=habit.is_completed_on(day),
        is_target_day=habit.is_target_day(day)
    )
