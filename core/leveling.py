from typing import Optional

from core.config import settings
from models.habit import HabitDifficulty
from models.progress import UserLevel, UserProgress

LEVELS = [
    UserLevel(level=1, title="Habit Beginner", required_points=0, icon="leaf.fill", color="green"),
    UserLevel(level=2, title="Habit Apprentice", required_points=100, icon="sparkles", color="blue"),
    UserLevel(level=3, title="Habit Keeper", required_points=300, icon="flame.fill", color="orange"),
    UserLevel(level=4, title="Habit Master", required_points=600, icon="bolt.fill", color="purple"),
    UserLevel(level=5, title="Habit Expert", required_points=1000, icon="star.fill", color="yellow"),
    UserLevel(level=6, title="Habit Virtuoso", required_points=1500, icon="crown.fill", color="pink"),
    UserLevel(level=7, title="Habit Ironman", required_points=2000, icon="trophy.fill", color="red"),
    UserLevel(level=8, title="Habit Legend", required_points=3000, icon="rosette", color="indigo"),
]

def level_for_points(points: int) -> UserLevel:
    """Highest level whose threshold does not exceed `points`."""
    current = LEVELS[0]
    for level in LEVELS:
        if level.required_points <= points:
            current = level
    return current

def next_level(current: UserLevel) -> Optional[UserLevel]:
    for level in LEVELS:
        if level.level == current.level + 1:
            return level
    return None

def build_progress(total_points: int) -> UserProgress:
    """
    Current level, the next rung and the fraction of the way to it.

    At the top of the ladder progress is reported as 1.0.
    """
    current = level_for_points(total_points)
    upcoming = next_level(current)
    progress = 1.0
    if upcoming:
        needed = upcoming.required_points - current.required_points
        earned = total_points - current.required_points
        progress = min(earned / needed, 1.0)
    return UserProgress(
        total_points=total_points,
        level=current,
        next_level=upcoming,
        progress_to_next_level=progress
    )

def bonus_percent(streak: int, goal_met: bool = False) -> int:
    """
    Percent multiplier for a completion, 100 meaning no bonus.

    Args:
        streak (int): The habit's streak after the completion was recorded.
        goal_met (bool): Timed completion reached the habit's timer duration.
    """
    percent = 100
    if goal_met:
        percent += settings.TIMED_GOAL_BONUS_PERCENT
    for threshold, extra in sorted(settings.STREAK_BONUS_PERCENT.items()):
        if streak >= int(threshold):
            percent += extra
    return percent

def calculate_earned_points(difficulty: HabitDifficulty, streak: int, goal_met: bool = False) -> int:
    """
    Points for one completion: floor(base x multiplier).

    Returns:
        int: e.g. medium (25) on a 7-day streak -> 30, on a 30-day streak -> 37.
    """
    return difficulty.points * bonus_percent(streak, goal_met) // 100

def calculate_points_to_remove(difficulty: HabitDifficulty) -> int:
    # Undo takes back the base amount only, not the bonus-adjusted award.
    return difficulty.points
