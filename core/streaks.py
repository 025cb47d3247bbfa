from datetime import date, timedelta
from typing import Tuple

from models.habit import Habit

def recompute_streak(habit: Habit, today: date) -> Tuple[int, int]:
    """
    Recalculates the habit's current and best streak.

    Walks back one day at a time from `today` over the distinct completed
    days, newest first. No completion today means a current streak of 0.
    The best streak is a high-water mark and is never lowered here.

    Returns:
        tuple: (current_streak, best_streak), also written onto the habit.
    """
    days = sorted(habit.completed_days(), reverse=True)

    current = 0
    cursor = today
    for day in days:
        if day == cursor:
            current += 1
            cursor -= timedelta(days=1)
        elif day < cursor:
            break

    habit.current_streak = current
    habit.best_streak = max(habit.best_streak, current)
    return habit.current_streak, habit.best_streak
