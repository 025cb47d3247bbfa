from collections import Counter
from datetime import date, timedelta
from itertools import combinations
from typing import List

from core.leveling import build_progress
from core.time_utils import day_key, last_days
from models.analytics import HabitStatistics, CompatibilityScore, MoodCount, Overview
from models.habit import Habit

COMPATIBILITY_WINDOW_DAYS = 30
OVERVIEW_WEEKS = 4

def completion_rate(habit: Habit, window_days: int, today: date) -> float:
    """
    Completed target days over target days in the last `window_days` days.

    Today counts as the first day of the window. Days that are not target
    days are ignored entirely; no target days at all gives 0.
    """
    completed = habit.completed_days()
    target_days = 0
    done = 0
    for day in last_days(today, window_days):
        if habit.is_target_day(day):
            target_days += 1
            if day in completed:
                done += 1
    return done / target_days if target_days > 0 else 0.0

def get_statistics(habit: Habit, today: date) -> HabitStatistics:
    return HabitStatistics(
        habit_id=habit.id,
        current_streak=habit.current_streak,
        best_streak=habit.best_streak,
        total_completions=habit.total_completions,
        last_7_days_completion=completion_rate(habit, 7, today),
        last_30_days_completion=completion_rate(habit, 30, today),
    )

def compatibility(habit_a: Habit, habit_b: Habit, today: date, window_days: int = COMPATIBILITY_WINDOW_DAYS) -> float:
    """Share of mutually scheduled days on which both habits were completed."""
    completed_a = habit_a.completed_days()
    completed_b = habit_b.completed_days()
    both_target_days = 0
    both_completed = 0
    for day in last_days(today, window_days):
        if habit_a.is_target_day(day) and habit_b.is_target_day(day):
            both_target_days += 1
            if day in completed_a and day in completed_b:
                both_completed += 1
    return both_completed / both_target_days if both_target_days > 0 else 0.0

def compatibility_tier(score: float) -> str:
    if score >= 0.8:
        return "excellent"
    if score >= 0.6:
        return "good"
    if score >= 0.4:
        return "fair"
    return "related"

def score_pair(habit_a: Habit, habit_b: Habit, today: date) -> CompatibilityScore:
    score = compatibility(habit_a, habit_b, today)
    return CompatibilityScore(
        habit_a=habit_a.id,
        habit_b=habit_b.id,
        score=score,
        tier=compatibility_tier(score)
    )

def top_compatibility_pairs(habits: List[Habit], today: date, limit: int = 5) -> List[CompatibilityScore]:
    """Best-matched habit pairs, pairs that never coincided are left out."""
    pairs = [score_pair(a, b, today) for a, b in combinations(habits, 2)]
    pairs = [pair for pair in pairs if pair.score > 0]
    pairs.sort(key=lambda pair: pair.score, reverse=True)
    return pairs[:limit]

def overall_completion_rate(habits: List[Habit], today: date) -> float:
    """
    Completions in the last four weeks against four weeks of target days.

    Counts records rather than distinct days, so it can exceed 1.0 for
    timed habits completed more than once a day.
    """
    since = today - timedelta(days=OVERVIEW_WEEKS * 7)
    possible = sum(len(habit.target_days) * OVERVIEW_WEEKS for habit in habits)
    done = 0
    for habit in habits:
        done += sum(1 for record in habit.completion_records if since < day_key(record.date) <= today)
    return done / possible if possible > 0 else 0.0

def overview(habits: List[Habit], total_points: int, today: date) -> Overview:
    return Overview(
        total_habits=len(habits),
        completed_today=sum(1 for habit in habits if habit.is_completed_on(today)),
        overall_completion_rate=overall_completion_rate(habits, today),
        progress=build_progress(total_points),
    )

def mood_distribution(habits: List[Habit]) -> List[MoodCount]:
    counts = Counter(
        record.mood
        for habit in habits
        for record in habit.completion_records
        if record.mood
    )
    total = sum(counts.values())
    return [
        MoodCount(mood=mood, count=count, percent=int(count / total * 100))
        for mood, count in counts.most_common()
    ]
