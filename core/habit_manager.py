import asyncio
import logging
import time
from datetime import date, datetime
from typing import Callable, List, Optional, Union
from uuid import UUID

from pymongo.errors import PyMongoError

from core.config import settings
from core.leveling import (
    build_progress,
    calculate_earned_points,
    calculate_points_to_remove,
    level_for_points,
)
from core.motivation import milestone_message
from core.statistics import (
    get_statistics,
    mood_distribution,
    overview,
    score_pair,
    top_compatibility_pairs,
)
from core.streaks import recompute_streak
from core.time_utils import day_key, get_current_time, start_of_day
from models.analytics import CompatibilityScore, HabitStatistics, MoodCount, Overview
from models.habit import CompletionRecord, Habit, HabitDifficulty, HabitType
from models.progress import CompletionResult, UserLevel, UserProgress

logger = logging.getLogger(__name__)

class HabitManager:
    """
    Sole owner of the habit list and the global point total.

    Mutations are serialized by one asyncio.Lock and never await while
    habit state is half-updated, so synchronous reads always see settled
    state. Reads hand out deep copies.

    Storage is write-behind: mutations only mark the manager dirty and
    `flush_if_due` (driven by the scheduler) writes after a quiet period or
    once enough mutations have piled up.
    """

    def __init__(
        self,
        repository,
        notifier=None,
        sync=None,
        clock: Callable[[], datetime] = get_current_time,
        monotonic: Callable[[], float] = time.monotonic,
    ):
        self.repository = repository
        self.notifier = notifier
        self.sync = sync
        self.clock = clock
        self.monotonic = monotonic

        self._habits: List[Habit] = []
        self._total_points = 0
        self._lock = asyncio.Lock()
        self._flush_lock = asyncio.Lock()

        self._dirty = False
        self._pending = 0
        self._revision = 0
        self._last_mutation = 0.0
        self._last_refresh_day: Optional[date] = None

    # --- Lifecycle ---

    async def load(self):
        """Reads stored state, falling back to demo or empty data."""
        habits = await self.repository.load_habits()
        seeded = False
        if habits is None:
            if settings.SEED_DEMO_DATA:
                logger.info("No saved habits found, loading demo data")
                habits = demo_habits()
                seeded = True
            else:
                habits = []
        total_points = await self.repository.load_points()

        async with self._lock:
            self._habits = habits
            self._total_points = total_points
            today = self.today()
            for habit in self._habits:
                recompute_streak(habit, today)
            self._last_refresh_day = today
            if seeded:
                self._touch()
        logger.info("Loaded %d habits, %d points", len(habits), total_points)

    def today(self) -> date:
        return day_key(self.clock())

    # --- Queries ---

    @property
    def total_points(self) -> int:
        return self._total_points

    @property
    def current_level(self) -> UserLevel:
        return level_for_points(self._total_points)

    @property
    def pending_writes(self) -> int:
        return self._pending

    def progress(self) -> UserProgress:
        return build_progress(self._total_points)

    def list_habits(self, page: Optional[int] = None) -> List[Habit]:
        if page is None:
            return [habit.model_copy(deep=True) for habit in self._habits]
        return self.habits_for_page(page)

    def habits_for_page(self, page: int) -> List[Habit]:
        habits = [habit for habit in self._habits if habit.page_index == page]
        habits.sort(key=lambda habit: habit.position)
        return [habit.model_copy(deep=True) for habit in habits]

    def get_habit(self, habit_id: UUID) -> Optional[Habit]:
        habit = self._find(habit_id)
        return habit.model_copy(deep=True) if habit else None

    def get_statistics(self, habit_id: UUID) -> Optional[HabitStatistics]:
        habit = self._find(habit_id)
        if not habit:
            return None
        return get_statistics(habit, self.today())

    def get_compatibility(self, habit_a: UUID, habit_b: UUID) -> Optional[CompatibilityScore]:
        first = self._find(habit_a)
        second = self._find(habit_b)
        if not first or not second:
            return None
        return score_pair(first, second, self.today())

    def top_compatibility(self, limit: int = 5) -> List[CompatibilityScore]:
        return top_compatibility_pairs(self._habits, self.today(), limit)

    def get_overview(self) -> Overview:
        return overview(self._habits, self._total_points, self.today())

    def get_mood_distribution(self) -> List[MoodCount]:
        return mood_distribution(self._habits)

    @staticmethod
    def get_motivation_message(streak: int) -> Optional[str]:
        return milestone_message(streak)

    # --- Mutations ---

    async def add_habit(self, habit: Habit) -> Optional[Habit]:
        """
        Places the habit in the lowest free slot of its page.

        Returns None without changing anything when the page is full.
        """
        habit = habit.model_copy(deep=True)
        async with self._lock:
            if self._find(habit.id):
                logger.warning("Habit %s already exists, not adding", habit.id)
                return None
            position = self._free_slot(habit.page_index)
            if position is None:
                logger.info("Page %d is full, habit %r not added", habit.page_index, habit.name)
                return None
            habit.position = position
            self._habits.append(habit)
            self._touch()
            created = habit.model_copy(deep=True)

        if created.has_reminder:
            self._notify("schedule_reminder", created.id, created.name, created.reminder_time)
        return created

    async def delete_habit(self, habit_id: UUID) -> bool:
        async with self._lock:
            habit = self._find(habit_id)
            if not habit:
                logger.debug("Delete of unknown habit %s ignored", habit_id)
                return False
            self._habits.remove(habit)
            self._touch()
            had_reminder = habit.has_reminder
        if had_reminder:
            self._notify("cancel_reminder", habit_id)
        return True

    async def update_habit(self, habit: Habit) -> Optional[Habit]:
        """
        Replaces the stored habit with the same id.

        An enabled reminder is rescheduled in place; a reminder that was
        switched off is cancelled.
        """
        habit = habit.model_copy(deep=True)
        async with self._lock:
            index = self._index(habit.id)
            if index is None:
                logger.debug("Update of unknown habit %s ignored", habit.id)
                return None
            had_reminder = self._habits[index].has_reminder
            self._habits[index] = habit
            self._touch()
            updated = habit.model_copy(deep=True)

        if updated.has_reminder:
            self._notify("schedule_reminder", updated.id, updated.name, updated.reminder_time)
        elif had_reminder:
            self._notify("cancel_reminder", updated.id)
        return updated

    async def toggle_completion(
        self,
        habit_id: UUID,
        day: Union[date, datetime, None] = None,
        mood: Optional[str] = None,
    ) -> Optional[CompletionResult]:
        """
        Completes the habit on `day` (default today), or undoes it if the
        day is already completed.

        Completing awards base points scaled by the streak bonus. Undoing
        takes back the base points only, clamped at zero.
        """
        async with self._lock:
            habit = self._find(habit_id)
            if not habit:
                logger.debug("Toggle of unknown habit %s ignored", habit_id)
                return None

            target = day_key(day if day is not None else self.clock())
            previous_streak = habit.current_streak
            previous_level = self.current_level

            if habit.is_completed_on(target):
                kept = [record for record in habit.completion_records if day_key(record.date) != target]
                removed = len(habit.completion_records) - len(kept)
                habit.completion_records = kept
                habit.total_completions = max(0, habit.total_completions - removed)
                points = calculate_points_to_remove(habit.difficulty)
                habit.total_points = max(0, habit.total_points - points)
                self._total_points = max(0, self._total_points - points)
                recompute_streak(habit, self.today())
                completed = False
                points_change = -points
            else:
                habit.completion_records.append(CompletionRecord(date=start_of_day(target), mood=mood))
                habit.total_completions += 1
                recompute_streak(habit, self.today())
                points_change = calculate_earned_points(habit.difficulty, habit.current_streak)
                habit.total_points += points_change
                self._total_points += points_change
                completed = True

            result = self._result(habit, completed, points_change, previous_streak, previous_level)
            self._touch()

        if result.milestone_message:
            self._notify("send_milestone_notification", result.habit.name, result.habit.current_streak)
        return result

    async def complete_timed_habit(
        self,
        habit_id: UUID,
        duration: float,
        mood: Optional[str] = None,
        note: Optional[str] = None,
    ) -> Optional[CompletionResult]:
        """
        Records a finished timer session at the current time.

        Always appends; a timed session cannot be undone through this path.
        Meeting the habit's timer duration adds the goal bonus.
        """
        async with self._lock:
            habit = self._find(habit_id)
            if not habit:
                logger.debug("Timed completion of unknown habit %s ignored", habit_id)
                return None

            previous_streak = habit.current_streak
            previous_level = self.current_level

            habit.completion_records.append(
                CompletionRecord(date=self.clock(), duration=duration, note=note, mood=mood)
            )
            habit.total_completions += 1
            recompute_streak(habit, self.today())
            goal_met = duration >= habit.timer_duration
            points_change = calculate_earned_points(habit.difficulty, habit.current_streak, goal_met)
            habit.total_points += points_change
            self._total_points += points_change

            result = self._result(habit, True, points_change, previous_streak, previous_level)
            self._touch()

        if result.milestone_message:
            self._notify("send_milestone_notification", result.habit.name, result.habit.current_streak)
        return result

    async def merge_habits(self, habits: List[Habit]) -> int:
        """
        Adds the habits whose ids are not known yet. Returns how many.

        A newcomer keeps its stored slot when that slot is free; otherwise
        it takes the lowest free slot of its page, then of the following
        pages. Habits that find no free slot anywhere are skipped.
        """
        async with self._lock:
            known = {habit.id for habit in self._habits}
            added = 0
            today = self.today()
            for habit in habits:
                if habit.id in known:
                    continue
                habit = habit.model_copy(deep=True)
                if not self._place(habit):
                    logger.warning("No free slot for habit %r, not merged", habit.name)
                    continue
                recompute_streak(habit, today)
                self._habits.append(habit)
                known.add(habit.id)
                added += 1
            if added:
                self._touch()
        return added

    async def refresh_streaks(self, force: bool = False) -> bool:
        """Recomputes every streak once the local day has rolled over."""
        async with self._lock:
            today = self.today()
            if not force and today == self._last_refresh_day:
                return False
            changed = False
            for habit in self._habits:
                before = (habit.current_streak, habit.best_streak)
                if recompute_streak(habit, today) != before:
                    changed = True
            self._last_refresh_day = today
            if changed:
                self._touch()
        logger.info("Streaks refreshed for %s", today)
        return True

    # --- Write-behind persistence ---

    async def flush_if_due(self) -> bool:
        if not self._dirty:
            return False
        quiet_for = self.monotonic() - self._last_mutation
        if quiet_for >= settings.AUTOSAVE_DEBOUNCE_SECONDS or self._pending >= settings.AUTOSAVE_MAX_PENDING:
            return await self.flush()
        return False

    async def flush(self) -> bool:
        """Writes a snapshot of the current state. Failures keep it dirty."""
        async with self._flush_lock:
            async with self._lock:
                if not self._dirty:
                    return False
                habits = [habit.model_copy(deep=True) for habit in self._habits]
                total_points = self._total_points
                revision = self._revision
                pending = self._pending

            try:
                await self.repository.save_habits(habits)
                await self.repository.save_points(total_points)
            except PyMongoError as e:
                logger.error("Saving habits failed, will retry: %s", e)
                return False

            async with self._lock:
                if self._revision == revision:
                    self._dirty = False
                    self._pending = 0
                else:
                    self._pending = max(0, self._pending - pending)
        logger.debug("Saved %d habits", len(habits))
        return True

    # --- Cloud sync ---

    def push_to_cloud(self):
        if self.sync is None:
            return
        try:
            self.sync.push(self.list_habits())
        except Exception as e:
            logger.error("Cloud push could not be started: %s", e)

    async def pull_from_cloud(self) -> int:
        if self.sync is None:
            return 0
        remote = await asyncio.to_thread(self.sync.pull)
        return await self.merge_habits(remote)

    # --- Internals ---

    def _find(self, habit_id: UUID) -> Optional[Habit]:
        for habit in self._habits:
            if habit.id == habit_id:
                return habit
        return None

    def _index(self, habit_id: UUID) -> Optional[int]:
        for index, habit in enumerate(self._habits):
            if habit.id == habit_id:
                return index
        return None

    def _free_slot(self, page: int) -> Optional[int]:
        occupied = {h.position for h in self._habits if h.page_index == page}
        for position in range(settings.HABITS_PER_PAGE):
            if position not in occupied:
                return position
        return None

    def _place(self, habit: Habit) -> bool:
        taken = any(
            h.page_index == habit.page_index and h.position == habit.position
            for h in self._habits
        )
        if habit.position < settings.HABITS_PER_PAGE and not taken:
            return True
        pages = list(range(settings.MAX_PAGES))
        for page in pages[habit.page_index:] + pages[:habit.page_index]:
            position = self._free_slot(page)
            if position is not None:
                habit.page_index = page
                habit.position = position
                return True
        return False

    def _touch(self):
        self._dirty = True
        self._pending += 1
        self._revision += 1
        self._last_mutation = self.monotonic()

    def _result(
        self,
        habit: Habit,
        completed: bool,
        points_change: int,
        previous_streak: int,
        previous_level: UserLevel,
    ) -> CompletionResult:
        level = self.current_level
        message = None
        if completed and habit.current_streak > previous_streak:
            message = milestone_message(habit.current_streak)
        return CompletionResult(
            habit=habit.model_copy(deep=True),
            completed=completed,
            points_change=points_change,
            total_points=self._total_points,
            level=level,
            level_changed=level.level != previous_level.level,
            milestone_message=message,
        )

    def _notify(self, method: str, *args):
        # External delivery must never break the mutation that caused it.
        if self.notifier is None:
            return
        try:
            getattr(self.notifier, method)(*args)
        except Exception as e:
            logger.error("Notification %s failed: %s", method, e)

def demo_habits() -> List[Habit]:
    return [
        Habit(name="Morning workout", icon="figure.run", color="orange",
              type=HabitType.POSITIVE, difficulty=HabitDifficulty.MEDIUM, page_index=0, position=0),
        Habit(name="Reading", icon="book.fill", color="blue",
              type=HabitType.POSITIVE, difficulty=HabitDifficulty.EASY, page_index=0, position=1),
        Habit(name="Meditation", icon="brain.head.profile", color="purple",
              type=HabitType.TIMED, difficulty=HabitDifficulty.HARD, timer_duration=600,
              page_index=0, position=2),
        Habit(name="No junk food", icon="xmark.circle.fill", color="red",
              type=HabitType.NEGATIVE, difficulty=HabitDifficulty.HARD, page_index=0, position=3),
    ]
