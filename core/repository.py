import logging
from typing import List, Optional

from pydantic import ValidationError
from pymongo import ReplaceOne

from models.habit import Habit

logger = logging.getLogger(__name__)

PROGRESS_DOC_ID = "progress"

class HabitRepository:
    """
    Local storage for the habit list and the global point total.

    Saving is last-write-wins: the stored collection is made to match the
    given list exactly.
    """

    def __init__(self, database):
        self.habits = database.habits
        self.user_state = database.user_state

    async def load_habits(self) -> Optional[List[Habit]]:
        """Stored habits, or None when nothing usable is stored."""
        docs = await self.habits.find({}).to_list(length=None)
        if not docs:
            return None
        try:
            return [decode_habit(doc) for doc in docs]
        except (ValidationError, TypeError, ValueError) as e:
            logger.warning("Stored habits could not be decoded, ignoring them: %s", e)
            return None

    async def save_habits(self, habits: List[Habit]):
        ids = []
        operations = []
        for habit in habits:
            doc = encode_habit(habit)
            ids.append(doc["_id"])
            operations.append(ReplaceOne({"_id": doc["_id"]}, doc, upsert=True))
        if operations:
            await self.habits.bulk_write(operations, ordered=False)
        await self.habits.delete_many({"_id": {"$nin": ids}})

    async def load_points(self) -> int:
        doc = await self.user_state.find_one({"_id": PROGRESS_DOC_ID})
        if not doc:
            return 0
        try:
            return max(0, int(doc.get("total_points", 0)))
        except (TypeError, ValueError):
            logger.warning("Stored point total is malformed, starting from 0")
            return 0

    async def save_points(self, total_points: int):
        await self.user_state.update_one(
            {"_id": PROGRESS_DOC_ID},
            {"$set": {"total_points": total_points}},
            upsert=True
        )

def encode_habit(habit: Habit) -> dict:
    doc = habit.model_dump(mode="json")
    doc["_id"] = doc.pop("id")
    return doc

def decode_habit(doc: dict) -> Habit:
    data = dict(doc)
    data["id"] = data.pop("_id")
    return Habit.model_validate(data)
