from datetime import datetime
from typing import List, Union

from pydantic import TypeAdapter, ValidationError

from models.habit import Habit

HabitList = TypeAdapter(List[Habit])

def export_habits(habits: List[Habit]) -> str:
    """Pretty-printed JSON array of habits with their completion records."""
    return HabitList.dump_json(habits, indent=2).decode("utf-8")

def export_filename(now: datetime) -> str:
    return f"Habita_backup_{now.strftime('%Y-%m-%d_%H%M%S')}.json"

def parse_habits(data: Union[str, bytes]) -> List[Habit]:
    """
    Decodes an exported document.

    Raises:
        ValueError: The document is not valid JSON or not a list of habits.
    """
    try:
        return HabitList.validate_json(data)
    except ValidationError as e:
        raise ValueError(f"Invalid habit backup: {e.error_count()} error(s)") from e
