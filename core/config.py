import os
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

load_dotenv()

class Settings(BaseSettings):
    APP_NAME: str = "Habita"
    TIMEZONE: str = os.getenv("TIMEZONE", "UTC")

    # Database
    MONGO_URI: str = os.getenv("MONGO_URI", "mongodb://localhost:27017")
    DB_NAME: str = os.getenv("DB_NAME", "habita")

    # Frontend
    FRONTEND_URL: str = os.getenv("FRONTEND_URL", "http://localhost:5173")

    # Points (Base values per difficulty)
    DIFFICULTY_POINTS: dict = {"easy": 10, "medium": 25, "hard": 50}
    # Streak length -> extra percent. Tiers stack: a 30-day streak gets both.
    STREAK_BONUS_PERCENT: dict = {7: 20, 30: 30}
    TIMED_GOAL_BONUS_PERCENT: int = 50

    # Grid placement
    MAX_PAGES: int = 4
    HABITS_PER_PAGE: int = 6

    # Write-behind autosave
    AUTOSAVE_DEBOUNCE_SECONDS: float = 0.5
    AUTOSAVE_MAX_PENDING: int = 20
    AUTOSAVE_CHECK_SECONDS: float = 1.0
    SEED_DEMO_DATA: bool = True

    # Day rollover check
    MAINTENANCE_INTERVAL_HOURS: int = 1

    # Notifications (QStash)
    QSTASH_TOKEN: str = os.getenv("QSTASH_TOKEN", "")
    NOTIFY_WEBHOOK_URL: str = os.getenv("NOTIFY_WEBHOOK_URL", "")

    # Cloud sync
    SYNC_URL: str = os.getenv("SYNC_URL", "")
    SYNC_API_KEY: str = os.getenv("SYNC_API_KEY", "")
    SYNC_TIMEOUT_SECONDS: float = 10.0

    # Pydantic Settings Config
    model_config = {"env_file": ".env", "extra": "ignore"}

settings = Settings()
