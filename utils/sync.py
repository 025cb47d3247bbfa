import logging
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime
from typing import List, Optional

import requests

from core.backup import export_habits, parse_habits
from core.config import settings
from core.time_utils import get_current_time
from models.habit import Habit

logger = logging.getLogger(__name__)

class CloudSyncService:
    """
    Best-effort mirror of the habit list on a remote record store.

    Failures never raise; they are kept in `last_sync_error` for display.
    """

    def __init__(self, base_url: str = None, api_key: str = None, timeout: float = None):
        self.base_url = (settings.SYNC_URL if base_url is None else base_url).rstrip("/")
        self.api_key = settings.SYNC_API_KEY if api_key is None else api_key
        self.timeout = settings.SYNC_TIMEOUT_SECONDS if timeout is None else timeout
        self.last_sync_date: Optional[datetime] = None
        self.last_sync_error: Optional[str] = None
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="sync")

    @property
    def enabled(self) -> bool:
        return bool(self.base_url)

    def push(self, habits: List[Habit]):
        """Uploads the habit list in the background."""
        if not self.enabled:
            self.last_sync_error = "Cloud sync is not configured"
            return
        payload = export_habits(habits)
        future = self._executor.submit(self._put, payload)
        future.add_done_callback(self._on_push_done)

    def pull(self) -> List[Habit]:
        """Fetches the remote habit list; an empty list on any failure."""
        if not self.enabled:
            self.last_sync_error = "Cloud sync is not configured"
            return []
        try:
            response = requests.get(
                f"{self.base_url}/habits",
                headers=self._headers(),
                timeout=self.timeout
            )
            response.raise_for_status()
            habits = parse_habits(response.content)
        except (requests.RequestException, ValueError) as e:
            logger.error("Cloud pull failed: %s", e)
            self.last_sync_error = f"Fetch error: {e}"
            return []
        self._mark_synced()
        return habits

    def shutdown(self):
        self._executor.shutdown(wait=True)

    def _put(self, payload: str):
        response = requests.put(
            f"{self.base_url}/habits",
            data=payload.encode("utf-8"),
            headers={**self._headers(), "Content-Type": "application/json"},
            timeout=self.timeout
        )
        response.raise_for_status()

    def _on_push_done(self, future: Future):
        error = future.exception()
        if error is not None:
            logger.error("Cloud push failed: %s", error)
            self.last_sync_error = f"Sync error: {error}"
        else:
            self._mark_synced()

    def _mark_synced(self):
        self.last_sync_date = get_current_time()
        self.last_sync_error = None

    def _headers(self) -> dict:
        if not self.api_key:
            return {}
        return {"Authorization": f"Bearer {self.api_key}"}
