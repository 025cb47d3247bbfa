import logging
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import time
from typing import Optional
from uuid import UUID

from qstash import QStash

from core.config import settings

logger = logging.getLogger(__name__)

def reminder_schedule_id(habit_id: UUID) -> str:
    return f"habit_{habit_id}"

class NotificationService:
    """
    Reminder and milestone delivery through QStash.

    Every call returns immediately; the QStash request runs on a single
    worker thread, so requests reach QStash in call order, and a failure
    only updates `last_error`.

    Reminder schedules are keyed by `reminder_schedule_id`, so a restarted
    process can still replace or cancel the schedule of any habit.
    """

    def __init__(self, token: str = None, webhook_url: str = None):
        self.token = settings.QSTASH_TOKEN if token is None else token
        self.webhook_url = settings.NOTIFY_WEBHOOK_URL if webhook_url is None else webhook_url
        self.last_error: Optional[str] = None
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="notify")

    @property
    def enabled(self) -> bool:
        return bool(self.token and self.webhook_url)

    def schedule_reminder(self, habit_id: UUID, name: str, at: time):
        self._dispatch("schedule reminder", self._schedule_reminder, habit_id, name, at)

    def cancel_reminder(self, habit_id: UUID):
        self._dispatch("cancel reminder", self._cancel_reminder, habit_id)

    def send_milestone_notification(self, habit_name: str, streak_count: int):
        self._dispatch("milestone notification", self._publish, {
            "kind": "milestone",
            "title": "🎉 Congratulations!",
            "body": f"You completed \"{habit_name}\" {streak_count} days in a row!",
        })

    def shutdown(self):
        self._executor.shutdown(wait=True)

    def _dispatch(self, label: str, fn, *args):
        if not self.enabled:
            logger.debug("Notifications disabled, skipping %s", label)
            return
        future = self._executor.submit(fn, *args)
        future.add_done_callback(lambda f: self._on_done(label, f))

    def _on_done(self, label: str, future: Future):
        error = future.exception()
        if error is not None:
            logger.error("Failed to %s: %s", label, error)
            self.last_error = f"{label}: {error}"

    def _client(self) -> QStash:
        return QStash(self.token)

    def _schedule_reminder(self, habit_id: UUID, name: str, at: time):
        # Creating with an existing schedule id replaces that schedule
        cron = f"CRON_TZ={settings.TIMEZONE} {at.minute} {at.hour} * * *"
        schedule_id = self._client().schedule.create_json(
            destination=self.webhook_url,
            cron=cron,
            body={
                "kind": "reminder",
                "habit_id": str(habit_id),
                "title": "Habit reminder",
                "body": f"Time for \"{name}\"! Keep it up today!",
            },
            schedule_id=reminder_schedule_id(habit_id),
        )
        logger.info("Scheduled reminder %s for habit %s at %s", schedule_id, habit_id, at)

    def _cancel_reminder(self, habit_id: UUID):
        self._client().schedule.delete(reminder_schedule_id(habit_id))
        logger.info("Cancelled reminder for habit %s", habit_id)

    def _publish(self, body: dict):
        self._client().message.publish_json(url=self.webhook_url, body=body)
