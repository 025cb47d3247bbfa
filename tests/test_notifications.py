from datetime import time
from uuid import uuid4

import pytest

from core.config import settings
from utils import notifications
from utils.notifications import NotificationService, reminder_schedule_id

class FakeSchedules:
    def __init__(self, backend):
        self.backend = backend

    def create_json(self, destination, cron, body, schedule_id=None):
        if self.backend.fail:
            raise RuntimeError("qstash unavailable")
        self.backend.schedules[schedule_id] = (destination, cron, body)
        return schedule_id

    def delete(self, schedule_id):
        if schedule_id not in self.backend.schedules:
            raise RuntimeError(f"schedule {schedule_id} not found")
        del self.backend.schedules[schedule_id]

class FakeMessages:
    def __init__(self, backend):
        self.backend = backend

    def publish_json(self, url, body):
        self.backend.published.append((url, body))

class FakeQStashBackend:
    def __init__(self):
        self.schedules = {}
        self.published = []
        self.tokens = []
        self.fail = False

    def client(self, token):
        self.tokens.append(token)
        client = type("Client", (), {})()
        client.schedule = FakeSchedules(self)
        client.message = FakeMessages(self)
        return client

@pytest.fixture
def qstash(monkeypatch):
    backend = FakeQStashBackend()
    monkeypatch.setattr(notifications, "QStash", backend.client)
    return backend

def make_service():
    return NotificationService(token="token", webhook_url="https://example.com/hook")

def test_schedule_reminder_uses_habit_keyed_cron(qstash):
    habit_id = uuid4()
    service = make_service()
    service.schedule_reminder(habit_id, "Stretch", time(7, 30))
    service.shutdown()

    destination, cron, body = qstash.schedules[reminder_schedule_id(habit_id)]
    assert destination == "https://example.com/hook"
    assert cron == f"CRON_TZ={settings.TIMEZONE} 30 7 * * *"
    assert body["habit_id"] == str(habit_id)
    assert "Stretch" in body["body"]
    assert service.last_error is None

def test_rescheduling_replaces_the_same_schedule(qstash):
    habit_id = uuid4()
    service = make_service()
    service.schedule_reminder(habit_id, "Stretch", time(7, 30))
    service.schedule_reminder(habit_id, "Stretch", time(8, 0))
    service.shutdown()

    assert list(qstash.schedules) == [reminder_schedule_id(habit_id)]
    assert qstash.schedules[reminder_schedule_id(habit_id)][1].endswith(" 0 8 * * *")

def test_cancel_after_restart(qstash):
    habit_id = uuid4()
    first = make_service()
    first.schedule_reminder(habit_id, "Stretch", time(7, 30))
    first.shutdown()

    restarted = make_service()
    restarted.cancel_reminder(habit_id)
    restarted.shutdown()

    assert qstash.schedules == {}
    assert restarted.last_error is None

def test_schedule_then_cancel_keeps_call_order(qstash):
    habit_id = uuid4()
    service = make_service()
    for _ in range(5):
        service.schedule_reminder(habit_id, "Stretch", time(7, 30))
        service.cancel_reminder(habit_id)
    service.schedule_reminder(habit_id, "Stretch", time(9, 0))
    service.shutdown()

    assert list(qstash.schedules) == [reminder_schedule_id(habit_id)]
    assert service.last_error is None

def test_milestone_is_published(qstash):
    service = make_service()
    service.send_milestone_notification("Read", 7)
    service.shutdown()

    url, body = qstash.published[0]
    assert url == "https://example.com/hook"
    assert body["kind"] == "milestone"
    assert "7 days" in body["body"]

def test_failures_are_recorded_not_raised(qstash):
    qstash.fail = True
    service = make_service()
    service.schedule_reminder(uuid4(), "Stretch", time(7, 30))
    service.shutdown()

    assert service.last_error.startswith("schedule reminder:")
    assert "qstash unavailable" in service.last_error

def test_disabled_without_credentials(qstash):
    service = NotificationService(token="", webhook_url="https://example.com/hook")
    assert service.enabled is False

    service.schedule_reminder(uuid4(), "Stretch", time(7, 30))
    service.send_milestone_notification("Read", 3)
    service.shutdown()

    assert qstash.tokens == []
    assert service.last_error is None
