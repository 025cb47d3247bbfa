import pytest
import requests

from core.backup import export_habits, parse_habits
from utils.sync import CloudSyncService
from conftest import TODAY, complete_on, make_habit

class FakeResponse:
    def __init__(self, content=b"[]", status_code=200):
        self.content = content
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Server Error")

class FakeRequests:
    def __init__(self):
        self.calls = []
        self.response = FakeResponse()
        self.error = None

    def get(self, url, headers=None, timeout=None):
        self.calls.append(("GET", url, headers, None))
        if self.error:
            raise self.error
        return self.response

    def put(self, url, data=None, headers=None, timeout=None):
        self.calls.append(("PUT", url, headers, data))
        if self.error:
            raise self.error
        return self.response

@pytest.fixture
def http(monkeypatch):
    fake = FakeRequests()
    monkeypatch.setattr(requests, "get", fake.get)
    monkeypatch.setattr(requests, "put", fake.put)
    return fake

def make_service():
    return CloudSyncService(base_url="https://sync.example.com/", api_key="secret", timeout=5)

def test_push_uploads_backup_document(http):
    habit = complete_on(make_habit(name="Read"), TODAY)
    service = make_service()
    service.push([habit])
    service.shutdown()

    method, url, headers, data = http.calls[0]
    assert (method, url) == ("PUT", "https://sync.example.com/habits")
    assert headers["Authorization"] == "Bearer secret"
    assert headers["Content-Type"] == "application/json"
    assert parse_habits(data)[0].id == habit.id
    assert service.last_sync_date is not None
    assert service.last_sync_error is None

def test_push_failure_is_recorded(http):
    http.response = FakeResponse(status_code=503)
    service = make_service()
    service.push([make_habit()])
    service.shutdown()

    assert service.last_sync_date is None
    assert service.last_sync_error.startswith("Sync error:")

def test_pull_returns_remote_habits(http):
    remote = make_habit(name="Remote")
    http.response = FakeResponse(export_habits([remote]).encode())
    service = make_service()

    habits = service.pull()

    assert [habit.id for habit in habits] == [remote.id]
    assert service.last_sync_date is not None
    assert service.last_sync_error is None

def test_pull_network_error_returns_empty(http):
    http.error = requests.ConnectionError("connection refused")
    service = make_service()

    assert service.pull() == []
    assert service.last_sync_error.startswith("Fetch error:")
    assert service.last_sync_date is None

def test_pull_bad_payload_returns_empty(http):
    http.response = FakeResponse(b'{"not": "a list"}')
    service = make_service()

    assert service.pull() == []
    assert "Invalid habit backup" in service.last_sync_error

def test_unconfigured_sync_does_nothing(http):
    service = CloudSyncService(base_url="", api_key="")

    service.push([make_habit()])
    assert service.pull() == []
    service.shutdown()

    assert http.calls == []
    assert service.last_sync_error == "Cloud sync is not configured"
