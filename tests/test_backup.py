import json
from datetime import datetime

import pytest

from core.backup import export_filename, export_habits, parse_habits
from conftest import TODAY, complete_on, make_habit

def test_export_document_schema():
    habit = complete_on(make_habit(name="Journal", target_days={1, 3}), TODAY)
    document = json.loads(export_habits([habit]))

    assert len(document) == 1
    entry = document[0]
    assert entry["id"] == str(habit.id)
    assert entry["name"] == "Journal"
    assert sorted(entry["target_days"]) == [1, 3]
    assert entry["completion_records"][0]["date"].startswith("2024-01-31T00:00:00")
    assert entry["completion_records"][0]["duration"] is None

def test_parse_exported_document():
    habit = complete_on(make_habit(name="Journal"), TODAY)
    restored = parse_habits(export_habits([habit]))
    assert restored[0].id == habit.id
    assert restored[0].completion_records[0].id == habit.completion_records[0].id
    assert restored[0].is_completed_on(TODAY)

@pytest.mark.parametrize("data", [b"not json", b'{"name": "x"}', b'[{"name": "x", "target_days": [9]}]'])
def test_parse_rejects_malformed_documents(data):
    with pytest.raises(ValueError):
        parse_habits(data)

def test_export_filename():
    assert export_filename(datetime(2024, 1, 31, 8, 5, 9)) == "Habita_backup_2024-01-31_080509.json"

def test_export_keeps_unicode_and_indentation():
    text = export_habits([make_habit(name="Café ☕")])
    assert "Café ☕" in text
    assert text.startswith("[\n  {\n    \"name\": ")
