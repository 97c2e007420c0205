"""Unit tests for ResponseTracker."""
import sys
sys.path.insert(0, 'backend')

import json
from datetime import datetime, timedelta, timezone

import pytest

from services.response_tracker import ResponseTracker


@pytest.fixture
def history_file(tmp_path):
    return tmp_path / "logs" / "response-history.json"


class TestResponseTracker:

    def test_missing_file_starts_empty(self, history_file):
        tracker = ResponseTracker(str(history_file))

        assert tracker.history() == []
        assert not tracker.has_responded("linkedin-anyone")

    def test_record_persists_before_returning(self, history_file):
        tracker = ResponseTracker(str(history_file))

        record = tracker.record("linkedin-sarah", "Sarah", "Hi!", "Thanks for your message!")

        assert tracker.has_responded("linkedin-sarah")
        assert tracker.get("linkedin-sarah") == record
        stored = json.loads(history_file.read_text(encoding="utf-8"))
        assert len(stored) == 1
        assert stored[0]["conversation_id"] == "linkedin-sarah"
        assert stored[0]["outbound_content"] == "Thanks for your message!"

    def test_repeat_record_overwrites(self, history_file):
        tracker = ResponseTracker(str(history_file))

        tracker.record("linkedin-sarah", "Sarah", "Hi!", "First reply")
        tracker.record("linkedin-sarah", "Sarah", "Follow-up", "Second reply")

        history = tracker.history()
        assert len(history) == 1
        assert history[0].outbound_content == "Second reply"
        assert len(json.loads(history_file.read_text(encoding="utf-8"))) == 1

    def test_history_survives_restart(self, history_file):
        ResponseTracker(str(history_file)).record("linkedin-sarah", "Sarah", "Hi!", "Thanks!")

        reloaded = ResponseTracker(str(history_file))

        assert reloaded.has_responded("linkedin-sarah")
        assert reloaded.get("linkedin-sarah").inbound_content == "Hi!"

    def test_history_is_newest_first(self, history_file):
        tracker = ResponseTracker(str(history_file))
        tracker.record("linkedin-a", "A", "in", "out")
        tracker.record("linkedin-b", "B", "in", "out")
        tracker._records["linkedin-a"].responded_at = datetime.now() - timedelta(hours=1)

        assert [record.conversation_id for record in tracker.history()] == ["linkedin-b", "linkedin-a"]

    def test_purge_older_than(self, history_file):
        tracker = ResponseTracker(str(history_file))
        tracker.record("linkedin-old", "Old", "in", "out")
        tracker.record("linkedin-new", "New", "in", "out")
        tracker._records["linkedin-old"].responded_at = datetime.now() - timedelta(days=45)

        removed = tracker.purge_older_than(30)

        assert removed == 1
        assert not tracker.has_responded("linkedin-old")
        assert tracker.has_responded("linkedin-new")
        assert not ResponseTracker(str(history_file)).has_responded("linkedin-old")

    def test_purge_with_nothing_stale(self, history_file):
        tracker = ResponseTracker(str(history_file))
        tracker.record("linkedin-new", "New", "in", "out")

        assert tracker.purge_older_than(30) == 0

    def test_corrupt_file_starts_empty(self, history_file):
        history_file.parent.mkdir(parents=True)
        history_file.write_text("{not json", encoding="utf-8")

        tracker = ResponseTracker(str(history_file))

        assert tracker.history() == []
        tracker.record("linkedin-sarah", "Sarah", "Hi!", "Thanks!")
        assert len(json.loads(history_file.read_text(encoding="utf-8"))) == 1

    def test_no_temp_files_left_behind(self, history_file):
        tracker = ResponseTracker(str(history_file))
        tracker.record("linkedin-sarah", "Sarah", "Hi!", "Thanks!")

        assert [path.name for path in history_file.parent.iterdir()] == ["response-history.json"]

    def test_timezone_aware_timestamps_load_and_purge(self, history_file):
        recent = (datetime.now(timezone.utc) - timedelta(days=1)).isoformat()
        history_file.parent.mkdir(parents=True)
        history_file.write_text(json.dumps([
            {
                "conversation_id": "linkedin-old",
                "counterpart_name": "Old",
                "responded_at": "2020-01-01T10:00:00+02:00",
                "inbound_content": "in",
                "outbound_content": "out",
            },
            {
                "conversation_id": "linkedin-recent",
                "counterpart_name": "Recent",
                "responded_at": recent,
                "inbound_content": "in",
                "outbound_content": "out",
            },
        ]), encoding="utf-8")

        tracker = ResponseTracker(str(history_file))

        assert tracker.get("linkedin-old").responded_at.tzinfo is None
        assert tracker.purge_older_than(30) == 1
        assert tracker.has_responded("linkedin-recent")
        tracker.record("linkedin-new", "New", "in", "out")
        assert [record.conversation_id for record in tracker.history()] == ["linkedin-new", "linkedin-recent"]
