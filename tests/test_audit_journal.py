import json
import tempfile
import unittest
from datetime import datetime

from magnetic_grid.audit import (
    AuditEvent,
    AuditEventType,
    AuditJournal,
    MemoryAuditJournal,
    NullAuditJournal,
)

TS = datetime(2026, 3, 1, 12, 0, 0)


def _events():
    return [
        AuditEvent.phase_change("s1", TS, "IDLE", "DRAGGING", "drag started", field_id="a"),
        AuditEvent.layout_change(
            "s1", TS, AuditEventType.DRAG_COMMIT, "a",
            before={"width": 0.5}, after={"width": 1.0}, reason="drop",
            changed_ids=["a"],
        ),
        AuditEvent.auto_expand("s2", TS, ["b"], "gap in row 1"),
    ]


class TestAuditEvent(unittest.TestCase):
    def test_to_dict_omits_empty_fields(self):
        d = AuditEvent.auto_expand("s1", TS, ["b", "c"], "gap").to_dict()
        self.assertEqual(d["type"], "AUTO_EXPAND")
        self.assertEqual(d["changed"], ["b", "c"])
        self.assertEqual(d["ts"], TS.isoformat())
        self.assertNotIn("field", d)
        self.assertNotIn("before", d)

    def test_storage_event_details(self):
        event = AuditEvent.storage(
            "s1", TS, AuditEventType.LAYOUT_SAVED, "signup", 4, details={"backend": "json"}
        )
        self.assertEqual(event.details, {"field_count": 4, "backend": "json"})
        self.assertEqual(event.to_dict()["storage_key"], "signup")

    def test_invalid_input_event(self):
        event = AuditEvent.invalid_input("s1", TS, "drag_to", "no active drag", field_id="a")
        self.assertEqual(event.event_type, AuditEventType.INVALID_INPUT)
        self.assertEqual(event.details, {"operation": "drag_to"})


class TestAuditJournal(unittest.TestCase):
    def test_writes_jsonl_and_queries(self):
        with tempfile.TemporaryDirectory() as tmp:
            with AuditJournal(tmp) as journal:
                for event in _events():
                    journal.write(event)
                self.assertEqual(journal.event_count, 3)

                commits = journal.query(event_types=[AuditEventType.DRAG_COMMIT])
                self.assertEqual(len(commits), 1)
                self.assertEqual(commits[0]["after"], {"width": 1.0})
                self.assertEqual(len(journal.query(session_id="s2")), 1)

            with open(journal.filepath, "r", encoding="utf-8") as f:
                lines = [json.loads(line) for line in f]
            self.assertEqual([line["type"] for line in lines],
                             ["PHASE_CHANGE", "DRAG_COMMIT", "AUTO_EXPAND"])

    def test_corrupt_lines_are_skipped(self):
        with tempfile.TemporaryDirectory() as tmp:
            journal = AuditJournal(tmp)
            journal.write(_events()[0])
            journal.close()
            with open(journal.filepath, "a", encoding="utf-8") as f:
                f.write("{not json\n")
            self.assertEqual(len(journal.query()), 1)

    def test_time_range_query(self):
        with tempfile.TemporaryDirectory() as tmp:
            journal = AuditJournal(tmp)
            journal.write(_events()[0])
            self.assertEqual(len(journal.query(start_time=datetime(2026, 1, 1))), 1)
            self.assertEqual(len(journal.query(end_time=datetime(2026, 1, 1))), 0)
            journal.close()

    def test_query_before_any_write(self):
        with tempfile.TemporaryDirectory() as tmp:
            self.assertEqual(AuditJournal(tmp).query(), [])


class TestInMemoryJournals(unittest.TestCase):
    def test_memory_journal(self):
        journal = MemoryAuditJournal()
        for event in _events():
            journal.write(event)
        self.assertEqual(journal.event_count, 3)
        self.assertEqual(len(journal.query(session_id="s1")), 2)
        self.assertEqual(
            len(journal.query(event_types=[AuditEventType.PHASE_CHANGE, AuditEventType.AUTO_EXPAND])),
            2,
        )

    def test_field_filter_and_history(self):
        journal = MemoryAuditJournal()
        for event in _events():
            journal.write(event)
        self.assertEqual(len(journal.query(field_id="a")), 2)
        history = journal.field_history("a")
        self.assertEqual([r["type"] for r in history], ["DRAG_COMMIT"])

    def test_null_journal(self):
        journal = NullAuditJournal()
        journal.write(_events()[0])
        self.assertEqual(journal.query(), [])


if __name__ == "__main__":
    unittest.main(verbosity=2)
