import os
import tempfile
import unittest

from magnetic_grid.audit.events import AuditEventType
from magnetic_grid.audit.journal import MemoryAuditJournal
from magnetic_grid.config.schema import LayoutEngineConfig, StorageConfig
from magnetic_grid.models.events import EventType, GestureEvent
from magnetic_grid.models.field import FieldConfig, Position
from magnetic_grid.runtime.event_loop import ReplayEventLoop, load_script
from magnetic_grid.storage.repository import JsonLayoutRepository

REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
EXAMPLE_SCRIPT = os.path.join(REPO_ROOT, "configs", "example_script.yaml")


class TestLoadScript(unittest.TestCase):
    def test_example_script(self):
        script = load_script(EXAMPLE_SCRIPT)
        self.assertEqual(script.container_width, 400.0)
        self.assertEqual(list(script.default_configs), ["name", "email", "phone", "notes"])
        self.assertEqual(len(script.events), 16)
        self.assertEqual(script.events[0].event_type, EventType.DRAG_START)
        self.assertEqual(script.events[-2].width, 0.5)

    def test_missing_script(self):
        with self.assertRaises(FileNotFoundError):
            load_script("/nonexistent/script.yaml")


class TestReplayEventLoop(unittest.TestCase):
    def test_example_script_end_to_end(self):
        script = load_script(EXAMPLE_SCRIPT)
        with tempfile.TemporaryDirectory() as tmp:
            loop = ReplayEventLoop(
                LayoutEngineConfig(),
                tmp,
                session_id="replay",
                default_configs=script.default_configs,
                container_width=script.container_width,
            )
            seen = []
            loop.register_handler(seen.append)
            final = loop.run(script.events)

            self.assertEqual(final, {
                "name": FieldConfig("name", 0.5, Position(0.5, 0.0)),
                "email": FieldConfig("email", 1.0, Position(0.0, 70.0)),
                "notes": FieldConfig("notes", 0.5, Position(0.0, 0.0)),
                "comments": FieldConfig("comments", 0.5, Position(0.0, 140.0)),
            })
            self.assertEqual(loop.event_count, 16)
            self.assertEqual(loop.ignored_count, 0)
            self.assertEqual(len(seen), 16)
            self.assertEqual(loop.session.display_configs, final)

            saved = JsonLayoutRepository(os.path.join(tmp, "layouts")).load("default_form")
            self.assertEqual(saved, final)
            self.assertTrue(os.path.exists(os.path.join(tmp, "layout_audit.jsonl")))

    def test_replay_resumes_saved_layout(self):
        script = load_script(EXAMPLE_SCRIPT)
        with tempfile.TemporaryDirectory() as tmp:
            first = ReplayEventLoop(LayoutEngineConfig(), tmp, default_configs=script.default_configs)
            final = first.run(script.events)

            second = ReplayEventLoop(LayoutEngineConfig(), tmp, default_configs=script.default_configs)
            self.assertEqual(second.run([]), final)

    def test_invalid_events_are_counted(self):
        journal = MemoryAuditJournal()
        config = LayoutEngineConfig(storage=StorageConfig(backend="memory"))
        with tempfile.TemporaryDirectory() as tmp:
            loop = ReplayEventLoop(
                config,
                tmp,
                default_configs={"a": FieldConfig("a", 1.0, Position(0.0, 0.0))},
                audit_journal=journal,
            )
            loop.run([
                GestureEvent(EventType.DRAG_MOVE, field_id="a", x=10, y=10),
                GestureEvent(EventType.RESIZE_END, field_id="a"),
                GestureEvent(EventType.FIELD_REMOVE, field_id="zzz"),
                GestureEvent(EventType.FRAME_TICK, timestamp=0.5),
            ])
        self.assertEqual(loop.ignored_count, 3)
        self.assertEqual(len(journal.query(event_types=[AuditEventType.INVALID_INPUT])), 3)


if __name__ == "__main__":
    unittest.main(verbosity=2)
