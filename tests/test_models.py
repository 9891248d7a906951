import json
import unittest

from magnetic_grid.models.events import EventType, GestureEvent
from magnetic_grid.models.field import (
    FieldConfig,
    Position,
    configs_from_records,
    configs_to_records,
)
from magnetic_grid.models.gesture import (
    DragState,
    GesturePhase,
    Point,
    ResizeDirection,
    is_valid_transition,
)
from magnetic_grid.models.grid import DISCRETE_WIDTHS, column_span
from magnetic_grid.models.preview import PreviewInfo, PreviewState


class TestFieldConfig(unittest.TestCase):
    def test_record_round_trip_is_exact(self):
        configs = {
            "name": FieldConfig("name", 1 / 3, Position(2 / 3, 140.0)),
            "email": FieldConfig("email", 2 / 3, Position(0.0, 140.0)),
            "notes": FieldConfig("notes", 1.0, Position(0.0, 0.0)),
        }
        records = json.loads(json.dumps(configs_to_records(configs)))
        restored = configs_from_records(records)
        self.assertEqual(restored, configs)
        self.assertEqual(list(restored), list(configs))

    def test_record_format(self):
        record = FieldConfig("a", 0.5, Position(0.5, 70.0)).to_record()
        self.assertEqual(record, {"id": "a", "width": 0.5, "positionX": 0.5, "positionY": 70.0})

    def test_copy_with_is_a_new_value(self):
        original = FieldConfig("a", 0.5, Position(0.0, 0.0))
        wider = original.copy_with(width=1.0)
        self.assertEqual(original.width, 0.5)
        self.assertEqual(wider.width, 1.0)
        self.assertEqual(wider.position, original.position)

    def test_edges_and_row(self):
        config = FieldConfig("a", 1 / 3, Position(0.5, 140.0))
        self.assertAlmostEqual(config.right_edge, 0.5 + 1 / 3)
        self.assertAlmostEqual(config.center_x, 0.5 + 1 / 6)
        self.assertEqual(config.row(), 2)

    def test_column_span(self):
        self.assertEqual([column_span(w) for w in DISCRETE_WIDTHS], [2, 3, 4, 6])


class TestGesturePhases(unittest.TestCase):
    def test_drag_lifecycle(self):
        self.assertTrue(is_valid_transition(GesturePhase.IDLE, GesturePhase.DRAGGING))
        self.assertTrue(is_valid_transition(GesturePhase.DRAGGING, GesturePhase.PREVIEWING))
        self.assertTrue(is_valid_transition(GesturePhase.PREVIEWING, GesturePhase.ENDED))
        self.assertTrue(is_valid_transition(GesturePhase.ENDED, GesturePhase.IDLE))

    def test_invalid_transitions(self):
        self.assertFalse(is_valid_transition(GesturePhase.IDLE, GesturePhase.PREVIEWING))
        self.assertFalse(is_valid_transition(GesturePhase.RESIZING, GesturePhase.PREVIEWING))
        self.assertFalse(is_valid_transition(GesturePhase.DRAGGING, GesturePhase.IDLE))

    def test_new_gesture_supersedes_any_phase(self):
        for phase in GesturePhase:
            self.assertTrue(is_valid_transition(phase, GesturePhase.RESIZING))

    def test_drag_state_threshold_never_resets(self):
        state = DragState("a", Point(0, 0), Position(0.0, 0.0))
        moved = state.with_moved(True)
        self.assertTrue(moved.with_moved(False).moved_beyond_threshold)
        self.assertFalse(state.moved_beyond_threshold)


class TestPreviewState(unittest.TestCase):
    def setUp(self) -> None:
        self.base = {
            "a": FieldConfig("a", 0.5, Position(0.0, 0.0)),
            "b": FieldConfig("b", 1.0, Position(0.0, 70.0)),
        }
        self.state = PreviewState.activate("b", 0, PreviewInfo(has_space=True), base_configs=self.base)

    def test_dragged_field_may_move(self):
        moved = dict(self.base)
        moved["b"] = FieldConfig("b", 1.0, Position(0.0, 12.0))
        self.assertTrue(self.state.is_current(moved))

    def test_other_field_moved(self):
        moved = dict(self.base)
        moved["a"] = FieldConfig("a", 0.5, Position(0.5, 0.0))
        self.assertFalse(self.state.is_current(moved))

    def test_field_added_or_removed(self):
        added = dict(self.base)
        added["c"] = FieldConfig("c", 1.0, Position(0.0, 140.0))
        self.assertFalse(self.state.is_current(added))
        self.assertFalse(self.state.is_current({"b": self.base["b"]}))

    def test_base_copied_on_activate(self):
        self.base["a"] = FieldConfig("a", 1 / 3, Position(0.0, 0.0))
        self.assertEqual(self.state.base_configs["a"].width, 0.5)

    def test_inactive_state_is_never_current(self):
        self.assertFalse(PreviewState.initial().is_current(self.base))


class TestGestureEvent(unittest.TestCase):
    def test_from_dict(self):
        event = GestureEvent.from_dict({
            "type": "resize_start",
            "field_id": "email",
            "timestamp": 1.5,
            "direction": "left",
        })
        self.assertEqual(event.event_type, EventType.RESIZE_START)
        self.assertEqual(event.direction, ResizeDirection.LEFT)
        self.assertEqual(event.timestamp, 1.5)
        self.assertIsNone(event.container_width)

    def test_field_add_width(self):
        event = GestureEvent.from_dict({"type": "FIELD_ADD", "field_id": "x", "width": 0.5})
        self.assertEqual(event.width, 0.5)
        self.assertEqual(GestureEvent.from_dict(event.to_dict()), event)

    def test_unknown_type(self):
        with self.assertRaises(KeyError):
            GestureEvent.from_dict({"type": "double_tap"})


if __name__ == "__main__":
    unittest.main(verbosity=2)
