import unittest

from magnetic_grid.drag.controller import DragController
from magnetic_grid.models.field import FieldConfig, Position
from magnetic_grid.models.gesture import DropZone, Point
from magnetic_grid.models.preview import PreviewState
from magnetic_grid.preview.preview_system import PreviewSystem

RH = 70.0
CW = 400.0


def _field(field_id, width, x, row):
    return FieldConfig(id=field_id, width=width, position=Position(x, row * RH))


class TestDragUpdate(unittest.TestCase):
    def setUp(self) -> None:
        self.controller = DragController()
        self.configs = {"a": _field("a", 1.0, 0.0, 0)}

    def test_start_records_start_positions(self):
        state = self.controller.start("a", Point(100, 10), self.configs)
        self.assertEqual(state.field_id, "a")
        self.assertFalse(state.moved_beyond_threshold)
        self.assertEqual(state.start_pointer, Point(100, 10))
        self.assertEqual(state.start_field_position, Position(0.0, 0.0))

    def test_start_unknown_field(self):
        self.assertIsNone(self.controller.start("zzz", Point(0, 0), self.configs))

    def test_full_width_field_clamped_to_left_edge(self):
        state = self.controller.start("a", Point(100, 10), self.configs)
        update = self.controller.update(Point(180, 10), state, self.configs, CW)
        self.assertEqual(update.position.x, 0.0)
        self.assertTrue(update.moved_beyond_threshold)
        self.assertTrue(update.should_preview)

    def test_threshold_is_strict(self):
        state = self.controller.start("a", Point(100, 10), self.configs)
        update = self.controller.update(Point(140, 10), state, self.configs, CW)
        self.assertFalse(update.moved_beyond_threshold)
        self.assertFalse(update.should_preview)

    def test_threshold_flag_is_monotonic(self):
        state = self.controller.start("a", Point(100, 10), self.configs)
        far = self.controller.update(Point(200, 10), state, self.configs, CW)
        back = self.controller.update(Point(105, 10), far.drag_state, self.configs, CW)
        self.assertTrue(back.moved_beyond_threshold)
        self.assertTrue(back.drag_state.moved_beyond_threshold)

    def test_position_clamped_to_grid(self):
        configs = {"b": _field("b", 0.5, 0.0, 0)}
        state = self.controller.start("b", Point(0, 0), configs)
        update = self.controller.update(Point(1000, 5000), state, configs, CW)
        self.assertAlmostEqual(update.position.x, 0.5)
        self.assertEqual(update.position.y, 12 * RH)
        update = self.controller.update(Point(-1000, -5000), state, configs, CW)
        self.assertEqual((update.position.x, update.position.y), (0.0, 0.0))

    def test_hovered_cell(self):
        configs = {"b": _field("b", 0.5, 0.0, 0)}
        state = self.controller.start("b", Point(0, 0), configs)
        update = self.controller.update(Point(100, 140), state, configs, CW)
        self.assertEqual(update.hovered_row, 2)
        self.assertEqual(update.hovered_column, 1)

    def test_invalid_inputs(self):
        state = self.controller.start("a", Point(100, 10), self.configs)
        self.assertIsNone(self.controller.update(Point(180, 10), state, self.configs, 0))
        self.assertIsNone(self.controller.update(Point(180, 10), state, {}, CW))


class TestDropZone(unittest.TestCase):
    def setUp(self) -> None:
        self.controller = DragController()

    def test_horizontal_zones(self):
        cases = [
            (0.1, DropZone.LEFT_DROP),
            (0.5, DropZone.CENTER_DROP),
            (0.7, DropZone.RIGHT_DROP),
        ]
        for x, zone in cases:
            result = self.controller.detect_drop_zone(Position(x, 30.0), CW)
            self.assertEqual(result.zone, zone)
            self.assertEqual(result.row, 0)

    def test_push_down_band(self):
        top = self.controller.detect_drop_zone(Position(0.5, 3.0), CW)
        bottom = self.controller.detect_drop_zone(Position(0.5, 68.0), CW)
        self.assertEqual(top.zone, DropZone.PUSH_DOWN)
        self.assertEqual(bottom.zone, DropZone.PUSH_DOWN)
        self.assertEqual(bottom.row, 1)

    def test_invalid_container_width(self):
        self.assertIsNone(self.controller.detect_drop_zone(Position(0.5, 30.0), 0))


class TestDragEnd(unittest.TestCase):
    def setUp(self) -> None:
        self.controller = DragController()

    def test_commits_valid_preview(self):
        configs = {
            "a": _field("a", 0.5, 0.0, 0),
            "c": _field("c", 1.0, 0.0, 1),
        }
        info = PreviewSystem().compute_preview(0, "c", configs, CW)
        state = PreviewState.activate("c", 0, info, base_configs=configs)
        dragging = dict(configs)
        dragging["c"] = FieldConfig("c", 1.0, Position(0.0, 20.0))

        result = self.controller.end("c", dragging, CW, state)

        self.assertTrue(result.committed_preview)
        self.assertEqual(result.final_position, Position(0.5, 0.0))
        self.assertEqual(result.configs["c"], FieldConfig("c", 0.5, Position(0.5, 0.0)))
        self.assertEqual(result.configs["a"], configs["a"])

    def test_preview_for_other_field_is_ignored(self):
        configs = {
            "a": _field("a", 0.5, 0.0, 0),
            "c": _field("c", 1.0, 0.0, 1),
        }
        info = PreviewSystem().compute_preview(0, "c", configs, CW)
        state = PreviewState.activate("a", 0, info)
        result = self.controller.end("c", configs, CW, state)
        self.assertFalse(result.committed_preview)

    def test_preview_without_base_layout_is_ignored(self):
        configs = {
            "a": _field("a", 0.5, 0.0, 0),
            "c": _field("c", 1.0, 0.0, 1),
        }
        info = PreviewSystem().compute_preview(0, "c", configs, CW)
        state = PreviewState.activate("c", 0, info)
        result = self.controller.end("c", configs, CW, state)
        self.assertFalse(result.committed_preview)

    def test_stale_preview_falls_back_to_snapping(self):
        configs = {
            "a": _field("a", 0.5, 0.0, 0),
            "c": _field("c", 1.0, 0.0, 1),
        }
        info = PreviewSystem().compute_preview(0, "c", configs, CW)
        state = PreviewState.activate("c", 0, info, base_configs=configs)

        # a 在预览之后被移到第 2 行，id 集合不变
        current = {
            "a": _field("a", 0.5, 0.0, 2),
            "c": FieldConfig("c", 1.0, Position(0.0, 20.0)),
        }
        result = self.controller.end("c", current, CW, state)

        self.assertFalse(result.committed_preview)
        self.assertEqual(result.final_position, Position(0.0, 0.0))
        self.assertEqual(result.configs["a"], current["a"])
        self.assertTrue(self.controller.collision.is_layout_valid(result.configs))

    def test_snaps_to_nearest_cell(self):
        configs = {
            "a": _field("a", 1.0, 0.0, 0),
            "b": FieldConfig("b", 0.5, Position(0.3, 75.0)),
        }
        result = self.controller.end("b", configs, CW)
        self.assertFalse(result.committed_preview)
        self.assertFalse(result.relocated)
        self.assertAlmostEqual(result.final_position.x, 1 / 3)
        self.assertEqual(result.final_position.y, 70.0)

    def test_overlapping_drop_relocates_below_occupied_rows(self):
        configs = {
            "a": _field("a", 0.5, 0.0, 0),
            "b": _field("b", 0.5, 0.5, 0),
            "d": _field("d", 1.0, 0.0, 1),
            "c": FieldConfig("c", 1.0, Position(0.0, 4.0)),
        }
        result = self.controller.end("c", configs, CW)
        self.assertTrue(result.relocated)
        self.assertEqual(result.final_position, Position(0.0, 140.0))
        self.assertTrue(self.controller.collision.is_layout_valid(result.configs))

    def test_invalid_input_returns_configs_unchanged(self):
        configs = {"a": _field("a", 1.0, 0.0, 0)}
        result = self.controller.end("zzz", configs, CW)
        self.assertIsNone(result.final_position)
        self.assertIs(result.configs, configs)


if __name__ == "__main__":
    unittest.main(verbosity=2)
