import unittest

from magnetic_grid.config.schema import GridConfig
from magnetic_grid.models.field import FieldConfig, Position
from magnetic_grid.preview.preview_system import PreviewSystem

RH = 70.0
CW = 400.0


def _field(field_id, width, x, row):
    return FieldConfig(id=field_id, width=width, position=Position(x, row * RH))


class TestPreviewFit(unittest.TestCase):
    def setUp(self) -> None:
        self.preview = PreviewSystem()

    def test_empty_row_gets_full_width(self):
        configs = {
            "a": _field("a", 1.0, 0.0, 0),
            "c": _field("c", 0.5, 0.0, 1),
        }
        info = self.preview.compute_preview(2, "c", configs, CW)
        self.assertTrue(info.has_space)
        self.assertFalse(info.is_push_down)
        self.assertEqual(info.target_position, Position(0.0, 140.0))
        self.assertEqual(info.target_columns, (0, 6))
        self.assertEqual(info.preview_configs["c"].width, 1.0)

    def test_largest_free_run_in_partial_row(self):
        configs = {
            "a": _field("a", 0.5, 0.0, 0),
            "c": _field("c", 1.0, 0.0, 1),
        }
        info = self.preview.compute_preview(0, "c", configs, CW)
        self.assertTrue(info.has_space)
        self.assertEqual(info.target_position, Position(0.5, 0.0))
        self.assertEqual(info.target_columns, (3, 3))
        self.assertAlmostEqual(info.preview_configs["c"].width, 0.5)
        self.assertIn("50%", info.message)

    def test_does_not_mutate_input(self):
        configs = {
            "a": _field("a", 0.5, 0.0, 0),
            "c": _field("c", 1.0, 0.0, 1),
        }
        snapshot = dict(configs)
        self.preview.compute_preview(0, "c", configs, CW)
        self.assertEqual(configs, snapshot)


class TestPreviewRedistribute(unittest.TestCase):
    def setUp(self) -> None:
        self.preview = PreviewSystem()
        self.configs = {
            "a": _field("a", 0.5, 0.0, 0),
            "b": _field("b", 0.5, 0.5, 0),
            "c": _field("c", 1.0, 0.0, 1),
        }

    def test_dragged_field_inserted_after_siblings(self):
        info = self.preview.compute_preview(0, "c", self.configs, CW, drop_x=0.9)
        self.assertTrue(info.has_space)
        self.assertFalse(info.is_push_down)
        configs = info.preview_configs
        self.assertAlmostEqual(configs["a"].x, 0.0)
        self.assertAlmostEqual(configs["b"].x, 1 / 3)
        self.assertAlmostEqual(configs["c"].x, 2 / 3)
        for config in configs.values():
            self.assertAlmostEqual(config.width, 1 / 3)

    def test_dragged_field_inserted_first(self):
        info = self.preview.compute_preview(0, "c", self.configs, CW, drop_x=0.0)
        configs = info.preview_configs
        self.assertAlmostEqual(configs["c"].x, 0.0)
        self.assertAlmostEqual(configs["a"].x, 1 / 3)
        self.assertAlmostEqual(configs["b"].x, 2 / 3)
        self.assertEqual(info.target_columns, (0, 2))


class TestPreviewPushDown(unittest.TestCase):
    def test_rows_shift_down(self):
        configs = {
            "x": _field("x", 1 / 3, 0.0, 0),
            "y": _field("y", 1 / 3, 1 / 3, 0),
            "z": _field("z", 1 / 3, 2 / 3, 0),
            "e": _field("e", 1.0, 0.0, 1),
            "c": _field("c", 1.0, 0.0, 2),
        }
        info = PreviewSystem().compute_preview(0, "c", configs, CW)
        self.assertTrue(info.has_space)
        self.assertTrue(info.is_push_down)
        preview = info.preview_configs
        self.assertEqual(preview["c"].position, Position(0.0, 0.0))
        for field_id in ("x", "y", "z"):
            self.assertEqual(preview[field_id].y, 70.0)
            self.assertEqual(preview[field_id].x, configs[field_id].x)
        self.assertEqual(preview["e"].y, 140.0)
        self.assertEqual(list(preview), list(configs))

    def test_push_down_past_row_cap_has_no_space(self):
        configs = {
            "x": _field("x", 1 / 3, 0.0, 0),
            "y": _field("y", 1 / 3, 1 / 3, 0),
            "z": _field("z", 1 / 3, 2 / 3, 0),
            "d": _field("d", 0.5, 0.0, 1),
            "c": _field("c", 0.5, 0.5, 1),
        }
        preview = PreviewSystem(grid=GridConfig(row_height=RH, max_rows=2))
        info = preview.compute_preview(0, "c", configs, CW)
        self.assertFalse(info.has_space)
        self.assertEqual(info.preview_configs, configs)


class TestPreviewInvalidInput(unittest.TestCase):
    def setUp(self) -> None:
        self.preview = PreviewSystem()
        self.configs = {"a": _field("a", 1.0, 0.0, 0)}

    def test_unknown_field(self):
        info = self.preview.compute_preview(0, "zzz", self.configs, CW)
        self.assertFalse(info.has_space)
        self.assertEqual(info.preview_configs, self.configs)

    def test_bad_container_width(self):
        self.assertFalse(self.preview.compute_preview(0, "a", self.configs, 0).has_space)

    def test_row_outside_grid(self):
        self.assertFalse(self.preview.compute_preview(12, "a", self.configs, CW).has_space)
        self.assertFalse(self.preview.compute_preview(-1, "a", self.configs, CW).has_space)


if __name__ == "__main__":
    unittest.main(verbosity=2)
