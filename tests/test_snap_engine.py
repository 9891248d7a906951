import unittest

from magnetic_grid.config.schema import GridConfig
from magnetic_grid.models.field import FieldConfig, Position
from magnetic_grid.snap_engine.snap import SnapEngine

RH = 70.0


def _field(field_id, width, x, row):
    return FieldConfig(id=field_id, width=width, position=Position(x, row * RH))


class TestWidthTable(unittest.TestCase):
    def setUp(self) -> None:
        self.snap = SnapEngine()

    def test_width_index(self):
        self.assertEqual(self.snap.width_index(1 / 3), 0)
        self.assertEqual(self.snap.width_index(0.5), 1)
        self.assertEqual(self.snap.width_index(2 / 3), 2)
        self.assertEqual(self.snap.width_index(1.0), 3)
        self.assertEqual(self.snap.width_index(0.25), -1)

    def test_width_at_out_of_range(self):
        self.assertIsNone(self.snap.width_at(-1))
        self.assertIsNone(self.snap.width_at(4))

    def test_nearest_discrete_width(self):
        self.assertAlmostEqual(self.snap.nearest_discrete_width(0.1), 1 / 3)
        self.assertAlmostEqual(self.snap.nearest_discrete_width(0.4), 1 / 3)
        self.assertAlmostEqual(self.snap.nearest_discrete_width(0.45), 0.5)
        self.assertAlmostEqual(self.snap.nearest_discrete_width(0.7), 2 / 3)
        self.assertAlmostEqual(self.snap.nearest_discrete_width(0.9), 1.0)
        self.assertAlmostEqual(self.snap.nearest_discrete_width(1.7), 1.0)

    def test_next_larger_and_smaller(self):
        self.assertAlmostEqual(self.snap.next_larger_width(1 / 3), 0.5)
        self.assertAlmostEqual(self.snap.next_larger_width(2 / 3), 1.0)
        self.assertIsNone(self.snap.next_larger_width(1.0))
        self.assertAlmostEqual(self.snap.next_smaller_width(0.5), 1 / 3)
        self.assertIsNone(self.snap.next_smaller_width(1 / 3))
        self.assertIsNone(self.snap.next_larger_width(0.25))
        self.assertIsNone(self.snap.next_smaller_width(0.25))

    def test_column_span(self):
        self.assertEqual([self.snap.column_span(w) for w in self.snap.widths], [2, 3, 4, 6])


class TestPositions(unittest.TestCase):
    def setUp(self) -> None:
        self.snap = SnapEngine()

    def test_grid_position_from_fraction(self):
        self.assertEqual(self.snap.grid_position_from_pixels(Position(0.99, 105.0)), (2, 5))
        self.assertEqual(self.snap.grid_position_from_pixels(Position(0.0, 34.0)), (0, 0))

    def test_grid_position_from_pixels(self):
        self.assertEqual(self.snap.grid_position_from_pixels(Position(200.0, 70.0), 400.0), (1, 3))
        self.assertEqual(self.snap.grid_position_from_pixels(Position(500.0, 0.0), 400.0), (0, 5))

    def test_snap_position(self):
        snapped = self.snap.snap_position(Position(0.2, 80.0))
        self.assertAlmostEqual(snapped.x, 1 / 6)
        self.assertEqual(snapped.y, 70.0)

    def test_snap_position_keeps_field_inside_row(self):
        snapped = self.snap.snap_position(Position(0.9, 0.0), width=0.5)
        self.assertAlmostEqual(snapped.x, 0.5)

    def test_snap_position_clamps_row(self):
        snapped = self.snap.snap_position(Position(0.0, 70.0 * 20))
        self.assertEqual(snapped.y, 70.0 * 11)

    def test_achievable_width(self):
        self.assertAlmostEqual(self.snap.achievable_width(Position(0.0, 0.0), 1.0, 400.0), 1.0)
        self.assertAlmostEqual(self.snap.achievable_width(Position(0.5, 0.0), 2 / 3, 400.0), 0.5)
        self.assertAlmostEqual(self.snap.achievable_width(Position(1 / 3, 0.0), 1.0, 400.0), 2 / 3)


class TestFindNextAvailablePosition(unittest.TestCase):
    def test_first_free_run_in_partially_filled_row(self):
        snap = SnapEngine()
        configs = {"a": _field("a", 0.5, 0.0, 0)}
        position = snap.find_next_available_position(0.5, configs)
        self.assertAlmostEqual(position.x, 0.5)
        self.assertEqual(position.y, 0.0)

    def test_leftmost_run_wins(self):
        snap = SnapEngine()
        configs = {"a": _field("a", 1 / 3, 1 / 3, 0)}
        position = snap.find_next_available_position(1 / 3, configs)
        self.assertEqual((position.x, position.y), (0.0, 0.0))

    def test_skips_rows_without_room(self):
        snap = SnapEngine()
        configs = {"a": _field("a", 0.5, 0.0, 0)}
        position = snap.find_next_available_position(2 / 3, configs)
        self.assertEqual((position.x, position.y), (0.0, 70.0))

    def test_excluded_field_frees_its_space(self):
        snap = SnapEngine()
        configs = {"a": _field("a", 1.0, 0.0, 0)}
        position = snap.find_next_available_position(1.0, configs, exclude_id="a")
        self.assertEqual((position.x, position.y), (0.0, 0.0))

    def test_falls_back_to_row_after_maximum(self):
        snap = SnapEngine(grid=GridConfig(row_height=RH, max_rows=2))
        configs = {
            "a": _field("a", 1.0, 0.0, 0),
            "b": _field("b", 1.0, 0.0, 1),
        }
        position = snap.find_next_available_position(0.5, configs)
        self.assertEqual((position.x, position.y), (0.0, 140.0))


if __name__ == "__main__":
    unittest.main(verbosity=2)
