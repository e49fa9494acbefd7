from __future__ import annotations

import itertools
import unittest

from pacnav import config
from pacnav.grid import UNREACHED, Grid, GridError
from pacnav.rules import Direction


def _open(pos):
    return True


class GridConstructionTest(unittest.TestCase):
    def test_ragged_board_is_rejected(self):
        with self.assertRaises(GridError):
            Grid([[0, 0, 0], [0, 0]])

    def test_empty_board_is_rejected(self):
        with self.assertRaises(GridError):
            Grid([])
        with self.assertRaises(GridError):
            Grid([[]])

    def test_grid_copies_its_input(self):
        cells = [[0, 0], [0, 0]]
        grid = Grid(cells)
        cells[0][0] = config.WALL
        self.assertEqual(grid.tile_at((0, 0)), config.EMPTY)

    def test_dimensions_follow_column_major_layout(self):
        grid = Grid.filled(4, 3)
        self.assertEqual((grid.width, grid.height), (4, 3))


class CoordinateTest(unittest.TestCase):
    def test_tile_at_wraps_on_torus(self):
        cells = [[0] * 5 for _ in range(5)]
        cells[0][4] = config.FOOD
        grid = Grid(cells)
        self.assertEqual(grid.tile_at((5, -1)), config.FOOD)
        self.assertEqual(grid.wrap((-1, 7)), (4, 2))

    def test_bounded_grid_rejects_out_of_range(self):
        grid = Grid.filled(3, 3, toroidal=False)
        with self.assertRaises(GridError):
            grid.tile_at((3, 0))

    def test_neighbors_in_fixed_order(self):
        grid = Grid.filled(10, 10)
        self.assertEqual(grid.neighbors4((5, 5)), [(5, 6), (6, 5), (5, 4), (4, 5)])

    def test_neighbors_wrap_independently(self):
        grid = Grid.filled(10, 8)
        self.assertEqual(grid.neighbors4((9, 0)), [(9, 1), (0, 0), (9, 7), (8, 0)])

    def test_bounded_neighbors_are_clipped(self):
        grid = Grid.filled(10, 10, toroidal=False)
        self.assertEqual(grid.neighbors4((0, 0)), [(0, 1), (1, 0)])
        self.assertIsNone(grid.step((0, 0), Direction.LEFT))


class ToroidalDistanceTest(unittest.TestCase):
    def test_distance_is_symmetric(self):
        grid = Grid.filled(7, 5)
        cells = list(itertools.product(range(7), range(5)))
        for a in cells[::3]:
            for b in cells:
                self.assertEqual(grid.toroidal_distance(a, b), grid.toroidal_distance(b, a))

    def test_opposite_edges_are_adjacent(self):
        grid = Grid.filled(10, 10)
        for y in range(10):
            self.assertEqual(grid.toroidal_distance((0, y), (9, y)), 1)

    def test_triangle_inequality(self):
        grid = Grid.filled(6, 4)
        cells = list(itertools.product(range(6), range(4)))
        a = (0, 0)
        for b in cells:
            for c in cells[::5]:
                self.assertLessEqual(
                    grid.toroidal_distance(a, c),
                    grid.toroidal_distance(a, b) + grid.toroidal_distance(b, c),
                )

    def test_per_axis_minimum(self):
        grid = Grid.filled(10, 10)
        self.assertEqual(grid.toroidal_distance((1, 1), (8, 5)), 3 + 4)


class FloodFillTest(unittest.TestCase):
    def _walled_room(self):
        # 3x3 open room surrounded by walls inside a 7x7 torus.
        cells = [[config.WALL] * 7 for _ in range(7)]
        for x in range(2, 5):
            for y in range(2, 5):
                cells[x][y] = config.EMPTY
        return Grid(cells)

    def test_cap_is_respected(self):
        grid = Grid.filled(10, 10)
        self.assertEqual(grid.flood_fill((0, 0), _open, 100), 100)
        self.assertEqual(grid.flood_fill((0, 0), _open, 37), 37)

    def test_count_never_exceeds_component(self):
        grid = self._walled_room()
        self.assertEqual(grid.flood_fill((3, 3), grid.not_wall, 100), 9)

    def test_no_tile_is_visited_twice(self):
        grid = Grid.filled(2, 2)
        visits = []

        def passable(pos):
            visits.append(pos)
            return True

        self.assertEqual(grid.flood_fill((0, 0), passable, 100), 4)
        # Each tile is admitted at most once; repeated predicate calls never add to the count.
        self.assertEqual(len(set(visits)), 3)

    def test_zero_limit(self):
        grid = Grid.filled(3, 3)
        self.assertEqual(grid.flood_fill((0, 0), _open, 0), 0)


class ShortestPathFirstStepTest(unittest.TestCase):
    def _goal_at(self, grid, target):
        return lambda pos: pos == target

    def test_direct_route(self):
        grid = Grid.filled(10, 10)
        step = grid.shortest_path_first_step((5, 5), self._goal_at(grid, (8, 5)), grid.not_wall)
        self.assertEqual(step, Direction.RIGHT)

    def test_wrap_route_is_preferred_when_shorter(self):
        grid = Grid.filled(10, 10)
        step = grid.shortest_path_first_step((0, 5), self._goal_at(grid, (9, 5)), grid.not_wall)
        self.assertEqual(step, Direction.LEFT)

    def test_ties_follow_enumeration_order(self):
        grid = Grid.filled(10, 10)
        # (6, 6) is two steps away via Up-then-Right or Right-then-Up; Up is enumerated first.
        step = grid.shortest_path_first_step((5, 5), self._goal_at(grid, (6, 6)), grid.not_wall)
        self.assertEqual(step, Direction.UP)

    def test_start_is_never_a_goal(self):
        grid = Grid.filled(3, 3)
        self.assertIsNone(grid.shortest_path_first_step((1, 1), lambda pos: pos == (1, 1), grid.not_wall))

    def test_unreachable_goal(self):
        cells = [[config.EMPTY] * 5 for _ in range(5)]
        for y in range(5):
            cells[2][y] = config.WALL
        grid = Grid(cells, toroidal=False)
        self.assertIsNone(grid.shortest_path_first_step((0, 0), self._goal_at(grid, (4, 4)), grid.not_wall))

    def test_walls_force_a_detour(self):
        cells = [[config.EMPTY] * 5 for _ in range(5)]
        cells[1][2] = config.WALL
        grid = Grid(cells, toroidal=False)
        step = grid.shortest_path_first_step((0, 2), self._goal_at(grid, (2, 2)), grid.not_wall)
        self.assertIn(step, (Direction.UP, Direction.DOWN))
        self.assertFalse(grid.is_wall(grid.step((0, 2), step)))


class ShortestPathTest(unittest.TestCase):
    def test_path_includes_endpoints(self):
        grid = Grid.filled(10, 10)
        path = grid.shortest_path((0, 0), (0, 8), grid.not_wall)
        self.assertEqual(path, [(0, 0), (0, 9), (0, 8)])

    def test_unreachable_returns_none(self):
        cells = [[config.WALL] * 3 for _ in range(3)]
        cells[0][0] = config.EMPTY
        cells[2][2] = config.EMPTY
        grid = Grid(cells, toroidal=False)
        self.assertIsNone(grid.shortest_path((0, 0), (2, 2), grid.not_wall))

    def test_trivial_path(self):
        grid = Grid.filled(3, 3)
        self.assertEqual(grid.shortest_path((1, 1), (1, 1), grid.not_wall), [(1, 1)])


class AllDistancesTest(unittest.TestCase):
    def test_distances_match_torus_metric_on_open_board(self):
        grid = Grid.filled(9, 6)
        field = grid.all_distances((2, 3), grid.not_wall)
        for pos in itertools.product(range(9), range(6)):
            self.assertEqual(field[pos], grid.toroidal_distance((2, 3), pos))

    def test_walls_are_unreached(self):
        cells = [[config.EMPTY] * 4 for _ in range(4)]
        cells[1][1] = config.WALL
        grid = Grid(cells, toroidal=False)
        field = grid.all_distances((0, 0), grid.not_wall)
        self.assertEqual(field[(1, 1)], UNREACHED)
        self.assertFalse(field.reachable((1, 1)))
        self.assertEqual(field[(3, 3)], 6)
        self.assertEqual(field.reached_count(), 15)


if __name__ == "__main__":
    unittest.main()
