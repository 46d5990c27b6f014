import unittest
import sys
import os

# Add project root to path so we can import maze_master
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from maze_master.core.grid import Grid, InvalidDimensionsError

class TestGrid(unittest.TestCase):
    def test_initialization(self):
        rows, cols = 7, 9
        grid = Grid(rows, cols)
        self.assertEqual(len(grid.cells), rows * cols)
        for val in grid.cells:
            self.assertEqual(val, Grid.WALL)
        self.assertEqual(grid.start, (1, 1))
        self.assertEqual(grid.goal, (5, 7))

    def test_invalid_dimensions(self):
        with self.assertRaises(InvalidDimensionsError):
            Grid(2, 10)
        with self.assertRaises(InvalidDimensionsError):
            Grid(10, 0)
        # Smallest usable maze
        Grid(3, 3)

    def test_coordinates(self):
        grid = Grid(5, 5)
        self.assertEqual(grid.get_index(2, 3), 13) # 2 * 5 + 3

        with self.assertRaises(IndexError):
            grid.get_index(-1, 0)
        with self.assertRaises(IndexError):
            grid.get_index(0, 5)

    def test_out_of_bounds_is_wall(self):
        grid = Grid(5, 5)
        grid.set(1, 1, Grid.EMPTY)
        self.assertEqual(grid.get(-1, 1), Grid.WALL)
        self.assertEqual(grid.get(1, 99), Grid.WALL)
        self.assertFalse(grid.is_walkable(-1, -1))
        self.assertFalse(grid.is_empty(5, 5))

        # Writes out of bounds are ignored
        grid.set(10, 10, Grid.EMPTY)
        self.assertEqual(grid.count(Grid.EMPTY), 1)

    def test_walkable_and_empty(self):
        grid = Grid(5, 5)
        grid.set(1, 1, Grid.EMPTY)
        grid.set(1, 2, Grid.PATH)
        grid.set(1, 3, -4)

        self.assertTrue(grid.is_walkable(1, 1))
        self.assertTrue(grid.is_walkable(1, 2))
        self.assertTrue(grid.is_walkable(1, 3))
        self.assertFalse(grid.is_walkable(0, 0))

        self.assertTrue(grid.is_empty(1, 1))
        self.assertFalse(grid.is_empty(1, 2))
        self.assertTrue(Grid.is_room_marker(grid.get(1, 3)))

    def test_reset_solution(self):
        grid = Grid(5, 5)
        grid.set(1, 1, Grid.PATH)
        grid.set(1, 2, Grid.VISITED)
        grid.set(1, 3, Grid.SOLUTION)
        grid.set(2, 1, Grid.EMPTY)

        grid.reset_solution()
        once = grid.snapshot()
        grid.reset_solution()

        self.assertEqual(once, grid.snapshot())
        self.assertEqual(grid.count(Grid.EMPTY), 4)
        self.assertEqual(grid.get(0, 0), Grid.WALL)

    def test_reset(self):
        grid = Grid(5, 5)
        grid.set(1, 1, Grid.EMPTY)
        grid.set(2, 2, -3)
        grid.reset()
        self.assertEqual(grid.count(Grid.WALL), 25)

    def test_snapshot_is_a_copy(self):
        grid = Grid(3, 3)
        snap = grid.snapshot()
        snap[1][1] = Grid.EMPTY
        self.assertEqual(grid.get(1, 1), Grid.WALL)

        grid.set(1, 1, Grid.PATH)
        self.assertEqual(snap[1][1], Grid.EMPTY)

        clone = grid.copy()
        clone.set(1, 1, Grid.EMPTY)
        self.assertEqual(grid.get(1, 1), Grid.PATH)

    def test_neighbors(self):
        grid = Grid(3, 3)
        # Fixed order: up, left, down, right
        self.assertEqual(list(grid.neighbors(1, 1)), [(0, 1), (1, 0), (2, 1), (1, 2)])

        # Corner cell (0,0) only has down and right
        self.assertEqual(list(grid.neighbors(0, 0)), [(1, 0), (0, 1)])

    def test_rooms(self):
        self.assertEqual(list(Grid.rooms(5, 5)), [(1, 1), (1, 3), (3, 1), (3, 3)])
        self.assertEqual(list(Grid.rooms(3, 3)), [(1, 1)])

    def test_load_cells_checks_size(self):
        grid = Grid(3, 3)
        with self.assertRaises(ValueError):
            grid.load_cells([Grid.EMPTY] * 4)

    def test_text_rendering(self):
        grid = Grid(3, 3)
        grid.set(1, 1, Grid.SOLUTION)
        self.assertEqual(str(grid), "███\n█*█\n███\n")

if __name__ == '__main__':
    unittest.main()
