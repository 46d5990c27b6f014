import unittest
import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from maze_master.algo.backtracker import RecursiveBacktracker

from maze_master.core.grid import Grid

from maze_master.core.analysis import MazeAnalyzer

class TestAnalysis(unittest.TestCase):
    def test_generated_maze_stats(self):
        grid = Grid(21, 21)
        RecursiveBacktracker(grid, seed=42, delay_ms=0).generate()

        stats = MazeAnalyzer.calculate_stats(grid)
        self.assertEqual(stats["rooms"], 100)
        self.assertEqual(stats["walls_removed"], 99)
        self.assertEqual(stats["carved"], 199)
        self.assertGreater(stats["dead_ends"], 0)
        self.assertEqual(stats["dead_ends"] + stats["corridors"] + stats["junctions"], stats["carved"])

    def test_cycle_is_not_perfect(self):
        grid = Grid(5, 5)
        # Ring around the centre wall: connected, one loop
        for r in range(1, 4):
            for c in range(1, 4):
                if (r, c) != (2, 2):
                    grid.set(r, c, Grid.EMPTY)
        self.assertTrue(MazeAnalyzer.is_connected(grid))
        self.assertEqual(MazeAnalyzer.edge_count(grid), 8)
        self.assertFalse(MazeAnalyzer.is_perfect(grid))

    def test_disconnected_is_not_perfect(self):
        grid = Grid(5, 5)
        grid.set(1, 1, Grid.EMPTY)
        grid.set(3, 3, Grid.EMPTY)
        self.assertFalse(MazeAnalyzer.is_connected(grid))
        self.assertFalse(MazeAnalyzer.is_perfect(grid))

    def test_blank_grid(self):
        grid = Grid(5, 5)
        self.assertTrue(MazeAnalyzer.is_connected(grid))
        self.assertFalse(MazeAnalyzer.is_perfect(grid))
        self.assertEqual(MazeAnalyzer.calculate_stats(grid)["dead_end_percent"], 0)

    def test_room_markers_count_as_carved(self):
        grid = Grid(5, 5)
        grid.set(1, 1, -1)
        grid.set(1, 2, -1)
        grid.set(1, 3, -1)
        self.assertEqual(len(MazeAnalyzer.carved_cells(grid)), 3)
        self.assertTrue(MazeAnalyzer.is_perfect(grid))
        self.assertEqual(MazeAnalyzer.walls_removed(grid), 1)

if __name__ == '__main__':
    unittest.main()
