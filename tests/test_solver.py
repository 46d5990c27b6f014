import unittest
import sys
import os
from collections import deque

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from maze_master.core.grid import Grid
from maze_master.core.events import SolvingListener
from maze_master.core.signals import RunSignals
from maze_master.algo.backtracker import RecursiveBacktracker
from maze_master.algo.kruskal import KruskalsAlgorithm
from maze_master.algo.prim import PrimsAlgorithm
from maze_master.algo.solvers import AStar, BreadthFirstSearch, DepthFirstSearch, Dijkstra

SOLVERS = [DepthFirstSearch, BreadthFirstSearch, AStar, Dijkstra]


class RecordingListener(SolvingListener):
    def __init__(self):
        self.events = []

    def on_cell_explored(self, row, col):
        self.events.append(("explored", (row, col)))

    def on_cell_backtracked(self, row, col):
        self.events.append(("backtracked", (row, col)))

    def on_path_found(self, path):
        self.events.append(("path", list(path)))

    def on_complete(self, success):
        self.events.append(("complete", success))

    def of(self, kind):
        return [data for k, data in self.events if k == kind]


def generated(rows=21, cols=21, seed=42, cls=RecursiveBacktracker):
    grid = Grid(rows, cols)
    cls(grid, seed=seed, delay_ms=0).generate()
    return grid


def distances(grid, start):
    dist = {start: 0}
    queue = deque([start])
    while queue:
        cell = queue.popleft()
        for n in grid.neighbors(*cell):
            if n not in dist and grid.is_walkable(*n):
                dist[n] = dist[cell] + 1
                queue.append(n)
    return dist


def solve(cls, grid, listener=None, signals=None):
    solver = cls(grid, listener=listener, signals=signals, delay_ms=0)
    return solver, solver.solve()


class TestSolvers(unittest.TestCase):
    def create_simple_maze(self):
        # 5x5 grid, single corridor (1,1) -> (1,3) -> (3,3)
        grid = Grid(5, 5)
        for cell in [(1, 1), (1, 2), (1, 3), (2, 3), (3, 3)]:
            grid.set(*cell, Grid.EMPTY)
        return grid

    def create_open_room(self):
        grid = Grid(7, 7)
        for r in range(1, 6):
            for c in range(1, 6):
                grid.set(r, c, Grid.EMPTY)
        return grid

    def assert_valid_path(self, grid, path):
        self.assertEqual(path[0], grid.start)
        self.assertEqual(path[-1], grid.goal)
        for (r1, c1), (r2, c2) in zip(path, path[1:]):
            self.assertEqual(abs(r1 - r2) + abs(c1 - c2), 1)
            self.assertTrue(grid.is_walkable(r2, c2))

    def test_simple_corridor(self):
        for cls in SOLVERS:
            with self.subTest(algo=cls.__name__):
                grid = self.create_simple_maze()
                solver, found = solve(cls, grid)
                self.assertTrue(found)
                self.assertEqual(solver.path, [(1, 1), (1, 2), (1, 3), (2, 3), (3, 3)])

    def test_reachability_on_generated_mazes(self):
        for gen in [RecursiveBacktracker, KruskalsAlgorithm, PrimsAlgorithm]:
            for cls in SOLVERS:
                with self.subTest(gen=gen.__name__, algo=cls.__name__):
                    grid = generated(17, 25, seed=3, cls=gen)
                    solver, found = solve(cls, grid)
                    self.assertTrue(found)
                    self.assert_valid_path(grid, solver.path)

    def test_shortest_path_optimality(self):
        for seed in range(5):
            grid = generated(21, 21, seed=seed)
            bfs, _ = solve(BreadthFirstSearch, grid)
            astar, _ = solve(AStar, grid)
            dijkstra, _ = solve(Dijkstra, grid)
            dfs, _ = solve(DepthFirstSearch, grid)
            self.assertEqual(len(bfs.path), len(astar.path))
            self.assertEqual(len(bfs.path), len(dijkstra.path))
            self.assertGreaterEqual(len(dfs.path), len(bfs.path))

    def test_dfs_not_shortest_in_open_room(self):
        grid = self.create_open_room()
        bfs, _ = solve(BreadthFirstSearch, grid)
        dfs, found = solve(DepthFirstSearch, grid)
        self.assertTrue(found)
        self.assertEqual(len(bfs.path), 9)
        self.assertGreaterEqual(len(dfs.path), len(bfs.path))
        self.assert_valid_path(grid, dfs.path)

    def test_trivial_solve(self):
        grid = Grid(3, 3)
        RecursiveBacktracker(grid, delay_ms=0).generate()
        self.assertEqual(grid.start, grid.goal)
        for cls in SOLVERS:
            with self.subTest(algo=cls.__name__):
                listener = RecordingListener()
                solver, found = solve(cls, grid, listener)
                self.assertTrue(found)
                self.assertEqual(solver.path, [(1, 1)])
                self.assertEqual(listener.of("path"), [[(1, 1)]])

    def test_unsolvable_guard(self):
        for cls in SOLVERS:
            with self.subTest(algo=cls.__name__):
                grid = generated(15, 15, seed=1)
                for cell in grid.neighbors(*grid.start):
                    grid.set(*cell, Grid.WALL)
                listener = RecordingListener()
                solver, found = solve(cls, grid, listener)
                self.assertFalse(found)
                self.assertEqual(solver.path, [])
                self.assertEqual(listener.of("complete"), [False])
                self.assertEqual(listener.of("path"), [])

    def test_no_path_on_blank_grid(self):
        for cls in SOLVERS:
            grid = Grid(5, 5) # All walls
            listener = RecordingListener()
            _, found = solve(cls, grid, listener)
            self.assertFalse(found)
            self.assertEqual(listener.events, [("complete", False)])

    def test_dfs_events(self):
        grid = generated(15, 15, seed=2)
        listener = RecordingListener()
        solver, found = solve(DepthFirstSearch, grid, listener)
        self.assertTrue(found)

        self.assertEqual(listener.events[-1], ("complete", True))
        self.assertEqual(listener.events[-2], ("path", solver.path))
        self.assertEqual(listener.of("explored")[0], grid.start)

        for cell in solver.path:
            self.assertEqual(grid.get(*cell), Grid.PATH)
        for cell in listener.of("backtracked"):
            self.assertEqual(grid.get(*cell), Grid.VISITED)
            self.assertNotIn(cell, solver.path)

        # Every cell is entered once, and either stays on the path or is backtracked
        explored = listener.of("explored")
        self.assertEqual(len(explored), len(set(explored)))
        self.assertEqual(len(explored), len(solver.path) + len(listener.of("backtracked")))

    def test_dfs_neighbour_order(self):
        # Up, left, down, right: from (1,1) the first open neighbour tried is down
        grid = self.create_open_room()
        listener = RecordingListener()
        solve(DepthFirstSearch, grid, listener)
        self.assertEqual(listener.of("explored")[:3], [(1, 1), (2, 1), (3, 1)])

    def test_highlight_and_events_bfs_astar(self):
        for cls in [BreadthFirstSearch, AStar]:
            with self.subTest(algo=cls.__name__):
                grid = generated(15, 21, seed=6)
                listener = RecordingListener()
                solver, found = solve(cls, grid, listener)
                self.assertTrue(found)

                kinds = [k for k, _ in listener.events]
                self.assertEqual(kinds[-2:], ["path", "complete"])
                self.assertEqual(listener.of("complete"), [True])
                self.assertEqual(listener.of("backtracked"), [])

                # The last len(path) explored events re-mark the path in order
                explored = listener.of("explored")
                self.assertEqual(explored[-len(solver.path):], solver.path)
                for cell in solver.path:
                    self.assertEqual(grid.get(*cell), Grid.SOLUTION)

    def test_bfs_explores_in_level_order(self):
        grid = generated(21, 21, seed=9)
        listener = RecordingListener()
        solver, _ = solve(BreadthFirstSearch, grid, listener)
        dist = distances(grid, grid.start)

        search = listener.of("explored")[:-len(solver.path)]
        levels = [dist[cell] for cell in search]
        self.assertEqual(levels, sorted(levels))

    def test_astar_explores_by_f_score(self):
        grid = generated(21, 21, seed=9)
        listener = RecordingListener()
        solver, _ = solve(AStar, grid, listener)
        dist = distances(grid, grid.start)
        goal = grid.goal

        search = listener.of("explored")[:-len(solver.path)]
        f_scores = [dist[(r, c)] + abs(r - goal[0]) + abs(c - goal[1]) for r, c in search]
        # Consistent heuristic: popped f never decreases
        self.assertEqual(f_scores, sorted(f_scores))
        self.assertEqual(search[-1], goal)

    def test_resolve_same_maze(self):
        grid = generated(15, 15, seed=4)
        for cls in SOLVERS:
            with self.subTest(algo=cls.__name__):
                first, _ = solve(cls, grid)
                before = grid.snapshot()
                second, found = solve(cls, grid)
                self.assertTrue(found)
                self.assertEqual(first.path, second.path)
                self.assertEqual(before, grid.snapshot())

    def test_stop_before_start(self):
        for cls in SOLVERS:
            with self.subTest(algo=cls.__name__):
                grid = generated(11, 11)
                signals = RunSignals()
                signals.request_stop()
                listener = RecordingListener()
                _, found = solve(cls, grid, listener, signals)
                self.assertFalse(found)
                self.assertEqual(listener.of("complete"), [])

    def test_stop_mid_solve_keeps_marks(self):
        grid = generated(21, 21, seed=5)
        signals = RunSignals()

        class StopAfter(RecordingListener):
            def on_cell_explored(self, row, col):
                super().on_cell_explored(row, col)
                if len(self.of("explored")) == 5:
                    signals.request_stop()

        listener = StopAfter()
        _, found = solve(BreadthFirstSearch, grid, listener, signals)
        self.assertFalse(found)
        self.assertEqual(listener.of("complete"), [])
        self.assertEqual(grid.count(Grid.PATH), 5)

    def test_completed_flag_tracks_completion_event(self):
        grid = generated(11, 11)
        solver = DepthFirstSearch(grid, delay_ms=0)
        self.assertFalse(solver.completed)
        self.assertTrue(solver.solve())
        self.assertTrue(solver.completed)

        # An exhausted search still completes
        for cell in grid.neighbors(*grid.start):
            grid.set(*cell, Grid.WALL)
        self.assertFalse(solver.solve())
        self.assertTrue(solver.completed)

        signals = RunSignals()
        signals.request_stop()
        stopped = BreadthFirstSearch(grid, signals=signals, delay_ms=0)
        self.assertFalse(stopped.solve())
        self.assertFalse(stopped.completed)

if __name__ == '__main__':
    unittest.main()
