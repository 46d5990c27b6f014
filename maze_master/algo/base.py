import random
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from maze_master.core.events import GenerationListener, SolvingListener
from maze_master.core.grid import Grid
from maze_master.core.signals import RunSignals

DEFAULT_DELAY_MS = 30


class _Engine:
    def __init__(self, grid: Grid, signals: Optional[RunSignals], delay_ms: int):
        self.grid = grid
        self.signals = signals if signals is not None else RunSignals()
        self.delay_ms = max(0, delay_ms)
        self.step_count = 0
        # Set once the completion event has gone out
        self.completed = False

    def pause_point(self, scale: float = 1.0) -> bool:
        """Stop / pause / animation-delay checkpoint. False means stop now."""
        self.step_count += 1
        return self.signals.checkpoint(self.delay_ms * scale / 1000.0)


class Generator(_Engine, ABC):
    def __init__(self, grid: Grid, listener: Optional[GenerationListener] = None,
                 signals: Optional[RunSignals] = None, seed: int = None,
                 delay_ms: int = DEFAULT_DELAY_MS):
        super().__init__(grid, signals, delay_ms)
        self.listener = listener if listener is not None else GenerationListener()
        self.seed = seed
        self.rng = random.Random(seed)

    @staticmethod
    def odd(dimension: int) -> int:
        return dimension - 1 if dimension % 2 == 0 else dimension

    def generate(self) -> bool:
        """
        Carves a perfect maze into the grid in place.
        Returns False if the run was stopped (the grid keeps whatever was carved).
        """
        self.completed = False
        self.grid.reset()
        rows = self.odd(self.grid.rows)
        columns = self.odd(self.grid.columns)

        if not self.carve(rows, columns):
            return False

        self.completed = True
        self.listener.on_complete()
        return True

    @abstractmethod
    def carve(self, rows: int, columns: int) -> bool:
        pass

    def _change(self, row: int, col: int, state: int, scale: float = 1.0) -> bool:
        self.grid.set(row, col, state)
        self.listener.on_cell_changed(row, col, state)
        self.listener.on_step()
        return self.pause_point(scale)


class Solver(_Engine, ABC):
    def __init__(self, grid: Grid, listener: Optional[SolvingListener] = None,
                 signals: Optional[RunSignals] = None, delay_ms: int = DEFAULT_DELAY_MS):
        super().__init__(grid, signals, delay_ms)
        self.listener = listener if listener is not None else SolvingListener()
        self.path: List[Tuple[int, int]] = []
        self.visited_count = 0

    def solve(self) -> bool:
        self.completed = False
        self.grid.reset_solution()
        self.path = []
        self.visited_count = 0

        found = self.search(self.grid.start, self.grid.goal)

        if not found and self.signals.stopped:
            # Cancelled mid-flight: no completion event
            return False

        self.completed = True
        self.listener.on_complete(found)
        return found

    @abstractmethod
    def search(self, start: Tuple[int, int], goal: Tuple[int, int]) -> bool:
        pass

    def _explore(self, row: int, col: int, state: int = Grid.PATH) -> bool:
        self.grid.set(row, col, state)
        if state == Grid.PATH:
            self.visited_count += 1
        self.listener.on_cell_explored(row, col)
        return self.pause_point()

    def _backtrack(self, row: int, col: int) -> bool:
        self.grid.set(row, col, Grid.VISITED)
        self.listener.on_cell_backtracked(row, col)
        return self.pause_point()

    def highlight(self, path: List[Tuple[int, int]]) -> bool:
        """Re-marks the solution path; returns False if stopped part way."""
        for row, col in path:
            if not self._explore(row, col, Grid.SOLUTION):
                return False
        return True
