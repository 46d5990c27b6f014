from typing import List, Tuple

from maze_master.core.grid import Grid
from maze_master.algo.base import Generator


class RecursiveBacktracker(Generator):
    """
    Randomized spanning tree by wall shuffling.

    Every room starts with its own negative marker. Walls are visited in random
    order and torn down only when the rooms on either side carry different
    markers; tearing one down floods one room's marker into the other so the
    pair is permanently connected.
    """

    def carve(self, rows: int, columns: int) -> bool:
        walls: List[Tuple[int, int]] = []

        room_count = 0
        for r, c in Grid.rooms(rows, columns):
            room_count += 1
            if not self._change(r, c, -room_count, scale=0.25):
                return False

            # Wall below and wall to the right, when a room exists there
            if r < rows - 2:
                walls.append((r + 1, c))
            if c < columns - 2:
                walls.append((r, c + 1))

        self.rng.shuffle(walls)

        for row, col in walls:
            if not self.tear_down(row, col):
                return False

        # Seal: no room markers survive a completed run
        for r in range(1, rows - 1):
            for c in range(1, columns - 1):
                if Grid.is_room_marker(self.grid.get(r, c)):
                    if not self._change(r, c, Grid.EMPTY, scale=0):
                        return False
        return True

    def tear_down(self, row: int, col: int) -> bool:
        if row % 2 == 1:
            # Odd row: wall sits between a left and a right room
            first, second = (row, col - 1), (row, col + 1)
        else:
            first, second = (row - 1, col), (row + 1, col)

        old = self.grid.get(*first)
        new = self.grid.get(*second)

        if old == new:
            # Already connected; removing this wall would close a loop
            return not self.signals.stopped

        self.fill(first[0], first[1], old, new)
        return self._change(row, col, new)

    def fill(self, row: int, col: int, old: int, new: int):
        """Flood fill with an explicit stack (no recursion limit on big mazes)."""
        stack = [(row, col)]
        while stack:
            r, c = stack.pop()
            if self.grid.get(r, c) != old:
                continue
            self.grid.set(r, c, new)
            stack.extend(self.grid.neighbors(r, c))
