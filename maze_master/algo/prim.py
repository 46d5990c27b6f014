from typing import List, Set, Tuple

from maze_master.core.grid import Grid
from maze_master.algo.base import Generator

# Offsets to the neighbouring room, paired with the wall in between
ROOM_STEPS = (((-2, 0), (-1, 0)), ((2, 0), (1, 0)), ((0, -2), (0, -1)), ((0, 2), (0, 1)))


class PrimsAlgorithm(Generator):
    def carve(self, rows: int, columns: int) -> bool:
        in_maze: Set[Tuple[int, int]] = set()

        # Frontier: List of (wall_row, wall_col, room1_row, room1_col, room2_row, room2_col)
        # A room can sit behind several frontier walls; stale entries are
        # re-validated when popped instead of being searched for on insert.
        frontier: List[Tuple[int, int, int, int, int, int]] = []

        def add_room(r, c) -> bool:
            in_maze.add((r, c))
            for (dr, dc), (wr, wc) in ROOM_STEPS:
                nr, nc = r + dr, c + dc
                if 0 < nr < rows - 1 and 0 < nc < columns - 1 and (nr, nc) not in in_maze:
                    frontier.append((r + wr, c + wc, r, c, nr, nc))
            return self._change(r, c, Grid.EMPTY, scale=0.25)

        start_r = 1 + self.rng.randrange((rows - 1) // 2) * 2
        start_c = 1 + self.rng.randrange((columns - 1) // 2) * 2
        if not add_room(start_r, start_c):
            return False

        while frontier:
            # Pick random wall, swap remove for O(1)
            idx = self.rng.randrange(len(frontier))
            wall = frontier[idx]
            frontier[idx] = frontier[-1]
            frontier.pop()

            wall_row, wall_col, r1, c1, r2, c2 = wall
            first_in = (r1, c1) in in_maze
            second_in = (r2, c2) in in_maze
            if first_in == second_in:
                if self.signals.stopped:
                    return False
                continue

            if not self._change(wall_row, wall_col, Grid.EMPTY):
                return False

            new_room = (r2, c2) if first_in else (r1, c1)
            if not add_room(*new_room):
                return False
        return True
