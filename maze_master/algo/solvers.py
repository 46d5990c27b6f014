import heapq
from collections import deque
from typing import Dict, List, Optional, Tuple

from maze_master.core.grid import Grid
from maze_master.algo.base import Solver

Coordinate = Tuple[int, int]


def reconstruct_path(parents: Dict[Coordinate, Optional[Coordinate]], end: Coordinate) -> List[Coordinate]:
    path = []
    curr = end
    while curr is not None:
        path.append(curr)
        curr = parents[curr]
    path.reverse()
    return path


class DepthFirstSearch(Solver):
    """
    Recursive backtracking, walked with an explicit stack.

    Entering an Empty cell marks it Path; a cell whose four neighbours all
    fail is marked Visited. Finds a path, not the shortest one.
    """

    def search(self, start: Coordinate, goal: Coordinate) -> bool:
        if not self.grid.is_empty(*start):
            return False

        if not self._enter(start, goal):
            return start == goal and self._found()

        # Stack of (cell, remaining neighbours)
        stack = [(start, self.grid.neighbors(*start))]

        while stack:
            if self.signals.stopped:
                return False

            cell, pending = stack[-1]
            nxt = next(pending, None)

            if nxt is None:
                stack.pop()
                if not self._backtrack(*cell):
                    return False
                continue

            if not self.grid.is_empty(*nxt):
                continue

            if not self._enter(nxt, goal):
                if nxt == goal:
                    return self._found()
                return False
            stack.append((nxt, self.grid.neighbors(*nxt)))

        return False

    def _enter(self, cell: Coordinate, goal: Coordinate) -> bool:
        """False when the walk should end here (goal reached or stopped)."""
        self.path.append(cell)
        keep_going = self._explore(*cell)
        return keep_going and cell != goal

    def _found(self) -> bool:
        self.listener.on_path_found(list(self.path))
        return True

    def _backtrack(self, row: int, col: int) -> bool:
        self.path.pop()
        return super()._backtrack(row, col)


class BreadthFirstSearch(Solver):
    def search(self, start: Coordinate, goal: Coordinate) -> bool:
        if not self.grid.is_empty(*start):
            return False

        parents: Dict[Coordinate, Optional[Coordinate]] = {start: None}
        queue = deque([start])
        if not self._explore(*start):
            return False

        while queue:
            current = queue.popleft()

            if current == goal:
                path = reconstruct_path(parents, goal)
                if not self.highlight(path):
                    return False
                self.path = path
                self.listener.on_path_found(list(path))
                return True

            for nr, nc in self.grid.neighbors(*current):
                if self.grid.is_empty(nr, nc):
                    parents[(nr, nc)] = current
                    queue.append((nr, nc))
                    if not self._explore(nr, nc):
                        return False

        return False


class AStar(Solver):
    def search(self, start: Coordinate, goal: Coordinate) -> bool:
        if not self.grid.is_walkable(*start):
            return False

        # Priority Queue: (f_score, tie, (row, col)); tie keeps equal f in FIFO order
        tie = 0
        open_set = [(self.heuristic(start, goal), tie, start)]
        g_score: Dict[Coordinate, int] = {start: 0}
        parents: Dict[Coordinate, Optional[Coordinate]] = {start: None}
        closed = set()

        while open_set:
            _, _, current = heapq.heappop(open_set)
            if current in closed:
                continue  # stale entry superseded by a better g
            closed.add(current)

            # Marked at pop time, unlike BFS which marks on enqueue
            if not self._explore(*current):
                return False

            if current == goal:
                path = reconstruct_path(parents, goal)
                if not self.highlight(path):
                    return False
                self.path = path
                self.listener.on_path_found(list(path))
                return True

            new_g = g_score[current] + 1
            for neighbor in self.grid.neighbors(*current):
                if neighbor in closed or not self.grid.is_walkable(*neighbor):
                    continue
                old_g = g_score.get(neighbor)
                if old_g is None or new_g < old_g:
                    g_score[neighbor] = new_g
                    parents[neighbor] = current
                    tie += 1
                    heapq.heappush(open_set, (new_g + self.heuristic(neighbor, goal), tie, neighbor))

        return False

    def heuristic(self, a: Coordinate, b: Coordinate) -> int:
        return abs(a[0] - b[0]) + abs(a[1] - b[1])


class Dijkstra(AStar):
    """ Dijkstra is just A* with h(n) = 0. """
    def heuristic(self, a, b):
        return 0
