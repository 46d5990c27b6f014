from array import array
from typing import List, Tuple

from maze_master.core.grid import Grid
from maze_master.algo.base import Generator

# (wall_row, wall_col, room1_row, room1_col, room2_row, room2_col)
Wall = Tuple[int, int, int, int, int, int]


class UnionFind:
    """Disjoint sets over row-major cell indices. Union by rank + path compression."""

    def __init__(self, rows: int, columns: int):
        self.columns = columns
        size = rows * columns
        self.parent = array('i', range(size))
        self.rank = array('B', [0] * size)

    def index(self, row: int, col: int) -> int:
        return row * self.columns + col

    def find(self, row: int, col: int) -> int:
        root = self.index(row, col)
        while self.parent[root] != root:
            root = self.parent[root]

        # Path compression
        node = self.index(row, col)
        while self.parent[node] != root:
            self.parent[node], node = root, self.parent[node]
        return root

    def union(self, row1: int, col1: int, row2: int, col2: int) -> bool:
        """Returns False if both cells were already in the same set."""
        root1 = self.find(row1, col1)
        root2 = self.find(row2, col2)
        if root1 == root2:
            return False

        if self.rank[root1] < self.rank[root2]:
            self.parent[root1] = root2
        elif self.rank[root1] > self.rank[root2]:
            self.parent[root2] = root1
        else:
            self.parent[root2] = root1
            self.rank[root1] += 1
        return True

    def connected(self, row1: int, col1: int, row2: int, col2: int) -> bool:
        return self.find(row1, col1) == self.find(row2, col2)


class KruskalsAlgorithm(Generator):
    def carve(self, rows: int, columns: int) -> bool:
        sets = UnionFind(rows, columns)

        for r, c in Grid.rooms(rows, columns):
            if not self._change(r, c, Grid.EMPTY, scale=0.125):
                return False

        walls = self.all_walls(rows, columns)
        self.rng.shuffle(walls)

        for wall_row, wall_col, r1, c1, r2, c2 in walls:
            if self.signals.stopped:
                return False
            if sets.connected(r1, c1, r2, c2):
                continue

            sets.union(r1, c1, r2, c2)
            if not self._change(wall_row, wall_col, Grid.EMPTY):
                return False
        return True

    @staticmethod
    def all_walls(rows: int, columns: int) -> List[Wall]:
        walls: List[Wall] = []
        for r, c in Grid.rooms(rows, columns):
            if r < rows - 2:
                walls.append((r + 1, c, r, c, r + 2, c))
            if c < columns - 2:
                walls.append((r, c + 1, r, c, r, c + 2))
        return walls
