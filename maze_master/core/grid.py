from array import array
from typing import Iterator, List, Tuple

MIN_DIMENSION = 3


class InvalidDimensionsError(ValueError):
    pass


class Grid:
    # Cell States
    WALL = 1
    PATH = 2
    EMPTY = 3
    VISITED = 4
    START = 5
    GOAL = 6
    SOLUTION = 7
    # Negative values are room markers (generation only)

    # Direction Helpers (up, left, down, right)
    DIRECTIONS = ((-1, 0), (0, -1), (1, 0), (0, 1))

    SOLUTION_STATES = (PATH, VISITED, SOLUTION)

    GLYPHS = {WALL: "█", EMPTY: " ", PATH: "·", VISITED: "x", SOLUTION: "*"}

    __slots__ = ('rows', 'columns', 'cells', 'start', 'goal')

    def __init__(self, rows: int, columns: int):
        if rows < MIN_DIMENSION or columns < MIN_DIMENSION:
            raise InvalidDimensionsError(
                f"Maze must be at least {MIN_DIMENSION}x{MIN_DIMENSION}, got {rows}x{columns}")
        self.rows = rows
        self.columns = columns
        # 'i' (signed int) so room markers fit
        self.cells = array('i', [self.WALL] * (rows * columns))
        self.start = (1, 1)
        self.goal = (rows - 2, columns - 2)

    @staticmethod
    def is_room_marker(value: int) -> bool:
        return value < 0

    def get_index(self, row: int, col: int) -> int:
        if 0 <= row < self.rows and 0 <= col < self.columns:
            return row * self.columns + col
        raise IndexError(f"Coordinate ({row}, {col}) out of bounds")

    def is_valid_position(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.columns

    def get(self, row: int, col: int) -> int:
        """Out-of-bounds reads are walls."""
        if 0 <= row < self.rows and 0 <= col < self.columns:
            return self.cells[row * self.columns + col]
        return self.WALL

    def set(self, row: int, col: int, state: int):
        if 0 <= row < self.rows and 0 <= col < self.columns:
            self.cells[row * self.columns + col] = state

    def is_walkable(self, row: int, col: int) -> bool:
        return self.is_valid_position(row, col) and self.cells[row * self.columns + col] != self.WALL

    def is_empty(self, row: int, col: int) -> bool:
        return self.is_valid_position(row, col) and self.cells[row * self.columns + col] == self.EMPTY

    def reset(self):
        for i in range(len(self.cells)):
            self.cells[i] = self.WALL

    def reset_solution(self):
        for i, value in enumerate(self.cells):
            if value in self.SOLUTION_STATES:
                self.cells[i] = self.EMPTY

    def neighbors(self, row: int, col: int) -> Iterator[Tuple[int, int]]:
        """
        Yields in-bounds 4-neighbours in a fixed order: up, left, down, right.
        Does NOT check cell state.
        """
        for dr, dc in self.DIRECTIONS:
            nr, nc = row + dr, col + dc
            if 0 <= nr < self.rows and 0 <= nc < self.columns:
                yield (nr, nc)

    @staticmethod
    def rooms(rows: int, columns: int) -> Iterator[Tuple[int, int]]:
        """Odd-coordinate room positions for a carving area of rows x columns."""
        for r in range(1, rows - 1, 2):
            for c in range(1, columns - 1, 2):
                yield (r, c)

    def count(self, state: int) -> int:
        return sum(1 for value in self.cells if value == state)

    def snapshot(self) -> List[List[int]]:
        """Independent copy of the cells as a list of rows."""
        w = self.columns
        return [self.cells[r * w:(r + 1) * w].tolist() for r in range(self.rows)]

    def copy(self) -> 'Grid':
        other = Grid(self.rows, self.columns)
        other.cells = array('i', self.cells)
        return other

    def load_cells(self, values):
        data = array('i', values)
        if len(data) != self.rows * self.columns:
            raise ValueError(
                f"Expected {self.rows * self.columns} cells, got {len(data)}")
        self.cells = data

    def __str__(self) -> str:
        lines = []
        for row in self.snapshot():
            lines.append("".join(
                " " if v < 0 else self.GLYPHS.get(v, "?") for v in row))
        return "\n".join(lines) + "\n"
