import struct
from typing import Iterator, List, Sequence, Tuple

from maze_master.core.grid import Grid

Coordinate = Tuple[int, int]

# Event Types
EVT_CELL = 0x01
EVT_PATH = 0x02
EVT_GEN_DONE = 0x03
EVT_SOLVE_DONE = 0x04
EVT_STOPPED = 0x05

KIND_GENERATION = 0
KIND_SOLVING = 1


class GenerationListener:
    """Event sink for generation runs. Methods fire in mutation order."""

    def on_cell_changed(self, row: int, col: int, state: int):
        pass

    def on_step(self):
        pass

    def on_complete(self):
        pass


class SolvingListener:
    """Event sink for solving runs."""

    def on_cell_explored(self, row: int, col: int):
        pass

    def on_cell_backtracked(self, row: int, col: int):
        pass

    def on_path_found(self, path: List[Coordinate]):
        pass

    def on_complete(self, success: bool):
        pass


class MazeObserver:
    """
    External view of a MazeController. Called from the run's worker thread,
    so implementations must not assume they run on the UI thread.
    """

    def on_maze_changed(self, grid: Grid):
        pass

    def on_cell_changed(self, row: int, col: int, state: int):
        pass

    def on_refresh(self):
        pass

    def on_generation_started(self):
        pass

    def on_generation_completed(self):
        pass

    def on_generation_stopped(self):
        pass

    def on_solving_started(self):
        pass

    def on_path_found(self, path: List[Coordinate]):
        pass

    def on_solving_completed(self, solved: bool):
        pass

    def on_solving_stopped(self):
        pass

    def on_run_failed(self, kind: str, error: BaseException):
        pass


class ObserverGroup(MazeObserver):
    """Forwards every callback to each observer in order."""

    def __init__(self, *observers: MazeObserver):
        self.observers = list(observers)

    def on_maze_changed(self, grid: Grid):
        for observer in self.observers:
            observer.on_maze_changed(grid)

    def on_cell_changed(self, row: int, col: int, state: int):
        for observer in self.observers:
            observer.on_cell_changed(row, col, state)

    def on_refresh(self):
        for observer in self.observers:
            observer.on_refresh()

    def on_generation_started(self):
        for observer in self.observers:
            observer.on_generation_started()

    def on_generation_completed(self):
        for observer in self.observers:
            observer.on_generation_completed()

    def on_generation_stopped(self):
        for observer in self.observers:
            observer.on_generation_stopped()

    def on_solving_started(self):
        for observer in self.observers:
            observer.on_solving_started()

    def on_path_found(self, path: List[Coordinate]):
        for observer in self.observers:
            observer.on_path_found(path)

    def on_solving_completed(self, solved: bool):
        for observer in self.observers:
            observer.on_solving_completed(solved)

    def on_solving_stopped(self):
        for observer in self.observers:
            observer.on_solving_stopped()

    def on_run_failed(self, kind: str, error: BaseException):
        for observer in self.observers:
            observer.on_run_failed(kind, error)


class EventWriter(MazeObserver):
    """Writes every forwarded controller event to a binary log."""

    def __init__(self, filename: str):
        self.filename = filename
        self.file = open(filename, "wb")
        self.header_written = False

    def write_header(self, rows: int, columns: int):
        # Header: Magic "MAZELOG" + Rows (4b) + Columns (4b)
        self.file.write(b"MAZELOG")
        self.file.write(struct.pack(">II", rows, columns))
        self.header_written = True

    def on_maze_changed(self, grid: Grid):
        # One log holds one maze
        if not self.header_written:
            self.write_header(grid.rows, grid.columns)

    def on_cell_changed(self, row: int, col: int, state: int):
        # 1b type + 2b row + 2b col + 4b signed state (room markers are negative)
        self.file.write(struct.pack(">BHHi", EVT_CELL, row, col, state))

    def on_path_found(self, path: Sequence[Coordinate]):
        self.file.write(struct.pack(">BI", EVT_PATH, len(path)))
        for row, col in path:
            self.file.write(struct.pack(">HH", row, col))

    def on_generation_completed(self):
        self.file.write(struct.pack(">B", EVT_GEN_DONE))

    def on_solving_completed(self, solved: bool):
        self.file.write(struct.pack(">BB", EVT_SOLVE_DONE, int(solved)))

    def on_generation_stopped(self):
        self.file.write(struct.pack(">BB", EVT_STOPPED, KIND_GENERATION))

    def on_solving_stopped(self):
        self.file.write(struct.pack(">BB", EVT_STOPPED, KIND_SOLVING))

    def close(self):
        if self.file:
            self.file.close()
            self.file = None


class EventReader:
    def __init__(self, filename: str):
        self.filename = filename
        self.file = open(filename, "rb")
        self.rows = 0
        self.columns = 0

    def read_header(self) -> Tuple[int, int]:
        magic = self.file.read(7)
        if magic != b"MAZELOG":
            raise ValueError("Invalid event log file")
        self.rows, self.columns = struct.unpack(">II", self._read(8))
        return self.rows, self.columns

    def _read(self, size: int) -> bytes:
        data = self.file.read(size)
        if len(data) != size:
            raise ValueError("Truncated event log")
        return data

    def stream_events(self) -> Iterator[Tuple[int, Tuple]]:
        while True:
            type_byte = self.file.read(1)
            if not type_byte:
                break

            type_code = ord(type_byte)

            if type_code == EVT_CELL:
                yield (type_code, struct.unpack(">HHi", self._read(8)))

            elif type_code == EVT_PATH:
                (length,) = struct.unpack(">I", self._read(4))
                path = [struct.unpack(">HH", self._read(4)) for _ in range(length)]
                yield (type_code, (path,))

            elif type_code == EVT_GEN_DONE:
                yield (type_code, ())

            elif type_code in (EVT_SOLVE_DONE, EVT_STOPPED):
                (value,) = struct.unpack(">B", self._read(1))
                yield (type_code, (value,))

            else:
                raise ValueError(f"Unknown event type 0x{type_code:02x}")

    def close(self):
        if self.file:
            self.file.close()
            self.file = None


def replay_events(reader: EventReader, grid: Grid) -> Iterator[Tuple[int, Tuple]]:
    """
    Applies logged cell changes to grid as it iterates.
    Path records only highlight; cell records carry the full state.
    """
    for type_code, data in reader.stream_events():
        if type_code == EVT_CELL:
            row, col, state = data
            grid.set(row, col, state)
        yield type_code, data
