import struct
import json
import sys
import zlib
from typing import Dict, Any, Tuple
from array import array
from maze_master.core.grid import Grid

class MazeSerializer:
    MAGIC = b"MZMS"
    VERSION = 1

    # Flags
    FLAG_COMPRESSED = 1

    @staticmethod
    def save(grid: Grid, filepath: str, meta: Dict[str, Any] = None, compress=False):
        """
        Saves the maze to a binary file.
        Format (little-endian):
        - MAGIC (4 bytes)
        - VERSION (1 byte)
        - FLAGS (1 byte)
        - ROWS (4 bytes)
        - COLUMNS (4 bytes)
        - META_LEN (2 bytes)
        - META_JSON (META_LEN bytes)
        - DATA_LEN (4 bytes)
        - DATA (int32 per cell, zlib-compressed if flagged)
        """
        if meta is None:
            meta = {}

        flags = 0
        if compress:
            flags |= MazeSerializer.FLAG_COMPRESSED

        meta_bytes = json.dumps(meta).encode('utf-8')

        cells = array('i', grid.cells)
        if sys.byteorder != "little":
            cells.byteswap()
        data = cells.tobytes()
        if compress:
            data = zlib.compress(data)

        with open(filepath, "wb") as f:
            f.write(MazeSerializer.MAGIC)
            f.write(struct.pack("<BB", MazeSerializer.VERSION, flags))
            f.write(struct.pack("<II", grid.rows, grid.columns))
            f.write(struct.pack("<H", len(meta_bytes)))
            f.write(meta_bytes)
            f.write(struct.pack("<I", len(data)))
            f.write(data)

    @staticmethod
    def _read(f, size: int) -> bytes:
        data = f.read(size)
        if len(data) != size:
            raise ValueError("Truncated maze file")
        return data

    @staticmethod
    def load(filepath: str) -> Tuple[Grid, Dict[str, Any]]:
        with open(filepath, "rb") as f:
            magic = f.read(4)
            if magic != MazeSerializer.MAGIC:
                raise ValueError("Invalid file format")

            version, flags = struct.unpack("<BB", MazeSerializer._read(f, 2))
            if version != MazeSerializer.VERSION:
                raise ValueError(f"Unsupported maze file version {version}")

            rows, columns = struct.unpack("<II", MazeSerializer._read(f, 8))
            meta_len = struct.unpack("<H", MazeSerializer._read(f, 2))[0]
            meta = json.loads(MazeSerializer._read(f, meta_len).decode('utf-8'))

            data_len = struct.unpack("<I", MazeSerializer._read(f, 4))[0]
            data = MazeSerializer._read(f, data_len)
            if flags & MazeSerializer.FLAG_COMPRESSED:
                try:
                    data = zlib.decompress(data)
                except zlib.error as e:
                    raise ValueError(f"Corrupt maze data: {e}") from e

            cells = array('i')
            cells.frombytes(data)
            if sys.byteorder != "little":
                cells.byteswap()

            grid = Grid(rows, columns)
            grid.load_cells(cells)
            return grid, meta
