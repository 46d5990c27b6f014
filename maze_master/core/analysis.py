from collections import deque
from typing import Dict, List, Tuple

from maze_master.core.grid import Grid


class MazeAnalyzer:
    """
    Structural checks over the carved-cell subgraph.
    Any non-Wall cell counts as carved, including room markers left behind
    by a stopped generation.
    """

    @staticmethod
    def carved_cells(grid: Grid) -> List[Tuple[int, int]]:
        return [(r, c) for r in range(grid.rows) for c in range(grid.columns)
                if grid.get(r, c) != Grid.WALL]

    @staticmethod
    def edge_count(grid: Grid) -> int:
        # Count each adjacency once: look right and down only
        edges = 0
        for r in range(grid.rows):
            for c in range(grid.columns):
                if grid.get(r, c) == Grid.WALL:
                    continue
                if grid.is_walkable(r, c + 1):
                    edges += 1
                if grid.is_walkable(r + 1, c):
                    edges += 1
        return edges

    @staticmethod
    def room_count(grid: Grid) -> int:
        return sum(1 for r, c in MazeAnalyzer.carved_cells(grid) if r % 2 == 1 and c % 2 == 1)

    @staticmethod
    def walls_removed(grid: Grid) -> int:
        return len(MazeAnalyzer.carved_cells(grid)) - MazeAnalyzer.room_count(grid)

    @staticmethod
    def is_connected(grid: Grid) -> bool:
        carved = MazeAnalyzer.carved_cells(grid)
        if not carved:
            return True

        seen = {carved[0]}
        queue = deque([carved[0]])
        while queue:
            r, c = queue.popleft()
            for n in grid.neighbors(r, c):
                if n not in seen and grid.is_walkable(*n):
                    seen.add(n)
                    queue.append(n)
        return len(seen) == len(carved)

    @staticmethod
    def is_perfect(grid: Grid) -> bool:
        """Connected and acyclic: a tree has exactly one more node than edges."""
        carved = MazeAnalyzer.carved_cells(grid)
        if not carved:
            return False
        return MazeAnalyzer.is_connected(grid) and len(carved) == MazeAnalyzer.edge_count(grid) + 1

    @staticmethod
    def calculate_stats(grid: Grid) -> Dict[str, float]:
        dead_ends = 0
        corridors = 0
        junctions = 0

        carved = MazeAnalyzer.carved_cells(grid)
        for r, c in carved:
            exits = sum(1 for n in grid.neighbors(r, c) if grid.is_walkable(*n))
            if exits == 1:
                dead_ends += 1
            elif exits == 2:
                corridors += 1
            elif exits >= 3:
                junctions += 1

        total = len(carved)
        return {
            "carved": total,
            "rooms": MazeAnalyzer.room_count(grid),
            "walls_removed": MazeAnalyzer.walls_removed(grid),
            "dead_ends": dead_ends,
            "corridors": corridors,
            "junctions": junctions,
            "dead_end_percent": (dead_ends / total) * 100 if total > 0 else 0,
        }
