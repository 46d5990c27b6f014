import logging
from enum import Enum
from typing import Optional, Type, Union

from maze_master.core.events import GenerationListener, SolvingListener
from maze_master.core.grid import Grid
from maze_master.core.signals import RunSignals
from maze_master.algo.base import DEFAULT_DELAY_MS, Generator, Solver
from maze_master.algo.backtracker import RecursiveBacktracker
from maze_master.algo.kruskal import KruskalsAlgorithm
from maze_master.algo.prim import PrimsAlgorithm
from maze_master.algo.solvers import AStar, BreadthFirstSearch, DepthFirstSearch, Dijkstra

logger = logging.getLogger(__name__)


class GenerationAlgorithm(Enum):
    RECURSIVE_BACKTRACKING = "dfs"
    KRUSKAL = "kruskal"
    PRIM = "prim"

    @property
    def label(self) -> str:
        return _GENERATION_LABELS[self]


class SolvingAlgorithm(Enum):
    DFS = "dfs"
    BFS = "bfs"
    ASTAR = "astar"
    DIJKSTRA = "dijkstra"

    @property
    def label(self) -> str:
        return _SOLVING_LABELS[self]


_GENERATION_LABELS = {
    GenerationAlgorithm.RECURSIVE_BACKTRACKING: "DFS",
    GenerationAlgorithm.KRUSKAL: "Kruskal",
    GenerationAlgorithm.PRIM: "Prim",
}

_SOLVING_LABELS = {
    SolvingAlgorithm.DFS: "Depth First Search",
    SolvingAlgorithm.BFS: "Breadth First Search",
    SolvingAlgorithm.ASTAR: "A*",
    SolvingAlgorithm.DIJKSTRA: "Dijkstra",
}

GENERATORS = {
    GenerationAlgorithm.RECURSIVE_BACKTRACKING: RecursiveBacktracker,
    GenerationAlgorithm.KRUSKAL: KruskalsAlgorithm,
    GenerationAlgorithm.PRIM: PrimsAlgorithm,
}

SOLVERS = {
    SolvingAlgorithm.DFS: DepthFirstSearch,
    SolvingAlgorithm.BFS: BreadthFirstSearch,
    SolvingAlgorithm.ASTAR: AStar,
    SolvingAlgorithm.DIJKSTRA: Dijkstra,
}

DEFAULT_GENERATION = GenerationAlgorithm.RECURSIVE_BACKTRACKING
DEFAULT_SOLVING = SolvingAlgorithm.DFS


def _resolve(enum_cls, labels, name, default):
    if isinstance(name, enum_cls):
        return name
    if isinstance(name, str):
        key = name.strip().lower()
        for member in enum_cls:
            if key in (member.value, member.name.lower(), labels[member].lower()):
                return member
    logger.debug(f"Unknown algorithm {name!r}, falling back to {default.label}")
    return default


def resolve_generation(name: Union[str, GenerationAlgorithm, None]) -> GenerationAlgorithm:
    """Unknown names fall back to Recursive-Backtracking."""
    return _resolve(GenerationAlgorithm, _GENERATION_LABELS, name, DEFAULT_GENERATION)


def resolve_solving(name: Union[str, SolvingAlgorithm, None]) -> SolvingAlgorithm:
    """Unknown names fall back to DFS."""
    return _resolve(SolvingAlgorithm, _SOLVING_LABELS, name, DEFAULT_SOLVING)


def create_generator(grid: Grid, algorithm, **kwargs) -> Generator:
    cls: Type[Generator] = GENERATORS[resolve_generation(algorithm)]
    return cls(grid, **kwargs)


def create_solver(grid: Grid, algorithm, **kwargs) -> Solver:
    cls: Type[Solver] = SOLVERS[resolve_solving(algorithm)]
    return cls(grid, **kwargs)


def generate(grid: Grid, algorithm, signals: Optional[RunSignals] = None,
             listener: Optional[GenerationListener] = None, seed: int = None,
             delay_ms: int = DEFAULT_DELAY_MS) -> bool:
    generator = create_generator(grid, algorithm, listener=listener, signals=signals,
                                 seed=seed, delay_ms=delay_ms)
    return generator.generate()


def solve(grid: Grid, algorithm, signals: Optional[RunSignals] = None,
          listener: Optional[SolvingListener] = None,
          delay_ms: int = DEFAULT_DELAY_MS) -> bool:
    solver = create_solver(grid, algorithm, listener=listener, signals=signals,
                           delay_ms=delay_ms)
    return solver.solve()
