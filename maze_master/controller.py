import logging
import threading
from typing import Any, Dict, List, Optional, Tuple

from maze_master.algo.base import DEFAULT_DELAY_MS
from maze_master.algo.registry import (
    DEFAULT_GENERATION, DEFAULT_SOLVING, GenerationAlgorithm, SolvingAlgorithm,
    create_generator, create_solver, resolve_generation, resolve_solving,
)
from maze_master.core.events import GenerationListener, MazeObserver, SolvingListener
from maze_master.core.grid import Grid
from maze_master.core.signals import DEFAULT_POLL_INTERVAL, RunSignals, RunState, RunStateMachine
from maze_master.io.serializer import MazeSerializer

logger = logging.getLogger(__name__)

DEFAULT_ROWS = 41
DEFAULT_COLUMNS = 51
DEFAULT_JOIN_TIMEOUT = 1.0

GENERATION = "generation"
SOLVING = "solving"


class _Run:
    """One background engine call. A new run gets a new state machine."""

    def __init__(self, kind: str, algorithm, grid: Grid, signals: RunSignals):
        self.kind = kind
        self.algorithm = algorithm
        self.grid = grid
        self.signals = signals
        self.machine = RunStateMachine()
        self.engine = None
        self.thread: Optional[threading.Thread] = None
        self.result: Optional[bool] = None

    @property
    def active(self) -> bool:
        return not self.machine.finished


class _GenerationRelay(GenerationListener):
    def __init__(self, controller: 'MazeController'):
        self.controller = controller

    def on_cell_changed(self, row, col, state):
        self.controller.observer.on_cell_changed(row, col, state)

    def on_step(self):
        self.controller._tick()

    def on_complete(self):
        self.controller.observer.on_generation_completed()


class _SolvingRelay(SolvingListener):
    """Solving events carry no state; the observer gets the cell's current one."""

    def __init__(self, controller: 'MazeController', run: _Run):
        self.controller = controller
        self.run = run
        self.grid = run.grid

    def on_cell_explored(self, row, col):
        self.controller.observer.on_cell_changed(row, col, self.grid.get(row, col))
        self.controller._tick()

    def on_cell_backtracked(self, row, col):
        self.controller.observer.on_cell_changed(row, col, self.grid.get(row, col))
        self.controller._tick()

    def on_path_found(self, path):
        if self.controller._solving_run is self.run:
            self.controller.solution_path = list(path)
        self.controller.observer.on_path_found(path)

    def on_complete(self, success):
        self.controller.observer.on_solving_completed(success)


class MazeController:
    """
    Owns the grid and runs generation / solving on background threads.

    At most one run (of either kind) is active at a time, which is what keeps
    the grid single-writer; start requests while busy are ignored.
    """

    def __init__(self, rows: int = DEFAULT_ROWS, columns: int = DEFAULT_COLUMNS,
                 observer: Optional[MazeObserver] = None, delay_ms: int = DEFAULT_DELAY_MS,
                 join_timeout: float = DEFAULT_JOIN_TIMEOUT,
                 poll_interval: float = DEFAULT_POLL_INTERVAL,
                 seed: Optional[int] = None, refresh_every: int = 1):
        self.observer = observer if observer is not None else MazeObserver()
        self.delay_ms = max(0, delay_ms)
        self.join_timeout = join_timeout
        self.seed = seed
        self.refresh_every = max(1, refresh_every)

        # Each run gets its own signals, so an abandoned thread keeps seeing its stop
        self.poll_interval = poll_interval

        self.current_generation_algorithm: GenerationAlgorithm = DEFAULT_GENERATION
        self.current_solving_algorithm: SolvingAlgorithm = DEFAULT_SOLVING
        self.solution_path: List[Tuple[int, int]] = []

        self._lock = threading.RLock()
        self._generation_run: Optional[_Run] = None
        self._solving_run: Optional[_Run] = None
        # Runs whose thread outlived the stop join
        self._abandoned: List[_Run] = []
        self._steps = 0

        self.grid: Optional[Grid] = None
        self.create_new_maze(rows, columns)

    # State Queries

    @property
    def is_generating(self) -> bool:
        run = self._generation_run
        return run is not None and run.active

    @property
    def is_solving(self) -> bool:
        run = self._solving_run
        return run is not None and run.active

    @property
    def is_busy(self) -> bool:
        return self.is_generating or self.is_solving

    @property
    def is_paused(self) -> bool:
        run = self._active_run()
        return run is not None and run.machine.state == RunState.PAUSED

    @property
    def generation_state(self) -> RunState:
        run = self._generation_run
        return run.machine.state if run is not None else RunState.IDLE

    @property
    def solving_state(self) -> RunState:
        run = self._solving_run
        return run.machine.state if run is not None else RunState.IDLE

    def available_generation_algorithms(self) -> List[GenerationAlgorithm]:
        return list(GenerationAlgorithm)

    def available_solving_algorithms(self) -> List[SolvingAlgorithm]:
        return list(SolvingAlgorithm)

    def snapshot(self) -> List[List[int]]:
        return self.grid.snapshot()

    # Configuration

    def set_observer(self, observer: Optional[MazeObserver]):
        self.observer = observer if observer is not None else MazeObserver()
        self.observer.on_maze_changed(self.grid)

    def set_generation_algorithm(self, name) -> GenerationAlgorithm:
        if not self.is_generating:
            self.current_generation_algorithm = resolve_generation(name)
        return self.current_generation_algorithm

    def set_solving_algorithm(self, name) -> SolvingAlgorithm:
        if not self.is_solving:
            self.current_solving_algorithm = resolve_solving(name)
        return self.current_solving_algorithm

    def set_animation_delay(self, delay_ms: int):
        self.delay_ms = max(0, delay_ms)
        # Running engines pick the new delay up at their next checkpoint
        for run in (self._generation_run, self._solving_run):
            if run is not None and run.active and run.engine is not None:
                run.engine.delay_ms = self.delay_ms

    # Maze Lifecycle

    def create_new_maze(self, rows: int, columns: int):
        # Ensure odd dimensions for proper generation
        if rows % 2 == 0:
            rows += 1
        if columns % 2 == 0:
            columns += 1

        # Validate before touching the current maze
        grid = Grid(rows, columns)

        self._stop_all()
        with self._lock:
            self.grid = grid
            self.solution_path = []
        logger.info(f"New {rows}x{columns} maze")
        self.observer.on_maze_changed(self.grid)
        self.observer.on_refresh()

    def reset_maze(self):
        self._stop_all()
        with self._lock:
            if not self._detach_grid(fresh=True):
                self.grid.reset()
            self.solution_path = []
        self.observer.on_maze_changed(self.grid)
        self.observer.on_refresh()

    def clear_solution(self) -> bool:
        with self._lock:
            if self.is_busy:
                return False
            self._detach_grid(fresh=False)
            self.grid.reset_solution()
            self.solution_path = []
        self.observer.on_maze_changed(self.grid)
        self.observer.on_refresh()
        return True

    def save_maze(self, filepath: str, compress: bool = False):
        meta = {
            "generation": self.current_generation_algorithm.value,
            "solving": self.current_solving_algorithm.value,
            "seed": self.seed,
        }
        # Copy so a concurrent run cannot tear the written data
        MazeSerializer.save(self.grid.copy(), filepath, meta=meta, compress=compress)
        logger.info(f"Saved maze to {filepath}")

    def load_maze(self, filepath: str) -> Dict[str, Any]:
        grid, meta = MazeSerializer.load(filepath)
        self._stop_all()
        with self._lock:
            self.grid = grid
            self.solution_path = []
        logger.info(f"Loaded {grid.rows}x{grid.columns} maze from {filepath}")
        self.observer.on_maze_changed(self.grid)
        self.observer.on_refresh()
        return meta

    # Run Control

    def generate_maze(self) -> bool:
        with self._lock:
            if self.is_busy:
                logger.debug("Generation request ignored: a run is already active")
                return False
            self._detach_grid(fresh=True)
            run = _Run(GENERATION, self.current_generation_algorithm, self.grid, RunSignals(self.poll_interval))
            self._generation_run = run
            self.solution_path = []
            self._start(run, self._run_generation)
        return True

    def solve_maze(self) -> bool:
        with self._lock:
            if self.is_busy or self.grid is None:
                logger.debug("Solve request ignored: a run is already active")
                return False
            self._detach_grid(fresh=False)
            run = _Run(SOLVING, self.current_solving_algorithm, self.grid, RunSignals(self.poll_interval))
            self._solving_run = run
            self.solution_path = []
            self._start(run, self._run_solving)
        return True

    def pause(self) -> bool:
        with self._lock:
            run = self._active_run()
            if run is None or not run.machine.try_transition(RunState.PAUSED):
                return False
            run.signals.request_pause()
        logger.info(f"{run.kind.capitalize()} paused")
        return True

    def resume(self) -> bool:
        with self._lock:
            run = self._active_run()
            if run is None or not run.machine.try_transition(RunState.RUNNING):
                return False
            run.signals.resume()
        logger.info(f"{run.kind.capitalize()} resumed")
        return True

    def toggle_pause(self) -> bool:
        return self.resume() if self.is_paused else self.pause()

    def stop_current_operation(self) -> bool:
        """
        Signals the active run to stop and waits up to join_timeout for it.
        Returns False if the run had not exited in time (it is abandoned).
        """
        return self._stop_all()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Blocks until the active run finishes. Returns False on timeout."""
        for run in (self._generation_run, self._solving_run):
            if run is not None and run.thread is not None and run.thread is not threading.current_thread():
                run.thread.join(timeout)
                if run.thread.is_alive():
                    return False
        return True

    def shutdown(self):
        self._stop_all()

    # Internals

    def _active_run(self) -> Optional[_Run]:
        for run in (self._generation_run, self._solving_run):
            if run is not None and run.active:
                return run
        return None

    def _start(self, run: _Run, target):
        run.signals.reset()
        run.machine.transition(RunState.RUNNING)
        self._steps = 0
        run.thread = threading.Thread(target=target, args=(run,), name=f"maze-{run.kind}", daemon=True)
        run.thread.start()

    def _stop_all(self) -> bool:
        clean = True
        for run in (self._generation_run, self._solving_run):
            if run is not None and run.active:
                clean = self._stop_run(run) and clean
        return clean

    def _stop_run(self, run: _Run) -> bool:
        run.signals.request_stop()
        thread = run.thread
        if thread is None or thread is threading.current_thread():
            return True

        thread.join(self.join_timeout)
        if thread.is_alive():
            logger.warning(
                f"{run.kind.capitalize()} run did not stop within {self.join_timeout}s; "
                f"continuing without it")
            # Give up on it: free the slot so the controller is usable again
            with self._lock:
                self._abandoned.append(run)
            if run.machine.try_transition(RunState.STOPPED):
                self._notify_stopped(run)
            return False
        return True

    def _detach_grid(self, fresh: bool) -> bool:
        """
        Swaps in a new grid if an abandoned run may still write the current one.
        fresh=True gives an all-wall grid, otherwise a copy of the current cells.
        """
        with self._lock:
            self._abandoned = [run for run in self._abandoned if run.thread.is_alive()]
            if not any(run.grid is self.grid for run in self._abandoned):
                return False
            if fresh:
                self.grid = Grid(self.grid.rows, self.grid.columns)
            else:
                self.grid = self.grid.copy()
        logger.debug("Detached the grid from an abandoned run")
        return True

    def _tick(self):
        self._steps += 1
        if self._steps % self.refresh_every == 0:
            self.observer.on_refresh()

    def _notify_stopped(self, run: _Run):
        logger.info(f"{run.kind.capitalize()} stopped")
        if run.kind == GENERATION:
            self.observer.on_generation_stopped()
        else:
            self.observer.on_solving_stopped()

    def _finish(self, run: _Run, completed: bool):
        if completed:
            if run.machine.try_transition(RunState.COMPLETED):
                logger.info(f"{run.kind.capitalize()} complete ({run.algorithm.label})")
        elif run.machine.try_transition(RunState.STOPPED):
            self._notify_stopped(run)

    def _fail(self, run: _Run, error: Exception):
        logger.exception(f"{run.kind.capitalize()} run failed")
        if run.machine.try_transition(RunState.FAILED):
            self.observer.on_run_failed(run.kind, error)

    def _run_generation(self, run: _Run):
        try:
            logger.info(f"Generating {run.grid.rows}x{run.grid.columns} maze with {run.algorithm.label}...")
            self.observer.on_generation_started()
            run.engine = create_generator(run.grid, run.algorithm, listener=_GenerationRelay(self),
                                          signals=run.signals, seed=self.seed, delay_ms=self.delay_ms)
            run.result = run.engine.generate()
        except Exception as e:
            self._fail(run, e)
        else:
            self._finish(run, run.engine.completed)

    def _run_solving(self, run: _Run):
        try:
            logger.info(f"Solving with {run.algorithm.label}...")
            self.observer.on_solving_started()
            run.engine = create_solver(run.grid, run.algorithm, listener=_SolvingRelay(self, run),
                                       signals=run.signals, delay_ms=self.delay_ms)
            run.result = run.engine.solve()
        except Exception as e:
            self._fail(run, e)
        else:
            # A solve that ends without finding the goal is still a completed run
            self._finish(run, run.engine.completed)
