import threading
from enum import Enum

DEFAULT_POLL_INTERVAL = 0.05


class RunState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"
    STOPPED = "stopped"
    FAILED = "failed"


class InvalidTransitionError(RuntimeError):
    pass


class RunSignals:
    """
    Stop/pause pair shared between the controller and one engine call.

    Engines call checkpoint() after every cell mutation:
    check stop -> wait while paused -> sleep the animation delay.
    """

    def __init__(self, poll_interval: float = DEFAULT_POLL_INTERVAL):
        self.poll_interval = poll_interval
        self.stop = threading.Event()
        self.pause = threading.Event()

    @property
    def stopped(self) -> bool:
        return self.stop.is_set()

    @property
    def paused(self) -> bool:
        return self.pause.is_set()

    def reset(self):
        self.stop.clear()
        self.pause.clear()

    def request_stop(self):
        self.stop.set()
        # A paused engine must wake up and see the stop
        self.pause.clear()

    def request_pause(self):
        self.pause.set()

    def resume(self):
        self.pause.clear()

    def checkpoint(self, delay: float = 0.0) -> bool:
        """Returns True if the caller should keep going."""
        if self.stop.is_set():
            return False

        while self.pause.is_set() and not self.stop.is_set():
            self.stop.wait(self.poll_interval)

        if delay > 0:
            # Waiting on stop instead of time.sleep so a stop cuts the delay short
            self.stop.wait(delay)

        return not self.stop.is_set()


class RunStateMachine:
    _TRANSITIONS = {
        RunState.IDLE: {RunState.RUNNING},
        RunState.RUNNING: {RunState.PAUSED, RunState.COMPLETED, RunState.STOPPED, RunState.FAILED},
        # The engine may finish its last step after the pause was requested
        RunState.PAUSED: {RunState.RUNNING, RunState.STOPPED, RunState.COMPLETED, RunState.FAILED},
        RunState.COMPLETED: set(),
        RunState.STOPPED: set(),
        RunState.FAILED: set(),
    }

    TERMINAL = (RunState.COMPLETED, RunState.STOPPED, RunState.FAILED)

    def __init__(self):
        self._state = RunState.IDLE
        self._lock = threading.Lock()

    @property
    def state(self) -> RunState:
        return self._state

    @property
    def finished(self) -> bool:
        return self._state in self.TERMINAL

    def can_transition(self, target: RunState) -> bool:
        return target in self._TRANSITIONS[self._state]

    def transition(self, target: RunState):
        with self._lock:
            if target not in self._TRANSITIONS[self._state]:
                raise InvalidTransitionError(
                    f"Cannot move from {self._state.value} to {target.value}")
            self._state = target

    def try_transition(self, target: RunState) -> bool:
        with self._lock:
            if target not in self._TRANSITIONS[self._state]:
                return False
            self._state = target
            return True
