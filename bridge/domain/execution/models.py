"""
Execution domain models
"""
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import IO, Any, List, Optional, Tuple


class ReconnectState(str, Enum):
    """States of the reconnect machine"""
    CONNECTED = "connected"
    ATTEMPTING_RECONNECT = "attempting_reconnect"
    RUNNING_RECOVERY = "running_recovery"
    RECOVERED = "recovered"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (ReconnectState.RECOVERED, ReconnectState.FAILED)


# Allowed transitions; anything else is a programming error
_TRANSITIONS = {
    ReconnectState.CONNECTED: {ReconnectState.ATTEMPTING_RECONNECT},
    ReconnectState.ATTEMPTING_RECONNECT: {
        ReconnectState.RUNNING_RECOVERY,
        ReconnectState.FAILED,
    },
    ReconnectState.RUNNING_RECOVERY: {ReconnectState.RECOVERED},
    ReconnectState.RECOVERED: set(),
    ReconnectState.FAILED: set(),
}


@dataclass
class ReconnectSession:
    """
    Transient state for one connection loss.

    Attributes:
        host: Address being waited for
        timeout: Seconds to wait for reachability
        recovery_command: Command run once the host is back
        state: Current state
        elapsed: Seconds spent waiting so far
        probes: Number of reachability probes made
        recovery_exit_code: Exit status of the recovery command, once run
        history: Visited states, in order
    """
    host: str
    timeout: float
    recovery_command: str
    state: ReconnectState = ReconnectState.CONNECTED
    elapsed: float = 0.0
    probes: int = 0
    recovery_exit_code: Optional[int] = None
    history: List[ReconnectState] = field(default_factory=lambda: [ReconnectState.CONNECTED])

    def transition(self, new_state: ReconnectState) -> None:
        """Move to new_state, enforcing the allowed transitions"""
        if new_state not in _TRANSITIONS[self.state]:
            raise RuntimeError(
                f"Invalid reconnect transition: {self.state.value} -> {new_state.value}"
            )
        self.state = new_state
        self.history.append(new_state)


@dataclass
class ExecutionResult:
    """Outcome of one supervised remote execution"""
    exit_code: int
    command: str
    reconnect: Optional[ReconnectSession] = None

    @property
    def recovered(self) -> bool:
        return self.reconnect is not None and self.reconnect.state is ReconnectState.RECOVERED


@dataclass
class LockHandle:
    """
    An acquired advisory lock.

    The OS lock lives as long as `file` stays open; closing it (or the
    process exiting) releases the lock.
    """
    host: str
    name: str
    path: Path
    file: Optional[IO[Any]] = None

    @property
    def key(self) -> Tuple[str, str]:
        return (self.host, self.name)

    @property
    def held(self) -> bool:
        return self.file is not None and not self.file.closed
