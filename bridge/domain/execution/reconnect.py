"""
Reconnect state machine

    CONNECTED --(status 255, reconnect command set)--> ATTEMPTING_RECONNECT
    ATTEMPTING_RECONNECT --(host reachable)--> RUNNING_RECOVERY --> RECOVERED
    ATTEMPTING_RECONNECT --(timeout)--> FAILED

Only the transport's connection-failure status enters the machine. Any
other status is the remote command's own result and is passed through.
"""
import time
from typing import Callable, Optional

from ...core.constants import EXIT_CONNECTION_FAILURE, RECONNECT_POLL_INTERVAL
from ...core.exceptions import ReconnectTimeoutError
from ...core.interfaces import RemoteTransport
from ...core.logging import get_logger
from .models import ExecutionResult, ReconnectSession, ReconnectState

logger = get_logger(__name__)


def is_connection_failure(exit_code: int) -> bool:
    """Status 255 is reserved for transport-level failures"""
    return exit_code == EXIT_CONNECTION_FAILURE


class ReconnectSupervisor:
    """
    Run a command and recover from an unexpected disconnect.

    Args:
        transport: Remote-execution transport
        host: Address commands are sent to
        recovery_command: Final (already wrapped and adapted) command run
            after reconnecting; None disables the machine
        timeout: Seconds to wait for the host to come back
        poll_interval: Seconds between reachability probes
        clock: Monotonic clock, injectable for tests
        sleep: Sleep function, injectable for tests
        on_connection_lost: Called with the session when waiting starts
        on_probe: Called with the session after each failed probe
        on_reconnected: Called with the session before recovery runs
    """

    def __init__(
        self,
        transport: RemoteTransport,
        host: str,
        recovery_command: Optional[str] = None,
        timeout: float = 90,
        poll_interval: float = RECONNECT_POLL_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        on_connection_lost: Optional[Callable[[ReconnectSession], None]] = None,
        on_probe: Optional[Callable[[ReconnectSession], None]] = None,
        on_reconnected: Optional[Callable[[ReconnectSession], None]] = None,
    ):
        self.transport = transport
        self.host = host
        self.recovery_command = recovery_command
        self.timeout = timeout
        self.poll_interval = poll_interval
        self.clock = clock
        self.sleep = sleep
        self.on_connection_lost = on_connection_lost
        self.on_probe = on_probe
        self.on_reconnected = on_reconnected

    def execute(self, command: str, interactive: bool = False) -> ExecutionResult:
        """
        Run command under supervision.

        Returns:
            ExecutionResult. After a recovery its exit_code is the recovery
            command's status and `reconnect.state` is RECOVERED.

        Raises:
            ReconnectTimeoutError: If the host stays unreachable for the
                whole timeout (exit status 255, session attached)
        """
        exit_code = self.transport.run(self.host, command, interactive=interactive)

        if not is_connection_failure(exit_code):
            return ExecutionResult(exit_code=exit_code, command=command)

        if self.recovery_command is None:
            logger.info(f"Connection to {self.host} failed; no reconnect command configured")
            return ExecutionResult(exit_code=exit_code, command=command)

        session = ReconnectSession(
            host=self.host,
            timeout=self.timeout,
            recovery_command=self.recovery_command,
        )
        return self.recover(session, command)

    def recover(self, session: ReconnectSession, command: str) -> ExecutionResult:
        """Wait for the host, then run the recovery command"""
        session.transition(ReconnectState.ATTEMPTING_RECONNECT)
        logger.warning(
            f"Connection to {self.host} lost (status {EXIT_CONNECTION_FAILURE}); "
            f"waiting up to {self.timeout:g}s"
        )
        if self.on_connection_lost:
            self.on_connection_lost(session)

        start = self.clock()
        while True:
            session.elapsed = self.clock() - start
            if session.elapsed >= self.timeout:
                session.transition(ReconnectState.FAILED)
                logger.error(f"{self.host} unreachable after {session.elapsed:.0f}s")
                error = ReconnectTimeoutError(self.host, self.timeout, session.elapsed)
                error.session = session
                raise error

            self.sleep(self.poll_interval)

            session.probes += 1
            if self.transport.is_reachable(self.host):
                break
            session.elapsed = self.clock() - start
            if self.on_probe:
                self.on_probe(session)

        session.elapsed = self.clock() - start
        session.transition(ReconnectState.RUNNING_RECOVERY)
        logger.info(f"Reconnected to {self.host} after {session.elapsed:.0f}s")
        if self.on_reconnected:
            self.on_reconnected(session)

        session.recovery_exit_code = self.transport.run(self.host, session.recovery_command)
        session.transition(ReconnectState.RECOVERED)
        return ExecutionResult(
            exit_code=session.recovery_exit_code,
            command=command,
            reconnect=session,
        )
