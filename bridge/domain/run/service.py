"""
Run domain service - the remote execution pipeline

resolve host → build substitution context → (sync) → acquire lock →
build wrapped command → execute under reconnect supervision → release lock
"""
import time
from contextlib import nullcontext
from typing import Callable, Mapping, Optional, Tuple

from ...core.interfaces import FileTransport, RemoteTransport
from ...core.logging import get_logger
from ..env import EnvironmentContext
from ..execution.lock import LockManager
from ..execution.models import ExecutionResult, ReconnectSession
from ..execution.reconnect import ReconnectSupervisor
from ..execution.shell import build_remote_command, get_adapter
from ..project.models import HostProfile, ProjectProfile
from ..sync.service import SyncService
from .models import ResolvedRun, RunOptions

logger = get_logger(__name__)


class RunService:
    """
    Run commands on a project's hosts.

    Stages execute strictly in sequence. Substitution runs before any
    remote action so a missing variable never leaves work half done.
    """

    def __init__(
        self,
        project: ProjectProfile,
        remote: RemoteTransport,
        files: FileTransport,
        lock_manager: Optional[LockManager] = None,
        sync_service: Optional[SyncService] = None,
        environ: Optional[Mapping[str, str]] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        on_resolved: Optional[Callable[[HostProfile, ResolvedRun], None]] = None,
        on_dry_run: Optional[Callable[[ResolvedRun], None]] = None,
        on_connection_lost: Optional[Callable[[ReconnectSession], None]] = None,
        on_probe: Optional[Callable[[ReconnectSession], None]] = None,
        on_reconnected: Optional[Callable[[ReconnectSession], None]] = None,
    ):
        """
        Initialize run service.

        Args:
            project: Loaded project configuration
            remote: Remote-execution transport
            files: File-transfer transport, used when syncing first
            lock_manager: Lock manager (default: shared temp dir)
            sync_service: Sync service (default: built from the transports)
            environ: Process environment layer (default: os.environ)
            clock: Monotonic clock for the reconnect machine
            sleep: Sleep function for the reconnect machine
            on_resolved: Callback with the host and resolved settings
            on_dry_run: Callback instead of executing in preview mode
            on_connection_lost: Reconnect machine entered ATTEMPTING_RECONNECT
            on_probe: A reachability probe failed
            on_reconnected: Host reachable again, recovery about to run
        """
        self.project = project
        self.remote = remote
        self.files = files
        self.lock_manager = lock_manager or LockManager()
        self.sync_service = sync_service or SyncService(project, remote, files)
        self.environ = environ
        self.clock = clock
        self.sleep = sleep
        self.on_resolved = on_resolved
        self.on_dry_run = on_dry_run
        self.on_connection_lost = on_connection_lost
        self.on_probe = on_probe
        self.on_reconnected = on_reconnected

    def load_context(self, host: HostProfile) -> EnvironmentContext:
        return EnvironmentContext.load(self.project.root, host.env_files, self.environ)

    def resolve(
        self, host_name: Optional[str], options: RunOptions
    ) -> Tuple[HostProfile, ResolvedRun]:
        """
        Resolve the host, apply CLI overrides and build the final commands.

        Raises:
            ConfigError: Unknown host or missing env file
            SubstitutionError: Required variable missing under strict_env
        """
        host = self.project.get_host(host_name)
        context = self.load_context(host)

        recovery = options.reconnect_command or host.reconnect_command
        lock_name = options.lock_name or host.lock_name

        resolved = ResolvedRun(
            host_name=host.name,
            hostname=host.hostname,
            remote_command=build_remote_command(host, options.command, context),
            recovery_command=(
                build_remote_command(host, recovery, context) if recovery else None
            ),
            reconnect_timeout=options.reconnect_timeout or host.reconnect_timeout,
            lock_name=lock_name,
            lock_timeout=options.lock_timeout or host.lock_timeout,
            env_count=len(context.file_variables),
        )
        if self.on_resolved:
            self.on_resolved(host, resolved)
        return host, resolved

    def run(self, host_name: Optional[str], options: RunOptions) -> ExecutionResult:
        """
        Run options.command on a host.

        Returns:
            ExecutionResult; exit_code is the remote command's own status,
            255 for an unrecovered connection failure, or the recovery
            command's status after a reconnect

        Raises:
            ConfigError, SubstitutionError, TransferError, LockTimeoutError,
            ReconnectTimeoutError
        """
        host, resolved = self.resolve(host_name, options)

        if options.sync:
            self.sync_service.sync(host, dry_run=options.dry_run, verbose=options.verbose)

        if options.dry_run:
            if self.on_dry_run:
                self.on_dry_run(resolved)
            return ExecutionResult(exit_code=0, command=resolved.remote_command)

        lock = (
            self.lock_manager.hold(host.hostname, resolved.lock_name, resolved.lock_timeout)
            if resolved.lock_name
            else nullcontext()
        )
        supervisor = ReconnectSupervisor(
            self.remote,
            host.hostname,
            recovery_command=resolved.recovery_command,
            timeout=resolved.reconnect_timeout,
            clock=self.clock,
            sleep=self.sleep,
            on_connection_lost=self.on_connection_lost,
            on_probe=self.on_probe,
            on_reconnected=self.on_reconnected,
        )

        with lock:
            logger.info(f"Running on {host.name}: {resolved.remote_command}")
            result = supervisor.execute(resolved.remote_command, interactive=options.interactive)

        logger.info(f"Remote command on {host.name} exited with {result.exit_code}")
        return result

    def shell(
        self,
        host_name: Optional[str],
        sync: bool = False,
        dry_run: bool = False,
        verbose: bool = False,
    ) -> ExecutionResult:
        """Open an interactive shell in the host path (no lock, no reconnect)"""
        host = self.project.get_host(host_name)
        context = self.load_context(host)
        program = get_adapter(host.shell).interactive_shell
        resolved = ResolvedRun(
            host_name=host.name,
            hostname=host.hostname,
            remote_command=build_remote_command(host, program, context),
            recovery_command=None,
            reconnect_timeout=host.reconnect_timeout,
            lock_name=None,
            lock_timeout=host.lock_timeout,
            env_count=len(context.file_variables),
        )
        if self.on_resolved:
            self.on_resolved(host, resolved)

        if sync:
            self.sync_service.sync(host, dry_run=dry_run, verbose=verbose)

        if dry_run:
            if self.on_dry_run:
                self.on_dry_run(resolved)
            return ExecutionResult(exit_code=0, command=resolved.remote_command)

        exit_code = self.remote.run(host.hostname, resolved.remote_command, interactive=True)
        return ExecutionResult(exit_code=exit_code, command=resolved.remote_command)
