"""
Run and ssh CLI commands
"""
from typing import Optional

import typer

from ...core.constants import EXIT_CONNECTION_FAILURE
from ...core.logging import get_logger
from ...domain.execution import LockManager, ReconnectSession
from ...domain.project import HostProfile
from ...domain.run import ResolvedRun, RunOptions, RunService
from ...domain.sync import SyncService
from .common import (
    CliState,
    get_state,
    handle_errors,
    info,
    load_project,
    make_transports,
    report_sync,
    stderr_console,
)

logger = get_logger(__name__)


def register_run_commands(app: typer.Typer) -> None:
    """Register run and ssh directly on the main app"""
    app.command(name="run")(run_command)
    app.command(name="ssh")(ssh_command)


def _build_service(state: CliState) -> RunService:
    project = load_project(state)
    remote, files = make_transports(state)

    def on_resolved(host: HostProfile, resolved: ResolvedRun) -> None:
        if not state.verbose:
            return
        info(f"Running on host: {host.name} ({host.hostname})")
        info(f"Remote path: {host.path}")
        info(f"Shell: {host.shell}")
        if host.wrapper:
            info(f"Wrapper: {host.wrapper}")
        if resolved.env_count:
            info(f"Loaded {resolved.env_count} env vars from .env files")
        if resolved.recovery_command:
            info(
                f"Reconnect command: {resolved.recovery_command} "
                f"(timeout: {resolved.reconnect_timeout}s)"
            )
        if resolved.lock_name:
            info(f"Lock: {resolved.lock_name} (timeout: {resolved.lock_timeout}s)")
        info(f"Command: {resolved.remote_command}")

    def on_dry_run(resolved: ResolvedRun) -> None:
        if resolved.lock_name:
            info(
                f"Would acquire lock '{resolved.lock_name}' on {resolved.hostname} "
                f"(timeout: {resolved.lock_timeout}s)"
            )
        info(f"Would run: ssh {resolved.hostname} {resolved.remote_command}")
        if resolved.recovery_command:
            info(
                f"On connection loss: wait up to {resolved.reconnect_timeout}s, "
                f"then run: {resolved.recovery_command}"
            )

    def on_sync_complete(summary) -> None:
        host = project.get_host(state.host)
        report_sync(summary, host.hostname, host.path, state.verbose)

    def on_connection_lost(session: ReconnectSession) -> None:
        info(
            f"SSH connection lost. Waiting for reconnection "
            f"(timeout: {session.timeout:g}s)..."
        )

    def on_probe(session: ReconnectSession) -> None:
        stderr_console.print(".", end="", markup=False, highlight=False)

    def on_reconnected(session: ReconnectSession) -> None:
        stderr_console.print()
        info(f"Reconnected after {session.elapsed:.0f}s. Running reconnect command...")

    lock_manager = LockManager(
        on_wait=lambda host, name: info(f"Waiting for lock '{name}' on {host}..."),
        on_acquired=lambda host, name: info(f"Acquired lock '{name}' on {host}"),
    )
    sync_service = SyncService(project, remote, files, on_complete=on_sync_complete)

    return RunService(
        project,
        remote,
        files,
        lock_manager=lock_manager,
        sync_service=sync_service,
        on_resolved=on_resolved,
        on_dry_run=on_dry_run,
        on_connection_lost=on_connection_lost,
        on_probe=on_probe,
        on_reconnected=on_reconnected,
    )


def run_command(
    ctx: typer.Context,
    command: str = typer.Argument(..., help="Command to run in the host's project path"),
    sync: bool = typer.Option(False, "--sync", "-s", help="Sync the project before running"),
    reconnect_command: Optional[str] = typer.Option(
        None, "--reconnect-command", help="Command to run after an unexpected disconnect"
    ),
    reconnect_timeout: Optional[int] = typer.Option(
        None, "--reconnect-timeout", min=1, help="Seconds to wait for the host to come back"
    ),
    lock: Optional[str] = typer.Option(
        None, "--lock", help="Hold this named lock while running ('default' for the unnamed lock)"
    ),
    lock_timeout: Optional[int] = typer.Option(
        None, "--lock-timeout", min=1, help="Seconds to wait for the lock"
    ),
    tty: bool = typer.Option(False, "--tty", "-t", help="Allocate a pseudo-terminal"),
):
    """
    Run a command on the remote host

    Examples:
        bridge run "cargo test"
        bridge run "make" --sync --lock build
        bridge --host gpu run "python train.py" --reconnect-command "dmesg | tail"
    """
    state = get_state(ctx)
    options = RunOptions(
        command=command,
        sync=sync,
        dry_run=state.dry_run,
        interactive=tty,
        verbose=state.verbose,
        reconnect_command=reconnect_command,
        reconnect_timeout=reconnect_timeout,
        lock_name=lock,
        lock_timeout=lock_timeout,
    )

    with handle_errors("run command"):
        service = _build_service(state)
        result = service.run(state.host, options)

    if result.exit_code == EXIT_CONNECTION_FAILURE and result.reconnect is None:
        info("SSH connection failed (exit status 255)")
    elif result.recovered:
        info(f"Reconnect command exited with status {result.exit_code}")
    raise typer.Exit(result.exit_code)


def ssh_command(
    ctx: typer.Context,
    sync: bool = typer.Option(False, "--sync", "-s", help="Sync the project before connecting"),
):
    """
    Open an interactive shell in the host's project path

    Examples:
        bridge ssh
        bridge --host windows-pc ssh --sync
    """
    state = get_state(ctx)

    with handle_errors("open shell"):
        service = _build_service(state)
        result = service.shell(state.host, sync=sync, dry_run=state.dry_run, verbose=state.verbose)

    raise typer.Exit(result.exit_code)
