"""
Shared CLI plumbing: invocation state, error reporting, service wiring
"""
import shlex
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

import typer
from rich.markup import escape

from ...core.constants import EXIT_INTERRUPTED
from ...core.exceptions import BridgeError
from ...core.logging import get_logger, get_stdout_console, get_stderr_console
from ...domain.project import ProjectProfile
from ...domain.sync import TransferSummary
from ...infrastructure.transport import SshTransport, SubprocessFileTransport
from ..config.loader import ConfigLoader

logger = get_logger(__name__)
stdout_console = get_stdout_console()
stderr_console = get_stderr_console()


@dataclass
class CliState:
    """Global options shared by every command"""
    host: Optional[str] = None
    verbose: bool = False
    dry_run: bool = False


def get_state(ctx: typer.Context) -> CliState:
    if not isinstance(ctx.obj, CliState):
        ctx.obj = CliState()
    return ctx.obj


@contextmanager
def handle_errors(action: str) -> Iterator[None]:
    """
    Turn domain exceptions into an error line and the matching exit status.
    """
    try:
        yield
    except typer.Exit:
        raise
    except BridgeError as e:
        stderr_console.print(f"[red]Error:[/red] {escape(str(e))}", soft_wrap=True)
        raise typer.Exit(e.exit_code)
    except KeyboardInterrupt:
        stderr_console.print("\n[yellow]Interrupted[/yellow]")
        raise typer.Exit(EXIT_INTERRUPTED)
    except Exception as e:
        logger.exception(f"Failed to {action}")
        stderr_console.print(
            f"[red]Error:[/red] Failed to {action}: {escape(str(e))}", soft_wrap=True
        )
        raise typer.Exit(1)


def load_project(state: CliState) -> ProjectProfile:
    """Find and parse bridge.toml from the working directory upwards"""
    project = ConfigLoader().load()
    if state.verbose:
        info(f"Project root: {project.root}")
    return project


def info(message: str) -> None:
    """Verbose/progress line on stderr, printed verbatim"""
    stderr_console.print(message, markup=False, highlight=False, soft_wrap=True)


def echo(message: str) -> None:
    """Result line on stdout, printed verbatim"""
    stdout_console.print(message, markup=False, highlight=False, soft_wrap=True)


def make_transports(state: CliState) -> Tuple[SshTransport, SubprocessFileTransport]:
    """Subprocess transports; verbose mode echoes every external command"""
    on_command = _show_command if state.verbose else None
    return SshTransport(on_command=on_command), SubprocessFileTransport(on_command=on_command)


def _show_command(argv: List[str]) -> None:
    info(f"Running: {shlex.join(argv)}")


def report_sync(summary: TransferSummary, hostname: str, remote_path: str, verbose: bool) -> None:
    """Print a sync result or preview"""
    if summary.dry_run:
        info(
            f"Would sync {summary.file_count} files ({summary.total_bytes} bytes) "
            f"to {hostname}:{remote_path} using {summary.strategy.value}"
        )
        for line in summary.commands:
            info(f"  {line}")
        if verbose:
            for name in summary.files:
                info(f"    {name}")
        return
    echo("Sync complete.")
