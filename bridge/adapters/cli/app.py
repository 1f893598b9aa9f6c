"""
Main CLI application
"""
import typer
from pathlib import Path
from typing import Optional

from ...core.logging import setup_logging, get_logger
from .common import CliState
from .project import register_project_commands
from .run import register_run_commands
from .sync import register_sync_command
from .transfer import register_transfer_commands

logger = get_logger(__name__)

# Create main app
app = typer.Typer(
    name="bridge",
    add_completion=False,
    help="Run commands on remote hosts from your local project",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Commands live directly on the main app
register_sync_command(app)
register_run_commands(app)
register_transfer_commands(app)
register_project_commands(app)


@app.callback()
def main(
    ctx: typer.Context,
    host: Optional[str] = typer.Option(
        None,
        "--host",
        "-H",
        envvar="BRIDGE_HOST",
        help="Host from bridge.toml (default: default_host)",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show resolved settings and every external command",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Show what would happen without touching the remote host",
    ),
    log_level: str = typer.Option(
        "WARNING",
        "--log-level",
        "-l",
        help="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        help="Log file path",
    ),
):
    """
    Bridge - run commands on remote hosts from your local project

    Use subcommands to perform different operations:
    - sync: Copy the project to the host
    - run: Run a command in the host's project path
    - ssh: Open an interactive shell there
    - upload / download: Copy single files
    - init / hosts: Create and inspect bridge.toml
    """
    setup_logging(level=log_level, log_file=log_file)
    ctx.obj = CliState(host=host, verbose=verbose, dry_run=dry_run)


def run():
    """CLI entry point"""
    app()


if __name__ == "__main__":
    run()
