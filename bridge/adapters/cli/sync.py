"""
Sync CLI command
"""
import typer

from ...core.logging import get_logger
from ...domain.sync import SyncPlan, SyncService
from .common import get_state, handle_errors, info, load_project, make_transports, report_sync

logger = get_logger(__name__)


def register_sync_command(app: typer.Typer) -> None:
    """Register sync command directly (not as subcommand)"""
    app.command(name="sync")(sync_run)


def sync_run(
    ctx: typer.Context,
    no_auto_exclude: bool = typer.Option(
        False, "--no-auto-exclude", help="Do not exclude macOS metadata (.DS_Store, ._*)"
    ),
    delete_excluded: bool = typer.Option(
        False, "--delete-excluded", help="Also delete excluded files on the remote (rsync only)"
    ),
):
    """
    Sync the project directory to the remote host

    Examples:
        bridge sync
        bridge --host win sync --delete-excluded
        bridge --dry-run sync
    """
    state = get_state(ctx)

    def on_plan(plan: SyncPlan) -> None:
        if not state.verbose:
            return
        info(f"Syncing to {plan.hostname}:{plan.remote_path}")
        info(f"Sync method: {plan.strategy.value}")
        info(f"Excludes: {', '.join(plan.excludes)}")

    with handle_errors("sync"):
        project = load_project(state)
        host = project.get_host(state.host)
        remote, files = make_transports(state)
        service = SyncService(project, remote, files, on_plan=on_plan)
        summary = service.sync(
            host,
            auto_exclude=not no_auto_exclude,
            delete_excluded=delete_excluded,
            dry_run=state.dry_run,
            verbose=state.verbose,
        )

    report_sync(summary, host.hostname, host.path, state.verbose)
