"""
Upload and download CLI commands
"""
from typing import Optional

import typer

from ...core.logging import get_logger
from ...domain.transfer import TransferService
from .common import echo, get_state, handle_errors, info, load_project, make_transports

logger = get_logger(__name__)


def register_transfer_commands(app: typer.Typer) -> None:
    """Register upload and download directly on the main app"""
    app.command(name="upload")(upload)
    app.command(name="download")(download)


def upload(
    ctx: typer.Context,
    file: str = typer.Argument(..., help="Local file or directory"),
    dest: Optional[str] = typer.Option(
        None, "--dest", "-d", help="Remote name inside the host path (default: same name)"
    ),
):
    """
    Copy a local file into the host's project path

    Examples:
        bridge upload dist/app.tar.gz
        bridge upload build.log --dest logs/build.log
    """
    state = get_state(ctx)

    with handle_errors("upload"):
        project = load_project(state)
        remote, files = make_transports(state)
        request = TransferService(project, remote, files).upload(
            file, dest=dest, host_name=state.host, dry_run=state.dry_run
        )

    if request.dry_run:
        info(f"Would upload {request.source} to {request.destination}")
    else:
        echo(f"Upload complete: {request.source} -> {request.destination}")


def download(
    ctx: typer.Context,
    file: str = typer.Argument(..., help="Remote path, relative to the host path unless absolute"),
    dest: Optional[str] = typer.Option(
        None, "--dest", "-d", help="Local destination (default: file name in current directory)"
    ),
):
    """
    Copy a file from the remote host

    Examples:
        bridge download target/release/app
        bridge download /var/log/syslog --dest syslog.txt
    """
    state = get_state(ctx)

    with handle_errors("download"):
        project = load_project(state)
        remote, files = make_transports(state)
        request = TransferService(project, remote, files).download(
            file, dest=dest, host_name=state.host, dry_run=state.dry_run
        )

    if request.dry_run:
        info(f"Would download {request.source} to {request.destination}")
    else:
        echo(f"Download complete: {request.source} -> {request.destination}")
