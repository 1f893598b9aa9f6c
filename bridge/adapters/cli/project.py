"""
Project CLI commands: init, hosts
"""
from pathlib import Path

import typer

from ...core import load_ssh_config
from ...core.constants import CONFIG_FILENAME
from ...core.logging import get_logger
from ..config.loader import write_template
from .common import echo, get_state, handle_errors, info, load_project

logger = get_logger(__name__)


def register_project_commands(app: typer.Typer) -> None:
    app.command(name="init")(init)
    app.command(name="hosts")(hosts)


def init(ctx: typer.Context):
    """
    Create a bridge.toml template in the current directory
    """
    state = get_state(ctx)
    current_dir = Path.cwd()

    with handle_errors("create config"):
        if state.verbose:
            info(f"Creating {CONFIG_FILENAME} in {current_dir}")
        write_template(current_dir)

    echo(f"Created {CONFIG_FILENAME}")
    echo("Edit it to configure your remote hosts.")


def hosts(ctx: typer.Context):
    """
    List configured hosts
    """
    state = get_state(ctx)

    with handle_errors("list hosts"):
        project = load_project(state)

        if not project.hosts:
            echo("No hosts configured.")
            echo(f"Edit {CONFIG_FILENAME} to add hosts.")
            return

        for name, host in project.hosts.items():
            marker = " (default)" if name == project.default_host else ""
            echo(f"{name}{marker}")
            echo(f"  hostname: {host.hostname}")
            echo(f"  path: {host.path}")
            echo(f"  shell: {host.shell}")
            echo(f"  sync: {host.sync_method}")
            if state.verbose:
                entry = load_ssh_config(host.hostname)
                user = f"{entry['user']}@" if entry["user"] else ""
                echo(f"  resolved: {user}{entry['host']}:{entry['port']}")
                if host.lock_name:
                    echo(f"  lock: {host.lock_name}")
            echo("")
