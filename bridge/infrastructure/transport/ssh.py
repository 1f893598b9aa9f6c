"""
Remote-execution transport backed by the ssh client
"""
import subprocess
from typing import Callable, List, Optional

from ...core.constants import SSH_CONNECT_TIMEOUT, SSH_KEEPALIVE_OPTIONS
from ...core.exceptions import RemoteCommandError
from ...core.interfaces import RemoteTransport
from ...core.logging import get_logger

logger = get_logger(__name__)

# Status the shell reports when a program is not found
EXIT_NOT_FOUND = 127


class SshTransport(RemoteTransport):
    """
    Run commands through the system `ssh` executable.

    Host aliases, keys and jump hosts all come from the user's ssh config;
    output is streamed straight to the terminal.

    Args:
        on_command: Called with the argv of every ssh invocation (verbose output)
    """

    def __init__(self, on_command: Optional[Callable[[List[str]], None]] = None):
        self.on_command = on_command

    def _announce(self, argv: List[str]) -> None:
        logger.debug(f"exec: {argv}")
        if self.on_command:
            self.on_command(argv)

    def run(self, host: str, command: str, interactive: bool = False) -> int:
        argv = ["ssh"]
        if interactive:
            argv.append("-t")
        argv.extend(SSH_KEEPALIVE_OPTIONS)
        argv.extend([host, command])
        self._announce(argv)

        try:
            completed = subprocess.run(argv)
        except FileNotFoundError as e:
            raise RemoteCommandError(
                "ssh executable not found on PATH", exit_code=EXIT_NOT_FOUND
            ) from e
        return completed.returncode

    def is_reachable(self, host: str) -> bool:
        argv = [
            "ssh",
            "-o", f"ConnectTimeout={SSH_CONNECT_TIMEOUT}",
            "-o", "BatchMode=yes",
            host,
            "exit 0",
        ]
        logger.debug(f"probe: {argv}")
        try:
            completed = subprocess.run(
                argv,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except FileNotFoundError:
            return False
        return completed.returncode == 0
