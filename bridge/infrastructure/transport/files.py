"""
File-transfer transport: tar streaming over ssh, rsync, scp
"""
import subprocess
import tarfile
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from ...core.exceptions import TransferError
from ...core.interfaces import FileTransport
from ...core.logging import get_logger

logger = get_logger(__name__)


class SubprocessFileTransport(FileTransport):
    """
    Move bytes with external tools.

    Args:
        on_command: Called with the argv of every tool invocation (verbose output)
    """

    def __init__(self, on_command: Optional[Callable[[List[str]], None]] = None):
        self.on_command = on_command

    def _announce(self, argv: List[str]) -> None:
        logger.debug(f"exec: {argv}")
        if self.on_command:
            self.on_command(argv)

    def _run_tool(self, argv: List[str], hint: str = "") -> None:
        self._announce(argv)
        try:
            completed = subprocess.run(argv)
        except FileNotFoundError as e:
            raise TransferError(f"{argv[0]} not found on PATH. {hint}".strip()) from e
        if completed.returncode != 0:
            raise TransferError(f"{argv[0]} failed with exit code: {completed.returncode}")

    def send_archive(
        self, host: str, remote_command: str, root: Path, files: Sequence[str]
    ) -> None:
        """
        Pack files into a gzip tar stream piped to `ssh host remote_command`.

        Entries are added non-recursively: the caller's list is the
        complete, already filtered file set.
        """
        argv = ["ssh", host, remote_command]
        self._announce(argv)
        try:
            ssh = subprocess.Popen(argv, stdin=subprocess.PIPE)
        except FileNotFoundError as e:
            raise TransferError("ssh not found on PATH") from e

        write_error: Optional[OSError] = None
        try:
            with tarfile.open(fileobj=ssh.stdin, mode="w|gz") as archive:
                for relative in files:
                    archive.add(str(root / relative), arcname=relative, recursive=False)
        except BrokenPipeError as e:
            # Remote side went away; its exit status says why
            write_error = e
        except OSError as e:
            ssh.kill()
            ssh.wait()
            raise TransferError(f"Failed to archive {root}: {e}") from e
        finally:
            try:
                ssh.stdin.close()
            except BrokenPipeError:
                pass

        status = ssh.wait()
        if status != 0:
            raise TransferError(f"SSH/extract failed with exit code: {status}")
        if write_error is not None:
            raise TransferError(f"Archive stream to {host} was cut off: {write_error}")

    def rsync(self, args: Sequence[str]) -> None:
        self._run_tool(
            ["rsync", *args],
            hint='Install rsync or set sync_method = "tar" for this host.',
        )

    def copy(self, source: str, destination: str) -> None:
        self._run_tool(["scp", "-r", source, destination])
