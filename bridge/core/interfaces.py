"""
Core interfaces for dependency injection
"""
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Sequence


class RemoteTransport(ABC):
    """Remote-execution transport interface"""

    @abstractmethod
    def run(self, host: str, command: str, interactive: bool = False) -> int:
        """Run a final command string on host, streaming output; return its exit status"""
        pass

    @abstractmethod
    def is_reachable(self, host: str) -> bool:
        """Check whether a new connection to host can be established"""
        pass


class FileTransport(ABC):
    """File-transfer transport interface"""

    @abstractmethod
    def send_archive(
        self, host: str, remote_command: str, root: Path, files: Sequence[str]
    ) -> None:
        """Stream a gzip tar of files (relative to root) into remote_command's stdin"""
        pass

    @abstractmethod
    def rsync(self, args: Sequence[str]) -> None:
        """Run rsync with the given arguments"""
        pass

    @abstractmethod
    def copy(self, source: str, destination: str) -> None:
        """Recursive copy between local paths and host:path specs"""
        pass
