"""
Single-file upload and download
"""
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Optional

from ...core.exceptions import TransferError
from ...core.interfaces import FileTransport, RemoteTransport
from ...core.logging import get_logger
from ...core.utils import join_remote_path
from ..execution.shell import get_adapter
from ..project.models import ProjectProfile

logger = get_logger(__name__)


@dataclass(frozen=True)
class TransferRequest:
    """Resolved source and destination of one copy"""
    host_name: str
    source: str
    destination: str
    dry_run: bool = False


def is_verbatim_remote_path(path: str) -> bool:
    """Absolute, home-relative or drive paths are not joined to the host path"""
    return path.startswith("/") or path.startswith("~") or ":" in path


class TransferService:
    """Copy single files or directories between the project and a host"""

    def __init__(self, project: ProjectProfile, remote: RemoteTransport, files: FileTransport):
        self.project = project
        self.remote = remote
        self.files = files

    def upload(
        self,
        file: str,
        dest: Optional[str] = None,
        host_name: Optional[str] = None,
        dry_run: bool = False,
        cwd: Optional[Path] = None,
    ) -> TransferRequest:
        """
        Upload a local file into the host path.

        Args:
            file: Local path, relative to cwd unless absolute
            dest: Remote file name (default: the local file name)
            host_name: Host (default: the project default)
            dry_run: Resolve and report only

        Raises:
            TransferError: Local file missing, remote mkdir or scp failure
        """
        host = self.project.get_host(host_name)
        local_path = Path(file)
        if not local_path.is_absolute():
            local_path = (cwd or Path.cwd()) / local_path

        if not dry_run and not local_path.exists():
            raise TransferError(f"Local file does not exist: {local_path}")

        remote_path = join_remote_path(host.path, dest or local_path.name)
        request = TransferRequest(
            host_name=host.name,
            source=str(local_path),
            destination=f"{host.hostname}:{remote_path}",
            dry_run=dry_run,
        )
        if dry_run:
            return request

        status = self.remote.run(host.hostname, get_adapter(host.shell).mkdir(host.path))
        if status != 0:
            raise TransferError(
                f"Failed to create remote directory {host.path} on {host.hostname} "
                f"(exit code {status})"
            )
        self.files.copy(request.source, request.destination)
        logger.info(f"Uploaded {request.source} -> {request.destination}")
        return request

    def download(
        self,
        file: str,
        dest: Optional[str] = None,
        host_name: Optional[str] = None,
        dry_run: bool = False,
    ) -> TransferRequest:
        """
        Download a file or directory from the host.

        Relative remote paths are taken from the host path; the local
        destination defaults to the remote file name in the current directory.
        """
        host = self.project.get_host(host_name)
        if is_verbatim_remote_path(file):
            remote_path = file
        else:
            remote_path = join_remote_path(host.path, file)

        local_path = dest or PurePosixPath(file.replace("\\", "/")).name or file
        request = TransferRequest(
            host_name=host.name,
            source=f"{host.hostname}:{remote_path}",
            destination=local_path,
            dry_run=dry_run,
        )
        if dry_run:
            return request

        self.files.copy(request.source, request.destination)
        logger.info(f"Downloaded {request.source} -> {request.destination}")
        return request
