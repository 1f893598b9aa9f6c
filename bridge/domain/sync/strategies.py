"""
Sync strategy selection

Both strategies share one contract, `sync(plan) -> TransferSummary`. They
decide what to transfer; the file transport moves the bytes.
"""
import shlex
from abc import ABC, abstractmethod
from typing import Dict, List, Type

from ...core.exceptions import TransferError
from ...core.interfaces import FileTransport, RemoteTransport
from ...core.logging import get_logger
from ...core.utils import to_cygwin_path
from ..execution.shell import get_adapter
from ..project.models import SyncMethod
from .matcher import ExcludeMatcher, collect_entries
from .models import FileEntry, SyncPlan, TransferSummary

logger = get_logger(__name__)


class SyncStrategy(ABC):
    """Transfer strategy interface"""

    method: SyncMethod

    def __init__(self, remote: RemoteTransport, files: FileTransport):
        self.remote = remote
        self.files = files

    @abstractmethod
    def describe(self, plan: SyncPlan, entries: List[FileEntry]) -> List[str]:
        """Command lines this strategy runs for plan"""

    @abstractmethod
    def transfer(self, plan: SyncPlan, summary: TransferSummary) -> None:
        """Perform the transfer"""

    def sync(self, plan: SyncPlan) -> TransferSummary:
        """
        Compute the effective file set and, unless dry_run, transfer it.

        Raises:
            TransferError: If the copy tool is missing or fails
        """
        entries = collect_entries(plan.root, ExcludeMatcher(plan.excludes))
        summary = TransferSummary(
            strategy=self.method,
            entries=entries,
            commands=self.describe(plan, entries),
            dry_run=plan.dry_run,
        )
        logger.debug(
            f"{self.method.value}: {summary.file_count} files, {summary.total_bytes} bytes"
        )
        if plan.dry_run:
            return summary

        self.transfer(plan, summary)
        return summary


class FullCopyStrategy(SyncStrategy):
    """
    Stream the whole non-excluded tree as one tar.gz every time.

    Adds and overwrites only; remote files absent locally are left alone.
    """

    method = SyncMethod.TAR

    def describe(self, plan: SyncPlan, entries: List[FileEntry]) -> List[str]:
        # The archive is written in-process, not by a local tar binary
        adapter = get_adapter(plan.shell)
        return [
            shlex.join(["ssh", plan.hostname, adapter.mkdir(plan.remote_path)]),
            f"tar.gz stream of {len(entries)} entries from {plan.root} | "
            + shlex.join(["ssh", plan.hostname, adapter.extract_archive(plan.remote_path)]),
        ]

    def transfer(self, plan: SyncPlan, summary: TransferSummary) -> None:
        if plan.delete_excluded:
            logger.warning("--delete-excluded only applies to the rsync sync method; ignored")

        adapter = get_adapter(plan.shell)
        status = self.remote.run(plan.hostname, adapter.mkdir(plan.remote_path))
        if status != 0:
            raise TransferError(
                f"Failed to create remote directory {plan.remote_path} on {plan.hostname} "
                f"(exit code {status})"
            )

        self.files.send_archive(
            plan.hostname,
            adapter.extract_archive(plan.remote_path),
            plan.root,
            [entry.relative for entry in summary.entries],
        )


class IncrementalStrategy(SyncStrategy):
    """
    rsync only the changed entries and mirror local deletions.

    Excluded remote files survive `--delete` unless delete_excluded is set.
    """

    method = SyncMethod.RSYNC

    def build_args(self, plan: SyncPlan) -> List[str]:
        args = ["-az", "--delete"]
        if plan.delete_excluded:
            args.append("--delete-excluded")
        # Windows targets get DENY ACLs from preserved POSIX permissions
        if plan.shell.is_windows:
            args.append("--no-perms")
        if plan.verbose:
            args.append("-v")
        args.extend(f"--exclude={pattern}" for pattern in plan.excludes)

        # Trailing slash: sync the contents, not the directory itself
        source = str(plan.root)
        if not source.endswith("/"):
            source += "/"
        args.append(source)
        args.append(f"{plan.hostname}:{to_cygwin_path(plan.remote_path)}")
        return args

    def describe(self, plan: SyncPlan, entries: List[FileEntry]) -> List[str]:
        return [shlex.join(["rsync", *self.build_args(plan)])]

    def transfer(self, plan: SyncPlan, summary: TransferSummary) -> None:
        self.files.rsync(self.build_args(plan))


_STRATEGIES: Dict[SyncMethod, Type[SyncStrategy]] = {
    SyncMethod.TAR: FullCopyStrategy,
    SyncMethod.RSYNC: IncrementalStrategy,
}


def select_strategy(
    method: SyncMethod, remote: RemoteTransport, files: FileTransport
) -> SyncStrategy:
    """Strategy instance for a host's sync method"""
    return _STRATEGIES[SyncMethod(method)](remote, files)
