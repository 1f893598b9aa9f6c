"""
Sync domain models
"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from ..project.models import Shell, SyncMethod


@dataclass(frozen=True)
class FileEntry:
    """One entry of the effective file set, relative to the project root"""
    relative: str
    is_dir: bool = False
    size: int = 0


@dataclass(frozen=True)
class SyncPlan:
    """
    What one sync will do. Computed fresh per invocation, never persisted.

    Attributes:
        strategy: tar (full copy) or rsync (incremental)
        root: Local project root
        hostname: Remote address
        remote_path: Remote project directory
        shell: Remote shell, decides quoting and Windows handling
        excludes: Effective exclude patterns (configured + built-in)
        delete_excluded: Also delete excluded files on the remote (rsync only)
        dry_run: Plan and report only
        verbose: Ask the copy tool for per-file output
    """
    strategy: SyncMethod
    root: Path
    hostname: str
    remote_path: str
    shell: Shell = Shell.BASH
    excludes: List[str] = field(default_factory=list)
    delete_excluded: bool = False
    dry_run: bool = False
    verbose: bool = False


@dataclass
class TransferSummary:
    """Result (or preview) of a sync"""
    strategy: SyncMethod
    entries: List[FileEntry] = field(default_factory=list)
    commands: List[str] = field(default_factory=list)
    dry_run: bool = False

    @property
    def files(self) -> List[str]:
        return [e.relative for e in self.entries if not e.is_dir]

    @property
    def file_count(self) -> int:
        return len(self.files)

    @property
    def total_bytes(self) -> int:
        return sum(e.size for e in self.entries if not e.is_dir)
