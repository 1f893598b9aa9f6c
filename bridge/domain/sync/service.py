"""
Sync domain service - business logic
"""
from typing import Callable, Optional

from ...core.interfaces import FileTransport, RemoteTransport
from ...core.logging import get_logger
from ..project.models import HostProfile, ProjectProfile
from .matcher import effective_excludes
from .models import SyncPlan, TransferSummary
from .strategies import select_strategy

logger = get_logger(__name__)


class SyncService:
    """
    Sync a project tree to one host.

    No direct dependency on the CLI; progress is reported through callbacks.
    """

    def __init__(
        self,
        project: ProjectProfile,
        remote: RemoteTransport,
        files: FileTransport,
        on_plan: Optional[Callable[[SyncPlan], None]] = None,
        on_complete: Optional[Callable[[TransferSummary], None]] = None,
    ):
        """
        Initialize sync service.

        Args:
            project: Loaded project configuration
            remote: Remote-execution transport (remote mkdir)
            files: File-transfer transport
            on_plan: Callback with the plan before anything runs
            on_complete: Callback with the summary afterwards
        """
        self.project = project
        self.remote = remote
        self.files = files
        self.on_plan = on_plan
        self.on_complete = on_complete

    def plan(
        self,
        host: HostProfile,
        auto_exclude: bool = True,
        delete_excluded: bool = False,
        dry_run: bool = False,
        verbose: bool = False,
    ) -> SyncPlan:
        """Build the plan for host from the project settings"""
        return SyncPlan(
            strategy=host.sync_method,
            root=self.project.root,
            hostname=host.hostname,
            remote_path=host.path,
            shell=host.shell,
            excludes=effective_excludes(self.project.exclude, auto_exclude),
            delete_excluded=delete_excluded,
            dry_run=dry_run,
            verbose=verbose,
        )

    def sync(
        self,
        host: HostProfile,
        auto_exclude: bool = True,
        delete_excluded: bool = False,
        dry_run: bool = False,
        verbose: bool = False,
    ) -> TransferSummary:
        """
        Sync the project root to host.path.

        Raises:
            TransferError: If the transfer fails; callers must not go on to
                run commands against a half-synced tree
        """
        plan = self.plan(host, auto_exclude, delete_excluded, dry_run, verbose)
        logger.info(
            f"Syncing {plan.root} to {host.name} ({host.hostname}:{host.path}) "
            f"with {plan.strategy.value}"
        )
        if self.on_plan:
            self.on_plan(plan)

        strategy = select_strategy(plan.strategy, self.remote, self.files)
        summary = strategy.sync(plan)

        if self.on_complete:
            self.on_complete(summary)
        return summary
