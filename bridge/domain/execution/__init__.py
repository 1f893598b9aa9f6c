"""
Execution domain module: shell adaptation, locking, reconnect supervision
"""
from .models import ReconnectState, ReconnectSession, ExecutionResult, LockHandle
from .shell import (
    ShellAdapter,
    BashAdapter,
    PowerShellAdapter,
    CmdAdapter,
    apply_wrapper,
    get_adapter,
    build_remote_command,
)
from .lock import LockManager, lock_file_path, default_lock_dir
from .reconnect import ReconnectSupervisor, is_connection_failure

__all__ = [
    "ReconnectState",
    "ReconnectSession",
    "ExecutionResult",
    "LockHandle",
    "ShellAdapter",
    "BashAdapter",
    "PowerShellAdapter",
    "CmdAdapter",
    "apply_wrapper",
    "get_adapter",
    "build_remote_command",
    "LockManager",
    "lock_file_path",
    "default_lock_dir",
    "ReconnectSupervisor",
    "is_connection_failure",
]
