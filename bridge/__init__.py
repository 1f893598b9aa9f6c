"""
bridge - run commands on remote hosts from a local project

Keeps a local project and a remote checkout in step and runs commands there:
- Project sync (full tar copy or incremental rsync)
- ${VAR} substitution from .env files and the process environment
- Command wrappers and bash / PowerShell / cmd adaptation
- Named advisory locks per host
- Reconnect supervision with a recovery command
"""

__version__ = "0.1.0"

# Export core components
from .core import (
    BridgeError,
    ConfigError,
    SubstitutionError,
    LockTimeoutError,
    ReconnectTimeoutError,
    TransferError,
    RemoteCommandError,
    load_ssh_config,
)

# Export domain models
from .domain.project import (
    Shell,
    SyncMethod,
    LockSetting,
    HostProfile,
    ProjectProfile,
)

from .domain.env import EnvironmentContext, substitute

from .domain.execution import (
    LockManager,
    ReconnectSupervisor,
    ReconnectState,
    ExecutionResult,
    build_remote_command,
)

from .domain.run import RunOptions, RunService
from .domain.sync import SyncService, TransferSummary

# Export configuration loading
from .adapters.config import ConfigLoader

__all__ = [
    # Version
    "__version__",
    # Errors
    "BridgeError",
    "ConfigError",
    "SubstitutionError",
    "LockTimeoutError",
    "ReconnectTimeoutError",
    "TransferError",
    "RemoteCommandError",
    # Project
    "Shell",
    "SyncMethod",
    "LockSetting",
    "HostProfile",
    "ProjectProfile",
    "ConfigLoader",
    # Environment
    "EnvironmentContext",
    "substitute",
    # Execution
    "LockManager",
    "ReconnectSupervisor",
    "ReconnectState",
    "ExecutionResult",
    "build_remote_command",
    "RunOptions",
    "RunService",
    "SyncService",
    "TransferSummary",
    # Utilities
    "load_ssh_config",
]
