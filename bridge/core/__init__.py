"""
Core infrastructure layer
"""
from .constants import *
from .exceptions import *
from .logging import setup_logging, get_logger, get_stdout_console, get_stderr_console
from .interfaces import RemoteTransport, FileTransport
from .utils import (
    load_ssh_config,
    is_windows_drive_path,
    to_cygwin_path,
    join_remote_path,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "get_stdout_console",
    "get_stderr_console",
    "RemoteTransport",
    "FileTransport",
    "load_ssh_config",
    "is_windows_drive_path",
    "to_cygwin_path",
    "join_remote_path",
    "BridgeError",
    "ConfigError",
    "SubstitutionError",
    "LockTimeoutError",
    "ReconnectTimeoutError",
    "TransferError",
    "RemoteCommandError",
]
