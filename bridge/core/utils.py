"""
Core utility functions
"""
import paramiko
from pathlib import Path
from typing import Dict, Any

from .constants import SSH_CONFIG_PATH


# ============================================================
# SSH Config Lookup
# ============================================================

def load_ssh_config(hostname: str) -> Dict[str, Any]:
    """
    Resolve a Host alias through ~/.ssh/config.

    Args:
        hostname: Host alias or address as written in bridge.toml

    Returns:
        Dictionary containing host, user, port, key_file. When there is no
        ~/.ssh/config the alias is returned unchanged with port 22.
    """
    config_path = Path(SSH_CONFIG_PATH).expanduser()
    if not config_path.exists():
        return {"host": hostname, "user": None, "port": 22, "key_file": None}

    ssh_config = paramiko.SSHConfig.from_path(str(config_path))
    entry = ssh_config.lookup(hostname)

    return {
        "host": entry.get("hostname", hostname),
        "user": entry.get("user", None),
        "port": int(entry.get("port", 22)),
        "key_file": entry.get("identityfile", [None])[0],
    }


# ============================================================
# Path Utilities
# ============================================================

def is_windows_drive_path(path: str) -> bool:
    """Check for a drive letter prefix such as C:/ or C:\\"""
    return len(path) >= 2 and path[0].isalpha() and path[1] == ":"


def to_cygwin_path(path: str) -> str:
    """
    Convert a Windows path (C:/foo or C:\\foo) to Cygwin form (/cygdrive/c/foo).

    Non-drive paths are returned unchanged.
    """
    if not is_windows_drive_path(path):
        return path
    drive = path[0].lower()
    rest = path[2:].replace("\\", "/")
    return f"/cygdrive/{drive}{rest}"


def join_remote_path(base: str, name: str) -> str:
    """Join a remote directory and a file name with a forward slash"""
    return f"{base.rstrip('/')}/{name}"
