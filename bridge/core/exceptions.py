"""
Unified exception definitions
"""
from typing import List, Optional

from .constants import (
    EXIT_CONFIG_ERROR,
    EXIT_CONNECTION_FAILURE,
    EXIT_LOCK_TIMEOUT,
    EXIT_SUBSTITUTION_ERROR,
    EXIT_TRANSFER_ERROR,
)


class BridgeError(Exception):
    """Base exception class"""
    exit_code = 1


class ConfigError(BridgeError):
    """Configuration error (missing file, bad host reference, invalid value)"""
    exit_code = EXIT_CONFIG_ERROR


class SubstitutionError(BridgeError):
    """Required ${VAR} references could not be resolved"""
    exit_code = EXIT_SUBSTITUTION_ERROR

    def __init__(self, missing: List[str], source: Optional[str] = None):
        self.missing = list(missing)
        self.source = source
        where = f" in {source}" if source else ""
        super().__init__(
            f"Missing required environment variables{where}: {', '.join(self.missing)}. "
            "Use ${VAR:-default} syntax for optional variables, "
            "or set strict_env = false in bridge.toml"
        )


class LockTimeoutError(BridgeError):
    """Lock could not be acquired before the timeout"""
    exit_code = EXIT_LOCK_TIMEOUT

    def __init__(self, host: str, name: str, timeout: float):
        self.host = host
        self.name = name
        self.timeout = timeout
        super().__init__(
            f"Timed out waiting for lock '{name}' on {host} after {timeout:g}s"
        )


class ReconnectTimeoutError(BridgeError):
    """Host stayed unreachable for the whole reconnect window"""
    exit_code = EXIT_CONNECTION_FAILURE

    def __init__(self, host: str, timeout: float, elapsed: float):
        self.host = host
        self.timeout = timeout
        self.elapsed = elapsed
        super().__init__(
            f"Timed out waiting for reconnection to {host} after {timeout:g}s "
            f"(waited {elapsed:.0f}s)"
        )


class TransferError(BridgeError):
    """File transfer error (copy tool failed or is missing)"""
    exit_code = EXIT_TRANSFER_ERROR


class RemoteCommandError(BridgeError):
    """A remote helper command returned a non-zero status"""

    def __init__(self, message: str, exit_code: int = 1):
        self.exit_code = exit_code
        super().__init__(message)
