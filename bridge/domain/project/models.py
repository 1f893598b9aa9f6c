"""
Project domain models
"""
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from ...core.constants import (
    DEFAULT_EXCLUDES,
    DEFAULT_LOCK_NAME,
    DEFAULT_LOCK_TIMEOUT,
    DEFAULT_RECONNECT_TIMEOUT,
)
from ...core.exceptions import ConfigError


class Shell(str, Enum):
    """Remote shell kinds"""
    BASH = "bash"
    POWERSHELL = "powershell"
    CMD = "cmd"

    @property
    def is_windows(self) -> bool:
        return self is not Shell.BASH

    def __str__(self) -> str:
        return self.value


class SyncMethod(str, Enum):
    """
    Sync strategies:
    - tar: stream a full archive every time, never deletes remote files
    - rsync: incremental, mirrors local deletions
    """
    TAR = "tar"
    RSYNC = "rsync"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class LockSetting:
    """
    Lock configuration.

    `lock = false` (or absent) disables locking, `lock = true` uses the
    "default" lock name, `lock = "kernel"` uses a named lock.
    """
    enabled: bool = False
    name: Optional[str] = None

    @classmethod
    def off(cls) -> "LockSetting":
        return cls(enabled=False)

    @classmethod
    def from_value(cls, value: Union[bool, str, None]) -> "LockSetting":
        """Create from the TOML value of `lock`"""
        if value is None or value is False:
            return cls.off()
        if value is True:
            return cls(enabled=True)
        if isinstance(value, str):
            if not value.strip():
                raise ConfigError("lock name must not be empty")
            return cls(enabled=True, name=value)
        raise ConfigError(f"lock must be a boolean or a string, got: {value!r}")

    @property
    def lock_name(self) -> Optional[str]:
        """Effective lock name, None when locking is off"""
        if not self.enabled:
            return None
        return self.name or DEFAULT_LOCK_NAME


@dataclass(frozen=True)
class HostProfile:
    """One remote target"""
    name: str
    hostname: str
    path: str
    shell: Shell = Shell.BASH
    sync_method: SyncMethod = SyncMethod.TAR
    wrapper: Optional[str] = None
    strict_env: bool = True
    env_files: Tuple[str, ...] = ()
    reconnect_command: Optional[str] = None
    reconnect_timeout: int = DEFAULT_RECONNECT_TIMEOUT
    lock: LockSetting = field(default_factory=LockSetting.off)
    lock_timeout: int = DEFAULT_LOCK_TIMEOUT

    @property
    def lock_name(self) -> Optional[str]:
        return self.lock.lock_name

    def validate(self) -> None:
        """Validate configuration"""
        if not self.hostname:
            raise ConfigError(f"Host '{self.name}': hostname must not be empty")
        if not self.path:
            raise ConfigError(f"Host '{self.name}': path must not be empty")
        if self.reconnect_timeout <= 0:
            raise ConfigError(
                f"Host '{self.name}': reconnect_timeout must be positive, got {self.reconnect_timeout}"
            )
        if self.lock_timeout <= 0:
            raise ConfigError(
                f"Host '{self.name}': lock_timeout must be positive, got {self.lock_timeout}"
            )


@dataclass(frozen=True)
class ProjectProfile:
    """
    Parsed bridge.toml.

    Attributes:
        root: Project root (the directory holding bridge.toml)
        hosts: Host profiles keyed by name
        default_host: Host used when none is given; must be a key of hosts
        exclude: Glob patterns excluded from every sync
    """
    root: Path
    hosts: Dict[str, HostProfile] = field(default_factory=dict)
    default_host: Optional[str] = None
    exclude: List[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDES))

    def validate(self) -> None:
        """Validate configuration"""
        if self.default_host is not None and self.default_host not in self.hosts:
            raise ConfigError(
                f"default_host '{self.default_host}' is not defined under [hosts]"
            )
        for host in self.hosts.values():
            host.validate()

    def get_host(self, name: Optional[str] = None) -> HostProfile:
        """
        Get a host by name, or the default host.

        Raises:
            ConfigError: If no name is given and there is no default, or the
                name is unknown
        """
        host_name = name or self.default_host
        if not host_name:
            raise ConfigError(
                "No default host configured. Use --host or set default_host in bridge.toml"
            )
        try:
            return self.hosts[host_name]
        except KeyError:
            raise ConfigError(f"Host '{host_name}' not found in configuration") from None
