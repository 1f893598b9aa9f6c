"""
Parse bridge.toml dictionaries into project models
"""
from pathlib import Path
from typing import Any, Dict, List

from ...core.constants import (
    DEFAULT_EXCLUDES,
    DEFAULT_LOCK_TIMEOUT,
    DEFAULT_RECONNECT_TIMEOUT,
)
from ...core.exceptions import ConfigError
from ...domain.project import HostProfile, LockSetting, ProjectProfile, Shell, SyncMethod


# ============================================================
# Field Helpers
# ============================================================

def _require_str(cfg: Dict[str, Any], key: str, where: str) -> str:
    value = cfg.get(key)
    if not isinstance(value, str) or not value:
        raise ConfigError(f"{where}: '{key}' is required and must be a non-empty string")
    return value


def _optional_str(cfg: Dict[str, Any], key: str, where: str):
    value = cfg.get(key)
    if value is not None and not isinstance(value, str):
        raise ConfigError(f"{where}: '{key}' must be a string")
    return value


def _positive_int(cfg: Dict[str, Any], key: str, default: int, where: str) -> int:
    value = cfg.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigError(f"{where}: '{key}' must be a positive integer, got {value!r}")
    return value


def _string_list(cfg: Dict[str, Any], key: str, default: List[str], where: str) -> List[str]:
    value = cfg.get(key, default)
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"{where}: '{key}' must be a list of strings")
    return list(value)


def _enum(enum_cls, cfg: Dict[str, Any], key: str, default, where: str):
    value = cfg.get(key, default.value)
    try:
        return enum_cls(value)
    except ValueError:
        choices = ", ".join(member.value for member in enum_cls)
        raise ConfigError(f"{where}: '{key}' must be one of {choices}, got {value!r}") from None


# ============================================================
# Configuration Parsing
# ============================================================

def parse_host(name: str, cfg: Dict[str, Any]) -> HostProfile:
    """Parse one [hosts.<name>] table"""
    where = f"[hosts.{name}]"
    if not isinstance(cfg, dict):
        raise ConfigError(f"{where} must be a table")

    try:
        lock = LockSetting.from_value(cfg.get("lock"))
    except ConfigError as e:
        raise ConfigError(f"{where}: {e}") from None

    strict_env = cfg.get("strict_env", True)
    if not isinstance(strict_env, bool):
        raise ConfigError(f"{where}: 'strict_env' must be true or false")

    return HostProfile(
        name=name,
        hostname=_require_str(cfg, "hostname", where),
        path=_require_str(cfg, "path", where),
        shell=_enum(Shell, cfg, "shell", Shell.BASH, where),
        sync_method=_enum(SyncMethod, cfg, "sync_method", SyncMethod.TAR, where),
        wrapper=_optional_str(cfg, "wrapper", where),
        strict_env=strict_env,
        env_files=tuple(_string_list(cfg, "env_files", [], where)),
        reconnect_command=_optional_str(cfg, "reconnect_command", where),
        reconnect_timeout=_positive_int(cfg, "reconnect_timeout", DEFAULT_RECONNECT_TIMEOUT, where),
        lock=lock,
        lock_timeout=_positive_int(cfg, "lock_timeout", DEFAULT_LOCK_TIMEOUT, where),
    )


def parse_project(cfg: Dict[str, Any], root: Path) -> ProjectProfile:
    """
    Parse a whole bridge.toml.

    Raises:
        ConfigError: On any invalid or inconsistent value
    """
    hosts_cfg = cfg.get("hosts", {})
    if not isinstance(hosts_cfg, dict):
        raise ConfigError("[hosts] must be a table")

    sync_cfg = cfg.get("sync", {})
    if not isinstance(sync_cfg, dict):
        raise ConfigError("[sync] must be a table")

    default_host = _optional_str(cfg, "default_host", "bridge.toml")

    project = ProjectProfile(
        root=root,
        hosts={name: parse_host(name, host_cfg) for name, host_cfg in hosts_cfg.items()},
        default_host=default_host,
        exclude=_string_list(sync_cfg, "exclude", DEFAULT_EXCLUDES, "[sync]"),
    )
    project.validate()
    return project
