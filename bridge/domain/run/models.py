"""
Run domain models
"""
from dataclasses import dataclass
from typing import Optional


@dataclass
class RunOptions:
    """
    One `bridge run` invocation.

    The reconnect and lock fields override the host profile when set.
    """
    command: str
    sync: bool = False
    dry_run: bool = False
    interactive: bool = False
    verbose: bool = False
    reconnect_command: Optional[str] = None
    reconnect_timeout: Optional[int] = None
    lock_name: Optional[str] = None
    lock_timeout: Optional[int] = None


@dataclass(frozen=True)
class ResolvedRun:
    """Host settings after CLI overrides, with the final command strings"""
    host_name: str
    hostname: str
    remote_command: str
    recovery_command: Optional[str]
    reconnect_timeout: int
    lock_name: Optional[str]
    lock_timeout: int
    env_count: int = 0
