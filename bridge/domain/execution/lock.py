"""
Advisory cross-process lock manager

Lock identity is (host, lock name). Every invocation derives the same lock
file path from that pair, so independent processes contend on one file
without talking to each other. The lock itself is an OS advisory lock
(flock on POSIX, msvcrt on Windows) owned by the open file handle, so it is
released when the process exits, however it exits.
"""
import os
import re
import tempfile
import time
from pathlib import Path
from typing import IO, Any, Callable, Optional, Union

from ...core.constants import (
    DEFAULT_LOCK_NAME,
    LOCK_FILE_PREFIX,
    LOCK_POLL_INTERVAL,
    POSIX_LOCK_DIR,
)
from ...core.exceptions import LockTimeoutError
from ...core.logging import get_logger
from .models import LockHandle

logger = get_logger(__name__)

_UNSAFE_CHARS_RE = re.compile(r"[^A-Za-z0-9._@-]")


# ============================================================
# Lock File Naming
# ============================================================

def default_lock_dir() -> Path:
    """Shared temp directory all local invocations agree on"""
    if os.name == "nt":
        return Path(tempfile.gettempdir())
    return Path(POSIX_LOCK_DIR)


def lock_file_path(host: str, name: str, lock_dir: Union[str, Path, None] = None) -> Path:
    """
    Deterministic lock file path for (host, name).

    Characters that are unsafe in file names become '_'.
    """
    directory = Path(lock_dir) if lock_dir is not None else default_lock_dir()
    safe_host = _UNSAFE_CHARS_RE.sub("_", host)
    safe_name = _UNSAFE_CHARS_RE.sub("_", name)
    return directory / f"{LOCK_FILE_PREFIX}-{safe_host}-{safe_name}.lock"


# ============================================================
# OS Lock Primitives
# ============================================================

def _try_lock(handle: IO[Any]) -> bool:
    """Exclusive non-blocking lock; False when held elsewhere"""
    try:
        if os.name == "nt":
            import msvcrt

            handle.seek(0)
            msvcrt.locking(handle.fileno(), msvcrt.LK_NBLCK, 1)
        else:
            import fcntl

            fcntl.flock(handle.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
        return True
    except OSError:
        return False


def _unlock(handle: IO[Any]) -> None:
    try:
        if os.name == "nt":
            import msvcrt

            handle.seek(0)
            msvcrt.locking(handle.fileno(), msvcrt.LK_UNLCK, 1)
        else:
            import fcntl

            fcntl.flock(handle.fileno(), fcntl.LOCK_UN)
    finally:
        handle.close()


# ============================================================
# Lock Manager
# ============================================================

class LockManager:
    """
    Acquire and release (host, name) advisory locks.

    Args:
        lock_dir: Directory for lock files (default: shared temp dir)
        poll_interval: Seconds between attempts while contended
        clock: Monotonic clock, injectable for tests
        sleep: Sleep function, injectable for tests
        on_wait: Called once with (host, name) when the lock is contended
        on_acquired: Called with (host, name) after a contended wait succeeds
    """

    def __init__(
        self,
        lock_dir: Union[str, Path, None] = None,
        poll_interval: float = LOCK_POLL_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        on_wait: Optional[Callable[[str, str], None]] = None,
        on_acquired: Optional[Callable[[str, str], None]] = None,
    ):
        self.lock_dir = Path(lock_dir) if lock_dir is not None else default_lock_dir()
        self.poll_interval = poll_interval
        self.clock = clock
        self.sleep = sleep
        self.on_wait = on_wait
        self.on_acquired = on_acquired

    def path_for(self, host: str, name: str) -> Path:
        return lock_file_path(host, name, self.lock_dir)

    def acquire(
        self,
        host: str,
        name: Optional[str] = None,
        timeout: float = 600,
    ) -> LockHandle:
        """
        Acquire the exclusive lock for (host, name).

        Tries once without blocking, then retries every poll_interval
        seconds until the lock is obtained or timeout seconds have elapsed.

        Raises:
            LockTimeoutError: If the lock is still held elsewhere at timeout
        """
        name = name or DEFAULT_LOCK_NAME
        path = self.path_for(host, name)
        path.parent.mkdir(parents=True, exist_ok=True)

        handle = path.open("a+", encoding="utf-8")
        try:
            if _try_lock(handle):
                logger.info(f"Acquired lock '{name}' on {host} ({path})")
                return LockHandle(host=host, name=name, path=path, file=handle)

            if self.on_wait:
                self.on_wait(host, name)
            logger.info(f"Lock '{name}' on {host} is held, waiting up to {timeout}s")

            start = self.clock()
            while True:
                elapsed = self.clock() - start
                if elapsed >= timeout:
                    raise LockTimeoutError(host, name, timeout)

                self.sleep(min(self.poll_interval, timeout - elapsed))

                if _try_lock(handle):
                    logger.info(f"Acquired lock '{name}' on {host} after {self.clock() - start:.0f}s")
                    if self.on_acquired:
                        self.on_acquired(host, name)
                    return LockHandle(host=host, name=name, path=path, file=handle)
        except BaseException:
            # Timeout or Ctrl-C while waiting: drop our handle on the file
            handle.close()
            raise

    def release(self, handle: LockHandle) -> None:
        """Release a lock; releasing twice is a no-op"""
        if not handle.held:
            return
        _unlock(handle.file)
        handle.file = None
        logger.info(f"Released lock '{handle.name}' on {handle.host}")

    def hold(self, host: str, name: Optional[str] = None, timeout: float = 600) -> "HeldLock":
        """Context manager form of acquire/release"""
        return HeldLock(self, host, name, timeout)


class HeldLock:
    """`with manager.hold(host, name, timeout) as handle:`"""

    def __init__(self, manager: LockManager, host: str, name: Optional[str], timeout: float):
        self.manager = manager
        self.host = host
        self.name = name
        self.timeout = timeout
        self.handle: Optional[LockHandle] = None

    def __enter__(self) -> LockHandle:
        self.handle = self.manager.acquire(self.host, self.name, self.timeout)
        return self.handle

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        if self.handle is not None:
            self.manager.release(self.handle)
