import sys

import pytest

from bridge.core.exceptions import LockTimeoutError
from bridge.domain.execution import LockManager, lock_file_path

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="flock semantics")


@pytest.fixture
def manager(tmp_path, clock):
    return LockManager(lock_dir=tmp_path, clock=clock, sleep=clock.sleep)


def other_process(tmp_path) -> LockManager:
    """A second manager opens its own file handle, like another invocation"""
    return LockManager(lock_dir=tmp_path, sleep=lambda s: None)


class TestLockFilePath:
    def test_deterministic(self, tmp_path):
        assert lock_file_path("dev", "kernel", tmp_path) == lock_file_path("dev", "kernel", tmp_path)
        assert lock_file_path("dev", "kernel", tmp_path).name == "bridge-dev-kernel.lock"

    def test_unsafe_characters_replaced(self, tmp_path):
        path = lock_file_path("user@10.0.0.1:22", "a/b c", tmp_path)
        assert path.name == "bridge-user@10.0.0.1_22-a_b_c.lock"
        assert path.parent == tmp_path

    def test_default_directory(self):
        assert str(lock_file_path("h", "n")).startswith("/tmp/")


class TestLockManager:
    def test_acquire_and_release(self, manager, tmp_path):
        handle = manager.acquire("dev", "kernel", timeout=5)
        assert handle.held
        assert handle.key == ("dev", "kernel")
        assert handle.path.exists()
        manager.release(handle)
        assert not handle.held
        manager.release(handle)

    def test_unnamed_lock_uses_default_name(self, manager):
        with manager.hold("dev") as handle:
            assert handle.name == "default"

    def test_exclusive_across_handles(self, manager, tmp_path, clock):
        holder = other_process(tmp_path).acquire("dev", "kernel", timeout=1)
        try:
            with pytest.raises(LockTimeoutError):
                manager.acquire("dev", "kernel", timeout=4)
        finally:
            holder.file.close()

    def test_independent_names_do_not_block(self, manager, tmp_path, clock):
        holder = other_process(tmp_path).acquire("dev", "kernel", timeout=1)
        try:
            handle = manager.acquire("dev", "docs", timeout=2)
            assert handle.held
            assert clock.sleeps == []
            manager.release(handle)
        finally:
            holder.file.close()

    def test_independent_hosts_do_not_block(self, manager, tmp_path, clock):
        holder = other_process(tmp_path).acquire("dev", "kernel", timeout=1)
        try:
            with manager.hold("prod", "kernel") as handle:
                assert handle.held
        finally:
            holder.file.close()

    def test_times_out_at_timeout_not_holder_duration(self, manager, tmp_path, clock):
        waits = []
        manager.on_wait = lambda host, name: waits.append((host, name))
        holder = other_process(tmp_path).acquire("dev", "kernel", timeout=1)
        try:
            with pytest.raises(LockTimeoutError) as exc_info:
                manager.acquire("dev", "kernel", timeout=2)
        finally:
            holder.file.close()

        assert clock.now == pytest.approx(2)
        assert clock.sleeps == [2]
        assert waits == [("dev", "kernel")]
        error = exc_info.value
        assert (error.host, error.name, error.timeout) == ("dev", "kernel", 2)
        assert "kernel" in str(error) and "dev" in str(error)

    def test_waits_until_released(self, manager, tmp_path, clock):
        holder_manager = other_process(tmp_path)
        holder = holder_manager.acquire("dev", "kernel", timeout=1)
        acquired = []

        def sleep(seconds):
            clock.sleep(seconds)
            if clock.now >= 4:
                holder_manager.release(holder)

        manager.sleep = sleep
        manager.on_acquired = lambda host, name: acquired.append(name)
        handle = manager.acquire("dev", "kernel", timeout=600)

        assert handle.held
        assert clock.now == pytest.approx(4)
        assert acquired == ["kernel"]
        manager.release(handle)

    def test_released_when_block_raises(self, manager, tmp_path):
        with pytest.raises(RuntimeError):
            with manager.hold("dev", "kernel"):
                raise RuntimeError("boom")
        handle = other_process(tmp_path).acquire("dev", "kernel", timeout=1)
        assert handle.held
        handle.file.close()
