import textwrap
from pathlib import Path
from typing import Callable, List, Optional, Sequence

import pytest

from bridge.core.interfaces import FileTransport, RemoteTransport


class FakeClock:
    """Monotonic clock advanced only by its own sleep"""

    def __init__(self, start: float = 0.0):
        self.now = start
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class FakeRemote(RemoteTransport):
    """
    Scripted remote transport.

    statuses are returned by successive run() calls (0 once exhausted);
    reachable decides is_reachable() answers.
    """

    def __init__(
        self,
        statuses: Sequence[int] = (),
        reachable: Optional[Callable[[str], bool]] = None,
    ):
        self.statuses = list(statuses)
        self.reachable = reachable or (lambda host: True)
        self.runs: List[tuple] = []
        self.probes: List[str] = []

    def run(self, host: str, command: str, interactive: bool = False) -> int:
        self.runs.append((host, command, interactive))
        return self.statuses.pop(0) if self.statuses else 0

    def is_reachable(self, host: str) -> bool:
        self.probes.append(host)
        return self.reachable(host)

    @property
    def commands(self) -> List[str]:
        return [command for _, command, _ in self.runs]


class FakeFiles(FileTransport):
    """Records file-transfer calls instead of moving bytes"""

    def __init__(self):
        self.archives: List[tuple] = []
        self.rsyncs: List[List[str]] = []
        self.copies: List[tuple] = []

    def send_archive(self, host, remote_command, root, files) -> None:
        self.archives.append((host, remote_command, Path(root), list(files)))

    def rsync(self, args) -> None:
        self.rsyncs.append(list(args))

    def copy(self, source, destination) -> None:
        self.copies.append((source, destination))

    @property
    def calls(self) -> int:
        return len(self.archives) + len(self.rsyncs) + len(self.copies)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def remote() -> FakeRemote:
    return FakeRemote()


@pytest.fixture
def make_remote():
    """FakeRemote factory for scripted statuses and reachability"""
    return FakeRemote


@pytest.fixture
def files() -> FakeFiles:
    return FakeFiles()


SAMPLE_CONFIG = """
default_host = "dev"

[hosts.dev]
hostname = "dev-server"
path = "/home/user/project"
wrapper = "source ~/.profile && {}"
env_files = [".env.prod"]
reconnect_command = "collect-crash.sh"
reconnect_timeout = 10
lock = "kernel"
lock_timeout = 2

[hosts.win]
hostname = "win-box"
path = "C:/dev/project"
shell = "powershell"
sync_method = "rsync"

[sync]
exclude = [".git", "target"]
"""


@pytest.fixture
def write_config(tmp_path: Path):
    """Write a bridge.toml (dedented) into tmp_path and return its path"""

    def _write(content: str = SAMPLE_CONFIG, directory: Optional[Path] = None) -> Path:
        target = (directory or tmp_path) / "bridge.toml"
        target.write_text(textwrap.dedent(content), encoding="utf-8")
        return target

    return _write


@pytest.fixture
def project_dir(tmp_path: Path, write_config) -> Path:
    """A small project tree with a config and env files"""
    write_config()
    (tmp_path / ".env").write_text("GREETING=hello\nPORT=8000\n", encoding="utf-8")
    (tmp_path / ".env.prod").write_text("PORT=9000\n", encoding="utf-8")
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "main.py").write_text("print('hi')\n", encoding="utf-8")
    (tmp_path / "README.md").write_text("# demo\n", encoding="utf-8")
    (tmp_path / ".git").mkdir()
    (tmp_path / ".git" / "HEAD").write_text("ref: refs/heads/main\n", encoding="utf-8")
    (tmp_path / ".DS_Store").write_bytes(b"\0")
    return tmp_path
