import pytest

from bridge.adapters.config import ConfigLoader
from bridge.core.exceptions import ConfigError, LockTimeoutError, SubstitutionError
from bridge.domain.execution import LockManager
from bridge.domain.run import RunOptions, RunService


@pytest.fixture
def project(project_dir):
    return ConfigLoader().load_file(project_dir / "bridge.toml")


@pytest.fixture
def make_service(project, files, clock, tmp_path):
    def _make(remote, **kwargs):
        lock_dir = tmp_path / "locks"
        kwargs.setdefault(
            "lock_manager", LockManager(lock_dir=lock_dir, clock=clock, sleep=clock.sleep)
        )
        return RunService(
            project,
            remote,
            files,
            environ={"USER_TOKEN": "abc"},
            clock=clock,
            sleep=clock.sleep,
            **kwargs,
        )

    return _make


def test_resolve_builds_commands(make_service, remote):
    host, resolved = make_service(remote).resolve(None, RunOptions(command="serve --port ${PORT}"))

    assert host.name == "dev"
    assert resolved.remote_command == (
        'cd "/home/user/project" && source ~/.profile && serve --port 9000'
    )
    assert resolved.recovery_command == (
        'cd "/home/user/project" && source ~/.profile && collect-crash.sh'
    )
    assert resolved.lock_name == "kernel"
    assert resolved.env_count == 2


def test_cli_overrides(make_service, remote):
    options = RunOptions(
        command="make",
        reconnect_command="dmesg",
        reconnect_timeout=30,
        lock_name="default",
        lock_timeout=9,
    )
    _, resolved = make_service(remote).resolve("dev", options)
    assert resolved.recovery_command.endswith("&& dmesg")
    assert resolved.reconnect_timeout == 30
    assert resolved.lock_name == "default"
    assert resolved.lock_timeout == 9


def test_process_environment_reaches_command(make_service, remote):
    _, resolved = make_service(remote).resolve(None, RunOptions(command="echo ${USER_TOKEN}"))
    assert resolved.remote_command.endswith("echo abc")


def test_missing_variable_fails_before_any_remote_action(make_service, remote, files):
    with pytest.raises(SubstitutionError):
        make_service(remote).run(None, RunOptions(command="echo ${NOPE}", sync=True))
    assert remote.runs == []
    assert files.calls == 0


def test_run_passes_exit_status(make_service, make_remote):
    remote = make_remote([3])
    result = make_service(remote).run("win", RunOptions(command="dir"))
    assert result.exit_code == 3
    assert remote.runs == [("win-box", "powershell -Command \"cd 'C:/dev/project'; dir\"", False)]


def test_run_holds_lock_during_execution(make_service, make_remote, clock, tmp_path):
    observed = []
    manager = LockManager(lock_dir=tmp_path / "locks", clock=clock, sleep=clock.sleep)
    contender = LockManager(lock_dir=tmp_path / "locks", clock=clock, sleep=clock.sleep)

    class ProbingRemote(make_remote):
        def run(self, host, command, interactive=False):
            with pytest.raises(LockTimeoutError):
                contender.acquire("dev-server", "kernel", timeout=1)
            observed.append(command)
            return 0

    result = make_service(ProbingRemote(), lock_manager=manager).run(None, RunOptions(command="make"))
    assert result.exit_code == 0
    assert len(observed) == 1

    # released afterwards
    handle = contender.acquire("dev-server", "kernel", timeout=1)
    contender.release(handle)


def test_reconnect_and_recovery(make_service, make_remote, clock):
    remote = make_remote([255, 0], reachable=lambda host: clock.now >= 6)
    result = make_service(remote).run(None, RunOptions(command="make"))
    assert result.recovered
    assert result.exit_code == 0
    assert remote.commands[1].endswith("collect-crash.sh")


def test_sync_runs_before_command(make_service, remote, files):
    make_service(remote).run(None, RunOptions(command="make", sync=True))
    assert len(files.archives) == 1
    assert remote.commands[0] == 'mkdir -p "/home/user/project"'
    assert remote.commands[-1].endswith("make")


def test_dry_run_has_no_side_effects(make_service, remote, files, tmp_path):
    previews = []
    service = make_service(remote, on_dry_run=previews.append)
    result = service.run(None, RunOptions(command="make", sync=True, dry_run=True))

    assert result.exit_code == 0
    assert remote.runs == []
    assert files.calls == 0
    assert previews[0].remote_command.endswith("make")
    assert not (tmp_path / "locks").exists()


def test_unknown_host(make_service, remote):
    with pytest.raises(ConfigError):
        make_service(remote).run("nope", RunOptions(command="make"))


def test_shell_is_interactive_without_reconnect(make_service, make_remote):
    remote = make_remote([255])
    result = make_service(remote).shell(None)
    assert result.exit_code == 255
    assert remote.runs == [
        ("dev-server", 'cd "/home/user/project" && source ~/.profile && bash', True)
    ]
    assert remote.probes == []
