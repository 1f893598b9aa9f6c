from pathlib import Path

import pytest

from bridge.core.exceptions import TransferError
from bridge.domain.project import HostProfile, ProjectProfile, Shell, SyncMethod
from bridge.domain.sync import (
    ExcludeMatcher,
    FullCopyStrategy,
    IncrementalStrategy,
    SyncPlan,
    SyncService,
    collect_entries,
    effective_excludes,
    select_strategy,
)


def make_tree(root: Path) -> Path:
    for relative, content in {
        "README.md": "readme",
        "src/main.py": "print()",
        "src/__pycache__/main.cpython-312.pyc": "x",
        "target/debug/app": "bin",
        ".git/HEAD": "ref",
        ".DS_Store": "meta",
        "docs/._guide.md": "meta",
        "docs/guide.md": "guide",
    }.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


def plan(root: Path, method=SyncMethod.TAR, **overrides) -> SyncPlan:
    settings = dict(
        strategy=method,
        root=root,
        hostname="dev-server",
        remote_path="/srv/app",
        excludes=effective_excludes([".git", "target", "__pycache__"]),
    )
    settings.update(overrides)
    return SyncPlan(**settings)


class TestExcludes:
    def test_auto_excludes_first(self):
        assert effective_excludes([".git"]) == [".DS_Store", "._*", ".git"]

    def test_auto_excludes_can_be_disabled(self):
        assert effective_excludes([".git"], auto_exclude=False) == [".git"]

    def test_duplicates_dropped(self):
        assert effective_excludes([".DS_Store", ".git"]) == [".DS_Store", "._*", ".git"]

    @pytest.mark.parametrize(
        "pattern, path, is_dir, expected",
        [
            (".git", ".git", True, True),
            (".git", "vendor/.git", True, True),
            ("*.pyc", "a/b/c.pyc", False, True),
            ("build/", "build", False, False),
            ("build/", "sub/build", True, True),
            ("/dist", "dist", True, True),
            ("/dist", "pkg/dist", True, False),
            ("docs/*.md", "docs/guide.md", False, True),
            ("docs/*.md", "site/docs/guide.md", False, True),
            ("docs/*.md", "mydocs/guide.md", False, False),
        ],
    )
    def test_matcher(self, pattern, path, is_dir, expected):
        assert ExcludeMatcher([pattern]).matches(path, is_dir=is_dir) is expected


class TestCollectEntries:
    def test_excluded_trees_are_pruned(self, tmp_path):
        make_tree(tmp_path)
        matcher = ExcludeMatcher(effective_excludes([".git", "target", "__pycache__"]))
        entries = collect_entries(tmp_path, matcher)
        assert [e.relative for e in entries] == [
            "docs",
            "src",
            "README.md",
            "docs/guide.md",
            "src/main.py",
        ]
        assert [e.relative for e in entries if e.is_dir] == ["docs", "src"]

    def test_sizes_recorded(self, tmp_path):
        (tmp_path / "a.txt").write_text("12345", encoding="utf-8")
        entries = collect_entries(tmp_path, ExcludeMatcher([]))
        assert entries[0].size == 5


class TestFullCopyStrategy:
    def test_dry_run_touches_nothing(self, tmp_path, remote, files):
        make_tree(tmp_path)
        summary = FullCopyStrategy(remote, files).sync(plan(tmp_path, dry_run=True))
        assert summary.dry_run
        assert summary.files == ["README.md", "docs/guide.md", "src/main.py"]
        assert remote.runs == []
        assert files.calls == 0
        preview = summary.commands[1]
        assert preview.startswith(f"tar.gz stream of 5 entries from {tmp_path} | ssh dev-server")
        assert preview.endswith("tar -xzf -'")

    def test_creates_directory_then_streams_archive(self, tmp_path, remote, files):
        make_tree(tmp_path)
        summary = FullCopyStrategy(remote, files).sync(plan(tmp_path))
        assert remote.commands == ['mkdir -p "/srv/app"']
        host, command, root, names = files.archives[0]
        assert host == "dev-server"
        assert command == 'cd "/srv/app" && tar -xzf -'
        assert root == tmp_path
        assert "src/main.py" in names and ".git/HEAD" not in names
        assert summary.file_count == 3

    def test_mkdir_failure_stops_transfer(self, tmp_path, make_remote, files):
        make_tree(tmp_path)
        with pytest.raises(TransferError, match="/srv/app"):
            FullCopyStrategy(make_remote([1]), files).sync(plan(tmp_path))
        assert files.archives == []


class TestIncrementalStrategy:
    def test_args(self, tmp_path, remote, files):
        args = IncrementalStrategy(remote, files).build_args(
            plan(tmp_path, SyncMethod.RSYNC, excludes=[".git"])
        )
        assert args == [
            "-az",
            "--delete",
            "--exclude=.git",
            f"{tmp_path}/",
            "dev-server:/srv/app",
        ]

    def test_windows_target(self, tmp_path, remote, files):
        args = IncrementalStrategy(remote, files).build_args(
            plan(
                tmp_path,
                SyncMethod.RSYNC,
                shell=Shell.POWERSHELL,
                remote_path="C:/dev/app",
                delete_excluded=True,
                verbose=True,
                excludes=[],
            )
        )
        assert args == [
            "-az",
            "--delete",
            "--delete-excluded",
            "--no-perms",
            "-v",
            f"{tmp_path}/",
            "dev-server:/cygdrive/c/dev/app",
        ]

    def test_transfer_invokes_rsync(self, tmp_path, remote, files):
        make_tree(tmp_path)
        IncrementalStrategy(remote, files).sync(plan(tmp_path, SyncMethod.RSYNC))
        assert len(files.rsyncs) == 1
        assert remote.runs == []

    def test_dry_run_does_not_invoke_rsync(self, tmp_path, remote, files):
        make_tree(tmp_path)
        summary = IncrementalStrategy(remote, files).sync(
            plan(tmp_path, SyncMethod.RSYNC, dry_run=True)
        )
        assert files.rsyncs == []
        assert summary.commands[0].startswith("rsync -az --delete")


def test_select_strategy(remote, files):
    assert isinstance(select_strategy(SyncMethod.TAR, remote, files), FullCopyStrategy)
    assert isinstance(select_strategy("rsync", remote, files), IncrementalStrategy)


class TestSyncService:
    def test_uses_project_excludes_and_host_method(self, tmp_path, remote, files):
        make_tree(tmp_path)
        host = HostProfile(
            name="dev", hostname="dev-server", path="/srv/app", sync_method=SyncMethod.RSYNC
        )
        project = ProjectProfile(root=tmp_path, hosts={"dev": host}, exclude=["target"])
        plans, summaries = [], []
        service = SyncService(
            project, remote, files, on_plan=plans.append, on_complete=summaries.append
        )

        summary = service.sync(host, auto_exclude=False)

        assert plans[0].excludes == ["target"]
        assert summaries == [summary]
        assert "--exclude=target" in files.rsyncs[0]
        assert "--exclude=.DS_Store" not in files.rsyncs[0]
