"""
Exclude pattern matching and effective file set
"""
import os
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterable, List, Sequence

from ...core.constants import AUTO_EXCLUDES
from .models import FileEntry


def effective_excludes(configured: Sequence[str], auto_exclude: bool = True) -> List[str]:
    """Built-in platform artifacts (unless disabled) followed by configured patterns"""
    patterns = list(AUTO_EXCLUDES) if auto_exclude else []
    for pattern in configured:
        if pattern not in patterns:
            patterns.append(pattern)
    return patterns


class ExcludeMatcher:
    """
    Glob excludes evaluated against paths relative to the project root.

    - `name` (no slash) matches any path component with that name
    - `a/b` matches that relative path at any depth
    - `/a/b` is anchored at the project root
    - a trailing `/` restricts the pattern to directories
    """

    def __init__(self, patterns: Iterable[str]):
        self.patterns = [p.strip() for p in patterns if p and p.strip()]
        self._rules = []
        for raw in self.patterns:
            dir_only = raw.endswith("/")
            pattern = raw.rstrip("/")
            anchored = pattern.startswith("/")
            pattern = pattern.lstrip("/")
            if pattern:
                self._rules.append((pattern, "/" in pattern or anchored, anchored, dir_only))

    def matches(self, relative: str, is_dir: bool = False) -> bool:
        """Check one entry (posix relative path)"""
        parts = relative.split("/")
        for pattern, has_slash, anchored, dir_only in self._rules:
            if dir_only and not is_dir:
                continue
            if not has_slash:
                if fnmatchcase(parts[-1], pattern):
                    return True
            elif anchored:
                if fnmatchcase(relative, pattern):
                    return True
            elif any(fnmatchcase("/".join(parts[i:]), pattern) for i in range(len(parts))):
                return True
        return False

    __call__ = matches


def collect_entries(root: Path, matcher: ExcludeMatcher) -> List[FileEntry]:
    """
    Walk root and return the non-excluded entries, parents before children.

    Excluded directories are pruned, so nothing below them is visited.
    Symlinks are reported as files and never followed.
    """
    entries: List[FileEntry] = []
    for dirpath, dirnames, filenames in os.walk(root):
        base = Path(dirpath).relative_to(root).as_posix()
        prefix = "" if base == "." else base + "/"

        kept_dirs = []
        for name in sorted(dirnames):
            relative = prefix + name
            full = os.path.join(dirpath, name)
            if os.path.islink(full):
                if not matcher.matches(relative, is_dir=False):
                    entries.append(FileEntry(relative))
                continue
            if matcher.matches(relative, is_dir=True):
                continue
            entries.append(FileEntry(relative, is_dir=True))
            kept_dirs.append(name)
        dirnames[:] = kept_dirs

        for name in sorted(filenames):
            relative = prefix + name
            if matcher.matches(relative, is_dir=False):
                continue
            full = os.path.join(dirpath, name)
            size = 0 if os.path.islink(full) else os.path.getsize(full)
            entries.append(FileEntry(relative, size=size))
    return entries
