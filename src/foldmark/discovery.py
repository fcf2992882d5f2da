"""
Find outline-able files under directories, honoring `.gitignore` via pathspec.

A file qualifies if its extension has a known mode (see `foldmark.modes`).
Explicitly named files are always kept.
"""

from __future__ import annotations

import os
from collections.abc import Iterable, Sequence
from pathlib import Path

import pathspec

from foldmark.modes import MODE_BY_EXTENSION

DEFAULT_EXCLUDES: list[str] = [
    ".git/",
    ".hg/",
    ".svn/",
    ".venv/",
    "venv/",
    "__pycache__/",
    ".tox/",
    ".mypy_cache/",
    ".pytest_cache/",
    "*.egg-info/",
    "build/",
    "dist/",
    "node_modules/",
    "target/",
]


def source_includes() -> list[str]:
    return sorted(f"*{ext}" for ext in MODE_BY_EXTENSION)


def _load_gitignore(directory: Path) -> pathspec.PathSpec | None:
    gitignore = directory / ".gitignore"
    if not gitignore.is_file():
        return None
    lines = [
        line
        for line in gitignore.read_text().splitlines()
        if line.strip() and not line.strip().startswith("#")
    ]
    if not lines:
        return None
    return pathspec.GitIgnoreSpec.from_lines(lines)


class SourceFileFinder:
    """Expands files and directories into a sorted, deduplicated list of files."""

    def __init__(self, respect_gitignore: bool = True, extend_exclude: Sequence[str] = ()) -> None:
        self.respect_gitignore: bool = respect_gitignore
        self._exclude_spec: pathspec.PathSpec = pathspec.GitIgnoreSpec.from_lines(
            DEFAULT_EXCLUDES + list(extend_exclude)
        )
        self._include_spec: pathspec.PathSpec = pathspec.GitIgnoreSpec.from_lines(
            source_includes()
        )

    def find(self, paths: Sequence[str | Path]) -> list[Path]:
        """
        Each existing file is kept as is; each directory is walked. Anything else
        raises `FileNotFoundError`.
        """
        seen: set[Path] = set()
        result: list[Path] = []
        for raw_path in paths:
            p = Path(raw_path)
            if p.is_file():
                found: Iterable[Path] = [p]
            elif p.is_dir():
                found = self._walk(p)
            else:
                raise FileNotFoundError(f"Path not found: {raw_path}")
            for path in found:
                resolved = path.resolve()
                if resolved not in seen:
                    seen.add(resolved)
                    result.append(path)
        result.sort()
        return result

    def _walk(self, root: Path) -> Iterable[Path]:
        # Gitignore specs apply to paths relative to the directory holding them
        ignores: list[tuple[Path, pathspec.PathSpec]] = []
        for dirpath, dirnames, filenames in os.walk(root):
            current = Path(dirpath)
            if self.respect_gitignore:
                spec = _load_gitignore(current)
                if spec is not None:
                    ignores.append((current, spec))

            dirnames[:] = sorted(
                d
                for d in dirnames
                if not self._exclude_spec.match_file(d + "/")
                and not self._ignored(current / d, ignores, is_dir=True)
            )
            for filename in sorted(filenames):
                path = current / filename
                if not self._include_spec.match_file(filename):
                    continue
                if self._ignored(path, ignores, is_dir=False):
                    continue
                yield path

    @staticmethod
    def _ignored(path: Path, ignores: list[tuple[Path, pathspec.PathSpec]], is_dir: bool) -> bool:
        for base, spec in ignores:
            try:
                rel = path.relative_to(base).as_posix()
            except ValueError:
                continue
            if spec.match_file(rel + "/" if is_dir else rel):
                return True
        return False
