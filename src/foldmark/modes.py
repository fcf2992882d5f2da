"""
Mode names and the language identifiers derived from them.

A buffer's mode is a name like `python-mode`; the language is the part before
the `-mode` suffix. Files opened from disk get a mode from their extension.
"""

from __future__ import annotations

from pathlib import Path

MODE_SUFFIX = "-mode"

DEFAULT_MODE = "text-mode"

# Extension (lowercase, with dot) -> mode name
MODE_BY_EXTENSION: dict[str, str] = {
    ".py": "python-mode",
    ".pyi": "python-mode",
    ".js": "js-mode",
    ".mjs": "js-mode",
    ".cjs": "js-mode",
    ".el": "emacs-lisp-mode",
    ".sh": "sh-mode",
    ".bash": "sh-mode",
    ".rs": "rust-mode",
    ".rb": "ruby-mode",
    ".org": "outline-mode",
    ".outline": "outline-mode",
    ".txt": "text-mode",
}


def language_for_mode(mode: str) -> str:
    """
    Language identifier for a mode name: everything before the first `-mode`,
    or the whole name when there is no such suffix.

    >>> language_for_mode("emacs-lisp-mode")
    'emacs-lisp'
    """
    prefix, sep, _ = mode.partition(MODE_SUFFIX)
    return prefix if sep else mode


def mode_for_path(path: str | Path) -> str:
    return MODE_BY_EXTENSION.get(Path(path).suffix.lower(), DEFAULT_MODE)
