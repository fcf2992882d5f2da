"""
Registry of construct-opener patterns per language.

Each pattern matches the start of a language construct (a function, class or
similar block opener) once leading indentation has been consumed. Patterns use
Python `re` syntax and must not match the indentation themselves.

The registry is immutable. To add or override languages, build a new registry
with `LanguageRegistry.extend()` and hand it to whoever needs it.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from types import MappingProxyType

DEFAULT_MAX_STANDARD_LEVEL = 10

DEFAULT_LANGUAGE_PATTERNS: dict[str, str] = {
    "python": r"(?:async\s+def|def|class)\s+\w+",
    "js": r"(?:export\s+(?:default\s+)?)?(?:(?:async\s+)?function\b|class\s+\w+)",
    "emacs-lisp": r"\((?:cl-)?def(?:un|macro|subst|var|const|custom|group|class|method)\s",
    "sh": r"(?:function\s+[\w-]+|[\w-]+\s*\(\)\s*\{)",
    "rust": r"(?:pub(?:\([^)]*\))?\s+)?(?:async\s+)?(?:fn|struct|enum|trait|impl|mod)\b",
}


class LanguageRegistry(Mapping[str, str]):
    """
    Read-only mapping from language identifier to construct-opener pattern.
    Lookup is exact and case-sensitive.
    """

    def __init__(self, patterns: Mapping[str, str] | None = None) -> None:
        source = DEFAULT_LANGUAGE_PATTERNS if patterns is None else patterns
        self._patterns: Mapping[str, str] = MappingProxyType(dict(source))

    def __getitem__(self, language_id: str) -> str:
        return self._patterns[language_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._patterns)

    def __len__(self) -> int:
        return len(self._patterns)

    def __repr__(self) -> str:
        return f"LanguageRegistry({sorted(self._patterns)})"

    def extend(self, overrides: Mapping[str, str]) -> LanguageRegistry:
        """A new registry with `overrides` added on top of these patterns."""
        merged = dict(self._patterns)
        merged.update(overrides)
        return LanguageRegistry(merged)


DEFAULT_REGISTRY = LanguageRegistry()
