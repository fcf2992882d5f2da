"""
Combined headline pattern: language construct openers plus standard headlines.

A combined pattern tries two regexes at the start of each line, in order:

1. Language: a run of spaces/tabs followed by the language pattern. The
   indentation is reported separately from the match.
2. Standard: the baseline headline pattern, unchanged.

The two regexes are compiled separately, never pasted into one expression, so
backreferences, numbered groups and inline flags in either pattern keep their
meaning. A match is reported as a `MatchContext` whose `kind` tells which
alternative won, so callers never probe capture groups themselves.
"""

from __future__ import annotations

import re

from foldmark.outline.engine import HeadlinePattern, LanguageMatch, MatchContext

_INDENT_RE = re.compile(r"[ \t]*")


class LanguagePatternError(ValueError):
    """A language construct pattern is not a valid regex."""


class CombinedPattern(HeadlinePattern):
    """
    A `HeadlinePattern` matching either a language construct opener or a
    standard headline. `source` and `regex` are the baseline's; the language
    regex is kept alongside.
    """

    def __init__(self, baseline_source: str, language_source: str) -> None:
        super().__init__(baseline_source)
        self.baseline_source: str = baseline_source
        self.language_source: str = language_source
        self.language_regex: re.Pattern[str] = re.compile(language_source)

    def match_language(self, line: str) -> MatchContext | None:
        indent = _INDENT_RE.match(line)
        assert indent is not None
        # Longest indentation first, giving back one character at a time
        for pos in range(indent.end(), -1, -1):
            m = self.language_regex.match(line, pos)
            if m is not None:
                kind = LanguageMatch(whitespace=line[:pos])
                return MatchContext(line=line, start=0, end=m.end(), kind=kind)
        return None

    def match(self, line: str) -> MatchContext | None:
        ctx = self.match_language(line)
        if ctx is not None:
            return ctx
        return super().match(line)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.baseline_source!r}, {self.language_source!r})"


def compile_combined_pattern(
    baseline_source: str, language_source: str, language_id: str | None = None
) -> CombinedPattern:
    """
    Build the combined pattern. Raises `LanguagePatternError` if the language
    pattern does not compile, and a plain `ValueError` if the baseline does not.
    """
    try:
        re.compile(baseline_source)
    except re.error as e:
        raise ValueError(f"Invalid heading pattern: {baseline_source!r}: {e}") from e

    label = f" for {language_id!r}" if language_id else ""
    try:
        return CombinedPattern(baseline_source, language_source)
    except re.error as e:
        raise LanguagePatternError(
            f"Invalid construct pattern{label}: {language_source!r}: {e}"
        ) from e
