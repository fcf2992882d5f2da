"""Level function for buffers using a combined headline pattern."""

from __future__ import annotations

from foldmark.outline.engine import LanguageMatch, LevelFunction, MatchContext


def language_level(whitespace: str, max_standard_level: int) -> int:
    # Tabs count as one column each; mixed indentation gives uneven levels.
    return max_standard_level + len(whitespace)


def make_level_function(baseline: LevelFunction, max_standard_level: int) -> LevelFunction:
    """
    Level function for matches of a `CombinedPattern`.

    Language construct openers sit below every standard headline, nested by
    indentation: `max_standard_level` plus the indentation width. Standard
    headlines get exactly what `baseline` gives them for the same match.
    """

    def level(ctx: MatchContext) -> int:
        if isinstance(ctx.kind, LanguageMatch):
            return language_level(ctx.kind.whitespace, max_standard_level)
        return baseline(ctx)

    return level
