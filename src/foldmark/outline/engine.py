"""
A small outline engine for line-oriented buffers.

The engine recognizes "standard headlines" with a regex (by default runs of `*`
or form feeds at the start of a line, as in outline-mode) and computes a level
for each one with a level function. Both live on the buffer as a single
`OutlineDefinitions` pair so that extensions can replace them together.

Extensions hook in through activation hooks, which run every time a buffer is
opened or changes mode, after the baseline definitions are installed.

Usage:
    engine = OutlineEngine()
    buffer = engine.open_buffer("* Intro\\ntext\\n** Details\\n", mode="outline-mode")
    for heading in engine.headings(buffer):
        print(heading.index, heading.level, heading.text)
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import NamedTuple

log = logging.getLogger(__name__)

DEFAULT_HEADING_PATTERN = r"[*\f]+"


@dataclass(frozen=True)
class StandardMatch:
    """The line matched the baseline headline pattern."""


@dataclass(frozen=True)
class LanguageMatch:
    """The line matched a language construct opener after `whitespace`."""

    whitespace: str


MatchKind = StandardMatch | LanguageMatch


@dataclass(frozen=True)
class MatchContext:
    """
    Everything a level function may look at for one matched line. `start` and
    `end` delimit the headline match within `line`.
    """

    line: str
    start: int
    end: int
    kind: MatchKind = field(default_factory=StandardMatch)

    @property
    def text(self) -> str:
        return self.line[self.start : self.end]


LevelFunction = Callable[[MatchContext], int]


class HeadlinePattern:
    """A compiled headline regex together with its source text."""

    def __init__(self, source: str) -> None:
        self.source: str = source
        self.regex: re.Pattern[str] = re.compile(source)

    def match(self, line: str) -> MatchContext | None:
        """Match at the start of `line`, as outline headlines are line-anchored."""
        m = self.regex.match(line)
        if m is None:
            return None
        return MatchContext(line=line, start=m.start(), end=m.end(), kind=StandardMatch())

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.source!r})"


def default_level(ctx: MatchContext) -> int:
    """Level of a standard headline is the length of its prefix (`***` is level 3)."""
    return ctx.end - ctx.start


def default_is_promotable(level: int) -> bool:
    return level >= 1


def default_heading_prefix(level: int) -> str:
    return "*" * level


class OutlineDefinitions(NamedTuple):
    """The active headline pattern and level function, always swapped together."""

    pattern: HeadlinePattern
    level_function: LevelFunction


@dataclass(eq=False)
class Buffer:
    """
    A text buffer with a mode and its buffer-local outline definitions.

    Buffers compare by identity so they can key weak dictionaries.
    """

    name: str
    mode: str
    lines: list[str]
    outline: OutlineDefinitions
    is_live: bool = True

    @property
    def heading_pattern(self) -> HeadlinePattern:
        return self.outline.pattern

    @property
    def level_function(self) -> LevelFunction:
        return self.outline.level_function

    def set_outline_definitions(
        self, pattern: HeadlinePattern, level_function: LevelFunction
    ) -> None:
        self.outline = OutlineDefinitions(pattern, level_function)

    @property
    def text(self) -> str:
        return "".join(line + "\n" for line in self.lines)


@dataclass(frozen=True)
class Heading:
    """A matched headline line. `index` is the 0-based line number."""

    index: int
    level: int
    text: str
    kind: MatchKind


ActivationHook = Callable[[Buffer], object]


class OutlineEngine:
    """
    Owns the baseline outline rules and the activation hooks, and answers
    structural questions (headings, subtrees, children) about buffers using
    whatever definitions are currently active on each buffer.
    """

    def __init__(
        self,
        heading_pattern: str = DEFAULT_HEADING_PATTERN,
        level_function: LevelFunction = default_level,
        is_promotable: Callable[[int], bool] = default_is_promotable,
        heading_prefix: Callable[[int], str] = default_heading_prefix,
    ) -> None:
        self.baseline_pattern: HeadlinePattern = HeadlinePattern(heading_pattern)
        self.baseline_level_function: LevelFunction = level_function
        self.baseline_is_promotable: Callable[[int], bool] = is_promotable
        self.heading_prefix: Callable[[int], str] = heading_prefix
        self.activation_hooks: list[ActivationHook] = []
        self._buffer_count: int = 0

    def add_activation_hook(self, hook: ActivationHook) -> None:
        if hook not in self.activation_hooks:
            self.activation_hooks.append(hook)

    def open_buffer(self, text: str, mode: str = "text-mode", name: str | None = None) -> Buffer:
        """Create a buffer from `text`, install baseline definitions and run hooks."""
        self._buffer_count += 1
        buffer = Buffer(
            name=name or f"*buffer-{self._buffer_count}*",
            mode=mode,
            lines=text.splitlines(),
            outline=OutlineDefinitions(self.baseline_pattern, self.baseline_level_function),
        )
        self.run_activation_hooks(buffer)
        return buffer

    def set_mode(self, buffer: Buffer, mode: str) -> None:
        """Switch modes. Buffer-local definitions are reset before the hooks run."""
        buffer.mode = mode
        buffer.set_outline_definitions(self.baseline_pattern, self.baseline_level_function)
        self.run_activation_hooks(buffer)

    def kill_buffer(self, buffer: Buffer) -> None:
        buffer.is_live = False

    def run_activation_hooks(self, buffer: Buffer) -> None:
        """
        Run every activation hook for `buffer`. A hook that fails with a
        `ValueError` (bad configuration) is logged and skipped so the buffer
        keeps working with whatever definitions are installed.
        """
        for hook in list(self.activation_hooks):
            try:
                hook(buffer)
            except ValueError as e:
                log.error("Outline activation hook failed for %s: %s", buffer.name, e)

    # === Queries ===

    def match_heading(self, buffer: Buffer, index: int) -> MatchContext | None:
        return buffer.heading_pattern.match(buffer.lines[index])

    def heading_level(self, buffer: Buffer, index: int) -> int | None:
        """Level of the headline on line `index`, or `None` if it is not a headline."""
        ctx = self.match_heading(buffer, index)
        if ctx is None:
            return None
        return buffer.level_function(ctx)

    def headings(self, buffer: Buffer) -> list[Heading]:
        result: list[Heading] = []
        pattern = buffer.heading_pattern
        level_function = buffer.level_function
        for index, line in enumerate(buffer.lines):
            ctx = pattern.match(line)
            if ctx is not None:
                result.append(Heading(index, level_function(ctx), line.strip(), ctx.kind))
        return result

    def enclosing_heading(self, buffer: Buffer, index: int) -> int | None:
        """The headline on line `index`, or the nearest one above it."""
        for i in range(index, -1, -1):
            if self.match_heading(buffer, i) is not None:
                return i
        return None

    def subtree_end(self, buffer: Buffer, index: int) -> int:
        """
        Exclusive end of the subtree headed by line `index`: the next headline at
        the same or a shallower level, or the end of the buffer.
        """
        level = self.heading_level(buffer, index)
        if level is None:
            raise ValueError(f"Line {index + 1} is not a headline")
        for i in range(index + 1, len(buffer.lines)):
            other = self.heading_level(buffer, i)
            if other is not None and other <= level:
                return i
        return len(buffer.lines)

    def children(self, buffer: Buffer, index: int) -> list[int]:
        """
        Direct children of the headline on line `index`. Levels need not be
        contiguous: a child is any headline deeper than its parent that is not
        nested under an earlier child.
        """
        end = self.subtree_end(buffer, index)
        result: list[int] = []
        child_level: int | None = None
        for i in range(index + 1, end):
            level = self.heading_level(buffer, i)
            if level is None:
                continue
            if child_level is None or level <= child_level:
                child_level = level
                result.append(i)
        return result

    def is_level_promotable(self, level: int) -> bool:
        return self.baseline_is_promotable(level)
