"""Tests for the baseline outline engine."""

from __future__ import annotations

import logging

import pytest

from foldmark.outline.engine import (
    DEFAULT_HEADING_PATTERN,
    Buffer,
    HeadlinePattern,
    MatchContext,
    OutlineEngine,
    StandardMatch,
    default_level,
)

OUTLINE = """\
intro
* A
text
** B
body
*** C
** D
* E
"""


@pytest.fixture
def engine() -> OutlineEngine:
    return OutlineEngine()


@pytest.fixture
def buffer(engine: OutlineEngine) -> Buffer:
    return engine.open_buffer(OUTLINE, mode="outline-mode")


def test_headline_pattern_is_line_anchored() -> None:
    pattern = HeadlinePattern(DEFAULT_HEADING_PATTERN)
    ctx = pattern.match("** Title")
    assert ctx == MatchContext(line="** Title", start=0, end=2, kind=StandardMatch())
    assert pattern.match("text ** Title") is None


def test_default_level_counts_prefix() -> None:
    assert default_level(MatchContext(line="*** x", start=0, end=3)) == 3
    assert default_level(MatchContext(line="\f", start=0, end=1)) == 1


def test_headings(engine: OutlineEngine, buffer: Buffer) -> None:
    result = [(h.index, h.level, h.text) for h in engine.headings(buffer)]
    assert result == [
        (1, 1, "* A"),
        (3, 2, "** B"),
        (5, 3, "*** C"),
        (6, 2, "** D"),
        (7, 1, "* E"),
    ]


def test_heading_level(engine: OutlineEngine, buffer: Buffer) -> None:
    assert engine.heading_level(buffer, 0) is None
    assert engine.heading_level(buffer, 3) == 2
    assert engine.heading_level(buffer, 4) is None


def test_enclosing_heading(engine: OutlineEngine, buffer: Buffer) -> None:
    assert engine.enclosing_heading(buffer, 0) is None
    assert engine.enclosing_heading(buffer, 1) == 1
    assert engine.enclosing_heading(buffer, 4) == 3
    assert engine.enclosing_heading(buffer, 6) == 6


def test_subtree_end(engine: OutlineEngine, buffer: Buffer) -> None:
    assert engine.subtree_end(buffer, 1) == 7
    assert engine.subtree_end(buffer, 3) == 6
    assert engine.subtree_end(buffer, 5) == 6
    assert engine.subtree_end(buffer, 7) == 8


def test_subtree_end_requires_headline(engine: OutlineEngine, buffer: Buffer) -> None:
    with pytest.raises(ValueError, match="Line 3"):
        engine.subtree_end(buffer, 2)


def test_children(engine: OutlineEngine, buffer: Buffer) -> None:
    assert engine.children(buffer, 1) == [3, 6]
    assert engine.children(buffer, 3) == [5]
    assert engine.children(buffer, 5) == []


def test_children_with_level_gaps(engine: OutlineEngine) -> None:
    buffer = engine.open_buffer("* A\n**** deep\n** shallower\n*** under\n")
    assert engine.children(buffer, 0) == [1, 2]
    assert engine.children(buffer, 2) == [3]


def test_buffer_text_round_trip(engine: OutlineEngine, buffer: Buffer) -> None:
    assert buffer.text == OUTLINE
    assert buffer.lines[0] == "intro"


def test_buffer_names(engine: OutlineEngine) -> None:
    first = engine.open_buffer("")
    named = engine.open_buffer("", name="notes.org")
    assert first.name.startswith("*buffer-")
    assert named.name == "notes.org"
    assert first.mode == "text-mode"


def test_hooks_run_on_open_and_mode_change(engine: OutlineEngine) -> None:
    seen: list[str] = []
    engine.add_activation_hook(lambda b: seen.append(b.mode))
    buffer = engine.open_buffer("* A\n", mode="python-mode")
    engine.set_mode(buffer, "js-mode")
    assert seen == ["python-mode", "js-mode"]


def test_set_mode_reinstalls_baseline(engine: OutlineEngine) -> None:
    buffer = engine.open_buffer("* A\n")
    buffer.set_outline_definitions(HeadlinePattern("#+"), lambda ctx: 5)
    engine.set_mode(buffer, "outline-mode")
    assert buffer.heading_pattern is engine.baseline_pattern
    assert buffer.level_function is engine.baseline_level_function


def test_failing_hook_is_logged(engine: OutlineEngine, caplog: pytest.LogCaptureFixture) -> None:
    calls: list[Buffer] = []

    def bad_hook(b: Buffer) -> None:
        raise ValueError("bad pattern")

    engine.add_activation_hook(bad_hook)
    engine.add_activation_hook(calls.append)
    with caplog.at_level(logging.ERROR):
        buffer = engine.open_buffer("* A\n", name="x.py")
    assert "bad pattern" in caplog.text
    assert "x.py" in caplog.text
    # Later hooks still run
    assert calls == [buffer]


def test_other_hook_errors_propagate(engine: OutlineEngine) -> None:
    def broken(b: Buffer) -> None:
        raise RuntimeError("bug")

    engine.add_activation_hook(broken)
    with pytest.raises(RuntimeError):
        engine.open_buffer("* A\n")


def test_custom_baseline() -> None:
    engine = OutlineEngine(heading_pattern=r"#+ ", level_function=lambda ctx: len(ctx.text) - 1)
    buffer = engine.open_buffer("# Title\n## Sub\ntext\n")
    assert [(h.index, h.level) for h in engine.headings(buffer)] == [(0, 1), (1, 2)]


def test_kill_buffer(engine: OutlineEngine, buffer: Buffer) -> None:
    assert buffer.is_live
    engine.kill_buffer(buffer)
    assert not buffer.is_live
