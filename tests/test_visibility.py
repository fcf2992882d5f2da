"""Tests for folding and cycling over language-aware outlines."""

from __future__ import annotations

import pytest

from foldmark.code_outline.controller import LanguageOutlineController
from foldmark.outline.engine import OutlineEngine
from foldmark.outline.visibility import CycleState, OutlineView

SOURCE = """\
* Module
class A:
    def f(self):
        return 1
    def g(self):
        return 2
def top():
    pass
"""


@pytest.fixture
def view() -> OutlineView:
    engine = OutlineEngine()
    LanguageOutlineController(engine).install()
    buffer = engine.open_buffer(SOURCE, mode="python-mode")
    return OutlineView(engine, buffer)


def test_constructs_are_children(view: OutlineView) -> None:
    assert view.engine.children(view.buffer, 0) == [1, 6]
    assert view.engine.children(view.buffer, 1) == [2, 4]


def test_cycle(view: OutlineView) -> None:
    assert view.state(1) == CycleState.subtree
    assert view.cycle(1) == CycleState.folded
    assert view.visible_lines() == [0, 1, 6, 7]
    assert view.cycle(1) == CycleState.children
    assert view.visible_lines() == [0, 1, 2, 4, 6, 7]
    assert view.cycle(1) == CycleState.subtree
    assert view.visible_lines() == list(range(8))


def test_cycle_leaf_skips_children(view: OutlineView) -> None:
    assert view.cycle(2) == CycleState.folded
    assert 3 not in view.visible_lines()
    assert view.cycle(2) == CycleState.subtree
    assert 3 in view.visible_lines()


def test_hide_sublevels(view: OutlineView) -> None:
    view.hide_sublevels(10)
    assert view.visible_lines() == [0, 1, 6]
    view.hide_sublevels(14)
    assert view.visible_lines() == [0, 1, 2, 4, 6]
    view.hide_sublevels(1)
    assert view.visible_lines() == [0]


def test_hide_sublevels_keeps_preamble() -> None:
    engine = OutlineEngine()
    buffer = engine.open_buffer("preamble\n* A\nbody\n** B\n")
    view = OutlineView(engine, buffer)
    view.hide_sublevels(1)
    assert view.visible_lines() == [0, 1]


def test_show_all(view: OutlineView) -> None:
    view.hide_subtree(0)
    assert view.visible_lines() == [0]
    view.show_all()
    assert view.visible_lines() == list(range(8))


def test_show_subtree_only_affects_subtree(view: OutlineView) -> None:
    view.hide_subtree(0)
    view.show_subtree(1)
    assert view.visible_lines() == [0, 1, 2, 3, 4, 5]
