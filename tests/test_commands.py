"""Tests for promote and demote."""

from __future__ import annotations

import pytest

from foldmark.code_outline.controller import LanguageOutlineController
from foldmark.code_outline.patterns import CombinedPattern
from foldmark.outline.commands import OutlineCommandError, demote, promote
from foldmark.outline.engine import Buffer, OutlineEngine

SOURCE = """\
* Tools
def helper():
    pass
** Nested
    def inner():
* Other
"""


@pytest.fixture
def controller() -> LanguageOutlineController:
    controller = LanguageOutlineController(OutlineEngine())
    controller.install()
    return controller


@pytest.fixture
def buffer(controller: LanguageOutlineController) -> Buffer:
    return controller.engine.open_buffer(SOURCE, mode="python-mode")


def test_demote_headline(controller: LanguageOutlineController, buffer: Buffer) -> None:
    assert demote(controller, buffer, 0) == [0]
    assert buffer.lines[0] == "** Tools"
    assert buffer.lines[1] == "def helper():"


def test_command_skips_language_constructs(
    controller: LanguageOutlineController, buffer: Buffer
) -> None:
    # Line 2 sits under `def helper():`, but only standard headlines count
    assert demote(controller, buffer, 2) == [0]
    assert buffer.lines[0] == "** Tools"
    assert buffer.lines[1] == "def helper():"


def test_demote_subtree(controller: LanguageOutlineController, buffer: Buffer) -> None:
    assert demote(controller, buffer, 0, subtree=True) == [0, 3]
    assert buffer.lines == [
        "** Tools",
        "def helper():",
        "    pass",
        "*** Nested",
        "    def inner():",
        "* Other",
    ]


def test_promote(controller: LanguageOutlineController, buffer: Buffer) -> None:
    assert promote(controller, buffer, 4) == [3]
    assert buffer.lines[3] == "* Nested"


def test_promote_subtree(controller: LanguageOutlineController) -> None:
    buffer = controller.engine.open_buffer("** A\ndef f():\n*** B\n* C\n", mode="python-mode")
    assert promote(controller, buffer, 0, subtree=True) == [0, 2]
    assert buffer.lines == ["* A", "def f():", "** B", "* C"]


def test_combined_definitions_restored(
    controller: LanguageOutlineController, buffer: Buffer
) -> None:
    demote(controller, buffer, 0)
    assert isinstance(buffer.heading_pattern, CombinedPattern)
    assert controller.engine.heading_level(buffer, 1) == 10


def test_cannot_promote_past_level_one(
    controller: LanguageOutlineController, buffer: Buffer
) -> None:
    with pytest.raises(OutlineCommandError, match="level 1"):
        promote(controller, buffer, 0)
    assert buffer.lines[0] == "* Tools"
    assert isinstance(buffer.heading_pattern, CombinedPattern)


def test_failed_subtree_edit_changes_nothing(controller: LanguageOutlineController) -> None:
    buffer = controller.engine.open_buffer("** A\n********* B\n* C\n", mode="python-mode")
    with pytest.raises(OutlineCommandError):
        demote(controller, buffer, 0, subtree=True)
    assert buffer.lines == ["** A", "********* B", "* C"]


def test_cannot_demote_into_construct_levels(controller: LanguageOutlineController) -> None:
    buffer = controller.engine.open_buffer("********* Deep\n", mode="python-mode")
    with pytest.raises(OutlineCommandError):
        demote(controller, buffer, 0)
    assert buffer.lines[0] == "********* Deep"


def test_plain_buffer_has_no_construct_limit(controller: LanguageOutlineController) -> None:
    buffer = controller.engine.open_buffer("********* Deep\n", mode="text-mode")
    assert demote(controller, buffer, 0) == [0]
    assert buffer.lines[0] == "********** Deep"


def test_before_first_headline(controller: LanguageOutlineController) -> None:
    buffer = controller.engine.open_buffer("import os\n* A\n", mode="python-mode")
    with pytest.raises(OutlineCommandError, match="No headline"):
        demote(controller, buffer, 0)


def test_line_outside_buffer(controller: LanguageOutlineController, buffer: Buffer) -> None:
    with pytest.raises(OutlineCommandError, match="outside"):
        demote(controller, buffer, 100)
    with pytest.raises(OutlineCommandError):
        demote(controller, buffer, -1)


def test_command_error_is_value_error() -> None:
    assert issubclass(OutlineCommandError, ValueError)


def test_heading_text_is_preserved(controller: LanguageOutlineController) -> None:
    buffer = controller.engine.open_buffer("**   spaced  title \n", mode="text-mode")
    promote(controller, buffer, 0)
    assert buffer.lines[0] == "*   spaced  title "
