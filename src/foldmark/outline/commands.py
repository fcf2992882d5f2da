"""
Structural outline edits: promoting and demoting headlines.

These always run against the buffer's original (standard headline) definitions,
so language constructs are neither rewritten nor counted as part of a subtree.
A whole edit is validated before any line changes.
"""

from __future__ import annotations

import logging

from foldmark.code_outline.controller import LanguageOutlineController
from foldmark.outline.engine import Buffer

log = logging.getLogger(__name__)


class OutlineCommandError(ValueError):
    """A structural command cannot be applied at the requested position."""


def promote(
    controller: LanguageOutlineController, buffer: Buffer, index: int, subtree: bool = False
) -> list[int]:
    """
    Promote the headline at or above line `index` one level (`**` -> `*`).
    With `subtree=True`, promote the whole subtree. Returns the rewritten lines.
    """
    return controller.with_original_definitions(
        buffer, _shift_levels, controller, buffer, index, -1, subtree
    )


def demote(
    controller: LanguageOutlineController, buffer: Buffer, index: int, subtree: bool = False
) -> list[int]:
    """
    Demote the headline at or above line `index` one level (`*` -> `**`).
    With `subtree=True`, demote the whole subtree. Returns the rewritten lines.
    """
    return controller.with_original_definitions(
        buffer, _shift_levels, controller, buffer, index, 1, subtree
    )


def _shift_levels(
    controller: LanguageOutlineController, buffer: Buffer, index: int, delta: int, subtree: bool
) -> list[int]:
    engine = controller.engine
    if not 0 <= index < len(buffer.lines):
        raise OutlineCommandError(f"Line {index + 1} is outside the buffer")

    head = engine.enclosing_heading(buffer, index)
    if head is None:
        raise OutlineCommandError(f"No headline at or before line {index + 1}")

    end = engine.subtree_end(buffer, head) if subtree else head + 1

    # Plan every rewrite first so a refused target leaves the buffer untouched.
    rewrites: list[tuple[int, str]] = []
    for i in range(head, end):
        ctx = engine.match_heading(buffer, i)
        if ctx is None:
            continue
        level = buffer.level_function(ctx)
        if not controller.is_level_promotable(buffer, level):
            raise OutlineCommandError(f"Headline on line {i + 1} (level {level}) cannot be moved")
        new_level = level + delta
        if new_level < 1:
            raise OutlineCommandError(f"Cannot promote line {i + 1} above level 1")
        if not controller.is_level_promotable(buffer, new_level):
            raise OutlineCommandError(f"Cannot demote line {i + 1} past level {level}")
        line = buffer.lines[i]
        rewrites.append((i, line[: ctx.start] + engine.heading_prefix(new_level) + line[ctx.end :]))

    for i, line in rewrites:
        buffer.lines[i] = line
    log.debug("Shifted %d headline(s) by %+d in %s", len(rewrites), delta, buffer.name)
    return [i for i, _ in rewrites]
