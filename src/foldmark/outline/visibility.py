"""
Folding state for a buffer: which lines are hidden.

`OutlineView` reads headlines and levels through the buffer's active
definitions, so in a source buffer with language support, functions and classes
fold like headlines and nest by indentation.
"""

from __future__ import annotations

from enum import Enum

from foldmark.outline.engine import Buffer, OutlineEngine


class CycleState(str, Enum):
    """Visibility of one subtree, in `OutlineView.cycle()` order."""

    folded = "folded"  # Only the headline
    children = "children"  # Headline and direct child headlines
    subtree = "subtree"  # Everything


class OutlineView:
    def __init__(self, engine: OutlineEngine, buffer: Buffer) -> None:
        self.engine: OutlineEngine = engine
        self.buffer: Buffer = buffer
        self.hidden: set[int] = set()

    def show_all(self) -> None:
        self.hidden.clear()

    def hide_subtree(self, index: int) -> None:
        """Hide everything below the headline on line `index`, keeping the headline."""
        end = self.engine.subtree_end(self.buffer, index)
        self.hidden.update(range(index + 1, end))

    def show_subtree(self, index: int) -> None:
        """Reveal the headline on line `index` and everything below it."""
        end = self.engine.subtree_end(self.buffer, index)
        self.hidden.difference_update(range(index, end))

    def show_children(self, index: int) -> None:
        """Hide the subtree, then reveal the direct child headlines only."""
        self.hide_subtree(index)
        self.hidden.difference_update(self.engine.children(self.buffer, index))

    def hide_sublevels(self, level: int) -> None:
        """
        Show only headlines of `level` or shallower. Lines before the first
        headline stay visible.
        """
        self.hidden.clear()
        seen_heading = False
        for i in range(len(self.buffer.lines)):
            heading_level = self.engine.heading_level(self.buffer, i)
            if heading_level is None:
                if seen_heading:
                    self.hidden.add(i)
                continue
            seen_heading = True
            if heading_level > level:
                self.hidden.add(i)

    def state(self, index: int) -> CycleState:
        end = self.engine.subtree_end(self.buffer, index)
        body = range(index + 1, end)
        if not any(i in self.hidden for i in body):
            return CycleState.subtree
        if all(i in self.hidden for i in body):
            return CycleState.folded
        return CycleState.children

    def cycle(self, index: int) -> CycleState:
        """
        Rotate the subtree at `index` through folded, children and subtree
        visibility, like org-style tab cycling. Returns the new state.
        """
        current = self.state(index)
        if current == CycleState.folded:
            if self.engine.children(self.buffer, index):
                self.show_children(index)
                return CycleState.children
            self.show_subtree(index)
            return CycleState.subtree
        if current == CycleState.children:
            self.show_subtree(index)
            return CycleState.subtree
        self.hide_subtree(index)
        return CycleState.folded

    def visible_lines(self) -> list[int]:
        return [i for i in range(len(self.buffer.lines)) if i not in self.hidden]
