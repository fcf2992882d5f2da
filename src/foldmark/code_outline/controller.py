"""
Language-aware outline definitions for source-code buffers.

When a buffer is activated, the controller looks up a construct pattern for the
buffer's language. If there is one, it records the buffer's baseline headline
pattern and level function (once), then installs a combined pattern and a level
function that nests language constructs below every standard headline.

Structural edits (promote, demote) must not see language constructs as
headlines, so they run inside `original_definitions()`, which puts the recorded
baseline pair back for the duration of the edit and then restores whatever pair
was active before. Saved pairs are kept on a per-buffer stack, so nested calls
each restore their own enclosing state.

Usage:
    engine = OutlineEngine()
    controller = LanguageOutlineController(engine)
    controller.install()
    buffer = engine.open_buffer(source, mode="python-mode")
    with controller.original_definitions(buffer):
        ...  # only standard headlines are visible here
"""

from __future__ import annotations

import logging
import weakref
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import ParamSpec, TypeVar

from foldmark.code_outline.levels import make_level_function
from foldmark.code_outline.patterns import CombinedPattern, compile_combined_pattern
from foldmark.languages import DEFAULT_MAX_STANDARD_LEVEL, DEFAULT_REGISTRY, LanguageRegistry
from foldmark.modes import language_for_mode
from foldmark.outline.engine import (
    Buffer,
    HeadlinePattern,
    LevelFunction,
    OutlineDefinitions,
    OutlineEngine,
)

log = logging.getLogger(__name__)

_P = ParamSpec("_P")
_T = TypeVar("_T")


@dataclass
class BufferLanguageState:
    """
    Per-buffer record of the language in effect and the baseline definitions
    that were active before language support was installed.

    `original_pattern` and `original_level_function` are set once and never
    replaced while the buffer keeps its mode.
    """

    mode: str
    language_id: str | None = None
    original_pattern: HeadlinePattern | None = None
    original_level_function: LevelFunction | None = None
    combined_pattern: CombinedPattern | None = None
    combined_level_function: LevelFunction | None = None
    saved: list[OutlineDefinitions] = field(default_factory=list)

    @property
    def is_active(self) -> bool:
        return self.original_pattern is not None and self.original_level_function is not None


class LanguageOutlineController:
    """
    Installs and temporarily lifts language-aware outline definitions on the
    buffers of one `OutlineEngine`.
    """

    def __init__(
        self,
        engine: OutlineEngine,
        registry: LanguageRegistry = DEFAULT_REGISTRY,
        max_standard_level: int = DEFAULT_MAX_STANDARD_LEVEL,
    ) -> None:
        if max_standard_level < 1:
            raise ValueError(f"max_standard_level must be positive: {max_standard_level}")
        self.engine: OutlineEngine = engine
        self.registry: LanguageRegistry = registry
        self.max_standard_level: int = max_standard_level
        self._states: weakref.WeakKeyDictionary[Buffer, BufferLanguageState] = (
            weakref.WeakKeyDictionary()
        )

    def install(self) -> None:
        """Activate language support on every buffer the engine opens from now on."""
        self.engine.add_activation_hook(self.activate)

    def reload_languages(self, registry: LanguageRegistry) -> None:
        """
        Use `registry` for buffers activated from now on. Buffers that are
        already active keep their current combined pattern until re-activated.
        If the new registry drops a buffer's language, re-activating leaves the
        installed definitions alone; they go away when the buffer's mode changes.
        """
        self.registry = registry

    def state_for(self, buffer: Buffer) -> BufferLanguageState | None:
        return self._states.get(buffer)

    def activate(self, buffer: Buffer) -> bool:
        """
        Install language-aware definitions on `buffer` if its language has a
        registered pattern. Returns whether language support is active, which
        stays true for an already active buffer whose language is no longer
        registered.

        Raises `LanguagePatternError` if the registered pattern is malformed; in
        that case nothing on the buffer has been changed.
        """
        state = self._states.get(buffer)
        if state is None or state.mode != buffer.mode:
            state = BufferLanguageState(mode=buffer.mode)
            self._states[buffer] = state

        state.language_id = language_for_mode(buffer.mode)
        language_source = self.registry.get(state.language_id)
        if language_source is None:
            log.debug("No construct pattern for %r in %s", state.language_id, buffer.name)
            return state.is_active

        if state.is_active:
            assert state.original_pattern is not None
            assert state.original_level_function is not None
            original_pattern = state.original_pattern
            original_level_function = state.original_level_function
        else:
            original_pattern, original_level_function = buffer.outline

        combined = compile_combined_pattern(
            original_pattern.source, language_source, language_id=state.language_id
        )
        level_function = make_level_function(original_level_function, self.max_standard_level)

        if not state.is_active:
            state.original_pattern = original_pattern
            state.original_level_function = original_level_function
        state.combined_pattern = combined
        state.combined_level_function = level_function
        buffer.set_outline_definitions(combined, level_function)
        log.debug("Activated %r outline headings in %s", state.language_id, buffer.name)
        return True

    def is_active(self, buffer: Buffer) -> bool:
        state = self._states.get(buffer)
        return state is not None and state.is_active

    @contextmanager
    def original_definitions(self, buffer: Buffer) -> Iterator[Buffer]:
        """
        Run the `with` body against the buffer's baseline headline pattern and
        level function. On exit, by return or exception, the pair that was
        active on entry is put back. Does nothing special for buffers without
        active language support.
        """
        state = self._states.get(buffer)
        if state is None or not state.is_active:
            yield buffer
            return

        assert state.original_pattern is not None
        assert state.original_level_function is not None
        state.saved.append(buffer.outline)
        buffer.set_outline_definitions(state.original_pattern, state.original_level_function)
        try:
            yield buffer
        finally:
            previous = state.saved.pop()
            if buffer.is_live:
                buffer.set_outline_definitions(*previous)
            else:
                log.debug("Skipping outline restore for killed buffer %s", buffer.name)

    def with_original_definitions(
        self,
        buffer: Buffer,
        operation: Callable[_P, _T],
        *args: _P.args,
        **kwargs: _P.kwargs,
    ) -> _T:
        """Call `operation(*args, **kwargs)` inside `original_definitions(buffer)`."""
        with self.original_definitions(buffer):
            return operation(*args, **kwargs)

    def is_level_promotable(self, buffer: Buffer, level: int) -> bool:
        """
        Whether a headline at `level` may be promoted or demoted. With language
        support active, construct levels (`max_standard_level` and deeper) never
        are; otherwise the engine's own rule applies.
        """
        if self.is_active(buffer):
            return level < self.max_standard_level
        return self.engine.is_level_promotable(level)
