from foldmark.code_outline.controller import BufferLanguageState, LanguageOutlineController
from foldmark.code_outline.levels import make_level_function
from foldmark.code_outline.patterns import (
    CombinedPattern,
    LanguagePatternError,
    compile_combined_pattern,
)
from foldmark.languages import (
    DEFAULT_LANGUAGE_PATTERNS,
    DEFAULT_MAX_STANDARD_LEVEL,
    DEFAULT_REGISTRY,
    LanguageRegistry,
)
from foldmark.modes import language_for_mode, mode_for_path
from foldmark.outline.commands import OutlineCommandError, demote, promote
from foldmark.outline.engine import (
    Buffer,
    HeadlinePattern,
    LanguageMatch,
    MatchContext,
    OutlineEngine,
    StandardMatch,
)
from foldmark.outline.visibility import CycleState, OutlineView

__all__ = [
    "DEFAULT_LANGUAGE_PATTERNS",
    "DEFAULT_MAX_STANDARD_LEVEL",
    "DEFAULT_REGISTRY",
    "Buffer",
    "BufferLanguageState",
    "CombinedPattern",
    "CycleState",
    "HeadlinePattern",
    "LanguageMatch",
    "LanguageOutlineController",
    "LanguagePatternError",
    "LanguageRegistry",
    "MatchContext",
    "OutlineCommandError",
    "OutlineEngine",
    "OutlineView",
    "StandardMatch",
    "compile_combined_pattern",
    "demote",
    "language_for_mode",
    "make_level_function",
    "mode_for_path",
    "promote",
]
