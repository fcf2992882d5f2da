"""
TOML-based config file loading for Foldmark.

Searches for `.foldmark.toml`, `foldmark.toml`, or `pyproject.toml [tool.foldmark]`
walking up from the current directory. Config values are merged with CLI flags
using three-way precedence: explicit CLI flags > config file > built-in defaults.

Example `foldmark.toml`:

    [outline]
    max-standard-level = 8
    heading-pattern = "[*\\f]+"

    [languages]
    ruby = "(?:def|class|module)\\s+\\w+"
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, TypeVar, cast

if sys.version_info >= (3, 11):
    import tomllib  # pyright: ignore[reportUnreachable]
else:
    import tomli as tomllib  # type: ignore[no-redef]  # pyright: ignore[reportUnreachable]


@dataclass
class FoldmarkConfig:
    """
    Parsed config from a TOML file. Fields are `None` when not set in the config,
    allowing the merge logic to distinguish "not configured" from "explicitly set
    to default value".
    """

    # Outline
    max_standard_level: int | None = None
    heading_pattern: str | None = None
    languages: dict[str, str] | None = None
    # File discovery
    respect_gitignore: bool | None = None
    extend_exclude: list[str] | None = None


# Config file search order (first match wins within each directory level)
_CONFIG_FILENAMES = [".foldmark.toml", "foldmark.toml", "pyproject.toml"]

# Tables kept as mappings rather than flattened into top-level keys
_MAPPING_TABLES = {"languages"}

_VALID_FIELDS = {f.name for f in fields(FoldmarkConfig)}

# Expected TOML value types for scalar settings
_SCALAR_TYPES: dict[str, type] = {
    "max_standard_level": int,
    "heading_pattern": str,
    "respect_gitignore": bool,
}


def _check_types(mapped: dict[str, Any]) -> None:
    for name, expected in _SCALAR_TYPES.items():
        value = mapped.get(name)
        if value is None:
            continue
        # TOML booleans are ints to Python
        if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
            key = name.replace("_", "-")
            raise ValueError(f"{key} must be {expected.__name__}, got {value!r}")

    extend_exclude = mapped.get("extend_exclude")
    if extend_exclude is not None and (
        not isinstance(extend_exclude, list)
        or not all(isinstance(v, str) for v in cast(list[Any], extend_exclude))
    ):
        raise ValueError("extend-exclude must be a list of pattern strings")


def find_config_file(start_dir: Path) -> Path | None:
    """
    Walk up from `start_dir` looking for a config file. Returns the first
    found, or `None`. Search order per directory: `.foldmark.toml` >
    `foldmark.toml` > `pyproject.toml` (only if it has `[tool.foldmark]`).
    """
    current = start_dir.resolve()
    while True:
        for filename in _CONFIG_FILENAMES:
            candidate = current / filename
            if candidate.is_file():
                if filename == "pyproject.toml":
                    if _pyproject_has_foldmark_section(candidate):
                        return candidate
                else:
                    return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent
    return None


def _pyproject_has_foldmark_section(path: Path) -> bool:
    try:
        data = tomllib.loads(path.read_text())
        return "foldmark" in data.get("tool", {})
    except (tomllib.TOMLDecodeError, OSError):
        return False


def load_config(config_path: Path) -> FoldmarkConfig:
    """
    Load a `FoldmarkConfig` from a TOML file. Supports both standalone
    `foldmark.toml` / `.foldmark.toml` and `pyproject.toml` (extracts
    `[tool.foldmark]`). TOML kebab-case keys are mapped to Python snake_case.
    """
    data = tomllib.loads(config_path.read_text())

    if config_path.name == "pyproject.toml":
        data = data.get("tool", {}).get("foldmark", {})

    return _parse_config_data(data)


def _parse_config_data(data: dict[str, Any]) -> FoldmarkConfig:
    """Parse a flat or sectioned TOML dict into FoldmarkConfig."""
    # Flatten sections like [outline] and [file-discovery] into the top level
    flat: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, dict) and key not in _MAPPING_TABLES:
            for sub_key, sub_value in cast(dict[str, Any], value).items():
                flat[sub_key] = sub_value
        else:
            flat[key] = value

    mapped: dict[str, Any] = {}
    for key, value in flat.items():
        snake_key = key.replace("-", "_")
        if snake_key in _VALID_FIELDS:
            mapped[snake_key] = value

    _check_types(mapped)

    languages = mapped.get("languages")
    if languages is not None:
        if not isinstance(languages, dict) or not all(
            isinstance(v, str) for v in cast(dict[str, Any], languages).values()
        ):
            raise ValueError("[languages] must map language names to pattern strings")
        mapped["languages"] = {str(k): v for k, v in cast(dict[str, str], languages).items()}

    return FoldmarkConfig(**mapped)


_T = TypeVar("_T")


def merge_cli_with_config(
    cli_opts: _T,
    config: FoldmarkConfig | None,
    explicit_flags: set[str],
) -> _T:
    """
    Merge CLI options with config file settings.

    Precedence: explicit CLI flags > config file > built-in defaults. Languages
    are merged per key, with CLI `--language` entries winning.
    """
    if config is None:
        return cli_opts

    for cfg_field in fields(FoldmarkConfig):
        cfg_value = getattr(config, cfg_field.name)
        if cfg_value is None:
            continue

        if cfg_field.name == "languages" and hasattr(cli_opts, "languages"):
            merged = dict(cfg_value)
            merged.update(getattr(cli_opts, "languages") or {})
            setattr(cli_opts, "languages", merged)
            continue

        if cfg_field.name in explicit_flags:
            continue

        if hasattr(cli_opts, cfg_field.name):
            setattr(cli_opts, cfg_field.name, cfg_value)

    return cli_opts
