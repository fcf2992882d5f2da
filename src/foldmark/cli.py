#!/usr/bin/env python3
"""
Foldmark: Outline headings for text and source code

Common usage:
  foldmark notes.org
  foldmark src/
  foldmark --mode python-mode - < script.py
  foldmark --demote 12 --subtree -i notes.py

Standard headlines (`*`, `**`, ...) get their usual levels. In source files,
functions, classes and similar constructs are outline nodes too, nested below
every standard headline by their indentation.
"""

from __future__ import annotations

import argparse
import importlib.metadata
import logging
import sys
from dataclasses import dataclass
from pathlib import Path

from foldmark.code_outline.controller import LanguageOutlineController
from foldmark.config import find_config_file, load_config, merge_cli_with_config
from foldmark.languages import DEFAULT_MAX_STANDARD_LEVEL, DEFAULT_REGISTRY
from foldmark.modes import mode_for_path
from foldmark.outline.commands import demote, promote
from foldmark.outline.engine import DEFAULT_HEADING_PATTERN, Buffer, OutlineEngine

log = logging.getLogger(__name__)


@dataclass
class Options:
    """Command-line options for the foldmark tool."""

    files: list[str]
    mode: str | None
    max_standard_level: int
    heading_pattern: str
    languages: dict[str, str]
    promote: int | None
    demote: int | None
    subtree: bool
    inplace: bool
    respect_gitignore: bool
    extend_exclude: list[str]
    list_files: bool
    verbose: bool
    version: bool


def _parse_language(value: str) -> tuple[str, str]:
    name, sep, pattern = value.partition("=")
    if not sep or not name:
        raise argparse.ArgumentTypeError(f"expected NAME=PATTERN, got {value!r}")
    return name, pattern


def _parse_args(args: list[str] | None = None) -> tuple[Options, set[str]]:
    """
    Parse command-line arguments.

    Returns `(options, explicit_flags)`, where `explicit_flags` names the options
    the user actually passed, so they win over config file settings.
    """
    module_doc = __doc__ or ""
    doc_parts = module_doc.split("\n\n")
    description = doc_parts[0]
    epilog = "\n\n".join(doc_parts[1:])

    parser = argparse.ArgumentParser(
        description=description,
        epilog=epilog,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "files",
        nargs="*",
        type=str,
        default=[],
        help="Input files or directories ('-' for stdin, which requires --mode)",
    )
    parser.add_argument(
        "-m",
        "--mode",
        type=str,
        default=None,
        help="Mode to use for all inputs, e.g. 'python-mode' (default: from file extension)",
    )
    parser.add_argument(
        "--max-standard-level",
        type=int,
        default=None,
        dest="max_standard_level",
        help=f"Level at which language constructs start (default: {DEFAULT_MAX_STANDARD_LEVEL})",
    )
    parser.add_argument(
        "--heading-pattern",
        type=str,
        default=None,
        dest="heading_pattern",
        help="Regex for standard headlines (default: %r)" % DEFAULT_HEADING_PATTERN,
    )
    parser.add_argument(
        "--language",
        action="append",
        type=_parse_language,
        default=[],
        metavar="NAME=PATTERN",
        help="Add or replace the construct pattern for a language. Can be repeated",
    )
    edit = parser.add_mutually_exclusive_group()
    edit.add_argument(
        "--promote", type=int, metavar="LINE", help="Promote the headline at or above LINE"
    )
    edit.add_argument(
        "--demote", type=int, metavar="LINE", help="Demote the headline at or above LINE"
    )
    parser.add_argument(
        "--subtree", action="store_true", help="Promote or demote the whole subtree"
    )
    parser.add_argument(
        "-i",
        "--inplace",
        action="store_true",
        help="Write promote/demote results back to the file instead of stdout",
    )
    parser.add_argument(
        "--no-respect-gitignore",
        action="store_true",
        dest="no_respect_gitignore",
        help="Disable .gitignore integration when walking directories",
    )
    parser.add_argument(
        "--extend-exclude",
        action="append",
        default=[],
        metavar="PATTERN",
        help="Additional exclusion patterns for directory walks. Can be repeated",
    )
    parser.add_argument(
        "--list-files",
        action="store_true",
        dest="list_files",
        help="Print resolved file paths and their modes without outlining",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--version", action="store_true", help="Show version information and exit"
    )
    opts = parser.parse_args(args)

    explicit_flags: set[str] = set()
    if opts.max_standard_level is not None:
        explicit_flags.add("max_standard_level")
    if opts.heading_pattern is not None:
        explicit_flags.add("heading_pattern")
    if opts.no_respect_gitignore:
        explicit_flags.add("respect_gitignore")
    if opts.extend_exclude:
        explicit_flags.add("extend_exclude")

    return (
        Options(
            files=opts.files,
            mode=opts.mode,
            max_standard_level=(
                opts.max_standard_level
                if opts.max_standard_level is not None
                else DEFAULT_MAX_STANDARD_LEVEL
            ),
            heading_pattern=(
                opts.heading_pattern
                if opts.heading_pattern is not None
                else DEFAULT_HEADING_PATTERN
            ),
            languages=dict(opts.language),
            promote=opts.promote,
            demote=opts.demote,
            subtree=opts.subtree,
            inplace=opts.inplace,
            respect_gitignore=not opts.no_respect_gitignore,
            extend_exclude=opts.extend_exclude,
            list_files=opts.list_files,
            verbose=opts.verbose,
            version=opts.version,
        ),
        explicit_flags,
    )


def _resolve_files(options: Options) -> list[str]:
    """Expand directories into source files; files and '-' pass through."""
    if not any(f != "-" and Path(f).is_dir() for f in options.files) and not options.list_files:
        return options.files

    from foldmark.discovery import SourceFileFinder

    finder = SourceFileFinder(
        respect_gitignore=options.respect_gitignore, extend_exclude=options.extend_exclude
    )
    resolvable = [f for f in options.files if f != "-"]
    result = [str(p) for p in finder.find(resolvable)]
    if len(resolvable) < len(options.files):
        result.insert(0, "-")
    return result


def format_outline(engine: OutlineEngine, buffer: Buffer) -> str:
    """One line per headline: line number, level, then the text indented by depth."""
    out: list[str] = []
    stack: list[int] = []
    for heading in engine.headings(buffer):
        while stack and stack[-1] >= heading.level:
            stack.pop()
        indent = "  " * len(stack)
        stack.append(heading.level)
        out.append(f"{heading.index + 1:>6}  {heading.level:>3}  {indent}{heading.text}")
    return "\n".join(out)


def _read_input(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    return Path(path).read_text()


def _process_file(
    path: str, options: Options, engine: OutlineEngine, controller: LanguageOutlineController
) -> None:
    mode = options.mode or mode_for_path(path)
    buffer = engine.open_buffer(_read_input(path), mode=mode, name=path)

    if options.promote is not None or options.demote is not None:
        line = options.promote if options.promote is not None else options.demote
        assert line is not None
        command = promote if options.promote is not None else demote
        command(controller, buffer, line - 1, subtree=options.subtree)
        if options.inplace:
            if path == "-":
                raise ValueError("Cannot use --inplace with stdin")
            Path(path).write_text(buffer.text)
        else:
            sys.stdout.write(buffer.text)
        return

    outline = format_outline(engine, buffer)
    if len(options.files) > 1:
        print(f"{path} ({mode})")
    if outline:
        print(outline)


def main(args: list[str] | None = None) -> int:
    """
    Main entry point for the foldmark CLI.

    Args:
        args: Command-line arguments (uses sys.argv if None)

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    options, explicit_flags = _parse_args(args)

    logging.basicConfig(
        level=logging.DEBUG if options.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if options.version:
        try:
            version = importlib.metadata.version("foldmark")
            print(f"v{version}")
        except importlib.metadata.PackageNotFoundError:
            print("unknown (package not installed)")
        return 0

    if not options.files:
        print(
            "Error: No input specified. Provide files, directories, or '-' for stdin."
            " Use --help for more options.",
            file=sys.stderr,
        )
        return 1

    if "-" in options.files and options.mode is None:
        print("Error: reading stdin requires --mode", file=sys.stderr)
        return 1

    config_path = find_config_file(Path.cwd())
    try:
        if config_path:
            log.debug("Using config file %s", config_path)
            config = load_config(config_path)
            merge_cli_with_config(options, config, explicit_flags)

        resolved_files = _resolve_files(options)
        if options.list_files:
            for f in resolved_files:
                print(f"{f}\t{options.mode or mode_for_path(f)}")
            return 0

        engine = OutlineEngine(heading_pattern=options.heading_pattern)
        controller = LanguageOutlineController(
            engine,
            registry=DEFAULT_REGISTRY.extend(options.languages),
            max_standard_level=options.max_standard_level,
        )
        controller.install()

        options.files = resolved_files
        for path in resolved_files:
            _process_file(path, options, engine, controller)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    return 0


if __name__ == "__main__":
    sys.exit(main())
