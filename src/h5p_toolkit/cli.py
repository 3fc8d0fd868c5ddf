"""
Command line entry point (console script `h5p-toolkit`).

    h5p-toolkit parse-questionset quiz.json
    h5p-toolkit inspect quiz.h5p
    h5p-toolkit validate quiz.h5p --strict

Exit codes: 0 success, 1 validation errors found, 2 the input could not be
read at all.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from h5p_toolkit import __version__
from h5p_toolkit.archive.reader import ArchiveReader
from h5p_toolkit.content.question_set import QuestionSet
from h5p_toolkit.content.validation import validate_content, validate_question_set
from h5p_toolkit.core.schemas.validator import ValidationResult, validate_package
from h5p_toolkit.core.utils.serialization import load_json_file
from h5p_toolkit.errors import H5PError

logger = logging.getLogger(__name__)


def _print_issues(result: ValidationResult) -> None:
    for issue in result.issues:
        print(f"  {issue}")


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def cmd_parse_questionset(args: argparse.Namespace) -> int:
    data = load_json_file(Path(args.file))
    try:
        question_set = QuestionSet.from_dict(data)
    except ValueError as e:
        raise H5PError(f"{args.file} is not a question set: {e}") from e

    print(f"Title: {question_set.title or '(untitled)'}")
    print(f"Questions: {len(question_set.questions)}")
    if question_set.pass_percentage is not None:
        print(f"Pass percentage: {question_set.pass_percentage}%")

    for i, question in enumerate(question_set.questions, start=1):
        print(f"\nQuestion {i}: {question.library}")
        try:
            question.dependency
        except ValueError as e:
            print(f"  ({e})")
            continue
        if not question.is_multichoice:
            continue
        try:
            params = question.multichoice()
        except ValueError as e:
            print(f"  (params cannot be decoded: {e})")
            continue
        print(f"  Text: {params.question}")
        for answer in params.answers:
            mark = "x" if answer.correct is True else " "
            print(f"  [{mark}] {answer.text}")

    result = validate_question_set(question_set)
    if result.issues:
        print(f"\n{len(result.errors)} error(s), {len(result.warnings)} warning(s):")
        _print_issues(result)
    return 0 if result.ok else 1


def cmd_inspect(args: argparse.Namespace) -> int:
    reader = ArchiveReader()
    package = reader.read(Path(args.file))

    definition = package.definition
    if definition is None:
        print("Title: (no h5p.json)")
    else:
        print(f"Title: {definition.title}")
        print(f"Main library: {definition.main_library}")
        print(f"Language: {definition.language}")

    print(f"Libraries: {len(package.libraries)}")
    for directory, library in package.libraries.items():
        version = library.definition.version_string if library.definition else "?"
        semantics = f", {len(library.semantics)} top-level fields" if library.semantics is not None else ""
        print(f"  {directory} (version {version}, {len(library.files)} files{semantics})")

    print(f"Content files: {len(package.content_files)}")
    for path in sorted(package.content_files):
        print(f"  content/{path}")

    if reader.skipped_entries:
        print(f"Skipped entries: {len(reader.skipped_entries)}")
        for name in reader.skipped_entries:
            print(f"  {name}")
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    package = ArchiveReader().read(Path(args.file))

    result = validate_package(package, strict=args.strict)
    if package.content is not None:
        result.extend(validate_content(package.content))

    if not result.issues:
        print(f"{args.file}: OK")
        return 0
    status = "OK" if result.ok else "INVALID"
    print(f"{args.file}: {status} ({len(result.errors)} error(s), {len(result.warnings)} warning(s))")
    _print_issues(result)
    return 0 if result.ok else 1


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="h5p-toolkit",
        description="Inspect, validate and summarize H5P packages and content.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("parse-questionset", help="Summarize and validate a question set JSON file")
    p.add_argument("file", help="Path to a QuestionSet content.json")
    p.set_defaults(func=cmd_parse_questionset)

    p = sub.add_parser("inspect", help="List the libraries and files of an .h5p archive")
    p.add_argument("file", help="Path to an .h5p archive")
    p.set_defaults(func=cmd_inspect)

    p = sub.add_parser("validate", help="Validate an .h5p archive and its content")
    p.add_argument("file", help="Path to an .h5p archive")
    p.add_argument("--strict", action="store_true", help="Also check JSON Schemas")
    p.set_defaults(func=cmd_validate)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        return args.func(args)
    except (H5PError, OSError) as e:
        logger.debug("Command failed", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
