"""Command-line interface for the CEA-608 to timed-text converter.

WHY: Users need a simple way to turn caption files into subtitles from
the terminal. The CLI wires together the input adapter, a complete stream
run through the controller, and file saving behind a single command.

HOW: Uses argparse to accept an input file, output format, input format
override and output directory. The input adapter produces timestamped
units, convert_document() runs them through one stream, and the result
is written next to the source (or to --output-dir, or stdout).

RULES:
- Positional argument: input caption file path
- --format: vtt, srt or raw (default from CEA608TOTT_DEFAULT_FORMAT)
- --input-format: scc or raw; default from the file suffix
- Output naming: {stem}{suffix}, numeric suffix on conflict ({stem}-2.vtt)
- Status output goes to stderr (not stdout)
- Exit code 1 on any error, 0 on success
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from cea608tott.adapters import ADAPTERS
from cea608tott.config import DEFAULT_FORMAT, INPUT_SUFFIXES, configure_logging
from cea608tott.convert import convert_document
from cea608tott.core.errors import StreamError
from cea608tott.core.models import Format
from cea608tott.formatters import RENDERERS

logger = logging.getLogger(__name__)


def _status(msg: str) -> None:
    """Print a status message to stderr so stdout stays clean for --stdout."""
    print(msg, file=sys.stderr, flush=True)


def _fail(msg: str) -> None:
    print("Error: {}".format(msg), file=sys.stderr)
    sys.exit(1)


def _resolve_output_path(
    stem: str,
    suffix: str,
    output_dir: Path,
) -> Path:
    """Resolve the output file path, adding numeric suffix on conflict.

    WHY: Users may run the converter multiple times on the same file.
    Overwriting previous output would lose work.

    RULES:
    - First attempt: {stem}{suffix} (e.g. news.vtt)
    - Conflict: {stem}-2{suffix}, {stem}-3{suffix}, ...

    Args:
        stem: Source filename stem (without extension).
        suffix: Renderer suffix including the dot (e.g. ".vtt").
        output_dir: Directory to save the output file.

    Returns:
        A Path that does not yet exist.
    """
    base_path = output_dir / "{}{}".format(stem, suffix)
    if not base_path.exists():
        return base_path

    counter = 2
    while True:
        candidate = output_dir / "{}-{}{}".format(stem, counter, suffix)
        if not candidate.exists():
            return candidate
        counter += 1


def _input_format(input_path: Path, explicit: Optional[str]) -> str:
    if explicit:
        return explicit
    return INPUT_SUFFIXES.get(input_path.suffix.lower(), "raw")


def _run(args: argparse.Namespace) -> None:
    input_path = Path(args.input_file).resolve()
    if not input_path.is_file():
        _fail("File not found: {}".format(input_path))

    try:
        fmt = Format(args.format.lower())
    except ValueError:
        _fail("Unknown format '{}'. Available formats: {}".format(
            args.format, ", ".join(f.value for f in Format)
        ))

    output_dir = Path(args.output_dir).resolve() if args.output_dir else input_path.parent
    if not args.stdout and not output_dir.is_dir():
        _fail("Output directory does not exist: {}".format(output_dir))

    input_format = _input_format(input_path, args.input_format)
    _status("Reading {} ({} input)...".format(input_path.name, input_format))
    try:
        units = ADAPTERS[input_format](input_path.read_bytes())
    except ValueError as e:
        _fail(str(e))
    _status("  {} caption units".format(len(units)))

    renderer = RENDERERS[fmt]
    _status("Converting to {}...".format(renderer.name))
    try:
        document = convert_document(units, fmt)
    except StreamError as e:
        logger.debug("Conversion failed", exc_info=True)
        _fail(str(e))

    if args.stdout:
        sys.stdout.buffer.write(document)
        sys.stdout.flush()
        return

    path = _resolve_output_path(input_path.stem, renderer.suffix, output_dir)
    path.write_bytes(document)
    _status("Done! Saved {}".format(path))


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    WHY: Separating parser construction from main() makes the CLI
    testable: tests can inspect the parser without running a conversion.
    """
    parser = argparse.ArgumentParser(
        prog="cea608tott",
        description="Convert CEA-608 closed captions to WebVTT, SRT or raw timed text.",
    )

    parser.add_argument(
        "input_file",
        help="Path to the caption file (.scc, or raw CEA-608 byte pairs).",
    )

    parser.add_argument(
        "--format",
        "-f",
        default=DEFAULT_FORMAT,
        help="Output format: {}. Default: {}.".format(
            ", ".join(f.value for f in Format), DEFAULT_FORMAT
        ),
    )

    parser.add_argument(
        "--input-format",
        choices=sorted(ADAPTERS.keys()),
        default=None,
        help="Input format (default: guessed from the file suffix).",
    )

    parser.add_argument(
        "--output-dir",
        default=None,
        help="Directory to save the output file (default: same as input file).",
    )

    parser.add_argument(
        "--stdout",
        action="store_true",
        help="Write the converted document to stdout instead of a file.",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging.",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the CLI.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging("DEBUG" if args.verbose else None)
    _run(args)


if __name__ == "__main__":
    main()
