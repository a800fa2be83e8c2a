"""Main CLI entry point for the xml-bracket command-line tool.

Converts an XML file into bracket notation, or compares a file against a
second one line by line.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from xml_bracket import __version__
from xml_bracket.bracket.progress import ProgressCallback, ProgressReporter
from xml_bracket.bracket.transducer import convert_file
from xml_bracket.compare.comparator import compare_files, format_mismatch
from xml_bracket.shared.config import ConverterConfig
from xml_bracket.shared.errors import BracketError, ConfigError
from xml_bracket.shared.logging import configure_logging, get_logger, new_run_id


def path_exists(value: str) -> Path:
    """argparse type accepting only paths that exist."""
    path = Path(value)
    if not path.exists():
        raise argparse.ArgumentTypeError(f"File not found: {value}")
    return path


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="xml-bracket",
        description="XML to bracket notation converter"
    )

    parser.add_argument("--version", action="version", version=__version__)

    parser.add_argument(
        "--filepath", "-F",
        required=True,
        type=path_exists,
        metavar="FILE",
        help="Path to the XML file (or bracket file in compare mode)"
    )
    parser.add_argument(
        "--output-dir", "-o",
        type=Path,
        help="Directory for the converted file (default: working directory)"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        help="Configuration file path (JSON)"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Quiet output"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("convert", help="Convert XML to bracket notation (default)")

    compare_parser = subparsers.add_parser(
        "compare", help="Compare FILE with another file line by line"
    )
    compare_parser.add_argument(
        "--diffpath", "-D",
        required=True,
        type=path_exists,
        metavar="DIFF_FILE",
        help="Path to the bracket notation file to compare against"
    )

    return parser


def load_config(args: argparse.Namespace) -> ConverterConfig:
    """Build the run configuration from command-line arguments."""
    if args.config:
        return ConverterConfig.from_file(args.config)
    return ConverterConfig.default()


def _silent(records: int) -> None:
    pass


def cmd_convert(args: argparse.Namespace, config: ConverterConfig, run_id: str) -> int:
    """Handle convert command."""
    progress: ProgressCallback = _silent
    if not args.quiet:
        progress = ProgressReporter(logger=get_logger(__name__, run_id, "progress"))

    result = convert_file(
        args.filepath,
        output_dir=args.output_dir,
        config=config,
        progress_callback=progress,
        run_id=run_id,
    )

    if not args.quiet:
        print(
            f"Wrote {result.records} records to {result.output_path}",
            file=sys.stderr,
        )
    return 0


def cmd_compare(args: argparse.Namespace, config: ConverterConfig, run_id: str) -> int:
    """Handle compare command.

    A mismatch is a result, not a failure: it is printed and the exit status
    stays 0.
    """
    result = compare_files(args.filepath, args.diffpath, config=config, run_id=run_id)
    if result.mismatch is not None:
        print(format_mismatch(result.mismatch))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    # Set up logging verbosity
    if args.verbose:
        configure_logging(logging.DEBUG)
    elif args.quiet:
        configure_logging(logging.ERROR)
    else:
        configure_logging(logging.WARNING)

    run_id = new_run_id()
    logger = get_logger(__name__, run_id, "cli")

    try:
        config = load_config(args)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    # Route to appropriate command handler
    try:
        if args.command == "compare":
            return cmd_compare(args, config, run_id)
        return cmd_convert(args, config, run_id)

    except (BracketError, OSError, UnicodeError) as e:
        logger.error(
            "Run aborted",
            extra={"command": args.command or "convert"},
            exc_info=args.verbose,
        )
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return 130  # Standard exit code for SIGINT


if __name__ == "__main__":
    sys.exit(main())
