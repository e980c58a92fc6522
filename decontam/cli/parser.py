"""Command-line interface for decontam."""

import argparse
from multiprocessing import cpu_count


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    """Options shared by every subcommand.

    Value options default to None so that JSON config values are only
    overridden by flags the user actually passed.
    """
    parser.add_argument(
        "-c",
        "--config",
        type=str,
        help="JSON configuration file (CLI args override JSON values)",
    )
    parser.add_argument(
        "--data-file",
        dest="data_file",
        type=str,
        help="Suffix-array index descriptor (validation corpus text file)",
    )
    parser.add_argument("-o", "--output", type=str, help="Output directory")
    parser.add_argument(
        "--reports",
        type=str,
        help="Directory to write a run summary and log (creates timestamped subdirectories)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    parser.add_argument("-d", "--debug", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "-j",
        "--jobs",
        type=int,
        help=f"Number of parallel workers (default: {cpu_count()})",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create and configure argument parser."""
    parser = argparse.ArgumentParser(
        prog="decontam",
        description="Find validation documents contaminated by training data",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Phase 1: collect 50-byte matches of a training corpus against an index
  %(prog)s build-matches --data-file val/corpus --trainset train/ -o work --match-size 50 -v

  # Phase 2: mark validation documents at least 80%% covered by one training line
  %(prog)s mark-contaminates --data-file val/corpus --match-location work/matches.bin.gz \\
      -o work --threshold 0.8 --match-size 50 -v

The index descriptor <F> needs <F>.table.bin (suffix table) beside it, and
mark-contaminates also reads document boundaries from <F>.size.

Outputs:
  build-matches      <output>/paths.json.gz, <output>/matches.bin.gz
  mark-contaminates  <output>/contaminates.bin.gz
        """,
    )
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    build = subparsers.add_parser(
        "build-matches",
        help="Collect raw substring matches of training data against the index",
    )
    _add_common_arguments(build)
    build.add_argument(
        "--trainset",
        nargs="+",
        type=str,
        help="Training corpus files or directories (JSON Lines with a 'text' field)",
    )
    build.add_argument(
        "--match-size",
        dest="match_size",
        type=int,
        help="Match window size in bytes (default: 10)",
    )

    mark = subparsers.add_parser(
        "mark-contaminates",
        help="Group matches and mark contaminated validation documents",
    )
    _add_common_arguments(mark)
    mark.add_argument(
        "--match-location",
        dest="match_location",
        type=str,
        help="Raw match file written by build-matches",
    )
    mark.add_argument(
        "--threshold",
        type=float,
        help="Fraction of a validation document that must be covered (0 to 1)",
    )
    mark.add_argument(
        "--match-size",
        dest="match_size",
        type=int,
        help="Match window size used by build-matches",
    )

    return parser
