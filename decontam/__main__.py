"""Main entry point for the decontam package."""

import sys

from loguru import logger

from decontam.cli import create_parser
from decontam.core import (
    BuildMatchesConfig,
    DecontamError,
    MarkContaminatesConfig,
    RunConfig,
    load_config,
)
from decontam.processing import run_build_matches, run_mark_contaminates
from decontam.utils.logging import setup_logger


def _log_configuration(config: RunConfig) -> None:
    logger.info("Configuration:")
    logger.info(f"  Index: {config.data_file}")
    if isinstance(config, BuildMatchesConfig):
        logger.info(f"  Training roots: {', '.join(config.trainset)}")
    if isinstance(config, MarkContaminatesConfig):
        logger.info(f"  Match file: {config.match_location}")
        logger.info(f"  Threshold: {config.threshold}")
    logger.info(f"  Match size: {config.match_size}")
    logger.info(f"  Output: {config.output}")
    logger.info(f"  Workers: {config.jobs}")
    logger.info("")


def _run(config: RunConfig) -> None:
    if isinstance(config, BuildMatchesConfig):
        run_build_matches(config)
    elif isinstance(config, MarkContaminatesConfig):
        run_mark_contaminates(config)


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Returns:
        Process exit status: 0 on success, 1 on any decontam error
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logger(verbose=args.verbose, debug=args.debug)

    try:
        config = load_config(args.config, args)
    except DecontamError as e:
        logger.error(f"✗ {e}")
        return 1

    # JSON config may switch on verbose/debug output
    setup_logger(verbose=config.verbose, debug=config.debug)

    if config.verbose:
        logger.info("=" * 60)
        logger.info(f"decontam {args.command}")
        logger.info("=" * 60)
        logger.info("")
        _log_configuration(config)

    try:
        _run(config)
    except KeyboardInterrupt:
        logger.warning("")
        logger.warning("⚠️  Processing interrupted by user")
        raise
    except DecontamError as e:
        logger.error("")
        logger.error("=" * 60)
        logger.error(f"✗ Processing failed: {e}")
        logger.error("  No output of this run should be considered valid")
        logger.error("=" * 60)
        return 1

    if config.verbose:
        logger.info("")
        logger.info("=" * 60)
        logger.info("✓ Processing completed successfully")
        logger.info("=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(main())
