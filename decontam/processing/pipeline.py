"""Main processing pipeline orchestration.

``build-matches`` and ``mark-contaminates`` run as separate invocations; the
raw match file is the only thing passed between them. Each stage finishes
completely before the next one starts, and any error aborts the run before
output is written.
"""

import time

from loguru import logger

from decontam.core import BuildMatchesConfig, MarkContaminatesConfig
from decontam.processing.pipeline_helpers import setup_reporting
from decontam.processing.pipeline_stages import (
    run_stage_collect_matches,
    run_stage_decide_contamination,
    run_stage_discover_documents,
    run_stage_group_matches,
    run_stage_load_index,
    run_stage_load_matches,
    run_stage_save_contaminates,
    run_stage_save_matches,
)
from decontam.processing.stages import (
    ContaminationSummary,
    MatchCollectionSummary,
    summarize_contamination,
)
from decontam.reports import generate_reports
from decontam.utils import format_time


def run_build_matches(config: BuildMatchesConfig) -> MatchCollectionSummary:
    """Collect raw matches of the training corpus against the validation index.

    Writes ``paths.json.gz`` and ``matches.bin.gz`` into ``config.output``.
    """
    start_time = time.time()
    verbose = config.verbose
    report_data, report_dir = setup_reporting(config, "build-matches", start_time)

    if verbose:
        logger.info("Starting match building run...")

    documents = run_stage_discover_documents(config, verbose, report_data)
    index = run_stage_load_index(config.data_file, verbose, report_data)
    matches = run_stage_collect_matches(documents, index, config, verbose, report_data)
    run_stage_save_matches(documents, matches, config.output, verbose, report_data)

    elapsed_time = time.time() - start_time
    summary = MatchCollectionSummary(
        files=len(documents), matches=len(matches), elapsed_time=elapsed_time
    )

    if verbose:
        logger.info("-" * 60)
        logger.info("Completing match collection")
        logger.info(f"Found {summary.matches:,} matches from {summary.files:,} paths")
        logger.info(f"Total runtime: {format_time(elapsed_time)}")

    if report_data is not None and report_dir is not None:
        generate_reports(report_data, report_dir, verbose)

    return summary


def run_mark_contaminates(config: MarkContaminatesConfig) -> ContaminationSummary:
    """Group raw matches, apply the coverage threshold and save the records.

    Writes ``contaminates.bin.gz`` into ``config.output``.
    """
    start_time = time.time()
    verbose = config.verbose
    report_data, report_dir = setup_reporting(config, "mark-contaminates", start_time)

    if verbose:
        logger.info("Starting contaminate marking...")

    matches, boundaries = run_stage_load_matches(config, verbose, report_data)
    groups = run_stage_group_matches(matches, boundaries, config, verbose, report_data)
    # Raw matches are consumed exactly once
    del matches
    records = run_stage_decide_contamination(groups, config, verbose, report_data)
    run_stage_save_contaminates(records, config.output, verbose, report_data)

    elapsed_time = time.time() - start_time
    summary = summarize_contamination(records).model_copy(update={"elapsed_time": elapsed_time})

    if report_data:
        report_data.contaminated_documents = summary.contaminated_documents
        report_data.total_contaminates = summary.total_records

    if verbose:
        logger.info("-" * 60)
        logger.info("Completing contaminate collection")
        logger.info(f"Found {summary.contaminated_documents:,} contaminated val set docs")
        logger.info(f"Found {summary.total_records:,} total contaminates")
        logger.info(f"Total runtime: {format_time(elapsed_time)}")

    if report_data is not None and report_dir is not None:
        generate_reports(report_data, report_dir, verbose)

    return summary
