"""Pipeline stage execution functions."""

from pathlib import Path
import time

from loguru import logger

from decontam.core import BuildMatchesConfig, MarkContaminatesConfig
from decontam.core.types import ContaminationRecord, RawMatch, TrainingDocument
from decontam.data import (
    CONTAMINATES_FILENAME,
    MATCHES_FILENAME,
    PATHS_FILENAME,
    assign_document_ids,
    expand_dirs,
    read_matches,
    write_contaminates,
    write_matches,
    write_path_index,
)
from decontam.index import SuffixArrayIndex, load_boundaries, load_index
from decontam.processing.stages import (
    MatchGroups,
    collect_matches,
    decide_contamination,
    group_matches,
)
from decontam.reports import ReportData
from decontam.utils import format_time


def _record_time(report_data: ReportData | None, stage: str, elapsed: float) -> None:
    if report_data:
        report_data.stage_times[stage] = elapsed


def run_stage_discover_documents(
    config: BuildMatchesConfig, verbose: bool, report_data: ReportData | None
) -> list[TrainingDocument]:
    """Expand the training roots and assign stable document IDs."""
    if verbose:
        logger.info("Stage 0: Discovering training documents...")
    start = time.time()
    documents = assign_document_ids(expand_dirs(config.trainset))
    _record_time(report_data, "Discovering documents", time.time() - start)

    if report_data:
        report_data.files_processed = len(documents)
    if verbose:
        logger.info(f"✓ Collected {len(documents)} input files")
        logger.info("")
    return documents


def run_stage_load_index(
    data_file: str, verbose: bool, report_data: ReportData | None
) -> SuffixArrayIndex:
    """Load the validation corpus suffix array."""
    if verbose:
        logger.info("Loading suffix array index...")
    start = time.time()
    index = load_index(data_file)
    _record_time(report_data, "Loading index", time.time() - start)
    if verbose:
        logger.info(f"✓ Loaded {index.text_len:,} bytes of validation text")
        logger.info("")
    return index


def run_stage_collect_matches(
    documents: list[TrainingDocument],
    index: SuffixArrayIndex,
    config: BuildMatchesConfig,
    verbose: bool,
    report_data: ReportData | None,
) -> list[RawMatch]:
    """Run Stage 1: Collect raw matches."""
    if verbose:
        logger.info("Stage 1: Collecting matches...")
    start = time.time()
    matches = collect_matches(documents, index, config.match_size, config.jobs, verbose)
    elapsed = time.time() - start
    _record_time(report_data, "Collecting matches", elapsed)

    if report_data:
        report_data.matches_found = len(matches)
    if verbose:
        logger.info(f"✓ Collected {len(matches):,} matches in {format_time(elapsed)}")
        logger.info("")
    return matches


def run_stage_save_matches(
    documents: list[TrainingDocument],
    matches: list[RawMatch],
    output: str,
    verbose: bool,
    report_data: ReportData | None,
) -> tuple[Path, Path]:
    """Write the path index and raw match files."""
    start = time.time()
    paths_file = Path(output) / PATHS_FILENAME
    matches_file = Path(output) / MATCHES_FILENAME
    write_path_index(documents, paths_file)
    write_matches(matches, matches_file)
    _record_time(report_data, "Saving matches", time.time() - start)
    if verbose:
        logger.info(f"✓ Wrote {paths_file}")
        logger.info(f"✓ Wrote {matches_file}")
    return paths_file, matches_file


def run_stage_load_matches(
    config: MarkContaminatesConfig, verbose: bool, report_data: ReportData | None
) -> tuple[list[RawMatch], list[int]]:
    """Load the raw matches and the validation document boundaries."""
    if verbose:
        logger.info("Loading matches and document boundaries...")
    start = time.time()
    matches = read_matches(config.match_location)
    boundaries = load_boundaries(config.data_file)
    _record_time(report_data, "Loading matches", time.time() - start)

    if report_data:
        report_data.matches_loaded = len(matches)
        report_data.validation_documents = len(boundaries) - 1
    if verbose:
        logger.info(
            f"✓ Loaded {len(matches):,} matches over {len(boundaries) - 1:,} validation documents"
        )
        logger.info("")
    return matches, boundaries


def run_stage_group_matches(
    matches: list[RawMatch],
    boundaries: list[int],
    config: MarkContaminatesConfig,
    verbose: bool,
    report_data: ReportData | None,
) -> MatchGroups:
    """Run Stage 2: Group matches by validation document."""
    if verbose:
        logger.info("Stage 2: Grouping matches...")
    start = time.time()
    groups = group_matches(matches, boundaries, config.jobs, verbose)
    elapsed = time.time() - start
    _record_time(report_data, "Grouping matches", elapsed)

    if report_data:
        report_data.match_groups = len(groups)
    if verbose:
        logger.info(f"✓ Grouped matches into {len(groups):,} groups in {format_time(elapsed)}")
        logger.info("")
    return groups


def run_stage_decide_contamination(
    groups: MatchGroups,
    config: MarkContaminatesConfig,
    verbose: bool,
    report_data: ReportData | None,
) -> list[ContaminationRecord]:
    """Run Stage 3: Merge intervals and apply the coverage threshold."""
    if verbose:
        logger.info("Stage 3: Aggregating contaminates...")
    start = time.time()
    records = decide_contamination(
        groups, config.match_size, config.threshold, config.jobs, verbose
    )
    elapsed = time.time() - start
    _record_time(report_data, "Aggregating contaminates", elapsed)
    if verbose:
        logger.info(f"✓ Finished aggregating contaminates in {format_time(elapsed)}")
        logger.info("")
    return records


def run_stage_save_contaminates(
    records: list[ContaminationRecord],
    output: str,
    verbose: bool,
    report_data: ReportData | None,
) -> Path:
    """Write the contamination file."""
    start = time.time()
    contaminates_file = Path(output) / CONTAMINATES_FILENAME
    write_contaminates(records, contaminates_file)
    _record_time(report_data, "Saving contaminates", time.time() - start)
    if verbose:
        logger.info(f"✓ Wrote {contaminates_file}")
    return contaminates_file
