"""Pipeline stages: match collection, match grouping, contamination decision."""

from .contamination_decision import (
    covered_bytes,
    decide_contamination,
    merge_intervals,
    required_coverage,
    summarize_contamination,
)
from .data_models import ContaminationSummary, MatchCollectionSummary
from .match_collection import collect_matches, iter_windows
from .match_grouping import MatchGroups, group_matches

__all__ = [
    # Data models
    "ContaminationSummary",
    "MatchCollectionSummary",
    "MatchGroups",
    # Stage functions
    "collect_matches",
    "covered_bytes",
    "decide_contamination",
    "group_matches",
    "iter_windows",
    "merge_intervals",
    "required_coverage",
    "summarize_contamination",
]
