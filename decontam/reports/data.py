"""Report data models."""

from dataclasses import dataclass, field


@dataclass
class ReportData:
    """Collects data throughout a run for reporting."""

    command: str = ""
    start_time: float = 0.0

    # Timing
    stage_times: dict[str, float] = field(default_factory=dict)

    # Settings echoed into the summary
    settings: dict[str, str] = field(default_factory=dict)

    # build-matches
    files_processed: int = 0
    matches_found: int = 0

    # mark-contaminates
    matches_loaded: int = 0
    validation_documents: int = 0
    match_groups: int = 0
    contaminated_documents: int = 0
    total_contaminates: int = 0
