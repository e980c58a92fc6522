"""Data models for passing summaries between pipeline stages."""

from pydantic import BaseModel, Field


class StageResult(BaseModel):
    """Base class for stage results with timing."""

    elapsed_time: float = Field(0.0, ge=0)


class MatchCollectionSummary(StageResult):
    """Counts reported after match collection."""

    files: int = Field(0, ge=0)
    matches: int = Field(0, ge=0)


class ContaminationSummary(StageResult):
    """Counts reported after contamination marking."""

    contaminated_documents: int = Field(0, ge=0)
    total_records: int = Field(0, ge=0)
