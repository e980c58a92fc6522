"""Core domain types, configuration and errors for decontam."""

from .config import BuildMatchesConfig, MarkContaminatesConfig, RunConfig, load_config
from .errors import (
    ConfigError,
    DecontamError,
    InputOutputError,
    ParseError,
    SerializationError,
    SuffixIndexError,
)
from .types import (
    ContaminationRecord,
    GroupKey,
    RawMatch,
    SourceKey,
    TrainingDocument,
    TrainingLine,
)

__all__ = [
    "BuildMatchesConfig",
    "ConfigError",
    "ContaminationRecord",
    "DecontamError",
    "GroupKey",
    "InputOutputError",
    "MarkContaminatesConfig",
    "ParseError",
    "RawMatch",
    "RunConfig",
    "SerializationError",
    "SourceKey",
    "SuffixIndexError",
    "TrainingDocument",
    "TrainingLine",
    "load_config",
]
