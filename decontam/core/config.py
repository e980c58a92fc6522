"""Configuration management for decontam."""

from __future__ import annotations

import json
from argparse import Namespace
from multiprocessing import cpu_count

from loguru import logger
from pydantic import BaseModel, Field, ValidationError, field_validator

from decontam.core.errors import ConfigError
from decontam.utils import expand_file_path

DEFAULT_MATCH_SIZE = 10


class RunConfig(BaseModel):
    """Settings shared by both subcommands."""

    data_file: str = Field(description="Suffix-array index descriptor (validation corpus text)")
    output: str = Field(description="Output directory")
    match_size: int = Field(DEFAULT_MATCH_SIZE, ge=1, description="Match window size in bytes")
    jobs: int = Field(default_factory=cpu_count, ge=1)
    verbose: bool = False
    debug: bool = False
    reports: str | None = None

    @field_validator("data_file", "output", "reports", mode="before")
    @classmethod
    def expand_path(cls, v):
        """Expand ~ in path settings."""
        if isinstance(v, str):
            return expand_file_path(v) or v
        return v


class BuildMatchesConfig(RunConfig):
    """Configuration for match collection."""

    trainset: list[str] = Field(min_length=1, description="Training corpus files or directories")

    @field_validator("trainset", mode="before")
    @classmethod
    def parse_path_list(cls, v):
        """Accept a single path, a comma-separated string or a list of paths."""
        if isinstance(v, str):
            v = [s for s in v.split(",") if s.strip()]
        if isinstance(v, list):
            return [expand_file_path(str(s).strip()) for s in v]
        return v


class MarkContaminatesConfig(RunConfig):
    """Configuration for contamination marking."""

    match_location: str = Field(description="Raw match file written by build-matches")
    # Coverage fraction outside [0, 1] is rejected here rather than at decision time
    threshold: float = Field(ge=0.0, le=1.0, description="Required coverage fraction")
    match_size: int = Field(ge=1, description="Match window size used by build-matches")

    @field_validator("match_location", mode="before")
    @classmethod
    def expand_match_location(cls, v):
        """Expand ~ in the match file path."""
        if isinstance(v, str):
            return expand_file_path(v) or v
        return v


_COMMAND_MODELS: dict[str, type[RunConfig]] = {
    "build-matches": BuildMatchesConfig,
    "mark-contaminates": MarkContaminatesConfig,
}

_COMMAND_KEYS: dict[str, tuple[str, ...]] = {
    "build-matches": ("data_file", "trainset", "output", "match_size"),
    "mark-contaminates": ("data_file", "match_location", "output", "threshold", "match_size"),
}

_COMMON_KEYS = ("jobs", "reports")


def _read_json_config(json_path: str) -> dict:
    """Read a JSON config file, translating failures into ConfigError."""
    json_path = expand_file_path(json_path) or json_path
    try:
        with open(json_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        logger.error(f"✗ Config file not found: {json_path}")
        logger.error("  Please check the file path and try again")
        raise ConfigError(f"Config file not found: {json_path}") from e
    except json.JSONDecodeError as e:
        logger.error(f"✗ Invalid JSON in config file {json_path}: {e}")
        logger.error("  Please validate your JSON syntax")
        raise ConfigError(f"Invalid JSON configuration: {e}") from e
    except PermissionError as e:
        logger.error(f"✗ Permission denied reading config file: {json_path}")
        raise ConfigError(f"Permission denied reading config file: {json_path}") from e
    except UnicodeDecodeError as e:
        logger.error(f"✗ Encoding error reading config file {json_path}: {e}")
        logger.error("  Please ensure the file is UTF-8 encoded")
        raise ConfigError(f"Config file is not UTF-8: {json_path}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file must contain a JSON object: {json_path}")
    return data


def load_config(json_path: str | None, cli_args: Namespace) -> RunConfig:
    """Load JSON config, override with CLI args, return the command's config.

    Priority is CLI > JSON > model default. CLI options default to None so an
    unset flag never masks a JSON value.

    Raises:
        ConfigError: If the file cannot be read or the values do not validate
    """
    command = cli_args.command
    if command not in _COMMAND_MODELS:
        raise ConfigError(f"Unknown command: {command}")

    json_config = _read_json_config(json_path) if json_path else {}

    config_dict = {}
    for key in _COMMAND_KEYS[command] + _COMMON_KEYS:
        cli_value = getattr(cli_args, key, None)
        if cli_value is not None:
            config_dict[key] = cli_value
        elif key in json_config:
            config_dict[key] = json_config[key]
    config_dict["verbose"] = bool(getattr(cli_args, "verbose", False)) or bool(
        json_config.get("verbose", False)
    )
    config_dict["debug"] = bool(getattr(cli_args, "debug", False)) or bool(
        json_config.get("debug", False)
    )

    try:
        return _COMMAND_MODELS[command].model_validate(config_dict)
    except ValidationError as e:
        logger.error(f"✗ Configuration validation failed: {e}")
        logger.error("  Please check your configuration values")
        raise ConfigError(f"Invalid configuration: {e}") from e
