"""Processing pipelines for decontam."""

from .pipeline import run_build_matches, run_mark_contaminates

__all__ = ["run_build_matches", "run_mark_contaminates"]
