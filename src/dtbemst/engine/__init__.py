"""Pipeline orchestration engine.

This package provides the main entry point for running the complete EMST
pipeline (load, build tree, compute, write) with a full audit trail.
"""

from dtbemst.engine.config import PipelineConfig, PipelineResult
from dtbemst.engine.runner import run_pipeline

__all__ = [
    "PipelineConfig",
    "PipelineResult",
    "run_pipeline",
]
