"""framebatch core: pipeline runner, base step, shared contracts."""

from .step_base import BaseStep
from .contracts import (
    BatchResult,
    BatchTotals,
    ExtractionOptions,
    ItemFailure,
    ItemOutcome,
    ItemSuccess,
    PipelineConfig,
    StepEntry,
    UploadOutcome,
    WorkItem,
)
from .pipeline_runner import run_pipeline, load_pipeline_config
from .logging import setup_logging

__all__ = [
    "BaseStep",
    "BatchResult",
    "BatchTotals",
    "ExtractionOptions",
    "ItemFailure",
    "ItemOutcome",
    "ItemSuccess",
    "PipelineConfig",
    "StepEntry",
    "UploadOutcome",
    "WorkItem",
    "run_pipeline",
    "load_pipeline_config",
    "setup_logging",
]
