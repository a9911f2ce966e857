"""Staged concept model pipeline built on LangGraph."""

from .errors import DiscoveryError, PipelineError
from .graph import build_pipeline, create_pipeline_app, run_pipeline
from .state import PipelineOptions, PipelineState, create_initial_state

__all__ = [
    "DiscoveryError",
    "PipelineError",
    "build_pipeline",
    "create_pipeline_app",
    "run_pipeline",
    "PipelineOptions",
    "PipelineState",
    "create_initial_state",
]
