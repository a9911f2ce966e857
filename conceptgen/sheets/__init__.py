"""Flat concept-document pipeline.

Discovers concepts with a convergence loop, writes one Markdown sheet per
concept as soon as it is generated, then consolidates bounded contexts.
"""

from conceptgen.sheets.models import SheetPipelineState
from conceptgen.sheets.orchestrator import run_sheet_pipeline

__all__ = ["SheetPipelineState", "run_sheet_pipeline"]
