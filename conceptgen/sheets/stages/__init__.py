"""Concept sheet pipeline stages."""

from conceptgen.sheets.stages.discovery import DiscoveryTrace, discover_concepts, merge_candidates
from conceptgen.sheets.stages.generation import fallback_sheet, generate_sheet, generate_sheets
from conceptgen.sheets.stages.overview import generate_overview
from conceptgen.sheets.stages.rationalization import rationalize_sheets

__all__ = [
    "discover_concepts",
    "merge_candidates",
    "DiscoveryTrace",
    "fallback_sheet",
    "generate_sheet",
    "generate_sheets",
    "generate_overview",
    "rationalize_sheets",
]
