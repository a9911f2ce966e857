"""State for the concept sheet pipeline."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from conceptgen.models import ConceptCandidate, ConceptSheet, ProjectOverview


class SheetPipelineState(BaseModel):
    """Complete state passed through the concept sheet pipeline."""

    # Input
    repo_root: str
    out_dir: str

    # Stage outputs
    overview: Optional[ProjectOverview] = None
    candidates: list[ConceptCandidate] = Field(default_factory=list)
    sheets: list[ConceptSheet] = Field(default_factory=list)
    written_documents: list[str] = Field(default_factory=list)
    artifact_path: Optional[str] = None

    # Stage traces
    discovery_trace: Optional[dict] = Field(
        None, description="Per-iteration record of the convergence loop"
    )

    # Processing metadata
    processing_start: Optional[datetime] = None
    processing_end: Optional[datetime] = None
    stage_durations: dict[str, float] = Field(default_factory=dict)
    llm_calls_made: int = 0
    errors: list[dict] = Field(default_factory=list)
    warnings: list[dict] = Field(default_factory=list)
