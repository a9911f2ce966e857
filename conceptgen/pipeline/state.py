"""Pipeline state definition for LangGraph."""

import operator
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Annotated, Optional, TypedDict

from conceptgen.indexing import FileInfo, SymbolInfo


@dataclass(frozen=True)
class PipelineOptions:
    """Per-run switches taken from the command line."""

    repo_root: Path
    out_dir: str = "docs/domain/concepts"
    clean: bool = False
    publish: bool = True
    rationalize: bool = False
    max_models: Optional[int] = None
    project_name: Optional[str] = None
    viewer_models_dir: Optional[Path] = None


class PipelineState(TypedDict, total=False):
    """State that flows through the LangGraph pipeline.

    Nodes return only the keys they change. Uses Annotated types with
    operators for list accumulation.
    """

    # Input
    repo_root: str

    # Stage 1: Indexing
    files: list[FileInfo]
    symbols: list[SymbolInfo]

    # Stage 2: Structure discovery
    skeleton: dict | None  # DiscoveredProject

    # Stages 3-6: Enrichment, views, stories, rationalization
    models: list[dict]  # List[ConceptModel], replaced by each stage

    # Stage 7: Persistence
    project: dict | None  # Project
    artifact_path: str | None
    published_path: str | None

    # Processing metadata
    processing_start: str  # ISO timestamp
    llm_calls_count: int

    # Diagnostics
    integrity_issues: Annotated[list[dict], operator.add]  # List[IntegrityIssue]
    warnings: Annotated[list[dict], operator.add]  # List[ProcessingError]


def create_initial_state(repo_root: str | Path) -> PipelineState:
    """Create initial pipeline state.

    Args:
        repo_root: Repository to analyze.

    Returns:
        Initial PipelineState dict.
    """
    return PipelineState(
        repo_root=str(repo_root),
        files=[],
        symbols=[],
        skeleton=None,
        models=[],
        project=None,
        artifact_path=None,
        published_path=None,
        processing_start=datetime.now(timezone.utc).isoformat(),
        llm_calls_count=0,
        integrity_issues=[],
        warnings=[],
    )
