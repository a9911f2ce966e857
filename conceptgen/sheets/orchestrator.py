"""Concept sheet orchestrator: coordinates the flat-document stages.

Stages run in sequence against one shared state:
1. Indexing                (fatal on failure)
2. Project overview        (soft)
3. Convergence discovery   (fatal on failure)
4. Sheet generation        (soft per concept, each document written immediately)
5. Rationalization         (soft), then documents are re-rendered
6. Assembly                concept-model.json
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import structlog

from conceptgen import storage
from conceptgen.config import Settings, get_settings
from conceptgen.indexing import FileInfo, SymbolInfo, extract_symbols, format_symbols, scan_repo
from conceptgen.llm.oracle import GenerationOracle, OracleError
from conceptgen.models import ConceptDocumentModel, ProcessingError
from conceptgen.pipeline.errors import DiscoveryError
from conceptgen.sheets.models import SheetPipelineState
from conceptgen.sheets.stages import (
    discover_concepts,
    generate_overview,
    generate_sheets,
    rationalize_sheets,
)

logger = structlog.get_logger(__name__)


def run_sheet_pipeline(
    oracle: GenerationOracle,
    repo_root: str | Path,
    out_dir: str = "docs/domain/concepts",
    max_iterations: Optional[int] = None,
    clean: bool = False,
    settings: Optional[Settings] = None,
) -> SheetPipelineState:
    """Run the complete concept sheet pipeline on a repository.

    Args:
        oracle: Generation oracle.
        repo_root: Repository to analyze.
        out_dir: Output directory relative to the repository root.
        max_iterations: Cap on discovery iterations. Defaults to settings.
        clean: Remove existing Markdown documents first.
        settings: Indexer and snippet settings.

    Returns:
        SheetPipelineState with all stage outputs.

    Raises:
        DiscoveryError: If concept discovery fails.
        ScanError: If the repository cannot be scanned.
    """
    settings = settings or get_settings()
    root = Path(repo_root).resolve()
    target = root / out_dir
    if max_iterations is None:
        max_iterations = settings.max_discovery_iterations

    state = SheetPipelineState(
        repo_root=str(root),
        out_dir=str(target),
        processing_start=datetime.now(timezone.utc),
    )
    logger.info("sheet_pipeline_start", repo_root=str(root), max_iterations=max_iterations)

    if clean:
        storage.clean_output_dir(target)

    # Stage 1: Indexing
    stage_start = datetime.now()
    files = scan_repo(root, settings.source_extensions, settings.source_dir)
    symbols = extract_symbols(files)
    state.stage_durations["indexing"] = (datetime.now() - stage_start).total_seconds()

    # Stage 2: Project overview
    state = _run_overview(state, oracle, files, symbols)

    # Stage 3: Convergence discovery
    state = _run_discovery(state, oracle, format_symbols(symbols), max_iterations)

    # Stage 4: Sheet generation
    state = _run_generation(state, oracle, files, settings)

    # Stage 5: Rationalization
    state = _run_rationalization(state, oracle)

    # Stage 6: Assembly
    document = ConceptDocumentModel(
        repo_root=state.repo_root,
        generated_at=datetime.now(timezone.utc).isoformat(),
        project_overview=state.overview,
        concepts=state.sheets,
    )
    state.artifact_path = str(storage.write_document_model(document, target))

    state.processing_end = datetime.now(timezone.utc)
    logger.info(
        "sheet_pipeline_complete",
        concepts=len(state.sheets),
        documents=len(state.written_documents),
        llm_calls=state.llm_calls_made,
        warnings=len(state.warnings),
        duration_seconds=round((state.processing_end - state.processing_start).total_seconds(), 2),
    )
    return state


def _run_overview(
    state: SheetPipelineState,
    oracle: GenerationOracle,
    files: list[FileInfo],
    symbols: list[SymbolInfo],
) -> SheetPipelineState:
    """Stage 2: Project overview."""
    stage_start = datetime.now()
    logger.info("stage_overview_start")

    state.llm_calls_made += 1
    try:
        state.overview = generate_overview(oracle, state.repo_root, files, symbols)
    except OracleError as e:
        state.warnings.append(ProcessingError.warning(
            "overview", f"Failed to generate project overview: {e}", error_type=type(e).__name__
        ).model_dump(mode="json"))
        logger.warning("stage_overview_partial_failure", error=str(e))
        # Non-critical - continue without an overview

    state.stage_durations["overview"] = (datetime.now() - stage_start).total_seconds()
    return state


def _run_discovery(
    state: SheetPipelineState,
    oracle: GenerationOracle,
    symbols_text: str,
    max_iterations: int,
) -> SheetPipelineState:
    """Stage 3: Convergence discovery. Failure aborts the run."""
    stage_start = datetime.now()
    logger.info("stage_discovery_start")

    try:
        candidates, trace = discover_concepts(oracle, state.repo_root, symbols_text, max_iterations)
    except OracleError as e:
        state.errors.append({"stage": "discovery", "error": str(e), "type": type(e).__name__})
        logger.error("stage_discovery_failed", error=str(e))
        raise DiscoveryError(f"Concept discovery failed: {e}") from e

    state.candidates = candidates
    state.llm_calls_made += trace.calls_made
    state.discovery_trace = {
        "max_iterations": trace.max_iterations,
        "stop_reason": trace.stop_reason,
        "iterations": [
            {"iteration": it.iteration, "returned": it.returned, "new_names": it.new_names}
            for it in trace.iterations
        ],
    }

    state.stage_durations["discovery"] = (datetime.now() - stage_start).total_seconds()
    return state


def _run_generation(
    state: SheetPipelineState,
    oracle: GenerationOracle,
    files: list[FileInfo],
    settings: Settings,
) -> SheetPipelineState:
    """Stage 4: Sheet generation."""
    stage_start = datetime.now()
    logger.info("stage_generation_start", candidates=len(state.candidates))

    sheets, written, warnings = generate_sheets(
        oracle, state.candidates, files, settings, Path(state.out_dir)
    )
    state.sheets = sheets
    state.written_documents = written
    state.warnings.extend(warnings)
    state.llm_calls_made += len(state.candidates)

    state.stage_durations["generation"] = (datetime.now() - stage_start).total_seconds()
    return state


def _run_rationalization(state: SheetPipelineState, oracle: GenerationOracle) -> SheetPipelineState:
    """Stage 5: Rationalization, then re-render every document."""
    if not state.sheets:
        return state

    stage_start = datetime.now()
    logger.info("stage_rationalization_start", sheets=len(state.sheets))

    state.llm_calls_made += 1
    try:
        state.sheets = rationalize_sheets(oracle, state.sheets)
    except OracleError as e:
        state.warnings.append(ProcessingError.warning(
            "rationalization", f"Failed to rationalize bounded contexts: {e}", error_type=type(e).__name__
        ).model_dump(mode="json"))
        logger.warning("stage_rationalization_partial_failure", error=str(e))
        state.stage_durations["rationalization"] = (datetime.now() - stage_start).total_seconds()
        return state

    out_dir = Path(state.out_dir)
    state.written_documents = [
        str(storage.write_concept_document(sheet, out_dir)) for sheet in state.sheets
    ]

    state.stage_durations["rationalization"] = (datetime.now() - stage_start).total_seconds()
    return state
