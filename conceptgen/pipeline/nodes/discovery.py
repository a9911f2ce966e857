"""Structure discovery pipeline node."""

import re

import structlog

from conceptgen.indexing import format_symbols
from conceptgen.llm.chains import run_structure_discovery_chain
from conceptgen.llm.oracle import GenerationOracle, OracleError
from conceptgen.models import DiscoveredProject, IntegrityIssue, IssueKind
from conceptgen.pipeline.errors import DiscoveryError
from conceptgen.pipeline.state import PipelineOptions, PipelineState

logger = structlog.get_logger(__name__)


def project_id_from_name(name: str) -> str:
    return re.sub(r"\s+", "-", name.strip().lower())


def discover_structure_node(
    state: PipelineState,
    *,
    oracle: GenerationOracle,
    options: PipelineOptions,
) -> dict:
    """Ask the oracle for the skeleton project.

    Args:
        state: Current pipeline state with symbols.
        oracle: Generation oracle.
        options: Run options (project name override).

    Returns:
        State update with skeleton and integrity issues.

    Raises:
        DiscoveryError: If the oracle call fails or the response is malformed.
    """
    logger.info("discovery_node_start", symbols=len(state.get("symbols", [])))

    llm_calls = state.get("llm_calls_count", 0) + 1
    try:
        project = run_structure_discovery_chain(
            oracle,
            repo_root=state["repo_root"],
            symbols_text=format_symbols(state.get("symbols", [])),
        )
    except OracleError as e:
        logger.error("discovery_failed", error=str(e), error_type=type(e).__name__)
        raise DiscoveryError(f"Structure discovery failed: {e}") from e

    if options.project_name:
        project = project.model_copy(update={
            "name": options.project_name,
            "id": project_id_from_name(options.project_name),
        })

    issues = _ungrounded_concepts(project)

    logger.info(
        "discovery_node_complete",
        project_id=project.id,
        models=len(project.models),
        concepts=sum(len(m.concepts) for m in project.models),
        ungrounded=len(issues),
    )

    return {
        "skeleton": project.model_dump(by_alias=True),
        "llm_calls_count": llm_calls,
        "integrity_issues": [i.model_dump(mode="json") for i in issues],
    }


def _ungrounded_concepts(project: DiscoveredProject) -> list[IntegrityIssue]:
    """Concepts returned without any code reference are kept but reported."""
    issues = []
    for model in project.models:
        for concept in model.concepts:
            if not concept.references:
                logger.warning("concept_ungrounded", model_id=model.id, concept_id=concept.id)
                issues.append(IntegrityIssue(
                    kind=IssueKind.UNGROUNDED_CONCEPT,
                    model_id=model.id,
                    subject_id=concept.id,
                    message=f"concept '{concept.label}' has no code references",
                ))
    return issues
