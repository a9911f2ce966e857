"""Enrichment pipeline node."""

import structlog

from conceptgen.config import Settings
from conceptgen.indexing import FileInfo, extract_snippets, format_snippets, resolve_references
from conceptgen.llm.chains import run_enrichment_chain
from conceptgen.llm.oracle import GenerationOracle, OracleError
from conceptgen.models import (
    ConceptModel,
    DiscoveredModel,
    DiscoveredProject,
    ProcessingError,
)
from conceptgen.pipeline.accumulator import (
    ModelAccumulator,
    apply_enrichment,
    apply_fallback,
    finish_model,
    start_accumulator,
)
from conceptgen.pipeline.state import PipelineOptions, PipelineState
from conceptgen.processing import find_dangling_references

logger = structlog.get_logger(__name__)


def enrich_models_node(
    state: PipelineState,
    *,
    oracle: GenerationOracle,
    options: PipelineOptions,
    settings: Settings,
) -> dict:
    """Enrich every concept of every discovered model, one at a time.

    A failure on one concept degrades only that concept to its skeleton.

    Args:
        state: Current pipeline state with skeleton and files.
        oracle: Generation oracle.
        options: Run options (max_models).
        settings: Snippet limits.

    Returns:
        State update with enriched models, warnings and integrity issues.
    """
    skeleton = DiscoveredProject.model_validate(state["skeleton"])
    models = skeleton.models

    if options.max_models is not None and len(models) > options.max_models:
        logger.warning(
            "models_truncated",
            discovered=len(models),
            max_models=options.max_models,
        )
        models = models[: options.max_models]

    logger.info("enrichment_node_start", models=len(models))

    files = state.get("files", [])
    llm_calls = state.get("llm_calls_count", 0)
    enriched: list[dict] = []
    warnings: list[dict] = []
    issues: list[dict] = []

    for skeleton_model in models:
        model, calls, model_warnings = enrich_model(
            oracle, skeleton.name, skeleton_model, files, settings
        )
        llm_calls += calls
        warnings.extend(model_warnings)

        dangling = find_dangling_references(model)
        if dangling:
            logger.warning("dangling_references_found", model_id=model.id, count=len(dangling))
        issues.extend(i.model_dump(mode="json") for i in dangling)

        enriched.append(model.to_dict())

    logger.info(
        "enrichment_node_complete",
        models=len(enriched),
        warnings=len(warnings),
        dangling=len(issues),
    )

    return {
        "models": enriched,
        "llm_calls_count": llm_calls,
        "warnings": warnings,
        "integrity_issues": issues,
    }


def enrich_model(
    oracle: GenerationOracle,
    project_name: str,
    skeleton: DiscoveredModel,
    files: list[FileInfo],
    settings: Settings,
) -> tuple[ConceptModel, int, list[dict]]:
    """Run the sequential enrichment loop for one model.

    Each concept's request carries the relationships accumulated by the
    concepts processed before it.

    Returns:
        Tuple of (enriched model, oracle calls made, warning dicts).
    """
    acc: ModelAccumulator = start_accumulator(skeleton)
    calls = 0
    warnings: list[dict] = []

    for position, concept in enumerate(skeleton.concepts):
        resolved = resolve_references(files, [r.file for r in concept.references])
        if not resolved:
            logger.info(
                "concept_no_resolvable_files",
                model_id=skeleton.id,
                concept_id=concept.id,
                references=len(concept.references),
            )
            acc = apply_fallback(acc, concept)
            continue

        snippets = extract_snippets(resolved, settings.snippet_max_files, settings.snippet_max_chars)
        siblings = list(acc.concepts) + [
            c.strip_references() for c in skeleton.concepts[position + 1:]
        ]

        calls += 1
        try:
            result = run_enrichment_chain(
                oracle,
                project_name=project_name,
                model_title=skeleton.title,
                concept=concept,
                siblings=siblings,
                known_relationships=list(acc.relationships),
                snippets_text=format_snippets(snippets),
            )
        except OracleError as e:
            logger.error(
                "concept_enrichment_failed",
                model_id=skeleton.id,
                concept_id=concept.id,
                error=str(e),
            )
            warnings.append(ProcessingError.warning(
                "enrichment",
                f"Failed to enrich concept: {e}",
                model_id=skeleton.id,
                concept_id=concept.id,
                error_type=type(e).__name__,
            ).model_dump(mode="json"))
            acc = apply_fallback(acc, concept)
            continue
        except Exception as e:
            logger.exception("concept_enrichment_unexpected_error", concept_id=concept.id)
            warnings.append(ProcessingError.warning(
                "enrichment",
                f"Unexpected error: {e}",
                model_id=skeleton.id,
                concept_id=concept.id,
                exception_type=type(e).__name__,
            ).model_dump(mode="json"))
            acc = apply_fallback(acc, concept)
            continue

        renamed_before = len(acc.renamed_relationships)
        acc = apply_enrichment(acc, concept, result)

        for concept_id, returned_id, stored_id in acc.renamed_relationships[renamed_before:]:
            logger.warning(
                "relationship_id_collision",
                model_id=skeleton.id,
                concept_id=concept_id,
                relationship_id=returned_id,
                stored_as=stored_id,
            )
            warnings.append(ProcessingError.warning(
                "enrichment",
                f"Relationship id '{returned_id}' already used; stored as '{stored_id}'",
                model_id=skeleton.id,
                concept_id=concept_id,
                relationship_id=returned_id,
                stored_as=stored_id,
            ).model_dump(mode="json"))

        logger.debug(
            "concept_enriched",
            concept_id=concept.id,
            relationships=len(result.relationships),
            rules=len(result.rules),
            lifecycles=len(result.lifecycles),
        )

    return finish_model(skeleton, acc), calls, warnings
