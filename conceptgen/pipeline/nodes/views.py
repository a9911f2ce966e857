"""View synthesis pipeline node."""

import structlog

from conceptgen.llm.chains import run_view_design_chain
from conceptgen.llm.oracle import GenerationOracle, OracleError
from conceptgen.models import ConceptModel, IntegrityIssue, IssueKind, ModelView, ProcessingError
from conceptgen.pipeline.state import PipelineState
from conceptgen.processing import check_view_bounds, prune_view
from conceptgen.processing.integrity import VIEW_COUNT_BOUNDS

logger = structlog.get_logger(__name__)


def synthesize_views_node(state: PipelineState, *, oracle: GenerationOracle) -> dict:
    """Design curated views for each enriched model.

    A failure for one model leaves that model with no views.

    Args:
        state: Current pipeline state with enriched models.
        oracle: Generation oracle.

    Returns:
        State update with models carrying views.
    """
    project_name = (state.get("skeleton") or {}).get("name", "")
    models = [ConceptModel.model_validate(m) for m in state.get("models", [])]

    logger.info("views_node_start", models=len(models))

    llm_calls = state.get("llm_calls_count", 0)
    updated: list[dict] = []
    warnings: list[dict] = []
    issues: list[IntegrityIssue] = []

    for model in models:
        llm_calls += 1
        try:
            design = run_view_design_chain(oracle, project_name, model)
        except OracleError as e:
            logger.error("view_synthesis_failed", model_id=model.id, error=str(e))
            warnings.append(ProcessingError.warning(
                "views",
                f"Failed to synthesize views: {e}",
                model_id=model.id,
                error_type=type(e).__name__,
            ).model_dump(mode="json"))
            updated.append(model.model_copy(update={"views": []}).to_dict())
            continue

        views, view_issues = curate_views(design.views, model)
        issues.extend(view_issues)
        updated.append(model.model_copy(update={"views": views}).to_dict())

        logger.debug("views_synthesized", model_id=model.id, views=len(views), issues=len(view_issues))

    logger.info("views_node_complete", models=len(updated), failures=len(warnings), issues=len(issues))

    return {
        "models": updated,
        "llm_calls_count": llm_calls,
        "warnings": warnings,
        "integrity_issues": [i.model_dump(mode="json") for i in issues],
    }


def curate_views(
    views: list[ModelView],
    model: ConceptModel,
) -> tuple[list[ModelView], list[IntegrityIssue]]:
    """Prune dangling ids and flag size-contract violations.

    Out-of-bound views are kept as returned.
    """
    curated: list[ModelView] = []
    issues: list[IntegrityIssue] = []

    for view in views:
        pruned, pruned_issues = prune_view(view, model)
        issues.extend(pruned_issues)
        issues.extend(check_view_bounds(pruned, model.id))
        curated.append(pruned)

    low, high = VIEW_COUNT_BOUNDS
    if not low <= len(curated) <= high:
        issues.append(IntegrityIssue(
            kind=IssueKind.VIEW_BOUNDS,
            model_id=model.id,
            message=f"model has {len(curated)} views, expected {low}-{high}",
            details={"field": "views", "count": len(curated)},
        ))

    bounds = [i for i in issues if i.kind == IssueKind.VIEW_BOUNDS]
    if bounds:
        logger.warning("view_bounds_violated", model_id=model.id, count=len(bounds))

    return curated, issues
