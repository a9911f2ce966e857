"""Story synthesis pipeline node."""

import structlog

from conceptgen.llm.chains import run_story_design_chain
from conceptgen.llm.oracle import GenerationOracle, OracleError
from conceptgen.models import ConceptModel, IntegrityIssue, IssueKind, ProcessingError, StoryView
from conceptgen.pipeline.state import PipelineState
from conceptgen.processing import check_story_bounds, normalize_story
from conceptgen.processing.integrity import STORY_COUNT_BOUNDS

logger = structlog.get_logger(__name__)


def synthesize_stories_node(state: PipelineState, *, oracle: GenerationOracle) -> dict:
    """Design narrative stories for each enriched model.

    A failure for one model leaves that model with no stories.

    Args:
        state: Current pipeline state with models carrying views.
        oracle: Generation oracle.

    Returns:
        State update with models carrying story views.
    """
    project_name = (state.get("skeleton") or {}).get("name", "")
    models = [ConceptModel.model_validate(m) for m in state.get("models", [])]

    logger.info("stories_node_start", models=len(models))

    llm_calls = state.get("llm_calls_count", 0)
    updated: list[dict] = []
    warnings: list[dict] = []
    issues: list[IntegrityIssue] = []

    for model in models:
        llm_calls += 1
        try:
            design = run_story_design_chain(oracle, project_name, model)
        except OracleError as e:
            logger.error("story_synthesis_failed", model_id=model.id, error=str(e))
            warnings.append(ProcessingError.warning(
                "stories",
                f"Failed to synthesize stories: {e}",
                model_id=model.id,
                error_type=type(e).__name__,
            ).model_dump(mode="json"))
            updated.append(model.model_copy(update={"story_views": []}).to_dict())
            continue

        stories, story_issues = curate_stories(design.story_views, model)
        issues.extend(story_issues)
        updated.append(model.model_copy(update={"story_views": stories}).to_dict())

        logger.debug(
            "stories_synthesized",
            model_id=model.id,
            stories=len(stories),
            steps=sum(len(s.steps) for s in stories),
        )

    logger.info("stories_node_complete", models=len(updated), failures=len(warnings), issues=len(issues))

    return {
        "models": updated,
        "llm_calls_count": llm_calls,
        "warnings": warnings,
        "integrity_issues": [i.model_dump(mode="json") for i in issues],
    }


def curate_stories(
    stories: list[StoryView],
    model: ConceptModel,
) -> tuple[list[StoryView], list[IntegrityIssue]]:
    """Renumber steps, prune dangling ids and flag size-contract violations."""
    curated: list[StoryView] = []
    issues: list[IntegrityIssue] = []

    for story in stories:
        normalized, story_issues = normalize_story(story, model)
        issues.extend(story_issues)
        issues.extend(check_story_bounds(normalized, model.id))
        curated.append(normalized)

    low, high = STORY_COUNT_BOUNDS
    if not low <= len(curated) <= high:
        issues.append(IntegrityIssue(
            kind=IssueKind.STORY_BOUNDS,
            model_id=model.id,
            message=f"model has {len(curated)} stories, expected {low}-{high}",
            details={"field": "storyViews", "count": len(curated)},
        ))

    return curated, issues
