"""LangGraph workflow definition for the concept model pipeline."""

from functools import partial
from typing import Optional

import structlog
from langgraph.graph import END, START, StateGraph

from conceptgen.config import Settings, get_settings
from conceptgen.llm.oracle import GenerationOracle
from conceptgen.pipeline.nodes import (
    discover_structure_node,
    enrich_models_node,
    index_repository_node,
    persist_project_node,
    publish_project_node,
    rationalize_models_node,
    synthesize_stories_node,
    synthesize_views_node,
)
from conceptgen.pipeline.state import PipelineOptions, PipelineState, create_initial_state

logger = structlog.get_logger(__name__)


def should_rationalize(state: PipelineState, *, options: PipelineOptions) -> str:
    """Route to rationalization only when it was requested."""
    return "rationalize" if options.rationalize else "skip"


def should_publish(state: PipelineState, *, options: PipelineOptions) -> str:
    """Route to publishing when enabled and a project was written."""
    if not options.publish:
        return "skip"
    if state.get("project") is None:
        logger.warning("publish_skipped_no_project")
        return "skip"
    return "publish"


def build_pipeline(
    oracle: GenerationOracle,
    options: PipelineOptions,
    settings: Optional[Settings] = None,
) -> StateGraph:
    """Build the LangGraph workflow for one repository.

    Stages run strictly in sequence. Rationalization and publishing are
    optional and selected by ``options``.

    Args:
        oracle: Generation oracle shared by every stage.
        options: Run options.
        settings: Indexer and output settings. Uses defaults if not provided.

    Returns:
        Uncompiled StateGraph.
    """
    settings = settings or get_settings()
    logger.info("building_pipeline", rationalize=options.rationalize, publish=options.publish)

    workflow = StateGraph(PipelineState)

    # Add nodes
    workflow.add_node("indexing", partial(index_repository_node, settings=settings))
    workflow.add_node("discovery", partial(discover_structure_node, oracle=oracle, options=options))
    workflow.add_node(
        "enrichment",
        partial(enrich_models_node, oracle=oracle, options=options, settings=settings),
    )
    workflow.add_node("views", partial(synthesize_views_node, oracle=oracle))
    workflow.add_node("stories", partial(synthesize_stories_node, oracle=oracle))
    workflow.add_node("rationalization", partial(rationalize_models_node, oracle=oracle))
    workflow.add_node("persistence", partial(persist_project_node, options=options))
    workflow.add_node(
        "publish",
        partial(publish_project_node, options=options, settings=settings),
    )

    # Define edges
    workflow.add_edge(START, "indexing")
    workflow.add_edge("indexing", "discovery")
    workflow.add_edge("discovery", "enrichment")
    workflow.add_edge("enrichment", "views")
    workflow.add_edge("views", "stories")

    # Stories -> Rationalization (optional) -> Persistence
    workflow.add_conditional_edges(
        "stories",
        partial(should_rationalize, options=options),
        {
            "rationalize": "rationalization",
            "skip": "persistence",
        },
    )
    workflow.add_edge("rationalization", "persistence")

    # Persistence -> Publish (optional) -> End
    workflow.add_conditional_edges(
        "persistence",
        partial(should_publish, options=options),
        {
            "publish": "publish",
            "skip": END,
        },
    )
    workflow.add_edge("publish", END)

    logger.info("pipeline_built")

    return workflow


def create_pipeline_app(
    oracle: GenerationOracle,
    options: PipelineOptions,
    settings: Optional[Settings] = None,
):
    """Create compiled pipeline application."""
    return build_pipeline(oracle, options, settings).compile()


def run_pipeline(
    oracle: GenerationOracle,
    options: PipelineOptions,
    settings: Optional[Settings] = None,
) -> PipelineState:
    """Execute the full pipeline on a repository.

    Args:
        oracle: Generation oracle.
        options: Run options.
        settings: Indexer and output settings.

    Returns:
        Final pipeline state.

    Raises:
        DiscoveryError: If structure discovery fails.
        ScanError: If the repository cannot be scanned.
    """
    logger.info("pipeline_starting", repo_root=str(options.repo_root))

    app = create_pipeline_app(oracle, options, settings)
    result = app.invoke(create_initial_state(options.repo_root))

    logger.info(
        "pipeline_complete",
        artifact=result.get("artifact_path"),
        published=result.get("published_path"),
        llm_calls=result.get("llm_calls_count", 0),
        warnings=len(result.get("warnings", [])),
        integrity_issues=len(result.get("integrity_issues", [])),
    )

    return result
