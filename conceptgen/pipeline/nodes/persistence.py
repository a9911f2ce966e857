"""Assembly, persistence and publishing pipeline nodes."""

from pathlib import Path

import structlog

from conceptgen import storage
from conceptgen.config import Settings
from conceptgen.models import ConceptModel, ProcessingError, Project
from conceptgen.pipeline.state import PipelineOptions, PipelineState

logger = structlog.get_logger(__name__)


def assemble_project(state: PipelineState) -> Project:
    """Wrap the processed models into the project artifact."""
    skeleton = state.get("skeleton") or {}
    return Project(
        id=skeleton.get("id", "project"),
        name=skeleton.get("name", "Project"),
        summary=skeleton.get("summary") or "",
        description=skeleton.get("description"),
        models=[ConceptModel.model_validate(m) for m in state.get("models", [])],
    )


def persist_project_node(state: PipelineState, *, options: PipelineOptions) -> dict:
    """Write project-model.json under the output directory.

    Args:
        state: Current pipeline state with processed models.
        options: Run options (out_dir, clean).

    Returns:
        State update with project and artifact_path.
    """
    out_dir = Path(state["repo_root"]) / options.out_dir
    logger.info("persistence_node_start", out_dir=str(out_dir))

    if options.clean:
        storage.clean_output_dir(out_dir)

    project = assemble_project(state)
    path = storage.write_project(project, out_dir)

    logger.info(
        "persistence_node_complete",
        path=str(path),
        models=len(project.models),
        concepts=sum(len(m.concepts) for m in project.models),
        relationships=sum(len(m.relationships) for m in project.models),
    )

    return {"project": project.to_dict(), "artifact_path": str(path)}


def publish_project_node(
    state: PipelineState,
    *,
    options: PipelineOptions,
    settings: Settings,
) -> dict:
    """Publish the project to the viewer registry. Failures are never fatal."""
    models_dir = options.viewer_models_dir or settings.viewer_models_dir
    if not models_dir.is_absolute():
        models_dir = Path(state["repo_root"]) / models_dir

    project = Project.model_validate(state["project"])
    logger.info("publish_node_start", models_dir=str(models_dir), project_id=project.id)

    try:
        path = storage.publish_project(project, models_dir)
    except OSError as e:
        logger.error("publish_failed", models_dir=str(models_dir), error=str(e))
        return {"warnings": [ProcessingError.warning(
            "publish",
            f"Failed to publish project: {e}",
            models_dir=str(models_dir),
        ).model_dump(mode="json")]}

    return {"published_path": str(path)}
