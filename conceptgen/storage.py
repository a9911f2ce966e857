"""
Storage for generated artifacts.

Handles all file I/O for the persisted project, concept documents and the
viewer registry. Uses JSON and Markdown files on disk.

Layout:
- <repo>/<out_dir>/project-model.json      staged-model artifact
- <repo>/<out_dir>/concept-model.json      flat-document artifact
- <repo>/<out_dir>/<slug>.md               one document per concept
- <viewer_models_dir>/registry.json        published project index
- <viewer_models_dir>/<safe-id>.json       published project copy
"""

import json
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import structlog
from pydantic import ValidationError

from conceptgen.models import (
    ConceptDocumentModel,
    ConceptSheet,
    Project,
    ProjectEntry,
    ProjectRegistry,
)
from conceptgen.rendering import render_concept_sheet, slugify

logger = structlog.get_logger(__name__)

PROJECT_FILENAME = "project-model.json"
DOCUMENT_MODEL_FILENAME = "concept-model.json"
REGISTRY_FILENAME = "registry.json"


def save_json(path: Path, data: Any) -> Path:
    """Write data as indented JSON, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2, default=str), encoding="utf-8")
    return path


def safe_project_id(project_id: str) -> str:
    """Lower-case file name stem for a project id."""
    return re.sub(r"[^a-z0-9_-]", "-", project_id, flags=re.IGNORECASE).lower()


# =============================================================================
# Output Directory
# =============================================================================

def clean_output_dir(out_dir: Path) -> int:
    """Remove Markdown documents left by a previous run.

    Returns:
        Number of files removed.
    """
    if not out_dir.is_dir():
        return 0

    removed = 0
    for path in out_dir.glob("*.md"):
        path.unlink()
        removed += 1

    logger.info("output_dir_cleaned", out_dir=str(out_dir), removed=removed)
    return removed


def write_project(project: Project, out_dir: Path) -> Path:
    """Persist the staged-model artifact."""
    path = save_json(out_dir / PROJECT_FILENAME, project.to_dict())
    logger.info("project_written", path=str(path), models=len(project.models))
    return path


def load_project(path: Path) -> Project:
    """Load and validate a persisted project.

    Raises:
        ValidationError: If the file does not match the project shape.
        json.JSONDecodeError: If the file is not JSON.
    """
    return Project.model_validate(json.loads(path.read_text(encoding="utf-8")))


def write_concept_document(sheet: ConceptSheet, out_dir: Path) -> Path:
    """Render and write one concept sheet as Markdown."""
    path = out_dir / f"{slugify(sheet.name)}.md"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_concept_sheet(sheet), encoding="utf-8")
    logger.debug("concept_document_written", path=str(path))
    return path


def write_document_model(document: ConceptDocumentModel, out_dir: Path) -> Path:
    """Persist the flat-document artifact."""
    path = save_json(out_dir / DOCUMENT_MODEL_FILENAME, document.to_dict())
    logger.info("document_model_written", path=str(path), concepts=len(document.concepts))
    return path


# =============================================================================
# Registry
# =============================================================================

def load_registry(registry_path: Path) -> ProjectRegistry:
    """Load the viewer registry, replacing it when unreadable."""
    if not registry_path.exists():
        return ProjectRegistry()

    try:
        return ProjectRegistry.model_validate(json.loads(registry_path.read_text(encoding="utf-8")))
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        logger.warning("registry_unreadable_replacing", path=str(registry_path), error=str(e))
        return ProjectRegistry()


def upsert_entry(registry: ProjectRegistry, entry: ProjectEntry) -> ProjectRegistry:
    """Replace the entry with the same id, or append it."""
    projects = [p for p in registry.projects if p.id != entry.id]
    replaced = len(projects) != len(registry.projects)

    if replaced:
        index = next(i for i, p in enumerate(registry.projects) if p.id == entry.id)
        projects.insert(index, entry)
    else:
        projects.append(entry)

    return ProjectRegistry(projects=projects)


def publish_project(project: Project, models_dir: Path) -> Path:
    """Copy the project into the viewer and upsert its registry entry.

    The registry file is rewritten as a whole.

    Returns:
        Path of the published project file.
    """
    safe_id = safe_project_id(project.id)
    file_name = f"{safe_id}.json"
    project_path = save_json(models_dir / file_name, project.to_dict())

    registry_path = models_dir / REGISTRY_FILENAME
    registry = upsert_entry(
        load_registry(registry_path),
        ProjectEntry(
            id=safe_id,
            name=project.name,
            path=f"models/{file_name}",
            updated_at=datetime.now(timezone.utc).isoformat(),
        ),
    )
    save_json(registry_path, registry.to_dict())

    logger.info(
        "project_published",
        project_id=project.id,
        path=str(project_path),
        registry_entries=len(registry.projects),
    )
    return project_path
