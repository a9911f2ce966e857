"""LangChain prompt chains for oracle operations.

Each ``run_*_chain`` renders a ChatPromptTemplate into one system and one
user message, sends it to the oracle in json_object mode and validates the
result against a response model. Any shape problem surfaces as
``OracleSchemaError``; transport problems propagate as raised by the oracle.
"""

import json
from typing import TypeVar

import structlog
from langchain_core.prompts import ChatPromptTemplate
from pydantic import BaseModel, ValidationError

from conceptgen.config.prompts import (
    CONCEPT_DISCOVERY_SYSTEM_PROMPT,
    CONCEPT_DISCOVERY_USER_PROMPT,
    CONCEPT_ENRICHMENT_SYSTEM_PROMPT,
    CONCEPT_ENRICHMENT_USER_PROMPT,
    CONCEPT_SHEET_SYSTEM_PROMPT,
    CONCEPT_SHEET_USER_PROMPT,
    PROJECT_OVERVIEW_SYSTEM_PROMPT,
    PROJECT_OVERVIEW_USER_PROMPT,
    RATIONALIZATION_SYSTEM_PROMPT,
    RATIONALIZATION_USER_PROMPT,
    STORY_DESIGN_SYSTEM_PROMPT,
    STORY_DESIGN_USER_PROMPT,
    STRUCTURE_DISCOVERY_SYSTEM_PROMPT,
    STRUCTURE_DISCOVERY_USER_PROMPT,
    VIEW_DESIGN_SYSTEM_PROMPT,
    VIEW_DESIGN_USER_PROMPT,
)
from conceptgen.llm.oracle import (
    GenerationOracle,
    OracleMessage,
    OracleSchemaError,
    from_langchain_messages,
)
from conceptgen.models import (
    CandidateBatch,
    Concept,
    ConceptCandidate,
    ConceptEnrichment,
    ConceptModel,
    ConceptSheet,
    DiscoveredProject,
    ProjectOverview,
    RationalizationProposal,
    Relationship,
    StoryDesign,
    ViewDesign,
)

logger = structlog.get_logger(__name__)

M = TypeVar("M", bound=BaseModel)


def render_messages(system_prompt: str, user_prompt: str, **variables) -> list[OracleMessage]:
    """Render a system/user prompt pair into oracle messages."""
    prompt = ChatPromptTemplate.from_messages([
        ("system", system_prompt),
        ("human", user_prompt),
    ])
    return from_langchain_messages(prompt.format_messages(**variables))


def _invoke_structured(
    oracle: GenerationOracle,
    messages: list[OracleMessage],
    response_model: type[M],
    context_name: str,
) -> M:
    """Send messages in json_object mode and validate the parsed value.

    Raises:
        OracleTransportError: Propagated from the oracle.
        OracleSchemaError: If the value is not an object or fails validation.
    """
    logger.debug(
        f"{context_name}_prompt",
        system=messages[0].content if messages else "",
        user=messages[-1].content if messages else "",
    )

    result = oracle.generate(messages, response_format="json_object")

    if not isinstance(result, dict):
        raise OracleSchemaError(
            f"{context_name}: expected a JSON object, got {type(result).__name__}"
        )

    try:
        return response_model.model_validate(result)
    except ValidationError as e:
        logger.warning(f"{context_name}_validation_failed", errors=e.error_count())
        raise OracleSchemaError(f"{context_name}: {e}") from e


def _dump(items: list[dict]) -> str:
    return json.dumps(items, indent=2) if items else "(none)"


def concept_index(concepts: list[Concept]) -> list[dict]:
    """Compact id/label/category listing used in prompts."""
    return [{"id": c.id, "label": c.label, "category": c.category.value} for c in concepts]


def relationship_index(relationships: list[Relationship]) -> list[dict]:
    """Compact id/endpoint/phrase listing used in prompts."""
    return [
        {
            "id": r.id,
            "from": r.from_id,
            "to": r.to_id,
            "phrase": r.phrase,
            "category": r.category.value,
        }
        for r in relationships
    ]


def run_structure_discovery_chain(
    oracle: GenerationOracle,
    repo_root: str,
    symbols_text: str,
) -> DiscoveredProject:
    """Ask for the skeleton project.

    Args:
        oracle: Generation oracle.
        repo_root: Repository root shown to the oracle.
        symbols_text: Pre-formatted exported symbol listing.

    Returns:
        Skeleton project whose concepts carry code references.
    """
    messages = render_messages(
        STRUCTURE_DISCOVERY_SYSTEM_PROMPT,
        STRUCTURE_DISCOVERY_USER_PROMPT,
        repo_root=repo_root,
        symbols_text=symbols_text or "(no exported symbols found)",
    )
    project = _invoke_structured(oracle, messages, DiscoveredProject, "structure_discovery")

    logger.debug(
        "structure_discovery_complete",
        models=len(project.models),
        concepts=sum(len(m.concepts) for m in project.models),
    )
    return project


def run_enrichment_chain(
    oracle: GenerationOracle,
    project_name: str,
    model_title: str,
    concept: Concept,
    siblings: list[Concept],
    known_relationships: list[Relationship],
    snippets_text: str,
) -> ConceptEnrichment:
    """Enrich one concept with aliases, relationships, rules and lifecycles.

    Args:
        oracle: Generation oracle.
        project_name: Name of the project being analyzed.
        model_title: Title of the owning model.
        concept: Concept to enrich.
        siblings: Other concepts in the same model.
        known_relationships: Relationships accumulated so far in the model.
        snippets_text: Pre-formatted code snippets.

    Returns:
        Validated enrichment result.
    """
    messages = render_messages(
        CONCEPT_ENRICHMENT_SYSTEM_PROMPT,
        CONCEPT_ENRICHMENT_USER_PROMPT,
        project_name=project_name,
        model_title=model_title,
        concept_label=concept.label,
        concept_id=concept.id,
        concept_description=concept.description or "(none)",
        sibling_concepts=_dump(concept_index(siblings)),
        known_relationships=_dump(relationship_index(known_relationships)),
        snippets=snippets_text,
    )
    return _invoke_structured(oracle, messages, ConceptEnrichment, "enrichment")


def run_view_design_chain(
    oracle: GenerationOracle,
    project_name: str,
    model: ConceptModel,
) -> ViewDesign:
    """Design curated views for one enriched model."""
    messages = render_messages(
        VIEW_DESIGN_SYSTEM_PROMPT,
        VIEW_DESIGN_USER_PROMPT,
        project_name=project_name,
        model_title=model.title,
        model_description=model.description or "(none)",
        concepts_json=_dump(concept_index(model.concepts)),
        relationships_json=_dump(relationship_index(model.relationships)),
    )
    return _invoke_structured(oracle, messages, ViewDesign, "view_design")


def run_story_design_chain(
    oracle: GenerationOracle,
    project_name: str,
    model: ConceptModel,
) -> StoryDesign:
    """Design narrative stories for one enriched model."""
    messages = render_messages(
        STORY_DESIGN_SYSTEM_PROMPT,
        STORY_DESIGN_USER_PROMPT,
        project_name=project_name,
        model_title=model.title,
        model_description=model.description or "(none)",
        concepts_json=_dump(concept_index(model.concepts)),
        relationships_json=_dump(relationship_index(model.relationships)),
    )
    return _invoke_structured(oracle, messages, StoryDesign, "story_design")


def run_rationalization_chain(
    oracle: GenerationOracle,
    documents: list[dict],
) -> RationalizationProposal:
    """Propose consolidated bounded contexts.

    Args:
        oracle: Generation oracle.
        documents: One dict per concept with name, boundedContext and description.

    Returns:
        Proposal listing contexts and the concept names each subsumes.
    """
    messages = render_messages(
        RATIONALIZATION_SYSTEM_PROMPT,
        RATIONALIZATION_USER_PROMPT,
        concepts_json=_dump(documents),
    )
    return _invoke_structured(oracle, messages, RationalizationProposal, "rationalization")


def run_project_overview_chain(
    oracle: GenerationOracle,
    repo_root: str,
    files_text: str,
    symbols_text: str,
) -> ProjectOverview:
    """Summarize the repository at system level."""
    messages = render_messages(
        PROJECT_OVERVIEW_SYSTEM_PROMPT,
        PROJECT_OVERVIEW_USER_PROMPT,
        repo_root=repo_root,
        files_text=files_text or "(no files)",
        symbols_text=symbols_text or "(no exported symbols found)",
    )
    return _invoke_structured(oracle, messages, ProjectOverview, "project_overview")


def run_concept_discovery_chain(
    oracle: GenerationOracle,
    repo_root: str,
    symbols_text: str,
    known_names: list[str],
) -> list[ConceptCandidate]:
    """Ask for concepts not yet in ``known_names``. One convergence iteration."""
    messages = render_messages(
        CONCEPT_DISCOVERY_SYSTEM_PROMPT,
        CONCEPT_DISCOVERY_USER_PROMPT,
        repo_root=repo_root,
        symbols_text=symbols_text or "(no exported symbols found)",
        known_concepts="\n".join(f"- {name}" for name in known_names) or "(none yet)",
    )
    batch = _invoke_structured(oracle, messages, CandidateBatch, "concept_discovery")
    return batch.concepts


def run_concept_sheet_chain(
    oracle: GenerationOracle,
    candidate: ConceptCandidate,
    snippets_text: str,
) -> ConceptSheet:
    """Write the concept sheet for one candidate."""
    messages = render_messages(
        CONCEPT_SHEET_SYSTEM_PROMPT,
        CONCEPT_SHEET_USER_PROMPT,
        concept_name=candidate.name,
        concept_type=candidate.type.value,
        concept_description=candidate.description or "(none)",
        snippets=snippets_text,
    )
    return _invoke_structured(oracle, messages, ConceptSheet, "concept_sheet")
