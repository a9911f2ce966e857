"""Consolidation of fragmented bounded-context labels."""

from collections import Counter
from typing import Optional

import structlog

from conceptgen.llm.chains import run_rationalization_chain
from conceptgen.llm.oracle import GenerationOracle
from conceptgen.models import ConceptModel, ConceptSheet

logger = structlog.get_logger(__name__)


def apply_label_map(
    labels: dict[str, Optional[str]],
    label_map: dict[str, str],
) -> dict[str, Optional[str]]:
    """Overwrite labels for names in the map; other names keep their label.

    Applying the same map twice yields the same result.
    """
    return {name: label_map.get(name, label) for name, label in labels.items()}


def propose_label_map(
    oracle: GenerationOracle,
    labels: dict[str, Optional[str]],
    descriptions: Optional[dict[str, str]] = None,
) -> dict[str, str]:
    """Ask the oracle for consolidated labels and return name -> new label.

    Raises:
        OracleError: If the call fails. Callers treat this as soft.
    """
    descriptions = descriptions or {}
    documents = [
        {
            "name": name,
            "boundedContext": label or "(unclassified)",
            "description": descriptions.get(name) or "",
        }
        for name, label in labels.items()
    ]

    proposal = run_rationalization_chain(oracle, documents)
    label_map = proposal.label_map()

    logger.info(
        "rationalization_proposed",
        documents=len(documents),
        contexts=len(proposal.bounded_contexts),
        mapped=len(label_map),
        distinct_before=len({label for label in labels.values() if label}),
    )
    return label_map


def relabel_sheets(sheets: list[ConceptSheet], label_map: dict[str, str]) -> list[ConceptSheet]:
    """Return sheets with ``metadata.bounded_context`` rewritten from the map."""
    labels = apply_label_map({s.name: s.metadata.bounded_context for s in sheets}, label_map)
    relabeled = []
    for sheet in sheets:
        metadata = sheet.metadata.model_copy(update={"bounded_context": labels[sheet.name]})
        relabeled.append(sheet.model_copy(update={"metadata": metadata}))
    return relabeled


def document_names(models: list[ConceptModel]) -> dict[tuple[str, str], str]:
    """Name each concept by its label, unique across all models.

    A label shared by several concepts is qualified as ``<model title> /
    <label>``, and further by concept id if that still collides.

    Returns:
        Mapping of (model id, concept id) to document name.
    """
    keys = [(m, c) for m in models for c in m.concepts]
    label_counts = Counter(c.label for _, c in keys)

    names: dict[tuple[str, str], str] = {}
    for model, concept in keys:
        name = concept.label
        if label_counts[name] > 1:
            name = f"{model.title} / {concept.label}"
        names[(model.id, concept.id)] = name

    name_counts = Counter(names.values())
    for key, name in names.items():
        if name_counts[name] > 1:
            names[key] = f"{name} [{key[1]}]"
    return names


def model_labels(models: list[ConceptModel]) -> dict[str, Optional[str]]:
    """Initial labels for staged models: each concept's model title, keyed by document name."""
    names = document_names(models)
    return {
        names[(model.id, concept.id)]: concept.bounded_context or model.title
        for model in models
        for concept in model.concepts
    }


def model_descriptions(models: list[ConceptModel]) -> dict[str, str]:
    names = document_names(models)
    return {
        names[(model.id, concept.id)]: concept.description or ""
        for model in models
        for concept in model.concepts
    }


def relabel_models(models: list[ConceptModel], label_map: dict[str, str]) -> list[ConceptModel]:
    """Return models whose concepts carry the consolidated ``bounded_context``."""
    names = document_names(models)
    labels = apply_label_map(model_labels(models), label_map)
    relabeled = []
    for model in models:
        concepts = [
            c.model_copy(update={"bounded_context": labels[names[(model.id, c.id)]]})
            for c in model.concepts
        ]
        relabeled.append(model.model_copy(update={"concepts": concepts}))
    return relabeled
