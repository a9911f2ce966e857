"""Per-model accumulation for the enrichment loop.

Enrichment visits concepts one at a time, in discovery order. Each step
folds its result into a ModelAccumulator, and the next concept's request
is built from the accumulator produced so far. Reducers never mutate their
input and never drop anything already accumulated.
"""

from dataclasses import dataclass, replace

from conceptgen.models import (
    Concept,
    ConceptEnrichment,
    ConceptLifecycle,
    ConceptModel,
    ConceptPatch,
    DiscoveredConcept,
    DiscoveredModel,
    ModelRule,
    Relationship,
)


@dataclass(frozen=True)
class ModelAccumulator:
    """Everything enrichment has produced for one model so far."""

    concepts: tuple[Concept, ...] = ()
    relationships: tuple[Relationship, ...] = ()
    rules: tuple[ModelRule, ...] = ()
    lifecycles: tuple[ConceptLifecycle, ...] = ()
    # (concept id, returned id, stored id) for every relationship kept under a new id
    renamed_relationships: tuple[tuple[str, str, str], ...] = ()

    @property
    def relationship_ids(self) -> set[str]:
        return {r.id for r in self.relationships}


def start_accumulator(skeleton: DiscoveredModel) -> ModelAccumulator:
    """Seed an accumulator with whatever collections discovery already returned."""
    return ModelAccumulator(
        relationships=tuple(skeleton.relationships),
        rules=tuple(skeleton.rules),
        lifecycles=tuple(skeleton.lifecycles),
    )


def _unique(values: list[str]) -> list[str]:
    return list(dict.fromkeys(v for v in values if v))


def merge_concept(concept: DiscoveredConcept | Concept, patch: ConceptPatch) -> Concept:
    """Merge an enrichment patch into a concept.

    The concept's id and label are preserved. Aliases and external
    references are unioned; notes are replaced when the patch has them and
    a description is only filled in when the concept had none.
    """
    base = concept.strip_references() if isinstance(concept, DiscoveredConcept) else concept

    refs = list(base.external_refs)
    seen = {(r.model_id, r.concept_id) for r in refs}
    for ref in patch.external_refs:
        if (ref.model_id, ref.concept_id) not in seen:
            refs.append(ref)
            seen.add((ref.model_id, ref.concept_id))

    return base.model_copy(update={
        "aliases": [a for a in _unique(base.aliases + patch.aliases) if a != base.label],
        "notes": patch.notes or base.notes,
        "description": base.description or patch.description,
        "external_refs": refs,
    })


def _anchor_relationship(rel: Relationship, concept_id: str) -> Relationship:
    """Default a missing source endpoint to the concept being enriched."""
    if rel.from_id:
        return rel
    return rel.model_copy(update={"from_id": concept_id})


def _free_relationship_id(candidate: str, known: set[str]) -> str:
    """Return ``candidate``, or ``candidate-2``, ``candidate-3``... if taken."""
    if candidate not in known:
        return candidate
    suffix = 2
    while f"{candidate}-{suffix}" in known:
        suffix += 1
    return f"{candidate}-{suffix}"


def apply_enrichment(
    acc: ModelAccumulator,
    concept: DiscoveredConcept | Concept,
    result: ConceptEnrichment,
) -> ModelAccumulator:
    """Fold one successful enrichment into the accumulator.

    Every returned relationship is appended. One whose id is already
    accumulated is stored as ``<concept id>:<id>`` (with a numeric suffix if
    that is taken too) and recorded in ``renamed_relationships``.
    """
    known = acc.relationship_ids
    new_relationships = []
    renamed = []
    for rel in result.relationships:
        rel = _anchor_relationship(rel, concept.id)
        if rel.id in known:
            stored_id = _free_relationship_id(f"{concept.id}:{rel.id}", known)
            renamed.append((concept.id, rel.id, stored_id))
            rel = rel.model_copy(update={"id": stored_id})
        known.add(rel.id)
        new_relationships.append(rel)

    return replace(
        acc,
        concepts=acc.concepts + (merge_concept(concept, result.concept),),
        relationships=acc.relationships + tuple(new_relationships),
        rules=acc.rules + tuple(result.rules),
        lifecycles=acc.lifecycles + tuple(result.lifecycles),
        renamed_relationships=acc.renamed_relationships + tuple(renamed),
    )


def apply_fallback(acc: ModelAccumulator, concept: DiscoveredConcept | Concept) -> ModelAccumulator:
    """Keep the concept as discovered, minus its evidence references."""
    plain = concept.strip_references() if isinstance(concept, DiscoveredConcept) else concept
    return replace(acc, concepts=acc.concepts + (plain,))


def finish_model(skeleton: DiscoveredModel, acc: ModelAccumulator) -> ConceptModel:
    """Build the enriched model from its skeleton and final accumulator."""
    return ConceptModel(
        id=skeleton.id,
        title=skeleton.title,
        description=skeleton.description,
        concepts=list(acc.concepts),
        relationships=list(acc.relationships),
        rules=list(acc.rules),
        lifecycles=list(acc.lifecycles),
    )
