"""Referential integrity and size-contract checks for generated models.

Views and stories are curated by the oracle and may reference ids that do
not exist in their model. Those ids are pruned and each one is recorded as
an IntegrityIssue. Model relationships, rules and lifecycles are never
modified here; their dangling endpoints are only reported.
"""

from typing import Iterable, Optional

import structlog
from rapidfuzz import fuzz, process

from conceptgen.models import (
    ConceptModel,
    IntegrityIssue,
    IssueKind,
    ModelView,
    StoryStep,
    StoryView,
    ViewLayout,
)

logger = structlog.get_logger(__name__)

# Contract bounds (inclusive). Advisory: violations are flagged, not enforced.
VIEW_COUNT_BOUNDS = (3, 7)
VIEW_CONCEPT_BOUNDS = (4, 8)
VIEW_RELATIONSHIP_BOUNDS = (4, 10)
VIEW_GROUP_BOUNDS = (2, 5)
STORY_COUNT_BOUNDS = (2, 5)
STORY_STEP_BOUNDS = (3, 7)
STEP_CONCEPT_BOUNDS = (2, 6)
STEP_RELATIONSHIP_BOUNDS = (1, 5)

# Minimum similarity for suggesting a known id in place of a dangling one
SUGGESTION_THRESHOLD = 80


def _suggest(missing: str, known: Iterable[str]) -> Optional[str]:
    match = process.extractOne(missing, list(known), scorer=fuzz.ratio, score_cutoff=SUGGESTION_THRESHOLD)
    return match[0] if match else None


def _within(count: int, bounds: tuple[int, int]) -> bool:
    return bounds[0] <= count <= bounds[1]


def _dangling_issue(
    kind: IssueKind,
    model_id: str,
    subject_id: Optional[str],
    missing: str,
    known: set[str],
    where: str,
) -> IntegrityIssue:
    noun = "concept" if kind == IssueKind.DANGLING_CONCEPT else "relationship"
    details = {"missingId": missing, "field": where}
    suggestion = _suggest(missing, known)
    if suggestion:
        details["suggestion"] = suggestion
    return IntegrityIssue(
        kind=kind,
        model_id=model_id,
        subject_id=subject_id,
        message=f"{where} references unknown {noun} '{missing}'",
        details=details,
    )


def _keep_known(
    ids: list[str],
    known: set[str],
    kind: IssueKind,
    model_id: str,
    subject_id: str,
    where: str,
    issues: list[IntegrityIssue],
) -> list[str]:
    """Drop unknown and duplicate ids, preserving order."""
    kept: list[str] = []
    for item in ids:
        if item in kept:
            continue
        if item not in known:
            issues.append(_dangling_issue(kind, model_id, subject_id, item, known, where))
            continue
        kept.append(item)
    return kept


def prune_view(view: ModelView, model: ConceptModel) -> tuple[ModelView, list[IntegrityIssue]]:
    """Remove ids that do not resolve in the model and normalize layout groups.

    Each concept ends up in at most one group, and only groups of a view
    that contains it.

    Returns:
        Tuple of (pruned view, issues for every id removed).
    """
    issues: list[IntegrityIssue] = []
    concept_ids = _keep_known(
        view.concept_ids, model.concept_ids, IssueKind.DANGLING_CONCEPT,
        model.id, view.id, "view.conceptIds", issues,
    )
    relationship_ids = _keep_known(
        view.relationship_ids, model.relationship_ids, IssueKind.DANGLING_RELATIONSHIP,
        model.id, view.id, "view.relationshipIds", issues,
    )

    layout = None
    if view.layout is not None:
        placed: set[str] = set()
        groups = []
        for group in view.layout.groups:
            members = []
            for concept_id in group.concept_ids:
                if concept_id not in model.concept_ids:
                    issues.append(_dangling_issue(
                        IssueKind.DANGLING_CONCEPT, model.id, view.id, concept_id,
                        model.concept_ids, f"layout.groups[{group.id}].conceptIds",
                    ))
                elif concept_id in concept_ids and concept_id not in placed:
                    members.append(concept_id)
                    placed.add(concept_id)
            groups.append(group.model_copy(update={"concept_ids": members}))
        layout = ViewLayout(groups=groups)

    if issues:
        logger.info("view_ids_pruned", model_id=model.id, view_id=view.id, pruned=len(issues))

    pruned = view.model_copy(update={
        "concept_ids": concept_ids,
        "relationship_ids": relationship_ids,
        "layout": layout,
    })
    return pruned, issues


def check_view_bounds(view: ModelView, model_id: str) -> list[IntegrityIssue]:
    """Flag a view whose concept, relationship or group counts are out of contract."""
    counts = {
        "concepts": (len(view.concept_ids), VIEW_CONCEPT_BOUNDS),
        "relationships": (len(view.relationship_ids), VIEW_RELATIONSHIP_BOUNDS),
    }
    if view.layout is not None:
        counts["groups"] = (len(view.layout.groups), VIEW_GROUP_BOUNDS)

    issues = []
    for label, (count, bounds) in counts.items():
        if not _within(count, bounds):
            issues.append(IntegrityIssue(
                kind=IssueKind.VIEW_BOUNDS,
                model_id=model_id,
                subject_id=view.id,
                message=f"view has {count} {label}, expected {bounds[0]}-{bounds[1]}",
                details={"field": label, "count": count, "min": bounds[0], "max": bounds[1]},
            ))
    return issues


def _normalize_step(
    step: StoryStep,
    position: int,
    model: ConceptModel,
    story_id: str,
    issues: list[IntegrityIssue],
) -> StoryStep:
    subject = f"{story_id}/{step.id}"
    concept_ids = _keep_known(
        step.concept_ids, model.concept_ids, IssueKind.DANGLING_CONCEPT,
        model.id, subject, "step.conceptIds", issues,
    )
    relationship_ids = _keep_known(
        step.relationship_ids, model.relationship_ids, IssueKind.DANGLING_RELATIONSHIP,
        model.id, subject, "step.relationshipIds", issues,
    )
    return step.model_copy(update={
        "index": position,
        "concept_ids": concept_ids,
        "relationship_ids": relationship_ids,
        # Primary subsets may only emphasise the step's own ids
        "primary_concept_ids": [c for c in dict.fromkeys(step.primary_concept_ids) if c in concept_ids],
        "primary_relationship_ids": [
            r for r in dict.fromkeys(step.primary_relationship_ids) if r in relationship_ids
        ],
    })


def normalize_story(story: StoryView, model: ConceptModel) -> tuple[StoryView, list[IntegrityIssue]]:
    """Renumber steps by position and prune ids that do not resolve.

    Returns:
        Tuple of (normalized story, issues for every id removed).
    """
    issues: list[IntegrityIssue] = []
    steps = [
        _normalize_step(step, position, model, story.id, issues)
        for position, step in enumerate(story.steps)
    ]

    focus = story.focus_concept_id
    if focus is not None and focus not in model.concept_ids:
        issues.append(_dangling_issue(
            IssueKind.DANGLING_CONCEPT, model.id, story.id, focus,
            model.concept_ids, "story.focusConceptId",
        ))
        focus = None

    if issues:
        logger.info("story_ids_pruned", model_id=model.id, story_id=story.id, pruned=len(issues))

    return story.model_copy(update={"steps": steps, "focus_concept_id": focus}), issues


def check_story_bounds(story: StoryView, model_id: str) -> list[IntegrityIssue]:
    """Flag a story whose step count or per-step sizes are out of contract."""
    issues = []
    if not _within(len(story.steps), STORY_STEP_BOUNDS):
        issues.append(IntegrityIssue(
            kind=IssueKind.STORY_BOUNDS,
            model_id=model_id,
            subject_id=story.id,
            message=(
                f"story has {len(story.steps)} steps, "
                f"expected {STORY_STEP_BOUNDS[0]}-{STORY_STEP_BOUNDS[1]}"
            ),
            details={"field": "steps", "count": len(story.steps)},
        ))

    for step in story.steps:
        for label, count, bounds in (
            ("concepts", len(step.concept_ids), STEP_CONCEPT_BOUNDS),
            ("relationships", len(step.relationship_ids), STEP_RELATIONSHIP_BOUNDS),
        ):
            if not _within(count, bounds):
                issues.append(IntegrityIssue(
                    kind=IssueKind.STORY_BOUNDS,
                    model_id=model_id,
                    subject_id=f"{story.id}/{step.id}",
                    message=f"step has {count} {label}, expected {bounds[0]}-{bounds[1]}",
                    details={"field": label, "count": count, "min": bounds[0], "max": bounds[1]},
                ))
    return issues


def find_dangling_references(model: ConceptModel) -> list[IntegrityIssue]:
    """Report model relationships, rules and lifecycles pointing at unknown ids.

    Nothing is removed; the model's accumulated collections are append-only.
    """
    concepts = model.concept_ids
    relationships = model.relationship_ids
    issues: list[IntegrityIssue] = []

    def concept_ref(subject: str, concept_id: Optional[str], where: str) -> None:
        if concept_id and concept_id not in concepts:
            issues.append(_dangling_issue(
                IssueKind.DANGLING_CONCEPT, model.id, subject, concept_id, concepts, where
            ))

    for rel in model.relationships:
        concept_ref(rel.id, rel.from_id, "relationship.from")
        concept_ref(rel.id, rel.to_id, "relationship.to")

    for rule in model.rules:
        for concept_id in rule.concept_ids:
            concept_ref(rule.id, concept_id, "rule.conceptIds")

    for lifecycle in model.lifecycles:
        subject = lifecycle.id or lifecycle.subject_concept_id
        concept_ref(subject, lifecycle.subject_concept_id, "lifecycle.subjectConceptId")
        for state_id in lifecycle.state_concept_ids:
            concept_ref(subject, state_id, "lifecycle.stateConceptIds")
        concept_ref(subject, lifecycle.initial_state_id, "lifecycle.initialStateId")
        for state_id in lifecycle.terminal_state_ids:
            concept_ref(subject, state_id, "lifecycle.terminalStateIds")
        for rel_id in lifecycle.transition_relationship_ids:
            if rel_id not in relationships:
                issues.append(_dangling_issue(
                    IssueKind.DANGLING_RELATIONSHIP, model.id, subject, rel_id,
                    relationships, "lifecycle.transitionRelationshipIds",
                ))

    return issues


def audit_model(model: ConceptModel) -> list[IntegrityIssue]:
    """Collect every integrity issue in a persisted model without modifying it."""
    issues = find_dangling_references(model)

    if model.views and not _within(len(model.views), VIEW_COUNT_BOUNDS):
        issues.append(IntegrityIssue(
            kind=IssueKind.VIEW_BOUNDS,
            model_id=model.id,
            message=f"model has {len(model.views)} views, expected {VIEW_COUNT_BOUNDS[0]}-{VIEW_COUNT_BOUNDS[1]}",
            details={"field": "views", "count": len(model.views)},
        ))
    for view in model.views:
        issues.extend(prune_view(view, model)[1])
        issues.extend(check_view_bounds(view, model.id))

    if model.story_views and not _within(len(model.story_views), STORY_COUNT_BOUNDS):
        issues.append(IntegrityIssue(
            kind=IssueKind.STORY_BOUNDS,
            model_id=model.id,
            message=(
                f"model has {len(model.story_views)} stories, "
                f"expected {STORY_COUNT_BOUNDS[0]}-{STORY_COUNT_BOUNDS[1]}"
            ),
            details={"field": "storyViews", "count": len(model.story_views)},
        ))
    for story in model.story_views:
        issues.extend(normalize_story(story, model)[1])
        issues.extend(check_story_bounds(story, model.id))
        for position, step in enumerate(story.steps):
            if step.index != position:
                issues.append(IntegrityIssue(
                    kind=IssueKind.STORY_BOUNDS,
                    model_id=model.id,
                    subject_id=f"{story.id}/{step.id}",
                    message=f"step index {step.index} does not match position {position}",
                    details={"field": "index", "index": step.index, "position": position},
                ))

    return issues
