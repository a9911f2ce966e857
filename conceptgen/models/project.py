"""Models for the persisted concept project.

A Project groups one or more ConceptModels. Each model owns its concepts,
relationships, rules, lifecycles and the curated views/stories built on top
of them. Concept and relationship ids are unique only within a model.
"""

from typing import Annotated, Optional

from pydantic import BeforeValidator, Field

from .base import CamelModel, StrList, Text, coerce_enum, lenient_list
from .enums import ConceptCategory, RelationshipCategory, RuleKind, ViewKind


class ConceptExternalRef(CamelModel):
    """Points at the same or an aligned concept in another model."""

    model_id: str = Field(..., description="ID of the other model")
    concept_id: str = Field(..., description="ID of the concept in that model")
    note: Optional[str] = Field(None, description="How the two concepts relate")


class Concept(CamelModel):
    """A labeled domain node."""

    id: str = Field(..., description="Concept ID, unique within its model")
    label: str = Field(..., description="Human-friendly concept name")
    category: Annotated[
        ConceptCategory,
        BeforeValidator(coerce_enum(ConceptCategory, ConceptCategory.OTHER)),
    ] = Field(default=ConceptCategory.OTHER, description="Kind of domain idea")
    description: Text = Field(None, description="Domain-level description")
    aliases: StrList = Field(default_factory=list, description="Synonyms used in code or docs")
    external_refs: lenient_list(ConceptExternalRef) = Field(
        default_factory=list, description="Equivalent concepts in other models"
    )
    notes: Text = Field(None, description="Free-text usage or implementation notes")
    bounded_context: Optional[str] = Field(
        None, description="Consolidated classification label assigned by rationalization"
    )


class Relationship(CamelModel):
    """A directed, labeled edge between two concepts."""

    id: str = Field(..., description="Relationship ID, unique within its model")
    from_id: str = Field("", alias="from", description="Source concept ID")
    to_id: str = Field(..., alias="to", description="Target concept ID")
    phrase: Optional[str] = Field(None, description="Verb phrase (e.g. 'places')")
    category: Annotated[
        RelationshipCategory,
        BeforeValidator(coerce_enum(RelationshipCategory, RelationshipCategory.OTHER)),
    ] = Field(default=RelationshipCategory.OTHER, description="Edge classification")
    description: Text = Field(None, description="What the edge means in the domain")


class ModelRule(CamelModel):
    """A natural-language rule about the model."""

    id: str = Field(..., description="Rule ID")
    title: str = Field(..., description="Short rule title")
    text: str = Field(..., description="Rule statement")
    kind: Annotated[
        Optional[RuleKind], BeforeValidator(coerce_enum(RuleKind, None))
    ] = Field(None, description="Rule classification")
    concept_ids: StrList = Field(default_factory=list, description="Concepts this rule governs")


class ConceptLifecycle(CamelModel):
    """How one concept moves through states over time."""

    id: Optional[str] = Field(None, description="Lifecycle ID")
    subject_concept_id: str = Field(..., description="Concept whose lifecycle this is")
    state_concept_ids: StrList = Field(default_factory=list, description="State concepts")
    transition_relationship_ids: StrList = Field(
        default_factory=list, description="Relationships representing allowed transitions"
    )
    initial_state_id: Optional[str] = Field(None, description="Starting state")
    terminal_state_ids: StrList = Field(default_factory=list, description="End states")


class ViewGroup(CamelModel):
    """A swimlane or zone inside a view layout."""

    id: str = Field(..., description="Group ID")
    title: str = Field("", description="Group heading")
    concept_ids: StrList = Field(default_factory=list, description="Concepts placed in this group")
    x: Optional[float] = None
    y: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None


class ViewLayout(CamelModel):
    """Advisory layout for a view."""

    groups: lenient_list(ViewGroup) = Field(default_factory=list)


class ModelView(CamelModel):
    """A curated, size-bounded subgraph intended for one diagram."""

    id: str = Field(..., description="View ID")
    name: str = Field(..., description="View name")
    kind: Annotated[ViewKind, BeforeValidator(coerce_enum(ViewKind, ViewKind.OTHER))] = Field(
        default=ViewKind.OTHER, description="Rendering hint"
    )
    description: Text = Field(None, description="What question this view answers")
    concept_ids: StrList = Field(default_factory=list, description="4-8 concept IDs by contract")
    relationship_ids: StrList = Field(
        default_factory=list, description="4-10 relationship IDs by contract"
    )
    layout: Optional[ViewLayout] = Field(None, description="Optional 2-5 layout groups")


class StoryStep(CamelModel):
    """One frame of a story: a small subgraph plus narrative."""

    id: str = Field(..., description="Step ID")
    index: int = Field(0, description="Zero-based position in the story")
    title: str = Field(..., description="Short step title")
    narrative: Text = Field(None, description="What happens in this step")
    concept_ids: StrList = Field(default_factory=list, description="2-6 concept IDs by contract")
    relationship_ids: StrList = Field(
        default_factory=list, description="1-5 relationship IDs by contract"
    )
    primary_concept_ids: StrList = Field(default_factory=list, description="Emphasised concepts")
    primary_relationship_ids: StrList = Field(
        default_factory=list, description="Emphasised relationships"
    )


class StoryView(CamelModel):
    """An ordered narrative over the model."""

    id: str = Field(..., description="Story ID")
    name: str = Field(..., description="Story name")
    description: Text = None
    tags: StrList = Field(default_factory=list)
    focus_concept_id: Optional[str] = Field(None, description="Main concept the story is about")
    steps: lenient_list(StoryStep) = Field(default_factory=list, description="3-7 steps by contract")


class ConceptModel(CamelModel):
    """A bounded collection of concepts representing one coherent subsystem."""

    id: str = Field(..., description="Model ID")
    title: str = Field(..., description="Model title")
    description: Text = None
    concepts: lenient_list(Concept) = Field(default_factory=list)
    relationships: lenient_list(Relationship) = Field(default_factory=list)
    rules: lenient_list(ModelRule) = Field(default_factory=list)
    lifecycles: lenient_list(ConceptLifecycle) = Field(default_factory=list)
    views: lenient_list(ModelView) = Field(default_factory=list)
    story_views: lenient_list(StoryView) = Field(default_factory=list)

    @property
    def concept_ids(self) -> set[str]:
        return {c.id for c in self.concepts}

    @property
    def relationship_ids(self) -> set[str]:
        return {r.id for r in self.relationships}


class Project(CamelModel):
    """Top-level artifact aggregating the models for one repository."""

    id: str = Field(..., description="Project ID")
    name: str = Field(..., description="Human-readable project name")
    summary: Text = Field("", description="1-3 sentence summary")
    description: Text = None
    models: lenient_list(ConceptModel) = Field(default_factory=list)


class ProjectEntry(CamelModel):
    """One published project in the viewer registry."""

    id: str
    name: str
    path: str
    updated_at: str


class ProjectRegistry(CamelModel):
    """Registry of published projects."""

    projects: list[ProjectEntry] = Field(default_factory=list)
