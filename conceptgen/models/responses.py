"""Response models for structured oracle calls.

Every json_object call is validated against one of these before any
pipeline logic sees the data.
"""

from typing import Optional

from pydantic import Field

from .base import CamelModel, StrList, Text, lenient_list
from .project import (
    ConceptExternalRef,
    ConceptLifecycle,
    ModelRule,
    ModelView,
    Relationship,
    StoryView,
)


class ConceptPatch(CamelModel):
    """Fields the enrichment call may add to a concept."""

    aliases: StrList = Field(default_factory=list)
    notes: Text = None
    description: Text = None
    external_refs: lenient_list(ConceptExternalRef) = Field(default_factory=list)


class ConceptEnrichment(CamelModel):
    """Result of enriching a single concept."""

    concept: ConceptPatch = Field(default_factory=ConceptPatch)
    relationships: lenient_list(Relationship) = Field(default_factory=list)
    rules: lenient_list(ModelRule) = Field(default_factory=list)
    lifecycles: lenient_list(ConceptLifecycle) = Field(default_factory=list)


class ViewDesign(CamelModel):
    """Result of the view synthesis call."""

    views: lenient_list(ModelView) = Field(default_factory=list)


class StoryDesign(CamelModel):
    """Result of the story synthesis call."""

    story_views: lenient_list(StoryView) = Field(default_factory=list)


class BoundedContextProposal(CamelModel):
    """One consolidated label and the concept names it subsumes."""

    name: str = Field(..., description="Consolidated bounded context name")
    description: Optional[str] = None
    concepts: StrList = Field(default_factory=list, description="Concept names in this context")


class RationalizationProposal(CamelModel):
    """Result of the rationalization call."""

    bounded_contexts: lenient_list(BoundedContextProposal) = Field(default_factory=list)

    def label_map(self) -> dict[str, str]:
        """Map each concept name to its proposed label. Later entries win."""
        mapping: dict[str, str] = {}
        for context in self.bounded_contexts:
            for name in context.concepts:
                mapping[name] = context.name
        return mapping
