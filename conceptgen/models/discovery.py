"""Skeleton shapes produced by structure discovery.

Discovered concepts carry code-evidence references that point back at the
files implementing them. References only live until enrichment; the final
artifact never contains them.
"""

from typing import Optional

from pydantic import Field

from .base import CamelModel, lenient_list
from .project import Concept, ConceptModel, Project


class CodeReference(CamelModel):
    """A pointer to a code location supporting a concept."""

    file: str = Field(..., description="Path relative to the repository root")
    line: Optional[int] = Field(None, description="Line number if known")
    symbol: Optional[str] = Field(None, description="Symbol name at this location")


class DiscoveredConcept(Concept):
    """Concept plus the evidence it was inferred from."""

    references: lenient_list(CodeReference) = Field(default_factory=list)

    def strip_references(self) -> Concept:
        """Return the plain concept without its evidence list."""
        return Concept.model_validate(self.model_dump(exclude={"references"}))


class DiscoveredModel(ConceptModel):
    """Model whose concepts still carry references."""

    concepts: lenient_list(DiscoveredConcept) = Field(default_factory=list)


class DiscoveredProject(Project):
    """Skeleton project returned by the discovery call."""

    models: lenient_list(DiscoveredModel) = Field(default_factory=list)
