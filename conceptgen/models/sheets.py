"""Models for the flat concept-document pipeline.

Stage Flow:
1. Project Overview        → ProjectOverview
2. Convergence Discovery   → List[ConceptCandidate]
3. Sheet Generation        → List[ConceptSheet]
4. Rationalization         → ConceptSheet.metadata.bounded_context relabeled
5. Assembly                → ConceptDocumentModel
"""

from typing import Annotated, Optional

from pydantic import BeforeValidator, Field

from .base import CamelModel, StrList, Text, coerce_enum, lenient_list
from .discovery import CodeReference
from .enums import ConceptType, Criticality

ConceptTypeField = Annotated[
    ConceptType, BeforeValidator(coerce_enum(ConceptType, ConceptType.OTHER))
]


# =============================================================================
# Discovery
# =============================================================================

class ConceptCandidate(CamelModel):
    """A concept found by the convergence loop, before a sheet is written."""

    name: str = Field(..., description="Concept name; the deduplication key")
    type: ConceptTypeField = Field(default=ConceptType.OTHER)
    description: Text = None
    references: lenient_list(CodeReference) = Field(default_factory=list)


class CandidateBatch(CamelModel):
    """One convergence iteration's response."""

    concepts: lenient_list(ConceptCandidate) = Field(default_factory=list)


# =============================================================================
# Concept Sheet
# =============================================================================

class SheetMetadata(CamelModel):
    name: str
    type: ConceptTypeField = Field(default=ConceptType.OTHER)
    bounded_context: Optional[str] = Field(None, description="Classification label")
    aggregate_root: Optional[bool] = None
    criticality: Annotated[
        Optional[Criticality], BeforeValidator(coerce_enum(Criticality, None))
    ] = None


class SheetDefinition(CamelModel):
    short_description: Text = ""
    ubiquitous_language: Text = None


class SheetField(CamelModel):
    name: str
    type: Optional[str] = None
    description: Text = None


class SheetRelationship(CamelModel):
    description: str
    target: Optional[str] = None


class SheetStructure(CamelModel):
    fields: lenient_list(SheetField) = Field(default_factory=list)
    relationships: lenient_list(SheetRelationship) = Field(default_factory=list)


class SheetLifecycle(CamelModel):
    states: StrList = Field(default_factory=list)
    valid_transitions: StrList = Field(default_factory=list)


class SheetInvariant(CamelModel):
    rule: str
    notes: Text = None


class SheetOperation(CamelModel):
    """A command the concept accepts or an event it emits."""

    name: str
    description: Text = None


class ImplementationLink(CamelModel):
    kind: str = Field("file", description="file, symbol or url")
    label: str
    path: Optional[str] = None


class ConceptSheet(CamelModel):
    """Full documentation for one concept."""

    metadata: SheetMetadata
    definition: SheetDefinition = Field(default_factory=SheetDefinition)
    structure: SheetStructure = Field(default_factory=SheetStructure)
    lifecycle: Optional[SheetLifecycle] = None
    invariants: lenient_list(SheetInvariant) = Field(default_factory=list)
    commands: lenient_list(SheetOperation) = Field(default_factory=list)
    events: lenient_list(SheetOperation) = Field(default_factory=list)
    implementation: lenient_list(ImplementationLink) = Field(default_factory=list)

    @property
    def name(self) -> str:
        return self.metadata.name


# =============================================================================
# Project Overview
# =============================================================================

class ExternalSystem(CamelModel):
    name: str
    description: Text = None
    direction: Optional[str] = None


class UserRole(CamelModel):
    name: str
    description: Text = None


class SystemContext(CamelModel):
    external_systems: lenient_list(ExternalSystem) = Field(default_factory=list)
    user_roles: lenient_list(UserRole) = Field(default_factory=list)
    key_dependencies: StrList = Field(default_factory=list)


class ContainerView(CamelModel):
    services: StrList = Field(default_factory=list)
    user_interfaces: StrList = Field(default_factory=list)
    data_stores: StrList = Field(default_factory=list)
    background_jobs: StrList = Field(default_factory=list)
    deployment_targets: StrList = Field(default_factory=list)


class ModuleView(CamelModel):
    boundaries: StrList = Field(default_factory=list)
    responsibilities: StrList = Field(default_factory=list)
    domain_focus: Text = None


class ProjectOverview(CamelModel):
    """C4-style summary of the analyzed repository."""

    summary: Text = ""
    system_context: SystemContext = Field(default_factory=SystemContext)
    containers: ContainerView = Field(default_factory=ContainerView)
    modules: ModuleView = Field(default_factory=ModuleView)


# =============================================================================
# Assembly
# =============================================================================

class ConceptDocumentModel(CamelModel):
    """Persisted single-model artifact written as concept-model.json."""

    repo_root: str
    generated_at: str
    project_overview: Optional[ProjectOverview] = None
    concepts: list[ConceptSheet] = Field(default_factory=list)
