"""Pydantic data models for the pipeline."""

from .enums import (
    ConceptCategory,
    ConceptType,
    Criticality,
    ErrorSeverity,
    IssueKind,
    RelationshipCategory,
    RuleKind,
    ViewKind,
)
from .project import (
    Concept,
    ConceptExternalRef,
    ConceptLifecycle,
    ConceptModel,
    ModelRule,
    ModelView,
    Project,
    ProjectEntry,
    ProjectRegistry,
    Relationship,
    StoryStep,
    StoryView,
    ViewGroup,
    ViewLayout,
)
from .discovery import CodeReference, DiscoveredConcept, DiscoveredModel, DiscoveredProject
from .responses import (
    BoundedContextProposal,
    ConceptEnrichment,
    ConceptPatch,
    RationalizationProposal,
    StoryDesign,
    ViewDesign,
)
from .report import IntegrityIssue, ProcessingError
from .sheets import (
    CandidateBatch,
    ConceptCandidate,
    ConceptDocumentModel,
    ConceptSheet,
    ImplementationLink,
    ProjectOverview,
    SheetDefinition,
    SheetMetadata,
)

__all__ = [
    # Enums
    "ConceptCategory",
    "RelationshipCategory",
    "RuleKind",
    "ViewKind",
    "ConceptType",
    "Criticality",
    "ErrorSeverity",
    "IssueKind",
    # Project
    "Concept",
    "ConceptExternalRef",
    "Relationship",
    "ModelRule",
    "ConceptLifecycle",
    "ViewGroup",
    "ViewLayout",
    "ModelView",
    "StoryStep",
    "StoryView",
    "ConceptModel",
    "Project",
    "ProjectEntry",
    "ProjectRegistry",
    # Discovery
    "CodeReference",
    "DiscoveredConcept",
    "DiscoveredModel",
    "DiscoveredProject",
    # Oracle responses
    "ConceptPatch",
    "ConceptEnrichment",
    "ViewDesign",
    "StoryDesign",
    "BoundedContextProposal",
    "RationalizationProposal",
    # Diagnostics
    "ProcessingError",
    "IntegrityIssue",
    # Concept sheets
    "ConceptCandidate",
    "CandidateBatch",
    "ConceptSheet",
    "SheetMetadata",
    "SheetDefinition",
    "ImplementationLink",
    "ProjectOverview",
    "ConceptDocumentModel",
]
