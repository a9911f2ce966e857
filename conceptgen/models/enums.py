"""Enumeration types for the concept model."""

from enum import Enum


class ConceptCategory(str, Enum):
    """Kind of domain idea a concept represents."""

    THING = "thing"
    ACTIVITY = "activity"
    ROLE = "role"
    STATE = "state"
    EVENT = "event"
    PLACE = "place"
    TIME = "time"
    OTHER = "other"


class RelationshipCategory(str, Enum):
    """Classification of a directed edge between two concepts."""

    IS_A = "is_a"
    PART_OF = "part_of"
    CAUSES = "causes"
    ENABLES = "enables"
    PREVENTS = "prevents"
    PRECEDES = "precedes"
    USES = "uses"
    REPRESENTS = "represents"
    OTHER = "other"


class RuleKind(str, Enum):
    """Classification of a model rule."""

    INVARIANT = "invariant"
    CONSTRAINT = "constraint"
    POLICY = "policy"
    ASSUMPTION = "assumption"


class ViewKind(str, Enum):
    """Rendering hint for a curated view."""

    OVERVIEW = "overview"
    LIFECYCLE = "lifecycle"
    STRUCTURE = "structure"
    IMPLEMENTATION = "implementation"
    DATASTORE = "datastore"
    OTHER = "other"


class ConceptType(str, Enum):
    """DDD-style classification used by concept sheets."""

    ENTITY = "entity"
    VALUE_OBJECT = "value_object"
    AGGREGATE_ROOT = "aggregate_root"
    DOMAIN_SERVICE = "domain_service"
    APPLICATION_SERVICE = "application_service"
    EVENT = "event"
    OTHER = "other"


class Criticality(str, Enum):
    """How central a concept is to the domain."""

    CORE = "core"
    SUPPORTING = "supporting"
    EXPERIMENTAL = "experimental"


class ErrorSeverity(str, Enum):
    """Severity levels for processing errors."""

    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class IssueKind(str, Enum):
    """Kinds of data-quality problems found in generated output."""

    DANGLING_CONCEPT = "dangling_concept"
    DANGLING_RELATIONSHIP = "dangling_relationship"
    VIEW_BOUNDS = "view_bounds"
    STORY_BOUNDS = "story_bounds"
    UNGROUNDED_CONCEPT = "ungrounded_concept"
