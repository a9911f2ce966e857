"""Post-processing utilities."""

from .integrity import (
    audit_model,
    check_story_bounds,
    check_view_bounds,
    find_dangling_references,
    normalize_story,
    prune_view,
)
from .rationalization import (
    apply_label_map,
    propose_label_map,
    relabel_models,
    relabel_sheets,
)

__all__ = [
    "audit_model",
    "check_story_bounds",
    "check_view_bounds",
    "find_dangling_references",
    "normalize_story",
    "prune_view",
    "apply_label_map",
    "propose_label_map",
    "relabel_models",
    "relabel_sheets",
]
