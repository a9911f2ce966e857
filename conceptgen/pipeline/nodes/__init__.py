"""Pipeline node implementations."""

from .indexing import index_repository_node
from .discovery import discover_structure_node
from .enrichment import enrich_models_node
from .views import synthesize_views_node
from .stories import synthesize_stories_node
from .rationalization import rationalize_models_node
from .persistence import persist_project_node, publish_project_node

__all__ = [
    "index_repository_node",
    "discover_structure_node",
    "enrich_models_node",
    "synthesize_views_node",
    "synthesize_stories_node",
    "rationalize_models_node",
    "persist_project_node",
    "publish_project_node",
]
