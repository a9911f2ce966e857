"""Source indexing pipeline node."""

import structlog

from conceptgen.config import Settings
from conceptgen.indexing import extract_symbols, scan_repo
from conceptgen.pipeline.state import PipelineState

logger = structlog.get_logger(__name__)


def index_repository_node(state: PipelineState, *, settings: Settings) -> dict:
    """List source files and their exported symbols.

    Args:
        state: Current pipeline state with repo_root.
        settings: Indexer configuration.

    Returns:
        State update with files and symbols.
    """
    logger.info("indexing_node_start", repo_root=state["repo_root"])

    files = scan_repo(state["repo_root"], settings.source_extensions, settings.source_dir)
    symbols = extract_symbols(files)

    logger.info(
        "indexing_node_complete",
        files=len(files),
        symbols=len(symbols),
        exported=sum(1 for s in symbols if s.is_exported),
    )

    return {"files": files, "symbols": symbols}
