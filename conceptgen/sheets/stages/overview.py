"""Project overview: a system-level summary written before discovery."""

import structlog

from conceptgen.indexing import FileInfo, SymbolInfo, format_symbols
from conceptgen.llm.chains import run_project_overview_chain
from conceptgen.llm.oracle import GenerationOracle
from conceptgen.models import ProjectOverview

logger = structlog.get_logger(__name__)

# Keep the file listing short enough for small context windows
MAX_LISTED_FILES = 200


def generate_overview(
    oracle: GenerationOracle,
    repo_root: str,
    files: list[FileInfo],
    symbols: list[SymbolInfo],
) -> ProjectOverview:
    """Summarize the repository.

    Raises:
        OracleError: If the call fails. The orchestrator treats this as soft.
    """
    listed = files[:MAX_LISTED_FILES]
    files_text = "\n".join(f"- {f.relative_path} ({f.size} bytes)" for f in listed)
    if len(files) > len(listed):
        files_text += f"\n- ... and {len(files) - len(listed)} more"

    overview = run_project_overview_chain(oracle, repo_root, files_text, format_symbols(symbols))

    logger.info(
        "overview_generated",
        external_systems=len(overview.system_context.external_systems),
        services=len(overview.containers.services),
    )
    return overview
