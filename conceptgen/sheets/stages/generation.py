"""Sheet generation: one concept sheet per candidate, written immediately."""

from pathlib import Path

import structlog

from conceptgen import storage
from conceptgen.config import Settings
from conceptgen.indexing import FileInfo, extract_snippets, format_snippets, resolve_references
from conceptgen.llm.chains import run_concept_sheet_chain
from conceptgen.llm.oracle import GenerationOracle, OracleError
from conceptgen.models import (
    ConceptCandidate,
    ConceptSheet,
    ImplementationLink,
    ProcessingError,
    SheetDefinition,
    SheetMetadata,
)

logger = structlog.get_logger(__name__)

NO_SNIPPETS = "(no code snippets available)"


def fallback_sheet(candidate: ConceptCandidate) -> ConceptSheet:
    """Minimal sheet built from the candidate alone."""
    links = []
    for ref in candidate.references:
        path = f"{ref.file}:{ref.line}" if ref.line else ref.file
        links.append(ImplementationLink(kind="file", label=ref.symbol or ref.file, path=path))

    return ConceptSheet(
        metadata=SheetMetadata(name=candidate.name, type=candidate.type),
        definition=SheetDefinition(short_description=candidate.description or ""),
        implementation=links,
    )


def generate_sheet(
    oracle: GenerationOracle,
    candidate: ConceptCandidate,
    files: list[FileInfo],
    settings: Settings,
) -> ConceptSheet:
    """Ask the oracle for the candidate's sheet.

    The sheet keeps the candidate's name so documents stay keyed by it.

    Raises:
        OracleError: If the call fails.
    """
    resolved = resolve_references(files, [r.file for r in candidate.references])
    snippets = extract_snippets(resolved, settings.snippet_max_files, settings.snippet_max_chars)
    sheet = run_concept_sheet_chain(oracle, candidate, format_snippets(snippets) or NO_SNIPPETS)

    if sheet.metadata.name != candidate.name:
        sheet = sheet.model_copy(update={
            "metadata": sheet.metadata.model_copy(update={"name": candidate.name}),
        })
    if not sheet.implementation:
        sheet = sheet.model_copy(update={"implementation": fallback_sheet(candidate).implementation})
    return sheet


def generate_sheets(
    oracle: GenerationOracle,
    candidates: list[ConceptCandidate],
    files: list[FileInfo],
    settings: Settings,
    out_dir: Path,
) -> tuple[list[ConceptSheet], list[str], list[dict]]:
    """Generate and write a sheet for every candidate, in discovery order.

    Returns:
        Tuple of (sheets, written document paths, warning dicts).
    """
    sheets: list[ConceptSheet] = []
    written: list[str] = []
    warnings: list[dict] = []

    for index, candidate in enumerate(candidates, start=1):
        try:
            sheet = generate_sheet(oracle, candidate, files, settings)
        except OracleError as e:
            logger.error("sheet_generation_failed", concept=candidate.name, error=str(e))
            warnings.append(ProcessingError.warning(
                "sheet_generation",
                f"Failed to generate concept sheet: {e}",
                concept=candidate.name,
                error_type=type(e).__name__,
            ).model_dump(mode="json"))
            sheet = fallback_sheet(candidate)

        sheets.append(sheet)
        written.append(str(storage.write_concept_document(sheet, out_dir)))

        logger.info("sheet_written", concept=candidate.name, index=index, total=len(candidates))

    return sheets, written, warnings
