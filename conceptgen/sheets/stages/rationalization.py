"""Bounded-context rationalization across concept sheets."""

import structlog

from conceptgen.llm.oracle import GenerationOracle
from conceptgen.models import ConceptSheet
from conceptgen.processing import propose_label_map, relabel_sheets

logger = structlog.get_logger(__name__)


def rationalize_sheets(oracle: GenerationOracle, sheets: list[ConceptSheet]) -> list[ConceptSheet]:
    """Relabel ``metadata.bounded_context`` with consolidated contexts.

    Sheets the proposal does not mention keep their label.

    Raises:
        OracleError: If the call fails. The orchestrator treats this as soft.
    """
    if not sheets:
        return sheets

    labels = {s.name: s.metadata.bounded_context for s in sheets}
    descriptions = {s.name: s.definition.short_description or "" for s in sheets}

    label_map = propose_label_map(oracle, labels, descriptions)
    relabeled = relabel_sheets(sheets, label_map)

    logger.info(
        "sheets_rationalized",
        before=len({label for label in labels.values() if label}),
        after=len({s.metadata.bounded_context for s in relabeled if s.metadata.bounded_context}),
    )
    return relabeled
