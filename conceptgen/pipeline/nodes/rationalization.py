"""Bounded-context rationalization pipeline node."""

import structlog

from conceptgen.llm.oracle import GenerationOracle, OracleError
from conceptgen.models import ConceptModel, ProcessingError
from conceptgen.pipeline.state import PipelineState
from conceptgen.processing import propose_label_map, relabel_models
from conceptgen.processing.rationalization import model_descriptions, model_labels

logger = structlog.get_logger(__name__)


def rationalize_models_node(state: PipelineState, *, oracle: GenerationOracle) -> dict:
    """Assign consolidated bounded contexts to every concept.

    Each concept starts labeled with its model's title. On failure the
    models are left unchanged.
    """
    models = [ConceptModel.model_validate(m) for m in state.get("models", [])]
    labels = model_labels(models)

    logger.info("rationalization_node_start", concepts=len(labels))

    if not labels:
        return {}

    descriptions = model_descriptions(models)
    llm_calls = state.get("llm_calls_count", 0) + 1

    try:
        label_map = propose_label_map(oracle, labels, descriptions)
    except OracleError as e:
        logger.error("rationalization_failed", error=str(e))
        return {
            "llm_calls_count": llm_calls,
            "warnings": [ProcessingError.warning(
                "rationalization",
                f"Failed to rationalize bounded contexts: {e}",
                error_type=type(e).__name__,
            ).model_dump(mode="json")],
        }

    relabeled = relabel_models(models, label_map)

    logger.info(
        "rationalization_node_complete",
        contexts=len(set(label_map.values())),
        relabeled=sum(1 for name in labels if name in label_map),
    )

    return {
        "models": [m.to_dict() for m in relabeled],
        "llm_calls_count": llm_calls,
    }
