"""Generation oracle client and prompt chains."""

from .client import LLMSettings, create_llm_client, get_llm_settings
from .oracle import (
    GenerationOracle,
    OllamaOracle,
    OracleError,
    OracleMessage,
    OracleSchemaError,
    OracleTransportError,
)

__all__ = [
    "LLMSettings",
    "create_llm_client",
    "get_llm_settings",
    "GenerationOracle",
    "OllamaOracle",
    "OracleError",
    "OracleMessage",
    "OracleSchemaError",
    "OracleTransportError",
]
