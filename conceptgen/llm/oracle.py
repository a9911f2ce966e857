"""Generation oracle interface and the Ollama-backed implementation.

The pipeline talks to the text-generation service through one narrow
interface: submit an ordered list of role/content messages plus a format
hint, get back text or a parsed JSON value, or a typed failure. Anything
with a matching ``generate`` method can stand in for the real service.
"""

from dataclasses import dataclass
from typing import Any, Literal, Protocol

import structlog
from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from conceptgen.llm.client import LLMSettings, create_llm_client, get_llm_settings
from conceptgen.llm.parsing import JSONExtractionError, parse_json_response

logger = structlog.get_logger(__name__)

Role = Literal["system", "user"]
ResponseFormat = Literal["text", "json_object"]


class OracleError(Exception):
    """Base class for generation oracle failures."""


class OracleTransportError(OracleError):
    """The service was unreachable or returned no usable content."""


class OracleSchemaError(OracleError):
    """The response could not be parsed into the expected shape."""


@dataclass(frozen=True)
class OracleMessage:
    """One message in an oracle request."""

    role: Role
    content: str


class GenerationOracle(Protocol):
    """Anything that can answer an ordered message sequence."""

    def generate(
        self,
        messages: list[OracleMessage],
        response_format: ResponseFormat = "text",
    ) -> Any:
        ...


def to_langchain_messages(messages: list[OracleMessage]) -> list[BaseMessage]:
    """Convert oracle messages to LangChain message objects."""
    converted: list[BaseMessage] = []
    for message in messages:
        if message.role == "system":
            converted.append(SystemMessage(content=message.content))
        else:
            converted.append(HumanMessage(content=message.content))
    return converted


def from_langchain_messages(messages: list[BaseMessage]) -> list[OracleMessage]:
    """Convert rendered prompt messages to oracle messages."""
    converted = []
    for message in messages:
        role: Role = "system" if message.type == "system" else "user"
        converted.append(OracleMessage(role=role, content=str(message.content)))
    return converted


class OllamaOracle:
    """Generation oracle backed by a local Ollama server."""

    def __init__(self, settings: LLMSettings | None = None) -> None:
        self.settings = settings or get_llm_settings()
        self.calls_made = 0

    @property
    def model_name(self) -> str:
        return self.settings.model_name

    def generate(
        self,
        messages: list[OracleMessage],
        response_format: ResponseFormat = "text",
    ) -> Any:
        """Send messages and return text or a parsed JSON value.

        Raises:
            OracleTransportError: If the call fails or returns empty content.
            OracleSchemaError: If json_object content is not valid JSON.
        """
        retrying = Retrying(
            stop=stop_after_attempt(max(1, self.settings.max_attempts)),
            wait=wait_exponential(multiplier=1, min=2, max=30),
            retry=retry_if_exception_type(OracleTransportError),
            reraise=True,
        )
        content = retrying(self._invoke, messages, response_format == "json_object")

        if response_format == "text":
            return content

        try:
            return parse_json_response(content)
        except JSONExtractionError as e:
            raise OracleSchemaError(str(e)) from e

    def _invoke(self, messages: list[OracleMessage], json_mode: bool) -> str:
        llm = create_llm_client(self.settings, json_mode=json_mode)
        self.calls_made += 1

        logger.debug(
            "oracle_request",
            model=self.settings.model_name,
            json_mode=json_mode,
            message_count=len(messages),
        )

        try:
            response = llm.invoke(to_langchain_messages(messages))
        except Exception as e:
            logger.warning("oracle_transport_failed", model=self.settings.model_name, error=str(e))
            raise OracleTransportError(f"LLM call failed: {e}") from e

        if not response or not response.strip():
            raise OracleTransportError(f"LLM ({self.settings.model_name}) returned no content")

        logger.debug("oracle_response", model=self.settings.model_name, length=len(response))
        return response
