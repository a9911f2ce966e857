"""Unit tests for the Ollama-backed generation oracle."""

import pytest
from langchain_core.messages import HumanMessage, SystemMessage

from conceptgen.llm import oracle as oracle_module
from conceptgen.llm.client import LLMSettings
from conceptgen.llm.oracle import (
    OllamaOracle,
    OracleMessage,
    OracleSchemaError,
    OracleTransportError,
    from_langchain_messages,
    to_langchain_messages,
)


class FakeLLM:
    """Records invocations and replays canned outputs."""

    def __init__(self, outputs):
        self.outputs = list(outputs)
        self.received = []

    def invoke(self, messages):
        self.received.append(messages)
        output = self.outputs.pop(0)
        if isinstance(output, Exception):
            raise output
        return output


@pytest.fixture
def fake_llm(monkeypatch):
    """Patch the client factory and return a function that installs outputs."""
    created = {}

    def install(*outputs):
        llm = FakeLLM(outputs)

        def factory(settings=None, json_mode=False):
            created.setdefault("json_modes", []).append(json_mode)
            return llm

        monkeypatch.setattr(oracle_module, "create_llm_client", factory)
        created["llm"] = llm
        return created

    return install


MESSAGES = [
    OracleMessage(role="system", content="You are helpful."),
    OracleMessage(role="user", content="List concepts."),
]


class TestMessageConversion:
    """Tests for message conversion helpers."""

    def test_to_langchain_messages(self):
        converted = to_langchain_messages(MESSAGES)
        assert isinstance(converted[0], SystemMessage)
        assert isinstance(converted[1], HumanMessage)
        assert converted[1].content == "List concepts."

    def test_from_langchain_messages(self):
        converted = from_langchain_messages([SystemMessage(content="s"), HumanMessage(content="u")])
        assert converted == [OracleMessage("system", "s"), OracleMessage("user", "u")]


class TestOllamaOracle:
    """Tests for OllamaOracle."""

    def test_text_response(self, fake_llm):
        created = fake_llm("plain answer")
        oracle = OllamaOracle(LLMSettings(max_attempts=1))

        assert oracle.generate(MESSAGES) == "plain answer"
        assert created["json_modes"] == [False]
        assert oracle.calls_made == 1

    def test_json_response_parsed(self, fake_llm):
        created = fake_llm('```json\n{"concepts": []}\n```')
        oracle = OllamaOracle(LLMSettings(max_attempts=1))

        assert oracle.generate(MESSAGES, response_format="json_object") == {"concepts": []}
        assert created["json_modes"] == [True]

    def test_messages_sent_in_order(self, fake_llm):
        created = fake_llm("ok")
        OllamaOracle(LLMSettings(max_attempts=1)).generate(MESSAGES)

        sent = created["llm"].received[0]
        assert [m.type for m in sent] == ["system", "human"]

    def test_invalid_json_is_schema_error(self, fake_llm):
        fake_llm("no json here")
        oracle = OllamaOracle(LLMSettings(max_attempts=1))

        with pytest.raises(OracleSchemaError):
            oracle.generate(MESSAGES, response_format="json_object")

    def test_empty_content_is_transport_error(self, fake_llm):
        fake_llm("   ")
        oracle = OllamaOracle(LLMSettings(max_attempts=1))

        with pytest.raises(OracleTransportError):
            oracle.generate(MESSAGES)

    def test_client_failure_is_transport_error(self, fake_llm):
        fake_llm(ConnectionError("connection refused"))
        oracle = OllamaOracle(LLMSettings(max_attempts=1))

        with pytest.raises(OracleTransportError, match="connection refused"):
            oracle.generate(MESSAGES)

    def test_single_attempt_by_default(self, fake_llm):
        fake_llm(ConnectionError("down"), "never reached")
        oracle = OllamaOracle(LLMSettings(max_attempts=1))

        with pytest.raises(OracleTransportError):
            oracle.generate(MESSAGES)
        assert oracle.calls_made == 1

    def test_schema_errors_not_retried(self, fake_llm):
        fake_llm("not json", '{"a": 1}')
        oracle = OllamaOracle(LLMSettings(max_attempts=3))

        with pytest.raises(OracleSchemaError):
            oracle.generate(MESSAGES, response_format="json_object")
        assert oracle.calls_made == 1
