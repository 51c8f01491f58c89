from types import SimpleNamespace

import pytest

from ytx import summarize as summarize_module
from ytx.config import Config
from ytx.errors import ConfigurationError, SummaryError
from ytx.summarize import (
    build_user_message,
    extract_anthropic_text,
    extract_openai_text,
    get_transcript_text,
    is_anthropic_model,
    summarize,
)


class FakeAnthropic:
    instances = []

    def __init__(self, api_key):
        self.api_key = api_key
        self.requests = []
        self.messages = SimpleNamespace(create=self._create)
        FakeAnthropic.instances.append(self)

    def _create(self, **params):
        self.requests.append(params)
        return SimpleNamespace(content=[
            SimpleNamespace(type="text", text="- point one\n"),
            SimpleNamespace(type="tool_use", text="ignored"),
            SimpleNamespace(type="text", text="- point two"),
        ])


class FakeOpenAI:
    instances = []

    def __init__(self, api_key, timeout):
        self.api_key = api_key
        self.requests = []
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))
        FakeOpenAI.instances.append(self)

    def _create(self, **params):
        self.requests.append(params)
        message = SimpleNamespace(content="A short summary.")
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


@pytest.fixture(autouse=True)
def fake_clients(monkeypatch):
    FakeAnthropic.instances = []
    FakeOpenAI.instances = []
    monkeypatch.setattr(summarize_module.anthropic, "Anthropic", FakeAnthropic)
    monkeypatch.setattr(summarize_module, "OpenAI", FakeOpenAI)


def test_transcript_text_and_prompt(sample_transcript):
    assert get_transcript_text(sample_transcript) == "Hello world This is a test"
    message = build_user_message(sample_transcript)
    assert '"Test Video"' in message
    assert message.endswith("Hello world This is a test")


def test_model_routing():
    assert is_anthropic_model("claude-sonnet-4-6")
    assert not is_anthropic_model("gpt-4o")


def test_summarize_with_claude(sample_transcript):
    summary = summarize(sample_transcript)

    assert summary == "- point one\n- point two"
    client = FakeAnthropic.instances[0]
    assert client.api_key == "sk-ant-test"
    request = client.requests[0]
    assert request["model"] == "claude-sonnet-4-6"
    assert request["max_tokens"] == 4096
    assert request["messages"][0]["role"] == "user"


def test_summarize_with_openai(sample_transcript):
    summary = summarize(sample_transcript, model="gpt-4o")

    assert summary == "A short summary."
    request = FakeOpenAI.instances[0].requests[0]
    assert request["model"] == "gpt-4o"
    assert [m["role"] for m in request["messages"]] == ["system", "user"]


def test_claude_without_key(monkeypatch, sample_transcript):
    monkeypatch.setattr(Config, "ANTHROPIC_API_KEY", "")
    with pytest.raises(ConfigurationError):
        summarize(sample_transcript)


def test_openai_without_key(monkeypatch, sample_transcript):
    monkeypatch.setattr(Config, "OPENAI_API_KEY", "")
    with pytest.raises(ConfigurationError):
        summarize(sample_transcript, model="gpt-4o-mini")


def test_empty_responses_are_errors():
    with pytest.raises(SummaryError):
        extract_anthropic_text(SimpleNamespace(content=[]))
    with pytest.raises(SummaryError):
        extract_openai_text(SimpleNamespace(choices=[]))
