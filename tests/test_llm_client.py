"""Tests for the provider clients, with the SDK clients replaced by mocks."""

import json
from unittest.mock import MagicMock

import anthropic
import httpx
import openai
import pytest

from veritas.exceptions import AnalysisTimeoutError, ConfigError, ModelError, ModelFailure
from veritas.llm_client import (
    AnthropicClient,
    LLMClient,
    LLMProvider,
    OpenAIClient,
    classify_sdk_error,
    parse_json_text,
)
from veritas.schemas import GenerationOptions

from conftest import VALID_RESULT

SCHEMA = {"type": "object", "properties": {"verdict": {"type": "string"}}}
REQUEST = httpx.Request("POST", "https://api.example/v1")


def status_error(sdk_class, status: int, message: str):
    return sdk_class(message, response=httpx.Response(status, request=REQUEST), body=None)


def openai_reply(content):
    response = MagicMock()
    response.choices[0].message.content = content
    response.choices[0].message.refusal = None
    return response


def content_block(block_type: str, text: str = "") -> MagicMock:
    block = MagicMock()
    block.type = block_type
    block.text = text
    return block


@pytest.fixture
def openai_client():
    """An OpenAIClient whose chat.completions.create is a MagicMock."""
    client = OpenAIClient(api_key="sk-test")
    client.client = MagicMock()
    create = client.client.chat.completions.create
    create.return_value = openai_reply(json.dumps(VALID_RESULT))
    return client, create


@pytest.fixture
def anthropic_client():
    """An AnthropicClient whose messages.create returns a grounded reply."""
    client = AnthropicClient(api_key="sk-ant-test", max_searches=3)
    client.client = MagicMock()
    create = client.client.messages.create
    create.return_value = MagicMock(content=[
        content_block("server_tool_use"),
        content_block("text", "Here is my assessment:\n"),
        content_block("text", json.dumps(VALID_RESULT)),
    ])
    return client, create


# --- parse_json_text ---

def test_parse_plain_json():
    assert parse_json_text('{"a": 1}', "openai") == {"a": 1}


def test_parse_fenced_json():
    assert parse_json_text('```json\n{"a": 1}\n```', "openai") == {"a": 1}
    assert parse_json_text('```\n{"a": 1}\n```', "openai") == {"a": 1}


def test_parse_json_after_preamble():
    assert parse_json_text('Sure, here it is: {"a": {"b": 2}} Hope that helps.', "anthropic") == {
        "a": {"b": 2}
    }


@pytest.mark.parametrize("text", ["", "no json here", "{broken", "[1, 2, 3]", '"just a string"'])
def test_parse_rejects_non_objects(text):
    with pytest.raises(ModelError) as exc_info:
        parse_json_text(text, "openai")
    assert exc_info.value.kind == ModelFailure.SCHEMA_VIOLATION


# --- classify_sdk_error ---

class FakeSDK:
    class APITimeoutError(Exception):
        pass

    class AuthenticationError(Exception):
        pass

    class PermissionDeniedError(Exception):
        pass

    class RateLimitError(Exception):
        pass


@pytest.mark.parametrize(
    "error, kind",
    [
        (FakeSDK.AuthenticationError("bad key"), ModelFailure.AUTH),
        (FakeSDK.PermissionDeniedError("no access"), ModelFailure.AUTH),
        (FakeSDK.RateLimitError("slow down"), ModelFailure.RATE_LIMIT),
        (RuntimeError("You exceeded your current quota"), ModelFailure.RATE_LIMIT),
        (RuntimeError("Rate limit reached for requests"), ModelFailure.RATE_LIMIT),
        (RuntimeError("upstream exploded"), ModelFailure.BACKEND_FAILURE),
    ],
)
def test_classify_sdk_error(error, kind):
    classified = classify_sdk_error(FakeSDK, error, "openai")

    assert isinstance(classified, ModelError)
    assert classified.kind == kind
    assert classified.provider == "openai"


def test_classify_timeout():
    classified = classify_sdk_error(FakeSDK, FakeSDK.APITimeoutError(), "anthropic")

    assert isinstance(classified, AnalysisTimeoutError)
    assert classified.stage == "model"


# --- OpenAI ---

def test_openai_requires_key(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    with pytest.raises(ConfigError):
        OpenAIClient()


def test_openai_sends_schema_and_sampling(openai_client):
    client, create = openai_client

    result = client.generate("the prompt", SCHEMA, GenerationOptions())

    assert result == VALID_RESULT
    kwargs = create.call_args.kwargs
    assert kwargs["model"] == "gpt-4o"
    assert kwargs["messages"] == [{"role": "user", "content": "the prompt"}]
    assert kwargs["temperature"] == 0.1
    assert kwargs["max_tokens"] == 4000
    assert kwargs["response_format"] == {
        "type": "json_schema",
        "json_schema": {"name": "analysis_result", "schema": SCHEMA},
    }
    assert "tools" not in kwargs


def test_openai_empty_content_is_schema_violation(openai_client):
    client, create = openai_client
    create.return_value = openai_reply(None)

    with pytest.raises(ModelError) as exc_info:
        client.generate("prompt", SCHEMA, GenerationOptions())
    assert exc_info.value.kind == ModelFailure.SCHEMA_VIOLATION


@pytest.mark.parametrize(
    "error, kind",
    [
        (status_error(openai.AuthenticationError, 401, "Incorrect API key"), ModelFailure.AUTH),
        (status_error(openai.RateLimitError, 429, "Too many requests"), ModelFailure.RATE_LIMIT),
        (status_error(openai.InternalServerError, 500, "Server error"), ModelFailure.BACKEND_FAILURE),
        (openai.APIConnectionError(request=REQUEST), ModelFailure.BACKEND_FAILURE),
    ],
)
def test_openai_sdk_errors_are_classified(openai_client, error, kind):
    client, create = openai_client
    create.side_effect = error

    with pytest.raises(ModelError) as exc_info:
        client.generate("prompt", SCHEMA, GenerationOptions())
    assert exc_info.value.kind == kind
    assert exc_info.value.__cause__ is error


def test_openai_timeout(openai_client):
    client, create = openai_client
    create.side_effect = openai.APITimeoutError(request=REQUEST)

    with pytest.raises(AnalysisTimeoutError) as exc_info:
        client.generate("prompt", SCHEMA, GenerationOptions())
    assert exc_info.value.stage == "model"


# --- Anthropic ---

def test_anthropic_requires_key(monkeypatch):
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    with pytest.raises(ConfigError):
        AnthropicClient()


def test_anthropic_grounding_adds_web_search(anthropic_client):
    client, create = anthropic_client

    result = client.generate("the prompt", SCHEMA, GenerationOptions())

    assert result == VALID_RESULT
    kwargs = create.call_args.kwargs
    assert kwargs["temperature"] == 0.1
    assert kwargs["max_tokens"] == 4000
    assert kwargs["tools"] == [{"type": "web_search_20250305", "name": "web_search", "max_uses": 3}]
    content = kwargs["messages"][0]["content"]
    assert content.startswith("the prompt")
    assert '"verdict"' in content


def test_anthropic_without_grounding_sends_no_tools(anthropic_client):
    client, create = anthropic_client

    client.generate("prompt", SCHEMA, GenerationOptions(grounding_enabled=False))

    assert "tools" not in create.call_args.kwargs


@pytest.mark.parametrize(
    "error, kind",
    [
        (status_error(anthropic.AuthenticationError, 401, "invalid x-api-key"), ModelFailure.AUTH),
        (status_error(anthropic.PermissionDeniedError, 403, "forbidden"), ModelFailure.AUTH),
        (status_error(anthropic.RateLimitError, 429, "rate_limit_error"), ModelFailure.RATE_LIMIT),
        (status_error(anthropic.InternalServerError, 529, "overloaded"), ModelFailure.BACKEND_FAILURE),
    ],
)
def test_anthropic_sdk_errors_are_classified(anthropic_client, error, kind):
    client, create = anthropic_client
    create.side_effect = error

    with pytest.raises(ModelError) as exc_info:
        client.generate("prompt", SCHEMA, GenerationOptions())
    assert exc_info.value.kind == kind


def test_anthropic_timeout(anthropic_client):
    client, create = anthropic_client
    create.side_effect = anthropic.APITimeoutError(request=REQUEST)

    with pytest.raises(AnalysisTimeoutError):
        client.generate("prompt", SCHEMA, GenerationOptions())


# --- factory ---

def test_factory_builds_requested_provider():
    client = LLMClient.create(provider=LLMProvider.ANTHROPIC, api_key="k", model="claude-test")

    assert isinstance(client, AnthropicClient)
    assert client.model == "claude-test"


def test_factory_reads_provider_from_env(monkeypatch):
    monkeypatch.setenv("LLM_PROVIDER", "bogus")

    assert isinstance(LLMClient.create(api_key="k"), OpenAIClient)
