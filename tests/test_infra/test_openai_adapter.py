"""Tests for the OpenAI adapter with a mocked SDK client."""

from __future__ import annotations

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock

import httpx
import openai
import pytest

from quickresearch.infra.providers.openai import DEFAULT_MODEL, FUNCTION_NAME, OpenAIAdapter
from quickresearch.models.errors import ErrorKind, ResearchError
from quickresearch.models.research import ResearchConfig

OPENAI_URL = "https://api.openai.com/v1/chat/completions"


def _completion(function_call=None):
    message = SimpleNamespace(content=None, function_call=function_call)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _function_call(arguments: str):
    return SimpleNamespace(name=FUNCTION_NAME, arguments=arguments)


@pytest.fixture
def client():
    return AsyncMock()


@pytest.fixture
def factory_keys():
    return []


@pytest.fixture
def adapter(client, factory_keys):
    def factory(api_key):
        factory_keys.append(api_key)
        return client

    return OpenAIAdapter(client_factory=factory)


@pytest.fixture
def config():
    return ResearchConfig(api_key="sk-test", query="How do vaccines work?", provider="openai")


class TestOpenAIAdapter:
    @pytest.mark.asyncio
    async def test_run_success(self, adapter, client, config, factory_keys):
        args = {"answer": "They train the immune system.", "followUpQuestions": ["What is mRNA?"], "confidence": 0.8}
        client.chat.completions.create.return_value = _completion(_function_call(json.dumps(args)))

        result = await adapter.run(config)

        assert result.query == "How do vaccines work?"
        assert result.answer == "They train the immune system."
        assert result.follow_up_questions == ("What is mRNA?",)
        assert result.confidence == 0.8
        assert factory_keys == ["sk-test"]
        client.__aexit__.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_request_shape(self, adapter, client, config):
        args = {"answer": "a", "followUpQuestions": [], "confidence": 0.5}
        client.chat.completions.create.return_value = _completion(_function_call(json.dumps(args)))

        await adapter.run(config)

        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == DEFAULT_MODEL == "gpt-4-0125-preview"
        assert kwargs["messages"][0]["role"] == "system"
        assert "research assistant" in kwargs["messages"][0]["content"]
        assert kwargs["messages"][1] == {"role": "user", "content": "How do vaccines work?"}
        assert kwargs["function_call"] == {"name": FUNCTION_NAME}
        (function,) = kwargs["functions"]
        assert function["parameters"]["required"] == ["answer", "followUpQuestions", "confidence"]
        assert "temperature" not in kwargs

    @pytest.mark.asyncio
    async def test_model_and_temperature_forwarded(self, adapter, client):
        config = ResearchConfig(api_key="k", query="q", model="gpt-4o", temperature=0.0)
        args = {"answer": "a", "followUpQuestions": [], "confidence": 0.5}
        client.chat.completions.create.return_value = _completion(_function_call(json.dumps(args)))

        await adapter.run(config)

        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o"
        assert kwargs["temperature"] == 0.0

    @pytest.mark.asyncio
    async def test_query_echo_wins_over_payload(self, adapter, client, config):
        args = {"query": "something else", "answer": "a", "followUpQuestions": [], "confidence": 0.5}
        client.chat.completions.create.return_value = _completion(_function_call(json.dumps(args)))

        result = await adapter.run(config)
        assert result.query == config.query

    @pytest.mark.asyncio
    async def test_missing_function_call(self, adapter, client, config):
        client.chat.completions.create.return_value = _completion(None)

        with pytest.raises(ResearchError) as exc_info:
            await adapter.run(config)
        assert exc_info.value.kind == ErrorKind.MALFORMED_RESPONSE
        assert str(exc_info.value) == "API Error: No response received from the model"

    @pytest.mark.asyncio
    async def test_invalid_arguments_json(self, adapter, client, config):
        client.chat.completions.create.return_value = _completion(_function_call("{not json"))

        with pytest.raises(ResearchError, match="Failed to parse model response") as exc_info:
            await adapter.run(config)
        assert exc_info.value.kind == ErrorKind.MALFORMED_RESPONSE

    @pytest.mark.asyncio
    async def test_schema_violation(self, adapter, client, config):
        client.chat.completions.create.return_value = _completion(
            _function_call(json.dumps({"answer": "a"}))
        )

        with pytest.raises(ResearchError) as exc_info:
            await adapter.run(config)
        assert exc_info.value.kind == ErrorKind.SCHEMA_VIOLATION

    @pytest.mark.asyncio
    async def test_auth_error(self, adapter, client, config):
        response = httpx.Response(401, request=httpx.Request("POST", OPENAI_URL))
        client.chat.completions.create.side_effect = openai.AuthenticationError(
            "Error code: 401", response=response,
            body={"message": "Incorrect API key provided", "type": "invalid_request_error"},
        )

        with pytest.raises(ResearchError) as exc_info:
            await adapter.run(config)
        assert exc_info.value.kind == ErrorKind.AUTH
        assert str(exc_info.value) == "API Error: Incorrect API key provided"
        client.__aexit__.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_connection_error(self, adapter, client, config):
        client.chat.completions.create.side_effect = openai.APIConnectionError(
            request=httpx.Request("POST", OPENAI_URL)
        )

        with pytest.raises(ResearchError) as exc_info:
            await adapter.run(config)
        assert exc_info.value.kind == ErrorKind.TRANSPORT
        assert exc_info.value.retryable
