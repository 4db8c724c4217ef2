"""OpenAI provider adapter using the openai SDK."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable

import openai

from quickresearch.models.errors import ErrorKind, ResearchError, extract_error_message
from quickresearch.models.research import DEFAULT_MODELS, ProviderType, ResearchConfig, ResearchResult

logger = logging.getLogger(__name__)

DEFAULT_MODEL = DEFAULT_MODELS[ProviderType.OPENAI.value]
FUNCTION_NAME = "provide_research_response"

SYSTEM_PROMPT = (
    "You are a research assistant. Analyze the query deeply and provide a "
    "comprehensive answer with follow-up questions for deeper exploration."
)

RESEARCH_FUNCTION = {
    "name": FUNCTION_NAME,
    "parameters": {
        "type": "object",
        "properties": {
            "answer": {"type": "string"},
            "followUpQuestions": {"type": "array", "items": {"type": "string"}},
            "confidence": {"type": "number"},
        },
        "required": ["answer", "followUpQuestions", "confidence"],
    },
}


def _default_client_factory(api_key: str) -> openai.AsyncOpenAI:
    return openai.AsyncOpenAI(api_key=api_key)


class OpenAIAdapter:
    """Research adapter for the OpenAI chat-completions API.

    Forces a single function call so the model's answer arrives as
    schema-shaped JSON arguments instead of free text.
    """

    provider = ProviderType.OPENAI.value

    def __init__(
        self,
        client_factory: Callable[[str], openai.AsyncOpenAI] | None = None,
    ) -> None:
        self._client_factory = client_factory or _default_client_factory

    def _build_request(self, config: ResearchConfig) -> dict:
        kwargs: dict = {
            "model": config.model or DEFAULT_MODEL,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": config.query},
            ],
            "functions": [RESEARCH_FUNCTION],
            "function_call": {"name": FUNCTION_NAME},
        }
        if config.temperature is not None:
            kwargs["temperature"] = config.temperature
        return kwargs

    async def run(self, config: ResearchConfig) -> ResearchResult:
        """Issue one forced function-call completion and parse its arguments."""
        client = self._client_factory(config.api_key)
        kwargs = self._build_request(config)

        logger.debug("Sending OpenAI request with model: %s", kwargs["model"])
        try:
            async with client:
                response = await client.chat.completions.create(**kwargs)
        except (openai.AuthenticationError, openai.PermissionDeniedError) as e:
            raise ResearchError(ErrorKind.AUTH, extract_error_message(e), self.provider) from e
        except openai.APIError as e:
            raise ResearchError(ErrorKind.TRANSPORT, extract_error_message(e), self.provider) from e

        function_call = response.choices[0].message.function_call if response.choices else None
        if not function_call:
            raise ResearchError(
                ErrorKind.MALFORMED_RESPONSE, "No response received from the model", self.provider
            )

        try:
            payload = json.loads(function_call.arguments)
        except (json.JSONDecodeError, TypeError) as e:
            raise ResearchError(
                ErrorKind.MALFORMED_RESPONSE, "Failed to parse model response", self.provider
            ) from e

        logger.debug("OpenAI function call parsed, keys: %s", sorted(payload) if isinstance(payload, dict) else "-")
        return ResearchResult.from_payload(config.query, payload, self.provider)
