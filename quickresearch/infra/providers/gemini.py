"""Gemini provider adapter using httpx against the generateContent REST API."""

from __future__ import annotations

import json
import logging

import httpx

from quickresearch.models.errors import ErrorKind, ResearchError, extract_error_message
from quickresearch.models.research import (
    DEFAULT_MODELS,
    DEFAULT_TEMPERATURE,
    ProviderType,
    ResearchConfig,
    ResearchResult,
)

logger = logging.getLogger(__name__)

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_MODEL = DEFAULT_MODELS[ProviderType.GEMINI.value]
ERROR_PREFIX = "Gemini API Error: "

TOP_P = 0.95
TOP_K = 40

SAFETY_SETTINGS = [
    {"category": category, "threshold": "BLOCK_MEDIUM_AND_ABOVE"}
    for category in (
        "HARM_CATEGORY_HARASSMENT",
        "HARM_CATEGORY_HATE_SPEECH",
        "HARM_CATEGORY_SEXUALLY_EXPLICIT",
        "HARM_CATEGORY_DANGEROUS_CONTENT",
    )
]

# Finish reasons for which a candidate carries no usable text.
BLOCKED_FINISH_REASONS = frozenset({
    "SAFETY",
    "RECITATION",
    "LANGUAGE",
    "BLOCKLIST",
    "PROHIBITED_CONTENT",
    "SPII",
    "OTHER",
})

SYSTEM_PROMPT = """You are a research assistant. Your task is to:
1. Analyze the query deeply
2. Provide a comprehensive answer
3. Generate relevant follow-up questions
4. Format your response as JSON with this structure:
{
  "answer": "your detailed answer",
  "followUpQuestions": ["question 1", "question 2", "question 3"],
  "confidence": 0.95
}"""


class GeminiAdapter:
    """Research adapter for Google's Gemini generateContent endpoint.

    Gemini gets no structured-output constraint here: the prompt asks for a
    bare JSON object and the whole text body must parse as one.
    """

    provider = ProviderType.GEMINI.value

    def __init__(
        self,
        base_url: str = GEMINI_BASE_URL,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 120.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._transport = transport
        self._timeout = timeout

    def _fail(self, kind: ErrorKind, detail: str) -> ResearchError:
        return ResearchError(kind, f"{ERROR_PREFIX}{detail}", self.provider)

    @staticmethod
    def build_prompt(query: str) -> str:
        return f"{SYSTEM_PROMPT}\n\nQuery: {query}"

    def build_payload(self, config: ResearchConfig) -> dict:
        temperature = config.temperature if config.temperature is not None else DEFAULT_TEMPERATURE
        return {
            "contents": [
                {"role": "user", "parts": [{"text": self.build_prompt(config.query)}]},
            ],
            "generationConfig": {
                "temperature": temperature,
                "topP": TOP_P,
                "topK": TOP_K,
            },
            "safetySettings": SAFETY_SETTINGS,
        }

    def _classify_status(self, response: httpx.Response) -> ResearchError:
        try:
            body = response.json()
        except ValueError:
            body = None

        message = ""
        if isinstance(body, dict):
            err = body.get("error")
            if isinstance(err, dict):
                message = str(err.get("message", ""))
        if not message:
            message = f"HTTP {response.status_code}: {response.reason_phrase}"

        if response.status_code in (401, 403) or (
            response.status_code == 400 and "API key" in message
        ):
            return self._fail(ErrorKind.AUTH, message)
        return self._fail(ErrorKind.TRANSPORT, message)

    def _malformed(self, what: str) -> ResearchError:
        return self._fail(ErrorKind.MALFORMED_RESPONSE, f"Unexpected Gemini response shape: {what}")

    def _extract_text(self, data: object) -> str:
        """Return the candidate text, mirroring the SDK's ``response.text()``."""
        if not isinstance(data, dict):
            raise self._malformed(f"expected a JSON object, got {type(data).__name__}")

        candidates = data.get("candidates") or []
        if not isinstance(candidates, list):
            raise self._malformed("'candidates' is not a list")
        if not candidates:
            feedback = data.get("promptFeedback")
            block_reason = feedback.get("blockReason") if isinstance(feedback, dict) else None
            if block_reason:
                raise self._fail(
                    ErrorKind.MALFORMED_RESPONSE,
                    f"Text not available. Response was blocked due to {block_reason}",
                )
            return ""

        candidate = candidates[0]
        if not isinstance(candidate, dict):
            raise self._malformed("candidate is not an object")
        finish_reason = candidate.get("finishReason")
        if finish_reason in BLOCKED_FINISH_REASONS:
            raise self._fail(
                ErrorKind.MALFORMED_RESPONSE,
                f"Candidate was blocked due to {finish_reason}",
            )

        content = candidate.get("content") or {}
        parts = content.get("parts") if isinstance(content, dict) else None
        parts = parts or []
        if not isinstance(parts, list) or not all(isinstance(part, dict) for part in parts):
            raise self._malformed("content parts are not objects")
        return "".join(str(part.get("text", "")) for part in parts)

    async def run(self, config: ResearchConfig) -> ResearchResult:
        """Issue one generateContent call and parse its text as JSON."""
        model = config.model or DEFAULT_MODEL
        payload = self.build_payload(config)

        logger.debug("Sending request to Gemini with model: %s", model)
        try:
            async with httpx.AsyncClient(
                base_url=self._base_url,
                headers={
                    "x-goog-api-key": config.api_key,
                    "Content-Type": "application/json",
                },
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                response = await client.post(f"/models/{model}:generateContent", json=payload)
        except httpx.HTTPError as e:
            raise self._fail(ErrorKind.TRANSPORT, extract_error_message(e)) from e

        logger.debug("Gemini response status: %s", response.status_code)
        if response.is_error:
            raise self._classify_status(response)

        try:
            data = response.json()
        except ValueError as e:
            raise self._fail(ErrorKind.MALFORMED_RESPONSE, "Gemini returned a non-JSON body") from e

        text = self._extract_text(data)
        try:
            parsed = json.loads(text)
        except json.JSONDecodeError as e:
            raise self._fail(
                ErrorKind.MALFORMED_RESPONSE,
                "Failed to parse Gemini response. The model did not return valid JSON.",
            ) from e

        try:
            return ResearchResult.from_payload(config.query, parsed, self.provider)
        except ResearchError as e:
            raise self._fail(e.kind, e.detail) from e
