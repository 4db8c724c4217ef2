"""Research domain models."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum

from quickresearch.models.errors import ErrorKind, ResearchError


class ProviderType(str, Enum):
    OPENAI = "openai"
    GEMINI = "gemini"


DEFAULT_MODELS: dict[str, str] = {
    ProviderType.OPENAI.value: "gpt-4-0125-preview",
    ProviderType.GEMINI.value: "gemini-pro",
}

DEFAULT_TEMPERATURE = 0.7


@dataclass(frozen=True)
class ResearchConfig:
    """A single research request, built fresh per submission."""

    api_key: str = field(repr=False)
    query: str
    provider: str = ProviderType.OPENAI.value
    model: str = ""
    temperature: float | None = None
    # Accepted for multi-step research; no traversal uses them.
    max_depth: int = 3
    max_branches: int = 3

    def __post_init__(self) -> None:
        if not self.api_key:
            raise ValueError("API key cannot be empty")
        if not self.query or not self.query.strip():
            raise ValueError("Research query cannot be empty")
        if self.temperature is not None and not 0.0 <= self.temperature <= 1.0:
            raise ValueError("Temperature must be between 0.0 and 1.0")
        if not 1 <= self.max_depth <= 5:
            raise ValueError("max_depth must be between 1 and 5")
        if not 1 <= self.max_branches <= 5:
            raise ValueError("max_branches must be between 1 and 5")

    @property
    def provider_name(self) -> str:
        if isinstance(self.provider, ProviderType):
            return self.provider.value
        return self.provider

    def with_query(self, query: str) -> ResearchConfig:
        return replace(self, query=query)


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_str_list(value: object) -> bool:
    return isinstance(value, list) and all(isinstance(v, str) for v in value)


@dataclass(frozen=True)
class ResearchResult:
    """Normalized answer from a provider."""

    query: str
    answer: str
    follow_up_questions: tuple[str, ...] = ()
    confidence: float = 0.0
    sources: tuple[str, ...] | None = None

    @classmethod
    def from_payload(cls, query: str, payload: object, provider: str = "") -> ResearchResult:
        """Build a result from a decoded model object.

        The request's ``query`` always wins over any ``query`` key the model
        returned. Extra keys are ignored.
        """
        if not isinstance(payload, dict):
            raise ResearchError(
                ErrorKind.SCHEMA_VIOLATION,
                f"Model response must be a JSON object, got {type(payload).__name__}",
                provider,
            )

        problems = []
        if not isinstance(payload.get("answer"), str):
            problems.append("'answer' must be a string")
        if not _is_str_list(payload.get("followUpQuestions")):
            problems.append("'followUpQuestions' must be an array of strings")
        if not _is_number(payload.get("confidence")):
            problems.append("'confidence' must be a number")
        sources = payload.get("sources")
        if sources is not None and not _is_str_list(sources):
            problems.append("'sources' must be an array of strings")
        if problems:
            raise ResearchError(
                ErrorKind.SCHEMA_VIOLATION,
                "Model response does not match the research schema: " + "; ".join(problems),
                provider,
            )

        return cls(
            query=query,
            answer=payload["answer"],
            follow_up_questions=tuple(payload["followUpQuestions"]),
            confidence=float(payload["confidence"]),
            sources=tuple(sources) if sources is not None else None,
        )

    def to_dict(self) -> dict:
        d: dict = {
            "query": self.query,
            "answer": self.answer,
            "followUpQuestions": list(self.follow_up_questions),
            "confidence": self.confidence,
        }
        if self.sources is not None:
            d["sources"] = list(self.sources)
        return d
