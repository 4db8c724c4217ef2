"""Research service: single-shot provider dispatch and result history."""

from __future__ import annotations

import logging

from quickresearch.infra.providers.registry import get_adapter
from quickresearch.models.errors import ErrorKind, ResearchError, extract_error_message
from quickresearch.models.research import DEFAULT_MODELS, ResearchConfig, ResearchResult

logger = logging.getLogger(__name__)


async def perform_research(
    config: ResearchConfig,
    adapter_kwargs: dict[str, dict] | None = None,
) -> ResearchResult:
    """Run one research request against the configured provider.

    ``adapter_kwargs`` maps a provider name to constructor kwargs for its
    adapter (e.g. ``{"gemini": {"transport": ...}}``).

    Every failure surfaces as a ResearchError whose message starts with
    ``API Error:``. Nothing is retried.
    """
    provider = config.provider_name
    model = config.model or DEFAULT_MODELS.get(provider, "")

    logger.info("Running research via %s (model=%s)", provider, model)
    try:
        adapter = get_adapter(provider, **(adapter_kwargs or {}).get(provider, {}))
        result = await adapter.run(config)
    except ResearchError as e:
        logger.warning("Research via %s failed [%s]: %s", provider, e.kind.value, e.detail)
        raise
    except Exception as e:
        logger.warning("Research via %s failed unexpectedly: %s", provider, e)
        raise ResearchError(ErrorKind.UNEXPECTED, extract_error_message(e), provider) from e

    logger.debug(
        "Research via %s returned %d follow-up questions (confidence=%s)",
        provider, len(result.follow_up_questions), result.confidence,
    )
    return result


class ResearchService:
    """Caller-side wrapper that keeps every result of the session.

    History is newest first and never evicted.
    """

    def __init__(self, adapter_kwargs: dict[str, dict] | None = None) -> None:
        self._adapter_kwargs = adapter_kwargs or {}
        self.history: list[ResearchResult] = []

    @property
    def latest(self) -> ResearchResult | None:
        return self.history[0] if self.history else None

    async def perform_research(self, config: ResearchConfig) -> ResearchResult:
        result = await perform_research(config, self._adapter_kwargs)
        self.history.insert(0, result)
        return result

    def clear_history(self) -> None:
        self.history.clear()
