"""Provider adapter protocol definition."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from quickresearch.models.research import ResearchConfig, ResearchResult


@runtime_checkable
class ProviderAdapter(Protocol):
    """Protocol for LLM provider adapters.

    An adapter issues exactly one API call per ``run`` and normalizes the
    provider's response into a ResearchResult. Failures are raised as
    ResearchError.
    """

    async def run(self, config: ResearchConfig) -> ResearchResult:
        """Answer ``config.query`` using the provider."""
        ...
