"""Provider adapter factory/registry."""

from __future__ import annotations

from quickresearch.infra.providers.base import ProviderAdapter
from quickresearch.infra.providers.gemini import GeminiAdapter
from quickresearch.infra.providers.openai import OpenAIAdapter
from quickresearch.models.research import ProviderType

_ADAPTERS: dict[str, type] = {
    ProviderType.OPENAI.value: OpenAIAdapter,
    ProviderType.GEMINI.value: GeminiAdapter,
}


def _name(provider: ProviderType | str) -> str:
    if isinstance(provider, ProviderType):
        return provider.value
    return str(provider).lower()


def register_adapter(provider: ProviderType | str, cls: type) -> None:
    """Register (or replace) the adapter class used for a provider name."""
    _ADAPTERS[_name(provider)] = cls


def available_providers() -> list[str]:
    return sorted(_ADAPTERS)


def get_adapter(provider: ProviderType | str, **kwargs) -> ProviderAdapter:
    """Get an adapter instance by provider name.

    Extra kwargs are forwarded to the adapter constructor
    (e.g. ``transport`` for GeminiAdapter).
    """
    cls = _ADAPTERS.get(_name(provider))
    if cls is None:
        raise ValueError(f"Unknown provider: {provider}")
    return cls(**kwargs)
