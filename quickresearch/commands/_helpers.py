"""CLI helpers for building research requests from options and config."""

from __future__ import annotations

import click

from quickresearch.config import AppConfig, load_config
from quickresearch.infra.providers.registry import available_providers
from quickresearch.models.research import ResearchConfig, ResearchResult


def get_config(ctx: click.Context) -> AppConfig:
    """Load config from the path given to the root command, if any."""
    obj = ctx.find_root().obj or {}
    return load_config(obj.get("config_path"))


def resolve_api_key(config: AppConfig, provider: str, api_key: str) -> str:
    """Pick the API key: explicit option, then env-backed config, then prompt."""
    if api_key:
        return api_key
    if resolved := config.provider(provider).api_key:
        return resolved
    return click.prompt(f"{provider} API key", hide_input=True)


def build_research_config(
    config: AppConfig,
    query: str,
    provider: str,
    model: str,
    temperature: float | None,
    depth: int | None,
    branches: int | None,
    api_key: str,
) -> ResearchConfig:
    """Build a ResearchConfig, filling unset options from config defaults."""
    provider = (provider or config.research.default_provider).lower()
    if provider not in available_providers():
        raise click.UsageError(
            f"Unknown provider: {provider} (choose from {', '.join(available_providers())})"
        )
    try:
        return ResearchConfig(
            api_key=resolve_api_key(config, provider, api_key),
            query=query,
            provider=provider,
            model=model or config.provider(provider).default_model,
            temperature=temperature if temperature is not None else config.research.temperature,
            max_depth=depth if depth is not None else config.research.max_depth,
            max_branches=branches if branches is not None else config.research.max_branches,
        )
    except ValueError as e:
        raise click.UsageError(str(e)) from e


def format_result(result: ResearchResult, expanded: bool = True, index: int | None = None) -> str:
    """Render a result as text; collapsed results are a single header line."""
    marker = f"[{index}] " if index is not None else ""
    header = f"{marker}{result.query}  (confidence {result.confidence:.0%})"
    if not expanded:
        return header

    lines = [header, "", result.answer]
    if result.follow_up_questions:
        lines.append("")
        lines.append("Follow-up questions:")
        for i, question in enumerate(result.follow_up_questions, 1):
            lines.append(f"  {i}. {question}")
    if result.sources:
        lines.append("")
        lines.append("Sources:")
        lines.extend(f"  - {source}" for source in result.sources)
    return "\n".join(lines)
