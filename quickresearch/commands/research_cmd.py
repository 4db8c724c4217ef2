"""CLI handlers for research commands."""

from __future__ import annotations

import asyncio
import json

import click

from quickresearch.commands._helpers import build_research_config, format_result, get_config
from quickresearch.infra.providers.registry import available_providers
from quickresearch.models.errors import ResearchError
from quickresearch.models.research import DEFAULT_MODELS
from quickresearch.services.research_service import ResearchService


def _run(coro):
    return asyncio.run(coro)


def _request_options(func):
    """Options shared by ``ask`` and ``session``."""
    options = [
        click.option("--provider", "-p", default="", help="LLM provider (openai, gemini)"),
        click.option("--model", "-m", default="", help="Model to use (provider default if empty)"),
        click.option(
            "--temperature", "-t", type=click.FloatRange(0.0, 1.0), default=None,
            help="Sampling temperature, 0 focused to 1 creative",
        ),
        click.option("--depth", "-d", type=click.IntRange(1, 5), default=None, help="Max research depth (1-5)"),
        click.option("--branches", "-b", type=click.IntRange(1, 5), default=None, help="Max research branches (1-5)"),
        click.option("--api-key", default="", help="Provider API key (defaults to the configured env var)"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group("research")
def research_group():
    """Ask research questions."""
    pass


@research_group.command("ask")
@click.argument("query")
@_request_options
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON")
@click.pass_context
def research_ask(
    ctx, query: str, provider: str, model: str, temperature: float | None,
    depth: int | None, branches: int | None, api_key: str, as_json: bool,
):
    """Answer a single research QUERY."""
    config = get_config(ctx)
    request = build_research_config(
        config, query, provider, model, temperature, depth, branches, api_key,
    )
    service = (ctx.obj or {}).get("service") or ResearchService()

    try:
        result = _run(service.perform_research(request))
    except ResearchError as e:
        click.echo(str(e), err=True)
        raise SystemExit(1) from e

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        click.echo(format_result(result))


def _show_history(service: ResearchService) -> None:
    click.echo()
    click.echo(format_result(service.history[0], expanded=True, index=0))
    if len(service.history) > 1:
        click.echo()
        click.echo("Earlier results:")
        for i, earlier in enumerate(service.history[1:], 1):
            click.echo(f"  {format_result(earlier, expanded=False, index=i)}")
    click.echo()


@research_group.command("session")
@_request_options
@click.pass_context
def research_session(
    ctx, provider: str, model: str, temperature: float | None,
    depth: int | None, branches: int | None, api_key: str,
):
    """Interactive research session.

    Enter a query to research it. ``:N`` researches follow-up question N of
    the latest result, ``:history N`` expands an earlier result, and an
    empty line or ``:quit`` exits.
    """
    config = get_config(ctx)
    service = (ctx.obj or {}).get("service") or ResearchService()
    base = None

    while True:
        line = click.prompt("query", default="", show_default=False).strip()
        if not line or line == ":quit":
            break

        if line.startswith(":history"):
            arg = line[len(":history"):].strip()
            if not service.history:
                click.echo("No results yet.")
            elif not arg:
                for i, earlier in enumerate(service.history):
                    click.echo(format_result(earlier, expanded=False, index=i))
            elif arg.isdigit() and int(arg) < len(service.history):
                click.echo(format_result(service.history[int(arg)], index=int(arg)))
            else:
                click.echo(f"No result at index {arg}", err=True)
            continue

        if line.startswith(":") and line[1:].isdigit():
            latest = service.latest
            n = int(line[1:])
            if latest is None or not 1 <= n <= len(latest.follow_up_questions):
                click.echo(f"No follow-up question {n}", err=True)
                continue
            line = latest.follow_up_questions[n - 1]
            click.echo(f"Researching: {line}")

        try:
            if base is None:
                base = build_research_config(
                    config, line, provider, model, temperature, depth, branches, api_key,
                )
                request = base
            else:
                request = base.with_query(line)
        except ValueError as e:
            click.echo(f"Invalid request: {e}", err=True)
            continue

        try:
            _run(service.perform_research(request))
        except ResearchError as e:
            click.echo(str(e), err=True)
            continue

        _show_history(service)


@research_group.command("providers")
@click.pass_context
def research_providers(ctx):
    """List available providers and their default models."""
    config = get_config(ctx)
    for name in available_providers():
        model = config.provider(name).default_model or DEFAULT_MODELS.get(name, "")
        click.echo(f"{name}: default model={model or '-'}")
