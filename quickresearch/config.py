"""Configuration loading: TOML file + environment variable overlay."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore[no-redef]


DEFAULT_CONFIG_DIR = Path.home() / ".config" / "quickresearch"
DEFAULT_CONFIG_PATH = DEFAULT_CONFIG_DIR / "config.toml"


DEFAULT_CONFIG_TOML = """\
[providers.openai]
api_key_env = "OPENAI_API_KEY"
default_model = "gpt-4-0125-preview"

[providers.gemini]
api_key_env = "GEMINI_API_KEY"
default_model = "gemini-pro"

[research]
default_provider = "openai"
# temperature = 0.7  # unset: OpenAI uses its own default, Gemini uses 0.7
max_depth = 3
max_branches = 3
"""


@dataclass
class ProviderConfig:
    api_key_env: str = ""
    api_key: str = ""
    default_model: str = ""


@dataclass
class ResearchDefaults:
    default_provider: str = "openai"
    temperature: float | None = None
    max_depth: int = 3
    max_branches: int = 3


@dataclass
class AppConfig:
    providers: dict[str, ProviderConfig] = field(default_factory=dict)
    research: ResearchDefaults = field(default_factory=ResearchDefaults)
    config_path: Path = DEFAULT_CONFIG_PATH

    def provider(self, name: str) -> ProviderConfig:
        """Return the named provider's config, or an empty one."""
        return self.providers.get(name) or ProviderConfig()


def _env_overlay(config: AppConfig) -> None:
    """Override config values with environment variables where applicable."""
    if provider := os.environ.get("QUICKRESEARCH_PROVIDER"):
        config.research.default_provider = provider

    # Resolve API keys from env vars
    for prov in config.providers.values():
        if prov.api_key_env:
            prov.api_key = os.environ.get(prov.api_key_env, "")


def _parse_provider(data: dict) -> ProviderConfig:
    return ProviderConfig(
        api_key_env=data.get("api_key_env", ""),
        default_model=data.get("default_model", ""),
    )


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load configuration from TOML file with env var overlay."""
    path = config_path or DEFAULT_CONFIG_PATH

    if path.exists():
        with open(path, "rb") as f:
            raw = tomllib.load(f)
    else:
        raw = tomllib.loads(DEFAULT_CONFIG_TOML)

    providers_raw = raw.get("providers", {})
    research_raw = raw.get("research", {})

    config = AppConfig(
        providers={name: _parse_provider(data) for name, data in providers_raw.items()},
        research=ResearchDefaults(
            default_provider=research_raw.get("default_provider", "openai"),
            temperature=research_raw.get("temperature"),
            max_depth=research_raw.get("max_depth", 3),
            max_branches=research_raw.get("max_branches", 3),
        ),
        config_path=path,
    )

    _env_overlay(config)
    return config


def init_config(config_path: Path | None = None) -> Path:
    """Create default config file."""
    path = config_path or DEFAULT_CONFIG_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(DEFAULT_CONFIG_TOML)
    return path
