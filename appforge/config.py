"""Configuration loading: TOML file + environment variable overlay."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore[no-redef]


DEFAULT_CONFIG_DIR = Path.home() / ".config" / "appforge"
DEFAULT_CONFIG_PATH = DEFAULT_CONFIG_DIR / "config.toml"


DEFAULT_CONFIG_TOML = """\
[mongodb]
uri = "mongodb://localhost:27017"
database = "appforge"

[providers.anthropic]
api_key_env = "ANTHROPIC_API_KEY"
default_model = "claude-sonnet-4-20250514"

[providers.openrouter]
api_key_env = "OPENROUTER_API_KEY"
default_model = "openai/gpt-4.1"

[agent]
provider = "openrouter"
model = "openai/gpt-4.1"
temperature = 0.1
max_tokens = 8192
max_iterations = 12
history_limit = 6

[summarizer]
provider = "openrouter"
model = "google/gemini-flash-1.5-8b"

[sandbox]
template = "caffeine"
timeout = 1800
port = 3000
command_timeout = 300
api_key_env = "E2B_API_KEY"

[jobs]
max_attempts = 3
retry_base_delay = 1.0
"""


@dataclass
class MongoConfig:
    uri: str = "mongodb://localhost:27017"
    database: str = "appforge"


@dataclass
class ProviderConfig:
    api_key_env: str = ""
    api_key: str = ""
    default_model: str = ""
    base_url: str = ""


@dataclass
class AgentConfig:
    provider: str = "openrouter"
    model: str = "openai/gpt-4.1"
    temperature: float = 0.1
    max_tokens: int = 8192
    max_iterations: int = 12
    history_limit: int = 6
    provider_order: list[str] = field(default_factory=list)


@dataclass
class SummarizerConfig:
    provider: str = "openrouter"
    model: str = "google/gemini-flash-1.5-8b"
    max_tokens: int = 1024


@dataclass
class SandboxConfig:
    template: str = "caffeine"
    timeout: int = 1800  # seconds until the sandbox expires on its own
    port: int = 3000
    command_timeout: int = 300
    api_key_env: str = "E2B_API_KEY"
    api_key: str = ""


@dataclass
class JobsConfig:
    max_attempts: int = 3
    retry_base_delay: float = 1.0


@dataclass
class AppConfig:
    mongodb: MongoConfig = field(default_factory=MongoConfig)
    providers: dict[str, ProviderConfig] = field(default_factory=dict)
    agent: AgentConfig = field(default_factory=AgentConfig)
    summarizer: SummarizerConfig = field(default_factory=SummarizerConfig)
    sandbox: SandboxConfig = field(default_factory=SandboxConfig)
    jobs: JobsConfig = field(default_factory=JobsConfig)
    config_path: Path = DEFAULT_CONFIG_PATH


def _env_overlay(config: AppConfig) -> None:
    """Override config values with environment variables where applicable."""
    if uri := os.environ.get("MONGODB_URI"):
        config.mongodb.uri = uri
    if db := os.environ.get("APPFORGE_DB"):
        config.mongodb.database = db

    # Resolve API keys from env vars
    for prov in config.providers.values():
        if prov.api_key_env:
            prov.api_key = os.environ.get(prov.api_key_env, "")

    if config.sandbox.api_key_env:
        config.sandbox.api_key = os.environ.get(config.sandbox.api_key_env, "")


def _parse_provider(data: dict) -> ProviderConfig:
    return ProviderConfig(
        api_key_env=data.get("api_key_env", ""),
        default_model=data.get("default_model", ""),
        base_url=data.get("base_url", ""),
    )


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load configuration from TOML file with env var overlay."""
    path = config_path or DEFAULT_CONFIG_PATH

    if path.exists():
        with open(path, "rb") as f:
            raw = tomllib.load(f)
    else:
        raw = tomllib.loads(DEFAULT_CONFIG_TOML)

    mongo_raw = raw.get("mongodb", {})
    providers_raw = raw.get("providers", {})
    agent_raw = raw.get("agent", {})
    summarizer_raw = raw.get("summarizer", {})
    sandbox_raw = raw.get("sandbox", {})
    jobs_raw = raw.get("jobs", {})

    config = AppConfig(
        mongodb=MongoConfig(
            uri=mongo_raw.get("uri", "mongodb://localhost:27017"),
            database=mongo_raw.get("database", "appforge"),
        ),
        providers={name: _parse_provider(data) for name, data in providers_raw.items()},
        agent=AgentConfig(
            provider=agent_raw.get("provider", "openrouter"),
            model=agent_raw.get("model", "openai/gpt-4.1"),
            temperature=agent_raw.get("temperature", 0.1),
            max_tokens=agent_raw.get("max_tokens", 8192),
            max_iterations=agent_raw.get("max_iterations", 12),
            history_limit=agent_raw.get("history_limit", 6),
            provider_order=agent_raw.get("provider_order", []),
        ),
        summarizer=SummarizerConfig(
            provider=summarizer_raw.get("provider", "openrouter"),
            model=summarizer_raw.get("model", "google/gemini-flash-1.5-8b"),
            max_tokens=summarizer_raw.get("max_tokens", 1024),
        ),
        sandbox=SandboxConfig(
            template=sandbox_raw.get("template", "caffeine"),
            timeout=sandbox_raw.get("timeout", 1800),
            port=sandbox_raw.get("port", 3000),
            command_timeout=sandbox_raw.get("command_timeout", 300),
            api_key_env=sandbox_raw.get("api_key_env", "E2B_API_KEY"),
        ),
        jobs=JobsConfig(
            max_attempts=jobs_raw.get("max_attempts", 3),
            retry_base_delay=jobs_raw.get("retry_base_delay", 1.0),
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
