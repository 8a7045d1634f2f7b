"""Environment-based configuration for promql-cli."""

import os
from dataclasses import dataclass, field, replace

from promql_cli.errors import ConfigError


def _env_float(name: str, default: str) -> float:
    raw = os.getenv(name, default)
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(f"invalid {name}: {raw!r} is not a number") from None


@dataclass(frozen=True)
class Config:
    # Backend (Prometheus-compatible server)
    url: str = field(
        default_factory=lambda: os.getenv("PROMQL_URL", "http://localhost:9090")
    )
    # Google Cloud project; switches the backend to Managed Service for Prometheus
    project: str = field(
        default_factory=lambda: os.getenv("PROMQL_PROJECT", "")
    )
    # Extra request headers, e.g. "X-Scope-OrgID: team-a, Authorization: Bearer xyz"
    headers: str = field(
        default_factory=lambda: os.getenv("PROMQL_HEADERS", "")
    )
    timeout_seconds: float = field(
        default_factory=lambda: _env_float("PROMQL_TIMEOUT", "30")
    )

    # REPL
    history_file: str = field(
        default_factory=lambda: os.getenv("PROMQL_HISTORY_FILE", "/tmp/promql_cli_history")
    )
    log_level: str = field(
        default_factory=lambda: os.getenv("PROMQL_LOG_LEVEL", "WARNING")
    )


def load_config(**overrides) -> Config:
    """Build a Config from the environment, then apply non-None overrides.

    Raises:
        ConfigError: an environment variable holds an unusable value.
    """
    config = Config()
    changes = {k: v for k, v in overrides.items() if v is not None}
    if changes:
        config = replace(config, **changes)
    return config
