"""Command-line entry point for promql-cli."""

import asyncio
import logging
from typing import Optional

import typer

from promql_cli.config import load_config
from promql_cli.errors import ConfigError
from promql_cli.runner import run_interactive

app = typer.Typer(add_completion=False)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )


@app.command()
def main(
    url: Optional[str] = typer.Option(None, "--url", help="Prometheus server URL [env: PROMQL_URL]"),
    project: Optional[str] = typer.Option(
        None, "--project", help="Google Cloud project for Managed Prometheus [env: PROMQL_PROJECT]"
    ),
    headers: Optional[str] = typer.Option(
        None, "--headers", help='Extra request headers, "Key: Value, Key2: Value2" [env: PROMQL_HEADERS]'
    ),
    history_file: Optional[str] = typer.Option(
        None, "--history-file", help="Where to keep input history [env: PROMQL_HISTORY_FILE]"
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="HTTP timeout in seconds [env: PROMQL_TIMEOUT]"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """Interactive PromQL shell."""
    try:
        config = load_config(
            url=url,
            project=project,
            headers=headers,
            history_file=history_file,
            timeout_seconds=timeout,
            log_level="DEBUG" if verbose else None,
        )
    except ConfigError as e:
        typer.echo(f"ERROR: {e}")
        raise typer.Exit(1)

    setup_logging(config.log_level)

    try:
        code = asyncio.run(run_interactive(config))
    except KeyboardInterrupt:
        code = 130
    raise typer.Exit(code)


if __name__ == "__main__":
    app()
