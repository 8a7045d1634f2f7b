"""Interactive loop: read a PromQL expression, query, print the result table."""

import logging
import sys

from promql_cli.client import PrometheusClient
from promql_cli.errors import PromQLCliError
from promql_cli.progress import progress
from promql_cli.render import make_console, render_table
from promql_cli.result import decode_response
from promql_cli.table import project

log = logging.getLogger("promql.runner")

PROMPT = "promql> "
EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_COMMANDS = ("exit", "quit")


def load_history(path: str):
    """Enable line editing with persistent history, if readline is available."""
    try:
        import readline
    except ImportError:
        log.debug("readline not available, history disabled")
        return None

    readline.set_history_length(1000)
    try:
        readline.read_history_file(path)
    except FileNotFoundError:
        pass
    except OSError:
        log.warning("Could not read history file %s", path, exc_info=True)
    return readline


def save_history(readline, path: str) -> None:
    if readline is None:
        return
    try:
        readline.write_history_file(path)
    except OSError:
        log.warning("Could not write history file %s", path, exc_info=True)


class Session:
    """One interactive session against a single backend."""

    def __init__(self, client, out=None, read_line=input):
        self.client = client
        self.out = out or sys.stdout
        self.console = make_console(self.out)
        self.read_line = read_line

    def read_input(self) -> str | None:
        """Next non-blank line, stripped; None at end of input."""
        while True:
            try:
                line = self.read_line(PROMPT)
            except EOFError:
                return None
            except KeyboardInterrupt:
                # Ctrl-C discards the current line
                self.console.print()
                continue
            line = line.strip()
            if line:
                return line

    async def run_query(self, expression: str) -> None:
        log.debug("Query: %s", expression)
        async with progress(self.out):
            body = await self.client.query(expression)

        response = decode_response(body)
        for warning in response.warnings:
            self.console.print(f"WARNING: {warning}")
        render_table(project(response), self.console)

    def print_error(self, err: Exception) -> None:
        self.console.print(f"ERROR: {err}")
        hint = getattr(err, "hint", None)
        if hint:
            self.console.print(f"hint: {hint}")

    async def run(self) -> int:
        while True:
            expression = self.read_input()
            if expression is None or expression.lower() in EXIT_COMMANDS:
                self.console.print("Bye")
                return EXIT_SUCCESS

            try:
                await self.run_query(expression)
            except PromQLCliError as e:
                log.debug("Query failed: %s", e)
                self.print_error(e)
            except Exception as e:
                log.exception("Unexpected error while running query")
                self.print_error(e)


async def run_interactive(config, out=None, read_line=input) -> int:
    """Run the REPL until exit/EOF. Returns the process exit code."""
    out = out or sys.stdout
    try:
        client = PrometheusClient.from_config(config)
    except PromQLCliError as e:
        session = Session(None, out, read_line)
        session.print_error(e)
        return EXIT_ERROR

    log.info("Querying %s", client.base_url)
    readline = load_history(config.history_file)
    try:
        return await Session(client, out, read_line).run()
    finally:
        save_history(readline, config.history_file)
