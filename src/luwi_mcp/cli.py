"""CLI entry point for Luwi MCP.

Provides the ``luwi-mcp`` command: a thin host around the gateway for
sending a single prompt, inspecting routing decisions, and checking the
effective configuration.

Typical usage::

    luwi-mcp ask "Translate 'hello' to French" --intent translation
    luwi-mcp route --intent code_analysis --complexity high
    luwi-mcp config show
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys

import click
from rich.console import Console
from rich.markup import escape

from luwi_mcp import __version__
from luwi_mcp.config import Config, config_path, load_config
from luwi_mcp.display import render_config_show, render_result, render_selection
from luwi_mcp.gateway import OPERATIONS, GatewayError, process_request
from luwi_mcp.router import ModelRouter
from luwi_mcp.types import Complexity, Intent, RequestDescriptor

console = Console(stderr=True)

_QUIET_LOGGERS = ("httpx", "httpcore")

_intent_option = click.option(
    "--intent",
    type=click.Choice([i.value for i in Intent], case_sensitive=False),
    default=Intent.GENERAL_CONVERSATION.value,
    help="Purpose of the request (default: general_conversation).",
)
_complexity_option = click.option(
    "--complexity",
    type=click.Choice([c.value for c in Complexity], case_sensitive=False),
    default=Complexity.MEDIUM.value,
    help="Difficulty tier (default: medium).",
)
_language_option = click.option(
    "--language",
    default=None,
    help="Programming or natural language hint (e.g. python, french).",
)


def _load_config_or_exit() -> Config:
    try:
        return load_config()
    except (ValueError, OSError) as exc:
        console.print(f"[red bold]Error:[/red bold] Invalid configuration: {escape(str(exc))}")
        sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="luwi-mcp")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging.")
def main(verbose: bool) -> None:
    """Multi-model AI gateway with intent-based routing.

    Routes a prompt to the best-suited provider for its intent and
    complexity, normalizes the response, and falls back to alternate
    models when the primary call fails.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # Silence noisy HTTP client loggers
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


@main.command()
@click.argument("prompt")
@_intent_option
@_complexity_option
@_language_option
@click.option(
    "--operation",
    type=click.Choice(OPERATIONS, case_sensitive=False),
    default="generate",
    help="Operation name echoed in the result (default: generate).",
)
@click.option(
    "--no-fallback",
    is_flag=True,
    default=False,
    help="Don't try alternate models when the primary call fails.",
)
@click.option(
    "--output",
    type=click.Choice(["terminal", "json"], case_sensitive=False),
    default="terminal",
    help="Output format (default: terminal).",
)
def ask(
    prompt: str,
    intent: str,
    complexity: str,
    language: str | None,
    operation: str,
    no_fallback: bool,
    output: str,
) -> None:
    """Send PROMPT to the model selected for its intent."""
    config = _load_config_or_exit()
    credentials = config.credentials()

    if not credentials.configured():
        console.print(
            "[red bold]Error:[/red bold] No API key found.\n"
            "Set OPENAI_API_KEY, ANTHROPIC_API_KEY, GOOGLE_API_KEY or DEEPSEEK_API_KEY\n"
            f"or configure keys in {config_path()}"
        )
        sys.exit(1)

    descriptor = RequestDescriptor(
        intent=intent,
        complexity=complexity,
        language=language or None,
        content_type=operation,
    )

    try:
        result = asyncio.run(
            process_request(
                descriptor,
                prompt,
                credentials,
                enable_fallback=False if no_fallback else None,
                operation=operation,
                config=config,
            )
        )
    except GatewayError as exc:
        console.print(f"[red bold]Error:[/red bold] {escape(exc.message)}")
        sys.exit(1)

    if output == "json":
        click.echo(json.dumps(result, indent=2))
    else:
        render_result(result)


@main.command()
@_intent_option
@_complexity_option
@_language_option
@click.option("--json", "as_json", is_flag=True, default=False, help="Print as JSON.")
def route(intent: str, complexity: str, language: str | None, as_json: bool) -> None:
    """Show which model a request would be routed to (no API call)."""
    config = _load_config_or_exit()
    selection = ModelRouter(config.routing).select_optimal_model(
        RequestDescriptor(intent=intent, complexity=complexity, language=language or None)
    )
    if as_json:
        click.echo(json.dumps(selection.to_dict(), indent=2))
    else:
        render_selection(selection)


@main.group()
def config() -> None:
    """Manage configuration."""


@config.command()
def path() -> None:
    """Print the configuration file path."""
    click.echo(config_path())


@config.command("show")
def config_show() -> None:
    """Display effective configuration (keys masked)."""
    cfg = _load_config_or_exit()
    render_config_show(cfg, ModelRouter(cfg.routing).routing_table)


if __name__ == "__main__":
    main()
