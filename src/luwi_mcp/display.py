"""Terminal display: Rich-based formatting for gateway output.

Renders gateway results, routing decisions, and effective configuration
to the terminal.

Typical usage::

    from luwi_mcp.display import render_result

    render_result(result)
"""

from __future__ import annotations

from typing import Any

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

from luwi_mcp.config import Config
from luwi_mcp.types import ModelSelection, Vendor

console = Console()

# Provider → color mapping for visual distinction.
PROVIDER_COLORS: dict[str, str] = {
    "openai": "green",
    "claude": "magenta",
    "google": "cyan",
    "deepseek": "blue",
}

DEFAULT_COLOR = "white"


def _get_color(provider: str) -> str:
    """Get the display color for a provider.

    Args:
        provider: Provider key (e.g. "openai").

    Returns:
        Rich color string for the provider.
    """
    return PROVIDER_COLORS.get(str(provider).lower(), DEFAULT_COLOR)


def mask_key(key: str | None) -> str:
    """Mask an API key for display, keeping only the last four characters.

    Args:
        key: API key or None.

    Returns:
        Masked key, or "not set".
    """
    if not key:
        return "not set"
    if len(key) <= 8:
        return "****"
    return f"****{key[-4:]}"


def _format_cost(cost: float | None) -> str:
    if cost is None:
        return "n/a"
    if cost < 0.01:
        return f"${cost:.6f}"
    return f"${cost:.4f}"


def render_result(result: dict[str, Any]) -> None:
    """Render a successful gateway result.

    Args:
        result: Flattened result dict from ``process_request()``.
    """
    provider = str(result.get("provider", ""))
    color = _get_color(provider)
    metadata: dict[str, Any] = result.get("metadata", {})

    console.print()
    console.print(
        Panel(
            Markdown(result.get("content", "")),
            title=f"[bold {color}]{provider}/{result.get('model', '')}[/bold {color}]",
            border_style=color,
        )
    )

    parts = [f"latency {metadata.get('latency_ms', 0)}ms"]
    if metadata.get("tokens_used") is not None:
        parts.append(f"{metadata['tokens_used']} tokens")
    parts.append(f"cost {_format_cost(metadata.get('cost'))}")
    if metadata.get("fallback_model"):
        parts.append(
            f"fallback {metadata.get('original_model', '?')} → {metadata['fallback_model']}"
        )
    console.print(f"[dim]{' | '.join(parts)}[/dim]")

    selected = result.get("selected_model") or {}
    if selected.get("reason"):
        console.print(f"[dim]Routing: {selected['reason']}[/dim]")


def render_selection(selection: ModelSelection) -> None:
    """Render a routing decision without calling any provider.

    Args:
        selection: The router's choice.
    """
    color = _get_color(selection.provider)
    table = Table(show_header=False, box=None)
    table.add_column("field", style="bold")
    table.add_column("value")
    table.add_row("Provider", f"[{color}]{selection.provider}[/{color}]")
    table.add_row("Model", selection.model)
    table.add_row("Reason", selection.reason)
    console.print(table)


def render_config_show(config: Config, routing_table: dict[str, ModelSelection]) -> None:
    """Render the effective configuration with keys masked.

    Args:
        config: Loaded configuration.
        routing_table: Effective intent → selection table.
    """
    keys = Table(title="Provider keys")
    keys.add_column("Provider")
    keys.add_column("Key")
    for vendor in Vendor:
        keys.add_row(vendor.value, mask_key(config.get_provider_key(vendor.value)))
    console.print(keys)

    routes = Table(title="Routing table")
    routes.add_column("Intent")
    routes.add_column("Provider")
    routes.add_column("Model")
    routes.add_column("Fallbacks")
    for intent, selection in routing_table.items():
        fallbacks = ", ".join(
            f"{alt.provider}/{alt.model}" for alt in config.fallbacks.get(intent, [])
        )
        routes.add_row(intent, str(selection.provider), selection.model, fallbacks or "-")
    console.print(routes)

    console.print(
        f"[dim]Fallback enabled by default: {config.enable_fallback} | "
        f"timeout: {config.timeout:g}s[/dim]"
    )
