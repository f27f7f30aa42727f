"""Configuration management for Luwi MCP.

Handles API key resolution, routing table overrides, fallback tables,
pricing overrides, and request defaults.  Configuration is loaded from a
TOML file (~/.luwi-mcp/config.toml, or the path in ``LUWI_MCP_CONFIG``)
with environment variable overrides for API keys.

Example config.toml::

    [providers]
    openai_api_key = "sk-..."
    claude_api_key = "sk-ant-..."

    [routing.translation]
    model = "gpt-4o"
    provider = "openai"
    reason = "Multi-language support"

    [fallbacks]
    translation = [
        { model = "claude-3-sonnet", provider = "claude" },
    ]

    [pricing.openai]
    "gpt-4o-mini" = 0.00000015
    "gpt-4o" = { prompt = 0.0000025, completion = 0.00001 }

    [defaults]
    enable_fallback = true
    timeout = 60

Typical usage::

    from luwi_mcp.config import load_config

    config = load_config()
    creds = config.credentials()
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from luwi_mcp.fallback import DEFAULT_FALLBACKS
from luwi_mcp.pricing import PricingTable, parse_pricing
from luwi_mcp.providers.base import DEFAULT_TIMEOUT
from luwi_mcp.types import ModelSelection, ProviderCredentials

APP_DIR = Path.home() / ".luwi-mcp"
CONFIG_PATH = APP_DIR / "config.toml"
CONFIG_ENV_VAR = "LUWI_MCP_CONFIG"

# Env var name → provider key in the providers dict.  Later entries win.
_ENV_VAR_MAP: dict[str, str] = {
    "OPENAI_API_KEY": "openai",
    "CLAUDE_API_KEY": "claude",
    "ANTHROPIC_API_KEY": "claude",
    "GOOGLE_API_KEY": "google",
    "DEEPSEEK_API_KEY": "deepseek",
}


@dataclass
class Config:
    """Application configuration.

    Attributes:
        providers: Mapping of provider name to API key
            (e.g. {"openai": "sk-...", "claude": "sk-ant-..."}).
        routing: Per-intent overrides of the router's baseline table.
        fallbacks: Intent to ordered fallback selections.
        pricing: Token rate tables used for cost estimates.
        enable_fallback: Default for requests that don't say.
        timeout: Per-request timeout in seconds.
    """

    providers: dict[str, str] = field(default_factory=dict)
    routing: dict[str, ModelSelection] = field(default_factory=dict)
    fallbacks: dict[str, list[ModelSelection]] = field(
        default_factory=lambda: {k: list(v) for k, v in DEFAULT_FALLBACKS.items()}
    )
    pricing: PricingTable = field(default_factory=PricingTable)
    enable_fallback: bool = True
    timeout: float = DEFAULT_TIMEOUT

    def get_provider_key(self, vendor: str) -> str | None:
        """Get the API key for a given provider.

        Checks the ``providers`` dict first, then falls back to the
        corresponding environment variables.  The env fallback covers
        manually constructed ``Config()`` instances that bypass
        ``load_config()``.

        Args:
            vendor: Provider name (e.g. "openai", "claude").

        Returns:
            The API key string, or None if not configured.
        """
        key = self.providers.get(vendor, "")
        if key:
            return key
        for env_var, provider_name in reversed(_ENV_VAR_MAP.items()):
            if provider_name == vendor:
                env_val = os.environ.get(env_var, "")
                if env_val:
                    return env_val
        return None

    def credentials(self) -> ProviderCredentials:
        """Build the credentials object handed to ``ApiClient``.

        Returns:
            ProviderCredentials with every resolvable key.
        """
        return ProviderCredentials(
            openai=self.get_provider_key("openai"),
            claude=self.get_provider_key("claude"),
            google=self.get_provider_key("google"),
            deepseek=self.get_provider_key("deepseek"),
        )


def _parse_selection(data: Any, where: str) -> ModelSelection:
    """Parse a ``{model, provider, reason}`` table.

    Raises:
        ValueError: If ``model`` or ``provider`` is missing.
    """
    if not isinstance(data, dict) or not data.get("model") or not data.get("provider"):
        raise ValueError(f"{where} requires 'model' and 'provider'")
    return ModelSelection(
        model=str(data["model"]),
        provider=str(data["provider"]),
        reason=str(data.get("reason", "Configured route")),
    )


def _apply_toml(config: Config, data: dict[str, Any]) -> None:
    """Apply parsed TOML data to a Config instance.

    Args:
        config: Config instance to populate.
        data: Parsed TOML dictionary.

    Raises:
        ValueError: If a routing, fallback, or pricing entry is malformed.
    """
    # --- Providers ---
    for toml_key, value in data.get("providers", {}).items():
        # Keys are like "openai_api_key" → strip "_api_key" suffix.
        if toml_key.endswith("_api_key") and value:
            config.providers[toml_key[: -len("_api_key")]] = value

    # --- Routing ---
    for intent, entry in data.get("routing", {}).items():
        config.routing[intent] = _parse_selection(entry, f"[routing.{intent}]")

    # --- Fallbacks ---
    for intent, entries in data.get("fallbacks", {}).items():
        config.fallbacks[intent] = [
            _parse_selection(entry, f"[fallbacks].{intent}[{i}]")
            for i, entry in enumerate(entries)
        ]

    # --- Pricing ---
    if "pricing" in data:
        config.pricing = config.pricing.merged(parse_pricing(data["pricing"]))

    # --- Defaults ---
    defaults: dict[str, Any] = data.get("defaults", {})
    if "enable_fallback" in defaults:
        enable_fallback = defaults["enable_fallback"]
        if not isinstance(enable_fallback, bool):
            raise ValueError("[defaults].enable_fallback must be true or false")
        config.enable_fallback = enable_fallback
    if "timeout" in defaults:
        config.timeout = float(defaults["timeout"])


def _apply_env_overrides(config: Config) -> None:
    """Apply environment variable overrides to provider keys.

    Args:
        config: Config instance to update.
    """
    for env_var, provider_name in _ENV_VAR_MAP.items():
        env_val = os.environ.get(env_var, "")
        if env_val:
            config.providers[provider_name] = env_val


def config_path() -> Path:
    """Resolve the config file path, honoring ``LUWI_MCP_CONFIG``."""
    override = os.environ.get(CONFIG_ENV_VAR, "")
    return Path(override) if override else CONFIG_PATH


def load_config(path: Path | None = None) -> Config:
    """Load configuration from file and environment.

    Resolution order for each provider key:
        1. Environment variable (e.g. OPENAI_API_KEY)
        2. [providers].<provider>_api_key in config.toml
        3. None (calls to that provider fail with MISSING_API_KEY)

    Args:
        path: Config file to read.  Defaults to ``config_path()``.

    Returns:
        Populated Config instance.

    Raises:
        ValueError: If the file contains malformed entries.
    """
    config = Config()

    target = path or config_path()
    if target.exists():
        with open(target, "rb") as f:
            _apply_toml(config, tomllib.load(f))

    _apply_env_overrides(config)

    return config
