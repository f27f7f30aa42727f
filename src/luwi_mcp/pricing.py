"""Model pricing: per-provider token rate tables and cost estimation.

Rates are plain configuration data.  ``DEFAULT_PRICING`` holds simplified
placeholder rates; ``[pricing.<vendor>]`` tables in config.toml override
or extend them without touching normalization logic.

Each vendor table maps a model-name substring to a ``ModelPricing``.  The
longest substring contained in the requested model wins; the ``"default"``
entry applies when nothing matches.

Typical usage::

    from luwi_mcp.pricing import PricingTable, compute_cost

    table = PricingTable()
    pricing = table.get_pricing("openai", "gpt-4o")
    cost = compute_cost(pricing, total_tokens=1200)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

DEFAULT_KEY = "default"


@dataclass(frozen=True)
class ModelPricing:
    """Per-token pricing for a model.

    Attributes:
        prompt_price: USD per token for input/prompt tokens.  Also applied
            to total token counts when no input/output split is known.
        completion_price: USD per token for output/completion tokens.
    """

    prompt_price: float
    completion_price: float

    @classmethod
    def flat(cls, price: float) -> ModelPricing:
        """Same rate for input and output tokens."""
        return cls(prompt_price=price, completion_price=price)


# Simplified placeholder rates, USD per token.
DEFAULT_PRICING: dict[str, dict[str, ModelPricing]] = {
    "openai": {
        "gpt-4": ModelPricing.flat(0.00003),
        DEFAULT_KEY: ModelPricing.flat(0.000002),
    },
    "claude": {
        DEFAULT_KEY: ModelPricing(prompt_price=0.000015, completion_price=0.000075),
    },
    "google": {
        DEFAULT_KEY: ModelPricing.flat(0.000001),
    },
    "deepseek": {
        DEFAULT_KEY: ModelPricing.flat(0.000001),
    },
}


class PricingTable:
    """Lookup of per-token rates by provider and model.

    Args:
        rates: Vendor name to {model-substring: ModelPricing}.  Defaults
            to a copy of ``DEFAULT_PRICING``.
    """

    def __init__(self, rates: dict[str, dict[str, ModelPricing]] | None = None) -> None:
        source = DEFAULT_PRICING if rates is None else rates
        self._rates: dict[str, dict[str, ModelPricing]] = {
            vendor: dict(table) for vendor, table in source.items()
        }

    @property
    def rates(self) -> dict[str, dict[str, ModelPricing]]:
        """The underlying vendor rate tables."""
        return self._rates

    def get_pricing(self, vendor: str, model: str) -> ModelPricing | None:
        """Get pricing for a model on a provider.

        Args:
            vendor: Provider key (e.g. "openai").
            model: Model identifier (e.g. "gpt-4o-mini").

        Returns:
            The best-matching ModelPricing, or None if the vendor has no table.
        """
        table = self._rates.get(str(vendor))
        if not table:
            return None

        matches = [key for key in table if key != DEFAULT_KEY and key in model]
        if matches:
            return table[max(matches, key=len)]
        return table.get(DEFAULT_KEY)

    def merged(self, overrides: dict[str, dict[str, ModelPricing]]) -> PricingTable:
        """Return a new table with ``overrides`` layered on top.

        Args:
            overrides: Vendor name to {model-substring: ModelPricing}.

        Returns:
            New PricingTable; this one is left unchanged.
        """
        combined = {vendor: dict(table) for vendor, table in self._rates.items()}
        for vendor, table in overrides.items():
            combined.setdefault(vendor, {}).update(table)
        return PricingTable(combined)


def parse_pricing(data: dict[str, Any]) -> dict[str, dict[str, ModelPricing]]:
    """Parse ``[pricing]`` TOML tables into rate tables.

    Values are either a single number (flat rate) or a table with
    ``prompt`` and ``completion`` keys.

    Args:
        data: Parsed ``pricing`` section, vendor -> {model-substring -> value}.

    Returns:
        Vendor name to {model-substring: ModelPricing}.

    Raises:
        ValueError: If a rate is not numeric or a table lacks ``prompt``.
    """
    result: dict[str, dict[str, ModelPricing]] = {}
    for vendor, table in data.items():
        if not isinstance(table, dict):
            raise ValueError(f"[pricing.{vendor}] must be a table")
        parsed: dict[str, ModelPricing] = {}
        for key, value in table.items():
            if isinstance(value, dict):
                if "prompt" not in value:
                    raise ValueError(f"[pricing.{vendor}.{key}] requires a 'prompt' rate")
                prompt = float(value["prompt"])
                parsed[key] = ModelPricing(
                    prompt_price=prompt,
                    completion_price=float(value.get("completion", prompt)),
                )
            else:
                parsed[key] = ModelPricing.flat(float(value))
        result[vendor] = parsed
    return result


def compute_cost(
    pricing: ModelPricing | None,
    *,
    total_tokens: int | None = None,
    input_tokens: int | None = None,
    output_tokens: int | None = None,
) -> float | None:
    """Estimate USD cost for one response.

    Uses the input/output split when either side is known (a missing side
    counts as zero), otherwise prices ``total_tokens`` at the prompt rate.

    Args:
        pricing: Per-token pricing for the model, or None.
        total_tokens: Total tokens reported by the provider.
        input_tokens: Prompt tokens, for providers that split usage.
        output_tokens: Completion tokens, for providers that split usage.

    Returns:
        Cost in USD, or None if pricing or token data is missing.
    """
    if pricing is None:
        return None
    if input_tokens is not None or output_tokens is not None:
        return (input_tokens or 0) * pricing.prompt_price + (
            output_tokens or 0
        ) * pricing.completion_price
    if total_tokens is None:
        return None
    return total_tokens * pricing.prompt_price
