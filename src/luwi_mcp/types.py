"""Core routing types for intent-based provider dispatch.

Defines the data structures shared by the router, the provider adapters,
the API client, and the fallback coordinator.  Everything here is
immutable once constructed: a ``RequestDescriptor`` and the
``ModelSelection`` routed from it live for exactly one call.

Separated from ``models.py`` so that response envelopes do not depend on
routing types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class Vendor(StrEnum):
    """Supported LLM providers.

    Values are lowercase strings matching the provider keys used in
    ``config.py``'s ``providers`` dict and in the routing table.
    Inherits from ``str`` so values serialize naturally to JSON.
    """

    OPENAI = "openai"
    CLAUDE = "claude"
    GOOGLE = "google"
    DEEPSEEK = "deepseek"


class Intent(StrEnum):
    """Caller-declared purpose of a request, the primary routing key."""

    CODE_ANALYSIS = "code_analysis"
    CREATIVE_WRITING = "creative_writing"
    DATA_ANALYSIS = "data_analysis"
    GENERAL_CONVERSATION = "general_conversation"
    TRANSLATION = "translation"


class Complexity(StrEnum):
    """Caller-declared difficulty tier."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class RequestDescriptor:
    """Semantic attributes of a request used for routing.

    ``intent`` and ``complexity`` are plain strings rather than enum members
    so that values outside the known set still reach the router, which
    falls back instead of raising.

    Attributes:
        intent: One of the ``Intent`` values (unknown values are tolerated).
        complexity: One of the ``Complexity`` values.
        language: Optional natural or programming language hint.
        content_type: Free-form, informational only (e.g. "generate").
    """

    intent: str
    complexity: str = Complexity.MEDIUM.value
    language: str | None = None
    content_type: str = ""


@dataclass(frozen=True)
class ModelSelection:
    """Routing decision: which model on which provider, and why.

    Attributes:
        model: Provider-specific model identifier (e.g. "gpt-4o").
        provider: Provider key (a ``Vendor`` value).  Kept as a string so
            a misconfigured routing table surfaces as a failed response
            at dispatch time, not as a crash here.
        reason: Human-readable justification, for observability only.
    """

    model: str
    provider: str
    reason: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dictionary.

        Returns:
            Dictionary with model, provider, and reason.
        """
        return {
            "model": self.model,
            "provider": str(self.provider),
            "reason": self.reason,
        }


@dataclass(frozen=True)
class ProviderCredentials:
    """API keys for each provider, any of which may be absent.

    Keys are excluded from ``repr()`` so a credentials object can be
    passed through log calls without leaking secrets.
    """

    openai: str | None = field(default=None, repr=False)
    claude: str | None = field(default=None, repr=False)
    google: str | None = field(default=None, repr=False)
    deepseek: str | None = field(default=None, repr=False)

    @classmethod
    def from_mapping(cls, keys: dict[str, str | None]) -> ProviderCredentials:
        """Build credentials from a provider-key mapping.

        Unknown provider names are ignored.  Empty strings count as absent.

        Args:
            keys: Mapping of provider name to API key.

        Returns:
            ProviderCredentials instance.
        """
        known = {v.value for v in Vendor}
        return cls(**{name: key or None for name, key in keys.items() if name in known})

    def get(self, vendor: str) -> str | None:
        """Get the API key for a provider.

        Args:
            vendor: Provider name or ``Vendor`` member.

        Returns:
            The API key, or None if not configured or the provider is unknown.
        """
        if vendor not in {v.value for v in Vendor}:
            return None
        key: str | None = getattr(self, str(vendor))
        return key or None

    def configured(self) -> list[Vendor]:
        """List the providers that have a non-empty API key.

        Returns:
            Vendors in declaration order.
        """
        return [v for v in Vendor if self.get(v.value)]
