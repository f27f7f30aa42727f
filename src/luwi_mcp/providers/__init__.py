"""Provider adapters for multi-vendor API access.

Re-exports the public interface so callers can write::

    from luwi_mcp.providers import PROVIDER_CLASSES, Provider, ProviderError

``PROVIDER_CLASSES`` is the variant registry: adding a provider means
adding one adapter class here and one extractor in ``normalizer.py``.
"""

from luwi_mcp.providers.base import Provider, ProviderError
from luwi_mcp.providers.claude import ClaudeProvider
from luwi_mcp.providers.deepseek import DeepSeekProvider
from luwi_mcp.providers.google import GoogleProvider
from luwi_mcp.providers.openai import OpenAIProvider
from luwi_mcp.types import Vendor

PROVIDER_CLASSES: dict[Vendor, type[Provider]] = {
    Vendor.OPENAI: OpenAIProvider,
    Vendor.CLAUDE: ClaudeProvider,
    Vendor.GOOGLE: GoogleProvider,
    Vendor.DEEPSEEK: DeepSeekProvider,
}

__all__ = [
    "PROVIDER_CLASSES",
    "ClaudeProvider",
    "DeepSeekProvider",
    "GoogleProvider",
    "OpenAIProvider",
    "Provider",
    "ProviderError",
]
