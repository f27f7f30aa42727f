"""Model router: map a request's intent and complexity to a model.

Routing is a pure decision function with no I/O.  Two override rules sit
on top of an intent-keyed baseline table:

1. High complexity escalates code analysis and creative writing to
   stronger models.
2. A language hint on a code analysis request pins the code model.

Everything else is a single table lookup, falling back to the general
conversation entry for unknown intents.  The table is data and can be
replaced from configuration; the override rules cannot.

Typical usage::

    from luwi_mcp.router import ModelRouter
    from luwi_mcp.types import RequestDescriptor

    router = ModelRouter()
    selection = router.select_optimal_model(
        RequestDescriptor(intent="translation", complexity="medium")
    )
    selection.model  # "gpt-4o"
"""

from __future__ import annotations

import logging

from luwi_mcp.types import Complexity, Intent, ModelSelection, RequestDescriptor, Vendor

logger = logging.getLogger(__name__)

CODE_MODEL = "deepseek-coder"
TOP_CREATIVE_MODEL = "claude-3-opus"

DEFAULT_ROUTING_TABLE: dict[str, ModelSelection] = {
    Intent.CODE_ANALYSIS: ModelSelection(
        model=CODE_MODEL,
        provider=Vendor.DEEPSEEK,
        reason="Code analysis task detected",
    ),
    Intent.CREATIVE_WRITING: ModelSelection(
        model="claude-3-sonnet",
        provider=Vendor.CLAUDE,
        reason="Creative tasks optimized for Claude",
    ),
    Intent.DATA_ANALYSIS: ModelSelection(
        model="gemini-pro",
        provider=Vendor.GOOGLE,
        reason="Data processing capabilities",
    ),
    Intent.GENERAL_CONVERSATION: ModelSelection(
        model="gpt-4o-mini",
        provider=Vendor.OPENAI,
        reason="Fast general purpose responses",
    ),
    Intent.TRANSLATION: ModelSelection(
        model="gpt-4o",
        provider=Vendor.OPENAI,
        reason="Multi-language support",
    ),
}

DEFAULT_FALLBACK_SELECTION = ModelSelection(
    model="gpt-4o-mini",
    provider=Vendor.OPENAI,
    reason="Default fallback model",
)


class ModelRouter:
    """Selects a (model, provider) pair for a request.

    Args:
        routing_table: Intent to baseline selection.  Entries are layered
            over ``DEFAULT_ROUTING_TABLE``, so a partial table only
            overrides the intents it names.
    """

    def __init__(self, routing_table: dict[str, ModelSelection] | None = None) -> None:
        self._table: dict[str, ModelSelection] = {
            str(k): v for k, v in DEFAULT_ROUTING_TABLE.items()
        }
        if routing_table:
            self._table.update({str(k): v for k, v in routing_table.items()})

    @property
    def routing_table(self) -> dict[str, ModelSelection]:
        """The effective intent-keyed baseline table."""
        return dict(self._table)

    def select_optimal_model(self, request: RequestDescriptor) -> ModelSelection:
        """Pick the model for a request.  Never raises.

        Args:
            request: Intent, complexity, and optional language hint.

        Returns:
            The routed ModelSelection.
        """
        selection = self._select(request)
        logger.debug(
            "Routed intent=%s complexity=%s -> %s/%s (%s)",
            request.intent,
            request.complexity,
            selection.provider,
            selection.model,
            selection.reason,
        )
        return selection

    def _select(self, request: RequestDescriptor) -> ModelSelection:
        intent = request.intent
        if request.complexity == Complexity.HIGH:
            if intent == Intent.CODE_ANALYSIS:
                return ModelSelection(
                    model=CODE_MODEL,
                    provider=Vendor.DEEPSEEK,
                    reason="High complexity code task",
                )
            if intent == Intent.CREATIVE_WRITING:
                return ModelSelection(
                    model=TOP_CREATIVE_MODEL,
                    provider=Vendor.CLAUDE,
                    reason="High complexity creative task",
                )

        language = (request.language or "").strip()
        if language and intent == Intent.CODE_ANALYSIS:
            return ModelSelection(
                model=CODE_MODEL,
                provider=Vendor.DEEPSEEK,
                reason=f"{language} specific optimization",
            )

        return self._table.get(intent, DEFAULT_FALLBACK_SELECTION)
