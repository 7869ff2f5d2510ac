"""Intent search: ranks catalog tools against a free-text intent.

Each intent token contributes the score of the best rule it matches on a
tool. Bonuses are then added for a category match, for operation-sourced
tools and for a matching operation verb. Ties keep catalog order.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any

from toolsmith_server.tools.registry import ToolCatalog
from toolsmith_server.tools.types import ACTION, CUSTOM_API, RECORD, Tool

logger = logging.getLogger(__name__)

DEFAULT_MAX_RESULTS = 10

KEYWORD_EXACT = 10
RESOURCE_EXACT = 12
NAME_SUBSTRING = 8
OPERATION_SUBSTRING = 6
KEYWORD_PARTIAL = 5
DESCRIPTION_SUBSTRING = 3

CATEGORY_BONUS = 5
OPERATION_SOURCE_BONUS = 2
VERB_INTENT_BONUS = 4

# Intent words that imply the operation verb a tool should carry
VERB_INTENTS = {
    "create": {"create", "add", "new", "insert", "make", "register"},
    "update": {"update", "edit", "modify", "change", "set", "rename"},
    "delete": {"delete", "remove", "erase", "drop", "destroy"},
    "get": {"get", "retrieve", "fetch", "read", "show", "details", "lookup"},
    "list": {"list", "all", "browse", "enumerate", "every"},
}

# Partial keyword overlap needs at least this many characters to count
_MIN_PARTIAL_LENGTH = 3

_TOKEN_SPLIT = re.compile(r"[\s,\-_]+")


def tokenize(text: str | None) -> list[str]:
    """Split an intent on whitespace, commas, dashes and underscores."""
    if not text:
        return []
    return [token for token in _TOKEN_SPLIT.split(text.lower()) if token]


def intent_verbs(tokens: list[str]) -> set[str]:
    """Operation verbs implied by the intent vocabulary."""
    return {
        verb
        for verb, vocabulary in VERB_INTENTS.items()
        if any(token in vocabulary for token in tokens)
    }


def tool_verb(tool: Tool) -> str:
    if tool.provenance.source_kind == RECORD and tool.provenance.operation:
        return tool.provenance.operation
    return tool.name.partition("_")[0]


@dataclass
class ScoredTool:
    """A tool paired with its relevance score."""

    tool: Tool
    score: int

    def to_dict(self) -> dict[str, Any]:
        data = self.tool.to_full()
        data["score"] = self.score
        return data


class IntentSearch:
    """Ranks the tools of one catalog against free-text intents."""

    def __init__(self, catalog: ToolCatalog) -> None:
        self.catalog = catalog

    @staticmethod
    def token_score(token: str, tool: Tool) -> int:
        """Score of the best rule one token matches on a tool."""
        keywords = [k.lower() for k in tool.keywords]
        best = 0
        if token in keywords:
            best = max(best, KEYWORD_EXACT)
        resource = (tool.provenance.resource or "").lower()
        if tool.is_discovered and resource and token == resource:
            best = max(best, RESOURCE_EXACT)
        if token in tool.name.lower():
            best = max(best, NAME_SUBSTRING)
        operation = (tool.provenance.operation or "").lower()
        if operation and token in operation:
            best = max(best, OPERATION_SUBSTRING)
        if len(token) >= _MIN_PARTIAL_LENGTH and any(
            token in k or (len(k) >= _MIN_PARTIAL_LENGTH and k in token)
            for k in keywords
        ):
            best = max(best, KEYWORD_PARTIAL)
        if token in tool.description.lower():
            best = max(best, DESCRIPTION_SUBSTRING)
        return best

    def score(
        self,
        tool: Tool,
        tokens: list[str],
        verbs: set[str],
        category: str | None = None,
    ) -> int:
        base = sum(self.token_score(token, tool) for token in tokens)
        if base <= 0 and category is None:
            return 0

        total = base
        if category is not None:
            if tool.category == category:
                total += CATEGORY_BONUS
        elif tool.category and tool.category.lower() in tokens:
            total += CATEGORY_BONUS

        if tool.provenance.source_kind in (CUSTOM_API, ACTION):
            total += OPERATION_SOURCE_BONUS
        if verbs and tool_verb(tool) in verbs:
            total += VERB_INTENT_BONUS
        return total

    def search(
        self,
        intent: str | None = None,
        category: str | None = None,
        max_results: int = DEFAULT_MAX_RESULTS,
    ) -> list[ScoredTool]:
        """Find the tools most relevant to an intent.

        Args:
            intent: Free-text description of what the caller wants to do
            category: Exact category filter; every tool in it is retained
            max_results: Maximum number of results

        Returns:
            list[ScoredTool]: Highest score first, catalog order on ties
        """
        max_results = max(1, max_results)
        tokens = tokenize(intent)
        candidates = [
            tool for tool in self.catalog if category is None or tool.category == category
        ]

        if not tokens and category is None:
            # Nothing to rank by; return the catalog head
            return [ScoredTool(tool, 0) for tool in candidates[:max_results]]

        verbs = intent_verbs(tokens)
        scored = []
        for tool in candidates:
            value = self.score(tool, tokens, verbs, category)
            if value > 0 or category is not None:
                scored.append(ScoredTool(tool, value))

        # sorted() is stable, so equal scores keep catalog order
        ranked = sorted(scored, key=lambda item: item.score, reverse=True)
        logger.debug(
            f"Search intent={intent!r} category={category!r}: "
            f"{len(ranked)} matches, returning {min(len(ranked), max_results)}"
        )
        return ranked[:max_results]
