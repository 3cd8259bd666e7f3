"""Token-budgeted context assembly."""

from collections.abc import Sequence

from dream_rag.embedding.models import QueryMatch
from .models import AssembledContext

CONTEXT_SEPARATOR = "\n--\n"


class ContextAssembler:
    """Greedily packs ranked matches into one context string.

    Ranking wins over packing: assembly stops at the first match that would
    overflow the budget instead of looking for a smaller one further down.
    """

    def __init__(self, separator: str = CONTEXT_SEPARATOR):
        self.separator = separator

    def assemble(self, matches: Sequence[QueryMatch], token_budget: int) -> AssembledContext:
        """Concatenate match texts in order until the budget would be exceeded.

        Args:
            matches: Matches in ranked order
            token_budget: Maximum total token count of included documents

        Returns:
            AssembledContext, empty if the first match alone exceeds the budget

        Raises:
            ValueError: If the budget is negative
        """
        if token_budget < 0:
            raise ValueError("Token budget must not be negative")

        parts: list[str] = []
        documents = []
        used_tokens = 0

        for match in matches:
            document = match.document
            if used_tokens + document.token_count > token_budget:
                break
            parts.append(f"{document.text.strip()}{self.separator}")
            documents.append(document)
            used_tokens += document.token_count

        return AssembledContext(
            text="".join(parts),
            used_tokens=used_tokens,
            documents=tuple(documents),
        )
