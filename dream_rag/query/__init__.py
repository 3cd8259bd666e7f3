"""Query processing and RAG pipeline module."""

from .context import ContextAssembler
from .generator import GenerationClient
from .history import ConversationLog
from .models import AssembledContext, ConversationTurn, QueryResult, TurnState
from .processor import QueryProcessor
from .prompts import PromptTemplate

__all__ = [
    "AssembledContext",
    "ContextAssembler",
    "ConversationLog",
    "ConversationTurn",
    "GenerationClient",
    "PromptTemplate",
    "QueryProcessor",
    "QueryResult",
    "TurnState",
]
