"""Query processing models and data structures."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from dream_rag.embedding.models import Document, QueryMatch


class TurnState(str, Enum):
    """Stages of a single question-to-answer turn."""

    IDLE = "idle"
    EMBEDDING = "embedding"
    SEARCHING = "searching"
    ASSEMBLING = "assembling"
    GENERATING = "generating"
    DONE = "done"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (TurnState.DONE, TurnState.ERROR)


@dataclass(frozen=True)
class AssembledContext:
    """Retrieved reference text packed under a token budget."""

    text: str = ""
    used_tokens: int = 0
    documents: tuple[Document, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.documents


@dataclass
class ConversationTurn:
    """One question and its answer, None while generation is pending."""

    turn_id: int
    question: str
    answer: str | None = None
    state: TurnState = TurnState.IDLE
    failed_stage: TurnState | None = None

    @property
    def pending(self) -> bool:
        return self.answer is None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.turn_id,
            "question": self.question,
            "answer": self.answer,
            "state": self.state.value,
            "failed_stage": self.failed_stage.value if self.failed_stage else None,
            "pending": self.pending,
        }


@dataclass
class QueryResult:
    """Complete result of query processing."""

    turn: ConversationTurn
    matches: list[QueryMatch] = field(default_factory=list)
    context: AssembledContext = field(default_factory=AssembledContext)
    prompt: str | None = None
    processing_time: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.turn.state == TurnState.DONE
