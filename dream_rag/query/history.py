"""Append-only conversation history."""

import dataclasses
import itertools

from .models import ConversationTurn, TurnState


class ConversationLog:
    """Ordered log of turns in submission order.

    A turn is appended when its question is submitted and receives its answer
    exactly once, when it reaches a terminal state. Readers get copies.
    """

    def __init__(self):
        self._turns: list[ConversationTurn] = []
        self._ids = itertools.count(1)

    def open_turn(self, question: str) -> ConversationTurn:
        """Append a pending turn for a newly submitted question."""
        turn = ConversationTurn(turn_id=next(self._ids), question=question)
        self._turns.append(turn)
        return turn

    def advance(self, turn: ConversationTurn, state: TurnState) -> None:
        """Move an open turn to a non-terminal stage."""
        if turn.state.is_terminal:
            raise ValueError(f"Turn {turn.turn_id} is already {turn.state.value}")
        turn.state = state

    def complete_turn(
        self,
        turn: ConversationTurn,
        answer: str,
        failed_stage: TurnState | None = None,
    ) -> ConversationTurn:
        """Record the answer and the terminal state of a turn.

        Args:
            turn: Turn returned by ``open_turn``
            answer: Generated answer or fallback text
            failed_stage: Stage that failed, None on success

        Returns:
            A snapshot copy of the completed turn
        """
        if turn.state.is_terminal:
            raise ValueError(f"Turn {turn.turn_id} is already {turn.state.value}")
        turn.answer = answer
        turn.failed_stage = failed_stage
        turn.state = TurnState.ERROR if failed_stage else TurnState.DONE
        return dataclasses.replace(turn)

    def snapshot(self) -> tuple[ConversationTurn, ...]:
        """Return copies of all turns in submission order."""
        return tuple(dataclasses.replace(turn) for turn in self._turns)

    @property
    def pending(self) -> bool:
        """True while any turn is still waiting for its answer."""
        return any(turn.pending for turn in self._turns)

    def __len__(self) -> int:
        return len(self._turns)
