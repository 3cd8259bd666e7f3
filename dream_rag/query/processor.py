"""Query processing pipeline with RAG implementation."""

import logging
import time

from dream_rag.config import (
    DEFAULT_FAILURE_NOTICE,
    DEFAULT_FALLBACK_ANSWER,
    Settings,
    get_settings,
)
from dream_rag.embedding import EmbeddingClient, VectorDatabase, create_vector_database
from dream_rag.errors import EmbeddingFailure, GenerationFailure, SimilarityStoreError
from dream_rag.llm.factory import create_embedding_provider, create_llm_provider
from .context import ContextAssembler
from .generator import GenerationClient
from .history import ConversationLog
from .models import ConversationTurn, QueryResult, TurnState
from .prompts import PromptTemplate

logger = logging.getLogger(__name__)


class QueryProcessor:
    """Runs one question through embed, search, assemble, render and generate.

    Every turn ends with an answer in the history: the generated text, the
    fallback answer when generation fails, or the failure notice when an
    earlier stage fails. Turns share nothing but the store and the history.
    """

    def __init__(
        self,
        embedding_client: EmbeddingClient,
        vector_db: VectorDatabase,
        generation_client: GenerationClient,
        assembler: ContextAssembler | None = None,
        template: PromptTemplate | None = None,
        history: ConversationLog | None = None,
        match_threshold: float = 0.2,
        match_count: int = 1,
        token_budget: int = 1500,
        fallback_answer: str = DEFAULT_FALLBACK_ANSWER,
        failure_notice: str = DEFAULT_FAILURE_NOTICE,
    ):
        """Initialize query processor.

        Args:
            embedding_client: Client used to embed questions
            vector_db: Similarity store to search
            generation_client: Client used to generate answers
            assembler: Context assembler
            template: Prompt template
            history: Conversation log the turns are appended to
            match_threshold: Minimum similarity of a retrieved document
            match_count: Maximum number of retrieved documents
            token_budget: Maximum tokens of retrieved context
            fallback_answer: Answer recorded when generation fails
            failure_notice: Answer recorded when embedding or search fails
        """
        self.embedding_client = embedding_client
        self.vector_db = vector_db
        self.generation_client = generation_client
        self.assembler = assembler or ContextAssembler()
        self.template = template or PromptTemplate()
        self.history = history or ConversationLog()
        self.match_threshold = match_threshold
        self.match_count = match_count
        self.token_budget = token_budget
        self.fallback_answer = fallback_answer
        self.failure_notice = failure_notice

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        vector_db: VectorDatabase | None = None,
    ) -> "QueryProcessor":
        """Build a processor wired to the configured backends."""
        settings = settings or get_settings()
        return cls(
            embedding_client=EmbeddingClient(create_embedding_provider(settings=settings)),
            vector_db=vector_db or create_vector_database(settings),
            generation_client=GenerationClient(create_llm_provider(settings=settings)),
            template=PromptTemplate(preamble=settings.persona_preamble),
            match_threshold=settings.match_threshold,
            match_count=settings.match_count,
            token_budget=settings.context_token_budget,
            fallback_answer=settings.generation_fallback_answer,
            failure_notice=settings.failure_notice,
        )

    async def process_query(self, question: str) -> QueryResult:
        """Process a complete query with the RAG pipeline.

        Args:
            question: Raw user input

        Returns:
            QueryResult whose turn is in a terminal state

        Raises:
            ValueError: If the question is blank; no turn is recorded
        """
        if not question or not question.strip():
            raise ValueError("Question must not be blank")

        start_time = time.time()
        turn = self.history.open_turn(question)
        result = QueryResult(turn=turn)
        logger.info(f"Processing turn {turn.turn_id}: {question[:80]!r}")

        try:
            # Step 1: Embed the question
            self._advance(turn, TurnState.EMBEDDING)
            embedding = await self.embedding_client.embed(question)

            # Step 2: Search for related documents
            self._advance(turn, TurnState.SEARCHING)
            result.matches = await self.vector_db.search(
                embedding.embedding,
                threshold=self.match_threshold,
                limit=self.match_count,
            )
            logger.info(f"Found {len(result.matches)} matching documents")

            # Step 3: Pack matches under the token budget
            self._advance(turn, TurnState.ASSEMBLING)
            result.context = self.assembler.assemble(result.matches, self.token_budget)
            if result.context.is_empty:
                logger.info("No usable context, answering from the persona alone")

            # Step 4: Render the prompt and generate
            self._advance(turn, TurnState.GENERATING)
            result.prompt = self.template.render(result.context.text, question)
            answer = await self.generation_client.generate(result.prompt)

        except GenerationFailure as e:
            logger.warning(f"Turn {turn.turn_id} failed at generation: {e}")
            return self._finish(result, self.fallback_answer, start_time, failed=True)
        except (EmbeddingFailure, SimilarityStoreError) as e:
            logger.warning(f"Turn {turn.turn_id} failed at {turn.state.value}: {e}")
            return self._finish(result, self.failure_notice, start_time, failed=True)
        except Exception:
            logger.exception(f"Unexpected error in turn {turn.turn_id}")
            self._finish(result, self.failure_notice, start_time, failed=True)
            raise

        return self._finish(result, answer, start_time)

    def _advance(self, turn: ConversationTurn, state: TurnState) -> None:
        logger.debug(f"Turn {turn.turn_id}: {turn.state.value} -> {state.value}")
        self.history.advance(turn, state)

    def _finish(
        self,
        result: QueryResult,
        answer: str,
        start_time: float,
        failed: bool = False,
    ) -> QueryResult:
        turn = result.turn
        failed_stage = turn.state if failed else None
        result.turn = self.history.complete_turn(turn, answer, failed_stage=failed_stage)
        result.processing_time = time.time() - start_time
        logger.info(
            f"Turn {turn.turn_id} {result.turn.state.value} in {result.processing_time:.2f}s"
        )
        return result

    def turns(self) -> tuple[ConversationTurn, ...]:
        """Return a read-only snapshot of the conversation."""
        return self.history.snapshot()

    @property
    def pending(self) -> bool:
        """True while any submitted turn is waiting for its answer."""
        return self.history.pending

    async def health_check(self) -> dict[str, bool]:
        """Check health of query processing components."""
        health = {
            "vector_database": await self.vector_db.health_check(),
            "embedding_provider": await self.embedding_client.provider.health_check(),
            "llm_provider": await self.generation_client.provider.health_check(),
        }
        health["overall"] = all(health.values())
        return health
