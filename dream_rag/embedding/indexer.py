"""Ingestion pipeline: embed reference text and store it."""

import asyncio
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any

from tqdm.asyncio import tqdm

from dream_rag.llm.factory import create_embedding_provider
from .client import EmbeddingClient
from .models import Document
from .pdf import extract_pdf_text
from .vectorizer import VectorDatabase, create_vector_database

logger = logging.getLogger(__name__)


class IngestionState(str, Enum):
    """Stages of a single ingestion."""

    IDLE = "idle"
    EMBEDDING = "embedding"
    INSERTING = "inserting"
    DONE = "done"


@dataclass(frozen=True)
class IngestionResult:
    """Outcome of a completed ingestion."""

    document: Document
    state: IngestionState = IngestionState.DONE


class DocumentIndexer:
    """Pipeline for indexing reference documents into the similarity store."""

    def __init__(
        self,
        embedding_client: EmbeddingClient | None = None,
        vector_db: VectorDatabase | None = None,
    ):
        """Initialize document indexer.

        Args:
            embedding_client: Embedding client (creates from config if None)
            vector_db: Similarity store (creates from config if None)
        """
        self.embedding_client = embedding_client
        self.vector_db = vector_db

    def _ensure_providers(self) -> None:
        """Ensure all providers are initialized."""
        if self.embedding_client is None:
            self.embedding_client = EmbeddingClient(create_embedding_provider())

        if self.vector_db is None:
            self.vector_db = create_vector_database()

    async def index_text(self, text: str) -> IngestionResult:
        """Embed and store one document.

        Args:
            text: Raw document text, typed or extracted from a PDF

        Returns:
            IngestionResult holding the stored document

        Raises:
            ValueError: If the text is blank
            EmbeddingFailure: If the text could not be embedded
            DimensionMismatch: If the embedding does not fit the store
        """
        self._ensure_providers()

        if not text or not text.strip():
            raise ValueError("Document text must not be blank")
        text = text.strip()

        self._log_transition(IngestionState.IDLE, IngestionState.EMBEDDING)
        embedding = await self.embedding_client.embed(text)

        self._log_transition(IngestionState.EMBEDDING, IngestionState.INSERTING)
        document = await self.vector_db.insert(
            text=text,
            vector=embedding.embedding,
            token_count=embedding.token_count,
        )

        self._log_transition(IngestionState.INSERTING, IngestionState.DONE)
        logger.info(f"Indexed document {document.id} ({document.token_count} tokens)")
        return IngestionResult(document=document, state=IngestionState.DONE)

    @staticmethod
    def _log_transition(source: IngestionState, target: IngestionState) -> None:
        logger.debug(f"Ingestion {source.value} -> {target.value}")

    async def index_pdf(self, data: bytes) -> IngestionResult:
        """Extract text from a PDF and index it as one document.

        Raises:
            PDFExtractionError: If the file is not a readable PDF
            ValueError: If the PDF holds no extractable text
        """
        text = await asyncio.to_thread(extract_pdf_text, data)
        return await self.index_text(text)

    async def index_many(self, texts: list[str], batch_size: int = 10) -> dict[str, Any]:
        """Index several documents, embedding each batch concurrently.

        Failures are collected rather than raised so one bad document does
        not stop the rest.

        Args:
            texts: Document texts
            batch_size: Number of documents embedded at once

        Returns:
            Dictionary with indexing statistics
        """
        self._ensure_providers()

        documents: list[Document] = []
        errors: list[dict[str, Any]] = []
        start_time = time.time()

        progress = tqdm(total=len(texts), desc="Indexing documents", unit="doc", ncols=100)
        for i in range(0, len(texts), batch_size):
            batch = texts[i : i + batch_size]
            results = await asyncio.gather(
                *(self.index_text(text) for text in batch), return_exceptions=True
            )

            for j, result in enumerate(results):
                if isinstance(result, Exception):
                    logger.warning(f"Failed to index document {i + j + 1}: {result}")
                    errors.append({"index": i + j, "error": str(result)})
                else:
                    documents.append(result.document)
                progress.update(1)
        progress.close()

        elapsed = time.time() - start_time
        logger.info(
            f"Indexed {len(documents)}/{len(texts)} documents in {elapsed:.1f}s"
        )
        return {
            "documents_indexed": len(documents),
            "documents_failed": len(errors),
            "tokens_indexed": sum(d.token_count for d in documents),
            "errors": errors,
            "elapsed_seconds": elapsed,
        }

    async def reset(self) -> None:
        """Delete every stored document."""
        self._ensure_providers()
        await self.vector_db.reset()

    async def health_check(self) -> dict[str, bool]:
        """Check health of ingestion components."""
        self._ensure_providers()

        health_status = {
            "vector_database": await self.vector_db.health_check(),
            "embedding_provider": await self.embedding_client.provider.health_check(),
        }
        health_status["overall"] = all(health_status.values())
        return health_status
