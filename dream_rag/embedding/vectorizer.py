"""Similarity store implementations.

Both stores rank by cosine similarity (higher is more similar). The Chroma
collection is created with the cosine space so that ``1 - distance`` is the
same score the in-memory store computes directly.
"""

import asyncio
import logging
import math
import time
import uuid
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

import chromadb
from chromadb.config import Settings as ChromaSettings

from dream_rag.config import Settings, VectorStoreBackend, get_settings
from dream_rag.errors import DimensionMismatch, SimilarityStoreError
from .models import Document, QueryMatch

logger = logging.getLogger(__name__)


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity of two equal-length vectors, 0.0 for a zero vector."""
    dot = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    return dot / (norm_a * norm_b)


def _validate_record(vector: Sequence[float], token_count: int) -> None:
    if not vector:
        raise ValueError("Vector must not be empty")
    if token_count < 0:
        raise ValueError("Token count must not be negative")


class VectorDatabase(ABC):
    """Abstract base class for similarity stores."""

    @abstractmethod
    async def insert(self, text: str, vector: Sequence[float], token_count: int) -> Document:
        """Persist a document.

        Raises:
            DimensionMismatch: If the vector length differs from the store's
                established dimensionality; nothing is persisted
        """
        pass

    @abstractmethod
    async def search(
        self,
        query_vector: Sequence[float],
        threshold: float,
        limit: int,
    ) -> list[QueryMatch]:
        """Return at most ``limit`` matches scoring at least ``threshold``.

        Matches are ordered by similarity descending, ties by insertion order.
        An empty list means nothing qualified.
        """
        pass

    @abstractmethod
    async def count(self) -> int:
        """Return the number of stored documents."""
        pass

    @abstractmethod
    async def reset(self) -> None:
        """Delete every document and forget the dimensionality."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check if the store is healthy."""
        pass


class InMemoryVectorDatabase(VectorDatabase):
    """Exact cosine scan over a list of documents.

    Records are immutable and appended whole, so a search running alongside
    an insert sees either the complete record or none of it.
    """

    def __init__(self, dimension: int | None = None):
        """Initialize the store.

        Args:
            dimension: Fixed dimensionality, or None to take it from the first
                inserted vector
        """
        self._documents: list[Document] = []
        self._dimension = dimension

    @property
    def dimension(self) -> int | None:
        return self._dimension

    async def insert(self, text: str, vector: Sequence[float], token_count: int) -> Document:
        _validate_record(vector, token_count)
        if self._dimension is not None and len(vector) != self._dimension:
            raise DimensionMismatch(self._dimension, len(vector))

        document = Document(
            id=uuid.uuid4().hex,
            text=text,
            embedding=tuple(float(v) for v in vector),
            token_count=token_count,
        )
        if self._dimension is None:
            self._dimension = document.dimension
        self._documents.append(document)
        logger.debug(f"Inserted document {document.id} ({token_count} tokens)")
        return document

    async def search(
        self,
        query_vector: Sequence[float],
        threshold: float,
        limit: int,
    ) -> list[QueryMatch]:
        documents = list(self._documents)
        if limit <= 0 or not documents:
            return []
        if len(query_vector) != self._dimension:
            raise DimensionMismatch(self._dimension, len(query_vector))

        scored = [
            (cosine_similarity(query_vector, document.embedding), position, document)
            for position, document in enumerate(documents)
        ]
        scored.sort(key=lambda item: (-item[0], item[1]))

        matches = [
            QueryMatch(document=document, similarity=similarity)
            for similarity, _, document in scored
            if similarity >= threshold
        ]
        return matches[:limit]

    async def count(self) -> int:
        return len(self._documents)

    async def reset(self) -> None:
        self._documents = []
        self._dimension = None
        logger.info("In-memory store reset")

    async def health_check(self) -> bool:
        return True


class ChromaVectorDatabase(VectorDatabase):
    """ChromaDB implementation of the similarity store."""

    def __init__(
        self,
        host: str | None = None,
        port: int | None = None,
        collection_name: str | None = None,
        client: Any | None = None,
    ):
        """Initialize ChromaDB client.

        Args:
            host: ChromaDB host (optional, uses config if not provided)
            port: ChromaDB port (optional, uses config if not provided)
            collection_name: Collection name (optional, uses config if not provided)
            client: Pre-built Chroma client, mostly for tests
        """
        if host is None or port is None or collection_name is None:
            settings = get_settings()
            host = host or settings.chroma_host
            port = port or settings.chroma_port
            collection_name = collection_name or settings.collection_name

        self.host = host
        self.port = port
        self.collection_name = collection_name
        self.chroma_url = f"http://{host}:{port}"
        self._collection = None
        self._dimension: int | None = None
        self._last_inserted_at = 0

        if client is not None:
            self.client = client
            return

        try:
            self.client = chromadb.HttpClient(
                host=host,
                port=port,
                settings=ChromaSettings(
                    anonymized_telemetry=False,
                    allow_reset=True,
                ),
            )
            logger.info(f"Connected to ChromaDB at {self.chroma_url}")
        except Exception as e:
            logger.error(f"Failed to connect to ChromaDB at {self.chroma_url}: {e}")
            raise SimilarityStoreError(
                f"Failed to connect to ChromaDB at {self.chroma_url}", cause=e
            ) from e

    async def _get_collection(self):
        """Open the collection, creating it with the cosine space if needed."""
        if self._collection is not None:
            return self._collection

        try:
            collection = await asyncio.to_thread(
                self.client.get_or_create_collection,
                name=self.collection_name,
                metadata={"hnsw:space": "cosine"},
                embedding_function=None,  # Embeddings are always provided
            )
            sample = await asyncio.to_thread(collection.get, limit=1, include=["embeddings"])
        except Exception as e:
            logger.error(f"Failed to open collection {self.collection_name}: {e}")
            raise SimilarityStoreError(
                f"Failed to open collection {self.collection_name}", cause=e
            ) from e

        embeddings = sample.get("embeddings")
        if embeddings is not None and len(embeddings) > 0:
            self._dimension = len(embeddings[0])
            logger.info(
                f"Collection {self.collection_name} holds {self._dimension}-dimensional vectors"
            )

        self._collection = collection
        return collection

    def _next_inserted_at(self) -> int:
        """Strictly increasing insertion stamp for this process."""
        self._last_inserted_at = max(time.time_ns(), self._last_inserted_at + 1)
        return self._last_inserted_at

    async def insert(self, text: str, vector: Sequence[float], token_count: int) -> Document:
        _validate_record(vector, token_count)
        collection = await self._get_collection()
        if self._dimension is not None and len(vector) != self._dimension:
            raise DimensionMismatch(self._dimension, len(vector))

        document = Document(
            id=uuid.uuid4().hex,
            text=text,
            embedding=tuple(float(v) for v in vector),
            token_count=token_count,
        )

        try:
            await asyncio.to_thread(
                collection.add,
                ids=[document.id],
                embeddings=[list(document.embedding)],
                documents=[document.text],
                metadatas=[{"token_count": token_count, "inserted_at": self._next_inserted_at()}],
            )
        except Exception as e:
            logger.error(f"Failed to add document to {self.collection_name}: {e}")
            raise SimilarityStoreError(
                f"Failed to add document to {self.collection_name}", cause=e
            ) from e

        if self._dimension is None:
            self._dimension = document.dimension
        logger.info(f"Added document {document.id} to collection {self.collection_name}")
        return document

    async def search(
        self,
        query_vector: Sequence[float],
        threshold: float,
        limit: int,
    ) -> list[QueryMatch]:
        if limit <= 0:
            return []
        collection = await self._get_collection()

        try:
            total = await asyncio.to_thread(collection.count)
            if total == 0:
                return []
            if self._dimension is not None and len(query_vector) != self._dimension:
                raise DimensionMismatch(self._dimension, len(query_vector))

            results = await asyncio.to_thread(
                collection.query,
                query_embeddings=[list(query_vector)],
                # Every candidate, so ties at the cutoff resolve by insertion order
                n_results=total,
                include=["documents", "metadatas", "distances", "embeddings"],
            )
        except SimilarityStoreError:
            raise
        except Exception as e:
            logger.error(f"Failed to search collection {self.collection_name}: {e}")
            raise SimilarityStoreError(
                f"Failed to search collection {self.collection_name}", cause=e
            ) from e

        ranked = []
        ids = results["ids"][0] if results["ids"] else []
        for i, document_id in enumerate(ids):
            metadata = results["metadatas"][0][i] or {}
            similarity = 1.0 - results["distances"][0][i]
            if similarity < threshold:
                continue
            document = Document(
                id=document_id,
                text=results["documents"][0][i],
                embedding=tuple(float(v) for v in results["embeddings"][0][i]),
                token_count=int(metadata.get("token_count", 0)),
            )
            ranked.append((similarity, metadata.get("inserted_at", 0), document))

        ranked.sort(key=lambda item: (-item[0], item[1]))
        matches = [QueryMatch(document=doc, similarity=sim) for sim, _, doc in ranked[:limit]]
        logger.info(f"Found {len(matches)} matches in {self.collection_name}")
        return matches

    async def count(self) -> int:
        collection = await self._get_collection()
        return await asyncio.to_thread(collection.count)

    async def reset(self) -> None:
        try:
            await asyncio.to_thread(self.client.delete_collection, name=self.collection_name)
            logger.info(f"Deleted collection: {self.collection_name}")
        except Exception as e:
            # Collection might not exist yet
            logger.warning(f"Failed to delete collection {self.collection_name}: {e}")
        self._collection = None
        self._dimension = None

    async def health_check(self) -> bool:
        try:
            await asyncio.to_thread(self.client.heartbeat)
            return True
        except Exception as e:
            logger.warning(f"ChromaDB health check failed: {e}")
            return False


def create_vector_database(settings: Settings | None = None) -> VectorDatabase:
    """Create the configured similarity store."""
    settings = settings or get_settings()
    if settings.vector_store == VectorStoreBackend.MEMORY:
        logger.info("Using in-memory similarity store")
        return InMemoryVectorDatabase()
    return ChromaVectorDatabase(
        host=settings.chroma_host,
        port=settings.chroma_port,
        collection_name=settings.collection_name,
    )
