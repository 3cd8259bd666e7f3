"""Shared fixtures."""

import pytest

from dream_rag.embedding import DocumentIndexer, EmbeddingClient, InMemoryVectorDatabase
from dream_rag.query import GenerationClient, QueryProcessor

from fakes import FakeProvider


@pytest.fixture
def fake_provider():
    """Fake provider shared by embedding and generation."""
    return FakeProvider()


@pytest.fixture
def vector_db():
    """Empty in-memory similarity store."""
    return InMemoryVectorDatabase()


@pytest.fixture
def processor(fake_provider, vector_db):
    """Query processor wired to fakes."""
    return QueryProcessor(
        embedding_client=EmbeddingClient(fake_provider),
        vector_db=vector_db,
        generation_client=GenerationClient(fake_provider),
    )


@pytest.fixture
def indexer(fake_provider, vector_db):
    """Document indexer wired to fakes."""
    return DocumentIndexer(embedding_client=EmbeddingClient(fake_provider), vector_db=vector_db)
