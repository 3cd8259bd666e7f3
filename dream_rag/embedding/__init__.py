"""Embedding, similarity store and ingestion module."""

from .client import EmbeddingClient
from .indexer import DocumentIndexer, IngestionResult, IngestionState
from .models import Document, QueryMatch
from .pdf import extract_pdf_text
from .vectorizer import (
    ChromaVectorDatabase,
    InMemoryVectorDatabase,
    VectorDatabase,
    create_vector_database,
)

__all__ = [
    "ChromaVectorDatabase",
    "Document",
    "DocumentIndexer",
    "EmbeddingClient",
    "InMemoryVectorDatabase",
    "IngestionResult",
    "IngestionState",
    "QueryMatch",
    "VectorDatabase",
    "create_vector_database",
    "extract_pdf_text",
]
