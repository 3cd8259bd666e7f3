"""Tests for document ingestion."""

import threading
from unittest.mock import patch

import pytest

from dream_rag.embedding import EmbeddingClient, IngestionState
from dream_rag.embedding.indexer import DocumentIndexer
from dream_rag.errors import DimensionMismatch, EmbeddingFailure, PDFExtractionError

from fakes import FakeProvider


class TestDocumentIndexer:
    """Test the ingestion pipeline."""

    @pytest.mark.asyncio
    async def test_index_text(self, indexer, vector_db, fake_provider):
        result = await indexer.index_text("  Paris is the capital of France.\n")

        assert result.state == IngestionState.DONE
        assert result.document.text == "Paris is the capital of France."
        assert result.document.token_count == 6
        assert await vector_db.count() == 1
        assert fake_provider.embedded == ["Paris is the capital of France."]

    @pytest.mark.asyncio
    async def test_indexed_text_is_searchable(self, indexer, vector_db):
        await indexer.index_text("Water often stands for emotion.")

        matches = await vector_db.search([1.0, 0.0], threshold=0.2, limit=1)

        assert matches[0].document.text == "Water often stands for emotion."
        assert matches[0].similarity == pytest.approx(1.0)

    @pytest.mark.asyncio
    async def test_blank_text_rejected(self, indexer, vector_db, fake_provider):
        with pytest.raises(ValueError):
            await indexer.index_text(" \n\t")

        assert fake_provider.embedded == []
        assert await vector_db.count() == 0

    @pytest.mark.asyncio
    async def test_dimension_mismatch_propagates(self, vector_db):
        provider = FakeProvider(vectors={"short": [1.0, 0.0], "long": [1.0, 0.0, 0.0]})
        indexer = DocumentIndexer(embedding_client=EmbeddingClient(provider), vector_db=vector_db)

        await indexer.index_text("short")
        with pytest.raises(DimensionMismatch):
            await indexer.index_text("long")

        assert await vector_db.count() == 1

    @pytest.mark.asyncio
    async def test_embedding_failure_stores_nothing(self, vector_db):
        provider = FakeProvider(embedding_error=RuntimeError("offline"))
        indexer = DocumentIndexer(embedding_client=EmbeddingClient(provider), vector_db=vector_db)

        with pytest.raises(EmbeddingFailure):
            await indexer.index_text("a dream")

        assert await vector_db.count() == 0

    @pytest.mark.asyncio
    async def test_index_pdf(self, indexer, vector_db):
        with patch(
            "dream_rag.embedding.indexer.extract_pdf_text",
            return_value="Falling dreams signal anxiety.",
        ) as mock_extract:
            result = await indexer.index_pdf(b"%PDF-fake")

        mock_extract.assert_called_once_with(b"%PDF-fake")
        assert result.document.text == "Falling dreams signal anxiety."
        assert await vector_db.count() == 1

    @pytest.mark.asyncio
    async def test_index_pdf_parses_in_worker_thread(self, indexer):
        loop_thread = threading.get_ident()
        parse_threads = []

        def fake_extract(data):
            parse_threads.append(threading.get_ident())
            return "Flying dreams mean freedom."

        with patch("dream_rag.embedding.indexer.extract_pdf_text", side_effect=fake_extract):
            await indexer.index_pdf(b"%PDF-fake")

        assert parse_threads and parse_threads[0] != loop_thread

    @pytest.mark.asyncio
    async def test_index_pdf_unreadable(self, indexer):
        with pytest.raises(PDFExtractionError):
            await indexer.index_pdf(b"not a pdf")

    @pytest.mark.asyncio
    async def test_index_many_collects_errors(self, indexer, vector_db):
        """Test that a bad document does not stop the batch."""
        stats = await indexer.index_many(["one dream", "  ", "two dreams here"], batch_size=2)

        assert stats["documents_indexed"] == 2
        assert stats["documents_failed"] == 1
        assert stats["errors"][0]["index"] == 1
        assert stats["tokens_indexed"] == 5
        assert await vector_db.count() == 2

    @pytest.mark.asyncio
    async def test_reset(self, indexer, vector_db):
        await indexer.index_text("a dream")
        await indexer.reset()
        assert await vector_db.count() == 0

    @pytest.mark.asyncio
    async def test_health_check(self, indexer):
        health = await indexer.health_check()
        assert health["overall"] is True
