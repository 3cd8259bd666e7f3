"""HTTP server exposing the question and ingestion surfaces."""

import asyncio
import json
import logging
from typing import Any

from aiohttp import web

from dream_rag.embedding import DocumentIndexer, extract_pdf_text
from dream_rag.errors import (
    DimensionMismatch,
    EmbeddingFailure,
    GenerationFailure,
    PDFExtractionError,
    SimilarityStoreError,
)
from dream_rag.query import QueryProcessor

logger = logging.getLogger(__name__)

MAX_UPLOAD_BYTES = 20 * 1024 * 1024


class WebServer:
    """JSON HTTP server in front of the query processor and indexer."""

    def __init__(
        self,
        processor: QueryProcessor,
        indexer: DocumentIndexer | None = None,
        host: str = "0.0.0.0",
        port: int = 3000,
    ):
        """Initialize web server.

        Args:
            processor: Query processor answering questions
            indexer: Indexer for new documents, shares the processor's
                embedding client and store if None
            host: Bind address
            port: Bind port
        """
        self.processor = processor
        self.indexer = indexer or DocumentIndexer(
            embedding_client=processor.embedding_client,
            vector_db=processor.vector_db,
        )
        self.host = host
        self.port = port
        self.app = web.Application(client_max_size=MAX_UPLOAD_BYTES)
        self._setup_routes()
        logger.info(f"Web server initialized on port {port}")

    def _setup_routes(self):
        """Set up HTTP routes."""
        self.app.router.add_get("/", self._handle_health)
        self.app.router.add_get("/health", self._handle_health)
        self.app.router.add_post("/api/query", self._handle_query)
        self.app.router.add_get("/api/turns", self._handle_turns)
        self.app.router.add_post("/api/documents", self._handle_add_document)
        self.app.router.add_post("/api/documents/pdf", self._handle_add_pdf)
        self.app.router.add_post("/api/pdf", self._handle_extract_pdf)
        self.app.router.add_post("/api/embedding", self._handle_embedding)
        self.app.router.add_post("/api/chat", self._handle_chat)
        logger.info(
            "Routes configured: /, /health, /api/query, /api/turns, /api/documents, "
            "/api/documents/pdf, /api/pdf, /api/embedding, /api/chat"
        )

    async def _read_json(self, request: web.Request) -> dict[str, Any]:
        try:
            data = await request.json()
        except ValueError:
            # Malformed JSON or a body that is not valid UTF-8
            raise web.HTTPBadRequest(
                text=json.dumps({"error": "Request body must be JSON"}),
                content_type="application/json",
            )
        if not isinstance(data, dict):
            raise web.HTTPBadRequest(
                text=json.dumps({"error": "Request body must be a JSON object"}),
                content_type="application/json",
            )
        return data

    async def _read_upload(self, request: web.Request) -> bytes | None:
        """Return the bytes of the multipart ``file`` field, if any."""
        form = await request.post()
        upload = form.get("file")
        if not isinstance(upload, web.FileField):
            return None
        return upload.file.read()

    async def _handle_health(self, request: web.Request) -> web.Response:
        """Health check endpoint."""
        health = await self.processor.health_check()
        status = "healthy" if health["overall"] else "degraded"
        return web.json_response({"status": status, "service": "dream-rag", "components": health})

    async def _handle_query(self, request: web.Request) -> web.Response:
        """Answer one question.

        Expects JSON: {"question": "..."}. Failed turns still return 200 with
        the fallback answer recorded in the turn.
        """
        data = await self._read_json(request)
        question = data.get("question")
        if not isinstance(question, str) or not question.strip():
            return web.json_response({"error": "No question provided"}, status=400)

        try:
            result = await self.processor.process_query(question)
        except Exception as e:
            logger.error(f"Error handling query: {e}", exc_info=True)
            return web.json_response({"error": "Internal error"}, status=500)

        return web.json_response(
            {
                "turn": result.turn.to_dict(),
                "matches": [match.to_dict() for match in result.matches],
                "context_tokens": result.context.used_tokens,
                "processing_time": result.processing_time,
            }
        )

    async def _handle_turns(self, request: web.Request) -> web.Response:
        """Return the conversation history."""
        turns = self.processor.turns()
        return web.json_response(
            {
                "turns": [turn.to_dict() for turn in turns],
                "pending": self.processor.pending,
            }
        )

    async def _handle_add_document(self, request: web.Request) -> web.Response:
        """Ingest typed reference text. Expects JSON: {"text": "..."}."""
        data = await self._read_json(request)
        text = data.get("text")
        if not isinstance(text, str) or not text.strip():
            return web.json_response({"error": "No text provided"}, status=400)
        return await self._ingest(self.indexer.index_text(text))

    async def _handle_add_pdf(self, request: web.Request) -> web.Response:
        """Extract text from an uploaded PDF and ingest it."""
        content = await self._read_upload(request)
        if content is None:
            return web.json_response({"error": "No file uploaded"}, status=400)
        return await self._ingest(self.indexer.index_pdf(content))

    async def _ingest(self, ingestion) -> web.Response:
        try:
            result = await ingestion
        except ValueError as e:
            return web.json_response({"error": str(e)}, status=400)
        except (DimensionMismatch, PDFExtractionError) as e:
            return web.json_response({"error": e.to_dict()}, status=422)
        except EmbeddingFailure as e:
            return web.json_response({"error": e.to_dict()}, status=502)
        except SimilarityStoreError as e:
            logger.error(f"Error storing document: {e}", exc_info=True)
            return web.json_response({"error": e.to_dict()}, status=503)

        return web.json_response(
            {"document": result.document.to_dict(), "state": result.state.value},
            status=201,
        )

    async def _handle_extract_pdf(self, request: web.Request) -> web.Response:
        """Extract text from an uploaded PDF without ingesting it."""
        content = await self._read_upload(request)
        if content is None:
            return web.json_response({"error": "No file uploaded"}, status=400)
        try:
            text = await asyncio.to_thread(extract_pdf_text, content)
        except PDFExtractionError as e:
            return web.json_response({"error": e.to_dict()}, status=422)
        return web.json_response({"data": text})

    async def _handle_embedding(self, request: web.Request) -> web.Response:
        """Embed text. Expects JSON: {"text": "..."}."""
        data = await self._read_json(request)
        text = data.get("text")
        if not isinstance(text, str) or not text.strip():
            return web.json_response({"error": "Invalid request missing key."}, status=422)

        try:
            result = await self.processor.embedding_client.embed(text)
        except EmbeddingFailure as e:
            return web.json_response({"error": e.to_dict()}, status=502)

        return web.json_response({"embedding": result.embedding, "token": result.token_count})

    async def _handle_chat(self, request: web.Request) -> web.Response:
        """Generate text for a rendered prompt. Expects JSON: {"prompt": "..."}."""
        data = await self._read_json(request)
        prompt = data.get("prompt")
        if not isinstance(prompt, str) or not prompt.strip():
            return web.json_response({"error": "No prompt provided"}, status=422)

        try:
            answer = await self.processor.generation_client.generate(prompt)
        except GenerationFailure as e:
            return web.json_response({"error": e.to_dict()}, status=502)

        return web.json_response({"choices": answer})

    async def start(self) -> web.AppRunner:
        """Start the web server."""
        runner = web.AppRunner(self.app)
        await runner.setup()
        site = web.TCPSite(runner, self.host, self.port)
        await site.start()
        logger.info(f"Web server started on http://{self.host}:{self.port}")
        return runner

    async def stop(self, runner: web.AppRunner) -> None:
        """Stop the web server."""
        await runner.cleanup()
        logger.info("Web server stopped")
