"""Main entry point for the dream interpretation service."""

import asyncio
import logging
import sys

from dotenv import load_dotenv

from dream_rag.config import get_settings
from dream_rag.query import QueryProcessor
from dream_rag.web_server import WebServer

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    """Configure root logging once for the process."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


async def main() -> None:
    """Main application entry point."""
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info(f"Starting dream interpreter in {settings.environment.value} mode")
    logger.info(f"Using LLM provider: {settings.llm_provider.value}")
    logger.info(f"Using embedding provider: {settings.resolved_embedding_provider.value}")

    # Validate configuration
    try:
        settings.validate_provider_config()
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    processor = QueryProcessor.from_settings(settings)
    web_server = WebServer(processor, host=settings.web_host, port=settings.web_port)
    runner = await web_server.start()

    try:
        await asyncio.Event().wait()
    finally:
        logger.info("Shutting down...")
        await web_server.stop(runner)


def run() -> None:
    """Console script entry point."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
