#!/usr/bin/env python3
"""
Bulk indexer for reference documents in a local folder.
Handles .txt, .md and .pdf files; each file becomes one document.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from dream_rag.config import get_settings
from dream_rag.embedding import DocumentIndexer, extract_pdf_text
from dream_rag.errors import PDFExtractionError

load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

TEXT_SUFFIXES = {".txt", ".md"}


def read_documents(folder: Path) -> list[str]:
    """Read the text of every supported file under a folder."""
    texts = []
    for path in sorted(folder.rglob("*")):
        if not path.is_file():
            continue
        suffix = path.suffix.lower()
        if suffix in TEXT_SUFFIXES:
            texts.append(path.read_text(encoding="utf-8"))
        elif suffix == ".pdf":
            try:
                texts.append(extract_pdf_text(path.read_bytes()))
            except PDFExtractionError as e:
                logger.warning(f"Skipping {path}: {e}")
                continue
        else:
            continue
        logger.info(f"Read {path}")
    return [text for text in texts if text.strip()]


async def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Index reference documents")
    parser.add_argument("folder", type=Path, help="Folder holding .txt, .md or .pdf files")
    parser.add_argument("--batch-size", type=int, default=10, help="Documents embedded at once")
    parser.add_argument("--reset", action="store_true", help="Delete all stored documents first")
    args = parser.parse_args()

    settings = get_settings()
    settings.validate_provider_config()

    print("DOCUMENT INDEXER")
    print("=" * 60)
    print(f"Folder: {args.folder}")
    print(f"Store: {settings.vector_store.value} ({settings.collection_name})")
    print(f"Embeddings: {settings.resolved_embedding_provider.value}")
    print("=" * 60)

    texts = read_documents(args.folder)
    if not texts:
        print("No documents found")
        return 1

    indexer = DocumentIndexer()
    if args.reset:
        await indexer.reset()

    stats = await indexer.index_many(texts, batch_size=args.batch_size)

    print("=" * 60)
    print(f"Indexed: {stats['documents_indexed']}")
    print(f"Failed: {stats['documents_failed']}")
    print(f"Tokens: {stats['tokens_indexed']}")
    print(f"Time: {stats['elapsed_seconds']:.1f}s")
    for error in stats["errors"][:3]:
        print(f"   - document {error['index']}: {error['error'][:100]}")
    print("=" * 60)
    return 0 if stats["documents_failed"] == 0 else 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
