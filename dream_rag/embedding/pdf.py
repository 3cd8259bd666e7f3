"""Plain-text extraction from uploaded PDF files."""

import io
import logging

import PyPDF2

from dream_rag.errors import PDFExtractionError

logger = logging.getLogger(__name__)


def extract_pdf_text(data: bytes) -> str:
    """Extract the text of every page of a PDF.

    Args:
        data: Raw PDF bytes

    Returns:
        Text of the non-blank pages joined by newlines, possibly empty for
        scanned documents without a text layer

    Raises:
        PDFExtractionError: If the bytes cannot be parsed as a PDF
    """
    if not data:
        raise PDFExtractionError("Uploaded file is empty")

    try:
        reader = PyPDF2.PdfReader(io.BytesIO(data))
        text_parts = []
        for page in reader.pages:
            text = page.extract_text() or ""
            if text.strip():
                text_parts.append(text.strip())
    except Exception as e:
        logger.error(f"Error extracting PDF text: {e}")
        raise PDFExtractionError(f"Could not read PDF: {e}", cause=e) from e

    logger.info(f"Extracted {len(text_parts)} pages of text from PDF")
    return "\n".join(text_parts)
