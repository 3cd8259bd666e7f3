"""Data models for stored documents and search matches."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Document:
    """A unit of reference text held by the similarity store."""

    id: str
    text: str
    embedding: tuple[float, ...]
    token_count: int

    @property
    def dimension(self) -> int:
        """Return the length of the embedding vector."""
        return len(self.embedding)

    def to_dict(self, include_embedding: bool = False) -> dict[str, Any]:
        """Convert the document to a JSON-serializable dictionary."""
        data: dict[str, Any] = {
            "id": self.id,
            "text": self.text,
            "token_count": self.token_count,
            "dimension": self.dimension,
        }
        if include_embedding:
            data["embedding"] = list(self.embedding)
        return data


@dataclass(frozen=True)
class QueryMatch:
    """A ranked result of a similarity search."""

    document: Document
    similarity: float

    def to_dict(self) -> dict[str, Any]:
        """Convert the match to a JSON-serializable dictionary."""
        return {
            "text": self.document.text,
            "token_count": self.document.token_count,
            "similarity": self.similarity,
        }
