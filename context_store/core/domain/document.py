"""Collection, document and search result models for the vector store."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .exceptions import ValidationError


@dataclass
class CollectionInfo:
    """Catalog entry describing a collection.

    Attributes:
        name: Normalized collection name.
        dimension: Vector length every document in the collection must have.
        description: Optional free text.
        created_at: ISO-8601 creation timestamp.
        document_count: Live point count, only filled by describe_collection.
    """

    name: str
    dimension: int
    description: str = ""
    created_at: str = ""
    document_count: int | None = None


@dataclass
class VectorDocument:
    """One embedded source-code fragment.

    The id is assigned by the caller and is the idempotency key for upsert.
    Line numbers are 1-based and inclusive.

    Attributes:
        id: Unique identifier within a collection.
        vector: Embedding components; empty when omitted from a search result.
        content: Raw text of the fragment.
        relative_path: Path of the source file relative to the codebase root.
        start_line: First line of the fragment.
        end_line: Last line of the fragment.
        file_extension: Extension of the source file, e.g. ".py".
        metadata: JSON-compatible provenance such as language and filename.
    """

    id: str
    vector: list[float]
    content: str
    relative_path: str
    start_line: int
    end_line: int
    file_extension: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.id:
            raise ValidationError("Document id must not be empty")
        if self.start_line < 1:
            raise ValidationError(
                "start_line must be >= 1",
                context={"id": self.id, "start_line": self.start_line},
            )
        if self.end_line < self.start_line:
            raise ValidationError(
                "end_line must be >= start_line",
                context={"id": self.id, "start_line": self.start_line, "end_line": self.end_line},
            )


@dataclass
class SearchResult:
    """A search result with document and relevance score.

    Attributes:
        document: The matched VectorDocument.
        score: Similarity, higher is more similar. For fused results this is
            the reciprocal rank fusion score.
        source_signals: Per-signal raw scores for hybrid results.
    """

    document: VectorDocument
    score: float
    source_signals: dict[str, float] | None = None


class SignalKind(str, Enum):
    """Ranking signals understood by hybrid search."""

    DENSE = "dense"
    KEYWORD = "keyword"
    SPARSE = "sparse"


@dataclass
class SignalRequest:
    """One ranking signal and its query payload.

    Dense signals carry a vector, keyword signals carry the query text.
    """

    kind: str
    data: Any


@dataclass
class HybridSearchOptions:
    limit: int = 10
    filter_expr: str | None = None
