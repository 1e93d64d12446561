"""Document domain models."""

import math
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class DocumentSummary(BaseModel):
    """Owned document metadata for listings."""

    document_id: UUID
    name: str
    uploaded_at: datetime
    chunk_count: int


class IngestResult(BaseModel):
    """Outcome of a successful ingestion."""

    document_id: UUID
    document_name: str
    chunk_count: int


class RetrievedChunk(BaseModel):
    """Chunk returned by the retriever with its cosine distance to the question."""

    chunk_id: UUID
    document_id: UUID
    document_name: str
    content: str
    distance: float

    @property
    def similarity(self) -> float:
        """1 - distance, rounded half-up to two decimals."""
        return math.floor((1 - self.distance) * 100 + 0.5) / 100
