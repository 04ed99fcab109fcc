"""Embedding Port Interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass
class EmbeddingVector:
    vector: list[float]
    dimension: int


class EmbeddingPort(ABC):
    """Abstract interface for embedding providers."""

    @property
    @abstractmethod
    def dimension(self) -> int: ...

    @abstractmethod
    async def embed(self, text: str) -> EmbeddingVector: ...

    @abstractmethod
    async def embed_batch(self, texts: list[str]) -> list[EmbeddingVector]: ...
