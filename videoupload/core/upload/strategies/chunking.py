"""
Chunking strategies for file uploads.

Implements Strategy Pattern for different chunking algorithms.
Open for extension (new strategies), closed for modification.
"""
from abc import ABC, abstractmethod
from typing import List

from ..models import ChunkDescriptor


class BaseChunkingStrategy(ABC):
    """Abstract base class for chunking strategies."""

    @abstractmethod
    def plan(self, file_size: int) -> List[ChunkDescriptor]:
        """Calculate chunk descriptors."""
        pass


class FixedSizeChunkingStrategy(BaseChunkingStrategy):
    """
    Fixed-size chunking strategy.

    Every chunk is chunk_size bytes except the last one, which holds
    the remainder. Chunks partition [0, file_size) exactly.
    """

    DEFAULT_CHUNK_SIZE = 50 * 1024 * 1024  # 50MB

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE):
        """
        Initialize with chunk size.

        Args:
            chunk_size: Size of each chunk in bytes
        """
        if chunk_size <= 0:
            raise ValueError("Chunk size must be positive")
        self.chunk_size = chunk_size

    def total_chunks(self, file_size: int) -> int:
        """Returns ceil(file_size / chunk_size)."""
        return -(-file_size // self.chunk_size)

    def plan(self, file_size: int) -> List[ChunkDescriptor]:
        """
        Calculate fixed-size chunk descriptors.

        Args:
            file_size: Total file size in bytes

        Returns:
            Ordered list of chunk descriptors
        """
        return plan_chunks(file_size, self.chunk_size)


def plan_chunks(file_size: int, chunk_size: int) -> List[ChunkDescriptor]:
    """
    Split [0, file_size) into consecutive chunk descriptors.

    Args:
        file_size: Total file size in bytes
        chunk_size: Size of each chunk in bytes

    Returns:
        Ordered list of chunk descriptors (empty for an empty file)
    """
    if chunk_size <= 0:
        raise ValueError("Chunk size must be positive")
    if file_size < 0:
        raise ValueError("File size cannot be negative")

    total = -(-file_size // chunk_size)
    chunks = []
    for index in range(total):
        start = index * chunk_size
        end = min(start + chunk_size, file_size)
        chunks.append(ChunkDescriptor(index=index, byte_start=start, byte_end=end))

    return chunks
