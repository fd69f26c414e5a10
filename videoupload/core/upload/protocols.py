"""
Protocol definitions for upload module.

Defines interfaces (protocols) for dependency injection and strategy pattern.
Following Interface Segregation Principle (ISP) and Dependency Inversion Principle (DIP).
"""
from typing import (
    Protocol, List, Optional, Union, AsyncIterable, Callable, runtime_checkable
)
from pathlib import Path

from .models import ChunkDescriptor, ProgressSample

ObjectBody = Union[bytes, AsyncIterable[bytes]]
ProgressCallback = Callable[[ProgressSample], None]


class ChunkingStrategy(Protocol):
    """
    Protocol for file chunking strategies.

    Allows different chunking algorithms to be plugged in.
    """

    def plan(self, file_size: int) -> List[ChunkDescriptor]:
        """
        Calculate chunk descriptors for a file.

        Args:
            file_size: Total file size in bytes

        Returns:
            Ordered list of chunk descriptors
        """
        ...


class FileReaderProtocol(Protocol):
    """Protocol for file reading operations."""

    async def read_chunk(
        self,
        file_path: Path,
        start: int,
        end: int
    ) -> Optional[bytes]:
        """
        Read a chunk from a file.

        Args:
            file_path: Path to the file
            start: Start position in bytes
            end: End position in bytes

        Returns:
            Chunk data or None if reading failed
        """
        ...

    def stream(
        self,
        file_path: Path,
        on_read: Optional[Callable[[int], None]] = None
    ) -> AsyncIterable[bytes]:
        """
        Stream a whole file in pieces.

        Args:
            file_path: Path to the file
            on_read: Called with the cumulative byte count after each piece

        Returns:
            Async iterator of file pieces
        """
        ...


@runtime_checkable
class ObjectStorage(Protocol):
    """
    Protocol for object storage backends.

    Implementations are treated as opaque by the upload engine.
    """

    async def put_object(
        self,
        path: str,
        data: ObjectBody,
        *,
        overwrite: bool = False,
        content_type: Optional[str] = None
    ) -> None:
        """
        Store an object.

        Args:
            path: Object path inside the bucket
            data: Object bytes or an async iterator of byte pieces
            overwrite: Replace an existing object at the same path
            content_type: Media type of the object

        Raises:
            StorageError: If the backend rejects the upload
        """
        ...

    async def get_object(self, path: str) -> bytes:
        """
        Download an object.

        Raises:
            StorageError: If the object cannot be retrieved
        """
        ...

    async def delete_objects(self, paths: List[str]) -> None:
        """Delete objects, best-effort."""
        ...

    def public_url(self, path: str) -> str:
        """Returns the public URL of an object."""
        ...
