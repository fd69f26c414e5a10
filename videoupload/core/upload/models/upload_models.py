"""
Data models for upload module.

Uses dataclasses for immutable, type-safe data structures.
"""
from dataclasses import dataclass
from typing import Optional, Union
from pathlib import Path
import mimetypes

from ...utils import format_size, format_duration

DEFAULT_CONTENT_TYPE = 'video/mp4'


@dataclass(frozen=True)
class SourceFile:
    """
    Local file to upload.

    Attributes:
        path: Path to the file on disk
        name: File name used for validation and session records
        size: File size in bytes
        content_type: Media type sent to object storage
    """
    path: Path
    name: str
    size: int
    content_type: str = DEFAULT_CONTENT_TYPE

    @classmethod
    def from_path(
        cls,
        file_path: Union[str, Path],
        content_type: Optional[str] = None
    ) -> 'SourceFile':
        """
        Create from a path on disk.

        Args:
            file_path: Path to the file
            content_type: Optional media type, guessed from the name otherwise

        Returns:
            SourceFile instance
        """
        path = Path(file_path)
        if content_type is None:
            guessed, _ = mimetypes.guess_type(path.name)
            content_type = guessed or DEFAULT_CONTENT_TYPE
        return cls(
            path=path,
            name=path.name,
            size=path.stat().st_size,
            content_type=content_type
        )

    @property
    def extension(self) -> str:
        """Returns the lowercase substring after the last dot."""
        if '.' not in self.name:
            return ''
        return self.name.lower().rsplit('.', 1)[-1]


@dataclass(frozen=True)
class UploadTarget:
    """
    Logical upload destination.

    Attributes:
        bucket: Storage bucket name
        path: Object path inside the bucket
    """
    bucket: str
    path: str

    def chunk_path(self, chunk_index: int) -> str:
        """Returns the stable storage path of a chunk."""
        return f"{self.path}.chunk{chunk_index}"


@dataclass(frozen=True)
class ChunkDescriptor:
    """
    Byte range of a file chunk.

    Attributes:
        index: Chunk index
        byte_start: Start position in bytes (inclusive)
        byte_end: End position in bytes (exclusive)
    """
    index: int
    byte_start: int
    byte_end: int

    @property
    def size(self) -> int:
        """Returns chunk size."""
        return self.byte_end - self.byte_start


@dataclass(frozen=True)
class ChunkUploadResult:
    """
    Result of a successful chunk upload.

    Attributes:
        chunk_index: Index of the uploaded chunk
        storage_path: Object path the chunk was stored at
        size: Chunk size in bytes
    """
    chunk_index: int
    storage_path: str
    size: int


@dataclass(frozen=True)
class ProgressSample:
    """
    Upload progress information.

    Attributes:
        loaded_bytes: Bytes transferred so far
        total_bytes: Total file size
        percentage: Progress as percentage (0-100)
        bytes_per_second: Throughput since the previous sample
        seconds_remaining: Estimated time remaining
        current_chunk: Chunks completed (1 for the direct path)
        total_chunks: Total number of chunks (1 for the direct path)
    """
    loaded_bytes: int
    total_bytes: int
    percentage: float
    bytes_per_second: float
    seconds_remaining: float
    current_chunk: int
    total_chunks: int

    @property
    def is_complete(self) -> bool:
        """Returns True if all bytes are transferred."""
        return self.loaded_bytes >= self.total_bytes

    @property
    def speed_text(self) -> str:
        """Returns throughput as e.g. '12.50 MB/s'."""
        return f"{format_size(self.bytes_per_second)}/s"

    @property
    def eta_text(self) -> str:
        """Returns remaining time as e.g. '3m 20s'."""
        return format_duration(self.seconds_remaining)


@dataclass(frozen=True)
class ProgressState:
    """
    Timing state carried between progress samples.

    Attributes:
        last_sample_time: Monotonic time of the previous sample
        last_loaded_bytes: Bytes loaded at the previous sample
    """
    last_sample_time: float
    last_loaded_bytes: int = 0


@dataclass(frozen=True)
class ValidationResult:
    """
    Outcome of pre-flight validation.

    Attributes:
        valid: True if the file may be uploaded
        error: Error message when invalid
        warning: Non-fatal message for large files
        error_type: 'size_exceeded' or 'unsupported_format' when invalid
    """
    valid: bool
    error: Optional[str] = None
    warning: Optional[str] = None
    error_type: Optional[str] = None
