"""
File validation and reading services.

Single Responsibility: Each class handles one specific task.
"""
from pathlib import Path
from typing import Optional, Union, Callable, AsyncIterator
import logging
import aiofiles

from ...config import UploadPolicy
from ...exceptions import SizeExceeded, UnsupportedFormat
from ...utils import format_size
from ..models import SourceFile, ValidationResult


class FileValidator:
    """
    Validates files before upload.

    Responsibilities:
    - Check size against the policy maximum
    - Check extension against the allowed set
    - Warn about files that will take the chunked path

    validate() is pure; it never touches the disk or the network.
    """

    SIZE_EXCEEDED = 'size_exceeded'
    UNSUPPORTED_FORMAT = 'unsupported_format'

    def __init__(self, policy: Optional[UploadPolicy] = None):
        self._policy = policy or UploadPolicy()
        self._logger = logging.getLogger('videoupload.upload.validator')

    def validate(self, file: SourceFile) -> ValidationResult:
        """
        Validate a file against the upload policy.

        Args:
            file: File to check

        Returns:
            ValidationResult; valid results may carry a warning
        """
        policy = self._policy
        self._logger.debug(
            f"Validating file: {file.name} ({file.content_type}, {format_size(file.size)})"
        )

        if file.size > policy.max_file_size:
            return ValidationResult(
                valid=False,
                error=(
                    f"File size ({format_size(file.size)}) exceeds the maximum "
                    f"allowed ({format_size(policy.max_file_size)})"
                ),
                error_type=self.SIZE_EXCEEDED
            )

        extension = file.extension
        if extension not in policy.allowed_extensions:
            supported = ', '.join(sorted(ext.upper() for ext in policy.allowed_extensions))
            return ValidationResult(
                valid=False,
                error=f"Format '{extension}' is not supported. Supported formats: {supported}",
                error_type=self.UNSUPPORTED_FORMAT
            )

        if file.size > policy.large_file_warning_threshold:
            return ValidationResult(
                valid=True,
                warning=(
                    f"Large file ({format_size(file.size)}). Chunked upload will be "
                    f"used; the upload may take several minutes."
                )
            )

        return ValidationResult(valid=True)

    def raise_for(self, file: SourceFile, result: ValidationResult) -> None:
        """
        Raise the matching exception for a failed validation result.

        Raises:
            SizeExceeded: If the file is too large
            UnsupportedFormat: If the extension is not allowed
        """
        if result.valid:
            return
        if result.error_type == self.SIZE_EXCEEDED:
            raise SizeExceeded(result.error)
        raise UnsupportedFormat(result.error, extension=file.extension)

    def validate_path(self, file_path: Union[str, Path]) -> SourceFile:
        """
        Resolve a local path to a SourceFile.

        Args:
            file_path: Path to the file

        Returns:
            SourceFile with size and media type

        Raises:
            FileNotFoundError: If file doesn't exist
            ValueError: If path is not a regular file
        """
        path = Path(file_path) if isinstance(file_path, str) else file_path

        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        if not path.is_file():
            raise ValueError(f"Path is not a file: {path}")

        return SourceFile.from_path(path)


class AsyncFileReader:
    """
    Asynchronous file reader for chunk-based reading.

    Uses aiofiles for non-blocking I/O operations.
    Each read_chunk() call opens its own handle, so concurrent chunk
    reads never share a file position.
    """

    STREAM_PIECE_SIZE = 1024 * 1024

    def __init__(self, piece_size: int = STREAM_PIECE_SIZE):
        """Initialize file reader."""
        self._logger = logging.getLogger('videoupload.upload.file')
        self._piece_size = piece_size

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
        try:
            async with aiofiles.open(file_path, 'rb') as f:
                await f.seek(start)
                data = await f.read(end - start)

            if data:
                self._logger.debug(f"Read chunk: {start}-{end} ({len(data)} bytes)")
            return data if data else None
        except (IOError, OSError) as e:
            self._logger.error(f"Failed to read chunk {start}-{end}: {e}")
            return None

    async def stream(
        self,
        file_path: Path,
        on_read: Optional[Callable[[int], None]] = None
    ) -> AsyncIterator[bytes]:
        """
        Stream a whole file in pieces.

        Args:
            file_path: Path to the file
            on_read: Called with the cumulative byte count after each piece
                is handed to the consumer

        Yields:
            File pieces of at most piece_size bytes
        """
        loaded = 0
        async with aiofiles.open(file_path, 'rb') as f:
            while True:
                piece = await f.read(self._piece_size)
                if not piece:
                    break
                yield piece
                loaded += len(piece)
                if on_read:
                    on_read(loaded)
