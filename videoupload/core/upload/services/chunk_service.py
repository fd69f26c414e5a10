"""
Chunk upload service.

Handles uploading individual chunks to object storage.
"""
from typing import Optional
import logging
import time

from ...exceptions import ChunkUploadFailed, StorageError
from ..models import SourceFile, UploadTarget, ChunkDescriptor, ChunkUploadResult
from ..protocols import ObjectStorage, FileReaderProtocol
from ..strategies import RetryStrategy, ExponentialBackoffStrategy
from .file_service import AsyncFileReader


class ChunkTransporter:
    """
    Uploads one chunk as an independent object, with retries.

    Responsibilities:
    - Read the chunk's byte range from the source file
    - Store it at target.path + '.chunk' + index, overwriting prior attempts
    - Retry with exponential backoff; raise ChunkUploadFailed when exhausted
    """

    def __init__(
        self,
        storage: ObjectStorage,
        file_reader: Optional[FileReaderProtocol] = None,
        retry_strategy: Optional[RetryStrategy] = None
    ):
        """
        Initialize chunk transporter.

        Args:
            storage: Object storage backend
            file_reader: File reader implementation
            retry_strategy: Retry policy (5 attempts, 1s base delay by default)
        """
        self._storage = storage
        self._file_reader = file_reader or AsyncFileReader()
        self._retry = retry_strategy or ExponentialBackoffStrategy()
        self._logger = logging.getLogger('videoupload.upload.chunk')

    @property
    def max_attempts(self) -> int:
        return self._retry.max_attempts

    async def upload_chunk(
        self,
        file: SourceFile,
        target: UploadTarget,
        descriptor: ChunkDescriptor,
        session_id: Optional[str] = None
    ) -> ChunkUploadResult:
        """
        Upload a single chunk.

        Args:
            file: Source file
            target: Upload destination; the chunk path derives from it
            descriptor: Byte range to upload
            session_id: Upload session id (for log correlation)

        Returns:
            ChunkUploadResult for the stored chunk

        Raises:
            ChunkUploadFailed: If every attempt failed
        """
        chunk_path = target.chunk_path(descriptor.index)
        chunk_size_mb = descriptor.size / (1024 * 1024)
        self._logger.debug(
            f"Uploading chunk {descriptor.index + 1}: {descriptor.byte_start}-{descriptor.byte_end} "
            f"({chunk_size_mb:.2f} MB, session {session_id})"
        )

        attempt = 0
        while True:
            attempt += 1
            upload_start = time.time()
            try:
                data = await self._file_reader.read_chunk(
                    file.path, descriptor.byte_start, descriptor.byte_end
                )
                if data is None or len(data) != descriptor.size:
                    raise StorageError(
                        f"Could not read bytes {descriptor.byte_start}-{descriptor.byte_end} "
                        f"of {file.name}",
                        path=chunk_path
                    )

                await self._storage.put_object(
                    chunk_path,
                    data,
                    overwrite=True,
                    content_type='application/octet-stream'
                )
                upload_time = time.time() - upload_start
                speed_mbps = (chunk_size_mb / upload_time) if upload_time > 0 else 0
                self._logger.debug(
                    f"Chunk {descriptor.index + 1} uploaded in {upload_time:.2f}s ({speed_mbps:.2f} MB/s)"
                )
                return ChunkUploadResult(
                    chunk_index=descriptor.index,
                    storage_path=chunk_path,
                    size=descriptor.size
                )
            except Exception as e:
                self._logger.warning(
                    f"Chunk {descriptor.index + 1} failed "
                    f"(attempt {attempt}/{self._retry.max_attempts}): {e}"
                )
                if not self._retry.should_retry(attempt):
                    raise ChunkUploadFailed(descriptor.index, attempt) from e
                await self._retry.wait_async(attempt)
