"""
Chunk merge service.

Reassembles uploaded chunks into the final stored object.
"""
from typing import List, Optional, AsyncIterator
import logging

from ...exceptions import MergeFailed
from ..models import SourceFile, UploadTarget, ChunkUploadResult
from ..protocols import ObjectStorage, FileReaderProtocol
from .file_service import AsyncFileReader


class MergeEngine:
    """
    Produces the final object from a completed chunk set.

    Two tiers:
    1. Upload the whole original file to the target path.
    2. If that fails, download the chunks in index order and upload their
       concatenation.

    Chunks are deleted after either tier succeeds. When the fallback
    fails the chunks stay in storage for manual recovery.
    """

    def __init__(
        self,
        storage: ObjectStorage,
        file_reader: Optional[FileReaderProtocol] = None
    ):
        self._storage = storage
        self._file_reader = file_reader or AsyncFileReader()
        self._logger = logging.getLogger('videoupload.upload.merge')

    async def merge(
        self,
        file: SourceFile,
        target: UploadTarget,
        chunk_results: List[ChunkUploadResult]
    ) -> str:
        """
        Merge chunks into the target object.

        Args:
            file: Original source file
            target: Upload destination
            chunk_results: Every uploaded chunk, in any order

        Returns:
            Public URL of the final object

        Raises:
            MergeFailed: If both tiers failed
        """
        self._logger.info(f"Merging {len(chunk_results)} chunks into {target.path}")

        try:
            await self._storage.put_object(
                target.path,
                self._file_reader.stream(file.path),
                overwrite=True,
                content_type=file.content_type
            )
        except Exception as e:
            self._logger.warning(f"Whole-file upload failed, merging chunks on client side: {e}")
        else:
            self._logger.info("Full file uploaded successfully")
            await self.cleanup(chunk_results)
            return self._storage.public_url(target.path)

        ordered = sorted(chunk_results, key=lambda r: r.chunk_index)
        try:
            await self._storage.put_object(
                target.path,
                self._concatenate(ordered),
                overwrite=True,
                content_type=file.content_type
            )
        except Exception as e:
            self._logger.error(f"Merge failed, keeping {len(ordered)} chunks for recovery: {e}")
            raise MergeFailed(f"Failed to merge video chunks for {target.path}") from e

        self._logger.info("Chunks merged successfully")
        await self.cleanup(ordered)
        return self._storage.public_url(target.path)

    async def _concatenate(self, ordered: List[ChunkUploadResult]) -> AsyncIterator[bytes]:
        """Downloads chunks in order, yielding each as one piece of the body."""
        for result in ordered:
            data = await self._storage.get_object(result.storage_path)
            if len(data) != result.size:
                raise MergeFailed(
                    f"Chunk {result.chunk_index + 1} has {len(data)} bytes, expected {result.size}"
                )
            yield data

    async def cleanup(self, chunk_results: List[ChunkUploadResult]) -> None:
        """Delete chunk objects; failures are logged only."""
        paths = [r.storage_path for r in chunk_results]
        if not paths:
            return
        try:
            await self._storage.delete_objects(paths)
            self._logger.info(f"Cleaned up {len(paths)} chunks")
        except Exception as e:
            self._logger.warning(f"Failed to clean up chunks: {e}")
