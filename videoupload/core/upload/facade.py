"""
Upload facade.

Provides a simplified interface for large video uploads.
Follows Facade Pattern - hides complexity of the upload subsystem.
"""
from pathlib import Path
from typing import Optional, Union
import logging

from ..config import UploadPolicy, SupabaseConfig
from ..session import SessionStore, RestSessionStore
from ..storage import SupabaseStorage
from .coordinator import UploadCoordinator
from .models import SourceFile, ValidationResult
from .protocols import ObjectStorage, ProgressCallback


class LargeVideoUploader:
    """
    Simplified interface for video uploads.

    This is the main entry point for uploading videos.
    Hides the complexity of chunking, retries, sessions and merging.

    Example:
        >>> from videoupload import LargeVideoUploader, SupabaseConfig
        >>> async with LargeVideoUploader.from_config(SupabaseConfig.from_env()) as uploader:
        ...     check = uploader.validate_file("farm-tour.mp4")
        ...     url = await uploader.upload_large_video("farm-tour.mp4", "farms/12/tour.mp4")
    """

    def __init__(
        self,
        storage: ObjectStorage,
        session_store: Optional[SessionStore] = None,
        policy: Optional[UploadPolicy] = None,
        log_level: Optional[int] = None
    ):
        """
        Initialize upload facade.

        Args:
            storage: Object storage backend
            session_store: Optional store for resumability records
            policy: Upload policy constants
            log_level: Level for the upload loggers; unset keeps the
                level chosen by setup_logging
        """
        self._logger = logging.getLogger('videoupload.upload')
        if log_level is not None:
            self._logger.setLevel(log_level)
        self._storage = storage
        self._session_store = session_store
        self._coordinator = UploadCoordinator(
            storage=storage,
            session_store=session_store,
            policy=policy
        )

    @classmethod
    def from_config(
        cls,
        config: SupabaseConfig,
        policy: Optional[UploadPolicy] = None,
        session_store: Optional[SessionStore] = None
    ) -> 'LargeVideoUploader':
        """
        Create an uploader for a Supabase project.

        Sessions go to the project's session table unless another
        store is given.
        """
        return cls(
            storage=SupabaseStorage(config),
            session_store=session_store or RestSessionStore(config),
            policy=policy
        )

    @property
    def coordinator(self) -> UploadCoordinator:
        return self._coordinator

    def validate_file(self, file: Union[SourceFile, str, Path]) -> ValidationResult:
        """
        Check a file against the size and format policy.

        Args:
            file: Source file or path to it

        Returns:
            ValidationResult (valid results may carry a warning)

        Raises:
            FileNotFoundError: If a path is given and doesn't exist
        """
        validator = self._coordinator.validator
        source = file if isinstance(file, SourceFile) else validator.validate_path(file)
        result = validator.validate(source)
        if result.valid:
            self._logger.debug(f"File validation passed: {source.name}")
        return result

    async def upload_large_video(
        self,
        file: Union[SourceFile, str, Path],
        path: str,
        on_progress: Optional[ProgressCallback] = None,
        resume_session_id: Optional[str] = None
    ) -> str:
        """
        Upload a video and return its public URL.

        Args:
            file: Source file or path to it
            path: Object path of the final video
            on_progress: Optional callback for progress samples
            resume_session_id: Session id of an interrupted chunked upload

        Returns:
            Public URL of the uploaded video

        Raises:
            UploadFailed: If the upload could not be completed
        """
        return await self._coordinator.upload(file, path, on_progress, resume_session_id)

    def cancel_upload(self) -> bool:
        """Stop scheduling new chunk batches for the running upload."""
        cancelled = self._coordinator.cancel()
        if cancelled:
            self._logger.info("Upload cancelled")
        return cancelled

    async def close(self) -> None:
        """Close storage and session store connections."""
        close = getattr(self._storage, 'close', None)
        if close is not None:
            await close()
        if self._session_store is not None:
            await self._session_store.close()

    async def __aenter__(self) -> 'LargeVideoUploader':
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
