"""
Upload coordinator.

Orchestrates the upload process using injected dependencies.
Follows Dependency Inversion Principle - depends on abstractions, not concretions.
"""
import logging
import time
from pathlib import Path
from typing import Optional, Union, List, Callable

from ..exceptions import SizeExceeded, UploadFailed, MergeFailed
from ..config import UploadPolicy
from ..session import SessionRecorder, SessionStore, SessionHandle, PersistedSession
from ..utils import format_size
from .models import (
    SourceFile,
    UploadTarget,
    ChunkDescriptor,
    ChunkUploadResult,
    ProgressState,
)
from .protocols import ObjectStorage, FileReaderProtocol, ChunkingStrategy, ProgressCallback
from .strategies import FixedSizeChunkingStrategy, ExponentialBackoffStrategy, RetryStrategy
from .services import (
    FileValidator,
    AsyncFileReader,
    ChunkTransporter,
    BatchScheduler,
    CancellationToken,
    MergeEngine,
)
from .services import progress

logger = logging.getLogger('videoupload.upload.coordinator')


class UploadCoordinator:
    """
    Coordinates the video upload process.

    Files up to the chunked threshold go up in one streamed request.
    Larger files are planned into chunks, uploaded in parallel batches,
    merged into one object and recorded in an upload session.

    Uses dependency injection for all components, making it:
    - Testable (mock dependencies)
    - Extensible (swap strategies)
    - Maintainable (single responsibility)

    One coordinator runs one upload at a time; each upload gets its own
    progress state and cancellation token.
    """

    def __init__(
        self,
        storage: ObjectStorage,
        session_store: Optional[SessionStore] = None,
        policy: Optional[UploadPolicy] = None,
        chunking_strategy: Optional[ChunkingStrategy] = None,
        retry_strategy: Optional[RetryStrategy] = None,
        file_reader: Optional[FileReaderProtocol] = None,
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Initialize upload coordinator.

        Args:
            storage: Object storage backend
            session_store: Optional store for resumability records
            policy: Upload policy constants
            chunking_strategy: Strategy for chunking files
            retry_strategy: Retry policy for chunk uploads
            file_reader: File reader implementation
            clock: Time source for progress samples
        """
        self._policy = policy or UploadPolicy()
        self._storage = storage
        self._clock = clock
        self._file_reader = file_reader or AsyncFileReader()
        self._validator = FileValidator(self._policy)
        self._chunking = chunking_strategy or FixedSizeChunkingStrategy(self._policy.chunk_size)
        self._recorder = SessionRecorder(session_store)
        self._transporter = ChunkTransporter(
            storage,
            self._file_reader,
            retry_strategy or ExponentialBackoffStrategy(
                self._policy.max_retries_per_chunk,
                self._policy.retry_base_delay
            )
        )
        self._merger = MergeEngine(storage, self._file_reader)
        self._token: Optional[CancellationToken] = None
        self._last_session: Optional[SessionHandle] = None

    @property
    def policy(self) -> UploadPolicy:
        return self._policy

    @property
    def validator(self) -> FileValidator:
        return self._validator

    @property
    def is_uploading(self) -> bool:
        return self._token is not None

    @property
    def last_session(self) -> Optional[SessionHandle]:
        """Session handle of the most recent chunked upload."""
        return self._last_session

    def cancel(self) -> bool:
        """
        Request cancellation of the running upload.

        Chunk uploads already in flight (at most one batch) still finish;
        no further batch is dispatched.

        Returns:
            True if an upload was running
        """
        if self._token is None:
            return False
        self._token.cancel()
        logger.info("Upload cancellation requested")
        return True

    async def upload(
        self,
        file: Union[SourceFile, str, Path],
        target_path: str,
        on_progress: Optional[ProgressCallback] = None,
        resume_session_id: Optional[str] = None
    ) -> str:
        """
        Execute the complete upload process.

        Args:
            file: Source file or path to it
            target_path: Object path of the final video
            on_progress: Optional callback for progress samples
            resume_session_id: Session id of an interrupted chunked upload

        Returns:
            Public URL of the uploaded video

        Raises:
            UploadFailed: On any unrecoverable failure (the cause is chained)
        """
        try:
            source = file if isinstance(file, SourceFile) else self._validator.validate_path(file)
        except (OSError, ValueError) as e:
            raise UploadFailed(f"Cannot read video file: {e}") from e

        logger.info(f"Starting upload: {source.name} ({format_size(source.size)})")

        if source.size > self._policy.max_file_size:
            error = SizeExceeded(
                f"File size ({format_size(source.size)}) exceeds the maximum "
                f"allowed ({format_size(self._policy.max_file_size)})"
            )
            raise UploadFailed(str(error)) from error

        bucket = getattr(self._storage, 'bucket', '')
        target = UploadTarget(bucket=bucket, path=target_path)
        state = ProgressState(last_sample_time=self._clock())
        token = CancellationToken()
        self._token = token

        try:
            if source.size > self._policy.chunked_strategy_threshold:
                return await self._upload_chunked(
                    source, target, state, token, on_progress, resume_session_id
                )
            return await self._upload_direct(source, target, state, on_progress)
        except UploadFailed:
            raise
        except Exception as e:
            logger.error(f"Upload failed: {e}")
            raise UploadFailed(f"Upload of {source.name} failed: {e}") from e
        finally:
            self._token = None

    async def _upload_direct(
        self,
        source: SourceFile,
        target: UploadTarget,
        state: ProgressState,
        on_progress: Optional[ProgressCallback]
    ) -> str:
        """Upload the whole file in one streamed request, without retries."""
        logger.info("Using direct upload with progress tracking")
        holder = [state]

        def on_read(loaded: int) -> None:
            if on_progress is None:
                return
            sample, holder[0] = progress.sample(
                holder[0], loaded, source.size, 1, 1, self._clock()
            )
            on_progress(sample)

        upload_start = time.time()
        try:
            await self._storage.put_object(
                target.path,
                self._file_reader.stream(source.path, on_read),
                overwrite=True,
                content_type=source.content_type
            )
        except Exception as e:
            logger.error(f"Direct upload failed: {e}")
            raise UploadFailed(f"Video upload failed: {e}") from e

        upload_time = time.time() - upload_start
        logger.info(f"Direct upload completed in {upload_time:.2f}s")
        return self._storage.public_url(target.path)

    async def _upload_chunked(
        self,
        source: SourceFile,
        target: UploadTarget,
        state: ProgressState,
        token: CancellationToken,
        on_progress: Optional[ProgressCallback],
        resume_session_id: Optional[str]
    ) -> str:
        """Plan, upload in batches, merge and close the session."""
        chunks = self._chunking.plan(source.size)
        chunk_size_mb = self._policy.chunk_size / (1024 * 1024)
        logger.info(f"Using chunked upload: {len(chunks)} chunks of {chunk_size_mb:.2f} MB each")

        session, completed = await self._open_session(source, target, chunks, resume_session_id)
        self._last_session = session

        scheduler = BatchScheduler(
            self._transporter,
            self._recorder,
            self._policy.max_parallel_chunks,
            self._clock
        )
        try:
            results = await scheduler.run(
                source, target, chunks, session, state, token,
                on_progress=on_progress,
                completed=completed
            )
            token.raise_if_cancelled()
        except Exception:
            if self._policy.cleanup_chunks_on_failure:
                await self._discard_chunks(target, chunks)
                await self._recorder.fail(session)
            else:
                # session stays in_progress so the kept chunks can be resumed
                logger.info(
                    f"Keeping {len(scheduler.results)} uploaded chunks "
                    f"(session {session.id}) for resume"
                )
            raise

        logger.info("All chunks uploaded, merging")
        try:
            url = await self._merger.merge(source, target, results)
        except MergeFailed:
            await self._recorder.fail(session)
            raise

        await self._recorder.close(session)
        logger.info("Chunked upload completed successfully")
        return url

    async def _open_session(
        self,
        source: SourceFile,
        target: UploadTarget,
        chunks: List[ChunkDescriptor],
        resume_session_id: Optional[str]
    ):
        """Resume a matching session or create a new one."""
        if resume_session_id:
            stored = await self._recorder.resume(resume_session_id, source, len(chunks))
            if stored is not None:
                completed = [
                    ChunkUploadResult(
                        chunk_index=i,
                        storage_path=target.chunk_path(i),
                        size=chunks[i].size
                    )
                    for i in sorted(stored.uploaded_chunk_indices)
                ]
                logger.info(f"Resuming session {stored.id}: {len(completed)} chunks already stored")
                return PersistedSession(id=stored.id), completed

        session = await self._recorder.create(source, len(chunks))
        if not session.is_persisted:
            logger.warning("Upload session not persisted; this upload cannot be resumed")
        return session, []

    async def _discard_chunks(self, target: UploadTarget, chunks: List[ChunkDescriptor]) -> None:
        """Best-effort deletion of every planned chunk path."""
        paths = [target.chunk_path(c.index) for c in chunks]
        try:
            await self._storage.delete_objects(paths)
            logger.info(f"Discarded {len(paths)} chunk paths after failure")
        except Exception as e:
            logger.warning(f"Failed to discard chunks after failure: {e}")
