"""
Parallel batch scheduler.

Drives the chunk transporter over every planned chunk, a fixed-size batch
at a time.
"""
from typing import Dict, Iterable, Iterator, List, Optional, Callable
import asyncio
import logging
import time

from ...exceptions import UploadCancelled
from ...session import SessionRecorder, SessionHandle
from ..models import (
    SourceFile,
    UploadTarget,
    ChunkDescriptor,
    ChunkUploadResult,
    ProgressState,
)
from ..protocols import ProgressCallback
from . import progress
from .chunk_service import ChunkTransporter


class CancellationToken:
    """
    Cooperative cancellation flag.

    Checked only at batch boundaries; uploads already in flight finish.
    """

    def __init__(self):
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise UploadCancelled("Upload cancelled")


def batched(chunks: Iterable[ChunkDescriptor], size: int) -> Iterator[List[ChunkDescriptor]]:
    """Yields consecutive batches of at most `size` chunks."""
    batch: List[ChunkDescriptor] = []
    for chunk in chunks:
        batch.append(chunk)
        if len(batch) == size:
            yield batch
            batch = []
    if batch:
        yield batch


class BatchScheduler:
    """
    Uploads chunks in consecutive, batch-synchronous groups.

    Every chunk of a batch is dispatched concurrently and the whole batch
    must resolve before the next one starts, so at most max_parallel
    uploads are ever in flight. After each batch the scheduler reports
    progress and records the uploaded indices with the session recorder.
    """

    def __init__(
        self,
        transporter: ChunkTransporter,
        recorder: SessionRecorder,
        max_parallel: int = 3,
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Initialize batch scheduler.

        Args:
            transporter: Uploads single chunks with retries
            recorder: Session recorder updated after each batch
            max_parallel: Batch size (concurrent chunk uploads)
            clock: Time source for progress samples
        """
        if max_parallel <= 0:
            raise ValueError("max_parallel must be positive")
        self._transporter = transporter
        self._recorder = recorder
        self._max_parallel = max_parallel
        self._clock = clock
        self._results: Dict[int, ChunkUploadResult] = {}
        self._logger = logging.getLogger('videoupload.upload.scheduler')

    @property
    def results(self) -> List[ChunkUploadResult]:
        """Every chunk stored so far, in index order."""
        return [self._results[i] for i in sorted(self._results)]

    async def run(
        self,
        file: SourceFile,
        target: UploadTarget,
        chunks: List[ChunkDescriptor],
        session: SessionHandle,
        state: ProgressState,
        token: CancellationToken,
        on_progress: Optional[ProgressCallback] = None,
        completed: Optional[Iterable[ChunkUploadResult]] = None
    ) -> List[ChunkUploadResult]:
        """
        Upload every chunk not already completed.

        Args:
            file: Source file
            target: Upload destination
            chunks: Full ordered chunk plan
            session: Session handle for progress records
            state: Progress timing state at the start of the chunked path
            token: Cancellation token, checked before each batch
            on_progress: Optional progress callback
            completed: Chunks already stored by a previous attempt (resume)

        Returns:
            Results for every chunk, in index order

        Raises:
            ChunkUploadFailed: If any chunk exhausts its retries
            UploadCancelled: If cancellation was requested
        """
        for result in completed or ():
            self._results[result.chunk_index] = result

        total_chunks = len(chunks)
        uploaded_bytes = sum(r.size for r in self._results.values())
        pending = [c for c in chunks if c.index not in self._results]
        # bytes stored by an earlier run are not throughput
        state = ProgressState(state.last_sample_time, uploaded_bytes)

        self._logger.info(
            f"Uploading {len(pending)} of {total_chunks} chunks "
            f"(max {self._max_parallel} parallel, {len(self._results)} already stored)"
        )

        for batch in batched(pending, self._max_parallel):
            token.raise_if_cancelled()

            first, last = batch[0].index + 1, batch[-1].index + 1
            self._logger.info(f"Uploading chunks {first}-{last} of {total_chunks}")

            batch_results = await self._run_batch(file, target, batch, session)
            for result in batch_results:
                self._results[result.chunk_index] = result
            uploaded_bytes += sum(r.size for r in batch_results)

            sample, state = progress.sample(
                state,
                uploaded_bytes,
                file.size,
                len(self._results),
                total_chunks,
                self._clock()
            )
            if on_progress:
                on_progress(sample)

            await self._recorder.update(session, self._results.keys())

        return self.results

    async def _run_batch(
        self,
        file: SourceFile,
        target: UploadTarget,
        batch: List[ChunkDescriptor],
        session: SessionHandle
    ) -> List[ChunkUploadResult]:
        tasks = [
            asyncio.create_task(
                self._transporter.upload_chunk(file, target, chunk, session.id)
            )
            for chunk in batch
        ]
        try:
            done, still_running = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
        except BaseException:
            # caller cancelled: no chunk upload may outlive the batch
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        failure = None
        for task in done:
            error = task.exception()
            if error is None:
                result = task.result()
                self._results[result.chunk_index] = result
            elif failure is None:
                failure = error

        if failure is not None:
            for task in still_running:
                task.cancel()
            await asyncio.gather(*still_running, return_exceptions=True)
            self._logger.error(f"Chunk batch failed: {failure}")
            raise failure

        return [task.result() for task in tasks]
