"""Pytest fixtures for videoupload tests."""
import asyncio
import os
import pytest

from videoupload import MemoryStorage, MemorySessionStore, UploadPolicy


class FakeClock:
    """Monotonic clock that advances one second per call."""

    def __init__(self, start: float = 0.0, step: float = 1.0):
        self.now = start
        self.step = step

    def __call__(self) -> float:
        self.now += self.step
        return self.now


class TrackingStorage(MemoryStorage):
    """MemoryStorage that records how many chunk uploads overlap."""

    def __init__(self, bucket: str = 'intro-videos', delay: float = 0.01):
        super().__init__(bucket)
        self.delay = delay
        self.in_flight = 0
        self.max_in_flight = 0

    async def put_object(self, path, data, *, overwrite=False, content_type=None):
        if '.chunk' not in path:
            return await super().put_object(
                path, data, overwrite=overwrite, content_type=content_type
            )
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            await super().put_object(path, data, overwrite=overwrite, content_type=content_type)
        finally:
            self.in_flight -= 1


@pytest.fixture
def small_policy():
    """Policy scaled down to bytes: 10-byte chunks, chunked above 25 bytes."""
    return UploadPolicy(
        chunk_size=10,
        max_parallel_chunks=3,
        max_file_size=1000,
        max_retries_per_chunk=5,
        chunked_strategy_threshold=25,
        large_file_warning_threshold=500,
        retry_base_delay=0
    )


@pytest.fixture
def storage():
    """In-memory object storage."""
    return MemoryStorage()


@pytest.fixture
def tracking_storage():
    """In-memory storage that measures chunk upload concurrency."""
    return TrackingStorage()


@pytest.fixture
def session_store():
    """In-memory session store."""
    return MemorySessionStore()


@pytest.fixture
def clock():
    """Deterministic clock."""
    return FakeClock()


@pytest.fixture
def make_video(tmp_path):
    """Factory writing a video file with deterministic content."""
    def _make(size: int, name: str = 'tour.mp4'):
        path = tmp_path / name
        path.write_bytes(bytes(i % 251 for i in range(size)))
        return path
    return _make


@pytest.fixture
def video_content():
    """Returns the content make_video() writes for a given size."""
    def _content(size: int) -> bytes:
        return bytes(i % 251 for i in range(size))
    return _content


@pytest.fixture
def temp_file():
    """Create temporary file with known content."""
    import tempfile
    from pathlib import Path
    fd, path = tempfile.mkstemp(suffix='.mp4')
    os.write(fd, b"0123456789ABCDEFGHIJ")  # 20 bytes
    os.close(fd)
    yield Path(path)
    os.unlink(path)
