"""Upload services module."""
from .file_service import FileValidator, AsyncFileReader
from .chunk_service import ChunkTransporter
from .batch_scheduler import BatchScheduler, CancellationToken
from .merge_service import MergeEngine
from .progress import ProgressTracker

__all__ = [
    'FileValidator',
    'AsyncFileReader',
    'ChunkTransporter',
    'BatchScheduler',
    'CancellationToken',
    'MergeEngine',
    'ProgressTracker',
]
