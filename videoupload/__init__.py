"""
videoupload - Async uploads of large videos to object storage.

Usage:
    >>> from videoupload import LargeVideoUploader, SupabaseConfig
    >>>
    >>> async with LargeVideoUploader.from_config(SupabaseConfig.from_env()) as uploader:
    ...     url = await uploader.upload_large_video("tour.mp4", "farms/12/tour.mp4")
"""
import logging

from .core.upload import (
    LargeVideoUploader,
    UploadCoordinator,
    SourceFile,
    UploadTarget,
    ChunkDescriptor,
    ChunkUploadResult,
    ProgressSample,
    ValidationResult,
)

# Configuration
from .core.config import UploadPolicy, SupabaseConfig, TimeoutConfig

# Errors
from .core.exceptions import (
    UploadException,
    SizeExceeded,
    UnsupportedFormat,
    ChunkUploadFailed,
    MergeFailed,
    UploadFailed,
    UploadCancelled,
    StorageError,
    SessionStoreError,
)

# Backends
from .core.storage import MemoryStorage, SupabaseStorage
from .core.session import (
    SessionStore,
    UploadSession,
    MemorySessionStore,
    SQLiteSessionStore,
    RestSessionStore,
    PersistedSession,
    EphemeralSession,
)

__version__ = '1.0.0'


def setup_logging(level=logging.INFO):
    """
    Configure logging for videoupload modules.

    This ensures that all videoupload loggers are properly configured
    to show log messages at the specified level.

    Args:
        level: Logging level (default: logging.INFO)
    """
    loggers = [
        'videoupload',
        'videoupload.upload',
        'videoupload.upload.coordinator',
        'videoupload.upload.chunk',
        'videoupload.upload.scheduler',
        'videoupload.upload.merge',
        'videoupload.upload.file',
        'videoupload.upload.validator',
        'videoupload.session',
        'videoupload.session.rest',
        'videoupload.storage',
    ]

    for logger_name in loggers:
        logger = logging.getLogger(logger_name)
        logger.setLevel(level)
        logger.propagate = True


__all__ = [
    'LargeVideoUploader',
    'UploadCoordinator',
    'SourceFile',
    'UploadTarget',
    'ChunkDescriptor',
    'ChunkUploadResult',
    'ProgressSample',
    'ValidationResult',
    'UploadPolicy',
    'SupabaseConfig',
    'TimeoutConfig',
    'UploadException',
    'SizeExceeded',
    'UnsupportedFormat',
    'ChunkUploadFailed',
    'MergeFailed',
    'UploadFailed',
    'UploadCancelled',
    'StorageError',
    'SessionStoreError',
    'MemoryStorage',
    'SupabaseStorage',
    'SessionStore',
    'UploadSession',
    'MemorySessionStore',
    'SQLiteSessionStore',
    'RestSessionStore',
    'PersistedSession',
    'EphemeralSession',
    'setup_logging',
]
