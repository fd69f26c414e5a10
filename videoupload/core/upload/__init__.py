"""
Upload module for large video uploads.

This module provides a clean interface for moving multi-gigabyte videos into
object storage: direct or chunked strategy, parallel batches with retries,
resumable sessions and a two-tier merge.
"""
from .facade import LargeVideoUploader
from .coordinator import UploadCoordinator
from .models import (
    SourceFile,
    UploadTarget,
    ChunkDescriptor,
    ChunkUploadResult,
    ProgressSample,
    ProgressState,
    ValidationResult,
)
from .protocols import (
    ChunkingStrategy,
    FileReaderProtocol,
    ObjectStorage,
    ProgressCallback,
)

__all__ = [
    # Main classes
    'LargeVideoUploader',
    'UploadCoordinator',

    # Models
    'SourceFile',
    'UploadTarget',
    'ChunkDescriptor',
    'ChunkUploadResult',
    'ProgressSample',
    'ProgressState',
    'ValidationResult',

    # Protocols
    'ChunkingStrategy',
    'FileReaderProtocol',
    'ObjectStorage',
    'ProgressCallback',
]
