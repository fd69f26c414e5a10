"""Upload models."""
from .upload_models import (
    SourceFile,
    UploadTarget,
    ChunkDescriptor,
    ChunkUploadResult,
    ProgressSample,
    ProgressState,
    ValidationResult
)

__all__ = [
    'SourceFile',
    'UploadTarget',
    'ChunkDescriptor',
    'ChunkUploadResult',
    'ProgressSample',
    'ProgressState',
    'ValidationResult'
]
