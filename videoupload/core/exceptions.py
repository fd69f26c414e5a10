"""
Custom exceptions for video upload operations.

This module defines exception classes raised by the upload engine.
"""
from typing import Optional


class UploadException(Exception):
    """Base exception for all upload-related errors."""

    def __init__(self, message: str, error_code: Optional[int] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            error_code: Numeric error code (if available)
        """
        self.error_code = error_code
        super().__init__(message)


class SizeExceeded(UploadException):
    """Exception raised when a file is larger than the allowed maximum."""
    pass


class UnsupportedFormat(UploadException):
    """Exception raised when a file extension is not allowed."""

    def __init__(self, message: str, extension: str = '') -> None:
        self.extension = extension
        super().__init__(message)


class ChunkUploadFailed(UploadException):
    """Exception raised when a chunk could not be uploaded after all retries."""

    def __init__(self, chunk_index: int, attempts: int) -> None:
        """
        Initialize the exception.

        Args:
            chunk_index: Index of the chunk that failed
            attempts: Number of attempts made
        """
        self.chunk_index = chunk_index
        self.attempts = attempts
        super().__init__(
            f"Failed to upload chunk {chunk_index + 1} after {attempts} attempts"
        )


class MergeFailed(UploadException):
    """Exception raised when uploaded chunks could not be merged."""
    pass


class UploadFailed(UploadException):
    """Top-level exception raised by the upload orchestrator."""
    pass


class UploadCancelled(UploadFailed):
    """Exception raised when an upload is cancelled between batches."""
    pass


class StorageError(UploadException):
    """Exception raised for object storage request errors."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        path: Optional[str] = None
    ) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            status: HTTP status code (if available)
            path: Object path involved in the request
        """
        self.status = status
        self.path = path
        super().__init__(message, status)


class SessionStoreError(UploadException):
    """Exception raised when the upload session store rejects a request."""
    pass
