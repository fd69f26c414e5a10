"""
Session data models.

Contains data classes for upload session information.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Set, Iterable
import json


class SessionStatus:
    """Upload session status values."""
    IN_PROGRESS = 'in_progress'
    COMPLETED = 'completed'
    FAILED = 'failed'

    ALL = (IN_PROGRESS, COMPLETED, FAILED)
    TERMINAL = (COMPLETED, FAILED)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class UploadSession:
    """
    Resumability record for a chunked upload.

    Attributes:
        file_name: Name of the uploaded file
        file_size: File size in bytes
        total_chunks: Number of planned chunks
        id: Store-assigned id (None until inserted)
        uploaded_chunk_indices: Indices of chunks stored so far
        status: One of SessionStatus.ALL
        upload_type: Always 'chunked' for this engine
        created_at: Session creation timestamp
        updated_at: Last update timestamp
        completed_at: Set when the session is closed
    """
    file_name: str
    file_size: int
    total_chunks: int
    id: Optional[str] = None
    uploaded_chunk_indices: Set[int] = field(default_factory=set)
    status: str = SessionStatus.IN_PROGRESS
    upload_type: str = 'chunked'
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    completed_at: Optional[datetime] = None

    def __post_init__(self):
        if self.status not in SessionStatus.ALL:
            raise ValueError(f"Invalid session status: {self.status}")
        self.uploaded_chunk_indices = set(self.uploaded_chunk_indices)

    @property
    def is_terminal(self) -> bool:
        return self.status in SessionStatus.TERMINAL

    def matches(self, file_name: str, file_size: int, total_chunks: int) -> bool:
        """Returns True if this session was recorded for the same file and plan."""
        return (
            self.file_name == file_name
            and self.file_size == file_size
            and self.total_chunks == total_chunks
        )

    def to_dict(self) -> dict:
        """
        Convert to dictionary for serialization.

        Returns:
            Dictionary representation (column names of the session table)
        """
        return {
            'id': self.id,
            'file_name': self.file_name,
            'file_size': self.file_size,
            'total_chunks': self.total_chunks,
            'uploaded_chunks': sorted(self.uploaded_chunk_indices),
            'status': self.status,
            'upload_type': self.upload_type,
            'created_at': self.created_at.isoformat(),
            'updated_at': self.updated_at.isoformat(),
            'completed_at': self.completed_at.isoformat() if self.completed_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'UploadSession':
        """
        Create from dictionary.

        Args:
            data: Dictionary with session data (e.g. a table row)

        Returns:
            UploadSession instance
        """
        uploaded = data.get('uploaded_chunks') or []
        if isinstance(uploaded, str):
            uploaded = json.loads(uploaded)
        return cls(
            id=str(data['id']) if data.get('id') is not None else None,
            file_name=data['file_name'],
            file_size=int(data['file_size']),
            total_chunks=int(data['total_chunks']),
            uploaded_chunk_indices=set(int(i) for i in uploaded),
            status=data.get('status') or SessionStatus.IN_PROGRESS,
            upload_type=data.get('upload_type') or 'chunked',
            created_at=_parse_datetime(data.get('created_at')),
            updated_at=_parse_datetime(data.get('updated_at')),
            completed_at=_parse_datetime(data['completed_at']) if data.get('completed_at') else None,
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, json_str: str) -> 'UploadSession':
        return cls.from_dict(json.loads(json_str))


def _parse_datetime(value) -> datetime:
    if not value:
        return utcnow()
    if isinstance(value, datetime):
        return value
    # PostgREST emits a trailing 'Z' on some columns
    return datetime.fromisoformat(str(value).replace('Z', '+00:00'))


EPHEMERAL_SESSION_ID = 'temp-session'


@dataclass(frozen=True)
class PersistedSession:
    """Handle to a session that exists in the session store."""
    id: str

    @property
    def is_persisted(self) -> bool:
        return True


@dataclass(frozen=True)
class EphemeralSession:
    """
    Handle used when the session store could not record the upload.

    The upload still completes but cannot be resumed after a restart.
    """
    id: str = EPHEMERAL_SESSION_ID

    @property
    def is_persisted(self) -> bool:
        return False


def uploaded_fields(indices: Iterable[int]) -> dict:
    """Builds the update payload for a batch completion."""
    return {
        'uploaded_chunks': sorted(indices),
        'updated_at': utcnow().isoformat(),
    }
