"""
Upload session module.

Provides resumability records for chunked uploads, with SQLite, REST and
in-memory stores.
"""
from .protocols import SessionStore
from .models import (
    UploadSession,
    SessionStatus,
    PersistedSession,
    EphemeralSession,
    EPHEMERAL_SESSION_ID,
)
from .memory_session import MemorySessionStore
from .sqlite_session import SQLiteSessionStore
from .rest_session import RestSessionStore
from .recorder import SessionRecorder, SessionHandle

__all__ = [
    'SessionStore',
    'UploadSession',
    'SessionStatus',
    'PersistedSession',
    'EphemeralSession',
    'EPHEMERAL_SESSION_ID',
    'MemorySessionStore',
    'SQLiteSessionStore',
    'RestSessionStore',
    'SessionRecorder',
    'SessionHandle',
]
