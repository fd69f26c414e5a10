"""
In-memory session store implementation.

Provides non-persistent session storage for testing and temporary use.
"""
import uuid
from typing import Optional, Dict, Any

from ..exceptions import SessionStoreError
from .models import UploadSession


class MemorySessionStore:
    """
    In-memory upload session store.

    Stores session records in memory only.
    Data is lost when the object is destroyed.

    Useful for:
    - Unit testing
    - Single-process uploads where resume across restarts is not needed

    Example:
        >>> store = MemorySessionStore()
        >>> session_id = await store.insert(session)
        >>> loaded = await store.get(session_id)
    """

    def __init__(self):
        """Initialize memory session store."""
        self._sessions: Dict[str, UploadSession] = {}

    async def insert(self, session: UploadSession) -> str:
        session_id = uuid.uuid4().hex
        data = session.to_dict()
        data['id'] = session_id
        self._sessions[session_id] = UploadSession.from_dict(data)
        return session_id

    async def update(self, session_id: str, fields: Dict[str, Any]) -> None:
        if session_id not in self._sessions:
            raise SessionStoreError(f"Unknown upload session: {session_id}")
        data = {**self._sessions[session_id].to_dict(), **fields}
        self._sessions[session_id] = UploadSession.from_dict(data)

    async def get(self, session_id: str) -> Optional[UploadSession]:
        return self._sessions.get(session_id)

    async def close(self) -> None:
        """Close store (no-op for memory storage)."""
        pass

    def __len__(self) -> int:
        return len(self._sessions)
