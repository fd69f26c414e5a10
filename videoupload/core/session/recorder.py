"""
Upload session recorder.

Persists resumability metadata for chunked uploads. Every store failure
degrades instead of failing the upload: create() hands back an
EphemeralSession and later calls with that handle never reach the store.
"""
from typing import Optional, Iterable, Union
import logging

from .models import (
    UploadSession,
    SessionStatus,
    PersistedSession,
    EphemeralSession,
    uploaded_fields,
    utcnow,
)
from .protocols import SessionStore

SessionHandle = Union[PersistedSession, EphemeralSession]


class SessionRecorder:
    """
    Owns the UploadSession records of the upload engine.

    The batch scheduler reports progress through update(); nothing else
    writes session records.
    """

    def __init__(self, store: Optional[SessionStore] = None):
        """
        Initialize session recorder.

        Args:
            store: Session store; None means every session is ephemeral
        """
        self._store = store
        self._logger = logging.getLogger('videoupload.session')

    async def create(self, file, total_chunks: int) -> SessionHandle:
        """
        Record a new in-progress session.

        Args:
            file: Uploaded file (anything with name and size)
            total_chunks: Number of planned chunks

        Returns:
            PersistedSession, or EphemeralSession if the store failed
        """
        if self._store is None:
            return EphemeralSession()

        session = UploadSession(
            file_name=file.name,
            file_size=file.size,
            total_chunks=total_chunks
        )
        try:
            session_id = await self._store.insert(session)
        except Exception as e:
            self._logger.warning(f"Failed to create upload session, continuing without resume: {e}")
            return EphemeralSession()

        if not session_id:
            self._logger.warning("Session store returned no id, continuing without resume")
            return EphemeralSession()

        self._logger.debug(f"Upload session created: {session_id}")
        return PersistedSession(id=str(session_id))

    async def update(self, handle: SessionHandle, uploaded_indices: Iterable[int]) -> None:
        """
        Record the chunk indices uploaded so far.

        Args:
            handle: Handle from create() or resume()
            uploaded_indices: Indices of every chunk stored so far
        """
        if not handle.is_persisted:
            return
        await self._write(handle, uploaded_fields(uploaded_indices), 'update')

    async def close(self, handle: SessionHandle) -> None:
        """Mark the session completed."""
        if not handle.is_persisted:
            return
        now = utcnow().isoformat()
        await self._write(
            handle,
            {'status': SessionStatus.COMPLETED, 'completed_at': now, 'updated_at': now},
            'close'
        )

    async def fail(self, handle: SessionHandle) -> None:
        """Mark the session failed."""
        if not handle.is_persisted:
            return
        await self._write(
            handle,
            {'status': SessionStatus.FAILED, 'updated_at': utcnow().isoformat()},
            'fail'
        )

    async def resume(
        self,
        session_id: str,
        file,
        total_chunks: int
    ) -> Optional[UploadSession]:
        """
        Load an in-progress session recorded for the same file.

        Args:
            session_id: Id of the session to resume
            file: File being uploaded (anything with name and size)
            total_chunks: Number of planned chunks

        Returns:
            The session, or None if it is missing, finished or for another file
        """
        if self._store is None:
            return None
        try:
            session = await self._store.get(session_id)
        except Exception as e:
            self._logger.warning(f"Failed to load upload session {session_id}: {e}")
            return None

        if session is None:
            self._logger.info(f"Upload session {session_id} not found, starting over")
            return None
        if session.is_terminal:
            self._logger.info(f"Upload session {session_id} is {session.status}, starting over")
            return None
        if not session.matches(file.name, file.size, total_chunks):
            self._logger.info(f"Upload session {session_id} belongs to another file, starting over")
            return None

        valid = {i for i in session.uploaded_chunk_indices if 0 <= i < total_chunks}
        session.uploaded_chunk_indices = valid
        return session

    async def _write(self, handle: PersistedSession, fields: dict, action: str) -> None:
        try:
            await self._store.update(handle.id, fields)
        except Exception as e:
            self._logger.warning(f"Failed to {action} upload session {handle.id}: {e}")
