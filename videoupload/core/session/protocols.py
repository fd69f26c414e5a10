"""
Session store protocols.

Defines interfaces for upload session store implementations.
Follows Interface Segregation Principle (ISP).
"""
from typing import Protocol, Optional, Dict, Any, runtime_checkable
from .models import UploadSession


@runtime_checkable
class SessionStore(Protocol):
    """
    Protocol for upload session stores.

    Implementations can use SQLite, a REST table, or any other backend.
    Not assumed transactional across calls.
    """

    async def insert(self, session: UploadSession) -> str:
        """
        Insert a new session record.

        Args:
            session: Session to record

        Returns:
            Store-assigned session id

        Raises:
            SessionStoreError: If the record could not be written
        """
        ...

    async def update(self, session_id: str, fields: Dict[str, Any]) -> None:
        """
        Update columns of an existing session.

        Args:
            session_id: Id returned by insert()
            fields: Column values to set
        """
        ...

    async def get(self, session_id: str) -> Optional[UploadSession]:
        """
        Fetch a session.

        Returns:
            UploadSession if it exists, None otherwise
        """
        ...

    async def close(self) -> None:
        """Release resources held by the store."""
        ...
