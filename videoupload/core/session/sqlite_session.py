"""
SQLite session store implementation.

Provides persistent upload session storage using a local SQLite database,
so interrupted uploads can be resumed after a restart.
"""
import asyncio
import json
import sqlite3
import threading
import uuid
from pathlib import Path
from typing import Optional, Union, Dict, Any
from contextlib import contextmanager

from ..exceptions import SessionStoreError
from .models import UploadSession


class SQLiteSessionStore:
    """
    SQLite-based upload session store.

    Stores session records in a local SQLite database file.
    Thread-safe implementation with a single shared connection; queries
    run in a worker thread so the event loop is never blocked.

    Example:
        >>> store = SQLiteSessionStore("uploads")
        >>> # Creates uploads.sessions file
        >>>
        >>> session_id = await store.insert(session)
        >>> loaded = await store.get(session_id)
    """

    EXTENSION = '.sessions'
    SCHEMA_VERSION = 1

    COLUMNS = (
        'file_name', 'file_size', 'total_chunks', 'uploaded_chunks',
        'status', 'upload_type', 'created_at', 'updated_at', 'completed_at',
    )

    def __init__(
        self,
        store_name: Union[str, Path],
        base_path: Optional[Path] = None
    ):
        """
        Initialize SQLite session store.

        Args:
            store_name: Store name (without extension) or full path
            base_path: Optional base directory for the database file
        """
        self._lock = threading.Lock()
        self._conn: Optional[sqlite3.Connection] = None

        if isinstance(store_name, Path) or store_name.endswith(self.EXTENSION):
            self._path = Path(store_name)
        elif base_path:
            self._path = base_path / f"{store_name}{self.EXTENSION}"
        else:
            self._path = Path(f"{store_name}{self.EXTENSION}")

        self._path.parent.mkdir(parents=True, exist_ok=True)

        self._init_db()

    @property
    def path(self) -> Path:
        """Get database file path."""
        return self._path

    @contextmanager
    def _get_connection(self):
        """Get thread-safe database connection."""
        with self._lock:
            if self._conn is None:
                self._conn = sqlite3.connect(
                    str(self._path),
                    check_same_thread=False
                )
                self._conn.row_factory = sqlite3.Row
            try:
                yield self._conn
            except sqlite3.Error as e:
                raise SessionStoreError(f"Session store error: {e}") from e

    def _init_db(self) -> None:
        """Initialize database schema."""
        with self._get_connection() as conn:
            cursor = conn.cursor()

            cursor.execute('''
                CREATE TABLE IF NOT EXISTS version (
                    version INTEGER PRIMARY KEY
                )
            ''')

            cursor.execute('''
                CREATE TABLE IF NOT EXISTS video_upload_sessions (
                    id TEXT PRIMARY KEY,
                    file_name TEXT NOT NULL,
                    file_size INTEGER NOT NULL,
                    total_chunks INTEGER NOT NULL,
                    uploaded_chunks TEXT NOT NULL DEFAULT '[]',
                    status TEXT NOT NULL,
                    upload_type TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    completed_at TEXT
                )
            ''')

            cursor.execute('SELECT version FROM version LIMIT 1')
            if cursor.fetchone() is None:
                cursor.execute(
                    'INSERT INTO version (version) VALUES (?)',
                    (self.SCHEMA_VERSION,)
                )

            conn.commit()

    async def insert(self, session: UploadSession) -> str:
        """
        Insert a session record.

        Args:
            session: Session to record

        Returns:
            New session id
        """
        return await asyncio.to_thread(self._insert, session)

    def _insert(self, session: UploadSession) -> str:
        session_id = uuid.uuid4().hex
        data = session.to_dict()
        data['uploaded_chunks'] = json.dumps(data['uploaded_chunks'])

        with self._get_connection() as conn:
            conn.execute(
                f'''
                INSERT INTO video_upload_sessions (id, {', '.join(self.COLUMNS)})
                VALUES (?, {', '.join('?' for _ in self.COLUMNS)})
                ''',
                (session_id, *(data[column] for column in self.COLUMNS))
            )
            conn.commit()

        return session_id

    async def update(self, session_id: str, fields: Dict[str, Any]) -> None:
        """
        Update columns of a session.

        Args:
            session_id: Session id
            fields: Column values; unknown columns are rejected
        """
        await asyncio.to_thread(self._update, session_id, fields)

    def _update(self, session_id: str, fields: Dict[str, Any]) -> None:
        unknown = set(fields) - set(self.COLUMNS)
        if unknown:
            raise SessionStoreError(f"Unknown session columns: {sorted(unknown)}")
        if not fields:
            return

        values = dict(fields)
        if 'uploaded_chunks' in values:
            values['uploaded_chunks'] = json.dumps(sorted(values['uploaded_chunks']))

        assignments = ', '.join(f"{column} = ?" for column in values)
        with self._get_connection() as conn:
            cursor = conn.execute(
                f'UPDATE video_upload_sessions SET {assignments} WHERE id = ?',
                (*values.values(), session_id)
            )
            conn.commit()
            if cursor.rowcount == 0:
                raise SessionStoreError(f"Unknown upload session: {session_id}")

    async def get(self, session_id: str) -> Optional[UploadSession]:
        """
        Load a session.

        Returns:
            UploadSession if exists, None otherwise
        """
        return await asyncio.to_thread(self._get, session_id)

    def _get(self, session_id: str) -> Optional[UploadSession]:
        with self._get_connection() as conn:
            cursor = conn.execute(
                'SELECT * FROM video_upload_sessions WHERE id = ?',
                (session_id,)
            )
            row = cursor.fetchone()

        if row is None:
            return None
        return UploadSession.from_dict(dict(row))

    async def close(self) -> None:
        """Close database connection."""
        self.close_sync()

    def close_sync(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def __enter__(self) -> 'SQLiteSessionStore':
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close_sync()
