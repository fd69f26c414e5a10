"""
REST session store implementation.

Records upload sessions in a Supabase (PostgREST) table over HTTP.
"""
from typing import Optional, Dict, Any
import logging
import aiohttp

from ..config import SupabaseConfig
from ..exceptions import SessionStoreError
from .models import UploadSession


class RestSessionStore:
    """
    Upload session store backed by a PostgREST table.

    Reuses one HTTP session for all requests.

    Example:
        >>> store = RestSessionStore(SupabaseConfig.from_env())
        >>> session_id = await store.insert(session)
    """

    def __init__(
        self,
        config: SupabaseConfig,
        session: Optional[aiohttp.ClientSession] = None
    ):
        """
        Initialize REST session store.

        Args:
            config: Supabase project configuration
            session: Optional shared HTTP session
        """
        self._config = config
        self._session = session
        self._owns_session = False
        self._logger = logging.getLogger('videoupload.session.rest')

    @property
    def table_url(self) -> str:
        return f"{self._config.url}/rest/v1/{self._config.session_table}"

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create HTTP session."""
        if self._session is None:
            self._session = aiohttp.ClientSession(**self._config.get_session_kwargs())
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close session if we own it."""
        if self._owns_session and self._session:
            await self._session.close()
            self._session = None

    async def insert(self, session: UploadSession) -> str:
        """
        Insert a session row.

        Returns:
            Id of the created row

        Raises:
            SessionStoreError: If the row could not be created
        """
        payload = session.to_dict()
        del payload['id']
        rows = await self._request(
            'POST',
            self.table_url,
            json=payload,
            headers={'Prefer': 'return=representation'}
        )
        if not rows:
            raise SessionStoreError("Session store returned no row for insert")
        return str(rows[0]['id'])

    async def update(self, session_id: str, fields: Dict[str, Any]) -> None:
        await self._request(
            'PATCH',
            self.table_url,
            params={'id': f"eq.{session_id}"},
            json=fields
        )

    async def get(self, session_id: str) -> Optional[UploadSession]:
        rows = await self._request(
            'GET',
            self.table_url,
            params={'id': f"eq.{session_id}", 'select': '*'}
        )
        if not rows:
            return None
        return UploadSession.from_dict(rows[0])

    async def _request(self, method: str, url: str, **kwargs) -> Any:
        session = await self._get_session()
        headers = {**self._config.get_headers(), **kwargs.pop('headers', {})}
        try:
            async with session.request(method, url, headers=headers, **kwargs) as response:
                if response.status >= 400:
                    body = await response.text()
                    raise SessionStoreError(
                        f"Session store {method} failed: HTTP {response.status} {body}",
                        error_code=response.status
                    )
                if response.status == 204:
                    return None
                return await response.json(content_type=None)
        except aiohttp.ClientError as e:
            raise SessionStoreError(f"Session store unreachable: {e}") from e
