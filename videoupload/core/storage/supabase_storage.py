"""
Supabase Storage client.

Talks to the Supabase Storage REST API with aiohttp.
Reuses one HTTP session for all requests (critical for chunk throughput).
"""
from typing import List, Optional, Union, AsyncIterable
from urllib.parse import quote
import logging
import time
import aiohttp

from ..config import SupabaseConfig
from ..exceptions import StorageError


class SupabaseStorage:
    """
    Object storage backed by a Supabase Storage bucket.

    Responsibilities:
    - Upload objects (optionally overwriting) with streamed bodies
    - Download and delete objects
    - Build public URLs

    Example:
        >>> storage = SupabaseStorage(SupabaseConfig.from_env())
        >>> await storage.put_object("videos/a.mp4", b"...", overwrite=True)
        >>> storage.public_url("videos/a.mp4")
    """

    def __init__(
        self,
        config: SupabaseConfig,
        session: Optional[aiohttp.ClientSession] = None
    ):
        """
        Initialize storage client.

        Args:
            config: Supabase project configuration
            session: Optional shared session (RECOMMENDED for performance)
        """
        self._config = config
        self._session = session
        self._owns_session = False
        self._logger = logging.getLogger('videoupload.storage')

    @property
    def bucket(self) -> str:
        return self._config.bucket

    def _object_url(self, path: str) -> str:
        return f"{self._config.url}/storage/v1/object/{self.bucket}/{quote(path)}"

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create HTTP session."""
        if self._session is None:
            self._session = aiohttp.ClientSession(
                connector=aiohttp.TCPConnector(limit=10, keepalive_timeout=30),
                **self._config.get_session_kwargs()
            )
            self._owns_session = True
        return self._session

    async def close(self):
        """Close session if we own it."""
        if self._owns_session and self._session:
            await self._session.close()
            self._session = None

    async def put_object(
        self,
        path: str,
        data: Union[bytes, AsyncIterable[bytes]],
        *,
        overwrite: bool = False,
        content_type: Optional[str] = None
    ) -> None:
        """
        Upload an object.

        Args:
            path: Object path inside the bucket
            data: Bytes or async iterator of byte pieces (streamed)
            overwrite: Send x-upsert so an existing object is replaced
            content_type: Media type of the object

        Raises:
            StorageError: On network errors or non-2xx responses
        """
        headers = {
            'Content-Type': content_type or 'application/octet-stream',
            'cache-control': f"max-age={self._config.cache_control}",
            'x-upsert': 'true' if overwrite else 'false',
        }
        session = await self._get_session()
        upload_start = time.time()
        self._logger.debug(f"PUT {self.bucket}/{path}")

        try:
            async with session.post(self._object_url(path), data=data, headers=headers) as response:
                await self._raise_for_status(response, path)
        except aiohttp.ClientError as e:
            raise StorageError(f"Upload of {path} failed: {e}", path=path) from e

        upload_time = time.time() - upload_start
        self._logger.debug(f"Stored {self.bucket}/{path} in {upload_time:.2f}s")

    async def get_object(self, path: str) -> bytes:
        """
        Download an object.

        Raises:
            StorageError: On network errors or non-2xx responses
        """
        session = await self._get_session()
        try:
            async with session.get(self._object_url(path)) as response:
                await self._raise_for_status(response, path)
                return await response.read()
        except aiohttp.ClientError as e:
            raise StorageError(f"Download of {path} failed: {e}", path=path) from e

    async def delete_objects(self, paths: List[str]) -> None:
        """
        Delete objects.

        Raises:
            StorageError: If the request fails; callers treat this as best-effort
        """
        if not paths:
            return
        session = await self._get_session()
        url = f"{self._config.url}/storage/v1/object/{self.bucket}"
        try:
            async with session.delete(url, json={'prefixes': list(paths)}) as response:
                await self._raise_for_status(response, None)
        except aiohttp.ClientError as e:
            raise StorageError(f"Delete of {len(paths)} objects failed: {e}") from e

    def public_url(self, path: str) -> str:
        return f"{self._config.url}/storage/v1/object/public/{self.bucket}/{quote(path)}"

    async def _raise_for_status(self, response: aiohttp.ClientResponse, path: Optional[str]) -> None:
        if 200 <= response.status < 300:
            return
        body = await response.text()
        self._logger.error(f"Storage error HTTP {response.status} for {path}: {body[:200]}")
        raise StorageError(
            f"Storage request failed: HTTP {response.status} {response.reason}",
            status=response.status,
            path=path
        )
