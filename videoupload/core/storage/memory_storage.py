"""
In-memory object storage implementation.

Provides non-persistent object storage for testing and dry runs.
"""
from typing import Dict, List, Optional, Union, AsyncIterable
from urllib.parse import quote

from ..exceptions import StorageError


class MemoryStorage:
    """
    In-memory object storage.

    Keeps objects in a dict keyed by path. Records the put/get/delete
    calls it receives so callers can inspect the traffic.

    Example:
        >>> storage = MemoryStorage("intro-videos")
        >>> await storage.put_object("a.mp4", b"data", overwrite=True)
        >>> storage.public_url("a.mp4")
        'memory://intro-videos/a.mp4'
    """

    def __init__(self, bucket: str = 'intro-videos'):
        self.bucket = bucket
        self.objects: Dict[str, bytes] = {}
        self.content_types: Dict[str, Optional[str]] = {}
        self.put_calls: List[str] = []
        self.get_calls: List[str] = []
        self.delete_calls: List[List[str]] = []

    async def put_object(
        self,
        path: str,
        data: Union[bytes, AsyncIterable[bytes]],
        *,
        overwrite: bool = False,
        content_type: Optional[str] = None
    ) -> None:
        self.put_calls.append(path)
        if path in self.objects and not overwrite:
            raise StorageError(f"Object already exists: {path}", status=409, path=path)

        if isinstance(data, (bytes, bytearray)):
            body = bytes(data)
        else:
            pieces = []
            async for piece in data:
                pieces.append(piece)
            body = b''.join(pieces)

        self.objects[path] = body
        self.content_types[path] = content_type

    async def get_object(self, path: str) -> bytes:
        self.get_calls.append(path)
        if path not in self.objects:
            raise StorageError(f"Object not found: {path}", status=404, path=path)
        return self.objects[path]

    async def delete_objects(self, paths: List[str]) -> None:
        self.delete_calls.append(list(paths))
        for path in paths:
            self.objects.pop(path, None)
            self.content_types.pop(path, None)

    def public_url(self, path: str) -> str:
        return f"memory://{self.bucket}/{quote(path)}"

    async def close(self) -> None:
        pass
