"""
Configuration module.

Provides the upload policy constants and the storage backend configuration.
Open for extension through custom configurations.
"""
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, FrozenSet
import os

MIB = 1024 * 1024
GIB = 1024 * MIB

DEFAULT_ALLOWED_EXTENSIONS = frozenset({'mp4', 'm4v', 'mov', 'webm', 'mkv', 'avi'})


@dataclass(frozen=True)
class UploadPolicy:
    """
    Upload policy.

    Constants that drive strategy selection, chunking and retries.
    Not mutated at runtime; build a new policy to change a value.
    """
    chunk_size: int = 50 * MIB
    max_parallel_chunks: int = 3
    max_file_size: int = 5 * GIB
    max_retries_per_chunk: int = 5
    chunked_strategy_threshold: int = 500 * MIB
    large_file_warning_threshold: int = 1 * GIB
    allowed_extensions: FrozenSet[str] = DEFAULT_ALLOWED_EXTENSIONS
    retry_base_delay: float = 1.0
    cleanup_chunks_on_failure: bool = False

    def __post_init__(self):
        if self.chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        if self.max_parallel_chunks <= 0:
            raise ValueError("max_parallel_chunks must be positive")
        if self.max_retries_per_chunk <= 0:
            raise ValueError("max_retries_per_chunk must be positive")

    @classmethod
    def default(cls) -> 'UploadPolicy':
        """Create default policy."""
        return cls()


@dataclass
class TimeoutConfig:
    """
    Timeout configuration.

    Granular control over different timeout types.
    Chunk uploads of 50 MB over slow links need a generous total.
    """
    total: Optional[float] = None
    connect: float = 30.0
    sock_read: float = 300.0
    sock_connect: float = 30.0

    def to_aiohttp_timeout(self):
        """Convert to aiohttp ClientTimeout."""
        import aiohttp
        return aiohttp.ClientTimeout(
            total=self.total,
            connect=self.connect,
            sock_read=self.sock_read,
            sock_connect=self.sock_connect
        )


@dataclass
class SupabaseConfig:
    """
    Supabase project configuration.

    Used by the storage and session store adapters.
    """
    url: str
    api_key: str
    access_token: Optional[str] = None
    bucket: str = 'intro-videos'
    session_table: str = 'video_upload_sessions'
    cache_control: str = '3600'
    user_agent: str = 'videoupload/1.0.0'
    timeout: TimeoutConfig = field(default_factory=TimeoutConfig)
    extra_headers: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        self.url = self.url.rstrip('/')

    @classmethod
    def from_env(cls, **overrides) -> 'SupabaseConfig':
        """
        Create configuration from environment variables.

        Reads SUPABASE_URL, SUPABASE_KEY, SUPABASE_ACCESS_TOKEN and
        VIDEOUPLOAD_BUCKET.

        Raises:
            ValueError: If SUPABASE_URL or SUPABASE_KEY is missing
        """
        url = os.environ.get('SUPABASE_URL')
        api_key = os.environ.get('SUPABASE_KEY')
        if not url or not api_key:
            raise ValueError("SUPABASE_URL and SUPABASE_KEY must be set")

        kwargs: Dict[str, Any] = {
            'url': url,
            'api_key': api_key,
            'access_token': os.environ.get('SUPABASE_ACCESS_TOKEN'),
        }
        bucket = os.environ.get('VIDEOUPLOAD_BUCKET')
        if bucket:
            kwargs['bucket'] = bucket
        kwargs.update(overrides)
        return cls(**kwargs)

    def get_headers(self) -> Dict[str, str]:
        """Get auth headers for Supabase REST endpoints."""
        return {
            'apikey': self.api_key,
            'Authorization': f"Bearer {self.access_token or self.api_key}",
            'User-Agent': self.user_agent,
            **self.extra_headers
        }

    def get_session_kwargs(self) -> Dict[str, Any]:
        """Get kwargs for aiohttp ClientSession."""
        return {
            'headers': self.get_headers(),
            'timeout': self.timeout.to_aiohttp_timeout(),
        }
