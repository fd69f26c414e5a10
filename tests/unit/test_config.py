"""Tests for configuration and formatting helpers."""
import pytest
import aiohttp

from videoupload import UploadPolicy, SupabaseConfig, TimeoutConfig
from videoupload.core.utils import format_size, format_duration

MIB = 1024 * 1024
GIB = 1024 * MIB


class TestUploadPolicy:
    """Test suite for UploadPolicy."""

    def test_defaults(self):
        """Test default policy constants."""
        policy = UploadPolicy.default()

        assert policy.chunk_size == 50 * MIB
        assert policy.max_parallel_chunks == 3
        assert policy.max_file_size == 5 * GIB
        assert policy.max_retries_per_chunk == 5
        assert policy.chunked_strategy_threshold == 500 * MIB
        assert policy.large_file_warning_threshold == 1 * GIB
        assert policy.allowed_extensions == {'mp4', 'm4v', 'mov', 'webm', 'mkv', 'avi'}
        assert policy.cleanup_chunks_on_failure is False

    def test_frozen(self):
        """Test the policy cannot be changed at runtime."""
        policy = UploadPolicy()

        with pytest.raises(AttributeError):
            policy.chunk_size = 1

    @pytest.mark.parametrize("field", ["chunk_size", "max_parallel_chunks", "max_retries_per_chunk"])
    def test_rejects_non_positive(self, field):
        """Test non-positive sizes and counts are rejected."""
        with pytest.raises(ValueError):
            UploadPolicy(**{field: 0})


class TestSupabaseConfig:
    """Test suite for SupabaseConfig."""

    def test_strips_trailing_slash(self):
        """Test project URL is normalized."""
        config = SupabaseConfig(url="https://abc.supabase.co/", api_key="anon")

        assert config.url == "https://abc.supabase.co"

    def test_headers_use_api_key(self):
        """Test anonymous requests authorize with the API key."""
        headers = SupabaseConfig(url="https://abc.supabase.co", api_key="anon").get_headers()

        assert headers['apikey'] == "anon"
        assert headers['Authorization'] == "Bearer anon"

    def test_headers_prefer_access_token(self):
        """Test a user access token is used when present."""
        config = SupabaseConfig(
            url="https://abc.supabase.co",
            api_key="anon",
            access_token="jwt",
            extra_headers={'x-client-info': 'farm-app'}
        )

        headers = config.get_headers()

        assert headers['Authorization'] == "Bearer jwt"
        assert headers['x-client-info'] == "farm-app"

    def test_from_env(self, monkeypatch):
        """Test reading configuration from the environment."""
        monkeypatch.setenv('SUPABASE_URL', "https://abc.supabase.co")
        monkeypatch.setenv('SUPABASE_KEY', "anon")
        monkeypatch.setenv('VIDEOUPLOAD_BUCKET', "videos")
        monkeypatch.delenv('SUPABASE_ACCESS_TOKEN', raising=False)

        config = SupabaseConfig.from_env()

        assert config.url == "https://abc.supabase.co"
        assert config.bucket == "videos"
        assert config.access_token is None

    def test_from_env_overrides(self, monkeypatch):
        """Test keyword overrides win over the environment."""
        monkeypatch.setenv('SUPABASE_URL', "https://abc.supabase.co")
        monkeypatch.setenv('SUPABASE_KEY', "anon")

        assert SupabaseConfig.from_env(bucket="other").bucket == "other"

    def test_from_env_missing(self, monkeypatch):
        """Test missing variables raise."""
        monkeypatch.delenv('SUPABASE_URL', raising=False)
        monkeypatch.delenv('SUPABASE_KEY', raising=False)

        with pytest.raises(ValueError):
            SupabaseConfig.from_env()

    def test_session_kwargs(self):
        """Test aiohttp session arguments."""
        kwargs = SupabaseConfig(url="https://abc.supabase.co", api_key="anon").get_session_kwargs()

        assert isinstance(kwargs['timeout'], aiohttp.ClientTimeout)
        assert kwargs['headers']['apikey'] == "anon"


class TestTimeoutConfig:
    """Test suite for TimeoutConfig."""

    def test_to_aiohttp_timeout(self):
        """Test conversion keeps each value."""
        timeout = TimeoutConfig(total=600, connect=5).to_aiohttp_timeout()

        assert timeout.total == 600
        assert timeout.connect == 5
        assert timeout.sock_read == 300.0


class TestFormatting:
    """Test suite for formatting helpers."""

    @pytest.mark.parametrize("size,text", [
        (0, "0 B"),
        (512, "512 B"),
        (1536, "1.50 KB"),
        (50 * MIB, "50.00 MB"),
        (int(1.5 * GIB), "1.50 GB"),
    ])
    def test_format_size(self, size, text):
        assert format_size(size) == text

    @pytest.mark.parametrize("seconds,text", [
        (0, "0s"),
        (45.7, "45s"),
        (200, "3m 20s"),
        (3900, "1h 5m"),
        (-3, "0s"),
    ])
    def test_format_duration(self, seconds, text):
        assert format_duration(seconds) == text
