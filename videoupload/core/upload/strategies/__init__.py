"""Upload strategies module."""
from .chunking import BaseChunkingStrategy, FixedSizeChunkingStrategy, plan_chunks
from .retry import RetryStrategy, ExponentialBackoffStrategy

__all__ = [
    'BaseChunkingStrategy',
    'FixedSizeChunkingStrategy',
    'plan_chunks',
    'RetryStrategy',
    'ExponentialBackoffStrategy',
]
