"""Object storage backends."""
from .memory_storage import MemoryStorage
from .supabase_storage import SupabaseStorage

__all__ = [
    'MemoryStorage',
    'SupabaseStorage',
]
