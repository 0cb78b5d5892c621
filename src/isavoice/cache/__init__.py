"""Audio cache for isavoice."""

from .manager import AudioCache
from .models import AudioCacheEntry

__all__ = ["AudioCache", "AudioCacheEntry"]
