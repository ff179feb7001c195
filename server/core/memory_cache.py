"""Process-local expiring key-value store.

Used by CacheService when no external backend is configured. Expiry is
checked lazily on access; nothing sweeps the map in the background.
"""

import re
import time
from typing import Callable, Dict, List, Optional

from models.cache import CacheEntry


class MemoryCacheStore:
    """Dict of serialized entries keyed by cache key."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}

    def get(self, key: str) -> Optional[str]:
        """Return the serialized value, or None if absent or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            del self._entries[key]
            return None
        return entry.value

    def set(self, key: str, value: str, ttl: float) -> None:
        now = self._clock()
        self._entries[key] = CacheEntry(
            key=key,
            value=value,
            expires_at=now + ttl,
            created_at=now,
        )

    def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def delete_matching(self, regex: re.Pattern[str]) -> int:
        """Delete every key the compiled regex fully matches."""
        doomed = [k for k in self._entries if regex.fullmatch(k)]
        for key in doomed:
            del self._entries[key]
        return len(doomed)

    def clear(self) -> int:
        count = len(self._entries)
        self._entries.clear()
        return count

    def keys(self) -> List[str]:
        """Live (unexpired) keys."""
        now = self._clock()
        return [k for k, e in self._entries.items() if not e.is_expired(now)]

    def __len__(self) -> int:
        return len(self.keys())

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None


def wildcard_to_regex(pattern: str) -> re.Pattern[str]:
    """Compile a `*` wildcard pattern; every other character is literal."""
    return re.compile(".*".join(re.escape(part) for part in pattern.split("*")), re.DOTALL)
