"""Cache entry, lookup result and stats models.

Entries are owned by the in-memory fallback store; Redis keeps its own
representation and applies expiry natively.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel


@dataclass
class CacheEntry:
    """Serialized value with an absolute expiry timestamp."""
    key: str
    value: str  # JSON serialized
    expires_at: float
    created_at: float = field(default_factory=time.time)

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class CacheStatus(str, Enum):
    """Outcome of a cache lookup."""
    HIT = "hit"
    MISS = "miss"                # Absent, expired, or undecodable payload
    UNAVAILABLE = "unavailable"  # Backend down or not started


class CacheState(str, Enum):
    """Backend connection lifecycle.

    State transitions:
        DISABLED -> CONNECTING -> ENABLED
                             -> DISABLED  (handshake failed)
        ENABLED -> DISABLED               (connection lost)
    """
    DISABLED = "disabled"
    CONNECTING = "connecting"
    ENABLED = "enabled"


@dataclass(frozen=True)
class CacheLookup:
    """Typed result of a cache read.

    Callers that only care about the value use ``.value`` (None unless HIT).
    """
    status: CacheStatus
    value: Any = None

    @classmethod
    def hit(cls, value: Any) -> "CacheLookup":
        return cls(CacheStatus.HIT, value)

    @classmethod
    def miss(cls) -> "CacheLookup":
        return cls(CacheStatus.MISS)

    @classmethod
    def unavailable(cls) -> "CacheLookup":
        return cls(CacheStatus.UNAVAILABLE)

    @property
    def is_hit(self) -> bool:
        return self.status is CacheStatus.HIT


class CacheStats(BaseModel):
    """Best-effort cache introspection."""
    enabled: bool
    key_count: Optional[int] = None
    memory_used: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)
