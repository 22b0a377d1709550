"""Time-bounded response cache."""

from typing import Any, Callable, Dict, Optional, Tuple


class ResponseCache:
    """
    TTL cache for API responses with an injected clock.

    Entries are fresh while ``now - stored_at < ttl``. Callers pass the
    current time explicitly so expiry is deterministic under test.

    Example:
        >>> cache = ResponseCache(ttl=5.0)
        >>> cache.put("abc", ["block"], now=100.0)
        >>> cache.get("abc", now=103.0)
        ['block']
        >>> cache.get("abc", now=106.0) is None
        True
    """

    def __init__(self, ttl: float = 5.0) -> None:
        """
        Initialize empty cache.

        Args:
            ttl: Freshness window in seconds
        """
        self.ttl = ttl
        self._entries: Dict[str, Tuple[Any, float]] = {}

    def get(self, key: str, now: float) -> Optional[Any]:
        """Return the cached value if present and fresh, else None."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, stored_at = entry
        if now - stored_at < self.ttl:
            return value
        return None

    def put(self, key: str, value: Any, now: float) -> None:
        """Store a value, overwriting any existing entry for the key."""
        self._entries[key] = (value, now)

    def invalidate(self, predicate: Callable[[str], bool]) -> int:
        """
        Remove every entry whose key satisfies the predicate.

        Returns:
            Number of entries removed
        """
        doomed = [key for key in self._entries if predicate(key)]
        for key in doomed:
            del self._entries[key]
        return len(doomed)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
