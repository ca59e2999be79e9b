"""Redis-backed cache of dead session ids for reduced database load."""
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from core.redis import RedisClient

logger = logging.getLogger(__name__)

# Cache schema version - included in all cache keys (e.g., "session:v2:...")
#
# Bump this version when the meaning of an entry changes. Old entries are then
# never found and expire naturally via TTL.
CACHE_SCHEMA_VERSION = 2


class SessionCache:
    """
    Cache of session ids that can no longer authenticate.

    Only negative results are stored: ids that were logged out, regenerated,
    expired, or never issued. A live session is always confirmed against the
    database, so a failed Redis write costs a database lookup and can never
    keep a terminated session alive. Credentials are never reissued, so an
    entry cannot go stale.
    """

    CACHE_TTL = 300  # 5 minutes

    def __init__(self, redis_client: "RedisClient") -> None:
        """Initialize session cache with Redis client."""
        self._redis = redis_client

    def _cache_key(self, session_id: str) -> str:
        """Generate cache key for a hashed session id."""
        return f"session:v{CACHE_SCHEMA_VERSION}:revoked:{session_id}"

    async def is_revoked(self, session_id: str) -> bool:
        """True when the hashed id is known to be dead. A miss means "ask the database"."""
        if await self._redis.get(self._cache_key(session_id)):
            logger.debug("session_cache_hit")
            return True
        logger.debug("session_cache_miss")
        return False

    async def revoke(self, session_id: str) -> None:
        """Remember that a hashed id no longer authenticates."""
        await self._redis.setex(self._cache_key(session_id), self.CACHE_TTL, "1")
        logger.debug("session_cache_revoke")


# Global session cache instance (set during app startup)
_session_cache: SessionCache | None = None


def get_session_cache() -> SessionCache | None:
    """Get the global session cache instance."""
    return _session_cache


def set_session_cache(cache: SessionCache | None) -> None:
    """Set the global session cache instance."""
    global _session_cache  # noqa: PLW0603
    _session_cache = cache
