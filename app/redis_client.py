# Redis client helper: opt-in, fail-open access to a shared Redis connection.
# Controlled by REDIS_ENABLED and REDIS_URL so search never depends on Redis availability.
import logging
import os
from typing import Optional

import redis

# Module-scoped logger for connection/health messages
_logger = logging.getLogger("rentradar.redis")


# Basic truthy parser for env flags (1, true, yes, on)
def _truthy(val: Optional[str]) -> bool:
    if val is None:
        return False
    return val.strip().lower() in {"1", "true", "t", "yes", "y", "on"}


# Feature flag: enable Redis by setting REDIS_ENABLED to a truthy value
def is_redis_enabled() -> bool:
    return _truthy(os.getenv("REDIS_ENABLED", "false"))


# Cached client and a one-shot guard; a failed connect stays failed for the process lifetime
_client: Optional[redis.Redis] = None
_initialized = False


def get_redis() -> Optional[redis.Redis]:
    """
    Return a Redis client if enabled and reachable; otherwise return None.

    - Lazy connection on first call, verified with PING
    - Never raises; callers degrade gracefully on None
    """
    global _client, _initialized
    if not is_redis_enabled():
        return None
    if _client is not None:
        return _client
    if _initialized:
        return None

    url = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    _initialized = True
    try:
        client = redis.Redis.from_url(
            url,
            socket_timeout=0.25,
            socket_connect_timeout=0.25,
            retry_on_timeout=False,
            health_check_interval=0,
        )
        client.ping()
    except redis.RedisError as exc:
        _logger.warning("Redis unavailable (fail-open): %s", exc)
        return None

    _client = client
    _logger.info("Connected to Redis at %s", url)
    return _client


def reset_redis() -> None:
    """Forget the cached client so the next get_redis() reconnects (tests, config reloads)."""
    global _client, _initialized
    _client = None
    _initialized = False
