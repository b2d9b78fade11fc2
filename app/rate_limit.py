# Fixed-window request throttling for the public search endpoints.
# One Redis counter per (client IP, scope) that expires with its window; when Redis is
# off or misbehaving, requests pass through untouched.
import os
import logging
from typing import Callable, Dict, Literal, Optional, Tuple

from fastapi import Request, HTTPException, status

from .redis_client import get_redis, is_redis_enabled

logger = logging.getLogger("rentradar.rate_limit")

Scope = Literal["search", "lookup"]

# scope -> (env var holding the per-window cap, default cap)
_SCOPE_LIMITS: Dict[str, Tuple[str, int]] = {
    "search": ("RATE_LIMIT_SEARCH_PER_WINDOW", 120),
    "lookup": ("RATE_LIMIT_LOOKUP_PER_WINDOW", 300),
}


def _env_int(name: str, default: int) -> int:
    raw: Optional[str] = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r; using %s", name, raw, default)
        return default


def _window_seconds() -> int:
    return _env_int("RATE_LIMIT_WINDOW_SECONDS", 60)


def _limit_for_scope(scope: Scope) -> int:
    env_name, default = _SCOPE_LIMITS[scope]
    return _env_int(env_name, default)


def _counter_key(request: Request, scope: Scope) -> str:
    # Remote address only; X-Forwarded-For is not trusted here
    ip = request.client.host if request.client and request.client.host else "unknown"
    return f"rl:v1:ip:{ip}:{scope}"


def rate_limit(scope: Scope) -> Callable[[Request], None]:
    """
    Build a FastAPI dependency that caps requests per client IP for `scope`.

    Caps (per RATE_LIMIT_WINDOW_SECONDS, default 60s):
    - search: RATE_LIMIT_SEARCH_PER_WINDOW (default 120), list and nearby queries
    - lookup: RATE_LIMIT_LOOKUP_PER_WINDOW (default 300), single-listing reads

    Exceeding the cap raises 429 with a retry_after hint.
    """
    window = _window_seconds()
    limit = _limit_for_scope(scope)

    def _dependency(request: Request) -> None:
        r = get_redis() if is_redis_enabled() else None
        if r is None:
            return

        key = _counter_key(request, scope)
        try:
            hits = r.incr(key, amount=1)
            if hits == 1:
                r.expire(key, window)
            if hits <= limit:
                return
            ttl = r.ttl(key)
        except Exception as exc:
            logger.warning("Rate limit fail-open (key=%s): %s", key, exc)
            return

        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail={
                "error": "rate_limited",
                "scope": scope,
                "limit": limit,
                "window_seconds": window,
                "retry_after": ttl if isinstance(ttl, int) and ttl > 0 else window,
            },
        )

    return _dependency
