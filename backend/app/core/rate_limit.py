"""
Rate limiting for write-heavy and public endpoints
Fixed-window counters keyed by client identifier

Each identifier gets a window {count, reset_time}. The first request after
reset_time opens a new window with count 1; every other request increments
the count and is allowed while count <= max_requests. Windows reset on
wall-clock comparison, so a burst straddling a boundary can see up to
2 x max_requests; that is accepted.

Backends:
- InMemoryRateLimitStore: process-local, for single-instance deployments
- RedisRateLimitStore: shared atomic counter, set REDIS_URL to enable
"""
import logging
import math
import random
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

import redis
from fastapi import Request, Response

from app.core.config import settings
from app.core.exceptions import RateLimitExceeded

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitConfig:
    window_seconds: float
    max_requests: int


@dataclass
class RateLimitEntry:
    count: int
    reset_time: float


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    remaining: int
    reset_time: float
    limit: int

    def retry_after(self, now: float) -> int:
        """Whole seconds until the window resets (at least 1)"""
        return max(1, math.ceil(self.reset_time - now))


# Rate limit presets per endpoint class
RATE_LIMIT_PRESETS: Dict[str, RateLimitConfig] = {
    name: RateLimitConfig(window_seconds=window, max_requests=max_requests)
    for name, (window, max_requests) in settings.RATE_LIMIT_PRESETS.items()
}


class RateLimitStore:
    """Backend interface: atomically count one hit in the identifier's window"""

    def hit(self, key: str, window_seconds: float, now: float) -> RateLimitEntry:
        raise NotImplementedError

    def cleanup(self, now: float) -> int:
        return 0


class InMemoryRateLimitStore(RateLimitStore):
    """
    In-memory store for a single instance.

    A lock guards the counter map so concurrent requests from the same
    identifier are counted exactly. Expired windows are swept on a random
    fraction of hits, and always once the map grows past max_entries.
    """

    def __init__(
        self,
        max_entries: int = 10000,
        sweep_probability: float = 0.05,
        rng: Callable[[], float] = random.random
    ):
        self._entries: Dict[str, RateLimitEntry] = {}
        self._lock = threading.Lock()
        self.max_entries = max_entries
        self.sweep_probability = sweep_probability
        self._rng = rng

    def __len__(self) -> int:
        return len(self._entries)

    def _sweep(self, now: float) -> int:
        expired = [key for key, entry in self._entries.items() if now > entry.reset_time]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug(f"Rate limit sweep removed {len(expired)} expired windows")
        return len(expired)

    def cleanup(self, now: float) -> int:
        with self._lock:
            return self._sweep(now)

    def hit(self, key: str, window_seconds: float, now: float) -> RateLimitEntry:
        with self._lock:
            if len(self._entries) > self.max_entries or self._rng() < self.sweep_probability:
                self._sweep(now)

            entry = self._entries.get(key)
            if entry is None or now > entry.reset_time:
                entry = RateLimitEntry(count=1, reset_time=now + window_seconds)
                self._entries[key] = entry
            else:
                entry.count += 1

            return RateLimitEntry(count=entry.count, reset_time=entry.reset_time)


# INCR and expiry in one script so the window opens atomically
FIXED_WINDOW_SCRIPT = """
local count = redis.call('INCR', KEYS[1])
if count == 1 then
    redis.call('PEXPIRE', KEYS[1], ARGV[1])
end
local ttl = redis.call('PTTL', KEYS[1])
if ttl < 0 then
    redis.call('PEXPIRE', KEYS[1], ARGV[1])
    ttl = tonumber(ARGV[1])
end
return {count, ttl}
"""


class RedisRateLimitStore(RateLimitStore):
    """
    Redis-backed store for multi-instance deployments.

    Windows live as keys with a TTL, so Redis expires them itself and no
    sweep is needed.
    """

    def __init__(self, client, key_prefix: str = "ratelimit:"):
        self.client = client
        self.key_prefix = key_prefix
        self._script = client.register_script(FIXED_WINDOW_SCRIPT)

    @classmethod
    def from_url(cls, redis_url: str, **kwargs) -> "RedisRateLimitStore":
        return cls(redis.Redis.from_url(redis_url), **kwargs)

    def hit(self, key: str, window_seconds: float, now: float) -> RateLimitEntry:
        window_ms = max(1, int(window_seconds * 1000))
        count, ttl_ms = self._script(keys=[f"{self.key_prefix}{key}"], args=[window_ms])
        return RateLimitEntry(count=int(count), reset_time=now + int(ttl_ms) / 1000)


class RateLimiter:
    """
    Fixed-window rate limiter over a pluggable store.

    For production with multiple instances, use RedisRateLimitStore.
    """

    def __init__(self, store: Optional[RateLimitStore] = None,
                 clock: Callable[[], float] = time.time):
        self.store = store or InMemoryRateLimitStore()
        self._clock = clock

    def now(self) -> float:
        return self._clock()

    def allow(self, identifier: str, config: RateLimitConfig) -> RateLimitResult:
        """
        Count one request for identifier.

        Returns:
            RateLimitResult(allowed, remaining, reset_time, limit)
        """
        now = self.now()
        entry = self.store.hit(identifier, config.window_seconds, now)
        allowed = entry.count <= config.max_requests
        return RateLimitResult(
            allowed=allowed,
            remaining=max(0, config.max_requests - entry.count),
            reset_time=entry.reset_time,
            limit=config.max_requests
        )

    def check(self, identifier: str, config: RateLimitConfig) -> RateLimitResult:
        """Like allow(), but raises RateLimitExceeded when over the limit"""
        result = self.allow(identifier, config)
        if not result.allowed:
            retry_after = result.retry_after(self.now())
            logger.warning(f"Rate limit exceeded for {identifier}; retry in {retry_after}s")
            raise RateLimitExceeded(
                retry_after=retry_after,
                reset_time=result.reset_time,
                limit=result.limit
            )
        return result


def build_rate_limiter() -> RateLimiter:
    if settings.REDIS_URL:
        logger.info("Using Redis rate limit store")
        return RateLimiter(RedisRateLimitStore.from_url(settings.REDIS_URL))
    return RateLimiter(InMemoryRateLimitStore())


# Global rate limiter instance
rate_limiter = build_rate_limiter()


def get_client_identifier(request: Request) -> str:
    """
    Identify the client: first proxy-forwarded address, then X-Real-IP,
    then a user-agent + accept-language fingerprint.
    """
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        # Take the first IP in the chain (original client)
        client_ip = forwarded_for.split(",")[0].strip()
        if client_ip:
            return client_ip

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()

    user_agent = request.headers.get("User-Agent") or "unknown"
    accept_language = request.headers.get("Accept-Language") or "unknown"
    return f"{user_agent}-{accept_language}"[:100]


def rate_limit(preset: str, limiter: Optional[RateLimiter] = None):
    """
    Dependency factory for per-endpoint rate limits.

    Usage:
        @router.post("/orders", dependencies=[Depends(rate_limit("write"))])
        def place_order(...):
            ...
    """
    config = RATE_LIMIT_PRESETS[preset]

    def rate_limit_check(request: Request, response: Response) -> RateLimitResult:
        active = limiter or rate_limiter
        if not settings.RATE_LIMIT_ENABLED:
            return RateLimitResult(True, config.max_requests, active.now(), config.max_requests)

        identifier = f"{preset}:{request.url.path}:{get_client_identifier(request)}"
        result = active.check(identifier, config)

        response.headers["X-RateLimit-Limit"] = str(result.limit)
        response.headers["X-RateLimit-Remaining"] = str(result.remaining)
        response.headers["X-RateLimit-Reset"] = str(int(result.reset_time))
        return result

    return rate_limit_check
