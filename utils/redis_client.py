"""
Counter store for rate-limit counters and response caching.

Redis is the primary backend; an in-memory store takes over when Redis is not
reachable at startup so local development keeps working.

All backends raise StoreUnavailableError on infrastructure failures and
CacheMissError when a key is absent, so callers can degrade explicitly.
"""
import json
import threading
import time
from typing import Any, Callable, Protocol

import redis

from config import settings
from utils.logger import get_logger

logger = get_logger(__name__)


class StoreUnavailableError(Exception):
    """Raised when the counter store cannot be reached"""
    pass


class CacheMissError(KeyError):
    """Raised by get() when the key does not exist or has expired"""
    pass


class CounterStore(Protocol):
    def increment(self, key: str, ttl: int = 0) -> int: ...

    def get(self, key: str) -> Any: ...

    def set(self, key: str, value: Any, ttl: int) -> None: ...


class RedisCounterStore:
    """Counter store backed by a Redis client. Values are stored as JSON."""

    def __init__(self, client: redis.Redis):
        self.client = client

    def increment(self, key: str, ttl: int = 0) -> int:
        """
        Atomically increment key. When ttl > 0 the key gets that expiry
        unless it already has one (EXPIRE NX, Redis 7+), so a lost expiry
        is restored by the next increment instead of leaking the key.
        """
        try:
            with self.client.pipeline(transaction=True) as pipe:
                pipe.incr(key)
                if ttl > 0:
                    pipe.expire(key, ttl, nx=True)
                results = pipe.execute()
        except redis.RedisError as e:
            raise StoreUnavailableError(f"incr {key} failed: {e}") from e
        return int(results[0])

    def get(self, key: str) -> Any:
        try:
            data = self.client.get(key)
        except redis.RedisError as e:
            raise StoreUnavailableError(f"get {key} failed: {e}") from e
        if data is None:
            raise CacheMissError(key)
        try:
            return json.loads(data)
        except json.JSONDecodeError as e:
            raise CacheMissError(key) from e

    def set(self, key: str, value: Any, ttl: int) -> None:
        payload = json.dumps(value)
        try:
            # ttl of 0 means no expiry
            if ttl > 0:
                self.client.set(key, payload, ex=ttl)
            else:
                self.client.set(key, payload)
        except redis.RedisError as e:
            raise StoreUnavailableError(f"set {key} failed: {e}") from e


class InMemoryCounterStore:
    """
    Process-local store with the same contract as RedisCounterStore.

    Expired entries are dropped when their key is read, and in a sweep over
    the whole dict at most once per sweep_interval seconds on writes, so keys
    that are never read again (old rate-limit windows) don't pile up.
    """

    def __init__(self, clock=time.monotonic, sweep_interval: float = 60.0):
        self._store: dict[str, tuple[float | None, Any]] = {}
        self._lock = threading.Lock()
        self._clock = clock
        self._sweep_interval = sweep_interval
        self._next_sweep = clock() + sweep_interval

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def _live_entry(self, key: str) -> tuple[float | None, Any] | None:
        # Caller must hold the lock
        entry = self._store.get(key)
        if entry is None:
            return None
        expires_at, _ = entry
        if expires_at is not None and expires_at <= self._clock():
            del self._store[key]
            return None
        return entry

    def _sweep_expired(self) -> None:
        # Caller must hold the lock
        now = self._clock()
        if now < self._next_sweep:
            return
        self._next_sweep = now + self._sweep_interval
        expired = [
            key for key, (expires_at, _) in self._store.items()
            if expires_at is not None and expires_at <= now
        ]
        for key in expired:
            del self._store[key]

    def increment(self, key: str, ttl: int = 0) -> int:
        with self._lock:
            self._sweep_expired()
            entry = self._live_entry(key)
            if entry is None:
                expires_at, value = None, 0
            else:
                expires_at, value = entry
            if expires_at is None and ttl > 0:
                expires_at = self._clock() + ttl
            value = int(value) + 1
            self._store[key] = (expires_at, value)
            return value

    def get(self, key: str) -> Any:
        with self._lock:
            entry = self._live_entry(key)
            if entry is None:
                raise CacheMissError(key)
            # Round-trip through JSON so callers see the same shapes Redis returns
            return json.loads(json.dumps(entry[1]))

    def set(self, key: str, value: Any, ttl: int) -> None:
        payload = json.loads(json.dumps(value))
        with self._lock:
            self._sweep_expired()
            expires_at = self._clock() + ttl if ttl > 0 else None
            self._store[key] = (expires_at, payload)


# Singleton instance
_store: CounterStore | None = None


def get_counter_store() -> CounterStore:
    """Get or create the shared counter store (Redis, else in-memory)"""
    global _store
    if _store is not None:
        return _store
    try:
        client = redis.Redis.from_url(settings.REDIS_URL)
        client.ping()
        logger.info(f"Using Redis counter store at {settings.REDIS_URL}")
        _store = RedisCounterStore(client)
    except redis.RedisError as e:
        logger.warning(f"Redis not available ({e}), using in-memory counter store")
        _store = InMemoryCounterStore()
    return _store


def get_or_fetch(store: CounterStore, key: str, ttl: int, fetch: Callable[[], Any]) -> Any:
    """
    Return the cached value for key, or call fetch() and cache its result.

    Store outages degrade to a cache miss: the value is fetched and the
    failed write is only logged.
    """
    try:
        return store.get(key)
    except CacheMissError:
        pass
    except StoreUnavailableError as e:
        logger.warning(f"Cache read failed, fetching fresh data: {e}")

    value = fetch()

    try:
        store.set(key, value, ttl)
    except StoreUnavailableError as e:
        logger.warning(f"Cache write failed: {e}")
    return value
