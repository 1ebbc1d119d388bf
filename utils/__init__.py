"""
Utilities - logging and the shared counter store
"""
from .logger import get_logger
from .redis_client import (
    CounterStore,
    RedisCounterStore,
    InMemoryCounterStore,
    StoreUnavailableError,
    CacheMissError,
    get_counter_store,
    get_or_fetch,
)

__all__ = [
    "get_logger",
    "CounterStore",
    "RedisCounterStore",
    "InMemoryCounterStore",
    "StoreUnavailableError",
    "CacheMissError",
    "get_counter_store",
    "get_or_fetch",
]
