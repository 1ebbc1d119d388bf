"""
Shared pytest fixtures
"""
import pytest

import utils.redis_client as redis_client
from utils import InMemoryCounterStore


@pytest.fixture(autouse=True)
def in_memory_store(monkeypatch):
    """Every test gets a fresh in-memory counter store instead of Redis."""
    store = InMemoryCounterStore()
    monkeypatch.setattr(redis_client, "_store", store)
    return store
