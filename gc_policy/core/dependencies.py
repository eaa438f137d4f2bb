"""
FastAPI dependency injection utilities.

Provides the column-family store and the GC policy manager to endpoints.
Tests replace them through `app.dependency_overrides[get_store]`.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from gc_policy.core.config import StoreBackend, settings
from gc_policy.services.gc_policy_manager import GCPolicyManager
from gc_policy.stores.base import GCPolicyStore
from gc_policy.stores.memory import MemoryGCPolicyStore


@lru_cache(maxsize=1)
def get_store() -> GCPolicyStore:
    """
    Process-wide column-family store, built from settings on first use.

    Raises:
        ValueError: If the configured backend is not supported
    """
    if settings.gc_store_backend == StoreBackend.MEMORY:
        return MemoryGCPolicyStore()
    raise ValueError(f"Unsupported GC store backend: {settings.gc_store_backend}")


def get_manager(store: Annotated[GCPolicyStore, Depends(get_store)]) -> GCPolicyManager:
    """GC policy manager bound to the configured store and timeout."""
    return GCPolicyManager(store, timeout=settings.gc_store_timeout_seconds)


Manager = Annotated[GCPolicyManager, Depends(get_manager)]
