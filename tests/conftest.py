"""
Pytest configuration and shared fixtures.

Provides:
- AnyIO backend selection for async tests and fixtures
- An in-memory column-family store with a few pre-registered families
- A GC policy manager bound to that store
- FastAPI clients (async httpx and sync TestClient) wired to the same store
"""

from __future__ import annotations

import sys
from collections.abc import AsyncGenerator, Generator
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]

# Add the package to path for imports
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import httpx  # noqa: E402 (import after path setup)
import pytest  # noqa: E402 (import after path setup)
from fastapi.testclient import TestClient  # noqa: E402 (import after path setup)

from gc_policy.core.dependencies import get_store  # noqa: E402
from gc_policy.main import create_app  # noqa: E402
from gc_policy.services.gc_policy_manager import GCPolicyManager  # noqa: E402
from gc_policy.stores.memory import MemoryGCPolicyStore  # noqa: E402

TABLE_REF = "projects/test-project/instances/test-instance/tables/events"


# =============================================================================
# AnyIO Backend Configuration
# =============================================================================
# Per AnyIO testing docs: https://anyio.readthedocs.io/en/stable/testing.html
@pytest.fixture
def anyio_backend():
    return "asyncio"


# ============================================================================
# Store and Manager Fixtures
# ============================================================================


@pytest.fixture
def memory_store() -> MemoryGCPolicyStore:
    """Store with table TABLE_REF holding families `cf1` and `cf2` and no policies."""
    store = MemoryGCPolicyStore()
    store.create_column_family(TABLE_REF, "cf1")
    store.create_column_family(TABLE_REF, "cf2")
    return store


@pytest.fixture
def manager(memory_store: MemoryGCPolicyStore) -> GCPolicyManager:
    return GCPolicyManager(memory_store, timeout=5.0)


# ============================================================================
# FastAPI Client Fixtures
# ============================================================================


def _create_app_with_store(store: MemoryGCPolicyStore):
    app = create_app()
    app.dependency_overrides[get_store] = lambda: store
    return app


@pytest.fixture
async def client(memory_store: MemoryGCPolicyStore) -> AsyncGenerator[httpx.AsyncClient]:
    """AsyncClient talking to an app backed by the memory_store fixture."""
    app = _create_app_with_store(memory_store)

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def sync_client(memory_store: MemoryGCPolicyStore) -> Generator[TestClient]:
    """TestClient for tests that do not need an event loop of their own."""
    app = _create_app_with_store(memory_store)
    with TestClient(app) as c:
        yield c
