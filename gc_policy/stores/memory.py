"""
In-memory column-family store.

Backs local development and tests. Policies live in a process-local dict and
are lost on restart.
"""

import logging

import anyio

from gc_policy.core.errors import StoreNotFoundError
from gc_policy.domain.policy import NoGCPolicy, Policy

logger = logging.getLogger(__name__)


class MemoryGCPolicyStore:
    """
    GCPolicyStore kept in process memory.

    Args:
        auto_create: Create unknown tables and column families on write
                     instead of raising StoreNotFoundError
        latency: Seconds to sleep inside every call, to exercise caller
                 timeouts and cancellation
    """

    def __init__(self, auto_create: bool = True, latency: float = 0.0) -> None:
        self.auto_create = auto_create
        self.latency = latency
        self._tables: dict[str, dict[str, Policy | None]] = {}
        self._lock = anyio.Lock()

    def create_column_family(
        self, table_ref: str, family_id: str, policy: Policy | None = None
    ) -> None:
        """Register a column family, optionally with an initial GC policy."""
        families = self._tables.setdefault(table_ref, {})
        families[family_id] = None if isinstance(policy, NoGCPolicy) else policy

    async def set_gc_policy(self, table_ref: str, family_id: str, policy: Policy) -> Policy:
        await self._simulate_latency()
        async with self._lock:
            families = self._families(table_ref, create=self.auto_create)
            if family_id not in families and not self.auto_create:
                raise StoreNotFoundError(
                    f"Column family {family_id} not found",
                    details={"table_ref": table_ref, "column_family_id": family_id},
                )
            families[family_id] = None if isinstance(policy, NoGCPolicy) else policy

        logger.debug("Stored GC policy for %s/%s", table_ref, family_id)
        return policy

    async def get_gc_policy(self, table_ref: str, family_id: str) -> Policy | None:
        await self._simulate_latency()
        async with self._lock:
            families = self._families(table_ref, create=False)
            if family_id not in families:
                raise StoreNotFoundError(
                    f"Column family {family_id} not found",
                    details={"table_ref": table_ref, "column_family_id": family_id},
                )
            return families[family_id]

    async def list_gc_policies(self, table_ref: str) -> dict[str, Policy]:
        await self._simulate_latency()
        async with self._lock:
            families = self._families(table_ref, create=False)
            return {
                family_id: policy
                for family_id, policy in sorted(families.items())
                if policy is not None
            }

    def _families(self, table_ref: str, create: bool) -> dict[str, Policy | None]:
        if table_ref not in self._tables:
            if not create:
                raise StoreNotFoundError(
                    f"Table {table_ref} not found", details={"table_ref": table_ref}
                )
            self._tables[table_ref] = {}
        return self._tables[table_ref]

    async def _simulate_latency(self) -> None:
        if self.latency > 0:
            await anyio.sleep(self.latency)
