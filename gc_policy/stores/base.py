"""
Column-family store interface consumed by the GC policy manager.

Implementations talk to the store's administrative API. They must not retry;
retry and backoff belong to the caller. Cancellation reaches them through
the awaiting task.
"""

from typing import Protocol, runtime_checkable

from gc_policy.domain.policy import Policy


@runtime_checkable
class GCPolicyStore(Protocol):
    """Read and write GC policies of column families."""

    async def set_gc_policy(self, table_ref: str, family_id: str, policy: Policy) -> Policy:
        """
        Replace the GC policy of a column family.

        Returns:
            The policy now in effect, as reported by the store

        Raises:
            StoreNotFoundError: If the table or column family does not exist
            StoreError: On any other store failure
        """
        ...

    async def get_gc_policy(self, table_ref: str, family_id: str) -> Policy | None:
        """
        Read the GC policy of a column family.

        Returns:
            The live policy, or None when the family has no GC policy

        Raises:
            StoreNotFoundError: If the table or column family does not exist
            StoreError: On any other store failure
        """
        ...

    async def list_gc_policies(self, table_ref: str) -> dict[str, Policy]:
        """
        Read the GC policies of every column family of a table.

        Families without a GC policy are left out.

        Raises:
            StoreNotFoundError: If the table does not exist
            StoreError: On any other store failure
        """
        ...
