"""Column-family store interface and implementations."""

from gc_policy.stores.base import GCPolicyStore
from gc_policy.stores.memory import MemoryGCPolicyStore

__all__ = [
    "GCPolicyStore",
    "MemoryGCPolicyStore",
]
