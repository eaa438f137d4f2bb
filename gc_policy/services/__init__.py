"""Service layer for GC policy management."""

from gc_policy.services.gc_policy_manager import GCPolicyManager

__all__ = ["GCPolicyManager"]
