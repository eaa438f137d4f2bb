"""
GC policy tree as applied to a column-family store.

Policies are immutable and compare structurally, so two trees built from the
same rule are equal with children in the same order.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from gc_policy.domain.enums import DeletionMode


@dataclass(frozen=True)
class NoGCPolicy:
    """Absence of any GC rule: the store never collects cells."""


@dataclass(frozen=True)
class MaxAgePolicy:
    max_age: timedelta


@dataclass(frozen=True)
class MaxVersionsPolicy:
    max_versions: int


@dataclass(frozen=True)
class UnionPolicy:
    children: tuple[Policy, ...]


@dataclass(frozen=True)
class IntersectionPolicy:
    children: tuple[Policy, ...]


Policy = NoGCPolicy | MaxAgePolicy | MaxVersionsPolicy | UnionPolicy | IntersectionPolicy


@dataclass(frozen=True)
class ColumnFamilyGCConfig:
    """The unit handed to the store: one policy for one column family."""

    table_ref: str
    column_family_id: str
    policy: Policy
    deletion_mode: DeletionMode = DeletionMode.DEFAULT
