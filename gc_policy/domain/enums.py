"""
Domain enums for GC rules and policies.

The string values are the ones used on the wire: rule modes appear in the
JSON rule grammar, deletion modes in the apply/release API.
"""

from enum import Enum


class RuleMode(str, Enum):
    """Combinator of a composite GC rule."""

    UNION = "union"  # Collect a cell when any child rule matches
    INTERSECTION = "intersection"  # Collect a cell only when all child rules match


class DeletionMode(str, Enum):
    """
    How a managed GC policy is released.

    ABANDON leaves the live policy untouched. Replicated stores forbid
    removing a GC policy.
    """

    DEFAULT = "DEFAULT"
    ABANDON = "ABANDON"
