"""
Canonical forms of GC policy trees.

Used for drift detection: a configured rule and the policy read back from
the store are compared by meaning, not by text. Both sides are compiled to
policies first, so key order, whitespace, mode spelling and the bare-leaf
vs. single-rule wrapper forms are all insignificant.

Comparison works on a flat signature rather than on dataclass equality, so
trees of any depth compare without recursion.
"""

from gc_policy.domain.policy import (
    IntersectionPolicy,
    MaxAgePolicy,
    MaxVersionsPolicy,
    NoGCPolicy,
    Policy,
    UnionPolicy,
)

_LEAF_TYPES = (NoGCPolicy, MaxAgePolicy, MaxVersionsPolicy)


def policy_signature(policy: Policy) -> tuple:
    """
    Flatten a policy tree into a tuple of pre-order tokens.

    Leaves appear as themselves; each combinator appears as its type name and
    child count, followed by its children. Two trees are equal exactly when
    their signatures are.

    Example:
        >>> policy_signature(UnionPolicy((MaxVersionsPolicy(1), MaxVersionsPolicy(2))))
        (('UnionPolicy', 2), MaxVersionsPolicy(max_versions=1), MaxVersionsPolicy(max_versions=2))
    """
    tokens: list = []
    stack: list[Policy] = [policy]
    while stack:
        node = stack.pop()
        if isinstance(node, _LEAF_TYPES):
            tokens.append(node)
        elif isinstance(node, (UnionPolicy, IntersectionPolicy)):
            tokens.append((type(node).__name__, len(node.children)))
            stack.extend(reversed(node.children))
        else:
            raise TypeError(f"Unsupported policy node: {type(node).__name__}")
    return tuple(tokens)


def policies_equivalent(left: Policy, right: Policy) -> bool:
    """Check whether two policy trees are the same tree, at any depth."""
    return policy_signature(left) == policy_signature(right)
