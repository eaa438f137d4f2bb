"""
GC Policy Decompiler.

Reconstructs a canonical GC rule tree from a policy, typically one read back
from the live store for drift detection. The output is always accepted by
parse_rule, and compiling it again yields the same policy for every
policy the compiler can produce.

The store may hand back trees the compiler never builds (for example a
one-child union after store-side normalization). Those are folded into the
grammar where possible; anything the grammar cannot express raises
UnrepresentablePolicyError.

Output objects list their keys in sorted order ("mode" before "rules"), so
serializing a decompiled tree gives the same text every time.
"""

from datetime import timedelta
from typing import Any

from gc_policy.compiler.validator import DURATION_UNITS
from gc_policy.core.errors import UnrepresentablePolicyError
from gc_policy.domain.enums import RuleMode
from gc_policy.domain.policy import (
    IntersectionPolicy,
    MaxAgePolicy,
    MaxVersionsPolicy,
    NoGCPolicy,
    Policy,
    UnionPolicy,
)
from gc_policy.domain.rules import RulePath

# Largest unit first, so 7 days renders as "168h" rather than "604800s"
_UNITS_BY_SIZE = sorted(DURATION_UNITS.items(), key=lambda item: item[1], reverse=True)

_COMBINATOR_MODES = {
    UnionPolicy: RuleMode.UNION,
    IntersectionPolicy: RuleMode.INTERSECTION,
}


def decompile(policy: Policy) -> dict[str, Any] | None:
    """
    Convert a policy tree into a canonical GC rule tree.

    Args:
        policy: Policy tree from the compiler or from the store

    Returns:
        GC rule dict, or None for NoGCPolicy (callers omit the field)

    Raises:
        UnrepresentablePolicyError: If the policy has no grammar equivalent

    Example:
        >>> decompile(UnionPolicy((MaxAgePolicy(timedelta(hours=168)), MaxVersionsPolicy(10))))
        {'mode': 'union', 'rules': [{'max_age': '168h'}, {'max_version': 10}]}
    """
    if isinstance(policy, NoGCPolicy):
        return None

    results: list[dict[str, Any]] = []
    stack: list[tuple[Policy, RulePath, bool]] = [(policy, RulePath(), False)]
    while stack:
        node, path, expanded = stack.pop()

        mode = _COMBINATOR_MODES.get(type(node))
        if mode is None:
            results.append(_decompile_leaf(node, path))
            continue

        children = node.children
        if not expanded:
            if not children:
                raise UnrepresentablePolicyError(
                    f"A {mode.value} policy with no children at {path} has no rule equivalent",
                    details={"path": str(path), "mode": mode.value},
                )
            stack.append((node, path, True))
            stack.extend(
                (children[i], path.child(i), False) for i in reversed(range(len(children)))
            )
            continue

        split = len(results) - len(children)
        rules = results[split:]
        del results[split:]
        # A one-child combinator is the same as its child; use the no-mode form
        if len(rules) == 1:
            results.append({"rules": rules})
        else:
            results.append({"mode": mode.value, "rules": rules})

    return results[0]


def format_duration(value: timedelta, path: str | RulePath = "$") -> str:
    """
    Render a max age in the largest whole unit of DURATION_UNITS.

    Raises:
        UnrepresentablePolicyError: If the age is negative or not a whole
                                    number of seconds
    """
    one_second = timedelta(seconds=1)
    if value < timedelta(0) or value % one_second:
        raise UnrepresentablePolicyError(
            f"Max age {value} at {path} is not a whole, non-negative number of seconds",
            details={"path": str(path), "max_age_seconds": value.total_seconds()},
        )

    seconds = value // one_second
    for unit, size in _UNITS_BY_SIZE:
        if seconds % size == 0:
            return f"{seconds // size}{unit}"

    # DURATION_UNITS always contains seconds, so this is unreachable
    raise UnrepresentablePolicyError(
        f"No duration unit can express {value} at {path}", details={"path": str(path)}
    )


def _decompile_leaf(policy: Policy, path: RulePath) -> dict[str, Any]:
    if isinstance(policy, MaxAgePolicy):
        return {"max_age": format_duration(policy.max_age, path)}

    if isinstance(policy, MaxVersionsPolicy):
        if policy.max_versions < 1:
            raise UnrepresentablePolicyError(
                f"Max versions {policy.max_versions} at {path} must be >= 1",
                details={"path": str(path), "max_versions": policy.max_versions},
            )
        return {"max_version": policy.max_versions}

    if isinstance(policy, NoGCPolicy):
        raise UnrepresentablePolicyError(
            f"A no-GC policy cannot be nested inside a combinator at {path}",
            details={"path": str(path)},
        )

    raise TypeError(f"Unsupported policy node: {type(policy).__name__}")
