"""
GC Policy Compiler.

Maps a validated rule AST onto the policy tree applied to the store:
- No rule compiles to NoGCPolicy
- Leaf rules compile to MaxAgePolicy / MaxVersionsPolicy
- Union / intersection composites compile to the matching combinator,
  children in input order
- A composite without a mode compiles to its single child, so a bare rule
  never produces a one-child combinator

Compilation is deterministic: the same rule always yields an equal tree.
"""

from typing import Any

from gc_policy.compiler.validator import parse_rule
from gc_policy.domain.enums import RuleMode
from gc_policy.domain.policy import (
    IntersectionPolicy,
    MaxAgePolicy,
    MaxVersionsPolicy,
    NoGCPolicy,
    Policy,
    UnionPolicy,
)
from gc_policy.domain.rules import CompositeRule, MaxAgeRule, MaxVersionsRule, Rule


def compile_rule(rule: Rule | None) -> Policy:
    """
    Compile a validated rule into a policy tree.

    The tree is walked post-order with an explicit stack, so any nesting
    depth compiles.

    Args:
        rule: Rule AST from parse_rule, or None when no rule is configured

    Returns:
        The equivalent policy tree

    Example:
        >>> compile_rule(parse_rule({"rules": [{"max_version": 10}]}))
        MaxVersionsPolicy(max_versions=10)
    """
    if rule is None:
        return NoGCPolicy()

    results: list[Policy] = []
    stack: list[tuple[Rule, bool]] = [(rule, False)]
    while stack:
        node, expanded = stack.pop()

        if isinstance(node, MaxAgeRule):
            results.append(MaxAgePolicy(max_age=node.duration))
        elif isinstance(node, MaxVersionsRule):
            results.append(MaxVersionsPolicy(max_versions=node.count))
        elif isinstance(node, CompositeRule):
            if not expanded:
                stack.append((node, True))
                stack.extend((child, False) for child in reversed(node.children))
                continue
            split = len(results) - len(node.children)
            children = tuple(results[split:])
            del results[split:]
            results.append(_combine(node.mode, children))
        else:
            raise TypeError(f"Unsupported rule node: {type(node).__name__}")

    return results[0]


def compile_rule_json(raw: Any) -> Policy:
    """
    Parse, validate and compile a decoded JSON rule tree in one step.

    None compiles to NoGCPolicy without touching the parser.

    Raises:
        ValidationError: If the tree violates the rule grammar
    """
    if raw is None:
        return NoGCPolicy()
    return compile_rule(parse_rule(raw, is_top_level=True))


def _combine(mode: RuleMode | None, children: tuple[Policy, ...]) -> Policy:
    if mode is None:
        return children[0]
    if mode == RuleMode.UNION:
        return UnionPolicy(children=children)
    return IntersectionPolicy(children=children)
