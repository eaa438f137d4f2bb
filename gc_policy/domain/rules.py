"""
Validated GC rule AST.

A rule is either a leaf threshold (MaxAgeRule / MaxVersionsRule) or a
CompositeRule combining child rules. Instances are only built by the
parser in gc_policy.compiler.validator, which enforces the grammar.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from gc_policy.domain.enums import RuleMode


@dataclass(frozen=True)
class MaxAgeRule:
    """Leaf rule: collect cells older than `duration`."""

    duration: timedelta


@dataclass(frozen=True)
class MaxVersionsRule:
    """Leaf rule: keep at most `count` versions of a cell."""

    count: int


@dataclass(frozen=True)
class CompositeRule:
    """
    Combination of child rules.

    A composite without a mode wraps exactly one child; with a mode it holds
    two or more children, kept in input order.
    """

    mode: RuleMode | None
    children: tuple[Rule, ...]


LeafRule = MaxAgeRule | MaxVersionsRule
Rule = MaxAgeRule | MaxVersionsRule | CompositeRule


class RulePath:
    """
    Location of a node in a rule tree, rendered JSONPath-style on demand.

    Each node only links to its parent, so tracking locations costs the same
    at every depth. The string form is built when an error needs it.

    Example:
        >>> str(RulePath().child(1).child(0))
        '$.rules[1].rules[0]'
    """

    __slots__ = ("parent", "index")

    def __init__(self, parent: RulePath | None = None, index: int = 0) -> None:
        self.parent = parent
        self.index = index

    def child(self, index: int) -> RulePath:
        return RulePath(self, index)

    def __str__(self) -> str:
        parts = []
        node = self
        while node.parent is not None:
            parts.append(f".rules[{node.index}]")
            node = node.parent
        return "$" + "".join(reversed(parts))
