"""
GC Rule Parsing and Validation.

Decodes a user-authored JSON rule tree into the validated rule AST:
- Composite nodes carry `rules` and an optional `mode`
- Leaf nodes carry exactly one of `max_age` or `max_version`
- Unknown keys, bad modes, bad rule counts, bad durations and bad version
  counts are all rejected

Validation is fail-fast: the first violation found (top-down, children in
order) is raised. Nothing is compiled or applied from a tree that fails.

Nesting depth is unbounded. Trees are walked with an explicit stack, never
with Python recursion.
"""

import json
import re
from datetime import timedelta
from typing import Any, NamedTuple

from gc_policy.core.errors import (
    ConflictingLeafFieldsError,
    InvalidDurationError,
    InvalidJSONError,
    InvalidModeError,
    InvalidNodeError,
    InvalidRuleCountError,
    InvalidVersionCountError,
    MissingLeafFieldError,
    UnknownKeyError,
)
from gc_policy.domain.enums import RuleMode
from gc_policy.domain.rules import (
    CompositeRule,
    LeafRule,
    MaxAgeRule,
    MaxVersionsRule,
    Rule,
    RulePath,
)

COMPOSITE_KEYS = ("mode", "rules")
LEAF_KEYS = ("max_age", "max_version")

# Accepted `max_age` units in seconds. New units only need an entry here
# and in the decompiler's rendering order.
DURATION_UNITS = {
    "s": 1,
    "m": 60,
    "h": 3600,
}

DURATION_PATTERN = re.compile(r"([0-9]+)([a-z]+)")


class _CompositeHeader(NamedTuple):
    """A composite node whose own keys are valid; children not parsed yet."""

    mode: RuleMode | None
    children: list


def parse_rule(raw: Any, is_top_level: bool = True) -> Rule:
    """
    Parse and validate a GC rule tree.

    Args:
        raw: Decoded JSON value (normally a dict)
        is_top_level: True for the root of the tree. The grammar is the same
                      at every level.

    Returns:
        The validated rule AST

    Raises:
        ValidationError: The first grammar violation found

    Example:
        >>> parse_rule({"mode": "union", "rules": [{"max_age": "168h"}, {"max_version": 10}]})
        CompositeRule(mode=<RuleMode.UNION: 'union'>, children=(...))
    """
    # Pre-order walk: a node is checked before its children, children in order
    headers: list[_CompositeHeader | LeafRule] = []
    pending: list[tuple[Any, RulePath]] = [(raw, RulePath())]
    while pending:
        node, path = pending.pop()
        header = _parse_header(node, path)
        headers.append(header)
        if isinstance(header, _CompositeHeader):
            pending.extend(
                (header.children[i], path.child(i))
                for i in reversed(range(len(header.children)))
            )

    # Reverse pre-order reaches every child before its parent
    built: list[Rule] = []
    for header in reversed(headers):
        if isinstance(header, _CompositeHeader):
            split = len(built) - len(header.children)
            children = tuple(reversed(built[split:]))
            del built[split:]
            built.append(CompositeRule(mode=header.mode, children=children))
        else:
            built.append(header)
    return built[0]


def parse_rule_json(text: str | bytes) -> Rule:
    """
    Decode a serialized GC rule string and parse it.

    Raises:
        InvalidJSONError: If the text is not valid JSON or nests deeper than
                          the JSON decoder supports
        ValidationError: If the decoded tree violates the grammar
    """
    try:
        raw = json.loads(text)
    except (TypeError, ValueError, RecursionError) as e:
        raise InvalidJSONError(
            f"Could not parse GC rules: {type(e).__name__}: {e}", details={"error": str(e)}
        ) from e
    return parse_rule(raw, is_top_level=True)


def parse_duration(value: Any, path: str | RulePath = "$") -> timedelta:
    """
    Parse a `max_age` duration string such as "168h", "30m" or "90s".

    Raises:
        InvalidDurationError: If the value is not `<integer><unit>` with a
                              supported unit, or is too large to represent
    """
    if not isinstance(value, str):
        raise InvalidDurationError(value, str(path))

    match = DURATION_PATTERN.fullmatch(value)
    if not match:
        raise InvalidDurationError(value, str(path))

    amount, unit = match.groups()
    if unit not in DURATION_UNITS:
        raise InvalidDurationError(value, str(path))

    try:
        return timedelta(seconds=int(amount) * DURATION_UNITS[unit])
    except (OverflowError, ValueError) as e:
        # Past timedelta's range, or past the int conversion digit limit
        raise InvalidDurationError(value, str(path)) from e


def parse_version_count(value: Any, path: str | RulePath = "$") -> int:
    """
    Parse a `max_version` count.

    JSON decoders may hand back integral floats (10.0); those are accepted.
    Booleans are rejected even though they are ints in Python.

    Raises:
        InvalidVersionCountError: If the value is not an integer >= 1
    """
    if isinstance(value, bool):
        raise InvalidVersionCountError(value, str(path))

    if isinstance(value, float):
        if not value.is_integer():
            raise InvalidVersionCountError(value, str(path))
        value = int(value)

    if not isinstance(value, int) or value < 1:
        raise InvalidVersionCountError(value, str(path))

    return value


def _parse_header(node: Any, path: RulePath) -> _CompositeHeader | LeafRule:
    if not isinstance(node, dict):
        raise InvalidNodeError(
            f"GC rule at {path} must be a JSON object",
            details={"path": str(path), "type": type(node).__name__},
        )

    if "rules" in node:
        return _parse_composite(node, path)
    return _parse_leaf(node, path)


def _parse_composite(node: dict, path: RulePath) -> _CompositeHeader:
    _reject_unknown_keys(node, COMPOSITE_KEYS, path)

    children = node["rules"]
    if not isinstance(children, list):
        raise InvalidNodeError(
            f"'rules' at {path} must be an array",
            details={"path": str(path), "type": type(children).__name__},
        )

    mode = _parse_mode(node["mode"], path) if "mode" in node else None

    if mode is None and len(children) != 1:
        raise InvalidRuleCountError(expected="1", actual=len(children), path=str(path))
    if mode is not None and len(children) < 2:
        raise InvalidRuleCountError(expected=">=2", actual=len(children), path=str(path))

    return _CompositeHeader(mode=mode, children=children)


def _parse_mode(value: Any, path: RulePath) -> RuleMode:
    if not isinstance(value, str):
        raise InvalidModeError(value, str(path))
    try:
        return RuleMode(value.lower())
    except ValueError:
        raise InvalidModeError(value, str(path)) from None


def _parse_leaf(node: dict, path: RulePath) -> LeafRule:
    _reject_unknown_keys(node, LEAF_KEYS, path)

    has_age = "max_age" in node
    has_version = "max_version" in node

    if has_age and has_version:
        raise ConflictingLeafFieldsError(str(path))
    if not has_age and not has_version:
        raise MissingLeafFieldError(str(path))

    if has_age:
        return MaxAgeRule(duration=parse_duration(node["max_age"], path))
    return MaxVersionsRule(count=parse_version_count(node["max_version"], path))


def _reject_unknown_keys(node: dict, allowed: tuple[str, ...], path: RulePath) -> None:
    for key in node:
        if key not in allowed:
            raise UnknownKeyError(str(key), path=str(path), allowed=list(allowed))
