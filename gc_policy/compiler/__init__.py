"""
GC rule compiler for column-family garbage collection.

This package translates user-authored JSON GC rule trees into the policy
trees applied to a column-family store, and back.

Key Components:
- validator: Parses and validates rule trees into the rule AST
- compiler: Maps the rule AST onto a policy tree
- decompiler: Reconstructs a canonical rule tree from a policy
- canonicalizer: Depth-independent policy comparison for drift detection

Design Principles:
- Fail fast: the first grammar violation aborts, nothing is half-compiled
- Determinism: the same rule always compiles to an equal policy
- Round trip: compile(parse(decompile(p))) == p for every compiled policy
- No depth limit: every tree walk uses an explicit stack
"""

from gc_policy.compiler.canonicalizer import policies_equivalent, policy_signature
from gc_policy.compiler.compiler import compile_rule, compile_rule_json
from gc_policy.compiler.decompiler import decompile
from gc_policy.compiler.validator import parse_rule, parse_rule_json

__all__ = [
    "parse_rule",
    "parse_rule_json",
    "compile_rule",
    "compile_rule_json",
    "decompile",
    "policy_signature",
    "policies_equivalent",
]
