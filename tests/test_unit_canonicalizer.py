"""
Unit tests for policy signatures and semantic policy comparison.
"""

from datetime import timedelta

import pytest

from gc_policy.compiler.canonicalizer import policies_equivalent, policy_signature
from gc_policy.compiler.compiler import compile_rule_json
from gc_policy.domain.policy import (
    IntersectionPolicy,
    MaxAgePolicy,
    MaxVersionsPolicy,
    NoGCPolicy,
    UnionPolicy,
)


class TestPolicySignature:
    """Tests for flattening policy trees."""

    @pytest.mark.anyio
    async def test_leaf(self):
        assert policy_signature(MaxVersionsPolicy(3)) == (MaxVersionsPolicy(3),)

    @pytest.mark.anyio
    async def test_pre_order_with_child_counts(self):
        policy = IntersectionPolicy(
            (MaxVersionsPolicy(1), UnionPolicy((MaxAgePolicy(timedelta(hours=1)), NoGCPolicy())))
        )

        assert policy_signature(policy) == (
            ("IntersectionPolicy", 2),
            MaxVersionsPolicy(1),
            ("UnionPolicy", 2),
            MaxAgePolicy(timedelta(hours=1)),
            NoGCPolicy(),
        )

    @pytest.mark.anyio
    async def test_shape_is_part_of_the_signature(self):
        flat = UnionPolicy((MaxVersionsPolicy(1), MaxVersionsPolicy(2), MaxVersionsPolicy(3)))
        nested = UnionPolicy(
            (MaxVersionsPolicy(1), UnionPolicy((MaxVersionsPolicy(2), MaxVersionsPolicy(3))))
        )

        assert policy_signature(flat) != policy_signature(nested)

    @pytest.mark.anyio
    async def test_unsupported_node_raises_type_error(self):
        with pytest.raises(TypeError):
            policy_signature(UnionPolicy(("not a policy",)))


class TestPoliciesEquivalent:
    """Rules compare by the policy they compile to."""

    @pytest.mark.anyio
    async def test_formatting_differences_are_equivalent(self):
        configured = compile_rule_json({"rules": [{"max_age": "60m"}]})
        live = compile_rule_json({"max_age": "1h"})
        assert policies_equivalent(configured, live)

    @pytest.mark.anyio
    async def test_mode_spelling_is_equivalent(self):
        a = {"mode": "INTERSECTION", "rules": [{"max_version": 1}, {"max_age": "1h"}]}
        b = {"rules": [{"max_version": 1}, {"max_age": "1h"}], "mode": "intersection"}
        assert policies_equivalent(compile_rule_json(a), compile_rule_json(b))

    @pytest.mark.anyio
    async def test_different_values_differ(self):
        assert not policies_equivalent(MaxVersionsPolicy(1), MaxVersionsPolicy(2))

    @pytest.mark.anyio
    async def test_different_modes_differ(self):
        children = (MaxVersionsPolicy(1), MaxAgePolicy(timedelta(hours=1)))
        assert not policies_equivalent(UnionPolicy(children), IntersectionPolicy(children))

    @pytest.mark.anyio
    async def test_child_order_is_significant(self):
        a = UnionPolicy((MaxVersionsPolicy(1), MaxVersionsPolicy(2)))
        b = UnionPolicy((MaxVersionsPolicy(2), MaxVersionsPolicy(1)))
        assert not policies_equivalent(a, b)

    @pytest.mark.anyio
    async def test_no_gc(self):
        assert policies_equivalent(NoGCPolicy(), NoGCPolicy())
        assert not policies_equivalent(NoGCPolicy(), MaxVersionsPolicy(1))

    @pytest.mark.anyio
    async def test_deep_trees(self):
        left = MaxVersionsPolicy(1)
        right = MaxVersionsPolicy(1)
        for i in range(5000):
            left = UnionPolicy((MaxVersionsPolicy(i + 2), left))
            right = UnionPolicy((MaxVersionsPolicy(i + 2), right))

        assert policies_equivalent(left, right)
        assert not policies_equivalent(left, UnionPolicy((MaxVersionsPolicy(9), right)))
