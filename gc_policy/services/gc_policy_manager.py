"""
GC Policy Manager

Orchestrates the lifecycle of one column family's GC policy against the
store:

- apply:   validate -> compile -> set_gc_policy
- read:    get_gc_policy -> decompile
- release: set_gc_policy(NoGC), or nothing at all in ABANDON mode
- list:    list_gc_policies -> decompile each
- drift:   compile -> get_gc_policy -> compare by meaning

Per column family, as seen from here:

    Absent --apply--> Configured --apply--> Configured
    Configured --release(DEFAULT)--> Absent
    Configured --release(ABANDON)--> Configured, unmanaged (store untouched)

Validation always completes before the store is called, so a bad rule tree
never leaves partial state behind. Store calls are bounded by a per-call
timeout and never retried.
"""

import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

import anyio

from gc_policy.compiler.canonicalizer import policies_equivalent
from gc_policy.compiler.compiler import compile_rule
from gc_policy.compiler.decompiler import decompile
from gc_policy.compiler.validator import parse_rule, parse_rule_json
from gc_policy.core.errors import (
    GCPolicyError,
    StoreError,
    StoreNotFoundError,
    StoreTimeoutError,
)
from gc_policy.core.observability import metrics, store_metrics
from gc_policy.core.validators import (
    split_table_ref,
    validate_column_family_id,
    validate_table_ref,
)
from gc_policy.domain.enums import DeletionMode
from gc_policy.domain.policy import ColumnFamilyGCConfig, NoGCPolicy, Policy
from gc_policy.stores.base import GCPolicyStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class DriftResult:
    """Outcome of a drift check, taken from a single read of the store."""

    drifted: bool
    live_gc_rules: dict[str, Any] | None


class GCPolicyManager:
    """
    Applies, reads and releases column-family GC policies.

    Args:
        store: Column-family store client
        timeout: Default per-call store timeout in seconds (None = unbounded).
                 Every operation accepts a `timeout` overriding it.
    """

    def __init__(self, store: GCPolicyStore, timeout: float | None = None) -> None:
        self.store = store
        self.timeout = timeout

    async def apply(
        self,
        table_ref: str,
        family_id: str,
        raw_rule_json: Any,
        deletion_mode: DeletionMode = DeletionMode.DEFAULT,
        timeout: float | None = None,
    ) -> Policy:
        """
        Validate, compile and apply a GC rule tree to a column family.

        Args:
            table_ref: projects/{project}/instances/{instance}/tables/{table}
            family_id: Column family id
            raw_rule_json: Decoded rule tree, its JSON text, or None for no GC
            deletion_mode: How the policy is to be released later
            timeout: Store call timeout in seconds, overriding the default

        Returns:
            The policy now in effect, as reported by the store

        Raises:
            ValidationError: If an argument or the rule tree is invalid
                             (the store is not called)
            StoreError: If the store call fails or times out
        """
        validate_table_ref(table_ref)
        validate_column_family_id(family_id)

        config = ColumnFamilyGCConfig(
            table_ref=table_ref,
            column_family_id=family_id,
            policy=self.compile(raw_rule_json),
            deletion_mode=deletion_mode,
        )
        return await self.apply_config(config, timeout=timeout)

    async def apply_config(
        self, config: ColumnFamilyGCConfig, timeout: float | None = None
    ) -> Policy:
        """
        Hand an already compiled policy to the store.

        Raises:
            InvalidArgumentError: If the table reference is malformed
            StoreError: If the store call fails or times out
        """
        project, instance, table = split_table_ref(config.table_ref)
        applied = await self._call_store(
            "set_gc_policy",
            self.store.set_gc_policy,
            config.table_ref,
            config.column_family_id,
            config.policy,
            timeout=timeout,
        )

        logger.info(
            "Applied GC policy to %s/%s",
            config.table_ref,
            config.column_family_id,
            extra={
                "project": project,
                "instance": instance,
                "table": table,
                "column_family_id": config.column_family_id,
                "deletion_mode": config.deletion_mode.value,
                "policy_type": type(applied).__name__,
            },
        )
        return applied

    async def read(
        self, table_ref: str, family_id: str, timeout: float | None = None
    ) -> dict[str, Any] | None:
        """
        Read the live GC policy of a column family as a canonical rule tree.

        Returns:
            The canonical rule tree, or None when the family has no policy
            or does not exist

        Raises:
            ValidationError: If an argument is invalid
            UnrepresentablePolicyError: If the live policy has no rule equivalent
            StoreError: If the store call fails or times out
        """
        return decompile(await self._read_policy(table_ref, family_id, timeout))

    async def release(
        self,
        table_ref: str,
        family_id: str,
        deletion_mode: DeletionMode = DeletionMode.DEFAULT,
        timeout: float | None = None,
    ) -> None:
        """
        Stop managing a column family's GC policy.

        In ABANDON mode the store is not touched at all and the call cannot
        fail; the live policy keeps collecting data. Otherwise the family is
        reset to no GC policy.

        Raises:
            ValidationError: If an argument is invalid (DEFAULT mode only)
            StoreError: If the store call fails or times out (DEFAULT mode only)
        """
        if deletion_mode == DeletionMode.ABANDON:
            logger.warning(
                "Abandoning GC policy for table (%s) and column family (%s)",
                table_ref,
                family_id,
                extra={"table_ref": table_ref, "column_family_id": family_id},
            )
            return

        validate_table_ref(table_ref)
        validate_column_family_id(family_id)

        await self._call_store(
            "set_gc_policy",
            self.store.set_gc_policy,
            table_ref,
            family_id,
            NoGCPolicy(),
            timeout=timeout,
        )
        logger.info("Released GC policy for %s/%s", table_ref, family_id)

    async def list(self, table_ref: str, timeout: float | None = None) -> dict[str, dict]:
        """
        Read the GC policies of every column family of a table.

        Returns:
            Mapping of column family id to canonical rule tree; families
            without a policy are left out

        Raises:
            ValidationError: If the table reference is invalid
            StoreError: If the store call fails or times out
        """
        validate_table_ref(table_ref)

        policies = await self._call_store(
            "list_gc_policies", self.store.list_gc_policies, table_ref, timeout=timeout
        )

        result = {}
        for family_id, policy in sorted(policies.items()):
            rule = decompile(policy)
            if rule is not None:
                result[family_id] = rule
        return result

    async def detect_drift(
        self,
        table_ref: str,
        family_id: str,
        configured: Any,
        timeout: float | None = None,
    ) -> DriftResult:
        """
        Check whether the live policy differs in meaning from the configured one.

        Formatting differences (key order, mode spelling, "60m" vs "1h",
        single-rule wrapper vs bare leaf) are not drift. The store is read
        once; the returned live rule tree is the one that was compared.

        Args:
            configured: Rule tree as a dict, its JSON text, or None for no GC

        Raises:
            ValidationError: If an argument or the configured rule tree is
                             invalid (the store is not called)
            UnrepresentablePolicyError: If the live policy has no rule equivalent
            StoreError: If the store call fails or times out
        """
        validate_table_ref(table_ref)
        validate_column_family_id(family_id)
        configured_policy = self.compile(configured)

        live_policy = await self._read_policy(table_ref, family_id, timeout)
        result = DriftResult(
            drifted=not policies_equivalent(configured_policy, live_policy),
            live_gc_rules=decompile(live_policy),
        )
        if result.drifted:
            logger.info(
                "GC policy drift detected for %s/%s",
                table_ref,
                family_id,
                extra={
                    "configured_policy_type": type(configured_policy).__name__,
                    "live_policy_type": type(live_policy).__name__,
                },
            )
        return result

    def compile(self, raw_rule_json: Any) -> Policy:
        """
        Parse and compile a rule tree given as a dict, a JSON string or None.

        Raises:
            ValidationError: If the rule tree is invalid
        """
        start_time = time.perf_counter()
        try:
            if raw_rule_json is None:
                policy: Policy = NoGCPolicy()
            elif isinstance(raw_rule_json, (str, bytes)):
                policy = compile_rule(parse_rule_json(raw_rule_json))
            else:
                policy = compile_rule(parse_rule(raw_rule_json, is_top_level=True))
        except GCPolicyError:
            metrics.gc_rule_compilations_total.labels(status="error").inc()
            raise

        metrics.gc_rule_compilations_total.labels(status="success").inc()
        metrics.gc_rule_compile_duration_seconds.observe(time.perf_counter() - start_time)
        return policy

    async def _read_policy(
        self, table_ref: str, family_id: str, timeout: float | None
    ) -> Policy:
        """Live policy of a family; missing families and missing policies read as NoGC."""
        validate_table_ref(table_ref)
        validate_column_family_id(family_id)

        try:
            policy = await self._call_store(
                "get_gc_policy", self.store.get_gc_policy, table_ref, family_id, timeout=timeout
            )
        except StoreNotFoundError:
            logger.info("No GC policy found for %s/%s", table_ref, family_id)
            return NoGCPolicy()

        return NoGCPolicy() if policy is None else policy

    async def _call_store(
        self,
        operation: str,
        func: Callable[..., Awaitable[T]],
        *args: Any,
        timeout: float | None = None,
    ) -> T:
        effective_timeout = self.timeout if timeout is None else timeout
        # args always start with (table_ref[, family_id])
        context: dict[str, Any] = {"operation": operation, "table_ref": args[0]}
        if len(args) > 1 and isinstance(args[1], str):
            context["column_family_id"] = args[1]

        try:
            with store_metrics.track(operation):
                # Falling out of this block means our own deadline fired. A
                # TimeoutError raised by the store is an ordinary store failure.
                with anyio.move_on_after(effective_timeout):
                    return await func(*args)
                raise StoreTimeoutError(
                    f"Store call {operation} timed out after {effective_timeout}s",
                    details={**context, "timeout_seconds": effective_timeout},
                )
        except GCPolicyError as e:
            for key, value in context.items():
                e.details.setdefault(key, value)
            raise
        except Exception as e:
            raise StoreError(
                f"Store call {operation} failed: {e}",
                details={**context, "error": str(e)},
            ) from e
