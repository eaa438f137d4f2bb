"""
API routes for column-family GC policies.

The table is passed as the `table` query parameter because a table reference
(projects/{project}/instances/{instance}/tables/{table}) contains slashes.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Query, Response, status

from gc_policy.api.schemas.gc_policy import (
    GCPolicyApplyRequest,
    GCPolicyDriftRequest,
    GCPolicyDriftResponse,
    GCPolicyListResponse,
    GCPolicyResponse,
    GCRulesValidateRequest,
    GCRulesValidateResponse,
)
from gc_policy.compiler.decompiler import decompile
from gc_policy.core.dependencies import Manager
from gc_policy.domain.enums import DeletionMode

router = APIRouter(tags=["gc-policies"])

TableQuery = Annotated[
    str,
    Query(
        alias="table",
        description="Table reference: projects/{project}/instances/{instance}/tables/{table}",
    ),
]


@router.post("/gc-rules/validate")
async def validate_gc_rules(
    payload: GCRulesValidateRequest, manager: Manager
) -> GCRulesValidateResponse:
    """Validate a GC rule tree and return its canonical form.

    Grammar violations are returned as 400 with the offending path in `details`.
    """
    policy = manager.compile(payload.gc_rules)
    return GCRulesValidateResponse(valid=True, gc_rules=decompile(policy))


@router.get("/gc-policies")
async def list_gc_policies(table: TableQuery, manager: Manager) -> GCPolicyListResponse:
    """List the GC policies of every column family of a table."""
    policies = await manager.list(table)
    return GCPolicyListResponse(table=table, gc_policies=policies)


@router.put("/gc-policies/{column_family}")
async def apply_gc_policy(
    column_family: str,
    table: TableQuery,
    payload: GCPolicyApplyRequest,
    manager: Manager,
) -> GCPolicyResponse:
    """Apply a GC rule tree to a column family (create or update)."""
    applied = await manager.apply(
        table, column_family, payload.gc_rules, deletion_mode=payload.deletion_mode
    )
    return GCPolicyResponse(
        table=table,
        column_family=column_family,
        gc_rules=decompile(applied),
        deletion_mode=payload.deletion_mode,
    )


@router.get("/gc-policies/{column_family}")
async def get_gc_policy(
    column_family: str, table: TableQuery, manager: Manager
) -> GCPolicyResponse:
    """Read the live GC policy of a column family.

    A missing column family or one without a policy returns `gc_rules: null`.
    """
    gc_rules = await manager.read(table, column_family)
    return GCPolicyResponse(table=table, column_family=column_family, gc_rules=gc_rules)


@router.delete("/gc-policies/{column_family}", status_code=status.HTTP_204_NO_CONTENT)
async def release_gc_policy(
    column_family: str,
    table: TableQuery,
    manager: Manager,
    deletion_mode: Annotated[DeletionMode, Query()] = DeletionMode.DEFAULT,
) -> Response:
    """Release a column family's GC policy.

    With `deletion_mode=ABANDON` the live policy is left untouched.
    """
    await manager.release(table, column_family, deletion_mode=deletion_mode)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/gc-policies/{column_family}/drift")
async def check_gc_policy_drift(
    column_family: str,
    table: TableQuery,
    payload: GCPolicyDriftRequest,
    manager: Manager,
) -> GCPolicyDriftResponse:
    """Compare a configured GC rule tree with the live policy by meaning.

    `live_gc_rules` is the policy the comparison was made against.
    """
    result = await manager.detect_drift(table, column_family, payload.gc_rules)
    return GCPolicyDriftResponse(
        table=table,
        column_family=column_family,
        drifted=result.drifted,
        live_gc_rules=result.live_gc_rules,
    )
