"""Pydantic schemas for GC policy API requests/responses."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from gc_policy.domain.enums import DeletionMode


class GCRulesValidateRequest(BaseModel):
    """A GC rule tree to check without applying it."""

    gc_rules: dict[str, Any] | str = Field(
        description="GC rule tree, as a JSON object or its serialized string"
    )


class GCRulesValidateResponse(BaseModel):
    """Result of a successful validation."""

    valid: bool = True
    gc_rules: dict[str, Any] | None = Field(
        None, description="Canonical form of the rule tree, as the store would report it"
    )


class GCPolicyApplyRequest(BaseModel):
    """Apply a GC rule tree to a column family."""

    gc_rules: dict[str, Any] | str | None = Field(
        None,
        description=(
            "GC rule tree. Allowed fields: `mode` (`union` or `intersection`; when "
            "omitted `rules` must hold exactly one rule), `rules` (array of nested "
            "rule objects), `max_age` (duration such as `168h`) and `max_version` "
            "(integer >= 1). Null clears the policy."
        ),
    )
    deletion_mode: DeletionMode = Field(
        DeletionMode.DEFAULT,
        description=(
            "ABANDON leaves the live policy in place on release, for replicated "
            "instances where GC policies cannot be deleted."
        ),
    )


class GCPolicyDriftRequest(BaseModel):
    """A configured GC rule tree to compare with the live policy."""

    gc_rules: dict[str, Any] | str | None = Field(
        None,
        description="Configured GC rule tree, as a JSON object or its serialized string. "
        "Null means no GC policy is configured.",
    )


class GCPolicyResponse(BaseModel):
    """GC policy of one column family."""

    table: str
    column_family: str
    gc_rules: dict[str, Any] | None = None
    deletion_mode: DeletionMode | None = None


class GCPolicyDriftResponse(BaseModel):
    """Outcome of comparing a configured rule tree with the live policy."""

    table: str
    column_family: str
    drifted: bool
    live_gc_rules: dict[str, Any] | None = None


class GCPolicyListResponse(BaseModel):
    """GC policies of every column family of a table that has one."""

    table: str
    gc_policies: dict[str, dict[str, Any]]
