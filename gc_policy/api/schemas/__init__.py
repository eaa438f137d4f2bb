"""API request/response schemas."""

from gc_policy.api.schemas.gc_policy import (
    GCPolicyApplyRequest,
    GCPolicyDriftRequest,
    GCPolicyDriftResponse,
    GCPolicyListResponse,
    GCPolicyResponse,
    GCRulesValidateRequest,
    GCRulesValidateResponse,
)

__all__ = [
    "GCPolicyApplyRequest",
    "GCPolicyDriftRequest",
    "GCPolicyDriftResponse",
    "GCPolicyListResponse",
    "GCPolicyResponse",
    "GCRulesValidateRequest",
    "GCRulesValidateResponse",
]
