"""
Tests for the error taxonomy and its HTTP mapping.

Tests cover:
- Status codes per exception family
- Subclasses inheriting the status of their nearest mapped base
- Structured error bodies from the API
- Generic 500 for unexpected exceptions
"""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from gc_policy.core.dependencies import get_store
from gc_policy.core.errors import (
    ConflictingLeafFieldsError,
    GCPolicyError,
    InvalidArgumentError,
    InvalidRuleCountError,
    StoreError,
    StoreNotFoundError,
    StoreTimeoutError,
    UnknownKeyError,
    UnrepresentablePolicyError,
    ValidationError,
    get_status_code,
)
from gc_policy.domain.policy import UnionPolicy
from gc_policy.main import create_app

TABLE_REF = "projects/test-project/instances/test-instance/tables/events"


class TestGetStatusCode:
    """Tests for get_status_code."""

    @pytest.mark.anyio
    async def test_validation_errors_are_400(self):
        assert get_status_code(ValidationError("bad")) == 400
        assert get_status_code(UnknownKeyError("ttl")) == 400
        assert get_status_code(ConflictingLeafFieldsError()) == 400
        assert get_status_code(InvalidRuleCountError(">=2", 1)) == 400
        assert get_status_code(InvalidArgumentError("bad table")) == 400

    @pytest.mark.anyio
    async def test_unrepresentable_is_422(self):
        assert get_status_code(UnrepresentablePolicyError("empty union")) == 422

    @pytest.mark.anyio
    async def test_store_errors(self):
        assert get_status_code(StoreError("down")) == 502
        assert get_status_code(StoreNotFoundError("missing")) == 404
        assert get_status_code(StoreTimeoutError("slow")) == 504

    @pytest.mark.anyio
    async def test_unknown_errors_are_500(self):
        assert get_status_code(GCPolicyError("base")) == 500
        assert get_status_code(RuntimeError("boom")) == 500


class TestErrorDetails:
    """Exceptions carry structured details."""

    @pytest.mark.anyio
    async def test_unknown_key_details(self):
        error = UnknownKeyError("ttl", path="$.rules[0]", allowed=["max_age", "max_version"])

        assert error.details == {
            "path": "$.rules[0]",
            "key": "ttl",
            "allowed_keys": ["max_age", "max_version"],
        }
        assert "ttl" in error.message

    @pytest.mark.anyio
    async def test_details_default_to_empty_dict(self):
        assert StoreError("down").details == {}


class TestApiErrorResponses:
    """Domain errors become structured JSON responses."""

    @pytest.mark.anyio
    async def test_unrepresentable_live_policy_returns_422(self, memory_store):
        memory_store.create_column_family(TABLE_REF, "cf3", UnionPolicy(()))
        app = create_app()
        app.dependency_overrides[get_store] = lambda: memory_store

        resp = TestClient(app).get("/api/v1/gc-policies/cf3", params={"table": TABLE_REF})

        assert resp.status_code == 422
        assert resp.json()["error"] == "UnrepresentablePolicyError"

    @pytest.mark.anyio
    async def test_store_failure_returns_502(self):
        store = AsyncMock()
        store.get_gc_policy.side_effect = ConnectionError("connection refused")
        app = create_app()
        app.dependency_overrides[get_store] = lambda: store

        resp = TestClient(app).get("/api/v1/gc-policies/cf1", params={"table": TABLE_REF})

        assert resp.status_code == 502
        body = resp.json()
        assert body["error"] == "StoreError"
        assert body["details"]["operation"] == "get_gc_policy"

    @pytest.mark.anyio
    async def test_unexpected_exception_returns_generic_500(self):
        app = create_app()

        @app.get("/boom")
        async def boom():
            raise RuntimeError("kaboom")

        resp = TestClient(app, raise_server_exceptions=False).get("/boom")

        assert resp.status_code == 500
        assert resp.json() == {
            "error": "InternalServerError",
            "message": "An unexpected error occurred",
            "details": {},
        }
