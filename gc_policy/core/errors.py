"""
Domain-specific exceptions for the GC policy service.

Grammar violations in a GC rule tree are all ValidationError subtypes and are
raised before any store mutation. Store failures are wrapped in StoreError.
Each exception maps to an HTTP status code in the API layer.
"""

from typing import Any


class GCPolicyError(Exception):
    """Base exception for all GC policy domain errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(GCPolicyError):
    """
    Raised when a GC rule tree or a call argument fails validation.

    HTTP Status: 400 Bad Request
    """

    pass


class UnknownKeyError(ValidationError):
    """A rule node carries a key its variant does not allow."""

    def __init__(self, key: str, path: str = "$", allowed: list[str] | None = None):
        self.key = key
        super().__init__(
            f"Unknown key '{key}' at {path}",
            details={"path": path, "key": key, "allowed_keys": allowed or []},
        )


class ConflictingLeafFieldsError(ValidationError):
    """A leaf rule sets both `max_age` and `max_version`."""

    def __init__(self, path: str = "$"):
        super().__init__(
            f"Rule at {path} must set only one of 'max_age' or 'max_version'",
            details={"path": path},
        )


class MissingLeafFieldError(ValidationError):
    """A leaf rule sets neither `max_age` nor `max_version`."""

    def __init__(self, path: str = "$"):
        super().__init__(
            f"Rule at {path} needs 'max_age' or 'max_version'",
            details={"path": path},
        )


class InvalidRuleCountError(ValidationError):
    """A composite rule has the wrong number of child rules for its mode."""

    def __init__(self, expected: str, actual: int, path: str = "$"):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"'rules' at {path} must contain {expected} rule(s), got {actual}",
            details={"path": path, "expected": expected, "actual": actual},
        )


class InvalidModeError(ValidationError):
    """A composite rule has a `mode` other than union or intersection."""

    def __init__(self, value: Any, path: str = "$"):
        self.value = value
        super().__init__(
            f"'mode' at {path} must be either 'union' or 'intersection', got {value!r}",
            details={"path": path, "value": value},
        )


class InvalidDurationError(ValidationError):
    """A `max_age` value is not a supported duration string."""

    def __init__(self, value: Any, path: str = "$"):
        self.value = value
        super().__init__(
            f"'max_age' at {path} must be a duration like '168h', got {value!r}",
            details={"path": path, "value": value},
        )


class InvalidVersionCountError(ValidationError):
    """A `max_version` value is not an integer >= 1."""

    def __init__(self, value: Any, path: str = "$"):
        self.value = value
        super().__init__(
            f"'max_version' at {path} must be an integer >= 1, got {value!r}",
            details={"path": path, "value": value},
        )


class InvalidNodeError(ValidationError):
    """A rule node or its `rules` member has the wrong JSON type."""

    pass


class InvalidJSONError(ValidationError):
    """A serialized GC rule string is not valid JSON."""

    pass


class InvalidArgumentError(ValidationError):
    """A table reference or column family id is malformed."""

    pass


class UnrepresentablePolicyError(GCPolicyError):
    """
    Raised when a live policy cannot be expressed in the GC rule grammar.

    Examples:
    - Union or intersection with no children
    - No-GC policy nested inside a combinator
    - Sub-second max age

    HTTP Status: 422 Unprocessable Entity
    """

    pass


class StoreError(GCPolicyError):
    """
    Raised when the column-family store rejects or fails a call.

    HTTP Status: 502 Bad Gateway
    """

    pass


class StoreNotFoundError(StoreError):
    """
    Raised by a store when the table or column family does not exist.

    HTTP Status: 404 Not Found
    """

    pass


class StoreTimeoutError(StoreError):
    """
    Raised when a store call exceeds the caller-supplied timeout.

    HTTP Status: 504 Gateway Timeout
    """

    pass


# HTTP Status Code Mapping
ERROR_STATUS_MAP = {
    ValidationError: 400,
    UnrepresentablePolicyError: 422,
    StoreNotFoundError: 404,
    StoreTimeoutError: 504,
    StoreError: 502,
}


def get_status_code(error: Exception) -> int:
    """
    Get the HTTP status code for a given exception.

    Subclasses inherit the status of their nearest mapped base class.

    Args:
        error: The exception instance

    Returns:
        HTTP status code (defaults to 500 for unknown errors)
    """
    for error_type in type(error).__mro__:
        if error_type in ERROR_STATUS_MAP:
            return ERROR_STATUS_MAP[error_type]
    return 500
