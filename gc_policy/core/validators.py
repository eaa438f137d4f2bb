"""Shared validators for store call arguments."""

import re

from gc_policy.core.errors import InvalidArgumentError

# projects/{project}/instances/{instance}/tables/{table}
TABLE_REF_PATTERN = re.compile(
    r"projects/[a-z][-a-z0-9]{4,28}[a-z0-9]"
    r"/instances/[a-z][-a-z0-9]{4,31}[a-z0-9]"
    r"/tables/[_a-zA-Z0-9][-_.a-zA-Z0-9]{0,49}"
)

COLUMN_FAMILY_ID_PATTERN = re.compile(r"[_a-zA-Z0-9][-_.a-zA-Z0-9]{0,63}")


def validate_table_ref(value: str) -> str:
    """
    Validate a fully qualified table name.

    Raises:
        InvalidArgumentError: If the value is not
                              projects/{project}/instances/{instance}/tables/{table}
    """
    if not isinstance(value, str) or not TABLE_REF_PATTERN.fullmatch(value):
        raise InvalidArgumentError(
            f"Invalid table reference ({value}), must match `{TABLE_REF_PATTERN.pattern}`",
            details={"table_ref": value},
        )
    return value


def validate_column_family_id(value: str) -> str:
    """
    Validate a column family id.

    Raises:
        InvalidArgumentError: If the id is empty, too long or has illegal characters
    """
    if not isinstance(value, str) or not COLUMN_FAMILY_ID_PATTERN.fullmatch(value):
        raise InvalidArgumentError(
            f"Invalid column family id ({value}), "
            f"must match `{COLUMN_FAMILY_ID_PATTERN.pattern}`",
            details={"column_family_id": value},
        )
    return value


def split_table_ref(value: str) -> tuple[str, str, str]:
    """
    Split a validated table reference into (project, instance, table).

    Example:
        >>> split_table_ref("projects/my-project/instances/my-instance/tables/events")
        ('my-project', 'my-instance', 'events')
    """
    parts = validate_table_ref(value).split("/")
    return parts[1], parts[3], parts[5]
