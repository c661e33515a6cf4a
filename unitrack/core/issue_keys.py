"""Issue key normalization — caller-side helpers used before Start.

The engine treats keys as opaque; these run at the API boundary.
"""

from unitrack.core.domain_types import DEFAULT_ISSUE_PREFIX, IssueKey, StorageKey


def normalize_issue_key(raw: str, prefix: str = DEFAULT_ISSUE_PREFIX) -> IssueKey:
    """Qualify a bare issue number with the project prefix.

    "1234" -> "UE-1234"; "UE-1234" stays; "" stays "" (rejected by the engine).
    """
    value = raw.strip()
    if value and not value.startswith(f"{prefix}-"):
        value = f"{prefix}-{value}"
    return IssueKey(value)


def storage_key(issue_key: str) -> StorageKey:
    """Sanitized form of an issue key used as the snapshot primary key."""
    return StorageKey(issue_key.replace("/", "_"))
