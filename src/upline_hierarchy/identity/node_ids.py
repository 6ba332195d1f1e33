from __future__ import annotations

from typing import Collection

DUPLICATE_GROUP_PREFIX = "dup:"
UNRESOLVED_UPLINE_PREFIX = "upline:"


# -----------------------------
# Synthetic node ids
# -----------------------------

def _free_id(base: str, taken: Collection[str]) -> str:
    # Contact ids are opaque CRM strings and may look like ours.
    if base not in taken:
        return base
    n = 2
    while f"{base}#{n}" in taken:
        n += 1
    return f"{base}#{n}"


def duplicate_group_id(key: str, taken: Collection[str] = ()) -> str:
    """
    Id of the placeholder standing for every contact sharing ``key``.

    Keyed by the normalized value only, so lookups through different indices
    for the same value land on the same node. A contact id already using the
    plain form pushes the placeholder to ``dup:<key>#2`` (then ``#3``...).
    """
    if not key:
        raise ValueError("duplicate group key must be non-empty")
    return _free_id(f"{DUPLICATE_GROUP_PREFIX}{key}", taken)


def unresolved_upline_id(key: str, taken: Collection[str] = ()) -> str:
    if not key:
        raise ValueError("unresolved upline key must be non-empty")
    return _free_id(f"{UNRESOLVED_UPLINE_PREFIX}{key}", taken)


def duplicate_group_label(key: str, count: int) -> str:
    return f"Licensing # {key} ({count} record{'' if count == 1 else 's'})"


def unresolved_upline_label(key: str) -> str:
    return f"Upline {key}"
