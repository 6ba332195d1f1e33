from __future__ import annotations

from .entities import (
    BranchStatusSummary,
    ContactFlags,
    ContactNode,
    ContactRecord,
    DuplicateGroup,
    IdentifierField,
    IssueFlags,
    IssuesReport,
    NodeStatus,
    NormalizedKeys,
    ResolvedNode,
    Snapshot,
    SnapshotStats,
    SyntheticKind,
    SyntheticNode,
    UplineSource,
    VendorAffiliation,
)
from .index import ContactIndex, build_indices

__all__ = [
    "BranchStatusSummary",
    "ContactFlags",
    "ContactIndex",
    "ContactNode",
    "ContactRecord",
    "DuplicateGroup",
    "IdentifierField",
    "IssueFlags",
    "IssuesReport",
    "NodeStatus",
    "NormalizedKeys",
    "ResolvedNode",
    "Snapshot",
    "SnapshotStats",
    "SyntheticKind",
    "SyntheticNode",
    "UplineSource",
    "VendorAffiliation",
    "build_indices",
]
