from __future__ import annotations

from .node_ids import (
    DUPLICATE_GROUP_PREFIX,
    UNRESOLVED_UPLINE_PREFIX,
    duplicate_group_id,
    unresolved_upline_id,
)
from .test_candidates import CandidateFilter, is_likely_test_candidate

__all__ = [
    "CandidateFilter",
    "DUPLICATE_GROUP_PREFIX",
    "UNRESOLVED_UPLINE_PREFIX",
    "duplicate_group_id",
    "is_likely_test_candidate",
    "unresolved_upline_id",
]
