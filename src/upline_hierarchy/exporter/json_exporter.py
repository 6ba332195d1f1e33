"""
json_exporter.py
Snapshot -> JSON-safe dict for the dashboard.

This exporter:
- Converts nodes to camelCase dicts (NOT strings)
- Emits the forest nested (children inline) or flat (id map + childIds)
- Optionally drops auxiliary payloads (opportunity, customFields)
- Performs no resolution; everything comes from the Snapshot as built
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from upline_hierarchy.normalization.identifiers import normalize_digits
from upline_hierarchy.registry.entities import (
    BranchStatusSummary,
    ContactNode,
    ContactRecord,
    IssuesReport,
    ResolvedNode,
    Snapshot,
    SnapshotStats,
    SyntheticKind,
    SyntheticNode,
)

SCHEMA_VERSION = 1


@dataclass(frozen=True, slots=True)
class EmitOptions:
    nested: bool = True
    include_auxiliary: bool = True
    issue_list_limit: Optional[int] = 25
    generated_at: Optional[datetime] = None


def _branch_dict(summary: BranchStatusSummary) -> Dict[str, int]:
    return {
        "active": summary.active,
        "pending": summary.pending,
        "inactive": summary.inactive,
    }


def _node_type(node: ResolvedNode) -> str:
    if not node.child_ids:
        return "leaf"
    return "intermediate" if node.parent_id else "root"


def _contact_tags(node: ContactNode) -> List[str]:
    contact = node.contact
    tags: List[str] = []
    if contact.vendor.equita:
        tags.append("Equita")
    if contact.vendor.quility:
        tags.append("Quility")
    if contact.flags.licensed:
        tags.append("Licensed")
    if contact.flags.equita_profile:
        tags.append("Equita Profile")
    if contact.flags.quility_profile:
        tags.append("Quility Profile")
    if contact.licensing_state:
        tags.append(contact.licensing_state)
    if node.is_test_candidate:
        tags.append("Likely Test")
    if node.issues.any():
        tags.append("Needs Review")
    return tags


def _raw_upline(contact: ContactRecord) -> Dict[str, Optional[str]]:
    return {
        "licensingNumber": contact.upline_licensing_number or None,
        "secondaryProducerId": contact.upline_secondary_producer_id or None,
        "email": contact.upline_email or None,
        "displayName": contact.upline_display_name or None,
    }


def contact_node_to_dict(node: ContactNode, include_auxiliary: bool = True) -> Dict[str, Any]:
    contact = node.contact
    out: Dict[str, Any] = {
        "id": node.id,
        "kind": "contact",
        "label": contact.display_name,
        "licensingNumber": normalize_digits(contact.licensing_number),
        "secondaryProducerId": normalize_digits(contact.secondary_producer_id),
        "email": contact.email or None,
        "phone": contact.phone or None,
        "source": contact.source or None,
        "licensingState": contact.licensing_state or None,
        "vendor": contact.vendor.value,
        "vendorFlags": {
            "equita": contact.vendor.equita,
            "quility": contact.vendor.quility,
        },
        "flags": {
            "licensed": contact.flags.licensed,
            "xcelAccountCreated": contact.flags.xcel_account_created,
            "xcelStarted": contact.flags.xcel_started,
            "xcelPaid": contact.flags.xcel_paid,
            "equitaProfile": contact.flags.equita_profile,
            "quilityProfile": contact.flags.quility_profile,
        },
        "status": node.status.value,
        "parentId": node.parent_id,
        "uplineSource": node.upline_source.value,
        "uplineConfidence": node.upline_confidence,
        "depth": node.depth,
        "nodeType": _node_type(node),
        "metrics": {
            "directReports": len(node.child_ids),
            "descendantCount": node.descendant_count,
            "branchStatus": _branch_dict(node.branch_summary),
        },
        "issues": {
            "missingIdentifier": node.issues.missing_identifier,
            "duplicateIdentifier": node.issues.duplicate_identifier,
            "uplineNotFound": node.issues.upline_not_found,
            "cycleBreak": node.issues.cycle_break,
        },
        "isTestCandidate": node.is_test_candidate,
        "tags": _contact_tags(node),
        "raw": {"upline": _raw_upline(contact)},
    }
    if include_auxiliary:
        out["opportunity"] = contact.opportunity
        out["customFields"] = dict(contact.custom_fields)
    return out


def synthetic_node_to_dict(node: SyntheticNode) -> Dict[str, Any]:
    tags = ["Needs Review"]
    if node.kind is SyntheticKind.DUPLICATE_GROUP:
        tags.insert(0, "Duplicate Licensing Number")
    else:
        tags.insert(0, "Upline Not Found")
    return {
        "id": node.id,
        "kind": "synthetic",
        "syntheticKind": node.kind.value,
        "key": node.key,
        "label": node.label,
        "memberIds": list(node.member_ids),
        "parentId": node.parent_id,
        "uplineSource": node.upline_source.value,
        "uplineConfidence": node.upline_confidence,
        "depth": node.depth,
        "nodeType": _node_type(node),
        "metrics": {
            "directReports": len(node.child_ids),
            "descendantCount": node.descendant_count,
            "branchStatus": _branch_dict(node.branch_summary),
        },
        "tags": tags,
    }


def node_to_dict(node: ResolvedNode, include_auxiliary: bool = True) -> Dict[str, Any]:
    if isinstance(node, SyntheticNode):
        return synthetic_node_to_dict(node)
    return contact_node_to_dict(node, include_auxiliary=include_auxiliary)


def _nested(snapshot: Snapshot, node_id: str, include_auxiliary: bool) -> Dict[str, Any]:
    # Iterative post-order so deep hierarchies do not hit the recursion limit.
    built: Dict[str, Dict[str, Any]] = {}
    stack = [(node_id, False)]
    while stack:
        current, expanded = stack.pop()
        node = snapshot.nodes[current]
        if expanded:
            entry = node_to_dict(node, include_auxiliary)
            entry["children"] = [built.pop(cid) for cid in node.child_ids]
            built[current] = entry
            continue
        stack.append((current, True))
        for cid in reversed(node.child_ids):
            stack.append((cid, False))
    return built[node_id]


def _summary(snapshot: Snapshot, node_id: str) -> Dict[str, Any]:
    node = snapshot.nodes[node_id]
    if isinstance(node, SyntheticNode):
        return {"id": node.id, "name": node.label}
    contact = node.contact
    return {
        "id": contact.id,
        "name": contact.display_name,
        "licensingNumber": normalize_digits(contact.licensing_number),
        "uplineLicensingNumber": contact.upline_licensing_number or None,
        "uplineEmail": contact.upline_email or None,
    }


def _cap(items: List[Any], limit: Optional[int]) -> List[Any]:
    return items if limit is None else items[:limit]


def issues_to_dict(snapshot: Snapshot, limit: Optional[int] = 25) -> Dict[str, Any]:
    report: IssuesReport = snapshot.issues
    out: Dict[str, Any] = {}
    for flag, ids in report.by_flag().items():
        out[flag] = {
            "count": len(ids),
            "contacts": [_summary(snapshot, cid) for cid in _cap(ids, limit)],
        }
    out["duplicateIdentifier"]["groups"] = [
        {
            "field": group.identifier.value,
            "value": group.value,
            "contacts": [_summary(snapshot, cid) for cid in group.contact_ids],
        }
        for group in _cap(report.duplicate_groups, limit)
    ]
    out["duplicateIdentifier"]["groupCount"] = len(report.duplicate_groups)
    return out


def stats_to_dict(stats: SnapshotStats) -> Dict[str, int]:
    return {
        "rootCount": stats.root_count,
        "branches": stats.root_count,
        "totalContacts": stats.total_contacts,
        "resolvedCount": stats.resolved_count,
        "producerCount": stats.producer_count,
        "vendorFlaggedCount": stats.vendor_flagged_count,
        "syntheticCount": stats.synthetic_count,
        "testCandidateCount": stats.test_candidate_count,
    }


def emit(snapshot: Snapshot, options: Optional[EmitOptions] = None) -> Dict[str, Any]:
    """Serialize a snapshot. Pure: the snapshot is not modified."""
    options = options or EmitOptions()
    generated_at = options.generated_at or datetime.now(timezone.utc)

    payload: Dict[str, Any] = {
        "schemaVersion": SCHEMA_VERSION,
        "generatedAt": generated_at.isoformat(),
        "fallbackRootId": snapshot.fallback_root_id,
        "stats": stats_to_dict(snapshot.stats),
        "issues": issues_to_dict(snapshot, options.issue_list_limit),
    }

    if options.nested:
        payload["hierarchy"] = [
            _nested(snapshot, rid, options.include_auxiliary) for rid in snapshot.root_ids
        ]
    else:
        nodes: Dict[str, Any] = {}
        for node_id, node in snapshot.nodes.items():
            entry = node_to_dict(node, options.include_auxiliary)
            entry["childIds"] = list(node.child_ids)
            nodes[node_id] = entry
        payload["rootIds"] = list(snapshot.root_ids)
        payload["nodes"] = nodes

    return payload
