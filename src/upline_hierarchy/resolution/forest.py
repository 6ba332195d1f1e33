from __future__ import annotations

from collections import deque
from typing import Collection, Dict, Iterable, List, Mapping, Optional, Sequence

from upline_hierarchy.logging import get_logger
from upline_hierarchy.registry.entities import (
    BranchStatusSummary,
    ContactNode,
    ContactRecord,
    DuplicateGroup,
    IssueFlags,
    IssuesReport,
    NodeStatus,
    ResolvedNode,
    Snapshot,
    SnapshotStats,
    SyntheticNode,
    UplineSource,
)
from upline_hierarchy.resolution.parent_resolver import UNRESOLVED, Resolution

log = get_logger("forest")


def derive_status(contact: ContactRecord) -> NodeStatus:
    if contact.flags.licensed:
        return NodeStatus.ACTIVE
    if contact.flags.xcel_started or contact.flags.xcel_paid:
        return NodeStatus.PENDING
    return NodeStatus.INACTIVE


def _build_nodes(
    contacts: Sequence[ContactRecord],
    resolutions: Mapping[str, Resolution],
    synthetic_nodes: Iterable[SyntheticNode],
    issues: Mapping[str, IssueFlags],
    test_candidates: Collection[str],
) -> Dict[str, ResolvedNode]:
    nodes: Dict[str, ResolvedNode] = {}

    for contact in contacts:
        res = resolutions.get(contact.id, UNRESOLVED)
        node = ContactNode(
            contact=contact,
            parent_id=res.parent_id,
            upline_source=res.source,
            upline_confidence=res.confidence,
            status=derive_status(contact),
            is_test_candidate=contact.id in test_candidates,
        )
        flags = issues.get(contact.id)
        if flags is not None:
            node.issues.merge(flags)
        nodes[contact.id] = node

    for synthetic in synthetic_nodes:
        synthetic.child_ids.clear()
        synthetic.branch_summary = BranchStatusSummary()
        nodes[synthetic.id] = synthetic

    return nodes


def _order_roots(root_ids: List[str], fallback_root_id: Optional[str]) -> List[str]:
    if fallback_root_id and fallback_root_id in root_ids:
        return [fallback_root_id] + [rid for rid in root_ids if rid != fallback_root_id]
    return root_ids


def _walk_depths(nodes: Dict[str, ResolvedNode], root_ids: List[str]) -> List[str]:
    """
    BFS from the roots, setting depth. Returns visit order.

    Nodes unreachable from any root sit on a parent loop; each one found is
    detached, flagged and promoted to a root so the result is always a forest.
    """
    order: List[str] = []
    visited = set()

    def _bfs(start: str) -> None:
        nodes[start].depth = 0
        queue = deque([start])
        visited.add(start)
        while queue:
            current = queue.popleft()
            order.append(current)
            node = nodes[current]
            for child_id in node.child_ids:
                if child_id in visited:
                    continue
                visited.add(child_id)
                nodes[child_id].depth = node.depth + 1
                queue.append(child_id)

    for rid in root_ids:
        _bfs(rid)

    for node_id, node in nodes.items():
        if node_id in visited:
            continue
        log.warning("Detaching %s: parent chain never reaches a root", node_id)
        parent = nodes.get(node.parent_id) if node.parent_id else None
        if parent is not None and node_id in parent.child_ids:
            parent.child_ids.remove(node_id)
        node.parent_id = None
        if isinstance(node, ContactNode):
            node.issues.cycle_break = True
            node.upline_source = UplineSource.UNKNOWN
            node.upline_confidence = 0.0
        root_ids.append(node_id)
        _bfs(node_id)

    return order


def _accumulate(nodes: Dict[str, ResolvedNode], order: List[str]) -> None:
    for node_id in reversed(order):
        node = nodes[node_id]
        node.descendant_count = 0
        for child_id in node.child_ids:
            child = nodes[child_id]
            node.descendant_count += child.descendant_count + 1
            node.branch_summary.absorb(child.branch_summary)
            if isinstance(child, ContactNode):
                node.branch_summary.add(child.status)


def _build_issues(
    contact_nodes: List[ContactNode], duplicate_groups: Iterable[DuplicateGroup]
) -> IssuesReport:
    report = IssuesReport(duplicate_groups=list(duplicate_groups))
    for node in contact_nodes:
        if node.issues.missing_identifier:
            report.missing_identifier.append(node.id)
        if node.issues.duplicate_identifier:
            report.duplicate_identifier.append(node.id)
        if node.issues.upline_not_found:
            report.upline_not_found.append(node.id)
        if node.issues.cycle_break:
            report.cycle_break.append(node.id)
    return report


def assemble(
    contacts: Sequence[ContactRecord],
    resolutions: Mapping[str, Resolution],
    synthetic_nodes: Iterable[SyntheticNode] = (),
    issues: Optional[Mapping[str, IssueFlags]] = None,
    *,
    test_candidates: Collection[str] = frozenset(),
    duplicate_groups: Iterable[DuplicateGroup] = (),
    fallback_root_id: Optional[str] = None,
) -> Snapshot:
    """
    Wire accepted edges into a forest and compute derived metrics.

    ``resolutions`` carries the committed parent of each contact (already
    checked by the cycle guard). Synthetic nodes carry their own parent_id.
    Issue flags raised by earlier stages are merged in, not recomputed.
    """
    nodes = _build_nodes(contacts, resolutions, synthetic_nodes, issues or {}, test_candidates)

    root_ids: List[str] = []
    for node_id, node in nodes.items():
        parent = nodes.get(node.parent_id) if node.parent_id else None
        if parent is None:
            if node.parent_id:
                log.warning("Dropping edge %s -> %s: parent not in snapshot", node_id, node.parent_id)
                node.parent_id = None
            root_ids.append(node_id)
        else:
            parent.child_ids.append(node_id)

    root_ids = _order_roots(root_ids, fallback_root_id)
    order = _walk_depths(nodes, root_ids)
    _accumulate(nodes, order)

    contact_nodes = [n for n in nodes.values() if isinstance(n, ContactNode)]
    stats = SnapshotStats(
        root_count=len(root_ids),
        total_contacts=len(contact_nodes),
        resolved_count=sum(1 for n in contact_nodes if n.parent_id is not None),
        producer_count=sum(1 for n in contact_nodes if not n.issues.missing_identifier),
        vendor_flagged_count=sum(1 for n in contact_nodes if n.contact.vendor.flagged),
        synthetic_count=len(nodes) - len(contact_nodes),
        test_candidate_count=sum(1 for n in contact_nodes if n.is_test_candidate),
    )

    return Snapshot(
        root_ids=root_ids,
        nodes=nodes,
        stats=stats,
        issues=_build_issues(contact_nodes, duplicate_groups),
        fallback_root_id=fallback_root_id,
    )
