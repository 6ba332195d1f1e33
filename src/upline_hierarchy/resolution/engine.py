"""
Snapshot builder.

Runs every stage once, top to bottom, over an in-memory list of contacts:

    normalize -> index -> test-candidate flags -> fallback root
      -> resolve + guard (input order) -> place synthetic groups -> assemble

All state lives in locals of ``build_snapshot``; nothing is cached between
builds, so concurrent callers never see each other's data.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Sequence, Set

from upline_hierarchy.config import ResolverConfig
from upline_hierarchy.identity.node_ids import (
    duplicate_group_label,
    unresolved_upline_label,
)
from upline_hierarchy.identity.test_candidates import CandidateFilter
from upline_hierarchy.logging import get_logger
from upline_hierarchy.normalization.identifiers import normalize
from upline_hierarchy.registry.entities import (
    ContactRecord,
    IdentifierField,
    IssueFlags,
    NormalizedKeys,
    Snapshot,
    SyntheticKind,
    SyntheticNode,
)
from upline_hierarchy.registry.index import ContactIndex, build_indices
from upline_hierarchy.resolution.cycle_guard import EdgeSet
from upline_hierarchy.resolution.forest import assemble
from upline_hierarchy.resolution.parent_resolver import (
    ParentResolver,
    Resolution,
    UNRESOLVED,
    select_fallback_root,
)

log = get_logger("engine")


def _unique_contacts(contacts: Iterable[ContactRecord]) -> List[ContactRecord]:
    seen = set()
    out: List[ContactRecord] = []
    for contact in contacts:
        if contact.id in seen:
            log.warning("Duplicate contact id %s in input; keeping the first record", contact.id)
            continue
        seen.add(contact.id)
        out.append(contact)
    return out


def _own_issue_flags(keys: NormalizedKeys, index: ContactIndex) -> IssueFlags:
    return IssueFlags(
        missing_identifier=keys.licensing_number is None,
        duplicate_identifier=(
            len(index.lookup(IdentifierField.LICENSING_NUMBER, keys.licensing_number)) > 1
            or len(index.lookup(IdentifierField.SECONDARY_PRODUCER_ID, keys.secondary_producer_id)) > 1
        ),
    )


def _make_synthetic(res: Resolution) -> SyntheticNode:
    key = res.synthetic_key or ""
    if res.synthetic_kind is SyntheticKind.DUPLICATE_GROUP:
        return SyntheticNode(
            id=res.parent_id,
            kind=SyntheticKind.DUPLICATE_GROUP,
            key=key,
            label=duplicate_group_label(key, 0),
        )
    return SyntheticNode(
        id=res.parent_id,
        kind=SyntheticKind.UNRESOLVED_UPLINE,
        key=key,
        label=unresolved_upline_label(key),
    )


def _settle_groups(synthetic: Iterable[SyntheticNode], children: Dict[str, Set[str]]) -> None:
    """A contact resolving into a group is never listed as one of its members."""
    for node in synthetic:
        if node.kind is not SyntheticKind.DUPLICATE_GROUP:
            continue
        below = children.get(node.id, set())
        node.member_ids = tuple(cid for cid in node.member_ids if cid not in below)
        node.label = duplicate_group_label(node.key, len(node.member_ids))


def build_snapshot(
    contacts: Sequence[ContactRecord],
    config: ResolverConfig,
) -> Snapshot:
    """
    Resolve ``contacts`` into a forest.

    Raises ``ConfigurationError`` for an invalid config; never raises for
    bad contact data, which surfaces as issue flags instead.
    """
    config.validate()

    records = _unique_contacts(contacts)
    keys = [normalize(c) for c in records]
    index = build_indices(keys)
    log.info("Indexed %d contacts %s", len(records), index.sizes())

    candidate_filter = CandidateFilter.from_contacts(records, config)
    if candidate_filter.flagged:
        log.info(
            "%d likely test contacts (%s from candidacy)",
            len(candidate_filter.flagged),
            "excluded" if candidate_filter.enabled else "kept",
        )

    fallback_root_id = select_fallback_root(records, index, config, candidate_filter)
    log.info("Fallback root: %s", fallback_root_id or "<none>")

    resolver = ParentResolver(
        index, candidate_filter, config, fallback_root_id, contact_ids=[c.id for c in records]
    )
    edges = EdgeSet()
    synthetic: Dict[str, SyntheticNode] = {}
    resolutions: Dict[str, Resolution] = {}
    issues: Dict[str, IssueFlags] = {}
    group_children: Dict[str, Set[str]] = {}

    for contact, k in zip(records, keys):
        res = resolver.resolve_parent(k, raw_upline_present=contact.has_raw_upline())
        flags = _own_issue_flags(k, index)
        flags.upline_not_found = res.upline_not_found

        if res.resolved:
            if res.synthetic_kind is not None:
                node = synthetic.get(res.parent_id)
                if node is None:
                    node = synthetic[res.parent_id] = _make_synthetic(res)
                node.member_ids += tuple(c for c in res.candidates if c not in node.member_ids)
                group_children.setdefault(node.id, set()).add(contact.id)
            if not edges.commit(contact.id, res.parent_id):
                log.debug("Rejected %s -> %s: would create a cycle", contact.id, res.parent_id)
                flags.cycle_break = True
                res = UNRESOLVED

        resolutions[contact.id] = res
        issues[contact.id] = flags

    _settle_groups(synthetic.values(), group_children)

    if fallback_root_id:
        for node in synthetic.values():
            if node.kind is not SyntheticKind.DUPLICATE_GROUP:
                continue
            if edges.commit(node.id, fallback_root_id):
                node.parent_id = fallback_root_id
            else:
                log.debug("Duplicate group %s left as a root: fallback root sits below it", node.id)

    snapshot = assemble(
        records,
        resolutions,
        synthetic.values(),
        issues,
        test_candidates=candidate_filter.flagged,
        duplicate_groups=index.duplicate_groups(),
        fallback_root_id=fallback_root_id,
    )

    log.info(
        "Snapshot built: roots=%d resolved=%d synthetic=%d missing=%d duplicate=%d not_found=%d cycle=%d",
        snapshot.stats.root_count,
        snapshot.stats.resolved_count,
        snapshot.stats.synthetic_count,
        len(snapshot.issues.missing_identifier),
        len(snapshot.issues.duplicate_identifier),
        len(snapshot.issues.upline_not_found),
        len(snapshot.issues.cycle_break),
    )
    return snapshot

