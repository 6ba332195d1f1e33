# tests/test_forest.py

from __future__ import annotations

from upline_hierarchy.registry.entities import ContactFlags, NodeStatus, UplineSource
from upline_hierarchy.resolution import assemble, derive_status
from upline_hierarchy.resolution.parent_resolver import Resolution


def _res(parent_id):
    return Resolution(parent_id=parent_id, source=UplineSource.LICENSING_NUMBER, confidence=0.95)


def test_derive_status(make_contact):
    assert derive_status(make_contact("a", licensed=True)) is NodeStatus.ACTIVE
    assert derive_status(make_contact("b", flags=ContactFlags(xcel_paid=True))) is NodeStatus.PENDING
    assert derive_status(make_contact("c")) is NodeStatus.INACTIVE


def test_edges_to_unknown_parents_are_dropped(make_contact):
    contacts = [make_contact("a")]

    snap = assemble(contacts, {"a": _res("ghost")})

    assert snap.nodes["a"].parent_id is None
    assert snap.root_ids == ["a"]


def test_fallback_root_is_listed_first(make_contact):
    contacts = [make_contact("a"), make_contact("b"), make_contact("root")]

    snap = assemble(contacts, {}, fallback_root_id="root")

    assert snap.root_ids == ["root", "a", "b"]


def test_parent_loop_is_detached_and_flagged(make_contact):
    contacts = [make_contact("a"), make_contact("b")]

    snap = assemble(contacts, {"a": _res("b"), "b": _res("a")})

    assert len(snap.root_ids) == 1
    detached = snap.nodes[snap.root_ids[0]]
    assert detached.parent_id is None
    assert detached.issues.cycle_break
    assert detached.descendant_count == 1


def test_metrics_roll_up(make_contact):
    contacts = [
        make_contact("r"),
        make_contact("a", licensed=True),
        make_contact("b", flags=ContactFlags(xcel_started=True)),
        make_contact("c", licensed=True),
    ]
    resolutions = {"a": _res("r"), "b": _res("r"), "c": _res("a")}

    snap = assemble(contacts, resolutions)

    root = snap.nodes["r"]
    assert root.child_ids == ["a", "b"]
    assert root.descendant_count == 3
    assert (root.branch_summary.active, root.branch_summary.pending, root.branch_summary.inactive) == (2, 1, 0)
    assert snap.nodes["a"].descendant_count == 1
    assert snap.nodes["c"].depth == 2
    assert snap.stats.resolved_count == 3
