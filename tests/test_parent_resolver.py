# tests/test_parent_resolver.py

from __future__ import annotations

from dataclasses import replace

from upline_hierarchy.identity import CandidateFilter
from upline_hierarchy.normalization import normalize
from upline_hierarchy.registry import UplineSource, build_indices
from upline_hierarchy.registry.entities import SyntheticKind
from upline_hierarchy.resolution import ParentResolver, select_fallback_root
from upline_hierarchy.resolution.parent_resolver import (
    CONFIDENCE_EMAIL,
    CONFIDENCE_FALLBACK,
    CONFIDENCE_KNOWN_ROOT,
    CONFIDENCE_LICENSING_NUMBER,
    CONFIDENCE_SECONDARY_PRODUCER_ID,
)


def _resolver(contacts, config):
    keys = {c.id: normalize(c) for c in contacts}
    index = build_indices(keys.values())
    flt = CandidateFilter.from_contacts(contacts, config)
    fallback = select_fallback_root(contacts, index, config, flt)
    return ParentResolver(index, flt, config, fallback), keys


def test_licensing_number_wins_over_other_references(make_contact, config):
    contacts = [
        make_contact("lic", licensing_number="100"),
        make_contact("sec", secondary_producer_id="200"),
        make_contact("mail", email="boss@agency.com"),
        make_contact(
            "c",
            upline_licensing_number="100",
            upline_secondary_producer_id="200",
            upline_email="boss@agency.com",
        ),
    ]
    resolver, keys = _resolver(contacts, config)

    res = resolver.resolve_parent(keys["c"])

    assert res.parent_id == "lic"
    assert res.source is UplineSource.LICENSING_NUMBER
    assert res.confidence == CONFIDENCE_LICENSING_NUMBER
    assert not res.upline_not_found


def test_secondary_producer_id_match(make_contact, config):
    contacts = [
        make_contact("sec", secondary_producer_id="77"),
        make_contact("c", upline_secondary_producer_id="77"),
    ]
    resolver, keys = _resolver(contacts, config)

    res = resolver.resolve_parent(keys["c"])

    assert res.parent_id == "sec"
    assert res.source is UplineSource.SECONDARY_PRODUCER_ID
    assert res.confidence == CONFIDENCE_SECONDARY_PRODUCER_ID


def test_upline_licensing_value_is_tried_against_secondary_index(make_contact, config):
    contacts = [
        make_contact("sec", secondary_producer_id="77"),
        make_contact("c", upline_licensing_number="77"),
    ]
    resolver, keys = _resolver(contacts, config)

    res = resolver.resolve_parent(keys["c"])

    assert res.parent_id == "sec"
    assert res.source is UplineSource.SECONDARY_PRODUCER_ID


def test_email_used_only_without_upline_numbers(make_contact, config):
    contacts = [
        make_contact("boss", email="boss@agency.com"),
        make_contact("c", upline_email="BOSS@agency.com"),
        make_contact("d", upline_email="boss@agency.com", upline_licensing_number="12345"),
    ]
    resolver, keys = _resolver(contacts, config)

    by_email = resolver.resolve_parent(keys["c"])
    with_number = resolver.resolve_parent(keys["d"])

    assert by_email.parent_id == "boss"
    assert by_email.source is UplineSource.EMAIL
    assert by_email.confidence == CONFIDENCE_EMAIL
    assert with_number.parent_id is None
    assert with_number.upline_not_found


def test_ambiguous_email_is_not_resolved(make_contact, config):
    contacts = [
        make_contact("a", email="boss@agency.com"),
        make_contact("b", email="boss@agency.com"),
        make_contact("c", upline_email="boss@agency.com"),
    ]
    resolver, keys = _resolver(contacts, config)

    res = resolver.resolve_parent(keys["c"])

    assert res.parent_id is None
    assert res.upline_not_found


def test_ambiguous_number_yields_duplicate_group(make_contact, config):
    contacts = [
        make_contact("a", licensing_number="300"),
        make_contact("b", licensing_number="300"),
        make_contact("c", upline_licensing_number="300"),
    ]
    resolver, keys = _resolver(contacts, config)

    res = resolver.resolve_parent(keys["c"])

    assert res.parent_id == "dup:300"
    assert res.source is UplineSource.SYNTHETIC
    assert res.synthetic_kind is SyntheticKind.DUPLICATE_GROUP
    assert res.synthetic_key == "300"


def test_ambiguous_known_root_goes_to_fallback_root(make_contact, config):
    contacts = [
        make_contact("r1", licensing_number="18550335"),
        make_contact("r2", licensing_number="18550335"),
        make_contact("c", upline_licensing_number="1855-0335"),
    ]
    resolver, keys = _resolver(contacts, config)

    res = resolver.resolve_parent(keys["c"])

    assert resolver.fallback_root_id == "r1"
    assert res.parent_id == "r1"
    assert res.source is UplineSource.LICENSING_NUMBER
    assert res.confidence == CONFIDENCE_KNOWN_ROOT


def test_unmatched_number_falls_back_to_root(make_contact, config):
    contacts = [
        make_contact("root", licensing_number="18550335"),
        make_contact("c", upline_licensing_number="999"),
    ]
    resolver, keys = _resolver(contacts, config)

    res = resolver.resolve_parent(keys["c"])

    assert res.parent_id == "root"
    assert res.source is UplineSource.FALLBACK
    assert res.confidence == CONFIDENCE_FALLBACK
    assert not res.upline_not_found


def test_fallback_root_never_parents_itself(make_contact, config):
    contacts = [make_contact("root", licensing_number="18550335", upline_licensing_number="999")]
    resolver, keys = _resolver(contacts, config)

    res = resolver.resolve_parent(keys["root"])

    assert res.parent_id is None
    assert res.upline_not_found


def test_self_reference_is_not_a_candidate(make_contact, config):
    contacts = [make_contact("a", licensing_number="5", upline_licensing_number="5")]
    resolver, keys = _resolver(contacts, config)

    res = resolver.resolve_parent(keys["a"])

    assert res.parent_id is None
    assert res.upline_not_found


def test_no_upline_reference_is_plain_unresolved(make_contact, config):
    contacts = [make_contact("a", licensing_number="5")]
    resolver, keys = _resolver(contacts, config)

    res = resolver.resolve_parent(keys["a"], raw_upline_present=False)

    assert not res.resolved
    assert res.source is UplineSource.UNKNOWN
    assert not res.upline_not_found


def test_unresolved_placeholder_when_enabled(make_contact, config):
    cfg = replace(config, create_unresolved_placeholders=True)
    contacts = [make_contact("c", upline_licensing_number="555")]
    resolver, keys = _resolver(contacts, cfg)

    res = resolver.resolve_parent(keys["c"])

    assert res.parent_id == "upline:555"
    assert res.synthetic_kind is SyntheticKind.UNRESOLVED_UPLINE
    assert res.upline_not_found


def test_fallback_root_selectors(make_contact, config):
    contacts = [
        make_contact("t", name="Root TEST", licensing_number="18550335"),
        make_contact("r", licensing_number="18550335"),
        make_contact("owner", email="owner@agency.com"),
    ]
    index = build_indices(normalize(c) for c in contacts)
    flt = CandidateFilter.from_contacts(contacts, config)

    assert select_fallback_root(contacts, index, config, flt) == "r"
    assert select_fallback_root(
        contacts, index, replace(config, fallback_root_email="Owner@Agency.com"), flt
    ) == "owner"
    assert select_fallback_root(
        contacts, index, replace(config, fallback_root_contact_id="t"), flt
    ) == "t"
    assert select_fallback_root(
        contacts, index, replace(config, fallback_root_contact_id="missing"), flt
    ) == "r"
    assert select_fallback_root(contacts[2:], index, replace(config, known_root_identifier="1"), flt) is None
