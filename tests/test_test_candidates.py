# tests/test_test_candidates.py

from __future__ import annotations

from dataclasses import replace

from upline_hierarchy.identity import CandidateFilter, is_likely_test_candidate


def test_name_pattern_flags_contact(make_contact, config):
    assert is_likely_test_candidate(make_contact("t", name="VEE TEST"), config)
    assert not is_likely_test_candidate(make_contact("a", name="Ann Alvarez"), config)


def test_email_domain_and_state_sentinel_flag_contact(make_contact, config):
    assert is_likely_test_candidate(make_contact("a", email="jane@example.com"), config)
    assert is_likely_test_candidate(make_contact("b", licensing_state="TEST"), config)
    assert is_likely_test_candidate(make_contact("c", source="Test"), config)
    assert not is_likely_test_candidate(make_contact("d", email="jane@agency.com"), config)


def test_allowlist_beats_heuristics_and_blocklist_forces_flag(make_contact, config):
    cfg = replace(
        config,
        test_candidate_id_allowlist=frozenset({"t"}),
        test_candidate_id_blocklist=frozenset({"a"}),
    )

    assert not is_likely_test_candidate(make_contact("t", name="Testa Rossi"), cfg)
    assert is_likely_test_candidate(make_contact("a", name="Ann Alvarez"), cfg)


def test_filter_always_drops_self():
    flt = CandidateFilter(flagged=[], enabled=False)
    assert flt.filter_candidates(["a", "b"], "a") == ("b",)


def test_filter_drops_flagged_only_when_enabled():
    ids = ["a", "t"]

    assert CandidateFilter(["t"], enabled=False).filter_candidates(ids, "x") == ("a", "t")
    assert CandidateFilter(["t"], enabled=True).filter_candidates(ids, "x") == ("a",)


def test_from_contacts_records_flagged_ids(make_contact, config):
    contacts = [make_contact("a"), make_contact("t", name="VEE TEST")]

    flt = CandidateFilter.from_contacts(contacts, replace(config, exclude_test_candidates=True))

    assert flt.flagged == frozenset({"t"})
    assert flt.enabled
    assert flt.is_flagged("t")
    assert not flt.is_flagged("a")
