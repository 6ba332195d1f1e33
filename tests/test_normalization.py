# tests/test_normalization.py

from __future__ import annotations

from upline_hierarchy.normalization import (
    clean_text,
    normalize,
    normalize_digits,
    normalize_email,
    normalize_text,
)
from upline_hierarchy.registry.entities import ContactRecord


def test_normalize_digits_strips_everything_but_digits():
    assert normalize_digits("NPN: 1855-0335") == "18550335"
    assert normalize_digits(" 00123 ") == "00123"


def test_normalize_digits_blank_values_are_none():
    assert normalize_digits(None) is None
    assert normalize_digits("") is None
    assert normalize_digits("n/a") is None
    assert normalize_digits([]) is None
    assert normalize_digits(True) is None


def test_normalize_digits_accepts_numbers_and_lists():
    assert normalize_digits(18550335) == "18550335"
    assert normalize_digits(42.0) == "42"
    assert normalize_digits(["12-34", "999"]) == "1234"


def test_normalize_email_trims_and_lowercases():
    assert normalize_email("  Jane@Agency.COM ") == "jane@agency.com"
    assert normalize_email("   ") is None
    assert normalize_email(None) is None
    assert normalize_email(["A@B.com"]) == "a@b.com"


def test_normalize_text_collapses_punctuation():
    assert normalize_text("VEE—TEST!!") == "vee test"
    assert normalize_text(None) == ""


def test_clean_text_collapses_whitespace():
    assert clean_text("  Ann   Alvarez ") == "Ann Alvarez"
    assert clean_text("   ") is None


def test_normalize_contact_produces_canonical_keys():
    contact = ContactRecord(
        id="c1",
        licensing_number="100-200",
        secondary_producer_id="",
        email=" Ann@Agency.com",
        upline_licensing_number="NPN 18550335",
        upline_email="BOSS@agency.com",
    )

    keys = normalize(contact)

    assert keys.contact_id == "c1"
    assert keys.licensing_number == "100200"
    assert keys.secondary_producer_id is None
    assert keys.email == "ann@agency.com"
    assert keys.upline_licensing_number == "18550335"
    assert keys.upline_secondary_producer_id is None
    assert keys.upline_email == "boss@agency.com"
    assert keys.has_upline_number
