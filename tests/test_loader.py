# tests/test_loader.py

from __future__ import annotations

import json

import pytest

from upline_hierarchy.core.exceptions import ContactLoadError
from upline_hierarchy.loader import (
    contact_from_crm,
    contacts_from_payload,
    is_truthy,
    load_contacts,
    save_contacts,
)
from upline_hierarchy.registry.entities import VendorAffiliation


def test_load_sample_skips_records_without_id(sample_contacts_path):
    contacts = load_contacts(sample_contacts_path)

    assert [c.id for c in contacts] == ["root", "ann", "bob", "cat", "dan", "crm-eve"]


def test_flat_records_keep_raw_identifiers(sample_contacts_path):
    ann = load_contacts(sample_contacts_path)[1]

    assert ann.display_name == "Ann Alvarez"
    assert ann.licensing_number == "100-200"
    assert ann.upline_licensing_number == "NPN 18550335"
    assert ann.flags.licensed
    assert ann.vendor is VendorAffiliation.EQUITA_ONLY
    assert ann.opportunity == {"stage": "Contracted"}


def test_crm_records_map_custom_fields(sample_contacts_path):
    eve = load_contacts(sample_contacts_path)[-1]

    assert eve.display_name == "Eve Evans"
    assert eve.licensing_number == "500"
    assert eve.upline_licensing_number == "300"
    assert eve.email == "eve@agency.com"
    assert eve.flags.licensed
    assert eve.vendor is VendorAffiliation.QUILITY_ONLY
    assert eve.custom_fields["contact.onboarding__npn"] == "500"


def test_crm_field_mapping_can_be_overridden():
    raw = {
        "id": "x",
        "firstName": "Xavier",
        "customFields": {"my.npn": ["42"], "contact.onboarding__npn": "1"},
    }

    contact = contact_from_crm(raw, {"licensing_number": "my.npn"})

    assert contact.licensing_number == "42"


def test_display_name_falls_back_to_email_then_id():
    raw = {"id": "abcdef123456", "firstName": "", "email": "who@agency.com"}
    assert contact_from_crm(raw).display_name == "who@agency.com"

    raw = {"id": "abcdef123456", "lastName": None}
    assert contact_from_crm(raw).display_name == "Contact 123456"


@pytest.mark.parametrize(
    "value, expected",
    [("Yes", True), ("checked", True), (["no", "true"], True), ("no", False), (0, False), (None, False)],
)
def test_is_truthy(value, expected):
    assert is_truthy(value) is expected


def test_payload_must_be_a_list():
    with pytest.raises(ContactLoadError):
        contacts_from_payload({"contacts": "nope"})

    assert [c.id for c in contacts_from_payload([{"id": 7}])] == ["7"]


def test_missing_and_invalid_files(tmp_path):
    with pytest.raises(ContactLoadError):
        load_contacts(tmp_path / "missing.json")

    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding="utf-8")
    with pytest.raises(ContactLoadError):
        load_contacts(bad)


def test_saved_contacts_load_back(tmp_path, sample_contacts_path):
    contacts = load_contacts(sample_contacts_path)

    target = save_contacts(contacts, tmp_path / "saved.json")

    assert "contacts" in json.loads(target.read_text(encoding="utf-8"))
    assert load_contacts(target) == contacts
