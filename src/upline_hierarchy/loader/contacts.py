"""
Contacts file loader.

The resolution engine only sees ``ContactRecord``. This module is the
boundary that turns JSON exports into records. Two entry shapes are accepted:

- flat records whose keys match ``ContactRecord`` fields (what ``save_contacts``
  writes back out)
- CRM-shaped records (``firstName``/``lastName``/``email`` plus a
  ``customFields`` list or mapping); custom-field keys are mapped through the
  ``crm_fields`` config section
"""

from __future__ import annotations

import json
from dataclasses import fields
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from upline_hierarchy.core.exceptions import ContactLoadError
from upline_hierarchy.logging import get_logger
from upline_hierarchy.normalization.identifiers import clean_text
from upline_hierarchy.registry.entities import ContactFlags, ContactRecord, VendorAffiliation

log = get_logger("loader")

DEFAULT_CRM_FIELDS: Dict[str, List[str]] = {
    "licensing_number": ["contact.onboarding__npn"],
    "secondary_producer_id": ["contact.onboarding__producer_number"],
    "upline_licensing_number": ["contact.upline_producer_id", "contact.onboarding__upline_npn"],
    "upline_secondary_producer_id": ["contact.upline_producer_number"],
    "upline_email": ["contact.onboarding__upline_email"],
    "upline_display_name": ["contact.upline_name"],
    "licensing_state": ["contact.onboarding__licensing_state"],
    "licensed": ["contact.onboarding__licensed"],
    "xcel_account_created": ["contact.onboarding__xcel_account_created"],
    "xcel_started": ["contact.onboarding__xcel_started"],
    "xcel_paid": ["contact.onboarding__xcel_paid"],
    "equita_profile": ["contact.onboarding__equita_profile_created"],
    "quility_profile": ["contact.onboarding__quility_profile_created"],
    "vendor_equita": ["contact.upline_code_equita"],
    "vendor_quility": ["contact.upline_code_quility"],
}

_TRUTHY = {"yes", "true", "1", "on", "checked"}
_FLAG_NAMES = [f.name for f in fields(ContactFlags)]
_TEXT_FIELDS = (
    "licensing_number",
    "secondary_producer_id",
    "upline_licensing_number",
    "upline_secondary_producer_id",
    "upline_email",
    "upline_display_name",
    "licensing_state",
)


def is_truthy(value: Any) -> bool:
    """CRM checkbox semantics: lists are true if any entry is."""
    if isinstance(value, (list, tuple)):
        return any(is_truthy(v) for v in value)
    if isinstance(value, str):
        return value.strip().lower() in _TRUTHY
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    return bool(value)


def _raw_text(value: Any) -> Optional[str]:
    """First entry of multi-value fields, as text. Identifiers stay raw."""
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _custom_field_map(raw: Any) -> Dict[str, Any]:
    if isinstance(raw, Mapping):
        return {str(k): v for k, v in raw.items()}
    custom: Dict[str, Any] = {}
    if isinstance(raw, list):
        for entry in raw:
            if not isinstance(entry, Mapping):
                continue
            key = entry.get("key") or entry.get("fieldKey") or entry.get("id")
            if key:
                custom[str(key)] = entry.get("value")
    return custom


def _lookup(custom: Mapping[str, Any], keys: Iterable[str]) -> Any:
    for key in keys:
        value = custom.get(key)
        if value is not None and value != "" and value != []:
            return value
    return None


def _display_name(first: Optional[str], last: Optional[str], fallback: Sequence[Any], contact_id: str) -> str:
    name = " ".join(p for p in (first, last) if p).strip()
    if name:
        return name
    for candidate in fallback:
        text = clean_text(candidate)
        if text:
            return text
    return f"Contact {contact_id[-6:]}"


def contact_from_crm(raw: Mapping[str, Any], crm_fields: Optional[Mapping[str, List[str]]] = None) -> ContactRecord:
    mapping = {**DEFAULT_CRM_FIELDS}
    for name, keys in (crm_fields or {}).items():
        mapping[name] = [keys] if isinstance(keys, str) else list(keys or [])
    custom = _custom_field_map(raw.get("customFields"))
    contact_id = str(raw["id"])

    def text(name: str) -> Optional[str]:
        return _raw_text(_lookup(custom, mapping.get(name, [])))

    def flag(name: str) -> bool:
        return is_truthy(_lookup(custom, mapping.get(name, [])))

    first = clean_text(raw.get("firstNameRaw") or raw.get("firstName"))
    last = clean_text(raw.get("lastNameRaw") or raw.get("lastName"))

    return ContactRecord(
        id=contact_id,
        display_name=_display_name(first, last, [raw.get("contactName"), raw.get("email")], contact_id),
        licensing_number=text("licensing_number"),
        secondary_producer_id=text("secondary_producer_id"),
        email=_raw_text(raw.get("email")),
        upline_licensing_number=text("upline_licensing_number"),
        upline_secondary_producer_id=text("upline_secondary_producer_id"),
        upline_email=text("upline_email"),
        upline_display_name=text("upline_display_name"),
        flags=ContactFlags(**{name: flag(name) for name in _FLAG_NAMES}),
        vendor=VendorAffiliation.from_flags(flag("vendor_equita"), flag("vendor_quility")),
        licensing_state=text("licensing_state"),
        source=_raw_text(raw.get("source")),
        phone=_raw_text(raw.get("phone")),
        opportunity=raw.get("opportunity") if isinstance(raw.get("opportunity"), Mapping) else None,
        custom_fields=custom,
    )


def _vendor_from_flat(raw: Mapping[str, Any]) -> VendorAffiliation:
    value = raw.get("vendor")
    if isinstance(value, str):
        try:
            return VendorAffiliation(value)
        except ValueError:
            log.warning("Unknown vendor value %r on %s; treating as none", value, raw.get("id"))
            return VendorAffiliation.NONE
    vendor_flags = raw.get("vendor_flags") or {}
    return VendorAffiliation.from_flags(
        is_truthy(vendor_flags.get("equita")), is_truthy(vendor_flags.get("quility"))
    )


def contact_from_flat(raw: Mapping[str, Any]) -> ContactRecord:
    contact_id = str(raw["id"])
    flags_raw = raw.get("flags") or {}
    return ContactRecord(
        id=contact_id,
        display_name=_display_name(
            clean_text(raw.get("display_name")), None, [raw.get("email")], contact_id
        ),
        email=_raw_text(raw.get("email")),
        flags=ContactFlags(**{name: is_truthy(flags_raw.get(name)) for name in _FLAG_NAMES}),
        vendor=_vendor_from_flat(raw),
        source=_raw_text(raw.get("source")),
        phone=_raw_text(raw.get("phone")),
        opportunity=raw.get("opportunity") if isinstance(raw.get("opportunity"), Mapping) else None,
        custom_fields=dict(raw.get("custom_fields") or {}),
        **{name: _raw_text(raw.get(name)) for name in _TEXT_FIELDS},
    )


def contact_from_dict(raw: Mapping[str, Any], crm_fields: Optional[Mapping[str, List[str]]] = None) -> ContactRecord:
    if "customFields" in raw or "firstName" in raw or "lastName" in raw:
        return contact_from_crm(raw, crm_fields)
    return contact_from_flat(raw)


def contacts_from_payload(
    payload: Any, crm_fields: Optional[Mapping[str, List[str]]] = None
) -> List[ContactRecord]:
    entries = payload.get("contacts") if isinstance(payload, Mapping) else payload
    if not isinstance(entries, list):
        raise ContactLoadError("Expected a list of contacts or an object with a 'contacts' list")

    contacts: List[ContactRecord] = []
    for position, raw in enumerate(entries):
        if not isinstance(raw, Mapping) or raw.get("id") in (None, ""):
            log.warning("Skipping contact #%d: no id", position)
            continue
        contacts.append(contact_from_dict(raw, crm_fields))
    return contacts


def load_contacts(
    path: str | Path, crm_fields: Optional[Mapping[str, List[str]]] = None
) -> List[ContactRecord]:
    path = Path(path)
    if not path.exists():
        raise ContactLoadError(f"Contacts file not found: {path}")

    try:
        with path.open("r", encoding="utf-8") as f:
            payload = json.load(f)
    except json.JSONDecodeError as exc:
        raise ContactLoadError(f"Invalid JSON in {path}: {exc}") from exc

    contacts = contacts_from_payload(payload, crm_fields)
    log.info("Loaded %d contacts from %s", len(contacts), path)
    return contacts


def contact_to_dict(contact: ContactRecord) -> Dict[str, Any]:
    """Flat form accepted back by ``contact_from_flat``."""
    out: Dict[str, Any] = {
        "id": contact.id,
        "display_name": contact.display_name,
        "email": contact.email,
        "flags": {name: getattr(contact.flags, name) for name in _FLAG_NAMES},
        "vendor": contact.vendor.value,
        "source": contact.source,
        "phone": contact.phone,
    }
    for name in _TEXT_FIELDS:
        out[name] = getattr(contact, name)
    if contact.opportunity is not None:
        out["opportunity"] = contact.opportunity
    if contact.custom_fields:
        out["custom_fields"] = dict(contact.custom_fields)
    return out


def save_contacts(contacts: Iterable[ContactRecord], path: str | Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = {"contacts": [contact_to_dict(c) for c in contacts]}
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
    log.info("Wrote contacts to %s", path)
    return path
