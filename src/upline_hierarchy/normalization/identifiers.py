"""
Identifier canonicalization.

Raw identifier fields arrive from the CRM in whatever shape a human typed
them ("NPN: 1855-0335", " Jane@Agency.COM "). Matching only ever happens on
the canonical forms produced here:

- licensing numbers and secondary producer ids keep digits only
- emails are trimmed and lowercased

Absent values are ``None``. An input that canonicalizes to the empty string
is also ``None``, so two blanks can never collide in an index.
"""

from __future__ import annotations

import re
from typing import Any, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from upline_hierarchy.registry.entities import ContactRecord, NormalizedKeys

_NON_DIGITS = re.compile(r"\D+")
_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def _first(value: Any) -> Any:
    # CRM multi-value fields arrive as lists; the first entry wins.
    if isinstance(value, (list, tuple)):
        return value[0] if value else None
    return value


def normalize_digits(value: Any) -> Optional[str]:
    value = _first(value)
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        value = str(int(value)) if float(value).is_integer() else str(value)
    if not isinstance(value, str):
        return None
    digits = _NON_DIGITS.sub("", value)
    return digits or None


def normalize_email(value: Any) -> Optional[str]:
    value = _first(value)
    if not isinstance(value, str):
        return None
    email = value.strip().lower()
    return email or None


def normalize_text(value: Any) -> str:
    """Lowercase, collapse punctuation to single spaces. Used by heuristics."""
    text = str(value or "").replace("–", "-").replace("—", "-").lower()
    return _NON_ALNUM.sub(" ", text).strip()


def clean_text(value: Any) -> Optional[str]:
    value = _first(value)
    if value is None:
        return None
    out = " ".join(str(value).split()).strip()
    return out or None


def normalize(contact: "ContactRecord") -> "NormalizedKeys":
    """Canonicalize every identifier field of one contact."""
    from upline_hierarchy.registry.entities import NormalizedKeys

    return NormalizedKeys(
        contact_id=contact.id,
        licensing_number=normalize_digits(contact.licensing_number),
        secondary_producer_id=normalize_digits(contact.secondary_producer_id),
        email=normalize_email(contact.email),
        upline_licensing_number=normalize_digits(contact.upline_licensing_number),
        upline_secondary_producer_id=normalize_digits(contact.upline_secondary_producer_id),
        upline_email=normalize_email(contact.upline_email),
    )
