from __future__ import annotations

from dataclasses import replace
from typing import Any, List, Optional, Sequence, Tuple

from upline_hierarchy.config import ResolverConfig
from upline_hierarchy.core.exceptions import ContactNotFoundError
from upline_hierarchy.logging import get_logger
from upline_hierarchy.normalization.identifiers import normalize_digits, normalize_email
from upline_hierarchy.registry.entities import ContactRecord, IdentifierField, Snapshot
from upline_hierarchy.resolution.engine import build_snapshot

log = get_logger("updates")

_UPLINE_ATTRS = {
    IdentifierField.LICENSING_NUMBER: "upline_licensing_number",
    IdentifierField.SECONDARY_PRODUCER_ID: "upline_secondary_producer_id",
    IdentifierField.EMAIL: "upline_email",
}


def normalize_upline_value(which: IdentifierField, value: Any) -> Optional[str]:
    if which is IdentifierField.EMAIL:
        return normalize_email(value)
    return normalize_digits(value)


def update_upline_reference(
    contacts: Sequence[ContactRecord],
    contact_id: str,
    which: IdentifierField,
    value: Any,
    config: ResolverConfig,
) -> Tuple[List[ContactRecord], Snapshot]:
    """
    Set one contact's upline reference and rebuild the whole snapshot.

    The value is stored normalized; a blank value clears the reference.
    ``contacts`` is left untouched; the updated list is returned alongside
    the fresh snapshot. Only contact ids are accepted; placeholder ids never
    name a contact, so they raise ``ContactNotFoundError`` like any unknown id.
    """
    normalized = normalize_upline_value(which, value)
    attr = _UPLINE_ATTRS[which]

    updated: List[ContactRecord] = []
    found = False
    for contact in contacts:
        if contact.id == contact_id and not found:
            contact = replace(contact, **{attr: normalized})
            found = True
        updated.append(contact)

    if not found:
        raise ContactNotFoundError(f"Unknown contact id {contact_id!r}")

    log.info("Updated %s.%s -> %s; rebuilding snapshot", contact_id, attr, normalized or "<cleared>")
    return updated, build_snapshot(updated, config)
