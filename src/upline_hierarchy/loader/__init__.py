from __future__ import annotations

from .contacts import (
    DEFAULT_CRM_FIELDS,
    contact_from_crm,
    contact_from_dict,
    contact_from_flat,
    contact_to_dict,
    contacts_from_payload,
    is_truthy,
    load_contacts,
    save_contacts,
)

__all__ = [
    "DEFAULT_CRM_FIELDS",
    "contact_from_crm",
    "contact_from_dict",
    "contact_from_flat",
    "contact_to_dict",
    "contacts_from_payload",
    "is_truthy",
    "load_contacts",
    "save_contacts",
]
