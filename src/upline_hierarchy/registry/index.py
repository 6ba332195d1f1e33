from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from upline_hierarchy.registry.entities import DuplicateGroup, IdentifierField, NormalizedKeys


@dataclass(slots=True)
class ContactIndex:
    """
    Identifier -> contact ids lookups for one snapshot build.

    Buckets keep input order. A bucket holding more than one id is the
    duplicate signal; nothing else tracks duplication.
    """
    by_licensing_number: Dict[str, List[str]] = field(default_factory=dict)
    by_secondary_producer_id: Dict[str, List[str]] = field(default_factory=dict)
    by_email: Dict[str, List[str]] = field(default_factory=dict)

    def bucket(self, which: IdentifierField) -> Dict[str, List[str]]:
        if which is IdentifierField.LICENSING_NUMBER:
            return self.by_licensing_number
        if which is IdentifierField.SECONDARY_PRODUCER_ID:
            return self.by_secondary_producer_id
        return self.by_email

    def lookup(self, which: IdentifierField, key: Optional[str]) -> Tuple[str, ...]:
        if not key:
            return ()
        return tuple(self.bucket(which).get(key, ()))

    def duplicate_groups(
        self,
        fields: Iterable[IdentifierField] = (
            IdentifierField.LICENSING_NUMBER,
            IdentifierField.SECONDARY_PRODUCER_ID,
        ),
    ) -> Iterator[DuplicateGroup]:
        for which in fields:
            for value, ids in self.bucket(which).items():
                if len(ids) > 1:
                    yield DuplicateGroup(identifier=which, value=value, contact_ids=tuple(ids))

    def sizes(self) -> Dict[str, int]:
        return {
            "licensingNumber": len(self.by_licensing_number),
            "secondaryProducerId": len(self.by_secondary_producer_id),
            "email": len(self.by_email),
        }


def _append(bucket: Dict[str, List[str]], key: Optional[str], contact_id: str) -> None:
    if not key:
        return
    ids = bucket.setdefault(key, [])
    if contact_id not in ids:
        ids.append(contact_id)


def build_indices(keys: Iterable[NormalizedKeys]) -> ContactIndex:
    index = ContactIndex()
    for k in keys:
        _append(index.by_licensing_number, k.licensing_number, k.contact_id)
        _append(index.by_secondary_producer_id, k.secondary_producer_id, k.contact_id)
        _append(index.by_email, k.email, k.contact_id)
    return index
