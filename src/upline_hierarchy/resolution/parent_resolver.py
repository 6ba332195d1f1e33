"""
Parent resolution.

Each contact carries up to three upline references (licensing number,
secondary producer id, email). ``ParentResolver.resolve_parent`` turns them
into a single proposed parent using a fixed precedence chain:

1. upline licensing number against the licensing-number index
2. upline secondary producer id (or, when absent, the upline licensing
   number value) against the secondary-producer-id index
3. upline email, only for contacts carrying no upline number at all
4. the snapshot's fallback root, when an upline number was present
5. unresolved

Steps 1 and 2 short-circuit on a unique candidate. Several candidates yield
a duplicate-group placeholder keyed by the normalized value, except for the
known root identifier, which goes straight to the fallback root.

The resolver only proposes. Committing the edge (and refusing it when it
would close a cycle) is the cycle guard's job.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Collection, Iterable, Optional, Tuple

from upline_hierarchy.config import ResolverConfig
from upline_hierarchy.identity.node_ids import duplicate_group_id, unresolved_upline_id
from upline_hierarchy.identity.test_candidates import CandidateFilter
from upline_hierarchy.logging import get_logger
from upline_hierarchy.registry.entities import (
    ContactRecord,
    IdentifierField,
    NormalizedKeys,
    SyntheticKind,
    UplineSource,
)
from upline_hierarchy.registry.index import ContactIndex

log = get_logger("parent_resolver")

CONFIDENCE_LICENSING_NUMBER = 0.95
CONFIDENCE_KNOWN_ROOT = 0.9
CONFIDENCE_SECONDARY_PRODUCER_ID = 0.85
CONFIDENCE_SYNTHETIC = 0.8
CONFIDENCE_EMAIL = 0.6
CONFIDENCE_FALLBACK = 0.4
CONFIDENCE_UNKNOWN = 0.0


@dataclass(frozen=True, slots=True)
class Resolution:
    """Proposed parent for one contact."""
    parent_id: Optional[str] = None
    source: UplineSource = UplineSource.UNKNOWN
    confidence: float = CONFIDENCE_UNKNOWN

    # Set when parent_id names a placeholder that must exist in the forest
    synthetic_kind: Optional[SyntheticKind] = None
    synthetic_key: Optional[str] = None
    candidates: Tuple[str, ...] = ()

    upline_not_found: bool = False

    @property
    def resolved(self) -> bool:
        return self.parent_id is not None


UNRESOLVED = Resolution()


def select_fallback_root(
    contacts: Iterable[ContactRecord],
    index: ContactIndex,
    config: ResolverConfig,
    candidate_filter: CandidateFilter,
) -> Optional[str]:
    """
    Pick the snapshot-wide fallback root, once per build.

    Preference: configured contact id, then configured email, then the first
    non-test member of the known-root licensing-number bucket (first member
    at all if every one of them looks like test data).
    """
    contact_ids = {c.id for c in contacts}

    if config.fallback_root_contact_id and config.fallback_root_contact_id in contact_ids:
        return config.fallback_root_contact_id
    if config.fallback_root_contact_id:
        log.warning(
            "Configured fallback root %s is not among the contacts; trying other selectors",
            config.fallback_root_contact_id,
        )

    if config.root_email:
        for cid in index.lookup(IdentifierField.EMAIL, config.root_email):
            return cid

    members = index.lookup(IdentifierField.LICENSING_NUMBER, config.root_key)
    non_test = [cid for cid in members if not candidate_filter.is_flagged(cid)]
    if non_test:
        return non_test[0]
    return members[0] if members else None


class ParentResolver:
    def __init__(
        self,
        index: ContactIndex,
        candidate_filter: CandidateFilter,
        config: ResolverConfig,
        fallback_root_id: Optional[str] = None,
        contact_ids: Collection[str] = frozenset(),
    ):
        self.index = index
        self.candidate_filter = candidate_filter
        self.config = config
        self.fallback_root_id = fallback_root_id
        self.root_key = config.root_key
        self.contact_ids = frozenset(contact_ids)

    # -----------------------------
    # Strategies
    # -----------------------------

    def _candidates(self, which: IdentifierField, key: Optional[str], self_id: str) -> Tuple[str, ...]:
        return self.candidate_filter.filter_candidates(self.index.lookup(which, key), self_id)

    def _match_number(
        self,
        which: IdentifierField,
        key: Optional[str],
        self_id: str,
        source: UplineSource,
        confidence: float,
    ) -> Optional[Resolution]:
        if not key:
            return None

        candidates = self._candidates(which, key, self_id)
        if len(candidates) == 1:
            return Resolution(parent_id=candidates[0], source=source, confidence=confidence)
        if not candidates:
            return None

        if key == self.root_key and self.fallback_root_id and self.fallback_root_id != self_id:
            return Resolution(
                parent_id=self.fallback_root_id,
                source=UplineSource.LICENSING_NUMBER,
                confidence=CONFIDENCE_KNOWN_ROOT,
            )

        log.debug("Ambiguous upline %s=%s for %s: %d candidates", which.value, key, self_id, len(candidates))
        return Resolution(
            parent_id=duplicate_group_id(key, self.contact_ids),
            source=UplineSource.SYNTHETIC,
            confidence=CONFIDENCE_SYNTHETIC,
            synthetic_kind=SyntheticKind.DUPLICATE_GROUP,
            synthetic_key=key,
            candidates=candidates,
        )

    def _match_email(self, keys: NormalizedKeys) -> Optional[Resolution]:
        candidates = self._candidates(IdentifierField.EMAIL, keys.upline_email, keys.contact_id)
        if len(candidates) == 1:
            return Resolution(
                parent_id=candidates[0],
                source=UplineSource.EMAIL,
                confidence=CONFIDENCE_EMAIL,
            )
        if candidates:
            log.debug(
                "Ambiguous upline email for %s: %d candidates", keys.contact_id, len(candidates)
            )
        return None

    # -----------------------------
    # Precedence chain
    # -----------------------------

    def resolve_parent(self, keys: NormalizedKeys, raw_upline_present: bool = True) -> Resolution:
        self_id = keys.contact_id

        by_licensing = self._match_number(
            IdentifierField.LICENSING_NUMBER,
            keys.upline_licensing_number,
            self_id,
            UplineSource.LICENSING_NUMBER,
            CONFIDENCE_LICENSING_NUMBER,
        )
        if by_licensing is not None:
            return by_licensing

        by_secondary = self._match_number(
            IdentifierField.SECONDARY_PRODUCER_ID,
            keys.upline_secondary_producer_id or keys.upline_licensing_number,
            self_id,
            UplineSource.SECONDARY_PRODUCER_ID,
            CONFIDENCE_SECONDARY_PRODUCER_ID,
        )
        if by_secondary is not None:
            return by_secondary

        if not keys.has_upline_number and keys.upline_email:
            by_email = self._match_email(keys)
            if by_email is not None:
                return by_email

        if keys.has_upline_number:
            if self.fallback_root_id and self.fallback_root_id != self_id:
                return Resolution(
                    parent_id=self.fallback_root_id,
                    source=UplineSource.FALLBACK,
                    confidence=CONFIDENCE_FALLBACK,
                )
            if self.config.create_unresolved_placeholders:
                key = keys.upline_licensing_number or keys.upline_secondary_producer_id
                return Resolution(
                    parent_id=unresolved_upline_id(key, self.contact_ids),
                    source=UplineSource.SYNTHETIC,
                    confidence=CONFIDENCE_SYNTHETIC,
                    synthetic_kind=SyntheticKind.UNRESOLVED_UPLINE,
                    synthetic_key=key,
                    upline_not_found=True,
                )

        if raw_upline_present:
            log.debug("Upline not found for %s", self_id)
            return Resolution(upline_not_found=True)
        return UNRESOLVED
