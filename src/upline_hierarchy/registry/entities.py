from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union


# -----------------------------
# Enumerations
# -----------------------------

class UplineSource(str, Enum):
    LICENSING_NUMBER = "licensingNumber"
    SECONDARY_PRODUCER_ID = "secondaryProducerId"
    EMAIL = "email"
    FALLBACK = "fallback"
    SYNTHETIC = "synthetic"
    UNKNOWN = "unknown"


class NodeStatus(str, Enum):
    ACTIVE = "ACTIVE"
    PENDING = "PENDING"
    INACTIVE = "INACTIVE"


class VendorAffiliation(str, Enum):
    NONE = "none"
    EQUITA_ONLY = "equitaOnly"
    QUILITY_ONLY = "quilityOnly"
    BOTH = "both"

    @classmethod
    def from_flags(cls, equita: bool, quility: bool) -> "VendorAffiliation":
        if equita and quility:
            return cls.BOTH
        if equita:
            return cls.EQUITA_ONLY
        if quility:
            return cls.QUILITY_ONLY
        return cls.NONE

    @property
    def equita(self) -> bool:
        return self in (VendorAffiliation.EQUITA_ONLY, VendorAffiliation.BOTH)

    @property
    def quility(self) -> bool:
        return self in (VendorAffiliation.QUILITY_ONLY, VendorAffiliation.BOTH)

    @property
    def flagged(self) -> bool:
        return self is not VendorAffiliation.NONE


class SyntheticKind(str, Enum):
    DUPLICATE_GROUP = "duplicateGroup"
    UNRESOLVED_UPLINE = "unresolvedUpline"


class IdentifierField(str, Enum):
    LICENSING_NUMBER = "licensingNumber"
    SECONDARY_PRODUCER_ID = "secondaryProducerId"
    EMAIL = "email"


# -----------------------------
# Input records
# -----------------------------

@dataclass(frozen=True, slots=True)
class ContactFlags:
    """Onboarding checkboxes carried on the CRM contact."""
    licensed: bool = False
    xcel_account_created: bool = False
    xcel_started: bool = False
    xcel_paid: bool = False
    equita_profile: bool = False
    quility_profile: bool = False


@dataclass(frozen=True, slots=True)
class ContactRecord:
    """
    One CRM contact as handed over by the fetch layer.

    Identifier fields hold raw values; nothing here is normalized.
    ``opportunity`` and ``custom_fields`` are auxiliary payloads passed through
    to the output untouched.
    """
    id: str
    display_name: str = ""

    licensing_number: Optional[str] = None
    secondary_producer_id: Optional[str] = None
    email: Optional[str] = None

    upline_licensing_number: Optional[str] = None
    upline_secondary_producer_id: Optional[str] = None
    upline_email: Optional[str] = None
    upline_display_name: Optional[str] = None

    flags: ContactFlags = field(default_factory=ContactFlags)
    vendor: VendorAffiliation = VendorAffiliation.NONE

    licensing_state: Optional[str] = None
    source: Optional[str] = None
    phone: Optional[str] = None

    opportunity: Optional[Dict[str, Any]] = None
    custom_fields: Dict[str, Any] = field(default_factory=dict)

    def has_raw_upline(self) -> bool:
        return any(
            v is not None and str(v).strip() != ""
            for v in (
                self.upline_licensing_number,
                self.upline_secondary_producer_id,
                self.upline_email,
            )
        )


@dataclass(frozen=True, slots=True)
class NormalizedKeys:
    contact_id: str
    licensing_number: Optional[str] = None
    secondary_producer_id: Optional[str] = None
    email: Optional[str] = None
    upline_licensing_number: Optional[str] = None
    upline_secondary_producer_id: Optional[str] = None
    upline_email: Optional[str] = None

    @property
    def has_upline_number(self) -> bool:
        return bool(self.upline_licensing_number or self.upline_secondary_producer_id)


# -----------------------------
# Output nodes
# -----------------------------

@dataclass(slots=True)
class IssueFlags:
    missing_identifier: bool = False
    duplicate_identifier: bool = False
    upline_not_found: bool = False
    cycle_break: bool = False

    def any(self) -> bool:
        return (
            self.missing_identifier
            or self.duplicate_identifier
            or self.upline_not_found
            or self.cycle_break
        )

    def merge(self, other: "IssueFlags") -> None:
        self.missing_identifier |= other.missing_identifier
        self.duplicate_identifier |= other.duplicate_identifier
        self.upline_not_found |= other.upline_not_found
        self.cycle_break |= other.cycle_break


@dataclass(slots=True)
class BranchStatusSummary:
    active: int = 0
    pending: int = 0
    inactive: int = 0

    def add(self, status: NodeStatus) -> None:
        if status is NodeStatus.ACTIVE:
            self.active += 1
        elif status is NodeStatus.PENDING:
            self.pending += 1
        else:
            self.inactive += 1

    def absorb(self, other: "BranchStatusSummary") -> None:
        self.active += other.active
        self.pending += other.pending
        self.inactive += other.inactive


@dataclass(slots=True)
class ContactNode:
    """A real contact placed in the forest."""
    contact: ContactRecord
    parent_id: Optional[str] = None
    child_ids: List[str] = field(default_factory=list)

    upline_source: UplineSource = UplineSource.UNKNOWN
    upline_confidence: float = 0.0

    status: NodeStatus = NodeStatus.INACTIVE
    depth: int = 0
    descendant_count: int = 0
    branch_summary: BranchStatusSummary = field(default_factory=BranchStatusSummary)
    issues: IssueFlags = field(default_factory=IssueFlags)
    is_test_candidate: bool = False

    is_synthetic = False

    @property
    def id(self) -> str:
        return self.contact.id

    @property
    def label(self) -> str:
        return self.contact.display_name


@dataclass(slots=True)
class SyntheticNode:
    """
    Placeholder for an ambiguous (duplicate group) or unmatched upline value.

    ``key`` is the normalized identifier the placeholder stands for; it is the
    only identifier a synthetic node ever carries.
    """
    id: str
    kind: SyntheticKind
    key: str
    label: str
    member_ids: Tuple[str, ...] = ()

    parent_id: Optional[str] = None
    child_ids: List[str] = field(default_factory=list)

    upline_source: UplineSource = UplineSource.SYNTHETIC
    upline_confidence: float = 1.0

    depth: int = 0
    descendant_count: int = 0
    branch_summary: BranchStatusSummary = field(default_factory=BranchStatusSummary)

    is_synthetic = True


ResolvedNode = Union[ContactNode, SyntheticNode]


# -----------------------------
# Snapshot
# -----------------------------

@dataclass(frozen=True, slots=True)
class DuplicateGroup:
    identifier: IdentifierField
    value: str
    contact_ids: Tuple[str, ...]


@dataclass(slots=True)
class IssuesReport:
    missing_identifier: List[str] = field(default_factory=list)
    duplicate_identifier: List[str] = field(default_factory=list)
    upline_not_found: List[str] = field(default_factory=list)
    cycle_break: List[str] = field(default_factory=list)
    duplicate_groups: List[DuplicateGroup] = field(default_factory=list)

    def by_flag(self) -> Dict[str, List[str]]:
        return {
            "missingIdentifier": self.missing_identifier,
            "duplicateIdentifier": self.duplicate_identifier,
            "uplineNotFound": self.upline_not_found,
            "cycleBreak": self.cycle_break,
        }


@dataclass(slots=True)
class SnapshotStats:
    root_count: int = 0
    total_contacts: int = 0
    resolved_count: int = 0
    producer_count: int = 0
    vendor_flagged_count: int = 0
    synthetic_count: int = 0
    test_candidate_count: int = 0


@dataclass(slots=True)
class Snapshot:
    """
    Output of one build: the forest plus stats and issues.

    ``nodes`` preserves insertion order: contacts in input order, then
    synthetic nodes in creation order.
    """
    root_ids: List[str] = field(default_factory=list)
    nodes: Dict[str, ResolvedNode] = field(default_factory=dict)
    stats: SnapshotStats = field(default_factory=SnapshotStats)
    issues: IssuesReport = field(default_factory=IssuesReport)
    fallback_root_id: Optional[str] = None

    def contact_nodes(self) -> List[ContactNode]:
        return [n for n in self.nodes.values() if isinstance(n, ContactNode)]

    def synthetic_nodes(self) -> List[SyntheticNode]:
        return [n for n in self.nodes.values() if isinstance(n, SyntheticNode)]
