"""Report view data models."""
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class EnrollmentMode(str, Enum):
    """How "enrolled within the range" is decided."""

    TOU_COMPLETION = "tou_completion"
    REGISTRATION_DATE = "registration_date"

    @classmethod
    def parse(cls, value) -> "EnrollmentMode":
        """
        Resolve a mode from its value or a UI alias.

        Raises:
            ValueError: If the value names no mode
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ValueError(f"Unknown enrollment mode: {value!r}")
        aliases = {"by-tou": cls.TOU_COMPLETION, "by-registration": cls.REGISTRATION_DATE}
        if value in aliases:
            return aliases[value]
        return cls(value)


@dataclass
class EnrollmentSummaryRow:
    """Per Cohort-Year counts for one organization."""

    cohort: str
    year: str
    enrollments: int = 0
    completed: int = 0
    certificates: int = 0

    @property
    def key(self) -> str:
        return f"{self.cohort}-{self.year}"


@dataclass
class EnrolledParticipant:
    days_to_close: str
    cohort: str
    year: str
    first: str
    last: str
    email: str
    completed: bool = False
    certificate: bool = False


@dataclass
class InvitedParticipant:
    invited: str
    cohort: str
    year: str
    first: str
    last: str
    email: str


@dataclass
class CertificateEarner:
    cohort: str
    year: str
    first: str
    last: str
    email: str


@dataclass
class OrgDashboard:
    """All four dashboard tables for one organization."""

    organization: str
    enrollment_summary: List[EnrollmentSummaryRow] = field(default_factory=list)
    enrolled: List[EnrolledParticipant] = field(default_factory=list)
    invited: List[InvitedParticipant] = field(default_factory=list)
    certificates_earned: List[CertificateEarner] = field(default_factory=list)
    as_of_timestamp: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class SystemwideRollup:
    registrations_count: int
    enrollments_count: int
    certificates_count: int
    enrollment_mode: str = EnrollmentMode.TOU_COMPLETION.value

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class OrganizationCounts:
    organization: str
    registrations: int = 0
    enrollments: int = 0
    certificates: int = 0
    organization_display: str = ""

    def __post_init__(self):
        if not self.organization_display:
            self.organization_display = self.organization


@dataclass
class GroupCounts:
    group: str
    registrations: int = 0
    enrollments: int = 0
    certificates: int = 0


@dataclass
class ReportTables:
    """Systemwide, organization and group rollups built from one filtered dataset."""

    systemwide: SystemwideRollup
    organizations: List[OrganizationCounts] = field(default_factory=list)
    groups: List[GroupCounts] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class RefreshSummary:
    """Counts read back from the derived caches after a refresh."""

    registrations: int
    enrollments: int
    certificates: int


@dataclass
class RefreshOutcome:
    refreshed: bool
    summary: Optional[RefreshSummary] = None


@dataclass
class CacheStatus:
    timestamp: Optional[str]
    needs_refresh: bool
    registrations_count: int
    enrollments_count: int
    certificates_count: int
