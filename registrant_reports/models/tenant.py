"""Enterprise (tenant) configuration models."""
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from registrant_reports.utils.date_utils import is_valid_mmddyy

DEFAULT_TTL_SECONDS = 3 * 60 * 60
DEMO_ENTERPRISE_CODE = "demo"


@dataclass
class SheetConfig:
    """Location of one sheet in the spreadsheet source."""

    workbook_id: str
    sheet_name: str
    start_row: int = 2

    def __post_init__(self):
        """Validate sheet location."""
        if not self.workbook_id or not self.workbook_id.strip():
            raise ValueError("Workbook ID cannot be empty")
        if not self.sheet_name or not self.sheet_name.strip():
            raise ValueError("Sheet name cannot be empty")
        if not isinstance(self.start_row, int) or self.start_row < 1:
            raise ValueError(f"start_row must be a positive integer, got {self.start_row!r}")


@dataclass
class Organization:
    """Organization belonging to an enterprise."""

    name: str
    tenant_code: str
    is_admin: bool = False


@dataclass
class TenantConfig:
    """Everything the cache and report pipeline needs to know about an enterprise."""

    code: str
    start_date: str
    display_name: str = ""
    ttl_seconds: int = DEFAULT_TTL_SECONDS
    organizations: List[str] = field(default_factory=list)
    groups: Dict[str, List[str]] = field(default_factory=dict)
    is_demo: bool = False
    sheets: Dict[str, SheetConfig] = field(default_factory=dict)
    admin_organization: Optional[str] = None

    def __post_init__(self):
        """Validate tenant configuration."""
        if not isinstance(self.code, str) or not re.match(r"^[a-z]{3,4}$", self.code):
            raise ValueError(f"Enterprise code must be 3-4 lowercase letters: {self.code!r}")

        if not is_valid_mmddyy(self.start_date):
            raise ValueError(f"start_date must be a valid MM-DD-YY date: {self.start_date!r}")

        if not isinstance(self.ttl_seconds, int) or self.ttl_seconds < 0:
            raise ValueError(f"ttl_seconds must be a non-negative integer, got {self.ttl_seconds!r}")

        if len(set(self.organizations)) != len(self.organizations):
            raise ValueError("Organization names must be unique")

        if self.code == DEMO_ENTERPRISE_CODE:
            self.is_demo = True

        if not self.display_name:
            self.display_name = self.code.upper()

    def organization_records(self) -> List[Organization]:
        """Organizations as records, admin organization first when configured."""
        records = []
        if self.admin_organization:
            records.append(Organization(self.admin_organization, self.code, is_admin=True))
        records.extend(Organization(name, self.code) for name in self.organizations)
        return records


def organization_to_group(groups: Dict[str, List[str]]) -> Dict[str, str]:
    """Invert a group → members mapping into an organization → group lookup."""
    lookup: Dict[str, str] = {}
    for group, members in groups.items():
        for member in members:
            lookup[member] = group
    return lookup
