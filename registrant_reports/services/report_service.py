"""Report views served to the dashboard, reports and admin pages."""
import logging
from typing import Dict, List, Tuple

from registrant_reports.models.report import (
    EnrollmentMode,
    GroupCounts,
    OrgDashboard,
    OrganizationCounts,
    ReportTables,
    SystemwideRollup,
)
from registrant_reports.models.snapshot import Dataset
from registrant_reports.models.tenant import TenantConfig
from registrant_reports.services import aggregation_service
from registrant_reports.services.cache_store import CacheStore
from registrant_reports.services.config_service import TenantConfigProvider
from registrant_reports.services.demo_service import demo_organization_name
from registrant_reports.utils.date_utils import parse_date
from registrant_reports.utils.exceptions import ValidationError
from registrant_reports.utils.validation import (
    validate_date_range,
    validate_enterprise_code,
    validate_range_basis,
)

logger = logging.getLogger(__name__)


class ReportService:
    """
    Read-only report facade over the cache store.

    Absent caches read as empty datasets; corrupt caches raise
    CacheCorruptError so callers can show the generic failure message.
    """

    def __init__(self, store: CacheStore, config_provider: TenantConfigProvider):
        self.store = store
        self.config_provider = config_provider

    def get_org_data(self, tenant_code: str, organization_name: str) -> OrgDashboard:
        """
        Dashboard tables for one organization over all cached registrants.

        Args:
            tenant_code: Enterprise code
            organization_name: Configured organization name (demo suffix added for the sandbox)

        Returns:
            OrgDashboard with the registrants snapshot timestamp
        """
        validate_enterprise_code(tenant_code)
        tenant = self.config_provider.get(tenant_code)
        if tenant.is_demo:
            organization_name = demo_organization_name(organization_name)
        rows = self.store.read_rows(tenant_code, Dataset.REGISTRANTS)
        as_of = self.store.read_timestamp(tenant_code, Dataset.REGISTRANTS)
        return aggregation_service.build_org_dashboard(rows, organization_name, as_of)

    def get_systemwide_rollup(self, tenant_code: str, start: str, end: str,
                              mode=EnrollmentMode.TOU_COMPLETION) -> SystemwideRollup:
        return self.get_report_tables(tenant_code, start, end, mode).systemwide

    def get_all_organizations_rollup(self, tenant_code: str, start: str, end: str,
                                     mode=EnrollmentMode.TOU_COMPLETION) -> List[OrganizationCounts]:
        return self.get_report_tables(tenant_code, start, end, mode).organizations

    def get_groups_rollup(self, tenant_code: str, start: str, end: str,
                          mode=EnrollmentMode.TOU_COMPLETION) -> List[GroupCounts]:
        """Group rollup; empty when the enterprise declares no groups."""
        return self.get_report_tables(tenant_code, start, end, mode).groups

    def get_report_tables(self, tenant_code: str, start: str, end: str,
                          mode=EnrollmentMode.TOU_COMPLETION, range_basis: str = "date") -> ReportTables:
        """
        Systemwide, organization and group rollups for a date range.

        Args:
            tenant_code: Enterprise code
            start: Range start, MM-DD-YY
            end: Range end, MM-DD-YY
            mode: EnrollmentMode or its value/alias
            range_basis: "date" or "cohort"

        Returns:
            ReportTables computed from one filtering pass

        Raises:
            InvalidEnterpriseCodeError: If the code is malformed
            InvalidDateFormatError: If a date is invalid or start > end
            ValidationError: If the mode or range basis is unknown
            TenantConfigMissingError: If the enterprise is not configured
            CacheCorruptError: If a cache file is unreadable
        """
        validate_enterprise_code(tenant_code)
        start, end = validate_date_range(start, end)
        validate_range_basis(range_basis)
        try:
            mode = EnrollmentMode.parse(mode)
        except ValueError as e:
            raise ValidationError(f"Unknown enrollment mode: {mode}") from e

        tenant = self.config_provider.get(tenant_code)
        start, end = self._clamp_range(tenant, start, end)

        registrants = self.store.read_rows(tenant_code, Dataset.REGISTRANTS)
        registrations = self.store.read_rows(tenant_code, Dataset.REGISTRATIONS)
        certificates = self.store.read_rows(tenant_code, Dataset.CERTIFICATES)

        return aggregation_service.build_all_tables(
            registrants,
            registrations,
            certificates,
            start,
            end,
            mode,
            organizations=self._organization_names(tenant),
            groups=self._group_members(tenant),
            range_basis=range_basis,
        )

    @staticmethod
    def _clamp_range(tenant: TenantConfig, start: str, end: str) -> Tuple[str, str]:
        # Nothing exists before the enterprise start date.
        if parse_date(start) < parse_date(tenant.start_date):
            logger.debug(f"Clamping start {start} to {tenant.code} start date {tenant.start_date}")
            start = tenant.start_date
        return start, end

    @staticmethod
    def _organization_names(tenant: TenantConfig) -> List[str]:
        # Demo rows carry the transformed names, so configuration must match them.
        if not tenant.is_demo:
            return list(tenant.organizations)
        return [demo_organization_name(name) for name in tenant.organizations]

    @staticmethod
    def _group_members(tenant: TenantConfig) -> Dict[str, List[str]]:
        if not tenant.is_demo:
            return tenant.groups
        return {
            group: [demo_organization_name(name) for name in members]
            for group, members in tenant.groups.items()
        }
