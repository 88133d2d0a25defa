"""Ingestion and refresh of enterprise caches from the spreadsheet source."""
import logging
from typing import List, Optional

from registrant_reports.models.record import Field, Row, get_field, normalize_row
from registrant_reports.models.report import CacheStatus, RefreshOutcome, RefreshSummary
from registrant_reports.models.snapshot import DERIVED_DATASETS, BareSnapshot, Dataset
from registrant_reports.models.tenant import TenantConfig
from registrant_reports.services.cache_store import CacheStore
from registrant_reports.services.demo_service import transform_for_tenant
from registrant_reports.services.sheets_source import SpreadsheetSource
from registrant_reports.utils.error_messages import user_message_for
from registrant_reports.utils.exceptions import CacheCorruptError, UpstreamFetchError

logger = logging.getLogger(__name__)

REGISTRANTS_SHEET = "registrants"
SUBMISSIONS_SHEET = "submissions"


def derive_registrations(submissions: List[Row]) -> List[Row]:
    """Every submission row, stringified."""
    return [normalize_row(row) for row in submissions]


def derive_enrollments(registrants: List[Row]) -> List[Row]:
    """Registrants whose Enrolled cell is exactly "Yes"."""
    return [row for row in registrants if get_field(row, Field.ENROLLED) == "Yes"]


def derive_certificates(registrants: List[Row]) -> List[Row]:
    """Registrants whose Certificate cell is exactly "Yes"."""
    return [row for row in registrants if get_field(row, Field.CERTIFICATE) == "Yes"]


def refresh_result_message(error: Exception) -> str:
    """Generic message to show when a refresh fails."""
    return user_message_for(error)


class RefreshService:
    """
    Keeps an enterprise's raw and derived caches current.

    Raw snapshots are fetched from the source, transformed for the demo
    enterprise, stamped and written; derived snapshots are regenerated from
    them on every refresh.
    """

    def __init__(self, store: CacheStore, source: SpreadsheetSource):
        self.store = store
        self.source = source

    def needs_refresh(self, tenant: TenantConfig, ttl_seconds: Optional[int] = None) -> bool:
        """True when the registrants snapshot is missing, unreadable or older than the TTL."""
        ttl = tenant.ttl_seconds if ttl_seconds is None else ttl_seconds
        return self.store.is_stale(tenant.code, Dataset.REGISTRANTS, ttl)

    def force_refresh(self, tenant: TenantConfig) -> RefreshSummary:
        """
        Refetch both sheets and rebuild every dataset of an enterprise.

        Both sheets are fetched before anything is written, so a failed fetch
        leaves every cache file as it was.

        Args:
            tenant: Enterprise to refresh

        Returns:
            RefreshSummary with counts read back from the derived caches

        Raises:
            UpstreamFetchError: If either sheet cannot be fetched
            FileWriteError: If a cache file cannot be written
        """
        logger.info(f"Refreshing caches for {tenant.code}")

        with self.store.tenant_lock(tenant.code):
            registrants = self._fetch(tenant, REGISTRANTS_SHEET)
            submissions = self._fetch(tenant, SUBMISSIONS_SHEET)

            registrants = transform_for_tenant(tenant, registrants)
            submissions = transform_for_tenant(tenant, submissions)

            self.store.write_timestamped(tenant.code, Dataset.REGISTRANTS, registrants)
            self.store.write_timestamped(tenant.code, Dataset.SUBMISSIONS, submissions)
            self._write_derived(tenant.code, registrants, submissions)

            summary = RefreshSummary(
                registrations=len(self.store.read_rows(tenant.code, Dataset.REGISTRATIONS)),
                enrollments=len(self.store.read_rows(tenant.code, Dataset.ENROLLMENTS)),
                certificates=len(self.store.read_rows(tenant.code, Dataset.CERTIFICATES)),
            )

        logger.info(
            f"Refreshed {tenant.code}: {len(registrants)} registrants, {len(submissions)} submissions, "
            f"{summary.registrations} registrations, {summary.enrollments} enrollments, "
            f"{summary.certificates} certificates"
        )
        return summary

    def auto_refresh_if_needed(self, tenant: TenantConfig, ttl_seconds: Optional[int] = None) -> RefreshOutcome:
        """Refresh only when the registrants snapshot is stale."""
        if not self.needs_refresh(tenant, ttl_seconds):
            return RefreshOutcome(refreshed=False)
        return RefreshOutcome(refreshed=True, summary=self.force_refresh(tenant))

    def cache_status(self, tenant: TenantConfig) -> CacheStatus:
        """Timestamp, staleness and derived counts for the admin view."""
        try:
            timestamp = self.store.read_timestamp(tenant.code, Dataset.REGISTRANTS)
        except CacheCorruptError:
            timestamp = None

        counts = {}
        for dataset in DERIVED_DATASETS:
            try:
                counts[dataset] = len(self.store.read_rows(tenant.code, dataset))
            except CacheCorruptError:
                counts[dataset] = 0

        return CacheStatus(
            timestamp=timestamp,
            needs_refresh=self.needs_refresh(tenant),
            registrations_count=counts[Dataset.REGISTRATIONS],
            enrollments_count=counts[Dataset.ENROLLMENTS],
            certificates_count=counts[Dataset.CERTIFICATES],
        )

    def _fetch(self, tenant: TenantConfig, sheet: str) -> List[Row]:
        sheet_config = tenant.sheets.get(sheet)
        if sheet_config is None:
            raise UpstreamFetchError(f"No {sheet} sheet configured for {tenant.code}")

        try:
            rows = self.source.fetch_rows(
                sheet_config.workbook_id, sheet_config.sheet_name, sheet_config.start_row
            )
        except UpstreamFetchError:
            logger.error(f"Fetching {sheet} for {tenant.code} failed; caches left untouched")
            raise
        return [normalize_row(row) for row in rows]

    def _write_derived(self, code: str, registrants: List[Row], submissions: List[Row]) -> None:
        self.store.write(code, Dataset.REGISTRATIONS, BareSnapshot(derive_registrations(submissions)))
        self.store.write(code, Dataset.ENROLLMENTS, BareSnapshot(derive_enrollments(registrants)))
        self.store.write(code, Dataset.CERTIFICATES, BareSnapshot(derive_certificates(registrants)))
