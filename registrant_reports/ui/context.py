"""Service wiring shared by the Streamlit pages."""
import logging
from dataclasses import dataclass
from typing import Optional

from registrant_reports.services.cache_store import CacheStore
from registrant_reports.services.config_service import Settings, TenantConfigProvider, load_settings
from registrant_reports.services.refresh_service import RefreshService
from registrant_reports.services.report_service import ReportService
from registrant_reports.services.sheets_source import GoogleSheetsSource

logger = logging.getLogger(__name__)


@dataclass
class AppServices:
    settings: Settings
    store: CacheStore
    config_provider: TenantConfigProvider
    reports: ReportService
    refresh: Optional[RefreshService]


def build_services(settings: Optional[Settings] = None) -> AppServices:
    """
    Wire store, configuration, report and refresh services from settings.

    Refresh is unavailable (None) when no Google credentials are configured;
    reports then serve whatever is already cached.
    """
    settings = settings or load_settings()
    store = CacheStore(settings.cache_dir)
    config_provider = TenantConfigProvider(settings.config_dir)

    refresh = None
    if settings.google_api_key or settings.service_account_file:
        source = GoogleSheetsSource(
            api_key=settings.google_api_key,
            service_account_file=settings.service_account_file,
        )
        refresh = RefreshService(store, source)
    else:
        logger.warning("No Google credentials configured; cache refresh disabled")

    return AppServices(
        settings=settings,
        store=store,
        config_provider=config_provider,
        reports=ReportService(store, config_provider),
        refresh=refresh,
    )
