"""Admin panel: cache status, manual refresh and cache clearing."""
import logging
import traceback

import streamlit as st

from registrant_reports.models.tenant import TenantConfig
from registrant_reports.services.refresh_service import refresh_result_message
from registrant_reports.ui.context import AppServices
from registrant_reports.utils.exceptions import ReportsError

logger = logging.getLogger(__name__)


def _show_admin_exception(error: Exception, context: str) -> None:
    """Show the generic message and log the full traceback."""
    logger.exception("Admin panel error during %s", context)

    st.error(f"❌ {refresh_result_message(error)}")
    with st.expander("🔍 Error details"):
        st.code("".join(traceback.format_exception(type(error), error, error.__traceback__)))


def _render_status(services: AppServices, tenant: TenantConfig) -> None:
    if services.refresh is None:
        st.warning("Google credentials are not configured; refresh is disabled.")
        return

    status = services.refresh.cache_status(tenant)
    st.markdown(f"**Last refreshed:** {status.timestamp or 'never'}")
    if status.needs_refresh:
        st.warning("Cache is stale.")
    else:
        st.success("Cache is current.")

    cols = st.columns(3)
    cols[0].metric("Registrations", status.registrations_count)
    cols[1].metric("Enrollments", status.enrollments_count)
    cols[2].metric("Certificates", status.certificates_count)


def _render_actions(services: AppServices, tenant: TenantConfig) -> None:
    action_cols = st.columns(2, gap="small")

    with action_cols[0]:
        if st.button("🔄 Refresh now", use_container_width=True, type="primary",
                     disabled=services.refresh is None, key="admin_refresh"):
            try:
                with st.spinner("Refreshing from Google Sheets..."):
                    summary = services.refresh.force_refresh(tenant)
                st.success(
                    f"✅ Refreshed: {summary.registrations} registrations, "
                    f"{summary.enrollments} enrollments, {summary.certificates} certificates"
                )
            except ReportsError as e:
                _show_admin_exception(e, "refresh")

    with action_cols[1]:
        if st.button("🗑️ Clear cache", use_container_width=True, key="admin_clear"):
            if services.store.clear_all(tenant.code):
                st.success("✅ Cache cleared")
            else:
                st.error("❌ Some cache files could not be deleted")


def render_admin_panel(services: AppServices) -> None:
    """Page entry for cache administration of the current enterprise."""
    code = st.session_state.get("enterprise_code")
    if not code:
        st.info("Select an enterprise in the sidebar.")
        return

    tenant = services.config_provider.get(code)
    st.markdown(f"### {tenant.display_name} Cache")
    _render_status(services, tenant)
    st.divider()
    _render_actions(services, tenant)
