"""Organization dashboard page."""
import logging
from dataclasses import asdict
from typing import List

import streamlit as st

from registrant_reports.models.report import OrgDashboard
from registrant_reports.models.tenant import TenantConfig
from registrant_reports.ui.context import AppServices
from registrant_reports.utils.abbreviation import abbreviate_organization_name
from registrant_reports.utils.error_messages import user_message_for
from registrant_reports.utils.exceptions import ReportsError

logger = logging.getLogger(__name__)

SUMMARY_COLUMNS = {"cohort": "Cohort", "year": "Year", "enrollments": "Enrollments",
                   "completed": "Completed", "certificates": "Certificates"}
ENROLLED_COLUMNS = {"days_to_close": "Days to Close", "cohort": "Cohort", "year": "Year",
                    "first": "First", "last": "Last", "email": "Email",
                    "completed": "Completed", "certificate": "Certificate"}
INVITED_COLUMNS = {"invited": "Invited", "cohort": "Cohort", "year": "Year",
                   "first": "First", "last": "Last", "email": "Email"}
EARNER_COLUMNS = {"cohort": "Cohort", "year": "Year", "first": "First",
                  "last": "Last", "email": "Email"}


def _table_rows(items: List[object], columns: dict) -> List[dict]:
    """Rename dataclass fields to display headers."""
    rows = []
    for item in items:
        values = asdict(item)
        rows.append({label: values[key] for key, label in columns.items()})
    return rows


def _render_table(title: str, items: List[object], columns: dict, empty_text: str) -> None:
    st.markdown(f"#### {title}")
    if not items:
        st.info(empty_text)
        return
    st.dataframe(_table_rows(items, columns), use_container_width=True, hide_index=True)


def _auto_refresh(services: AppServices, tenant: TenantConfig) -> None:
    """Refresh stale caches before rendering; failures fall back to cached data."""
    if services.refresh is None:
        return
    try:
        with st.spinner("Updating data..."):
            outcome = services.refresh.auto_refresh_if_needed(tenant)
        if outcome.refreshed:
            logger.info(f"Auto-refreshed {tenant.code} before dashboard render")
    except ReportsError as e:
        logger.warning(f"Auto-refresh for {tenant.code} failed: {e}")
        st.warning(user_message_for(e))


def render_org_dashboard(dashboard: OrgDashboard) -> None:
    """Render the four dashboard tables for one organization."""
    st.markdown(f"### {abbreviate_organization_name(dashboard.organization)}")
    if dashboard.as_of_timestamp:
        st.caption(f"Data as of {dashboard.as_of_timestamp}")

    _render_table("Enrollment Summary", dashboard.enrollment_summary, SUMMARY_COLUMNS,
                  "No enrollments yet.")
    _render_table("Enrolled Participants", dashboard.enrolled, ENROLLED_COLUMNS,
                  "No open enrollments.")
    _render_table("Invited Participants", dashboard.invited, INVITED_COLUMNS,
                  "No outstanding invitations.")
    _render_table("Certificates Earned", dashboard.certificates_earned, EARNER_COLUMNS,
                  "No certificates earned yet.")


def render_dashboard(services: AppServices) -> None:
    """Page entry: pick an organization of the current enterprise and show its dashboard."""
    code = st.session_state.get("enterprise_code")
    if not code:
        st.info("Select an enterprise in the sidebar.")
        return

    tenant = services.config_provider.get(code)
    records = tenant.organization_records()
    if not records:
        st.warning("No organizations are configured for this enterprise.")
        return

    names = [record.name for record in records]
    organization = st.selectbox(
        "Organization",
        names,
        index=names.index(st.session_state.organization) if st.session_state.get("organization") in names else 0,
        format_func=abbreviate_organization_name,
        key="dashboard_organization",
    )
    st.session_state.organization = organization

    _auto_refresh(services, tenant)
    render_org_dashboard(services.reports.get_org_data(code, organization))
