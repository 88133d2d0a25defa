"""Date-ranged systemwide, organization and group reports."""
import logging
from datetime import date
from typing import List

import streamlit as st

from registrant_reports.models.report import EnrollmentMode, ReportTables
from registrant_reports.ui.context import AppServices
from registrant_reports.utils.date_utils import DATE_FORMAT, parse_date, today_mmddyy
from registrant_reports.utils.validation import RANGE_BASES

logger = logging.getLogger(__name__)

MODE_LABELS = {
    EnrollmentMode.TOU_COMPLETION: "By TOU completion",
    EnrollmentMode.REGISTRATION_DATE: "By registration date",
}


def _to_mmddyy(value: date) -> str:
    return value.strftime(DATE_FORMAT)


def _totals_row(label: str, rows: List[dict]) -> dict:
    return {
        label: "Total",
        "Registrations": sum(row["Registrations"] for row in rows),
        "Enrollments": sum(row["Enrollments"] for row in rows),
        "Certificates": sum(row["Certificates"] for row in rows),
    }


def render_report_tables(tables: ReportTables) -> None:
    """Render systemwide metrics, the organization table and the group table."""
    systemwide = tables.systemwide
    metric_cols = st.columns(3)
    metric_cols[0].metric("Registrations", systemwide.registrations_count)
    metric_cols[1].metric("Enrollments", systemwide.enrollments_count)
    metric_cols[2].metric("Certificates", systemwide.certificates_count)

    st.markdown("#### Organizations")
    org_rows = [
        {
            "Organization": item.organization_display,
            "Registrations": item.registrations,
            "Enrollments": item.enrollments,
            "Certificates": item.certificates,
        }
        for item in tables.organizations
    ]
    if org_rows:
        st.dataframe(org_rows + [_totals_row("Organization", org_rows)],
                     use_container_width=True, hide_index=True)
    else:
        st.info("No organizations configured.")

    if tables.groups:
        st.markdown("#### Groups")
        group_rows = [
            {
                "Group": item.group,
                "Registrations": item.registrations,
                "Enrollments": item.enrollments,
                "Certificates": item.certificates,
            }
            for item in tables.groups
        ]
        st.dataframe(group_rows, use_container_width=True, hide_index=True)


def render_reports_page(services: AppServices) -> None:
    """Page entry: choose a range and enrollment mode, then show the rollups."""
    code = st.session_state.get("enterprise_code")
    if not code:
        st.info("Select an enterprise in the sidebar.")
        return

    tenant = services.config_provider.get(code)
    st.markdown(f"### {tenant.display_name} Reports")

    range_cols = st.columns(2)
    with range_cols[0]:
        start = st.date_input("Start date", value=parse_date(tenant.start_date), key="reports_start")
    with range_cols[1]:
        end = st.date_input("End date", value=parse_date(today_mmddyy()), key="reports_end")

    option_cols = st.columns(2)
    with option_cols[0]:
        mode = st.radio(
            "Count enrollments",
            list(MODE_LABELS),
            format_func=MODE_LABELS.get,
            horizontal=True,
            key="reports_mode",
        )
    with option_cols[1]:
        range_basis = st.radio("Range basis", RANGE_BASES, horizontal=True, key="reports_basis")

    tables = services.reports.get_report_tables(
        code, _to_mmddyy(start), _to_mmddyy(end), mode, range_basis=range_basis
    )
    render_report_tables(tables)
