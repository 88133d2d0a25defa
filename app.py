"""
Registrant Reports
Training-program enrollment dashboards and rollup reports
"""
import logging

import streamlit as st

from registrant_reports.ui.admin_panel import render_admin_panel
from registrant_reports.ui.context import AppServices, build_services
from registrant_reports.ui.dashboard import render_dashboard
from registrant_reports.ui.reports_page import render_reports_page
from registrant_reports.utils.error_messages import user_message_for

logger = logging.getLogger(__name__)


st.set_page_config(
    page_title="Registrant Reports",
    page_icon="📊",
    layout="wide",
    initial_sidebar_state="expanded"
)

PAGES = {
    "dashboard": ("🏠 Dashboard", render_dashboard),
    "reports": ("📈 Reports", render_reports_page),
    "admin": ("🛠️ Admin", render_admin_panel),
}


@st.cache_resource
def get_services() -> AppServices:
    """Build services once per server process."""
    return build_services()


def initialize_session_state():
    """Initialize session state defaults."""
    if "current_page" not in st.session_state:
        st.session_state.current_page = "dashboard"

    if "enterprise_code" not in st.session_state:
        st.session_state.enterprise_code = None

    if "organization" not in st.session_state:
        st.session_state.organization = None

    # Direct links: ?enterprise=csu&page=reports
    if "url_params_processed" not in st.session_state:
        query_params = st.query_params
        if "enterprise" in query_params:
            st.session_state.enterprise_code = query_params["enterprise"]
        if query_params.get("page") in PAGES:
            st.session_state.current_page = query_params["page"]
        st.session_state.url_params_processed = True


def render_sidebar(services: AppServices):
    """Enterprise picker."""
    codes = services.config_provider.available_codes()
    if not codes:
        st.sidebar.warning("No enterprise configurations found.")
        return

    current = st.session_state.enterprise_code
    code = st.sidebar.selectbox(
        "Enterprise",
        codes,
        index=codes.index(current) if current in codes else 0,
        format_func=str.upper,
        key="sidebar_enterprise",
    )
    if code != current:
        st.session_state.enterprise_code = code
        st.session_state.organization = None


def render_navigation():
    """Render page navigation buttons."""
    nav_cols = st.columns(len(PAGES), gap="small")
    for col, (page, (label, _)) in zip(nav_cols, PAGES.items()):
        with col:
            if st.button(label, use_container_width=True, key=f"nav_{page}"):
                st.session_state.current_page = page


def render_current_page(services: AppServices):
    """Render the page selected in session state."""
    try:
        page = PAGES.get(st.session_state.current_page)
        if page is None:
            st.error(f"Unknown page: {st.session_state.current_page}")
            if st.button("Back to dashboard"):
                st.session_state.current_page = "dashboard"
                st.rerun()
            return

        _, render = page
        render(services)

    except Exception as e:
        # Error boundary
        logger.exception("Unhandled exception while rendering page")
        st.error(user_message_for(e))

        if st.button("Back to dashboard"):
            st.session_state.current_page = "dashboard"
            st.rerun()


def main():
    """Application entry point."""
    try:
        initialize_session_state()
        services = get_services()
        render_sidebar(services)
        render_navigation()
        render_current_page(services)
    except Exception as e:
        logger.exception("Unhandled exception during app execution")
        st.error(user_message_for(e))

        if st.button("🔄 Reload"):
            st.session_state.clear()
            st.rerun()


if __name__ == "__main__":
    main()
