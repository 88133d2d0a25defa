"""Tests for dashboard UI helpers."""
from unittest.mock import MagicMock, patch

import pytest

from registrant_reports.models.report import EnrolledParticipant, EnrollmentSummaryRow, RefreshOutcome
from registrant_reports.models.tenant import TenantConfig
from registrant_reports.ui.dashboard import ENROLLED_COLUMNS, SUMMARY_COLUMNS, _auto_refresh, _table_rows
from registrant_reports.utils.error_messages import GOOGLE_SERVICES_ISSUE, TECHNICAL_DIFFICULTIES
from registrant_reports.utils.exceptions import RefreshLockTimeoutError, UpstreamFetchError


class TestTableRows:
    """Tests for dataclass-to-table conversion."""

    def test_headers_follow_column_order(self):
        """Rows should use display headers in declared order."""
        rows = _table_rows([EnrollmentSummaryRow("08", "24", enrollments=3, completed=1, certificates=2)],
                           SUMMARY_COLUMNS)

        assert list(rows[0]) == ["Cohort", "Year", "Enrollments", "Completed", "Certificates"]
        assert rows[0]["Enrollments"] == 3

    def test_flags_kept_as_booleans(self):
        """Completed and certificate flags should stay booleans for checkbox rendering."""
        participant = EnrolledParticipant("5", "08", "24", "Ada", "Lovelace", "ada@example.com",
                                          completed=False, certificate=True)
        [row] = _table_rows([participant], ENROLLED_COLUMNS)

        assert row["Days to Close"] == "5"
        assert row["Certificate"] is True
        assert row["Completed"] is False

    def test_empty(self):
        """No items should give no rows."""
        assert _table_rows([], SUMMARY_COLUMNS) == []


class TestAutoRefresh:
    """Tests for the pre-render refresh."""

    @pytest.fixture
    def st(self):
        with patch("registrant_reports.ui.dashboard.st") as mock_st:
            yield mock_st

    @pytest.fixture
    def tenant(self):
        return TenantConfig(code="tst", start_date="01-01-22")

    @pytest.mark.parametrize("error,message", [
        (UpstreamFetchError("down", service_unavailable=True), GOOGLE_SERVICES_ISSUE),
        (UpstreamFetchError("Google authentication failed"), TECHNICAL_DIFFICULTIES),
        (RefreshLockTimeoutError("tst", 30.0), TECHNICAL_DIFFICULTIES),
    ])
    def test_failure_falls_back_to_cached_data(self, st, tenant, error, message):
        """Refresh failures should warn and let the page render cached data."""
        services = MagicMock()
        services.refresh.auto_refresh_if_needed.side_effect = error

        _auto_refresh(services, tenant)

        st.warning.assert_called_once_with(message)

    def test_disabled_refresh_is_skipped(self, st, tenant):
        """No refresh service should mean no refresh attempt."""
        services = MagicMock()
        services.refresh = None

        _auto_refresh(services, tenant)

        st.spinner.assert_not_called()

    def test_fresh_cache_shows_no_warning(self, st, tenant):
        """A fresh cache should render silently."""
        services = MagicMock()
        services.refresh.auto_refresh_if_needed.return_value = RefreshOutcome(refreshed=False)

        _auto_refresh(services, tenant)

        st.warning.assert_not_called()
