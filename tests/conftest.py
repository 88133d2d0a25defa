"""Shared fixtures for registrant report tests."""
from datetime import datetime
from typing import Dict, List

import pytest

from registrant_reports.models.record import FIELD_COUNT, Field, field_index
from registrant_reports.models.tenant import SheetConfig, TenantConfig
from registrant_reports.services.cache_store import CacheStore
from registrant_reports.utils.date_utils import CACHE_TIMEZONE
from registrant_reports.utils.exceptions import UpstreamFetchError


class FakeClock:
    """Settable clock in the cache timezone."""

    def __init__(self, moment: datetime):
        self.moment = moment

    def __call__(self) -> datetime:
        return self.moment

    def set(self, *args) -> None:
        self.moment = datetime(*args, tzinfo=CACHE_TIMEZONE)


class FakeSheetsSource:
    """In-memory spreadsheet source keyed by sheet name."""

    def __init__(self, sheets: Dict[str, List[List[str]]] = None):
        self.sheets = sheets or {}
        self.failing = {}
        self.calls = []

    def fail(self, sheet_name: str, service_unavailable: bool = False) -> None:
        self.failing[sheet_name] = service_unavailable

    def fetch_rows(self, source_id, sheet_name, start_row):
        self.calls.append((source_id, sheet_name, start_row))
        if sheet_name in self.failing:
            raise UpstreamFetchError(
                f"Cannot open sheet {sheet_name}",
                service_unavailable=self.failing[sheet_name],
            )
        return [list(row) for row in self.sheets.get(sheet_name, [])]


def build_row(**cells) -> List[str]:
    """17-field row; keyword names are field names, e.g. Organization="Acme"."""
    row = [""] * FIELD_COUNT
    for name, value in cells.items():
        row[field_index(Field(name))] = value
    return row


@pytest.fixture
def make_row():
    """Row builder addressing cells by field name."""
    return build_row


@pytest.fixture
def clock():
    """Clock fixed at 01-01-24 1:00 PM Pacific."""
    return FakeClock(datetime(2024, 1, 1, 13, 0, tzinfo=CACHE_TIMEZONE))


@pytest.fixture
def store(tmp_path, clock):
    """Cache store rooted in a temporary directory."""
    return CacheStore(str(tmp_path / "cache"), clock=clock)


@pytest.fixture
def tenant():
    """Enterprise with two organizations in one group."""
    return TenantConfig(
        code="tst",
        start_date="01-01-22",
        organizations=["Acme", "Beta Community College"],
        groups={"Main": ["Acme", "Beta Community College"]},
        sheets={
            "registrants": SheetConfig("wb-registrants", "Registrants"),
            "submissions": SheetConfig("wb-submissions", "Submissions"),
        },
    )


@pytest.fixture
def fake_source():
    return FakeSheetsSource()
