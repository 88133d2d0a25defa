"""Spreadsheet source for registrant and submission rows."""
import logging
from typing import List, Optional, Protocol

import gspread
import requests
from google.auth import exceptions as auth_exceptions
from google.oauth2.service_account import Credentials

from registrant_reports.models.record import Row, normalize_row
from registrant_reports.utils.exceptions import UpstreamFetchError

logger = logging.getLogger(__name__)

SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets.readonly",
    "https://www.googleapis.com/auth/drive.readonly",
]

# HTTP statuses treated as a temporary Google outage rather than a misconfiguration
SERVICE_UNAVAILABLE_STATUSES = {500, 502, 503, 504}


class SpreadsheetSource(Protocol):
    """Anything able to return the rows of a sheet."""

    def fetch_rows(self, source_id: str, sheet_name: str, start_row: int) -> List[Row]:
        """
        Return trimmed rows at or after start_row (1-based).

        Raises:
            UpstreamFetchError: If the rows cannot be fetched
        """
        ...


class GoogleSheetsSource:
    """
    Google Sheets implementation of :class:`SpreadsheetSource` via gspread.

    Authenticates with a service account file when one is given, otherwise
    with an API key (the sheet must then be readable by link).
    """

    def __init__(self, api_key: Optional[str] = None, service_account_file: Optional[str] = None):
        if not api_key and not service_account_file:
            raise ValueError("Either api_key or service_account_file is required")
        self._api_key = api_key
        self._service_account_file = service_account_file
        self._client: Optional[gspread.Client] = None

    def _get_client(self) -> gspread.Client:
        if self._client is None:
            if self._service_account_file:
                try:
                    credentials = Credentials.from_service_account_file(
                        self._service_account_file, scopes=SCOPES
                    )
                except (OSError, ValueError) as e:
                    logger.error(f"Cannot load service account file {self._service_account_file}: {e}")
                    raise UpstreamFetchError("Cannot load service account credentials") from e
                self._client = gspread.authorize(credentials)
            else:
                self._client = gspread.api_key(self._api_key)
        return self._client

    def fetch_rows(self, source_id: str, sheet_name: str, start_row: int) -> List[Row]:
        """Fetch every row of a worksheet starting at start_row."""
        logger.info(f"Fetching sheet '{sheet_name}' from workbook {source_id[:8]}... (start row {start_row})")
        try:
            worksheet = self._get_client().open_by_key(source_id).worksheet(sheet_name)
            values = worksheet.get_all_values()
        except gspread.exceptions.APIError as e:
            status = getattr(getattr(e, "response", None), "status_code", None)
            logger.warning(f"Google Sheets API error {status} for sheet '{sheet_name}': {e}")
            raise UpstreamFetchError(
                f"Google Sheets API error {status}",
                service_unavailable=status in SERVICE_UNAVAILABLE_STATUSES,
            ) from e
        except requests.exceptions.RequestException as e:
            logger.warning(f"HTTP request failed for sheet '{sheet_name}': {e}")
            raise UpstreamFetchError("HTTP request failed", service_unavailable=True) from e
        except auth_exceptions.TransportError as e:
            logger.warning(f"Google auth transport failed for sheet '{sheet_name}': {e}")
            raise UpstreamFetchError("Google authentication unreachable", service_unavailable=True) from e
        except auth_exceptions.GoogleAuthError as e:
            logger.warning(f"Google authentication failed for sheet '{sheet_name}': {e}")
            raise UpstreamFetchError("Google authentication failed") from e
        except gspread.exceptions.GSpreadException as e:
            logger.warning(f"Cannot open sheet '{sheet_name}': {e}")
            raise UpstreamFetchError(f"Cannot open sheet {sheet_name}") from e

        return [normalize_row(row) for row in values[max(start_row - 1, 0):]]
