"""
Google Sheets ledger for contact inquiries.

Every inquiry that was successfully emailed is also appended as one row to a
spreadsheet, as a secondary audit trail.  The sheet's first row is checked
before each append and rewritten (with header formatting) when it does not
match ``HEADER``; doing so again on a correct sheet changes nothing.

Calls go straight to the Sheets v4 REST API through
``google.auth.transport.requests.AuthorizedSession``, which is a
``requests.Session`` that signs each request with the service account.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional
from urllib.parse import quote

import requests
from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import AuthorizedSession
from google.oauth2 import service_account

from API.Contact.errors import LedgerError

logger = logging.getLogger(__name__)

SHEETS_API = "https://sheets.googleapis.com/v4/spreadsheets"
SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]
TOKEN_URI = "https://oauth2.googleapis.com/token"
REQUEST_TIMEOUT = 20

HEADER = ["Timestamp", "Name", "Email", "Phone", "Message", "IP", "User Agent"]
SHEET_NAME = "Sheet1"
SHEET_GID = 0
HEADER_RANGE = f"{SHEET_NAME}!A1:G1"
APPEND_RANGE = f"{SHEET_NAME}!A1"

IST = timezone(timedelta(hours=5, minutes=30), "IST")


def format_ist_timestamp(now: Optional[datetime] = None) -> str:
    """Render ``now`` as ``DD-MM-YYYY hh:MM:SS AM IST`` in UTC+5:30."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(IST).strftime("%d-%m-%Y %I:%M:%S %p") + " IST"


def header_matches(row) -> bool:
    row = list(row or [])
    for index, expected in enumerate(HEADER):
        actual = row[index] if index < len(row) else ""
        if str(actual if actual is not None else "").strip().lower() != expected.lower():
            return False
    return True


def header_format_requests():
    columns = len(HEADER)
    return [
        {
            "repeatCell": {
                "range": {
                    "sheetId": SHEET_GID,
                    "startRowIndex": 0,
                    "endRowIndex": 1,
                    "startColumnIndex": 0,
                    "endColumnIndex": columns,
                },
                "cell": {
                    "userEnteredFormat": {
                        "textFormat": {"bold": True},
                        "backgroundColor": {"red": 0.95, "green": 0.95, "blue": 0.95},
                    }
                },
                "fields": "userEnteredFormat(textFormat,backgroundColor)",
            }
        },
        {
            "updateSheetProperties": {
                "properties": {"sheetId": SHEET_GID, "gridProperties": {"frozenRowCount": 1}},
                "fields": "gridProperties.frozenRowCount",
            }
        },
        {
            "autoResizeDimensions": {
                "dimensions": {
                    "sheetId": SHEET_GID,
                    "dimension": "COLUMNS",
                    "startIndex": 0,
                    "endIndex": columns,
                }
            }
        },
    ]


@dataclass(frozen=True)
class LedgerResult:
    appended: bool
    reason: Optional[str] = None
    error: Optional[LedgerError] = None

    @property
    def failed(self):
        return self.error is not None


class LedgerWriter:
    """Appends inquiries to the configured spreadsheet.

    ``session_factory`` takes the ``Config`` and returns a
    ``requests.Session``-like object; by default it signs requests with the
    configured service account.
    """

    def __init__(self, config, session_factory=None):
        self.config = config
        self.session_factory = session_factory or self._authorized_session

    @property
    def configured(self):
        return self.config.ledger_configured

    @staticmethod
    def _authorized_session(config):
        info = {
            "type": "service_account",
            "client_email": config.GOOGLE_CLIENT_EMAIL,
            "private_key": config.private_key,
            "token_uri": TOKEN_URI,
        }
        credentials = service_account.Credentials.from_service_account_info(info, scopes=SCOPES)
        return AuthorizedSession(credentials)

    def _values_url(self, cell_range):
        return f"{SHEETS_API}/{self.config.GOOGLE_SHEET_ID}/values/{quote(cell_range, safe='!:')}"

    def read_header(self, session):
        try:
            response = session.get(self._values_url(HEADER_RANGE), timeout=REQUEST_TIMEOUT)
            response.raise_for_status()
        except (requests.RequestException, GoogleAuthError) as e:
            logger.warning(f"Could not read ledger header, rewriting it: {e}")
            return []

        values = response.json().get("values") or []
        return values[0] if values else []

    def ensure_header(self, session):
        """Rewrite and format the header row unless it already matches.

        Returns True when a correction was written.
        """
        if header_matches(self.read_header(session)):
            return False

        logger.info(f"Provisioning ledger header on sheet {self.config.GOOGLE_SHEET_ID}")
        response = session.put(
            self._values_url(HEADER_RANGE),
            params={"valueInputOption": "RAW"},
            json={"values": [HEADER]},
            timeout=REQUEST_TIMEOUT,
        )
        response.raise_for_status()

        response = session.post(
            f"{SHEETS_API}/{self.config.GOOGLE_SHEET_ID}:batchUpdate",
            json={"requests": header_format_requests()},
            timeout=REQUEST_TIMEOUT,
        )
        response.raise_for_status()
        return True

    def build_row(self, inquiry, now=None):
        return [
            format_ist_timestamp(now),
            inquiry.name,
            inquiry.email,
            inquiry.phone or "",
            inquiry.message,
            inquiry.ip or "",
            inquiry.user_agent or "",
        ]

    def append(self, inquiry, now=None) -> LedgerResult:
        """Append one row for ``inquiry``.

        Returns a non-appended result when the ledger is not configured.

        Raises:
            LedgerError: Authentication, header provisioning or the append failed.
        """
        if not self.configured:
            return LedgerResult(appended=False, reason="Google Sheets not configured")

        try:
            session = self.session_factory(self.config)
            self.ensure_header(session)
            response = session.post(
                f"{self._values_url(APPEND_RANGE)}:append",
                params={"valueInputOption": "RAW", "insertDataOption": "INSERT_ROWS"},
                json={"values": [self.build_row(inquiry, now)]},
                timeout=REQUEST_TIMEOUT,
            )
            response.raise_for_status()
        except (requests.RequestException, GoogleAuthError, ValueError) as e:
            raise LedgerError(str(e) or e.__class__.__name__) from e

        return LedgerResult(appended=True)


def record_inquiry(writer, inquiry) -> LedgerResult:
    """Best-effort append; a failure comes back as a failed ``LedgerResult``."""
    try:
        return writer.append(inquiry)
    except LedgerError as e:
        return LedgerResult(appended=False, reason="Ledger append failed", error=e)
    except Exception as e:
        logger.exception("Unexpected error while appending to the ledger")
        return LedgerResult(appended=False, reason="Ledger append failed", error=LedgerError(str(e)))
