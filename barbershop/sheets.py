# barbershop/sheets.py

import logging
import threading
import time
from typing import Optional
from urllib.parse import quote

import httpx
from jose import jwt, JOSEError

from .config import Settings

logger = logging.getLogger(__name__)

GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
SHEETS_API = "https://sheets.googleapis.com/v4/spreadsheets"
SHEETS_SCOPE = "https://www.googleapis.com/auth/spreadsheets"
JWT_BEARER_GRANT = "urn:ietf:params:oauth:grant-type:jwt-bearer"

# Refresh the access token this many seconds before Google expires it
TOKEN_REFRESH_MARGIN = 60


class SheetsError(Exception):
    """The spreadsheet could not be reached or rejected the request."""


class SheetsClient:
    def __init__(
        self,
        spreadsheet_id: str,
        service_account_email: str,
        private_key: str,
        http_client: Optional[httpx.Client] = None,
    ):
        self.spreadsheet_id = spreadsheet_id
        self.service_account_email = service_account_email
        self.private_key = private_key
        self.http = http_client or httpx.Client(timeout=15.0)

        self._token: Optional[str] = None
        self._token_expires_at = 0.0
        self._token_lock = threading.Lock()

    def _signed_assertion(self, now: int) -> str:
        claims = {
            "iss": self.service_account_email,
            "scope": SHEETS_SCOPE,
            "aud": GOOGLE_TOKEN_URL,
            "iat": now,
            "exp": now + 3600,
        }
        try:
            return jwt.encode(claims, self.private_key, algorithm="RS256")
        except (JOSEError, ValueError) as e:
            raise SheetsError(f"Could not sign service account assertion: {e}") from e

    def access_token(self) -> str:
        with self._token_lock:
            if self._token and time.time() < self._token_expires_at - TOKEN_REFRESH_MARGIN:
                return self._token

            now = int(time.time())
            try:
                response = self.http.post(
                    GOOGLE_TOKEN_URL,
                    data={"grant_type": JWT_BEARER_GRANT, "assertion": self._signed_assertion(now)},
                )
            except httpx.HTTPError as e:
                raise SheetsError(f"Token request failed: {e}") from e

            if response.status_code != 200:
                logger.error(f"Service account token exchange failed: {response.text}")
                raise SheetsError(f"Token request failed with status {response.status_code}")

            tokens = response.json()
            access_token = tokens.get("access_token")
            if not access_token:
                raise SheetsError("No access token in token response")

            self._token = access_token
            self._token_expires_at = now + int(tokens.get("expires_in", 3600))
            logger.info("Google Sheets access token refreshed")
            return access_token

    def _values_url(self, cell_range: str, suffix: str = "") -> str:
        return f"{SHEETS_API}/{self.spreadsheet_id}/values/{quote(cell_range, safe='!:')}{suffix}"

    def _request(self, method: str, url: str, **kwargs) -> dict:
        headers = {"Authorization": f"Bearer {self.access_token()}"}
        try:
            response = self.http.request(method, url, headers=headers, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise SheetsError(
                f"Sheets API returned {e.response.status_code}: {e.response.text}"
            ) from e
        except httpx.HTTPError as e:
            raise SheetsError(f"Sheets API request failed: {e}") from e
        return response.json() if response.content else {}

    def get_values(self, cell_range: str) -> list:
        data = self._request("GET", self._values_url(cell_range))
        return data.get("values", [])

    def append_values(self, cell_range: str, rows: list) -> None:
        self._request(
            "POST",
            self._values_url(cell_range, ":append"),
            params={"valueInputOption": "RAW"},
            json={"values": rows},
        )

    def update_values(self, cell_range: str, rows: list) -> None:
        self._request(
            "PUT",
            self._values_url(cell_range),
            params={"valueInputOption": "RAW"},
            json={"values": rows},
        )

    def clear_values(self, cell_range: str) -> None:
        self._request("POST", self._values_url(cell_range, ":clear"))

    def close(self):
        self.http.close()


def build_sheets_client(settings: Settings) -> Optional[SheetsClient]:
    if not settings.google_sheet_id:
        logger.info("Google Sheets not configured, records will be kept in local memory")
        return None
    if not settings.sheets_configured:
        logger.warning(
            "GOOGLE_SHEET_ID is set but service account credentials are missing, "
            "records will be kept in local memory"
        )
        return None
    return SheetsClient(
        spreadsheet_id=settings.google_sheet_id,
        service_account_email=settings.google_service_account_email,
        private_key=settings.google_private_key,
    )
