"""
Google Sheets Sink

Writes export rows to a Google Sheets spreadsheet using a service account.
Each write clears the target sheet and then writes the header row plus all
values starting at A1. The two calls are not atomic: a failed write after a
successful clear leaves the sheet empty.

The Google API client is synchronous; the export job calls these methods
through asyncio.to_thread.
"""

import logging
from typing import Any, Optional

from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from utils.errors import SpreadsheetAccessError, SpreadsheetNotFoundError

logger = logging.getLogger(__name__)

SHEETS_SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]


def build_sheets_service(key_file_path: str) -> Any:
    """
    Build a Sheets v4 service from a service account key file.

    Raises:
        ValueError: If no key file path is configured
    """
    if not key_file_path:
        raise ValueError("GAUTH_KEY_FILE_PATH is not configured")

    credentials = service_account.Credentials.from_service_account_file(
        key_file_path, scopes=SHEETS_SCOPES
    )
    return build("sheets", "v4", credentials=credentials, cache_discovery=False)


class GoogleSheetsWriter:
    """Clear-then-overwrite writer for the sheets of one spreadsheet."""

    def __init__(self, spreadsheet_id: str, service: Any) -> None:
        if not spreadsheet_id:
            raise ValueError("SPREADSHEET_ID is not configured")
        self.spreadsheet_id = spreadsheet_id
        self.service = service

    @classmethod
    def from_key_file(cls, spreadsheet_id: str, key_file_path: str) -> "GoogleSheetsWriter":
        return cls(spreadsheet_id, build_sheets_service(key_file_path))

    def spreadsheet_exists(self) -> bool:
        """
        Check the spreadsheet is reachable.

        Returns:
            False if the spreadsheet does not exist

        Raises:
            SpreadsheetAccessError: If access is denied
            HttpError: On any other API failure
        """
        try:
            self.service.spreadsheets().get(spreadsheetId=self.spreadsheet_id).execute()
            return True
        except HttpError as e:
            status = _status_of(e)
            if status == 404:
                logger.error(
                    "Spreadsheet does not exist",
                    extra={"spreadsheet_id": self.spreadsheet_id},
                )
                return False
            if status == 403:
                logger.error(
                    "Access denied to spreadsheet",
                    extra={"spreadsheet_id": self.spreadsheet_id},
                )
                raise SpreadsheetAccessError(
                    f"Access denied to spreadsheet {self.spreadsheet_id}"
                ) from e
            logger.error(
                "Error checking spreadsheet existence",
                extra={"spreadsheet_id": self.spreadsheet_id, "error": str(e)},
            )
            raise

    def ensure_spreadsheet(self) -> None:
        if not self.spreadsheet_exists():
            raise SpreadsheetNotFoundError(
                f"Spreadsheet with ID {self.spreadsheet_id} does not exist. Stopping."
            )

    def sheet_titles(self) -> list[str]:
        response = (
            self.service.spreadsheets()
            .get(spreadsheetId=self.spreadsheet_id, fields="sheets.properties.title")
            .execute()
        )
        return [
            sheet.get("properties", {}).get("title")
            for sheet in response.get("sheets", [])
        ]

    def sheet_exists(self, sheet_name: str) -> bool:
        return sheet_name in self.sheet_titles()

    def write_rows(self, sheet_name: str, header: list[str], values: list[list[Any]]) -> int:
        """
        Replace the contents of a sheet with `header` followed by `values`.

        Returns:
            Number of rows written, header included
        """
        matrix = [list(header), *values]

        self.service.spreadsheets().values().clear(
            spreadsheetId=self.spreadsheet_id,
            range=sheet_name,
            body={},
        ).execute()
        logger.info("Cleared sheet", extra={"sheet_name": sheet_name})

        self.service.spreadsheets().values().update(
            spreadsheetId=self.spreadsheet_id,
            range=f"{sheet_name}!A1",
            valueInputOption="RAW",
            body={"values": matrix},
        ).execute()
        logger.info(
            "Wrote rows to sheet",
            extra={"sheet_name": sheet_name, "rows": len(matrix)},
        )

        return len(matrix)


def _status_of(error: HttpError) -> Optional[int]:
    resp = getattr(error, "resp", None)
    status = getattr(resp, "status", None)
    return int(status) if status is not None else None
