# services/sheets_backend.py
"""
Google Sheets row backend (Sheets REST API v4 over ``requests``).

Rows are read and written with A1 ranges built from 1-indexed row numbers
and column letters, so this backend never looks at header names: every
table is treated as raw positional cells.
"""
import logging
from typing import Dict, List, Optional, Sequence
from urllib.parse import quote

import requests

from services.errors import NotFound, StoreUnavailable
from services.row_store import RowBackend

logger = logging.getLogger(__name__)

SHEETS_API = "https://sheets.googleapis.com/v4/spreadsheets"


def column_letter(offset: int) -> str:
     """
     Convert a 0-indexed column offset to its A1 letter.

     0 -> A, 25 -> Z, 26 -> AA, 701 -> ZZ, 702 -> AAA.
     """
     if offset < 0:
          raise ValueError(f"Column offset must be >= 0, got {offset}")
     letters = ""
     n = offset + 1
     while n:
          n, remainder = divmod(n - 1, 26)
          letters = chr(65 + remainder) + letters
     return letters


def quote_sheet(table: str) -> str:
     """Quote a sheet title for A1 notation ('Payment v2'!A1)."""
     return "'" + table.replace("'", "''") + "'"


def a1_range(table: str, first_col: int, last_col: int, first_row: Optional[int] = None, last_row: Optional[int] = None) -> str:
     start = f"{column_letter(first_col)}{first_row or ''}"
     end = f"{column_letter(last_col)}{last_row or ''}"
     return f"{quote_sheet(table)}!{start}:{end}"


def a1_cell(table: str, row_number: int, offset: int) -> str:
     return f"{quote_sheet(table)}!{column_letter(offset)}{row_number}"


class SheetsRowBackend(RowBackend):
     """
     Args:
          spreadsheet_id: Target spreadsheet.
          auth: Object exposing ``headers()`` with a bearer token (ServiceAccountAuth).
          widths: Row width per table, used to bound read ranges.
          session: Optional requests.Session; one is created when omitted.
     """

     def __init__(self, spreadsheet_id: str, auth, widths: Dict[str, int], session: Optional[requests.Session] = None, timeout: float = 15):
          if not spreadsheet_id:
               raise ValueError("GOOGLE_SHEETS_SPREADSHEET_ID is required")
          self._spreadsheet_id = spreadsheet_id
          self._auth = auth
          self._widths = widths
          self._session = session or requests.Session()
          self._timeout = timeout
          self._sheet_ids: Dict[str, int] = {}

     # ------------------------------------------------------------------
     # HTTP plumbing
     # ------------------------------------------------------------------

     def _url(self, suffix: str = "") -> str:
          return f"{SHEETS_API}/{self._spreadsheet_id}{suffix}"

     def _request(self, method: str, url: str, **kwargs) -> dict:
          try:
               response = self._session.request(
                    method, url, headers=self._auth.headers(), timeout=self._timeout, **kwargs
               )
          except requests.RequestException as e:
               raise StoreUnavailable(f"Google Sheets request failed: {method} {url}", original_error=e) from e

          if response.status_code not in (200, 201):
               raise StoreUnavailable(
                    f"Google Sheets error {response.status_code}: {response.text}",
                    context={"method": method, "url": url},
               )
          return response.json() if response.content else {}

     def _load_sheet_ids(self) -> None:
          data = self._request("GET", self._url(), params={"fields": "sheets.properties(sheetId,title)"})
          self._sheet_ids = {
               sheet["properties"]["title"]: sheet["properties"]["sheetId"]
               for sheet in data.get("sheets", [])
          }

     def _sheet_id(self, table: str) -> int:
          if table not in self._sheet_ids:
               self._load_sheet_ids()
          if table not in self._sheet_ids:
               raise NotFound(f'Sheet "{table}" not found')
          return self._sheet_ids[table]

     def _width(self, table: str) -> int:
          return self._widths.get(table, 26)

     # ------------------------------------------------------------------
     # RowBackend
     # ------------------------------------------------------------------

     def ensure_table(self, table: str, header_rows: List[List[str]]) -> None:
          self._load_sheet_ids()
          if table not in self._sheet_ids:
               data = self._request(
                    "POST",
                    self._url(":batchUpdate"),
                    json={"requests": [{"addSheet": {"properties": {"title": table}}}]},
               )
               replies = data.get("replies", [])
               if replies:
                    self._sheet_ids[table] = replies[0]["addSheet"]["properties"]["sheetId"]
               logger.info('Created sheet "%s"', table)

          if not header_rows:
               return
          existing = self._request(
               "GET",
               self._url(f"/values/{quote(a1_range(table, 0, self._width(table) - 1, 1, len(header_rows)), safe='')}"),
          )
          if existing.get("values"):
               return
          self._request(
               "PUT",
               self._url(f"/values/{quote(a1_range(table, 0, self._width(table) - 1, 1, len(header_rows)), safe='')}"),
               params={"valueInputOption": "RAW"},
               json={"values": [list(row) for row in header_rows]},
          )

     def list(self, table: str, skip_rows: int) -> List[List]:
          # e.g. 'Payment v2'!A4:T skips the three banner rows
          rng = a1_range(table, 0, self._width(table) - 1, skip_rows + 1)
          data = self._request("GET", self._url(f"/values/{quote(rng, safe='')}"))
          return [list(row) for row in data.get("values", [])]

     def append(self, table: str, row_buffer: Sequence) -> None:
          rng = a1_range(table, 0, self._width(table) - 1)
          self._request(
               "POST",
               self._url(f"/values/{quote(rng, safe='')}:append"),
               params={"valueInputOption": "USER_ENTERED", "insertDataOption": "INSERT_ROWS"},
               json={"values": [list(row_buffer)]},
          )

     def patch_cells(self, table: str, row_number: int, cells: Dict[int, object]) -> None:
          data = [
               {"range": a1_cell(table, row_number, offset), "values": [[value]]}
               for offset, value in sorted(cells.items())
          ]
          if not data:
               return
          self._request(
               "POST",
               self._url("/values:batchUpdate"),
               json={"valueInputOption": "USER_ENTERED", "data": data},
          )

     def delete_row(self, table: str, row_number: int) -> None:
          self._request(
               "POST",
               self._url(":batchUpdate"),
               json={
                    "requests": [{
                         "deleteDimension": {
                              "range": {
                                   "sheetId": self._sheet_id(table),
                                   "dimension": "ROWS",
                                   "startIndex": row_number - 1,  # 0-indexed, end exclusive
                                   "endIndex": row_number,
                              }
                         }
                    }]
               },
          )

     def ping(self) -> bool:
          try:
               self._load_sheet_ids()
          except StoreUnavailable as e:
               logger.error("Spreadsheet unreachable: %s", e)
               return False
          return True

     def close(self) -> None:
          self._session.close()
