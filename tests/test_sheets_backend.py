# tests/test_sheets_backend.py
from unittest.mock import MagicMock
from urllib.parse import quote

import pytest
import requests

from services.errors import NotFound, StoreUnavailable
from services.sheets_backend import SheetsRowBackend, a1_cell, a1_range, column_letter


def _response(status_code=200, payload=None):
     response = MagicMock()
     response.status_code = status_code
     response.content = b"{}" if payload is not None else b""
     response.json.return_value = payload or {}
     response.text = "error body"
     return response


@pytest.fixture
def session():
     return MagicMock()


@pytest.fixture
def sheets(session):
     auth = MagicMock()
     auth.headers.return_value = {"Authorization": "Bearer t"}
     return SheetsRowBackend("sheet-123", auth, widths={"Payment v2": 20, "Users": 7}, session=session)


@pytest.mark.parametrize("offset,letter", [(0, "A"), (16, "Q"), (19, "T"), (25, "Z"), (26, "AA"), (51, "AZ"), (701, "ZZ"), (702, "AAA")])
def test_column_letter(offset, letter):
     assert column_letter(offset) == letter


def test_column_letter_rejects_negative():
     with pytest.raises(ValueError):
          column_letter(-1)


def test_a1_notation():
     assert a1_range("Payment v2", 0, 19, 4) == "'Payment v2'!A4:T"
     assert a1_range("Users", 0, 6, 1, 1) == "'Users'!A1:G1"
     assert a1_cell("Payment v2", 7, 16) == "'Payment v2'!Q7"
     assert a1_range("Bob's", 0, 0) == "'Bob''s'!A:A"


def test_list_skips_banner_rows(sheets, session):
     session.request.return_value = _response(payload={"values": [["a", "b"], ["c"]]})
     assert sheets.list("Payment v2", 3) == [["a", "b"], ["c"]]

     method, url = session.request.call_args[0]
     assert method == "GET"
     assert url.endswith("/values/" + quote("'Payment v2'!A4:T", safe=""))
     assert session.request.call_args[1]["headers"] == {"Authorization": "Bearer t"}


def test_list_without_values(sheets, session):
     session.request.return_value = _response(payload={"range": "x"})
     assert sheets.list("Users", 1) == []


def test_append_uses_user_entered_insert_rows(sheets, session):
     session.request.return_value = _response(payload={})
     sheets.append("Users", ["1", "Admin"])

     method, url = session.request.call_args[0]
     kwargs = session.request.call_args[1]
     assert method == "POST"
     assert url.endswith(":append")
     assert kwargs["params"] == {"valueInputOption": "USER_ENTERED", "insertDataOption": "INSERT_ROWS"}
     assert kwargs["json"] == {"values": [["1", "Admin"]]}


def test_patch_cells_batch_update(sheets, session):
     session.request.return_value = _response(payload={})
     sheets.patch_cells("Payment v2", 5, {16: "TRUE", 3: "20"})

     kwargs = session.request.call_args[1]
     assert session.request.call_args[0][1].endswith("/values:batchUpdate")
     assert kwargs["json"]["data"] == [
          {"range": "'Payment v2'!D5", "values": [["20"]]},
          {"range": "'Payment v2'!Q5", "values": [["TRUE"]]},
     ]


def test_delete_row_resolves_sheet_id(sheets, session):
     metadata = _response(payload={"sheets": [
          {"properties": {"title": "Users", "sheetId": 0}},
          {"properties": {"title": "Payment v2", "sheetId": 987}},
     ]})
     session.request.side_effect = [metadata, _response(payload={})]

     sheets.delete_row("Payment v2", 5)

     body = session.request.call_args[1]["json"]
     dimension = body["requests"][0]["deleteDimension"]["range"]
     assert dimension == {"sheetId": 987, "dimension": "ROWS", "startIndex": 4, "endIndex": 5}


def test_delete_row_unknown_sheet(sheets, session):
     session.request.return_value = _response(payload={"sheets": []})
     with pytest.raises(NotFound):
          sheets.delete_row("Missing", 2)


def test_ensure_table_creates_sheet_and_headers(sheets, session):
     session.request.side_effect = [
          _response(payload={"sheets": []}),
          _response(payload={"replies": [{"addSheet": {"properties": {"sheetId": 55}}}]}),
          _response(payload={}),
          _response(payload={}),
     ]
     sheets.ensure_table("Users", [["discordId", "role"]])

     assert session.request.call_count == 4
     add_sheet = session.request.call_args_list[1][1]["json"]
     assert add_sheet == {"requests": [{"addSheet": {"properties": {"title": "Users"}}}]}
     write = session.request.call_args_list[3]
     assert write[0][0] == "PUT"
     assert write[1]["json"] == {"values": [["discordId", "role"]]}


def test_http_error_is_store_unavailable(sheets, session):
     session.request.return_value = _response(status_code=429, payload={})
     with pytest.raises(StoreUnavailable):
          sheets.list("Users", 1)


def test_network_error_is_store_unavailable(sheets, session):
     session.request.side_effect = requests.ConnectionError("down")
     with pytest.raises(StoreUnavailable) as excinfo:
          sheets.append("Users", ["1"])
     assert isinstance(excinfo.value.original_error, requests.ConnectionError)


def test_requires_spreadsheet_id():
     with pytest.raises(ValueError):
          SheetsRowBackend("", MagicMock(), widths={})
