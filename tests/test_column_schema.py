# tests/test_column_schema.py
import pytest

from services.column_schema import PAYMENT_LOGS, PAYMENTS, USERS, TableSchema, get_schema


def test_payments_layout():
     assert PAYMENTS.width == 20
     assert PAYMENTS.max_column == 19
     assert PAYMENTS.header_rows == 3
     assert PAYMENTS.offset("paidFlag") == 16
     assert PAYMENTS.offset("uniqueId") == 13
     assert PAYMENTS.is_reserved(5)
     assert 5 not in PAYMENTS.columns.values()


def test_ordered_fields_sorted_by_offset():
     offsets = [offset for _, offset in PAYMENTS.ordered_fields()]
     assert offsets == sorted(offsets)
     assert PAYMENTS.ordered_fields()[0] == ("createdAt", 0)


def test_to_buffer_and_back():
     row = PAYMENTS.to_buffer({"ownerId": "42", "quantity": "10", "note": None})
     assert len(row) == PAYMENTS.width
     assert row[2] == "42"
     assert row[14] == ""
     record = PAYMENTS.to_record(row)
     assert record["ownerId"] == "42"
     assert record["quantity"] == "10"


def test_to_buffer_rejects_unknown_field():
     with pytest.raises(KeyError):
          USERS.to_buffer({"email": "x"})


def test_pad_truncates_and_fills():
     assert USERS.pad(["1", "Admin"]) == ["1", "Admin", "", "", "", "", ""]
     assert len(USERS.pad(list("abcdefghij"))) == USERS.width
     assert USERS.pad([None, "User"])[0] == ""


def test_header_buffers_use_banner():
     banner = PAYMENTS.header_buffers()
     assert len(banner) == 3
     assert banner[2][16] == "Paid"
     assert all(len(line) == PAYMENTS.width for line in banner)
     assert PAYMENT_LOGS.header_buffers()[0][0] == "Payment ID"
     assert USERS.header_buffers() == [USERS.header_row()]


@pytest.mark.parametrize("columns,reserved", [
     ({"a": 0, "b": 0}, frozenset()),
     ({"a": 0, "b": 3}, frozenset()),
     ({"a": 0, "b": 1}, frozenset({1})),
])
def test_invalid_layouts_rejected(columns, reserved):
     with pytest.raises(ValueError):
          TableSchema(name="t", columns=columns, width=3, reserved=reserved)


def test_get_schema():
     assert get_schema("Payment v2") is PAYMENTS
     with pytest.raises(KeyError):
          get_schema("Nope")
