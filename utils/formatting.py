# utils/formatting.py
"""
Display conventions shared by the ledger and its readers.

Timestamps are written as ``DD/MM/YYYY HH:MM:SS`` in the fixed GMT+3:30
offset. Money-like cells hold display strings with comma thousands
separators ("50,000"); they are parsed back to Decimal for arithmetic.
Quantities and unit prices keep every decimal they were given; only
totals are rounded to two places.
"""
from datetime import datetime, timedelta, timezone
from decimal import Context, Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional, Union

from config import TIMESTAMP_FORMAT, TIMEZONE

TWO_PLACES = Decimal("0.01")

# Quantities, unit prices and total overrides must stay below this magnitude
MAX_AMOUNT = Decimal("1e15")


def now_local() -> datetime:
     return datetime.now(TIMEZONE)


def format_timestamp(ts: Optional[datetime] = None) -> str:
     """Format a datetime in the fixed offset; naive datetimes are taken as UTC."""
     ts = ts or datetime.now(TIMEZONE)
     if ts.tzinfo is None:
          ts = ts.replace(tzinfo=timezone.utc)
     return ts.astimezone(TIMEZONE).strftime(TIMESTAMP_FORMAT)


def parse_timestamp(value: str) -> Optional[datetime]:
     """Parse a stored timestamp back to an aware datetime, or None if malformed."""
     if not value or not str(value).strip():
          return None
     try:
          return datetime.strptime(str(value).strip(), TIMESTAMP_FORMAT).replace(tzinfo=TIMEZONE)
     except ValueError:
          return None


def add_hours(hours: float, start: Optional[datetime] = None) -> str:
     start = start or now_local()
     return format_timestamp(start + timedelta(hours=hours))


def parse_number(value) -> Optional[Decimal]:
     """
     Parse a display or bare numeric value.

     Strips thousands separators and whitespace. Returns None for blanks and
     anything non-numeric (booleans included).
     """
     if value is None or isinstance(value, bool):
          return None
     if isinstance(value, Decimal):
          return value if value.is_finite() else None
     if isinstance(value, (int, float)):
          value = str(value)
     text = str(value).replace(",", "").strip()
     if not text:
          return None
     try:
          number = Decimal(text)
     except InvalidOperation:
          return None
     if not number.is_finite():
          return None
     return number


def in_range(value: Decimal) -> bool:
     """Whether an amount or quantity is small enough to store and multiply."""
     return abs(value) < MAX_AMOUNT


def multiply(a: Decimal, b: Decimal) -> Decimal:
     """Exact product, whatever the operands' precision."""
     digits = len(a.as_tuple().digits) + len(b.as_tuple().digits)
     return Context(prec=max(28, digits)).multiply(a, b)


def round_money(value: Decimal) -> Decimal:
     context = Context(prec=max(28, value.adjusted() + 4))
     return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP, context=context)


def _digits(number: Decimal):
     whole, _, fraction = format(abs(number), "f").partition(".")
     return whole, fraction.rstrip("0")


def format_number(value, exact: bool = False) -> str:
     """
     Format for display: thousands separators, trailing zeros dropped
     (50000 -> "50,000", 1234.5 -> "1,234.5").

     Rounded to two decimals unless ``exact``, which keeps every significant
     decimal ("0.0035" stays "0.0035").
     """
     number = parse_number(value)
     if number is None:
          return ""
     if not exact:
          number = round_money(number)
     whole, fraction = _digits(number)
     text = f"{int(whole):,}" + (f".{fraction}" if fraction else "")
     return f"-{text}" if number < 0 else text


def plain_number(value, exact: bool = False) -> str:
     """Bare numeric string without separators, as mutation payloads carry it."""
     number = parse_number(value)
     if number is None:
          return ""
     if not exact:
          number = round_money(number)
     whole, fraction = _digits(number)
     text = whole + (f".{fraction}" if fraction else "")
     return f"-{text}" if number < 0 else text


def to_json_number(value: Optional[Decimal]) -> Union[int, float, None]:
     """int when integral, float otherwise; keeps audit diffs JSON-friendly."""
     if value is None:
          return None
     if value == value.to_integral_value():
          return int(value)
     return float(value)
