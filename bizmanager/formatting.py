"""
Indian currency and date formatting.

Amounts use the Indian numbering system: the last three digits form one
group and every group above that has two digits (₹10,00,000.00).
"""

import re
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Union


CURRENCY_SYMBOL = "₹"

CRORE = 10_000_000
LAKH = 100_000
THOUSAND = 1_000

_LEADING_NUMBER = re.compile(r"^[-+]?(\d+\.?\d*|\.\d+)([eE][-+]?\d+)?")

Number = Union[int, float, Decimal]
DateLike = Union[date, datetime, str]


def group_indian(digits: str) -> str:
    """Insert Indian-style separators into a string of integer digits."""
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups + [tail])


def format_currency(amount: Number) -> str:
    """₹ with Indian grouping and two decimals; negatives as -₹500.00."""
    value = Decimal(str(amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    whole, fraction = f"{abs(value):.2f}".split(".")
    return f"{sign}{CURRENCY_SYMBOL}{group_indian(whole)}.{fraction}"


def format_currency_compact(amount: Number) -> str:
    """Crore / lakh / thousand shorthand for dashboard cards."""
    value = float(amount)
    if value >= CRORE:
        return f"{CURRENCY_SYMBOL}{value / CRORE:.1f}Cr"
    if value >= LAKH:
        return f"{CURRENCY_SYMBOL}{value / LAKH:.1f}L"
    if value >= THOUSAND:
        return f"{CURRENCY_SYMBOL}{value / THOUSAND:.1f}K"
    return format_currency(amount)


def parse_currency(text: str) -> float:
    """Read a number back out of formatted text. Unparseable input gives 0."""
    cleaned = re.sub(r"[₹,\s]", "", text or "")
    match = _LEADING_NUMBER.match(cleaned)
    if not match:
        return 0.0
    return float(match.group(0)) or 0.0


def _to_datetime(value: DateLike) -> datetime:
    if isinstance(value, str):
        return datetime.fromisoformat(value)
    if isinstance(value, datetime):
        return value
    return datetime(value.year, value.month, value.day)


def format_date(value: DateLike) -> str:
    """25/12/2024"""
    return _to_datetime(value).strftime("%d/%m/%Y")


def format_date_display(value: DateLike) -> str:
    """25 Dec 2024"""
    return _to_datetime(value).strftime("%d %b %Y")


def format_datetime(value: DateLike) -> str:
    """25/12/2024 03:30 PM"""
    return _to_datetime(value).strftime("%d/%m/%Y %I:%M %p")
