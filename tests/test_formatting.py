"""Tests for currency and date formatting."""

import pytest
from datetime import date, datetime
from decimal import Decimal

from bizmanager.formatting import (
    format_currency,
    format_currency_compact,
    format_date,
    format_date_display,
    format_datetime,
    group_indian,
    parse_currency,
)


class TestCurrency:
    """Tests for INR formatting."""

    @pytest.mark.parametrize(
        "digits,expected",
        [
            ("5", "5"),
            ("999", "999"),
            ("1000", "1,000"),
            ("100000", "1,00,000"),
            ("1000000", "10,00,000"),
            ("123456789", "12,34,56,789"),
        ],
    )
    def test_indian_grouping(self, digits, expected):
        assert group_indian(digits) == expected

    def test_format_currency(self):
        """Test symbol, grouping and two decimals."""
        assert format_currency(1000000) == "₹10,00,000.00"
        assert format_currency(Decimal("1500.5")) == "₹1,500.50"
        assert format_currency(0) == "₹0.00"

    def test_rounds_half_up(self):
        assert format_currency(Decimal("2.345")) == "₹2.35"

    def test_negative(self):
        assert format_currency(-500) == "-₹500.00"

    def test_compact(self):
        """Test crore, lakh and thousand shorthand."""
        assert format_currency_compact(15000000) == "₹1.5Cr"
        assert format_currency_compact(250000) == "₹2.5L"
        assert format_currency_compact(1500) == "₹1.5K"
        assert format_currency_compact(999) == "₹999.00"

    def test_parse_currency(self):
        """Test reading formatted text back."""
        assert parse_currency("₹1,23,456.78") == pytest.approx(123456.78)
        assert parse_currency("-₹500.00") == pytest.approx(-500.0)
        assert parse_currency("abc") == 0.0
        assert parse_currency("") == 0.0


class TestDates:
    """Tests for date formatting."""

    def test_format_date(self):
        assert format_date(date(2024, 12, 25)) == "25/12/2024"
        assert format_date("2024-12-25") == "25/12/2024"

    def test_format_date_display(self):
        assert format_date_display(date(2024, 12, 25)) == "25 Dec 2024"

    def test_format_datetime(self):
        assert format_datetime(datetime(2024, 12, 25, 15, 30)) == "25/12/2024 03:30 PM"
