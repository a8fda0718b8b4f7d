"""Unit tests for display formatting."""
from datetime import date, datetime
from decimal import Decimal

import pytest
from hypothesis import given
from hypothesis import strategies as st
from rich.markdown import Markdown

from vyapar.formatting import format_currency, format_date, group_indian, render_reply


class TestFormatCurrency:
    """Tests for INR formatting."""

    @pytest.mark.parametrize("amount,expected", [
        (0, "₹0"),
        (999, "₹999"),
        (1000, "₹1,000"),
        (123456, "₹1,23,456"),
        (12345678, "₹1,23,45,678"),
        (Decimal("1234.5"), "₹1,235"),
        (Decimal("1234.49"), "₹1,234"),
        (-285, "-₹285"),
    ])
    def test_examples(self, amount, expected):
        """Test Indian digit grouping and whole-rupee rounding."""
        assert format_currency(amount) == expected

    @given(st.integers(min_value=0, max_value=10**15))
    def test_digits_preserved(self, amount: int):
        """Property test: removing separators gives back the number."""
        formatted = format_currency(amount)

        assert formatted.startswith("₹")
        assert int(formatted[1:].replace(",", "")) == amount

    def test_group_indian_short(self):
        """Test that short numbers are untouched."""
        assert group_indian("42") == "42"


class TestFormatDate:
    """Tests for date formatting."""

    def test_date(self):
        """Test a date value."""
        assert format_date(date(2026, 10, 18)) == "18 Oct 2026"

    def test_single_digit_day(self):
        """Test that days are not zero padded."""
        assert format_date(datetime(2026, 3, 5, 14, 30)) == "5 Mar 2026"

    def test_iso_string(self):
        """Test an ISO date string from the store."""
        assert format_date("2026-01-09") == "9 Jan 2026"


class TestRenderReply:
    """Tests for reply rendering."""

    def test_returns_markdown(self):
        """Test that replies render as markdown, even when empty."""
        assert isinstance(render_reply("**Total:** ₹285"), Markdown)
        assert isinstance(render_reply(""), Markdown)
