"""Tests for the countdown and currency display helpers."""
import pytest

from upsell.formatting import format_currency, format_time


@pytest.mark.parametrize("seconds,expected", [
    (300, "5:00"),
    (299, "4:59"),
    (65, "1:05"),
    (9, "0:09"),
    (0, "0:00"),
    (-5, "0:00"),
])
def test_format_time(seconds, expected):
    assert format_time(seconds) == expected


@pytest.mark.parametrize("amount,expected", [
    (None, "Free"),
    ("", "Free"),
    ("0.00", "Free"),
    ("0.50", "Free"),
    (0, "Free"),
    ("12.50", "£12.50"),
    (5, "£5"),
])
def test_format_currency(amount, expected):
    assert format_currency(amount) == expected


def test_format_currency_symbol():
    assert format_currency("9.99", symbol="$") == "$9.99"
