"""
Tests for gourde currency formatting.

Grouping uses U+202F and the symbol is preceded by U+00A0.
"""

from decimal import Decimal

import pytest

from shared.formatting import format_currency, format_number


@pytest.mark.parametrize("amount,expected", [
    (0, "0,00\u00a0G"),
    (150, "150,00\u00a0G"),
    (1234.5, "1\u202f234,50\u00a0G"),
    (1234567.891, "1\u202f234\u202f567,89\u00a0G"),
    (-75.5, "-75,50\u00a0G"),
    (Decimal("999.995"), "1\u202f000,00\u00a0G"),
])
def test_format_currency(amount, expected):
    assert format_currency(amount) == expected


def test_rounds_half_up():
    assert format_number(0.125) == "0,13"
    assert format_number(2.5, decimal_places=0) == "3"


def test_no_decimals():
    assert format_number(1234, decimal_places=0) == "1\u202f234"


@pytest.mark.parametrize("amount", [float("nan"), float("inf"), float("-inf"), Decimal("NaN")])
def test_non_finite_amounts_are_rejected(amount):
    with pytest.raises(ValueError):
        format_currency(amount)
