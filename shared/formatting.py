"""
Currency formatting for Haitian gourde amounts (fr-HT conventions).
"""

import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Union

CURRENCY_CODE = "HTG"
CURRENCY_SYMBOL = "G"
DECIMAL_PLACES = 2

# fr-HT groups thousands with a narrow no-break space and puts the symbol
# after the amount, separated by a no-break space
GROUP_SEPARATOR = "\u202f"
DECIMAL_SEPARATOR = ","
SYMBOL_SEPARATOR = "\u00a0"


def format_number(
    amount: Union[int, float, Decimal],
    decimal_places: int = DECIMAL_PLACES,
) -> str:
    """
    Format a number with fr-HT grouping and decimal separators.

    Rounds half away from zero, like the browser's Intl.NumberFormat.

    Raises:
        ValueError: If amount is NaN or infinite
    """
    if not math.isfinite(amount):
        raise ValueError(f"Cannot format non-finite amount: {amount}")
    quantum = Decimal(1).scaleb(-decimal_places)
    value = Decimal(str(amount)).quantize(quantum, rounding=ROUND_HALF_UP)

    sign = "-" if value < 0 else ""
    text = f"{abs(value):.{decimal_places}f}"
    if decimal_places:
        integer_part, fraction = text.split(".")
    else:
        integer_part, fraction = text, ""

    groups = []
    while len(integer_part) > 3:
        groups.insert(0, integer_part[-3:])
        integer_part = integer_part[:-3]
    groups.insert(0, integer_part)

    formatted = GROUP_SEPARATOR.join(groups)
    if fraction:
        formatted = f"{formatted}{DECIMAL_SEPARATOR}{fraction}"
    return f"{sign}{formatted}"


def format_currency(amount: Union[int, float, Decimal]) -> str:
    """
    Format an amount as Haitian gourdes.

    Examples:
        150    -> "150,00 G"
        1234.5 -> "1 234,50 G"
        -75.5  -> "-75,50 G"

    The spaces are U+202F (grouping) and U+00A0 (before the symbol).
    """
    return f"{format_number(amount)}{SYMBOL_SEPARATOR}{CURRENCY_SYMBOL}"
