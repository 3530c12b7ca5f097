from decimal import Decimal, ROUND_HALF_UP

from invoices.totals import to_number

CENTS = Decimal("0.01")


def format_currency(value, symbol="$"):
    """
    The one money formatter for lists, API responses and documents.

    Two decimals, half-up rounding, thousands grouping. Unreadable values
    format as zero.
    """
    number = to_number(value) or 0.0
    amount = Decimal(repr(number)).quantize(CENTS, rounding=ROUND_HALF_UP)
    if amount == 0:
        amount = abs(amount)
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.2f}"


def format_quantity(value):
    """Whole quantities print without decimals, fractional ones as entered."""
    number = to_number(value)
    if number is None:
        return ""
    if number == int(number):
        return str(int(number))
    return f"{number:g}"
