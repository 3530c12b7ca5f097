"""
Derived-field computation for invoices.

Line totals and the invoice total are never authored by a client. Every
mutation of the item list and every save goes through these helpers, and
anything that cannot be read as a finite number counts as 0.
"""

import math
from typing import Any, Iterable, Optional


def to_number(value: Any) -> Optional[float]:
    """
    Read a quantity or price the way a form field would.

    Returns None for missing, blank, non-numeric or non-finite input.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip().replace(",", "")
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None

    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _field(item: Any, name: str) -> Any:
    if isinstance(item, dict):
        return item.get(name)
    return getattr(item, name, None)


def recompute_line_total(item: Any) -> float:
    """quantity * unit_price, with anything unreadable counting as 0."""
    quantity = to_number(_field(item, "quantity")) or 0.0
    unit_price = to_number(_field(item, "unit_price")) or 0.0
    return quantity * unit_price


def recompute_invoice_total(items: Iterable[Any]) -> float:
    """Sum of line totals. Zero-quantity lines stay in and add 0."""
    return sum((recompute_line_total(item) for item in items), 0.0)


def apply_totals(invoice: Any) -> Any:
    """
    Refresh every derived field on an invoice in place and return it.

    Used right before persistence so a stale client total is overwritten.
    """
    for item in invoice.items:
        item.total = recompute_line_total(item)
    invoice.total_amount = recompute_invoice_total(invoice.items)
    return invoice
