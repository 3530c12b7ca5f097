"""
New-invoice defaults and line-item editing.

Every mutation goes through InvoiceEditor so line totals and the invoice
total are refreshed the moment quantities or prices change.
"""

from datetime import date, datetime, timedelta
from typing import Any, Optional

from users.models import CurrentUser
from .models import (
    InvoiceBase, LineItem, CompanyDetails, PaymentInstructions, CustomerDetails, InvoiceStatus,
)
from .totals import apply_totals, to_number

DEFAULT_PAYMENT_TERMS_DAYS = 14

_UNSET = object()


def generate_invoice_number(now: Optional[datetime] = None) -> str:
    """INV- plus the last six digits of the millisecond clock. Not guaranteed unique."""
    now = now or datetime.now()
    millis = int(now.timestamp() * 1000)
    return f"INV-{str(millis)[-6:]}"


def new_invoice_draft(current_user: CurrentUser, today: Optional[date] = None,
                      now: Optional[datetime] = None) -> InvoiceBase:
    """A blank invoice seeded from the user's company profile (copied, not linked)."""
    today = today or date.today()
    profile = current_user.company_profile

    return InvoiceBase(
        invoice_number=generate_invoice_number(now),
        invoice_date=today,
        due_date=today + timedelta(days=DEFAULT_PAYMENT_TERMS_DAYS),
        reference="",
        customer_details=CustomerDetails(),
        items=[LineItem(description="", quantity=1, unit_price=0)],
        company_details=CompanyDetails(
            name=profile.name or "",
            address=profile.address or "",
            phone=profile.phone or "",
            email=profile.email or current_user.email,
            website=profile.website or "",
            abn=profile.abn or "",
            amount_enclosed=profile.amount_enclosed or "",
        ),
        payment_instructions=PaymentInstructions(
            bank_name=profile.bank_name or "",
            account_number=profile.account_number or "",
            bsb=profile.bsb or "",
        ),
        status=InvoiceStatus.DRAFT,
    )


class InvoiceEditor:
    """Edits a private copy of an invoice; `invoice` is always consistent."""

    def __init__(self, invoice: InvoiceBase):
        self.invoice = invoice.model_copy(deep=True)
        apply_totals(self.invoice)

    def _check_index(self, index: int):
        if not 0 <= index < len(self.invoice.items):
            raise IndexError(f"No line item at position {index}")

    def add_item(self, description: str = "", quantity: Any = 1, unit_price: Any = 0) -> LineItem:
        item = LineItem(description=description, quantity=quantity, unit_price=unit_price)
        self.invoice.items.append(item)
        apply_totals(self.invoice)
        return item

    def remove_item(self, index: int) -> bool:
        """Remove one line. The last remaining line cannot be removed."""
        self._check_index(index)
        if len(self.invoice.items) == 1:
            return False
        del self.invoice.items[index]
        apply_totals(self.invoice)
        return True

    def update_item(self, index: int, description: Any = _UNSET,
                    quantity: Any = _UNSET, unit_price: Any = _UNSET) -> LineItem:
        self._check_index(index)
        item = self.invoice.items[index]

        if description is not _UNSET:
            item.description = description
        if quantity is not _UNSET:
            item.quantity = _non_negative(to_number(quantity))
        if unit_price is not _UNSET:
            item.unit_price = _non_negative(to_number(unit_price))

        apply_totals(self.invoice)
        return item


def _non_negative(value: Optional[float]) -> Optional[float]:
    if value is not None and value < 0:
        raise ValueError("Quantity and unit price cannot be negative")
    return value
