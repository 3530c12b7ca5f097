from datetime import date, datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .totals import to_number, recompute_line_total, recompute_invoice_total


class InvoiceStatus(str, Enum):
    DRAFT = "Draft"
    SENT = "Sent"
    PAID = "Paid"
    OVERDUE = "Overdue"


class LineItem(BaseModel):
    description: Optional[str] = None
    quantity: Optional[float] = Field(default=None, ge=0)
    unit_price: Optional[float] = Field(default=0, ge=0)
    total: float = 0.0

    @field_validator("quantity", "unit_price", mode="before")
    @classmethod
    def coerce_number(cls, value: Any) -> Optional[float]:
        # Unreadable input becomes "missing" instead of a validation error
        return to_number(value)

    @model_validator(mode="after")
    def derive_total(self):
        self.total = recompute_line_total(self)
        return self


class CustomerDetails(BaseModel):
    name: str = ""
    address: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None


class CompanyDetails(BaseModel):
    name: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    abn: Optional[str] = None
    amount_enclosed: Optional[str] = None


class PaymentInstructions(BaseModel):
    bank_name: Optional[str] = None
    account_number: Optional[str] = None
    bsb: Optional[str] = None


class InvoiceBase(BaseModel):
    invoice_number: str
    invoice_date: Optional[date] = None
    due_date: Optional[date] = None
    reference: Optional[str] = None
    customer_details: CustomerDetails = Field(default_factory=CustomerDetails)
    items: List[LineItem] = Field(default_factory=lambda: [LineItem()], min_length=1)
    company_details: CompanyDetails = Field(default_factory=CompanyDetails)
    payment_instructions: PaymentInstructions = Field(default_factory=PaymentInstructions)
    status: InvoiceStatus = InvoiceStatus.DRAFT
    total_amount: float = 0.0

    @model_validator(mode="after")
    def derive_total_amount(self):
        # Client-supplied totals are ignored
        self.total_amount = recompute_invoice_total(self.items)
        return self


class InvoiceCreate(InvoiceBase):

    @field_validator("invoice_number")
    @classmethod
    def require_invoice_number(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("Invoice number is required")
        return value.strip()

    @field_validator("customer_details")
    @classmethod
    def require_customer_name(cls, value: CustomerDetails) -> CustomerDetails:
        if not value.name or not value.name.strip():
            raise ValueError("Customer name is required")
        return value


class InvoiceUpdate(InvoiceCreate):
    pass


class Invoice(InvoiceBase):
    id: int
    user_id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class InvoiceStatusUpdate(BaseModel):
    status: InvoiceStatus


class LineItemUpdate(BaseModel):
    """Partial edit of one line. Only fields that were sent are applied."""
    description: Optional[str] = None
    quantity: Optional[Any] = None
    unit_price: Optional[Any] = None


class DashboardStats(BaseModel):
    total_revenue: float
    pending: float
    count: int
    total_revenue_display: str
    pending_display: str
