"""
Invoice collection views: status filter, dashboard aggregates and local removal.

Aggregates always read the full fetched collection, never the filtered view.
Text search is not done here; the query goes to the store and the returned
collection replaces the current one.
"""

import logging
from typing import Callable, List, Optional

from .models import DashboardStats, InvoiceStatus
from pdf.utils.currency_utils import format_currency

logger = logging.getLogger(__name__)

ALL = "All"
STATUS_FILTERS = [ALL] + [status.value for status in InvoiceStatus]


def _status_value(invoice) -> str:
    status = invoice.status
    return status.value if isinstance(status, InvoiceStatus) else str(status)


def filter_by_status(invoices: List, status: Optional[str]) -> List:
    """Exact status match; `All` (or nothing) passes everything through."""
    if not status or status == ALL:
        return list(invoices)
    if status not in STATUS_FILTERS:
        raise ValueError(f"Invalid status filter. Must be one of: {STATUS_FILTERS}")
    return [inv for inv in invoices if _status_value(inv) == status]


def dashboard_stats(invoices: List) -> DashboardStats:
    total_revenue = sum((inv.total_amount or 0.0 for inv in invoices), 0.0)
    pending = sum(
        (inv.total_amount or 0.0 for inv in invoices if _status_value(inv) != InvoiceStatus.PAID.value),
        0.0,
    )
    return DashboardStats(
        total_revenue=total_revenue,
        pending=pending,
        count=len(invoices),
        total_revenue_display=format_currency(total_revenue),
        pending_display=format_currency(pending),
    )


class InvoiceListView:
    """
    The dashboard's state: the fetched collection, the active status filter
    and the last search string.
    """

    def __init__(self, fetch: Callable[[Optional[str]], List], invoices: Optional[List] = None):
        self._fetch = fetch
        self.invoices = list(invoices or [])
        self.status_filter = ALL
        self.search_term = ""

    def search(self, term: str = "") -> List:
        """Forward the query to the store and replace the collection."""
        self.search_term = term or ""
        self.invoices = list(self._fetch(self.search_term or None))
        return self.visible

    def set_filter(self, status: Optional[str]) -> List:
        filter_by_status([], status)  # validates
        self.status_filter = status or ALL
        return self.visible

    @property
    def visible(self) -> List:
        return filter_by_status(self.invoices, self.status_filter)

    @property
    def stats(self) -> DashboardStats:
        return dashboard_stats(self.invoices)

    def remove(self, invoice_id: int) -> bool:
        """Drop a deleted invoice locally, no refetch."""
        before = len(self.invoices)
        self.invoices = [inv for inv in self.invoices if inv.id != invoice_id]
        removed = len(self.invoices) < before
        if not removed:
            logger.debug("Invoice %s not in current view", invoice_id)
        return removed
