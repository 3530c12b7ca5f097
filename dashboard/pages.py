from html import escape
from typing import List, Optional
from urllib.parse import urlencode

from invoices.listing import STATUS_FILTERS
from invoices.models import DashboardStats
from pdf.utils.currency_utils import format_currency
from pdf.utils.date_utils import format_date

DASHBOARD_STYLES = """
body { font-family: Helvetica, Arial, sans-serif; background: #f8fafc; color: #0f172a; margin: 0; }
main { max-width: 1100px; margin: 0 auto; padding: 32px 16px 80px; }
.stats { display: grid; grid-template-columns: repeat(3, 1fr); gap: 16px; margin: 24px 0; }
.card { background: #fff; border-radius: 16px; padding: 20px; box-shadow: 0 4px 16px rgba(15,23,42,.06); }
.card .label { font-size: 12px; text-transform: uppercase; color: #64748b; font-weight: 700; }
.card .value { font-size: 28px; font-weight: 800; margin-top: 6px; }
.filters a { margin-right: 12px; color: #64748b; text-decoration: none; font-weight: 700; }
.filters a.active { color: #f20000; }
table { width: 100%; border-collapse: collapse; background: #fff; border-radius: 16px; margin-top: 16px; }
th, td { padding: 12px; text-align: left; border-bottom: 1px solid #e2e8f0; font-size: 14px; }
td.amount { text-align: right; font-weight: 700; }
.notice { padding: 12px 16px; background: #fef2f2; color: #991b1b; border-radius: 8px; }
form.inline { display: inline; }
"""


def _link(path: str, token: Optional[str], **params) -> str:
    query = {k: v for k, v in params.items() if v}
    if token:
        query["token"] = token
    return f"{path}?{urlencode(query)}" if query else path


def _stat_cards(stats: DashboardStats) -> str:
    cards = [
        ("Total Revenue", stats.total_revenue_display),
        ("Pending", stats.pending_display),
        ("Total Invoices", str(stats.count)),
    ]
    return '<section class="stats">' + "".join(
        f'<div class="card"><div class="label">{label}</div><div class="value">{escape(value)}</div></div>'
        for label, value in cards
    ) + "</section>"


def _filters(active: str, search: str, token: Optional[str]) -> str:
    links = "".join(
        f'<a class="{"active" if status == active else ""}" '
        f'href="{escape(_link("/dashboard/", token, status=status, search=search))}">{status}</a>'
        for status in STATUS_FILTERS
    )
    hidden = f'<input type="hidden" name="token" value="{escape(token)}">' if token else ""
    form = (
        '<form method="get" action="/dashboard/">'
        f'<input type="search" name="search" value="{escape(search)}" placeholder="Search invoices">'
        f'<input type="hidden" name="status" value="{escape(active)}">{hidden}'
        '<button type="submit">Search</button></form>'
    )
    return f'<nav class="filters">{links}</nav>{form}'


def _row(invoice, token: Optional[str]) -> str:
    view = _link(f"/dashboard/invoices/{invoice.id}", token)
    download = _link(f"/dashboard/invoices/{invoice.id}/download", token)
    delete = _link(f"/dashboard/invoices/{invoice.id}/delete", token)
    return (
        "<tr>"
        f"<td>{escape(invoice.invoice_number)}</td>"
        f"<td>{escape(invoice.customer_details.name or '')}</td>"
        f"<td>{format_date(invoice.invoice_date)}</td>"
        f"<td>{format_date(invoice.due_date)}</td>"
        f"<td>{escape(invoice.status.value)}</td>"
        f'<td class="amount">{format_currency(invoice.total_amount)}</td>'
        f'<td><a href="{escape(view)}">View</a> '
        f'<a href="{escape(download)}">PDF</a> '
        f'<form class="inline" method="post" action="{escape(delete)}" '
        "onsubmit=\"return confirm('Are you sure you want to delete this invoice?')\">"
        '<button type="submit">Delete</button></form></td>'
        "</tr>"
    )


def render_dashboard(invoices: List, stats: DashboardStats, active: str = "All", search: str = "",
                     token: Optional[str] = None, notice: Optional[str] = None) -> str:
    """List page. `invoices` is the filtered view; `stats` come from the full collection."""
    notice_html = f'<div class="notice" role="alert">{escape(notice)}</div>' if notice else ""
    if invoices:
        rows = "".join(_row(invoice, token) for invoice in invoices)
    else:
        rows = '<tr><td colspan="7">No invoices found.</td></tr>'
    return f"""<!DOCTYPE html>
<html lang="en">
<head><meta charset="utf-8"><title>Dashboard</title><style>{DASHBOARD_STYLES}</style></head>
<body><main>
<h1>Dashboard</h1>
{notice_html}
{_stat_cards(stats)}
{_filters(active, search, token)}
<table>
<thead><tr><th>Number</th><th>Customer</th><th>Date</th><th>Due</th><th>Status</th><th>Amount</th><th></th></tr></thead>
<tbody>{rows}</tbody>
</table>
</main></body>
</html>"""


def preview_toolbar(invoice_id: int, token: Optional[str]) -> str:
    back = _link("/dashboard/", token)
    download = _link(f"/dashboard/invoices/{invoice_id}/download", token)
    return (
        f'<a href="{escape(back)}">Back</a>'
        '<button type="button" onclick="window.print()">Print</button>'
        f'<a href="{escape(download)}" onclick="this.textContent=\'Preparing...\'">Download PDF</a>'
    )


def redirect_target(path: str, token: Optional[str], **params) -> str:
    return _link(path, token, **params)
