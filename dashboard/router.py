"""
Server-rendered screens: invoice list with stat cards, and the document preview.

Both accept the bearer token as a `token` query parameter so they can be
opened straight from a browser.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse, RedirectResponse

from auth.service import get_current_user
from invoices import service as invoice_service
from invoices.listing import ALL, InvoiceListView
from pdf.html_painter import render_page
from pdf.layout import build_invoice_layout
from pdf.service import ExportTask, pdf_response
from users.models import CurrentUser
from .pages import render_dashboard, preview_toolbar, redirect_target

logger = logging.getLogger(__name__)

router = APIRouter(prefix='/dashboard', tags=['dashboard'])


def _list_view(current_user: CurrentUser) -> InvoiceListView:
    return InvoiceListView(lambda term: invoice_service.get_all_invoices(current_user.id, term))


def _render_list(view: InvoiceListView, token: Optional[str], notice: Optional[str] = None) -> HTMLResponse:
    return HTMLResponse(render_dashboard(
        view.visible,
        view.stats,
        active=view.status_filter,
        search=view.search_term,
        token=token,
        notice=notice,
    ))


@router.get('/', response_class=HTMLResponse)
def dashboard(
    status: str = ALL,
    search: str = "",
    error: Optional[str] = None,
    token: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user)
):
    view = _list_view(current_user)
    try:
        view.search(search)
    except HTTPException as e:
        return _render_list(view, token, notice=e.detail)

    try:
        view.set_filter(status)
    except ValueError as e:
        error = str(e)
    return _render_list(view, token, notice=error)


@router.post('/invoices/{invoice_id}/delete', response_class=HTMLResponse)
def delete_from_dashboard(
    invoice_id: int,
    status: str = ALL,
    search: str = "",
    token: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user)
):
    """Delete, then drop the row from the already-fetched list."""
    view = _list_view(current_user)
    try:
        view.search(search)
    except HTTPException as e:
        return _render_list(view, token, notice=e.detail)

    notice = None
    try:
        view.set_filter(status)
    except ValueError as e:
        notice = str(e)

    try:
        invoice_service.delete_invoice(current_user.id, invoice_id)
    except HTTPException as e:
        return _render_list(view, token, notice=e.detail or "Failed to delete invoice")

    view.remove(invoice_id)
    return _render_list(view, token, notice=notice)


@router.get('/invoices/{invoice_id}', response_class=HTMLResponse)
def preview_invoice(
    invoice_id: int,
    notice: Optional[str] = None,
    token: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user)
):
    try:
        invoice = invoice_service.get_invoice_by_id(current_user.id, invoice_id)
    except HTTPException as e:
        # Never show a half-built preview; go back to the list
        logger.info("Preview of invoice %s unavailable: %s", invoice_id, e.detail)
        return RedirectResponse(
            redirect_target("/dashboard/", token, error="Failed to fetch invoice"),
            status_code=303,
        )

    layout = build_invoice_layout(invoice)
    return HTMLResponse(render_page(layout, toolbar=preview_toolbar(invoice_id, token), notice=notice))


@router.get('/invoices/{invoice_id}/download')
async def download_from_preview(
    invoice_id: int,
    token: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user)
):
    try:
        invoice = await run_in_threadpool(invoice_service.get_invoice_by_id, current_user.id, invoice_id)
    except HTTPException:
        return RedirectResponse(
            redirect_target("/dashboard/", token, error="Failed to fetch invoice"),
            status_code=303,
        )

    task = ExportTask()
    result = await task.run(invoice)
    if result is None:
        return RedirectResponse(
            redirect_target(f"/dashboard/invoices/{invoice_id}", token, notice=task.notification.message),
            status_code=303,
        )
    return pdf_response(result)
