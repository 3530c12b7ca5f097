from fastapi import APIRouter, Depends, HTTPException
from fastapi.concurrency import run_in_threadpool
from typing import List, Optional

from .models import (
    Invoice, InvoiceBase, InvoiceCreate, InvoiceUpdate, InvoiceStatusUpdate,
    LineItemUpdate, DashboardStats,
)
from . import service
from .editor import new_invoice_draft
from .listing import filter_by_status, dashboard_stats
from auth.service import get_current_user
from users.models import CurrentUser
from pdf import service as pdf_service
from emails import send_invoice_email

router = APIRouter(prefix='/invoices', tags=['invoices'])


@router.get('/new', response_model=InvoiceBase)
def new_invoice(current_user: CurrentUser = Depends(get_current_user)):
    """Blank invoice seeded from the company profile"""
    return new_invoice_draft(current_user)


@router.get('/stats', response_model=DashboardStats)
def get_stats(current_user: CurrentUser = Depends(get_current_user)):
    """Dashboard aggregates over every invoice of the account"""
    return dashboard_stats(service.get_all_invoices(current_user.id))


@router.post('/', response_model=Invoice)
def create_invoice(invoice: InvoiceCreate, current_user: CurrentUser = Depends(get_current_user)):
    return service.create_invoice(current_user.id, invoice)


@router.get('/', response_model=List[Invoice])
def get_invoices(
    search: Optional[str] = None,
    status: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user)
):
    """List invoices; search runs in the database, status filters the result"""
    invoices = service.get_all_invoices(current_user.id, search)
    try:
        return filter_by_status(invoices, status)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get('/{invoice_id}', response_model=Invoice)
def get_invoice(invoice_id: int, current_user: CurrentUser = Depends(get_current_user)):
    return service.get_invoice_by_id(current_user.id, invoice_id)


@router.put('/{invoice_id}', response_model=Invoice)
def update_invoice(
    invoice_id: int,
    invoice: InvoiceUpdate,
    current_user: CurrentUser = Depends(get_current_user)
):
    return service.update_invoice(current_user.id, invoice_id, invoice)


@router.patch('/{invoice_id}/status', response_model=Invoice)
def update_invoice_status(
    invoice_id: int,
    status_update: InvoiceStatusUpdate,
    current_user: CurrentUser = Depends(get_current_user)
):
    return service.update_invoice_status(current_user.id, invoice_id, status_update.status)


@router.post('/{invoice_id}/items', response_model=Invoice)
def add_item(invoice_id: int, current_user: CurrentUser = Depends(get_current_user)):
    return service.add_invoice_item(current_user.id, invoice_id)


@router.patch('/{invoice_id}/items/{index}', response_model=Invoice)
def update_item(
    invoice_id: int,
    index: int,
    changes: LineItemUpdate,
    current_user: CurrentUser = Depends(get_current_user)
):
    return service.update_invoice_item(current_user.id, invoice_id, index, changes)


@router.delete('/{invoice_id}/items/{index}', response_model=Invoice)
def remove_item(invoice_id: int, index: int, current_user: CurrentUser = Depends(get_current_user)):
    """Remove a line; removing the only line leaves the invoice unchanged"""
    return service.remove_invoice_item(current_user.id, invoice_id, index)


@router.delete('/{invoice_id}')
def delete_invoice(invoice_id: int, current_user: CurrentUser = Depends(get_current_user)):
    return service.delete_invoice(current_user.id, invoice_id)


@router.get('/{invoice_id}/download')
async def download_invoice(invoice_id: int, current_user: CurrentUser = Depends(get_current_user)):
    """Single-page PDF named Invoice-<number>.pdf"""
    return await pdf_service.download_invoice_pdf(current_user.id, invoice_id)


@router.post('/{invoice_id}/send')
async def send_invoice(invoice_id: int, current_user: CurrentUser = Depends(get_current_user)):
    """Email the exported PDF to the customer"""
    invoice = await run_in_threadpool(service.get_invoice_by_id, current_user.id, invoice_id)
    result = await pdf_service.export_or_500(invoice)
    return await run_in_threadpool(send_invoice_email, invoice, result)
