import logging
from typing import List, Optional

import psycopg2
from fastapi import HTTPException
from psycopg2.extras import Json

from database import get_db_connection
from .editor import InvoiceEditor
from .models import Invoice, InvoiceBase, InvoiceStatus, LineItemUpdate
from .totals import apply_totals

logger = logging.getLogger(__name__)

INVOICE_COLUMNS = """
    id, user_id, invoice_number, invoice_date, due_date, reference,
    customer_details, items, total_amount, company_details,
    payment_instructions, status, created_at, updated_at
"""


def _to_invoice(row: dict) -> Invoice:
    return Invoice(**dict(row))


def _write_params(invoice: InvoiceBase) -> tuple:
    """Column values for INSERT/UPDATE with totals refreshed first."""
    apply_totals(invoice)
    data = invoice.model_dump(mode="json")
    return (
        invoice.invoice_number,
        invoice.invoice_date,
        invoice.due_date,
        invoice.reference,
        Json(data["customer_details"]),
        Json(data["items"]),
        invoice.total_amount,
        Json(data["company_details"]),
        Json(data["payment_instructions"]),
        invoice.status.value,
    )


def _fail(conn, action: str, error: Exception):
    if conn:
        conn.rollback()
    logger.exception("Failed to %s invoice", action)
    detail = getattr(getattr(error, "diag", None), "message_primary", None) or str(error)
    raise HTTPException(status_code=500, detail=f"Failed to {action} invoice: {detail}")


# ============================================================
# CREATE INVOICE
# ============================================================

def create_invoice(user_id: int, invoice: InvoiceBase) -> Invoice:
    conn = None
    try:
        conn = get_db_connection()
        cursor = conn.cursor()

        cursor.execute(
            f"""
            INSERT INTO invoices
            (invoice_number, invoice_date, due_date, reference, customer_details, items,
             total_amount, company_details, payment_instructions, status, user_id)
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING {INVOICE_COLUMNS}
            """,
            _write_params(invoice) + (user_id,),
        )
        created = _to_invoice(cursor.fetchone())
        conn.commit()

        logger.info("Created invoice %s (%s) for user %s", created.id, created.invoice_number, user_id)
        return created

    except HTTPException:
        if conn:
            conn.rollback()
        raise
    except psycopg2.Error as e:
        _fail(conn, "save", e)
    finally:
        if conn:
            conn.close()


# ============================================================
# LIST / SEARCH INVOICES
# ============================================================

def get_all_invoices(user_id: int, search: Optional[str] = None) -> List[Invoice]:
    conn = None
    try:
        conn = get_db_connection()
        cursor = conn.cursor()

        query = f"SELECT {INVOICE_COLUMNS} FROM invoices WHERE user_id = %s"
        params = [user_id]

        if search and search.strip():
            pattern = f"%{search.strip()}%"
            query += """
                AND (invoice_number ILIKE %s
                     OR customer_details->>'name' ILIKE %s
                     OR reference ILIKE %s)
            """
            params.extend([pattern, pattern, pattern])

        query += " ORDER BY created_at DESC, id DESC"
        cursor.execute(query, params)

        return [_to_invoice(row) for row in cursor.fetchall()]

    except psycopg2.Error as e:
        logger.exception("Failed to list invoices for user %s", user_id)
        raise HTTPException(status_code=500, detail=f"Failed to fetch invoices: {e}")
    finally:
        if conn:
            conn.close()


# ============================================================
# GET INVOICE BY ID
# ============================================================

def get_invoice_by_id(user_id: int, invoice_id: int) -> Invoice:
    conn = None
    try:
        conn = get_db_connection()
        cursor = conn.cursor()

        cursor.execute(
            f"SELECT {INVOICE_COLUMNS} FROM invoices WHERE id = %s AND user_id = %s",
            (invoice_id, user_id),
        )
        row = cursor.fetchone()
        if not row:
            raise HTTPException(status_code=404, detail="Invoice not found")

        return _to_invoice(row)

    except psycopg2.Error as e:
        logger.exception("Failed to fetch invoice %s", invoice_id)
        raise HTTPException(status_code=500, detail=f"Failed to fetch invoice: {e}")
    finally:
        if conn:
            conn.close()


# ============================================================
# UPDATE INVOICE
# ============================================================

def update_invoice(user_id: int, invoice_id: int, invoice: InvoiceBase) -> Invoice:
    """Full overwrite. Last write wins; there is no version check."""
    conn = None
    try:
        conn = get_db_connection()
        cursor = conn.cursor()

        cursor.execute(
            f"""
            UPDATE invoices
            SET invoice_number = %s, invoice_date = %s, due_date = %s, reference = %s,
                customer_details = %s, items = %s, total_amount = %s,
                company_details = %s, payment_instructions = %s, status = %s,
                updated_at = CURRENT_TIMESTAMP
            WHERE id = %s AND user_id = %s
            RETURNING {INVOICE_COLUMNS}
            """,
            _write_params(invoice) + (invoice_id, user_id),
        )
        row = cursor.fetchone()
        if not row:
            raise HTTPException(status_code=404, detail="Invoice not found")

        conn.commit()
        return _to_invoice(row)

    except HTTPException:
        if conn:
            conn.rollback()
        raise
    except psycopg2.Error as e:
        _fail(conn, "save", e)
    finally:
        if conn:
            conn.close()


def update_invoice_status(user_id: int, invoice_id: int, status: InvoiceStatus) -> Invoice:
    """Status is set directly; nothing moves an invoice to Overdue on its own."""
    conn = None
    try:
        conn = get_db_connection()
        cursor = conn.cursor()

        cursor.execute(
            f"""
            UPDATE invoices
            SET status = %s, updated_at = CURRENT_TIMESTAMP
            WHERE id = %s AND user_id = %s
            RETURNING {INVOICE_COLUMNS}
            """,
            (InvoiceStatus(status).value, invoice_id, user_id),
        )
        row = cursor.fetchone()
        if not row:
            raise HTTPException(status_code=404, detail="Invoice not found")

        conn.commit()
        return _to_invoice(row)

    except HTTPException:
        if conn:
            conn.rollback()
        raise
    except psycopg2.Error as e:
        _fail(conn, "update", e)
    finally:
        if conn:
            conn.close()


# ============================================================
# LINE ITEM EDITS
# ============================================================

def _edit_items(user_id: int, invoice_id: int, edit) -> Invoice:
    """Load, apply `edit` to an InvoiceEditor, save back."""
    editor = InvoiceEditor(get_invoice_by_id(user_id, invoice_id))
    try:
        edit(editor)
    except IndexError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return update_invoice(user_id, invoice_id, editor.invoice)


def add_invoice_item(user_id: int, invoice_id: int) -> Invoice:
    return _edit_items(user_id, invoice_id, lambda editor: editor.add_item())


def update_invoice_item(user_id: int, invoice_id: int, index: int, changes: LineItemUpdate) -> Invoice:
    fields = changes.model_dump(include=changes.model_fields_set)
    return _edit_items(user_id, invoice_id, lambda editor: editor.update_item(index, **fields))


def remove_invoice_item(user_id: int, invoice_id: int, index: int) -> Invoice:
    # Removing the only line is a no-op, not an error
    return _edit_items(user_id, invoice_id, lambda editor: editor.remove_item(index))


# ============================================================
# DELETE INVOICE
# ============================================================

def delete_invoice(user_id: int, invoice_id: int) -> dict:
    conn = None
    try:
        conn = get_db_connection()
        cursor = conn.cursor()

        cursor.execute(
            "DELETE FROM invoices WHERE id = %s AND user_id = %s RETURNING id",
            (invoice_id, user_id),
        )
        if not cursor.fetchone():
            raise HTTPException(status_code=404, detail="Invoice not found")

        conn.commit()
        logger.info("Deleted invoice %s for user %s", invoice_id, user_id)
        return {"message": "Invoice deleted successfully", "id": invoice_id}

    except HTTPException:
        if conn:
            conn.rollback()
        raise
    except psycopg2.Error as e:
        _fail(conn, "delete", e)
    finally:
        if conn:
            conn.close()
