import logging

import resend
from fastapi import HTTPException

from config.settings import RESEND_API_KEY, MAIL_FROM
from pdf.export import ExportResult
from pdf.utils.currency_utils import format_currency

logger = logging.getLogger(__name__)

# Load API key safely
resend.api_key = RESEND_API_KEY


def build_invoice_message(invoice, result: ExportResult) -> dict:
    company = invoice.company_details.name or "us"
    customer = invoice.customer_details.name or "there"
    body = (
        f"<p>Hi {customer},</p>"
        f"<p>Please find attached invoice {invoice.invoice_number}.</p>"
        f"<p>Total Amount: {format_currency(invoice.total_amount)}</p>"
        f"<p>Thank you for your business!</p>"
    )
    return {
        "from": MAIL_FROM,
        "to": [invoice.customer_details.email],
        "subject": f"Invoice {invoice.invoice_number} from {company}",
        "html": body,
        "attachments": [{"filename": result.filename, "content": list(result.content)}],
    }


def send_invoice_email(invoice, result: ExportResult) -> dict:
    if not invoice.customer_details.email:
        raise HTTPException(status_code=400, detail="Customer has no email address")
    if not resend.api_key:
        raise HTTPException(status_code=503, detail="Email is not configured")

    try:
        email = resend.Emails.send(build_invoice_message(invoice, result))
    except Exception as e:
        logger.exception("Sending invoice %s failed", invoice.id)
        raise HTTPException(status_code=502, detail=f"Failed to send invoice: {str(e)}")

    # Response shape differs between resend releases
    email_id = email.get("id") if isinstance(email, dict) else getattr(email, "id", None)
    logger.info("Sent invoice %s to %s", invoice.id, invoice.customer_details.email)
    return {"status": "sent", "id": email_id, "to": invoice.customer_details.email}
