import io
import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import HTTPException
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import StreamingResponse

from invoices import service as invoice_service
from pdf.export import ExportError, ExportResult, export_invoice_pdf_async

logger = logging.getLogger(__name__)

EXPORT_FAILED_MESSAGE = "Failed to generate PDF"


@dataclass
class Notification:
    message: str
    detail: Optional[str] = None


class ExportTask:
    """
    One export attempt as the user sees it: a "preparing" flag while it runs
    and a notification if it fails. The flag is always cleared, and a failed
    attempt can simply be run again.
    """

    def __init__(self):
        self.preparing = False
        self.notification: Optional[Notification] = None

    async def run(self, invoice) -> Optional[ExportResult]:
        self.preparing = True
        self.notification = None
        try:
            return await export_invoice_pdf_async(invoice)
        except Exception as e:
            logger.exception("PDF export failed for invoice %s", getattr(invoice, "id", None))
            self.notification = Notification(EXPORT_FAILED_MESSAGE, detail=str(e))
            return None
        finally:
            self.preparing = False


# ============================================================
# HTTP HELPERS
# ============================================================

def pdf_response(result: ExportResult) -> StreamingResponse:
    return StreamingResponse(
        io.BytesIO(result.content),
        media_type=result.media_type,
        headers={"Content-Disposition": f'attachment; filename="{result.filename}"'},
    )


async def export_or_500(invoice) -> ExportResult:
    try:
        return await export_invoice_pdf_async(invoice)
    except ExportError as e:
        logger.exception("PDF export failed for invoice %s", invoice.id)
        raise HTTPException(status_code=500, detail=f"{EXPORT_FAILED_MESSAGE}: {e}")


async def render_invoice_pdf(user_id: int, invoice_id: int) -> ExportResult:
    invoice = await run_in_threadpool(invoice_service.get_invoice_by_id, user_id, invoice_id)
    return await export_or_500(invoice)


async def download_invoice_pdf(user_id: int, invoice_id: int) -> StreamingResponse:
    """Server-side download; same pipeline, same bytes as the preview export."""
    return pdf_response(await render_invoice_pdf(user_id, invoice_id))
