"""
Snapshot-to-PDF export.

The layout is rasterized and the bitmap becomes a single PDF page 210mm wide.
Page height follows the bitmap's aspect ratio and is never shorter than one
A4 page; long invoices get one tall page instead of a second page. The
pay-online link is re-created as a link annotation at the same spot, using one
scale factor for both axes.
"""

import asyncio
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Optional, Tuple

from fpdf import FPDF
from fpdf.errors import FPDFException
from PIL import Image

from config.settings import EXPORT_SCALE
from pdf.layout import InvoiceLayout, Box, PAYMENT_LINK_ID, build_invoice_layout
from pdf.raster import AssetLoadError, resolve_assets, rasterize
from pdf.utils.text_utils import sanitize_text

logger = logging.getLogger(__name__)

PAGE_WIDTH_MM = 210.0
MIN_PAGE_HEIGHT_MM = 297.0


class ExportError(Exception):
    """Snapshot or PDF assembly failed."""


@dataclass(frozen=True)
class LinkRect:
    x: float
    y: float
    width: float
    height: float
    url: str


@dataclass
class ExportResult:
    filename: str
    content: bytes
    page_width: float
    page_height: float
    image_height: float
    link: Optional[LinkRect] = None

    media_type = "application/pdf"


# ==================== GEOMETRY ====================

def compute_page_size(bitmap_width: int, bitmap_height: int,
                      page_width: float = PAGE_WIDTH_MM,
                      min_height: float = MIN_PAGE_HEIGHT_MM) -> Tuple[float, float]:
    """
    Returns (content_height, page_height) in mm.

    content_height keeps the bitmap's aspect ratio at page_width; the page is
    that tall, or one standard page if the content is shorter.
    """
    if bitmap_width <= 0 or bitmap_height <= 0:
        raise ExportError(f"Empty snapshot ({bitmap_width}x{bitmap_height})")

    content_height = bitmap_height * (page_width / bitmap_width)
    return content_height, max(content_height, min_height)


def compute_link_rect(box: Box, source_width: float, url: str,
                      page_width: float = PAGE_WIDTH_MM) -> LinkRect:
    """Map a source-pixel box onto the page with one uniform scale."""
    factor = page_width / source_width
    return LinkRect(
        x=box.x * factor,
        y=box.y * factor,
        width=box.width * factor,
        height=box.height * factor,
        url=url,
    )


_UNSAFE_FILENAME = re.compile(r'[\\/*?:"<>|\s]+')


def export_filename(invoice_number: Optional[str]) -> str:
    number = _UNSAFE_FILENAME.sub("-", (invoice_number or "").strip()).strip("-")
    return f"Invoice-{number or 'draft'}.pdf"


# ==================== ASSEMBLY ====================

def _creation_date(invoice) -> datetime:
    # Pinned so the same invoice state always yields the same bytes
    issued = invoice.invoice_date
    if issued:
        return datetime(issued.year, issued.month, issued.day, tzinfo=timezone.utc)
    return datetime(2000, 1, 1, tzinfo=timezone.utc)


def assemble_pdf(invoice, layout: InvoiceLayout, bitmap: Image.Image) -> ExportResult:
    content_height, page_height = compute_page_size(bitmap.width, bitmap.height)

    pdf = FPDF(orientation="P", unit="mm", format=(PAGE_WIDTH_MM, page_height))
    pdf.set_margins(0, 0, 0)
    pdf.set_auto_page_break(auto=False)
    pdf.set_creation_date(_creation_date(invoice))
    pdf.set_title(sanitize_text(layout.title))
    pdf.add_page()

    pdf.image(bitmap, x=0, y=0, w=PAGE_WIDTH_MM, h=content_height)

    link = None
    for node in layout.links:
        rect = compute_link_rect(node.box, layout.width, node.href)
        pdf.link(rect.x, rect.y, rect.width, rect.height, rect.url)
        if node.node_id == PAYMENT_LINK_ID:
            link = rect
    if link is None:
        logger.warning("Layout for %s has no payment link", layout.title)

    return ExportResult(
        filename=export_filename(invoice.invoice_number),
        content=bytes(pdf.output()),
        page_width=PAGE_WIDTH_MM,
        page_height=page_height,
        image_height=content_height,
        link=link,
    )


def export_invoice_pdf(invoice, layout: Optional[InvoiceLayout] = None,
                       assets: Optional[Dict[str, Image.Image]] = None,
                       scale: int = EXPORT_SCALE) -> ExportResult:
    """Layout -> assets -> bitmap -> single-page PDF with link annotation."""
    layout = layout or build_invoice_layout(invoice)
    try:
        if assets is None:
            assets = resolve_assets(layout)
        bitmap = rasterize(layout, assets, scale=max(2, scale))
        return assemble_pdf(invoice, layout, bitmap)
    except ExportError:
        raise
    except (AssetLoadError, FPDFException, OSError, ValueError, RuntimeError) as e:
        raise ExportError(str(e)) from e


async def export_invoice_pdf_async(invoice, scale: int = EXPORT_SCALE) -> ExportResult:
    """
    Same pipeline off the event loop. Assets are awaited as a batch before
    rasterization begins.
    """
    layout = build_invoice_layout(invoice)
    try:
        assets = await asyncio.to_thread(resolve_assets, layout)
    except AssetLoadError as e:
        raise ExportError(str(e)) from e
    return await asyncio.to_thread(export_invoice_pdf, invoice, layout, assets, scale)
