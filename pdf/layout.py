"""
Invoice document layout.

`build_invoice_layout` turns an invoice into a flat tree of positioned nodes
measured in source pixels on a fixed 896px-wide sheet. The tree is the only
description of the document: the HTML painter draws it for preview and print,
the raster painter draws it for PDF export, so the two cannot drift apart.

Text metrics are estimated from font size (fixed line height, average glyph
width) so the layout stays a pure function of the invoice.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from config.settings import PAYMENT_URL, LOGO_PATH, CARD_ICON_PATHS, CURRENCY_LABEL
from pdf.utils.currency_utils import format_currency, format_quantity
from pdf.utils.date_utils import format_date
from pdf.utils.text_utils import wrap_text, wrap_block

# ==================== SHEET GEOMETRY (source px) ====================

SHEET_WIDTH = 896
MIN_SHEET_HEIGHT = 1400
PADDING = 48
CONTENT_LEFT = PADDING
CONTENT_RIGHT = SHEET_WIDTH - PADDING
CONTENT_WIDTH = CONTENT_RIGHT - CONTENT_LEFT
RIGHT_COLUMN = SHEET_WIDTH // 2 + 24
SLIP_BOTTOM_MARGIN = 40
SLIP_GAP = 80

PAYMENT_LINK_ID = "payment-link"

# ==================== PALETTE ====================

BLACK = "#000000"
SLATE_950 = "#020617"
SLATE_900 = "#0f172a"
SLATE_800 = "#1e293b"
SLATE_700 = "#334155"
SLATE_600 = "#475569"
SLATE_500 = "#64748b"
SLATE_400 = "#94a3b8"
SLATE_200 = "#e2e8f0"
SLATE_50 = "#f8fafc"
PRIMARY = "#f20000"

# ==================== PLACEHOLDERS ====================

PLACEHOLDERS = {
    "customer_name": "Name Here",
    "customer_address": "Customer Address Here",
    "customer_phone": "Phone Here",
    "company_name": "Company Name Here",
    "invoice_number": "INV-00000",
    "reference": "Reference Here",
    "abn": "ABN Here",
    "description": "Item here",
    "quantity": "xxx.x",
    "unit_price": "x,xxx.xx",
    "bank_field": "Here",
}

CARD_BRANDS = ("VISA", "MASTERCARD", "AMEX")


# ==================== NODES ====================

@dataclass(frozen=True)
class Box:
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def scaled(self, factor: float) -> "Box":
        return Box(self.x * factor, self.y * factor, self.width * factor, self.height * factor)


@dataclass(frozen=True)
class TextNode:
    box: Box
    text: str
    size: int = 11
    bold: bool = False
    italic: bool = False
    color: str = SLATE_700
    align: str = "left"
    underline: bool = False
    node_id: Optional[str] = None
    href: Optional[str] = None


@dataclass(frozen=True)
class RuleNode:
    box: Box
    color: str = SLATE_200
    dashed: bool = False


@dataclass(frozen=True)
class FrameNode:
    box: Box
    color: str = SLATE_400


@dataclass(frozen=True)
class ImageNode:
    box: Box
    source: str
    alt: str = ""


@dataclass
class InvoiceLayout:
    width: int
    height: int
    nodes: List = field(default_factory=list)
    title: str = ""

    def find(self, node_id: str):
        for node in self.nodes:
            if getattr(node, "node_id", None) == node_id:
                return node
        return None

    @property
    def links(self) -> List[TextNode]:
        return [n for n in self.nodes if isinstance(n, TextNode) and n.href]

    @property
    def images(self) -> List[ImageNode]:
        return [n for n in self.nodes if isinstance(n, ImageNode)]


# ==================== METRICS ====================

def line_height(size: int) -> int:
    return round(size * 1.5)


def text_width(text: str, size: int, bold: bool = False) -> float:
    return len(text) * size * (0.6 if bold else 0.55)


def chars_per_line(width: float, size: int) -> int:
    return max(1, int(width / (size * 0.55)))


class _Canvas:
    """Collects nodes while a section walks its own vertical cursor."""

    def __init__(self):
        self.nodes = []

    def text(self, x, y, width, text, size=11, **style) -> float:
        height = line_height(size)
        self.nodes.append(TextNode(Box(x, y, width, height), text, size=size, **style))
        return y + height

    def block(self, x, y, width, text, size=11, **style) -> float:
        for line in wrap_block(text, chars_per_line(width, size)):
            y = self.text(x, y, width, line, size, **style)
        return y

    def rule(self, x, y, width, color=SLATE_200, thickness=1, dashed=False) -> float:
        self.nodes.append(RuleNode(Box(x, y, width, thickness), color, dashed))
        return y + thickness

    def frame(self, box: Box, color=SLATE_400):
        self.nodes.append(FrameNode(box, color))

    def image(self, box: Box, source: str, alt: str = ""):
        self.nodes.append(ImageNode(box, source, alt))


def _or(value, placeholder: str) -> str:
    if value is None:
        return placeholder
    text = str(value).strip()
    return text if text else placeholder


# ==================== SECTIONS ====================

def _header(canvas: _Canvas, invoice, logo_path: str) -> Tuple[float, float]:
    """Title on the left, issuer mark on the right. Returns both column bottoms."""
    title_bottom = canvas.text(CONTENT_LEFT, PADDING, 376, "INVOICE", size=48, color=BLACK)

    company_name = _or(invoice.company_details.name, PLACEHOLDERS["company_name"])
    if logo_path:
        box = Box(CONTENT_RIGHT - 160, PADDING, 160, 64)
        canvas.image(box, logo_path, alt=company_name)
        mark_bottom = box.bottom
    else:
        mark_bottom = canvas.text(RIGHT_COLUMN, PADDING, CONTENT_RIGHT - RIGHT_COLUMN,
                                  company_name, size=24, bold=True, color=SLATE_900, align="right")
    return title_bottom, mark_bottom


def _meta(canvas: _Canvas, invoice, title_bottom: float, mark_bottom: float) -> float:
    customer = invoice.customer_details
    company = invoice.company_details

    # ---------------- LEFT: CUSTOMER ----------------
    x, width = CONTENT_LEFT + 128, 248
    y = title_bottom + 48
    y = canvas.text(x, y, width, _or(customer.name, PLACEHOLDERS["customer_name"]),
                    size=14, bold=True, color=SLATE_700)
    left_bottom = canvas.block(x, y + 4, width,
                               _or(customer.address, PLACEHOLDERS["customer_address"]),
                               size=12, color=SLATE_500)

    # ---------------- RIGHT: INVOICE META ----------------
    label_x, label_w = RIGHT_COLUMN, 140
    y = mark_bottom + 32
    pairs = [
        ("Invoice Date", format_date(invoice.invoice_date)),
        ("Invoice Number", _or(invoice.invoice_number, PLACEHOLDERS["invoice_number"])),
        ("Reference", _or(invoice.reference, PLACEHOLDERS["reference"])),
        ("ABN", _or(company.abn, PLACEHOLDERS["abn"])),
    ]
    for label, value in pairs:
        y = canvas.text(label_x, y, label_w, label, size=10, bold=True, color=SLATE_800)
        y = canvas.text(label_x, y, label_w, value, size=10, color=SLATE_500) + 16
    labels_bottom = y

    # ---------------- RIGHT: COMPANY CONTACT ----------------
    company_x = label_x + label_w + 24
    company_w = CONTENT_RIGHT - company_x
    y = mark_bottom + 32
    y = canvas.text(company_x, y, company_w, _or(company.name, PLACEHOLDERS["company_name"]),
                    size=11, bold=True, color=SLATE_900)
    y = canvas.block(company_x, y, company_w, company.address, size=11, color=SLATE_600)
    for value in (company.phone, company.email, company.website):
        if value:
            y = canvas.text(company_x, y, company_w, value, size=11, color=SLATE_600)

    return max(left_bottom, labels_bottom, y) + 64


# Description, Quantity, Unit Price, Amount
COLUMNS = (
    ("Description", CONTENT_LEFT, 400, "left"),
    ("Quantity", CONTENT_LEFT + 400, 120, "center"),
    ("Unit Price", CONTENT_LEFT + 520, 140, "right"),
    ("Amount", CONTENT_LEFT + 660, 140, "right"),
)


def _items_table(canvas: _Canvas, items: Sequence, top: float, currency_label: str) -> float:
    y = top
    for label, x, width, align in COLUMNS:
        if label == "Amount":
            label = f"Amount {currency_label}"
        canvas.text(x, y + 8, width, label.upper(), size=12, bold=True, color=SLATE_900, align=align)
    y = canvas.rule(CONTENT_LEFT, y + 36, CONTENT_WIDTH, color=BLACK)

    desc_x, desc_w = COLUMNS[0][1], COLUMNS[0][2] - 16
    for index, item in enumerate(items):
        row_top = y + 16
        lines = wrap_text(_or(item.description, PLACEHOLDERS["description"]), chars_per_line(desc_w, 11))
        row_bottom = row_top
        for line in lines:
            row_bottom = canvas.text(desc_x, row_bottom, desc_w, line, size=11)

        quantity = format_quantity(item.quantity) or PLACEHOLDERS["quantity"]
        unit_price = (format_currency(item.unit_price) if item.unit_price is not None
                      else PLACEHOLDERS["unit_price"])
        canvas.text(COLUMNS[1][1], row_top, COLUMNS[1][2], quantity, size=11, align="center")
        canvas.text(COLUMNS[2][1], row_top, COLUMNS[2][2], unit_price, size=11, align="right")
        canvas.text(COLUMNS[3][1], row_top, COLUMNS[3][2], format_currency(item.total),
                    size=11, bold=True, color=SLATE_900, align="right")

        y = row_bottom + 16
        if index < len(items) - 1:
            y = canvas.rule(CONTENT_LEFT, y, CONTENT_WIDTH, color=SLATE_50)

    return y + 40


def _totals(canvas: _Canvas, invoice, top: float, currency_label: str) -> float:
    y = canvas.rule(CONTENT_LEFT, top, CONTENT_WIDTH, color=SLATE_700)
    x = CONTENT_RIGHT - 256
    canvas.text(x, y + 8, 128, f"TOTAL {currency_label}", size=12, bold=True, color=SLATE_900)
    bottom = canvas.text(x + 128, y + 8, 128, format_currency(invoice.total_amount),
                         size=14, bold=True, color=SLATE_950, align="right")
    return bottom + 8 + 56


def _payment(canvas: _Canvas, invoice, top: float, payment_url: str, card_icons: Sequence[str]) -> float:
    x, width = CONTENT_LEFT, 376
    company = invoice.company_details
    bank = invoice.payment_instructions
    here = PLACEHOLDERS["bank_field"]

    y = canvas.text(x, top, width, f"Due Date: {format_date(invoice.due_date)}",
                    size=11, bold=True, color=SLATE_900)
    y = canvas.text(x, y + 4, width, "We accept payment by bank transfer or card.", size=11, color=SLATE_600)
    y = canvas.text(x, y + 8, width, "Bank Details:", size=11, bold=True, color=SLATE_900)
    for line in (
        f"Bank: {_or(bank.bank_name, here)}",
        f"Account name: {_or(company.name, PLACEHOLDERS['customer_name'])}",
        f"Account Number: {_or(bank.account_number, here)}",
        f"BSB: {_or(bank.bsb, here)}",
    ):
        y = canvas.text(x, y, width, line, size=11, color=SLATE_600)
    y = canvas.text(x, y + 16, width, "Please quote your invoice number as reference.",
                    size=11, italic=True, color=SLATE_500)

    # Card brands
    y += 16
    badge_x = x
    if card_icons:
        for source in card_icons:
            canvas.image(Box(badge_x, y, 40, 24), source)
            badge_x += 56
    else:
        for brand in CARD_BRANDS:
            badge_w = text_width(brand, 9, bold=True) + 16
            canvas.frame(Box(badge_x, y, badge_w, 24))
            canvas.text(badge_x, y + 5, badge_w, brand, size=9, bold=True, color=SLATE_800, align="center")
            badge_x += badge_w + 16
    y += 24 + 16

    label = "View and pay online now"
    link_w = min(width, text_width(label, 11, bold=True))
    y = canvas.text(x, y, link_w, label, size=11, bold=True, color=PRIMARY,
                    underline=True, node_id=PAYMENT_LINK_ID, href=payment_url)
    return y


def _payment_advice(canvas: _Canvas, invoice, top: float) -> float:
    """Tear-off slip. Returns its bottom."""
    customer = invoice.customer_details

    y = canvas.rule(CONTENT_LEFT, top, CONTENT_WIDTH, color=SLATE_900, thickness=2, dashed=True)
    y = canvas.text(CONTENT_LEFT, y + 16, CONTENT_WIDTH, "PAYMENT ADVICE", size=36, color=SLATE_800)
    grid_top = y + 48

    # ---------------- LEFT: REMIT TO ----------------
    canvas.text(CONTENT_LEFT, grid_top + 4, 40, "To:", size=11, bold=True, color=SLATE_900)
    x, width = CONTENT_LEFT + 88, 280
    y = canvas.text(x, grid_top, width, _or(customer.name, PLACEHOLDERS["customer_name"]),
                    size=11, bold=True, color=SLATE_950)
    y = canvas.block(x, y + 4, width, _or(customer.address, PLACEHOLDERS["customer_address"]),
                     size=11, color=SLATE_600)
    y = canvas.text(x, y, width, _or(customer.phone, PLACEHOLDERS["customer_phone"]), size=11, color=SLATE_600)
    for value in (customer.email, customer.website):
        if value:
            y = canvas.text(x, y, width, value, size=11, color=SLATE_600)
    left_bottom = y

    # ---------------- RIGHT: SUMMARY ----------------
    x, width = RIGHT_COLUMN, CONTENT_RIGHT - RIGHT_COLUMN
    y = grid_top
    for label, value in (
        ("Customer", _or(customer.name, PLACEHOLDERS["customer_name"])),
        ("Invoice Number", _or(invoice.invoice_number, PLACEHOLDERS["invoice_number"])),
        ("Amount", format_currency(invoice.total_amount)),
        ("Due Date", format_date(invoice.due_date)),
    ):
        canvas.text(x, y + 9, width / 2, label.upper(), size=9, bold=True, color=SLATE_500)
        canvas.text(x + width / 2, y + 6, width / 2, value, size=12, bold=True, color=SLATE_900, align="right")
        y = canvas.rule(x, y + 30, width, color=SLATE_200)

    y = canvas.rule(x, y + 24, width, color=SLATE_900)
    field_x, field_w = CONTENT_RIGHT - 192, 192
    canvas.text(x + 4, y + 24 + 8, field_x - x - 8, "AMOUNT ENCLOSED", size=10, bold=True, color=SLATE_900)
    canvas.text(field_x, y + 24 + 6, field_w, invoice.company_details.amount_enclosed or "",
                size=11, color=SLATE_900)
    y = canvas.rule(field_x, y + 24 + 24, field_w, color=SLATE_900, thickness=2)
    y = canvas.text(x, y + 8, width, "Enter the amount you are paying above",
                    size=10, italic=True, color=SLATE_400, align="right")

    return max(left_bottom, y)


# ==================== ENTRY POINT ====================

def build_invoice_layout(
    invoice,
    payment_url: Optional[str] = None,
    logo_path: Optional[str] = None,
    card_icons: Optional[Sequence[str]] = None,
    currency_label: Optional[str] = None,
) -> InvoiceLayout:
    """Map an invoice to its document tree. Same invoice, same tree."""
    payment_url = PAYMENT_URL if payment_url is None else payment_url
    logo_path = LOGO_PATH if logo_path is None else logo_path
    card_icons = CARD_ICON_PATHS if card_icons is None else card_icons
    currency_label = CURRENCY_LABEL if currency_label is None else currency_label

    canvas = _Canvas()

    title_bottom, mark_bottom = _header(canvas, invoice, logo_path)
    table_top = _meta(canvas, invoice, title_bottom, mark_bottom)
    totals_top = _items_table(canvas, invoice.items, table_top, currency_label)
    payment_top = _totals(canvas, invoice, totals_top, currency_label)
    payment_bottom = _payment(canvas, invoice, payment_top, payment_url, card_icons)

    # The slip is pinned to the foot of the sheet. Measure it once off-sheet,
    # then place it for real.
    probe = _Canvas()
    slip_height = _payment_advice(probe, invoice, 0)

    height = max(MIN_SHEET_HEIGHT, int(payment_bottom + SLIP_GAP + slip_height + SLIP_BOTTOM_MARGIN))
    _payment_advice(canvas, invoice, height - SLIP_BOTTOM_MARGIN - slip_height)

    return InvoiceLayout(
        width=SHEET_WIDTH,
        height=height,
        nodes=canvas.nodes,
        title=f"Invoice {invoice.invoice_number or ''}".strip(),
    )
