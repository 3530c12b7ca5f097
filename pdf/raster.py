"""
Raster painter: draws an InvoiceLayout into a Pillow bitmap.

Every image the layout references is fetched first (`resolve_assets`);
painting never starts with an asset outstanding, and a missing asset is an
error rather than a blank rectangle.
"""

import io
import logging
from functools import lru_cache
from typing import Dict

import requests
from PIL import Image, ImageDraw, ImageFont, ImageOps

from config.settings import FONT_PATH, FONT_BOLD_PATH, ASSET_FETCH_TIMEOUT
from pdf.layout import InvoiceLayout, TextNode, RuleNode, FrameNode, ImageNode

logger = logging.getLogger(__name__)


class AssetLoadError(Exception):
    """An image referenced by the layout could not be fetched or decoded."""


# ==================== ASSETS ====================

def load_asset(source: str, timeout: float = ASSET_FETCH_TIMEOUT) -> Image.Image:
    try:
        if source.startswith(("http://", "https://")):
            # Fetched here as bytes so remote logos are painted, not skipped
            response = requests.get(source, timeout=timeout)
            response.raise_for_status()
            data = response.content
        else:
            with open(source, "rb") as f:
                data = f.read()

        image = Image.open(io.BytesIO(data))
        image.load()
        return image.convert("RGBA")
    except (requests.RequestException, OSError) as e:
        raise AssetLoadError(f"Could not load asset {source}: {e}") from e


def resolve_assets(layout: InvoiceLayout) -> Dict[str, Image.Image]:
    """Load every distinct image source in the layout."""
    assets = {}
    for node in layout.images:
        if node.source not in assets:
            assets[node.source] = load_asset(node.source)
            logger.debug("Resolved asset %s", node.source)
    return assets


# ==================== FONTS ====================

@lru_cache(maxsize=64)
def get_font(size: int, bold: bool = False):
    path = FONT_BOLD_PATH if bold and FONT_BOLD_PATH else FONT_PATH
    if path:
        return ImageFont.truetype(path, size)
    return ImageFont.load_default(size=size)


# ==================== PAINTING ====================

def _paint_text(draw: ImageDraw.ImageDraw, node: TextNode, scale: int):
    if not node.text:
        return

    box = node.box.scaled(scale)
    size = max(1, round(node.size * scale))
    font = get_font(size, node.bold)
    fake_bold = node.bold and not FONT_BOLD_PATH
    width = draw.textlength(node.text, font=font)

    # Painted text never runs past its box
    available = box.width - (2 if fake_bold else 0)
    if width > available and available > 0:
        size = max(1, int(size * available / width))
        font = get_font(size, node.bold)
        width = draw.textlength(node.text, font=font)
        while width > available and size > 1:
            size -= 1
            font = get_font(size, node.bold)
            width = draw.textlength(node.text, font=font)

    if node.align == "right":
        x = box.right - width
    elif node.align == "center":
        x = box.x + (box.width - width) / 2
    else:
        x = box.x
    y = box.y + (box.height - size) / 2

    draw.text(
        (x, y),
        node.text,
        fill=node.color,
        font=font,
        stroke_width=1 if fake_bold else 0,
        stroke_fill=node.color,
    )

    if node.underline:
        underline_y = y + size + scale
        draw.line([(x, underline_y), (x + width, underline_y)], fill=node.color, width=scale)


def _paint_rule(draw: ImageDraw.ImageDraw, node: RuleNode, scale: int):
    box = node.box.scaled(scale)
    thickness = max(1, round(box.height))

    if not node.dashed:
        draw.rectangle([box.x, box.y, box.right - 1, box.y + thickness - 1], fill=node.color)
        return

    dash, gap = 8 * scale, 6 * scale
    x = box.x
    while x < box.right:
        end = min(x + dash, box.right)
        draw.rectangle([x, box.y, end - 1, box.y + thickness - 1], fill=node.color)
        x = end + gap


def _paint_frame(draw: ImageDraw.ImageDraw, node: FrameNode, scale: int):
    box = node.box.scaled(scale)
    draw.rectangle([box.x, box.y, box.right - 1, box.bottom - 1], outline=node.color, width=scale)


def _paint_image(canvas: Image.Image, node: ImageNode, assets: Dict[str, Image.Image], scale: int):
    box = node.box.scaled(scale)
    fitted = ImageOps.contain(assets[node.source], (int(box.width), int(box.height)))
    # Right-align inside the box, centred vertically
    x = int(box.right - fitted.width)
    y = int(box.y + (box.height - fitted.height) / 2)
    canvas.paste(fitted, (x, y), fitted)


def rasterize(layout: InvoiceLayout, assets: Dict[str, Image.Image], scale: int = 2) -> Image.Image:
    """
    Paint the layout at `scale` bitmap pixels per source pixel.

    `assets` must already hold every source in `layout.images`.
    """
    missing = [n.source for n in layout.images if n.source not in assets]
    if missing:
        raise AssetLoadError(f"Assets not resolved before capture: {', '.join(missing)}")

    canvas = Image.new("RGB", (layout.width * scale, layout.height * scale), "#ffffff")
    draw = ImageDraw.Draw(canvas)

    for node in layout.nodes:
        if isinstance(node, TextNode):
            _paint_text(draw, node, scale)
        elif isinstance(node, RuleNode):
            _paint_rule(draw, node, scale)
        elif isinstance(node, FrameNode):
            _paint_frame(draw, node, scale)
        elif isinstance(node, ImageNode):
            _paint_image(canvas, node, assets, scale)

    return canvas
