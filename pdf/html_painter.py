"""Screen painter: the same InvoiceLayout drawn as absolutely positioned HTML."""

from html import escape
from typing import Optional

from pdf.layout import InvoiceLayout, TextNode, RuleNode, FrameNode, ImageNode

PRINT_STYLESHEET = """
.sheet { position: relative; background: #ffffff; color: #000000;
         margin: 24px auto; box-shadow: 0 10px 40px rgba(15, 23, 42, .15);
         font-family: Helvetica, Arial, sans-serif; }
.sheet .node { position: absolute; white-space: pre; overflow: visible; }
.sheet a.node { text-decoration: underline; }
.toolbar { display: flex; gap: 12px; justify-content: center; padding: 16px;
           font-family: Helvetica, Arial, sans-serif; }
.notice { max-width: 896px; margin: 12px auto; padding: 12px 16px;
          background: #fef2f2; color: #991b1b; border-radius: 8px;
          font-family: Helvetica, Arial, sans-serif; }
.notice .dismiss { float: right; border: 0; background: none; color: inherit; cursor: pointer; }
@page { size: 210mm auto; margin: 0; }
@media print {
  .no-print { display: none !important; }
  body { background: #ffffff !important; margin: 0; }
  .sheet { box-shadow: none !important; margin: 0 !important; }
}
"""


def _px(value: float) -> str:
    return f"{value:g}px"


def _position(box) -> str:
    return f"left:{_px(box.x)};top:{_px(box.y)};width:{_px(box.width)};height:{_px(box.height)};"


def paint_node(node) -> str:
    if isinstance(node, TextNode):
        style = (
            _position(node.box)
            + f"font-size:{node.size}px;line-height:{_px(node.box.height)};color:{node.color};"
            + f"text-align:{node.align};"
            + ("font-weight:700;" if node.bold else "")
            + ("font-style:italic;" if node.italic else "")
            + ("text-decoration:underline;" if node.underline else "")
        )
        node_id = f' id="{escape(node.node_id)}"' if node.node_id else ""
        if node.href:
            return (f'<a class="node"{node_id} style="{style}" href="{escape(node.href)}" '
                    f'target="_blank" rel="noopener noreferrer">{escape(node.text)}</a>')
        return f'<div class="node"{node_id} style="{style}">{escape(node.text)}</div>'

    if isinstance(node, RuleNode):
        border = "dashed" if node.dashed else "solid"
        style = (f"left:{_px(node.box.x)};top:{_px(node.box.y)};width:{_px(node.box.width)};height:0;"
                 f"border-top:{_px(node.box.height)} {border} {node.color};")
        return f'<div class="node" style="{style}"></div>'

    if isinstance(node, FrameNode):
        style = _position(node.box) + f"box-sizing:border-box;border:1px solid {node.color};"
        return f'<div class="node" style="{style}"></div>'

    if isinstance(node, ImageNode):
        style = _position(node.box) + "object-fit:contain;object-position:right center;"
        return (f'<img class="node" style="{style}" src="{escape(node.source)}" '
                f'alt="{escape(node.alt)}" crossorigin="anonymous">')

    raise TypeError(f"Unknown layout node: {type(node).__name__}")


def paint_sheet(layout: InvoiceLayout) -> str:
    body = "\n".join(paint_node(node) for node in layout.nodes)
    return (f'<div class="sheet printable-content" '
            f'style="width:{layout.width}px;height:{layout.height}px">\n{body}\n</div>')


def render_page(layout: InvoiceLayout, toolbar: str = "", notice: Optional[str] = None) -> str:
    """Full preview page. Toolbar and notice are screen-only."""
    notice_html = ""
    if notice:
        notice_html = (f'<div class="notice no-print" role="alert">{escape(notice)}'
                       '<button type="button" class="dismiss" aria-label="Dismiss" '
                       'onclick="this.parentElement.remove()">&times;</button></div>')
    toolbar_html = f'<div class="toolbar no-print">{toolbar}</div>' if toolbar else ""
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{escape(layout.title)}</title>
<style>{PRINT_STYLESHEET}</style>
</head>
<body>
{toolbar_html}
{notice_html}
{paint_sheet(layout)}
</body>
</html>"""
