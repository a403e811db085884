"""Write SVG documents for exported shapes."""

from __future__ import annotations

from typing import Any
from xml.sax.saxutils import escape, quoteattr


def _attributes(attrs: dict[str, Any]) -> str:
    return " ".join(f"{name}={quoteattr(str(value))}" for name, value in attrs.items())


def serialize_svg(
    elements: list[dict[str, Any]],
    canvas_w: float = 1.0,
    canvas_h: float = 1.0,
    title: str = "",
    description: str = "",
) -> str:
    """SVG markup for ``elements``; each dict is a ``tag`` plus its attributes.

    The viewBox spans the canvas, so shape coordinates are used as-is.
    """
    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        f'<svg viewBox="0 0 {canvas_w:g} {canvas_h:g}" xmlns="http://www.w3.org/2000/svg">',
    ]
    if title:
        lines.append(f"  <title>{escape(title)}</title>")
    if description:
        lines.append(f"  <desc>{escape(description)}</desc>")

    for elem in elements:
        attrs = dict(elem)
        tag = attrs.pop("tag", "path")
        lines.append(f"  <{tag} {_attributes(attrs)} />")

    lines.append("</svg>")
    return "\n".join(lines)
