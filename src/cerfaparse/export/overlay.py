"""Debug overlay: inferred field rectangles drawn over a rendered page."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple

from PIL import Image, ImageDraw, ImageFont

from ..models import Field

# RGBA outline per field kind
FIELD_COLORS: Dict[str, Tuple[int, int, int, int]] = {
    "comb": (0, 0, 255, 200),
    "text": (0, 160, 0, 200),
    "multiline": (255, 140, 0, 200),
    "checkbox": (220, 0, 0, 200),
}


def _field_kind(field: Field) -> str:
    if field.type == "checkbox":
        return "checkbox"
    if field.max_length:
        return "comb"
    return "multiline" if field.multiline else "text"


def _font(size: int):
    try:
        return ImageFont.truetype("arial.ttf", size)
    except (OSError, IOError):
        return ImageFont.load_default()


def field_image_box(
    field: Field, page_height: float, scale: float
) -> Tuple[float, float, float, float]:
    """PDF-space rect → ``(x0, y0, x1, y1)`` in image pixels (Y down)."""
    r = field.pdf_rect
    return (
        r.x * scale,
        (page_height - r.top) * scale,
        r.right * scale,
        (page_height - r.y) * scale,
    )


def draw_field_overlay(
    image: Image.Image,
    fields: Iterable[Field],
    page_height: float,
    scale: float,
    *,
    show_keys: bool = True,
    out_path: Optional[Path] = None,
) -> Image.Image:
    """Outline *fields* on a copy of *image*, colored by field kind.

    *scale* is pixels per PDF point (``resolution / 72``).  Keys are
    drawn above each rectangle unless *show_keys* is false.
    """
    base = image.convert("RGBA")
    overlay = Image.new("RGBA", base.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(overlay, "RGBA")
    font_size = max(8, int(6 * scale))
    font = _font(font_size)

    for f in fields:
        color = FIELD_COLORS[_field_kind(f)]
        x0, y0, x1, y1 = field_image_box(f, page_height, scale)
        draw.rectangle((x0, y0, x1, y1), outline=color, width=2)
        if show_keys:
            ty = max(0.0, y0 - font_size - 2)
            bbox = draw.textbbox((x0, ty), f.key, font=font)
            draw.rectangle(
                (bbox[0] - 1, bbox[1] - 1, bbox[2] + 1, bbox[3] + 1),
                fill=(255, 255, 255, 200),
            )
            draw.text((x0, ty), f.key, fill=color[:3], font=font)

    result = Image.alpha_composite(base, overlay).convert("RGB")
    if out_path is not None:
        out_path = Path(out_path)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        result.save(out_path)
    return result
