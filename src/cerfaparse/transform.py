"""Affine transform helpers: composition, point mapping, SVG → PDF space.

Coordinate spaces
-----------------
- *content space*: raw SVG path coordinates, before any transform.
- *viewport space*: content space mapped through the page transform;
  top-left origin, Y down (what pdftocairo draws).
- *PDF space*: bottom-left origin, Y up.  ``pdf_y = page_height - viewport_y``.
"""

from __future__ import annotations

import math
import re
from typing import Optional, Tuple

from .models import InputBox, PdfRect, TransformMatrix

_NUM = r"([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)"
_SEP = r"\s*[,\s]\s*"

_MATRIX_RE = re.compile(
    r"matrix\(\s*" + _SEP.join([_NUM] * 6) + r"\s*\)"
)
_TRANSLATE_RE = re.compile(
    r"translate\(\s*" + _NUM + r"(?:" + _SEP + _NUM + r")?\s*\)"
)


def compose_transforms(
    outer: TransformMatrix, inner: TransformMatrix
) -> TransformMatrix:
    """Return ``outer * inner``: *inner* is applied first, then *outer*.

    For nested SVG groups the ancestor's matrix is *outer*.
    """
    return TransformMatrix(
        a=outer.a * inner.a + outer.c * inner.b,
        b=outer.b * inner.a + outer.d * inner.b,
        c=outer.a * inner.c + outer.c * inner.d,
        d=outer.b * inner.c + outer.d * inner.d,
        e=outer.a * inner.e + outer.c * inner.f + outer.e,
        f=outer.b * inner.e + outer.d * inner.f + outer.f,
    )


def map_point(x: float, y: float, matrix: TransformMatrix) -> Tuple[float, float]:
    """Apply *matrix* to ``(x, y)``; the result is in viewport space."""
    return (
        matrix.a * x + matrix.c * y + matrix.e,
        matrix.b * x + matrix.d * y + matrix.f,
    )


def rect_to_pdf_space(
    box: InputBox,
    matrix: TransformMatrix,
    page_height: float,
) -> PdfRect:
    """Map a content-space box to a PDF-space rect.

    All four corners go through *matrix*; their bounding box absorbs any
    sign flip (e.g. ``d < 0`` for vertically mirrored content) and keeps
    a positive size under shear.  The viewport bottom edge becomes the
    PDF ``y``.

    Mapping only the two diagonal corners gives the same rect for the
    axis-aligned matrices pdftocairo writes, but collapses to zero width
    or height once the matrix shears; all four are mapped on purpose.
    """
    corners = [
        map_point(x, y, matrix)
        for x in (box.x, box.right)
        for y in (box.y, box.bottom)
    ]
    xs = [p[0] for p in corners]
    ys = [p[1] for p in corners]

    vp_left = min(xs)
    vp_top = min(ys)
    vp_right = max(xs)
    vp_bottom = max(ys)

    return PdfRect(
        x=vp_left,
        y=page_height - vp_bottom,
        width=vp_right - vp_left,
        height=vp_bottom - vp_top,
    )


def parse_transform(attr: Optional[str]) -> Optional[TransformMatrix]:
    """Parse an SVG ``transform`` attribute.

    Supports ``matrix(a, b, c, d, e, f)`` and ``translate(tx[, ty])``.
    Returns ``None`` for anything else, including non-finite numbers.
    """
    if not attr:
        return None

    m = _MATRIX_RE.search(attr)
    if m:
        values = [float(v) for v in m.groups()]
        if not all(math.isfinite(v) for v in values):
            return None
        return TransformMatrix(*values)

    m = _TRANSLATE_RE.search(attr)
    if m:
        tx = float(m.group(1))
        ty = float(m.group(2)) if m.group(2) is not None else 0.0
        if not (math.isfinite(tx) and math.isfinite(ty)):
            return None
        return TransformMatrix.translation(tx, ty)

    return None


def matrices_close(
    m1: TransformMatrix, m2: TransformMatrix, tol: float = 0.001
) -> bool:
    """True when every component differs by less than *tol*."""
    return all(abs(p - q) < tol for p, q in zip(m1.as_tuple(), m2.as_tuple()))
