"""Vector geometry stage — input-box extraction from page SVG.

Public API
----------
- :func:`extract_boxes` — SVG text → :class:`~cerfaparse.models.PageGeometry`
- :class:`PageGeometryError` — raised when the page height is unobtainable
"""

from .extract import PageGeometryError, extract_boxes

__all__ = [
    "PageGeometryError",
    "extract_boxes",
]
