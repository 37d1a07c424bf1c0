"""Poppler collaborator — page SVG and word-box extraction.

Public API
----------
- :func:`check_poppler` — verify the poppler tools are installed
- :func:`extract_svg` — one page as pdftocairo SVG text
- :func:`extract_bbox_layout` — pdftotext ``-bbox-layout`` XHTML
- :class:`RenderError` / :class:`PopplerNotFoundError`
"""

from .poppler import (
    PopplerNotFoundError,
    RenderError,
    check_poppler,
    extract_bbox_layout,
    extract_svg,
)

__all__ = [
    "PopplerNotFoundError",
    "RenderError",
    "check_poppler",
    "extract_svg",
    "extract_bbox_layout",
]
