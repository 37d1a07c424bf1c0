"""Ingest stage — PDF validation, page sizes, and rendering.

Public API
----------
- :func:`ingest_pdf` — validate + open a PDF, return :class:`PdfMeta`
- :func:`render_page_image` — render one page to a PIL Image
- :class:`PdfMeta` / :class:`PageInfo` — document and page metadata
- :class:`IngestError` — raised on validation failures
"""

from .ingest import IngestError, PageInfo, PdfMeta, ingest_pdf, render_page_image

__all__ = [
    "IngestError",
    "PageInfo",
    "PdfMeta",
    "ingest_pdf",
    "render_page_image",
]
