"""Ingest stage — source PDF validation, page sizes, and page rendering.

Every later stage addresses pages by 1-based number; :class:`PdfMeta`
is the one place where pdfplumber's zero-based indices are translated.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

import pdfplumber
from PIL import Image

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Data containers
# ---------------------------------------------------------------------------


@dataclass
class PageInfo:
    """Size of one page, in points."""

    number: int  # 1-based
    width: float
    height: float

    def to_dict(self) -> dict:
        return {
            "number": self.number,
            "width": round(self.width, 3),
            "height": round(self.height, 3),
        }


@dataclass
class PdfMeta:
    """What the pipeline needs to know about the source PDF.

    Does not keep the file open.
    """

    path: Path
    num_pages: int
    pages: List[PageInfo] = field(default_factory=list)
    has_acroform: bool = False

    def page(self, number: int) -> PageInfo:
        """Return :class:`PageInfo` for 1-based page *number*."""
        if not 1 <= number <= self.num_pages:
            raise IndexError(f"page {number} out of range 1..{self.num_pages}")
        return self.pages[number - 1]

    def to_dict(self) -> dict:
        return {
            "path": str(self.path),
            "num_pages": self.num_pages,
            "has_acroform": self.has_acroform,
            "pages": [p.to_dict() for p in self.pages],
        }


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


class IngestError(Exception):
    """Raised when the source PDF cannot be read."""


def _validate_pdf_path(pdf_path: Path) -> None:
    if not pdf_path.exists():
        raise IngestError(f"File not found: {pdf_path}")
    if not pdf_path.is_file():
        raise IngestError(f"Not a file: {pdf_path}")
    if pdf_path.stat().st_size == 0:
        raise IngestError(f"Empty file: {pdf_path}")
    if pdf_path.suffix.lower() != ".pdf":
        raise IngestError(f"Not a PDF (suffix={pdf_path.suffix!r}): {pdf_path}")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def ingest_pdf(pdf_path: Path | str) -> PdfMeta:
    """Validate and open a PDF, returning a :class:`PdfMeta`.

    Parameters
    ----------
    pdf_path : Path or str
        Path to the flat form.

    Returns
    -------
    PdfMeta

    Raises
    ------
    IngestError
        When the file is missing, empty, encrypted, or not a readable PDF.
    """
    pdf_path = Path(pdf_path)
    _validate_pdf_path(pdf_path)

    try:
        with pdfplumber.open(pdf_path) as pdf:
            doc = getattr(pdf, "doc", None)
            if doc is not None and getattr(doc, "is_extractable", True) is False:
                raise IngestError(f"PDF is encrypted: {pdf_path}")

            pages = [
                PageInfo(number=i, width=float(pg.width), height=float(pg.height))
                for i, pg in enumerate(pdf.pages, start=1)
            ]
            catalog = getattr(doc, "catalog", None) or {}
            has_acroform = "AcroForm" in catalog
    except IngestError:
        raise
    except Exception as exc:
        raise IngestError(f"Cannot open PDF: {exc}") from exc

    if not pages:
        raise IngestError(f"PDF has no pages: {pdf_path}")
    if has_acroform:
        log.warning(
            "%s already has an AcroForm; new fields will be added alongside it",
            pdf_path.name,
        )

    log.info("Ingested %s: %d pages", pdf_path.name, len(pages))
    return PdfMeta(
        path=pdf_path.resolve(),
        num_pages=len(pages),
        pages=pages,
        has_acroform=has_acroform,
    )


def render_page_image(
    pdf_path: Path | str,
    page_number: int,
    resolution: int = 100,
) -> Image.Image:
    """Render 1-based *page_number* to an RGB PIL image at *resolution* DPI."""
    with pdfplumber.open(pdf_path) as pdf:
        page = pdf.pages[page_number - 1]
        img = page.to_image(resolution=resolution).original.copy()
    if img.mode != "RGB":
        img = img.convert("RGB")
    return img
