"""Text-layer word extraction — two interchangeable word sources.

``pdftotext -bbox-layout``
    Poppler's XHTML dump: ``<page>`` elements holding ``<word xMin=..
    yMin=.. xMax=.. yMax=..>`` children.  Parsed by
    :func:`parse_bbox_layout`.

``pdfplumber``
    ``page.extract_words()`` on the PDF itself.  Coordinates are clipped
    to the page and degenerate boxes skipped.  Used when poppler's text
    tool is unavailable or for cross-checking.

Both return ``{page_number: [Word, ...]}`` with 1-based page numbers and
top-left / Y-down coordinates in PDF points.
"""

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Dict, List, Optional

import pdfplumber
from lxml import etree

from ..models import Word

log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# pdftotext -bbox-layout
# ---------------------------------------------------------------------------

_COORD_ATTRS = ("xmin", "ymin", "xmax", "ymax")


def _coord(attrib: Dict[str, str], name: str) -> Optional[float]:
    """Case-insensitive coordinate lookup (``xMin`` or ``xmin``)."""
    for key, value in attrib.items():
        if etree.QName(key).localname.lower() == name:
            try:
                v = float(value)
            except (TypeError, ValueError):
                return None
            return v if math.isfinite(v) else None
    return None


def _word_from_element(el: etree._Element) -> Optional[Word]:
    text = "".join(el.itertext()).strip()
    if not text:
        return None
    coords = [_coord(el.attrib, name) for name in _COORD_ATTRS]
    if any(c is None for c in coords):
        log.debug("Dropping word %r: unparseable coordinates", text)
        return None
    x_min, y_min, x_max, y_max = coords
    return Word(text=text, x_min=x_min, y_min=y_min, x_max=x_max, y_max=y_max)


def _localname(el: etree._Element) -> str:
    if not isinstance(el.tag, str):
        return ""
    return etree.QName(el).localname.lower()


def parse_bbox_layout(xhtml: str | bytes) -> Dict[int, List[Word]]:
    """Parse ``pdftotext -bbox-layout`` output into words per page.

    Namespaces are ignored, so both the XHTML that poppler writes and a
    bare ``<doc><page><word>`` fragment are accepted.  Words with empty
    text or unparseable coordinates are dropped.  Every ``<page>`` gets
    an entry, even when it holds no words.
    """
    if isinstance(xhtml, str):
        xhtml = xhtml.encode("utf-8")
    if not xhtml.strip():
        return {}

    parser = etree.XMLParser(
        recover=True,
        huge_tree=True,
        resolve_entities=False,
        load_dtd=False,
        no_network=True,
    )
    try:
        root = etree.fromstring(xhtml, parser=parser)
    except etree.XMLSyntaxError as exc:
        log.warning("bbox layout is not parseable (%s); no words extracted", exc)
        return {}
    if root is None:
        log.warning("bbox layout is not parseable; no words extracted")
        return {}

    pages: Dict[int, List[Word]] = {}
    page_els = [el for el in root.iter() if _localname(el) == "page"]
    for page_num, page_el in enumerate(page_els, start=1):
        words: List[Word] = []
        for el in page_el.iter():
            if _localname(el) != "word":
                continue
            w = _word_from_element(el)
            if w is not None:
                words.append(w)
        pages[page_num] = words

    log.debug(
        "parse_bbox_layout: %d pages, %d words",
        len(pages),
        sum(len(v) for v in pages.values()),
    )
    return pages


# ---------------------------------------------------------------------------
# pdfplumber
# ---------------------------------------------------------------------------


def _word_from_plumber(w: dict, page_w: float, page_h: float) -> Optional[Word]:
    """Convert a pdfplumber word dict, clipped to the page.

    Returns ``None`` for blank text or a zero-area box.
    """
    text = (w.get("text") or "").strip()
    if not text:
        return None
    x0 = max(0.0, min(page_w, float(w.get("x0", 0))))
    x1 = max(0.0, min(page_w, float(w.get("x1", 0))))
    y0 = max(0.0, min(page_h, float(w.get("top", 0))))
    y1 = max(0.0, min(page_h, float(w.get("bottom", 0))))
    if x1 <= x0 or y1 <= y0:
        return None
    return Word(text=text, x_min=x0, y_min=y0, x_max=x1, y_max=y1)


def words_from_plumber_page(page: "pdfplumber.page.Page") -> List[Word]:
    """Extract words from an already-opened pdfplumber page."""
    page_w = float(page.width)
    page_h = float(page.height)
    words: List[Word] = []
    skipped = 0
    for w in page.extract_words():
        word = _word_from_plumber(w, page_w, page_h)
        if word is None:
            skipped += 1
            continue
        words.append(word)
    if skipped:
        log.debug("pdfplumber page: %d degenerate words skipped", skipped)
    return words


def extract_words_pdfplumber(pdf_path: Path | str) -> Dict[int, List[Word]]:
    """Extract words for every page of *pdf_path* with pdfplumber.

    Parameters
    ----------
    pdf_path : Path or str
        Path to the PDF file.

    Returns
    -------
    dict
        ``{page_number: [Word, ...]}`` with 1-based page numbers.
    """
    pages: Dict[int, List[Word]] = {}
    with pdfplumber.open(pdf_path) as pdf:
        for page_num, page in enumerate(pdf.pages, start=1):
            pages[page_num] = words_from_plumber_page(page)
            if not pages[page_num]:
                log.warning(
                    "Page %d: zero words in text layer (blank or image-only page)",
                    page_num,
                )
    return pages
