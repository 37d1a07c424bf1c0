"""Text layer (TOCR) — word extraction and label assembly.

Public API
----------
- :func:`parse_bbox_layout` — ``pdftotext -bbox-layout`` XHTML → words per page
- :func:`extract_words_pdfplumber` — PDF path → words per page via pdfplumber
- :func:`assemble_labels` — one page's words → labels
- :func:`extract_labels` — words per page → labels per page
"""

from .extract import extract_words_pdfplumber, parse_bbox_layout
from .labels import assemble_labels, extract_labels

__all__ = [
    "parse_bbox_layout",
    "extract_words_pdfplumber",
    "assemble_labels",
    "extract_labels",
]
