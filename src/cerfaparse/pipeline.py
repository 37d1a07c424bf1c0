"""Pipeline orchestration: stage timing, per-page and per-document runs.

Per page::

    vector → dot_lines → grouping → matching

Per document::

    ingest → text layer (once) → pages in ascending order

Every stage produces a :class:`StageResult`.  The name registry is the
only value carried from one page to the next; it is threaded through
the stages explicitly and returned on the :class:`PageResult`.
"""

from __future__ import annotations

import logging
import time
import traceback
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, Generator, List, Literal, Optional, Sequence, Tuple

from .config import ParseConfig
from .fields import NameRegistry, extract_dot_line_fields, map_labels_to_fields
from .grouping import group_boxes_into_fields
from .models import Field, Label
from .vector import PageGeometryError, extract_boxes

logger = logging.getLogger("cerfaparse.pipeline")

TextSource = Literal["pdftotext", "pdfplumber"]

# ── Skip reasons ───────────────────────────────────────────────────────


class SkipReason(str, Enum):
    """Why a pipeline stage was skipped."""

    no_boxes = "no_boxes"
    no_transform = "no_transform"
    upstream_failed = "upstream_failed"


# ── Stage result ───────────────────────────────────────────────────────


@dataclass
class StageResult:
    """Outcome record for a single pipeline stage."""

    stage: str
    ran: bool = False
    status: str = "skipped"  # "success" | "skipped" | "failed"
    skip_reason: Optional[str] = None
    duration_ms: int = 0
    counts: Dict[str, Any] = field(default_factory=dict)
    inputs: Dict[str, Any] = field(default_factory=dict)
    error: Optional[Dict[str, str]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize stage result to a JSON-compatible dict."""
        d: Dict[str, Any] = {
            "stage": self.stage,
            "ran": self.ran,
            "status": self.status,
        }
        if self.skip_reason is not None:
            d["skip_reason"] = self.skip_reason
        d["duration_ms"] = self.duration_ms
        if self.counts:
            d["counts"] = self.counts
        if self.inputs:
            d["inputs"] = self.inputs
        if self.error is not None:
            d["error"] = self.error
        return d


# ── Stage context manager ──────────────────────────────────────────────


@contextmanager
def run_stage(
    stage: str,
    inputs: Dict[str, Any] | None = None,
    skip_reason: SkipReason | None = None,
) -> Generator[StageResult, None, None]:
    """Wrap a stage with timing and outcome recording.

    Usage::

        with run_stage("grouping", skip_reason=reason) as sr:
            if sr.ran:
                groups = group_boxes_into_fields(boxes, cfg)
                sr.counts["groups"] = len(groups)

    When *skip_reason* is given the stage does not run: ``sr.ran`` is
    false and the caller must not do the work.  Exceptions raised inside
    the block are recorded on the result and re-raised.
    """
    sr = StageResult(stage=stage)
    if inputs:
        sr.inputs = inputs

    if skip_reason is not None:
        sr.skip_reason = skip_reason.value
        yield sr
        return

    sr.ran = True
    t0 = time.perf_counter()
    try:
        yield sr
        if sr.status not in ("success", "failed"):
            sr.status = "success"
    except Exception as exc:
        sr.status = "failed"
        sr.error = {
            "type": type(exc).__name__,
            "message": str(exc),
            "stack": traceback.format_exc(),
        }
        raise
    finally:
        sr.duration_ms = int((time.perf_counter() - t0) * 1000)


# ── Page-level result container ────────────────────────────────────────


@dataclass
class PageResult:
    """Everything produced for one page."""

    page: int = 0
    page_height: float = 0.0
    stages: Dict[str, StageResult] = field(default_factory=dict)
    matched_fields: Tuple[Field, ...] = ()
    dot_fields: Tuple[Field, ...] = ()
    warnings: Tuple[str, ...] = ()
    names: NameRegistry = field(default_factory=NameRegistry)

    @property
    def fields(self) -> Tuple[Field, ...]:
        """Box-derived fields followed by dot-leader fields."""
        return self.matched_fields + self.dot_fields

    @property
    def failed(self) -> bool:
        return any(sr.status == "failed" for sr in self.stages.values())

    def counts(self) -> Dict[str, int]:
        return {
            "text_fields": sum(1 for f in self.matched_fields if f.type == "input"),
            "checkboxes": sum(1 for f in self.matched_fields if f.type == "checkbox"),
            "free_text_fields": len(self.dot_fields),
            "warnings": len(self.warnings),
        }

    def to_summary_dict(self) -> Dict[str, Any]:
        """Return a lightweight summary suitable for JSON serialisation."""
        return {
            "page": self.page,
            "page_height": self.page_height,
            "failed": self.failed,
            "stages": {n: sr.to_dict() for n, sr in self.stages.items()},
            "counts": self.counts(),
            "warnings": list(self.warnings),
        }


# ── Per-page run ───────────────────────────────────────────────────────


def process_page(
    svg_xml: str | bytes,
    labels: Sequence[Label],
    page: int,
    names: NameRegistry | None = None,
    cfg: ParseConfig | None = None,
) -> PageResult:
    """Infer the fields of one page.

    Parameters
    ----------
    svg_xml : str or bytes
        pdftocairo SVG of the page.
    labels : sequence of Label
        The page's labels, in assembly order.
    page : int
        1-based page number.
    names : NameRegistry, optional
        Keys already used by earlier pages.

    Returns
    -------
    PageResult
        ``names`` on the result includes every key assigned here.

    Raises
    ------
    PageGeometryError
        When the SVG does not give a page height.
    """
    if cfg is None:
        cfg = ParseConfig()
    if names is None:
        names = NameRegistry()

    pr = PageResult(page=page, names=names)

    with run_stage("vector") as sr:
        pr.stages["vector"] = sr
        geometry = extract_boxes(svg_xml, cfg)
        sr.counts["boxes"] = len(geometry.boxes)
        sr.counts["warnings"] = len(geometry.warnings)
    pr.page_height = geometry.page_height
    pr.warnings = geometry.warnings

    with run_stage("dot_lines", inputs={"labels": len(labels)}) as sr:
        pr.stages["dot_lines"] = sr
        dots = extract_dot_line_fields(labels, page, geometry.page_height, names, cfg)
        sr.counts["fields"] = len(dots.fields)
        sr.counts["consumed_labels"] = len(dots.consumed_label_indices)
    pr.dot_fields = dots.fields
    names = dots.names

    remaining = [
        lbl for i, lbl in enumerate(labels) if i not in dots.consumed_label_indices
    ]

    skip: SkipReason | None = None
    if not geometry.boxes:
        skip = SkipReason.no_boxes
    elif geometry.transform is None:
        skip = SkipReason.no_transform

    groups = []
    with run_stage("grouping", skip_reason=skip) as sr:
        pr.stages["grouping"] = sr
        if sr.ran:
            groups = group_boxes_into_fields(geometry.boxes, cfg)
            sr.counts["groups"] = len(groups)

    with run_stage("matching", inputs={"labels": len(remaining)}, skip_reason=skip) as sr:
        pr.stages["matching"] = sr
        if sr.ran:
            matched = map_labels_to_fields(
                groups,
                remaining,
                geometry.transform,
                page,
                geometry.page_height,
                names,
                cfg,
            )
            pr.matched_fields = matched.fields
            names = matched.names
            sr.counts["fields"] = len(matched.fields)
            sr.counts["unlabelled"] = sum(1 for f in matched.fields if not f.label)

    pr.names = names
    logger.info("Page %d: %s", page, pr.counts())
    return pr


# ── Document-level result ──────────────────────────────────────────────


@dataclass
class DocumentResult:
    """Aggregated result for a whole document."""

    pdf_path: Optional[Path] = None
    page_count: int = 0
    pages: List[PageResult] = field(default_factory=list)
    text_source: str = "pdftotext"
    config: Optional[ParseConfig] = None

    @property
    def fields(self) -> List[Field]:
        """All fields, page by page."""
        return [f for pr in self.pages for f in pr.fields]

    @property
    def failed_pages(self) -> List[int]:
        return [pr.page for pr in self.pages if pr.failed]

    def to_summary_dict(self) -> Dict[str, Any]:
        """Serialize document result to a summary dict."""
        return {
            "pdf": str(self.pdf_path) if self.pdf_path else None,
            "page_count": self.page_count,
            "text_source": self.text_source,
            "total_fields": len(self.fields),
            "failed_pages": self.failed_pages,
            "pages": [pr.to_summary_dict() for pr in self.pages],
        }


def _failed_page(
    page: int, stage: str, exc: Exception, page_height: float = 0.0
) -> PageResult:
    failed = PageResult(page=page, page_height=page_height)
    failed.stages[stage] = StageResult(
        stage=stage,
        status="failed",
        error={"type": type(exc).__name__, "message": str(exc)},
    )
    return failed


def load_labels(
    pdf_path: Path | str,
    text_source: TextSource = "pdftotext",
    cfg: ParseConfig | None = None,
) -> Dict[int, List[Label]]:
    """Labels for every page, from the chosen word source."""
    from .render import extract_bbox_layout
    from .tocr import extract_labels, extract_words_pdfplumber, parse_bbox_layout

    if text_source == "pdftotext":
        words = parse_bbox_layout(extract_bbox_layout(pdf_path))
    elif text_source == "pdfplumber":
        words = extract_words_pdfplumber(pdf_path)
    else:
        raise ValueError(f"Unknown text source: {text_source!r}")
    return extract_labels(words, cfg)


def run_document(
    pdf_path: Path | str,
    cfg: ParseConfig | None = None,
    text_source: TextSource = "pdftotext",
    on_page: Callable[[PageResult], None] | None = None,
) -> DocumentResult:
    """Infer fields for every page of *pdf_path*.

    Parameters
    ----------
    pdf_path : Path or str
        Path to the flat form.
    cfg : ParseConfig, optional
        Thresholds.
    text_source : ``"pdftotext"`` | ``"pdfplumber"``
        Where words come from.
    on_page : callable, optional
        Called with each :class:`PageResult` as soon as it is done.

    Returns
    -------
    DocumentResult
        Pages whose geometry could not be produced are logged, recorded
        as failed, and contribute no fields; the run continues.

    Raises
    ------
    IngestError
        The PDF cannot be read.
    PopplerNotFoundError
        A required poppler tool is missing.
    """
    from .ingest import ingest_pdf
    from .render import RenderError, check_poppler, extract_svg

    if cfg is None:
        cfg = ParseConfig()

    pdf_path = Path(pdf_path)
    meta = ingest_pdf(pdf_path)
    tools = ["pdftocairo"]
    if text_source == "pdftotext":
        tools.append("pdftotext")
    check_poppler(tools)

    labels_by_page = load_labels(pdf_path, text_source, cfg)

    dr = DocumentResult(
        pdf_path=pdf_path,
        page_count=meta.num_pages,
        text_source=text_source,
        config=cfg,
    )
    names = NameRegistry()

    for page in range(1, meta.num_pages + 1):
        labels = labels_by_page.get(page, [])
        page_height = meta.page(page).height
        try:
            svg_xml = extract_svg(pdf_path, page)
        except RenderError as exc:
            logger.error("run_document page %d failed: %s", page, exc)
            pr = _failed_page(page, "render", exc, page_height)
        else:
            try:
                pr = process_page(svg_xml, labels, page, names, cfg)
                names = pr.names
            except PageGeometryError as exc:
                logger.error("run_document page %d failed: %s", page, exc)
                pr = _failed_page(page, "vector", exc, page_height)
        dr.pages.append(pr)
        if on_page is not None:
            on_page(pr)

    logger.info(
        "run_document: %d pages, %d fields, %d failed pages",
        len(dr.pages),
        len(dr.fields),
        len(dr.failed_pages),
    )
    return dr
