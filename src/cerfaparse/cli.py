"""``cerfaparse`` command line: flat CERFA PDF → fillable PDF + field JSON."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from pypdf.errors import PyPdfError

from . import __version__
from .config import ParseConfig
from .export import draw_field_overlay, inject_fields, write_field_json
from .ingest import IngestError, render_page_image
from .pipeline import DocumentResult, PageResult, run_document
from .render import RenderError

log = logging.getLogger(__name__)

OVERLAY_RESOLUTION = 100


def default_output_paths(
    input_path: Path, output: Optional[Path] = None
) -> Tuple[Path, Path]:
    """``(pdf_out, json_out)`` for *input_path*.

    The PDF defaults to ``<stem>-fillable.pdf`` beside the input; the
    JSON always sits beside the PDF as ``<pdf stem>.fields.json``.
    """
    pdf_out = output or input_path.with_name(f"{input_path.stem}-fillable.pdf")
    json_out = pdf_out.with_name(f"{pdf_out.stem}.fields.json")
    return pdf_out, json_out


def _page_line(pr: PageResult) -> str:
    if pr.failed:
        return f"  Page {pr.page}: failed, skipped"
    c = pr.counts()
    if not pr.fields:
        return f"  Page {pr.page}: no input boxes found"
    line = f"  Page {pr.page}: {c['text_fields']} text fields, {c['checkboxes']} checkboxes"
    if c["free_text_fields"]:
        line += f", {c['free_text_fields']} free-text field(s)"
    if c["warnings"]:
        line += f" ({c['warnings']} warning(s))"
    return line


def write_overlays(input_path: Path, result: DocumentResult, overlay_dir: Path) -> List[Path]:
    """Render one PNG per processed page with its fields outlined."""
    written = []
    scale = OVERLAY_RESOLUTION / 72.0
    for pr in result.pages:
        if pr.failed or not pr.fields:
            continue
        img = render_page_image(input_path, pr.page, resolution=OVERLAY_RESOLUTION)
        out = overlay_dir / f"page-{pr.page}.png"
        draw_field_overlay(img, pr.fields, pr.page_height, scale, out_path=out)
        written.append(out)
    return written


def convert(
    input_path: Path,
    output: Optional[Path] = None,
    text_source: str = "pdftotext",
    overlay_dir: Optional[Path] = None,
    cfg: ParseConfig | None = None,
) -> Tuple[Path, Path, DocumentResult]:
    """Run the whole conversion and write its outputs."""
    pdf_out, json_out = default_output_paths(input_path, output)

    print(f"Processing {input_path.name}...")
    result = run_document(
        input_path,
        cfg=cfg,
        text_source=text_source,
        on_page=lambda pr: print(_page_line(pr)),
    )
    fields = result.fields

    print("Injecting AcroForm fields...")
    inject_fields(input_path, fields, pdf_out)
    write_field_json(fields, result.page_count, json_out)

    if overlay_dir is not None:
        for path in write_overlays(input_path, result, overlay_dir):
            log.info("Overlay written: %s", path)

    print("\nDone!")
    print(f"  PDF:  {pdf_out}")
    print(f"  JSON: {json_out}")
    print(f"  Total fields: {len(fields)}")
    if result.failed_pages:
        print(f"  Skipped pages: {', '.join(map(str, result.failed_pages))}")
    return pdf_out, json_out, result


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cerfaparse",
        description="Convert flat CERFA PDFs into fillable AcroForm PDFs with field definitions",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command")

    conv = sub.add_parser(
        "convert",
        help="Convert a flat CERFA PDF to a fillable PDF + JSON field definitions",
    )
    conv.add_argument("input", type=Path, help="Path to the input CERFA PDF")
    conv.add_argument("-o", "--output", type=Path, help="Output PDF path")
    conv.add_argument(
        "--text-source",
        choices=["pdftotext", "pdfplumber"],
        default="pdftotext",
        help="Where label words come from (default: pdftotext)",
    )
    conv.add_argument(
        "--overlay-dir",
        type=Path,
        help="Write one PNG per page with the inferred fields outlined",
    )
    conv.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        convert(
            args.input,
            output=args.output,
            text_source=args.text_source,
            overlay_dir=args.overlay_dir,
        )
    except (IngestError, RenderError, PyPdfError, OSError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
