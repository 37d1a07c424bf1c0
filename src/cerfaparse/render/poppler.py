"""Poppler command-line wrappers: page SVG and word bounding boxes.

``pdftocairo -svg`` draws each page as vector paths (the source of input
boxes); ``pdftotext -bbox-layout`` dumps every word with its box (the
source of labels).
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import List, Sequence

log = logging.getLogger(__name__)

REQUIRED_TOOLS = ("pdftocairo", "pdftotext")

_INSTALL_HINT = (
    "Install with:\n"
    "  macOS:  brew install poppler\n"
    "  Linux:  apt install poppler-utils"
)


class RenderError(RuntimeError):
    """A poppler tool failed; ``stderr`` holds its diagnostic output."""

    def __init__(self, message: str, stderr: str = "") -> None:
        super().__init__(message)
        self.stderr = stderr


class PopplerNotFoundError(RenderError):
    """One or more poppler tools are not on ``PATH``."""

    def __init__(self, missing: Sequence[str]) -> None:
        self.missing = list(missing)
        super().__init__(
            f"Poppler tools not found: {', '.join(self.missing)}. {_INSTALL_HINT}"
        )


def check_poppler(tools: Sequence[str] = REQUIRED_TOOLS) -> None:
    """Raise :class:`PopplerNotFoundError` unless every tool is installed."""
    missing = [t for t in tools if shutil.which(t) is None]
    if missing:
        raise PopplerNotFoundError(missing)


def _run(cmd: List[str]) -> subprocess.CompletedProcess:
    log.debug("Running %s", " ".join(cmd))
    try:
        proc = subprocess.run(cmd, check=False, capture_output=True, text=True)
    except FileNotFoundError as exc:
        raise PopplerNotFoundError([cmd[0]]) from exc
    if proc.returncode != 0:
        stderr = (proc.stderr or "").strip()
        raise RenderError(
            f"{cmd[0]} exited with status {proc.returncode}: {stderr}", stderr=stderr
        )
    return proc


def extract_svg(pdf_path: Path | str, page: int) -> str:
    """Render 1-based *page* of *pdf_path* to SVG and return the SVG text."""
    with tempfile.TemporaryDirectory(prefix="cerfaparse-") as tmp:
        out_path = Path(tmp) / f"page-{page}.svg"
        _run(
            [
                "pdftocairo",
                "-svg",
                "-f",
                str(page),
                "-l",
                str(page),
                str(pdf_path),
                str(out_path),
            ]
        )
        if not out_path.exists():
            raise RenderError(f"pdftocairo produced no SVG for page {page}")
        return out_path.read_text(encoding="utf-8")


def extract_bbox_layout(pdf_path: Path | str) -> str:
    """Return ``pdftotext -bbox-layout`` XHTML for the whole document."""
    proc = _run(["pdftotext", "-bbox-layout", str(pdf_path), "-"])
    return proc.stdout
