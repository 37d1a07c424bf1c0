"""Input-box extraction from pdftocairo SVG output.

Character cells and checkboxes are both drawn as small white-filled
rectangles; the stroke tells them apart:

- white stroke, width >= ``cell_min_stroke_width`` → ``"cell"``
- dark stroke (any width) → ``"checkbox"``

The SVG is flattened into an arena of :class:`SvgNode` records with
index-based parent links, so transform resolution is a plain walk over
integers rather than a live-tree traversal.

Public API
----------
- :func:`extract_boxes` — SVG text → :class:`~cerfaparse.models.PageGeometry`
- :class:`PageGeometryError` — page height cannot be established
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from lxml import etree

from ..config import ParseConfig
from ..models import BoxType, InputBox, PageGeometry, TransformMatrix
from ..transform import compose_transforms, matrices_close, parse_transform

log = logging.getLogger(__name__)


class PageGeometryError(ValueError):
    """Raised when a page's SVG does not establish a coordinate system."""


# ---------------------------------------------------------------------------
# Arena
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SvgNode:
    """One SVG element; ``parent`` is an arena index, -1 for the root."""

    tag: str
    attrib: Dict[str, str]
    parent: int


def build_arena(root: etree._Element) -> List[SvgNode]:
    """Flatten *root* into document-ordered nodes with parent indices."""
    arena: List[SvgNode] = []
    stack: List[Tuple[etree._Element, int]] = [(root, -1)]
    while stack:
        el, parent = stack.pop()
        if not isinstance(el.tag, str):
            # comments / processing instructions
            continue
        idx = len(arena)
        arena.append(
            SvgNode(
                tag=etree.QName(el).localname,
                attrib=dict(el.attrib),
                parent=parent,
            )
        )
        for child in reversed(el):
            stack.append((child, idx))
    return arena


def _parse_svg(svg_xml: str | bytes) -> etree._Element:
    if isinstance(svg_xml, str):
        svg_xml = svg_xml.encode("utf-8")
    if not svg_xml.strip():
        raise PageGeometryError("SVG document is empty")
    parser = etree.XMLParser(recover=True, huge_tree=True, resolve_entities=False)
    try:
        root = etree.fromstring(svg_xml, parser=parser)
    except etree.XMLSyntaxError as exc:
        raise PageGeometryError(f"Cannot parse SVG: {exc}") from exc
    if root is None:
        raise PageGeometryError("SVG document is empty or unparseable")
    return root


# ---------------------------------------------------------------------------
# Page height
# ---------------------------------------------------------------------------

_LEADING_NUM_RE = re.compile(r"^\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)")


def _leading_float(text: str) -> Optional[float]:
    m = _LEADING_NUM_RE.match(text or "")
    return float(m.group(1)) if m else None


def _is_positive(value: Optional[float]) -> bool:
    return value is not None and math.isfinite(value) and value > 0


def page_height_from_root(attrib: Dict[str, str]) -> float:
    """Read the page height from ``viewBox`` (4th value) or ``height``.

    Raises :class:`PageGeometryError` when neither yields a positive number.
    """
    height: Optional[float] = None
    parts = re.split(r"[\s,]+", attrib.get("viewBox", "").strip())
    if len(parts) >= 4:
        height = _leading_float(parts[3])
    if not _is_positive(height):
        # e.g. height="572pt"
        height = _leading_float(attrib.get("height", ""))
    if not _is_positive(height):
        raise PageGeometryError(
            "Could not extract page height from SVG viewBox or height attribute"
        )
    return height


# ---------------------------------------------------------------------------
# Path geometry and colors
# ---------------------------------------------------------------------------

_PATH_TOKEN_RE = re.compile(
    r"[A-Za-z]|[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?"
)


def parse_rect_path(d: str) -> Optional[Tuple[float, float, float, float]]:
    """Parse a closed 4-corner path into ``(x, y, width, height)``.

    Only absolute ``M``/``L``/``Z`` commands are accepted.  The bounding
    box of the first four points is used, so winding order is irrelevant.
    Returns ``None`` for other commands, fewer than four points, or a
    width/height below 1.
    """
    tokens = _PATH_TOKEN_RE.findall(d or "")
    points: List[Tuple[float, float]] = []
    i = 0
    while i < len(tokens):
        cmd = tokens[i]
        if cmd in ("M", "L"):
            i += 1
            while i + 1 < len(tokens) and not tokens[i].isalpha():
                if tokens[i + 1].isalpha():
                    break
                points.append((float(tokens[i]), float(tokens[i + 1])))
                i += 2
        elif cmd in ("Z", "z"):
            i += 1
        else:
            return None

    if len(points) < 4:
        return None

    xs = [p[0] for p in points[:4]]
    ys = [p[1] for p in points[:4]]
    width = max(xs) - min(xs)
    height = max(ys) - min(ys)
    if width < 1 or height < 1:
        return None
    return (min(xs), min(ys), width, height)


_RGB_PCT_RE = re.compile(
    r"rgb\(\s*([\d.]+)%\s*,\s*([\d.]+)%\s*,\s*([\d.]+)%\s*\)"
)
_HEX_RE = re.compile(r"^#([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


def parse_color(color: Optional[str]) -> Optional[Tuple[float, float, float]]:
    """Parse ``rgb(r%, g%, b%)`` or ``#rgb``/``#rrggbb`` into [0, 1] channels."""
    if not color:
        return None
    color = color.strip()
    m = _RGB_PCT_RE.search(color)
    if m:
        return (
            float(m.group(1)) / 100,
            float(m.group(2)) / 100,
            float(m.group(3)) / 100,
        )
    m = _HEX_RE.match(color)
    if m:
        digits = m.group(1)
        if len(digits) == 3:
            digits = "".join(ch * 2 for ch in digits)
        return tuple(int(digits[k : k + 2], 16) / 255 for k in (0, 2, 4))  # type: ignore[return-value]
    return None


def is_white(color: Optional[str], threshold: float = 0.95) -> bool:
    rgb = parse_color(color)
    return rgb is not None and all(ch >= threshold for ch in rgb)


def is_dark(color: Optional[str], threshold: float = 0.2) -> bool:
    rgb = parse_color(color)
    return rgb is not None and all(ch < threshold for ch in rgb)


def classify_box(
    stroke: Optional[str], stroke_width: float, cfg: ParseConfig
) -> Optional[BoxType]:
    """Classify a white-filled box by its stroke, or ``None``."""
    if is_white(stroke, cfg.white_threshold) and stroke_width >= cfg.cell_min_stroke_width:
        return "cell"
    if is_dark(stroke, cfg.dark_stroke_threshold):
        return "checkbox"
    return None


def _stroke_width(attrib: Dict[str, str]) -> float:
    value = _leading_float(attrib.get("stroke-width", ""))
    return value if value is not None else 0.0


# ---------------------------------------------------------------------------
# Transform resolution
# ---------------------------------------------------------------------------


def _root_use_transform(arena: List[SvgNode]) -> Optional[TransformMatrix]:
    """Transform of the first root-level ``<use>`` carrying one."""
    for node in arena:
        if node.parent == 0 and node.tag == "use":
            parsed = parse_transform(node.attrib.get("transform"))
            if parsed is not None:
                return parsed
    return None


def ancestor_transform(arena: List[SvgNode], index: int) -> Optional[TransformMatrix]:
    """Composed transform of the ancestors of ``arena[index]``.

    Walks parent links up to (not including) the root ``<svg>``, composing
    ``<g>`` transforms outermost first.

    pdftocairo quirk: a path under ``<defs>`` is drawn through a chain of
    ``<use>`` references whose intermediate group transforms cancel out in
    its output.  For such paths the ancestor chain is discarded and the
    transform of the outermost ``<use>`` (a direct child of the root) is
    the net effect.  This is specific to pdftocairo, not a general SVG rule.
    """
    chain: List[TransformMatrix] = []
    current = arena[index].parent
    while current > 0:
        node = arena[current]
        if node.tag == "defs":
            return _root_use_transform(arena)
        if node.tag == "g":
            parsed = parse_transform(node.attrib.get("transform"))
            if parsed is not None:
                chain.insert(0, parsed)
        current = node.parent

    if not chain:
        return None
    result = chain[0]
    for m in chain[1:]:
        result = compose_transforms(result, m)
    return result


def effective_transform(arena: List[SvgNode], index: int) -> Optional[TransformMatrix]:
    """Path transform composed with its ancestors, or ``None`` if unparseable."""
    own = parse_transform(arena[index].attrib.get("transform"))
    if own is None:
        return None
    outer = ancestor_transform(arena, index)
    return compose_transforms(outer, own) if outer is not None else own


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def _candidate_box(node: SvgNode, cfg: ParseConfig) -> Optional[InputBox]:
    """Geometry + color checks for a single ``<path>``; ``None`` if rejected."""
    d = node.attrib.get("d")
    if not d or not is_white(node.attrib.get("fill"), cfg.white_threshold):
        return None

    rect = parse_rect_path(d)
    if rect is None:
        return None
    x, y, width, height = rect
    if width > cfg.max_box_width or height > cfg.max_box_height:
        return None
    if width < cfg.min_box_size or height < cfg.min_box_size:
        return None

    kind = classify_box(node.attrib.get("stroke"), _stroke_width(node.attrib), cfg)
    if kind is None:
        return None
    return InputBox(x=x, y=y, width=width, height=height, kind=kind)


def extract_boxes(svg_xml: str | bytes, cfg: ParseConfig | None = None) -> PageGeometry:
    """Extract classified input boxes from one page of pdftocairo SVG.

    The first accepted box fixes the page transform.  Any later box whose
    effective transform differs beyond ``cfg.transform_tolerance`` is
    dropped and a warning is recorded; transforms are never merged.

    Raises
    ------
    PageGeometryError
        When the page height cannot be read from the root element.
    """
    if cfg is None:
        cfg = ParseConfig()

    arena = build_arena(_parse_svg(svg_xml))
    page_height = page_height_from_root(arena[0].attrib)

    transform: Optional[TransformMatrix] = None
    boxes: List[InputBox] = []
    warnings: List[str] = []

    for idx, node in enumerate(arena):
        if node.tag != "path":
            continue
        box = _candidate_box(node, cfg)
        if box is None:
            continue

        effective = effective_transform(arena, idx)
        if effective is None:
            log.debug("Skipping %s box at (%.2f, %.2f): no usable transform", box.kind, box.x, box.y)
            continue

        if transform is None:
            transform = effective
        elif not matrices_close(transform, effective, cfg.transform_tolerance):
            msg = (
                f"Input box at ({box.x:.2f}, {box.y:.2f}) has a different "
                f"transform matrix; skipping (rotated section?)"
            )
            log.warning(msg)
            warnings.append(msg)
            continue

        boxes.append(box)

    log.debug(
        "extract_boxes: %d boxes (%d cells, %d checkboxes), %d warnings",
        len(boxes),
        sum(1 for b in boxes if b.kind == "cell"),
        sum(1 for b in boxes if b.kind == "checkbox"),
        len(warnings),
    )
    return PageGeometry(
        boxes=tuple(boxes),
        transform=transform,
        page_height=page_height,
        warnings=tuple(warnings),
    )
