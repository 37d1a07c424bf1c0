"""Label-to-field matching for grouped input boxes.

Boxes are in SVG content space and labels in text-layer space; both are
brought into PDF space (bottom-left origin, Y up) before comparison.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from ..config import ParseConfig
from ..models import Field, FieldGroup, Label, PdfRect, TransformMatrix
from ..transform import rect_to_pdf_space
from .captions import best_caption
from .naming import NameRegistry, generate_field_name

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatchResult:
    fields: Tuple[Field, ...]
    names: NameRegistry


def group_pdf_rect(
    group: FieldGroup, transform: TransformMatrix, page_height: float
) -> PdfRect:
    """Union of the individually transformed rects of *group*'s boxes."""
    return PdfRect.union(
        rect_to_pdf_space(box, transform, page_height) for box in group.boxes
    )


def find_best_label(
    rect: PdfRect,
    labels: Sequence[Label],
    page_height: float,
    cfg: ParseConfig | None = None,
) -> Optional[Label]:
    """Best caption above *rect*, or ``None``.

    A label qualifies when its bottom edge in PDF space lies between the
    field's top edge and ``cfg.label_max_distance`` above it.
    """
    if cfg is None:
        cfg = ParseConfig()
    return best_caption(
        ((lbl, (page_height - lbl.y_max) - rect.top) for lbl in labels),
        rect.x,
        rect.right,
        cfg.label_max_distance,
        cfg,
    )


def map_labels_to_fields(
    groups: Sequence[FieldGroup],
    labels: Sequence[Label],
    transform: TransformMatrix,
    page: int,
    page_height: float,
    names: Optional[NameRegistry] = None,
    cfg: ParseConfig | None = None,
) -> MatchResult:
    """Turn field groups into named fields.

    Parameters
    ----------
    groups : sequence of FieldGroup
        Output of :func:`~cerfaparse.grouping.group_boxes_into_fields`.
    labels : sequence of Label
        Page labels with dot leaders already removed.
    transform : TransformMatrix
        The page transform fixed by box extraction.
    page, page_height
        1-based page number and page height in points.
    names : NameRegistry, optional
        Keys already assigned in the document.

    Returns
    -------
    MatchResult
        Fields in group order and the extended registry.  Cell groups
        become ``input`` fields with ``max_length`` equal to the box
        count; checkbox groups become ``checkbox`` fields.
    """
    if cfg is None:
        cfg = ParseConfig()
    if names is None:
        names = NameRegistry()

    fields: List[Field] = []
    unmatched = 0
    for group in groups:
        rect = group_pdf_rect(group, transform, page_height)
        label = find_best_label(rect, labels, page_height, cfg)
        label_text = label.text if label is not None else ""
        if label is None:
            unmatched += 1

        key, names = names.claim(generate_field_name(label_text, page))
        if group.kind == "cell":
            field = Field(
                key=key,
                type="input",
                label=label_text,
                page=page,
                pdf_rect=rect,
                max_length=group.box_count,
            )
        else:
            field = Field(
                key=key, type="checkbox", label=label_text, page=page, pdf_rect=rect
            )
        fields.append(field)

    if unmatched:
        log.debug("Page %d: %d of %d groups without a caption", page, unmatched, len(groups))
    return MatchResult(fields=tuple(fields), names=names)
