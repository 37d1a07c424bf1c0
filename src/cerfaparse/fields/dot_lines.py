"""Free-text fields from printed dot leaders (``..........``).

Labels stay in text-layer coordinates (top-left origin, Y down) until
the group rectangle is flipped into PDF space; no affine transform is
involved because the text layer is already axis-aligned.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import FrozenSet, List, Optional, Sequence, Tuple

from ..config import ParseConfig
from ..models import Field, Label, PdfRect
from .captions import best_caption
from .naming import NameRegistry, generate_field_name

log = logging.getLogger(__name__)

_DOT_LINE_RE = re.compile(r"[.\s\u2026]+")


@dataclass(frozen=True)
class DotLineResult:
    fields: Tuple[Field, ...]
    consumed_label_indices: FrozenSet[int]
    names: NameRegistry


def is_dot_line(text: str, min_dots: int = 10) -> bool:
    """True for text made only of periods, ellipses and whitespace with at
    least *min_dots* literal periods."""
    if not _DOT_LINE_RE.fullmatch(text or ""):
        return False
    return text.count(".") >= min_dots


def _group_dot_indices(
    labels: Sequence[Label], indices: List[int], max_gap: float
) -> List[List[int]]:
    groups: List[List[int]] = [[indices[0]]]
    for prev, cur in zip(indices, indices[1:]):
        if abs(labels[cur].y_min - labels[prev].y_min) <= max_gap:
            groups[-1].append(cur)
        else:
            groups.append([cur])
    return groups


def extract_dot_line_fields(
    labels: Sequence[Label],
    page: int,
    page_height: float,
    names: Optional[NameRegistry] = None,
    cfg: ParseConfig | None = None,
) -> DotLineResult:
    """Detect dot-leader runs on one page and turn them into text fields.

    Consecutive dot-leader labels within ``cfg.dot_group_y_gap`` of each
    other form one group; a group of more than one line is multiline.
    The caption is the best-scoring label above the group that is not a
    consumed dot leader.

    Returns
    -------
    DotLineResult
        The fields, the indices (into *labels*) of every dot-leader label
        consumed, and the registry extended with the new names.
    """
    if cfg is None:
        cfg = ParseConfig()
    if names is None:
        names = NameRegistry()

    dot_indices = [
        i for i, lbl in enumerate(labels) if is_dot_line(lbl.text, cfg.min_dot_count)
    ]
    if not dot_indices:
        return DotLineResult(fields=(), consumed_label_indices=frozenset(), names=names)

    consumed: FrozenSet[int] = frozenset()
    fields: List[Field] = []
    for group in _group_dot_indices(labels, dot_indices, cfg.dot_group_y_gap):
        consumed = consumed | frozenset(group)
        members = [labels[i] for i in group]
        x_min = min(lbl.x_min for lbl in members)
        y_min = min(lbl.y_min for lbl in members)
        x_max = max(lbl.x_max for lbl in members)
        y_max = max(lbl.y_max for lbl in members)

        pdf_rect = PdfRect(
            x=x_min,
            y=page_height - y_max,
            width=x_max - x_min,
            height=y_max - y_min,
        )

        caption = best_caption(
            (
                (lbl, y_min - lbl.y_max)
                for i, lbl in enumerate(labels)
                if i not in consumed
            ),
            x_min,
            x_max,
            cfg.dot_label_max_distance,
            cfg,
        )
        label_text = caption.text if caption is not None else ""

        key, names = names.claim(generate_field_name(label_text, page))
        fields.append(
            Field(
                key=key,
                type="input",
                label=label_text,
                page=page,
                pdf_rect=pdf_rect,
                multiline=len(group) > 1,
            )
        )

    log.debug(
        "Page %d: %d dot-leader fields from %d dot lines",
        page,
        len(fields),
        len(consumed),
    )
    return DotLineResult(
        fields=tuple(fields), consumed_label_indices=consumed, names=names
    )
