"""Caption scoring shared by the dot-leader detector and the matcher."""

from __future__ import annotations

from typing import Iterable, Optional, Tuple

from ..config import ParseConfig
from ..models import Label


def caption_score(
    label: Label,
    y_distance: float,
    left: float,
    right: float,
    max_distance: float,
    cfg: ParseConfig,
) -> Optional[float]:
    """Score *label* as a caption for the span ``[left, right]``.

    *y_distance* is how far the label's bottom edge sits above the
    span's top edge.  Returns ``None`` when the label is out of range
    vertically, or neither overlaps the span nor sits just to its left.
    Lower scores are better.
    """
    if y_distance < 0 or y_distance > max_distance:
        return None
    overlaps = label.x_min < right and label.x_max > left
    left_of = label.x_max <= left and left - label.x_max < cfg.label_max_x_gap
    if not overlaps and not left_of:
        return None
    return y_distance + (0.0 if overlaps else cfg.no_overlap_penalty)


def best_caption(
    candidates: Iterable[Tuple[Label, float]],
    left: float,
    right: float,
    max_distance: float,
    cfg: ParseConfig,
) -> Optional[Label]:
    """Lowest-scoring label among ``(label, y_distance)`` pairs.

    Ties keep the first candidate seen.
    """
    best: Optional[Label] = None
    best_score = float("inf")
    for label, y_distance in candidates:
        score = caption_score(label, y_distance, left, right, max_distance, cfg)
        if score is not None and score < best_score:
            best, best_score = label, score
    return best
