"""Label assembly: join text-layer words into per-line label spans."""

from __future__ import annotations

import functools
from typing import Dict, List, Mapping, Sequence

from ..config import ParseConfig
from ..models import Label, Word


def _reading_order(tol: float):
    """Comparator: Y first, X when the Y difference is within *tol*."""

    def cmp(a: Word, b: Word) -> float:
        dy = a.y_min - b.y_min
        if abs(dy) > tol:
            return dy
        return a.x_min - b.x_min

    return functools.cmp_to_key(cmp)


def _words_to_label(words: Sequence[Word], page: int) -> Label:
    return Label(
        text=" ".join(w.text for w in words),
        x_min=min(w.x_min for w in words),
        y_min=min(w.y_min for w in words),
        x_max=max(w.x_max for w in words),
        y_max=max(w.y_max for w in words),
        page=page,
    )


def _split_lines(words: List[Word], tol: float) -> List[List[Word]]:
    """Consecutive words whose y_min is within *tol* of the previous one."""
    lines: List[List[Word]] = [[words[0]]]
    for w in words[1:]:
        if abs(w.y_min - lines[-1][-1].y_min) <= tol:
            lines[-1].append(w)
        else:
            lines.append([w])
    return lines


def assemble_labels(
    words: Sequence[Word], page: int, cfg: ParseConfig | None = None
) -> List[Label]:
    """Join the words of one page into labels.

    Words are sorted into reading order, split into lines on Y, and
    within a line joined while the horizontal gap to the previous word
    is at most ``cfg.word_join_gap``.  Labels come out in line order,
    left to right.
    """
    if cfg is None:
        cfg = ParseConfig()
    if not words:
        return []

    ordered = sorted(words, key=_reading_order(cfg.line_y_tolerance))
    labels: List[Label] = []
    for line in _split_lines(ordered, cfg.line_y_tolerance):
        line = sorted(line, key=lambda w: w.x_min)
        span = [line[0]]
        for w in line[1:]:
            if w.x_min - span[-1].x_max <= cfg.word_join_gap:
                span.append(w)
            else:
                labels.append(_words_to_label(span, page))
                span = [w]
        labels.append(_words_to_label(span, page))
    return labels


def extract_labels(
    words_by_page: Mapping[int, Sequence[Word]], cfg: ParseConfig | None = None
) -> Dict[int, List[Label]]:
    """Assemble labels for every page; keys are 1-based page numbers."""
    return {
        page: assemble_labels(words, page, cfg)
        for page, words in sorted(words_by_page.items())
    }
