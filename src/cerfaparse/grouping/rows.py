"""Row clustering and field splitting for classified input boxes.

Rows are built by a fold over Y-sorted boxes.  Each step returns a new
tuple of immutable :class:`Row` values; a joined row is replaced, never
mutated, and its Y is the running mean of its members so slow drift
along a long row does not cause a false split.
"""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass
from typing import Iterable, List, Tuple

from ..config import ParseConfig
from ..models import BoxType, FieldGroup, InputBox

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Row:
    """Same-kind boxes sharing a Y band."""

    kind: BoxType
    boxes: Tuple[InputBox, ...]
    y: float

    def with_box(self, box: InputBox) -> "Row":
        """Return a new row with *box* appended and the mean Y updated."""
        n = len(self.boxes)
        return Row(
            kind=self.kind,
            boxes=self.boxes + (box,),
            y=(self.y * n + box.y) / (n + 1),
        )


def _add_box(rows: Tuple[Row, ...], box: InputBox, tol: float) -> Tuple[Row, ...]:
    for i, row in enumerate(rows):
        if row.kind == box.kind and abs(row.y - box.y) <= tol:
            return rows[:i] + (row.with_box(box),) + rows[i + 1 :]
    return rows + (Row(kind=box.kind, boxes=(box,), y=box.y),)


def cluster_rows(
    boxes: Iterable[InputBox], cfg: ParseConfig | None = None
) -> Tuple[Row, ...]:
    """Cluster *boxes* into rows; cells and checkboxes never share a row."""
    if cfg is None:
        cfg = ParseConfig()
    ordered = sorted(boxes, key=lambda b: b.y)
    return functools.reduce(
        lambda rows, box: _add_box(rows, box, cfg.row_y_tolerance),
        ordered,
        (),
    )


def split_row(row: Row, gap_threshold: float) -> List[FieldGroup]:
    """Split a row left to right wherever the edge-to-edge gap exceeds *gap_threshold*."""
    ordered = sorted(row.boxes, key=lambda b: b.x)
    runs: List[List[InputBox]] = [[ordered[0]]]
    for prev, cur in zip(ordered, ordered[1:]):
        if cur.x - prev.right > gap_threshold:
            runs.append([cur])
        else:
            runs[-1].append(cur)
    return [FieldGroup(boxes=tuple(run), kind=row.kind) for run in runs]


def group_boxes_into_fields(
    boxes: Iterable[InputBox], cfg: ParseConfig | None = None
) -> List[FieldGroup]:
    """Group a page's boxes into field groups.

    Parameters
    ----------
    boxes : iterable of InputBox
        Classified boxes of one page, in SVG content space.
    cfg : ParseConfig, optional
        Uses ``row_y_tolerance`` and ``field_gap_threshold``.

    Returns
    -------
    list[FieldGroup]
        Top to bottom (first-box Y, with the row tolerance as an equality
        band), then left to right.
    """
    if cfg is None:
        cfg = ParseConfig()

    rows = cluster_rows(boxes, cfg)
    groups: List[FieldGroup] = []
    for row in rows:
        groups.extend(split_row(row, cfg.field_gap_threshold))

    tol = cfg.row_y_tolerance

    def cmp(a: FieldGroup, b: FieldGroup) -> float:
        dy = a.boxes[0].y - b.boxes[0].y
        if abs(dy) > tol:
            return dy
        return a.boxes[0].x - b.boxes[0].x

    groups.sort(key=functools.cmp_to_key(cmp))
    log.debug("group_boxes_into_fields: %d rows → %d groups", len(rows), len(groups))
    return groups
