"""Row/field grouping of input boxes."""

from .rows import Row, cluster_rows, group_boxes_into_fields, split_row

__all__ = ["Row", "cluster_rows", "split_row", "group_boxes_into_fields"]
