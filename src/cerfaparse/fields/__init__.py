"""Field inference — naming, dot-leader fields and label matching.

Public API
----------
- :func:`generate_field_name` / :func:`deduplicate_name` / :class:`NameRegistry`
- :func:`is_dot_line` / :func:`extract_dot_line_fields` / :class:`DotLineResult`
- :func:`map_labels_to_fields` / :class:`MatchResult`
"""

from .dot_lines import DotLineResult, extract_dot_line_fields, is_dot_line
from .matching import MatchResult, find_best_label, group_pdf_rect, map_labels_to_fields
from .naming import NameRegistry, deduplicate_name, generate_field_name

__all__ = [
    "NameRegistry",
    "generate_field_name",
    "deduplicate_name",
    "DotLineResult",
    "is_dot_line",
    "extract_dot_line_fields",
    "MatchResult",
    "find_best_label",
    "group_pdf_rect",
    "map_labels_to_fields",
]
