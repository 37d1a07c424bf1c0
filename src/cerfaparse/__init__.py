"""Field inference for flat CERFA PDF forms.

Frequently-used symbols are re-exported here for convenience.  For
stage internals import from the relevant submodule, e.g.::

    from cerfaparse.vector.extract import parse_rect_path
    from cerfaparse.fields.naming import NameRegistry
"""

__version__ = "0.1.0"

# ── Core models & config ──────────────────────────────────────────────

from .config import ConfigValidationError, ParseConfig
from .models import (
    Field,
    FieldGroup,
    InputBox,
    Label,
    PageGeometry,
    PdfRect,
    TransformMatrix,
    Word,
)

# ── Stages ────────────────────────────────────────────────────────────

from .fields import (
    NameRegistry,
    extract_dot_line_fields,
    generate_field_name,
    is_dot_line,
    map_labels_to_fields,
)
from .grouping import group_boxes_into_fields
from .tocr import assemble_labels, extract_labels, parse_bbox_layout
from .transform import compose_transforms, map_point, parse_transform, rect_to_pdf_space
from .vector import PageGeometryError, extract_boxes

# ── Pipeline ──────────────────────────────────────────────────────────

from .pipeline import DocumentResult, PageResult, StageResult, process_page, run_document

__all__ = [
    "__version__",
    # Models & config
    "ParseConfig",
    "ConfigValidationError",
    "TransformMatrix",
    "InputBox",
    "PdfRect",
    "Word",
    "Label",
    "PageGeometry",
    "FieldGroup",
    "Field",
    # Transform
    "compose_transforms",
    "map_point",
    "rect_to_pdf_space",
    "parse_transform",
    # Stages
    "extract_boxes",
    "PageGeometryError",
    "parse_bbox_layout",
    "assemble_labels",
    "extract_labels",
    "group_boxes_into_fields",
    "generate_field_name",
    "NameRegistry",
    "is_dot_line",
    "extract_dot_line_fields",
    "map_labels_to_fields",
    # Pipeline
    "StageResult",
    "PageResult",
    "DocumentResult",
    "process_page",
    "run_document",
]
