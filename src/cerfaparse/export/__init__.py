from .inject import inject_fields
from .json_export import build_field_document, load_field_json, write_field_json
from .overlay import draw_field_overlay

__all__ = [
    "build_field_document",
    "write_field_json",
    "load_field_json",
    "inject_fields",
    "draw_field_overlay",
]
