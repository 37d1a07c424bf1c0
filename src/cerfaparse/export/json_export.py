"""Form-description JSON: fields grouped by page for the UI layer."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, Optional

from ..models import Field


def build_field_document(fields: Iterable[Field], page_count: int) -> dict:
    """Return ``{"pages": [{"pageNumber": n, "fields": [...]}, ...]}``.

    Every page from 1 to *page_count* is listed, in order, even when it
    has no fields.  Fields keep their input order within a page.
    """
    by_page: dict[int, list] = {n: [] for n in range(1, page_count + 1)}
    for f in fields:
        if f.page in by_page:
            by_page[f.page].append(f.to_dict())
    return {
        "pages": [
            {"pageNumber": n, "fields": page_fields}
            for n, page_fields in by_page.items()
        ]
    }


def write_field_json(
    fields: Iterable[Field],
    page_count: int,
    out_path: Path | str,
) -> str:
    """Write the field document to *out_path* and return the JSON text."""
    json_str = json.dumps(
        build_field_document(fields, page_count), indent=2, ensure_ascii=False
    )
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(json_str, encoding="utf-8")
    return json_str


def load_field_json(path: Path | str, page: Optional[int] = None) -> list[Field]:
    """Read fields back from a document written by :func:`write_field_json`."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    fields = []
    for page_entry in data.get("pages", []):
        if page is not None and page_entry.get("pageNumber") != page:
            continue
        fields.extend(Field.from_dict(d) for d in page_entry.get("fields", []))
    return fields
