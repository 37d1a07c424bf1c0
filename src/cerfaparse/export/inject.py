"""AcroForm widget injection with pypdf.

Widgets are transparent (no border, no background) so the printed form
shows through; the viewer sizes text automatically (``DA`` font size 0)
and regenerates appearances (``NeedAppearances``).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from pypdf import PdfWriter
from pypdf.generic import (
    ArrayObject,
    DecodedStreamObject,
    DictionaryObject,
    FloatObject,
    NameObject,
    NumberObject,
    TextStringObject,
)

from ..models import Field

log = logging.getLogger(__name__)

# Field flags (PDF 32000-1, 12.7.4)
FF_MULTILINE = 1 << 12
FF_COMB = 1 << 24
# Annotation flag: print
ANNOT_PRINT = 4

DEFAULT_APPEARANCE = "/Helv 0 Tf 0 g"


def _rect_array(field: Field) -> ArrayObject:
    r = field.pdf_rect
    return ArrayObject(
        [FloatObject(r.x), FloatObject(r.y), FloatObject(r.right), FloatObject(r.top)]
    )


def _base_widget(field: Field, field_type: str) -> DictionaryObject:
    return DictionaryObject(
        {
            NameObject("/Type"): NameObject("/Annot"),
            NameObject("/Subtype"): NameObject("/Widget"),
            NameObject("/FT"): NameObject(field_type),
            NameObject("/T"): TextStringObject(field.key),
            NameObject("/TU"): TextStringObject(field.label),
            NameObject("/Rect"): _rect_array(field),
            NameObject("/F"): NumberObject(ANNOT_PRINT),
            NameObject("/BS"): DictionaryObject({NameObject("/W"): NumberObject(0)}),
            NameObject("/MK"): DictionaryObject(),
        }
    )


def text_widget(field: Field) -> DictionaryObject:
    """Widget dictionary for an ``input`` field."""
    widget = _base_widget(field, "/Tx")
    flags = 0
    if field.max_length:
        widget[NameObject("/MaxLen")] = NumberObject(field.max_length)
        flags |= FF_COMB
    if field.multiline:
        flags |= FF_MULTILINE
    widget[NameObject("/Ff")] = NumberObject(flags)
    widget[NameObject("/DA")] = TextStringObject(DEFAULT_APPEARANCE)
    widget[NameObject("/V")] = TextStringObject("")
    return widget


def _appearance(writer: PdfWriter, width: float, height: float, content: bytes):
    stream = DecodedStreamObject()
    stream[NameObject("/Type")] = NameObject("/XObject")
    stream[NameObject("/Subtype")] = NameObject("/Form")
    stream[NameObject("/BBox")] = ArrayObject(
        [FloatObject(0), FloatObject(0), FloatObject(width), FloatObject(height)]
    )
    stream.set_data(content)
    return writer._add_object(stream)


def checkbox_widget(writer: PdfWriter, field: Field) -> DictionaryObject:
    """Widget dictionary for a ``checkbox`` field with ``/Yes`` and ``/Off`` states."""
    widget = _base_widget(field, "/Btn")
    w, h = field.pdf_rect.width, field.pdf_rect.height
    m = min(w, h) * 0.2
    cross = (
        f"q 0 g 0 G 1 w {m:.2f} {m:.2f} m {w - m:.2f} {h - m:.2f} l S "
        f"{m:.2f} {h - m:.2f} m {w - m:.2f} {m:.2f} l S Q"
    ).encode("ascii")
    widget[NameObject("/AP")] = DictionaryObject(
        {
            NameObject("/N"): DictionaryObject(
                {
                    NameObject("/Yes"): _appearance(writer, w, h, cross),
                    NameObject("/Off"): _appearance(writer, w, h, b""),
                }
            )
        }
    )
    widget[NameObject("/V")] = NameObject("/Off")
    widget[NameObject("/AS")] = NameObject("/Off")
    return widget


def _ensure_acroform(writer: PdfWriter) -> DictionaryObject:
    writer.set_need_appearances_writer(True)
    acroform = writer.root_object["/AcroForm"].get_object()
    if "/Fields" not in acroform:
        acroform[NameObject("/Fields")] = ArrayObject()
    if "/DR" not in acroform:
        helv = DictionaryObject(
            {
                NameObject("/Type"): NameObject("/Font"),
                NameObject("/Subtype"): NameObject("/Type1"),
                NameObject("/BaseFont"): NameObject("/Helvetica"),
                NameObject("/Encoding"): NameObject("/WinAnsiEncoding"),
            }
        )
        acroform[NameObject("/DR")] = DictionaryObject(
            {
                NameObject("/Font"): DictionaryObject(
                    {NameObject("/Helv"): writer._add_object(helv)}
                )
            }
        )
    if "/DA" not in acroform:
        acroform[NameObject("/DA")] = TextStringObject(DEFAULT_APPEARANCE)
    return acroform


def inject_fields(
    pdf_path: Path | str,
    fields: Iterable[Field],
    out_path: Path | str,
) -> int:
    """Copy *pdf_path* to *out_path* with one AcroForm widget per field.

    Parameters
    ----------
    pdf_path : Path or str
        The flat source form.
    fields : iterable of Field
        Fields in PDF space; ``page`` is 1-based.
    out_path : Path or str
        Destination of the fillable PDF.

    Returns
    -------
    int
        Number of widgets added.  Fields whose page does not exist are
        skipped with a warning.
    """
    writer = PdfWriter(clone_from=str(pdf_path))
    acroform = _ensure_acroform(writer)
    fields_array = acroform["/Fields"]
    num_pages = len(writer.pages)

    added = 0
    for f in fields:
        if not 1 <= f.page <= num_pages:
            log.warning(
                "Field %s: page %d out of range 1..%d; skipped", f.key, f.page, num_pages
            )
            continue
        if f.type == "checkbox":
            widget = checkbox_widget(writer, f)
        else:
            widget = text_widget(f)
        annot = writer.add_annotation(page_number=f.page - 1, annotation=widget)
        fields_array.append(annot.indirect_reference)
        added += 1

    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with open(out_path, "wb") as fh:
        writer.write(fh)
    log.info("Injected %d fields into %s", added, out_path.name)
    return added
