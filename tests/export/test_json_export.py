"""Tests for cerfaparse.export.json_export — the form-description document."""

import json

from cerfaparse.export import build_field_document, load_field_json, write_field_json
from cerfaparse.models import Field, PdfRect


def _field(key, page=1, **kw):
    return Field(
        key=key,
        type=kw.pop("type", "input"),
        label=kw.pop("label", ""),
        page=page,
        pdf_rect=PdfRect(x=50.46, y=505.63, width=53.4, height=10.9),
        **kw,
    )


class TestBuildFieldDocument:
    def test_every_page_listed(self):
        doc = build_field_document([_field("p2_nom", page=2)], page_count=3)
        assert [p["pageNumber"] for p in doc["pages"]] == [1, 2, 3]
        assert doc["pages"][0]["fields"] == []
        assert doc["pages"][1]["fields"][0]["key"] == "p2_nom"

    def test_field_shape(self):
        doc = build_field_document([_field("p1_nom", label="Nom :", max_length=6)], 1)
        entry = doc["pages"][0]["fields"][0]
        assert entry == {
            "key": "p1_nom",
            "type": "input",
            "props": {
                "label": "Nom :",
                "page": 1,
                "pdfRect": {"x": 50.46, "y": 505.63, "width": 53.4, "height": 10.9},
                "maxLength": 6,
            },
        }

    def test_multiline_flag_only_when_set(self):
        doc = build_field_document([_field("a"), _field("b", multiline=True)], 1)
        a, b = doc["pages"][0]["fields"]
        assert "multiline" not in a["props"]
        assert b["props"]["multiline"] is True

    def test_order_kept_within_page(self):
        doc = build_field_document([_field("z"), _field("a"), _field("m")], 1)
        assert [f["key"] for f in doc["pages"][0]["fields"]] == ["z", "a", "m"]

    def test_fields_outside_page_range_dropped(self):
        doc = build_field_document([_field("p5_x", page=5)], 2)
        assert all(p["fields"] == [] for p in doc["pages"])


class TestWriteFieldJson:
    def test_write_and_reload(self, tmp_path):
        fields = [
            _field("p1_nom", label="Nom :", max_length=6),
            _field("p1_oui", type="checkbox", label="Oui"),
            _field("p2_observations", page=2, label="Observations", multiline=True),
        ]
        out = tmp_path / "out" / "form.json"
        text = write_field_json(fields, 2, out)

        assert json.loads(out.read_text(encoding="utf-8")) == json.loads(text)
        assert load_field_json(out) == fields
        assert load_field_json(out, page=2) == fields[2:]

    def test_non_ascii_kept_readable(self, tmp_path):
        out = tmp_path / "form.json"
        text = write_field_json([_field("p1_prenom", label="Prénom")], 1, out)
        assert "Prénom" in text
        assert "\n  " in text
