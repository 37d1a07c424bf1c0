"""Tests for cerfaparse.fields.matching — captions for field groups."""

import pytest

from cerfaparse.config import ParseConfig
from cerfaparse.fields.matching import find_best_label, group_pdf_rect, map_labels_to_fields
from cerfaparse.fields.naming import NameRegistry
from cerfaparse.models import PdfRect

from conftest import make_group, make_label

# With the identity transform a box at content y=500 (height 10.91) has
# its PDF top edge at PAGE_H - 500 = 300.
PAGE_H = 800.0


def label_above(text, gap=10.0, x_min=100.0, x_max=140.0):
    """A label whose bottom edge sits *gap* points above a field top of 300."""
    y_max = 500.0 - gap
    return make_label(text, x_min, y_max - 10, x_max, y_max)


class TestGroupPdfRect:
    def test_union_of_boxes(self, identity):
        rect = group_pdf_rect(make_group([100, 111, 122], 500), identity, PAGE_H)
        assert rect.x == pytest.approx(100)
        assert rect.right == pytest.approx(130.92)
        assert rect.top == pytest.approx(300)
        assert rect.y == pytest.approx(PAGE_H - 510.91)


class TestFindBestLabel:
    RECT = PdfRect(x=100, y=289.09, width=30, height=10.91)

    def test_label_directly_above(self):
        lbl = label_above("Nom :")
        assert find_best_label(self.RECT, [lbl], PAGE_H) is lbl

    def test_label_below_field_ignored(self):
        below = make_label("Sous", 100, 505, 140, 515)
        assert find_best_label(self.RECT, [below], PAGE_H) is None

    def test_out_of_range(self):
        assert find_best_label(self.RECT, [label_above("Loin", gap=26)], PAGE_H) is None
        assert find_best_label(self.RECT, [label_above("Limite", gap=25)], PAGE_H) is not None

    def test_closest_wins(self):
        far = label_above("Loin", gap=20)
        near = label_above("Proche", gap=5)
        assert find_best_label(self.RECT, [far, near], PAGE_H) is near

    def test_tie_keeps_first(self):
        a = label_above("A", gap=5)
        b = label_above("B", gap=5)
        assert find_best_label(self.RECT, [a, b], PAGE_H) is a

    def test_left_label_penalised(self):
        left = label_above("Gauche", gap=2, x_min=40, x_max=95)
        above = label_above("Dessus", gap=15)
        assert find_best_label(self.RECT, [left, above], PAGE_H) is above

    def test_left_label_too_far(self):
        far_left = label_above("Loin", gap=2, x_min=0, x_max=40)
        assert find_best_label(self.RECT, [far_left], PAGE_H) is None

    def test_custom_distance(self):
        cfg = ParseConfig(label_max_distance=40.0)
        assert find_best_label(self.RECT, [label_above("Loin", gap=30)], PAGE_H, cfg) is not None


class TestMapLabelsToFields:
    def test_label_above_names_field(self, identity):
        groups = [make_group([100, 111, 122], 500)]
        result = map_labels_to_fields(groups, [label_above("Nom :")], identity, 1, PAGE_H)
        field = result.fields[0]
        assert field.key == "p1_nom"
        assert field.label == "Nom :"
        assert field.type == "input"
        assert field.max_length == 3
        assert "p1_nom" in result.names

    def test_duplicate_labels_deduplicated(self, identity):
        groups = [make_group([100, 111], 500), make_group([300, 311], 500)]
        labels = [label_above("Nom :"), label_above("Nom :", x_min=300, x_max=340)]
        result = map_labels_to_fields(groups, labels, identity, 1, PAGE_H)
        assert [f.key for f in result.fields] == ["p1_nom", "p1_nom_2"]

    def test_unmatched_group(self, identity):
        result = map_labels_to_fields([make_group([100], 500)], [], identity, 4, PAGE_H)
        assert result.fields[0].key == "p4_field"
        assert result.fields[0].label == ""

    def test_checkbox_group(self, identity):
        groups = [make_group([100], 500, kind="checkbox")]
        result = map_labels_to_fields(groups, [label_above("Oui")], identity, 1, PAGE_H)
        field = result.fields[0]
        assert field.type == "checkbox"
        assert field.max_length is None
        assert field.key == "p1_oui"

    def test_names_threaded_from_earlier_stage(self, identity):
        names = NameRegistry.of(["p1_nom"])
        result = map_labels_to_fields(
            [make_group([100], 500)], [label_above("Nom :")], identity, 1, PAGE_H, names
        )
        assert result.fields[0].key == "p1_nom_2"
        assert len(result.names) == 2
        assert len(names) == 1

    def test_field_order_follows_groups(self, identity):
        groups = [make_group([300], 500), make_group([100], 500)]
        result = map_labels_to_fields(groups, [], identity, 1, PAGE_H)
        assert [f.pdf_rect.x for f in result.fields] == [300, 100]
