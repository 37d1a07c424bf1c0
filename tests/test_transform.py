"""Tests for cerfaparse.transform — composition, mapping, parsing."""

import math
import random

import pytest

from cerfaparse.models import InputBox, TransformMatrix
from cerfaparse.transform import (
    compose_transforms,
    map_point,
    matrices_close,
    parse_transform,
    rect_to_pdf_space,
)

from conftest import PAGE1_MATRIX, PAGE_HEIGHT

PAGE2_MATRIX = TransformMatrix(0.999298, 0.0, 0.0, -0.999298, 0.0642618, 572.196282)

SAMPLE_CELL = InputBox(x=61.443689, y=494.57842, width=8.92423, height=10.90609)


class TestMapPoint:
    def test_sample_page_transform(self):
        x, y = map_point(61.443689, 494.57842, PAGE1_MATRIX)
        assert x == pytest.approx(50.4648, abs=1e-3)
        assert y == pytest.approx(66.9651, abs=1e-3)

    def test_negative_d_flips_y(self):
        _, high = map_point(100, 100, PAGE1_MATRIX)
        _, low = map_point(100, 200, PAGE1_MATRIX)
        assert high > low

    def test_translation_difference_between_pages(self):
        x2, _ = map_point(100, 100, PAGE2_MATRIX)
        x1, _ = map_point(100, 100, PAGE1_MATRIX)
        assert x2 - x1 == pytest.approx(11.0, abs=0.01)

    def test_identity(self):
        assert map_point(3.5, -2.0, TransformMatrix.identity()) == (3.5, -2.0)


class TestComposeTransforms:
    def test_inner_applied_first(self):
        scale = TransformMatrix(2, 0, 0, 2, 0, 0)
        shift = TransformMatrix.translation(10, 5)
        # scale(shift(p)) → (2*(1+10), 2*(1+5))
        assert map_point(1, 1, compose_transforms(scale, shift)) == (22, 12)
        # shift(scale(p)) → (2+10, 2+5)
        assert map_point(1, 1, compose_transforms(shift, scale)) == (12, 7)

    def test_identity_is_neutral(self):
        ident = TransformMatrix.identity()
        assert compose_transforms(ident, PAGE1_MATRIX) == PAGE1_MATRIX
        assert compose_transforms(PAGE1_MATRIX, ident) == PAGE1_MATRIX


class TestRectToPdfSpace:
    def test_sample_cell_size(self):
        rect = rect_to_pdf_space(SAMPLE_CELL, PAGE1_MATRIX, PAGE_HEIGHT)
        assert rect.width == pytest.approx(8.92, abs=0.01)
        assert rect.height == pytest.approx(10.90, abs=0.01)

    def test_sample_cell_pdf_y(self):
        # viewport bottom 66.97 → PDF y = 572.598 - 66.97
        rect = rect_to_pdf_space(SAMPLE_CELL, PAGE1_MATRIX, PAGE_HEIGHT)
        assert rect.y == pytest.approx(505.63, abs=0.01)
        assert rect.x == pytest.approx(50.46, abs=0.01)

    def test_identity_flips_only_y(self):
        box = InputBox(x=10, y=20, width=5, height=8)
        rect = rect_to_pdf_space(box, TransformMatrix.identity(), 100.0)
        assert (rect.x, rect.y, rect.width, rect.height) == (10, 72, 5, 8)

    def test_positive_size_for_random_non_singular_matrices(self):
        rng = random.Random(1234)
        for _ in range(500):
            while True:
                a, b, c, d = (rng.uniform(-3, 3) for _ in range(4))
                if abs(a * d - b * c) > 1e-3:
                    break
            m = TransformMatrix(a, b, c, d, rng.uniform(-500, 500), rng.uniform(-500, 500))
            box = InputBox(
                x=rng.uniform(-100, 600),
                y=rng.uniform(-100, 800),
                width=rng.uniform(1, 50),
                height=rng.uniform(1, 50),
            )
            rect = rect_to_pdf_space(box, m, rng.uniform(100, 1200))
            assert rect.width > 0
            assert rect.height > 0


class TestParseTransform:
    def test_matrix_commas(self):
        assert parse_transform(
            "matrix(0.999298, 0, 0, -0.999298, -10.935738, 561.196282)"
        ) == PAGE1_MATRIX

    def test_matrix_whitespace_separated(self):
        m = parse_transform("matrix(1 0 0 -1 5 6)")
        assert m == TransformMatrix(1, 0, 0, -1, 5, 6)

    def test_matrix_exponent(self):
        m = parse_transform("matrix(1e0,0,0,1,2.5e1,0)")
        assert m.e == 25.0

    def test_translate_two_args(self):
        assert parse_transform("translate(3, 4)") == TransformMatrix.translation(3, 4)

    def test_translate_one_arg(self):
        assert parse_transform("translate(7)") == TransformMatrix.translation(7, 0)

    @pytest.mark.parametrize(
        "attr",
        [None, "", "rotate(45)", "scale(2)", "matrix(1, 0, 0, 1)", "matrix(a,b,c,d,e,f)"],
    )
    def test_unsupported_returns_none(self, attr):
        assert parse_transform(attr) is None

    def test_huge_exponent_is_not_finite(self):
        assert parse_transform("matrix(1e999, 0, 0, 1, 0, 0)") is None


class TestMatricesClose:
    def test_within_tolerance(self):
        other = TransformMatrix(0.9995, 0, 0, -0.999298, -10.935738, 561.196282)
        assert matrices_close(PAGE1_MATRIX, other)

    def test_outside_tolerance(self):
        other = TransformMatrix(0.999298, 0, 0, -0.999298, -10.935738, 562.0)
        assert not matrices_close(PAGE1_MATRIX, other)

    def test_custom_tolerance(self):
        other = TransformMatrix.translation(0.5)
        assert matrices_close(TransformMatrix.identity(), other, tol=1.0)
        assert not math.isclose(other.e, 0.0)
