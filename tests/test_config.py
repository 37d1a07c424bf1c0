"""Tests for cerfaparse.config — ParseConfig defaults and validation."""

import pytest

from cerfaparse.config import ConfigValidationError, ParseConfig


class TestParseConfig:
    def test_defaults(self):
        cfg = ParseConfig()
        assert cfg.white_threshold == 0.95
        assert cfg.dark_stroke_threshold == 0.2
        assert cfg.cell_min_stroke_width == 0.9
        assert cfg.min_box_size == 3.0
        assert cfg.max_box_width == 50.0
        assert cfg.line_y_tolerance == 2.0
        assert cfg.word_join_gap == 10.0
        assert cfg.row_y_tolerance == 2.0
        assert cfg.field_gap_threshold == 10.0
        assert cfg.min_dot_count == 10
        assert cfg.dot_group_y_gap == 20.0
        assert cfg.dot_label_max_distance == 30.0
        assert cfg.label_max_distance == 25.0
        assert cfg.label_max_x_gap == 50.0
        assert cfg.no_overlap_penalty == 20.0

    def test_override(self):
        cfg = ParseConfig(field_gap_threshold=15.0, min_dot_count=5)
        assert cfg.field_gap_threshold == 15.0
        assert cfg.min_dot_count == 5

    def test_vars_round_trip(self):
        cfg = ParseConfig(label_max_distance=30.0)
        assert vars(ParseConfig(**vars(cfg))) == vars(cfg)


class TestConfigValidation:
    # ── Unit-range fields [0, 1] ──────────────────────────────────────

    def test_white_threshold_above_one_rejected(self):
        with pytest.raises(ConfigValidationError, match="white_threshold"):
            ParseConfig(white_threshold=1.5)

    def test_color_threshold_bounds_inclusive(self):
        ParseConfig(white_threshold=1.0, dark_stroke_threshold=0.0)
        with pytest.raises(ConfigValidationError, match=r"out of range \[0\.0, 1\.0\]"):
            ParseConfig(dark_stroke_threshold=-0.01)

    def test_dark_threshold_negative_rejected(self):
        with pytest.raises(ConfigValidationError, match="dark_stroke_threshold"):
            ParseConfig(dark_stroke_threshold=-0.1)

    def test_unit_range_boundaries(self):
        cfg = ParseConfig(white_threshold=1.0, dark_stroke_threshold=0.0)
        assert cfg.white_threshold == 1.0

    # ── Positive fields ───────────────────────────────────────────────

    @pytest.mark.parametrize(
        "name",
        ["row_y_tolerance", "field_gap_threshold", "label_max_distance", "transform_tolerance"],
    )
    def test_zero_rejected(self, name):
        with pytest.raises(ConfigValidationError, match=name):
            ParseConfig(**{name: 0.0})

    # ── Non-negative fields ───────────────────────────────────────────

    def test_zero_penalty_allowed(self):
        assert ParseConfig(no_overlap_penalty=0.0).no_overlap_penalty == 0.0

    def test_negative_join_gap_rejected(self):
        with pytest.raises(ConfigValidationError, match="word_join_gap"):
            ParseConfig(word_join_gap=-1.0)

    def test_min_dot_count_zero_rejected(self):
        with pytest.raises(ConfigValidationError, match="min_dot_count"):
            ParseConfig(min_dot_count=0)

    # ── Cross-field ordering ──────────────────────────────────────────

    def test_min_box_size_must_be_below_max(self):
        with pytest.raises(ConfigValidationError, match="must be < max_box_height"):
            ParseConfig(min_box_size=20.0, max_box_height=20.0)

    def test_is_value_error(self):
        with pytest.raises(ValueError):
            ParseConfig(max_box_width=-5.0)
