from dataclasses import dataclass


class ConfigValidationError(ValueError):
    """Raised when a ParseConfig field has an invalid value."""


def _check_range(name: str, value: float, lo: float, hi: float) -> None:
    if not (lo <= value <= hi):
        raise ConfigValidationError(f"{name}={value} out of range [{lo}, {hi}]")


def _check_positive(name: str, value: float) -> None:
    if value <= 0:
        raise ConfigValidationError(f"{name}={value} must be > 0")


def _check_non_negative(name: str, value: float) -> None:
    if value < 0:
        raise ConfigValidationError(f"{name}={value} must be >= 0")


@dataclass
class ParseConfig:
    """Tunables for geometry-to-field inference.

    Defaults are calibrated against pdftocairo / pdftotext output for
    CERFA forms.  Recalibrate against sample documents before using them
    on another family of forms.
    """

    # ── Box extraction (SVG content units) ─────────────────────────────
    # Fill/stroke channels at or above this fraction count as white.
    white_threshold: float = 0.95
    # Stroke channels strictly below this fraction count as dark.
    dark_stroke_threshold: float = 0.2
    # Minimum stroke width for a white-stroked box to be a character cell.
    cell_min_stroke_width: float = 0.9
    # Size window for input boxes; filters page backgrounds and slivers.
    min_box_size: float = 3.0
    max_box_width: float = 50.0
    max_box_height: float = 50.0
    # Per-component tolerance when comparing box transforms on one page.
    transform_tolerance: float = 0.001

    # ── Label assembly (text-layer points, Y-down) ─────────────────────
    # Words whose y_min differ by at most this share a line.
    line_y_tolerance: float = 2.0
    # Max horizontal gap between words joined into one label.
    word_join_gap: float = 10.0

    # ── Row / field grouping (SVG content units) ───────────────────────
    # Boxes within this distance of a row's mean Y join the row.
    row_y_tolerance: float = 2.0
    # Gaps wider than this split a row into separate fields.  Intra-field
    # cell gaps are ~3 units and date separators ~5; field gaps are >= 15.
    field_gap_threshold: float = 10.0

    # ── Dot-leader detection (text-layer points, Y-down) ───────────────
    min_dot_count: int = 10
    # Max y_min difference between consecutive dot lines of one group.
    dot_group_y_gap: float = 20.0
    # Max distance between a caption's bottom and the dot group's top.
    dot_label_max_distance: float = 30.0

    # ── Label matching (PDF points) ────────────────────────────────────
    # Max distance between a label's bottom edge and a field's top edge.
    label_max_distance: float = 25.0
    # A label left of a field (no overlap) must be within this gap.
    label_max_x_gap: float = 50.0
    # Score penalty for a label that does not overlap horizontally.
    no_overlap_penalty: float = 20.0

    def __post_init__(self) -> None:
        """Validate field ranges to catch misconfiguration early."""
        # -- Color thresholds in [0, 1] --
        for name in ("white_threshold", "dark_stroke_threshold"):
            _check_range(name, getattr(self, name), 0.0, 1.0)

        # -- Strictly positive sizes and tolerances --
        _pos_floats = [
            "min_box_size",
            "max_box_width",
            "max_box_height",
            "transform_tolerance",
            "line_y_tolerance",
            "row_y_tolerance",
            "field_gap_threshold",
            "dot_group_y_gap",
            "dot_label_max_distance",
            "label_max_distance",
        ]
        for name in _pos_floats:
            _check_positive(name, getattr(self, name))

        # -- Non-negative floats --
        _nn_floats = [
            "cell_min_stroke_width",
            "word_join_gap",
            "label_max_x_gap",
            "no_overlap_penalty",
        ]
        for name in _nn_floats:
            _check_non_negative(name, getattr(self, name))

        if self.min_dot_count < 1:
            raise ConfigValidationError(
                f"min_dot_count={self.min_dot_count} must be >= 1"
            )

        # -- Size window ordering --
        for name in ("max_box_width", "max_box_height"):
            if self.min_box_size >= getattr(self, name):
                raise ConfigValidationError(
                    f"min_box_size ({self.min_box_size}) must be < "
                    f"{name} ({getattr(self, name)})"
                )
