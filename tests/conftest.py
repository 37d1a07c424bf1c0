"""Shared test fixtures for cerfaparse."""

import pytest

from cerfaparse.config import ParseConfig
from cerfaparse.models import FieldGroup, InputBox, Label, TransformMatrix, Word

# ── Sample geometry (pdftocairo output of a CERFA page) ───────────────

PAGE1_MATRIX = TransformMatrix(0.999298, 0.0, 0.0, -0.999298, -10.935738, 561.196282)
PAGE_HEIGHT = 572.598

MATRIX_ATTR = "matrix(0.999298, 0, 0, -0.999298, -10.935738, 561.196282)"

CELL_PATH = (
    '<path fill-rule="nonzero" fill="rgb(100%, 100%, 100%)" fill-opacity="1" '
    'stroke-width="1" stroke="rgb(100%, 100%, 100%)" stroke-opacity="1" '
    'd="M 61.443689 494.57842 L 70.367919 494.57842 L 70.367919 505.484509 '
    'L 61.443689 505.484509 Z M 61.443689 494.57842 " '
    f'transform="{MATRIX_ATTR}"/>'
)

CHECKBOX_PATH = (
    '<path fill-rule="nonzero" fill="rgb(100%, 100%, 100%)" fill-opacity="1" '
    'stroke-width="0.5" stroke="rgb(13.729858%, 12.159729%, 12.548828%)" '
    'd="M 233.963161 469.306784 L 241.964869 469.306784 L 241.964869 477.3124 '
    'L 233.963161 477.3124 Z M 233.963161 469.306784 " '
    f'transform="{MATRIX_ATTR}"/>'
)

BACKGROUND_PATH = (
    '<path fill-rule="nonzero" fill="rgb(100%, 100%, 100%)" stroke-width="1" '
    'stroke="rgb(100%, 100%, 100%)" d="M 10 10 L 200 10 L 200 50 L 10 50 Z M 10 10 " '
    f'transform="{MATRIX_ATTR}"/>'
)


# ── Helpers ────────────────────────────────────────────────────────────


def make_svg(*elements: str, height: str = "572pt", view_box: str | None = None) -> str:
    """Wrap *elements* in an SVG root like pdftocairo writes."""
    vb = f' viewBox="{view_box}"' if view_box is not None else ""
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        f'<svg xmlns="http://www.w3.org/2000/svg" '
        f'xmlns:xlink="http://www.w3.org/1999/xlink" width="396pt" height="{height}"{vb}>\n'
        + "\n".join(elements)
        + "\n</svg>"
    )


def make_rect_path(
    x: float,
    y: float,
    w: float = 8.92,
    h: float = 10.91,
    kind: str = "cell",
    transform: str | None = MATRIX_ATTR,
) -> str:
    """A ``<path>`` for a white-filled box of the given kind."""
    if kind == "cell":
        stroke = 'stroke="rgb(100%, 100%, 100%)" stroke-width="1"'
    else:
        stroke = 'stroke="rgb(0%, 0%, 0%)" stroke-width="0.5"'
    tf = f' transform="{transform}"' if transform is not None else ""
    return (
        f'<path fill="rgb(100%, 100%, 100%)" {stroke} '
        f'd="M {x} {y} L {x + w} {y} L {x + w} {y + h} L {x} {y + h} Z"{tf}/>'
    )


def make_box(
    x: float,
    y: float,
    kind: str = "cell",
    width: float = 8.92,
    height: float = 10.91,
) -> InputBox:
    """Create an InputBox with CERFA cell dimensions."""
    return InputBox(x=x, y=y, width=width, height=height, kind=kind)


def make_group(xs: list[float], y: float, kind: str = "cell") -> FieldGroup:
    """One field group of boxes at the given X positions."""
    return FieldGroup(boxes=tuple(make_box(x, y, kind) for x in xs), kind=kind)


def make_word(text: str, x_min: float, y_min: float, x_max: float, y_max: float) -> Word:
    return Word(text=text, x_min=x_min, y_min=y_min, x_max=x_max, y_max=y_max)


def make_label(
    text: str,
    x_min: float,
    y_min: float,
    x_max: float,
    y_max: float,
    page: int = 1,
) -> Label:
    """Create a Label in text-layer (Y-down) coordinates."""
    return Label(text=text, x_min=x_min, y_min=y_min, x_max=x_max, y_max=y_max, page=page)


def make_dot_label(y_min: float, x_min: float = 50.0, x_max: float = 300.0, page: int = 1) -> Label:
    """A dot-leader label, 10 units tall."""
    return make_label("." * 40, x_min, y_min, x_max, y_min + 10, page)


# ── Fixtures ───────────────────────────────────────────────────────────


@pytest.fixture
def default_cfg() -> ParseConfig:
    """Return a default ParseConfig."""
    return ParseConfig()


@pytest.fixture
def identity() -> TransformMatrix:
    return TransformMatrix.identity()
