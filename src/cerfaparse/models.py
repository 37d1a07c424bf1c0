from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Literal, Optional, Tuple

BoxType = Literal["cell", "checkbox"]
FieldType = Literal["input", "checkbox"]


@dataclass(frozen=True)
class TransformMatrix:
    """2D affine map ``x' = a*x + c*y + e``, ``y' = b*x + d*y + f``."""

    a: float
    b: float
    c: float
    d: float
    e: float
    f: float

    @classmethod
    def identity(cls) -> "TransformMatrix":
        return cls(1.0, 0.0, 0.0, 1.0, 0.0, 0.0)

    @classmethod
    def translation(cls, tx: float, ty: float = 0.0) -> "TransformMatrix":
        return cls(1.0, 0.0, 0.0, 1.0, tx, ty)

    def as_tuple(self) -> Tuple[float, float, float, float, float, float]:
        """Components as ``(a, b, c, d, e, f)``."""
        return (self.a, self.b, self.c, self.d, self.e, self.f)

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dict."""
        return {k: v for k, v in zip("abcdef", self.as_tuple())}

    @classmethod
    def from_dict(cls, d: dict) -> "TransformMatrix":
        """Deserialize from a dict produced by :meth:`to_dict`."""
        return cls(*(float(d[k]) for k in "abcdef"))


@dataclass(frozen=True)
class InputBox:
    """A character cell or checkbox in SVG content space."""

    x: float
    y: float
    width: float
    height: float
    kind: BoxType = "cell"

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dict."""
        return {
            "x": round(self.x, 3),
            "y": round(self.y, 3),
            "width": round(self.width, 3),
            "height": round(self.height, 3),
            "kind": self.kind,
        }


@dataclass(frozen=True)
class PdfRect:
    """Rectangle in PDF page space: origin bottom-left, Y up."""

    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def top(self) -> float:
        return self.y + self.height

    @classmethod
    def union(cls, rects: Iterable["PdfRect"]) -> "PdfRect":
        """Smallest rect covering every rect in *rects*.

        Raises ``ValueError`` on an empty iterable.
        """
        rects = list(rects)
        if not rects:
            raise ValueError("union of no rects")
        x0 = min(r.x for r in rects)
        y0 = min(r.y for r in rects)
        x1 = max(r.right for r in rects)
        y1 = max(r.top for r in rects)
        return cls(x=x0, y=y0, width=x1 - x0, height=y1 - y0)

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dict."""
        return {
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "PdfRect":
        """Deserialize from a dict produced by :meth:`to_dict`."""
        return cls(
            x=float(d["x"]),
            y=float(d["y"]),
            width=float(d["width"]),
            height=float(d["height"]),
        )


@dataclass(frozen=True)
class Word:
    """A single text-layer word; top-left origin, Y down."""

    text: str
    x_min: float
    y_min: float
    x_max: float
    y_max: float


@dataclass(frozen=True)
class Label:
    """One or more joined words on a single line; top-left origin, Y down."""

    text: str
    x_min: float
    y_min: float
    x_max: float
    y_max: float
    page: int

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dict."""
        return {
            "text": self.text,
            "x_min": round(self.x_min, 3),
            "y_min": round(self.y_min, 3),
            "x_max": round(self.x_max, 3),
            "y_max": round(self.y_max, 3),
            "page": self.page,
        }


@dataclass(frozen=True)
class PageGeometry:
    """Classified boxes of one page plus its single effective transform."""

    boxes: Tuple[InputBox, ...] = ()
    transform: Optional[TransformMatrix] = None
    page_height: float = 0.0
    warnings: Tuple[str, ...] = ()


@dataclass(frozen=True)
class FieldGroup:
    """A run of same-kind boxes on one row treated as one field."""

    boxes: Tuple[InputBox, ...]
    kind: BoxType

    @property
    def box_count(self) -> int:
        """Number of boxes (= max length for comb fields)."""
        return len(self.boxes)


@dataclass(frozen=True)
class Field:
    """A named, positioned form field ready for injection."""

    key: str
    type: FieldType
    label: str
    page: int
    pdf_rect: PdfRect
    max_length: Optional[int] = None
    multiline: bool = False

    def to_dict(self) -> dict:
        """Serialize to the form-description shape used by the UI layer."""
        props: dict = {
            "label": self.label,
            "page": self.page,
            "pdfRect": self.pdf_rect.to_dict(),
        }
        if self.max_length is not None:
            props["maxLength"] = self.max_length
        if self.multiline:
            props["multiline"] = True
        return {"key": self.key, "type": self.type, "props": props}

    @classmethod
    def from_dict(cls, d: dict) -> "Field":
        """Deserialize from a dict produced by :meth:`to_dict`."""
        props = d.get("props", {})
        return cls(
            key=d["key"],
            type=d["type"],
            label=props.get("label", ""),
            page=int(props["page"]),
            pdf_rect=PdfRect.from_dict(props["pdfRect"]),
            max_length=props.get("maxLength"),
            multiline=bool(props.get("multiline", False)),
        )

