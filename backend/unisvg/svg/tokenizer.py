"""Small explicit SVG tokenizer and primitive-shape parser.

The tokenizer walks the markup one character at a time and yields start,
end and text tokens. The parser keeps a stack of inherited presentation
attributes (from <g> and <svg>) and emits typed shape nodes for the
primitives the converter understands: circle, ellipse, rect, polygon,
polyline, line and path. Everything else is skipped and counted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

logger = logging.getLogger(__name__)

_INHERITED = ("fill", "stroke", "stroke-width", "stroke-linecap", "stroke-linejoin", "opacity")


class TokenKind(str, Enum):
    START = "start"
    END = "end"
    TEXT = "text"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    name: str = ""
    attrs: dict[str, str] = field(default_factory=dict)
    self_closing: bool = False
    text: str = ""


class SvgSyntaxError(ValueError):
    def __init__(self, message: str, position: int):
        super().__init__(f"{message} at offset {position}")
        self.position = position


class Tokenizer:
    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def tokens(self):
        text = self.text
        while self.pos < len(text):
            if text.startswith("<!--", self.pos):
                self._skip_past("-->")
            elif text.startswith("<?", self.pos):
                self._skip_past("?>")
            elif text.startswith("<![CDATA[", self.pos):
                start = self.pos + len("<![CDATA[")
                self._skip_past("]]>")
                yield Token(TokenKind.TEXT, text=text[start:self.pos - 3])
            elif text.startswith("<!", self.pos):
                self._skip_past(">")
            elif text.startswith("</", self.pos):
                self.pos += 2
                name = self._read_name()
                self._skip_space()
                self._expect(">")
                yield Token(TokenKind.END, name=name)
            elif text[self.pos] == "<":
                yield self._read_start_tag()
            else:
                end = text.find("<", self.pos)
                end = len(text) if end == -1 else end
                chunk = text[self.pos:end]
                self.pos = end
                if chunk.strip():
                    yield Token(TokenKind.TEXT, text=chunk.strip())

    def _read_start_tag(self) -> Token:
        self.pos += 1
        name = self._read_name()
        if not name:
            raise SvgSyntaxError("Expected element name", self.pos)
        attrs: dict[str, str] = {}
        while True:
            self._skip_space()
            if self.pos >= len(self.text):
                raise SvgSyntaxError(f"Unterminated <{name}> tag", self.pos)
            if self.text.startswith("/>", self.pos):
                self.pos += 2
                return Token(TokenKind.START, name=name, attrs=attrs, self_closing=True)
            if self.text[self.pos] == ">":
                self.pos += 1
                return Token(TokenKind.START, name=name, attrs=attrs)

            key = self._read_name()
            if not key:
                raise SvgSyntaxError(f"Malformed attribute in <{name}>", self.pos)
            self._skip_space()
            if self.pos < len(self.text) and self.text[self.pos] == "=":
                self.pos += 1
                self._skip_space()
                attrs[key] = self._read_value()
            else:
                attrs[key] = ""

    def _read_name(self) -> str:
        start = self.pos
        while self.pos < len(self.text) and (self.text[self.pos].isalnum() or self.text[self.pos] in "-_:."):
            self.pos += 1
        return self.text[start:self.pos]

    def _read_value(self) -> str:
        if self.pos >= len(self.text):
            raise SvgSyntaxError("Expected attribute value", self.pos)
        quote = self.text[self.pos]
        if quote in "\"'":
            end = self.text.find(quote, self.pos + 1)
            if end == -1:
                raise SvgSyntaxError("Unterminated attribute value", self.pos)
            value = self.text[self.pos + 1:end]
            self.pos = end + 1
            return value
        start = self.pos
        while self.pos < len(self.text) and not self.text[self.pos].isspace() and self.text[self.pos] not in "/>":
            self.pos += 1
        return self.text[start:self.pos]

    def _skip_space(self) -> None:
        while self.pos < len(self.text) and self.text[self.pos].isspace():
            self.pos += 1

    def _skip_past(self, marker: str) -> None:
        end = self.text.find(marker, self.pos)
        if end == -1:
            raise SvgSyntaxError(f"Missing '{marker}'", self.pos)
        self.pos = end + len(marker)

    def _expect(self, char: str) -> None:
        if self.pos >= len(self.text) or self.text[self.pos] != char:
            raise SvgSyntaxError(f"Expected '{char}'", self.pos)
        self.pos += 1


def tokenize(text: str) -> list[Token]:
    return list(Tokenizer(text).tokens())


# ---------------------------------------------------------------------------
# Primitive AST
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ShapeStyle:
    fill: str | None = None
    stroke: str | None = None
    stroke_width: float | None = None
    stroke_linecap: str | None = None
    stroke_linejoin: str | None = None
    opacity: float | None = None


@dataclass(frozen=True)
class CircleNode:
    cx: float
    cy: float
    r: float
    style: ShapeStyle
    id: str = ""


@dataclass(frozen=True)
class EllipseNode:
    cx: float
    cy: float
    rx: float
    ry: float
    style: ShapeStyle
    id: str = ""


@dataclass(frozen=True)
class RectNode:
    x: float
    y: float
    width: float
    height: float
    style: ShapeStyle
    rx: float = 0.0
    ry: float = 0.0
    id: str = ""


@dataclass(frozen=True)
class PolygonNode:
    points: tuple[tuple[float, float], ...]
    style: ShapeStyle
    closed: bool = True
    id: str = ""


@dataclass(frozen=True)
class PathNode:
    d: str
    style: ShapeStyle
    id: str = ""


ShapeNode = CircleNode | EllipseNode | RectNode | PolygonNode | PathNode


@dataclass
class SvgDocument:
    width: float | None = None
    height: float | None = None
    view_box: tuple[float, float, float, float] | None = None
    shapes: list[ShapeNode] = field(default_factory=list)
    skipped: dict[str, int] = field(default_factory=dict)


def _number(value: str | None, default: float = 0.0) -> float:
    if value is None or value == "":
        return default
    cleaned = value.strip()
    for unit in ("px", "pt"):
        if cleaned.endswith(unit):
            cleaned = cleaned[: -len(unit)]
    try:
        return float(cleaned)
    except ValueError:
        return default


def _split_numbers(text: str) -> list[float]:
    numbers = []
    for part in text.replace(",", " ").split():
        try:
            numbers.append(float(part))
        except ValueError:
            logger.debug("Skipping non-numeric point value %r", part)
    return numbers


def _style_attrs(attrs: dict[str, str]) -> dict[str, str]:
    """Presentation attributes plus inline style="a:b; c:d" declarations."""
    found = {key: attrs[key] for key in _INHERITED if key in attrs}
    for declaration in attrs.get("style", "").split(";"):
        key, sep, value = declaration.partition(":")
        if sep and key.strip() in _INHERITED:
            found[key.strip()] = value.strip()
    return found


def _to_style(inherited: dict[str, str]) -> ShapeStyle:
    stroke_width = inherited.get("stroke-width")
    opacity = inherited.get("opacity")
    return ShapeStyle(
        fill=inherited.get("fill"),
        stroke=inherited.get("stroke"),
        stroke_width=_number(stroke_width) if stroke_width else None,
        stroke_linecap=inherited.get("stroke-linecap"),
        stroke_linejoin=inherited.get("stroke-linejoin"),
        opacity=_number(opacity, 1.0) if opacity else None,
    )


def _build_shape(name: str, attrs: dict[str, str], style: ShapeStyle) -> ShapeNode | None:
    shape_id = attrs.get("id", "")
    if name == "circle":
        return CircleNode(_number(attrs.get("cx")), _number(attrs.get("cy")), _number(attrs.get("r")), style, shape_id)
    if name == "ellipse":
        return EllipseNode(
            _number(attrs.get("cx")), _number(attrs.get("cy")),
            _number(attrs.get("rx")), _number(attrs.get("ry")), style, shape_id,
        )
    if name == "rect":
        rx = _number(attrs.get("rx"), -1)
        ry = _number(attrs.get("ry"), -1)
        rx, ry = (rx if rx >= 0 else max(ry, 0)), (ry if ry >= 0 else max(rx, 0))
        return RectNode(
            _number(attrs.get("x")), _number(attrs.get("y")),
            _number(attrs.get("width")), _number(attrs.get("height")),
            style, rx, ry, shape_id,
        )
    if name in ("polygon", "polyline"):
        values = _split_numbers(attrs.get("points", ""))
        points = tuple(zip(values[0::2], values[1::2]))
        return PolygonNode(points, style, closed=name == "polygon", id=shape_id)
    if name == "line":
        points = (
            (_number(attrs.get("x1")), _number(attrs.get("y1"))),
            (_number(attrs.get("x2")), _number(attrs.get("y2"))),
        )
        return PolygonNode(points, style, closed=False, id=shape_id)
    if name == "path" and attrs.get("d"):
        return PathNode(attrs["d"], style, shape_id)
    return None


_CONTAINERS = frozenset({"svg", "g", "a"})
_SHAPES = frozenset({"circle", "ellipse", "rect", "polygon", "polyline", "line", "path"})


def parse_svg_primitives(text: str) -> SvgDocument:
    """Parse markup into primitive shape nodes with inherited styles resolved."""
    doc = SvgDocument()
    stack: list[tuple[str, dict[str, str]]] = []
    # elements whose content is ignored entirely
    skip_depth = 0

    for token in Tokenizer(text).tokens():
        if token.kind is TokenKind.TEXT:
            continue

        if token.kind is TokenKind.END:
            if skip_depth:
                skip_depth -= 1
            elif stack and stack[-1][0] == token.name:
                stack.pop()
            continue

        if skip_depth:
            if not token.self_closing:
                skip_depth += 1
            continue

        name = token.name.split(":")[-1]
        inherited = dict(stack[-1][1]) if stack else {}
        inherited.update(_style_attrs(token.attrs))

        if name == "svg" and not stack:
            doc.width = _number(token.attrs.get("width")) or None
            doc.height = _number(token.attrs.get("height")) or None
            box = _split_numbers(token.attrs.get("viewBox", ""))
            if len(box) == 4:
                doc.view_box = (box[0], box[1], box[2], box[3])

        if name in _CONTAINERS:
            if not token.self_closing:
                stack.append((token.name, inherited))
            continue

        if name in _SHAPES:
            shape = _build_shape(name, token.attrs, _to_style(inherited))
            if shape is not None:
                doc.shapes.append(shape)
        else:
            doc.skipped[name] = doc.skipped.get(name, 0) + 1

        if not token.self_closing:
            skip_depth = 1

    logger.debug("Parsed SVG primitives: %d shapes, skipped %s", len(doc.shapes), doc.skipped or "nothing")
    return doc
