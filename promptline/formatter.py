"""
Format strings for prompt segments.

Supported syntax:

    $name / ${name}     variable
    [text](style)       text group; `style` may itself contain variables
    (text)              conditional group, hidden unless a variable inside has a value
    \\[ \\] \\( \\) \\$ \\\\  escapes

Variables are registered by name in three flavours:

    map_meta   the value is parsed as a format fragment (e.g. a symbol)
    map_style  the value is only used inside a style position
    map        plain text value

Every resolver is a zero-arg callable returning a string or None. None means
"no value": the variable renders as nothing and does not make a conditional
group visible. Styles are rendered to ANSI escapes through rich.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Union

from rich.color import Color, ColorParseError, ColorSystem
from rich.style import Style

from .errors import TemplateError

logger = logging.getLogger(__name__)

Resolver = Callable[[], Optional[str]]

ESCAPABLE = "\\[]()$"
_NAME_RE = re.compile(r"[A-Za-z0-9_]+")

# style keyword -> rich attribute
_STYLE_ATTRIBUTES = {
    "bold": "bold",
    "italic": "italic",
    "underline": "underline",
    "dimmed": "dim",
    "inverted": "reverse",
    "blink": "blink",
    "hidden": "conceal",
    "strikethrough": "strike",
}


@dataclass(frozen=True)
class _Text:
    value: str


@dataclass(frozen=True)
class _Variable:
    name: str
    position: int


@dataclass(frozen=True)
class _TextGroup:
    children: tuple
    style: tuple


@dataclass(frozen=True)
class _Conditional:
    children: tuple


Node = Union[_Text, _Variable, _TextGroup, _Conditional]


@dataclass(frozen=True)
class Segment:
    """A run of text with an optional style."""

    text: str
    style: Optional[Style] = None

    def render(self, color_system: Optional[ColorSystem] = ColorSystem.TRUECOLOR) -> str:
        if self.style is None or color_system is None:
            return self.text
        return self.style.render(self.text, color_system=color_system)


class _Parser:
    def __init__(self, source: str):
        self.source = source
        self.pos = 0

    def parse(self) -> tuple:
        return self._elements(closing=None)

    def _error(self, message: str, position: int | None = None) -> TemplateError:
        return TemplateError(message, self.pos if position is None else position)

    def _escape(self) -> str:
        if self.pos + 1 >= len(self.source):
            raise self._error("dangling escape character")
        ch = self.source[self.pos + 1]
        if ch not in ESCAPABLE:
            raise self._error(f"invalid escape sequence '\\{ch}'")
        self.pos += 2
        return ch

    def _variable(self) -> _Variable:
        start = self.pos
        self.pos += 1
        braced = self.source.startswith("{", self.pos)
        if braced:
            self.pos += 1
        m = _NAME_RE.match(self.source, self.pos)
        if not m:
            raise self._error("expected a variable name after '$'", start)
        self.pos = m.end()
        if braced:
            if not self.source.startswith("}", self.pos):
                raise self._error("unclosed '${'", start)
            self.pos += 1
        return _Variable(m.group(0), start)

    def _elements(self, closing: str | None) -> tuple:
        nodes: List[Node] = []
        buf: List[str] = []
        start = self.pos

        def flush():
            if buf:
                nodes.append(_Text("".join(buf)))
                buf.clear()

        while self.pos < len(self.source):
            ch = self.source[self.pos]
            if ch == "\\":
                buf.append(self._escape())
            elif ch == "$":
                flush()
                nodes.append(self._variable())
            elif ch == "[":
                flush()
                nodes.append(self._text_group())
            elif ch == "(":
                flush()
                self.pos += 1
                nodes.append(_Conditional(self._elements(closing=")")))
            elif ch in ")]":
                if ch != closing:
                    raise self._error(f"unexpected '{ch}'")
                self.pos += 1
                flush()
                return tuple(nodes)
            else:
                buf.append(ch)
                self.pos += 1

        if closing is not None:
            raise self._error(f"missing closing '{closing}'", start - 1)
        flush()
        return tuple(nodes)

    def _text_group(self) -> _TextGroup:
        self.pos += 1
        children = self._elements(closing="]")
        if not self.source.startswith("(", self.pos):
            raise self._error("text group must be followed by '(style)'")
        self.pos += 1
        return _TextGroup(children, self._style())

    def _style(self) -> tuple:
        nodes: List[Node] = []
        buf: List[str] = []
        start = self.pos
        while self.pos < len(self.source):
            ch = self.source[self.pos]
            if ch == "\\":
                buf.append(self._escape())
            elif ch == "$":
                if buf:
                    nodes.append(_Text("".join(buf)))
                    buf = []
                nodes.append(self._variable())
            elif ch == ")":
                self.pos += 1
                if buf:
                    nodes.append(_Text("".join(buf)))
                return tuple(nodes)
            elif ch in "[]()":
                raise self._error(f"unexpected '{ch}' in style")
            else:
                buf.append(ch)
                self.pos += 1
        raise self._error("missing closing ')' for style", start - 1)


def parse_format(source: str) -> tuple:
    """Parse a format string into its syntax tree; raises TemplateError."""
    return _Parser(source).parse()


def _parse_color(token: str) -> Color:
    if token.isdigit():
        token = f"color({token})"
    return Color.parse(token.replace("-", "_"))


def parse_style(style_string: str) -> Optional[Style]:
    """
    Convert a style string such as "bold fg:red bg:#1c1c1c" into a rich Style.

    A bare "none" clears everything before it; "fg:none" and "bg:none" clear
    only that colour. Returns None when the string contains a token that is
    not understood.
    """
    attributes: dict[str, bool] = {}
    colors: dict[str, Optional[Color]] = {"color": None, "bgcolor": None}
    for token in style_string.lower().split():
        if token == "none":
            attributes.clear()
            colors = {"color": None, "bgcolor": None}
            continue
        if token in _STYLE_ATTRIBUTES:
            attributes[_STYLE_ATTRIBUTES[token]] = True
            continue
        field, name = "color", token
        if token.startswith("fg:"):
            name = token[3:]
        elif token.startswith("bg:"):
            field, name = "bgcolor", token[3:]
        if name == "none":
            colors[field] = None
            continue
        try:
            colors[field] = _parse_color(name)
        except ColorParseError:
            return None
    return Style(**attributes, **colors)


def _collect_variables(nodes: Iterable[Node], into: set[str]) -> set[str]:
    for node in nodes:
        if isinstance(node, _Variable):
            into.add(node.name)
        elif isinstance(node, _TextGroup):
            _collect_variables(node.children, into)
            _collect_variables(node.style, into)
        elif isinstance(node, _Conditional):
            _collect_variables(node.children, into)
    return into


def merge_segments(segments: Iterable[Segment]) -> List[Segment]:
    """Join neighbouring segments that share a style."""
    merged: List[Segment] = []
    for seg in segments:
        if not seg.text:
            continue
        if merged and merged[-1].style == seg.style:
            merged[-1] = Segment(merged[-1].text + seg.text, seg.style)
        else:
            merged.append(seg)
    return merged


@dataclass
class StringFormatter:
    format: str
    _nodes: tuple = field(init=False, repr=False)
    _meta: Dict[str, Resolver] = field(default_factory=dict, init=False, repr=False)
    _style: Dict[str, Resolver] = field(default_factory=dict, init=False, repr=False)
    _plain: Dict[str, Resolver] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self):
        self._nodes = parse_format(self.format)

    def map_meta(self, resolvers: Mapping[str, Resolver]) -> "StringFormatter":
        self._meta.update(resolvers)
        return self

    def map_style(self, resolvers: Mapping[str, Resolver]) -> "StringFormatter":
        self._style.update(resolvers)
        return self

    def map(self, resolvers: Mapping[str, Resolver]) -> "StringFormatter":
        self._plain.update(resolvers)
        return self

    def variables(self) -> set[str]:
        return _collect_variables(self._nodes, set())

    def parse(self) -> List[Segment]:
        """Evaluate the format string into styled segments."""
        return _Evaluation(self).run(self._nodes)

    def render(self, color_system: Optional[ColorSystem] = ColorSystem.TRUECOLOR) -> str:
        return "".join(seg.render(color_system) for seg in merge_segments(self.parse()))


class _Evaluation:
    """One pass over a formatter; resolvers are called at most once each."""

    def __init__(self, formatter: StringFormatter):
        self.f = formatter
        self._values: Dict[str, Optional[str]] = {}
        self._meta_nodes: Dict[str, tuple] = {}
        self._in_meta = False

    def run(self, nodes: tuple) -> List[Segment]:
        self._check_known(nodes)
        return self._evaluate(nodes, None)

    def _check_known(self, nodes: Iterable[Node], style_context: bool = False):
        for node in nodes:
            if isinstance(node, _Variable):
                known = (self.f._style if style_context else self.f._meta).keys() | self.f._plain.keys()
                if node.name not in known:
                    raise TemplateError(f"unknown variable `${node.name}`", node.position)
                if self._in_meta and node.name in self.f._meta and not style_context:
                    raise TemplateError(f"meta variable `${node.name}` used inside a meta value")
            elif isinstance(node, _TextGroup):
                self._check_known(node.children)
                self._check_known(node.style, style_context=True)
            elif isinstance(node, _Conditional):
                self._check_known(node.children)

    def _value(self, name: str, table: Mapping[str, Resolver]) -> Optional[str]:
        if name not in self._values:
            self._values[name] = table[name]()
        return self._values[name]

    def _meta(self, name: str) -> Optional[tuple]:
        value = self._value(name, self.f._meta)
        if value is None:
            return None
        if name not in self._meta_nodes:
            nodes = parse_format(value)
            self._in_meta = True
            try:
                self._check_known(nodes)
            finally:
                self._in_meta = False
            self._meta_nodes[name] = nodes
        return self._meta_nodes[name]

    def _has_content(self, nodes: Iterable[Node]) -> bool:
        for node in nodes:
            if isinstance(node, _Variable):
                if node.name in self.f._meta:
                    meta = self._meta(node.name)
                    if meta is not None and self._has_content(meta):
                        return True
                elif self._value(node.name, self.f._plain):
                    return True
            elif isinstance(node, (_TextGroup, _Conditional)):
                if self._has_content(node.children):
                    return True
        return False

    def _style_for(self, nodes: tuple, outer: Optional[Style]) -> Optional[Style]:
        parts: List[str] = []
        for node in nodes:
            if isinstance(node, _Text):
                parts.append(node.value)
            else:
                table = self.f._style if node.name in self.f._style else self.f._plain
                parts.append(self._value(node.name, table) or "")
        style_string = "".join(parts)
        inner = parse_style(style_string)
        if inner is None:
            logger.warning("Could not parse style %r; rendering unstyled", style_string)
            return outer
        return outer + inner if outer is not None else inner

    def _evaluate(self, nodes: Iterable[Node], style: Optional[Style]) -> List[Segment]:
        segments: List[Segment] = []
        for node in nodes:
            if isinstance(node, _Text):
                segments.append(Segment(node.value, style))
            elif isinstance(node, _Variable):
                if node.name in self.f._meta:
                    meta = self._meta(node.name)
                    if meta is not None:
                        segments.extend(self._evaluate(meta, style))
                else:
                    value = self._value(node.name, self.f._plain)
                    if value is not None:
                        segments.append(Segment(value, style))
            elif isinstance(node, _TextGroup):
                segments.extend(self._evaluate(node.children, self._style_for(node.style, style)))
            elif isinstance(node, _Conditional):
                if self._has_content(node.children):
                    segments.extend(self._evaluate(node.children, style))
        return segments
