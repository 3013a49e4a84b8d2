"""Tolerant scanner for the tag soup found in DAT catalog files.

DAT files look like XML but are not reliably well formed, so instead of a
document parser this module offers a small cursor with a handful of
combinators: skip ahead to the next ``<tag``, read its ``key="value"``
attributes, and take the text up to the matching close tag. Offsets are
always absolute positions in the original text so errors can point at the
offending fragment.
"""

from __future__ import annotations

import html
import re
from dataclasses import dataclass
from typing import Dict, Optional, Pattern

from romshelf.errors import MalformedMarkup


ATTRIBUTE_RE = re.compile(r'\s*([A-Za-z0-9_:.-]+)\s*=\s*"([^"]*)"')
TAG_END_RE = re.compile(r"\s*(/?)>")
WHITESPACE_RE = re.compile(r"\s*")

_TAG_PATTERNS: Dict[str, Pattern[str]] = {}


def _open_tag_re(tag: str) -> Pattern[str]:
    pattern = _TAG_PATTERNS.get(tag)
    if pattern is None:
        pattern = re.compile(r"<%s(?=[\s/>])" % re.escape(tag))
        _TAG_PATTERNS[tag] = pattern
    return pattern


@dataclass(frozen=True)
class Element:
    tag: str
    attributes: Dict[str, str]
    offset: int
    body_start: int
    body_end: int
    closed: bool

    @property
    def is_empty(self) -> bool:
        return self.body_start == self.body_end


@dataclass(frozen=True)
class HeaderInfo:
    manufacturer: str
    console_name: str
    offset: int


class Scanner:
    """Cursor over ``text[pos:end]``."""

    def __init__(self, text: str, pos: int = 0, end: Optional[int] = None):
        self.text = text
        self.pos = pos
        self.end = len(text) if end is None else end

    def within(self, element: Element) -> "Scanner":
        return Scanner(self.text, element.body_start, element.body_end)

    def body(self, element: Element) -> str:
        return self.text[element.body_start:element.body_end]

    def find(self, needle: str) -> Optional[int]:
        """Offset of the next ``needle`` before the end bound, or ``None``."""
        index = self.text.find(needle, self.pos, self.end)
        return None if index < 0 else index

    def next_tag(self, tag: str) -> Optional[int]:
        match = _open_tag_re(tag).search(self.text, self.pos, self.end)
        if match is None:
            return None
        self.pos = match.end()
        return match.start()

    def read_attributes(self) -> tuple[Dict[str, str], bool]:
        """Read attributes up to ``>`` or ``/>``; returns them and whether the tag self-closed."""
        attributes: Dict[str, str] = {}
        while True:
            match = TAG_END_RE.match(self.text, self.pos, self.end)
            if match:
                self.pos = match.end()
                return attributes, bool(match.group(1))
            match = ATTRIBUTE_RE.match(self.text, self.pos, self.end)
            if match is None:
                offset = WHITESPACE_RE.match(self.text, self.pos, self.end).end()
                if offset >= self.end:
                    raise MalformedMarkup(offset, "unterminated tag")
                raise MalformedMarkup(offset, "expected attribute or end of tag")
            attributes[match.group(1)] = match.group(2)
            self.pos = match.end()

    def read_element(self, tag: str) -> Optional[Element]:
        """Read the next ``<tag ...>`` element, skipping any text before it."""
        offset = self.next_tag(tag)
        if offset is None:
            return None
        attributes, self_closing = self.read_attributes()
        body_start = self.pos
        if self_closing:
            return Element(tag, attributes, offset, body_start, body_start, True)

        close_tag = f"</{tag}>"
        close_at = self.find(close_tag)
        next_open = _open_tag_re(tag).search(self.text, body_start, self.end)
        if close_at is not None and (next_open is None or close_at < next_open.start()):
            self.pos = close_at + len(close_tag)
            return Element(tag, attributes, offset, body_start, close_at, True)

        # Missing close tag: the body runs up to the next sibling or the end.
        body_end = next_open.start() if next_open is not None else self.end
        self.pos = body_end
        return Element(tag, attributes, offset, body_start, body_end, False)


def parse_header(text: str) -> HeaderInfo:
    """Extract the declared console from the ``<header><name>`` block.

    The name has the form ``Manufacturer - Model (extra)``: the part after the
    first hyphen, cut at the first parenthesis, is the console name.
    """
    scanner = Scanner(text)
    header = scanner.read_element("header")
    if header is None:
        raise MalformedMarkup(0, "missing <header> block")
    if not header.closed:
        raise MalformedMarkup(header.offset, "unterminated <header> block")

    name = scanner.within(header).read_element("name")
    if name is None:
        raise MalformedMarkup(header.offset, "header without <name>")
    if not name.closed:
        raise MalformedMarkup(name.offset, "unterminated <name> in header")

    value = scanner.body(name)
    manufacturer, separator, model = value.partition("-")
    if not separator or not manufacturer.strip():
        raise MalformedMarkup(name.offset, "header name is not 'Manufacturer - Model'")
    model = model.split("(", 1)[0]
    return HeaderInfo(
        manufacturer=html.unescape(manufacturer.strip()),
        console_name=html.unescape(model.strip()),
        offset=name.offset,
    )
