"""Quote-, escape- and bracket-aware scanning of Package.swift sources.

The scanner does not parse Swift. It classifies every character as code,
string literal or comment, and on top of that answers the few structural
questions manifest handling needs: where does the array after a label start
and end, which top-level elements does an array or argument list contain, and
what is the value of a labeled argument. Every answer is a ``Span`` into the
original text so callers can splice edits without disturbing other bytes.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

CODE = 0
STRING = 1
COMMENT = 2

_OPENERS = {"(": ")", "[": "]", "{": "}"}
_CLOSERS = {")", "]", "}"}
_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "0": "\0"}


@dataclass(frozen=True)
class Span:
    """Half-open character range ``[start, end)`` within a source text."""

    start: int
    end: int

    def of(self, text: str) -> str:
        return text[self.start : self.end]

    def contains(self, index: int) -> bool:
        return self.start <= index < self.end

    @property
    def is_empty(self) -> bool:
        return self.end <= self.start


@dataclass(frozen=True)
class Argument:
    """One element of an argument list, with its optional label."""

    label: Optional[str]
    value: Span
    span: Span


@dataclass(frozen=True)
class Call:
    """A constructor-style element such as ``.target(name: "Core")``."""

    keyword: str
    span: Span
    args: Span


def classify(text: str) -> bytearray:
    """Return a per-character map of CODE, STRING and COMMENT markers."""
    kinds = bytearray(len(text))
    length = len(text)
    index = 0
    while index < length:
        char = text[index]
        if char == '"':
            delimiter = '"""' if text.startswith('"""', index) else '"'
            end = _string_end(text, index, delimiter)
            kinds[index:end] = bytes([STRING]) * (end - index)
            index = end
        elif text.startswith("//", index):
            end = text.find("\n", index)
            end = length if end == -1 else end
            kinds[index:end] = bytes([COMMENT]) * (end - index)
            index = end
        elif text.startswith("/*", index):
            end = _block_comment_end(text, index)
            kinds[index:end] = bytes([COMMENT]) * (end - index)
            index = end
        else:
            index += 1
    return kinds


def _string_end(text: str, start: int, delimiter: str) -> int:
    index = start + len(delimiter)
    length = len(text)
    while index < length:
        char = text[index]
        if char == "\\":
            index += 2
            continue
        if text.startswith(delimiter, index):
            return index + len(delimiter)
        # An unterminated single-line literal stops at the end of its line.
        if char == "\n" and len(delimiter) == 1:
            return index
        index += 1
    return length


def _block_comment_end(text: str, start: int) -> int:
    depth = 0
    index = start
    length = len(text)
    while index < length:
        if text.startswith("/*", index):
            depth += 1
            index += 2
            continue
        if text.startswith("*/", index):
            depth -= 1
            index += 2
            if depth == 0:
                return index
            continue
        index += 1
    return length


def decode_string(literal: str) -> str:
    """Decode a Swift string literal (with quotes) into its value."""
    delimiter = '"""' if literal.startswith('"""') else '"'
    body = literal[len(delimiter) :]
    if len(literal) >= 2 * len(delimiter) and body.endswith(delimiter):
        body = body[: -len(delimiter)]
    chars: List[str] = []
    index = 0
    while index < len(body):
        char = body[index]
        if char == "\\" and index + 1 < len(body):
            following = body[index + 1]
            chars.append(_ESCAPES.get(following, following))
            index += 2
            continue
        chars.append(char)
        index += 1
    return "".join(chars)


class SourceScanner:
    """Structural queries over one manifest text."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.kinds = classify(text)

    @property
    def whole(self) -> Span:
        return Span(0, len(self.text))

    def is_code(self, index: int) -> bool:
        return 0 <= index < len(self.text) and self.kinds[index] == CODE

    def skip_trivia(self, index: int, end: int | None = None) -> int:
        """Advance past whitespace and comments."""
        limit = len(self.text) if end is None else end
        while index < limit and (
            self.kinds[index] == COMMENT or self.text[index].isspace()
        ):
            index += 1
        return index

    def find_closing(self, open_index: int) -> Optional[int]:
        """Return the index of the bracket closing the one at ``open_index``."""
        if not self.is_code(open_index) or self.text[open_index] not in _OPENERS:
            return None
        expected: List[str] = []
        for index in range(open_index, len(self.text)):
            if self.kinds[index] != CODE:
                continue
            char = self.text[index]
            if char in _OPENERS:
                expected.append(_OPENERS[char])
            elif char in _CLOSERS:
                if not expected or expected[-1] != char:
                    return None
                expected.pop()
                if not expected:
                    return index
        return None

    def find_labels(
        self, label: str, start: int = 0, end: int | None = None
    ) -> List[Tuple[int, int]]:
        """Return ``(value_start, depth)`` for each ``label:`` in the range."""
        limit = len(self.text) if end is None else end
        text = self.text
        found: List[Tuple[int, int]] = []
        depth = 0
        index = start
        while index < limit:
            if self.kinds[index] != CODE:
                index += 1
                continue
            char = text[index]
            if char in _OPENERS:
                depth += 1
            elif char in _CLOSERS:
                depth = max(depth - 1, 0)
            elif text.startswith(label, index) and not _is_identifier_char(text, index - 1):
                after = index + len(label)
                if not _is_identifier_char(text, after):
                    colon = self.skip_trivia(after, limit)
                    if colon < limit and text[colon] == ":" and self.is_code(colon):
                        found.append((colon + 1, depth))
                        index = colon + 1
                        continue
            index += 1
        return found

    def find_array_block(
        self,
        label: str,
        start: int = 0,
        end: int | None = None,
        *,
        exclude: Sequence[Span] = (),
    ) -> Optional[Span]:
        """Return the inner span of the shallowest ``label: [ ... ]`` array."""
        limit = len(self.text) if end is None else end
        candidates = [
            (depth, position)
            for position, depth in self.find_labels(label, start, limit)
            if not any(span.contains(position) for span in exclude)
        ]
        for _, position in sorted(candidates):
            opening = self.skip_trivia(position, limit)
            if opening >= limit or self.text[opening] != "[" or not self.is_code(opening):
                continue
            closing = self.find_closing(opening)
            if closing is None or closing >= limit:
                continue
            return Span(opening + 1, closing)
        return None

    def split(self, span: Span) -> List[Span]:
        """Split an array or argument list into its top-level element spans."""
        text = self.text
        items: List[Span] = []
        depth = 0
        first: Optional[int] = None
        last: Optional[int] = None
        for index in range(span.start, min(span.end, len(text))):
            kind = self.kinds[index]
            if kind == COMMENT:
                continue
            char = text[index]
            if kind == STRING:
                if first is None:
                    first = index
                last = index
                continue
            if char in _OPENERS:
                depth += 1
            elif char in _CLOSERS:
                depth = max(depth - 1, 0)
            elif char == "," and depth == 0:
                if first is not None and last is not None:
                    items.append(Span(first, last + 1))
                first = last = None
                continue
            if not char.isspace():
                if first is None:
                    first = index
                last = index
        if first is not None and last is not None:
            items.append(Span(first, last + 1))
        return items

    def arguments(self, span: Span) -> List[Argument]:
        """Split an argument list and attach labels where present."""
        result: List[Argument] = []
        for item in self.split(span):
            label: Optional[str] = None
            value = item
            match = _IDENTIFIER.match(self.text, item.start)
            if match and match.end() <= item.end:
                colon = self.skip_trivia(match.end(), item.end)
                if colon < item.end and self.text[colon] == ":" and self.is_code(colon):
                    label = match.group(0)
                    value = Span(self.skip_trivia(colon + 1, item.end), item.end)
            result.append(Argument(label=label, value=value, span=item))
        return result

    def labeled_value(self, span: Span, label: str) -> Optional[Span]:
        for argument in self.arguments(span):
            if argument.label == label:
                return argument.value
        return None

    def labeled_argument(self, span: Span, label: str) -> Optional[Argument]:
        for argument in self.arguments(span):
            if argument.label == label:
                return argument
        return None

    def labeled_string(self, span: Span, label: str) -> Optional[str]:
        value = self.labeled_value(span, label)
        return self.string_value(value) if value is not None else None

    def labeled_array(self, span: Span, label: str) -> Optional[Span]:
        value = self.labeled_value(span, label)
        if value is None or value.is_empty or self.text[value.start] != "[":
            return None
        closing = self.find_closing(value.start)
        if closing is None:
            return None
        return Span(value.start + 1, closing)

    def string_value(self, span: Span) -> Optional[str]:
        """Return the decoded literal when the span is exactly one string."""
        if span.is_empty or self.text[span.start] != '"':
            return None
        if any(self.kinds[index] != STRING for index in range(span.start, span.end)):
            return None
        return decode_string(span.of(self.text))

    def literal_at(self, index: int) -> Optional[Span]:
        """Return the span of the string literal starting at ``index``."""
        if index >= len(self.text) or self.text[index] != '"' or self.kinds[index] != STRING:
            return None
        end = index
        while end < len(self.text) and self.kinds[end] == STRING:
            end += 1
        return Span(index, end)

    def string_items(self, span: Span) -> List[str]:
        values: List[str] = []
        for item in self.split(span):
            value = self.string_value(item)
            if value is not None:
                values.append(value)
        return values

    def parse_call(self, span: Span) -> Optional[Call]:
        """Recognise ``.keyword(args)`` at the start of the span."""
        text = self.text
        if span.is_empty or text[span.start] != "." or not self.is_code(span.start):
            return None
        match = _IDENTIFIER.match(text, span.start + 1)
        if not match:
            return None
        opening = self.skip_trivia(match.end(), span.end)
        if opening >= span.end or text[opening] != "(":
            return None
        closing = self.find_closing(opening)
        if closing is None or closing >= span.end:
            return None
        return Call(keyword=match.group(0), span=span, args=Span(opening + 1, closing))

    def line_indent(self, index: int) -> str:
        """Return the leading whitespace of the line containing ``index``."""
        line_start = self.text.rfind("\n", 0, index) + 1
        line_end = line_start
        while line_end < len(self.text) and self.text[line_end] in " \t":
            line_end += 1
        return self.text[line_start:line_end]

    def starts_line(self, index: int) -> bool:
        """Return True when only whitespace precedes ``index`` on its line."""
        line_start = self.text.rfind("\n", 0, index) + 1
        return not self.text[line_start:index].strip()


def _is_identifier_char(text: str, index: int) -> bool:
    if index < 0 or index >= len(text):
        return False
    char = text[index]
    return char.isalnum() or char == "_"


def find_closing(text: str, open_index: int) -> Optional[int]:
    """Return the index of the bracket matching ``text[open_index]``."""
    return SourceScanner(text).find_closing(open_index)


def find_array_block(text: str, label: str) -> Optional[str]:
    """Return the inner content of the shallowest ``label: [...]`` array."""
    scanner = SourceScanner(text)
    span = scanner.find_array_block(label)
    return span.of(text) if span is not None else None


def split_declarations(content: str) -> List[str]:
    """Split array content into declarations at top-level commas."""
    scanner = SourceScanner(content)
    return [span.of(content) for span in scanner.split(scanner.whole)]


__all__ = [
    "Argument",
    "Call",
    "SourceScanner",
    "Span",
    "classify",
    "decode_string",
    "find_array_block",
    "find_closing",
    "split_declarations",
]
