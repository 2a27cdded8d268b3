"""A lenient, position-reporting JSON parser.

The grammar is slightly looser than strict JSON: trailing commas in arrays
and objects are accepted, unknown escape sequences yield the escaped
character, a NUL byte ends the document, and ``//`` and ``/* */`` comments
can be enabled. Errors carry the line and column where parsing stopped.
"""

from __future__ import annotations

import math
from typing import Optional, Union

from .jsonvalue import JsonType, JsonValue

__all__ = ["JsonParseError", "parse"]

_NEXT = 1 << 0
_REPROC = 1 << 1
_NEED_COMMA = 1 << 2
_SEEK_VALUE = 1 << 3
_ESCAPED = 1 << 4
_STRING = 1 << 5
_NEED_COLON = 1 << 6
_DONE = 1 << 7
_NUM_NEGATIVE = 1 << 8
_NUM_ZERO = 1 << 9
_NUM_E = 1 << 10
_NUM_E_GOT_SIGN = 1 << 11
_NUM_E_NEGATIVE = 1 << 12
_LINE_COMMENT = 1 << 13
_BLOCK_COMMENT = 1 << 14

_NUMBER_FLAGS = (
    _NUM_NEGATIVE | _NUM_E | _NUM_E_GOT_SIGN | _NUM_E_NEGATIVE | _NUM_ZERO
)

_UINT_MAX = 0xFFFFFFFF - 8
_VALUE_SIZE = 40
_ARRAY_SLOT_SIZE = 8
_OBJECT_SLOT_SIZE = 24

_BOM = b"\xef\xbb\xbf"

_ESCAPES = {
    ord("b"): 0x08,
    ord("f"): 0x0C,
    ord("n"): 0x0A,
    ord("r"): 0x0D,
    ord("t"): 0x09,
}

_LITERALS = {
    ord("t"): (b"rue", JsonType.BOOLEAN, True),
    ord("f"): (b"alse", JsonType.BOOLEAN, False),
    ord("n"): (b"ull", JsonType.NULL, None),
}

_LF, _CR, _SP, _TAB = 0x0A, 0x0D, 0x20, 0x09
_QUOTE, _BACKSLASH, _SLASH, _STAR = 0x22, 0x5C, 0x2F, 0x2A
_COMMA, _COLON, _DOT, _PLUS, _MINUS = 0x2C, 0x3A, 0x2E, 0x2B, 0x2D
_LBRACE, _RBRACE, _LBRACKET, _RBRACKET = 0x7B, 0x7D, 0x5B, 0x5D
_ZERO = 0x30


class JsonParseError(ValueError):
    """Raised when a document cannot be parsed."""

    def __init__(
        self,
        message: str,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column


def _is_digit(b: int) -> bool:
    return 0x30 <= b <= 0x39


def _hex_value(b: int) -> Optional[int]:
    if _is_digit(b):
        return b - 0x30
    if 0x61 <= b <= 0x66:
        return b - 0x61 + 10
    if 0x41 <= b <= 0x46:
        return b - 0x41 + 10
    return None


def _wrap64(value: int) -> int:
    value &= (1 << 64) - 1
    return value - (1 << 64) if value >= 1 << 63 else value


def _pow10(exponent: int) -> float:
    try:
        return 10.0 ** exponent
    except OverflowError:
        return math.inf


def _char(b: int) -> str:
    return chr(b)


def _decode(raw: bytes) -> str:
    try:
        return raw.decode("utf-8", "surrogatepass")
    except UnicodeDecodeError:
        return raw.decode("utf-8", "replace")


def _encode_unit(unit: int) -> bytes:
    high, low = unit >> 8, unit & 0xFF
    if high == 0 and low <= 0x7F:
        return bytes([low])
    if unit <= 0x7FF:
        return bytes([0xC0 | ((low & 0xC0) >> 6) | ((high & 0x7) << 2), 0x80 | (low & 0x3F)])
    return bytes(
        [
            0xE0 | ((high & 0xF0) >> 4),
            0x80 | ((high & 0xF) << 2) | ((low & 0xC0) >> 6),
            0x80 | (low & 0x3F),
        ]
    )


class _Parser:
    def __init__(self, data: bytes, comments: bool, max_memory: int) -> None:
        self.data = data
        self.end = len(data)
        self.comments = comments
        self.max_memory = max_memory
        self.used_memory = 0
        self.content_memory = 0
        self.line = 1
        self.line_begin = 0
        self.i = -1
        self.flags = _SEEK_VALUE
        self.top: Optional[JsonValue] = None
        self.root: Optional[JsonValue] = None
        self.buf = bytearray()
        self.num_digits = 0
        self.num_e = 0
        self.num_fraction = 0

    # -- helpers -----------------------------------------------------------

    def _at(self, index: int) -> int:
        return self.data[index] if index < self.end else 0

    def _pos(self) -> str:
        return f"{self.line}:{self.i - self.line_begin}"

    def _fail(self, message: str) -> None:
        # A NUL character in the message ends it, as the offending byte is
        # reported verbatim.
        raise JsonParseError(
            message.split("\0", 1)[0], self.line, self.i - self.line_begin
        )

    def _charge(self, size: int) -> None:
        if not self.max_memory:
            return
        self.used_memory += size
        if self.used_memory > self.max_memory:
            raise JsonParseError("Memory allocation failure")

    def _whitespace(self, b: int) -> bool:
        if b == _LF:
            self.line += 1
            self.line_begin = self.i
            return True
        return b in (_SP, _TAB, _CR)

    def _new_value(self, kind: JsonType) -> None:
        self._charge(_VALUE_SIZE)
        value = JsonValue(kind, parent=self.top)
        if self.root is None:
            self.root = value
        self.top = value

    # -- states ------------------------------------------------------------

    def _unicode_escape(self) -> bytes:
        if self.end - self.i < 4:
            self._fail(f"Invalid character value `u` (at {self._pos()})")
        unit = 0
        for _ in range(4):
            self.i += 1
            digit = _hex_value(self._at(self.i))
            if digit is None:
                self._fail(f"Invalid character value `u` (at {self._pos()})")
            unit = unit * 16 + digit
        return _encode_unit(unit)

    def _string_char(self, b: int) -> bool:
        """Handle a byte inside a string; False once a string value ends."""
        if not b:
            self._fail(f"Unexpected EOF in string (at {self._pos()})")
        if len(self.buf) > _UINT_MAX:
            self._fail(f"{self._pos()}: Too long (caught overflow)")
        if self.flags & _ESCAPED:
            self.flags &= ~_ESCAPED
            if b in _ESCAPES:
                self.buf.append(_ESCAPES[b])
            elif b == ord("u"):
                self.buf += self._unicode_escape()
            else:
                self.buf.append(b)
            return True
        if b == _BACKSLASH:
            self.flags |= _ESCAPED
            return True
        if b != _QUOTE:
            self.buf.append(b)
            return True

        self.flags &= ~_STRING
        raw = bytes(self.buf)
        self.buf = bytearray()
        self.content_memory += len(raw) + 1
        top = self.top
        if top.type is JsonType.OBJECT:
            top.value.append((_decode(raw), None))
            self.flags |= _SEEK_VALUE | _NEED_COLON
            return True
        top.value = _decode(raw)
        self.flags |= _NEXT
        return False

    def _comment(self, b: int) -> bool:
        if self.flags & (_LINE_COMMENT | _BLOCK_COMMENT):
            if self.flags & _LINE_COMMENT:
                if b in (_CR, _LF, 0):
                    self.flags &= ~_LINE_COMMENT
                    self.i -= 1
                return True
            if not b:
                self._fail(f"{self._pos()}: Unexpected EOF in block comment")
            if b == _STAR and self.i < self.end - 1 and self.data[self.i + 1] == _SLASH:
                self.flags &= ~_BLOCK_COMMENT
                self.i += 1
            return True
        if b != _SLASH:
            return False
        if not self.flags & (_SEEK_VALUE | _DONE) and self.top.type is not JsonType.OBJECT:
            self._fail(f"{self._pos()}: Comment not allowed here")
        self.i += 1
        if self.i == self.end:
            self._fail(f"{self._pos()}: EOF unexpected")
        b = self.data[self.i]
        if b == _SLASH:
            self.flags |= _LINE_COMMENT
            return True
        if b == _STAR:
            self.flags |= _BLOCK_COMMENT
            return True
        self._fail(
            f"{self._pos()}: Unexpected `{_char(b)}` in comment opening sequence"
        )
        return True

    def _seek(self, b: int) -> bool:
        if self._whitespace(b):
            return True
        if b == _RBRACKET:
            if self.top is not None and self.top.type is JsonType.ARRAY:
                self.flags = (self.flags & ~(_NEED_COMMA | _SEEK_VALUE)) | _NEXT
                return False
            self._fail(f"{self._pos()}: Unexpected ]")
        if self.flags & _NEED_COMMA:
            if b == _COMMA:
                self.flags &= ~_NEED_COMMA
                return True
            self._fail(f"{self._pos()}: Expected , before {_char(b)}")
        if self.flags & _NEED_COLON:
            if b == _COLON:
                self.flags &= ~_NEED_COLON
                return True
            self._fail(f"{self._pos()}: Expected : before {_char(b)}")

        self.flags &= ~_SEEK_VALUE
        if b == _LBRACE:
            self._new_value(JsonType.OBJECT)
            return True
        if b == _LBRACKET:
            self._new_value(JsonType.ARRAY)
            self.flags |= _SEEK_VALUE
            return True
        if b == _QUOTE:
            self._new_value(JsonType.STRING)
            self.flags |= _STRING
            self.buf = bytearray()
            return True
        if b in _LITERALS:
            rest, kind, payload = _LITERALS[b]
            if self.end - self.i < len(rest):
                self._fail(f"{self._pos()}: Unknown value")
            for expected in rest:
                self.i += 1
                if self._at(self.i) != expected:
                    self._fail(f"{self._pos()}: Unknown value")
            self._new_value(kind)
            if kind is JsonType.BOOLEAN:
                self.top.value = payload
            self.flags |= _NEXT
            return False
        if _is_digit(b) or b == _MINUS:
            self._new_value(JsonType.INTEGER)
            self.flags &= ~_NUMBER_FLAGS
            self.num_digits = 0
            self.num_fraction = 0
            self.num_e = 0
            if b != _MINUS:
                self.flags |= _REPROC
                return False
            self.flags |= _NUM_NEGATIVE
            return True
        self._fail(f"{self._pos()}: Unexpected {_char(b)} when seeking value")
        return True

    def _in_object(self, b: int) -> bool:
        if self._whitespace(b):
            return True
        if b == _QUOTE:
            if self.flags & _NEED_COMMA:
                self._fail(f'{self._pos()}: Expected , before "')
            self.flags |= _STRING
            self.buf = bytearray()
            return True
        if b == _RBRACE:
            self.flags = (self.flags & ~_NEED_COMMA) | _NEXT
            return False
        if b == _COMMA and self.flags & _NEED_COMMA:
            self.flags &= ~_NEED_COMMA
            return True
        self._fail(f"{self._pos()}: Unexpected `{_char(b)}` in object")
        return True

    def _number(self, b: int) -> bool:
        top = self.top
        flags = self.flags
        if _is_digit(b):
            self.num_digits += 1
            digit = b - _ZERO
            if top.type is JsonType.INTEGER or flags & _NUM_E:
                if flags & _NUM_E:
                    self.flags |= _NUM_E_GOT_SIGN
                    self.num_e = self.num_e * 10 + digit
                    return True
                if flags & _NUM_ZERO:
                    self._fail(f"{self._pos()}: Unexpected `0` before `{_char(b)}`")
                if self.num_digits == 1 and b == _ZERO:
                    self.flags |= _NUM_ZERO
                top.value = _wrap64(top.value * 10 + digit)
                return True
            self.num_fraction = _wrap64(self.num_fraction * 10 + digit)
            return True

        if b in (_PLUS, _MINUS):
            if flags & _NUM_E and not flags & _NUM_E_GOT_SIGN:
                self.flags |= _NUM_E_GOT_SIGN
                if b == _MINUS:
                    self.flags |= _NUM_E_NEGATIVE
                return True
        elif b == _DOT and top.type is JsonType.INTEGER:
            if not self.num_digits:
                self._fail(f"{self._pos()}: Expected digit before `.`")
            top.type = JsonType.DOUBLE
            top.value = float(top.value)
            self.num_digits = 0
            return True

        if not flags & _NUM_E:
            if top.type is JsonType.DOUBLE:
                if not self.num_digits:
                    self._fail(f"{self._pos()}: Expected digit after `.`")
                top.value += self.num_fraction / _pow10(self.num_digits)
            if b in (ord("e"), ord("E")):
                self.flags |= _NUM_E
                if top.type is JsonType.INTEGER:
                    top.type = JsonType.DOUBLE
                    top.value = float(top.value)
                self.num_digits = 0
                self.flags &= ~_NUM_ZERO
                return True
        else:
            if not self.num_digits:
                self._fail(f"{self._pos()}: Expected digit after `e`")
            exponent = -self.num_e if flags & _NUM_E_NEGATIVE else self.num_e
            top.value *= _pow10(exponent)

        if self.flags & _NUM_NEGATIVE:
            if top.type is JsonType.INTEGER:
                top.value = _wrap64(-top.value)
            else:
                top.value = -top.value
        self.flags |= _NEXT | _REPROC
        return False

    def _finish_value(self) -> None:
        self.flags = (self.flags & ~_NEXT) | _NEED_COMMA
        top = self.top
        parent = top.parent
        if parent is None:
            self.flags |= _DONE
            return
        if parent.type is JsonType.ARRAY:
            self.flags |= _SEEK_VALUE
            parent.value.append(top)
            self.content_memory += _ARRAY_SLOT_SIZE
        else:
            name, _ = parent.value[-1]
            parent.value[-1] = (name, top)
            self.content_memory += _OBJECT_SLOT_SIZE
        if len(parent.value) > _UINT_MAX:
            self._fail(f"{self._pos()}: Too long (caught overflow)")
        self.top = parent

    # -- driver ------------------------------------------------------------

    def run(self) -> JsonValue:
        while True:
            self.i += 1
            b = self._at(self.i)

            if self.flags & _STRING:
                if self._string_char(b):
                    continue
            else:
                if self.comments and self._comment(b):
                    continue
                if self.flags & _DONE:
                    if not b:
                        break
                    if self._whitespace(b):
                        continue
                    self._fail(f"{self._pos()}: Trailing garbage: `{_char(b)}`")
                if self.flags & _SEEK_VALUE:
                    if self._seek(b):
                        continue
                elif self.top.type is JsonType.OBJECT:
                    if self._in_object(b):
                        continue
                elif self.top.type in (JsonType.INTEGER, JsonType.DOUBLE):
                    if self._number(b):
                        continue

            if self.flags & _REPROC:
                self.flags &= ~_REPROC
                self.i -= 1
            if self.flags & _NEXT:
                self._finish_value()

        self._charge(self.content_memory)
        return self.root


def parse(
    data: Union[str, bytes, bytearray],
    comments: bool = False,
    max_memory: int = 0,
) -> JsonValue:
    """Parse a JSON document into a tree of ``JsonValue`` nodes.

    ``comments`` enables ``//`` and ``/* */`` comments. A non-zero
    ``max_memory`` caps the estimated memory the parsed tree may take.
    Raises ``JsonParseError`` on malformed input.
    """
    raw = data.encode("utf-8") if isinstance(data, str) else bytes(data)
    if raw.startswith(_BOM):
        raw = raw[len(_BOM):]
    return _Parser(raw, comments, max_memory).run()