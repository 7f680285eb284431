"""Positional reader over the inflated content of one object.

The reader holds the full framed content (``"<type> <len>\\0<payload>"``)
and a position index into it.  Every ``read_*`` method consumes bytes;
:meth:`ObjectReader.get_string` only peeks.  Object parsers may call
:meth:`ObjectReader.rewind` once to start again from the top.
"""

from __future__ import annotations

import hashlib
import re

from .exceptions import ParseError, TruncatedObjectError

_WHITESPACE_RE = re.compile(rb"[ \t\n\r\f\v]")


class ObjectReader:
    """Forward-only cursor over an object's inflated bytes.

    Usage::

        reader = ObjectReader(decompress(path))
        type_name, length = reader.read_object_header()
        payload = reader.read_to_end()
    """

    __slots__ = ("_data", "_pos", "_payload_start", "_rewound")

    def __init__(self, data: bytes):
        self._data = bytes(data)
        self._pos = 0
        self._payload_start: int | None = None
        self._rewound = False

    def __repr__(self) -> str:
        return f"ObjectReader(pos={self._pos}, size={len(self._data)})"

    def __len__(self) -> int:
        return len(self._data)

    # -- position ------------------------------------------------------------

    @property
    def position(self) -> int:
        return self._pos

    @property
    def remaining(self) -> int:
        return len(self._data) - self._pos

    @property
    def at_end(self) -> bool:
        return self._pos >= len(self._data)

    @property
    def payload_start(self) -> int | None:
        """Offset just past the header's NUL, once the header has been read."""
        return self._payload_start

    def rewind(self) -> None:
        """Move back to the start of the content.  Allowed once per reader."""
        if self._rewound:
            raise ParseError("Object reader can only be rewound once")
        self._rewound = True
        self._pos = 0

    # -- reads ---------------------------------------------------------------

    def read_object_header(self) -> tuple[str, int]:
        """Parse ``"<type> <length>\\0"`` and return ``(type, length)``."""
        type_raw = self._read_until(b" ", "object header type")
        length_raw = self._read_until(b"\x00", "object header length")
        if not type_raw or not length_raw.isdigit():
            raise ParseError(
                f"Malformed object header: {type_raw + b' ' + length_raw!r}"
            )
        try:
            type_name = type_raw.decode("ascii")
        except UnicodeDecodeError:
            raise ParseError(f"Malformed object type: {type_raw!r}")
        self._payload_start = self._pos
        return type_name, int(length_raw)

    def check_payload_length(self, declared: int) -> None:
        """Raise :class:`ParseError` unless *declared* matches the payload size."""
        if self._payload_start is None:
            raise ParseError("Object header has not been read")
        actual = len(self._data) - self._payload_start
        if declared != actual:
            raise ParseError(
                f"Object header declares {declared} bytes, payload has {actual}"
            )

    def payload(self) -> bytes:
        """Return the bytes after the header without moving the cursor."""
        if self._payload_start is None:
            raise ParseError("Object header has not been read")
        return self._data[self._payload_start:]

    def read_to_null(self) -> bytes:
        """Return bytes up to the next NUL and consume the NUL."""
        return self._read_until(b"\x00", "NUL terminator")

    def read_word(self) -> bytes:
        """Return the next token, ending at the first ASCII whitespace byte.

        Exactly one delimiter byte is consumed.
        """
        self._require(1)
        m = _WHITESPACE_RE.search(self._data, self._pos)
        end = m.start() if m else len(self._data)
        word = self._data[self._pos:end]
        self._pos = min(end + 1, len(self._data))
        return word

    def read_line(self) -> bytes:
        """Return the rest of the current line without its ``\\n``.

        A final line with no terminator is returned whole.
        """
        self._require(1)
        idx = self._data.find(b"\n", self._pos)
        if idx == -1:
            line = self._data[self._pos:]
            self._pos = len(self._data)
            return line
        line = self._data[self._pos:idx]
        self._pos = idx + 1
        return line

    def read_bytes(self, n: int) -> bytes:
        """Return exactly *n* bytes."""
        self._require(n)
        chunk = self._data[self._pos:self._pos + n]
        self._pos += n
        return chunk

    def read_to_end(self) -> bytes:
        """Return everything after the current position."""
        rest = self._data[self._pos:]
        self._pos = len(self._data)
        return rest

    def get_string(self, n: int) -> bytes:
        """Peek at the next *n* bytes without consuming them."""
        self._require(n)
        return self._data[self._pos:self._pos + n]

    def compute_identifier(self) -> str:
        """SHA-1 hex digest of the full framed content."""
        return hashlib.sha1(self._data).hexdigest()

    # -- internals -----------------------------------------------------------

    def _require(self, n: int) -> None:
        if n < 0:
            raise ValueError(f"Negative read length: {n}")
        if self.remaining < n or (n and self.at_end):
            raise TruncatedObjectError(
                f"Unexpected end of object content at offset {self._pos}"
                f" (wanted {n} bytes, {self.remaining} left)"
            )

    def _read_until(self, delim: bytes, what: str) -> bytes:
        idx = self._data.find(delim, self._pos)
        if idx == -1:
            raise TruncatedObjectError(
                f"Missing {what} after offset {self._pos}"
            )
        chunk = self._data[self._pos:idx]
        self._pos = idx + 1
        return chunk
