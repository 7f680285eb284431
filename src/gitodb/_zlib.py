"""Inflate stored git objects.

Loose objects are zlib streams: a two-byte header, a raw deflate body and an
adler32 trailer.  The header is dropped without inspection and the body is
inflated with a raw decompressor, so the same code path serves any stream
whose first two bytes are framing rather than deflate data.
"""

from __future__ import annotations

import logging
import os
import zlib

from .exceptions import DecompressionError

logger = logging.getLogger(__name__)

_PREFIX_LEN = 2
_CHUNK_SIZE = 64 * 1024


def decompress(source: str | os.PathLike[str] | bytes) -> bytes:
    """Return the inflated content of *source*.

    *source* is either a path to a stored object or its raw bytes; both are
    handled identically.  Raises :class:`DecompressionError` for corrupt or
    truncated streams.
    """
    if isinstance(source, (bytes, bytearray, memoryview)):
        return _inflate_chunks(_iter_buffer(bytes(source)), "<bytes>")
    path = os.fspath(source)
    with open(path, "rb") as f:
        return _inflate_chunks(iter(lambda: f.read(_CHUNK_SIZE), b""), path)


def _iter_buffer(data: bytes):
    for start in range(0, len(data), _CHUNK_SIZE):
        yield data[start:start + _CHUNK_SIZE]


def _inflate_chunks(chunks, label: str) -> bytes:
    d = zlib.decompressobj(-zlib.MAX_WBITS)
    out = bytearray()
    skip = _PREFIX_LEN
    try:
        for chunk in chunks:
            if skip:
                dropped = min(skip, len(chunk))
                chunk = chunk[dropped:]
                skip -= dropped
                if not chunk:
                    continue
            if d.eof:
                # Anything after the deflate body is the checksum trailer.
                break
            out += d.decompress(chunk)
        out += d.flush()
    except zlib.error as exc:
        raise DecompressionError(f"Corrupt object stream {label}: {exc}") from exc
    if skip:
        raise DecompressionError(f"Object stream too short: {label}")
    if not d.eof:
        raise DecompressionError(f"Truncated object stream: {label}")
    logger.debug("inflated %s to %d bytes", label, len(out))
    return bytes(out)
