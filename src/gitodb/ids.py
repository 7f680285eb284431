"""Object identifier validation.

An identifier is the 40-character hex SHA-1 of an object's framed content.
Identifiers are accepted in either case and normalized to lower case.
"""

from __future__ import annotations

import re

from dulwich.objects import hex_to_sha, sha_to_hex

from .exceptions import InvalidIdentifierError

HEX_LENGTH = 40
RAW_LENGTH = 20

SHA_RE = re.compile(r"[0-9a-fA-F]{40}")


def is_valid(sha) -> bool:
    """Return True if *sha* is a 40-character hex string."""
    return isinstance(sha, str) and SHA_RE.fullmatch(sha) is not None


def normalize(sha) -> str | None:
    """Return the canonical lower-case form of *sha*, or None if invalid."""
    if isinstance(sha, bytes):
        try:
            sha = sha.decode("ascii")
        except UnicodeDecodeError:
            return None
    if not is_valid(sha):
        return None
    return sha.lower()


def require(sha) -> str:
    """Like :func:`normalize` but raise :class:`InvalidIdentifierError`."""
    result = normalize(sha)
    if result is None:
        raise InvalidIdentifierError(sha)
    return result


def from_raw(raw: bytes) -> str:
    """Convert a 20-byte binary digest to its hex identifier."""
    if len(raw) != RAW_LENGTH:
        raise InvalidIdentifierError(raw)
    return sha_to_hex(raw).decode("ascii")


def to_raw(sha: str) -> bytes:
    """Convert a hex identifier to its 20-byte binary digest."""
    return hex_to_sha(require(sha).encode("ascii"))
