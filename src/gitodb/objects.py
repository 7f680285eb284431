"""Typed git objects.

Each class parses its payload from an :class:`~gitodb.reader.ObjectReader`
positioned just after the object header, and can serialize itself back to
payload bytes.  Objects keep a reference to the repository they were loaded
from and use it only to resolve ids they point at (a tag's target, a commit's
tree and parents, tree entries).
"""

from __future__ import annotations

import re
import stat
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Iterator, NamedTuple

from dulwich.objects import format_timezone, parse_timezone

from . import ids
from .exceptions import GitObjectError, ParseError
from .reader import ObjectReader

if TYPE_CHECKING:
    from .repo import Repository


_IDENT_RE = re.compile(r"(.*?)\s*<([^<>]*)>")
_MODE_RE = re.compile(rb"[0-7]{5,6}")
_OBJECT_SIGNATURE = b"object "


def _decode(raw: bytes) -> str:
    return raw.decode("utf-8", "surrogateescape")


def _encode(text: str) -> bytes:
    return text.encode("utf-8", "surrogateescape")


# ---------------------------------------------------------------------------
# Contributors and dates
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Contributor:
    """Name and email of an author, committer or tagger."""

    name: str
    email: str

    def __str__(self) -> str:
        return f"{self.name} <{self.email}>"

    @classmethod
    def parse(cls, text: str) -> Contributor:
        """Parse ``"Name <email>"``."""
        m = _IDENT_RE.fullmatch(text.strip())
        if m is None:
            raise ParseError(f"Malformed contributor: {text!r}")
        return cls(m.group(1), m.group(2))


_NEGATIVE_UTC = "-0000"


def strip_date(line: str) -> tuple[datetime, str]:
    """Split the trailing ``<epoch> <+hhmm>`` off an identity line.

    Returns ``(date, rest)`` where *date* is timezone-aware and *rest* is the
    ``Name <email>`` part.  A ``-0000`` offset gets a tzinfo named
    ``"-0000"`` so that :func:`format_identity` can write it back unchanged.
    """
    parts = line.rstrip().rsplit(" ", 2)
    if len(parts) != 3 or not parts[1].isdigit():
        raise ParseError(f"Missing date in {line!r}")
    rest, stamp, tz = parts
    try:
        offset, neg_utc = parse_timezone(tz.encode("ascii"))
        if neg_utc:
            tzinfo = timezone(timedelta(seconds=offset), _NEGATIVE_UTC)
        else:
            tzinfo = timezone(timedelta(seconds=offset))
        when = datetime.fromtimestamp(int(stamp), tzinfo)
    except (ValueError, OverflowError, OSError, UnicodeEncodeError) as exc:
        raise ParseError(f"Malformed date {stamp} {tz} in {line!r}") from exc
    return when, rest


def format_identity(who: Contributor, when: datetime) -> bytes:
    """Inverse of :func:`strip_date` + :meth:`Contributor.parse`."""
    offset = int(when.utcoffset().total_seconds()) if when.utcoffset() else 0
    neg_utc = offset == 0 and when.tzname() == _NEGATIVE_UTC
    return (
        _encode(str(who))
        + f" {int(when.timestamp())} ".encode("ascii")
        + format_timezone(offset, unnecessary_negative_timezone=neg_utc)
    )


def _identity_line(value: str) -> tuple[Contributor, datetime]:
    # The date goes first: "Name <email>" has no fixed width to split on.
    when, rest = strip_date(value)
    return Contributor.parse(rest), when


# ---------------------------------------------------------------------------
# Base class
# ---------------------------------------------------------------------------

class GitObject:
    """Common behaviour of commits, trees, blobs and tags.

    After :meth:`deserialize`, :attr:`stored_payload` holds the payload bytes
    exactly as read; :meth:`serialize` rebuilds them from the parsed fields.
    """

    type_name = ""

    def __init__(self, repo: Repository | None = None, sha: str | None = None):
        self._repo = repo
        self.id: str | None = ids.require(sha) if sha is not None else None
        self.stored_payload: bytes | None = None

    def __repr__(self) -> str:
        short = self.id[:7] if self.id else "?"
        return f"{type(self).__name__}({short})"

    def __eq__(self, other):
        if isinstance(other, GitObject):
            return (
                self.id is not None
                and self.type_name == other.type_name
                and self.id == other.id
            )
        return NotImplemented

    def __hash__(self) -> int:
        return hash((self.type_name, self.id))

    @property
    def repository(self) -> Repository | None:
        return self._repo

    def deserialize(self, source: ObjectReader | bytes) -> None:
        """Load this object from *source*.

        *source* is either a reader already positioned after the header (as
        handed over by :class:`~gitodb.storage.ObjectStorage`) or the full
        framed content as bytes.
        """
        reader = source if isinstance(source, ObjectReader) else ObjectReader(source)
        if reader.payload_start is None:
            type_name, length = reader.read_object_header()
            if type_name != self.type_name:
                raise ParseError(
                    f"Expected a {self.type_name} object, got {type_name}"
                )
            reader.check_payload_length(length)
        sha = self.id or reader.compute_identifier()
        self._parse(reader)
        self.stored_payload = reader.payload()
        self.id = sha

    def serialize(self) -> bytes:
        """Return the payload bytes (without the header)."""
        raise NotImplementedError(f"{type(self).__name__}.serialize")

    def as_raw_bytes(self) -> bytes:
        """Return the framed content ``"<type> <len>\\0<payload>"``."""
        payload = self.serialize()
        header = f"{self.type_name} {len(payload)}\x00".encode("ascii")
        return header + payload

    def _parse(self, reader: ObjectReader) -> None:
        raise NotImplementedError(f"{type(self).__name__}._parse")

    def _resolve(self, sha: str) -> GitObject:
        if self._repo is None:
            raise GitObjectError(f"{self!r} is not attached to a repository")
        return self._repo.get_object(sha)


# ---------------------------------------------------------------------------
# Blob
# ---------------------------------------------------------------------------

class Blob(GitObject):
    """File content."""

    type_name = "blob"

    def __init__(self, repo: Repository | None = None, sha: str | None = None):
        super().__init__(repo, sha)
        self.data = b""

    def _parse(self, reader):
        self.data = reader.read_to_end()

    def serialize(self) -> bytes:
        return self.data


# ---------------------------------------------------------------------------
# Tree
# ---------------------------------------------------------------------------

class TreeEntry(NamedTuple):
    """One ``<mode> <name>\\0<sha>`` record of a tree."""

    mode: int
    name: str
    id: str

    @property
    def is_tree(self) -> bool:
        return stat.S_ISDIR(self.mode)


class Tree(GitObject):
    """Directory listing: ordered entries of mode, name and object id."""

    type_name = "tree"

    def __init__(self, repo: Repository | None = None, sha: str | None = None):
        super().__init__(repo, sha)
        self.entries: list[TreeEntry] = []

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[TreeEntry]:
        return iter(self.entries)

    def __contains__(self, name) -> bool:
        return any(e.name == name for e in self.entries)

    def __getitem__(self, name: str) -> TreeEntry:
        for entry in self.entries:
            if entry.name == name:
                return entry
        raise KeyError(name)

    def resolve(self, name: str) -> GitObject:
        """Load the object the entry *name* points at."""
        return self._resolve(self[name].id)

    def _parse(self, reader):
        entries = []
        while not reader.at_end:
            mode = reader.read_word()
            if not _MODE_RE.fullmatch(mode):
                raise ParseError(f"Malformed tree entry mode: {mode!r}")
            name = reader.read_to_null()
            sha = ids.from_raw(reader.read_bytes(ids.RAW_LENGTH))
            entries.append(TreeEntry(int(mode, 8), _decode(name), sha))
        self.entries = entries

    def serialize(self) -> bytes:
        return b"".join(
            f"{e.mode:o} ".encode("ascii") + _encode(e.name) + b"\x00" + ids.to_raw(e.id)
            for e in self.entries
        )


# ---------------------------------------------------------------------------
# Commit
# ---------------------------------------------------------------------------

class Commit(GitObject):
    """A snapshot: root tree, parents, author, committer and message.

    Headers other than ``tree``, ``parent``, ``author`` and ``committer``
    (``encoding``, ``gpgsig``, ``mergetag`` ...) are kept in order in
    :attr:`extra`, with continuation lines joined by ``\\n``.
    """

    type_name = "commit"

    def __init__(self, repo: Repository | None = None, sha: str | None = None):
        super().__init__(repo, sha)
        self.tree_id: str | None = None
        self.parent_ids: list[str] = []
        self.author: Contributor | None = None
        self.author_date: datetime | None = None
        self.committer: Contributor | None = None
        self.commit_date: datetime | None = None
        self.extra: list[tuple[str, str]] = []
        self.message = ""

    @property
    def tree(self) -> Tree:
        return self._resolve(self.tree_id)

    @property
    def parents(self) -> list[Commit]:
        return [self._resolve(p) for p in self.parent_ids]

    def _parse(self, reader):
        headers: list[tuple[str, str]] = []
        while not reader.at_end:
            line = reader.read_line()
            if not line:
                break
            if line.startswith(b" "):
                if not headers:
                    raise ParseError("Commit starts with a continuation line")
                key, value = headers[-1]
                headers[-1] = (key, value + "\n" + _decode(line[1:]))
                continue
            key, sep, value = line.partition(b" ")
            if not sep:
                raise ParseError(f"Malformed commit header: {line!r}")
            headers.append((_decode(key), _decode(value)))
        message = _decode(reader.read_to_end())

        tree_id = None
        parent_ids = []
        author = committer = None
        author_date = commit_date = None
        extra = []
        for key, value in headers:
            if key == "tree":
                if tree_id is not None:
                    raise ParseError("Commit has more than one tree")
                tree_id = self._header_id(key, value)
            elif key == "parent":
                parent_ids.append(self._header_id(key, value))
            elif key == "author":
                author, author_date = _identity_line(value)
            elif key == "committer":
                committer, commit_date = _identity_line(value)
            else:
                extra.append((key, value))
        for key, seen in (("tree", tree_id), ("author", author), ("committer", committer)):
            if seen is None:
                raise ParseError(f"Commit is missing its {key} header")

        self.tree_id = tree_id
        self.parent_ids = parent_ids
        self.author, self.author_date = author, author_date
        self.committer, self.commit_date = committer, commit_date
        self.extra = extra
        self.message = message

    @staticmethod
    def _header_id(key: str, value: str) -> str:
        sha = ids.normalize(value.strip())
        if sha is None:
            raise ParseError(f"Invalid {key} id in commit: {value!r}")
        return sha

    def serialize(self) -> bytes:
        lines = [b"tree " + self.tree_id.encode("ascii")]
        lines += [b"parent " + p.encode("ascii") for p in self.parent_ids]
        lines.append(b"author " + format_identity(self.author, self.author_date))
        lines.append(
            b"committer " + format_identity(self.committer, self.commit_date)
        )
        for key, value in self.extra:
            lines.append(_encode(key) + b" " + _encode(value).replace(b"\n", b"\n "))
        return b"\n".join(lines) + b"\n\n" + _encode(self.message)


# ---------------------------------------------------------------------------
# Tag
# ---------------------------------------------------------------------------

class Tag(GitObject):
    """A named pointer to another object.

    Two payload forms exist.  A lightweight tag is just the 20-byte binary id
    of its target.  An annotated tag is a text record::

        object <sha>
        type <type>
        tag <name>
        tagger <name> <email> <epoch> <tz>

        <message>

    :attr:`object` is loaded through the repository while parsing.
    """

    type_name = "tag"

    def __init__(self, repo: Repository | None = None, sha: str | None = None):
        super().__init__(repo, sha)
        self.object: GitObject | None = None
        self.object_id: str | None = None
        self.target_type: str | None = None
        self.name: str | None = None
        self.tagger: Contributor | None = None
        self.tag_date: datetime | None = None
        self.message: str | None = None

    @property
    def is_annotated(self) -> bool:
        """True for tags carrying a tagger, a date and a message."""
        return bool(self.message) and self.tagger is not None and self.tag_date is not None

    def _parse(self, reader):
        sig_len = len(_OBJECT_SIGNATURE)
        if reader.remaining >= sig_len and reader.get_string(sig_len) == _OBJECT_SIGNATURE:
            fields = self._parse_annotated(reader)
        else:
            fields = self._parse_lightweight(reader)
        for attr, value in fields.items():
            setattr(self, attr, value)

    def _parse_lightweight(self, reader) -> dict:
        target_id = ids.from_raw(reader.read_bytes(ids.RAW_LENGTH))
        target = self._resolve(target_id)
        return {
            "object": target,
            "object_id": target_id,
            "target_type": target.type_name,
            "name": None,
            "tagger": None,
            "tag_date": None,
            "message": None,
        }

    def _parse_annotated(self, reader) -> dict:
        reader.rewind()
        reader.read_to_null()

        _expect_keyword(reader, b"object")
        target_id = ids.normalize(reader.read_line().strip())
        if target_id is None:
            raise ParseError("Invalid object id in tag content")
        # Unknown target types surface here as ParseError from the storage layer.
        target = self._resolve(target_id)

        _expect_keyword(reader, b"type")
        target_type = _decode(reader.read_line()).strip()
        if target_type != target.type_name:
            raise ParseError(
                f"Tag declares a {target_type} target but {target_id} is a {target.type_name}"
            )
        _expect_keyword(reader, b"tag")
        name = _decode(reader.read_line())

        _expect_keyword(reader, b"tagger")
        tagger, tag_date = _identity_line(_decode(reader.read_line()))

        if reader.read_bytes(1) != b"\n":
            raise ParseError("Expected a blank line before the tag message")
        message = _decode(reader.read_to_end()).rstrip()

        return {
            "object": target,
            "object_id": target_id,
            "target_type": target_type,
            "name": name,
            "tagger": tagger,
            "tag_date": tag_date,
            "message": message,
        }

    def serialize(self) -> bytes:
        if self.tagger is None:
            return ids.to_raw(self.object_id)
        return (
            b"object " + self.object_id.encode("ascii") + b"\n"
            + b"type " + _encode(self.target_type) + b"\n"
            + b"tag " + _encode(self.name) + b"\n"
            + b"tagger " + format_identity(self.tagger, self.tag_date) + b"\n"
            + b"\n"
            + _encode(self.message) + b"\n"
        )


def _expect_keyword(reader: ObjectReader, keyword: bytes) -> None:
    word = reader.read_word()
    if word != keyword:
        raise ParseError(f"Expected {keyword.decode()!r} in tag, got {word!r}")


OBJECT_TYPES: dict[str, type[GitObject]] = {
    cls.type_name: cls for cls in (Commit, Tree, Blob, Tag)
}
