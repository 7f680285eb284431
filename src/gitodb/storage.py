"""Loose object lookup and type dispatch."""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, TypeVar

from . import ids
from ._zlib import decompress
from .exceptions import ObjectNotFoundError, ParseError
from .objects import OBJECT_TYPES, GitObject
from .pack import Pack, discover_packs
from .reader import ObjectReader

if TYPE_CHECKING:
    from .repo import Repository

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=GitObject)


class ObjectStorage:
    """Gateway to a repository's stored objects.

    Loose objects live at ``objects/<sha[:2]>/<sha[2:]>``.  Packs are
    enumerated once at construction; the list is not refreshed.
    """

    def __init__(self, repo: Repository):
        self._repo = repo
        self.objects_dir = repo.objects_dir
        self.packs: tuple[Pack, ...] = tuple(discover_packs(repo.pack_dir))

    def __repr__(self) -> str:
        return f"ObjectStorage({self.objects_dir!r}, packs={len(self.packs)})"

    def __contains__(self, sha) -> bool:
        sha = ids.normalize(sha)
        return sha is not None and os.path.isfile(self.loose_path(sha))

    def __getitem__(self, sha: str) -> GitObject:
        return self.get_object(sha)

    def loose_path(self, sha: str) -> str:
        """Return where the loose object *sha* would be stored."""
        sha = ids.require(sha)
        return os.path.join(self.objects_dir, sha[:2], sha[2:])

    def get_object(self, sha: str) -> GitObject:
        """Load the object named *sha*.

        Raises :class:`~gitodb.exceptions.InvalidIdentifierError` for a
        malformed id and :class:`~gitodb.exceptions.ObjectNotFoundError` when
        nothing is stored under it.
        """
        sha = ids.require(sha)
        path = self.loose_path(sha)
        if os.path.isfile(path):
            logger.debug("loading loose object %s", sha)
            return self.load_raw(decompress(path), sha)

        for pack in self.packs:
            data = pack.resolve(sha)
            if data is not None:
                return self.load_raw(data, sha)

        raise ObjectNotFoundError(sha)

    def get_typed(self, sha: str, cls: type[T]) -> T:
        """Load *sha* and check that it is an instance of *cls*."""
        obj = self.get_object(sha)
        if not isinstance(obj, cls):
            raise TypeError(
                f"Object {obj.id} is a {obj.type_name}, not a {cls.type_name}"
            )
        return obj

    def load_raw(self, data: bytes, sha: str | None = None) -> GitObject:
        """Build an object from inflated framed content.

        If *sha* is given it is trusted and not recomputed.
        """
        reader = ObjectReader(data)
        type_name, length = reader.read_object_header()
        cls = OBJECT_TYPES.get(type_name)
        if cls is None:
            raise ParseError(f"Unknown object type: {type_name!r}")
        reader.check_payload_length(length)
        logger.debug("dispatching %s as %s", sha or "<unnamed>", type_name)
        obj = cls(self._repo, sha)
        obj.deserialize(reader)
        return obj
