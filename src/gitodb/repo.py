"""Repository context shared by every loaded object."""

from __future__ import annotations

import os
from pathlib import Path
from typing import TypeVar

from .objects import GitObject
from .storage import ObjectStorage

T = TypeVar("T", bound=GitObject)


class Repository:
    """A git directory opened for reading.

    *path* is either a git directory (bare repository or ``.git``) or a
    working tree containing ``.git``.
    """

    def __init__(self, path: str | os.PathLike[str]):
        path = Path(path)
        if (path / ".git").is_dir():
            path = path / ".git"
        if not (path / "objects").is_dir():
            raise FileNotFoundError(f"Repository not found: {path}")
        self.path = str(path)
        self.storage = ObjectStorage(self)

    def __repr__(self) -> str:
        return f"Repository({self.path!r})"

    @classmethod
    def open(cls, path: str | os.PathLike[str]) -> Repository:
        return cls(path)

    @property
    def objects_dir(self) -> str:
        return os.path.join(self.path, "objects")

    @property
    def pack_dir(self) -> str:
        return os.path.join(self.objects_dir, "pack")

    def get_object(self, sha: str) -> GitObject:
        """Load the object named *sha*; see :meth:`ObjectStorage.get_object`."""
        return self.storage.get_object(sha)

    def get_typed(self, sha: str, cls: type[T]) -> T:
        return self.storage.get_typed(sha, cls)
