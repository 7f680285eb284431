"""Pack file descriptors.

Only enumeration is supported: :class:`Pack` knows where a pack's ``.idx``
and ``.pack`` files live, but looking objects up inside it is not implemented.
"""

from __future__ import annotations

import logging
import os

from .exceptions import PackLookupError

logger = logging.getLogger(__name__)


class Pack:
    """A pack in ``objects/pack``, named by its path without extension."""

    __slots__ = ("path",)

    def __init__(self, path: str):
        self.path = path

    def __repr__(self) -> str:
        return f"Pack({self.name!r})"

    def __eq__(self, other):
        if isinstance(other, Pack):
            return self.path == other.path
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.path)

    @property
    def name(self) -> str:
        return os.path.basename(self.path)

    @property
    def index_path(self) -> str:
        return self.path + ".idx"

    @property
    def data_path(self) -> str:
        return self.path + ".pack"

    def resolve(self, sha: str) -> bytes | None:
        """Return the inflated, framed content of *sha* if this pack holds it.

        Index lookup and delta resolution are not implemented.
        """
        raise PackLookupError(f"Pack lookup is not supported ({self.name}, {sha})")


def discover_packs(pack_dir: str) -> list[Pack]:
    """Return one :class:`Pack` per distinct base name in *pack_dir*.

    ``pack-x.idx``, ``pack-x.pack`` and friends collapse to a single
    ``pack-x``.  A missing directory yields no packs.
    """
    try:
        names = sorted(os.listdir(pack_dir))
    except FileNotFoundError:
        logger.debug("no pack directory at %s", pack_dir)
        return []
    bases: list[str] = []
    for name in names:
        base = os.path.splitext(name)[0]
        if base not in bases:
            bases.append(base)
    packs = [Pack(os.path.join(pack_dir, base)) for base in bases]
    logger.debug("found %d pack(s) in %s", len(packs), pack_dir)
    return packs
