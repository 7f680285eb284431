"""gitodb: read objects from a git repository's loose object database."""

from .repo import Repository
from .storage import ObjectStorage
from .pack import Pack
from .reader import ObjectReader
from .objects import Blob, Commit, Contributor, GitObject, Tag, Tree, TreeEntry
from .exceptions import (
    DecompressionError,
    GitObjectError,
    InvalidIdentifierError,
    ObjectNotFoundError,
    PackLookupError,
    ParseError,
    TruncatedObjectError,
)

__all__ = [
    "Repository", "ObjectStorage", "Pack", "ObjectReader",
    "GitObject", "Blob", "Tree", "TreeEntry", "Commit", "Tag", "Contributor",
    "GitObjectError", "InvalidIdentifierError", "ObjectNotFoundError",
    "PackLookupError", "ParseError", "TruncatedObjectError", "DecompressionError",
]
