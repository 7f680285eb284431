"""Exceptions for gitodb."""


class GitObjectError(Exception):
    """Base class for errors raised while reading the object database."""


class InvalidIdentifierError(GitObjectError, ValueError):
    """Raised when a string is not a 40-character hexadecimal object id."""

    def __init__(self, sha):
        super().__init__(f"Invalid object id: {sha!r}")
        self.sha = sha


class ObjectNotFoundError(GitObjectError, KeyError):
    """Raised when no loose or packed object matches the requested id.

    Also a :class:`KeyError`, so ``storage[sha]`` behaves like a mapping lookup.
    """

    def __init__(self, sha: str):
        super().__init__(sha)
        self.sha = sha

    def __str__(self) -> str:
        return f"Object not found: {self.sha}"


class ParseError(GitObjectError):
    """Raised when inflated object content does not match its expected format."""


class TruncatedObjectError(ParseError):
    """Raised when a read runs past the end of an object's content."""


class DecompressionError(GitObjectError):
    """Raised when a stored object is not a valid deflate stream."""


class PackLookupError(GitObjectError, NotImplementedError):
    """Raised when an object would have to be read from a pack file.

    Packs are enumerated but not searched, so a lookup that reaches them
    cannot be answered either way.
    """
