"""Shared fixtures for gitodb tests."""

import hashlib
import os
import zlib
from types import SimpleNamespace

import pytest
from click.testing import CliRunner
from dulwich.objects import Blob, Commit, Tag, Tree
from dulwich.repo import Repo as DulwichRepo

from gitodb import Repository


TAGGER = b"Jane Doe <jane@example.com>"


def frame(type_name: bytes, payload: bytes) -> bytes:
    """Return ``"<type> <len>\\0<payload>"``."""
    return type_name + b" " + str(len(payload)).encode() + b"\x00" + payload


def write_loose(git_dir, type_name: bytes, payload: bytes) -> str:
    """Write a hand-made loose object and return its id."""
    return write_raw(git_dir, frame(type_name, payload))


def write_raw(git_dir, raw: bytes, stored: bytes | None = None) -> str:
    """Store *raw* under its SHA-1; *stored* overrides the file content."""
    sha = hashlib.sha1(raw).hexdigest()
    obj_dir = os.path.join(str(git_dir), "objects", sha[:2])
    os.makedirs(obj_dir, exist_ok=True)
    with open(os.path.join(obj_dir, sha[2:]), "wb") as f:
        f.write(zlib.compress(raw) if stored is None else stored)
    return sha


@pytest.fixture
def git_dir(tmp_path):
    """Create an empty bare repository and return its path."""
    path = str(tmp_path / "test.git")
    DulwichRepo.init_bare(path, mkdir=True)
    return path


@pytest.fixture
def repo(git_dir):
    return Repository.open(git_dir)


@pytest.fixture
def populated(git_dir):
    """Bare repo with a small history written by dulwich.

    Layout::

        hello.txt        "hello world\\n"
        sub/deep.txt     "deep\\n"

    Two commits (the second adds sub/) and an annotated tag ``v1.0`` on the
    second commit.
    """
    store = DulwichRepo(git_dir).object_store

    hello = Blob.from_string(b"hello world\n")
    deep = Blob.from_string(b"deep\n")

    sub = Tree()
    sub.add(b"deep.txt", 0o100644, deep.id)

    first_tree = Tree()
    first_tree.add(b"hello.txt", 0o100644, hello.id)

    tree = Tree()
    tree.add(b"hello.txt", 0o100644, hello.id)
    tree.add(b"sub", 0o040000, sub.id)

    first = Commit()
    first.tree = first_tree.id
    first.author = first.committer = TAGGER
    first.author_time = first.commit_time = 1700000000
    first.author_timezone = first.commit_timezone = 0
    first.message = b"Initial commit\n"

    second = Commit()
    second.tree = tree.id
    second.parents = [first.id]
    second.author = b"John Roe <john@example.com>"
    second.committer = TAGGER
    second.author_time = 1700003600
    second.commit_time = 1700007200
    second.author_timezone = -5 * 3600
    second.commit_timezone = 3600
    second.message = b"Add sub\n\nWith a body.\n"

    tag = Tag()
    tag.object = (Commit, second.id)
    tag.name = b"v1.0"
    tag.tagger = TAGGER
    tag.tag_time = 1700000000
    tag.tag_timezone = 0
    tag.message = b"Release 1.0\n"

    for obj in (hello, deep, sub, first_tree, tree, first, second, tag):
        store.add_object(obj)

    return SimpleNamespace(
        path=git_dir,
        hello=hello.id.decode(),
        deep=deep.id.decode(),
        sub=sub.id.decode(),
        first_tree=first_tree.id.decode(),
        tree=tree.id.decode(),
        first=first.id.decode(),
        second=second.id.decode(),
        tag=tag.id.decode(),
        dulwich={
            "hello": hello, "sub": sub, "tree": tree,
            "first": first, "second": second, "tag": tag,
        },
    )


@pytest.fixture
def runner():
    return CliRunner()
