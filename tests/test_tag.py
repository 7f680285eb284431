"""Tests for lightweight and annotated tag parsing."""

import hashlib
from datetime import datetime, timedelta, timezone

import pytest

from gitodb import Blob, Commit, Contributor, Repository, Tag
from gitodb.exceptions import GitObjectError, ObjectNotFoundError, ParseError

from conftest import frame, write_loose, write_raw

MISSING = "0123456789abcdef0123456789abcdef01234567"


def _annotated(target: str, *, type_name="blob", tagger=None, message=b"Release 1.0\n", tag_line=b"tag v1.0\n"):
    tagger = tagger or b"tagger Jane Doe <jane@example.com> 1700000000 +0000\n"
    return (
        b"object " + target.encode() + b"\n"
        + b"type " + type_name.encode() + b"\n"
        + tag_line
        + tagger
        + b"\n"
        + message
    )


@pytest.fixture
def blob_repo(git_dir):
    """Repo holding only the blob ``hello world\\n``; returns (repo, blob id)."""
    sha = write_loose(git_dir, b"blob", b"hello world\n")
    return Repository.open(git_dir), sha


class TestLightweight:
    def test_raw_reference(self, blob_repo):
        repo, blob_sha = blob_repo
        tag_sha = write_loose(repo.path, b"tag", bytes.fromhex(blob_sha))
        tag = repo.get_object(tag_sha)
        assert isinstance(tag, Tag)
        assert tag.is_annotated is False
        assert tag.object == repo.get_object(blob_sha)
        assert isinstance(tag.object, Blob)
        assert tag.object_id == blob_sha
        assert tag.target_type == "blob"
        assert tag.tagger is None
        assert tag.tag_date is None
        assert tag.message is None

    def test_serialize(self, blob_repo):
        repo, blob_sha = blob_repo
        tag_sha = write_loose(repo.path, b"tag", bytes.fromhex(blob_sha))
        tag = repo.get_object(tag_sha)
        assert tag.serialize() == bytes.fromhex(blob_sha)
        assert hashlib.sha1(tag.as_raw_bytes()).hexdigest() == tag_sha

    def test_missing_target(self, repo):
        tag_sha = write_loose(repo.path, b"tag", bytes.fromhex(MISSING))
        with pytest.raises(ObjectNotFoundError):
            repo.get_object(tag_sha)

    def test_too_short(self, repo):
        tag_sha = write_loose(repo.path, b"tag", b"\x01\x02\x03")
        with pytest.raises(ParseError):
            repo.get_object(tag_sha)


class TestAnnotated:
    def test_fields(self, blob_repo):
        repo, blob_sha = blob_repo
        tag_sha = write_loose(repo.path, b"tag", _annotated(blob_sha))
        tag = repo.get_object(tag_sha)
        assert tag.is_annotated is True
        assert tag.tagger.name == "Jane Doe"
        assert tag.tagger.email == "jane@example.com"
        assert tag.tag_date == datetime.fromtimestamp(1700000000, timezone.utc)
        assert tag.tag_date.utcoffset() == timedelta(0)
        assert tag.message == "Release 1.0"
        assert tag.name == "v1.0"
        assert tag.target_type == "blob"
        assert tag.object == repo.get_object(blob_sha)

    def test_computes_id_when_not_given(self, blob_repo):
        repo, blob_sha = blob_repo
        raw = frame(b"tag", _annotated(blob_sha))
        tag = Tag(repo)
        tag.deserialize(raw)
        assert tag.id == hashlib.sha1(raw).hexdigest()
        assert tag.is_annotated

    def test_message_trailing_whitespace_trimmed(self, blob_repo):
        repo, blob_sha = blob_repo
        payload = _annotated(blob_sha, message=b"Line one\n\nLine two  \n\n\n")
        tag = repo.storage.load_raw(frame(b"tag", payload))
        assert tag.message == "Line one\n\nLine two"

    def test_empty_message_is_not_annotated(self, blob_repo):
        repo, blob_sha = blob_repo
        tag = repo.storage.load_raw(frame(b"tag", _annotated(blob_sha, message=b"")))
        assert tag.message == ""
        assert tag.tagger is not None
        assert tag.is_annotated is False

    def test_tag_on_commit_from_dulwich(self, populated):
        repo = Repository.open(populated.path)
        tag = repo.get_object(populated.tag)
        assert tag.is_annotated
        assert isinstance(tag.object, Commit)
        assert tag.object.id == populated.second
        assert tag.tagger == Contributor("Jane Doe", "jane@example.com")
        assert tag.serialize() == populated.dulwich["tag"].as_raw_string()

    def test_get_typed(self, populated):
        tag = Repository.open(populated.path).get_typed(populated.tag, Tag)
        assert tag.name == "v1.0"

    def test_nested_tag(self, populated):
        repo = Repository.open(populated.path)
        outer_sha = write_loose(
            populated.path, b"tag",
            _annotated(populated.tag, type_name="tag", tag_line=b"tag outer\n"),
        )
        outer = repo.get_object(outer_sha)
        assert isinstance(outer.object, Tag)
        assert isinstance(outer.object.object, Commit)

    def test_detached_tag_cannot_resolve(self):
        tag = Tag()
        with pytest.raises(GitObjectError, match="not attached"):
            tag.deserialize(frame(b"tag", _annotated(MISSING)))


class TestAnnotatedErrors:
    def test_invalid_target_id(self, repo):
        payload = _annotated("nothex").replace(b"nothex", b"z" * 40)
        with pytest.raises(ParseError, match="Invalid object id"):
            repo.storage.load_raw(frame(b"tag", payload))

    def test_missing_target(self, repo):
        with pytest.raises(ObjectNotFoundError):
            repo.storage.load_raw(frame(b"tag", _annotated(MISSING)))

    def test_unknown_target_type_propagates(self, git_dir):
        target = write_raw(git_dir, b"blurb 5\x00abcde")
        repo = Repository.open(git_dir)
        with pytest.raises(ParseError, match="blurb"):
            repo.storage.load_raw(frame(b"tag", _annotated(target)))

    def test_declared_type_mismatch(self, blob_repo):
        repo, blob_sha = blob_repo
        payload = _annotated(blob_sha, type_name="commit")
        with pytest.raises(ParseError, match="commit"):
            repo.storage.load_raw(frame(b"tag", payload))

    def test_missing_tagger_keyword(self, blob_repo):
        repo, blob_sha = blob_repo
        payload = _annotated(blob_sha, tagger=b"author Jane Doe <jane@example.com> 1700000000 +0000\n")
        with pytest.raises(ParseError, match="tagger"):
            repo.storage.load_raw(frame(b"tag", payload))

    def test_missing_tag_line(self, blob_repo):
        repo, blob_sha = blob_repo
        payload = _annotated(blob_sha, tag_line=b"")
        with pytest.raises(ParseError):
            repo.storage.load_raw(frame(b"tag", payload))

    @pytest.mark.parametrize("tagger", [
        b"tagger Jane Doe <jane@example.com>\n",
        b"tagger Jane Doe <jane@example.com> soon +0000\n",
        b"tagger Jane Doe 1700000000 +0000\n",
    ])
    def test_malformed_tagger(self, blob_repo, tagger):
        repo, blob_sha = blob_repo
        with pytest.raises(ParseError):
            repo.storage.load_raw(frame(b"tag", _annotated(blob_sha, tagger=tagger)))

    def test_missing_blank_line(self, blob_repo):
        repo, blob_sha = blob_repo
        payload = _annotated(blob_sha).replace(b"+0000\n\n", b"+0000\nX")
        with pytest.raises(ParseError, match="blank line"):
            repo.storage.load_raw(frame(b"tag", payload))

    def test_failed_parse_leaves_tag_untouched(self, blob_repo):
        repo, blob_sha = blob_repo
        payload = _annotated(blob_sha, tagger=b"tagger nobody\n")
        tag = Tag(repo)
        with pytest.raises(ParseError):
            tag.deserialize(frame(b"tag", payload))
        assert tag.id is None
        assert tag.object is None
        assert tag.message is None
