"""Unit tests for UploadCandidate – predicates, digests and stream handling."""
from __future__ import annotations

import hashlib
import io

import pytest

from blobstage.application.files import RawUpload, UploadBatch, UploadCandidate
from blobstage.kernel.errors import InvalidInputError, InvariantViolationError


def _candidate(
    data: bytes = b"hello world",
    name: str = "hello.txt",
    content_type: str = "text/plain",
    **kwargs: object,
) -> UploadCandidate:
    return UploadCandidate(io.BytesIO(data), name, len(data), content_type, **kwargs)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


class TestConstruction:
    def test_missing_stream_raises_invalid_input(self) -> None:
        with pytest.raises(InvalidInputError) as exc_info:
            UploadCandidate(None, "a.txt", 0, "text/plain")
        assert exc_info.value.detail == {"original_name": "a.txt"}

    def test_save_name_defaults_to_original_name(self) -> None:
        c = _candidate(name="photo.png")
        assert c.save_name == "photo.png"
        assert c.original_name == "photo.png"

    def test_explicit_save_name(self) -> None:
        c = _candidate(name="photo.png", save_name="users/7/photo.png")
        assert c.save_name == "users/7/photo.png"

    def test_declared_content_length_is_used(self) -> None:
        c = UploadCandidate(io.BytesIO(b"abc"), "a.bin", 3, "application/octet-stream")
        assert c.size_bytes == 3

    def test_size_measured_when_not_declared(self) -> None:
        stream = io.BytesIO(b"12345")
        stream.seek(2)
        c = UploadCandidate(stream, "a.bin")
        assert c.size_bytes == 5
        assert stream.tell() == 2

    def test_missing_content_type_falls_back_to_octet_stream(self) -> None:
        c = UploadCandidate(io.BytesIO(b""), "a.bin", 0, None)
        assert c.content_type == "application/octet-stream"

    @pytest.mark.parametrize(
        ("name", "extension"),
        [
            ("report.pdf", ".pdf"),
            ("archive.tar.gz", ".gz"),
            ("README", ""),
            (".gitignore", ".gitignore"),
            ("v1.2/notes", ""),
        ],
    )
    def test_extension_derived_from_original_name(self, name: str, extension: str) -> None:
        assert _candidate(name=name).extension == extension

    def test_from_upload(self) -> None:
        source = RawUpload.from_bytes("cat.png", "image/png", b"\x89PNG")
        c = UploadCandidate.from_upload(source, "pets/cat.png")
        assert c.original_name == "cat.png"
        assert c.save_name == "pets/cat.png"
        assert c.size_bytes == 4
        assert c.content_type == "image/png"
        assert c.stream is source.stream

    def test_from_upload_without_stream_raises(self) -> None:
        with pytest.raises(InvalidInputError):
            UploadCandidate.from_upload(RawUpload(stream=None, filename="x.txt"))


# ---------------------------------------------------------------------------
# save_name ownership
# ---------------------------------------------------------------------------


class TestSaveNameOwnership:
    def test_save_name_mutable_before_insertion(self) -> None:
        c = _candidate()
        c.save_name = "renamed.txt"
        assert c.save_name == "renamed.txt"

    def test_save_name_locked_after_insertion(self) -> None:
        c = _candidate()
        UploadBatch().add(c)
        with pytest.raises(InvariantViolationError):
            c.save_name = "other.txt"

    def test_cannot_join_two_batches(self) -> None:
        c = _candidate()
        UploadBatch().add(c)
        with pytest.raises(InvariantViolationError):
            UploadBatch().add(c)

    def test_cannot_join_same_batch_twice(self) -> None:
        c = _candidate()
        batch = UploadBatch()
        batch.add(c)
        with pytest.raises(InvariantViolationError):
            batch.add(c)
        assert len(batch) == 1


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------


class TestPredicates:
    def test_within_size_inclusive(self) -> None:
        c = _candidate(b"x" * 10)
        assert c.within_size(10) is True
        assert c.within_size(11) is True
        assert c.within_size(9) is False

    def test_has_content_type_empty_is_true(self) -> None:
        assert _candidate(content_type="application/pdf").has_content_type([]) is True

    def test_has_content_type_substring(self) -> None:
        c = _candidate(content_type="image/png")
        assert c.has_content_type(["image/"]) is True
        assert c.has_content_type(["png"]) is True
        assert c.has_content_type(["video/"]) is False

    def test_has_content_type_is_conjunctive(self) -> None:
        # every entry must be contained, so two distinct MIME types never match
        c = _candidate(content_type="image/png")
        assert c.has_content_type(["image/png", "image/jpeg"]) is False
        assert c.has_content_type(["image/", "png"]) is True

    def test_has_extension_empty_is_false(self) -> None:
        assert _candidate(name="a.txt").has_extension([]) is False

    def test_has_extension_exact_match(self) -> None:
        c = _candidate(name="a.txt")
        assert c.has_extension([".txt"]) is True
        assert c.has_extension(["txt"]) is False
        assert c.has_extension([".TXT"]) is False

    def test_has_extension_requires_every_entry(self) -> None:
        assert _candidate(name="a.txt").has_extension([".txt", ".pdf"]) is False


# ---------------------------------------------------------------------------
# Digests
# ---------------------------------------------------------------------------


class TestDigests:
    def test_md5_matches_hashlib(self) -> None:
        data = b"Hello, World!"
        assert _candidate(data).md5() == hashlib.md5(data).digest()  # noqa: S324

    def test_sha1_matches_hashlib(self) -> None:
        data = b"Hello, World!"
        assert _candidate(data).sha1() == hashlib.sha1(data).digest()  # noqa: S324

    def test_sha256_and_hexdigest(self) -> None:
        data = b"abc"
        assert _candidate(data).hexdigest("sha256") == hashlib.sha256(data).hexdigest()

    def test_digest_is_deterministic_and_rewinds(self) -> None:
        data = b"some file content" * 100
        c = _candidate(data)
        first = c.digest("md5")
        second = c.digest("md5")
        assert first == second
        assert c.stream.read() == data

    def test_digest_reads_from_start_regardless_of_position(self) -> None:
        data = b"0123456789"
        c = _candidate(data)
        c.stream.seek(5)
        assert c.md5() == hashlib.md5(data).digest()  # noqa: S324
        assert c.stream.tell() == 0

    def test_cache_hit_does_not_touch_stream(self) -> None:
        c = _candidate(b"0123456789")
        c.md5()
        c.stream.seek(7)
        c.md5()
        assert c.stream.tell() == 7

    def test_algorithm_name_is_case_insensitive(self) -> None:
        c = _candidate(b"abc")
        assert c.digest("MD5") == c.digest("md5")

    def test_unknown_algorithm_raises(self) -> None:
        with pytest.raises(InvalidInputError):
            _candidate().digest("crc32")

    def test_read_errors_propagate(self) -> None:
        class BrokenStream(io.BytesIO):
            def read(self, *args: object) -> bytes:  # type: ignore[override]
                raise OSError("disk gone")

        c = UploadCandidate(BrokenStream(b"abc"), "a.bin", 3)
        with pytest.raises(OSError, match="disk gone"):
            c.md5()


# ---------------------------------------------------------------------------
# Stream lifecycle
# ---------------------------------------------------------------------------


class TestStreamLifecycle:
    def test_close_releases_stream(self) -> None:
        c = _candidate()
        assert c.closed is False
        c.close()
        assert c.closed is True
        assert c.stream.closed

    def test_close_is_idempotent(self) -> None:
        c = _candidate()
        c.close()
        c.close()
        assert c.closed is True

    def test_rewind(self) -> None:
        c = _candidate(b"abc")
        c.stream.read()
        c.rewind()
        assert c.stream.read() == b"abc"
