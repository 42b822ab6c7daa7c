"""
Tests for candidate file validation.
"""

import pytest

from filedrop.core.domain.uploads import RawFile, UploadPolicy
from filedrop.core.exceptions import ErrorKind
from filedrop.core.services.validator import matches_type, validate


def candidate(name: str = "report.txt", size: int = 100, mime_type: str = "text/plain") -> RawFile:
    return RawFile(name=name, size=size, mime_type=mime_type)


class TestValidate:
    """Test cases for validate."""

    def test_accepts_file_within_limit(self) -> None:
        result = validate(candidate(), UploadPolicy(max_size_bytes=1000))

        assert result.accepted
        assert result.error_kind is None
        assert result.message is None

    def test_file_at_limit_is_accepted(self) -> None:
        assert validate(candidate(size=1000), UploadPolicy(max_size_bytes=1000)).accepted

    def test_rejects_oversized_file(self) -> None:
        result = validate(candidate(size=2_000_000), UploadPolicy(max_size_bytes=1_000_000))

        assert not result.accepted
        assert result.error_kind == ErrorKind.SIZE_EXCEEDED
        assert "977 KB" in result.message

    def test_size_checked_before_type(self) -> None:
        policy = UploadPolicy(max_size_bytes=10, allowed_type_patterns=(".pdf",))

        result = validate(candidate(size=20), policy)

        assert result.error_kind == ErrorKind.SIZE_EXCEEDED

    def test_empty_patterns_accept_everything(self) -> None:
        policy = UploadPolicy(max_size_bytes=1000)

        assert validate(candidate("x.bin", mime_type="application/octet-stream"), policy).accepted

    def test_rejects_unlisted_type(self) -> None:
        policy = UploadPolicy(max_size_bytes=1000, allowed_type_patterns=(".txt", "image/*"))

        result = validate(candidate("a.pdf", mime_type="application/pdf"), policy)

        assert not result.accepted
        assert result.error_kind == ErrorKind.TYPE_NOT_ALLOWED
        assert ".txt, image/*" in result.message

    def test_any_pattern_may_match(self) -> None:
        policy = UploadPolicy(max_size_bytes=1000, allowed_type_patterns=(".csv", "image/*"))

        assert validate(candidate("cat.png", mime_type="image/png"), policy).accepted

    def test_is_deterministic(self) -> None:
        policy = UploadPolicy(max_size_bytes=50, allowed_type_patterns=(".txt",))
        file = candidate(size=60)

        assert validate(file, policy) == validate(file, policy)


class TestMatchesType:
    """Test cases for extension and MIME pattern matching."""

    @pytest.mark.parametrize("name", ["a.txt", "A.TXT", "notes.Txt"])
    def test_extension_is_case_insensitive(self, name: str) -> None:
        assert matches_type(candidate(name), ".txt")
        assert matches_type(candidate(name), ".TXT")

    def test_extension_must_be_suffix(self) -> None:
        assert not matches_type(candidate("a.txt.exe"), ".txt")

    def test_extension_ignores_mime_type(self) -> None:
        assert matches_type(candidate("data.txt", mime_type="application/octet-stream"), ".txt")

    @pytest.mark.parametrize("mime_type", ["image/png", "image/jpeg", "IMAGE/GIF"])
    def test_wildcard_mime_pattern(self, mime_type: str) -> None:
        assert matches_type(candidate("file", mime_type=mime_type), "image/*")

    def test_wildcard_does_not_cross_types(self) -> None:
        assert not matches_type(candidate("file", mime_type="text/plain"), "image/*")

    def test_exact_mime_pattern(self) -> None:
        pdf = candidate("doc", mime_type="application/pdf")

        assert matches_type(pdf, "application/pdf")
        assert not matches_type(pdf, "application/json")

    def test_missing_mime_type_never_matches_glob(self) -> None:
        assert not matches_type(candidate("file", mime_type=""), "*/*")

    def test_blank_pattern_never_matches(self) -> None:
        assert not matches_type(candidate(), "  ")
