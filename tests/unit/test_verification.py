"""Unit tests for MD5 helpers."""

import hashlib
import pytest
from pathlib import Path
from unittest.mock import patch

from publisher.utils.verification import compute_md5, is_md5_hex, verify_md5_or_raise


@pytest.mark.unit
class TestComputeMd5:
    """compute_md5 against hashlib on real files."""

    def test_matches_hashlib(self, sample_binary, firmware_bytes):
        result = compute_md5(sample_binary)

        assert result == hashlib.md5(firmware_bytes).hexdigest()
        assert len(result) == 32
        assert result == result.lower()

    def test_chunk_size_does_not_matter(self, sample_binary):
        assert compute_md5(sample_binary, chunk_size=3) == compute_md5(sample_binary)

    def test_empty_file(self, tmp_path):
        empty = tmp_path / "empty.bin"
        empty.write_bytes(b"")

        assert compute_md5(empty) == "d41d8cd98f00b204e9800998ecf8427e"

    def test_known_vectors(self, tmp_path):
        vectors = [
            (b"a", "0cc175b9c0f1b6a831c399e269772661"),
            (b"abc", "900150983cd24fb0d6963f7d28e17f72"),
            (b"The quick brown fox jumps over the lazy dog", "9e107d9d372bb6826bd81d3542a419d6"),
        ]
        for content, expected in vectors:
            path = tmp_path / f"{expected[:8]}.bin"
            path.write_bytes(content)

            assert compute_md5(path) == expected

    def test_file_not_found(self):
        with pytest.raises(FileNotFoundError):
            compute_md5(Path("/nonexistent/firmware.bin"))

    def test_read_error_propagates(self):
        with patch("builtins.open", side_effect=OSError("Disk read error")):
            with pytest.raises(OSError, match="Disk read error"):
                compute_md5(Path("/some/firmware.bin"))


@pytest.mark.unit
class TestIsMd5Hex:

    @pytest.mark.parametrize("value", ["d41d8cd98f00b204e9800998ecf8427e", "D41D8CD98F00B204E9800998ECF8427E"])
    def test_valid(self, value):
        assert is_md5_hex(value)

    @pytest.mark.parametrize("value", ["", "abc123", "z" * 32, "a" * 33, None, 12345])
    def test_invalid(self, value):
        assert not is_md5_hex(value)


@pytest.mark.unit
class TestVerifyMd5OrRaise:

    def test_success(self, sample_binary, firmware_md5):
        verify_md5_or_raise(sample_binary, firmware_md5)

    def test_case_insensitive(self, sample_binary, firmware_md5):
        verify_md5_or_raise(sample_binary, firmware_md5.upper())

    def test_mismatch_reports_both_digests(self, sample_binary, firmware_md5):
        wrong = "b" * 32

        with pytest.raises(ValueError) as exc_info:
            verify_md5_or_raise(sample_binary, wrong)

        assert "MD5_MISMATCH" in str(exc_info.value)
        assert wrong in str(exc_info.value)
        assert firmware_md5 in str(exc_info.value)

    def test_invalid_format(self, sample_binary):
        with pytest.raises(ValueError, match="Invalid MD5 format"):
            verify_md5_or_raise(sample_binary, "invalid")

    def test_file_not_found(self):
        with pytest.raises(FileNotFoundError):
            verify_md5_or_raise(Path("/nonexistent/firmware.bin"), "c" * 32)
