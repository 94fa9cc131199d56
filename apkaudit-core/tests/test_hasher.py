"""Tests for package fingerprinting."""

import hashlib
import io
import zipfile

import pytest

from apkaudit.crypto.hasher import compute_fingerprint, fingerprint_bytes
from apkaudit.errors import FingerprintError, FingerprintFormatError, FingerprintIOError


class TestFingerprint:
    def test_digests_match_hashlib(self, tmp_path, make_apk):
        package = make_apk(tmp_path / "app.apk")
        data = package.read_bytes()
        fingerprint = compute_fingerprint(package)
        assert fingerprint.md5 == hashlib.md5(data).hexdigest()
        assert fingerprint.sha1 == hashlib.sha1(data).hexdigest()
        assert fingerprint.sha256 == hashlib.sha256(data).hexdigest()

    def test_identical_bytes_identical_fingerprint(self, tmp_path, make_apk):
        first = make_apk(tmp_path / "a.apk")
        second = tmp_path / "copy" / "b.apk"
        second.parent.mkdir()
        second.write_bytes(first.read_bytes())
        assert compute_fingerprint(first) == compute_fingerprint(second)

    def test_different_content_different_fingerprint(self, tmp_path, make_apk):
        a = make_apk(tmp_path / "a.apk", payload=b"one")
        b = make_apk(tmp_path / "b.apk", payload=b"two")
        assert compute_fingerprint(a).sha256 != compute_fingerprint(b).sha256

    def test_in_memory_matches_file(self, tmp_path, make_apk):
        package = make_apk(tmp_path / "app.apk")
        assert fingerprint_bytes(package.read_bytes()) == compute_fingerprint(package)


class TestFingerprintFailures:
    def test_missing_file(self, tmp_path):
        with pytest.raises(FingerprintIOError):
            compute_fingerprint(tmp_path / "missing.apk")

    def test_not_an_archive(self, tmp_path):
        package = tmp_path / "text.apk"
        package.write_text("definitely not a zip file")
        with pytest.raises(FingerprintFormatError):
            compute_fingerprint(package)

    def test_truncated_archive(self, tmp_path, make_apk):
        package = make_apk(tmp_path / "app.apk")
        data = package.read_bytes()
        package.write_bytes(data[: len(data) // 2])
        with pytest.raises(FingerprintFormatError):
            compute_fingerprint(package)

    def test_corrupt_member(self):
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_STORED) as archive:
            archive.writestr("classes.dex", b"A" * 64)
        data = bytearray(buffer.getvalue())
        # Flip a byte of the stored member so its CRC no longer matches.
        offset = data.index(b"A" * 64)
        data[offset] = ord("B")
        with pytest.raises(FingerprintFormatError):
            fingerprint_bytes(bytes(data))

    def test_errors_share_a_base(self):
        assert issubclass(FingerprintIOError, FingerprintError)
        assert issubclass(FingerprintFormatError, FingerprintError)
