# apkaudit — Android Package Risk Auditor
# Copyright (C) 2026 apkaudit Project Contributors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.

"""Package fingerprinting.

A fingerprint is the MD5, SHA-1 and SHA-256 digest of the raw package
bytes. Identical byte streams always produce identical fingerprints. The
package must also be a well-formed ZIP archive (every APK is one); anything
else is rejected before it reaches the results directory.
"""

from __future__ import annotations

import hashlib
import io
import logging
import zipfile
import zlib
from pathlib import Path
from typing import BinaryIO

from apkaudit.errors import FingerprintFormatError, FingerprintIOError
from apkaudit.models.report import AppFingerprint

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 1 << 16


def _digest_stream(stream: BinaryIO) -> AppFingerprint:
    """Hash a binary stream in chunks with all three algorithms."""
    md5 = hashlib.md5(usedforsecurity=False)
    sha1 = hashlib.sha1(usedforsecurity=False)
    sha256 = hashlib.sha256()
    for chunk in iter(lambda: stream.read(_CHUNK_SIZE), b""):
        md5.update(chunk)
        sha1.update(chunk)
        sha256.update(chunk)
    return AppFingerprint(
        md5=md5.hexdigest(),
        sha1=sha1.hexdigest(),
        sha256=sha256.hexdigest(),
    )


def _check_archive(source: str | Path | BinaryIO, label: str) -> None:
    """Raise FingerprintFormatError unless source is a readable ZIP archive."""
    try:
        with zipfile.ZipFile(source) as archive:
            bad_member = archive.testzip()
    except (
        zipfile.BadZipFile,
        zipfile.LargeZipFile,
        zlib.error,
        EOFError,
        NotImplementedError,
    ) as e:
        raise FingerprintFormatError(f"{label} is not a valid package archive: {e}") from e
    if bad_member is not None:
        raise FingerprintFormatError(
            f"{label} is not a valid package archive: corrupt member {bad_member}"
        )


def fingerprint_bytes(data: bytes) -> AppFingerprint:
    """Fingerprint an in-memory package."""
    _check_archive(io.BytesIO(data), "package data")
    return _digest_stream(io.BytesIO(data))


def compute_fingerprint(package_path: Path) -> AppFingerprint:
    """Fingerprint the package file at package_path.

    Raises:
        FingerprintIOError: the file cannot be read.
        FingerprintFormatError: the file is not a well-formed ZIP archive.
    """
    try:
        with open(package_path, "rb") as f:
            fingerprint = _digest_stream(f)
    except OSError as e:
        raise FingerprintIOError(f"Could not read {package_path}: {e}") from e

    try:
        _check_archive(package_path, str(package_path))
    except OSError as e:
        raise FingerprintIOError(f"Could not read {package_path}: {e}") from e

    logger.debug("Fingerprinted %s (sha256:%s)", package_path, fingerprint.sha256)
    return fingerprint
