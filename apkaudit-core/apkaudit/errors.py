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

"""Error taxonomy.

Run-fatal errors carry the process exit code the CLI terminates with.
Package-fatal errors abort a single package; the coordinator logs them and
moves on to the next package. Report generation errors are recovered by the
dispatcher. Invalid configuration fields are never raised: they are
recorded as warnings on the Config.
"""

from __future__ import annotations


class ApkAuditError(Exception):
    """Base class for all apkaudit errors."""

    exit_code: int = 1


# ── Run-fatal ──


class ConfigParseError(ApkAuditError):
    """A configuration file is not a valid YAML mapping."""

    exit_code = 10

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"There was an error parsing the {path} file: {reason}")
        self.path = path
        self.reason = reason


class DownloadsFolderError(ApkAuditError):
    """The downloads folder could not be listed for --test-all."""

    exit_code = 11


# ── Package-fatal ──


class PackageError(ApkAuditError):
    """An error that aborts processing of a single package."""


class ResultsDirectoryError(PackageError):
    """A results or report directory could not be created or removed."""


class FingerprintError(PackageError):
    """The package could not be fingerprinted."""


class FingerprintIOError(FingerprintError):
    """The package file could not be read."""


class FingerprintFormatError(FingerprintError):
    """The package is not a well-formed ZIP archive."""


# ── Recovered ──


class ReportGenerationError(ApkAuditError):
    """A single report generator failed."""


class TemplateNotFoundError(ReportGenerationError):
    """The configured HTML template does not exist under the templates folder."""


class UnknownPermissionError(ApkAuditError, ValueError):
    """A permission name is not part of the permission catalog."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown permission: {name}")
        self.name = name
