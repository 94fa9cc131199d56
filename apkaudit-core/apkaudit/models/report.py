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

"""Pydantic models for the per-package results report (results.json)."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from apkaudit import __version__
from apkaudit.models.findings import Finding


class AppFingerprint(BaseModel):
    """Content-derived identity of a package.

    Used to recognize the same package bytes across runs. Not a trust
    credential.
    """

    md5: str
    sha1: str
    sha256: str


class ResultsView(BaseModel):
    """Fixed serialization schema of one package's results.

    Tier counts and the total are computed when the view is built from the
    live finding sets; nothing here is stored on the Results itself.
    """

    tool_version: str = __version__
    now: str
    now_rfc2822: str
    now_rfc3339: str

    app_package: str = ""
    app_label: str = ""
    app_description: str = ""
    app_version: str = ""
    app_version_number: int = 0
    app_min_sdk: int = 0
    app_target_sdk: Optional[int] = None
    app_fingerprint: AppFingerprint

    total_vulnerabilities: int = 0
    criticals: list[Finding] = Field(default_factory=list)
    criticals_len: int = 0
    highs: list[Finding] = Field(default_factory=list)
    highs_len: int = 0
    mediums: list[Finding] = Field(default_factory=list)
    mediums_len: int = 0
    lows: list[Finding] = Field(default_factory=list)
    lows_len: int = 0
    warnings: list[Finding] = Field(default_factory=list)
    warnings_len: int = 0


class ReportFormat(str, Enum):
    """Report generators, in the order the dispatcher runs them."""

    JSON = "json"
    HTML = "html"
