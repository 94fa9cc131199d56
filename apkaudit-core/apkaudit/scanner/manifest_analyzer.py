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

"""Manifest permission classification.

Reads the text ``AndroidManifest.xml`` a decompiler leaves in
``dist/<package name>/``, fills the application metadata of the Results and
classifies every requested permission:

- cataloged permission with a configured rule -> finding with the rule's
  criticality, label and description
- name outside the catalog -> finding with the unknown-permission default
- cataloged permission without a rule -> nothing
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Optional

from apkaudit.config.settings import Config, package_name
from apkaudit.errors import UnknownPermissionError
from apkaudit.models.findings import Criticality, Finding
from apkaudit.models.permissions import Permission
from apkaudit.reporter.console_out import narrate
from apkaudit.results.aggregator import Results

logger = logging.getLogger(__name__)

ANDROID_NS = "http://schemas.android.com/apk/res/android"
MANIFEST_FILE = "AndroidManifest.xml"

_PERMISSION_TAGS = ("uses-permission", "uses-permission-sdk-23", "uses-permission-sdk-m")


def _android_attr(element: ET.Element, attr: str) -> Optional[str]:
    """Get an android: namespaced attribute."""
    return element.attrib.get(f"{{{ANDROID_NS}}}{attr}")


def _parse_int(value: Optional[str], field: str, manifest: Path) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        logger.warning("Invalid %s '%s' in %s", field, value, manifest)
        return None


def load_strings(app_folder: Path) -> dict[str, str]:
    """Default string resources (res/values/strings.xml), if decompiled."""
    strings_path = app_folder / "res" / "values" / "strings.xml"
    if not strings_path.exists():
        return {}
    try:
        root = ET.parse(strings_path).getroot()
    except (ET.ParseError, OSError) as e:
        logger.warning("Could not read string resources %s: %s", strings_path, e)
        return {}
    return {
        s.attrib["name"]: "".join(s.itertext())
        for s in root.findall("string")
        if "name" in s.attrib
    }


def _resolve_string(value: Optional[str], strings: dict[str, str]) -> str:
    if value is None:
        return ""
    if value.startswith("@string/"):
        return strings.get(value[len("@string/"):], value)
    return value


def _locate(lines: list[str], needle: str) -> tuple[Optional[int], Optional[str]]:
    """1-based line number and text of the first line mentioning needle."""
    quoted = f'"{needle}"'
    for number, line in enumerate(lines, start=1):
        if quoted in line:
            return number, line.strip()
    return None, None


def classify_permission(config: Config, name: str) -> Optional[tuple[str, str, Criticality]]:
    """Return (label, description, criticality) for a requested permission, or None."""
    try:
        permission = Permission.from_name(name)
    except UnknownPermissionError:
        unknown = config.unknown_permission
        return f"Unknown permission {name}", unknown.description, unknown.criticality

    rule = config.permissions.get(permission)
    if rule is None:
        return None
    return rule.label, rule.description, rule.criticality


def analyze_manifest(config: Config, package_path: Path, results: Results) -> None:
    """Scanner: manifest metadata and permission findings for one package."""
    app_folder = config.dist_folder / package_name(package_path)
    manifest = app_folder / MANIFEST_FILE
    if not manifest.exists():
        logger.warning(
            "No decompiled manifest at %s; skipping permission analysis for %s",
            manifest,
            results.name,
        )
        return

    try:
        data = manifest.read_bytes()
        root = ET.fromstring(data)
    except (OSError, ET.ParseError) as e:
        logger.warning("Could not parse %s: %s", manifest, e)
        return

    strings = load_strings(app_folder)

    results.app_package = root.attrib.get("package", "")
    results.app_version = _android_attr(root, "versionName") or ""
    version_code = _parse_int(_android_attr(root, "versionCode"), "versionCode", manifest)
    if version_code is not None:
        results.app_version_number = version_code

    uses_sdk = root.find("uses-sdk")
    if uses_sdk is not None:
        min_sdk = _parse_int(_android_attr(uses_sdk, "minSdkVersion"), "minSdkVersion", manifest)
        if min_sdk is not None:
            results.app_min_sdk = min_sdk
        results.app_target_sdk = _parse_int(
            _android_attr(uses_sdk, "targetSdkVersion"), "targetSdkVersion", manifest
        )

    application = root.find("application")
    if application is not None:
        results.app_label = _resolve_string(_android_attr(application, "label"), strings)
        results.app_description = _resolve_string(
            _android_attr(application, "description"), strings
        )

    lines = data.decode("utf-8", errors="replace").splitlines()
    requested = 0
    for tag in _PERMISSION_TAGS:
        for element in root.findall(tag):
            name = _android_attr(element, "name")
            if not name:
                continue
            requested += 1
            classification = classify_permission(config, name)
            if classification is None:
                continue
            label, description, criticality = classification
            line, code = _locate(lines, name)
            results.add_finding(
                Finding(
                    criticality=criticality,
                    name=label,
                    description=description,
                    file=MANIFEST_FILE,
                    line=line,
                    end_line=line,
                    code=code,
                )
            )

    narrate(
        config,
        f"Manifest analyzed for {results.name}: {requested} permissions requested.",
    )
