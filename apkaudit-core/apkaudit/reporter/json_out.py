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

"""Canonical JSON output for results reports.

Produces deterministic JSON output:
- Sorted keys
- 2-space indentation
- LF line endings
- Trailing newline
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from apkaudit.config.settings import Config
from apkaudit.errors import ReportGenerationError
from apkaudit.reporter.console_out import narrate
from apkaudit.reporter.dispatcher import ReportGenerator

if TYPE_CHECKING:
    from apkaudit.results.aggregator import Results

logger = logging.getLogger(__name__)

RESULTS_FILE = "results.json"


def to_canonical_json(data: dict[str, Any] | Any) -> str:
    """Convert data to canonical JSON string.

    Canonical JSON: sorted keys, 2-space indent, ensure LF, trailing newline.
    """
    if hasattr(data, "model_dump"):
        data = data.model_dump(mode="json")

    result = json.dumps(data, sort_keys=True, indent=2, ensure_ascii=False)
    # Ensure LF line endings
    result = result.replace("\r\n", "\n").replace("\r", "\n")
    # Ensure trailing newline
    if not result.endswith("\n"):
        result += "\n"
    return result


def write_results(results: Results, output_path: Path) -> None:
    """Write the results view as canonical JSON to file."""
    content = to_canonical_json(results.to_view())

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(content, encoding="utf-8", newline="\n")
    logger.debug("Wrote results to %s", output_path)


class JsonReport(ReportGenerator):
    """Machine-readable report: the results view, verbatim, as results.json."""

    def generate(self, config: Config, results: Results) -> None:
        output_path = results.report_folder(config) / RESULTS_FILE
        narrate(config, f"Starting JSON report generation in {output_path}.")
        try:
            write_results(results, output_path)
        except OSError as e:
            raise ReportGenerationError(f"Could not write {output_path}: {e}") from e
