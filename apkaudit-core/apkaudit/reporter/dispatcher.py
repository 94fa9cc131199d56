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

"""Report generator interface and dispatcher.

Generators form a closed set, one per ``ReportFormat``. The dispatcher runs
the enabled ones in enum order (JSON before HTML). A failing generator is
reported as a warning and the remaining generators still run.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from apkaudit.config.settings import Config
from apkaudit.errors import ReportGenerationError
from apkaudit.models.report import ReportFormat
from apkaudit.reporter.console_out import narrate

if TYPE_CHECKING:
    from apkaudit.results.aggregator import Results

logger = logging.getLogger(__name__)


class ReportGenerator(ABC):
    """Writes one kind of report into the package's report folder."""

    @abstractmethod
    def generate(self, config: Config, results: Results) -> None:
        """Generate the report.

        Raises:
            ReportGenerationError: the report could not be written.
        """
        ...


class ReportDispatcher:
    """Runs the enabled report generators for a finished Results."""

    def create(self, report_format: ReportFormat, config: Config) -> ReportGenerator:
        """Build the generator for a format.

        Raises:
            ReportGenerationError: the generator cannot be built, e.g. the
                HTML template does not exist.
        """
        # Imported here: the generators import this module for ReportGenerator.
        from apkaudit.reporter.html_out import HtmlReport
        from apkaudit.reporter.json_out import JsonReport

        if report_format is ReportFormat.JSON:
            return JsonReport()
        if report_format is ReportFormat.HTML:
            return HtmlReport(config.templates_folder, config.template)
        raise ReportGenerationError(f"No generator for report format {report_format.value}")

    def dispatch(self, config: Config, results: Results) -> list[ReportFormat]:
        """Run every enabled generator. Returns the formats that succeeded."""
        generated: list[ReportFormat] = []
        for report_format in ReportFormat:
            if not config.has_to_generate(report_format):
                continue
            name = report_format.value.upper()
            try:
                generator = self.create(report_format, config)
                generator.generate(config, results)
            except ReportGenerationError as e:
                logger.warning("There was an error generating the %s report: %s", name, e)
                continue
            generated.append(report_format)
            narrate(config, f"{name} report generated for {results.name}.")
        return generated
