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

"""Human-readable HTML report.

A template is a directory under the templates folder. Files ending in
``.tmpl`` are rendered with ``string.Template`` placeholders (``$app_package``,
``$findings``, ...) and written without the suffix; every other file is a
static asset copied as-is. Subdirectories are preserved.
"""

from __future__ import annotations

import html
import logging
import shutil
from pathlib import Path
from string import Template
from typing import TYPE_CHECKING

from apkaudit.config.settings import Config
from apkaudit.errors import ReportGenerationError, TemplateNotFoundError
from apkaudit.models.findings import Finding
from apkaudit.models.report import ResultsView
from apkaudit.reporter.console_out import narrate
from apkaudit.reporter.dispatcher import ReportGenerator

if TYPE_CHECKING:
    from apkaudit.results.aggregator import Results

logger = logging.getLogger(__name__)

TEMPLATE_SUFFIX = ".tmpl"

# (view attribute, section title), most severe first
_TIERS = (
    ("criticals", "Critical"),
    ("highs", "High"),
    ("mediums", "Medium"),
    ("lows", "Low"),
    ("warnings", "Warnings"),
)


def _render_finding(finding: Finding) -> str:
    location = ""
    if finding.file:
        location = html.escape(finding.file)
        if finding.line is not None:
            location += f":{finding.line}"
            if finding.end_line is not None and finding.end_line != finding.line:
                location += f"-{finding.end_line}"
        location = f'<p class="location">{location}</p>'
    code = ""
    if finding.code:
        code = f"<pre><code>{html.escape(finding.code)}</code></pre>"
    return (
        f'<article class="finding {finding.criticality.value}">'
        f"<h3>{html.escape(finding.name)}</h3>"
        f"{location}"
        f"<p>{html.escape(finding.description)}</p>"
        f"{code}"
        f"</article>"
    )


def render_findings(view: ResultsView) -> str:
    """HTML sections for every non-empty tier."""
    sections = []
    for attr, title in _TIERS:
        findings = getattr(view, attr)
        if not findings:
            continue
        body = "\n".join(_render_finding(f) for f in findings)
        sections.append(
            f'<section id="{attr}"><h2>{title} ({len(findings)})</h2>\n{body}\n</section>'
        )
    if not sections:
        return '<p class="clean">No vulnerabilities found.</p>'
    return "\n".join(sections)


def template_context(view: ResultsView) -> dict[str, str]:
    """Placeholder values for a results view. Scalars are HTML-escaped."""
    context: dict[str, str] = {}
    for key, value in view.model_dump(mode="json").items():
        if isinstance(value, (list, dict)):
            continue
        context[key] = html.escape("" if value is None else str(value))
    fingerprint = view.app_fingerprint
    context["fingerprint_md5"] = fingerprint.md5
    context["fingerprint_sha1"] = fingerprint.sha1
    context["fingerprint_sha256"] = fingerprint.sha256
    context["findings"] = render_findings(view)
    return context


class HtmlReport(ReportGenerator):
    """Renders the results view through a template directory."""

    def __init__(self, templates_folder: Path, template: str) -> None:
        self.template_path = templates_folder / template
        if not self.template_path.is_dir():
            raise TemplateNotFoundError(
                f"The template `{template}` does not exist in `{templates_folder}`"
            )

    def generate(self, config: Config, results: Results) -> None:
        output_folder = results.report_folder(config)
        narrate(config, f"Starting HTML report generation in {output_folder}.")
        context = template_context(results.to_view())

        try:
            for source in sorted(self.template_path.rglob("*")):
                if not source.is_file():
                    continue
                relative = source.relative_to(self.template_path)
                destination = output_folder / relative
                destination.parent.mkdir(parents=True, exist_ok=True)
                if source.name.endswith(TEMPLATE_SUFFIX):
                    rendered = Template(source.read_text(encoding="utf-8")).safe_substitute(context)
                    destination = destination.with_name(source.name[: -len(TEMPLATE_SUFFIX)])
                    destination.write_text(rendered, encoding="utf-8", newline="\n")
                else:
                    shutil.copy2(source, destination)
        except (OSError, UnicodeDecodeError) as e:
            raise ReportGenerationError(f"Could not render template {self.template_path}: {e}") from e

        logger.debug("Wrote HTML report to %s", output_folder)
