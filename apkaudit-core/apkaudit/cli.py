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

"""apkaudit CLI: Typer entry point.

    apkaudit [OPTIONS] [PACKAGE]

Analyzes PACKAGE (resolved under the downloads folder, ``.apk`` appended) or,
with --test-all, every package in the downloads folder.
"""

from __future__ import annotations

import logging
import webbrowser
from typing import Optional

import typer

from apkaudit import __version__
from apkaudit.config.loader import resolve, validate
from apkaudit.config.settings import CliOverrides, Config
from apkaudit.errors import ApkAuditError
from apkaudit.models.report import ReportFormat
from apkaudit.reporter.console_out import (
    console,
    print_benchmarks,
    print_error,
    print_resource_errors,
    print_summary,
)
from apkaudit.scanner.coordinator import PackageOutcome, PackageReport, run_packages

app = typer.Typer(
    name="apkaudit",
    help="apkaudit: Android package risk auditor. Classifies the permissions of .apk files and writes JSON and HTML reports.",
    add_completion=False,
)

logger = logging.getLogger("apkaudit")

_HTML_INDEX = "index.html"


def _configure_logging(verbose: bool, quiet: bool) -> None:
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _open_reports(config: Config, reports: list[PackageReport]) -> None:
    if not config.has_to_generate(ReportFormat.HTML):
        return
    for report in reports:
        if report.outcome is not PackageOutcome.GENERATED or report.report_folder is None:
            continue
        index = (report.report_folder / _HTML_INDEX).resolve()
        if not index.exists():
            logger.warning("No HTML report to open for %s", report.package)
            continue
        if not webbrowser.open(index.as_uri()):
            logger.warning("Could not open %s in a browser", index)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"apkaudit {__version__}")
        raise typer.Exit()


@app.command()
def main_command(
    package: Optional[str] = typer.Argument(
        None, help="Package to analyze, relative to the downloads folder (.apk is optional)."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Narrate every stage."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only print warnings and errors."),
    force: bool = typer.Option(False, "--force", help="Redo packages that already have results."),
    bench: bool = typer.Option(False, "--bench", help="Print per-stage timings."),
    open_report: bool = typer.Option(False, "--open", help="Open generated HTML reports."),
    test_all: bool = typer.Option(
        False, "--test-all", help="Analyze every .apk in the downloads folder."
    ),
    threads: Optional[str] = typer.Option(None, "--threads", "-t", help="Worker threads (1-255)."),
    downloads: Optional[str] = typer.Option(None, "--downloads", help="Downloads folder."),
    dist: Optional[str] = typer.Option(None, "--dist", help="Decompiled output folder."),
    results: Optional[str] = typer.Option(None, "--results", help="Results folder."),
    apktool: Optional[str] = typer.Option(None, "--apktool", help="Apktool JAR file."),
    dex2jar: Optional[str] = typer.Option(None, "--dex2jar", help="Dex2Jar folder."),
    jd_cmd: Optional[str] = typer.Option(None, "--jd-cmd", help="jd-cmd JAR file."),
    template: Optional[str] = typer.Option(None, "--template", help="HTML report template name."),
    rules: Optional[str] = typer.Option(None, "--rules", help="Rules JSON file."),
    json_report: bool = typer.Option(True, "--json/--no-json", help="Write results.json."),
    html_report: bool = typer.Option(True, "--html/--no-html", help="Write the HTML report."),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show the version."
    ),
) -> None:
    """Audit Android packages against the permission risk rules."""
    if verbose and quiet:
        raise typer.BadParameter("--verbose and --quiet cannot be used together")
    if package is None and not test_all:
        raise typer.BadParameter("a package name is required unless --test-all is given")

    _configure_logging(verbose, quiet)

    cli = CliOverrides(
        verbose=verbose,
        quiet=quiet,
        force=force,
        bench=bench,
        open=open_report,
        test_all=test_all,
        threads=threads,
        downloads=downloads,
        dist=dist,
        results=results,
        apktool=apktool,
        dex2jar=dex2jar,
        jd_cmd=jd_cmd,
        template=template,
        rules=rules,
        package=package,
        json_report=json_report,
        html_report=html_report,
    )

    try:
        config = resolve(cli)
    except ApkAuditError as e:
        print_error(str(e))
        raise typer.Exit(code=e.exit_code)

    print_resource_errors(validate(config))

    if not config.app_packages:
        if not quiet:
            console.print("No packages to analyze.")
        return

    reports = run_packages(config)

    if not quiet:
        print_summary(reports)
    if config.bench:
        print_benchmarks([b for report in reports for b in report.benchmarks])
    if config.open:
        _open_reports(config, reports)

    failed = [r.package for r in reports if r.outcome is PackageOutcome.FAILED]
    if failed:
        logger.error("%d package(s) failed: %s", len(failed), ", ".join(failed))
        raise typer.Exit(code=1)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
