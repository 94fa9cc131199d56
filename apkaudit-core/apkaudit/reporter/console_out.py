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

"""Rich terminal output.

Worker threads share one console. Every print goes through a lock so lines
from different packages never interleave.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Any, Iterable, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

if TYPE_CHECKING:
    from apkaudit.config.settings import Config
    from apkaudit.scanner.coordinator import Benchmark, PackageReport


def _make_console() -> Console:
    """Console with soft wrap. No fixed width; uses the live terminal size."""
    return Console(soft_wrap=True)


console = _make_console()

_print_lock = threading.Lock()

_OUTCOME_STYLE = {
    "generated": "green",
    "skipped": "dim",
    "report_skipped": "dim",
    "failed": "red",
}


def _safe_print(*args: Any, **kwargs: Any) -> None:
    kwargs.setdefault("crop", False)
    kwargs.setdefault("overflow", "fold")
    with _print_lock:
        console.print(*args, **kwargs)


def narrate(config: Config, verbose_message: str, message: Optional[str] = None) -> None:
    """Print a stage transition.

    The long form is shown with --verbose, the short form (if any) in normal
    mode, and nothing with --quiet.
    """
    if config.verbose:
        _safe_print(verbose_message, markup=False)
    elif message is not None and not config.quiet:
        _safe_print(message, markup=False)


def print_warning(message: str) -> None:
    _safe_print(f"[yellow]Warning: {escape(message)}[/yellow]")


def print_error(message: str) -> None:
    _safe_print(f"[red]Error: {escape(message)}[/red]")


def print_resource_errors(errors: Iterable[str]) -> None:
    """Report missing files and folders found by config validation."""
    for error in errors:
        print_warning(error)


def print_summary(reports: list[PackageReport]) -> None:
    """Per-package outcome table with finding counts by tier."""
    table = Table(title="Analysis summary", title_justify="left")
    table.add_column("Package", style="bold")
    table.add_column("Outcome")
    table.add_column("Critical", justify="right")
    table.add_column("High", justify="right")
    table.add_column("Medium", justify="right")
    table.add_column("Low", justify="right")
    table.add_column("Warning", justify="right")

    for report in reports:
        style = _OUTCOME_STYLE.get(report.outcome.value, "")
        counts = report.counts
        if counts is None:
            cells = ["-"] * 5
        else:
            cells = [str(counts[tier]) for tier in ("critical", "high", "medium", "low", "warning")]
        table.add_row(
            report.package,
            f"[{style}]{report.outcome.value}[/{style}]" if style else report.outcome.value,
            *cells,
        )
    _safe_print(table)


def print_benchmarks(benchmarks: list[Benchmark]) -> None:
    table = Table(title="Benchmarks", title_justify="left")
    table.add_column("Package", style="bold")
    table.add_column("Stage")
    table.add_column("Time (s)", justify="right")
    for bench in benchmarks:
        table.add_row(bench.package, bench.label, f"{bench.duration:.3f}")
    _safe_print(table)
