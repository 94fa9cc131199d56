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

"""Package coordinator: runs the per-package pipeline on a worker pool.

For each package:

1. optional decompiler hook; if it regenerated the package's artifacts,
   ``force`` is raised for this package only
2. ``Results.init`` (skip if already analyzed)
3. every scanner feeds findings into the package's Results
4. ``Results.generate_report``

Each package runs on its own Config copy and owns its Results, so nothing
mutable is shared between workers. A package that fails is reported and the
rest of the run continues.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Iterator, Optional, Sequence

from apkaudit.config.settings import Config, package_name
from apkaudit.errors import PackageError
from apkaudit.reporter.dispatcher import ReportDispatcher
from apkaudit.results.aggregator import Results
from apkaudit.scanner.manifest_analyzer import analyze_manifest

logger = logging.getLogger(__name__)

# Feeds findings for one package into its Results.
Scanner = Callable[[Config, Path, Results], None]

# Produces the decompiled artifacts of a package under dist/<name>/.
# Returns True when it (re)generated them.
Decompiler = Callable[[Config, Path], bool]

DEFAULT_SCANNERS: tuple[Scanner, ...] = (analyze_manifest,)


class PackageOutcome(str, Enum):
    GENERATED = "generated"
    SKIPPED = "skipped"
    REPORT_SKIPPED = "report_skipped"
    FAILED = "failed"


@dataclass
class Benchmark:
    package: str
    label: str
    duration: float


@dataclass
class PackageReport:
    """What happened to one package."""

    package: str
    outcome: PackageOutcome
    counts: Optional[dict[str, int]] = None
    report_folder: Optional[Path] = None
    error: Optional[str] = None
    benchmarks: list[Benchmark] = field(default_factory=list)


@contextmanager
def _stage(benchmarks: list[Benchmark], package: str, label: str) -> Iterator[None]:
    start = time.perf_counter()
    try:
        yield
    finally:
        benchmarks.append(Benchmark(package, label, time.perf_counter() - start))


def analyze_package(
    config: Config,
    package_path: Path,
    scanners: Sequence[Scanner] = DEFAULT_SCANNERS,
    dispatcher: Optional[ReportDispatcher] = None,
    decompiler: Optional[Decompiler] = None,
) -> PackageReport:
    """Run the full pipeline for one package.

    Package-level errors are turned into a FAILED report.
    """
    name = package_name(package_path)
    config = config.for_package()
    if dispatcher is None:
        dispatcher = ReportDispatcher()
    benchmarks: list[Benchmark] = []

    try:
        if decompiler is not None:
            with _stage(benchmarks, name, "Decompilation"):
                if decompiler(config, package_path):
                    config.set_force()

        with _stage(benchmarks, name, "Results initialization"):
            results = Results.init(config, package_path)
        if results is None:
            return PackageReport(name, PackageOutcome.SKIPPED, benchmarks=benchmarks)

        for scanner in scanners:
            label = getattr(scanner, "__name__", type(scanner).__name__)
            with _stage(benchmarks, name, label):
                scanner(config, package_path, results)

        with _stage(benchmarks, name, "Report generation"):
            generated = results.generate_report(config, dispatcher)
    except PackageError as e:
        logger.error("Analysis of %s failed: %s", name, e)
        return PackageReport(name, PackageOutcome.FAILED, error=str(e), benchmarks=benchmarks)
    finally:
        config.reset_force()

    return PackageReport(
        name,
        PackageOutcome.GENERATED if generated else PackageOutcome.REPORT_SKIPPED,
        counts=results.counts(),
        report_folder=results.report_folder(config),
        benchmarks=benchmarks,
    )


def run_packages(
    config: Config,
    scanners: Sequence[Scanner] = DEFAULT_SCANNERS,
    dispatcher: Optional[ReportDispatcher] = None,
    decompiler: Optional[Decompiler] = None,
) -> list[PackageReport]:
    """Analyze every configured package on ``config.threads`` workers.

    Reports are returned in the order the packages were configured.
    """
    if dispatcher is None:
        dispatcher = ReportDispatcher()

    packages = list(config.app_packages)
    workers = max(1, min(config.threads, len(packages) or 1))
    logger.debug("Analyzing %d packages on %d threads", len(packages), workers)

    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = [
            executor.submit(analyze_package, config, package, scanners, dispatcher, decompiler)
            for package in packages
        ]

        reports = []
        for package, future in zip(packages, futures):
            try:
                reports.append(future.result())
            except Exception as e:
                # Scanner hooks are external code; one crash must not end the run.
                logger.exception("Unexpected error analyzing %s", package)
                reports.append(
                    PackageReport(package_name(package), PackageOutcome.FAILED, error=str(e))
                )
    return reports
