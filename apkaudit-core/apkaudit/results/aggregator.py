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

"""Per-package results aggregation.

A ``Results`` collects the findings of one package into five criticality
tiers. Each tier deduplicates and orders its findings by their own identity,
so the serialized output is the same whatever order scanners (or worker
threads) produced the findings in.

Two idempotency checks guard the filesystem:

- ``Results.init`` refuses to start when ``results/<package name>`` already
  exists and ``force`` is off.
- ``Results.generate_report`` applies the same rule to the report directory.
"""

from __future__ import annotations

import logging
import shutil
from datetime import datetime
from email.utils import format_datetime
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from apkaudit.config.settings import Config, package_name
from apkaudit.crypto.hasher import compute_fingerprint
from apkaudit.errors import ResultsDirectoryError
from apkaudit.models.findings import Criticality, Finding, FindingSet
from apkaudit.models.report import AppFingerprint, ResultsView
from apkaudit.reporter.console_out import narrate

if TYPE_CHECKING:
    from apkaudit.reporter.dispatcher import ReportDispatcher

logger = logging.getLogger(__name__)


class Results:
    """Mutable findings and application metadata for one package."""

    def __init__(self, name: str, fingerprint: AppFingerprint) -> None:
        self.name = name
        self.app_fingerprint = fingerprint

        self.app_package = ""
        self.app_label = ""
        self.app_description = ""
        self.app_version = ""
        self.app_version_number = 0
        self.app_min_sdk = 0
        self.app_target_sdk: Optional[int] = None

        self._tiers: dict[Criticality, FindingSet] = {c: FindingSet() for c in Criticality}

    @classmethod
    def init(cls, config: Config, package_path: Path) -> Optional[Results]:
        """Start aggregating results for a package.

        Returns None, without touching the filesystem, when the package's
        results directory exists and ``force`` is off.

        Raises:
            ResultsDirectoryError: a stale results directory could not be removed.
            FingerprintError: the package could not be fingerprinted.
        """
        name = package_name(package_path)
        path = config.results_folder / name
        if path.exists() and not config.force:
            narrate(
                config,
                f"The results for {name} have already been generated. No need to "
                f"generate them again.",
                f"Skipping result generation for {name}.",
            )
            return None

        if path.exists():
            try:
                shutil.rmtree(path)
            except OSError as e:
                raise ResultsDirectoryError(
                    f"An error occurred when trying to delete the results folder {path}: {e}"
                ) from e

        fingerprint = compute_fingerprint(package_path)
        narrate(
            config,
            f"The results struct for {name} has been created. All the findings will "
            f"now be recorded and written to the result files when the analysis ends.",
            f"Results struct created for {name}.",
        )
        return cls(name, fingerprint)

    # ── Findings ──

    def add_finding(self, finding: Finding) -> None:
        """Record a finding in the tier matching its criticality."""
        self._tiers[finding.criticality].add(finding)

    def tier(self, criticality: Criticality) -> FindingSet:
        return self._tiers[criticality]

    def counts(self) -> dict[str, int]:
        """Number of findings per tier, keyed by criticality name."""
        return {c.value: len(s) for c, s in self._tiers.items()}

    @property
    def total(self) -> int:
        return sum(len(s) for s in self._tiers.values())

    # ── Reports ──

    def report_folder(self, config: Config) -> Path:
        """Reports share the directory ``init`` checks, results/<package name>."""
        return config.results_folder / self.name

    def generate_report(self, config: Config, dispatcher: ReportDispatcher) -> bool:
        """Write every enabled report for this package.

        Returns False when the report directory already exists and ``force``
        is off, True once the dispatcher has run.

        Raises:
            ResultsDirectoryError: the report directory could not be created.
        """
        path = self.report_folder(config)
        if path.exists() and not config.force:
            narrate(
                config,
                f"The report for {self.name} has already been generated. There "
                f"is no need to do it again.",
                f"Skipping report generation for {self.name}.",
            )
            return False

        if path.exists():
            narrate(config, f"The report folder {path} exists; removing it.")
            try:
                shutil.rmtree(path)
            except OSError as e:
                logger.warning("There was an error when removing the report folder %s: %s", path, e)

        narrate(config, f"Starting report generation. Creating the report folder {path}.")
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ResultsDirectoryError(
                f"An error occurred when trying to create the report folder {path}: {e}"
            ) from e

        dispatcher.dispatch(config, self)
        return True

    # ── Serialization ──

    def to_view(self, now: Optional[datetime] = None) -> ResultsView:
        """Build the serialization view; counts are derived from the tiers here."""
        if now is None:
            now = datetime.now().astimezone()

        tiers = {c: list(s) for c, s in self._tiers.items()}
        return ResultsView(
            now=now.isoformat(),
            now_rfc2822=format_datetime(now),
            now_rfc3339=now.isoformat(timespec="seconds"),
            app_package=self.app_package,
            app_label=self.app_label,
            app_description=self.app_description,
            app_version=self.app_version,
            app_version_number=self.app_version_number,
            app_min_sdk=self.app_min_sdk,
            app_target_sdk=self.app_target_sdk,
            app_fingerprint=self.app_fingerprint,
            total_vulnerabilities=sum(len(findings) for findings in tiers.values()),
            criticals=tiers[Criticality.CRITICAL],
            criticals_len=len(tiers[Criticality.CRITICAL]),
            highs=tiers[Criticality.HIGH],
            highs_len=len(tiers[Criticality.HIGH]),
            mediums=tiers[Criticality.MEDIUM],
            mediums_len=len(tiers[Criticality.MEDIUM]),
            lows=tiers[Criticality.LOW],
            lows_len=len(tiers[Criticality.LOW]),
            warnings=tiers[Criticality.WARNING],
            warnings_len=len(tiers[Criticality.WARNING]),
        )
