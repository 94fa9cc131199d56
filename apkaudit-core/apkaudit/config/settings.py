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

"""Run configuration model and compiled-in defaults.

The defaults depend on the host: on unix-like systems a system-wide rule
catalog and a shared install prefix (vendor tools, templates) replace the
working-directory defaults when they exist. Host probing goes through an
``Environment`` so tests can substitute a fake one.
"""

from __future__ import annotations

import os
import sys
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from apkaudit.models.report import ReportFormat
from apkaudit.models.rules import RuleTable, UnknownPermissionDefault

MAX_THREADS = 255
DEFAULT_THREADS = 2

PACKAGE_EXTENSION = ".apk"

SYSTEM_CONFIG_FILE = Path("/etc/apkaudit/config.yaml")
LOCAL_CONFIG_FILE = Path("config.yaml")
SYSTEM_RULES_FILE = Path("/etc/apkaudit/rules.json")

BUNDLED_TEMPLATES = Path(__file__).parent.parent / "templates"
DEFAULT_TEMPLATE = "default"


class Environment(ABC):
    """Host probe used while building the default configuration."""

    system_config_file: Path = SYSTEM_CONFIG_FILE
    local_config_file: Path = LOCAL_CONFIG_FILE

    @abstractmethod
    def is_unix(self) -> bool:
        """True when the host has system-wide configuration locations."""
        ...

    @abstractmethod
    def is_macos(self) -> bool:
        ...

    def exists(self, path: Path) -> bool:
        return path.exists()

    def share_path(self) -> Path:
        """Shared install prefix for vendor tools and templates."""
        return Path("/usr/local/apkaudit" if self.is_macos() else "/usr/share/apkaudit")


class SystemEnvironment(Environment):
    """The real host."""

    def is_unix(self) -> bool:
        return os.name == "posix"

    def is_macos(self) -> bool:
        return sys.platform == "darwin"


class Config(BaseModel):
    """Fully resolved configuration for one run.

    Built once by ``apkaudit.config.loader.resolve`` and read-only afterwards,
    except for ``force``, which a package may raise transiently with
    ``set_force`` and restore with ``reset_force``. Workers do that on their
    own ``for_package`` copy.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    app_packages: list[Path] = Field(default_factory=list)

    verbose: bool = False
    quiet: bool = False
    overall_force: bool = False
    force: bool = False
    bench: bool = False
    open: bool = False

    threads: int = DEFAULT_THREADS

    downloads_folder: Path = Path(".")
    dist_folder: Path = Path("dist")
    results_folder: Path = Path("results")
    apktool_file: Path = Path("vendor") / "apktool_2.2.0.jar"
    dex2jar_folder: Path = Path("vendor") / "dex2jar-2.1-SNAPSHOT"
    jd_cmd_file: Path = Path("vendor") / "jd-cmd.jar"
    templates_folder: Path = BUNDLED_TEMPLATES
    template: str = DEFAULT_TEMPLATE
    rules_json: Path = Path("rules.json")

    unknown_permission: UnknownPermissionDefault = Field(
        default_factory=UnknownPermissionDefault
    )
    permissions: RuleTable = Field(default_factory=RuleTable)
    report_formats: list[ReportFormat] = Field(
        default_factory=lambda: [ReportFormat.JSON, ReportFormat.HTML]
    )

    loaded_files: list[Path] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @property
    def template_path(self) -> Path:
        return self.templates_folder / self.template

    def set_force(self) -> None:
        """Force regeneration for the package currently being processed."""
        self.force = True

    def reset_force(self) -> None:
        """Restore ``force`` to the run-wide value."""
        self.force = self.overall_force

    def for_package(self) -> Config:
        """Shallow copy a worker may toggle ``force`` on."""
        return self.model_copy()

    def has_to_generate(self, report_format: ReportFormat) -> bool:
        return report_format in self.report_formats


class CliOverrides(BaseModel):
    """Already-parsed command-line flags and values."""

    verbose: bool = False
    quiet: bool = False
    force: bool = False
    bench: bool = False
    open: bool = False
    test_all: bool = False

    threads: Optional[Union[int, str]] = None
    downloads: Optional[str] = None
    dist: Optional[str] = None
    results: Optional[str] = None
    apktool: Optional[str] = None
    dex2jar: Optional[str] = None
    jd_cmd: Optional[str] = None
    template: Optional[str] = None
    rules: Optional[str] = None

    package: Optional[str] = None

    json_report: bool = True
    html_report: bool = True


def default_config(env: Environment) -> Config:
    """Compiled-in defaults, adjusted for the host described by env."""
    config = Config()
    if not env.is_unix():
        return config

    if env.exists(SYSTEM_RULES_FILE):
        config.rules_json = SYSTEM_RULES_FILE

    share_path = env.share_path()
    if env.exists(share_path):
        config.apktool_file = share_path / "vendor" / "apktool_2.2.0.jar"
        config.dex2jar_folder = share_path / "vendor" / "dex2jar-2.1-SNAPSHOT"
        config.jd_cmd_file = share_path / "vendor" / "jd-cmd.jar"
        config.templates_folder = share_path / "templates"
    return config


def package_name(package_path: Union[str, Path]) -> str:
    """Name results are filed under: the package file name without extension."""
    return Path(package_path).stem
