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

"""Layered configuration resolution.

Layers are applied in order, each overriding the previous one field by
field:

1. compiled-in defaults (``default_config``)
2. the system-wide ``/etc/apkaudit/config.yaml`` (unix only)
3. ``config.yaml`` in the working directory
4. command-line overrides

Every field is validated before assignment. An invalid field keeps the value
of the previous layer and records a warning on the Config; only a file that
is not valid YAML (or not a mapping) aborts the run.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

import yaml

from apkaudit.config.settings import (
    MAX_THREADS,
    PACKAGE_EXTENSION,
    CliOverrides,
    Config,
    Environment,
    SystemEnvironment,
    default_config,
)
from apkaudit.errors import ConfigParseError, DownloadsFolderError, UnknownPermissionError
from apkaudit.models.findings import Criticality
from apkaudit.models.permissions import Permission
from apkaudit.models.report import ReportFormat
from apkaudit.models.rules import PermissionRule, UnknownPermissionDefault

logger = logging.getLogger(__name__)

# config key -> (Config attribute, required file extension)
_PATH_FIELDS: dict[str, tuple[str, Optional[str]]] = {
    "downloads_folder": ("downloads_folder", None),
    "dist_folder": ("dist_folder", None),
    "results_folder": ("results_folder", None),
    "apktool_file": ("apktool_file", ".jar"),
    "dex2jar_folder": ("dex2jar_folder", None),
    "jd_cmd_file": ("jd_cmd_file", ".jar"),
    "templates_folder": ("templates_folder", None),
    "rules_json": ("rules_json", ".json"),
}

# CLI option -> config key
_CLI_PATH_OPTIONS: dict[str, str] = {
    "downloads": "downloads_folder",
    "dist": "dist_folder",
    "results": "results_folder",
    "apktool": "apktool_file",
    "dex2jar": "dex2jar_folder",
    "jd_cmd": "jd_cmd_file",
    "rules": "rules_json",
}

_PERMISSION_FORMAT = (
    "- name: unknown|permission.name\n"
    "  criticality: warning|low|medium|high|critical\n"
    "  label: Permission label\n"
    "  description: Long description to explain the vulnerability"
)

_UNKNOWN_PERMISSION_FORMAT = (
    "- name: unknown\n"
    "  criticality: warning|low|medium|high|critical\n"
    "  description: Long description to explain the vulnerability"
)


def _warn(config: Config, message: str) -> None:
    """Record a non-fatal configuration problem."""
    config.warnings.append(message)
    logger.warning(message)


# ── Scalar fields ──


def parse_threads(value: Any) -> Optional[int]:
    """Return value as a thread count in [1, MAX_THREADS], or None if invalid."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        threads = value
    elif isinstance(value, str):
        try:
            threads = int(value.strip(), 10)
        except ValueError:
            return None
    else:
        return None
    if 1 <= threads <= MAX_THREADS:
        return threads
    return None


def load_threads(config: Config, value: Any, source: str) -> None:
    threads = parse_threads(value)
    if threads is None:
        _warn(
            config,
            f"The 'threads' option in {source} must be an integer between 1 and "
            f"{MAX_THREADS}. Using {config.threads}.",
        )
        return
    config.threads = threads


def load_path(config: Config, key: str, value: Any, source: str) -> None:
    """Load one of the path-like options, checking its extension if it has one."""
    attr, extension = _PATH_FIELDS[key]
    if not isinstance(value, str) or not value.strip():
        _warn(
            config,
            f"The '{key}' option in {source} must be a non-empty string. "
            f"Using {getattr(config, attr)}.",
        )
        return
    if extension is not None and Path(value).suffix.lower() != extension:
        _warn(
            config,
            f"The '{key}' option in {source} must point to a {extension[1:].upper()} "
            f"file. Using {getattr(config, attr)}.",
        )
        return
    setattr(config, attr, Path(value))


def load_template(config: Config, value: Any, source: str) -> None:
    if not isinstance(value, str) or not value.strip():
        _warn(
            config,
            f"The 'template' option in {source} must be a non-empty string. "
            f"Using {config.template}.",
        )
        return
    config.template = value


# ── Permissions ──


def load_permissions(config: Config, value: Any, source: str) -> None:
    """Load the ``permissions`` list into the rule table.

    Each bad declaration is reported and skipped; the rest are still loaded.
    A second rule for an already configured permission is dropped silently.
    """
    if not isinstance(value, list):
        _warn(
            config,
            f"The 'permissions' option in {source} must be a list of permission "
            f"declarations:\n{_PERMISSION_FORMAT}",
        )
        return

    for declaration in value:
        _load_permission(config, declaration, source)


def _load_permission(config: Config, declaration: Any, source: str) -> None:
    format_warning = (
        f"Invalid permission declaration in {source}. The format must be the "
        f"following:\n{_PERMISSION_FORMAT}\nSkipping it."
    )
    if not isinstance(declaration, dict):
        _warn(config, format_warning)
        return

    name = declaration.get("name")
    criticality_text = declaration.get("criticality")
    description = declaration.get("description")
    if not isinstance(name, str) or not isinstance(criticality_text, str):
        _warn(config, format_warning)
        return

    try:
        criticality = Criticality.parse(criticality_text)
    except ValueError as e:
        _warn(config, f"Invalid criticality for permission '{name}' in {source}: {e}. Skipping it.")
        return

    if not isinstance(description, str):
        _warn(config, format_warning)
        return

    if name == "unknown":
        if len(declaration) != 3:
            _warn(
                config,
                f"The format for the unknown permission in {source} is the "
                f"following:\n{_UNKNOWN_PERMISSION_FORMAT}\nSkipping it.",
            )
            return
        config.unknown_permission = UnknownPermissionDefault(
            criticality=criticality, description=description
        )
        return

    if len(declaration) != 4:
        _warn(config, format_warning)
        return

    try:
        permission = Permission.from_name(name)
    except UnknownPermissionError:
        _warn(
            config,
            f"Unknown permission in {source}: {name}. To set the criticality of "
            f"permissions outside the catalog, use the 'unknown' permission name.",
        )
        return

    label = declaration.get("label")
    if not isinstance(label, str):
        _warn(config, format_warning)
        return

    rule = PermissionRule(
        permission=permission,
        criticality=criticality,
        label=label,
        description=description,
    )
    if not config.permissions.insert(rule):
        logger.debug("Ignoring duplicate rule for %s in %s", permission, source)


# ── Files ──


def load_file(config: Config, path: Path) -> None:
    """Apply one YAML configuration file on top of config.

    Raises:
        ConfigParseError: the file cannot be read, is not valid YAML, or its
            top level is not a mapping.
    """
    source = str(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigParseError(source, str(e)) from e

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigParseError(source, str(e)) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigParseError(source, "the top level must be a mapping of options")

    for key, value in data.items():
        if key == "threads":
            load_threads(config, value, source)
        elif key in _PATH_FIELDS:
            load_path(config, key, value, source)
        elif key == "template":
            load_template(config, value, source)
        elif key == "permissions":
            load_permissions(config, value, source)
        else:
            _warn(config, f"Unknown configuration option '{key}' in {source}.")

    config.loaded_files.append(path)
    logger.debug("Loaded configuration file %s", path)


# ── Command line ──


def _apply_cli(config: Config, cli: CliOverrides) -> None:
    source = "the command line"
    if cli.threads is not None:
        load_threads(config, cli.threads, source)
    for option, key in _CLI_PATH_OPTIONS.items():
        value = getattr(cli, option)
        if value is not None:
            load_path(config, key, value, source)
    if cli.template is not None:
        load_template(config, cli.template, source)

    formats = []
    if cli.json_report:
        formats.append(ReportFormat.JSON)
    if cli.html_report:
        formats.append(ReportFormat.HTML)
    config.report_formats = formats


def add_app_package(config: Config, package: str) -> None:
    """Queue a package, resolved under the downloads folder with the package extension."""
    package_path = config.downloads_folder / package
    if package_path.suffix == "":
        package_path = package_path.with_suffix(PACKAGE_EXTENSION)
    elif package_path.suffix != PACKAGE_EXTENSION:
        package_path = package_path.with_name(package_path.name + PACKAGE_EXTENSION)
    config.app_packages.append(package_path)


def read_apks(config: Config) -> None:
    """Queue every package found in the downloads folder, in name order.

    Raises:
        DownloadsFolderError: the downloads folder cannot be listed.
    """
    try:
        entries = sorted(config.downloads_folder.iterdir())
    except OSError as e:
        raise DownloadsFolderError(
            f"There was an error when reading the downloads folder "
            f"{config.downloads_folder}: {e}"
        ) from e

    for entry in entries:
        if entry.suffix == PACKAGE_EXTENSION and entry.is_file():
            add_app_package(config, entry.stem)


# ── Entry points ──


def resolve(cli: CliOverrides, env: Optional[Environment] = None) -> Config:
    """Build the run configuration from every layer.

    Raises:
        ConfigParseError: a configuration file is structurally invalid.
        DownloadsFolderError: --test-all was given and the downloads folder
            cannot be read.
    """
    if env is None:
        env = SystemEnvironment()

    config = default_config(env)
    config.verbose = cli.verbose
    config.quiet = cli.quiet
    config.overall_force = cli.force
    config.force = cli.force
    config.bench = cli.bench
    config.open = cli.open

    if env.is_unix() and env.exists(env.system_config_file):
        load_file(config, env.system_config_file)
    if env.exists(env.local_config_file):
        load_file(config, env.local_config_file)

    _apply_cli(config, cli)

    if cli.test_all:
        read_apks(config)
    elif cli.package is not None:
        add_app_package(config, cli.package)

    return config


def validate(config: Config) -> list[str]:
    """Return a message for every configured file or folder that does not exist."""
    errors = []
    if not config.downloads_folder.exists():
        errors.append(f"The downloads folder `{config.downloads_folder}` does not exist")
    for package in config.app_packages:
        if not package.exists():
            errors.append(f"The package file `{package}` does not exist")
    if not config.dist_folder.exists():
        errors.append(f"The dist folder `{config.dist_folder}` does not exist")
    if not config.results_folder.exists():
        errors.append(f"The results folder `{config.results_folder}` does not exist")
    if not config.apktool_file.exists():
        errors.append(f"The Apktool JAR file `{config.apktool_file}` does not exist")
    if not config.dex2jar_folder.exists():
        errors.append(f"The Dex2Jar folder `{config.dex2jar_folder}` does not exist")
    if not config.jd_cmd_file.exists():
        errors.append(f"The jd-cmd file `{config.jd_cmd_file}` does not exist")
    if not config.templates_folder.exists():
        errors.append(f"The templates folder `{config.templates_folder}` does not exist")
    elif not config.template_path.exists():
        errors.append(
            f"The template `{config.template}` does not exist in `{config.templates_folder}`"
        )
    if not config.rules_json.exists():
        errors.append(f"The rules file `{config.rules_json}` does not exist")
    return errors
