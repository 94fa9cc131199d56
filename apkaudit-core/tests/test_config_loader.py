"""Tests for layered configuration resolution and validation."""

from pathlib import Path

import pytest

from apkaudit.config.loader import (
    add_app_package,
    load_file,
    load_permissions,
    parse_threads,
    read_apks,
    resolve,
    validate,
)
from apkaudit.config.settings import (
    BUNDLED_TEMPLATES,
    DEFAULT_THREADS,
    SYSTEM_RULES_FILE,
    CliOverrides,
    Config,
    default_config,
)
from apkaudit.errors import ConfigParseError, DownloadsFolderError
from apkaudit.models.findings import Criticality
from apkaudit.models.permissions import Permission
from apkaudit.models.report import ReportFormat
from apkaudit.models.rules import DEFAULT_UNKNOWN_DESCRIPTION

FIXTURES = Path(__file__).parent / "fixtures"


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def _rule(name, criticality="high", label="Label", description="Description"):
    return {"name": name, "criticality": criticality, "label": label, "description": description}


# ── Threads ──


class TestParseThreads:
    @pytest.mark.parametrize("value,expected", [(1, 1), (255, 255), ("8", 8), (" 3 ", 3)])
    def test_valid(self, value, expected):
        assert parse_threads(value) == expected

    @pytest.mark.parametrize("value", [0, -1, 256, "0", "256", "four", "2.5", 2.0, True, None, [4]])
    def test_invalid(self, value):
        assert parse_threads(value) is None


class TestThreadsFile:
    def test_threads_zero_falls_back_to_default(self):
        config = Config()
        load_file(config, FIXTURES / "config" / "threads_zero.yaml")
        assert config.threads == DEFAULT_THREADS == 2
        threads_warnings = [w for w in config.warnings if "'threads'" in w]
        assert len(threads_warnings) == 1
        assert len(config.warnings) == 1

    def test_invalid_threads_keeps_previous_layer(self, tmp_path):
        config = Config()
        load_file(config, _write(tmp_path / "a.yaml", "threads: 6\n"))
        load_file(config, _write(tmp_path / "b.yaml", "threads: 300\n"))
        assert config.threads == 6
        assert "Using 6" in config.warnings[0]


# ── Files ──


class TestLoadFile:
    def test_valid_file(self):
        config = Config()
        load_file(config, FIXTURES / "config" / "valid.yaml")
        assert config.warnings == []
        assert config.threads == 4
        assert config.downloads_folder == Path("downloads")
        assert config.template == "default"
        assert len(config.permissions) == 3
        assert config.permissions.get(Permission.INTERNET).criticality is Criticality.WARNING
        assert config.unknown_permission.criticality is Criticality.MEDIUM
        assert config.loaded_files == [FIXTURES / "config" / "valid.yaml"]

    def test_broken_yaml_is_fatal(self):
        with pytest.raises(ConfigParseError) as exc:
            load_file(Config(), FIXTURES / "config" / "broken.yaml")
        assert exc.value.exit_code == 10

    def test_top_level_must_be_mapping(self, tmp_path):
        with pytest.raises(ConfigParseError):
            load_file(Config(), _write(tmp_path / "list.yaml", "- threads\n- 4\n"))

    def test_empty_file_is_allowed(self, tmp_path):
        config = Config()
        load_file(config, _write(tmp_path / "empty.yaml", ""))
        assert config.warnings == []
        assert config.threads == DEFAULT_THREADS

    def test_unknown_key_warns(self, tmp_path):
        config = Config()
        load_file(config, _write(tmp_path / "c.yaml", "colour: blue\nthreads: 3\n"))
        assert config.threads == 3
        assert len(config.warnings) == 1
        assert "colour" in config.warnings[0]

    def test_jar_extension_required(self, tmp_path):
        config = Config()
        previous = config.apktool_file
        load_file(config, _write(tmp_path / "c.yaml", "apktool_file: vendor/apktool.zip\n"))
        assert config.apktool_file == previous
        assert len(config.warnings) == 1

    def test_json_extension_required(self, tmp_path):
        config = Config()
        load_file(config, _write(tmp_path / "c.yaml", "rules_json: rules.yaml\n"))
        assert config.rules_json == Path("rules.json")
        assert len(config.warnings) == 1

    def test_path_must_be_string(self, tmp_path):
        config = Config()
        load_file(config, _write(tmp_path / "c.yaml", "dist_folder: 12\n"))
        assert config.dist_folder == Path("dist")
        assert len(config.warnings) == 1


# ── Permissions ──


class TestUnknownPermissionDeclaration:
    def test_three_fields_replace_default(self):
        config = Config()
        load_permissions(
            config,
            [{"name": "unknown", "criticality": "High", "description": "Custom permission"}],
            "test",
        )
        assert config.unknown_permission.criticality is Criticality.HIGH
        assert config.unknown_permission.description == "Custom permission"
        assert config.warnings == []

    @pytest.mark.parametrize(
        "declaration",
        [
            {"name": "unknown", "criticality": "high", "description": "d", "label": "l"},
            {"name": "unknown", "criticality": "severe", "description": "d"},
            {"name": "unknown", "criticality": "high"},
            {"name": "unknown", "criticality": "high", "description": 5},
        ],
    )
    def test_deviation_leaves_default(self, declaration):
        config = Config()
        load_permissions(config, [declaration], "test")
        assert config.unknown_permission.criticality is Criticality.LOW
        assert config.unknown_permission.description == DEFAULT_UNKNOWN_DESCRIPTION
        assert len(config.warnings) == 1


class TestPermissionDeclaration:
    def test_four_fields_add_rule(self):
        config = Config()
        load_permissions(config, [_rule("android.permission.CAMERA", "Medium")], "test")
        rule = config.permissions.get(Permission.CAMERA)
        assert rule.criticality is Criticality.MEDIUM
        assert rule.label == "Label"
        assert config.warnings == []

    def test_duplicate_keeps_first_silently(self):
        config = Config()
        load_permissions(
            config,
            [
                _rule("android.permission.READ_SMS", "high", "Read SMS", "first"),
                _rule("android.permission.READ_SMS", "low", "SMS", "second"),
            ],
            "test",
        )
        rule = config.permissions.get(Permission.READ_SMS)
        assert (rule.criticality, rule.label, rule.description) == (
            Criticality.HIGH,
            "Read SMS",
            "first",
        )
        assert len(config.permissions) == 1
        assert config.warnings == []

    def test_duplicate_across_files_keeps_earlier_layer(self, tmp_path):
        config = Config()
        body = (
            "permissions:\n"
            "  - name: android.permission.INTERNET\n"
            "    criticality: {c}\n"
            "    label: Internet\n"
            "    description: Network access\n"
        )
        load_file(config, _write(tmp_path / "system.yaml", body.format(c="low")))
        load_file(config, _write(tmp_path / "local.yaml", body.format(c="critical")))
        assert config.permissions.get(Permission.INTERNET).criticality is Criticality.LOW

    def test_uncataloged_name_is_skipped(self):
        config = Config()
        load_permissions(config, [_rule("com.example.permission.SECRET")], "test")
        assert len(config.permissions) == 0
        assert len(config.warnings) == 1
        assert "com.example.permission.SECRET" in config.warnings[0]

    @pytest.mark.parametrize(
        "declaration",
        [
            {"name": "android.permission.CAMERA", "criticality": "high", "description": "d"},
            {**_rule("android.permission.CAMERA"), "extra": 1},
            {**_rule("android.permission.CAMERA"), "label": None},
            {**_rule("android.permission.CAMERA"), "criticality": "urgent"},
            "android.permission.CAMERA",
        ],
    )
    def test_malformed_declaration_is_skipped(self, declaration):
        config = Config()
        load_permissions(config, [declaration], "test")
        assert len(config.permissions) == 0
        assert len(config.warnings) == 1

    def test_bad_entry_does_not_stop_the_rest(self):
        config = Config()
        load_permissions(
            config,
            ["garbage", _rule("android.permission.INTERNET"), _rule("android.permission.CAMERA")],
            "test",
        )
        assert len(config.permissions) == 2
        assert len(config.warnings) == 1

    def test_permissions_must_be_list(self):
        config = Config()
        load_permissions(config, {"name": "unknown"}, "test")
        assert len(config.warnings) == 1


# ── Layering ──


class TestDefaults:
    def test_non_unix_uses_compiled_defaults(self, fake_env):
        config = default_config(fake_env(unix=False, existing=[SYSTEM_RULES_FILE]))
        assert config.rules_json == Path("rules.json")
        assert config.templates_folder == BUNDLED_TEMPLATES
        assert config.threads == DEFAULT_THREADS

    def test_unix_system_rules(self, fake_env):
        config = default_config(fake_env(existing=[SYSTEM_RULES_FILE]))
        assert config.rules_json == SYSTEM_RULES_FILE

    def test_linux_share_path(self, fake_env):
        config = default_config(fake_env(existing=[Path("/usr/share/apkaudit")]))
        assert config.apktool_file == Path("/usr/share/apkaudit/vendor/apktool_2.2.0.jar")
        assert config.templates_folder == Path("/usr/share/apkaudit/templates")

    def test_macos_share_path(self, fake_env):
        config = default_config(fake_env(macos=True, existing=[Path("/usr/local/apkaudit")]))
        assert config.jd_cmd_file == Path("/usr/local/apkaudit/vendor/jd-cmd.jar")

    def test_missing_share_path_keeps_local_vendor(self, fake_env):
        config = default_config(fake_env())
        assert config.apktool_file == Path("vendor/apktool_2.2.0.jar")


class TestResolve:
    def test_layers_override_in_order(self, tmp_path, fake_env):
        system = _write(tmp_path / "system.yaml", "threads: 4\ntemplate: dark\n")
        local = _write(tmp_path / "local.yaml", "threads: 8\n")
        env = fake_env(system_config=system, local_config=local)

        config = resolve(CliOverrides(threads="16"), env)
        assert config.threads == 16
        assert config.template == "dark"
        assert config.loaded_files == [system, local]

    def test_system_file_ignored_off_unix(self, tmp_path, fake_env):
        system = _write(tmp_path / "system.yaml", "threads: 4\n")
        config = resolve(CliOverrides(), fake_env(unix=False, system_config=system))
        assert config.threads == DEFAULT_THREADS
        assert config.loaded_files == []

    def test_invalid_cli_value_keeps_file_value(self, tmp_path, fake_env):
        local = _write(tmp_path / "local.yaml", "threads: 8\n")
        config = resolve(CliOverrides(threads="lots"), fake_env(local_config=local))
        assert config.threads == 8
        assert len(config.warnings) == 1
        assert "command line" in config.warnings[0]

    def test_cli_paths(self, fake_env):
        config = resolve(
            CliOverrides(results="out", apktool="tools/apktool.jar", dex2jar="tools/d2j"),
            fake_env(),
        )
        assert config.results_folder == Path("out")
        assert config.apktool_file == Path("tools/apktool.jar")
        assert config.dex2jar_folder == Path("tools/d2j")

    def test_flags(self, fake_env):
        config = resolve(CliOverrides(verbose=True, force=True, bench=True, open=True), fake_env())
        assert config.verbose and config.bench and config.open
        assert config.force and config.overall_force

    def test_report_formats(self, fake_env):
        assert resolve(CliOverrides(), fake_env()).report_formats == [
            ReportFormat.JSON,
            ReportFormat.HTML,
        ]
        config = resolve(CliOverrides(html_report=False), fake_env())
        assert config.has_to_generate(ReportFormat.JSON)
        assert not config.has_to_generate(ReportFormat.HTML)

    def test_single_package(self, fake_env):
        config = resolve(CliOverrides(downloads="apks", package="flashlight"), fake_env())
        assert config.app_packages == [Path("apks/flashlight.apk")]

    def test_test_all(self, tmp_path, fake_env, make_apk):
        downloads = tmp_path / "apks"
        make_apk(downloads / "zeta.apk")
        make_apk(downloads / "alpha.apk")
        (downloads / "notes.txt").write_text("not a package")
        config = resolve(CliOverrides(downloads=str(downloads), test_all=True), fake_env())
        assert config.app_packages == [downloads / "alpha.apk", downloads / "zeta.apk"]

    def test_test_all_unreadable_downloads(self, tmp_path, fake_env):
        with pytest.raises(DownloadsFolderError) as exc:
            resolve(CliOverrides(downloads=str(tmp_path / "missing"), test_all=True), fake_env())
        assert exc.value.exit_code == 11


class TestPackages:
    @pytest.mark.parametrize(
        "name,expected",
        [
            ("flashlight", "flashlight.apk"),
            ("flashlight.apk", "flashlight.apk"),
            ("com.example.app", "com.example.app.apk"),
        ],
    )
    def test_add_app_package(self, name, expected):
        config = Config(downloads_folder=Path("downloads"))
        add_app_package(config, name)
        assert config.app_packages == [Path("downloads") / expected]

    def test_read_apks_ignores_directories(self, tmp_path, make_apk):
        make_apk(tmp_path / "one.apk")
        (tmp_path / "folder.apk").mkdir()
        config = Config(downloads_folder=tmp_path)
        read_apks(config)
        assert config.app_packages == [tmp_path / "one.apk"]


class TestValidate:
    def test_reports_missing_resources(self, workspace):
        workspace.app_packages.append(workspace.downloads_folder / "missing.apk")
        errors = validate(workspace)
        joined = "\n".join(errors)
        assert "missing.apk" in joined
        assert "Apktool" in joined
        assert "Dex2Jar" in joined
        assert "jd-cmd" in joined
        assert "rules file" in joined
        assert "downloads folder" not in joined
        assert "template" not in joined

    def test_missing_template(self, workspace):
        workspace.template = "nope"
        assert any("template `nope`" in e for e in validate(workspace))

    def test_all_present(self, workspace, make_apk, tmp_path):
        package = make_apk(workspace.downloads_folder / "app.apk")
        vendor = tmp_path / "vendor"
        vendor.mkdir()
        for name in ("apktool.jar", "jd-cmd.jar"):
            (vendor / name).write_bytes(b"")
        (vendor / "dex2jar").mkdir()
        (tmp_path / "rules.json").write_text("[]")
        workspace.app_packages.append(package)
        workspace.apktool_file = vendor / "apktool.jar"
        workspace.jd_cmd_file = vendor / "jd-cmd.jar"
        workspace.dex2jar_folder = vendor / "dex2jar"
        workspace.rules_json = tmp_path / "rules.json"
        assert validate(workspace) == []


class TestSampleConfig:
    def test_sample_loads_cleanly(self):
        sample = Path(__file__).parents[2] / "config.sample.yaml"
        config = Config()
        load_file(config, sample)
        assert config.warnings == []
        assert len(config.permissions) == 14
        assert config.permissions.get(Permission.SEND_SMS).criticality is Criticality.CRITICAL
        assert config.unknown_permission.description == DEFAULT_UNKNOWN_DESCRIPTION
