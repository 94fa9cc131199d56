"""Shared fixtures: fake host environments, fake packages, a scratch workspace."""

import shutil
import zipfile
from pathlib import Path

import pytest

from apkaudit.config.settings import Config, Environment

FIXTURES = Path(__file__).parent / "fixtures"


class FakeEnvironment(Environment):
    """Host probe with a fixed OS and a fixed set of existing paths."""

    def __init__(self, unix=True, macos=False, existing=(), system_config=None, local_config=None):
        self.unix = unix
        self.macos = macos
        self.existing = {Path(p) for p in existing}
        if system_config is not None:
            self.system_config_file = Path(system_config)
            self.existing.add(self.system_config_file)
        if local_config is not None:
            self.local_config_file = Path(local_config)
            self.existing.add(self.local_config_file)

    def is_unix(self):
        return self.unix

    def is_macos(self):
        return self.macos

    def exists(self, path):
        return Path(path) in self.existing


def build_apk(path: Path, payload: bytes = b"dex\n035\x00") -> Path:
    """Write a minimal ZIP archive shaped like an APK."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        archive.writestr("AndroidManifest.xml", b"\x03\x00\x08\x00binary-xml")
        archive.writestr("classes.dex", payload)
        archive.writestr("META-INF/MANIFEST.MF", "Manifest-Version: 1.0\n")
    return path


@pytest.fixture
def fake_env():
    return FakeEnvironment


@pytest.fixture
def make_apk():
    return build_apk


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    """A working directory with downloads/, dist/ and results/ and a quiet Config for it."""
    monkeypatch.chdir(tmp_path)
    for folder in ("downloads", "dist", "results"):
        (tmp_path / folder).mkdir()
    return Config(
        downloads_folder=tmp_path / "downloads",
        dist_folder=tmp_path / "dist",
        results_folder=tmp_path / "results",
        quiet=True,
    )


@pytest.fixture
def sample_package(workspace):
    """downloads/flashlight.apk plus its decompiled manifest under dist/flashlight/."""
    package = build_apk(workspace.downloads_folder / "flashlight.apk")
    shutil.copytree(FIXTURES / "sample_app", workspace.dist_folder / "flashlight")
    return package
