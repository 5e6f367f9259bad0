from __future__ import annotations

import plistlib
from pathlib import Path

from typer.testing import CliRunner

from iosctl import cli
from iosctl.core.errors import NoMatchingTargetError
from iosctl.core.model import (
    App,
    Candidate,
    CandidateKind,
    MergeResult,
    ProjectConfig,
    ResolvedBuildConfig,
    ResolvedTarget,
    SigningConfig,
    SigningMode,
    SynthesisResult,
)

DEVICE = Candidate(
    id="00008110-001A2B3C4D5E6F70",
    name="Jane's iPhone",
    triple="aarch64-apple-ios",
    kind=CandidateKind.DEVICE,
    os_version="17.2",
)
SIMULATOR = Candidate(
    id="SIM-1",
    name="iPhone 15",
    triple="aarch64-apple-ios-sim",
    kind=CandidateKind.SIMULATOR,
    connected=False,
    os_version="17.2",
)
APP = App(name="Demo", identifier="com.example.demo", root_dir=Path("/work/demo"))


class FakeService:
    def list_devices(self):
        return [DEVICE]

    def list_simulators(self):
        return [SIMULATOR]

    def resolve_target(self, hint=None):
        return ResolvedTarget(candidate=DEVICE, triple=DEVICE.triple)

    def load_config(self, path=None):
        return ProjectConfig(app=APP, version="1.0.0")

    def synthesize(self, project_config, features=None):
        config = ResolvedBuildConfig(
            app=APP,
            project_dir=APP.project_dir,
            development_team=None,
            features=tuple(features or ()),
            frameworks=("WebKit",),
            vendor_frameworks=("../../libs/foo.a",),
            bundle_version="1.0.0",
            bundle_version_short="1.0.0",
            minimum_system_version="13.0",
        )
        return SynthesisResult(config=config, warnings=("No code signing certificates found.",))

    def prepare_project(self, project_config, config):
        return MergeResult(destination=config.project_dir / "Demo_iOS" / "Info.plist", merged=1, skipped=())

    def signing(self):
        return SigningConfig(mode=SigningMode.AUTOMATIC, identity="Apple Development: Jane", team_id="TEAM123456")


runner = CliRunner()


def test_devices_command(monkeypatch):
    monkeypatch.setattr(cli, "IosService", FakeService)
    result = runner.invoke(cli.app, ["devices"])
    assert result.exit_code == 0
    assert "Jane's iPhone (17.2) [device, connected]" in result.stdout


def test_simulators_command(monkeypatch):
    monkeypatch.setattr(cli, "IosService", FakeService)
    result = runner.invoke(cli.app, ["simulators"])
    assert result.exit_code == 0
    assert "SIM-1 iPhone 15 (17.2) [simulator, shutdown] -> aarch64-apple-ios-sim" in result.stdout


def test_target_command(monkeypatch):
    monkeypatch.setattr(cli, "IosService", FakeService)
    result = runner.invoke(cli.app, ["target", "--target", "jane"])
    assert result.exit_code == 0
    assert "Target: Jane's iPhone (17.2)" in result.stdout
    assert "triple=aarch64-apple-ios" in result.stdout


def test_target_error_is_clean(monkeypatch):
    class FailingService(FakeService):
        def resolve_target(self, hint=None):
            raise NoMatchingTargetError(f"Could not find an iOS device matching '{hint}'")

    monkeypatch.setattr(cli, "IosService", FailingService)
    result = runner.invoke(cli.app, ["target", "--target", "pixel"])
    assert result.exit_code == 1
    assert "Error: Could not find an iOS device matching 'pixel'" in result.stderr
    assert "Traceback" not in result.stdout
    assert "Traceback" not in result.stderr


def test_config_command_prints_warnings_and_fields(monkeypatch):
    monkeypatch.setattr(cli, "IosService", FakeService)
    result = runner.invoke(cli.app, ["config", "--features", "tray", "--features", "updater"])
    assert result.exit_code == 0
    assert "Warning: No code signing certificates found." in result.stderr
    assert "development_team: <unset>" in result.stdout
    assert "features: tray, updater" in result.stdout
    assert "vendor_frameworks: ../../libs/foo.a" in result.stdout


def test_signing_command(monkeypatch):
    monkeypatch.setattr(cli, "IosService", FakeService)
    result = runner.invoke(cli.app, ["signing"])
    assert result.exit_code == 0
    assert "mode: Automatic" in result.stdout
    assert "team_id: TEAM123456" in result.stdout
    assert "provisioning_profile_uuid: <unset>" in result.stdout


def test_prepare_command(monkeypatch):
    monkeypatch.setattr(cli, "IosService", FakeService)
    result = runner.invoke(cli.app, ["prepare"])
    assert result.exit_code == 0
    assert "1 Info.plist source(s) merged" in result.stdout


def test_merge_plist_command(tmp_path: Path):
    first = tmp_path / "first.plist"
    first.write_bytes(plistlib.dumps({"k": "first"}))
    second = tmp_path / "second.plist"
    second.write_bytes(plistlib.dumps({"k": "second"}))
    dest = tmp_path / "Info.plist"
    dest.write_bytes(plistlib.dumps({"base": 1}))

    result = runner.invoke(
        cli.app,
        ["merge-plist", str(first), str(tmp_path / "missing.plist"), str(second), "--dest", str(dest)],
    )
    assert result.exit_code == 0
    assert "Merged 2 source(s)" in result.stdout
    assert "Warning: skipped unreadable source" in result.stderr
    assert plistlib.loads(dest.read_bytes()) == {"base": 1, "k": "second"}


def test_merge_plist_missing_destination_fails(tmp_path: Path):
    source = tmp_path / "overlay.plist"
    source.write_bytes(plistlib.dumps({"k": "v"}))
    result = runner.invoke(cli.app, ["merge-plist", str(source), "--dest", str(tmp_path / "absent.plist")])
    assert result.exit_code == 1
    assert "Error: Could not load plist" in result.stderr
