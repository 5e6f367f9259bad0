"""Device and simulator tooling backed by `xcrun` (xctrace / simctl)."""

from __future__ import annotations

import json
import logging
import platform
import re
import subprocess
from collections.abc import Sequence

from iosctl.core.errors import DeviceDiscoveryError, SimulatorStartError
from iosctl.core.model import Candidate, CandidateKind

_XCTRACE_LINE_RE = re.compile(
    r"^(?P<name>.+?)\s+\((?P<version>\d+(?:\.\d+)*)\)\s+\((?P<udid>[0-9A-Fa-f-]+)\)$"
)
_IOS_RUNTIME_MARKER = "SimRuntime.iOS"
DEVICE_TRIPLE = "aarch64-apple-ios"
LOGGER = logging.getLogger(__name__)


def simulator_triple(machine: str | None = None) -> str:
    arch = (machine or platform.machine()).lower()
    if arch in ("arm64", "aarch64"):
        return "aarch64-apple-ios-sim"
    return "x86_64-apple-ios"


class XcrunTooling:
    def list_devices(self) -> list[Candidate]:
        result = _run(["xcrun", "xctrace", "list", "devices"])
        if result is None:
            raise DeviceDiscoveryError("Failed to detect connected iOS devices: xcrun not found")
        if result.returncode != 0:
            raise DeviceDiscoveryError(
                f"Failed to detect connected iOS devices: {(result.stderr or '').strip()}"
            )
        return parse_xctrace_devices(result.stdout)

    def list_simulators(self) -> list[Candidate]:
        result = _run(["xcrun", "simctl", "list", "devices", "available", "--json"])
        if result is None:
            raise DeviceDiscoveryError("Failed to detect iOS simulators: xcrun not found")
        if result.returncode != 0:
            raise DeviceDiscoveryError(
                f"Failed to detect iOS simulators: {(result.stderr or '').strip()}"
            )
        return parse_simctl_devices(result.stdout)

    def start_simulator(self, simulator: Candidate) -> None:
        if simulator.connected:
            return
        result = _run(["xcrun", "simctl", "boot", simulator.id])
        if result is None:
            raise SimulatorStartError(f"Failed to boot simulator {simulator.name}: xcrun not found")
        stderr = (result.stderr or "").strip()
        if result.returncode != 0 and "current state: Booted" not in stderr:
            raise SimulatorStartError(f"Failed to boot simulator {simulator.name}: {stderr}")
        try:
            subprocess.Popen(
                ["open", "-a", "Simulator"],
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        except OSError as exc:
            raise SimulatorStartError(f"Failed to open Simulator app: {exc}") from exc


def parse_xctrace_devices(output: str) -> list[Candidate]:
    """Parse the `== Devices ==` section of `xctrace list devices`.

    Lines without an OS version belong to the host machine and are skipped.
    """
    devices: list[Candidate] = []
    section = None
    for raw in output.splitlines():
        line = raw.strip()
        if not line:
            continue
        if line.startswith("=="):
            section = line.strip("= ").lower()
            continue
        if section != "devices":
            continue
        match = _XCTRACE_LINE_RE.match(line)
        if not match:
            continue
        devices.append(
            Candidate(
                id=match.group("udid"),
                name=match.group("name"),
                triple=DEVICE_TRIPLE,
                kind=CandidateKind.DEVICE,
                connected=True,
                os_version=match.group("version"),
            )
        )
    return devices


def parse_simctl_devices(output: str) -> list[Candidate]:
    try:
        doc = json.loads(output)
    except json.JSONDecodeError as exc:
        raise DeviceDiscoveryError(f"Unexpected simctl output: {exc}") from exc

    triple = simulator_triple()
    simulators: list[Candidate] = []
    for runtime, entries in sorted(doc.get("devices", {}).items()):
        if _IOS_RUNTIME_MARKER not in runtime:
            continue
        os_version = runtime.rsplit("iOS-", 1)[-1].replace("-", ".")
        for entry in entries:
            if entry.get("isAvailable") is False:
                continue
            simulators.append(
                Candidate(
                    id=entry["udid"],
                    name=entry["name"],
                    triple=triple,
                    kind=CandidateKind.SIMULATOR,
                    connected=entry.get("state") == "Booted",
                    os_version=os_version,
                )
            )
    return simulators


def _run(cmd: Sequence[str]) -> subprocess.CompletedProcess[str] | None:
    LOGGER.debug("Running %s", " ".join(cmd))
    try:
        return subprocess.run(
            cmd,
            check=False,
            capture_output=True,
            text=True,
        )
    except FileNotFoundError:
        return None
