from __future__ import annotations

import pytest

from iosctl.core.errors import (
    DeviceDiscoveryError,
    NoMatchingTargetError,
    NoTargetAvailableError,
    PromptFailedError,
    SimulatorStartError,
)
from iosctl.core.model import Candidate, CandidateKind
from iosctl.core.resolver import TargetResolver, describe


def _device(udid: str, name: str) -> Candidate:
    return Candidate(id=udid, name=name, triple="aarch64-apple-ios", kind=CandidateKind.DEVICE, os_version="17.2")


def _simulator(udid: str, name: str, *, booted: bool = False) -> Candidate:
    return Candidate(
        id=udid,
        name=name,
        triple="aarch64-apple-ios-sim",
        kind=CandidateKind.SIMULATOR,
        connected=booted,
        os_version="17.2",
    )


class FakeTooling:
    def __init__(
        self,
        devices: list[Candidate] | None = None,
        simulators: list[Candidate] | None = None,
        *,
        start_error: Exception | None = None,
    ) -> None:
        self.devices = devices or []
        self.simulators = simulators or []
        self.start_error = start_error
        self.simulator_queries = 0
        self.started: list[str] = []

    def list_devices(self) -> list[Candidate]:
        return list(self.devices)

    def list_simulators(self) -> list[Candidate]:
        self.simulator_queries += 1
        return list(self.simulators)

    def start_simulator(self, simulator: Candidate) -> None:
        if self.start_error is not None:
            raise self.start_error
        self.started.append(simulator.id)


class FakeChooser:
    def __init__(self, index: int = 0) -> None:
        self.index = index
        self.calls: list[tuple[str, list[str], str]] = []

    def choose(self, title, items, item_label) -> int:
        self.calls.append((title, [str(i) for i in items], item_label))
        return self.index


class FailingChooser:
    def choose(self, title, items, item_label) -> int:
        raise PromptFailedError("stdin is not a terminal")


def test_hint_selects_exactly_named_device() -> None:
    tooling = FakeTooling(devices=[_device("d1", "iPhone 15"), _device("d2", "iPad Air")])
    resolved = TargetResolver(tooling, FakeChooser()).resolve("iPad Air")
    assert resolved.candidate.id == "d2"
    assert resolved.triple == "aarch64-apple-ios"


def test_equal_scores_pick_last_enumerated_device() -> None:
    tooling = FakeTooling(devices=[_device("d1", "iPhone"), _device("d2", "iPhone")])
    resolved = TargetResolver(tooling, FakeChooser()).resolve("iPhone")
    assert resolved.candidate.id == "d2"


def test_device_match_failure_does_not_fall_back_to_simulators() -> None:
    tooling = FakeTooling(
        devices=[_device("d1", "iPhone 15")],
        simulators=[_simulator("s1", "Apple Watch Series 9")],
    )
    with pytest.raises(NoMatchingTargetError):
        TargetResolver(tooling, FakeChooser()).resolve("Watch")
    assert tooling.simulator_queries == 0
    assert tooling.started == []


def test_empty_device_list_falls_back_to_simulators_and_boots() -> None:
    tooling = FakeTooling(
        simulators=[_simulator("s1", "iPhone 15"), _simulator("s2", "iPad Pro")],
    )
    resolved = TargetResolver(tooling, FakeChooser()).resolve("iPad")
    assert resolved.candidate.id == "s2"
    assert resolved.candidate.kind is CandidateKind.SIMULATOR
    assert resolved.triple == "aarch64-apple-ios-sim"
    assert tooling.started == ["s2"]


def test_simulator_hint_uses_same_threshold() -> None:
    tooling = FakeTooling(simulators=[_simulator("s1", "iPhone 15")])
    with pytest.raises(NoMatchingTargetError):
        TargetResolver(tooling, FakeChooser()).resolve("Vision Pro")
    assert tooling.started == []


def test_booted_simulator_is_not_restarted() -> None:
    tooling = FakeTooling(simulators=[_simulator("s1", "iPhone 15", booted=True)])
    resolved = TargetResolver(tooling, FakeChooser()).resolve(None)
    assert resolved.candidate.id == "s1"
    assert tooling.started == []


def test_no_devices_and_no_simulators() -> None:
    tooling = FakeTooling()
    with pytest.raises(NoTargetAvailableError):
        TargetResolver(tooling, FakeChooser()).resolve("iPhone")


def test_multiple_devices_without_hint_prompt_for_choice() -> None:
    chooser = FakeChooser(index=1)
    tooling = FakeTooling(devices=[_device("d1", "iPhone 15"), _device("d2", "iPad Air")])
    resolved = TargetResolver(tooling, chooser).resolve(None)
    assert resolved.candidate.id == "d2"
    assert chooser.calls == [("Detected iOS devices", ["iPhone 15 (17.2)", "iPad Air (17.2)"], "device")]


def test_multiple_simulators_without_hint_prompt_for_choice() -> None:
    chooser = FakeChooser(index=0)
    tooling = FakeTooling(simulators=[_simulator("s1", "iPhone 15"), _simulator("s2", "iPad Pro")])
    resolved = TargetResolver(tooling, chooser).resolve(None)
    assert resolved.candidate.id == "s1"
    assert chooser.calls[0][0] == "Detected iOS simulators"
    assert tooling.started == ["s1"]


def test_prompt_failure_is_surfaced() -> None:
    tooling = FakeTooling(devices=[_device("d1", "iPhone 15"), _device("d2", "iPad Air")])
    with pytest.raises(PromptFailedError):
        TargetResolver(tooling, FailingChooser()).resolve(None)


def test_simulator_start_failure_is_surfaced() -> None:
    tooling = FakeTooling(
        simulators=[_simulator("s1", "iPhone 15")],
        start_error=SimulatorStartError("boot failed"),
    )
    with pytest.raises(SimulatorStartError):
        TargetResolver(tooling, FakeChooser()).resolve(None)


def test_device_enumeration_error_is_surfaced() -> None:
    class BrokenTooling(FakeTooling):
        def list_devices(self) -> list[Candidate]:
            raise DeviceDiscoveryError("xctrace crashed")

    with pytest.raises(DeviceDiscoveryError):
        TargetResolver(BrokenTooling(), FakeChooser()).resolve(None)


def test_detect_target_returns_triple_or_none() -> None:
    resolver = TargetResolver(FakeTooling(devices=[_device("d1", "iPhone 15")]), FakeChooser())
    assert resolver.detect_target() == "aarch64-apple-ios"

    assert TargetResolver(FakeTooling(), FakeChooser()).detect_target() is None


def test_describe_reports_state() -> None:
    assert describe(_device("d1", "iPhone 15")) == "d1 iPhone 15 (17.2) [device, connected] -> aarch64-apple-ios"
    assert "[simulator, shutdown]" in describe(_simulator("s1", "iPhone 15"))
    assert "[simulator, booted]" in describe(_simulator("s1", "iPhone 15", booted=True))
