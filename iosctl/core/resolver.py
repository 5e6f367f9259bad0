"""Deployment target resolution across physical devices and simulators."""

from __future__ import annotations

import logging

from iosctl.core.errors import IosctlError, NoTargetAvailableError
from iosctl.core.model import Candidate, CandidateKind, ResolvedTarget
from iosctl.core.target_match import select_candidate
from iosctl.tooling.base import Chooser, DeviceTooling

LOGGER = logging.getLogger(__name__)


class TargetResolver:
    def __init__(self, tooling: DeviceTooling, chooser: Chooser) -> None:
        self.tooling = tooling
        self.chooser = chooser

    def resolve(self, hint: str | None = None) -> ResolvedTarget:
        """Resolve a concrete device or simulator for `hint`.

        Physical devices are preferred. Only an empty device list falls back
        to simulators; a hint that matches none of the connected devices is
        reported as is.
        """
        devices = self.tooling.list_devices()
        if devices:
            device = select_candidate(devices, hint, label="device", choose=self.chooser.choose)
            LOGGER.info("Detected connected device: %s with target %s", device, device.triple)
            return ResolvedTarget(candidate=device, triple=device.triple)

        simulators = self.tooling.list_simulators()
        if not simulators:
            raise NoTargetAvailableError(
                "No connected iOS devices detected and no available iOS Simulator found"
            )
        simulator = select_candidate(simulators, hint, label="simulator", choose=self.chooser.choose)
        if not simulator.connected:
            LOGGER.info("Starting simulator %s", simulator.name)
            self.tooling.start_simulator(simulator)
        return ResolvedTarget(candidate=simulator, triple=simulator.triple)

    def detect_target(self) -> str | None:
        """Return the triple of the target picked without a hint, or None."""
        try:
            return self.resolve(None).triple
        except IosctlError as exc:
            LOGGER.debug("Target detection failed: %s", exc)
            return None


def describe(candidate: Candidate) -> str:
    if candidate.kind is CandidateKind.DEVICE:
        state = "connected"
    else:
        state = "booted" if candidate.connected else "shutdown"
    return f"{candidate.id} {candidate} [{candidate.kind.value}, {state}] -> {candidate.triple}"
