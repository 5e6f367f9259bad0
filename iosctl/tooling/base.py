"""Tooling interfaces for the collaborators the core depends on."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from iosctl.core.model import Candidate, SigningIdentity


class DeviceTooling(Protocol):
    def list_devices(self) -> list[Candidate]:
        """Enumerate connected physical devices."""

    def list_simulators(self) -> list[Candidate]:
        """Enumerate available simulators."""

    def start_simulator(self, simulator: Candidate) -> None:
        """Boot a simulator and bring the Simulator app up detached."""


class IdentityQuery(Protocol):
    def find_development_teams(self) -> list[SigningIdentity]:
        """Return locally installed signing identities; never raises."""


class Chooser(Protocol):
    def choose(self, title: str, items: Sequence[object], item_label: str) -> int:
        """Return the index of the selected item."""
