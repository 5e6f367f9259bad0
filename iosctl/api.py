"""Stable public API for building tooling on top of iosctl.

This module is the supported integration surface for third-party callers.
Avoid importing from private/internal modules unless intentionally depending on
non-stable internals.
"""

from __future__ import annotations

from collections.abc import MutableMapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from iosctl.core.errors import (
    ConfigLoadError,
    ConfigValidationError,
    DeviceDiscoveryError,
    DocumentLoadError,
    IosctlError,
    NoMatchingTargetError,
    NoTargetAvailableError,
    PromptFailedError,
    SigningCredentialError,
    SimulatorStartError,
)
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
)
from iosctl.core.plist_merge import PlistSource
from iosctl.core.service import IosService
from iosctl.tooling.base import Chooser, DeviceTooling, IdentityQuery

__all__ = [
    "IosctlError",
    "ConfigLoadError",
    "ConfigValidationError",
    "DeviceDiscoveryError",
    "DocumentLoadError",
    "NoMatchingTargetError",
    "NoTargetAvailableError",
    "PromptFailedError",
    "SigningCredentialError",
    "SimulatorStartError",
    "App",
    "Candidate",
    "CandidateKind",
    "MergeResult",
    "ProjectConfig",
    "ResolvedBuildConfig",
    "ResolvedTarget",
    "SigningConfig",
    "SigningMode",
    "BuildPlan",
    "Client",
]


@dataclass(frozen=True)
class BuildPlan:
    """Resolved build configuration plus the warnings raised while resolving it."""

    config: ResolvedBuildConfig
    warnings: tuple[str, ...]


class Client:
    """Public client for iosctl core capabilities.

    A `Client` wraps target discovery/matching, build configuration synthesis,
    Info.plist merging and signing-mode resolution behind a stable API intended
    for third-party tools (build scripts, IDE integrations, CI helpers).
    """

    def __init__(
        self,
        *,
        tooling: DeviceTooling | None = None,
        identities: IdentityQuery | None = None,
        chooser: Chooser | None = None,
        env: MutableMapping[str, str] | None = None,
    ) -> None:
        self._service = IosService(
            tooling=tooling,
            identities=identities,
            chooser=chooser,
            env=env,
        )

    def list_devices(self) -> list[Candidate]:
        return self._service.list_devices()

    def list_simulators(self) -> list[Candidate]:
        return self._service.list_simulators()

    def resolve_target(self, *, hint: str | None = None) -> ResolvedTarget:
        return self._service.resolve_target(hint)

    def detect_target(self) -> str | None:
        return self._service.detect_target()

    def load_config(self, path: Path | str | None = None) -> ProjectConfig:
        return self._service.load_config(path)

    def build_plan(
        self,
        project_config: ProjectConfig,
        *,
        features: Sequence[str] | None = None,
    ) -> BuildPlan:
        result = self._service.synthesize(project_config, features)
        return BuildPlan(config=result.config, warnings=result.warnings)

    def signing(self) -> SigningConfig:
        return self._service.signing()

    def merge_plist(self, sources: Sequence[PlistSource], destination: Path | str) -> MergeResult:
        return self._service.merge_plist(sources, destination)
