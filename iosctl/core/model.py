"""Core data models used across resolver, synthesizer, service, and CLI."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path


class CandidateKind(str, enum.Enum):
    DEVICE = "device"
    SIMULATOR = "simulator"


class SigningMode(str, enum.Enum):
    AUTOMATIC = "Automatic"
    MANUAL = "Manual"


@dataclass(frozen=True)
class Candidate:
    id: str
    name: str
    triple: str
    kind: CandidateKind
    connected: bool = True
    os_version: str | None = None

    def __str__(self) -> str:
        if self.os_version:
            return f"{self.name} ({self.os_version})"
        return self.name


@dataclass(frozen=True)
class ResolvedTarget:
    candidate: Candidate
    triple: str


@dataclass(frozen=True)
class SigningIdentity:
    """A development team discovered from a locally installed certificate."""

    name: str
    id: str


@dataclass(frozen=True)
class App:
    name: str
    identifier: str
    root_dir: Path

    @property
    def project_dir(self) -> Path:
        return self.root_dir / "gen" / "apple"


@dataclass(frozen=True)
class IosSection:
    development_team: str | None = None
    frameworks: tuple[str, ...] = ()
    minimum_system_version: str = "13.0"
    info_plist: str | None = None


@dataclass(frozen=True)
class ProjectConfig:
    app: App
    version: str | None = None
    features: tuple[str, ...] = ()
    ios: IosSection = field(default_factory=IosSection)
    source: Path | None = None


@dataclass(frozen=True)
class ResolvedBuildConfig:
    """Synthesized build configuration; `None` marks an explicitly unset field."""

    app: App
    project_dir: Path
    development_team: str | None
    features: tuple[str, ...]
    frameworks: tuple[str, ...]
    vendor_frameworks: tuple[str, ...]
    bundle_version: str | None
    bundle_version_short: str | None
    minimum_system_version: str


@dataclass(frozen=True)
class SynthesisResult:
    config: ResolvedBuildConfig
    warnings: tuple[str, ...]


@dataclass(frozen=True)
class SigningCredential:
    identity: str
    team_id: str | None


@dataclass(frozen=True)
class ProvisioningProfile:
    uuid: str
    name: str | None = None
    team_id: str | None = None


@dataclass(frozen=True)
class SigningConfig:
    mode: SigningMode
    identity: str | None = None
    team_id: str | None = None
    provisioning_profile_uuid: str | None = None


@dataclass(frozen=True)
class MergeResult:
    destination: Path
    merged: int
    skipped: tuple[str, ...]

    @property
    def written(self) -> bool:
        return self.merged > 0
