"""Service layer used by CLI and API frontends."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping, MutableMapping, Sequence
from pathlib import Path
from typing import Any

from iosctl.core.errors import DocumentLoadError
from iosctl.core.model import (
    Candidate,
    MergeResult,
    ProjectConfig,
    ResolvedBuildConfig,
    ResolvedTarget,
    SigningConfig,
    SynthesisResult,
)
from iosctl.core.plist_merge import PlistSource, merge_plist
from iosctl.core.project_config import load_project_config
from iosctl.core.prompt import TerminalPrompt
from iosctl.core.resolver import TargetResolver
from iosctl.core.signing import resolve_signing, signing_from_env
from iosctl.core.synthesizer import EnvironmentCell, synthesize
from iosctl.tooling.base import Chooser, DeviceTooling, IdentityQuery
from iosctl.tooling.keychain import KeychainIdentityQuery
from iosctl.tooling.xcrun import XcrunTooling

ASSET_DIR = "assets"
LOGGER = logging.getLogger(__name__)


class IosService:
    def __init__(
        self,
        *,
        tooling: DeviceTooling | None = None,
        identities: IdentityQuery | None = None,
        chooser: Chooser | None = None,
        env: MutableMapping[str, str] | None = None,
    ) -> None:
        self.env = env if env is not None else os.environ
        self.tooling = tooling or XcrunTooling()
        self.identities = identities or KeychainIdentityQuery()
        self.chooser = chooser or TerminalPrompt(env=self.env)
        self.exports = EnvironmentCell(self.env)
        self.resolver = TargetResolver(self.tooling, self.chooser)

    def list_devices(self) -> list[Candidate]:
        return self.tooling.list_devices()

    def list_simulators(self) -> list[Candidate]:
        return self.tooling.list_simulators()

    def resolve_target(self, hint: str | None = None) -> ResolvedTarget:
        return self.resolver.resolve(hint)

    def detect_target(self) -> str | None:
        return self.resolver.detect_target()

    def load_config(self, path: Path | str | None = None) -> ProjectConfig:
        return load_project_config(path)

    def synthesize(
        self,
        project_config: ProjectConfig,
        features: Sequence[str] | None = None,
    ) -> SynthesisResult:
        return synthesize(
            project_config.app,
            project_config,
            features,
            self.env,
            identities=self.identities,
            exports=self.exports,
        )

    def signing(self) -> SigningConfig:
        credential, profile = signing_from_env(self.env)
        return resolve_signing(credential, profile)

    def merge_plist(self, sources: Sequence[PlistSource], destination: Path | str) -> MergeResult:
        return merge_plist(sources, destination)

    def prepare_project(self, project_config: ProjectConfig, config: ResolvedBuildConfig) -> MergeResult:
        """Create the asset directory and fold Info.plist overlays into the generated project."""
        asset_dir = config.project_dir / ASSET_DIR
        try:
            asset_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise DocumentLoadError(f"Could not create asset directory {asset_dir}: {exc}") from exc

        sources: list[PlistSource] = []
        if project_config.ios.info_plist:
            sources.append(config.app.root_dir / project_config.ios.info_plist)
        version_doc: dict[str, Any] = {}
        if config.bundle_version_short:
            version_doc["CFBundleShortVersionString"] = config.bundle_version_short
        if config.bundle_version:
            version_doc["CFBundleVersion"] = config.bundle_version
        if version_doc:
            sources.append(version_doc)

        destination = info_plist_path(config)
        result = merge_plist(sources, destination)
        for skipped in result.skipped:
            LOGGER.warning("Skipped unreadable Info.plist overlay %s", skipped)
        return result


def info_plist_path(config: ResolvedBuildConfig) -> Path:
    return config.project_dir / f"{config.app.name}_iOS" / "Info.plist"


def signing_summary(signing: SigningConfig) -> Mapping[str, str | None]:
    return {
        "mode": signing.mode.value,
        "identity": signing.identity,
        "team_id": signing.team_id,
        "provisioning_profile_uuid": signing.provisioning_profile_uuid,
    }
