"""Build configuration synthesis from env, project config, flags and keychain state."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping, MutableMapping, Sequence
from pathlib import Path, PurePath

from iosctl.core.model import (
    App,
    ProjectConfig,
    ResolvedBuildConfig,
    SigningIdentity,
    SynthesisResult,
)
from iosctl.tooling.base import IdentityQuery

APPLE_DEVELOPMENT_TEAM_ENV_VAR_NAME = "APPLE_DEVELOPMENT_TEAM"
PROJECT_PATH_ENV_VAR_NAME = "IOSCTL_IOS_PROJECT_PATH"
APP_NAME_ENV_VAR_NAME = "IOSCTL_IOS_APP_NAME"
FRAMEWORK_EXTENSION = ".framework"
LOGGER = logging.getLogger(__name__)


class EnvironmentCell:
    """Narrow write channel for values later tool invocations read back.

    Only the generated project path and app name pass through here. The CLI
    backs it with `os.environ`; tests back it with a plain dict.
    """

    def __init__(self, target: MutableMapping[str, str] | None = None) -> None:
        self._target = target if target is not None else os.environ

    def publish(self, config: ResolvedBuildConfig) -> None:
        self._target[PROJECT_PATH_ENV_VAR_NAME] = str(config.project_dir)
        self._target[APP_NAME_ENV_VAR_NAME] = config.app.name

    @property
    def project_path(self) -> str | None:
        return self._target.get(PROJECT_PATH_ENV_VAR_NAME)

    @property
    def app_name(self) -> str | None:
        return self._target.get(APP_NAME_ENV_VAR_NAME)


def resolve_development_team(
    env: Mapping[str, str],
    project_config: ProjectConfig,
    identities: IdentityQuery,
) -> tuple[str | None, str | None]:
    """Return `(team_id, warning)`; the first present source wins."""
    override = env.get(APPLE_DEVELOPMENT_TEAM_ENV_VAR_NAME)
    if override:
        return override, None
    if project_config.ios.development_team:
        return project_config.ios.development_team, None

    teams = identities.find_development_teams()
    if len(teams) == 1:
        return teams[0].id, None
    return None, _team_warning(teams)


def _team_warning(teams: Sequence[SigningIdentity]) -> str:
    if not teams:
        return (
            "No code signing certificates found. You must add one and set the certificate "
            "development team ID on the `ios > development_team` config value or the "
            f"`{APPLE_DEVELOPMENT_TEAM_ENV_VAR_NAME}` environment variable."
        )
    available = ", ".join(f"{t.name} (ID: {t.id})" for t in teams)
    return (
        "You must set the code signing certificate development team ID on the "
        f"`ios > development_team` config value or the `{APPLE_DEVELOPMENT_TEAM_ENV_VAR_NAME}` "
        f"environment variable. Available certificates: {available}"
    )


def classify_frameworks(
    references: Sequence[str],
    *,
    root_dir: Path,
    project_dir: Path,
) -> tuple[tuple[str, ...], tuple[str, ...]]:
    """Split framework references into `(link, vendor)` lists.

    A bare name or a `.framework` bundle is linked by name; anything else is a
    vendored binary whose path is rewritten relative to `project_dir`.
    """
    frameworks: list[str] = []
    vendor: list[str] = []
    for reference in references:
        path = PurePath(reference)
        if not path.suffix:
            frameworks.append(reference)
        elif path.suffix == FRAMEWORK_EXTENSION:
            frameworks.append(path.stem)
        else:
            vendor.append(os.path.relpath(root_dir / path, project_dir))
    return tuple(frameworks), tuple(vendor)


def synthesize(
    app: App,
    project_config: ProjectConfig,
    cli_features: Sequence[str] | None,
    env: Mapping[str, str],
    *,
    identities: IdentityQuery,
    exports: EnvironmentCell | None = None,
) -> SynthesisResult:
    warnings: list[str] = []

    team_id, warning = resolve_development_team(env, project_config, identities)
    if warning:
        LOGGER.debug(warning)
        warnings.append(warning)

    # Caller flags extend the configured list; duplicates are kept.
    features = list(project_config.features)
    if cli_features:
        features.extend(cli_features)

    frameworks, vendor_frameworks = classify_frameworks(
        project_config.ios.frameworks,
        root_dir=app.root_dir,
        project_dir=app.project_dir,
    )

    config = ResolvedBuildConfig(
        app=app,
        project_dir=app.project_dir,
        development_team=team_id,
        features=tuple(features),
        frameworks=frameworks,
        vendor_frameworks=vendor_frameworks,
        bundle_version=project_config.version,
        bundle_version_short=project_config.version,
        minimum_system_version=project_config.ios.minimum_system_version,
    )

    if exports is not None:
        exports.publish(config)

    return SynthesisResult(config=config, warnings=tuple(warnings))
