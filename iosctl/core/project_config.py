"""Project configuration loading and validation for YAML-based iosctl projects."""

from __future__ import annotations

import json
import logging
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError, validators

from iosctl.core.errors import ConfigLoadError, ConfigValidationError
from iosctl.core.model import App, IosSection, ProjectConfig

DEFAULT_CONFIG_NAME = "iosctl.yaml"
DEFAULT_MINIMUM_SYSTEM_VERSION = "13.0"
LOGGER = logging.getLogger(__name__)


class UniqueKeyLoader(yaml.SafeLoader):
    """YAML loader that rejects duplicate mapping keys."""


UniqueKeyLoader.yaml_implicit_resolvers = {
    key: list(value) for key, value in yaml.SafeLoader.yaml_implicit_resolvers.items()
}

# Versions such as 1.10 must stay strings, not become floats.
for first_char, mappings in list(UniqueKeyLoader.yaml_implicit_resolvers.items()):
    UniqueKeyLoader.yaml_implicit_resolvers[first_char] = [
        (tag, regexp)
        for tag, regexp in mappings
        if tag not in ("tag:yaml.org,2002:float", "tag:yaml.org,2002:int")
    ]


def _construct_mapping(loader: UniqueKeyLoader, node: yaml.Node, deep: bool = False) -> dict[str, Any]:
    mapping: dict[str, Any] = {}
    for key_node, value_node in node.value:
        key = loader.construct_object(key_node, deep=deep)
        if key in mapping:
            raise ConfigValidationError(f"Duplicate key '{key}' in YAML document")
        mapping[key] = loader.construct_object(value_node, deep=deep)
    return mapping


UniqueKeyLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG,
    _construct_mapping,
)


def _load_schema_validator() -> Any:
    schema_text = resources.files("iosctl.schemas").joinpath("project.schema.json").read_text(
        encoding="utf-8"
    )
    schema = json.loads(schema_text)
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigLoadError(f"Could not read project config {path}: {exc}") from exc

    try:
        loaded = yaml.load(content, Loader=UniqueKeyLoader)
    except yaml.YAMLError as exc:
        raise ConfigValidationError(f"Invalid YAML in {path}: {exc}") from exc

    if not isinstance(loaded, dict):
        raise ConfigValidationError(f"Project config {path} must contain a mapping at root")
    return loaded


def build_project_config(doc: dict[str, Any], *, root_dir: Path, source: Path | None = None) -> ProjectConfig:
    validator = _load_schema_validator()
    try:
        validator.validate(doc)
    except ValidationError as exc:
        path = ".".join(str(p) for p in exc.path)
        where = f" ({path})" if path else ""
        origin = source or "project config"
        raise ConfigValidationError(f"Schema validation failed for {origin}{where}: {exc.message}") from exc

    ios_doc = doc.get("ios", {})
    return ProjectConfig(
        app=App(
            name=doc["app"]["name"],
            identifier=doc["app"]["identifier"],
            root_dir=root_dir,
        ),
        version=doc.get("version"),
        features=tuple(doc.get("features", [])),
        ios=IosSection(
            development_team=ios_doc.get("development_team"),
            frameworks=tuple(ios_doc.get("frameworks", [])),
            minimum_system_version=ios_doc.get(
                "minimum_system_version", DEFAULT_MINIMUM_SYSTEM_VERSION
            ),
            info_plist=ios_doc.get("info_plist"),
        ),
        source=source,
    )


def load_project_config(path: Path | str | None = None) -> ProjectConfig:
    config_path = Path(path) if path else Path.cwd() / DEFAULT_CONFIG_NAME
    if not config_path.is_file():
        raise ConfigLoadError(
            f"Project config not found at {config_path}. Create {DEFAULT_CONFIG_NAME} or pass --config."
        )
    config_path = config_path.resolve()
    LOGGER.debug("Loading project config from %s", config_path)
    doc = _read_yaml(config_path)
    return build_project_config(doc, root_dir=config_path.parent, source=config_path)
