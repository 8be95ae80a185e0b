"""Configuration loading and validation for chargerctl."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, fields, replace
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError, validators

from chargerctl.core.errors import ConfigError
from chargerctl.core.model import ChargerConfig

LOGGER = logging.getLogger(__name__)


class UniqueKeyLoader(yaml.SafeLoader):
    """YAML loader that rejects duplicate mapping keys."""


UniqueKeyLoader.yaml_implicit_resolvers = {
    key: list(value) for key, value in yaml.SafeLoader.yaml_implicit_resolvers.items()
}

# No implicit booleans; on/off/yes/no stay strings.
for first_char, mappings in list(UniqueKeyLoader.yaml_implicit_resolvers.items()):
    UniqueKeyLoader.yaml_implicit_resolvers[first_char] = [
        (tag, regexp)
        for tag, regexp in mappings
        if tag != "tag:yaml.org,2002:bool"
    ]


def _construct_mapping(loader: UniqueKeyLoader, node: yaml.Node, deep: bool = False) -> dict[str, Any]:
    mapping: dict[str, Any] = {}
    for key_node, value_node in node.value:
        key = loader.construct_object(key_node, deep=deep)
        if key in mapping:
            raise ConfigError(f"Duplicate key '{key}' in YAML document")
        mapping[key] = loader.construct_object(value_node, deep=deep)
    return mapping


UniqueKeyLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG,
    _construct_mapping,
)


@dataclass(frozen=True)
class LoadedConfig:
    config: ChargerConfig
    source: Path | None


def _load_schema_validator() -> Any:
    schema_text = resources.files("chargerctl.schemas").joinpath("config.schema.json").read_text(
        encoding="utf-8"
    )
    schema = json.loads(schema_text)
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def default_config_path() -> Path:
    xdg_config = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return xdg_config / "chargerctl/config.yaml"


def _normalize_bool(value: Any, *, context: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
    raise ConfigError(f"{context} must be boolean true/false")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Could not read config file {path}: {exc}") from exc

    try:
        loaded = yaml.load(content, Loader=UniqueKeyLoader)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc

    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"Config file {path} must contain a mapping at root")
    return loaded


def _validate(doc: dict[str, Any], source: str) -> None:
    validator = _load_schema_validator()
    try:
        validator.validate(doc)
    except ValidationError as exc:
        path = ".".join(str(p) for p in exc.path)
        where = f" ({path})" if path else ""
        raise ConfigError(f"Schema validation failed for {source}{where}: {exc.message}") from exc


def build_config(doc: dict[str, Any], *, source: str = "<defaults>") -> ChargerConfig:
    """Validate a raw mapping and merge it over the built-in defaults."""
    if "stop_scan_on_match" in doc:
        doc = {
            **doc,
            "stop_scan_on_match": _normalize_bool(
                doc["stop_scan_on_match"],
                context=f"{source}.stop_scan_on_match",
            ),
        }
    _validate(doc, source)

    values: dict[str, Any] = {}
    for name, value in doc.items():
        if name in {"scan_timeout_s", "request_timeout_s", "connect_timeout_s"}:
            value = float(value)
        elif name == "charger_port":
            value = int(value)
        values[name] = value
    return replace(ChargerConfig(), **values)


def load_config(
    path: Path | None = None,
    *,
    overrides: dict[str, Any] | None = None,
) -> LoadedConfig:
    """Resolve configuration from defaults, a YAML file and explicit overrides.

    An explicitly given *path* must exist. The XDG default location is only
    read when present. ``None`` values in *overrides* are ignored so CLI
    options that were not passed leave the file value untouched.
    """
    doc: dict[str, Any] = {}
    source: Path | None = None

    if path is not None:
        if not path.is_file():
            raise ConfigError(f"Config file {path} does not exist")
        source = path
    else:
        candidate = default_config_path()
        if candidate.is_file():
            source = candidate

    if source is not None:
        LOGGER.debug("Loading config from %s", source)
        doc.update(_read_yaml(source))

    known = {f.name for f in fields(ChargerConfig)}
    for name, value in (overrides or {}).items():
        if value is None:
            continue
        if name not in known:
            raise ConfigError(f"Unknown config option '{name}'")
        doc[name] = value

    config = build_config(doc, source=str(source) if source else "<overrides>")
    return LoadedConfig(config=config, source=source)
