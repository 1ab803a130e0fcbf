"""Configuration loading for adbmux."""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Hashable
from dataclasses import dataclass
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError
from jsonschema.protocols import Validator
from jsonschema.validators import validator_for

from adbmux.core.errors import ConfigurationMissingError, ConfigValidationError

LOGGER = logging.getLogger(__name__)

CONFIG_FILE_NAME = "config.yaml"
DEFAULT_ADB_PATH = "adb"
DEFAULT_RECORD_REMOTE_PATH = "/sdcard/temp_screenrecord.mp4"


class UniqueKeyLoader(yaml.SafeLoader):
    """Safe YAML loader that refuses a setting given twice in one mapping."""

    def construct_mapping(self, node: yaml.MappingNode, deep: bool = False) -> dict[Any, Any]:
        seen: dict[Any, yaml.Mark] = {}
        for key_node, _ in node.value:
            key = self.construct_object(key_node, deep=deep)
            if not isinstance(key, Hashable):
                continue
            if key in seen:
                first = seen[key]
                raise ConfigValidationError(
                    f"Setting '{key}' is repeated on line {key_node.start_mark.line + 1} "
                    f"(first set on line {first.line + 1})"
                )
            seen[key] = key_node.start_mark
        return super().construct_mapping(node, deep=deep)


@dataclass(frozen=True)
class Config:
    adb_path: str = DEFAULT_ADB_PATH
    scrcpy_dir: str | None = None
    record_remote_path: str = DEFAULT_RECORD_REMOTE_PATH
    source: Path | None = None

    @classmethod
    def from_document(cls, doc: dict[str, Any], source: Path) -> Config:
        return cls(
            adb_path=doc.get("adb_path", DEFAULT_ADB_PATH),
            scrcpy_dir=doc.get("scrcpy_dir"),
            record_remote_path=doc.get("record_remote_path", DEFAULT_RECORD_REMOTE_PATH),
            source=source,
        )

    def require_scrcpy_dir(self) -> str:
        if self.scrcpy_dir:
            return self.scrcpy_dir
        location = self.source or default_config_path()
        raise ConfigurationMissingError(
            f"Setting 'scrcpy_dir' is not configured. Add a line 'scrcpy_dir: <your scrcpy dir>' to {location}"
        )


def default_config_path() -> Path:
    base = os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config"
    return Path(base, "adbmux", CONFIG_FILE_NAME)


@lru_cache(maxsize=1)
def config_validator() -> Validator:
    """Return the validator for the packaged config schema, built once per process."""
    with resources.files("adbmux.schemas").joinpath("config.schema.json").open(encoding="utf-8") as handle:
        schema = json.load(handle)
    cls = validator_for(schema)
    cls.check_schema(schema)
    return cls(schema)


def _schema_error(config_path: Path, exc: ValidationError) -> ConfigValidationError:
    setting = "/".join(str(part) for part in exc.absolute_path)
    suffix = f" at '{setting}'" if setting else ""
    return ConfigValidationError(f"Schema validation failed for {config_path}{suffix}: {exc.message}")


def load_config(path: Path | None = None) -> Config:
    """Load configuration from ``path`` or the default XDG location.

    A missing default file yields the built-in defaults. An explicitly given path
    must exist. An empty file counts as an empty mapping.
    """
    config_path = path or default_config_path()
    if not config_path.exists():
        if path is not None:
            raise ConfigValidationError(f"Config file {config_path} does not exist")
        LOGGER.debug("No config file at %s, using defaults", config_path)
        return Config()

    LOGGER.debug("Reading config from %s", config_path)
    try:
        with config_path.open(encoding="utf-8") as handle:
            doc = yaml.load(handle, Loader=UniqueKeyLoader)
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigValidationError(f"Could not read config file {config_path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigValidationError(f"Invalid YAML in {config_path}: {exc}") from exc

    if doc is None:
        doc = {}
    elif not isinstance(doc, dict):
        raise ConfigValidationError(f"Config file {config_path} must contain a mapping at root")

    try:
        config_validator().validate(doc)
    except ValidationError as exc:
        raise _schema_error(config_path, exc) from exc

    return Config.from_document(doc, config_path)
