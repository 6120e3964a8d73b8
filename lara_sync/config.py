#!/usr/bin/env python3
"""
Project configuration (lara.yaml).

Example:

    version: "1.0.0"
    locales:
      source: en
      target: [it, fr]
    files:
      json:
        include: ["src/i18n/[locale].json"]
        exclude: []
        lockedKeys: ["meta/*"]
        ignoredKeys: []
    project:
      instruction: "Informal tone"
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

import yaml

from .errors import ConfigError
from .format_handlers import FormatRegistry

logger = logging.getLogger(__name__)

CONFIG_FILE = "lara.yaml"
CONFIG_VERSION = "1.0.0"


@dataclass
class FileTypeConfig:
    """Files of one type and the key patterns that need special handling."""
    include: list[str] = field(default_factory=list)
    exclude: list[str] = field(default_factory=list)
    locked_keys: list[str] = field(default_factory=list)
    ignored_keys: list[str] = field(default_factory=list)


@dataclass
class Config:
    """Validated project configuration."""
    source_locale: str
    target_locales: list[str]
    files: dict[str, FileTypeConfig]
    version: str = CONFIG_VERSION
    instruction: Optional[str] = None
    provider: Optional[str] = None


def _string_list(value: Any, where: str) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ConfigError(f"{where} must be a list of strings")
    return list(value)


def _known_file_types() -> set[str]:
    names = {entry['name'].lower() for entry in FormatRegistry.list_formats()}
    return names | set(FormatRegistry.supported_extensions())


def parse_config(raw: Any) -> Config:
    """
    Validate a decoded lara.yaml document.

    Raises:
        ConfigError: On any structural problem
    """
    if not isinstance(raw, dict):
        raise ConfigError("Config must be a mapping")

    locales = raw.get('locales')
    if not isinstance(locales, dict):
        raise ConfigError("'locales' section is required")

    source = locales.get('source')
    if not isinstance(source, str) or not source:
        raise ConfigError("'locales.source' must be a locale code")

    targets = _string_list(locales.get('target'), "'locales.target'")
    if not targets:
        raise ConfigError("'locales.target' must list at least one locale")
    if source in targets:
        raise ConfigError(f"Source locale '{source}' cannot also be a target locale")

    files_section = raw.get('files') or {}
    if not isinstance(files_section, dict):
        raise ConfigError("'files' must be a mapping of file type -> settings")

    known = _known_file_types()
    files: dict[str, FileTypeConfig] = {}
    for file_type, settings in files_section.items():
        if str(file_type).lower() not in known:
            raise ConfigError(f"Unknown file type '{file_type}'. Supported: {', '.join(sorted(known))}")
        settings = settings or {}
        if not isinstance(settings, dict):
            raise ConfigError(f"'files.{file_type}' must be a mapping")
        files[str(file_type)] = FileTypeConfig(
            include=_string_list(settings.get('include'), f"'files.{file_type}.include'"),
            exclude=_string_list(settings.get('exclude'), f"'files.{file_type}.exclude'"),
            locked_keys=_string_list(settings.get('lockedKeys'), f"'files.{file_type}.lockedKeys'"),
            ignored_keys=_string_list(settings.get('ignoredKeys'), f"'files.{file_type}.ignoredKeys'"),
        )

    project = raw.get('project') or {}
    if not isinstance(project, dict):
        raise ConfigError("'project' must be a mapping")
    instruction = project.get('instruction')
    if instruction is not None and not isinstance(instruction, str):
        raise ConfigError("'project.instruction' must be a string")

    provider = raw.get('provider')
    if provider is not None and not isinstance(provider, str):
        raise ConfigError("'provider' must be a 'package.module:factory' string")

    return Config(
        source_locale=source,
        target_locales=targets,
        files=files,
        version=str(raw.get('version', CONFIG_VERSION)),
        instruction=instruction or None,
        provider=provider,
    )


def load_config(path: Union[str, Path] = CONFIG_FILE) -> Config:
    """
    Read and validate a config file.

    Raises:
        ConfigError: If the file is missing, not valid YAML, or invalid
    """
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        raw = yaml.safe_load(config_path.read_text(encoding='utf-8'))
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid config file: {e}") from e

    config = parse_config(raw)
    logger.debug("Loaded config from %s", config_path)
    return config
