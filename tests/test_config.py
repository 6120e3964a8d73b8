#!/usr/bin/env python3
"""Tests for lara.yaml loading and validation."""

import pytest

from lara_sync.config import load_config, parse_config
from lara_sync.errors import ConfigError

VALID = '''version: "1.0.0"
locales:
  source: en
  target: [it, fr]
files:
  json:
    include: ["src/i18n/[locale].json"]
    lockedKeys: ["meta/*"]
  po:
    include: ["locale/[locale]/messages.po"]
    exclude: ["locale/legacy/*"]
    ignoredKeys: ["debug*"]
project:
  instruction: "Informal tone"
provider: "pseudo"
'''


def test_load_valid_config(tmp_path):
    path = tmp_path / 'lara.yaml'
    path.write_text(VALID)
    config = load_config(path)

    assert config.source_locale == 'en'
    assert config.target_locales == ['it', 'fr']
    assert config.files['json'].include == ['src/i18n/[locale].json']
    assert config.files['json'].locked_keys == ['meta/*']
    assert config.files['json'].exclude == []
    assert config.files['po'].ignored_keys == ['debug*']
    assert config.instruction == 'Informal tone'
    assert config.provider == 'pseudo'


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError, match='not found'):
        load_config(tmp_path / 'lara.yaml')


def test_invalid_yaml(tmp_path):
    path = tmp_path / 'lara.yaml'
    path.write_text('locales: [unclosed\n')
    with pytest.raises(ConfigError, match='Invalid config file'):
        load_config(path)


@pytest.mark.parametrize('raw, message', [
    ([], 'must be a mapping'),
    ({}, "'locales' section is required"),
    ({'locales': {'target': ['it']}}, 'locales.source'),
    ({'locales': {'source': 'en', 'target': []}}, 'at least one locale'),
    ({'locales': {'source': 'en', 'target': ['en', 'it']}}, 'cannot also be a target'),
    ({'locales': {'source': 'en', 'target': ['it']}, 'files': {'srt': {}}}, "Unknown file type 'srt'"),
    ({'locales': {'source': 'en', 'target': ['it']}, 'files': {'json': {'include': 'x'}}}, 'list of strings'),
    ({'locales': {'source': 'en', 'target': ['it']}, 'project': {'instruction': 3}}, 'project.instruction'),
])
def test_invalid_configs(raw, message):
    with pytest.raises(ConfigError, match=message):
        parse_config(raw)


def test_file_type_by_extension_and_empty_settings():
    config = parse_config({'locales': {'source': 'en', 'target': ['it']}, 'files': {'ts': None}})
    assert config.files['ts'].include == []
    assert config.instruction is None
