"""
lara-sync - incremental multi-format localization translator

Translates localization files (JSON, PO, Android XML, TS/JS objects, Vue
<i18n> blocks, Markdown) from a source locale into target locales. A
checksum ledger (lara.lock) remembers what was translated, so each run only
translates keys that are new or changed.

Quick start:
    lara-sync locales
    # write lara.yaml
    lara-sync translate
"""

__version__ = "1.0.0"

from .config import Config, FileTypeConfig, load_config, parse_config
from .engine import EngineResult, RunReport, TranslationEngine, run_translation
from .errors import ConfigError, FatalProviderError, LaraSyncError, ParseError, ProviderError
from .ledger import ChangeRecord, ChecksumLedger
from .providers import PseudoTranslator, TranslationProvider, load_provider

__all__ = [
    "Config",
    "FileTypeConfig",
    "load_config",
    "parse_config",
    "EngineResult",
    "RunReport",
    "TranslationEngine",
    "run_translation",
    "ConfigError",
    "FatalProviderError",
    "LaraSyncError",
    "ParseError",
    "ProviderError",
    "ChangeRecord",
    "ChecksumLedger",
    "PseudoTranslator",
    "TranslationProvider",
    "load_provider",
]
