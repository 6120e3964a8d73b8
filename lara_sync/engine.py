#!/usr/bin/env python3
"""
Translation engine.

One TranslationEngine handles one configured input path (which may hold a
[locale] placeholder) for every target locale. The ledger says which source
keys changed since the last run; the engine decides per key whether to
translate, copy, keep or drop, then writes the target file through the
path's format handler.

run_translation() walks a whole Config and collects the results.
"""

import fnmatch
import logging
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any, Optional, Sequence, Union

from .config import Config
from .errors import FatalProviderError, ParseError, ProviderError
from .format_handlers import FlatMap, FormatHandler, ParseOptions, ParserFactory, SerializeOptions
from .format_handlers.flat import display_key
from .ledger import NEW, UNCHANGED, ChangeRecord, ChecksumLedger
from .paths import LOCALE_PLACEHOLDER, build_path, ensure_directory_exists, expand_include, is_excluded
from .providers import TranslationProvider

logger = logging.getLogger(__name__)


@dataclass
class FileFailure:
    """A file (or file/locale pair) that could not be processed."""
    path: str
    message: str
    locale: Optional[str] = None

    def to_dict(self) -> dict:
        return {'path': self.path, 'locale': self.locale, 'message': self.message}


@dataclass
class EngineResult:
    """Outcome of one TranslationEngine.translate() call."""
    input_path: str
    written: list[str] = field(default_factory=list)
    failures: list[FileFailure] = field(default_factory=list)
    translated: int = 0
    copied: int = 0
    kept: int = 0
    omitted: int = 0

    @property
    def ok(self) -> bool:
        return not self.failures

    def to_dict(self) -> dict:
        return {
            'input_path': self.input_path,
            'written': self.written,
            'failures': [failure.to_dict() for failure in self.failures],
            'translated': self.translated,
            'copied': self.copied,
            'kept': self.kept,
            'omitted': self.omitted,
        }


@dataclass
class RunReport:
    """Results of every engine in a run."""
    results: list[EngineResult] = field(default_factory=list)

    @property
    def failures(self) -> list[FileFailure]:
        return [failure for result in self.results for failure in result.failures]

    @property
    def written(self) -> list[str]:
        return [path for result in self.results for path in result.written]

    @property
    def ok(self) -> bool:
        return not self.failures

    def to_dict(self) -> dict:
        return {
            'success': self.ok,
            'files': [result.to_dict() for result in self.results],
            'written': self.written,
            'translated': sum(result.translated for result in self.results),
            'copied': sum(result.copied for result in self.results),
            'kept': sum(result.kept for result in self.results),
            'errors': [f"Error translating {failure.path}: {failure.message}" for failure in self.failures],
        }


def _matches(key: str, patterns: Sequence[str]) -> bool:
    shown = display_key(key)
    return any(fnmatch.fnmatchcase(shown, pattern) for pattern in patterns)


class TranslationEngine:
    """
    Keeps the target files of one input path in sync with its source.

    Per source key, in order:
    - ignored pattern -> left out of the target
    - locked pattern -> source value copied
    - no target value yet, or force -> strings translated, others copied
    - unchanged since last run -> target value kept
    - new, but the target already has a value -> target value kept
    - updated -> strings translated, others copied

    Example:
        engine = TranslationEngine(ChecksumLedger(), PseudoTranslator(),
                                   'en', ['it'], 'src/i18n/[locale].json')
        result = engine.translate()
    """

    def __init__(
        self,
        ledger: ChecksumLedger,
        translator: TranslationProvider,
        source_locale: str,
        target_locales: Sequence[str],
        input_path: str,
        force: bool = False,
        locked_keys: Sequence[str] = (),
        ignored_keys: Sequence[str] = (),
        instructions: Optional[str] = None,
        root: Union[str, Path] = ".",
    ):
        self.ledger = ledger
        self.translator = translator
        self.source_locale = source_locale
        self.target_locales = list(target_locales)
        self.input_path = input_path
        self.force = force
        self.locked_keys = list(locked_keys)
        self.ignored_keys = list(ignored_keys)
        self.instructions = [instructions] if instructions else None
        self.root = Path(root)

    @property
    def multi_locale(self) -> bool:
        """A path without [locale] holds every locale in one file."""
        return LOCALE_PLACEHOLDER not in self.input_path

    def _resolve(self, locale: str) -> Path:
        return self.root / build_path(self.input_path, locale)

    def _new_handler(self) -> FormatHandler:
        # Handlers may keep state from parse() for serialize(); one per locale.
        return ParserFactory(self.input_path).handler

    def _parse_options(self, locale: str) -> Optional[ParseOptions]:
        return ParseOptions(locale=locale) if self.multi_locale else None

    def translate(self) -> EngineResult:
        """
        Bring every target locale of this input path up to date.

        Returns:
            EngineResult with written files, failures and key counts

        Raises:
            FatalProviderError: On authentication or service failures
        """
        result = EngineResult(self.input_path)

        try:
            handler = self._new_handler()
        except ValueError as e:
            self._fail(result, str(e))
            return result

        if self.multi_locale and not handler.supports_multi_locale:
            self._fail(result, f"Path must contain {LOCALE_PLACEHOLDER} for {handler.name} files")
            return result

        source_path = self._resolve(self.source_locale)
        if not source_path.is_file():
            self._fail(result, f"Source file not found: {source_path}")
            return result

        try:
            changelog = self.ledger.calculate_checksum(
                str(source_path),
                handler,
                self.source_locale if self.multi_locale else None,
                identity=PurePosixPath(build_path(self.input_path, self.source_locale)).as_posix(),
            )
        except (ParseError, ValueError) as e:
            self._fail(result, str(e))
            return result

        for locale in self.target_locales:
            try:
                self._translate_locale(source_path, locale, changelog, result)
            except ProviderError as e:
                if e.is_fatal:
                    raise FatalProviderError(str(e), e) from e
                self._fail(result, str(e), locale)
            except (ParseError, ValueError, OSError) as e:
                self._fail(result, str(e), locale)

        return result

    def _fail(self, result: EngineResult, message: str, locale: Optional[str] = None) -> None:
        logger.error("Error translating %s: %s", self.input_path, message)
        result.failures.append(FileFailure(self.input_path, message, locale))

    def _translate_locale(
        self,
        source_path: Path,
        locale: str,
        changelog: dict[str, ChangeRecord],
        result: EngineResult,
    ) -> None:
        handler = self._new_handler()
        source_text = source_path.read_text(encoding='utf-8')
        source_values = handler.parse(source_text, self._parse_options(self.source_locale))

        target_path = source_path if self.multi_locale else self._resolve(locale)
        target_exists = target_path.is_file()
        target_text = target_path.read_text(encoding='utf-8') if target_exists else handler.get_fallback()
        target_values = handler.parse(target_text, self._parse_options(locale))
        target_lookup = {handler.ledger_key(key): value for key, value in target_values.items()}

        formatting = handler.detect_formatting(target_text if target_exists else source_text)

        merged: FlatMap = {}
        for key, source_value in source_values.items():
            record = changelog.get(key)
            state = record.state if record else NEW
            action, value = self._decide(handler, key, source_value, state, target_lookup, locale)
            if action == 'omit':
                result.omitted += 1
                continue
            setattr(result, action, getattr(result, action) + 1)
            merged[key] = value

        if (handler.skeleton == 'target' and target_exists
                and list(merged.items()) == list(target_values.items())):
            logger.debug("%s (%s) is up to date", target_path, locale)
            return

        original = source_text if handler.skeleton == 'source' else target_text
        output = handler.serialize(merged, SerializeOptions(
            original_content=original,
            target_locale=locale,
            formatting=formatting,
            locale_scoped=self.multi_locale,
        ))

        ensure_directory_exists(target_path)
        target_path.write_text(output, encoding='utf-8')
        if str(target_path) not in result.written:
            result.written.append(str(target_path))
        logger.info("Wrote %s (%s)", target_path, locale)

    def _decide(
        self,
        handler: FormatHandler,
        key: str,
        source_value: Any,
        state: str,
        target_lookup: FlatMap,
        locale: str,
    ) -> tuple[str, Any]:
        """Return (action, value); action is 'omit', 'copied', 'kept' or 'translated'."""
        if _matches(key, self.ignored_keys):
            return 'omit', None
        if _matches(key, self.locked_keys):
            return 'copied', source_value

        text = handler.source_text(key, source_value)
        lookup_key = handler.ledger_key(key)
        target_value = target_lookup.get(lookup_key)
        missing = lookup_key not in target_lookup or (target_value == '' and isinstance(text, str) and text != '')

        if missing or self.force:
            return self._translate_value(text, source_value, locale)
        if state == UNCHANGED or state == NEW:
            return 'kept', target_value
        return self._translate_value(text, source_value, locale)

    def _translate_value(self, text: Any, source_value: Any, locale: str) -> tuple[str, Any]:
        if not isinstance(text, str) or not text:
            return 'copied', source_value
        translated = self.translator.translate(text, self.source_locale, locale, instructions=self.instructions)
        return 'translated', translated


def run_translation(
    config: Config,
    ledger: ChecksumLedger,
    translator: TranslationProvider,
    force: bool = False,
    root: Union[str, Path] = ".",
) -> RunReport:
    """
    Translate every file the config includes.

    Files run one after another; a failing file does not stop the others.

    Raises:
        FatalProviderError: On authentication or service failures
    """
    report = RunReport()

    for file_type, settings in config.files.items():
        for pattern in settings.include:
            for input_path in expand_include(pattern, config.source_locale, root):
                concrete = build_path(input_path, config.source_locale)
                if is_excluded(input_path, settings.exclude) or is_excluded(concrete, settings.exclude):
                    logger.debug("Skipping excluded %s", input_path)
                    continue

                logger.info("Translating %s (%s) to %s", input_path, file_type, ', '.join(config.target_locales))
                engine = TranslationEngine(
                    ledger=ledger,
                    translator=translator,
                    source_locale=config.source_locale,
                    target_locales=config.target_locales,
                    input_path=input_path,
                    force=force,
                    locked_keys=settings.locked_keys,
                    ignored_keys=settings.ignored_keys,
                    instructions=config.instruction,
                    root=root,
                )
                report.results.append(engine.translate())

    return report
