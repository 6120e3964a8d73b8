#!/usr/bin/env python3
"""
Locale-aware path helpers.

Configured paths use the literal placeholder "[locale]":
'src/i18n/[locale].json' or 'src/i18n/[locale]/pages/home.json'.
"""

import fnmatch
import glob
import os
from pathlib import Path
from typing import Iterable, Optional, Union

from .format_handlers import FormatRegistry, get_file_extension

LOCALE_PLACEHOLDER = "[locale]"

AVAILABLE_LOCALES = (
    'ar', 'ca', 'da', 'el', 'es', 'fr', 'hr', 'id', 'ja', 'ms', 'nl', 'pt',
    'ru', 'sv', 'tr', 'zh', 'zh-TW', 'bg', 'cs', 'de', 'en', 'fi', 'he', 'hu',
    'it', 'ko', 'nb', 'pl', 'pt-BR', 'sk', 'th', 'uk', 'zh-CN',
)

DEFAULT_EXCLUDED_DIRECTORIES = (
    'node_modules', 'dist', 'build', 'bin', 'out', 'spec', 'test', 'tests',
)

MAX_DEPTH_LEVEL = 6

_WILDCARD_CHARS = set('*?[')

__all__ = [
    'AVAILABLE_LOCALES',
    'DEFAULT_EXCLUDED_DIRECTORIES',
    'LOCALE_PLACEHOLDER',
    'build_path',
    'ensure_directory_exists',
    'expand_include',
    'extract_all_locales',
    'extract_locales_from_path',
    'get_file_extension',
    'is_excluded',
    'normalize_path',
    'search_locale_paths',
]


def build_path(path: str, locale: str) -> str:
    """'src/i18n/[locale].json', 'it' -> 'src/i18n/it.json'."""
    return path.replace(LOCALE_PLACEHOLDER, locale)


def ensure_directory_exists(file_path: Union[str, Path]) -> None:
    """Create the parent directory of file_path if it is missing."""
    Path(file_path).parent.mkdir(parents=True, exist_ok=True)


def locale_from_filename(name: str) -> Optional[str]:
    """Locale encoded in a file name: 'it.json' -> 'it', 'home.pt-BR.json' -> 'pt-BR'."""
    stem = name.rsplit('.', 1)[0] if '.' in name else name
    if stem in AVAILABLE_LOCALES:
        return stem
    suffix = stem.rsplit('.', 1)[-1]
    if suffix != stem and suffix in AVAILABLE_LOCALES:
        return suffix
    return None


def normalize_path(file_path: Union[str, Path], root: Union[str, Path] = ".") -> Optional[str]:
    """
    Replace the first locale in a path with [locale].

    Only the first locale found is replaced, so in
    'src/i18n/en/pages/it/home.json' the 'it' directory stays as is.

    Returns:
        Normalized relative path, or None if the path holds no locale
    """
    relative = os.path.relpath(str(file_path), str(root))
    parts = [part for part in Path(relative).parts if part]
    current_locale = None
    normalized = []

    for i, part in enumerate(parts):
        if i == len(parts) - 1:
            file_locale = locale_from_filename(part)
            if current_locale is None and file_locale:
                current_locale = file_locale
            if file_locale and file_locale == current_locale:
                stem, dot, extension = part.rpartition('.')
                if not dot:
                    stem, extension = part, ''
                stem = stem[:-len(file_locale)] + LOCALE_PLACEHOLDER
                normalized.append(f"{stem}.{extension}" if extension else stem)
                continue
            normalized.append(part)
            continue

        if current_locale is None and part in AVAILABLE_LOCALES:
            current_locale = part
            normalized.append(LOCALE_PLACEHOLDER)
            continue
        normalized.append(part)

    if current_locale is None:
        return None
    return '/'.join(normalized)


def _find_eligible_files(directory: Path, level: int, extensions: set[str]) -> list[Path]:
    found = []
    try:
        entries = sorted(directory.iterdir())
    except OSError:
        return found

    for entry in entries:
        if entry.name.startswith('.'):
            continue
        if entry.is_dir():
            if level >= MAX_DEPTH_LEVEL or entry.name in DEFAULT_EXCLUDED_DIRECTORIES:
                continue
            found.extend(_find_eligible_files(entry, level + 1, extensions))
        elif entry.is_file() and level > 0 and get_file_extension(entry.name).lower() in extensions:
            # files directly in the root are not localization files
            found.append(entry)
    return found


def search_locale_paths(root: Union[str, Path] = ".") -> list[str]:
    """
    Find localization files under root and return them in [locale] form.

    Hidden and DEFAULT_EXCLUDED_DIRECTORIES are skipped; the walk stops
    MAX_DEPTH_LEVEL directories deep.
    """
    extensions = set(FormatRegistry.supported_extensions())
    files = _find_eligible_files(Path(root), 0, extensions)

    paths = []
    for file_path in files:
        normalized = normalize_path(file_path, root)
        if normalized and normalized not in paths:
            paths.append(normalized)
    return paths


def _locales_in(file_path: Path, root: Union[str, Path]) -> list[str]:
    parts = Path(os.path.relpath(str(file_path), str(root))).parts
    locales = []
    for i, part in enumerate(parts):
        if i == len(parts) - 1:
            locale = locale_from_filename(part)
            if locale:
                locales.append(locale)
        elif part in AVAILABLE_LOCALES:
            locales.append(part)
    return locales


def extract_locales_from_path(paths: Iterable[Union[str, Path]], source: str,
                              root: Union[str, Path] = ".") -> list[str]:
    """Locales other than source that appear in the given file paths."""
    targets: list[str] = []
    for file_path in paths:
        for locale in _locales_in(Path(file_path), root):
            if locale != source and locale not in targets:
                targets.append(locale)
    return targets


def extract_all_locales(root: Union[str, Path] = ".") -> list[str]:
    """Every locale that appears in a localization file path under root."""
    extensions = set(FormatRegistry.supported_extensions())
    found: list[str] = []
    for file_path in _find_eligible_files(Path(root), 0, extensions):
        for locale in _locales_in(file_path, root):
            if locale not in found:
                found.append(locale)
    return found


def is_excluded(path: str, patterns: Iterable[str]) -> bool:
    """True if path matches any fnmatch-style exclude pattern."""
    return any(fnmatch.fnmatch(path, pattern) for pattern in patterns)


def expand_include(pattern: str, source_locale: str, root: Union[str, Path] = ".") -> list[str]:
    """
    Expand wildcards in an include entry.

    'src/i18n/[locale]/*.json' is globbed with the source locale filled in
    and every match is mapped back to [locale] form. Entries without
    wildcards are returned unchanged.
    """
    if not _WILDCARD_CHARS & set(pattern.replace(LOCALE_PLACEHOLDER, '')):
        return [pattern]

    concrete = build_path(pattern, source_locale)
    matches = sorted(glob.glob(str(Path(root) / concrete), recursive=True))

    expanded = []
    for match in matches:
        relative = Path(os.path.relpath(match, str(root))).as_posix()
        if LOCALE_PLACEHOLDER in pattern:
            relative = _restore_placeholder(pattern, relative, source_locale)
        if relative not in expanded:
            expanded.append(relative)
    return expanded


def _restore_placeholder(pattern: str, path: str, locale: str) -> str:
    """Put [locale] back wherever the pattern had it."""
    pattern_parts = pattern.split('/')
    path_parts = path.split('/')
    if len(pattern_parts) != len(path_parts):
        return path.replace(f"/{locale}/", f"/{LOCALE_PLACEHOLDER}/", 1)

    restored = []
    for pattern_part, path_part in zip(pattern_parts, path_parts):
        if LOCALE_PLACEHOLDER in pattern_part:
            restored.append(_swap_locale(pattern_part, path_part, locale))
        else:
            restored.append(path_part)
    return '/'.join(restored)


def _swap_locale(pattern_part: str, path_part: str, locale: str) -> str:
    if pattern_part == LOCALE_PLACEHOLDER:
        return LOCALE_PLACEHOLDER
    prefix, suffix = pattern_part.split(LOCALE_PLACEHOLDER, 1)
    if path_part.startswith(prefix + locale):
        return prefix + LOCALE_PLACEHOLDER + path_part[len(prefix) + len(locale):]
    if path_part.endswith(locale + suffix):
        cut = len(path_part) - len(suffix) - len(locale)
        return path_part[:cut] + LOCALE_PLACEHOLDER + suffix
    return path_part.replace(locale, LOCALE_PLACEHOLDER, 1)
