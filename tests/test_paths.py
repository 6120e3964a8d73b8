#!/usr/bin/env python3
"""Tests for locale path helpers."""

from lara_sync.paths import (
    build_path,
    ensure_directory_exists,
    expand_include,
    extract_all_locales,
    extract_locales_from_path,
    is_excluded,
    locale_from_filename,
    normalize_path,
    search_locale_paths,
)


def _touch(root, relative, content='{}'):
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


def test_build_path():
    assert build_path('src/i18n/[locale].json', 'it') == 'src/i18n/it.json'
    assert build_path('src/[locale]/pages/home.json', 'pt-BR') == 'src/pt-BR/pages/home.json'


def test_ensure_directory_exists(tmp_path):
    target = tmp_path / 'a' / 'b' / 'it.json'
    ensure_directory_exists(target)
    assert target.parent.is_dir()


def test_locale_from_filename():
    assert locale_from_filename('it.json') == 'it'
    assert locale_from_filename('home.pt-BR.json') == 'pt-BR'
    assert locale_from_filename('strings.xml') is None
    assert locale_from_filename('en') == 'en'


def test_normalize_path_replaces_first_locale_only(tmp_path):
    assert normalize_path(tmp_path / 'src/i18n/en.json', tmp_path) == 'src/i18n/[locale].json'
    assert normalize_path(tmp_path / 'src/en/pages/it/home.json', tmp_path) == 'src/[locale]/pages/it/home.json'
    assert normalize_path(tmp_path / 'src/components/Hello.vue', tmp_path) is None


def test_search_locale_paths(tmp_path):
    _touch(tmp_path, 'src/i18n/en.json')
    _touch(tmp_path, 'src/i18n/it.json')
    _touch(tmp_path, 'locales/en/messages.po', '')
    _touch(tmp_path, 'node_modules/pkg/en.json')
    _touch(tmp_path, '.cache/en.json')
    _touch(tmp_path, 'en.json')

    assert sorted(search_locale_paths(tmp_path)) == ['locales/[locale]/messages.po', 'src/i18n/[locale].json']


def test_search_respects_max_depth(tmp_path):
    _touch(tmp_path, 'a/b/c/d/e/f/g/en.json')
    assert search_locale_paths(tmp_path) == []


def test_extract_locales(tmp_path):
    _touch(tmp_path, 'src/i18n/en.json')
    _touch(tmp_path, 'src/i18n/it.json')
    _touch(tmp_path, 'src/i18n/fr.json')

    assert sorted(extract_all_locales(tmp_path)) == ['en', 'fr', 'it']

    files = [tmp_path / 'src/i18n/en.json', tmp_path / 'src/i18n/it.json', tmp_path / 'src/i18n/fr.json']
    assert extract_locales_from_path(files, 'en', tmp_path) == ['it', 'fr']


def test_is_excluded():
    assert is_excluded('src/i18n/legacy/[locale].json', ['src/i18n/legacy/*'])
    assert not is_excluded('src/i18n/[locale].json', ['src/i18n/legacy/*'])


def test_expand_include_without_wildcards(tmp_path):
    assert expand_include('src/i18n/[locale].json', 'en', tmp_path) == ['src/i18n/[locale].json']


def test_expand_include_with_wildcards(tmp_path):
    _touch(tmp_path, 'src/i18n/en/home.json')
    _touch(tmp_path, 'src/i18n/en/about.json')
    _touch(tmp_path, 'src/i18n/it/home.json')

    assert expand_include('src/i18n/[locale]/*.json', 'en', tmp_path) == [
        'src/i18n/[locale]/about.json',
        'src/i18n/[locale]/home.json',
    ]


def test_expand_include_locale_in_filename(tmp_path):
    _touch(tmp_path, 'docs/intent.en.md', '# Intent')
    _touch(tmp_path, 'docs/faq.en.md', '# FAQ')

    assert expand_include('docs/*.[locale].md', 'en', tmp_path) == [
        'docs/faq.[locale].md',
        'docs/intent.[locale].md',
    ]
