"""Shared fixtures for lara-sync tests."""

import pytest

from lara_sync.errors import ProviderError
from lara_sync.providers import TranslationProvider


class RecordingTranslator(TranslationProvider):
    """Pseudo-translates like PseudoTranslator and records every call."""

    def __init__(self, fail_on=None, status_code=None):
        self.calls = []
        self.fail_on = fail_on
        self.status_code = status_code

    def translate(self, text, source_locale, target_locale, instructions=None):
        self.calls.append((text, source_locale, target_locale, instructions))
        if self.fail_on is not None and text == self.fail_on:
            raise ProviderError(f"Provider rejected '{text}'", self.status_code)
        return f"[{target_locale}] {text}"


@pytest.fixture
def translator():
    return RecordingTranslator()

