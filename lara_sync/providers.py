#!/usr/bin/env python3
"""
Translation providers.

The engine only needs one call: translate a single string from one locale
to another. Providers report failures with ProviderError; status 401 and
5xx are treated as fatal by the engine.
"""

import importlib
import logging
from abc import ABC, abstractmethod
from typing import Optional, Sequence

from .errors import ConfigError

logger = logging.getLogger(__name__)


class TranslationProvider(ABC):
    """Abstract base class for translation providers."""

    @abstractmethod
    def translate(
        self,
        text: str,
        source_locale: str,
        target_locale: str,
        instructions: Optional[Sequence[str]] = None,
    ) -> str:
        """
        Translate one string.

        Args:
            text: Source text
            source_locale: Locale of text
            target_locale: Locale to translate into
            instructions: Optional free-form hints for the translator

        Returns:
            Translated text

        Raises:
            ProviderError: On any translation failure
        """


class PseudoTranslator(TranslationProvider):
    """
    Offline provider that tags text with the target locale.

    "Save" translated to it becomes "[it] Save". Useful for dry runs and
    for spotting untranslated strings in a UI.
    """

    def translate(self, text, source_locale, target_locale, instructions=None):
        return f"[{target_locale}] {text}"


def load_provider(spec: Optional[str]) -> TranslationProvider:
    """
    Build a provider from a "package.module:factory" reference.

    The factory is called without arguments and must return a
    TranslationProvider. None or "pseudo" selects PseudoTranslator.

    Raises:
        ConfigError: If the reference cannot be imported or is not a provider
    """
    if not spec or spec == "pseudo":
        return PseudoTranslator()

    module_name, _, attr = spec.partition(':')
    if not module_name or not attr:
        raise ConfigError(f"Invalid provider reference '{spec}', expected 'package.module:factory'")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigError(f"Cannot import provider module '{module_name}': {e}") from e

    factory = getattr(module, attr, None)
    if factory is None:
        raise ConfigError(f"Provider module '{module_name}' has no attribute '{attr}'")

    provider = factory()
    if not isinstance(provider, TranslationProvider):
        raise ConfigError(f"'{spec}' did not return a TranslationProvider")

    logger.debug("Loaded provider %s", spec)
    return provider
