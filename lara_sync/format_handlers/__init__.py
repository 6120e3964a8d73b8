#!/usr/bin/env python3
"""
Format handlers for localization file formats.

Supported formats:
- JSON: i18next/react-intl/vue-i18n style nested JSON
- PO: GNU gettext .po/.pot files
- Android XML: Android strings.xml
- TypeScript/JavaScript: message objects in .ts/.js modules
- Vue: <i18n> blocks in single-file components
- Markdown: .md/.mdx prose
"""

from .base import (
    FlatMap,
    FormatHandler,
    FormatRegistry,
    FormattingHints,
    ParseOptions,
    ParserFactory,
    SerializeOptions,
    get_file_extension,
)
from .android_xml import AndroidXmlHandler
from .json_handler import JsonHandler
from .markdown import MarkdownHandler
from .po import PoHandler
from .ts_object import TsObjectHandler
from .vue import VueHandler

# Register handlers (order matters for extension conflicts)
FormatRegistry.register(JsonHandler)
FormatRegistry.register(PoHandler)
FormatRegistry.register(AndroidXmlHandler)
FormatRegistry.register(TsObjectHandler)
FormatRegistry.register(VueHandler)
FormatRegistry.register(MarkdownHandler)

__all__ = [
    'FlatMap',
    'FormatHandler',
    'FormatRegistry',
    'FormattingHints',
    'ParseOptions',
    'ParserFactory',
    'SerializeOptions',
    'get_file_extension',
    'AndroidXmlHandler',
    'JsonHandler',
    'MarkdownHandler',
    'PoHandler',
    'TsObjectHandler',
    'VueHandler',
]
