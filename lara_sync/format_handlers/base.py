#!/usr/bin/env python3
"""
Base classes for format handlers.

FormatHandler is the abstract base class that all format-specific handlers
must implement. Every handler turns raw file content into a flat
key -> value map (see flat.py) and writes such a map back into the file
format, using the original content as a skeleton where the format needs it.

FormatRegistry maps handler names and file extensions to handler classes;
ParserFactory binds a single handler to a file path.
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import PurePath
from typing import Any, Optional, Union

FlatMap = dict[str, Any]


@dataclass
class FormattingHints:
    """
    Whitespace style detected from an existing file.

    Attributes:
        indent: Indent width in spaces, or the literal indent string (e.g. '\\t')
        trailing_newline: Text appended after the document ('' or '\\n')
    """
    indent: Union[int, str] = 2
    trailing_newline: str = '\n'


@dataclass
class ParseOptions:
    """
    Options accepted by FormatHandler.parse().

    Attributes:
        locale: For multi-locale files (TS/Vue), return only this locale's subtree
    """
    locale: Optional[str] = None


@dataclass
class SerializeOptions:
    """
    Options accepted by FormatHandler.serialize().

    Attributes:
        original_content: Skeleton the output is written into
        target_locale: Locale being written
        formatting: Whitespace style to reproduce
        locale_scoped: Only replace target_locale's subtree of a multi-locale file
    """
    original_content: Optional[str] = None
    target_locale: Optional[str] = None
    formatting: Optional[FormattingHints] = None
    locale_scoped: bool = False


class FormatHandler(ABC):
    """
    Abstract base class for format-specific handlers.

    parse() is expected to be total for tolerant formats (malformed input
    yields an empty map and a logged error); strict formats raise ParseError.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable format name."""
        pass

    @property
    @abstractmethod
    def file_extensions(self) -> list[str]:
        """List of file extensions this handler supports (without dot)."""
        pass

    @property
    def supports_multi_locale(self) -> bool:
        """
        Whether one file can hold every locale (as top-level keys).

        Such files are configured without a [locale] placeholder; the same
        file is both source and target.
        """
        return False

    @property
    def skeleton(self) -> str:
        """
        Which file serialize() uses as original_content.

        'target': the existing target file (or the fallback).
        'source': the source file; the target is rebuilt from its structure.
        """
        return 'target'

    @abstractmethod
    def parse(self, content: Union[str, bytes], options: Optional[ParseOptions] = None) -> FlatMap:
        """
        Parse format-specific content into a flat map.

        Args:
            content: Raw file content
            options: Optional parse options

        Returns:
            Ordered flat map of key -> value
        """
        pass

    @abstractmethod
    def serialize(self, data: FlatMap, options: SerializeOptions) -> str:
        """
        Write a flat map back into the file format.

        Args:
            data: Flat map to write (already merged and translated)
            options: Skeleton content, locale and formatting

        Returns:
            File content
        """
        pass

    @abstractmethod
    def get_fallback(self) -> str:
        """Content used when a target file does not exist yet."""
        pass

    def ledger_key(self, key: str) -> str:
        """Key under which the checksum ledger tracks this entry."""
        return key

    def source_text(self, key: str, value: Any) -> Any:
        """Text sent to the translator for a source entry."""
        return value

    def detect_formatting(self, content: str) -> FormattingHints:
        """
        Detect indentation and trailing newline from existing content.

        Looks at the first indented line; tabs win over spaces.
        """
        hints = FormattingHints()
        if not content:
            return hints

        match = re.search(r'^([ \t]+)\S', content, re.MULTILINE)
        if match:
            whitespace = match.group(1)
            hints.indent = '\t' if whitespace.startswith('\t') else len(whitespace)

        hints.trailing_newline = '\n' if content.endswith('\n') else ''
        return hints

    @staticmethod
    def _to_text(content: Union[str, bytes]) -> str:
        if isinstance(content, bytes):
            return content.decode('utf-8')
        return content


class FormatRegistry:
    """Registry of available format handlers."""

    _handlers: dict[str, type[FormatHandler]] = {}
    _extension_map: dict[str, str] = {}  # extension -> handler name

    @classmethod
    def register(cls, handler_class: type[FormatHandler]) -> None:
        """Register a format handler class."""
        # Create instance to get properties
        handler = handler_class()
        cls._handlers[handler.name.lower()] = handler_class
        for ext in handler.file_extensions:
            cls._extension_map[ext.lower()] = handler.name.lower()

    @classmethod
    def get_handler(cls, name: str) -> FormatHandler:
        """Get handler instance by name."""
        name_lower = name.lower()
        if name_lower not in cls._handlers:
            available = ', '.join(cls._handlers.keys())
            raise ValueError(f"Unknown format: {name}. Available: {available}")
        return cls._handlers[name_lower]()

    @classmethod
    def supported_extensions(cls) -> list[str]:
        return list(cls._extension_map.keys())

    @classmethod
    def get_handler_for_extension(cls, extension: str) -> FormatHandler:
        """Get handler instance by file extension."""
        ext = extension.lower().lstrip('.')
        if ext not in cls._extension_map:
            available = ', '.join(cls._extension_map.keys())
            raise ValueError(f"Unsupported file extension: {extension}. Supported extensions: {available}")
        return cls.get_handler(cls._extension_map[ext])

    @classmethod
    def list_formats(cls) -> list[dict[str, Any]]:
        """List all registered formats with their extensions."""
        result = []
        for name, handler_class in cls._handlers.items():
            handler = handler_class()
            result.append({
                'name': handler.name,
                'extensions': handler.file_extensions,
                'multi_locale': handler.supports_multi_locale,
            })
        return result


def get_file_extension(file_path: str) -> str:
    """
    Last dot-separated segment of the file name.

    Returns the whole path when there is no dot, so error messages show
    what was actually given.
    """
    name = PurePath(file_path).name
    if '.' not in name:
        return file_path
    return name.rsplit('.', 1)[1]


class ParserFactory:
    """
    Binds the handler matching a file's extension.

    The factory keeps no state beyond the bound handler, so it is cheap to
    build one per file.

    Example:
        factory = ParserFactory('src/i18n/en.json')
        data = factory.parse(content)
        output = factory.serialize(data, SerializeOptions(formatting=hints))
    """

    def __init__(self, file_path: str):
        if not file_path:
            raise ValueError("File path is required")

        self.file_path = file_path
        self.extension = get_file_extension(file_path)
        self.handler = FormatRegistry.get_handler_for_extension(self.extension)

    def parse(self, content: Union[str, bytes], options: Optional[ParseOptions] = None) -> FlatMap:
        return self.handler.parse(content, options)

    def serialize(self, data: FlatMap, options: SerializeOptions) -> str:
        return self.handler.serialize(data, options)

    def get_fallback(self) -> str:
        return self.handler.get_fallback()
