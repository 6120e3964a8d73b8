#!/usr/bin/env python3
"""
TypeScript/JavaScript message object handler.

Reads the object literal assigned to `messages` (or the first object-valued
declarator, or `export default {...}`) without evaluating anything, and
rewrites only that literal's text.
"""

import logging
from typing import Optional, Union

from ..errors import ParseError
from .base import FlatMap, FormatHandler, ParseOptions, SerializeOptions
from .flat import DELIMITER, flatten_document, unflatten_document
from .js_object import detect_indent, locate_object, parse_object, patch_object, set_property

logger = logging.getLogger(__name__)


def select_locale(flat_map: FlatMap, locale: str) -> FlatMap:
    """Subtree of one locale in a multi-locale flat map, prefix stripped."""
    prefix = locale + DELIMITER
    return {key[len(prefix):]: value for key, value in flat_map.items() if key.startswith(prefix)}


class TsObjectHandler(FormatHandler):
    """
    Handler for .ts/.js files exporting a messages object.

    Either one file per locale:
    ```ts
    const messages = {
      welcome: "Welcome",
      user: { greeting: "Hello" },
    };

    export default messages;
    ```

    or every locale in one file, keyed by locale at the top level
    (`{ en: {...}, it: {...} }`). Identifiers, calls and spreads in the
    literal are left as they are.
    """

    @property
    def name(self) -> str:
        return "typescript"

    @property
    def file_extensions(self) -> list[str]:
        return ["ts", "js"]

    @property
    def supports_multi_locale(self) -> bool:
        return True

    def parse(self, content: Union[str, bytes], options: Optional[ParseOptions] = None) -> FlatMap:
        """
        Parse the messages object into a flat map.

        Args:
            content: Raw source file content
            options: locale selects one top-level subtree

        Returns:
            Flat map; non-literal values are None

        Raises:
            ParseError: If the object literal is not valid syntax
        """
        text = self._to_text(content)
        span = locate_object(text)
        if span is None:
            logger.warning("No messages object found")
            return {}

        flat_map = flatten_document(parse_object(span.slice(text)))
        if options and options.locale:
            return select_locale(flat_map, options.locale)
        return flat_map

    def serialize(self, data: FlatMap, options: SerializeOptions) -> str:
        """
        Write data into the messages object of original_content.

        Only values that differ from original_content are rewritten; untouched
        entries keep their quoting, comments and trailing commas. With
        locale_scoped, only target_locale's property is touched (or inserted).

        Raises:
            ValueError: If original_content is missing
            ParseError: If original_content has no messages object
        """
        if not options.original_content:
            raise ValueError("Original content is required for TS serialization")

        text = self._to_text(options.original_content)
        span = locate_object(text)
        if span is None:
            raise ParseError("No messages object found in original content")

        fallback_indent = options.formatting.indent if options.formatting else 2
        indent = detect_indent(text, span, fallback_indent)
        nested = unflatten_document(data)

        if options.locale_scoped and options.target_locale:
            return set_property(text, span, options.target_locale, nested, indent)

        return patch_object(text, span, nested, indent)

    def get_fallback(self) -> str:
        return "const messages = {};\n\nexport default messages;\n"
