#!/usr/bin/env python3
"""
JSON format handler for i18next/react-intl/vue-i18n style localization files.

Nested objects and arrays are flattened with the private NUL delimiter
(see flat.py) and rebuilt on write with the target file's own indentation.
"""

import json
import logging
from typing import Optional, Union

from .base import FlatMap, FormatHandler, FormattingHints, ParseOptions, SerializeOptions
from .flat import flatten_document, unflatten_document

logger = logging.getLogger(__name__)


class JsonHandler(FormatHandler):
    """
    Handler for JSON localization files.

    Supports structures like:
    ```json
    {
      "welcome": "Welcome",
      "user": {
        "greeting": "Hello {{name}}",
        "tags": ["new", "active"]
      }
    }
    ```

    Keys are flattened to NUL-joined paths: "user\\x00greeting",
    "user\\x00tags\\x000". Numbers, booleans and null pass through
    untouched. Malformed input is logged and read as an empty map.
    """

    @property
    def name(self) -> str:
        return "json"

    @property
    def file_extensions(self) -> list[str]:
        return ["json"]

    def parse(self, content: Union[str, bytes], options: Optional[ParseOptions] = None) -> FlatMap:
        """
        Parse JSON content into a flat map.

        Args:
            content: Raw JSON file content
            options: Unused

        Returns:
            Flat map, or {} when the content is not a JSON object
        """
        text = self._to_text(content)
        if not text.strip():
            return {}

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            logger.error("Invalid JSON syntax: %s at line %s", e.msg, e.lineno)
            return {}

        if not isinstance(data, dict):
            logger.error("Root element must be an object, found %s", type(data).__name__)
            return {}

        return flatten_document(data)

    def serialize(self, data: FlatMap, options: SerializeOptions) -> str:
        """
        Rebuild nested JSON from a flat map.

        Args:
            data: Flat map
            options: formatting decides indentation and trailing newline

        Returns:
            JSON text
        """
        formatting = options.formatting or FormattingHints()
        document = unflatten_document(data)
        text = json.dumps(document, indent=formatting.indent, ensure_ascii=False)
        return text + formatting.trailing_newline

    def get_fallback(self) -> str:
        return "{}"
