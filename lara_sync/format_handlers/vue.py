#!/usr/bin/env python3
"""
Vue single-file component handler for <i18n> custom blocks.
"""

import json
import logging
import re
from typing import Any, Optional, Union

from .base import FlatMap, FormatHandler, ParseOptions, SerializeOptions
from .flat import flatten_document, unflatten_document
from .js_object import detect_indent, find_object_span, patch_object, render, set_property
from .ts_object import select_locale

logger = logging.getLogger(__name__)

_OPEN_TAG_RE = re.compile(r'<i18n(?:\s[^>]*)?>', re.IGNORECASE)
_CLOSE_TAG_RE = re.compile(r'</i18n>', re.IGNORECASE)
_TEMPLATE_END_RE = re.compile(r'</template>', re.IGNORECASE)


class VueHandler(FormatHandler):
    """
    Handler for .vue files with a JSON <i18n> block.

    ```vue
    <template>
      <p>{{ $t('hello') }}</p>
    </template>

    <i18n>
    {
      "en": { "hello": "Hello World" },
      "it": { "hello": "Ciao mondo" }
    }
    </i18n>
    ```

    Writing one locale only touches that locale's value inside the block.
    """

    @property
    def name(self) -> str:
        return "vue"

    @property
    def file_extensions(self) -> list[str]:
        return ["vue"]

    @property
    def supports_multi_locale(self) -> bool:
        return True

    @staticmethod
    def _find_block(text: str) -> Optional[tuple[int, int]]:
        """(body start, body end) of the <i18n> block, if any."""
        open_match = _OPEN_TAG_RE.search(text)
        if not open_match:
            return None
        close_match = _CLOSE_TAG_RE.search(text, open_match.end())
        if not close_match:
            return None
        return open_match.end(), close_match.start()

    @staticmethod
    def _load_block(body: str) -> Optional[dict[str, Any]]:
        if not body.strip():
            return {}
        try:
            data = json.loads(body)
        except json.JSONDecodeError as e:
            logger.error("Failed to parse i18n JSON content in Vue file: %s", e)
            return None
        if not isinstance(data, dict):
            logger.error("i18n block must hold a JSON object")
            return None
        return data

    def parse(self, content: Union[str, bytes], options: Optional[ParseOptions] = None) -> FlatMap:
        """
        Parse the <i18n> block into a flat map.

        Args:
            content: Raw .vue file content
            options: locale selects one top-level subtree

        Returns:
            Flat map, or {} when there is no block or it is not valid JSON
        """
        text = self._to_text(content)
        block = self._find_block(text)
        if block is None:
            return {}

        data = self._load_block(text[block[0]:block[1]])
        if not data:
            return {}

        flat_map = flatten_document(data)
        if options and options.locale:
            return select_locale(flat_map, options.locale)
        return flat_map

    def serialize(self, data: FlatMap, options: SerializeOptions) -> str:
        """
        Write data into the <i18n> block of original_content.

        The block is created after </template> (or at the end of the file)
        when missing.

        Raises:
            ValueError: If original_content is missing
        """
        if options.original_content is None:
            raise ValueError("Original content is required for Vue serialization")

        text = self._to_text(options.original_content)
        nested = unflatten_document(data)
        scoped = bool(options.locale_scoped and options.target_locale)
        document = {options.target_locale: nested} if scoped else nested

        block = self._find_block(text)
        if block is None:
            body = render(document, '  ', '', quote_keys=True)
            template_end = _TEMPLATE_END_RE.search(text)
            if template_end:
                at = template_end.end()
                return f"{text[:at]}\n\n<i18n>\n{body}\n</i18n>\n{text[at:]}"
            if not text:
                return f"<i18n>\n{body}\n</i18n>\n"
            separator = '' if text.endswith('\n') else '\n'
            return f"{text}{separator}\n<i18n>\n{body}\n</i18n>\n"

        start, end = block
        fallback_indent = options.formatting.indent if options.formatting else 2
        existing = self._load_block(text[start:end])
        span = find_object_span(text, start)

        if existing is not None and span is not None and span.end <= end:
            indent = detect_indent(text, span, fallback_indent)
            if scoped:
                return set_property(text, span, options.target_locale, nested, indent, quote_keys=True)
            return patch_object(text, span, nested, indent, quote_keys=True)

        indent = fallback_indent if isinstance(fallback_indent, str) else ' ' * fallback_indent
        body = render(document, indent, '', quote_keys=True)
        return f"{text[:start]}\n{body}\n{text[end:]}"

    def get_fallback(self) -> str:
        return "<i18n>\n{}\n</i18n>\n"
