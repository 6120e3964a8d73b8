#!/usr/bin/env python3
"""
Android XML strings.xml format handler.

Handles parsing and reconstruction of Android resource files including
strings, plurals, and string arrays. The target file is always rebuilt from
the source document, so comments, non-translatable strings and attributes
follow the source.
"""

import logging
import re
from typing import Optional, Union
from xml.etree import ElementTree as ET
from xml.sax.saxutils import escape, unescape

from .base import FlatMap, FormatHandler, ParseOptions, SerializeOptions

logger = logging.getLogger(__name__)

XML_DECLARATION = '<?xml version="1.0" encoding="utf-8"?>'

_RESOURCE_RE = re.compile(r'<(string|plurals|string-array)\s+name=["\']([^"\']+)["\']')
_DECLARATION_RE = re.compile(r'^\s*(<\?xml[^>]*\?>)')
_NAMESPACE_RE = re.compile(r'xmlns:([\w.-]+)=["\']([^"\']+)["\']')
_NS_ATTR_RE = re.compile(r'\s+xmlns(?::[\w.-]+)?=["\'][^"\']*["\']')

# ElementTree drops CDATA; sections travel through the tree between these marks.
_CDATA_OPEN = '\ue000'
_CDATA_CLOSE = '\ue001'
_CDATA_RE = re.compile(r'<!\[CDATA\[(.*?)\]\]>', re.DOTALL)
_CDATA_MARK_RE = re.compile(f'{_CDATA_OPEN}(.*?){_CDATA_CLOSE}', re.DOTALL)


def _mark_cdata(text: str) -> str:
    return _CDATA_RE.sub(lambda m: _CDATA_OPEN + escape(m.group(1)) + _CDATA_CLOSE, text)


def _restore_cdata(xml: str) -> str:
    def _section(match: re.Match) -> str:
        body = unescape(match.group(1)).replace(']]>', ']]]]><![CDATA[>')
        return f'<![CDATA[{body}]]>'
    return _CDATA_MARK_RE.sub(_section, xml)


def _strip_cdata_marks(text: str) -> str:
    return text.replace(_CDATA_OPEN, '').replace(_CDATA_CLOSE, '')


def _is_cdata(text: Optional[str]) -> bool:
    if not text or text.count(_CDATA_OPEN) != 1:
        return False
    return text.startswith(_CDATA_OPEN) and text.endswith(_CDATA_CLOSE)


class AndroidXmlHandler(FormatHandler):
    """
    Handler for Android strings.xml resource files.

    Android XML structure:
    ```xml
    <?xml version="1.0" encoding="utf-8"?>
    <resources>
        <string name="app_name">My App</string>
        <string name="welcome">Welcome, %1$s!</string>

        <plurals name="items">
            <item quantity="one">%d item</item>
            <item quantity="other">%d items</item>
        </plurals>

        <string-array name="days">
            <item>Monday</item>
            <item>Tuesday</item>
        </string-array>
    </resources>
    ```

    Flat keys: "app_name", "items/one", "days/0". Strings marked
    translatable="false" are not part of the flat map. Values with inline
    markup (<b>, <xliff:g>) are kept as their inner XML text. A value that
    is a single CDATA section is read as its raw content and written back
    as CDATA.
    """

    @property
    def name(self) -> str:
        return "android"

    @property
    def file_extensions(self) -> list[str]:
        return ["xml"]

    @property
    def skeleton(self) -> str:
        return 'source'

    def parse(self, content: Union[str, bytes], options: Optional[ParseOptions] = None) -> FlatMap:
        """
        Parse Android XML content into a flat map.

        Args:
            content: Raw XML file content
            options: Unused

        Returns:
            Flat map in document order, or {} for malformed XML
        """
        text = self._to_text(content)
        root = self._load(text)
        if root is None:
            return {}

        translations: FlatMap = {}
        for elem in root:
            if not isinstance(elem.tag, str) or self._is_locked(elem):
                continue
            name = elem.get('name')
            if not name:
                continue

            if elem.tag == 'string':
                translations[name] = self._get_element_text(elem)
            elif elem.tag == 'plurals':
                for item in elem.findall('item'):
                    quantity = item.get('quantity')
                    if quantity:
                        translations[f"{name}/{quantity}"] = self._get_element_text(item)
            elif elem.tag == 'string-array':
                for i, item in enumerate(elem.findall('item')):
                    translations[f"{name}/{i}"] = self._get_element_text(item)

        return translations

    def _load(self, text: str) -> Optional[ET.Element]:
        """Parse XML keeping comments; None when the document is unusable."""
        if not text.strip():
            return None

        self._register_namespaces(text)
        parser = ET.XMLParser(target=ET.TreeBuilder(insert_comments=True))
        try:
            root = ET.fromstring(_mark_cdata(text), parser=parser)
        except ET.ParseError as e:
            logger.error("Failed to parse Android XML content: %s", e)
            return None

        if root.tag != 'resources':
            logger.error("Root element must be 'resources', found '%s'", root.tag)
            return None
        return root

    @staticmethod
    def _register_namespaces(text: str) -> dict[str, str]:
        """Register declared prefixes so output keeps e.g. xliff: instead of ns0:."""
        namespaces = dict(_NAMESPACE_RE.findall(text))
        for prefix, uri in namespaces.items():
            ET.register_namespace(prefix, uri)
        return namespaces

    @staticmethod
    def _is_locked(elem: ET.Element) -> bool:
        return elem.get('translatable') == 'false'

    def _get_element_text(self, elem: ET.Element) -> str:
        """Element text; inner XML when the element has inline markup."""
        if len(elem) == 0:
            if _is_cdata(elem.text):
                return elem.text[1:-1]
            return _strip_cdata_marks(elem.text or '')

        parts = [escape(elem.text or '')]
        for child in elem:
            parts.append(_NS_ATTR_RE.sub('', ET.tostring(child, encoding='unicode')))
        # CDATA mixed with other content is read as plain text
        return _strip_cdata_marks(''.join(parts))

    def _set_element_text(self, elem: ET.Element, value: str, namespaces: dict[str, str]) -> None:
        if len(elem) == 0 and _is_cdata(elem.text):
            elem.text = _CDATA_OPEN + value + _CDATA_CLOSE
            return

        for child in list(elem):
            elem.remove(child)
        elem.text = value

        if '<' not in value:
            return

        declarations = ''.join(f' xmlns:{prefix}="{uri}"' for prefix, uri in namespaces.items())
        try:
            fragment = ET.fromstring(f'<fragment{declarations}>{value}</fragment>')
        except ET.ParseError:
            return

        elem.text = fragment.text
        for child in fragment:
            elem.append(child)

    def _build_order_map(self, content: str) -> dict[str, int]:
        """Position of each resource (tag:name) in the raw text."""
        order_map: dict[str, int] = {}
        for tag, name in _RESOURCE_RE.findall(content):
            order_map.setdefault(f"{tag}:{name}", len(order_map))
        return order_map

    def serialize(self, data: FlatMap, options: SerializeOptions) -> str:
        """
        Rebuild Android XML from the source document and a flat map.

        Translatable resources are updated from data and removed when their
        key is absent. Non-translatable resources and comments are kept; a
        comment moves with the resource that follows it.

        Args:
            data: Flat map of resource keys -> values
            options: original_content must hold the source XML

        Returns:
            Complete XML file content

        Raises:
            ValueError: If original_content is missing
        """
        if not options.original_content:
            raise ValueError("Original content is required for Android XML serialization")

        original = self._to_text(options.original_content)
        namespaces = self._register_namespaces(original)
        order_map = self._build_order_map(original)
        root = self._load(original)
        if root is None:
            return original

        children = list(root)
        closing_tail = children[-1].tail if children else None

        units: list[tuple[int, int, list[ET.Element]]] = []
        pending: list[ET.Element] = []
        for position, elem in enumerate(children):
            root.remove(elem)
            if not isinstance(elem.tag, str):
                pending.append(elem)
                continue
            if not self._update_resource(elem, data, namespaces):
                pending = []
                continue
            order = order_map.get(f"{elem.tag}:{elem.get('name')}", len(order_map) + position)
            units.append((order, position, pending + [elem]))
            pending = []

        units.sort(key=lambda unit: (unit[0], unit[1]))
        ordered = [elem for _, _, group in units for elem in group] + pending

        separator = root.text if root.text is not None else '\n    '
        for elem in ordered:
            root.append(elem)
        self._fix_tails(ordered, separator, closing_tail)

        declaration = _DECLARATION_RE.match(original)
        header = declaration.group(1) if declaration else XML_DECLARATION
        trailing = '\n' if original.endswith('\n') else ''
        return f"{header}\n{_restore_cdata(ET.tostring(root, encoding='unicode'))}{trailing}"

    def _update_resource(self, elem: ET.Element, data: FlatMap, namespaces: dict[str, str]) -> bool:
        """Apply data to one top-level resource. False if it must be dropped."""
        name = elem.get('name')
        if not name or self._is_locked(elem):
            return True

        if elem.tag == 'string':
            if name not in data:
                return False
            self._set_element_text(elem, self._value_text(data[name]), namespaces)
            return True

        if elem.tag in ('plurals', 'string-array'):
            items = elem.findall('item')
            closing_tail = items[-1].tail if items else None
            kept = []
            for i, item in enumerate(items):
                suffix = item.get('quantity') if elem.tag == 'plurals' else str(i)
                key = f"{name}/{suffix}"
                if suffix is None or key not in data:
                    elem.remove(item)
                    continue
                self._set_element_text(item, self._value_text(data[key]), namespaces)
                kept.append(item)
            if not kept:
                return False
            self._fix_tails(kept, elem.text if elem.text is not None else '\n        ', closing_tail)
            return True

        return True

    @staticmethod
    def _value_text(value) -> str:
        return '' if value is None else str(value)

    @staticmethod
    def _fix_tails(elements: list[ET.Element], separator: str, closing_tail: Optional[str]) -> None:
        """Keep the whitespace before the parent's closing tag on the last child."""
        for elem in elements[:-1]:
            if elem.tail is None or elem.tail == closing_tail:
                elem.tail = separator
        if elements:
            elements[-1].tail = closing_tail

    def get_fallback(self) -> str:
        return f'{XML_DECLARATION}\n<resources>\n</resources>\n'
