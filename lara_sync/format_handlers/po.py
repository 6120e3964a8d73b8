#!/usr/bin/env python3
"""
GNU gettext PO/POT format handler.

Handles parsing and reconstruction of .po and .pot files used by
WordPress, Django, Rails (via gettext), and many Linux applications.
"""

import json
import re
from datetime import datetime, timezone
from typing import Any, Optional, Union

import polib

from ..errors import ParseError
from .base import FlatMap, FormatHandler, ParseOptions, SerializeOptions

GENERATOR = "lara-sync"

# Single-line msgctxt/msgid only; multi-line ids are ordered after these.
_ORDER_LINE_RE = re.compile(r'^\s*(msgctxt|msgid)\s+"(.*)"\s*$')

_ENTRY_META_FIELDS = ('comment', 'tcomment', 'occurrences', 'flags')


class PoHandler(FormatHandler):
    """
    Handler for GNU gettext PO/POT files.

    PO format structure:
    ```
    # Translator comment
    #. Extracted comment
    #: file.py:42
    #, fuzzy
    msgctxt "context"
    msgid "Source text"
    msgstr "Translated text"

    # Plural form
    msgid "One item"
    msgid_plural "%d items"
    msgstr[0] "Un élément"
    msgstr[1] "%d éléments"
    ```

    msgid alone is not unique (contexts, plural forms), so every flat key is
    a JSON object: {"msgid", "msgctxt"?, "msgid_plural"?, "idx", "order"},
    one per plural index. polib keeps no notion of the original position
    that survives our reordering, so "order" comes from a pre-scan of the
    raw text.

    The handler is stateful: headers and per-message comments seen while
    parsing are reused when serializing.
    """

    def __init__(self):
        """Initialize handler with empty header metadata."""
        self._metadata: dict[str, str] = {}
        self._header: str = ""
        self._entry_meta: dict[tuple, dict[str, Any]] = {}

    @property
    def name(self) -> str:
        return "po"

    @property
    def file_extensions(self) -> list[str]:
        return ["po", "pot"]

    def parse(self, content: Union[str, bytes], options: Optional[ParseOptions] = None) -> FlatMap:
        """
        Parse PO content into a flat map.

        Args:
            content: Raw PO file content
            options: Unused

        Returns:
            Flat map of JSON message keys -> msgstr, in file order

        Raises:
            ParseError: On PO syntax errors
        """
        text = self._to_text(content)
        order_map = self._build_order_map(text)

        try:
            po = polib.pofile(text)
        except (OSError, ValueError) as e:
            raise ParseError(f"Invalid PO file: {e}") from e

        if po.metadata:
            self._metadata = dict(po.metadata)
        if po.header:
            self._header = po.header

        rows = []
        for position, entry in enumerate(po):
            if entry.obsolete or not entry.msgid:
                continue

            order = order_map.get((entry.msgctxt, entry.msgid), len(order_map) + position)
            self._remember_entry(entry)

            if entry.msgid_plural:
                forms = entry.msgstr_plural or {0: '', 1: ''}
                for idx in sorted(forms, key=int):
                    key = self._make_key(entry.msgid, entry.msgctxt, entry.msgid_plural, int(idx), order)
                    rows.append((order, int(idx), key, forms[idx]))
            else:
                key = self._make_key(entry.msgid, entry.msgctxt, None, 0, order)
                rows.append((order, 0, key, entry.msgstr))

        rows.sort(key=lambda row: (row[0], row[1]))
        return {key: value for _, _, key, value in rows}

    def _build_order_map(self, text: str) -> dict[tuple, int]:
        """Map (msgctxt, msgid) -> position, from a line-by-line scan."""
        order_map: dict[tuple, int] = {}
        msgctxt = None

        for line in text.splitlines():
            match = _ORDER_LINE_RE.match(line)
            if not match:
                continue

            keyword, raw = match.groups()
            value = polib.unescape(raw)
            if keyword == 'msgctxt':
                msgctxt = value
                continue

            if value or msgctxt is not None:
                order_map.setdefault((msgctxt, value), len(order_map))
            msgctxt = None

        return order_map

    def _remember_entry(self, entry: polib.POEntry) -> None:
        """Keep comments/references so serialize() can write them back."""
        meta = self._entry_meta.setdefault(self._identity(entry.msgctxt, entry.msgid, entry.msgid_plural), {})
        for field in _ENTRY_META_FIELDS:
            value = getattr(entry, field)
            if value:
                meta[field] = list(value) if isinstance(value, list) else value

    @staticmethod
    def _identity(msgctxt: Optional[str], msgid: str, msgid_plural: Optional[str]) -> tuple:
        return (msgctxt, msgid, msgid_plural or '')

    @staticmethod
    def _make_key(
        msgid: str,
        msgctxt: Optional[str],
        msgid_plural: Optional[str],
        idx: int,
        order: Optional[int],
    ) -> str:
        key: dict[str, Any] = {'msgid': msgid}
        if msgctxt is not None:
            key['msgctxt'] = msgctxt
        if msgid_plural:
            key['msgid_plural'] = msgid_plural
        key['idx'] = idx
        if order is not None:
            key['order'] = order
        return json.dumps(key, ensure_ascii=False)

    def ledger_key(self, key: str) -> str:
        """Drop the position so that moving an entry is not a change."""
        parsed = json.loads(key)
        return self._make_key(
            parsed['msgid'], parsed.get('msgctxt'), parsed.get('msgid_plural'), parsed.get('idx', 0), None
        )

    def source_text(self, key: str, value: Any) -> Any:
        """Source catalogs often leave msgstr empty; translate the msgid then."""
        if value:
            return value
        parsed = json.loads(key)
        if parsed.get('idx', 0) > 0 and parsed.get('msgid_plural'):
            return parsed['msgid_plural']
        return parsed['msgid']

    def serialize(self, data: FlatMap, options: SerializeOptions) -> str:
        """
        Rebuild a PO file from a flat map.

        Entries are written in (order, plural index) order. Language,
        PO-Revision-Date and X-Generator are regenerated; Plural-Forms is
        dropped because it cannot be derived for an arbitrary target language.

        Args:
            data: Flat map of JSON message keys -> msgstr
            options: target_locale sets the Language header

        Returns:
            Complete PO file content
        """
        groups: dict[tuple, dict[str, Any]] = {}
        for key, value in data.items():
            parsed = json.loads(key)
            identity = self._identity(parsed.get('msgctxt'), parsed['msgid'], parsed.get('msgid_plural'))
            group = groups.setdefault(identity, {'order': parsed.get('order', 0), 'forms': {}})
            group['forms'][parsed.get('idx', 0)] = '' if value is None else str(value)

        po = polib.POFile()
        po.header = self._header
        po.metadata = self._build_metadata(options.target_locale)

        for identity, group in sorted(groups.items(), key=lambda item: item[1]['order']):
            msgctxt, msgid, msgid_plural = identity
            meta = self._entry_meta.get(identity, {})
            entry = polib.POEntry(
                msgid=msgid,
                msgctxt=msgctxt,
                comment=meta.get('comment', ''),
                tcomment=meta.get('tcomment', ''),
                occurrences=list(meta.get('occurrences', [])),
                flags=list(meta.get('flags', [])),
            )
            if msgid_plural:
                entry.msgid_plural = msgid_plural
                entry.msgstr_plural = dict(sorted(group['forms'].items()))
            else:
                entry.msgstr = group['forms'].get(0, '')
            po.append(entry)

        return str(po)

    def _build_metadata(self, target_locale: Optional[str]) -> dict[str, str]:
        metadata = dict(self._metadata)
        metadata.pop('Plural-Forms', None)
        metadata.setdefault('Content-Type', 'text/plain; charset=UTF-8')
        if target_locale:
            metadata['Language'] = target_locale
        metadata['PO-Revision-Date'] = datetime.now(timezone.utc).strftime('%Y-%m-%d %H:%M%z')
        metadata['X-Generator'] = GENERATOR
        return metadata

    def get_fallback(self) -> str:
        return 'msgid ""\nmsgstr ""\n'
