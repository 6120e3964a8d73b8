#!/usr/bin/env python3
"""Tests for the Markdown handler."""

from lara_sync.format_handlers import MarkdownHandler, SerializeOptions

DOCUMENT = '''---
title: Guide
---
# Welcome

This is **bold** text with `inline code`.

```python
print("not translated")
```

- First item
- Second item
'''


def test_segments_skip_code():
    flat = MarkdownHandler().parse(DOCUMENT)
    values = list(flat.values())

    assert values[0] == 'Welcome'
    assert 'bold' in values
    assert 'First item' in values
    assert not any('print' in value or 'inline code' in value for value in values)
    assert not any('title: Guide' in value for value in values)
    assert list(flat) == [f"segment_{i}" for i in range(len(flat))]


def test_serialize_replaces_segments_and_keeps_frontmatter():
    handler = MarkdownHandler()
    flat = handler.parse(DOCUMENT)
    translated = {key: value.upper() for key, value in flat.items()}
    output = handler.serialize(translated, SerializeOptions(original_content=DOCUMENT, target_locale='it'))

    assert output.startswith('---\ntitle: Guide\n---\n')
    assert "# WELCOME" in output
    assert "FIRST ITEM" in output
    assert 'print("not translated")' in output
    assert '`inline code`' in output


def test_round_trip_is_structural():
    handler = MarkdownHandler()
    flat = handler.parse(DOCUMENT)
    output = handler.serialize(flat, SerializeOptions(original_content=DOCUMENT))

    assert handler.parse(output) == flat


def test_empty_document():
    handler = MarkdownHandler()
    assert handler.parse(handler.get_fallback()) == {}


TABLE = '''| Name | Desc |
| --- | --- |
| foo | A thing |
'''


def test_table_cells_are_segments():
    flat = MarkdownHandler().parse(TABLE)

    assert list(flat.values()) == ['Name', 'Desc', 'foo', 'A thing']


def test_table_structure_survives_translation():
    handler = MarkdownHandler()
    flat = handler.parse(TABLE)
    translated = {key: value.upper() for key, value in flat.items()}
    output = handler.serialize(translated, SerializeOptions(original_content=TABLE, target_locale='it'))

    assert output.splitlines() == [
        '| NAME | DESC |',
        '| --- | --- |',
        '| FOO | A THING |',
    ]
