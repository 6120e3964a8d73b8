#!/usr/bin/env python3
"""Tests for the Android strings.xml handler."""

import pytest

from lara_sync.format_handlers import AndroidXmlHandler, SerializeOptions

STRINGS_XML = '''<?xml version="1.0" encoding="utf-8"?>
<resources xmlns:xliff="urn:oasis:names:tc:xliff:document:1.2">
    <!-- App name -->
    <string name="app_name" translatable="false">My App</string>
    <!-- Greeting on the home screen -->
    <string name="welcome">Welcome, <xliff:g id="name">%1$s</xliff:g>!</string>
    <string name="save">Save</string>
    <plurals name="items">
        <item quantity="one">%d item</item>
        <item quantity="other">%d items</item>
    </plurals>
    <string-array name="days">
        <item>Monday</item>
        <item>Tuesday</item>
    </string-array>
</resources>
'''


def test_parse_strings_plurals_and_arrays():
    flat = AndroidXmlHandler().parse(STRINGS_XML)

    assert list(flat) == ['welcome', 'save', 'items/one', 'items/other', 'days/0', 'days/1']
    assert flat['save'] == 'Save'
    assert flat['items/other'] == '%d items'
    assert flat['days/1'] == 'Tuesday'


def test_non_translatable_strings_are_skipped():
    assert 'app_name' not in AndroidXmlHandler().parse(STRINGS_XML)


def test_inline_markup_is_kept_as_inner_xml():
    welcome = AndroidXmlHandler().parse(STRINGS_XML)['welcome']

    assert welcome.startswith('Welcome, <xliff:g')
    assert '%1$s</xliff:g>!' in welcome
    assert 'xmlns' not in welcome


def test_round_trip_is_exact():
    handler = AndroidXmlHandler()
    flat = handler.parse(STRINGS_XML)
    output = handler.serialize(flat, SerializeOptions(original_content=STRINGS_XML))

    assert output == STRINGS_XML


def test_serialize_translates_values():
    handler = AndroidXmlHandler()
    flat = handler.parse(STRINGS_XML)
    flat['save'] = 'Salva'
    flat['items/one'] = '%d elemento'
    output = handler.serialize(flat, SerializeOptions(original_content=STRINGS_XML))

    assert '<string name="save">Salva</string>' in output
    assert '<item quantity="one">%d elemento</item>' in output
    assert '<string name="app_name" translatable="false">My App</string>' in output


def test_removed_key_drops_resource_and_its_comment():
    handler = AndroidXmlHandler()
    flat = handler.parse(STRINGS_XML)
    del flat['welcome']
    output = handler.serialize(flat, SerializeOptions(original_content=STRINGS_XML))

    assert 'name="welcome"' not in output
    assert 'Greeting on the home screen' not in output
    assert '<!-- App name -->' in output
    assert handler.parse(output) == flat


def test_removed_plural_item():
    handler = AndroidXmlHandler()
    flat = handler.parse(STRINGS_XML)
    del flat['items/one']
    output = handler.serialize(flat, SerializeOptions(original_content=STRINGS_XML))

    assert 'quantity="one"' not in output
    assert '<item quantity="other">%d items</item>' in output


def test_markup_value_is_written_as_elements():
    handler = AndroidXmlHandler()
    flat = handler.parse(STRINGS_XML)
    flat['welcome'] = 'Benvenuto, <xliff:g id="name">%1$s</xliff:g>!'
    output = handler.serialize(flat, SerializeOptions(original_content=STRINGS_XML))

    assert '<string name="welcome">Benvenuto, <xliff:g id="name">%1$s</xliff:g>!</string>' in output


def test_malformed_xml_yields_empty_map(caplog):
    assert AndroidXmlHandler().parse('<resources><string name="a">x</resources>') == {}
    assert "Failed to parse Android XML" in caplog.text


def test_wrong_root_yields_empty_map():
    assert AndroidXmlHandler().parse('<?xml version="1.0"?>\n<manifest/>') == {}


def test_serialize_requires_original_content():
    with pytest.raises(ValueError):
        AndroidXmlHandler().serialize({'a': 'b'}, SerializeOptions())


def test_fallback_parses_empty():
    handler = AndroidXmlHandler()
    assert handler.parse(handler.get_fallback()) == {}


CDATA_XML = '''<?xml version="1.0" encoding="utf-8"?>
<resources>
    <string name="rich"><![CDATA[<b>Hi</b> & bye]]></string>
    <string name="plain">Plain</string>
</resources>
'''


def test_cdata_value_is_read_raw_and_written_back_as_cdata():
    handler = AndroidXmlHandler()
    assert handler.parse(CDATA_XML) == {'rich': '<b>Hi</b> & bye', 'plain': 'Plain'}

    output = handler.serialize(
        {'rich': '<b>Ciao</b> & addio', 'plain': 'Semplice'},
        SerializeOptions(original_content=CDATA_XML, target_locale='it'),
    )

    assert '    <string name="rich"><![CDATA[<b>Ciao</b> & addio]]></string>\n' in output
    assert '<string name="plain">Semplice</string>' in output
    assert handler.parse(output)['rich'] == '<b>Ciao</b> & addio'


def test_cdata_round_trip_is_exact():
    handler = AndroidXmlHandler()
    output = handler.serialize(handler.parse(CDATA_XML), SerializeOptions(original_content=CDATA_XML))

    assert output == CDATA_XML
