#!/usr/bin/env python3
"""Tests for the TS/JS message object handler and its lark-based parser."""

import pytest

from lara_sync.errors import ParseError
from lara_sync.format_handlers import ParseOptions, SerializeOptions, TsObjectHandler
from lara_sync.format_handlers.flat import DELIMITER
from lara_sync.format_handlers.js_object import (
    RawExpression,
    decode_string,
    find_object_span,
    locate_object,
    parse_object,
)

SINGLE = '''import shared from './shared';

const messages = {
  welcome: "Welcome",
  'quoted-key': 'It\\'s here',
  user: {
    greeting: `Hello`,
    count: 3,
  },
  title: t('title'),
  ...shared,
};

export default messages;
'''

MULTI = '''export default {
  en: {
    hello: "Hello",
    bye: "Bye",
  },
  it: {
    hello: "Ciao",
  },
};
'''


def test_locate_messages_object():
    span = locate_object(SINGLE)
    assert span.slice(SINGLE).startswith('{\n  welcome')
    assert span.slice(SINGLE).endswith('...shared,\n}')


def test_find_object_span_ignores_braces_in_strings_and_comments():
    text = 'const x = { a: "}", /* } */ b: `{`, // }\n c: 1 };'
    span = find_object_span(text, 0)
    assert span.slice(text).endswith('c: 1 }')


def test_decode_string_escapes():
    assert decode_string(r'"a\nb"') == 'a\nb'
    assert decode_string(r"'è'") == 'è'
    assert decode_string(r'"\x41\u{1F600}"') == 'A\U0001F600'


def test_parse_object_literals_only():
    data = parse_object('{ a: "x", b: -2, c: [true, null], d: fn(), e: `t ${x}` }')
    assert data == {'a': 'x', 'b': -2, 'c': [True, None], 'd': None, 'e': None}


def test_parse_object_keep_raw():
    data = parse_object('{ a: fn(1), ...rest }', keep_raw=True)
    assert data['a'] == RawExpression('fn(1)')
    assert RawExpression('...rest') in data.values()


def test_parse_flattens_messages():
    flat = TsObjectHandler().parse(SINGLE)

    assert flat['welcome'] == 'Welcome'
    assert flat['quoted-key'] == "It's here"
    assert flat[f'user{DELIMITER}greeting'] == 'Hello'
    assert flat[f'user{DELIMITER}count'] == 3
    assert flat['title'] is None


def test_parse_selects_locale():
    flat = TsObjectHandler().parse(MULTI, ParseOptions(locale='en'))
    assert flat == {'hello': 'Hello', 'bye': 'Bye'}


def test_missing_object_yields_empty_map(caplog):
    assert TsObjectHandler().parse('export const answer = 42;\n') == {}
    assert "No messages object found" in caplog.text


def test_invalid_object_raises():
    with pytest.raises(ParseError):
        TsObjectHandler().parse('const messages = { a: "x" b: "y" };')


def test_serialize_keeps_expressions_and_surrounding_code():
    handler = TsObjectHandler()
    flat = handler.parse(SINGLE)
    flat['welcome'] = 'Benvenuto'
    output = handler.serialize(flat, SerializeOptions(original_content=SINGLE, target_locale='it'))

    assert output == SINGLE.replace('"Welcome"', '"Benvenuto"')
    assert handler.parse(output)['welcome'] == 'Benvenuto'


def test_serialize_into_fallback():
    handler = TsObjectHandler()
    output = handler.serialize({'a': 'Ciao'}, SerializeOptions(original_content=handler.get_fallback()))

    assert output == 'const messages = {\n  a: "Ciao"\n};\n\nexport default messages;\n'


def test_locale_scoped_replaces_only_that_locale():
    handler = TsObjectHandler()
    output = handler.serialize(
        {'hello': 'Ciao!', 'bye': 'Addio'},
        SerializeOptions(original_content=MULTI, target_locale='it', locale_scoped=True),
    )

    assert output == MULTI.replace('hello: "Ciao",', 'hello: "Ciao!",\n    bye: "Addio",')
    assert handler.parse(output, ParseOptions(locale='it')) == {'hello': 'Ciao!', 'bye': 'Addio'}


def test_locale_scoped_inserts_missing_locale():
    handler = TsObjectHandler()
    output = handler.serialize(
        {'hello': 'Bonjour'},
        SerializeOptions(original_content=MULTI, target_locale='fr', locale_scoped=True),
    )

    assert handler.parse(output, ParseOptions(locale='fr')) == {'hello': 'Bonjour'}
    assert handler.parse(output, ParseOptions(locale='en')) == {'hello': 'Hello', 'bye': 'Bye'}
    assert handler.parse(output, ParseOptions(locale='it')) == {'hello': 'Ciao'}


def test_serialize_requires_original_content():
    with pytest.raises(ValueError):
        TsObjectHandler().serialize({}, SerializeOptions())


COMMENTED = "const messages = {\n  // header\n  hello: 'Hello',\n  n: 1.0,\n};\n"


def test_round_trip_is_exact():
    handler = TsObjectHandler()
    for content in (SINGLE, MULTI, COMMENTED):
        output = handler.serialize(handler.parse(content), SerializeOptions(original_content=content))
        assert output == content


def test_changed_value_keeps_quote_style_and_comments():
    handler = TsObjectHandler()
    flat = handler.parse(COMMENTED)
    flat['hello'] = "Ciao, l'amico"
    output = handler.serialize(flat, SerializeOptions(original_content=COMMENTED))

    assert output == "const messages = {\n  // header\n  hello: 'Ciao, l\\'amico',\n  n: 1.0,\n};\n"
    assert handler.parse(output)['hello'] == "Ciao, l'amico"


def test_removed_and_added_keys_are_spliced():
    handler = TsObjectHandler()
    content = "const messages = {\n  a: 'A',\n  b: 'B'\n};\n"
    output = handler.serialize({'a': 'A', 'c': 'C'}, SerializeOptions(original_content=content))

    assert output == "const messages = {\n  a: 'A',\n  c: \"C\"\n};\n"


def test_removed_nested_key_keeps_siblings():
    handler = TsObjectHandler()
    content = "const messages = {\n  user: {\n    name: 'Name', // shown in the header\n    age: 'Age',\n  },\n};\n"
    output = handler.serialize({f'user{DELIMITER}name': 'Name'}, SerializeOptions(original_content=content))

    assert output == "const messages = {\n  user: {\n    name: 'Name', // shown in the header\n  },\n};\n"
