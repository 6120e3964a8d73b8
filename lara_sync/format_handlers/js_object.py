#!/usr/bin/env python3
"""
Static helpers for object literals embedded in JS/TS source.

Nothing here evaluates code. The literal's text span is found with a brace
scanner and parsed with a small lark grammar for JS expressions. Only
literal nodes (strings, numbers, booleans, null, arrays, objects, negative
numbers and templates without substitutions) become Python values.

Rewrites are splices: only the source text of values that changed is
replaced, so comments, quoting, calls like `title: t('x')` and spreads
like `...shared` keep their bytes.
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Optional, Union

from lark import Lark, Token, Tree
from lark.exceptions import LarkError

from ..errors import ParseError

SPREAD_KEY_PREFIX = '\x01spread'

_IDENTIFIER_RE = re.compile(r'^[A-Za-z_$][\w$]*$')

# Object literal openers, in order of preference.
_OPENER_PATTERNS = (
    re.compile(r'\b(?:const|let|var)\s+messages\s*(?::[^=;{]+)?=\s*(?=\{)'),
    re.compile(r'\b(?:const|let|var)\s+[A-Za-z_$][\w$]*\s*(?::[^=;{]+)?=\s*(?=\{)'),
    re.compile(r'\bexport\s+default\s+(?=\{)'),
)

OBJECT_GRAMMAR = r'''
object: "{" _members? "}"
_members: member ("," member)* ","?

?member: key ":" value -> pair
       | "..." value -> spread
       | IDENT -> shorthand

?key: IDENT -> ident_key
    | STRING -> string_key
    | NUMBER -> number_key
    | "[" value "]" -> computed_key

?value: sum

?sum: unary
    | sum BINOP unary -> binary
    | sum "-" unary -> binary

?unary: postfix
      | "-" unary -> neg
      | "!" unary -> not_

?postfix: primary
        | postfix "." IDENT -> member_access
        | postfix "[" value "]" -> index_access
        | postfix "(" _arguments? ")" -> call

_arguments: value ("," value)* ","?

?primary: object
        | array
        | STRING -> string
        | TEMPLATE -> template
        | NUMBER -> number
        | "true" -> true
        | "false" -> false
        | "null" -> null
        | IDENT -> identifier
        | "(" value ")" -> paren

array: "[" _elements? "]"
_elements: value ("," value)* ","?

IDENT: /[A-Za-z_$][\w$]*/
STRING: /"(?:[^"\\\n]|\\[\s\S])*"/ | /'(?:[^'\\\n]|\\[\s\S])*'/
TEMPLATE: /`(?:[^`\\]|\\[\s\S])*`/
NUMBER: /0[xX][0-9a-fA-F]+|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?/
BINOP: /\+|\*|%|\?\?|\|\||&&|[<>]=?|[=!]==?/
COMMENT: /\/\/[^\n]*/ | /\/\*[\s\S]*?\*\//

%import common.WS
%ignore WS
%ignore COMMENT
'''

_parser = Lark(OBJECT_GRAMMAR, start='object', parser='lalr', propagate_positions=True, keep_all_tokens=True)

_ESCAPE_RE = re.compile(r'\\(u\{[0-9a-fA-F]+\}|u[0-9a-fA-F]{4}|x[0-9a-fA-F]{2}|\r\n|[\s\S])')
_SIMPLE_ESCAPES = {
    'n': '\n', 't': '\t', 'r': '\r', 'b': '\b', 'f': '\f', 'v': '\v', '0': '\0',
    '\n': '', '\r\n': '', '\r': '', '\u2028': '', '\u2029': '',
}


@dataclass(frozen=True)
class RawExpression:
    """Source text of a non-literal expression, written back verbatim."""
    text: str


@dataclass
class ObjectSpan:
    """Location of an object literal inside a larger text."""
    start: int
    end: int

    def slice(self, text: str) -> str:
        return text[self.start:self.end]


def _skip_string(text: str, i: int, quote: str) -> int:
    """Index just past the string literal opened at text[i]."""
    i += 1
    while i < len(text):
        char = text[i]
        if char == '\\':
            i += 2
            continue
        if char == quote:
            return i + 1
        i += 1
    return i


def _skip_comment(text: str, i: int) -> int:
    """Index just past the comment starting at text[i], or i if none."""
    if text.startswith('//', i):
        end = text.find('\n', i)
        return len(text) if end == -1 else end
    if text.startswith('/*', i):
        end = text.find('*/', i + 2)
        return len(text) if end == -1 else end + 2
    return i


def find_object_span(text: str, start: int) -> Optional[ObjectSpan]:
    """
    Find the balanced {...} block opening at or after start.

    Braces inside strings, template literals and comments are ignored.
    """
    i = text.find('{', start)
    if i == -1:
        return None

    open_at = i
    depth = 0
    while i < len(text):
        char = text[i]
        if char in ('"', "'", '`'):
            i = _skip_string(text, i, char)
            continue
        if char == '/':
            after = _skip_comment(text, i)
            if after != i:
                i = after
                continue
        if char == '{':
            depth += 1
        elif char == '}':
            depth -= 1
            if depth == 0:
                return ObjectSpan(open_at, i + 1)
        i += 1
    return None


def locate_object(text: str) -> Optional[ObjectSpan]:
    """Span of the messages object (or the first object-valued declarator)."""
    for pattern in _OPENER_PATTERNS:
        match = pattern.search(text)
        if match:
            span = find_object_span(text, match.end())
            if span:
                return span
    return None


def parse_expression(source: str) -> Tree:
    """Parse an object literal's text into a lark tree rooted at 'object'."""
    try:
        return _parser.parse(source)
    except LarkError as e:
        raise ParseError(f"Failed to parse object literal: {e}") from e


def _children(tree: Tree) -> list[Tree]:
    """Subtrees only; punctuation tokens are kept for positions, not content."""
    return [child for child in tree.children if isinstance(child, Tree)]


def _node_text(node: Union[Tree, Token], source: str) -> str:
    if isinstance(node, Token):
        return source[node.start_pos:node.end_pos]
    return source[node.meta.start_pos:node.meta.end_pos]


def _unescape(match: re.Match) -> str:
    sequence = match.group(1)
    if sequence.startswith('u{'):
        return chr(int(sequence[2:-1], 16))
    if len(sequence) == 5 and sequence[0] == 'u':
        return chr(int(sequence[1:], 16))
    if len(sequence) == 3 and sequence[0] == 'x':
        return chr(int(sequence[1:], 16))
    return _SIMPLE_ESCAPES.get(sequence, sequence)


def decode_string(raw: str) -> str:
    """Value of a quoted JS string or template token."""
    text = _ESCAPE_RE.sub(_unescape, raw[1:-1])
    # Rejoin \uD83D\uDE00-style surrogate pairs.
    return text.encode('utf-16', 'surrogatepass').decode('utf-16')


def _number(raw: str) -> Any:
    if raw[:2] in ('0x', '0X'):
        return int(raw, 16)
    value = float(raw)
    return int(value) if value.is_integer() else value


def _token(tree: Tree) -> Token:
    return next(child for child in tree.children if isinstance(child, Token))


def property_key(pair: Tree) -> Optional[str]:
    """Static key of a pair/shorthand node; None for computed keys."""
    if pair.data == 'shorthand':
        return str(_token(pair))
    key = pair.children[0]
    if key.data == 'ident_key':
        return str(_token(key))
    if key.data == 'string_key':
        return decode_string(str(_token(key)))
    if key.data == 'number_key':
        return str(_number(str(_token(key))))
    return None


def _pair_value(pair: Tree) -> Tree:
    return _children(pair)[-1]


def to_python(node: Tree, source: Optional[str] = None) -> Any:
    """
    Convert a parse tree into Python values.

    With source, non-literal expressions become RawExpression and spreads
    are kept under SPREAD_KEY_PREFIX keys. Without it they become None and
    spreads are dropped.
    """
    keep_raw = source is not None
    kind = node.data

    if kind == 'object':
        result: dict[str, Any] = {}
        for member in _children(node):
            if member.data == 'spread':
                if keep_raw:
                    result[f"{SPREAD_KEY_PREFIX}{len(result)}"] = RawExpression(_node_text(member, source))
                continue
            key = property_key(member)
            if key is None:
                continue
            if member.data == 'shorthand':
                result[key] = RawExpression(key) if keep_raw else None
            else:
                result[key] = to_python(_pair_value(member), source)
        return result

    if kind == 'array':
        return [to_python(element, source) for element in _children(node)]

    if kind == 'string':
        return decode_string(str(_token(node)))
    if kind == 'template' and '${' not in str(_token(node)):
        return decode_string(str(_token(node)))
    if kind == 'number':
        return _number(str(_token(node)))
    if kind == 'true':
        return True
    if kind == 'false':
        return False
    if kind == 'null':
        return None
    if kind == 'neg':
        operand = _children(node)[0]
        if operand.data == 'number':
            return -_number(str(_token(operand)))

    return RawExpression(_node_text(node, source)) if keep_raw else None


def parse_object(source: str, keep_raw: bool = False) -> dict[str, Any]:
    """Parse object literal text into a nested dict."""
    return to_python(parse_expression(source), source if keep_raw else None)


def _render_key(key: str, quote_keys: bool) -> str:
    if not quote_keys and _IDENTIFIER_RE.match(key):
        return key
    return json.dumps(key, ensure_ascii=False)


def render(value: Any, indent: str = '  ', base: str = '', quote_keys: bool = False) -> str:
    """
    Render a Python value as JS (or, with quote_keys, JSON) source.

    Nested lines are prefixed with base plus one indent per level; the
    closing bracket lines up with base.
    """
    inner = base + indent

    if isinstance(value, dict):
        if not value:
            return '{}'
        lines = [f"{inner}{_render_key(key, quote_keys)}: {render(child, indent, inner, quote_keys)}"
                 for key, child in value.items()]
        return '{\n' + ',\n'.join(lines) + '\n' + base + '}'

    if isinstance(value, list):
        if not value:
            return '[]'
        lines = [f"{inner}{render(item, indent, inner, quote_keys)}" for item in value]
        return '[\n' + ',\n'.join(lines) + '\n' + base + ']'

    return json.dumps(value, ensure_ascii=False)


def _single_quoted(value: str) -> str:
    body = json.dumps(value, ensure_ascii=False)[1:-1]
    return "'" + body.replace('\\"', '"').replace("'", "\\'") + "'"


def line_indent(text: str, offset: int) -> str:
    """Leading whitespace of the line containing offset."""
    line_start = text.rfind('\n', 0, offset) + 1
    match = re.match(r'[ \t]*', text[line_start:])
    return match.group(0) if match else ''


def detect_indent(text: str, span: ObjectSpan, fallback: Union[int, str] = 2) -> str:
    """Indent unit used inside the object at span, relative to its own line."""
    base = line_indent(text, span.start)
    match = re.search(r'\n([ \t]+)\S', span.slice(text))
    if match and match.group(1).startswith(base) and len(match.group(1)) > len(base):
        return match.group(1)[len(base):]
    return fallback if isinstance(fallback, str) else ' ' * fallback


def _comma_after(text: str, i: int) -> Optional[int]:
    """Index of the ',' following position i, past blanks and comments."""
    while i < len(text):
        if text[i].isspace():
            i += 1
            continue
        after = _skip_comment(text, i)
        if after != i:
            i = after
            continue
        return i if text[i] == ',' else None
    return None


def _same(current: Any, value: Any) -> bool:
    if isinstance(current, list) and isinstance(value, list):
        return len(current) == len(value) and all(_same(a, b) for a, b in zip(current, value))
    if isinstance(current, dict) and isinstance(value, dict):
        return current.keys() == value.keys() and all(_same(current[k], value[k]) for k in current)
    return type(current) is type(value) and current == value


Edit = tuple[int, int, str]

_BLANK_REST_RE = re.compile(r'[ \t]*\r?\n')
_SPACES_RE = re.compile(r'[ \t]*')


class _Splicer:
    """
    Collects text edits that turn an object literal into a new value.

    Values that did not change keep their exact source text. Changed
    leaves are re-rendered in place. A key missing from the literal is
    inserted after the key it follows in the new value; a key the new
    value lacks is cut out with its comma. A None in the new value keeps
    a non-literal expression as it is.
    """

    def __init__(self, text: str, span: ObjectSpan, indent: str, quote_keys: bool):
        self.text = text
        self.offset = span.start
        self.source = text[span.start:]
        self.indent = indent
        self.quote_keys = quote_keys
        self.tree = parse_expression(span.slice(text))

    def bounds(self, node: Union[Tree, Token]) -> tuple[int, int]:
        meta = node if isinstance(node, Token) else node.meta
        return self.offset + meta.start_pos, self.offset + meta.end_pos

    def apply(self, edits: list[Edit]) -> str:
        text = self.text
        for start, end, replacement in sorted(edits, key=lambda edit: (edit[0], edit[1]), reverse=True):
            text = text[:start] + replacement + text[end:]
        return text

    def entry(self, key: str, value: Any, base: str) -> str:
        return f"{_render_key(key, self.quote_keys)}: {render(value, self.indent, base, self.quote_keys)}"

    def _removal(self, node: Tree) -> Edit:
        """Edit deleting one member together with its comma and, if alone, its line."""
        text = self.text
        start, end = self.bounds(node)
        comma = _comma_after(text, end)
        if comma is not None:
            end = comma + 1

        line_start = text.rfind('\n', 0, start) + 1
        alone = not text[line_start:start].strip()
        rest = _BLANK_REST_RE.match(text, end)
        if alone and rest:
            return line_start, rest.end(), ''
        if alone:
            return start, _SPACES_RE.match(text, end).end(), ''
        while text[start - 1] in ' \t':
            start -= 1
        return start, end, ''

    def value_edits(self, node: Tree, value: Any, base: str) -> list[Edit]:
        if isinstance(value, dict) and node.data == 'object':
            return self.object_edits(node, value)

        if isinstance(value, list) and node.data == 'array':
            elements = _children(node)
            if len(elements) == len(value):
                edits = []
                for element, item in zip(elements, value):
                    element_base = line_indent(self.text, self.bounds(element)[0])
                    edits.extend(self.value_edits(element, item, element_base))
                return edits

        current = to_python(node, self.source)
        if value is None and isinstance(current, RawExpression):
            return []
        if _same(current, value):
            return []

        start, end = self.bounds(node)
        if (isinstance(value, str) and not self.quote_keys
                and node.data == 'string' and str(_token(node)).startswith("'")):
            return [(start, end, _single_quoted(value))]
        return [(start, end, render(value, self.indent, base, self.quote_keys))]

    def object_edits(self, node: Tree, value: dict[str, Any]) -> list[Edit]:
        start, end = self.bounds(node)
        members = _children(node)
        kept, removed = [], []
        anchors: dict[str, Tree] = {}
        for member in members:
            key = property_key(member) if member.data in ('pair', 'shorthand') else None
            if key is not None and key not in value:
                removed.append(member)
                continue
            kept.append(member)
            if key is not None:
                anchors[key] = member

        if not kept:
            return [(start, end, render(value, self.indent, line_indent(self.text, start), self.quote_keys))]

        edits: list[Edit] = []
        for key, member in anchors.items():
            member_base = line_indent(self.text, self.bounds(member)[0])
            if member.data == 'shorthand':
                if value[key] is not None:
                    edits.append((*self.bounds(member), self.entry(key, value[key], member_base)))
                continue
            edits.extend(self.value_edits(_pair_value(member), value[key], member_base))

        edits.extend(self._removal(member) for member in removed)
        if removed and removed[-1] is members[-1] and _comma_after(self.text, self.bounds(members[-1])[1]) is None:
            # the last kept member's comma would become a dangling separator
            comma = _comma_after(self.text, self.bounds(kept[-1])[1])
            if comma is not None:
                edits.append((comma, comma + 1, ''))

        edits.extend(self._insertions(node, value, anchors, kept))
        return edits

    def _insertions(self, node: Tree, value: dict[str, Any], anchors: dict[str, Tree], kept: list[Tree]) -> list[Edit]:
        groups: dict[Optional[str], list[str]] = {}
        previous = None
        for key in value:
            if key in anchors:
                previous = key
            else:
                groups.setdefault(previous, []).append(key)
        if not groups:
            return []

        start, end = self.bounds(node)
        multiline = '\n' in self.text[start:end]
        member_base = line_indent(self.text, self.bounds(kept[0])[0])

        edits = []
        for anchor, keys in groups.items():
            entries = [self.entry(key, value[key], member_base) for key in keys]
            if anchor is None:
                separator = f"\n{member_base}" if multiline else ' '
                edits.append((start + 1, start + 1, ''.join(f"{separator}{entry}," for entry in entries)))
            else:
                at = self.bounds(anchors[anchor])[1]
                separator = f",\n{member_base}" if multiline else ', '
                edits.append((at, at, ''.join(f"{separator}{entry}" for entry in entries)))
        return edits


def patch_object(text: str, span: ObjectSpan, value: dict[str, Any], indent: str, quote_keys: bool = False) -> str:
    """
    Rewrite the object literal at span so that it holds value.

    Only the text of values that changed is replaced; comments, quoting,
    number spelling and trailing commas of untouched entries are kept.
    """
    splicer = _Splicer(text, span, indent, quote_keys)
    return splicer.apply(splicer.object_edits(splicer.tree, value))


def set_property(text: str, span: ObjectSpan, key: str, value: Any, indent: str, quote_keys: bool = False) -> str:
    """
    Replace the value of one top-level property, or insert the property.

    Text outside that property is kept byte for byte, and inside it only
    the values that changed are rewritten (see patch_object()).
    """
    splicer = _Splicer(text, span, indent, quote_keys)
    members = _children(splicer.tree)
    pairs = [member for member in members if member.data == 'pair' and property_key(member) == key]

    if pairs:
        member = pairs[-1]
        base = line_indent(text, splicer.bounds(member)[0])
        return splicer.apply(splicer.value_edits(_pair_value(member), value, base))

    if members:
        last_end = splicer.bounds(members[-1])[1]
        prop_indent = line_indent(text, splicer.bounds(members[-1])[0])
        entry = splicer.entry(key, value, prop_indent)
        comma = _comma_after(text, last_end)
        if comma is not None:
            # trailing comma already present
            return f"{text[:comma + 1]}\n{prop_indent}{entry}{text[comma + 1:]}"
        return f"{text[:last_end]},\n{prop_indent}{entry}{text[last_end:]}"

    base = line_indent(text, span.start)
    return text[:span.start] + render({key: value}, indent, base, quote_keys) + text[span.end:]
