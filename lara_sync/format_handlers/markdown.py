#!/usr/bin/env python3
"""
Markdown/MDX format handler.

Prose is split into the text nodes of the Markdown AST; every non-blank
text node becomes one segment ("segment_0", "segment_1", ...). Code,
raw HTML and autolinks are never offered for translation. GitHub flavored
Markdown is enabled, so table cells are segments of their own and the
delimiter row is kept as markup. YAML frontmatter is carried over verbatim.
"""

import re
from typing import Iterator, Optional, Union

import marko
from marko import block, inline
from marko.element import Element
from marko.md_renderer import MarkdownRenderer

from .base import FlatMap, FormatHandler, ParseOptions, SerializeOptions

_FRONTMATTER_RE = re.compile(r'\A---[ \t]*\r?\n.*?\r?\n---[ \t]*(?:\r?\n|\Z)', re.DOTALL)

_EXCLUDED_ELEMENTS = (
    block.FencedCode,
    block.CodeBlock,
    block.HTMLBlock,
    block.LinkRefDef,
    inline.CodeSpan,
    inline.InlineHTML,
    inline.AutoLink,
    inline.Literal,
)


def split_frontmatter(text: str) -> tuple[str, str]:
    """Return (frontmatter, body); frontmatter is '' when absent."""
    match = _FRONTMATTER_RE.match(text)
    if not match:
        return '', text
    return match.group(0), text[match.end():]


def _text_nodes(element: Element) -> Iterator[inline.RawText]:
    """Non-blank text nodes in document order, skipping code and HTML."""
    if isinstance(element, _EXCLUDED_ELEMENTS):
        return
    if isinstance(element, inline.RawText):
        if isinstance(element.children, str) and element.children.strip():
            yield element
        return

    children = getattr(element, 'children', None)
    if isinstance(children, list):
        for child in children:
            yield from _text_nodes(child)


class MarkdownHandler(FormatHandler):
    """
    Handler for .md and .mdx documents.

    Example:
    ```markdown
    # Welcome

    This is **bold** text with `code`.
    ```
    yields {"segment_0": "Welcome", "segment_1": "This is ",
    "segment_2": "bold", "segment_3": " text with "}.

    Output is re-rendered from the AST, so list markers and emphasis
    characters may be normalized.
    """

    @property
    def name(self) -> str:
        return "markdown"

    @property
    def file_extensions(self) -> list[str]:
        return ["md", "mdx"]

    @property
    def skeleton(self) -> str:
        return 'source'

    @staticmethod
    def _markdown() -> marko.Markdown:
        return marko.Markdown(renderer=MarkdownRenderer, extensions=['gfm'])

    def parse(self, content: Union[str, bytes], options: Optional[ParseOptions] = None) -> FlatMap:
        _, body = split_frontmatter(self._to_text(content))
        document = self._markdown().parse(body)
        return {f"segment_{i}": node.children for i, node in enumerate(_text_nodes(document))}

    def serialize(self, data: FlatMap, options: SerializeOptions) -> str:
        """
        Re-render the source document with translated segments.

        Segments missing from data keep the source text.
        """
        frontmatter, body = split_frontmatter(self._to_text(options.original_content or ''))
        markdown = self._markdown()
        document = markdown.parse(body)

        for i, node in enumerate(_text_nodes(document)):
            value = data.get(f"segment_{i}")
            if isinstance(value, str) and value:
                node.children = value

        return frontmatter + markdown.render(document)

    def get_fallback(self) -> str:
        return ""
